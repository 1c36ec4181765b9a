"""
Per-page-view navigation state owned by the caller of the resolver.

The pipeline itself is stateless. Whatever drives it (a request handler, a
prefetcher, a test) holds a NavigationSession that tracks which resolution is
current and whether a redirect has already been dispatched.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from typing import Optional

from eventroutes.resolver import Redirect, ResolutionOutcome

logger = logging.getLogger(__name__)


class NavigationSession:
    """
    Last-request-wins guard around a ResolutionPipeline.

    begin() starts a new navigation: it issues a fresh token, cancels the
    resolution still in flight and re-arms the redirect latch.
    """

    def __init__(self, pipeline):
        self.pipeline = pipeline
        self._tokens = itertools.count(1)
        self._current = 0
        self._task: Optional[asyncio.Task] = None
        self.redirect_dispatched = False

    @property
    def current_token(self) -> int:
        return self._current

    def is_current(self, token: int) -> bool:
        return token == self._current

    def begin(self) -> int:
        """Start a new navigation and return its token."""
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None
        self._current = next(self._tokens)
        self.redirect_dispatched = False
        return self._current

    def reset(self):
        """Drop all navigation state, e.g. when the page view ends."""
        self.begin()

    async def navigate(self, raw_slug, assumed_class, token: Optional[int] = None) -> Optional[ResolutionOutcome]:
        """
        Resolve a slug for the navigation identified by token.

        Args:
            raw_slug: Slug from the URL
            assumed_class: Class implied by the route
            token: Token from begin(); a new navigation is started when omitted

        Returns:
            ResolutionOutcome, or None when the navigation was superseded or
            a redirect was already dispatched for this page view
        """
        if token is None:
            token = self.begin()
        if not self.is_current(token):
            logger.debug(f"Navigation {token} superseded before it started")
            return None

        self._task = asyncio.ensure_future(self.pipeline.resolve(raw_slug, assumed_class))
        try:
            outcome = await self._task
        except asyncio.CancelledError:
            if self.is_current(token):
                raise
            logger.debug(f"Navigation {token} cancelled by a newer navigation")
            return None

        if not self.is_current(token):
            logger.debug(f"Discarding late outcome for navigation {token}: {outcome}")
            return None

        if isinstance(outcome, Redirect):
            if self.redirect_dispatched:
                logger.debug(f"Redirect already dispatched, dropping {outcome.target_path}")
                return None
            self.redirect_dispatched = True
        return outcome
