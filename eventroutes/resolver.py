"""
Slug resolution pipeline.

Given the slug from a URL and the class the route suggests, find out whether
the page should render, redirect to the canonical URL, or 404. The lookup
chain is an explicit state machine:

    START -> DIRECT_LOOKUP -> ALIAS_LOOKUP -> TARGET_LOOKUP

Every path through it ends in exactly one ResolutionOutcome. Data store
failures and timeouts get one retry and then degrade to NotFound.
"""

from __future__ import annotations

import asyncio
import enum
import logging
import re
from dataclasses import dataclass, field
from typing import Optional

from eventroutes.classifier import ResourceClass, RouteClassifier, canonical_path
from eventroutes.data_store import AliasRecord, CanonicalTarget, CanonicalView, DataStore, Row
from eventroutes.errors import AmbiguousClassError, DataStoreLookupError, PlaceholderTargetError
from eventroutes.slug_cleaner import CleanResult, SlugCleaner

logger = logging.getLogger(__name__)

PLACEHOLDER_MARKERS = frozenset({"tbd", "tba", "tbc", "por-confirmar", "placeholder"})
PLACEHOLDER_DATE_RE = re.compile(r"(^|-)9999(-\d{2}){0,2}$")

# A lookup is retried at most once.
MAX_RETRIES = 1


def is_placeholder_target(value: Optional[str]) -> bool:
    """True for sentinel 'not yet scheduled' targets (TBD markers, 9999 dates)."""
    if value is None:
        return False
    v = str(value).strip().lower()
    return not v or v in PLACEHOLDER_MARKERS or bool(PLACEHOLDER_DATE_RE.search(v))


class ResolutionOutcome:
    """Terminal result of a resolution."""


@dataclass(frozen=True)
class Found(ResolutionOutcome):
    row: Row
    resource_class: ResourceClass


@dataclass(frozen=True)
class Redirect(ResolutionOutcome):
    target_path: str
    # Row behind a class-mismatch redirect, when the event itself was found.
    row: Optional[Row] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class NotFound(ResolutionOutcome):
    pass


class ResolutionState(enum.Enum):
    START = "start"
    DIRECT_LOOKUP = "direct_lookup"
    ALIAS_LOOKUP = "alias_lookup"
    TARGET_LOOKUP = "target_lookup"


@dataclass
class _Request:
    raw_slug: str
    assumed_class: ResourceClass
    slug: Optional[CleanResult] = None
    alias: Optional[AliasRecord] = None


class ResolutionPipeline:
    """Resolves a URL slug against the data store."""

    def __init__(self, store: DataStore, cleaner: Optional[SlugCleaner] = None,
                 classifier: Optional[RouteClassifier] = None,
                 timeout: Optional[float] = None, retries: Optional[int] = None):
        from eventroutes.config import Config

        self.store = store
        self.cleaner = cleaner or SlugCleaner()
        self.classifier = classifier or RouteClassifier()
        self.timeout = Config.LOOKUP_TIMEOUT if timeout is None else timeout
        self.retries = Config.LOOKUP_RETRIES if retries is None else retries
        self._handlers = {
            ResolutionState.START: self._start,
            ResolutionState.DIRECT_LOOKUP: self._direct_lookup,
            ResolutionState.ALIAS_LOOKUP: self._alias_lookup,
            ResolutionState.TARGET_LOOKUP: self._target_lookup,
        }

    @classmethod
    def from_config(cls, store, config):
        """Build a pipeline from a Flask config mapping."""
        return cls(
            store,
            cleaner=SlugCleaner.from_config(config),
            classifier=RouteClassifier.from_config(config),
            timeout=config.get('LOOKUP_TIMEOUT'),
            retries=config.get('LOOKUP_RETRIES'),
        )

    async def _lookup(self, name, call, *args):
        """Run one data store call with a timeout and at most one retry."""
        last_error = None
        for attempt in range(1 + min(max(self.retries, 0), MAX_RETRIES)):
            try:
                return await asyncio.wait_for(call(*args), timeout=self.timeout)
            except asyncio.TimeoutError as e:
                last_error = e
                logger.warning(f"{name}{args} timed out after {self.timeout}s (attempt {attempt + 1})")
            except DataStoreLookupError as e:
                last_error = e
                logger.warning(f"{name}{args} failed (attempt {attempt + 1}): {e}")
            except Exception as e:
                last_error = e
                logger.warning(f"{name}{args} raised {type(e).__name__} (attempt {attempt + 1}): {e}")
        raise DataStoreLookupError(name, f"gave up after {attempt + 1} attempts") from last_error

    async def resolve(self, raw_slug: str, assumed_class: ResourceClass) -> ResolutionOutcome:
        """
        Resolve a raw URL slug.

        Args:
            raw_slug: Slug exactly as it appeared in the URL
            assumed_class: Class implied by the route (or the keyword heuristic)

        Returns:
            ResolutionOutcome: Found, Redirect or NotFound
        """
        request = _Request(raw_slug=raw_slug or "", assumed_class=ResourceClass(assumed_class))
        state = ResolutionState.START
        try:
            while True:
                step = await self._handlers[state](request)
                if isinstance(step, ResolutionOutcome):
                    logger.info(f"Resolved {raw_slug!r} ({request.assumed_class.value}) in {state.value}: {step}")
                    return step
                state = step
        except DataStoreLookupError as e:
            logger.error(f"Resolution of {raw_slug!r} degraded to not found in {state.value}: {e}")
            return NotFound()

    async def _start(self, request):
        if not request.raw_slug.strip():
            return NotFound()
        request.slug = self.cleaner.clean(request.raw_slug)
        if request.slug.changed:
            logger.debug(f"Cleaned slug {request.raw_slug!r} -> {request.slug.cleaned!r}")
        return ResolutionState.DIRECT_LOOKUP

    def _views(self, assumed_class):
        first = CanonicalView.for_class(assumed_class)
        second = CanonicalView.FESTIVAL if first == CanonicalView.CONCERT else CanonicalView.CONCERT
        return first, second

    async def _direct_lookup(self, request):
        # The cleaned slug wins over everything else; the raw slug is only
        # tried when cleaning changed it.
        candidates = [request.slug.cleaned]
        if request.slug.changed:
            candidates.append(request.raw_slug)

        for slug in candidates:
            for view in self._views(request.assumed_class):
                row = await self._lookup('lookup_by_slug', self.store.lookup_by_slug, view, slug)
                if row is None:
                    continue
                actual = self.classifier.classify(row)
                if actual != request.assumed_class:
                    logger.info(f"{AmbiguousClassError(row.slug, request.assumed_class, actual)}, redirecting")
                    return Redirect(canonical_path(row.slug, actual), row=row)
                return Found(row=row, resource_class=actual)
        return ResolutionState.ALIAS_LOOKUP

    async def _alias_lookup(self, request):
        alias = await self._lookup('lookup_alias', self.store.lookup_alias, request.raw_slug)
        if alias is None:
            return NotFound()

        try:
            if alias.target_id is not None:
                if is_placeholder_target(alias.target_id):
                    raise PlaceholderTargetError(alias.old_slug, alias.target_id)
            elif alias.new_slug is None or is_placeholder_target(alias.new_slug):
                raise PlaceholderTargetError(alias.old_slug, alias.new_slug)
        except PlaceholderTargetError as e:
            logger.info(str(e))
            return NotFound()

        request.alias = alias
        return ResolutionState.TARGET_LOOKUP

    async def _target_lookup(self, request):
        alias = request.alias
        if alias.target_id is not None:
            # Ids are permanent, stored new_slug values can be stale.
            target = await self._lookup(
                'lookup_canonical_slug_by_id', self.store.lookup_canonical_slug_by_id, alias.target_id,
            )
        else:
            row = await self._lookup('lookup_by_slug', self.store.lookup_by_slug, CanonicalView.UNIFIED, alias.new_slug)
            target = CanonicalTarget(slug=row.slug, resource_class=row.resource_class) if row else None

        if target is None:
            return NotFound()
        if is_placeholder_target(target.slug):
            logger.info(str(PlaceholderTargetError(alias.old_slug, target.slug)))
            return NotFound()
        if target.slug == request.raw_slug:
            logger.warning(f"Alias {alias.old_slug!r} resolves to itself, ignoring")
            return NotFound()
        return Redirect(canonical_path(target.slug, self.classifier.classify(target)))
