"""
Full path resolution: locale handling around the slug pipeline.

    /en/tickets/Coldplay-Madrid-2
      -> locale en, canonical /conciertos/Coldplay-Madrid-2
      -> pipeline finds coldplay-madrid (concert)
      -> Redirect('/en/tickets/coldplay-madrid')

Redirect targets are always re-localized for the caller. A found event whose
canonical path differs from the requested one (uppercase, noise, legacy
singular prefix, /producto/) is answered with a redirect to that path.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from eventroutes.classifier import CANONICAL_SEGMENTS, ResourceClass, canonical_path, class_for_segment
from eventroutes.locale_router import Locale, canonicalize, detect_locale, localize
from eventroutes.navigation import NavigationSession
from eventroutes.resolver import Found, NotFound, Redirect, ResolutionOutcome

logger = logging.getLogger(__name__)

# Legacy segment that addressed events of either class.
LEGACY_UNIFIED_SEGMENTS = ("producto",)


@dataclass(frozen=True)
class EventRoute:
    """An event path split into the parts the resolver needs."""

    locale: Locale
    canonical_path: str
    segment: str
    slug: str
    assumed_class: ResourceClass


def parse_event_path(path: str, classifier) -> Optional[EventRoute]:
    """
    Split an event path into locale, route segment and slug.

    Args:
        path: Request path in any locale
        classifier: RouteClassifier used to guess the class from the slug

    Returns:
        EventRoute, or None when the path does not address an event
    """
    locale = detect_locale(path)
    canonical = canonicalize(path)
    parts = [p for p in canonical.split("/") if p]
    if len(parts) != 2:
        return None

    segment, slug = parts
    route_class = class_for_segment(segment)
    if route_class is None and segment.lower() not in LEGACY_UNIFIED_SEGMENTS:
        return None

    if route_class is not None and CANONICAL_SEGMENTS[route_class] == segment.lower():
        # Canonical routes keep their class, so a mismatch always redirects away.
        assumed = route_class
    elif route_class == ResourceClass.FESTIVAL:
        assumed = route_class
    else:
        # Festival keywords override legacy concert and product routes.
        assumed = classifier.classify(slug)
    return EventRoute(locale=locale, canonical_path=canonical, segment=segment, slug=slug, assumed_class=assumed)


async def resolve_path(path: str, pipeline, session: Optional[NavigationSession] = None) -> Optional[ResolutionOutcome]:
    """
    Resolve a request path to a terminal outcome for the caller's locale.

    Args:
        path: Request path, e.g. '/en/tickets/coldplay-madrid'
        pipeline: ResolutionPipeline
        session: NavigationSession owning this page view (a fresh one when omitted)

    Returns:
        Found, Redirect (target localized) or NotFound; None when the
        session superseded this navigation
    """
    route = parse_event_path(path, pipeline.classifier)
    if route is None:
        logger.info(f"Path {path} does not address an event")
        return NotFound()

    session = session or NavigationSession(pipeline)
    outcome = await session.navigate(route.slug, route.assumed_class)
    if outcome is None:
        return None

    if isinstance(outcome, Found):
        target = canonical_path(outcome.row.slug, outcome.resource_class)
        if target != route.canonical_path:
            logger.info(f"Canonicalizing {path} -> {target} ({route.locale.value})")
            return Redirect(localize(target, route.locale))
        return outcome

    if isinstance(outcome, Redirect):
        if outcome.target_path == route.canonical_path:
            # Never answer a URL with a redirect to itself.
            if outcome.row is not None:
                logger.warning(f"Redirect for {path} points back at itself, rendering instead")
                return Found(row=outcome.row, resource_class=pipeline.classifier.classify(outcome.row))
            logger.warning(f"Redirect for {path} points back at itself, answering not found")
            return NotFound()
        return Redirect(localize(outcome.target_path, route.locale))

    return outcome
