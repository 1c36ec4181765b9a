"""
Concert vs festival classification and canonical path building.

Before the data store has answered, a slug is classified with a keyword
heuristic. Once a record is available its type field is the only source of
truth.
"""

from __future__ import annotations

import enum
import logging
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from eventroutes.slug_cleaner import normalize_slug

logger = logging.getLogger(__name__)


class ResourceClass(str, enum.Enum):
    CONCERT = "concert"
    FESTIVAL = "festival"

    @classmethod
    def from_field(cls, value) -> "ResourceClass":
        """Map a data store type field ('festival', 'concierto', None...) to a class."""
        if isinstance(value, ResourceClass):
            return value
        if value and str(value).strip().lower() in ("festival", "festivales"):
            return cls.FESTIVAL
        return cls.CONCERT


# Canonical (plural) route segment per class.
CANONICAL_SEGMENTS: Dict[ResourceClass, str] = {
    ResourceClass.CONCERT: "conciertos",
    ResourceClass.FESTIVAL: "festivales",
}

# Every ES route segment that addresses an event, including legacy singulars.
SEGMENT_CLASSES: Dict[str, ResourceClass] = {
    "conciertos": ResourceClass.CONCERT,
    "concierto": ResourceClass.CONCERT,
    "festivales": ResourceClass.FESTIVAL,
    "festival": ResourceClass.FESTIVAL,
}

TYPE_FIELDS = ("resource_class", "event_type")


def canonical_path(slug: str, resource_class: ResourceClass) -> str:
    """/conciertos/<slug> or /festivales/<slug>."""
    return f"/{CANONICAL_SEGMENTS[ResourceClass(resource_class)]}/{slug}"


def class_for_segment(segment: str) -> Optional[ResourceClass]:
    """Class addressed by an ES route segment, None for non-event segments."""
    return SEGMENT_CLASSES.get((segment or "").lower())


class RouteClassifier:
    """Keyword heuristic plus authoritative override."""

    def __init__(self, keywords: Optional[Iterable[str]] = None):
        from eventroutes.config import Config

        words = Config.FESTIVAL_KEYWORDS if keywords is None else keywords
        self.keywords: List[Tuple[str, ...]] = sorted(
            {tuple(t for t in normalize_slug(w).split("-") if t) for w in words} - {()},
            key=lambda kw: (-len(kw), kw),
        )

    @classmethod
    def from_config(cls, config):
        return cls(keywords=config.get('FESTIVAL_KEYWORDS'))

    def looks_like_festival(self, slug: str) -> bool:
        """True when any keyword appears as a run of whole tokens in the slug."""
        tokens = normalize_slug(slug).split("-")
        for keyword in self.keywords:
            n = len(keyword)
            for i in range(len(tokens) - n + 1):
                if tuple(tokens[i:i + n]) == keyword:
                    return True
        return False

    def classify(self, slug_or_record) -> ResourceClass:
        """
        Classify a slug (heuristic) or a lookup record (authoritative).

        Args:
            slug_or_record: A slug string, or a Row/CanonicalTarget/mapping
                carrying a 'resource_class' or 'event_type' field

        Returns:
            ResourceClass: FESTIVAL or CONCERT
        """
        if isinstance(slug_or_record, str):
            return ResourceClass.FESTIVAL if self.looks_like_festival(slug_or_record) else ResourceClass.CONCERT

        authoritative = getattr(slug_or_record, "resource_class", None)
        if authoritative is None and isinstance(slug_or_record, Mapping):
            for field in TYPE_FIELDS:
                if slug_or_record.get(field) is not None:
                    authoritative = slug_or_record[field]
                    break
        if authoritative is None:
            raise TypeError(f"Cannot classify {slug_or_record!r}: no type field")
        return ResourceClass.from_field(authoritative)


def classify(slug_or_record) -> ResourceClass:
    """Classify with the default keyword list."""
    return RouteClassifier().classify(slug_or_record)
