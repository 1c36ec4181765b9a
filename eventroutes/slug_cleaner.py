"""
Slug cleaning for SEO-friendly event URLs.

Turns whatever arrived in the URL into the slug the data store most likely
knows the event by. Stages run in a fixed order:

1. case/diacritic normalization   Bad-Bunny-Año  -> bad-bunny-ano
2. noise-word removal             rosalia-tickets-barcelona -> rosalia-barcelona
3. numeric suffix removal         coldplay-madrid-2 -> coldplay-madrid (never -2026)
4. stale date suffix removal      event-2024-03-15 -> event (only for old years)

The stages are repeated until nothing changes, so cleaning a cleaned slug
always returns it untouched.
"""

from __future__ import annotations

import logging
import re
import unicodedata
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from eventroutes.errors import MalformedSlugError

logger = logging.getLogger(__name__)

NUMERIC_SUFFIX_RE = re.compile(r"-(\d{1,2})$")
YEAR_SUFFIX_RE = re.compile(r"-\d{4}$")
FULL_DATE_SUFFIX_RE = re.compile(r"-(\d{4})-(\d{2})-(\d{2})$")

# Letters that do not decompose into base letter + combining mark.
_LETTER_MAP = str.maketrans({
    "ß": "ss",
    "æ": "ae",
    "œ": "oe",
    "ø": "o",
    "đ": "d",
    "ł": "l",
    "ı": "i",
})


def _collapse_hyphens(slug: str) -> str:
    return re.sub(r"-{2,}", "-", slug).strip("-")


def normalize_slug(slug: str) -> str:
    """Lowercase, strip diacritics and replace anything outside [a-z0-9-] with hyphens."""
    s = (slug or "").strip().lower()
    s = unicodedata.normalize("NFKD", s)
    s = "".join(ch for ch in s if not unicodedata.combining(ch))
    s = s.translate(_LETTER_MAP)
    s = re.sub(r"[^a-z0-9-]+", "-", s)
    return _collapse_hyphens(s)


def strip_noise_words(slug: str, phrases: Iterable[Tuple[str, ...]]) -> str:
    """
    Remove noise phrases that appear as whole hyphen-delimited tokens.

    Args:
        slug: Normalized slug
        phrases: Noise phrases as token tuples, longest first

    Returns:
        str: Slug without noise tokens
    """
    tokens = [t for t in slug.split("-") if t]
    kept = []
    i = 0
    while i < len(tokens):
        for phrase in phrases:
            if tuple(tokens[i:i + len(phrase)]) == phrase:
                i += len(phrase)
                break
        else:
            kept.append(tokens[i])
            i += 1
    return _collapse_hyphens("-".join(kept))


def strip_numeric_suffix(slug: str) -> str:
    """
    Strip a trailing -N (1-2 digits) left over from duplicate slugs.

    A slug ending in a four-digit year or in a full -YYYY-MM-DD date keeps its
    digits: the suffix belongs to the date, not to a duplicate counter.
    """
    if YEAR_SUFFIX_RE.search(slug) or FULL_DATE_SUFFIX_RE.search(slug):
        return slug
    return NUMERIC_SUFFIX_RE.sub("", slug)


def strip_stale_date_suffix(slug: str, year_min: int, year_max: int) -> str:
    """Strip a trailing -YYYY-MM-DD when YYYY is within [year_min, year_max]."""
    match = FULL_DATE_SUFFIX_RE.search(slug)
    if match and year_min <= int(match.group(1)) <= year_max:
        return slug[:match.start()]
    return slug


@dataclass(frozen=True)
class CleanResult:
    """Raw slug alongside its cleaned form."""

    raw: str
    cleaned: str

    @property
    def changed(self) -> bool:
        return self.cleaned != self.raw


class SlugCleaner:
    """
    Configurable slug cleaner.

    The noise vocabulary and the stale-year range are plain data so the
    cleaning rules can be exercised with any vocabulary.
    """

    def __init__(self, noise_words: Optional[Iterable[str]] = None,
                 stale_year_min: Optional[int] = None, stale_year_max: Optional[int] = None):
        from eventroutes.config import Config

        words = Config.SLUG_NOISE_WORDS if noise_words is None else noise_words
        self.noise_phrases: List[Tuple[str, ...]] = sorted(
            {tuple(t for t in normalize_slug(w).split("-") if t) for w in words} - {()},
            key=lambda phrase: (-len(phrase), phrase),
        )
        self.stale_year_min = Config.STALE_DATE_YEAR_MIN if stale_year_min is None else stale_year_min
        self.stale_year_max = Config.STALE_DATE_YEAR_MAX if stale_year_max is None else stale_year_max

    @classmethod
    def from_config(cls, config):
        """Build a cleaner from a Flask config mapping."""
        return cls(
            noise_words=config.get('SLUG_NOISE_WORDS'),
            stale_year_min=config.get('STALE_DATE_YEAR_MIN'),
            stale_year_max=config.get('STALE_DATE_YEAR_MAX'),
        )

    def _single_pass(self, slug: str) -> str:
        slug = normalize_slug(slug)
        slug = strip_noise_words(slug, self.noise_phrases)
        slug = strip_numeric_suffix(slug)
        return strip_stale_date_suffix(slug, self.stale_year_min, self.stale_year_max)

    def _clean_or_raise(self, raw_slug: str) -> str:
        current = raw_slug
        while True:
            nxt = self._single_pass(current)
            if nxt == current:
                break
            current = nxt
        if raw_slug and not current:
            raise MalformedSlugError(raw_slug)
        return current

    def clean(self, raw_slug: str) -> CleanResult:
        """
        Clean a raw URL slug.

        Args:
            raw_slug: Slug exactly as it appeared in the URL

        Returns:
            CleanResult: cleaned slug and whether it differs from the raw one.
            A slug that cleans to nothing keeps its raw form.
        """
        raw_slug = raw_slug or ""
        try:
            cleaned = self._clean_or_raise(raw_slug)
        except MalformedSlugError as e:
            logger.warning(f"{e}, keeping raw slug")
            cleaned = raw_slug
        return CleanResult(raw=raw_slug, cleaned=cleaned)


def clean(raw_slug: str) -> CleanResult:
    """Clean a slug with the default vocabulary."""
    return SlugCleaner().clean(raw_slug)
