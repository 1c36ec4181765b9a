"""
Locale-aware route mapping for ES (canonical) and EN paths.

ES routes carry no prefix. EN routes live under /en/ with translated
first segments:
    /conciertos/coldplay-madrid  <->  /en/tickets/coldplay-madrid

Only the first path segment is ever translated; event slugs pass through
untouched in both directions.
"""

from __future__ import annotations

import enum
from typing import Dict
from urllib.parse import urlsplit, urlunsplit


class Locale(str, enum.Enum):
    ES = "es"
    EN = "en"


DEFAULT_LOCALE = Locale.ES
EN_PREFIX = "/en"

# ES segment -> EN segment
ROUTE_SEGMENTS: Dict[str, str] = {
    "conciertos": "tickets",
    "festivales": "festivals",
    "destinos": "destinations",
    "artistas": "artists",
    "favoritos": "favorites",
    "politica-privacidad": "privacy-policy",
    "terminos-uso": "terms-of-use",
    "inspiration": "inspiration",
    "about": "about",
}

ROUTE_SEGMENTS_REVERSE: Dict[str, str] = {en: es for es, en in ROUTE_SEGMENTS.items()}

if len(ROUTE_SEGMENTS_REVERSE) != len(ROUTE_SEGMENTS):
    raise ValueError("Route segment collision detected; translations must be unique.")


def detect_locale(path: str) -> Locale:
    """Return the locale a path belongs to. /entradas is ES, /en/... is EN."""
    if path == EN_PREFIX or path.startswith(EN_PREFIX + "/"):
        return Locale.EN
    return DEFAULT_LOCALE


def strip_locale_prefix(path: str) -> str:
    """
    Remove the locale prefix, returning the bare path.

    /en/tickets/coldplay -> /tickets/coldplay
    /en                  -> /
    /conciertos/coldplay -> /conciertos/coldplay
    """
    if path.startswith(EN_PREFIX + "/"):
        return path[len(EN_PREFIX):]
    if path == EN_PREFIX:
        return "/"
    return path


def translate_segment(segment: str, target_locale: Locale) -> str:
    """Translate a route segment into target_locale; unknown segments are returned as-is."""
    if Locale(target_locale) == Locale.EN:
        return ROUTE_SEGMENTS.get(segment, segment)
    return ROUTE_SEGMENTS_REVERSE.get(segment, segment)


def _split(path: str):
    return [part for part in path.split("/") if part]


def _join(parts, trailing_slash=False) -> str:
    path = "/" + "/".join(parts)
    if trailing_slash and parts:
        path += "/"
    return path


def localize(canonical_path: str, target_locale: Locale) -> str:
    """
    Build the path for target_locale from a canonical (ES) path.

    localize('/conciertos/slug', 'en') -> '/en/tickets/slug'
    localize('/', 'en')                -> '/en/'
    """
    if Locale(target_locale) == DEFAULT_LOCALE:
        return canonical_path

    parts = _split(canonical_path)
    if not parts:
        return EN_PREFIX + "/"

    parts[0] = translate_segment(parts[0], Locale.EN)
    return EN_PREFIX + _join(parts, trailing_slash=canonical_path.endswith("/"))


def canonicalize(path: str) -> str:
    """
    Convert a path in any locale to its canonical ES equivalent.

    canonicalize('/en/tickets/slug')  -> '/conciertos/slug'
    canonicalize('/conciertos/slug')  -> '/conciertos/slug'
    """
    if detect_locale(path) == DEFAULT_LOCALE:
        return path

    bare = strip_locale_prefix(path)
    parts = _split(bare)
    if not parts:
        return "/"

    parts[0] = translate_segment(parts[0], DEFAULT_LOCALE)
    return _join(parts, trailing_slash=bare.endswith("/"))


def alternate_url(path: str, target_locale: Locale, base_url: str) -> str:
    """Absolute hreflang alternate of path (any locale) in target_locale."""
    return base_url.rstrip("/") + localize(canonicalize(path), target_locale)


def clean_canonical_url(url: str) -> str:
    """Drop query string and fragment so tracking parameters never reach a canonical URL."""
    parts = urlsplit(url)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))
