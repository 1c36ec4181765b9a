"""
Error types for slug resolution and the application's error handlers.

The resolution errors are raised and recovered inside the core; callers only
ever observe a terminal ResolutionOutcome. The handlers below make sure the
one user-visible failure is a plain not-found response.
"""
from flask import Blueprint, jsonify
import logging

logger = logging.getLogger(__name__)

bp = Blueprint('errors', __name__)


class ResolutionError(Exception):
    """Base class for errors recovered by the resolution pipeline."""


class DataStoreLookupError(ResolutionError):
    """A data store call failed or timed out."""

    def __init__(self, table, message):
        super().__init__(f"Lookup on {table} failed: {message}")
        self.table = table


class PlaceholderTargetError(ResolutionError):
    """An alias points at a sentinel 'not yet scheduled' target."""

    def __init__(self, old_slug, target):
        super().__init__(f"Alias {old_slug!r} points at placeholder target {target!r}")
        self.old_slug = old_slug
        self.target = target


class AmbiguousClassError(ResolutionError):
    """The heuristic and authoritative classifications disagree."""

    def __init__(self, slug, assumed, actual):
        super().__init__(f"Slug {slug!r} assumed {assumed.value} but is {actual.value}")
        self.slug = slug
        self.assumed = assumed
        self.actual = actual


class MalformedSlugError(ResolutionError):
    """Cleaning collapsed a slug to nothing."""

    def __init__(self, raw_slug):
        super().__init__(f"Slug {raw_slug!r} cleans to an empty string")
        self.raw_slug = raw_slug


@bp.app_errorhandler(404)
def not_found_error(error):
    """Handle 404 errors."""
    return jsonify({'error': 'not_found', 'message': 'Page not found'}), 404


@bp.app_errorhandler(500)
def internal_error(error):
    """Handle 500 errors."""
    logger.error(f"Internal error: {error}", exc_info=True)
    return jsonify({'error': 'internal_error', 'message': 'An error occurred. Please try again later.'}), 500


@bp.app_errorhandler(405)
def method_not_allowed_error(error):
    """Handle 405 errors."""
    return jsonify({'error': 'method_not_allowed', 'message': 'Method not allowed'}), 405
