"""
Event page routes.
Every event URL, canonical, legacy or English, goes through the slug
resolver and ends as event data, a 301 to the canonical URL, or a 404.
"""
from flask import Blueprint, abort, current_app, jsonify, redirect, request
from eventroutes.data_store import SupabaseDataStore
from eventroutes.locale_router import Locale, alternate_url, clean_canonical_url, detect_locale, localize
from eventroutes.classifier import canonical_path
from eventroutes.path_resolver import resolve_path
from eventroutes.resolver import Found, Redirect, ResolutionPipeline
import logging

logger = logging.getLogger(__name__)

bp = Blueprint('main', __name__)


def get_data_store():
    """Data store for the current request."""
    return SupabaseDataStore()


def build_pipeline():
    """Resolution pipeline configured from the current app."""
    return ResolutionPipeline.from_config(get_data_store(), current_app.config)


def render_event(outcome, locale):
    """JSON body for a found event."""
    base_url = current_app.config['SITE_BASE_URL']
    path = canonical_path(outcome.row.slug, outcome.resource_class)
    return jsonify({
        'slug': outcome.row.slug,
        'resource_class': outcome.resource_class.value,
        'canonical_url': clean_canonical_url(base_url.rstrip('/') + localize(path, locale)),
        'alternates': {loc.value: alternate_url(path, loc, base_url) for loc in Locale},
        'event': outcome.row.payload,
    })


@bp.route('/conciertos/<slug>')
@bp.route('/concierto/<slug>')
@bp.route('/festivales/<slug>')
@bp.route('/festival/<slug>')
@bp.route('/producto/<slug>')
@bp.route('/en/tickets/<slug>')
@bp.route('/en/festivals/<slug>')
async def event_page(slug):
    """Resolve an event URL."""
    path = request.path
    try:
        outcome = await resolve_path(path, build_pipeline())
    except Exception as e:
        logger.error(f"Error resolving {path}: {e}", exc_info=True)
        abort(404)

    if isinstance(outcome, Redirect):
        logger.info(f"301 {path} -> {outcome.target_path}")
        return redirect(outcome.target_path, code=301)

    if isinstance(outcome, Found):
        return render_event(outcome, detect_locale(path))

    logger.info(f"404 {path}")
    abort(404)
