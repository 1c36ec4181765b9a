"""
Tests for locale-aware path resolution.
"""
import pytest
from eventroutes.classifier import ResourceClass, RouteClassifier
from eventroutes.data_store import Row
from eventroutes.locale_router import Locale
from eventroutes.navigation import NavigationSession
from eventroutes.path_resolver import parse_event_path, resolve_path
from eventroutes.resolver import Found, NotFound, Redirect

CONCERT = ResourceClass.CONCERT
FESTIVAL = ResourceClass.FESTIVAL


class TestParseEventPath:
    """Test cases for parse_event_path."""

    def setup_method(self):
        self.classifier = RouteClassifier()

    def test_spanish_concert_path(self):
        route = parse_event_path('/conciertos/coldplay-madrid', self.classifier)
        assert route.locale == Locale.ES
        assert route.segment == 'conciertos'
        assert route.slug == 'coldplay-madrid'
        assert route.assumed_class == CONCERT

    def test_english_path(self):
        route = parse_event_path('/en/tickets/coldplay-madrid', self.classifier)
        assert route.locale == Locale.EN
        assert route.canonical_path == '/conciertos/coldplay-madrid'
        assert route.assumed_class == CONCERT

    def test_festival_keywords_override_concert_route(self):
        route = parse_event_path('/concierto/old-festival-name-2024-03-15', self.classifier)
        assert route.assumed_class == FESTIVAL

    def test_festival_route_kept(self):
        route = parse_event_path('/festivales/coldplay-madrid', self.classifier)
        assert route.assumed_class == FESTIVAL

    def test_legacy_product_route_uses_heuristic(self):
        assert parse_event_path('/producto/mad-cool-festival', self.classifier).assumed_class == FESTIVAL
        assert parse_event_path('/producto/coldplay-madrid', self.classifier).assumed_class == CONCERT

    def test_canonical_concert_route_keeps_class(self):
        """Festival keywords do not override a canonical concert route."""
        assert parse_event_path('/conciertos/ultra-vomit-madrid', self.classifier).assumed_class == CONCERT
        assert parse_event_path('/en/tickets/camping-band-sevilla', self.classifier).assumed_class == CONCERT

    def test_legacy_festival_route_kept(self):
        assert parse_event_path('/festival/coldplay-madrid', self.classifier).assumed_class == FESTIVAL

    @pytest.mark.parametrize('path', ['/', '/conciertos', '/destinos/barcelona', '/conciertos/a/b', '/en/'])
    def test_non_event_paths(self, path):
        assert parse_event_path(path, self.classifier) is None


class TestResolvePath:
    """Test cases for resolve_path."""

    @pytest.mark.asyncio
    async def test_canonical_path_found(self, store, pipeline):
        store.add_event('coldplay-madrid', CONCERT)

        outcome = await resolve_path('/conciertos/coldplay-madrid', pipeline)

        assert isinstance(outcome, Found)

    @pytest.mark.asyncio
    async def test_dirty_slug_redirects_to_clean_path(self, store, pipeline):
        """/conciertos/Bad-Bunny-Madrid-1 lands on /conciertos/bad-bunny-madrid."""
        store.add_event('bad-bunny-madrid', CONCERT)

        outcome = await resolve_path('/conciertos/Bad-Bunny-Madrid-1', pipeline)

        assert outcome == Redirect('/conciertos/bad-bunny-madrid')

    @pytest.mark.asyncio
    async def test_legacy_singular_prefix_redirects(self, store, pipeline):
        store.add_event('coldplay-madrid', CONCERT)

        outcome = await resolve_path('/concierto/coldplay-madrid', pipeline)

        assert outcome == Redirect('/conciertos/coldplay-madrid')

    @pytest.mark.asyncio
    async def test_legacy_product_path_redirects(self, store, pipeline):
        store.add_event('mad-cool-festival-2026', FESTIVAL)

        outcome = await resolve_path('/producto/mad-cool-festival-2026', pipeline)

        assert outcome == Redirect('/festivales/mad-cool-festival-2026')

    @pytest.mark.asyncio
    async def test_stale_dated_festival_through_concert_url(self, store, pipeline):
        store.add_alias('old-festival-name-2024-03-15', target_id='X')
        store.add_event('new-festival-name-2026', FESTIVAL, event_id='X')

        outcome = await resolve_path('/concierto/old-festival-name-2024-03-15', pipeline)

        assert outcome == Redirect('/festivales/new-festival-name-2026')

    @pytest.mark.asyncio
    async def test_english_found(self, store, pipeline):
        store.add_event('coldplay-madrid', CONCERT)

        outcome = await resolve_path('/en/tickets/coldplay-madrid', pipeline)

        assert isinstance(outcome, Found)
        assert outcome.row.slug == 'coldplay-madrid'

    @pytest.mark.asyncio
    async def test_english_redirect_is_localized(self, store, pipeline):
        store.add_event('coldplay-madrid', CONCERT)

        outcome = await resolve_path('/en/tickets/Coldplay-Madrid-Tickets', pipeline)

        assert outcome == Redirect('/en/tickets/coldplay-madrid')

    @pytest.mark.asyncio
    async def test_english_alias_redirect_to_festival(self, store, pipeline):
        store.add_alias('coldplay-madrid', target_id='evt')
        store.add_event('coldplay-festival-madrid-2026', FESTIVAL, event_id='evt')

        outcome = await resolve_path('/en/tickets/coldplay-madrid', pipeline)

        assert outcome == Redirect('/en/festivals/coldplay-festival-madrid-2026')

    @pytest.mark.asyncio
    async def test_not_found(self, pipeline):
        assert await resolve_path('/conciertos/nobody-nowhere', pipeline) == NotFound()

    @pytest.mark.asyncio
    async def test_non_event_path(self, store, pipeline):
        assert await resolve_path('/destinos/barcelona', pipeline) == NotFound()
        assert store.calls == []

    @pytest.mark.asyncio
    async def test_shared_session_records_redirect(self, store, pipeline):
        store.add_alias('old-slug', target_id='evt')
        store.add_event('new-slug', CONCERT, event_id='evt')
        session = NavigationSession(pipeline)

        outcome = await resolve_path('/conciertos/old-slug', pipeline, session=session)

        assert outcome == Redirect('/conciertos/new-slug')
        assert session.redirect_dispatched is True
        assert session.current_token == 1

    @pytest.mark.asyncio
    async def test_concert_with_festival_keyword_found_at_own_url(self, store, pipeline):
        store.add_event('ultra-vomit-madrid', CONCERT)

        outcome = await resolve_path('/conciertos/ultra-vomit-madrid', pipeline)

        assert isinstance(outcome, Found)
        assert outcome.resource_class == CONCERT

    @pytest.mark.asyncio
    async def test_english_concert_with_festival_keyword_found(self, store, pipeline):
        store.add_event('camping-band-sevilla', CONCERT)

        outcome = await resolve_path('/en/tickets/camping-band-sevilla', pipeline)

        assert isinstance(outcome, Found)

    @pytest.mark.asyncio
    async def test_festival_at_concert_url_redirects_to_festival(self, store, pipeline):
        store.add_event('coldplay-madrid', FESTIVAL)

        outcome = await resolve_path('/conciertos/coldplay-madrid', pipeline)

        assert outcome == Redirect('/festivales/coldplay-madrid')


class _FixedPipeline:
    """Pipeline stand-in that always answers with the same outcome."""

    def __init__(self, outcome):
        self.outcome = outcome
        self.classifier = RouteClassifier()

    async def resolve(self, raw_slug, assumed_class):
        return self.outcome


class TestSelfRedirect:
    """A redirect back to the requested URL is never returned."""

    @pytest.mark.asyncio
    async def test_self_redirect_with_row_renders(self):
        row = Row(slug='coldplay-madrid', resource_class=CONCERT)
        pipeline = _FixedPipeline(Redirect('/conciertos/coldplay-madrid', row=row))

        outcome = await resolve_path('/conciertos/coldplay-madrid', pipeline)

        assert outcome == Found(row=row, resource_class=CONCERT)

    @pytest.mark.asyncio
    async def test_english_self_redirect_with_row_renders(self):
        row = Row(slug='coldplay-madrid', resource_class=CONCERT)
        pipeline = _FixedPipeline(Redirect('/conciertos/coldplay-madrid', row=row))

        outcome = await resolve_path('/en/tickets/coldplay-madrid', pipeline)

        assert isinstance(outcome, Found)

    @pytest.mark.asyncio
    async def test_self_redirect_without_row_not_found(self):
        pipeline = _FixedPipeline(Redirect('/conciertos/coldplay-madrid'))

        assert await resolve_path('/conciertos/coldplay-madrid', pipeline) == NotFound()
