"""
Pytest configuration and fixtures.
"""
import asyncio

import pytest
from eventroutes import create_app
from eventroutes.classifier import ResourceClass
from eventroutes.config import DevelopmentConfig
from eventroutes.data_store import AliasRecord, CanonicalTarget, CanonicalView, DataStore, Row
from eventroutes.errors import DataStoreLookupError
from eventroutes.resolver import ResolutionPipeline
from eventroutes.slug_cleaner import SlugCleaner


class FakeDataStore(DataStore):
    """In-memory data store recording every call."""

    def __init__(self):
        self.views = {CanonicalView.CONCERT: {}, CanonicalView.FESTIVAL: {}}
        self.aliases = {}
        self.events = {}
        self.calls = []
        self.failures = {}  # method name -> number of calls that raise
        self.delay = 0

    def add_event(self, slug, resource_class, view=None, event_id=None, **payload):
        """Add an event row; view defaults to the one matching its class."""
        resource_class = ResourceClass(resource_class)
        view = view or CanonicalView.for_class(resource_class)
        row = Row(slug=slug, resource_class=resource_class,
                  payload={'event_slug': slug, 'event_type': resource_class.value, **payload})
        self.views[view][slug] = row
        if event_id is not None:
            self.events[event_id] = CanonicalTarget(slug=slug, resource_class=resource_class)
        return row

    def add_alias(self, old_slug, new_slug=None, target_id=None):
        self.aliases[old_slug] = AliasRecord(old_slug=old_slug, new_slug=new_slug, target_id=target_id)

    async def _call(self, name, *args):
        self.calls.append((name,) + args)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.failures.get(name, 0) > 0:
            self.failures[name] -= 1
            raise DataStoreLookupError(name, 'backend unavailable')

    async def lookup_by_slug(self, view, slug):
        await self._call('lookup_by_slug', CanonicalView(view), slug)
        if view == CanonicalView.UNIFIED:
            return self.views[CanonicalView.CONCERT].get(slug) or self.views[CanonicalView.FESTIVAL].get(slug)
        return self.views[CanonicalView(view)].get(slug)

    async def lookup_alias(self, old_slug):
        await self._call('lookup_alias', old_slug)
        return self.aliases.get(old_slug)

    async def lookup_canonical_slug_by_id(self, target_id):
        await self._call('lookup_canonical_slug_by_id', target_id)
        return self.events.get(target_id)


@pytest.fixture
def store():
    """Empty in-memory data store."""
    return FakeDataStore()


@pytest.fixture
def pipeline(store):
    """Resolution pipeline over the in-memory store with the default vocabulary."""
    return ResolutionPipeline(store, cleaner=SlugCleaner(), timeout=1, retries=1)


@pytest.fixture
def app():
    """Create application for testing."""
    app = create_app(DevelopmentConfig)
    app.config['TESTING'] = True
    app.config['SITE_BASE_URL'] = 'https://example.test'
    return app


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()
