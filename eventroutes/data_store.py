"""
Event data store client.
Reads event views, the slug alias table and the events table from the hosted
PostgREST API. Only exact-match, single-row lookups are needed.
"""
import abc
import asyncio
import enum
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import requests
from flask import current_app

from eventroutes.classifier import ResourceClass
from eventroutes.errors import DataStoreLookupError

logger = logging.getLogger(__name__)


class CanonicalView(str, enum.Enum):
    CONCERT = "concert"
    FESTIVAL = "festival"
    UNIFIED = "unified"

    @classmethod
    def for_class(cls, resource_class):
        return cls.FESTIVAL if resource_class == ResourceClass.FESTIVAL else cls.CONCERT


@dataclass(frozen=True)
class Row:
    """Event row: the fields the resolver inspects plus an opaque payload."""

    slug: str
    resource_class: ResourceClass
    payload: Dict[str, Any] = field(default_factory=dict, compare=False)


@dataclass(frozen=True)
class AliasRecord:
    """Legacy slug pointing at a new slug and/or a permanent event id."""

    old_slug: str
    new_slug: Optional[str] = None
    target_id: Optional[str] = None


@dataclass(frozen=True)
class CanonicalTarget:
    """Live slug of an event, fetched by its permanent id."""

    slug: str
    resource_class: ResourceClass


class DataStore(abc.ABC):
    """Lookup contract consumed by the resolution pipeline."""

    @abc.abstractmethod
    async def lookup_by_slug(self, view: CanonicalView, slug: str) -> Optional[Row]:
        """Exact-match lookup of an event slug in a view."""

    @abc.abstractmethod
    async def lookup_alias(self, old_slug: str) -> Optional[AliasRecord]:
        """Alias record for a legacy slug."""

    @abc.abstractmethod
    async def lookup_canonical_slug_by_id(self, target_id: str) -> Optional[CanonicalTarget]:
        """Current slug and class of an event id."""


class SupabaseDataStore(DataStore):
    """
    PostgREST-backed data store.

    HTTP calls use requests and run in a worker thread so the event loop is
    never blocked.
    """

    @staticmethod
    def _get_config():
        """Get current config values, with fallback defaults."""
        from eventroutes.config import Config

        try:
            # Try to get from Flask app context
            if current_app:
                cfg = current_app.config
                return {
                    'base_url': cfg.get('SUPABASE_URL', Config.SUPABASE_URL),
                    'api_key': cfg.get('SUPABASE_ANON_KEY', Config.SUPABASE_ANON_KEY),
                    'timeout': cfg.get('LOOKUP_TIMEOUT', Config.LOOKUP_TIMEOUT),
                    'views': {
                        CanonicalView.CONCERT: cfg.get('CONCERT_VIEW', Config.CONCERT_VIEW),
                        CanonicalView.FESTIVAL: cfg.get('FESTIVAL_VIEW', Config.FESTIVAL_VIEW),
                        CanonicalView.UNIFIED: cfg.get('UNIFIED_VIEW', Config.UNIFIED_VIEW),
                    },
                    'alias_table': cfg.get('ALIAS_TABLE', Config.ALIAS_TABLE),
                    'events_table': cfg.get('EVENTS_TABLE', Config.EVENTS_TABLE),
                }
        except RuntimeError:
            # Not in Flask app context, use defaults
            pass

        # Fallback to defaults (for testing or non-Flask usage)
        return {
            'base_url': Config.SUPABASE_URL,
            'api_key': Config.SUPABASE_ANON_KEY,
            'timeout': Config.LOOKUP_TIMEOUT,
            'views': {
                CanonicalView.CONCERT: Config.CONCERT_VIEW,
                CanonicalView.FESTIVAL: Config.FESTIVAL_VIEW,
                CanonicalView.UNIFIED: Config.UNIFIED_VIEW,
            },
            'alias_table': Config.ALIAS_TABLE,
            'events_table': Config.EVENTS_TABLE,
        }

    def __init__(self, config=None):
        """
        Args:
            config: Optional dict shaped like _get_config(); read from the
                current app (or Config) when omitted
        """
        self.config = config or self._get_config()

    def _table_url(self, table):
        from eventroutes.config import Config

        return Config.get_table_url(table, self.config['base_url'])

    def _headers(self):
        api_key = self.config['api_key']
        return {
            'apikey': api_key,
            'Authorization': f"Bearer {api_key}",
            'Accept': 'application/json',
        }

    def _select_one(self, table, column, value, select='*'):
        """
        Fetch the first row of table where column equals value.

        Args:
            table: Table or view name
            column: Column to filter on
            value: Exact value to match
            select: PostgREST select clause

        Returns:
            dict or None: First matching row, None when nothing matches

        Raises:
            DataStoreLookupError: If the request fails or the response is not a row list
        """
        url = self._table_url(table)
        params = {
            'select': select,
            column: f"eq.{value}",
            'limit': 1,
        }
        try:
            logger.debug(f"Data store call: GET {url} {column}={value}")
            response = requests.get(url, params=params, headers=self._headers(),
                                    timeout=self.config['timeout'])
            response.raise_for_status()
            rows = response.json()
        except requests.exceptions.Timeout as e:
            logger.error(f"Timeout querying {table} for {column}={value}")
            raise DataStoreLookupError(table, "timeout") from e
        except requests.exceptions.RequestException as e:
            logger.error(f"Error querying {table} for {column}={value}: {e}")
            raise DataStoreLookupError(table, str(e)) from e
        except ValueError as e:
            logger.error(f"Invalid JSON from {table} for {column}={value}: {e}")
            raise DataStoreLookupError(table, "invalid response body") from e

        if not isinstance(rows, list):
            raise DataStoreLookupError(table, f"unexpected response type {type(rows).__name__}")
        if not rows:
            return None
        if not isinstance(rows[0], dict):
            raise DataStoreLookupError(table, f"unexpected row type {type(rows[0]).__name__}")
        return rows[0]

    def _row_from_view(self, view, data):
        slug = data.get('event_slug') or data.get('slug')
        if not slug:
            return None
        # Festival view rows may not carry event_type; the view itself says what they are.
        event_type = data.get('event_type')
        if event_type is None:
            event_type = 'festival' if view == CanonicalView.FESTIVAL else 'concert'
        return Row(slug=slug, resource_class=ResourceClass.from_field(event_type), payload=data)

    async def lookup_by_slug(self, view, slug):
        view = CanonicalView(view)
        table = self.config['views'][view]
        data = await asyncio.to_thread(self._select_one, table, 'event_slug', slug)
        if data is None:
            return None
        return self._row_from_view(view, data)

    async def lookup_alias(self, old_slug):
        data = await asyncio.to_thread(
            self._select_one, self.config['alias_table'], 'old_slug', old_slug,
            'old_slug,new_slug,event_id',
        )
        if data is None:
            return None
        target_id = data.get('event_id')
        return AliasRecord(
            old_slug=data.get('old_slug') or old_slug,
            new_slug=data.get('new_slug') or None,
            target_id=str(target_id) if target_id is not None else None,
        )

    async def lookup_canonical_slug_by_id(self, target_id):
        data = await asyncio.to_thread(
            self._select_one, self.config['events_table'], 'id', target_id, 'slug,event_type',
        )
        if data is None or not data.get('slug'):
            return None
        return CanonicalTarget(slug=data['slug'], resource_class=ResourceClass.from_field(data.get('event_type')))
