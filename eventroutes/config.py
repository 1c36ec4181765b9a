"""
Configuration classes for Flask application.
Slug canonicalization settings, data store connection and lookup limits.
"""
import os
from dotenv import load_dotenv

load_dotenv()


def _env_list(name, default):
    """Read a comma-separated list from the environment, falling back to default."""
    raw = os.environ.get(name)
    if not raw:
        return list(default)
    return [item.strip().lower() for item in raw.split(',') if item.strip()]


# Marketing/service tokens that never belong to a canonical event slug.
DEFAULT_NOISE_WORDS = [
    'paquetes-vip', 'paquete-vip', 'vip-paquetes', 'vip-paquete',
    'world-tour', 'tour-mundial', 'gira-mundial', 'gira',
    'tickets', 'ticket', 'entradas', 'entrada',
    'ticketless', 'upgrade', 'voucher',
    'parking', 'shuttle', 'transfer', 'bus', 'autobus', 'transporte',
    'feed', 'rss', 'premium', 'gold', 'platinum', 'silver'
]

# Tokens that mark a slug as a festival before the data store has answered.
DEFAULT_FESTIVAL_KEYWORDS = [
    'festival', 'fest', 'ribera', 'sonorama', 'primavera-sound', 'mad-cool',
    'madcool', 'bbk-live', 'arenal-sound', 'vina-rock', 'resurrection',
    'low-festival', 'dcode', 'cruilla', 'vida-festival', 'tomorrowland',
    'ultra', 'medusa', 'starlite', 'rototom', 'monegros', 'dreambeach',
    'electrobeach', 'aquasella', 'marenostrum', 'boombastic', 'rio-babel',
    'rock-imperium', 'leyendas-del-rock', 'amnesia-festival', 'abono',
    'bono-general', 'pase-festival', 'camping', 'glamping', 'cap-roig',
    'porta-ferrada', 'jazz-festival', 'jazzaldia'
]


class Config:
    """Base configuration class."""
    # Flask core settings
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'

    # Logging
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    LOG_DIR = os.environ.get('LOG_DIR', 'logs')

    # Public site, used for canonical and hreflang URLs
    SITE_BASE_URL = os.environ.get('SITE_BASE_URL', 'https://feelomove.com')

    # Hosted data store (PostgREST)
    SUPABASE_URL = os.environ.get('SUPABASE_URL', 'http://localhost:54321')
    SUPABASE_ANON_KEY = os.environ.get('SUPABASE_ANON_KEY', '')

    # Lookup limits
    LOOKUP_TIMEOUT = float(os.environ.get('LOOKUP_TIMEOUT', 4))  # seconds
    LOOKUP_RETRIES = int(os.environ.get('LOOKUP_RETRIES', 1))  # 0 or 1, higher values are capped at 1

    # Tables and views
    CONCERT_VIEW = os.environ.get('CONCERT_VIEW', 'lovable_mv_event_product_page_conciertos')
    FESTIVAL_VIEW = os.environ.get('FESTIVAL_VIEW', 'lovable_mv_event_product_page_festivales')
    UNIFIED_VIEW = os.environ.get('UNIFIED_VIEW', 'lovable_mv_event_product_page')
    ALIAS_TABLE = os.environ.get('ALIAS_TABLE', 'slug_redirects')
    EVENTS_TABLE = os.environ.get('EVENTS_TABLE', 'tm_tbl_events')

    # Slug cleaning
    SLUG_NOISE_WORDS = _env_list('SLUG_NOISE_WORDS', DEFAULT_NOISE_WORDS)
    STALE_DATE_YEAR_MIN = int(os.environ.get('STALE_DATE_YEAR_MIN', 2020))
    STALE_DATE_YEAR_MAX = int(os.environ.get('STALE_DATE_YEAR_MAX', 2025))

    # Route classification
    FESTIVAL_KEYWORDS = _env_list('FESTIVAL_KEYWORDS', DEFAULT_FESTIVAL_KEYWORDS)

    @staticmethod
    def get_table_url(table, base_url=None):
        """
        Get the PostgREST URL for a table or view.

        Args:
            table: Table or view name (e.g., 'slug_redirects')
            base_url: Data store URL (defaults to SUPABASE_URL)

        Returns:
            str: Complete URL for querying the table
        """
        base_url = base_url or Config.SUPABASE_URL
        return f"{base_url.rstrip('/')}/rest/v1/{table}"


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False


config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'default': DevelopmentConfig
}
