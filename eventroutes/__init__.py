"""
Flask Application Factory
Event URL canonicalization: event pages, legacy slugs and locale redirects.
"""
from flask import Flask
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

# Initialize logging before app creation
def setup_logging(app):
    """Configure logging for the application and the eventroutes modules."""
    # Ensure log directory exists
    log_dir = Path(app.config.get('LOG_DIR', 'logs'))
    log_dir.mkdir(parents=True, exist_ok=True)

    # Set logging level based on config
    log_level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)

    # Console logging (always enabled for visibility)
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(logging.Formatter(
        '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
    ))
    console_handler.setLevel(log_level)

    # File logging (always enabled)
    file_handler = RotatingFileHandler(
        log_dir / 'app.log',
        maxBytes=10240000,  # 10MB
        backupCount=10
    )
    file_handler.setFormatter(logging.Formatter(
        '%(asctime)s [%(levelname)s] %(name)s: %(message)s [in %(pathname)s:%(lineno)d]'
    ))
    file_handler.setLevel(log_level)

    # app.logger is the 'eventroutes' package logger, so module loggers
    # (eventroutes.resolver, ...) share these handlers.
    app.logger.setLevel(log_level)
    for handler in list(app.logger.handlers):
        if getattr(handler, '_eventroutes', False):
            app.logger.removeHandler(handler)
            handler.close()
    for handler in (console_handler, file_handler):
        handler._eventroutes = True
        app.logger.addHandler(handler)

    # Prevent duplicate logs
    app.logger.propagate = False

    app.logger.info(
        f"Event routes startup: data store {app.config.get('SUPABASE_URL')}, "
        f"lookup timeout {app.config.get('LOOKUP_TIMEOUT')}s, logs in {log_dir}"
    )

def create_app(config_class=None):
    """
    Create and configure Flask application.

    Args:
        config_class: Configuration class (defaults to DevelopmentConfig)

    Returns:
        Flask application instance
    """
    app = Flask(__name__)

    # Load configuration
    if config_class is None:
        from eventroutes.config import DevelopmentConfig
        config_class = DevelopmentConfig

    app.config.from_object(config_class)

    # Setup logging
    setup_logging(app)

    # Register blueprints
    from eventroutes.routes import bp as main_bp
    from eventroutes.errors import bp as errors_bp

    app.register_blueprint(main_bp)
    app.register_blueprint(errors_bp)

    return app
