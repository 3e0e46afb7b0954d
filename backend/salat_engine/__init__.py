import logging

import sentry_sdk
from flask import Flask
from sentry_sdk.integrations.flask import FlaskIntegration

# Import extensions from the central extensions file
from .extensions import db, redis_client, prayer_engine


def create_app(config_name):
    """
    Flask Application Factory function. Hosts the prayer engine for services,
    Celery workers and maintenance scripts.
    """
    app = Flask(__name__, instance_relative_config=False)

    # 1. Load Config
    from .config import config_by_name
    config_obj = config_by_name.get(config_name, config_by_name['default'])
    app.config.from_object(config_obj)

    # 2. Set up Logging
    log_level_str = str(app.config.get('LOG_LEVEL', 'INFO')).upper()
    log_level = getattr(logging, log_level_str, logging.INFO)
    app.logger.setLevel(log_level)
    logging.getLogger('salat_engine').setLevel(log_level)
    app.logger.info(f"App configured with: {config_obj.__name__}")

    # 3. Sentry SDK initialization - for error tracking
    if app.config.get('SENTRY_DSN'):
        sentry_sdk.init(
            dsn=app.config['SENTRY_DSN'],
            integrations=[FlaskIntegration()],
            traces_sample_rate=0.0
        )
        app.logger.info("Sentry initialized for error tracking.")

    # 4. Initialize Extensions
    db.init_app(app)
    redis_client.init_app(app)

    with app.app_context():
        from . import models  # noqa: F401  registers the cache table
        db.create_all()

    # 5. The engine picks its cache store from the config, so it comes last.
    prayer_engine.init_app(app)

    app.logger.info(f"Application initialized, Debug: {app.config.get('DEBUG')}, Testing: {app.config.get('TESTING')}")
    return app
