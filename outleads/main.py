import os
import logging
from flask import Flask
from flask_cors import CORS

from outleads.config import config, validate_environment
from outleads.extensions import db, jwt

BLUEPRINTS = [
    ('outleads.routes.auth', 'auth_bp', '/api/auth'),
    ('outleads.routes.campaign', 'campaign_bp', '/api/admin'),
    ('outleads.routes.campaign_link', 'campaign_link_bp', None),
    ('outleads.routes.lead', 'lead_bp', '/api'),
    ('outleads.routes.lead_pool', 'lead_pool_bp', '/api/admin'),
    ('outleads.routes.disposition', 'disposition_bp', '/api/admin/dispositions'),
    ('outleads.routes.user', 'user_bp', '/api/admin/users'),
    ('outleads.routes.role', 'role_bp', '/api/admin/roles'),
    ('outleads.routes.catalog', 'catalog_bp', '/api'),
    ('outleads.routes.dashboard', 'dashboard_bp', '/api/admin'),
    ('outleads.routes.report', 'report_bp', '/api/admin'),
    ('outleads.routes.audit', 'audit_bp', '/api/admin'),
    ('outleads.routes.health', 'health_bp', '/api'),
]


def configure_logging(app):
    level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    logging.getLogger('outleads').setLevel(level)
    app.logger.setLevel(level)

    if not app.debug and not app.testing:
        if not os.path.exists('logs'):
            os.mkdir('logs')
        file_handler = logging.FileHandler('logs/outleads.log')
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
        ))
        file_handler.setLevel(level)
        app.logger.addHandler(file_handler)
        logging.getLogger('outleads').addHandler(file_handler)
        app.logger.info('Outleads API startup')


def register_blueprints(app):
    from importlib import import_module

    for module_name, attribute, url_prefix in BLUEPRINTS:
        blueprint = getattr(import_module(module_name), attribute)
        app.register_blueprint(blueprint, url_prefix=url_prefix)
        app.logger.debug(f"Registered {blueprint.name} blueprint at {url_prefix or '/'}")


def create_app(config_name=None):
    """Application factory pattern."""
    app = Flask(__name__)

    if config_name is None:
        config_name = os.environ.get('FLASK_ENV', 'development')

    # Fatal in production, warnings in development
    validate_environment(config_name)
    app.config.from_object(config[config_name])
    if config_name == 'production':
        config[config_name].validate_config()

    configure_logging(app)

    CORS(app, origins=app.config['CORS_ORIGINS'], supports_credentials=True)

    db.init_app(app)
    jwt.init_app(app)

    from outleads.services.caching import init_cache
    init_cache(app)

    register_blueprints(app)

    from outleads.utils.error_handlers import register_error_handlers
    register_error_handlers(app)

    from outleads.commands import register_commands
    register_commands(app)

    # Importing the models registers every table on db.metadata
    import outleads.models  # noqa: F401

    if config_name != 'production' or os.environ.get('STARTUP_DB_CREATE_ALL', 'false').lower() == 'true':
        with app.app_context():
            db.create_all()
            app.logger.info("Database tables created/verified")
    else:
        app.logger.info("Skipping db.create_all() on startup in production")

    return app
