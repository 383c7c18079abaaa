import os
import logging
from datetime import timedelta
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

MIN_JWT_SECRET_LENGTH = 32

# Required variables and the fallback used when they are missing outside production
REQUIRED_ENV_DEFAULTS = {
    'DATABASE_URL': 'sqlite:///outleads.db',
    'SECRET_KEY': 'dev-secret-key-change-in-production',
    'JWT_SECRET_KEY': 'dev-jwt-secret-key-change-in-production-please',
    'PUBLIC_BASE_URL': 'http://localhost:3000',
}


def _env(name):
    """Read an environment variable, falling back to its development default."""
    return os.environ.get(name) or REQUIRED_ENV_DEFAULTS.get(name)


def validate_environment(config_name, environ=None):
    """Check required environment variables at process start.

    Missing or weak values are fatal in production. In development they are
    logged as warnings and the class defaults apply.

    Returns:
        List of problems found (empty when the environment is complete).
    """
    environ = os.environ if environ is None else environ
    problems = []

    for name in REQUIRED_ENV_DEFAULTS:
        if not environ.get(name):
            problems.append(f"{name} environment variable is required")

    jwt_secret = environ.get('JWT_SECRET_KEY')
    if jwt_secret and len(jwt_secret) < MIN_JWT_SECRET_LENGTH:
        problems.append(f"JWT_SECRET_KEY must be at least {MIN_JWT_SECRET_LENGTH} characters long")

    if config_name == 'production':
        if problems:
            raise ValueError('; '.join(problems))
    elif config_name != 'testing':
        for problem in problems:
            logger.warning(f"{problem} - falling back to development default")

    if not environ.get('RESEND_API_KEY'):
        logger.info("RESEND_API_KEY not set - account emails are disabled")

    return problems


class Config:
    """Base configuration class."""
    SECRET_KEY = _env('SECRET_KEY')
    SQLALCHEMY_DATABASE_URI = _env('DATABASE_URL')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Token settings
    JWT_SECRET_KEY = _env('JWT_SECRET_KEY')
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(minutes=int(os.environ.get('ACCESS_TOKEN_MINUTES', '15')))
    JWT_REFRESH_TOKEN_EXPIRES = timedelta(days=int(os.environ.get('REFRESH_TOKEN_DAYS', '7')))
    JWT_TOKEN_LOCATION = ['headers', 'cookies']
    JWT_REFRESH_COOKIE_NAME = 'refresh-token'
    JWT_REFRESH_COOKIE_PATH = '/'
    JWT_COOKIE_SAMESITE = 'Strict'
    JWT_COOKIE_SECURE = True
    JWT_COOKIE_CSRF_PROTECT = False
    JWT_SESSION_COOKIE = False

    # Landing page visitors are redirected to from campaign links
    PUBLIC_BASE_URL = _env('PUBLIC_BASE_URL')
    CAMPAIGN_CLICK_COOKIE_MAX_AGE = 60 * 60 * 24

    # Outbound HTTP
    HTTP_TIMEOUT_SECONDS = float(os.environ.get('HTTP_TIMEOUT_SECONDS', '10'))
    DOMAIN_AUTH_URL = os.environ.get('DOMAIN_AUTH_URL')

    # Email (Resend)
    RESEND_API_KEY = os.environ.get('RESEND_API_KEY')
    NOTIFY_EMAIL_FROM = os.environ.get('NOTIFY_EMAIL_FROM', 'no-reply@outleads.local')

    # Optional response cache
    REDIS_URL = os.environ.get('REDIS_URL')
    CACHE_TTL_SECONDS = int(os.environ.get('CACHE_TTL_SECONDS', '300'))

    # Pagination
    DEFAULT_PAGE_SIZE = 10
    MAX_PAGE_SIZE = int(os.environ.get('MAX_PAGE_SIZE', '100'))

    # CORS configuration
    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', '*').split(',')

    # Logging configuration
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True
    TESTING = False
    SQLALCHEMY_TRACK_MODIFICATIONS = True
    JWT_COOKIE_SECURE = False


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False
    TESTING = False

    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL')
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_pre_ping': True,
        'pool_timeout': int(os.environ.get('DB_POOL_TIMEOUT', '10')),
    }

    SECRET_KEY = os.environ.get('SECRET_KEY')
    JWT_SECRET_KEY = os.environ.get('JWT_SECRET_KEY')
    PUBLIC_BASE_URL = os.environ.get('PUBLIC_BASE_URL')

    # Production CORS (more restrictive)
    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', '').split(',')

    @classmethod
    def validate_config(cls):
        """Validate production configuration."""
        validate_environment('production')

        if not cls.CORS_ORIGINS or cls.CORS_ORIGINS == ['']:
            raise ValueError("CORS_ORIGINS environment variable is required for production")


class TestingConfig(Config):
    """Testing configuration."""
    TESTING = True
    DEBUG = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    SECRET_KEY = 'test-secret-key'
    JWT_SECRET_KEY = 'test-jwt-secret-key-with-at-least-32-chars'
    JWT_COOKIE_SECURE = False
    PUBLIC_BASE_URL = 'http://landing.test'
    RESEND_API_KEY = None
    REDIS_URL = None
    DOMAIN_AUTH_URL = None


# Configuration mapping
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
