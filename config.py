import os


def _flag(name, default):
    return os.environ.get(name, default).lower() in ('1', 'true', 'yes', 'on')


class Config:
    # Basic Flask config
    SECRET_KEY = os.environ.get('SECRET_KEY', 'dev-secret-key-change-in-production')

    # Database (local backend)
    SQLALCHEMY_DATABASE_URI = os.environ.get('SQLALCHEMY_DATABASE_URI', 'sqlite:///ledgerone.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # App settings
    APP_NAME = os.environ.get('APP_NAME', 'LedgerOne')
    ITEMS_PER_PAGE = int(os.environ.get('ITEMS_PER_PAGE', 10))

    # Data store
    # 'sqlalchemy' = local models above, 'postgrest' = hosted Supabase/PostgREST
    DATA_STORE_BACKEND = os.environ.get('DATA_STORE_BACKEND', 'sqlalchemy')
    POSTGREST_URL = os.environ.get('POSTGREST_URL')          # e.g. https://xyz.supabase.co/rest/v1
    POSTGREST_API_KEY = os.environ.get('POSTGREST_API_KEY')  # service role key
    STORE_TIMEOUT = float(os.environ.get('STORE_TIMEOUT', 10))   # seconds per request
    STORE_RETRIES = int(os.environ.get('STORE_RETRIES', 1))      # retries for reads only

    # Logging / audit trail
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    AUDIT_LOG_ENABLED = _flag('AUDIT_LOG_ENABLED', 'true')
    AUDIT_LOG_RETENTION_DAYS = int(os.environ.get('AUDIT_LOG_RETENTION_DAYS', 30))

    # Global search
    SEARCH_DEFAULT_LIMIT = int(os.environ.get('SEARCH_DEFAULT_LIMIT', 20))
    SEARCH_MAX_LIMIT = int(os.environ.get('SEARCH_MAX_LIMIT', 100))


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    DATA_STORE_BACKEND = 'sqlalchemy'
    AUDIT_LOG_ENABLED = True
    LOG_LEVEL = 'DEBUG'
