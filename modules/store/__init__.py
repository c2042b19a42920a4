# modules/store/__init__.py
"""
Data store backends
Generic table-addressed access to the relational store (local or hosted)
"""
from .base import DataStore  # noqa: F401
from .postgrest_store import PostgrestStore
from .sqlalchemy_store import SqlAlchemyStore


def build_store(config, logger=None) -> DataStore:
    """Pick the backend named by DATA_STORE_BACKEND."""
    backend = (config.get('DATA_STORE_BACKEND') or 'sqlalchemy').lower()
    if backend == 'sqlalchemy':
        return SqlAlchemyStore(logger=logger)
    if backend == 'postgrest':
        return PostgrestStore(
            base_url=config.get('POSTGREST_URL'),
            api_key=config.get('POSTGREST_API_KEY'),
            timeout=float(config.get('STORE_TIMEOUT', 10)),
            retries=int(config.get('STORE_RETRIES', 1)),
            logger=logger,
        )
    raise RuntimeError(f"Unknown DATA_STORE_BACKEND: {backend}")
