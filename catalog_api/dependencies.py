# catalog_api/dependencies.py

"""
Store dependency for FastAPI.

Routers depend on get_store(); tests override it with an in-memory store.
"""

from functools import lru_cache

from catalog_api.database import CatalogStore, create_store


@lru_cache()
def _default_store() -> CatalogStore:
    return create_store()


def get_store() -> CatalogStore:
    """
    Return the process-wide catalog store.

    Created on first use so the app can start (and be tested) without
    Supabase credentials.
    """
    return _default_store()
