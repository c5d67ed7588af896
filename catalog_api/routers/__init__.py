# catalog_api/routers/__init__.py

from catalog_api.routers import health
from catalog_api.routers import imports
from catalog_api.routers import pending
from catalog_api.routers import legacy

__all__ = ["health", "imports", "pending", "legacy"]
