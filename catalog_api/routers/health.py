# catalog_api/routers/health.py

from fastapi import APIRouter, Depends

from catalog_api.database import CatalogStore
from catalog_api.dependencies import get_store

router = APIRouter()


@router.get("/health")
async def health_check():
    """Liveness probe, never touches the store."""
    return {"status": "healthy", "service": "catalog-api"}


@router.get("/ready")
async def readiness_check(store: CatalogStore = Depends(get_store)):
    """
    Readiness probe.

    Loads the alias snapshot; a store failure surfaces as 502 through the
    app's StoreError handler.
    """
    aliases = await store.get_aliases()
    return {
        "status": "ready",
        "checks": {"store": "ok"},
        "aliases": len(aliases),
    }
