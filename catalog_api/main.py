# catalog_api/main.py

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from catalog_api.config import get_settings
from catalog_api.core.ingest import CatalogImportError
from catalog_api.database import StoreError
from catalog_api.routers import health, imports, pending, legacy

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s - %(message)s",
)
logger = logging.getLogger(__name__)

# ============================================
# Create FastAPI app
# ============================================

app = FastAPI(
    title=settings.app_name,
    description="Supplier price list import and catalog matching",
    version="1.0.0",
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)

# ============================================
# CORS middleware
# ============================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        settings.frontend_url,
        "http://localhost:5173",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ============================================
# Error handlers
# ============================================

@app.exception_handler(CatalogImportError)
async def import_error_handler(request: Request, exc: CatalogImportError):
    logger.warning("Import rejected on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    logger.error("Store failure on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=502, content={"detail": "Catalog store unavailable"})

# ============================================
# Include routers
# ============================================

app.include_router(health.router, tags=["Health"])
app.include_router(imports.router, tags=["Imports"])
app.include_router(pending.router, prefix="/pending", tags=["Pending"])
app.include_router(legacy.router, prefix="/legacy-catalog", tags=["Legacy Catalog"])

# ============================================
# Root endpoint
# ============================================

@app.get("/")
async def root():
    return {
        "name": settings.app_name,
        "version": "1.0.0",
        "status": "running",
        "docs": "/docs" if settings.debug else None,
    }
