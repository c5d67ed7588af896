# catalog_api/routers/legacy.py

"""
Legacy catalog routes.

One-off import of the old catalog export (Codigo, Articulo, Rubro,
Costo_num...). Each new row becomes an item with its code registered as
a supplier-code alias.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile

from catalog_api.config import Settings, get_settings
from catalog_api.core.columns import extract_legacy_rows, select_importable_rows
from catalog_api.core.normalizers import normalize_alias
from catalog_api.database import CatalogStore
from catalog_api.dependencies import get_store
from catalog_api.models import AliasRecord
from catalog_api.routers.imports import read_and_parse

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/preview")
async def preview_legacy_catalog(
    file: UploadFile = File(...),
    settings: Settings = Depends(get_settings),
):
    """Extract legacy rows without storing anything."""
    parsed = await read_and_parse(file, settings)
    extraction = extract_legacy_rows(parsed.headers, parsed.rows)

    return {
        "success": True,
        "rows": [row.model_dump() for row in extraction.rows],
        "count": len(extraction.rows),
        "skipped_empty_name": extraction.skipped_empty_name,
        "rubros": sorted({row.rubro for row in extraction.rows if row.rubro}),
    }


@router.post("/import")
async def import_legacy_catalog(
    file: UploadFile = File(...),
    selected_ids: Optional[list[str]] = Form(None),
    store: CatalogStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    """
    Create items from a legacy catalog export.

    Rows whose code already exists as an alias, or repeats an earlier
    row, are skipped. When selected_ids is given only those rows count.
    """
    parsed = await read_and_parse(file, settings)
    extraction = extract_legacy_rows(parsed.headers, parsed.rows)

    rows = extraction.rows
    if selected_ids:
        wanted = set(selected_ids)
        rows = [row for row in rows if row.id in wanted]

    if not rows:
        raise HTTPException(status_code=422, detail="Select at least one row to import")

    codes = sorted({row.codigo for row in rows} | {normalize_alias(row.codigo) for row in rows})
    existing = await store.find_existing_aliases(codes)
    importable = select_importable_rows(rows, existing)

    items = await store.create_items(importable)
    aliases = [
        AliasRecord(item_id=item["id"], alias=row.codigo, is_supplier_code=True)
        for item, row in zip(items, importable)
        if row.codigo
    ]
    if aliases:
        await store.upsert_aliases(aliases)

    logger.info(
        "Legacy catalog: %d selected, %d skipped, %d created",
        len(rows), len(rows) - len(importable), len(aliases),
    )
    return {
        "success": True,
        "selected": len(rows),
        "skipped": len(rows) - len(importable),
        "created": len(aliases),
    }
