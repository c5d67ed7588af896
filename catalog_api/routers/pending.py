# catalog_api/routers/pending.py

"""
Pending line routes.

Lines the matcher could not resolve wait here until someone links them
to an item. Linking also registers an alias so the next import of the
same description matches on its own.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from catalog_api.config import Settings, get_settings
from catalog_api.core.matching import build_suggested_alias
from catalog_api.core.normalizers import clean_text, normalize_alias
from catalog_api.database import CatalogStore
from catalog_api.dependencies import get_store

logger = logging.getLogger(__name__)
router = APIRouter()


class AssignRequest(BaseModel):
    item_id: str
    alias: Optional[str] = None


# ============================================
# List Pending Lines
# ============================================

@router.get("")
async def list_pending(
    search: Optional[str] = Query(None, description="Filter by description"),
    limit: Optional[int] = Query(None, ge=1),
    store: CatalogStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    """
    List pending price-list lines, newest first.

    Each line comes with a suggested alias for the assign dialog.
    """
    limit = min(limit or settings.pending_limit, settings.pending_limit)
    lines = await store.list_pending_lines(search=(search or "").strip() or None, limit=limit)

    return {
        "success": True,
        "lines": [
            {**line, "suggested_alias": build_suggested_alias(line.get("raw_description"))}
            for line in lines
        ],
        "count": len(lines),
    }


# ============================================
# Assign Item
# ============================================

@router.post("/{line_id}/assign")
async def assign_pending_line(
    line_id: str,
    request: AssignRequest,
    store: CatalogStore = Depends(get_store),
):
    """
    Link a pending line to an item and register an alias for it.

    The alias defaults to the line's suggested alias. It is not added
    again when the item already has the same alias.
    """
    line = await store.get_price_list_line(line_id)
    if not line:
        raise HTTPException(status_code=404, detail="Line not found")

    raw_description = line.get("raw_description")
    alias = (
        clean_text(request.alias)
        or build_suggested_alias(raw_description)
        or clean_text(raw_description)
    )

    updated = await store.assign_line(line_id, request.item_id)

    alias_created = False
    if alias:
        known = {normalize_alias(a.alias) for a in await store.get_item_aliases(request.item_id)}
        if normalize_alias(alias) not in known:
            await store.add_alias(request.item_id, alias, is_supplier_code=False)
            alias_created = True

    logger.info(
        "Line %s assigned to item %s (alias %r, created=%s)",
        line_id, request.item_id, alias, alias_created,
    )
    return {
        "success": True,
        "line": updated or {**line, "item_id": request.item_id, "match_status": "MATCHED"},
        "alias": alias,
        "alias_created": alias_created,
    }
