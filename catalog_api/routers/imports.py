# catalog_api/routers/imports.py

"""
Import routes.

Upload supplier price lists and catalogs, match every line against the
alias snapshot, and store the result.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from pydantic import BaseModel

from catalog_api.config import Settings, get_settings
from catalog_api.core.columns import detect_catalog_columns, guess_columns, validate_mapping
from catalog_api.core.ingest import SPREADSHEET_EXTENSIONS, TEXT_EXTENSIONS, file_extension, parse_import_file
from catalog_api.core.pipeline import build_import_lines
from catalog_api.core.prices import parse_price
from catalog_api.database import CatalogStore
from catalog_api.dependencies import get_store
from catalog_api.models import ColumnMapping, ParsedFile

logger = logging.getLogger(__name__)
router = APIRouter()

SUPPORTED_EXTENSIONS = TEXT_EXTENSIONS + SPREADSHEET_EXTENSIONS


class ImportResponse(BaseModel):
    success: bool
    version_id: Optional[str] = None
    total: int
    matched: int
    pending: int
    skipped: int
    reasons: dict


class PreviewResponse(BaseModel):
    success: bool
    headers: list[str]
    valid_rows: int
    columns: dict
    preview: list[dict]


# ============================================
# Upload helpers
# ============================================

def file_type_for(filename: str) -> str:
    """Document type stored for an upload ("csv" or "xlsx")."""
    extension = file_extension(filename)
    if extension not in SUPPORTED_EXTENSIONS:
        raise HTTPException(
            status_code=415,
            detail=f"Unsupported file format. Use one of: {', '.join(SUPPORTED_EXTENSIONS)}",
        )
    return "xlsx" if extension in SPREADSHEET_EXTENSIONS else "csv"


async def read_upload(file: UploadFile, settings: Settings) -> tuple[bytes, str]:
    """Read an upload, enforcing format and size limits."""
    filename = file.filename or ""
    file_type = file_type_for(filename)

    # One byte past the limit is enough to reject the upload
    content = await file.read(settings.max_upload_bytes + 1)
    if len(content) > settings.max_upload_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"File exceeds {settings.max_upload_bytes} bytes",
        )
    return content, file_type


async def read_and_parse(file: UploadFile, settings: Settings) -> ParsedFile:
    content, _ = await read_upload(file, settings)
    return parse_import_file(content, file.filename or "")


# ============================================
# Price list imports
# ============================================

@router.post("/price-lists/{price_list_id}/imports/preview", response_model=PreviewResponse)
async def preview_price_list_import(
    price_list_id: str,
    file: UploadFile = File(...),
    settings: Settings = Depends(get_settings),
):
    """
    Parse an upload and show what would be imported.

    Returns headers, column guesses and the first rows with parsed prices.
    Nothing is stored.
    """
    parsed = await read_and_parse(file, settings)
    columns = guess_columns(parsed.headers)

    preview = [
        {
            "supplier_code": row.get(columns["supplier_code"], "") if columns["supplier_code"] else "",
            "raw_description": row.get(columns["description"], "") if columns["description"] else "",
            "price": parse_price(row.get(columns["price"], "0")) if columns["price"] else 0.0,
        }
        for row in parsed.rows[:settings.preview_rows]
    ]

    return PreviewResponse(
        success=True,
        headers=parsed.headers,
        valid_rows=len(parsed.rows),
        columns=columns,
        preview=preview,
    )


@router.post("/price-lists/{price_list_id}/imports", response_model=ImportResponse)
async def import_price_list(
    price_list_id: str,
    file: UploadFile = File(...),
    description_column: str = Form(...),
    price_column: str = Form(...),
    supplier_code_column: Optional[str] = Form(None),
    notes: Optional[str] = Form(None),
    store: CatalogStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    """
    Import a price list with an explicit column mapping.

    1. Parses the file
    2. Validates the mapping against its headers
    3. Matches every line against the alias snapshot
    4. Creates a price-list version and stores its lines in batches
    """
    parsed = await read_and_parse(file, settings)
    mapping = validate_mapping(
        ColumnMapping(
            supplier_code=supplier_code_column or None,
            description=description_column,
            price=price_column,
        ),
        parsed.headers,
    )

    aliases = await store.get_aliases()
    batch = build_import_lines(parsed.rows, mapping, aliases)

    version = await store.create_price_list_version(price_list_id, notes or None)
    await store.insert_price_list_lines(version["id"], batch.lines)

    logger.info(
        "Price list %s imported: %d lines, %d matched",
        price_list_id, batch.total, batch.matched,
    )
    return ImportResponse(success=True, version_id=version["id"], **batch.summary())


# ============================================
# Supplier catalog uploads
# ============================================

@router.post("/suppliers/{supplier_id}/catalog", response_model=ImportResponse)
async def upload_supplier_catalog(
    supplier_id: str,
    file: UploadFile = File(...),
    title: Optional[str] = Form(None),
    notes: Optional[str] = Form(None),
    store: CatalogStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    """
    Upload a supplier catalog.

    Columns are detected from the headers; lines without a description
    or with a non-positive cost are skipped.
    """
    filename = file.filename or ""
    content, file_type = await read_upload(file, settings)

    document = await store.create_supplier_document(
        supplier_id=supplier_id,
        title=(title or "").strip() or filename,
        file_name=filename,
        file_type=file_type,
        notes=(notes or "").strip() or None,
    )

    parsed = parse_import_file(content, filename)
    mapping = detect_catalog_columns(parsed.headers)

    aliases = await store.get_aliases()
    batch = build_import_lines(parsed.rows, mapping, aliases, require_positive_price=True)

    version = await store.create_catalog_version(document["id"], "Automatic import")
    await store.insert_catalog_lines(version["id"], batch.lines)

    logger.info(
        "Supplier %s catalog imported: %d lines, %d matched",
        supplier_id, batch.total, batch.matched,
    )
    return ImportResponse(success=True, version_id=version["id"], **batch.summary())
