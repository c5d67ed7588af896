# catalog_api/core/columns.py

"""
Column detection for supplier files.

Supplier catalogs and legacy exports name their columns in many ways
("Código", "cod", "SKU"...). These helpers find the columns we need or
fail with a ColumnMappingError naming what is missing.
"""

from typing import Iterable, Optional

from catalog_api.core.ingest import CatalogImportError
from catalog_api.core.normalizers import clean_text, normalize_alias, normalize_header
from catalog_api.core.prices import parse_price
from catalog_api.models import (
    ColumnMapping,
    LegacyExtraction,
    LegacyRow,
    ParsedRow,
)


class ColumnMappingError(CatalogImportError):
    """Required columns are missing or a mapping names an unknown header."""


# First candidate present wins
CODE_CANDIDATES = ("codigo", "código", "cod", "sku", "item", "supplier_code")
DESCRIPTION_CANDIDATES = (
    "descripcion",
    "descripción",
    "description",
    "detalle",
    "producto",
    "articulo",
    "artículo",
)
PRICE_CANDIDATES = ("costo", "cost", "precio", "price", "importe")


def find_header(headers: Iterable[str], *candidates: str) -> Optional[str]:
    """Return the original header matching the first candidate (case-insensitive)."""
    lower_map: dict[str, str] = {}
    for header in headers:
        # Later duplicates overwrite earlier ones
        lower_map[header.lower()] = header

    for candidate in candidates:
        if candidate in lower_map:
            return lower_map[candidate]
    return None


def detect_catalog_columns(headers: list[str]) -> ColumnMapping:
    """
    Guess code, description and price columns of a supplier catalog.

    Raises:
        ColumnMappingError: description or price column not found
    """
    description = find_header(headers, *DESCRIPTION_CANDIDATES)
    price = find_header(headers, *PRICE_CANDIDATES)

    if not description or not price:
        raise ColumnMappingError("Could not detect description/cost columns in the file")

    return ColumnMapping(
        supplier_code=find_header(headers, *CODE_CANDIDATES),
        description=description,
        price=price,
    )


def guess_columns(headers: list[str]) -> dict[str, Optional[str]]:
    """Best-effort guesses for a manual mapping screen. Never raises."""
    return {
        "supplier_code": find_header(headers, *CODE_CANDIDATES),
        "description": find_header(headers, *DESCRIPTION_CANDIDATES),
        "price": find_header(headers, *PRICE_CANDIDATES),
    }


def validate_mapping(mapping: ColumnMapping, headers: list[str]) -> ColumnMapping:
    """
    Check that a user-supplied mapping only names existing headers.

    An empty supplier_code column means "not mapped".
    """
    known = set(headers)
    missing = [
        name for name in (mapping.description, mapping.price)
        if name not in known
    ]
    if mapping.supplier_code and mapping.supplier_code not in known:
        missing.append(mapping.supplier_code)

    if missing:
        raise ColumnMappingError(f"Unknown columns in mapping: {missing}")

    if not mapping.supplier_code:
        return mapping.model_copy(update={"supplier_code": None})
    return mapping


# ============================================
# Legacy catalog
# ============================================

def extract_legacy_rows(headers: list[str], rows: list[ParsedRow]) -> LegacyExtraction:
    """
    Extract item rows from a legacy catalog export.

    Required columns (after normalize_header): codigo, articulo, rubro and
    costonum or costo. medida and marca are optional.

    Rows without articulo are skipped and counted. Rows without codigo
    are skipped silently.
    """
    header_map = {normalize_header(h): h for h in headers}

    codigo_key = header_map.get("codigo")
    articulo_key = header_map.get("articulo")
    medida_key = header_map.get("medida")
    rubro_key = header_map.get("rubro")
    marca_key = header_map.get("marca")
    costo_key = header_map.get("costonum") or header_map.get("costo")

    if not codigo_key or not articulo_key or not rubro_key or not costo_key:
        raise ColumnMappingError(
            "Missing required columns: Codigo, Articulo, Rubro and Costo_num (or Costo)"
        )

    extraction = LegacyExtraction()

    for index, row in enumerate(rows):
        codigo = clean_text(row.get(codigo_key))
        articulo = clean_text(row.get(articulo_key))

        if not articulo:
            extraction.skipped_empty_name += 1
            continue
        if not codigo:
            continue

        extraction.rows.append(
            LegacyRow(
                id=f"{index}-{codigo}",
                codigo=codigo,
                articulo=articulo,
                medida=clean_text(row.get(medida_key)) if medida_key else "",
                rubro=clean_text(row.get(rubro_key)),
                marca=clean_text(row.get(marca_key)) if marca_key else "",
                costo_num=parse_price(row.get(costo_key, "")),
            )
        )

    return extraction


def select_importable_rows(
    rows: list[LegacyRow],
    existing_codes: Iterable[str],
) -> list[LegacyRow]:
    """
    Drop rows whose code is blank, already stored, or repeated in the batch.

    Codes are compared by normalize_alias, so "COD 001" and "cod  001" clash.
    """
    existing = {normalize_alias(code) for code in existing_codes}
    seen: set[str] = set()
    importable = []

    for row in rows:
        key = normalize_alias(row.codigo)
        if not key or key in existing or key in seen:
            continue
        seen.add(key)
        importable.append(row)

    return importable
