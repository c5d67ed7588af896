# catalog_api/core/__init__.py

from catalog_api.core.normalizers import (
    normalize_text,
    clean_text,
    normalize_alias,
    normalize_header,
)
from catalog_api.core.prices import normalize_number_string, parse_price
from catalog_api.core.ingest import (
    CatalogImportError,
    FileFormatError,
    parse_import_file,
    sanitize_headers,
    is_row_empty,
)
from catalog_api.core.matching import (
    MIN_ALIAS_LENGTH,
    build_alias_index,
    match_import_line,
    match_with_index,
    build_suggested_alias,
)
from catalog_api.core.columns import (
    ColumnMappingError,
    detect_catalog_columns,
    guess_columns,
    validate_mapping,
    extract_legacy_rows,
    select_importable_rows,
)
from catalog_api.core.pipeline import build_import_lines

__all__ = [
    "normalize_text",
    "clean_text",
    "normalize_alias",
    "normalize_header",
    "normalize_number_string",
    "parse_price",
    "CatalogImportError",
    "FileFormatError",
    "parse_import_file",
    "sanitize_headers",
    "is_row_empty",
    "MIN_ALIAS_LENGTH",
    "build_alias_index",
    "match_import_line",
    "match_with_index",
    "build_suggested_alias",
    "ColumnMappingError",
    "detect_catalog_columns",
    "guess_columns",
    "validate_mapping",
    "extract_legacy_rows",
    "select_importable_rows",
    "build_import_lines",
]
