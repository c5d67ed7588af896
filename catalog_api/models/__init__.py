# catalog_api/models/__init__.py

from catalog_api.models.alias import (
    AliasRecord,
    NormalizedAlias,
    MatchReason,
    MatchStatus,
    MatchResult,
)
from catalog_api.models.catalog import (
    ParsedRow,
    ParsedFile,
    ColumnMapping,
    ImportLine,
    ImportBatch,
    LegacyRow,
    LegacyExtraction,
)

__all__ = [
    # Alias
    "AliasRecord",
    "NormalizedAlias",
    "MatchReason",
    "MatchStatus",
    "MatchResult",
    # Catalog
    "ParsedRow",
    "ParsedFile",
    "ColumnMapping",
    "ImportLine",
    "ImportBatch",
    "LegacyRow",
    "LegacyExtraction",
]
