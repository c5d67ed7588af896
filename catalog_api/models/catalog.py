# catalog_api/models/catalog.py

from typing import Optional
from pydantic import BaseModel, Field

from catalog_api.models.alias import MatchReason, MatchStatus


# ============================================
# Parsed Files
# ============================================

ParsedRow = dict[str, str]


class ParsedFile(BaseModel):
    """Headers and non-blank rows of an uploaded file."""

    headers: list[str]
    rows: list[ParsedRow] = Field(default_factory=list)


class ColumnMapping(BaseModel):
    """Which headers hold the code, description and price of each line."""

    supplier_code: Optional[str] = None
    description: str
    price: str


# ============================================
# Import Lines
# ============================================

class ImportLine(BaseModel):
    """A parsed, matched line ready to be stored."""

    supplier_code: Optional[str] = None
    raw_description: str
    price: float = 0.0
    item_id: Optional[str] = None
    match_reason: MatchReason = "NONE"
    match_status: MatchStatus = "PENDING"
    suggested_alias: Optional[str] = None


class ImportBatch(BaseModel):
    """All lines of one import plus counts."""

    lines: list[ImportLine] = Field(default_factory=list)
    skipped: int = 0
    reasons: dict[str, int] = Field(default_factory=dict)

    @property
    def total(self) -> int:
        return len(self.lines)

    @property
    def matched(self) -> int:
        return sum(1 for line in self.lines if line.match_status == "MATCHED")

    @property
    def pending(self) -> int:
        return self.total - self.matched

    def summary(self) -> dict:
        return {
            "total": self.total,
            "matched": self.matched,
            "pending": self.pending,
            "skipped": self.skipped,
            "reasons": dict(self.reasons),
        }


# ============================================
# Legacy Catalog
# ============================================

class LegacyRow(BaseModel):
    """One item row of a legacy catalog export."""

    id: str
    codigo: str
    articulo: str
    medida: str = ""
    rubro: str = ""
    marca: str = ""
    costo_num: float = 0.0


class LegacyExtraction(BaseModel):
    """Rows extracted from a legacy catalog file."""

    rows: list[LegacyRow] = Field(default_factory=list)
    skipped_empty_name: int = 0
