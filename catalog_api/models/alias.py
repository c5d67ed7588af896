# catalog_api/models/alias.py

from typing import Optional, Literal
from pydantic import BaseModel, model_validator


# ============================================
# Aliases
# ============================================

class AliasRecord(BaseModel):
    """A known synonym or supplier code for a catalog item."""

    item_id: str
    alias: str
    is_supplier_code: bool = False

    class Config:
        from_attributes = True


class NormalizedAlias(AliasRecord):
    """AliasRecord annotated with its matching form. Built per match call."""

    normalized_alias: str


# ============================================
# Match Result
# ============================================

MatchReason = Literal["SUPPLIER_CODE", "ALIAS_TOKEN", "ALIAS_CONTAINS", "NONE"]

MatchStatus = Literal["MATCHED", "PENDING"]


class MatchResult(BaseModel):
    """
    Outcome of matching one imported line.

    reason "NONE" never carries an item_id; every other reason always does.
    """

    item_id: Optional[str] = None
    reason: MatchReason = "NONE"

    class Config:
        frozen = True

    @model_validator(mode="after")
    def _check_item_matches_reason(self) -> "MatchResult":
        if self.reason == "NONE" and self.item_id is not None:
            raise ValueError("reason NONE cannot carry an item_id")
        if self.reason != "NONE" and self.item_id is None:
            raise ValueError(f"reason {self.reason} requires an item_id")
        return self

    @classmethod
    def unmatched(cls) -> "MatchResult":
        return cls(item_id=None, reason="NONE")

    @property
    def is_match(self) -> bool:
        return self.reason != "NONE"

    @property
    def status(self) -> MatchStatus:
        return "MATCHED" if self.is_match else "PENDING"
