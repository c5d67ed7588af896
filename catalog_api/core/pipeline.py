# catalog_api/core/pipeline.py

"""
Import pipeline.

Turns parsed rows into price-list or catalog lines: pulls the mapped
columns, parses prices, and matches every line against one alias snapshot.
"""

import logging
from collections import Counter
from typing import Iterable

from catalog_api.core.ingest import FileFormatError
from catalog_api.core.matching import (
    AliasInput,
    build_alias_index,
    build_suggested_alias,
    match_with_index,
)
from catalog_api.core.prices import parse_price
from catalog_api.models import ColumnMapping, ImportBatch, ImportLine, ParsedRow

logger = logging.getLogger(__name__)


def _cell(row: ParsedRow, header: str | None) -> str:
    if not header:
        return ""
    return (row.get(header) or "").strip()


def build_import_lines(
    rows: list[ParsedRow],
    mapping: ColumnMapping,
    aliases: Iterable[AliasInput],
    require_positive_price: bool = False,
) -> ImportBatch:
    """
    Build matched import lines from parsed rows.

    Args:
        rows: Rows from parse_import_file
        mapping: Columns holding code, description and price
        aliases: Alias snapshot of the whole catalog
        require_positive_price: Also drop lines whose price is <= 0

    Returns:
        ImportBatch with one line per kept row

    Raises:
        FileFormatError: no row survived
    """
    index = build_alias_index(aliases)
    batch = ImportBatch()
    reasons: Counter = Counter()

    for row in rows:
        raw_description = _cell(row, mapping.description)
        price = parse_price(_cell(row, mapping.price) or "0")

        if not raw_description or (require_positive_price and price <= 0):
            batch.skipped += 1
            continue

        supplier_code = _cell(row, mapping.supplier_code)
        result = match_with_index(supplier_code, raw_description, index)
        reasons[result.reason] += 1

        batch.lines.append(
            ImportLine(
                supplier_code=supplier_code or None,
                raw_description=raw_description,
                price=price,
                item_id=result.item_id,
                match_reason=result.reason,
                match_status=result.status,
                suggested_alias=None if result.is_match else build_suggested_alias(raw_description),
            )
        )

    if not batch.lines:
        raise FileFormatError("No valid rows to import")

    batch.reasons = dict(reasons)
    logger.info(
        "Built %d import lines: %d matched, %d pending, %d skipped",
        batch.total, batch.matched, batch.pending, batch.skipped,
    )
    return batch
