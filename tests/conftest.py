# tests/conftest.py

"""
Shared fixtures: an in-memory catalog store and an API client wired to it.
"""

import itertools
from typing import Optional

import pytest
from fastapi.testclient import TestClient

from catalog_api.database import CatalogStore, chunked
from catalog_api.dependencies import get_store
from catalog_api.main import app
from catalog_api.models import AliasRecord, ImportLine, LegacyRow


class InMemoryCatalogStore(CatalogStore):
    """Catalog store kept in plain lists, for tests."""

    def __init__(self, aliases: Optional[list[AliasRecord]] = None, insert_batch_size: int = 500):
        self.aliases: list[AliasRecord] = list(aliases or [])
        self.documents: list[dict] = []
        self.catalog_versions: list[dict] = []
        self.catalog_lines: list[dict] = []
        self.price_list_versions: list[dict] = []
        self.price_list_lines: list[dict] = []
        self.items: list[dict] = []
        self.insert_calls: list[int] = []
        self._insert_batch_size = insert_batch_size
        self._ids = itertools.count(1)

    def _next_id(self, prefix: str) -> str:
        return f"{prefix}-{next(self._ids)}"

    def _insert(self, target: list[dict], rows: list[dict]) -> int:
        for batch in chunked(rows, self._insert_batch_size):
            self.insert_calls.append(len(batch))
            target.extend(batch)
        return len(rows)

    async def get_aliases(self) -> list[AliasRecord]:
        return list(self.aliases)

    async def get_item_aliases(self, item_id: str) -> list[AliasRecord]:
        return [a for a in self.aliases if a.item_id == item_id]

    async def find_existing_aliases(self, aliases: list[str]) -> list[str]:
        wanted = set(aliases)
        return [a.alias for a in self.aliases if a.alias in wanted]

    async def add_alias(self, item_id: str, alias: str, is_supplier_code: bool = False) -> dict:
        record = AliasRecord(item_id=item_id, alias=alias, is_supplier_code=is_supplier_code)
        self.aliases.append(record)
        return record.model_dump()

    async def upsert_aliases(self, aliases: list[AliasRecord]) -> int:
        known = {(a.item_id, a.alias) for a in self.aliases}
        written = 0
        for alias in aliases:
            if (alias.item_id, alias.alias) not in known:
                self.aliases.append(alias)
                known.add((alias.item_id, alias.alias))
                written += 1
        return written

    async def create_supplier_document(self, supplier_id, title, file_name, file_type, notes=None) -> dict:
        document = {
            "id": self._next_id("doc"),
            "supplier_id": supplier_id,
            "title": title,
            "file_name": file_name,
            "file_type": file_type,
            "notes": notes,
        }
        self.documents.append(document)
        return document

    async def create_catalog_version(self, document_id: str, note: str) -> dict:
        version = {"id": self._next_id("cv"), "supplier_document_id": document_id, "note": note}
        self.catalog_versions.append(version)
        return version

    async def insert_catalog_lines(self, version_id: str, lines: list[ImportLine]) -> int:
        rows = [
            {"supplier_catalog_version_id": version_id, **line.model_dump()}
            for line in lines
        ]
        return self._insert(self.catalog_lines, rows)

    async def create_price_list_version(self, price_list_id: str, notes: Optional[str] = None) -> dict:
        version = {"id": self._next_id("plv"), "price_list_id": price_list_id, "notes": notes}
        self.price_list_versions.append(version)
        return version

    async def insert_price_list_lines(self, version_id: str, lines: list[ImportLine]) -> int:
        rows = [
            {"id": self._next_id("line"), "version_id": version_id, **line.model_dump()}
            for line in lines
        ]
        return self._insert(self.price_list_lines, rows)

    async def list_pending_lines(self, search: Optional[str] = None, limit: int = 200) -> list[dict]:
        lines = [line for line in reversed(self.price_list_lines) if line["match_status"] == "PENDING"]
        if search:
            lines = [line for line in lines if search.lower() in line["raw_description"].lower()]
        return lines[:limit]

    async def get_price_list_line(self, line_id: str) -> Optional[dict]:
        return next((line for line in self.price_list_lines if line["id"] == line_id), None)

    async def assign_line(self, line_id: str, item_id: str) -> Optional[dict]:
        line = await self.get_price_list_line(line_id)
        if line is None:
            return None
        line.update(item_id=item_id, match_status="MATCHED")
        return line

    async def create_items(self, rows: list[LegacyRow]) -> list[dict]:
        created = [
            {
                "id": self._next_id("item"),
                "name": row.articulo,
                "unit": row.medida or "un",
                "category": row.rubro or None,
                "brand": row.marca or None,
                "cost": row.costo_num,
            }
            for row in rows
        ]
        self.items.extend(created)
        return created


# ============================================
# Fixtures
# ============================================

@pytest.fixture
def aliases():
    """Alias snapshot shared by matcher and API tests."""
    return [
        AliasRecord(item_id="item-1", alias="ABC-123", is_supplier_code=True),
        AliasRecord(item_id="item-1", alias="válvula esférica", is_supplier_code=False),
        AliasRecord(item_id="item-2", alias="valvula", is_supplier_code=False),
        AliasRecord(item_id="item-3", alias="tv", is_supplier_code=False),
    ]


@pytest.fixture
def store(aliases):
    return InMemoryCatalogStore(aliases)


@pytest.fixture
def client(store):
    app.dependency_overrides[get_store] = lambda: store
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
