# catalog_api/database.py

"""
Catalog store.

Reads the alias snapshot and persists import results. The engine in
catalog_api.core never talks to the store; routers hand it plain data.
"""

import logging
from abc import ABC, abstractmethod
from typing import Iterator, Optional, Sequence, TypeVar

from fastapi.concurrency import run_in_threadpool
from supabase import create_client, Client

from catalog_api.config import get_settings
from catalog_api.models import AliasRecord, ImportLine, LegacyRow

logger = logging.getLogger(__name__)

T = TypeVar("T")


def chunked(items: Sequence[T], size: int) -> Iterator[Sequence[T]]:
    """Yield consecutive slices of at most `size` items."""
    if size < 1:
        raise ValueError("Chunk size must be positive")
    for start in range(0, len(items), size):
        yield items[start:start + size]


class StoreError(Exception):
    """The catalog store rejected or failed a request."""


class CatalogStore(ABC):
    """
    Abstract interface for catalog persistence.

    Implementations own the schema; routers only see these calls.
    """

    # Aliases

    @abstractmethod
    async def get_aliases(self) -> list[AliasRecord]:
        """Full alias snapshot of the catalog."""

    @abstractmethod
    async def get_item_aliases(self, item_id: str) -> list[AliasRecord]:
        """Aliases of one item."""

    @abstractmethod
    async def find_existing_aliases(self, aliases: list[str]) -> list[str]:
        """Which of the given alias texts are already stored."""

    @abstractmethod
    async def add_alias(self, item_id: str, alias: str, is_supplier_code: bool = False) -> dict:
        """Register one alias for an item."""

    @abstractmethod
    async def upsert_aliases(self, aliases: list[AliasRecord]) -> int:
        """Register aliases, ignoring ones the item already has."""

    # Supplier catalogs

    @abstractmethod
    async def create_supplier_document(
        self,
        supplier_id: str,
        title: str,
        file_name: str,
        file_type: str,
        notes: Optional[str] = None,
    ) -> dict:
        """Record an uploaded supplier document."""

    @abstractmethod
    async def create_catalog_version(self, document_id: str, note: str) -> dict:
        """Open a new catalog version for a document."""

    @abstractmethod
    async def insert_catalog_lines(self, version_id: str, lines: list[ImportLine]) -> int:
        """Store catalog lines, returns how many were written."""

    # Price lists

    @abstractmethod
    async def create_price_list_version(self, price_list_id: str, notes: Optional[str] = None) -> dict:
        """Open a new price-list version."""

    @abstractmethod
    async def insert_price_list_lines(self, version_id: str, lines: list[ImportLine]) -> int:
        """Store price-list lines, returns how many were written."""

    # Pending lines

    @abstractmethod
    async def list_pending_lines(self, search: Optional[str] = None, limit: int = 200) -> list[dict]:
        """Price-list lines awaiting a manual match, newest first."""

    @abstractmethod
    async def get_price_list_line(self, line_id: str) -> Optional[dict]:
        """A single price-list line."""

    @abstractmethod
    async def assign_line(self, line_id: str, item_id: str) -> Optional[dict]:
        """Link a line to an item and mark it MATCHED."""

    # Legacy catalog

    @abstractmethod
    async def create_items(self, rows: list[LegacyRow]) -> list[dict]:
        """Create one item per legacy row, in order."""


class SupabaseCatalogStore(CatalogStore):
    """Catalog store backed by Supabase tables."""

    def __init__(self, client: Client, insert_batch_size: int = 500, lookup_batch_size: int = 300):
        self._client = client
        self._insert_batch_size = insert_batch_size
        self._lookup_batch_size = lookup_batch_size

    def _table(self, name: str):
        return self._client.table(name)

    @staticmethod
    async def _execute(query, action: str) -> list[dict]:
        # The Supabase client is synchronous; keep it off the event loop
        try:
            response = await run_in_threadpool(query.execute)
        except Exception as e:
            raise StoreError(f"{action} failed: {e}") from e
        return response.data or []

    async def _insert_one(self, table: str, data: dict) -> Optional[dict]:
        rows = await self._execute(self._table(table).insert(data), f"Insert into {table}")
        return rows[0] if rows else None

    async def _insert_batches(self, table: str, payload: list[dict]) -> int:
        written = 0
        for batch in chunked(payload, self._insert_batch_size):
            written += len(await self._execute(self._table(table).insert(list(batch)), f"Insert into {table}"))
        logger.info("Inserted %d rows into %s", written, table)
        return written

    # ============================================
    # Aliases
    # ============================================

    async def get_aliases(self) -> list[AliasRecord]:
        query = self._table("item_aliases").select("item_id, alias, is_supplier_code")
        return [AliasRecord.model_validate(row) for row in await self._execute(query, "Alias snapshot")]

    async def get_item_aliases(self, item_id: str) -> list[AliasRecord]:
        query = (
            self._table("item_aliases")
            .select("item_id, alias, is_supplier_code")
            .eq("item_id", item_id)
        )
        return [AliasRecord.model_validate(row) for row in await self._execute(query, "Item aliases")]

    async def find_existing_aliases(self, aliases: list[str]) -> list[str]:
        existing = []
        for chunk in chunked(aliases, self._lookup_batch_size):
            query = self._table("item_aliases").select("alias").in_("alias", list(chunk))
            rows = await self._execute(query, "Alias lookup")
            existing.extend(row["alias"] for row in rows)
        return existing

    async def add_alias(self, item_id: str, alias: str, is_supplier_code: bool = False) -> dict:
        data = {"item_id": item_id, "alias": alias, "is_supplier_code": is_supplier_code}
        return await self._insert_one("item_aliases", data)

    async def upsert_aliases(self, aliases: list[AliasRecord]) -> int:
        written = 0
        for batch in chunked(aliases, self._insert_batch_size):
            query = self._table("item_aliases").upsert(
                [a.model_dump() for a in batch],
                on_conflict="item_id,alias",
                ignore_duplicates=True,
            )
            written += len(await self._execute(query, "Alias upsert"))
        return written

    # ============================================
    # Supplier catalogs
    # ============================================

    async def create_supplier_document(
        self,
        supplier_id: str,
        title: str,
        file_name: str,
        file_type: str,
        notes: Optional[str] = None,
    ) -> dict:
        data = {
            "supplier_id": supplier_id,
            "title": title,
            "file_name": file_name,
            "file_type": file_type,
            "notes": notes,
        }
        return await self._insert_one("supplier_documents", data)

    async def create_catalog_version(self, document_id: str, note: str) -> dict:
        data = {"supplier_document_id": document_id, "note": note}
        return await self._insert_one("supplier_catalog_versions", data)

    async def insert_catalog_lines(self, version_id: str, lines: list[ImportLine]) -> int:
        payload = [
            {
                "supplier_catalog_version_id": version_id,
                "supplier_code": line.supplier_code,
                "raw_description": line.raw_description,
                "cost": line.price,
                "matched_item_id": line.item_id,
                "match_status": line.match_status,
            }
            for line in lines
        ]
        return await self._insert_batches("supplier_catalog_lines", payload)

    # ============================================
    # Price lists
    # ============================================

    async def create_price_list_version(self, price_list_id: str, notes: Optional[str] = None) -> dict:
        data = {"price_list_id": price_list_id, "notes": notes}
        return await self._insert_one("price_list_versions", data)

    async def insert_price_list_lines(self, version_id: str, lines: list[ImportLine]) -> int:
        payload = [
            {
                "version_id": version_id,
                "supplier_code": line.supplier_code,
                "raw_description": line.raw_description,
                "price": line.price,
                "item_id": line.item_id,
                "match_status": line.match_status,
            }
            for line in lines
        ]
        return await self._insert_batches("price_list_lines", payload)

    # ============================================
    # Pending lines
    # ============================================

    async def list_pending_lines(self, search: Optional[str] = None, limit: int = 200) -> list[dict]:
        query = (
            self._table("price_list_lines")
            .select("*, price_list_versions(version_date, price_lists(name, suppliers(name)))")
            .eq("match_status", "PENDING")
        )
        if search:
            query = query.ilike("raw_description", f"%{search}%")

        return await self._execute(query.order("created_at", desc=True).limit(limit), "Pending lines")

    async def get_price_list_line(self, line_id: str) -> Optional[dict]:
        query = self._table("price_list_lines").select("*").eq("id", line_id)
        rows = await self._execute(query, "Price list line")
        return rows[0] if rows else None

    async def assign_line(self, line_id: str, item_id: str) -> Optional[dict]:
        query = (
            self._table("price_list_lines")
            .update({"item_id": item_id, "match_status": "MATCHED"})
            .eq("id", line_id)
        )
        rows = await self._execute(query, "Line assignment")
        return rows[0] if rows else None

    # ============================================
    # Legacy catalog
    # ============================================

    async def create_items(self, rows: list[LegacyRow]) -> list[dict]:
        created = []
        for batch in chunked(rows, self._lookup_batch_size):
            payload = [
                {
                    "name": row.articulo,
                    "unit": row.medida or "un",
                    "category": row.rubro or None,
                    "brand": row.marca or None,
                    "cost": row.costo_num,
                    "is_active": True,
                }
                for row in batch
            ]
            created.extend(await self._execute(self._table("items").insert(payload), "Insert into items"))
        return created


def create_store() -> SupabaseCatalogStore:
    """Build the Supabase store from settings."""
    settings = get_settings()
    if not settings.supabase_url or not settings.supabase_service_role_key:
        raise StoreError("Supabase is not configured (SUPABASE_URL / SUPABASE_SERVICE_ROLE_KEY)")

    client = create_client(settings.supabase_url, settings.supabase_service_role_key)
    return SupabaseCatalogStore(
        client,
        insert_batch_size=settings.insert_batch_size,
        lookup_batch_size=settings.lookup_batch_size,
    )
