# tests/test_columns.py

"""
Tests for column detection and legacy catalog extraction.
"""

import pytest

from catalog_api.core.columns import (
    ColumnMappingError,
    detect_catalog_columns,
    extract_legacy_rows,
    find_header,
    guess_columns,
    select_importable_rows,
    validate_mapping,
)
from catalog_api.core.ingest import CatalogImportError
from catalog_api.models import ColumnMapping, LegacyRow


# ============================================
# Supplier catalog columns
# ============================================

class TestFindHeader:

    def test_case_insensitive_returns_original(self):
        assert find_header(["SKU", "Precio"], "precio") == "Precio"

    def test_first_candidate_wins(self):
        assert find_header(["price", "costo"], "costo", "price") == "costo"

    def test_later_duplicate_wins(self):
        assert find_header(["Precio", "PRECIO"], "precio") == "PRECIO"

    def test_not_found(self):
        assert find_header(["a", "b"], "precio") is None


class TestDetectCatalogColumns:

    def test_spanish_headers(self):
        mapping = detect_catalog_columns(["Código", "Descripción", "Costo"])

        assert mapping == ColumnMapping(supplier_code="Código", description="Descripción", price="Costo")

    def test_code_optional(self):
        mapping = detect_catalog_columns(["detalle", "importe"])

        assert mapping.supplier_code is None
        assert mapping.description == "detalle"
        assert mapping.price == "importe"

    def test_cost_preferred_over_price(self):
        assert detect_catalog_columns(["producto", "precio", "costo"]).price == "costo"

    @pytest.mark.parametrize("headers", [["sku", "precio"], ["sku", "descripcion"], []])
    def test_missing_required(self, headers):
        with pytest.raises(ColumnMappingError):
            detect_catalog_columns(headers)

    def test_error_is_import_error(self):
        with pytest.raises(CatalogImportError):
            detect_catalog_columns(["x"])

    def test_guess_never_raises(self):
        assert guess_columns(["x"]) == {"supplier_code": None, "description": None, "price": None}


class TestValidateMapping:

    def test_valid(self):
        mapping = ColumnMapping(supplier_code="sku", description="desc", price="pvp")
        assert validate_mapping(mapping, ["sku", "desc", "pvp"]) == mapping

    def test_blank_code_becomes_none(self):
        mapping = ColumnMapping(supplier_code="", description="desc", price="pvp")
        assert validate_mapping(mapping, ["desc", "pvp"]).supplier_code is None

    def test_unknown_header(self):
        mapping = ColumnMapping(description="desc", price="precio")
        with pytest.raises(ColumnMappingError, match="precio"):
            validate_mapping(mapping, ["desc", "pvp"])

    def test_unknown_code_header(self):
        mapping = ColumnMapping(supplier_code="sku", description="desc", price="pvp")
        with pytest.raises(ColumnMappingError):
            validate_mapping(mapping, ["desc", "pvp"])


# ============================================
# Legacy catalog
# ============================================

LEGACY_HEADERS = ["Código", "Artículo", "Medida", "Rubro", "Marca", "Costo_num"]


class TestExtractLegacyRows:

    def test_extracts_rows(self):
        rows = [
            {"Código": "A-1", "Artículo": "Caño  PVC", "Medida": "m", "Rubro": "Sanitarios",
             "Marca": "Tigre", "Costo_num": "1.234,50"},
        ]
        extraction = extract_legacy_rows(LEGACY_HEADERS, rows)

        assert extraction.rows == [
            LegacyRow(
                id="0-A-1",
                codigo="A-1",
                articulo="Caño PVC",
                medida="m",
                rubro="Sanitarios",
                marca="Tigre",
                costo_num=1234.5,
            )
        ]
        assert extraction.skipped_empty_name == 0

    def test_skips_rows_without_name_or_code(self):
        rows = [
            {"Código": "A-1", "Artículo": "nan", "Rubro": "", "Costo_num": "1"},
            {"Código": "", "Artículo": "Sin código", "Rubro": "", "Costo_num": "1"},
            {"Código": "A-3", "Artículo": "Tuerca", "Rubro": "", "Costo_num": "x"},
        ]
        extraction = extract_legacy_rows(LEGACY_HEADERS, rows)

        assert [row.id for row in extraction.rows] == ["2-A-3"]
        assert extraction.rows[0].costo_num == 0.0
        assert extraction.skipped_empty_name == 1

    def test_costo_fallback_and_optional_columns(self):
        headers = ["codigo", "articulo", "rubro", "costo"]
        rows = [{"codigo": "B", "articulo": "Perno", "rubro": "Bulonería", "costo": "10"}]
        row = extract_legacy_rows(headers, rows).rows[0]

        assert row.costo_num == 10.0
        assert row.medida == ""
        assert row.marca == ""

    def test_missing_required_columns(self):
        with pytest.raises(ColumnMappingError):
            extract_legacy_rows(["codigo", "articulo", "costo"], [])


class TestSelectImportableRows:

    def make_row(self, index: int, codigo: str) -> LegacyRow:
        return LegacyRow(id=f"{index}-{codigo}", codigo=codigo, articulo=f"Item {index}")

    def test_skips_existing_and_repeated_codes(self):
        rows = [
            self.make_row(0, "COD 001"),
            self.make_row(1, "cod  001"),
            self.make_row(2, "X-9"),
            self.make_row(3, "NEW"),
        ]
        selected = select_importable_rows(rows, existing_codes=["x-9"])

        assert [row.id for row in selected] == ["0-COD 001", "3-NEW"]

    def test_nothing_existing(self):
        rows = [self.make_row(0, "A"), self.make_row(1, "B")]
        assert select_importable_rows(rows, []) == rows
