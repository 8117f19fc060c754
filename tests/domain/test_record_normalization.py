"""Tests for lenient normalization of raw catalog records."""

import pytest

from pharmacy.catalog.reload import coerce_number, normalize_record, product_id_for


class TestCoerceNumber:
    @pytest.mark.parametrize("value, expected", [(5, 5.0), (2.5, 2.5), ("7", 7.0), ("3,5", 3.5)])
    def test_numeric_values(self, value, expected):
        assert coerce_number(value) == expected

    @pytest.mark.parametrize("value", [None, "abc", -4, float("nan"), float("inf"), True, [1]])
    def test_invalid_values_become_zero(self, value):
        assert coerce_number(value) == 0.0


class TestNormalizeRecord:
    def test_spanish_keys(self):
        view = normalize_record({"_id": "m-1", "nombre": "Ibuprofeno 400mg", "precio": "15.5", "stock": 8})
        assert view.product_id == "m-1"
        assert view.name == "Ibuprofeno 400mg"
        assert view.price == 15.5
        assert view.stock == 8
        assert view.controlled is False

    def test_missing_price_and_stock_default_to_zero(self):
        view = normalize_record({"nombre": "Paracetamol 500mg"})
        assert view.price == 0.0
        assert view.stock == 0

    def test_missing_id_is_derived_from_name(self):
        first = normalize_record({"name": "Amoxicilina 500mg", "price": 30})
        second = normalize_record({"name": "  amoxicilina 500MG ", "price": 30})
        assert first.product_id == product_id_for("Amoxicilina 500mg")
        assert first.product_id == second.product_id

    def test_mongo_extended_json_id(self):
        view = normalize_record({"_id": {"$oid": "65a1b2"}, "nombre": "Loratadina"})
        assert view.product_id == "65a1b2"

    def test_fractional_stock_is_truncated(self):
        assert normalize_record({"name": "Vitamina C", "stock": "4.7"}).stock == 4

    def test_controlled_flag(self):
        assert normalize_record({"name": "Clonazepam 2mg", "controlado": True}).controlled is True
        assert normalize_record({"name": "Clonazepam 2mg", "controlled": "true"}).controlled is True

    @pytest.mark.parametrize("raw", [{}, {"nombre": ""}, {"name": "   "}, {"name": 42}, "not a record"])
    def test_records_without_a_name_are_skipped(self, raw):
        assert normalize_record(raw) is None

    def test_names_longer_than_storable_are_skipped(self):
        assert normalize_record({"name": "x" * 256}) is None
        assert normalize_record({"name": "x" * 255}).name == "x" * 255
