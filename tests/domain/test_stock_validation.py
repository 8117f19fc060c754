"""Tests for quantity coercion and pure line classification."""

import pytest

from pharmacy.errors import InsufficientStock, InvalidQuantity, ProductNotFound
from pharmacy.ordering.lines import CartLine, parse_lines
from pharmacy.ordering.validation import classify_lines, coerce_quantity
from pharmacy.product.product import ProductView

PARACETAMOL = ProductView(product_id="A", name="Paracetamol 500mg", price=10.0, stock=3)
IBUPROFENO = ProductView(product_id="B", name="Ibuprofeno 400mg", price=15.0, stock=10)


class TestCoerceQuantity:
    @pytest.mark.parametrize("value, expected", [(1, 1), (7, 7), (2.0, 2), ("3", 3), (" 4 ", 4), ("5.0", 5)])
    def test_accepts_positive_integers(self, value, expected):
        assert coerce_quantity(value) == expected

    @pytest.mark.parametrize("value", [0, -1, 1.5, "abc", "", None, True, False, float("nan"), [], {}])
    def test_rejects_everything_else(self, value):
        with pytest.raises(InvalidQuantity):
            coerce_quantity(value)


class TestParseLines:
    def test_accepts_english_and_spanish_keys(self):
        lines = parse_lines(
            [
                {"identifier": "A", "quantity": 1},
                {"id": "B", "cantidad": 2},
                {"nombre": "Paracetamol 500mg", "cantidad": "1"},
            ]
        )
        assert lines[0] == CartLine(identifier="A", quantity=1)
        assert lines[1] == CartLine(identifier="B", quantity=2)
        assert lines[2].identifier == ""
        assert lines[2].name == "Paracetamol 500mg"

    def test_empty_input(self):
        assert parse_lines([]) == []
        assert parse_lines(None) == []


class TestClassifyLines:
    def test_all_lines_admissible(self):
        lines = [CartLine("A", 2), CartLine("B", 1)]
        report = classify_lines(lines, [PARACETAMOL, IBUPROFENO])

        assert report.accepted
        assert report.errors == []
        assert report.demand == {"A": 2, "B": 1}

    def test_quantities_summed_across_duplicate_lines(self):
        lines = [CartLine("A", 2), CartLine("A", 2)]
        report = classify_lines(lines, [PARACETAMOL, PARACETAMOL])

        assert not report.accepted
        assert report.demand == {"A": 4}
        assert all(isinstance(v.error, InsufficientStock) for v in report.verdicts)
        assert report.errors[0]["available"] == 3

    def test_errors_collected_for_every_line(self):
        missing = ProductNotFound("Product not found: Z", identifier="Z")
        lines = [CartLine("A", "x"), CartLine("Z", 1), CartLine("B", 1)]
        report = classify_lines(lines, [PARACETAMOL, missing, IBUPROFENO])

        reasons = [error["reason"] for error in report.errors]
        assert reasons == ["invalid_quantity", "product_not_found"]
        assert report.verdicts[2].admissible
        assert not report.accepted

    def test_invalid_line_does_not_count_toward_demand(self):
        lines = [CartLine("A", 0), CartLine("A", 3)]
        report = classify_lines(lines, [PARACETAMOL, PARACETAMOL])

        assert report.demand == {"A": 3}
        assert report.verdicts[1].admissible

    def test_empty_order_is_not_accepted(self):
        assert not classify_lines([], []).accepted
