"""Tests for shared line item validation."""

import pytest

from fulfillment.core.entities import IssuanceLine
from fulfillment.core.exceptions import ValidationError
from fulfillment.core.services.line_items import aggregate_lines, validate_lines


def _line(product_id: str, quantity: int) -> IssuanceLine:
    return IssuanceLine(product_id=product_id, quantity=quantity)


class TestValidateLines:
    def test_accepts_valid_lines(self):
        validate_lines([_line("a", 1), _line("b", 3)])

    def test_empty_list(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_lines([])
        assert exc_info.value.details["field"] == "items"

    @pytest.mark.parametrize("quantity", [0, -2])
    def test_non_positive_quantity(self, quantity):
        with pytest.raises(ValidationError) as exc_info:
            validate_lines([_line("a", 1), _line("b", 1), _line("c", quantity)])
        assert exc_info.value.details["line"] == 2
        assert exc_info.value.details["field"] == "quantity"

    def test_missing_product(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_lines([_line("", 1)])
        assert exc_info.value.details["line"] == 0

    def test_repeats_allowed_by_default(self):
        validate_lines([_line("a", 1), _line("a", 2)])

    def test_repeats_rejected_when_disallowed(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_lines([_line("a", 1), _line("a", 2)], allow_repeats=False)
        assert exc_info.value.details["line"] == 1


class TestAggregateLines:
    def test_sums_per_product_keeping_first_index(self):
        totals = aggregate_lines([_line("a", 6), _line("b", 1), _line("a", 6)])

        assert totals == {"a": (12, 0), "b": (1, 1)}
        assert list(totals) == ["a", "b"]
