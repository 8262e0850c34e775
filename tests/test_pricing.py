"""Tests for quotation totals — Decimal arithmetic, cents rounding."""

from __future__ import annotations

import uuid
from decimal import Decimal

import pytest

from quotedesk.errors import ValidationError
from quotedesk.quotation.pricing import calculate_totals, line_total
from quotedesk.schemas.quotation import QuotationItemInput


def _item(quantity: int, price: str, discount: str = "0") -> QuotationItemInput:
    return QuotationItemInput(
        product_id=uuid.uuid4(),
        quantity=quantity,
        unit_price=Decimal(price),
        discount=Decimal(discount),
    )


class TestLineTotal:
    def test_no_discount(self):
        assert line_total(3, Decimal("10.00")) == Decimal("30.00")

    def test_percent_discount(self):
        assert line_total(2, Decimal("50.00"), Decimal("10")) == Decimal("90.00")

    def test_rounds_half_up(self):
        # 1 × 0.125 → 0.13
        assert line_total(1, Decimal("0.125")) == Decimal("0.13")

    def test_full_discount(self):
        assert line_total(5, Decimal("9.99"), Decimal("100")) == Decimal("0.00")


class TestCalculateTotals:
    def test_rollup(self):
        totals = calculate_totals(
            [_item(2, "50.00", "10"), _item(1, "20.00")],
            discount=Decimal("5"),
            freight=Decimal("15.50"),
        )
        assert [i.total for i in totals.items] == [Decimal("90.00"), Decimal("20.00")]
        assert totals.subtotal == Decimal("110.00")
        assert totals.discount == Decimal("5.00")
        assert totals.freight == Decimal("15.50")
        assert totals.total == Decimal("120.50")

    def test_lines_sum_to_subtotal(self):
        totals = calculate_totals([_item(3, "33.333", "1.5"), _item(7, "0.07", "33")])
        assert sum(i.total for i in totals.items) == totals.subtotal

    def test_discount_larger_than_value_rejected(self):
        with pytest.raises(ValidationError):
            calculate_totals([_item(1, "10.00")], discount=Decimal("20"))

    def test_freight_can_cover_discount(self):
        totals = calculate_totals([_item(1, "10.00")], discount=Decimal("20"), freight=Decimal("10"))
        assert totals.total == Decimal("0.00")
