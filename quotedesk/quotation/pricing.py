"""Quotation totals.

Pure Python, Decimal arithmetic, base currency only:
- line total = quantity × unit_price × (1 − discount% / 100)
- subtotal = Σ line totals
- total = subtotal − header discount + freight

Lines are rounded half-up to cents before summing so the stored lines always
add up to the stored subtotal.
"""

from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP

from quotedesk.errors import ValidationError
from quotedesk.schemas.quotation import PricedItem, QuotationItemInput, QuotationTotals

_HUNDRED = Decimal("100")


def _to_cents(value: Decimal) -> Decimal:
    return value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def line_total(quantity: int, unit_price: Decimal, discount_pct: Decimal = Decimal("0")) -> Decimal:
    """Net value of one line, rounded to cents."""
    gross = Decimal(quantity) * unit_price
    return _to_cents(gross * (1 - discount_pct / _HUNDRED))


def calculate_totals(
    items: list[QuotationItemInput],
    discount: Decimal = Decimal("0"),
    freight: Decimal = Decimal("0"),
) -> QuotationTotals:
    """Price every line and roll up the header totals.

    Args:
        items: Requested lines, already validated for ranges.
        discount: Absolute header discount in base currency.
        freight: Absolute freight charge in base currency.

    Returns:
        QuotationTotals with priced lines and rounded header amounts.

    Raises:
        ValidationError: header discount exceeds subtotal plus freight.
    """
    priced = [
        PricedItem(
            product_id=item.product_id,
            quantity=item.quantity,
            unit_price=_to_cents(item.unit_price),
            discount=item.discount,
            total=line_total(item.quantity, item.unit_price, item.discount),
        )
        for item in items
    ]

    subtotal = _to_cents(sum((p.total for p in priced), Decimal("0")))
    discount = _to_cents(discount)
    freight = _to_cents(freight)
    total = subtotal - discount + freight

    if total < 0:
        raise ValidationError(
            "Discount exceeds quotation value",
            details={"discount": str(discount), "subtotal": str(subtotal), "freight": str(freight)},
        )

    return QuotationTotals(
        items=priced,
        subtotal=subtotal,
        discount=discount,
        freight=freight,
        total=_to_cents(total),
    )
