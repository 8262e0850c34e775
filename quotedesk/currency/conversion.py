"""Currency conversion arithmetic.

`rate` is always units of local currency per 1 USD. Intermediate math keeps
full Decimal precision; `round_money` is applied only at the output boundary.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")
RATE_QUANTUM = Decimal("0.0001")


def _dec(value: Decimal | float | int | str) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() first so 5.4169 stays 5.4169 instead of its binary expansion
    return Decimal(str(value))


def round_money(value: Decimal | float) -> Decimal:
    return _dec(value).quantize(CENT, rounding=ROUND_HALF_UP)


def round_rate(value: Decimal | float) -> Decimal:
    return _dec(value).quantize(RATE_QUANTUM, rounding=ROUND_HALF_UP)


def to_usd(amount: Decimal | float, rate: Decimal | float) -> Decimal:
    return _dec(amount) / _dec(rate)


def to_local(amount: Decimal | float, rate: Decimal | float) -> Decimal:
    return _dec(amount) * _dec(rate)


def conversion_factor(from_currency: str, to_currency: str, rate: Decimal | float, base: str = "USD") -> Decimal:
    """Multiplier taking an amount in `from_currency` to `to_currency`.

    Identity when the currencies match; `rate` when going from `base`;
    `1 / rate` when going to `base`.
    """
    src, dst = from_currency.upper(), to_currency.upper()
    if src == dst:
        return Decimal(1)
    if src == base.upper():
        return _dec(rate)
    if dst == base.upper():
        return Decimal(1) / _dec(rate)
    msg = f"Unsupported currency pair {src}->{dst}"
    raise ValueError(msg)


def convert(
    amount: Decimal | float,
    from_currency: str,
    to_currency: str,
    rate: Decimal | float,
    base: str = "USD",
) -> Decimal:
    """Full-precision conversion. Round with `round_money` before presenting."""
    src, dst = from_currency.upper(), to_currency.upper()
    if src == dst:
        return _dec(amount)
    if src == base.upper():
        return to_local(amount, rate)
    if dst == base.upper():
        return to_usd(amount, rate)
    msg = f"Unsupported currency pair {src}->{dst}"
    raise ValueError(msg)
