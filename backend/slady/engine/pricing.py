# Overview: Line pricing for receipts; pure functions over Decimal money.

"""
PriceCalculator

final = unit_price * qty
        then * (1 - discount_percent / 100)   when discount_percent > 0
        then - discount_amount                when discount_amount > 0
rounded half-up to 2 decimals.

Percent is applied before amount and the order matters. Negative results
are legitimate (credit lines) and are never clamped.

Lenient coercion (None / NaN / junk -> 0, missing quantity -> 1) happens
once, at the input boundary, in to_money() and LineItem.from_dict().
Everything past that point works with well-formed Decimals.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, localcontext
from typing import Any, Mapping

ZERO = Decimal("0")
ONE_HUNDRED = Decimal("100")
MONEY_QUANT = Decimal("0.01")

# Largest amount that fits the integer cents columns
MAX_MONEY = Decimal("9999999.99")
MAX_QTY = 9999

# Pre-paid package buttons on the receipt editor
PACKAGE_AMOUNTS = (1200, 1800, 2800, 3800, 5000)
ALTERATION_CODE = "Alteration"
CREDIT_CODE = "Credit"


def _to_decimal(value: Any, default: Decimal) -> Decimal:
    if value is None:
        return default
    if isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        d = value
    elif isinstance(value, int):
        d = Decimal(value)
    elif isinstance(value, float):
        d = Decimal(repr(value))
    elif isinstance(value, str):
        s = value.strip()
        if not s:
            return default
        try:
            d = Decimal(s)
        except InvalidOperation:
            return ZERO
    else:
        return ZERO
    if not d.is_finite():
        return ZERO
    return d


def to_money(value: Any) -> Decimal:
    """Coerce user input to a Decimal amount; missing or malformed input is 0."""
    return _to_decimal(value, ZERO)


def to_quantity(value: Any) -> int:
    """Missing quantity means 1; malformed or fractional quantity means 0."""
    d = _to_decimal(value, Decimal(1))
    if d != d.to_integral_value():
        return 0
    return int(d)


def _wide(*values: Decimal) -> int:
    """Context precision large enough that quantizing to cents cannot overflow."""
    digits = max((v.adjusted() for v in values if v), default=0)
    return max(28, 2 * digits + 8)


def round2(value: Decimal | int) -> Decimal:
    value = Decimal(value)
    with localcontext() as ctx:
        ctx.prec = _wide(value)
        q = value.quantize(MONEY_QUANT, rounding=ROUND_HALF_UP)
    # -0.00 -> 0.00
    return q.copy_abs() if q == 0 else q


def format_money(value: Decimal | int) -> str:
    return str(round2(value))


def to_cents(value: Decimal | int) -> int:
    return int(round2(value) * 100)


def from_cents(cents: int | None) -> Decimal:
    return round2(Decimal(cents or 0) / 100)


def percent_to_bps(percent: Decimal) -> int:
    return int((Decimal(percent) * 100).to_integral_value(rounding=ROUND_HALF_UP))


def bps_to_percent(bps: int | None) -> Decimal:
    return (Decimal(bps or 0) / 100).quantize(MONEY_QUANT)


def final_price(
    unit_price: Decimal | int,
    discount_percent: Decimal | int = ZERO,
    discount_amount: Decimal | int = ZERO,
    quantity: Decimal | int = 1,
) -> Decimal:
    unit_price, quantity = Decimal(unit_price), Decimal(quantity)
    discount_percent, discount_amount = Decimal(discount_percent), Decimal(discount_amount)
    with localcontext() as ctx:
        ctx.prec = _wide(unit_price, quantity, discount_percent, discount_amount)
        base = unit_price * quantity
        if discount_percent > 0:
            base = base * (1 - discount_percent / ONE_HUNDRED)
        if discount_amount > 0:
            base = base - discount_amount
        return round2(base)


def _pick(data: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in data:
            return data[key]
    return None


@dataclass(frozen=True)
class LineItem:
    """One cart line. Immutable; edit with dataclasses.replace()."""

    code: str
    qty: int = 1
    unit_price: Decimal = field(default=ZERO)
    discount_percent: Decimal = field(default=ZERO)
    discount_amount: Decimal = field(default=ZERO)

    @property
    def final_price(self) -> Decimal:
        return final_price(self.unit_price, self.discount_percent, self.discount_amount, self.qty)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "LineItem":
        """Default-fill boundary: accepts API/form field names, never raises."""
        code = _pick(data, "code", "design_code")
        return cls(
            code=str(code).strip() if code is not None else "",
            qty=to_quantity(_pick(data, "qty", "quantity")),
            unit_price=to_money(_pick(data, "unit_price", "price")),
            discount_percent=to_money(_pick(data, "discount_percent", "discountPercent")),
            discount_amount=to_money(_pick(data, "discount_amount", "discount")),
        )

    def with_qty(self, qty: int) -> "LineItem":
        return replace(self, qty=qty)

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "qty": self.qty,
            "unit_price": format_money(self.unit_price),
            "discount_percent": str(self.discount_percent),
            "discount_amount": format_money(self.discount_amount),
            "final_price": format_money(self.final_price),
        }


def package_line(amount: int | Decimal) -> LineItem:
    return LineItem(code=f"Package{amount}", unit_price=to_money(amount))


def alteration_line(price: Any = None) -> LineItem:
    return LineItem(code=ALTERATION_CODE, unit_price=to_money(price))


def credit_line(amount: Any = None) -> LineItem:
    """Store credit applied against the cart; always priced negative."""
    return LineItem(code=CREDIT_CODE, unit_price=-abs(to_money(amount)))
