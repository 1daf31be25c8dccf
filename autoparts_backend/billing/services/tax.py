# billing/services/tax.py

"""
GST LINE CALCULATOR

taxable_value = round(quantity * rate, 2)
cgst_amount   = round(taxable_value * cgst_rate / 100, 2)
sgst_amount   = round(taxable_value * sgst_rate / 100, 2)
total_amount  = taxable_value + cgst_amount + sgst_amount

Rounding is ROUND_HALF_UP to paise at every step. The total is the sum of
already-rounded parts, so it never drifts from what is printed.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.conf import settings

from billing.services.exceptions import BillValidationError

MONEY = Decimal("0.01")
ZERO = Decimal("0.00")
HUNDRED = Decimal("100")


def to_decimal(value, *, field: str = "value") -> Decimal:
    if isinstance(value, bool) or value is None:
        raise BillValidationError({field: "Must be a number"})
    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise BillValidationError({field: "Must be a number"}) from exc
    if not result.is_finite():
        raise BillValidationError({field: "Must be a number"})
    return result


def money(value) -> Decimal:
    return to_decimal(value).quantize(MONEY, rounding=ROUND_HALF_UP)


def default_tax_rates() -> tuple[Decimal, Decimal]:
    """(cgst_rate, sgst_rate) for new lines; configured independently."""
    return (
        to_decimal(getattr(settings, "BILLING_DEFAULT_CGST_RATE", "14")),
        to_decimal(getattr(settings, "BILLING_DEFAULT_SGST_RATE", "14")),
    )


@dataclass(frozen=True)
class LineAmounts:
    taxable_value: Decimal
    cgst_amount: Decimal
    sgst_amount: Decimal
    total_amount: Decimal

    @property
    def total_tax(self) -> Decimal:
        return self.cgst_amount + self.sgst_amount


def _check_rate(rate: Decimal, field: str):
    if rate < 0 or rate > HUNDRED:
        raise BillValidationError({field: "Tax rate must be between 0 and 100"})


def compute_line(quantity, rate, cgst_rate, sgst_rate) -> LineAmounts:
    quantity = to_decimal(quantity, field="quantity")
    rate = to_decimal(rate, field="rate")
    cgst_rate = to_decimal(cgst_rate, field="cgst_rate")
    sgst_rate = to_decimal(sgst_rate, field="sgst_rate")

    _check_rate(cgst_rate, "cgst_rate")
    _check_rate(sgst_rate, "sgst_rate")

    taxable = (quantity * rate).quantize(MONEY, rounding=ROUND_HALF_UP)
    cgst = (taxable * cgst_rate / HUNDRED).quantize(MONEY, rounding=ROUND_HALF_UP)
    sgst = (taxable * sgst_rate / HUNDRED).quantize(MONEY, rounding=ROUND_HALF_UP)

    return LineAmounts(
        taxable_value=taxable,
        cgst_amount=cgst,
        sgst_amount=sgst,
        total_amount=taxable + cgst + sgst,
    )


def tax_percent(total_tax, subtotal) -> int:
    """Effective tax % for the invoice summary (0 when nothing is taxable)."""
    subtotal = to_decimal(subtotal)
    if subtotal == 0:
        return 0
    ratio = to_decimal(total_tax) / subtotal * HUNDRED
    return int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
