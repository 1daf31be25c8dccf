# billing/services/aggregator.py

"""
BILL AGGREGATOR

validate_bill_input(data) turns raw bill input into a BillInput whose lines
already carry their GST amounts. aggregate_lines(lines) foots them.

Validation rules:
- party_name required
- at least one line
- each line: description, quantity > 0, rate > 0, tax rates 0-100
- GSTIN (optional) must be a well-formed 15-char GSTIN
- phone (optional) must be exactly 10 digits once non-digits are removed

All errors are collected and raised together as BillValidationError.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Optional

from django.conf import settings
from django.utils import timezone

from billing.models import BillItem
from billing.services.exceptions import BillValidationError
from billing.services.tax import ZERO, compute_line, default_tax_rates, to_decimal

GSTIN_PATTERN = re.compile(r"^[0-9]{2}[A-Z]{5}[0-9]{4}[A-Z]{1}[1-9A-Z]{1}Z[0-9A-Z]{1}$")

UNITS = {code for code, _ in BillItem.UNIT_CHOICES}

# Column ceilings: quantity/rate are max_digits=12, amounts max_digits=14.
MAX_INPUT = Decimal("9999999999.99")
MAX_AMOUNT = Decimal("999999999999.99")


@dataclass(frozen=True)
class BillLine:
    description: str
    hsn_sac: str
    quantity: Decimal
    unit: str
    rate: Decimal
    cgst_rate: Decimal
    sgst_rate: Decimal
    taxable_value: Decimal
    cgst_amount: Decimal
    sgst_amount: Decimal
    total_amount: Decimal
    product_id: Optional[str] = None


@dataclass
class BillInput:
    party_name: str
    party_address: str = ""
    party_gstin: str = ""
    party_phone: str = ""
    place_of_supply: str = ""
    notes: str = ""
    invoice_date: Optional[date] = None
    lines: list = field(default_factory=list)


@dataclass(frozen=True)
class BillTotals:
    subtotal: Decimal
    cgst_amount: Decimal
    sgst_amount: Decimal
    total_tax: Decimal
    total_amount: Decimal
    item_count: int


def is_valid_gstin(value: str) -> bool:
    return bool(GSTIN_PATTERN.match(value or ""))


def normalize_phone(value: str) -> str:
    return re.sub(r"\D", "", value or "")


def line_invariant_errors(line) -> list[str]:
    errors = []
    expected = compute_line(line.quantity, line.rate, line.cgst_rate, line.sgst_rate)
    if Decimal(line.taxable_value) != expected.taxable_value:
        errors.append("taxable_value does not match quantity x rate")
    if Decimal(line.cgst_amount) != expected.cgst_amount:
        errors.append("cgst_amount does not match cgst_rate")
    if Decimal(line.sgst_amount) != expected.sgst_amount:
        errors.append("sgst_amount does not match sgst_rate")
    if Decimal(line.total_amount) != (
        Decimal(line.taxable_value) + Decimal(line.cgst_amount) + Decimal(line.sgst_amount)
    ):
        errors.append("total_amount is not taxable_value + cgst + sgst")
    return errors


def _build_line(index: int, raw: dict, errors: dict) -> Optional[BillLine]:
    prefix = f"items[{index}]"
    default_cgst, default_sgst = default_tax_rates()

    description = str(raw.get("description") or "").strip()
    if not description:
        errors[f"{prefix}.description"] = "Description is required"

    hsn_sac = raw.get("hsn_sac")
    if hsn_sac is None:
        hsn_sac = getattr(settings, "BILLING_DEFAULT_HSN", "")
    hsn_sac = str(hsn_sac)

    unit = str(raw.get("unit") or BillItem.UNIT_PCS).strip().lower()
    if unit not in UNITS:
        errors[f"{prefix}.unit"] = f"Unit must be one of {', '.join(sorted(UNITS))}"

    values = {}
    for name, default in (
        ("quantity", None),
        ("rate", None),
        ("cgst_rate", default_cgst),
        ("sgst_rate", default_sgst),
    ):
        raw_value = raw.get(name)
        if raw_value is None or raw_value == "":
            if default is None:
                errors[f"{prefix}.{name}"] = "This field is required"
                continue
            raw_value = default
        try:
            values[name] = to_decimal(raw_value, field=name)
        except BillValidationError:
            errors[f"{prefix}.{name}"] = "Must be a number"

    for name in ("quantity", "rate"):
        if name in values and values[name] <= 0:
            errors[f"{prefix}.{name}"] = "Must be greater than zero"
        elif name in values and values[name] > MAX_INPUT:
            errors[f"{prefix}.{name}"] = f"Must not exceed {MAX_INPUT:,.2f}"

    if len(values) != 4 or any(k.startswith(prefix) for k in errors):
        return None

    try:
        amounts = compute_line(
            values["quantity"], values["rate"], values["cgst_rate"], values["sgst_rate"]
        )
    except BillValidationError as exc:
        for key, message in exc.errors.items():
            errors[f"{prefix}.{key}"] = message
        return None

    if amounts.total_amount > MAX_AMOUNT:
        errors[f"{prefix}.total_amount"] = f"Line total must not exceed {MAX_AMOUNT:,.2f}"
        return None

    product = raw.get("product") or raw.get("product_id")
    line = BillLine(
        description=description,
        hsn_sac=hsn_sac,
        quantity=values["quantity"],
        unit=unit,
        rate=values["rate"],
        cgst_rate=values["cgst_rate"],
        sgst_rate=values["sgst_rate"],
        taxable_value=amounts.taxable_value,
        cgst_amount=amounts.cgst_amount,
        sgst_amount=amounts.sgst_amount,
        total_amount=amounts.total_amount,
        product_id=str(getattr(product, "pk", product)) if product else None,
    )

    broken = line_invariant_errors(line)
    if broken:
        errors[prefix] = "; ".join(broken)
        return None
    return line


def validate_bill_input(data: dict) -> BillInput:
    errors: dict = {}

    party_name = str(data.get("party_name") or "").strip()
    if not party_name:
        errors["party_name"] = "Party name is required"

    gstin = str(data.get("party_gstin") or "").strip().upper()
    if gstin and not is_valid_gstin(gstin):
        errors["party_gstin"] = "Invalid GSTIN format"

    raw_phone = str(data.get("party_phone") or "").strip()
    phone = normalize_phone(raw_phone)
    if raw_phone and len(phone) != 10:
        errors["party_phone"] = "Phone number must be exactly 10 digits"

    raw_items = data.get("items") or []
    if not raw_items:
        errors["items"] = "Add at least one line item"

    lines = []
    for index, raw in enumerate(raw_items):
        line = _build_line(index, raw or {}, errors)
        if line is not None:
            lines.append(line)

    if lines and not errors and aggregate_lines(lines).total_amount > MAX_AMOUNT:
        errors["items"] = f"Bill total must not exceed {MAX_AMOUNT:,.2f}"

    if errors:
        raise BillValidationError(errors)

    place_of_supply = str(data.get("place_of_supply") or "").strip()

    return BillInput(
        party_name=party_name,
        party_address=str(data.get("party_address") or "").strip(),
        party_gstin=gstin,
        party_phone=phone,
        place_of_supply=place_of_supply
        or getattr(settings, "BILLING_DEFAULT_PLACE_OF_SUPPLY", ""),
        notes=str(data.get("notes") or "").strip(),
        invoice_date=data.get("invoice_date") or timezone.localdate(),
        lines=lines,
    )


def aggregate_lines(lines) -> BillTotals:
    """Foot already-rounded line amounts; no re-rounding happens here."""
    subtotal = cgst = sgst = ZERO
    count = 0
    for line in lines:
        subtotal += Decimal(line.taxable_value)
        cgst += Decimal(line.cgst_amount)
        sgst += Decimal(line.sgst_amount)
        count += 1

    return BillTotals(
        subtotal=subtotal,
        cgst_amount=cgst,
        sgst_amount=sgst,
        total_tax=cgst + sgst,
        total_amount=subtotal + cgst + sgst,
        item_count=count,
    )
