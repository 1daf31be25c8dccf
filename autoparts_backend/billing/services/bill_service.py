# billing/services/bill_service.py

"""
BILL SAVE ORCHESTRATION

create_bill(operator, data) -> BillSaveResult

Order of operations:
1) validate input + compute every line (nothing written on failure)
2) mint the bill number (exactly once; NumberingError if it fails)
3) persist header + lines atomically (PartialSaveError if it fails; the
   minted number is reported back so the operator can verify)
4) render the invoice PDF, store it, write Bill.pdf_path

A step 4 failure keeps the bill: the result says document_status="failed"
and the PDF is regenerated on demand (get_bill_document).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from django.core.exceptions import ValidationError
from django.core.files.base import ContentFile
from django.core.files.storage import default_storage
from django.db import DatabaseError, transaction

from billing.models import Bill, BillItem
from billing.services.aggregator import BillInput, aggregate_lines, validate_bill_input
from billing.services.documents import build_invoice_document, render_invoice_pdf
from billing.services.exceptions import (
    BillValidationError,
    BillingError,
    DocumentGenerationError,
    NumberingError,
    PartialSaveError,
)
from billing.services.hsn import group_by_hsn
from permissions.context import OperatorContext
from permissions.roles import CAP_BILLING_CREATE, CAP_BILLING_DELETE, CAP_BILLING_VIEW
from products.models import Product
from sequences.services import NumberingError as SequenceNumberingError
from sequences.services import generate_bill_number

logger = logging.getLogger("billing")

DOCUMENT_READY = "ready"
DOCUMENT_FAILED = "failed"

DOCUMENT_FAILED_WARNING = (
    "Bill saved but PDF upload failed. You can regenerate it from the Bills page."
)

INVOICE_STORAGE_DIR = "invoices"


class BillNotFound(BillingError):
    pass


@dataclass
class BillSaveResult:
    bill: Bill
    document_status: str
    warning: Optional[str] = None


# =========================================================
# Preview (no writes)
# =========================================================
def preview_bill(*, operator: OperatorContext, data: dict) -> dict:
    operator.require(CAP_BILLING_CREATE)

    bill_input = validate_bill_input(data)
    totals = aggregate_lines(bill_input.lines)
    return {
        "lines": bill_input.lines,
        "totals": totals,
        "hsn_summary": [row.as_dict() for row in group_by_hsn(bill_input.lines)],
    }


# =========================================================
# Create
# =========================================================
def _persist(bill_input: BillInput, *, bill_number: str, operator: OperatorContext) -> Bill:
    totals = aggregate_lines(bill_input.lines)

    with transaction.atomic():
        bill = Bill.objects.create(
            bill_number=bill_number,
            invoice_date=bill_input.invoice_date,
            party_name=bill_input.party_name,
            party_address=bill_input.party_address,
            party_gstin=bill_input.party_gstin,
            party_phone=bill_input.party_phone,
            place_of_supply=bill_input.place_of_supply,
            notes=bill_input.notes,
            subtotal=totals.subtotal,
            cgst_amount=totals.cgst_amount,
            sgst_amount=totals.sgst_amount,
            total_tax=totals.total_tax,
            total_amount=totals.total_amount,
            remaining_amount=totals.total_amount,
            created_by=operator.user,
        )

        for position, line in enumerate(bill_input.lines):
            BillItem.objects.create(
                bill=bill,
                position=position,
                product_id=line.product_id,
                description=line.description,
                hsn_sac=line.hsn_sac,
                quantity=line.quantity,
                unit=line.unit,
                rate=line.rate,
                taxable_value=line.taxable_value,
                cgst_rate=line.cgst_rate,
                sgst_rate=line.sgst_rate,
                cgst_amount=line.cgst_amount,
                sgst_amount=line.sgst_amount,
                total_amount=line.total_amount,
            )

    return bill


def _check_products(bill_input: BillInput):
    wanted = {line.product_id for line in bill_input.lines if line.product_id}
    if not wanted:
        return
    found = {str(pk) for pk in Product.objects.filter(pk__in=wanted).values_list("pk", flat=True)}
    errors = {
        f"items[{index}].product": "Unknown product"
        for index, line in enumerate(bill_input.lines)
        if line.product_id and line.product_id not in found
    }
    if errors:
        raise BillValidationError(errors)


def create_bill(*, operator: OperatorContext, data: dict) -> BillSaveResult:
    operator.require(CAP_BILLING_CREATE)

    bill_input = validate_bill_input(data)
    _check_products(bill_input)

    try:
        bill_number = generate_bill_number()
    except SequenceNumberingError as exc:
        raise NumberingError(str(exc)) from exc

    try:
        bill = _persist(bill_input, bill_number=bill_number, operator=operator)
    except DatabaseError as exc:
        logger.error(
            "Bill save failed after number was issued",
            extra={"bill_number": bill_number, "operator": str(operator.user_id)},
            exc_info=True,
        )
        raise PartialSaveError(
            f"Bill number {bill_number} was issued but the bill could not be saved. "
            "Check the Bills page before retrying.",
            bill_number=bill_number,
        ) from exc

    logger.info(
        "Bill created",
        extra={
            "bill_number": bill.bill_number,
            "total_amount": str(bill.total_amount),
            "items": len(bill_input.lines),
            "operator": str(operator.user_id),
        },
    )

    try:
        store_bill_document(bill)
    except DocumentGenerationError:
        logger.warning(
            "Bill saved without document",
            extra={"bill_number": bill.bill_number},
        )
        return BillSaveResult(
            bill=bill,
            document_status=DOCUMENT_FAILED,
            warning=DOCUMENT_FAILED_WARNING,
        )

    return BillSaveResult(bill=bill, document_status=DOCUMENT_READY)


# =========================================================
# Documents
# =========================================================
def document_filename(bill: Bill) -> str:
    return f"{bill.bill_number.replace('/', '-')}.pdf"


def store_bill_document(bill: Bill) -> bytes:
    """Render the invoice and (re)write it to storage; updates pdf_path."""
    pdf = render_invoice_pdf(build_invoice_document(bill))

    try:
        if bill.pdf_path and default_storage.exists(bill.pdf_path):
            default_storage.delete(bill.pdf_path)
        name = default_storage.save(
            f"{INVOICE_STORAGE_DIR}/{document_filename(bill)}", ContentFile(pdf)
        )
    except OSError as exc:
        logger.error(
            "Invoice PDF storage failed",
            extra={"bill_number": bill.bill_number},
            exc_info=True,
        )
        raise DocumentGenerationError(f"Could not store invoice {bill.bill_number}") from exc

    bill.pdf_path = name
    bill.save(update_fields=["pdf_path", "updated_at"])
    return pdf


def get_bill(*, operator: OperatorContext, bill_id) -> Bill:
    operator.require(CAP_BILLING_VIEW)
    try:
        return Bill.objects.get(pk=bill_id)
    except (Bill.DoesNotExist, ValidationError, ValueError) as exc:
        raise BillNotFound("Bill not found") from exc


def get_bill_document(*, operator: OperatorContext, bill_id) -> tuple[str, bytes]:
    """Stored PDF when present, otherwise regenerated from the saved lines."""
    bill = get_bill(operator=operator, bill_id=bill_id)

    if bill.pdf_path and default_storage.exists(bill.pdf_path):
        with default_storage.open(bill.pdf_path, "rb") as fh:
            return document_filename(bill), fh.read()

    logger.info("Regenerating missing invoice PDF", extra={"bill_number": bill.bill_number})
    return document_filename(bill), store_bill_document(bill)


def regenerate_bill_document(*, operator: OperatorContext, bill_id) -> Bill:
    operator.require(CAP_BILLING_CREATE)
    bill = get_bill(operator=operator, bill_id=bill_id)
    store_bill_document(bill)
    return bill


# =========================================================
# Delete
# =========================================================
def delete_bill(*, operator: OperatorContext, bill_id) -> str:
    operator.require(CAP_BILLING_DELETE)
    bill = get_bill(operator=operator, bill_id=bill_id)
    bill_number = bill.bill_number

    if bill.pdf_path and default_storage.exists(bill.pdf_path):
        default_storage.delete(bill.pdf_path)

    bill.delete()

    logger.info(
        "Bill deleted",
        extra={"bill_number": bill_number, "operator": str(operator.user_id)},
    )
    return bill_number
