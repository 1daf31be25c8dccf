# billing/services/payment_service.py

"""
BILL PAYMENTS

record_payment() appends a BillPayment and lowers Bill.remaining_amount.

Rules:
- amount > 0, rounded to paise
- amount <= remaining_amount (no over-payment)
- the bill row is locked for the whole operation so two concurrent
  payments cannot both pass the remaining-amount check
"""

from __future__ import annotations

import logging
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from billing.models import Bill, BillPayment
from billing.services.bill_service import BillNotFound
from billing.services.exceptions import BillValidationError, PaymentError
from billing.services.tax import money
from permissions.context import OperatorContext
from permissions.roles import CAP_BILLING_PAYMENT, CAP_BILLING_VIEW

logger = logging.getLogger("billing")

METHODS = {code for code, _ in BillPayment.METHOD_CHOICES}


@transaction.atomic
def record_payment(
    *,
    operator: OperatorContext,
    bill_id,
    amount,
    method: str = BillPayment.METHOD_CASH,
    payment_date=None,
    note: str = "",
) -> BillPayment:
    operator.require(CAP_BILLING_PAYMENT)

    try:
        amount = money(amount)
    except BillValidationError as exc:
        raise PaymentError("Payment amount must be a number") from exc

    if amount <= 0:
        raise PaymentError("Payment amount must be greater than zero")

    if method not in METHODS:
        raise PaymentError(f"Unknown payment method '{method}'")

    try:
        bill = Bill.objects.select_for_update().get(pk=bill_id)
    except (Bill.DoesNotExist, ValidationError, ValueError) as exc:
        raise BillNotFound("Bill not found") from exc

    remaining = Decimal(bill.remaining_amount)
    if amount > remaining:
        raise PaymentError(
            f"Payment of {amount} exceeds the remaining amount {remaining} on {bill.bill_number}"
        )

    payment = BillPayment.objects.create(
        bill=bill,
        amount=amount,
        method=method,
        payment_date=payment_date or timezone.localdate(),
        note=(note or "").strip(),
        recorded_by=operator.user,
    )

    bill.remaining_amount = remaining - amount
    bill.save(update_fields=["remaining_amount", "updated_at"])

    logger.info(
        "Bill payment recorded",
        extra={
            "bill_number": bill.bill_number,
            "amount": str(amount),
            "method": method,
            "remaining_amount": str(bill.remaining_amount),
            "operator": str(operator.user_id),
        },
    )
    return payment


def payments_for(*, operator: OperatorContext, bill: Bill):
    operator.require(CAP_BILLING_VIEW)
    return bill.payments.select_related("recorded_by").order_by("created_at")
