# billing/views/errors.py

from rest_framework import status

from backend.api_errors import error_response
from billing.services.bill_service import BillNotFound
from billing.services.exceptions import (
    BillValidationError,
    BillingError,
    DocumentGenerationError,
    NumberingError,
    PartialSaveError,
    PaymentError,
)


def billing_error_response(exc: BillingError):
    """Map billing domain errors to the canonical error body."""
    if isinstance(exc, BillValidationError):
        return error_response(
            code="BILL_VALIDATION_ERROR",
            message=str(exc),
            http_status=status.HTTP_400_BAD_REQUEST,
            fields=exc.errors,
        )
    if isinstance(exc, BillNotFound):
        return error_response(
            code="BILL_NOT_FOUND", message=str(exc), http_status=status.HTTP_404_NOT_FOUND
        )
    if isinstance(exc, NumberingError):
        return error_response(
            code="NUMBERING_FAILED",
            message=str(exc),
            http_status=status.HTTP_503_SERVICE_UNAVAILABLE,
        )
    if isinstance(exc, PartialSaveError):
        return error_response(
            code="BILL_PARTIALLY_SAVED",
            message=str(exc),
            http_status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            bill_number=exc.bill_number,
        )
    if isinstance(exc, DocumentGenerationError):
        return error_response(
            code="DOCUMENT_GENERATION_FAILED",
            message=str(exc),
            http_status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
    if isinstance(exc, PaymentError):
        return error_response(
            code="PAYMENT_REJECTED", message=str(exc), http_status=status.HTTP_400_BAD_REQUEST
        )
    return error_response(
        code="BILLING_ERROR", message=str(exc), http_status=status.HTTP_400_BAD_REQUEST
    )
