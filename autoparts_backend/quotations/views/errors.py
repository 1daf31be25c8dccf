# quotations/views/errors.py

from rest_framework import status

from backend.api_errors import error_response
from billing.services.exceptions import DocumentGenerationError
from quotations.services.exceptions import (
    InvalidOrderTransitionError,
    InvalidQuotationTransitionError,
    OrderNotFound,
    OrderNotReadyError,
    QuotationNotFound,
    QuotationNumberingError,
    QuotationValidationError,
)


def quotation_error_response(exc: Exception):
    """Map quotation / order domain errors to the canonical error body."""
    if isinstance(exc, QuotationValidationError):
        return error_response(
            code="QUOTATION_VALIDATION_ERROR",
            message=str(exc),
            http_status=status.HTTP_400_BAD_REQUEST,
            fields=exc.errors,
        )
    if isinstance(exc, QuotationNotFound):
        return error_response(
            code="QUOTATION_NOT_FOUND", message=str(exc), http_status=status.HTTP_404_NOT_FOUND
        )
    if isinstance(exc, OrderNotFound):
        return error_response(
            code="ORDER_NOT_FOUND", message=str(exc), http_status=status.HTTP_404_NOT_FOUND
        )
    if isinstance(exc, QuotationNumberingError):
        return error_response(
            code="NUMBERING_FAILED",
            message=str(exc),
            http_status=status.HTTP_503_SERVICE_UNAVAILABLE,
        )
    if isinstance(exc, InvalidQuotationTransitionError):
        return error_response(
            code="QUOTATION_ALREADY_DECIDED", message=str(exc), http_status=status.HTTP_409_CONFLICT
        )
    if isinstance(exc, OrderNotReadyError):
        return error_response(
            code="ORDER_NOT_READY", message=str(exc), http_status=status.HTTP_409_CONFLICT
        )
    if isinstance(exc, InvalidOrderTransitionError):
        return error_response(
            code="INVALID_ORDER_TRANSITION", message=str(exc), http_status=status.HTTP_409_CONFLICT
        )
    if isinstance(exc, DocumentGenerationError):
        return error_response(
            code="DOCUMENT_GENERATION_FAILED",
            message=str(exc),
            http_status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
    return error_response(
        code="QUOTATION_ERROR", message=str(exc), http_status=status.HTTP_400_BAD_REQUEST
    )
