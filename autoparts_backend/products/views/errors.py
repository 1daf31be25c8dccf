# products/views/errors.py

from django.core.exceptions import ValidationError
from rest_framework import status

from backend.api_errors import error_response
from products.services.exceptions import (
    InvalidImageManifest,
    InvalidQRPayload,
    InvalidRelocation,
    InvalidStockChange,
    InventoryError,
    ProductCodeError,
    ProductNotFound,
    StockMutationError,
)


def _validation_message(exc: ValidationError) -> str:
    if hasattr(exc, "message_dict"):
        return "; ".join(f"{k}: {' '.join(v)}" for k, v in exc.message_dict.items())
    return " ".join(exc.messages)


def inventory_error_response(exc: Exception):
    """Map inventory domain errors to the canonical error body."""
    if isinstance(exc, InvalidQRPayload):
        return error_response(
            code="INVALID_QR_PAYLOAD", message=str(exc), http_status=status.HTTP_400_BAD_REQUEST
        )
    if isinstance(exc, ProductNotFound):
        return error_response(
            code="PRODUCT_NOT_FOUND", message=str(exc), http_status=status.HTTP_404_NOT_FOUND
        )
    if isinstance(exc, InvalidStockChange):
        return error_response(
            code="INVALID_STOCK_CHANGE", message=str(exc), http_status=status.HTTP_400_BAD_REQUEST
        )
    if isinstance(exc, InvalidRelocation):
        return error_response(
            code="INVALID_RELOCATION", message=str(exc), http_status=status.HTTP_400_BAD_REQUEST
        )
    if isinstance(exc, InvalidImageManifest):
        return error_response(
            code="INVALID_IMAGES", message=str(exc), http_status=status.HTTP_400_BAD_REQUEST
        )
    if isinstance(exc, ProductCodeError):
        return error_response(
            code="NUMBERING_FAILED",
            message=str(exc),
            http_status=status.HTTP_503_SERVICE_UNAVAILABLE,
        )
    if isinstance(exc, StockMutationError):
        if exc.product_applied:
            return error_response(
                code="AUDIT_APPEND_FAILED",
                message=f"{exc}. Verify the product before retrying.",
                http_status=status.HTTP_500_INTERNAL_SERVER_ERROR,
                product_applied=True,
            )
        return error_response(
            code="STOCK_UPDATE_FAILED",
            message=str(exc),
            http_status=status.HTTP_503_SERVICE_UNAVAILABLE,
            product_applied=False,
        )
    if isinstance(exc, ValidationError):
        return error_response(
            code="VALIDATION_ERROR",
            message=_validation_message(exc),
            http_status=status.HTTP_400_BAD_REQUEST,
        )
    if isinstance(exc, InventoryError):
        return error_response(
            code="INVENTORY_ERROR", message=str(exc), http_status=status.HTTP_400_BAD_REQUEST
        )
    raise exc
