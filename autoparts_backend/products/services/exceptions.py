# products/services/exceptions.py


class InventoryError(Exception):
    """Base class for warehouse / stock domain errors."""


class InvalidQRPayload(InventoryError):
    """Scanned text is not a product label payload."""


class ProductNotFound(InventoryError):
    pass


class InvalidStockChange(InventoryError):
    """Quantity / delta input rejected before anything is written."""


class InvalidRelocation(InventoryError):
    pass


class InvalidImageManifest(InventoryError):
    pass


class StockMutationError(InventoryError):
    """
    Persisting the product or appending its audit record failed.

    product_applied=True means the product row was already updated and
    stays updated (no rollback); only the audit append failed.
    """

    def __init__(self, message: str, *, product_applied: bool = False):
        super().__init__(message)
        self.product_applied = product_applied


class ProductCodeError(InventoryError):
    """Product code could not be minted; nothing was saved. Safe to retry."""
