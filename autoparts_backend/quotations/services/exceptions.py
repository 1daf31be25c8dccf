# quotations/services/exceptions.py


class QuotationError(Exception):
    """Base class for quotation / order domain errors."""


class QuotationValidationError(QuotationError):
    def __init__(self, errors: dict):
        self.errors = dict(errors)
        super().__init__("; ".join(f"{k}: {v}" for k, v in self.errors.items()))


class QuotationNotFound(QuotationError):
    pass


class OrderNotFound(QuotationError):
    pass


class InvalidQuotationTransitionError(QuotationError):
    pass


class InvalidOrderTransitionError(QuotationError):
    pass


class OrderNotReadyError(InvalidOrderTransitionError):
    """picking -> ready refused while items are still unpicked."""


class QuotationNumberingError(QuotationError):
    """Quotation / order number could not be minted; nothing was saved. Safe to retry."""
