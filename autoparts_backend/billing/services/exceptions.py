# billing/services/exceptions.py


class BillingError(Exception):
    """Base class for invoicing domain errors."""


class BillValidationError(BillingError):
    """
    Bill input rejected before anything was persisted.

    errors maps a field path ("party_name", "items[1].rate") to a message.
    """

    def __init__(self, errors: dict):
        self.errors = dict(errors)
        super().__init__("; ".join(f"{k}: {v}" for k, v in self.errors.items()))


class NumberingError(BillingError):
    """No bill number could be minted. Nothing was saved; safe to retry."""


class PartialSaveError(BillingError):
    """
    A bill number was minted but the bill could not be saved.

    The number is burnt. The operator must check the bills list before
    retrying so the sale is not billed twice.
    """

    def __init__(self, message: str, *, bill_number: str):
        super().__init__(message)
        self.bill_number = bill_number


class DocumentGenerationError(BillingError):
    """The bill is saved but its PDF could not be produced or stored."""


class PaymentError(BillingError):
    pass
