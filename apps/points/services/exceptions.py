"""
Domain exceptions for the points ledger.

These exceptions represent business rule violations and infrastructure
failures raised by the services layer. Views translate them into HTTP
responses using ``code`` and ``retryable``.

Exception Hierarchy:
    LedgerError (base)
    ├── InvalidAmountError
    ├── SelfTransferError
    ├── UnknownRestaurantError
    ├── InsufficientBalanceError
    ├── DuplicateRequestError
    ├── StorageUnavailableError   (retryable)
    └── LedgerTimeoutError        (retryable)
"""


class LedgerError(Exception):
    """Base exception for all points ledger errors."""

    code = 'ledger_error'
    retryable = False


class InvalidAmountError(LedgerError):
    """Raised when an amount is not a positive value with two decimal places."""

    code = 'invalid_amount'


class SelfTransferError(LedgerError):
    """Raised when a user tries to transfer points to themselves."""

    code = 'self_transfer'


class UnknownRestaurantError(LedgerError):
    """Raised when a restaurant id is not in the active catalog."""

    code = 'unknown_restaurant'


class InsufficientBalanceError(LedgerError):
    """
    Raised when a debit exceeds the current balance.

    The balance seen under lock is kept so clients can display it.
    """

    code = 'insufficient_balance'

    def __init__(self, message, *, balance):
        super().__init__(message)
        self.balance = balance


class DuplicateRequestError(LedgerError):
    """Raised when a request token or receipt code was already used differently."""

    code = 'duplicate_request'


class StorageUnavailableError(LedgerError):
    """Raised on a transient database failure. Nothing was written."""

    code = 'storage_unavailable'
    retryable = True


class LedgerTimeoutError(LedgerError):
    """
    Raised when a write could not be completed in time.

    Either every attempt rolled back, or the commit itself failed and the
    outcome is unknown. Retrying a transfer with the same request token, or
    rescanning the same receipt, is safe.
    """

    code = 'timeout'
    retryable = True
