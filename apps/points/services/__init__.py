"""Services for the points ledger."""

from .exceptions import (
    LedgerError,
    InvalidAmountError,
    SelfTransferError,
    UnknownRestaurantError,
    InsufficientBalanceError,
    DuplicateRequestError,
    StorageUnavailableError,
    LedgerTimeoutError,
)
from .balance_store import (
    normalize_amount,
    get_balance,
    get_balances,
    list_balances,
    lock_accounts,
    credit,
    debit,
)
from .transfer_ledger import transfer
from .history import get_transfer_history
from .purchase_rewards import (
    compute_points,
    record_purchase,
    get_user_purchases,
)

__all__ = [
    # Exceptions
    'LedgerError',
    'InvalidAmountError',
    'SelfTransferError',
    'UnknownRestaurantError',
    'InsufficientBalanceError',
    'DuplicateRequestError',
    'StorageUnavailableError',
    'LedgerTimeoutError',
    # Balance Store
    'normalize_amount',
    'get_balance',
    'get_balances',
    'list_balances',
    'lock_accounts',
    'credit',
    'debit',
    # Transfer Ledger
    'transfer',
    'get_transfer_history',
    # Purchase Rewards
    'compute_points',
    'record_purchase',
    'get_user_purchases',
]
