"""
Permission classes for the points ledger API.

The authenticated user's id is the caller's account id. Callers may read
only their own balances and history and may transfer only from their own
account. Staff may read any account.
"""
from rest_framework.permissions import BasePermission


def _is_own_account(request, account_id):
    return not account_id or str(account_id) == request.user.account_id


class CanReadLedgerAccount(BasePermission):
    """
    Allow reads of the account named in ``?userId=`` only by its owner or staff.

    Usage:
        @permission_classes([IsAuthenticated, CanReadLedgerAccount])
        def balance(request):
            ...
    """

    message = 'You can only view your own points.'

    def has_permission(self, request, view):
        if request.user.is_staff:
            return True
        return _is_own_account(request, request.query_params.get('userId'))


class CanTransferFromAccount(BasePermission):
    """Allow transfers only out of the caller's own account."""

    message = 'You can only transfer points from your own account.'

    def has_permission(self, request, view):
        if request.method != 'POST':
            return True
        data = request.data if hasattr(request.data, 'get') else {}
        return _is_own_account(request, data.get('fromUserId'))
