"""Transfer history queries."""

from django.db.models import Q, QuerySet

from ..models import TransferRecord, TransferStatus, RecipientKind


def get_transfer_history(user_id, *, include_failed: bool = False) -> QuerySet[TransferRecord]:
    """
    Transfers a user sent or received as a user, newest first.

    Args:
        user_id: The user's account id
        include_failed: Also return audit records of rejected transfers
            the user attempted
    """
    user_id = str(user_id)
    # Failed records only concern the sender
    queryset = TransferRecord.objects.filter(
        Q(from_user_id=user_id) |
        Q(to_id=user_id, to_kind=RecipientKind.USER, status=TransferStatus.COMMITTED)
    )
    if not include_failed:
        queryset = queryset.filter(status=TransferStatus.COMMITTED)
    return queryset.select_related('restaurant').order_by('-created_at', '-id')
