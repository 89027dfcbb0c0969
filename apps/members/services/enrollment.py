"""
Member enrollment service.

A member starts at zero credits; any opening balance is written through the
ledger so the transaction history always folds to the stored balance.
"""

from typing import Optional

from django.db import transaction

from apps.accounts.models import Organization, User
from apps.members.models import Member, MemberStatus, TransactionType

from .exceptions import InvalidAmountError
from .ledger import apply_to_locked_member, lock_member


@transaction.atomic
def enroll_member(
    *,
    organization: Organization,
    user: Optional[User] = None,
    membership_type: str = '',
    opening_credits: int = 0,
    performed_by: Optional[User] = None
) -> Member:
    """
    Create a member in the organization, optionally with opening credits.

    Args:
        organization: Tenant the member belongs to
        user: Login account of the member, if any
        membership_type: Free-form membership label
        opening_credits: Credits granted at enrollment (recorded as MANUAL_ADD)
        performed_by: Acting user for the opening transaction

    Returns:
        Created Member instance
    """
    if isinstance(opening_credits, bool) or not isinstance(opening_credits, int) or opening_credits < 0:
        raise InvalidAmountError('opening_credits must be a non-negative whole number')

    member = Member.objects.create(
        organization=organization,
        user=user,
        membership_type=membership_type,
        status=MemberStatus.ACTIVE,
    )

    if opening_credits:
        locked = lock_member(member_id=member.id, organization_id=organization.id)
        apply_to_locked_member(
            locked,
            amount=opening_credits,
            type=TransactionType.MANUAL_ADD,
            description='Opening balance',
            performed_by=performed_by,
        )
        member.refresh_from_db()

    return member
