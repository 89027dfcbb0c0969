"""
Ledger store service.

The only code allowed to write ``Member.credit_balance`` and the sole writer
of ``CreditTransaction`` rows. Every mutation locks the member row with
SELECT ... FOR UPDATE, so the balance read as ``balance_before`` cannot go
stale before the new balance and its transaction row are written.
"""

import logging
from typing import Optional
from uuid import UUID

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import QuerySet, Sum

from apps.accounts.models import User
from apps.members.models import CreditTransaction, Member, TransactionType

from .contention import translate_contention
from .exceptions import (
    InsufficientCreditsError,
    InvalidAmountError,
    MemberNotFoundError,
)

logger = logging.getLogger(__name__)

CLAMP = 'clamp'
REJECT = 'reject'

DEFAULT_DESCRIPTIONS = {
    TransactionType.MANUAL_ADD: 'Credit added manually',
    TransactionType.MANUAL_DEDUCT: 'Credit deducted manually',
    TransactionType.REDEMPTION_CREDIT: 'Package redemption approved',
    TransactionType.BOOKING_DEBIT: 'Session booked',
    TransactionType.BOOKING_REFUND: 'Booking refunded',
}


def _require_int(value, field_name: str) -> int:
    # bool is an int subclass; True must not become one credit
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidAmountError(f"{field_name} must be a whole number of credits")
    return value


def get_member(*, member_id: UUID, organization_id: UUID) -> Member:
    """
    Get a member of the organization without locking it.

    Raises:
        MemberNotFoundError: If the member doesn't exist in this organization
    """
    try:
        return (
            Member.objects
            .select_related('user')
            .get(id=member_id, organization_id=organization_id)
        )
    except (Member.DoesNotExist, ValidationError, ValueError):
        raise MemberNotFoundError(f"Member with ID {member_id} not found")


def lock_member(*, member_id: UUID, organization_id: UUID) -> Member:
    """
    Lock and return the member row. Must be called inside a transaction.

    Raises:
        MemberNotFoundError: If the member doesn't exist in this organization
    """
    try:
        return (
            Member.objects
            .select_for_update()
            .get(id=member_id, organization_id=organization_id)
        )
    except (Member.DoesNotExist, ValidationError, ValueError):
        raise MemberNotFoundError(f"Member with ID {member_id} not found")


def apply_to_locked_member(
    member: Member,
    *,
    amount: int,
    type: str,
    description: str = '',
    performed_by: Optional[User] = None
) -> Optional[CreditTransaction]:
    """
    Apply a signed credit change to a member whose row the caller has locked.

    Balances never go negative. A deduction past zero follows
    ``settings.LEDGER_NEGATIVE_BALANCE_POLICY``: ``clamp`` stops at zero and
    records only the applied delta, ``reject`` raises.

    Returns:
        The created CreditTransaction, or None when the applied delta is zero

    Raises:
        InsufficientCreditsError: If the policy is ``reject`` and the balance
            would become negative
    """
    balance_before = member.credit_balance
    balance_after = balance_before + amount

    if balance_after < 0:
        if settings.LEDGER_NEGATIVE_BALANCE_POLICY == REJECT:
            raise InsufficientCreditsError(
                f"Balance is {balance_before} credits, cannot deduct {-amount}"
            )
        logger.warning(
            'Clamped deduction for member %s: requested %d, balance %d, %d credits not deducted',
            member.id, amount, balance_before, -balance_after,
        )
        balance_after = 0

    applied = balance_after - balance_before
    if applied == 0:
        return None

    member.credit_balance = balance_after
    member.save(update_fields=['credit_balance', 'updated_at'])

    entry = CreditTransaction.objects.create(
        member=member,
        organization_id=member.organization_id,
        amount=applied,
        balance_before=balance_before,
        balance_after=balance_after,
        type=type,
        description=description or DEFAULT_DESCRIPTIONS.get(type, ''),
        performed_by=performed_by,
    )

    logger.info(
        'Ledger %s for member %s: %+d (%d -> %d) by %s',
        type, member.id, applied, balance_before, balance_after,
        performed_by.id if performed_by else 'system',
    )
    return entry


@translate_contention
@transaction.atomic
def apply_balance_change(
    *,
    member_id: UUID,
    organization_id: UUID,
    amount: int,
    type: str,
    description: str = '',
    performed_by: Optional[User] = None
) -> Optional[CreditTransaction]:
    """
    Add (positive amount) or deduct (negative amount) credits atomically.

    Args:
        member_id: UUID of the member
        organization_id: UUID of the caller's organization
        amount: Non-zero signed whole number of credits
        type: TransactionType value recorded on the transaction
        description: Human-readable reason (defaults per type)
        performed_by: Acting user, None for system-initiated changes

    Returns:
        The created CreditTransaction, or None if clamping left nothing to apply

    Raises:
        InvalidAmountError: If amount is zero or not an integer
        MemberNotFoundError: If the member doesn't exist in this organization
        InsufficientCreditsError: Under the ``reject`` negative-balance policy
        LedgerContentionError: On lock timeout / deadlock (retry the call)
    """
    _require_int(amount, 'amount')
    if amount == 0:
        raise InvalidAmountError('amount must be non-zero')
    if type not in TransactionType.values:
        raise InvalidAmountError(f"Unknown transaction type: {type}")

    member = lock_member(member_id=member_id, organization_id=organization_id)
    return apply_to_locked_member(
        member,
        amount=amount,
        type=type,
        description=description,
        performed_by=performed_by,
    )


@translate_contention
@transaction.atomic
def set_balance(
    *,
    member_id: UUID,
    organization_id: UUID,
    new_balance: int,
    description: str = '',
    performed_by: Optional[User] = None
) -> Optional[CreditTransaction]:
    """
    Set a member's balance to an absolute value (admin direct edit).

    The difference to the current balance is recorded as a MANUAL_ADD or
    MANUAL_DEDUCT transaction. An unchanged balance is a no-op.

    Raises:
        InvalidAmountError: If new_balance is negative or not an integer
        MemberNotFoundError: If the member doesn't exist in this organization
        LedgerContentionError: On lock timeout / deadlock (retry the call)
    """
    _require_int(new_balance, 'new_balance')
    if new_balance < 0:
        raise InvalidAmountError('Balance cannot be negative')

    member = lock_member(member_id=member_id, organization_id=organization_id)
    difference = new_balance - member.credit_balance
    if difference == 0:
        return None

    return apply_to_locked_member(
        member,
        amount=difference,
        type=TransactionType.MANUAL_ADD if difference > 0 else TransactionType.MANUAL_DEDUCT,
        description=description,
        performed_by=performed_by,
    )


def adjust_balance(
    *,
    member_id: UUID,
    organization_id: UUID,
    delta: Optional[int] = None,
    absolute: Optional[int] = None,
    description: str = '',
    performed_by: Optional[User] = None
) -> Member:
    """
    Admin balance edit: either a signed ``delta`` or an ``absolute`` balance.

    Returns:
        The member with its updated balance

    Raises:
        InvalidAmountError: If not exactly one of delta/absolute is given
        MemberNotFoundError: If the member doesn't exist in this organization
    """
    if (delta is None) == (absolute is None):
        raise InvalidAmountError('Provide exactly one of delta or absolute')

    if absolute is not None:
        set_balance(
            member_id=member_id,
            organization_id=organization_id,
            new_balance=absolute,
            description=description,
            performed_by=performed_by,
        )
    else:
        _require_int(delta, 'delta')
        if delta != 0:
            apply_balance_change(
                member_id=member_id,
                organization_id=organization_id,
                amount=delta,
                type=TransactionType.MANUAL_ADD if delta > 0 else TransactionType.MANUAL_DEDUCT,
                description=description,
                performed_by=performed_by,
            )

    return get_member(member_id=member_id, organization_id=organization_id)


def list_transactions(*, member_id: UUID, organization_id: UUID) -> QuerySet[CreditTransaction]:
    """
    Get a member's ledger, oldest first.

    Raises:
        MemberNotFoundError: If the member doesn't exist in this organization
    """
    get_member(member_id=member_id, organization_id=organization_id)

    return (
        CreditTransaction.objects
        .filter(member_id=member_id, organization_id=organization_id)
        .select_related('performed_by')
        .order_by('created_at', 'id')
    )


def replay_balance(*, member_id: UUID, organization_id: UUID) -> int:
    """Fold the member's transactions from zero."""
    total = (
        CreditTransaction.objects
        .filter(member_id=member_id, organization_id=organization_id)
        .aggregate(total=Sum('amount'))['total']
    )
    return total or 0


def find_ledger_mismatches(*, organization_id: Optional[UUID] = None) -> list[tuple[Member, int]]:
    """
    Audit every member whose stored balance differs from its replayed ledger.

    Returns:
        List of (member, replayed_balance) pairs; empty when the ledger is sound
    """
    members = Member.objects.annotate(ledger_total=Sum('credit_transactions__amount'))
    if organization_id:
        members = members.filter(organization_id=organization_id)

    mismatches = []
    for member in members:
        replayed = member.ledger_total or 0
        if replayed != member.credit_balance:
            mismatches.append((member, replayed))
    return mismatches
