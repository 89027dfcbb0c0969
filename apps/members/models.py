# ==========================================
# apps/members/models.py
# ==========================================

from django.db import models
from django.db.models import F, Q
import uuid


class MemberStatus(models.TextChoices):
    ACTIVE = 'ACTIVE', 'Active'
    INACTIVE = 'INACTIVE', 'Inactive'


class TransactionType(models.TextChoices):
    MANUAL_ADD = 'MANUAL_ADD', 'Manual add'
    MANUAL_DEDUCT = 'MANUAL_DEDUCT', 'Manual deduct'
    REDEMPTION_CREDIT = 'REDEMPTION_CREDIT', 'Redemption credit'
    BOOKING_DEBIT = 'BOOKING_DEBIT', 'Booking debit'
    BOOKING_REFUND = 'BOOKING_REFUND', 'Booking refund'


class Member(models.Model):
    """
    Studio member holding a credit balance and entitlement flags.

    ``credit_balance`` is only written by the ledger service; the
    entitlement flags are only written by redemption approval and the
    expiry sweep.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    organization = models.ForeignKey(
        'accounts.Organization',
        on_delete=models.CASCADE,
        related_name='members'
    )
    user = models.OneToOneField(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='member_profile'
    )

    membership_type = models.CharField(max_length=50, blank=True)
    status = models.CharField(max_length=20, choices=MemberStatus.choices, default=MemberStatus.ACTIVE)

    # Ledger
    credit_balance = models.IntegerField(default=0)

    # Entitlements
    has_all_access = models.BooleanField(default=False)
    all_access_expires_at = models.DateTimeField(null=True, blank=True)
    is_elite_member = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'members'
        indexes = [
            models.Index(fields=['organization', 'status'], name='members_org_status_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(credit_balance__gte=0),
                name='member_credit_balance_non_negative',
            ),
        ]
        ordering = ['-created_at']

    def __str__(self):
        if self.user_id:
            return f"{self.user.get_display_name()} ({self.credit_balance} credits)"
        return f"Member {self.id} ({self.credit_balance} credits)"

    @property
    def is_active(self):
        return self.status == MemberStatus.ACTIVE


class CreditTransaction(models.Model):
    """
    One immutable balance mutation.

    Rows are append-only: ``balance_after == balance_before + amount`` and,
    per member in ``created_at`` order, they fold from zero to the stored
    ``Member.credit_balance``.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    member = models.ForeignKey(
        Member,
        on_delete=models.CASCADE,
        related_name='credit_transactions'
    )
    organization = models.ForeignKey(
        'accounts.Organization',
        on_delete=models.CASCADE,
        related_name='credit_transactions'
    )

    amount = models.IntegerField()
    balance_before = models.IntegerField()
    balance_after = models.IntegerField()
    type = models.CharField(max_length=30, choices=TransactionType.choices)
    description = models.CharField(max_length=500, blank=True)

    # Null for system-initiated transactions
    performed_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='performed_credit_transactions'
    )

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        db_table = 'credit_transactions'
        indexes = [
            models.Index(fields=['member', 'created_at'], name='credit_tx_member_created_idx'),
            models.Index(fields=['organization', 'created_at'], name='credit_tx_org_created_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(balance_after=F('balance_before') + F('amount')),
                name='credit_tx_balance_arithmetic',
            ),
            models.CheckConstraint(
                condition=~Q(amount=0),
                name='credit_tx_amount_non_zero',
            ),
        ]
        ordering = ['created_at', 'id']

    def __str__(self):
        sign = '+' if self.amount > 0 else ''
        return f"{sign}{self.amount} ({self.balance_before} -> {self.balance_after}) {self.type}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError('Credit transactions are immutable')
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValueError('Credit transactions are append-only')
