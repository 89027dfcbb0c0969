"""
Service layer unit tests for the credit ledger.

Tests cover:
- Balance changes and their transaction rows
- Negative-balance policy (clamp / reject)
- Absolute and delta admin edits
- Ledger replay and the verify_ledger command
- Concurrency protection (row locks under real transactions)
"""

import pytest
import threading
from io import StringIO
from uuid import uuid4
from unittest.mock import patch
from django.core.management import call_command, CommandError
from django.db import OperationalError, connection
from django.test import TransactionTestCase

from apps.accounts.models import Organization, User, UserRole
from apps.members.models import Member, CreditTransaction, TransactionType
from apps.members.services import (
    apply_balance_change,
    set_balance,
    adjust_balance,
    enroll_member,
    list_transactions,
    replay_balance,
    find_ledger_mismatches,
    with_contention_retry,
)
from apps.members.services.exceptions import (
    MemberNotFoundError,
    InvalidAmountError,
    InsufficientCreditsError,
    LedgerContentionError,
)


# =============================================================================
# Ledger Store Tests
# =============================================================================

@pytest.mark.django_db
class TestApplyBalanceChange:
    """Tests for apply_balance_change()."""

    def test_add_credits(self, member, admin_user):
        """Adding credits updates the balance and writes one transaction."""
        entry = apply_balance_change(
            member_id=member.id,
            organization_id=member.organization_id,
            amount=5,
            type=TransactionType.MANUAL_ADD,
            performed_by=admin_user,
        )

        member.refresh_from_db()
        assert member.credit_balance == 5
        assert entry.amount == 5
        assert entry.balance_before == 0
        assert entry.balance_after == 5
        assert entry.performed_by == admin_user
        assert entry.description == 'Credit added manually'

    def test_deduct_credits(self, member):
        """Deducting within the balance records a negative amount."""
        apply_balance_change(
            member_id=member.id,
            organization_id=member.organization_id,
            amount=10,
            type=TransactionType.MANUAL_ADD,
        )
        entry = apply_balance_change(
            member_id=member.id,
            organization_id=member.organization_id,
            amount=-3,
            type=TransactionType.BOOKING_DEBIT,
            description='Morning ride',
        )

        member.refresh_from_db()
        assert member.credit_balance == 7
        assert entry.amount == -3
        assert (entry.balance_before, entry.balance_after) == (10, 7)
        assert entry.description == 'Morning ride'
        assert entry.performed_by is None

    def test_clamp_policy_stops_at_zero(self, member, settings):
        """Under 'clamp', overdrafts stop at zero and record the applied delta."""
        settings.LEDGER_NEGATIVE_BALANCE_POLICY = 'clamp'
        apply_balance_change(
            member_id=member.id,
            organization_id=member.organization_id,
            amount=2,
            type=TransactionType.MANUAL_ADD,
        )

        entry = apply_balance_change(
            member_id=member.id,
            organization_id=member.organization_id,
            amount=-5,
            type=TransactionType.MANUAL_DEDUCT,
        )

        member.refresh_from_db()
        assert member.credit_balance == 0
        assert entry.amount == -2
        assert entry.balance_after == 0

    def test_clamp_on_empty_balance_writes_nothing(self, member, settings):
        """A clamped deduction with nothing to deduct is a no-op."""
        settings.LEDGER_NEGATIVE_BALANCE_POLICY = 'clamp'

        entry = apply_balance_change(
            member_id=member.id,
            organization_id=member.organization_id,
            amount=-1,
            type=TransactionType.MANUAL_DEDUCT,
        )

        assert entry is None
        assert CreditTransaction.objects.filter(member=member).count() == 0

    def test_reject_policy_raises(self, member, settings):
        """Under 'reject', overdrafts fail and nothing changes."""
        settings.LEDGER_NEGATIVE_BALANCE_POLICY = 'reject'
        apply_balance_change(
            member_id=member.id,
            organization_id=member.organization_id,
            amount=2,
            type=TransactionType.MANUAL_ADD,
        )

        with pytest.raises(InsufficientCreditsError):
            apply_balance_change(
                member_id=member.id,
                organization_id=member.organization_id,
                amount=-3,
                type=TransactionType.MANUAL_DEDUCT,
            )

        member.refresh_from_db()
        assert member.credit_balance == 2
        assert CreditTransaction.objects.filter(member=member).count() == 1

    @pytest.mark.parametrize('amount', [0, 1.5, '3', True])
    def test_invalid_amount(self, member, amount):
        """Amounts must be non-zero whole numbers."""
        with pytest.raises(InvalidAmountError):
            apply_balance_change(
                member_id=member.id,
                organization_id=member.organization_id,
                amount=amount,
                type=TransactionType.MANUAL_ADD,
            )

    def test_unknown_type(self, member):
        with pytest.raises(InvalidAmountError):
            apply_balance_change(
                member_id=member.id,
                organization_id=member.organization_id,
                amount=1,
                type='GIFT',
            )

    def test_member_not_found(self, organization):
        with pytest.raises(MemberNotFoundError):
            apply_balance_change(
                member_id=uuid4(),
                organization_id=organization.id,
                amount=1,
                type=TransactionType.MANUAL_ADD,
            )

    def test_member_of_other_organization_not_found(self, member, other_organization):
        """Members are invisible outside their organization."""
        with pytest.raises(MemberNotFoundError):
            apply_balance_change(
                member_id=member.id,
                organization_id=other_organization.id,
                amount=1,
                type=TransactionType.MANUAL_ADD,
            )

    def test_lock_failure_becomes_contention_error(self, member):
        """Database lock errors surface as the retryable contention error."""
        with patch(
            'apps.members.services.ledger.lock_member',
            side_effect=OperationalError('database is locked'),
        ):
            with pytest.raises(LedgerContentionError):
                apply_balance_change(
                    member_id=member.id,
                    organization_id=member.organization_id,
                    amount=1,
                    type=TransactionType.MANUAL_ADD,
                )


@pytest.mark.django_db
class TestSetAndAdjustBalance:
    """Tests for set_balance() and adjust_balance()."""

    def test_set_balance_records_difference(self, member, admin_user):
        set_balance(member_id=member.id, organization_id=member.organization_id, new_balance=8)
        entry = set_balance(
            member_id=member.id,
            organization_id=member.organization_id,
            new_balance=3,
            performed_by=admin_user,
        )

        member.refresh_from_db()
        assert member.credit_balance == 3
        assert entry.amount == -5
        assert entry.type == TransactionType.MANUAL_DEDUCT

    def test_set_balance_unchanged_is_noop(self, member):
        assert set_balance(member_id=member.id, organization_id=member.organization_id, new_balance=0) is None
        assert CreditTransaction.objects.filter(member=member).count() == 0

    def test_set_balance_negative_rejected(self, member):
        with pytest.raises(InvalidAmountError):
            set_balance(member_id=member.id, organization_id=member.organization_id, new_balance=-1)

    def test_adjust_balance_delta(self, member):
        updated = adjust_balance(member_id=member.id, organization_id=member.organization_id, delta=4)

        assert updated.credit_balance == 4
        assert CreditTransaction.objects.get(member=member).type == TransactionType.MANUAL_ADD

    def test_adjust_balance_absolute(self, member):
        updated = adjust_balance(member_id=member.id, organization_id=member.organization_id, absolute=12)

        assert updated.credit_balance == 12

    def test_adjust_balance_requires_exactly_one(self, member):
        with pytest.raises(InvalidAmountError):
            adjust_balance(member_id=member.id, organization_id=member.organization_id)
        with pytest.raises(InvalidAmountError):
            adjust_balance(
                member_id=member.id,
                organization_id=member.organization_id,
                delta=1,
                absolute=1,
            )


@pytest.mark.django_db
class TestLedgerIntegrity:
    """Tests for replay and the ledger audit."""

    def test_replay_equals_stored_balance(self, member):
        """Folding the transactions from zero gives the stored balance."""
        for amount in [10, -3, 5, -20, 7]:
            apply_balance_change(
                member_id=member.id,
                organization_id=member.organization_id,
                amount=amount,
                type=TransactionType.MANUAL_ADD if amount > 0 else TransactionType.MANUAL_DEDUCT,
            )

        member.refresh_from_db()
        assert replay_balance(member_id=member.id, organization_id=member.organization_id) == member.credit_balance

        entries = list(list_transactions(member_id=member.id, organization_id=member.organization_id))
        running = 0
        for entry in entries:
            assert entry.balance_before == running
            running = entry.balance_after
        assert running == member.credit_balance

    def test_transactions_are_immutable(self, member):
        entry = apply_balance_change(
            member_id=member.id,
            organization_id=member.organization_id,
            amount=1,
            type=TransactionType.MANUAL_ADD,
        )

        entry.amount = 100
        with pytest.raises(ValueError):
            entry.save()
        with pytest.raises(ValueError):
            entry.delete()

    def test_enroll_member_with_opening_credits(self, organization, admin_user):
        member = enroll_member(organization=organization, opening_credits=6, performed_by=admin_user)

        assert member.credit_balance == 6
        entry = CreditTransaction.objects.get(member=member)
        assert entry.description == 'Opening balance'

    def test_find_ledger_mismatches(self, member):
        apply_balance_change(
            member_id=member.id,
            organization_id=member.organization_id,
            amount=3,
            type=TransactionType.MANUAL_ADD,
        )
        assert find_ledger_mismatches() == []

        Member.objects.filter(id=member.id).update(credit_balance=9)

        mismatches = find_ledger_mismatches(organization_id=member.organization_id)
        assert [(m.id, replayed) for m, replayed in mismatches] == [(member.id, 3)]

    def test_verify_ledger_command(self, member):
        out = StringIO()
        call_command('verify_ledger', stdout=out)
        assert 'consistent' in out.getvalue()

        Member.objects.filter(id=member.id).update(credit_balance=2)
        with pytest.raises(CommandError):
            call_command('verify_ledger', stdout=StringIO())


@pytest.mark.django_db
class TestContentionRetry:
    """Tests for with_contention_retry()."""

    def test_retries_then_succeeds(self):
        calls = []

        def flaky():
            calls.append(1)
            if len(calls) < 3:
                raise LedgerContentionError('locked')
            return 'done'

        with patch('apps.members.services.contention.transaction.get_connection') as get_connection:
            get_connection.return_value.in_atomic_block = False
            assert with_contention_retry(flaky, attempts=3, backoff=0) == 'done'
        assert len(calls) == 3

    def test_gives_up_after_attempts(self):
        def always_locked():
            raise LedgerContentionError('locked')

        with patch('apps.members.services.contention.transaction.get_connection') as get_connection:
            get_connection.return_value.in_atomic_block = False
            with pytest.raises(LedgerContentionError):
                with_contention_retry(always_locked, attempts=2, backoff=0)

    def test_single_attempt_inside_atomic_block(self):
        """Inside a test transaction a retry cannot help, so it is not attempted."""
        calls = []

        def always_locked():
            calls.append(1)
            raise LedgerContentionError('locked')

        with pytest.raises(LedgerContentionError):
            with_contention_retry(always_locked, attempts=5, backoff=0)
        assert len(calls) == 1


# =============================================================================
# Concurrency Tests
# =============================================================================

class TestLedgerConcurrency(TransactionTestCase):
    """
    Tests for concurrency protection using TransactionTestCase.

    Each thread runs on its own database connection, so the member row
    lock is exercised for real.
    """

    def setUp(self):
        self.organization = Organization.objects.create(name='Ride Studio', slug='ride-studio')
        self.admin = User.objects.create_user(
            email='admin@example.com',
            password='TestPass123!',
            organization=self.organization,
            role=UserRole.TENANT_ADMIN,
        )
        self.member = Member.objects.create(organization=self.organization)

    def _run_threads(self, target, count):
        def run():
            try:
                target()
            finally:
                connection.close()

        threads = [threading.Thread(target=run) for _ in range(count)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

    def test_concurrent_additions_are_not_lost(self):
        """N concurrent +1 changes produce balance N and N transactions."""
        errors = []

        def add_one():
            try:
                with_contention_retry(
                    apply_balance_change,
                    member_id=self.member.id,
                    organization_id=self.organization.id,
                    amount=1,
                    type=TransactionType.MANUAL_ADD,
                    performed_by=self.admin,
                    attempts=5,
                )
            except LedgerContentionError as e:
                errors.append(e)

        self._run_threads(add_one, 5)

        self.member.refresh_from_db()
        succeeded = 5 - len(errors)
        assert self.member.credit_balance == succeeded
        assert CreditTransaction.objects.filter(member=self.member).count() == succeeded
        assert replay_balance(
            member_id=self.member.id,
            organization_id=self.organization.id,
        ) == self.member.credit_balance
