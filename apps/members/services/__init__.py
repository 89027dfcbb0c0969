"""
Members app services layer: the credit ledger store.

Services contain business logic and orchestrate operations across models.
All balance-changing operations run in a transaction with the member row
locked.
"""

from .exceptions import (
    LedgerServiceError,
    MemberNotFoundError,
    MemberInactiveError,
    InvalidAmountError,
    InsufficientCreditsError,
    LedgerContentionError,
)

from .contention import (
    translate_contention,
    with_contention_retry,
)

from .ledger import (
    get_member,
    lock_member,
    apply_to_locked_member,
    apply_balance_change,
    set_balance,
    adjust_balance,
    list_transactions,
    replay_balance,
    find_ledger_mismatches,
)

from .enrollment import (
    enroll_member,
)


__all__ = [
    # Exceptions
    'LedgerServiceError',
    'MemberNotFoundError',
    'MemberInactiveError',
    'InvalidAmountError',
    'InsufficientCreditsError',
    'LedgerContentionError',

    # Contention
    'translate_contention',
    'with_contention_retry',

    # Ledger store
    'get_member',
    'lock_member',
    'apply_to_locked_member',
    'apply_balance_change',
    'set_balance',
    'adjust_balance',
    'list_transactions',
    'replay_balance',
    'find_ledger_mismatches',

    # Enrollment
    'enroll_member',
]
