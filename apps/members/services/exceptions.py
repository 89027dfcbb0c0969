"""
Domain exceptions for the credit ledger.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses.

Exception Hierarchy:
    LedgerServiceError (base)
    ├── MemberNotFoundError
    ├── MemberInactiveError
    ├── InvalidAmountError
    ├── InsufficientCreditsError
    └── LedgerContentionError      (the only retryable error)
"""


class LedgerServiceError(Exception):
    """Base exception for all ledger service errors."""

    code = 'ledger_error'


class MemberNotFoundError(LedgerServiceError):
    """Raised when a member does not exist in the caller's organization."""

    code = 'member_not_found'


class MemberInactiveError(LedgerServiceError):
    """Raised when an inactive member tries to redeem or consume credits."""

    code = 'member_inactive'


class InvalidAmountError(LedgerServiceError):
    """Raised when a balance change amount or target balance is malformed."""

    code = 'invalid_amount'


class InsufficientCreditsError(LedgerServiceError):
    """Raised when a deduction would overdraw the balance under the 'reject' policy."""

    code = 'insufficient_credits'


class LedgerContentionError(LedgerServiceError):
    """
    Raised when the member row could not be locked or the transaction was
    aborted by the database (lock timeout, deadlock, serialization failure).

    The caller should retry the whole operation, never only the final write.
    """

    code = 'ledger_contention'
