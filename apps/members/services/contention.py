"""
Lock-contention handling for balance-changing operations.

Database lock timeouts, deadlocks and serialization failures surface as
``OperationalError``. They are translated into ``LedgerContentionError`` so
callers can retry the whole atomic operation.
"""

import functools
import logging
import time

from django.conf import settings
from django.db import OperationalError, transaction

from .exceptions import LedgerContentionError

logger = logging.getLogger(__name__)


def translate_contention(func):
    """
    Re-raise ``OperationalError`` from ``func`` as ``LedgerContentionError``.

    Place it outside ``@transaction.atomic`` so the transaction has already
    been rolled back when the translated error propagates.
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except OperationalError as e:
            raise LedgerContentionError(f"Storage contention: {e}") from e
    return wrapper


def with_contention_retry(func, *args, attempts=None, backoff=0.05, **kwargs):
    """
    Call ``func(*args, **kwargs)`` and retry it on ``LedgerContentionError``.

    The whole operation is re-run on each attempt, so ``balance_before`` is
    always re-read under a fresh lock. Inside an outer atomic block a retry
    cannot help (the outer transaction is already doomed), so the call is
    made exactly once there.

    Args:
        func: Atomic service function to call
        attempts: Total attempts (default ``settings.LEDGER_CONTENTION_RETRIES``)
        backoff: Base sleep in seconds, multiplied by the attempt number

    Raises:
        LedgerContentionError: If every attempt hit contention
    """
    if attempts is None:
        attempts = settings.LEDGER_CONTENTION_RETRIES
    attempts = max(1, attempts)
    if transaction.get_connection().in_atomic_block:
        attempts = 1

    for attempt in range(1, attempts + 1):
        try:
            return func(*args, **kwargs)
        except LedgerContentionError:
            if attempt >= attempts:
                raise
            logger.info(
                '%s hit storage contention (attempt %d/%d), retrying',
                func.__name__, attempt, attempts,
            )
            time.sleep(backoff * attempt)
