"""
Transaction runner for engine operations.

Every multi-step mutation (create order, attach add-ons, cancel, ...) runs as
one atomic unit of work. When the database aborts that unit because of
contention (serialization failure, deadlock, lock timeout, SQLite's
"database is locked") the whole unit is retried with exponential backoff.

Retries only happen at the outermost level. A unit of work started from
inside an existing atomic block runs in a savepoint and lets contention
errors propagate, so the enclosing unit of work is the one that gets retried.
"""
import logging
import time

from django.conf import settings
from django.db import DEFAULT_DB_ALIAS, DatabaseError, OperationalError, transaction

from core_backend.exceptions import EngineError, TransactionFailed

logger = logging.getLogger(__name__)

# PostgreSQL SQLSTATEs: serialization_failure, deadlock_detected, lock_not_available
RETRYABLE_SQLSTATES = {"40001", "40P01", "55P03"}

RETRYABLE_MESSAGES = (
    "database is locked",
    "deadlock detected",
    "could not serialize access",
    "lock timeout",
    "could not obtain lock",
)


def is_retryable(exc):
    """Return True if the database error is transient contention."""
    if not isinstance(exc, OperationalError):
        return False
    cause = exc.__cause__
    pgcode = getattr(cause, "pgcode", None) or getattr(cause, "sqlstate", None)
    if pgcode in RETRYABLE_SQLSTATES:
        return True
    message = str(exc).lower()
    return any(fragment in message for fragment in RETRYABLE_MESSAGES)


def _engine_setting(name, default):
    return getattr(settings, "POS_ENGINE", {}).get(name, default)


def run_in_transaction(func, *args, using=DEFAULT_DB_ALIAS, max_retries=None, base_delay=None, **kwargs):
    """
    Run func(*args, **kwargs) inside transaction.atomic with bounded retry.

    EngineErrors pass through untouched (the transaction is rolled back).
    Other database errors become TransactionFailed once retries are exhausted.
    """
    connection = transaction.get_connection(using)

    if connection.in_atomic_block:
        with transaction.atomic(using=using):
            return func(*args, **kwargs)

    if max_retries is None:
        max_retries = _engine_setting("TRANSACTION_MAX_RETRIES", 3)
    if base_delay is None:
        base_delay = _engine_setting("TRANSACTION_RETRY_BASE_DELAY", 0.05)

    name = getattr(func, "__qualname__", repr(func))
    attempt = 0
    while True:
        try:
            with transaction.atomic(using=using):
                return func(*args, **kwargs)
        except EngineError:
            raise
        except OperationalError as e:
            if is_retryable(e) and attempt < max_retries:
                wait_time = base_delay * (2 ** attempt)
                attempt += 1
                logger.warning(
                    f"{name}: transient database contention, retrying in {wait_time:.2f}s "
                    f"(attempt {attempt}/{max_retries}): {e}"
                )
                time.sleep(wait_time)
                continue
            logger.error(f"{name}: transaction failed after {attempt + 1} attempt(s): {e}")
            raise TransactionFailed(
                "The operation could not be committed",
                details={"operation": name, "attempts": attempt + 1, "reason": str(e)},
            ) from e
        except DatabaseError as e:
            logger.error(f"{name}: transaction failed: {e}")
            raise TransactionFailed(
                "The operation could not be committed",
                details={"operation": name, "attempts": attempt + 1, "reason": str(e)},
            ) from e
