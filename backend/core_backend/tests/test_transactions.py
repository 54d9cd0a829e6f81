"""
Transaction Runner Tests

Verifies that engine operations commit as a single unit of work, that
transient contention is retried with backoff at the outermost level only,
and that non-transient database failures surface as TransactionFailed.
"""
import pytest
from decimal import Decimal

from django.db import DatabaseError, IntegrityError, OperationalError, transaction

from audit.models import AuditLogEntry
from audit.services import Action
from core_backend.exceptions import NotFound, TransactionFailed
from core_backend.infrastructure.transactions import is_retryable, run_in_transaction
from inventory.models import Ingredient
from inventory.services import InventoryLedger
from orders.models import Order
from orders.services import OrderLifecycleService


class FlakyOperation:
    """Fails with the given error for the first `failures` calls."""

    def __init__(self, failures, error=None):
        self.failures = failures
        self.error = error or OperationalError("database is locked")
        self.calls = 0

    def __call__(self, name="Flour"):
        self.calls += 1
        ingredient = Ingredient.objects.create(name=f"{name} {self.calls}", unit="g")
        if self.calls <= self.failures:
            raise self.error
        return ingredient


class TestIsRetryable:

    def test_sqlite_lock_is_retryable(self):
        assert is_retryable(OperationalError("database is locked"))

    def test_deadlock_message_is_retryable(self):
        assert is_retryable(OperationalError("ERROR: deadlock detected"))

    def test_postgres_serialization_failure_sqlstate(self):
        class PgError(Exception):
            pgcode = "40001"

        error = OperationalError("could not complete")
        error.__cause__ = PgError()
        assert is_retryable(error)

    def test_integrity_error_is_not_retryable(self):
        assert not is_retryable(IntegrityError("UNIQUE constraint failed"))

    def test_other_operational_errors_are_not_retryable(self):
        assert not is_retryable(OperationalError("no such table: inventory_ingredient"))


@pytest.mark.django_db(transaction=True)
class TestRunInTransaction:

    def test_retries_transient_contention_then_succeeds(self):
        """
        CRITICAL: A unit of work aborted by lock contention is retried

        Scenario: first two attempts fail with "database is locked"
        Expected: third attempt commits; rows written by failed attempts are rolled back
        """
        operation = FlakyOperation(failures=2)

        ingredient = run_in_transaction(operation)

        assert operation.calls == 3
        assert ingredient.name == "Flour 3"
        assert list(Ingredient.objects.values_list("name", flat=True)) == ["Flour 3"]

    def test_retry_exhaustion_raises_transaction_failed(self):
        operation = FlakyOperation(failures=10)

        with pytest.raises(TransactionFailed) as exc_info:
            run_in_transaction(operation, max_retries=2)

        assert operation.calls == 3
        assert exc_info.value.code == "TRANSACTION_FAILED"
        assert exc_info.value.details["attempts"] == 3
        assert "database is locked" in exc_info.value.details["reason"]
        assert Ingredient.objects.count() == 0

    def test_non_retryable_database_error_fails_immediately(self):
        operation = FlakyOperation(failures=1, error=DatabaseError("disk I/O error"))

        with pytest.raises(TransactionFailed):
            run_in_transaction(operation)

        assert operation.calls == 1
        assert Ingredient.objects.count() == 0

    def test_engine_errors_pass_through_and_roll_back(self):
        def create_then_fail():
            Ingredient.objects.create(name="Salt", unit="g")
            raise NotFound("Menu item 99 not found", code="MENU_ITEM_NOT_FOUND")

        with pytest.raises(NotFound) as exc_info:
            run_in_transaction(create_then_fail)

        assert exc_info.value.code == "MENU_ITEM_NOT_FOUND"
        assert not Ingredient.objects.filter(name="Salt").exists()

    def test_nested_call_does_not_retry(self):
        """
        Inside an enclosing atomic block contention propagates unchanged so
        the outermost unit of work is the one retried.
        """
        operation = FlakyOperation(failures=1)

        with pytest.raises(OperationalError):
            with transaction.atomic():
                run_in_transaction(operation)

        assert operation.calls == 1

    def test_retry_logs_warning(self, caplog):
        operation = FlakyOperation(failures=1)

        with caplog.at_level("WARNING", logger="core_backend.infrastructure.transactions"):
            run_in_transaction(operation)

        assert "retrying" in caplog.text
        assert Ingredient.objects.get().current_stock == Decimal("0")


class LockedOnceRestoreLedger(InventoryLedger):
    """Hits a locked database on the second restoration of the first attempt."""

    def __init__(self):
        super().__init__()
        self.restore_calls = 0

    def increment(self, ingredient_id, amount, **kwargs):
        if kwargs.get("action") == Action.INVENTORY_RESTORE_CANCELLED_ORDER:
            self.restore_calls += 1
            if self.restore_calls == 2:
                raise OperationalError("database is locked")
        return super().increment(ingredient_id, amount, **kwargs)


@pytest.mark.django_db(transaction=True)
class TestCancellationRetry:

    def test_contention_during_restore_retries_whole_cancellation(self, burger, bun, patty, cheese):
        """
        CRITICAL: A locked database while restoring stock is retried, not
        reported as a failed restoration

        Expected: the first attempt rolls back, the retry restores all three
        ingredients exactly once and the order ends CANCELLED
        """
        ledger = LockedOnceRestoreLedger()
        service = OrderLifecycleService(ledger=ledger)
        order = service.create_order(items=[{"menu_item_id": burger.id, "quantity": 2}]).data

        result = service.cancel(order.id)

        assert result.data.status == Order.OrderStatus.CANCELLED
        assert ledger.restore_calls == 5
        assert Ingredient.objects.get(pk=bun.pk).current_stock == Decimal("50")
        assert Ingredient.objects.get(pk=patty.pk).current_stock == Decimal("40")
        assert Ingredient.objects.get(pk=cheese.pk).current_stock == Decimal("100")
        entries = AuditLogEntry.objects.for_order(order.id)
        assert entries.filter(action=Action.INVENTORY_RESTORE_CANCELLED_ORDER).count() == 3
        assert not entries.filter(action=Action.INVENTORY_RESTORE_FAILED).exists()

    def test_persistent_contention_becomes_transaction_failed(self, burger, cheese):
        class AlwaysLockedLedger(InventoryLedger):
            def increment(self, ingredient_id, amount, **kwargs):
                if kwargs.get("action") == Action.INVENTORY_RESTORE_CANCELLED_ORDER:
                    raise OperationalError("database is locked")
                return super().increment(ingredient_id, amount, **kwargs)

        service = OrderLifecycleService(ledger=AlwaysLockedLedger())
        order = service.create_order(items=[{"menu_item_id": burger.id, "quantity": 1}]).data

        with pytest.raises(TransactionFailed):
            service.cancel(order.id)

        assert Order.objects.get(pk=order.id).status == Order.OrderStatus.PENDING
        assert not AuditLogEntry.objects.filter(action=Action.INVENTORY_RESTORE_FAILED).exists()
