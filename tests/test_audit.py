"""
Tests for the audit trail written by the wallet services.
"""

import asyncio

import pytest

from weekly_allowance.audit import AuditLogger, create_correlation_id
from weekly_allowance.exceptions import InsufficientBalanceError, InvalidAmountError
from weekly_allowance.models.audit import AuditEventBuilder, AuditEventType, AuditSeverity
from weekly_allowance.services.storage import AuditStorageInterface


class _BrokenAuditStorage(AuditStorageInterface):
    """Audit store whose writes always fail."""

    async def append_event(self, event):
        raise ConnectionError("audit store offline")

    async def get_events_by_correlation_id(self, correlation_id):
        return []

    async def get_events_by_entity(self, entity_type, entity_id):
        return []

    async def get_recent_events(self, limit=100):
        return []


def _events(wallet, limit=100):
    return asyncio.run(wallet.audit_logger.storage.get_recent_events(limit))


class TestServiceAuditing:
    """Tests that every service operation leaves an audit event."""

    def test_child_creation_is_audited(self, wallet, child):
        event = _events(wallet, limit=1)[0]

        assert event.event_type == AuditEventType.CHILD_CREATED
        assert event.entity_id == child.id
        assert event.details["name"] == "Tom"

    def test_deposit_is_audited(self, wallet, funded_child):
        event = _events(wallet, limit=1)[0]

        assert event.event_type == AuditEventType.DEPOSIT_RECORDED
        assert event.details["amount"] == "100.00"
        assert event.details["new_balance"] == "100.00"

    def test_expense_is_audited(self, wallet, funded_child):
        asyncio.run(wallet.record_expense(funded_child.id, 0.5, "Gum"))
        event = _events(wallet, limit=1)[0]

        assert event.event_type == AuditEventType.EXPENSE_RECORDED
        assert event.details["new_balance"] == "99.50"

    def test_rejection_is_audited(self, wallet, funded_child):
        """Test refused operations are recorded as warnings."""
        with pytest.raises(InsufficientBalanceError):
            asyncio.run(wallet.record_expense(funded_child.id, 500, "Bike"))
        event = _events(wallet, limit=1)[0]

        assert event.event_type == AuditEventType.OPERATION_REJECTED
        assert event.severity == AuditSeverity.WARNING
        assert event.error_code == "InsufficientBalanceError"
        assert event.details["operation"] == "record_expense"

    def test_invalid_amount_rejection_is_audited(self, wallet, child):
        with pytest.raises(InvalidAmountError):
            asyncio.run(wallet.deposit(child.id, 0, "Nothing"))
        event = _events(wallet, limit=1)[0]

        assert event.error_code == "InvalidAmountError"
        assert event.error_message == "Amount must be greater than zero"

    def test_allowance_run_shares_correlation_id(self, wallet, child):
        """Test the payment and the run summary are correlated."""
        async def scenario():
            await wallet.set_allowance(child.id, 10.0, 3)
            await wallet.process_allowances()
            storage = wallet.audit_logger.storage
            summary = (await storage.get_recent_events(limit=1))[0]
            return summary, await storage.get_events_by_correlation_id(summary.correlation_id)

        summary, related = asyncio.run(scenario())

        assert summary.event_type == AuditEventType.ALLOWANCE_RUN_COMPLETED
        assert summary.details["paid_count"] == 1
        assert [e.event_type for e in related] == [
            AuditEventType.ALLOWANCE_PAID,
            AuditEventType.ALLOWANCE_RUN_COMPLETED,
        ]

    def test_skipped_payment_is_audited(self, wallet, child):
        async def scenario():
            await wallet.set_allowance(child.id, 10.0, 3)
            await wallet.process_allowances()
            await wallet.process_allowances()
            return await wallet.audit_logger.storage.get_recent_events(limit=2)

        run_summary, skipped = asyncio.run(scenario())

        assert skipped.event_type == AuditEventType.ALLOWANCE_ALREADY_PAID
        assert run_summary.details["paid_count"] == 0

    def test_events_by_entity(self, wallet, funded_child):
        events = asyncio.run(
            wallet.audit_logger.storage.get_events_by_entity("child", funded_child.id)
        )
        assert [e.event_type for e in events] == [
            AuditEventType.CHILD_CREATED,
            AuditEventType.DEPOSIT_RECORDED,
        ]


class TestAuditLogger:
    """Tests for AuditLogger itself."""

    def test_logs_without_storage(self):
        """Test local-only logging reports success."""
        logger = AuditLogger()
        event = AuditEventBuilder.child_created(child_id=1, user_id=1, name="Tom")

        assert asyncio.run(logger.log(event)) is True

    def test_storage_failure_does_not_raise(self):
        """Test a broken audit store never breaks the caller."""
        logger = AuditLogger(_BrokenAuditStorage())
        event = AuditEventBuilder.child_created(child_id=1, user_id=1, name="Tom")

        assert asyncio.run(logger.log(event)) is False

    def test_log_error(self):
        logger = AuditLogger()
        assert asyncio.run(logger.log_error("Boom", "it broke", {"step": 1})) is None

    def test_correlation_ids_are_unique(self):
        assert create_correlation_id() != create_correlation_id()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
