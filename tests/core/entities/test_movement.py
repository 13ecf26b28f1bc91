"""Tests for ledger entities."""

from decimal import Decimal

import pytest
from pydantic import ValidationError as PydanticValidationError

from stockmaster.core.entities import LedgerRow, MovementType, ProductLedger, StockMovement


def _movement(**kwargs) -> StockMovement:
    defaults = {
        "product_id": "p-1",
        "quantity_delta": Decimal("10"),
        "movement_type": MovementType.RECEIPT,
        "operation_id": "op-1",
    }
    defaults.update(kwargs)
    return StockMovement(**defaults)


class TestStockMovement:
    def test_requires_a_location(self):
        with pytest.raises(PydanticValidationError):
            _movement()

    def test_only_transfers_touch_two_locations(self):
        with pytest.raises(PydanticValidationError):
            _movement(location_from_id="a", location_to_id="b")

        transfer = _movement(
            location_from_id="a", location_to_id="b", movement_type=MovementType.TRANSFER
        )
        assert transfer.location_from_id == "a"

    def test_negative_magnitude_rejected(self):
        with pytest.raises(PydanticValidationError):
            _movement(location_to_id="a", quantity_delta=Decimal("-1"))

    def test_balance_change_for_entry(self):
        m = _movement(location_to_id="a")
        assert m.balance_change("a") == Decimal("10")
        assert m.balance_change("b") == Decimal("0")
        assert m.balance_change() == Decimal("10")

    def test_balance_change_for_exit(self):
        m = _movement(location_from_id="a", movement_type=MovementType.DELIVERY)
        assert m.balance_change("a") == Decimal("-10")
        assert m.balance_change() == Decimal("-10")

    def test_transfer_is_neutral_system_wide(self):
        m = _movement(
            location_from_id="a", location_to_id="b", movement_type=MovementType.TRANSFER
        )
        assert m.balance_change("a") == Decimal("-10")
        assert m.balance_change("b") == Decimal("10")
        assert m.balance_change() == Decimal("0")


class TestProductLedger:
    def test_balance_of_empty_ledger_is_zero(self):
        assert ProductLedger(product_id="p-1").balance == Decimal("0")

    def test_balance_is_newest_running_balance(self, sample_ledger_rows):
        ledger = ProductLedger(product_id="p-1", rows=sample_ledger_rows)
        assert ledger.balance == Decimal("7")


@pytest.fixture
def sample_ledger_rows() -> list[LedgerRow]:
    from datetime import UTC, datetime

    now = datetime.now(UTC)
    return [
        LedgerRow(
            movement_id=2,
            date=now,
            reference="WH/OUT/0001",
            movement_type=MovementType.DELIVERY,
            operation_status="DONE",
            from_label="Stock",
            to_label="External",
            quantity=Decimal("3"),
            balance_change=Decimal("-3"),
            running_balance=Decimal("7"),
        ),
        LedgerRow(
            movement_id=1,
            date=now,
            reference="WH/IN/0001",
            movement_type=MovementType.RECEIPT,
            operation_status="DONE",
            from_label="External",
            to_label="Stock",
            quantity=Decimal("10"),
            balance_change=Decimal("10"),
            running_balance=Decimal("10"),
        ),
    ]
