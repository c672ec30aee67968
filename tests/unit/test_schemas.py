"""Request-model validation for transaction create/edit payloads."""

import pytest
from pydantic import ValidationError

from schemas.transactions import TransactionCreate, TransactionUpdate


def _create(**overrides):
    data = {
        "serial": "SN-1",
        "gas_code": "R410A",
        "transaction_type": "fill",
        "quantity_kg": 5,
    }
    data.update(overrides)
    return TransactionCreate(**data)


class TestTransactionCreate:
    def test_valid_payload(self):
        p = _create(serial="  SN-1 ", gas_code=" R410A ", notes="first fill")
        assert p.serial == "SN-1"
        assert p.gas_code == "R410A"
        assert p.quantity_kg == 5
        assert p.notes == "first fill"

    def test_numeric_string_quantity_is_accepted(self):
        assert _create(quantity_kg="2.5").quantity_kg == 2.5

    @pytest.mark.parametrize("field", ["serial", "gas_code", "transaction_type", "quantity_kg"])
    def test_missing_required_field(self, field):
        data = {
            "serial": "SN-1",
            "gas_code": "R410A",
            "transaction_type": "fill",
            "quantity_kg": 5,
        }
        data.pop(field)
        with pytest.raises(ValidationError):
            TransactionCreate(**data)

    @pytest.mark.parametrize("field", ["serial", "gas_code"])
    def test_blank_required_string(self, field):
        with pytest.raises(ValidationError):
            _create(**{field: "   "})

    @pytest.mark.parametrize("t_type", ["FILL", "refill", "", "transfer"])
    def test_unknown_type_rejected(self, t_type):
        with pytest.raises(ValidationError):
            _create(transaction_type=t_type)

    @pytest.mark.parametrize("qty", [0, -1, -0.001, float("inf"), float("nan"), "abc"])
    @pytest.mark.parametrize("t_type", ["fill", "charge"])
    def test_non_positive_or_non_finite_quantity_rejected(self, qty, t_type):
        with pytest.raises(ValidationError):
            _create(transaction_type=t_type, quantity_kg=qty)


class TestTransactionUpdate:
    def test_empty_update_is_valid(self):
        p = TransactionUpdate()
        assert p.transaction_type is None
        assert p.quantity_kg is None
        assert p.gas_code is None

    def test_blank_gas_code_is_ignored(self):
        assert TransactionUpdate(gas_code="  ").gas_code is None

    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError):
            TransactionUpdate(transaction_type="topup")

    @pytest.mark.parametrize("qty", [0, -4, float("inf")])
    def test_bad_quantity_rejected(self, qty):
        with pytest.raises(ValidationError):
            TransactionUpdate(quantity_kg=qty)

    def test_timestamp_parsed(self):
        p = TransactionUpdate(occurred_at="2025-01-02T03:04:05Z")
        assert p.occurred_at.year == 2025


class TestQuantityScale:
    @pytest.mark.parametrize("qty", [0.0004, 0.0001, "0.00049"])
    def test_quantity_lost_at_stored_scale_rejected(self, qty):
        with pytest.raises(ValidationError):
            _create(quantity_kg=qty)
        with pytest.raises(ValidationError):
            TransactionUpdate(quantity_kg=qty)

    @pytest.mark.parametrize("qty,expected", [
        (0.0005, 0.001),
        (0.001, 0.001),
        (1.2345, 1.235),
        (12.5, 12.5),
    ])
    def test_quantity_rounded_to_stored_scale(self, qty, expected):
        assert _create(quantity_kg=qty).quantity_kg == expected
        assert TransactionUpdate(quantity_kg=qty).quantity_kg == expected
