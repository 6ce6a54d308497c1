import pytest
from pydantic import ValidationError

from app.types.transactions import TransactionDescriptor, quantity_to_decimal_string

ROUTER = "0x1a1e967e523435CeF20642e3D7811F7d0da9a704"


def test_quantities_become_decimal_strings():
    tx = TransactionDescriptor.model_validate({
        "to": ROUTER,
        "data": "0xd0e30db0",
        "value": 10**21,
        "gas": "0x5208",
        "nonce": "7",
        "chainId": "0xa3c3",
    })

    assert tx.value == "1000000000000000000000"
    assert tx.gas == "21000"
    assert tx.nonce == "7"
    assert tx.chain_id == 41923


def test_wire_format_uses_camel_case_and_omits_missing_fields():
    tx = TransactionDescriptor.model_validate({
        "to": ROUTER,
        "data": "0x",
        "maxFeePerGas": 100,
        "from": "0x" + "11" * 20,
    })

    assert tx.to_wire() == {
        "to": ROUTER,
        "data": "0x",
        "maxFeePerGas": "100",
        "from": "0x" + "11" * 20,
    }


def test_unknown_fields_are_ignored():
    tx = TransactionDescriptor.model_validate({"to": ROUTER, "data": "0x", "accessList": []})
    assert "accessList" not in tx.to_wire()


@pytest.mark.parametrize(
    "payload",
    [
        {"data": "0x"},
        {"to": "", "data": "0x"},
        {"to": "0x1234", "data": "0x"},
        {"to": ROUTER},
        {"to": ROUTER, "data": "deadbeef"},
        {"to": ROUTER, "data": "0xzz"},
        {"to": ROUTER, "data": "0x", "value": -1},
    ],
)
def test_invalid_descriptors_are_rejected(payload):
    with pytest.raises(ValidationError):
        TransactionDescriptor.model_validate(payload)


def test_quantity_helper():
    assert quantity_to_decimal_string(None) is None
    assert quantity_to_decimal_string(0) == "0"
    assert quantity_to_decimal_string("0x0") == "0"
    assert quantity_to_decimal_string("123") == "123"
    with pytest.raises(ValueError):
        quantity_to_decimal_string(True)
