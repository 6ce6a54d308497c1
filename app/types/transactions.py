import re
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from ..services.address import is_evm_address

_HEX_DATA_RE = re.compile(r"^0x([0-9a-fA-F]{2})*$")


def quantity_to_decimal_string(value: Any) -> Optional[str]:
    """Canonical wire form for wei-sized quantities: base-10 digits, no exponent."""
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValueError("quantity must be numeric")
    if isinstance(value, int):
        if value < 0:
            raise ValueError("quantity must be non-negative")
        return str(value)
    if isinstance(value, str):
        text = value.strip()
        if text.lower().startswith("0x"):
            return str(int(text, 16))
        if text.isdigit():
            return str(int(text))
    raise ValueError(f"quantity must be an integer or integer string, got {value!r}")


class TransactionDescriptor(BaseModel):
    """Unsigned transaction handed to the caller's wallet for signing."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    to: str = Field(description="Destination contract or account")
    data: str = Field(description="Hex-encoded calldata, '0x' for plain transfers")
    value: Optional[str] = Field(default=None, description="Native value in wei")
    gas: Optional[str] = Field(default=None, description="Gas limit hint")
    gas_price: Optional[str] = Field(default=None, description="Legacy gas price in wei")
    max_fee_per_gas: Optional[str] = Field(default=None, description="EIP-1559 max fee in wei")
    max_priority_fee_per_gas: Optional[str] = Field(default=None, description="EIP-1559 tip in wei")
    nonce: Optional[str] = Field(default=None, description="Sender nonce")
    chain_id: Optional[int] = Field(default=None, description="Network the transaction must be signed on")
    from_address: Optional[str] = Field(default=None, alias="from", description="Expected signer")
    description: Optional[str] = Field(default=None, description="Human-readable summary")

    @field_validator("to")
    @classmethod
    def _validate_to(cls, value: str) -> str:
        if not is_evm_address(value):
            raise ValueError(f"destination address is not a valid address: {value!r}")
        return value.strip()

    @field_validator("data")
    @classmethod
    def _validate_data(cls, value: str) -> str:
        if not isinstance(value, str) or not _HEX_DATA_RE.fullmatch(value.strip()):
            raise ValueError("calldata must be a 0x-prefixed hex string")
        return value.strip()

    @field_validator(
        "value", "gas", "gas_price", "max_fee_per_gas", "max_priority_fee_per_gas", "nonce",
        mode="before",
    )
    @classmethod
    def _normalize_quantity(cls, value: Any) -> Optional[str]:
        return quantity_to_decimal_string(value)

    @field_validator("chain_id", mode="before")
    @classmethod
    def _normalize_chain_id(cls, value: Any) -> Optional[int]:
        if isinstance(value, str) and value.strip():
            text = value.strip()
            return int(text, 16) if text.lower().startswith("0x") else int(text)
        return value

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)
