"""JSON-safe conversion of tool output.

Integers wider than a JSON double can carry exactly (wei amounts, allowances)
and every Decimal become base-10 strings without exponents.
"""

from dataclasses import asdict, is_dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel

MAX_SAFE_INTEGER = 2**53 - 1


def decimal_to_string(value: Decimal) -> str:
    if not value.is_finite():
        return str(value)
    text = format(value, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text or "0"


def to_transport(value: Any) -> Any:
    if value is None or isinstance(value, (bool, str)):
        return value
    if isinstance(value, int):
        return value if abs(value) <= MAX_SAFE_INTEGER else str(value)
    if isinstance(value, float):
        return value
    if isinstance(value, Decimal):
        return decimal_to_string(value)
    if isinstance(value, Enum):
        return to_transport(value.value)
    if isinstance(value, BaseModel):
        return to_transport(value.model_dump(by_alias=True, exclude_none=True))
    if is_dataclass(value) and not isinstance(value, type):
        return to_transport(asdict(value))
    if isinstance(value, dict):
        return {str(key): to_transport(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_transport(item) for item in value]
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    raise TypeError(f"Tool output of type {type(value).__name__} is not JSON serializable")
