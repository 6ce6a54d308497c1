from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .transactions import TransactionDescriptor


class ChatResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    content: str = Field(min_length=1, description="Natural language reply, never empty")
    transaction_data: Optional[TransactionDescriptor] = Field(
        default=None,
        description="Unsigned transaction from the last action tool, if it succeeded",
    )
    action: Optional[str] = Field(default=None, description="Name of the last tool executed")
    target_chain_id: Optional[int] = Field(default=None, description="Network to sign transactionData on")
    tool_input: Optional[Dict[str, Any]] = Field(default=None, description="Arguments of the last tool executed")
    tool_call_sequence: Optional[List[str]] = Field(default=None, description="Every tool the oracle requested, in order")

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class ErrorResponse(BaseModel):
    content: str = Field(description="User-facing apology")
    error: str = Field(description="Machine-readable failure reason")


class BridgeResponse(BaseModel):
    data: Optional[Any] = Field(default=None, description="Unsigned bridge transaction from the backend")
    error: Optional[str] = Field(default=None, description="Backend failure reason")
