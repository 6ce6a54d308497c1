from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ChatMessage(BaseModel):
    role: str = Field(description="Message role: user or assistant")
    content: str = Field(default="", description="Message content")


class ChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    agent_id: str = Field(default="", alias="agentId", description="Agent profile identifier")
    user_message: str = Field(alias="userMessage", min_length=1, description="The user's latest message")
    address: Optional[str] = Field(default=None, description="Connected wallet address")
    history: List[ChatMessage] = Field(default_factory=list, description="Earlier turns of this conversation")
    force_action: Optional[str] = Field(
        default=None,
        alias="forceAction",
        description="Tool the user explicitly asked to run next",
    )

    @field_validator("user_message")
    @classmethod
    def _strip_message(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("userMessage must not be empty")
        return value


class BridgeRequest(BaseModel):
    action: str = Field(description="Bridge step to prepare: approve, deposit or withdraw")
    address: str = Field(description="Wallet that will sign the bridge transaction")
    amount: str = Field(description="EDU amount in human units")
