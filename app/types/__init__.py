from .requests import BridgeRequest, ChatRequest, ChatMessage
from .responses import BridgeResponse, ChatResponse, ErrorResponse
from .transactions import TransactionDescriptor

__all__ = [
    "BridgeRequest",
    "BridgeResponse",
    "ChatRequest",
    "ChatMessage",
    "ChatResponse",
    "ErrorResponse",
    "TransactionDescriptor",
]
