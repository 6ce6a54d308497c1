"""Builds the chat response from the tool loop's terminal state."""

import json
import logging
from typing import Any, List, Optional

from ...types.responses import ChatResponse
from ...types.transactions import TransactionDescriptor
from .tools import ToolExecution

GENERIC_FAILURE_MESSAGE = (
    "Sorry, I wasn't able to complete that request. Please try again or rephrase it."
)


def _as_json(value: Any) -> str:
    return json.dumps(value, indent=2, default=str)


class ResponseAssembler:
    """
    Content falls back through: final oracle text, a step-limit notice, a
    summary of the last tool result, then a generic failure message.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    def assemble(
        self,
        *,
        final_text: Optional[str] = None,
        last_execution: Optional[ToolExecution] = None,
        transaction: Optional[TransactionDescriptor] = None,
        target_chain_id: Optional[int] = None,
        tool_call_sequence: Optional[List[str]] = None,
        hit_cap: bool = False,
        iterations: int = 0,
    ) -> ChatResponse:
        content = self._content(final_text, last_execution, hit_cap, iterations)

        if last_execution is None:
            return ChatResponse(content=content)

        return ChatResponse(
            content=content,
            transaction_data=transaction,
            action=last_execution.tool_call.name,
            target_chain_id=target_chain_id,
            tool_input=last_execution.arguments or None,
            tool_call_sequence=list(tool_call_sequence) if tool_call_sequence else None,
        )

    def _content(
        self,
        final_text: Optional[str],
        last_execution: Optional[ToolExecution],
        hit_cap: bool,
        iterations: int,
    ) -> str:
        if final_text and final_text.strip():
            return final_text.strip()

        if hit_cap:
            return self.step_limit_message(iterations, last_execution)

        if last_execution is not None:
            return self.summarize_execution(last_execution)

        self.logger.warning("Tool loop ended without text or tool output")
        return GENERIC_FAILURE_MESSAGE

    def step_limit_message(self, iterations: int, last_execution: Optional[ToolExecution]) -> str:
        message = (
            f"I reached the limit of {iterations} steps before I could finish this request."
        )
        if last_execution is None:
            return message
        result = last_execution.result
        payload = {"error": result.error} if result.is_error else result.result
        return (
            f"{message} Here is the last result I got from {last_execution.tool_call.name}:\n\n"
            f"```json\n{_as_json(payload)}\n```"
        )

    def summarize_execution(self, execution: ToolExecution) -> str:
        name = execution.tool_call.name
        if execution.is_error:
            return f"The {name} step failed: {execution.result.error}"
        if execution.transaction is not None:
            summary = execution.transaction.description or name
            return f"I've prepared a transaction ({summary}). Please review and sign it in your wallet."
        return f"Here is the result from {name}:\n\n```json\n{_as_json(execution.result.result)}\n```"
