import time
from typing import Any, Dict, List, Optional

import anthropic
from anthropic import AsyncAnthropic

from .base import (
    LLMProvider, LLMMessage, LLMResponse,
    LLMProviderError, LLMProviderAPIError, LLMProviderAuthError, LLMProviderRateLimitError,
    ToolDefinition, ToolCall,
)


class AnthropicProvider(LLMProvider):
    """Anthropic Claude oracle with native tool calling"""

    supports_tools: bool = True

    def __init__(self, api_key: str, model: Optional[str] = None, **kwargs):
        if not api_key:
            raise LLMProviderAuthError("Anthropic API key is not configured")
        if not model:
            raise ValueError("AnthropicProvider requires a model to be specified")

        super().__init__(api_key, model, **kwargs)

    def _setup_client(self, **kwargs) -> None:
        """Initialize the Anthropic client"""
        self.client = AsyncAnthropic(api_key=self.api_key, max_retries=kwargs.get("max_retries", 2))

    def _convert_message_to_anthropic(self, msg: LLMMessage) -> Optional[Dict[str, Any]]:
        """Convert a single LLMMessage to Anthropic format"""
        if msg.role == "system":
            return None  # System messages handled separately

        if msg.role == "tool_result" and msg.tool_result:
            return {
                "role": "user",
                "content": [msg.tool_result.to_anthropic_format()]
            }

        if msg.role == "assistant" and msg.tool_calls:
            content = []
            if msg.content:
                content.append({"type": "text", "text": msg.content})
            for tc in msg.tool_calls:
                content.append({
                    "type": "tool_use",
                    "id": tc.id,
                    "name": tc.name,
                    "input": tc.arguments
                })
            return {"role": "assistant", "content": content}

        return {
            "role": msg.role,
            "content": msg.content or ""
        }

    def _convert_messages(self, messages: List[LLMMessage]) -> List[Dict[str, Any]]:
        """Convert history, folding consecutive tool results into one user turn"""
        converted: List[Dict[str, Any]] = []
        for msg in messages:
            item = self._convert_message_to_anthropic(msg)
            if item is None:
                continue
            previous = converted[-1] if converted else None
            if (
                msg.role == "tool_result"
                and previous is not None
                and previous["role"] == "user"
                and isinstance(previous["content"], list)
            ):
                previous["content"].extend(item["content"])
                continue
            converted.append(item)
        return converted

    async def generate_response(
        self,
        messages: List[LLMMessage],
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        tools: Optional[List[ToolDefinition]] = None,
        **kwargs
    ) -> LLMResponse:
        """Generate a response from Claude with optional tool calling"""
        start_time = time.time()

        system_message = None
        for msg in messages:
            if msg.role == "system":
                system_message = msg.content

        request_params: Dict[str, Any] = {
            "model": self.model,
            "messages": self._convert_messages(messages),
            "max_tokens": max_tokens or 4000,
        }

        if system_message:
            request_params["system"] = system_message

        if temperature is not None:
            request_params["temperature"] = temperature

        if tools:
            request_params["tools"] = [t.to_anthropic_format() for t in tools]

        request_params.update(kwargs)

        try:
            response = await self.client.messages.create(**request_params)
        except anthropic.AuthenticationError as e:
            raise self._log_error(LLMProviderAuthError(f"Authentication failed: {e}")) from e
        except anthropic.RateLimitError as e:
            raise self._log_error(LLMProviderRateLimitError(f"Rate limit exceeded: {e}")) from e
        except anthropic.APIError as e:
            raise self._log_error(LLMProviderAPIError(f"API error: {e}")) from e

        content = ""
        tool_calls = []

        for block in response.content or []:
            if block.type == "text":
                content += block.text
            elif block.type == "tool_use":
                tool_calls.append(ToolCall(
                    id=block.id,
                    name=block.name,
                    arguments=dict(block.input or {}),
                ))

        return LLMResponse(
            content=content if content else None,
            tool_calls=tool_calls if tool_calls else None,
            tokens_used=response.usage.output_tokens if response.usage else None,
            model=self.model,
            finish_reason=response.stop_reason,
            response_time_ms=self._measure_time(start_time),
        )

    def _log_error(self, error: LLMProviderError) -> LLMProviderError:
        self.logger.error(f"LLM Provider error in generate_response: {error}")
        return error

    async def health_check(self) -> Dict[str, Any]:
        """Check if Anthropic API is healthy"""
        try:
            start_time = time.time()
            response = await self.generate_response(
                messages=[LLMMessage(role="user", content="Hello")],
                max_tokens=10,
                temperature=0,
            )
            return {
                "status": "healthy",
                "provider": "anthropic",
                "model": self.model,
                "response_time_ms": self._measure_time(start_time),
                "test_response_length": len(response.content or ""),
            }
        except LLMProviderError as e:
            return {
                "status": "error",
                "provider": "anthropic",
                "model": self.model,
                "error": str(e),
            }
