from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from importlib import import_module
from typing import Any, cast

from paperlens.application.ports.llm_port import ChatMessage, LLMPort, LLMResponse
from paperlens.domain.errors import ConfigError, LLMError


@dataclass
class OpenAIChatAdapter(LLMPort):
    api_key: str | None
    model: str = "gpt-4o-mini"
    base_url: str | None = None  # e.g. a vLLM or other OpenAI-compatible server
    provider: str = "openai"

    def __post_init__(self) -> None:
        if not self.api_key:
            raise ConfigError("OpenAI API key required")
        # Defer import of OpenAI to chat() to avoid hard dependency in tests
        self._client: Any | None = None

    async def chat(
        self,
        messages: Sequence[ChatMessage],
        temperature: float = 0.7,
        max_tokens: int = 4096,
        json_mode: bool = False,
    ) -> LLMResponse:
        try:
            if self._client is None:
                module = import_module("openai")
                self._client = module.AsyncOpenAI(api_key=self.api_key, base_url=self.base_url)
            payload: Any = [m.__dict__ for m in messages]
            kwargs: dict[str, Any] = {}
            if json_mode:
                kwargs["response_format"] = {"type": "json_object"}
            resp: Any = await self._client.chat.completions.create(
                model=self.model,
                messages=cast(Any, payload),
                temperature=temperature,
                max_tokens=max_tokens,
                **kwargs,
            )
        except Exception as ex:  # noqa: BLE001
            # Translate external errors to domain-specific errors
            raise LLMError(f"LLM communication failed: {ex}") from ex
        if not resp.choices:
            return LLMResponse(text="", finish_reason="empty")
        choice = resp.choices[0]
        usage = getattr(resp, "usage", None)
        return LLMResponse(
            text=choice.message.content or "",
            finish_reason=choice.finish_reason or "stop",
            usage_tokens=getattr(usage, "total_tokens", None),
        )
