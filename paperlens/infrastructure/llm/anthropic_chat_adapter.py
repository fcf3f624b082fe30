from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

import httpx

from paperlens.application.ports.llm_port import ChatMessage, LLMPort, LLMResponse
from paperlens.domain.errors import ConfigError, LLMError

logger = logging.getLogger(__name__)

DEFAULT_ANTHROPIC_URL = "https://api.anthropic.com"


@dataclass
class AnthropicChatAdapter(LLMPort):
    """Claude Messages API over httpx.

    The API has no JSON response mode, so json_mode only adds a system hint.
    """

    api_key: str | None
    model: str = "claude-sonnet-4-20250514"
    base_url: str = DEFAULT_ANTHROPIC_URL
    timeout_s: float = 120.0
    http_client: httpx.AsyncClient | None = None
    provider: str = "anthropic"

    def __post_init__(self) -> None:
        if not self.api_key:
            raise ConfigError("Anthropic API key required")

    async def chat(
        self,
        messages: Sequence[ChatMessage],
        temperature: float = 0.7,
        max_tokens: int = 4096,
        json_mode: bool = False,
    ) -> LLMResponse:
        system = [m.content for m in messages if m.role == "system"]
        if json_mode:
            system.append("Respond with valid JSON only.")
        payload: dict[str, Any] = {
            "model": self.model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": [
                {"role": m.role, "content": m.content} for m in messages if m.role != "system"
            ],
        }
        if system:
            payload["system"] = "\n\n".join(system)
        headers = {
            "x-api-key": self.api_key or "",
            "anthropic-version": "2023-06-01",
            "Content-Type": "application/json",
        }
        url = f"{self.base_url.rstrip('/')}/v1/messages"
        try:
            if self.http_client is not None:
                r = await self.http_client.post(
                    url, headers=headers, json=payload, timeout=self.timeout_s
                )
            else:
                async with httpx.AsyncClient() as client:
                    r = await client.post(
                        url, headers=headers, json=payload, timeout=self.timeout_s
                    )
            r.raise_for_status()
        except httpx.HTTPError as ex:
            raise LLMError(f"Anthropic request failed: {ex}") from ex
        try:
            data = r.json()
        except ValueError as ex:
            raise LLMError(f"Anthropic returned a non-JSON body: {ex}") from ex
        if not isinstance(data, dict):
            raise LLMError("Anthropic response body is not a JSON object")
        blocks = data.get("content") or []
        if not isinstance(blocks, list):
            raise LLMError("Anthropic response 'content' is not a list")
        text = "".join(
            b["text"]
            for b in blocks
            if isinstance(b, dict) and b.get("type") == "text" and isinstance(b.get("text"), str)
        )
        usage = data.get("usage")
        if not isinstance(usage, dict):
            usage = {}
        logger.info("Anthropic response: %d chars", len(text))
        return LLMResponse(
            text=text,
            finish_reason=data.get("stop_reason") or "stop",
            usage_tokens=usage.get("output_tokens"),
        )
