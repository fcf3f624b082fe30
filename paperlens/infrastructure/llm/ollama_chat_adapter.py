from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

import httpx

from paperlens.application.ports.llm_port import ChatMessage, LLMPort, LLMResponse
from paperlens.domain.errors import LLMError
from paperlens.infrastructure.embeddings.ollama_embedding_adapter import DEFAULT_OLLAMA_URL


def _flatten(messages: Sequence[ChatMessage]) -> str:
    """/api/generate takes a single prompt; system text goes first."""
    return "\n\n".join(m.content for m in messages)


@dataclass
class OllamaChatAdapter(LLMPort):
    base_url: str = DEFAULT_OLLAMA_URL
    model: str = "llama3.1"
    timeout_s: float = 300.0
    http_client: httpx.AsyncClient | None = None
    provider: str = "ollama"

    async def chat(
        self,
        messages: Sequence[ChatMessage],
        temperature: float = 0.7,
        max_tokens: int = 4096,
        json_mode: bool = False,
    ) -> LLMResponse:
        payload: dict[str, Any] = {
            "model": self.model,
            "prompt": _flatten(messages),
            "stream": False,
            "options": {"temperature": temperature, "num_predict": max_tokens},
        }
        if json_mode:
            payload["format"] = "json"
        url = f"{self.base_url.rstrip('/')}/api/generate"
        try:
            if self.http_client is not None:
                r = await self.http_client.post(url, json=payload, timeout=self.timeout_s)
            else:
                async with httpx.AsyncClient() as client:
                    r = await client.post(url, json=payload, timeout=self.timeout_s)
        except httpx.HTTPError as ex:
            raise LLMError(f"Ollama request failed: {ex}") from ex
        if r.is_error:
            raise LLMError(f"Ollama request failed: {r.status_code} {r.reason_phrase}")
        try:
            data = r.json()
        except ValueError as ex:
            raise LLMError(f"Ollama returned a non-JSON body: {ex}") from ex
        if not isinstance(data, dict):
            raise LLMError("Ollama response body is not a JSON object")
        text = data.get("response") or ""
        if not isinstance(text, str):
            raise LLMError(f"Ollama 'response' is {type(text).__name__}, expected a string")
        return LLMResponse(
            text=text,
            finish_reason=data.get("done_reason") or "stop",
            usage_tokens=data.get("eval_count"),
        )
