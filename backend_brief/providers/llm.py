"""OpenAI-compatible chat-completions adapter (OpenRouter by default)."""

from __future__ import annotations

from typing import Any

from backend_brief.core.exceptions import NarrativeDegraded
from backend_brief.providers.base import ProviderAdapter


def extract_content(payload: Any) -> str:
    """Text of the first choice. Content may be a string or a list of text parts."""
    choices = payload.get("choices") if isinstance(payload, dict) else None
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        raise NarrativeDegraded("llm response has no choices")
    msg = choices[0].get("message")
    raw = msg.get("content") if isinstance(msg, dict) else None
    if isinstance(raw, str):
        content = raw
    elif isinstance(raw, list):
        content = "\n".join(
            part["text"] for part in raw if isinstance(part, dict) and isinstance(part.get("text"), str)
        )
    else:
        content = ""
    if not content.strip():
        raise NarrativeDegraded("llm returned empty content")
    return content


class LlmAdapter(ProviderAdapter):
    source_id = "openrouter"

    @property
    def base_url(self) -> str:
        return self.settings.llm.base_url

    @property
    def configured(self) -> bool:
        return self.settings.llm.configured

    def default_headers(self) -> dict[str, str]:
        llm = self.settings.llm
        headers = {
            "authorization": f"Bearer {llm.api_key}",
            "content-type": "application/json",
        }
        if llm.http_referer:
            headers["http-referer"] = llm.http_referer
        if llm.x_title:
            headers["x-title"] = llm.x_title
        return headers

    async def complete_json(self, prompt: str) -> str:
        """Single-turn completion constrained to a JSON object. Returns raw message content."""
        if not self.configured:
            raise NarrativeDegraded("llm not configured")
        llm = self.settings.llm
        body = {
            "model": llm.model,
            "temperature": llm.temperature,
            "max_tokens": llm.max_tokens,
            "response_format": {"type": "json_object"},
            "messages": [{"role": "user", "content": prompt}],
        }
        return await self.query(
            "POST",
            self.url("/chat/completions"),
            extract_content,
            json=body,
            timeout=self.settings.timeouts.llm,
        )
