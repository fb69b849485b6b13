import logging
from typing import Any

from ai_pr_review.http import RequestExecutor, RetryableRequest
from ai_pr_review.http.executor import RetryObserver
from .base import LLMProvider


logger = logging.getLogger(__name__)


class ChatCompletionsProvider(LLMProvider):
    """OpenAI-compatible ``/chat/completions`` endpoint (cloud or LM Studio)."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        model: str,
        temperature: float = 0.2,
        max_tokens: int | None = None,
        timeout_ms: int = 120_000,
        max_retries: int = 3,
        base_delay_ms: int = 1000,
        executor: RequestExecutor | None = None,
        observer: RetryObserver | None = None,
    ):
        self.base_url = base_url.strip().rstrip("/")
        self.api_key = api_key
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout_ms = timeout_ms
        self.max_retries = max_retries
        self.base_delay_ms = base_delay_ms
        self.executor = executor or RequestExecutor(observer=observer)

    def _headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }

    def build_payload(self, system_prompt: str, prompt: str) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": self.model,
            "temperature": self.temperature,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": prompt},
            ],
            # "text" keeps LM Studio happy; cloud endpoints accept it too
            "response_format": {"type": "text"},
        }
        if self.max_tokens:
            payload["max_tokens"] = self.max_tokens
        return payload

    async def generate(self, system_prompt: str, prompt: str) -> str:
        request = RetryableRequest(
            method="POST",
            url=f"{self.base_url}/chat/completions",
            headers=self._headers(),
            json_body=self.build_payload(system_prompt, prompt),
            timeout_ms=self.timeout_ms,
            max_retries=self.max_retries,
            base_delay_ms=self.base_delay_ms,
        )
        data = await self.executor.execute(request)
        text = extract_content(data)
        logger.info(f"{self.model} response length: {len(text)} chars")
        return text


def extract_content(data: Any) -> str:
    """Return choices[0].message.content or the legacy choices[0].text."""
    if not isinstance(data, dict):
        return ""
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return ""
    first = choices[0]
    message = first.get("message")
    if isinstance(message, dict) and message.get("content") is not None:
        content = message["content"]
    else:
        content = first.get("text")
    return content if isinstance(content, str) else ""
