import asyncio
from typing import Any, Dict, Optional

import httpx

from ..config import (
    APP_NAME,
    HTTP_TIMEOUT_SECONDS,
    OLLAMA_BASE_URL,
    OPENROUTER_API_KEY,
    OPENROUTER_BASE_URL,
    SITE_URL,
    UPSTREAM_DIALECT,
)
from .outcomes import AttemptOutcome

DIALECT_OPENROUTER = "openrouter"
DIALECT_OLLAMA = "ollama"


def extract_content(payload: Any) -> Optional[str]:
    """Pull the completion text out of a chat-completions or generate body."""
    if not isinstance(payload, dict):
        return None
    choices = payload.get("choices")
    if isinstance(choices, list) and choices:
        first = choices[0] if isinstance(choices[0], dict) else {}
        message = first.get("message") or {}
        content = message.get("content") if isinstance(message, dict) else None
        if isinstance(content, str) and content:
            return content
    response = payload.get("response")
    if isinstance(response, str) and response:
        return response
    return None


def outcome_from_response(resp: httpx.Response) -> AttemptOutcome:
    status = resp.status_code
    try:
        payload = resp.json()
    except ValueError:
        payload = None

    if resp.is_success:
        content = extract_content(payload)
        if content:
            return AttemptOutcome.success(content, status_code=status)

    error = payload.get("error") if isinstance(payload, dict) else None
    if isinstance(error, (dict, str)) and error:
        if isinstance(error, dict):
            message = str(error.get("message") or error.get("code") or "unknown upstream error")
            code = error.get("code")
        else:
            message, code = error, None
        if code == 429 or status == 429 or status >= 500:
            return AttemptOutcome.retriable(message, status_code=status, error_code=code)
        return AttemptOutcome.fatal(message, status_code=status, error_code=code)

    if not resp.is_success:
        reason = resp.reason_phrase or f"HTTP {status}"
        return AttemptOutcome.fatal(f"{status} {reason}".strip(), status_code=status)

    if payload is None:
        return AttemptOutcome.fatal("malformed response: body is not JSON", status_code=status)
    return AttemptOutcome.fatal("malformed response: no completion content", status_code=status)


class CompletionClient:
    """Issues one time-bounded completion request for one candidate."""

    def __init__(
        self,
        base_url: str = OPENROUTER_BASE_URL,
        api_key: str = OPENROUTER_API_KEY,
        dialect: str = DIALECT_OPENROUTER,
        site_url: str = SITE_URL,
        app_name: str = APP_NAME,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if dialect not in (DIALECT_OPENROUTER, DIALECT_OLLAMA):
            raise ValueError(f"Unknown upstream dialect: {dialect}")
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.dialect = dialect
        self.site_url = site_url
        self.app_name = app_name
        self._transport = transport

    def build_request(self, prompt: str, model: str):
        if self.dialect == DIALECT_OLLAMA:
            return f"{self.base_url}/api/generate", {}, {"model": model, "prompt": prompt, "stream": False}
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "HTTP-Referer": self.site_url,
            "X-Title": self.app_name,
        }
        body: Dict[str, Any] = {"model": model, "messages": [{"role": "user", "content": prompt}]}
        return f"{self.base_url}/chat/completions", headers, body

    async def complete(self, prompt: str, model: str, timeout: float = HTTP_TIMEOUT_SECONDS) -> AttemptOutcome:
        url, headers, body = self.build_request(prompt, model)
        # The client context closes the connection on every exit path, including cancellation.
        async with httpx.AsyncClient(timeout=timeout, transport=self._transport) as client:
            try:
                resp = await asyncio.wait_for(client.post(url, json=body, headers=headers), timeout)
            except (asyncio.TimeoutError, httpx.TimeoutException):
                return AttemptOutcome.transport("timeout")
            except httpx.HTTPError as exc:
                return AttemptOutcome.transport(str(exc) or type(exc).__name__)
        return outcome_from_response(resp)


def default_completion_client() -> CompletionClient:
    if UPSTREAM_DIALECT == DIALECT_OLLAMA:
        return CompletionClient(base_url=OLLAMA_BASE_URL, dialect=DIALECT_OLLAMA)
    return CompletionClient()
