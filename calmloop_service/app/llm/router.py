"""
LLM call wrapper and it does:
- Sends one prompt to the OpenAI Responses API
- Attaches the strict JSON schema the output must follow
- Surfaces non-success statuses as UpstreamError (no retries)

Main purpose:
Central interface for the outbound model call. It does not read the body.
"""


from dataclasses import dataclass
from typing import Callable, Optional

import httpx

from app.core.config import read_api_key, settings
from app.core.errors import ConfigError, UpstreamError
from app.core.logging import get_logger, safe_snippet
from app.llm.prompts import PromptBundle

log = get_logger("llm.router")


@dataclass(frozen=True)
class ModelReply:
    status_code: int
    text: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class ModelInvoker:
    def __init__(
        self,
        *,
        key_reader: Callable[[], str] = read_api_key,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.key_reader = key_reader
        self.base_url = (base_url or settings.OPENAI_BASE_URL).rstrip("/")
        self.model = model or settings.LLM_MODEL
        self.temperature = settings.LLM_TEMPERATURE if temperature is None else temperature
        self.timeout = settings.LLM_TIMEOUT_SECONDS if timeout is None else timeout
        self.transport = transport

    @property
    def url(self) -> str:
        return f"{self.base_url}/responses"

    def request_body(self, prompt: PromptBundle) -> dict:
        return {
            "model": self.model,
            "input": [
                {"role": "system", "content": prompt.system},
                {"role": "user", "content": prompt.user},
            ],
            "text": {
                "format": {
                    "type": "json_schema",
                    "name": prompt.schema_name,
                    "strict": True,
                    "schema": prompt.schema,
                }
            },
            "temperature": self.temperature,
            "max_output_tokens": prompt.max_output_tokens,
        }

    def ensure_key(self) -> str:
        api_key = self.key_reader()
        if not api_key:
            raise ConfigError(
                "Missing OPENAI_API_KEY on the server.",
                fix="Add OPENAI_API_KEY to your environment variables and restart/redeploy.",
            )
        return api_key

    async def invoke(self, prompt: PromptBundle, *, label: str = "") -> ModelReply:
        api_key = self.ensure_key()

        headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }
        suffix = f" ({label})" if label else ""
        log.info(f"POST {self.url} model={self.model} schema={prompt.schema_name} max_output_tokens={prompt.max_output_tokens}")

        try:
            async with httpx.AsyncClient(timeout=httpx.Timeout(self.timeout), transport=self.transport) as client:
                r = await client.post(self.url, headers=headers, json=self.request_body(prompt))
        except httpx.HTTPError as e:
            log.warning(f"OpenAI call failed{suffix}: {e!r}")
            raise UpstreamError(f"Could not reach OpenAI API{suffix}", status_code=502, details=str(e)) from e

        reply = ModelReply(status_code=r.status_code, text=r.text)
        if not reply.ok:
            log.warning(f"OpenAI error {reply.status_code}{suffix}. Snippet={safe_snippet(reply.text)}")
            raise UpstreamError(f"OpenAI API error{suffix}", status_code=reply.status_code, details=reply.text)
        return reply
