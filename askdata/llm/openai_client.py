# noqa: D205,D400
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from openai import AsyncOpenAI

from askdata.config import get_settings
from askdata.llm.base import Embedder, LanguageModel
from askdata.monitoring.metrics import LLM_CALLS, RETRIEVAL_CALLS
from askdata.monitoring.trace import trace_event

# Ensure .env is loaded early
load_dotenv()

logger = logging.getLogger(__name__)


class OpenAIClient(LanguageModel):
    """Lightweight wrapper around the OpenAI chat completions API.

    The routing stages only need plain text back; structured replies are parsed
    by the callers, so no function-calling or JSON mode is requested here.
    """

    def __init__(
        self,
        model: str | None = None,
        *,
        api_key: str | None = None,
        timeout: float | None = None,
    ) -> None:
        settings = get_settings()
        self._api_key = api_key or settings.openai_api_key
        self._timeout = timeout if timeout is not None else settings.call_timeout_s
        self._client: Optional[AsyncOpenAI] = None
        self.model = str(model or settings.openai_model)

    @property
    def client(self) -> AsyncOpenAI:  # noqa: D401
        """Lazily initialise AsyncOpenAI client."""
        if self._client is None:
            if not self._api_key:
                raise RuntimeError("OPENAI_API_KEY is not set")
            self._client = AsyncOpenAI(api_key=self._api_key, timeout=self._timeout, max_retries=0)
        return self._client

    async def call(self, messages: List[Dict[str, str]], *, temperature: float = 0.0) -> Any:
        """Invoke the chat completions endpoint and return the first choice's message."""

        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=messages,  # type: ignore[arg-type]
                temperature=temperature,
            )
        except Exception as exc:  # noqa: BLE001
            raise RuntimeError(f"OpenAI API error: {exc}") from exc

        if not response.choices:
            raise RuntimeError("OpenAI API returned no choices")
        return response.choices[0].message

    async def generate(self, prompt: str, *, kind: str = "generic", temperature: float = 0.0) -> str:
        LLM_CALLS.labels(kind=kind).inc()
        message = await self.call([{"role": "user", "content": prompt}], temperature=temperature)
        text = (getattr(message, "content", None) or "").strip()
        trace_event("llm", kind, {"prompt": prompt[-2000:], "response": text}, meta={"model": self.model})
        return text


class OpenAIEmbedder(Embedder):
    def __init__(
        self,
        model: str | None = None,
        *,
        api_key: str | None = None,
        dimensions: int | None = None,
        timeout: float | None = None,
    ) -> None:
        settings = get_settings()
        self.model = model or settings.embedding_model
        self.dimensions = dimensions or settings.embedding_dim
        self._api_key = api_key or settings.openai_api_key
        self._timeout = timeout if timeout is not None else settings.call_timeout_s
        self._client: Optional[AsyncOpenAI] = None

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            if not self._api_key:
                raise RuntimeError("OPENAI_API_KEY is not set")
            self._client = AsyncOpenAI(api_key=self._api_key, timeout=self._timeout, max_retries=0)
        return self._client

    async def embed(self, text: str) -> List[float]:
        RETRIEVAL_CALLS.labels(kind="embed").inc()
        res = await self.client.embeddings.create(model=self.model, input=text, dimensions=self.dimensions)
        if not res.data:
            raise RuntimeError("OpenAI API returned no embedding")
        return list(res.data[0].embedding)
