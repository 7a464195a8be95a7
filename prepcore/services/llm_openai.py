"""
Purpose: Thin client wrappers around OpenAI (or other providers later).
One place for auth, timeouts, model options, response/usage normalization.

Retries are NOT done here: callers wrap each call in services.retry so the
policy (attempts, backoff, which errors are transient) is shared between
generation and embeddings. The SDK's own retry loop is disabled for that reason.

Testing: Inject a fake SDK client; assert it maps finish reasons and usage.
"""

from __future__ import annotations
from typing import Any, Optional

from openai import OpenAI

from ..config import Settings
from ..errors import EmbeddingServiceError
from ..models import Generation, LLMSettings

BLOCKED_REASONS = frozenset({"content_filter", "safety"})
TRUNCATED_REASONS = frozenset({"length", "max_tokens"})


def _make_sdk_client(api_key: str, timeout: float) -> OpenAI:
    if not api_key:
        raise RuntimeError("Missing OPENAI_API_KEY")
    try:
        return OpenAI(api_key=api_key, timeout=timeout, max_retries=0)
    except Exception as e:
        raise RuntimeError(f"Failed to initialize OpenAI client: {e}") from e


class OpenAILLMClient:
    def __init__(
        self, api_key: str = "", *, timeout: float = 30.0, client: Any = None
    ):
        self.client = client or _make_sdk_client(api_key, timeout)

    @classmethod
    def from_settings(cls, settings: Settings) -> "OpenAILLMClient":
        return cls(settings.openai_api_key, timeout=settings.request_timeout)

    def generate(self, prompt: str, settings: LLMSettings) -> Generation:
        cc = self.client.chat.completions.create(
            model=settings.model,
            messages=[{"role": "user", "content": prompt}],
            temperature=settings.temperature,
            top_p=settings.top_p,
            max_tokens=settings.max_tokens,
        )
        choice = cc.choices[0] if cc.choices else None
        message = getattr(choice, "message", None)
        text = (getattr(message, "content", None) or "") if message else ""
        finish_reason = getattr(choice, "finish_reason", None)
        refusal = getattr(message, "refusal", None) if message else None

        usage = getattr(cc, "usage", None)
        tokens_in = getattr(usage, "prompt_tokens", 0) if usage else 0
        tokens_out = getattr(usage, "completion_tokens", 0) if usage else 0
        return Generation(
            text=text,
            finish_reason=finish_reason,
            blocked=finish_reason in BLOCKED_REASONS or bool(refusal),
            truncated=finish_reason in TRUNCATED_REASONS,
            meta={
                "model": getattr(cc, "model", settings.model),
                "tokens_in": tokens_in or 0,
                "tokens_out": tokens_out or 0,
                "refusal": refusal,
            },
        )


class OpenAIEmbeddingService:
    def __init__(
        self,
        api_key: str = "",
        *,
        model: str = "text-embedding-3-small",
        dimension: int = 768,
        timeout: float = 30.0,
        client: Any = None,
    ):
        self.model = model
        self.dimension = dimension
        self.client = client or _make_sdk_client(api_key, timeout)

    @classmethod
    def from_settings(cls, settings: Settings) -> "OpenAIEmbeddingService":
        return cls(
            settings.openai_api_key,
            model=settings.embedding_model,
            dimension=settings.embedding_dimension,
            timeout=settings.request_timeout,
        )

    def embed(self, text: str) -> list[float]:
        resp = self.client.embeddings.create(
            model=self.model, input=text, dimensions=self.dimension
        )
        data: Optional[list] = getattr(resp, "data", None)
        if not data:
            raise EmbeddingServiceError("Embedding response contained no data.")
        vector = getattr(data[0], "embedding", None)
        return list(vector) if vector is not None else []
