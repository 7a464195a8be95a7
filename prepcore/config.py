"""
Purpose: Runtime configuration. One explicitly constructed object that is
passed into clients and the controller; nothing reads the environment
behind the caller's back.

Environment (optionally via a .env file):
OPENAI_API_KEY, PREP_CHAT_MODEL, PREP_EMBEDDING_MODEL, PREP_EMBEDDING_DIM,
PREP_REQUEST_TIMEOUT, PREP_MAX_RETRIES, PREP_RETRY_BASE_DELAY
"""

from __future__ import annotations
import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

from .errors import ValidationError
from .models import LLMSettings

MAX_UPLOAD_BYTES = 2 * 1024 * 1024


@dataclass(frozen=True)
class Settings:
    openai_api_key: str = ""
    chat_model: str = "gpt-4o-mini"
    embedding_model: str = "text-embedding-3-small"
    embedding_dimension: int = 768
    request_timeout: float = 30.0
    max_retries: int = 3
    retry_base_delay: float = 1.0
    words_per_chunk: int = 500
    top_k: int = 3
    jd_max_chars: int = 4000
    min_text_chars: int = 50
    max_upload_bytes: int = MAX_UPLOAD_BYTES

    @classmethod
    def from_env(
        cls, env: Optional[Mapping[str, str]] = None, *, dotenv: bool = True
    ) -> "Settings":
        if env is None:
            if dotenv:
                load_dotenv()
            env = os.environ

        def _num(name: str, cast, default):
            raw = (env.get(name) or "").strip()
            if not raw:
                return default
            try:
                return cast(raw)
            except ValueError:
                raise ValidationError(f"{name} must be a number, got {raw!r}")

        return cls(
            openai_api_key=(env.get("OPENAI_API_KEY") or "").strip(),
            chat_model=(env.get("PREP_CHAT_MODEL") or "").strip() or cls.chat_model,
            embedding_model=(env.get("PREP_EMBEDDING_MODEL") or "").strip()
            or cls.embedding_model,
            embedding_dimension=_num("PREP_EMBEDDING_DIM", int, cls.embedding_dimension),
            request_timeout=_num("PREP_REQUEST_TIMEOUT", float, cls.request_timeout),
            max_retries=_num("PREP_MAX_RETRIES", int, cls.max_retries),
            retry_base_delay=_num("PREP_RETRY_BASE_DELAY", float, cls.retry_base_delay),
        )

    def question_settings(self) -> LLMSettings:
        """Higher temperature for variety in generated questions."""
        return LLMSettings(model=self.chat_model, temperature=0.8, max_tokens=2048)

    def evaluation_settings(self) -> LLMSettings:
        """Lower temperature for consistent grading."""
        return LLMSettings(model=self.chat_model, temperature=0.5, max_tokens=2048)


def configure_logging(level: int | str = logging.INFO) -> None:
    """Basic console logging for hosts and scripts."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
