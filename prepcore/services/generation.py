"""
Purpose: Run one prompt through the text-generation service under the shared
retry policy and turn a blank response into a typed error.

A blank response is classified by what the provider reported: blocked by
safety filtering, cut off at the token limit, or simply empty. Each caller
supplies its own user-facing wording for those three cases.
"""

from __future__ import annotations
import logging
import time
from dataclasses import dataclass
from typing import Callable

from ..errors import ContentBlockedError, EmptyResponseError, ResponseTruncatedError
from ..interfaces import LLMClient
from ..models import LLMSettings
from .retry import RetryPolicy, with_retries

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class BlankResponseMessages:
    blocked: str
    truncated: str
    empty: str


def generate_text(
    llm: LLMClient,
    prompt: str,
    settings: LLMSettings,
    *,
    messages: BlankResponseMessages,
    retry: RetryPolicy = RetryPolicy(),
    sleep: Callable[[float], None] = time.sleep,
) -> str:
    def attempt() -> str:
        gen = llm.generate(prompt, settings)
        text = gen.text or ""
        if text.strip():
            if gen.truncated:
                log.warning(
                    "Generation hit the token limit (%d); using partial text.",
                    settings.max_tokens,
                )
            return text

        log.error(
            "AI returned an empty response (finish_reason=%s, blocked=%s).",
            gen.finish_reason,
            gen.blocked,
        )
        if gen.blocked:
            raise ContentBlockedError(messages.blocked)
        if gen.truncated:
            raise ResponseTruncatedError(messages.truncated)
        raise EmptyResponseError(messages.empty)

    return with_retries(attempt, retry, sleep=sleep)
