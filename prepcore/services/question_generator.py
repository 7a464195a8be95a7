"""
Purpose: Generate the interview question list for a session from its job
description. The first N-1 questions are technical/role-specific, the last
one is behavioral.

What is inside:
generate_questions(jd_text, num_questions, llm=..., settings=...) -> str

The raw numbered list is returned as-is. A response that does not look like
a strict numbered list only logs a warning: parse_numbered_lines downstream
is tolerant and is the authority on structure.

Testing: Scripted fake LLM; assert prompt contract and error mapping.
"""

from __future__ import annotations
import logging
import time
from typing import Callable, Optional

from ..errors import (
    ContentBlockedError,
    GenerationServiceError,
    PrepError,
    TransientServiceError,
    ValidationError,
    describe_service_error,
    is_content_blocked,
)
from ..interfaces import LLMClient, PromptFactory
from ..models import LLMSettings
from ..prompts import DefaultPromptFactory
from ..utils.llm_text import looks_like_numbered_list
from .generation import BlankResponseMessages, generate_text
from .retry import RetryPolicy, is_transient

log = logging.getLogger(__name__)

MIN_QUESTIONS = 2
MAX_QUESTIONS = 10


def validate_question_count(num_questions) -> int:
    if (
        not isinstance(num_questions, int)
        or isinstance(num_questions, bool)
        or not MIN_QUESTIONS <= num_questions <= MAX_QUESTIONS
    ):
        raise ValidationError(
            f"Number of questions must be an integer between {MIN_QUESTIONS} "
            f"and {MAX_QUESTIONS}"
        )
    return num_questions


def _blank_messages(settings: LLMSettings) -> BlankResponseMessages:
    return BlankResponseMessages(
        blocked="Content blocked by safety filters. "
        "Try modifying the job description text.",
        truncated=f"AI response exceeded maximum length ({settings.max_tokens} "
        "tokens). Try requesting fewer questions or ensure the JD text is concise.",
        empty="Empty response received from AI model when generating questions",
    )


def generate_questions(
    jd_text: str,
    num_questions: int = 3,
    *,
    llm: LLMClient,
    settings: LLMSettings,
    prompts: Optional[PromptFactory] = None,
    retry: RetryPolicy = RetryPolicy(),
    sleep: Callable[[float], None] = time.sleep,
) -> str:
    """Return the raw numbered question list text."""
    if not isinstance(jd_text, str) or not jd_text.strip():
        raise ValidationError("Job description text must be a non-empty string")
    validate_question_count(num_questions)

    prompts = prompts or DefaultPromptFactory()
    prompt = prompts.question_generation_instruction(
        jd_text=jd_text, num_questions=num_questions
    )

    try:
        text = generate_text(
            llm,
            prompt,
            settings,
            messages=_blank_messages(settings),
            retry=retry,
            sleep=sleep,
        )
    except PrepError as e:
        log.error("Question generation failed: %s", e.message)
        raise
    except Exception as e:
        log.error("Question generation failed: %s", e)
        message = describe_service_error(e, context="Unable to generate questions")
        if is_content_blocked(e):
            raise ContentBlockedError(message) from e
        if is_transient(e):
            raise TransientServiceError(message) from e
        raise GenerationServiceError(message) from e

    text = text.strip()
    if not looks_like_numbered_list(text, num_questions):
        log.warning(
            "Response format might be incorrect. Expected numbered list: %r",
            text[:200],
        )
    return text
