"""
Purpose: Score all candidate answers of a session in one batched LLM call,
grounded in retrieved resume context.

What is inside:
evaluate_all(pairs, resume_context, llm=..., settings=...) -> list[Evaluation]
request_evaluation(...) -> Outcome (raw text or failure kind)
fallback_evaluations(count, reason) -> list[Evaluation]

evaluate_all always returns exactly one Evaluation per input pair, in input
order. Malformed blocks are repaired by utils.llm_text. When the generation
call fails outright, or the response has no recognizable block at all, every
pair gets a lowest-score entry with status FALLBACK so callers can tell an
infrastructure failure apart from a genuine 1/10.

Testing: Scripted fake LLM returning full, partial, empty and garbage output.
"""

from __future__ import annotations
import logging
import time
from typing import Any, Callable, Optional, Sequence

from ..errors import (
    ContentBlockedError,
    EmptyResponseError,
    EvaluationParseError,
    ResponseTruncatedError,
    ValidationError,
)
from ..interfaces import LLMClient, PromptFactory
from ..models import Evaluation, EvaluationStatus, LLMSettings, Outcome, QAPair
from ..prompts import DefaultPromptFactory
from ..prompts.common import NO_RESUME_CONTEXT
from ..utils.llm_text import SCORE_MIN, parse_evaluations
from .generation import BlankResponseMessages, generate_text
from .retry import RetryPolicy

log = logging.getLogger(__name__)

_BLANK = BlankResponseMessages(
    blocked="Evaluation response blocked due to safety filters.",
    truncated="Evaluation response exceeded maximum length.",
    empty="Empty evaluation response received from AI model",
)


def _as_pair(item: Any, index: int) -> QAPair:
    if isinstance(item, QAPair):
        question, answer = item.question, item.answer
    elif isinstance(item, dict):
        question, answer = item.get("question"), item.get("answer")
    else:
        question = answer = None
    if not isinstance(question, str) or not isinstance(answer, str):
        raise ValidationError(
            f"Invalid format for question/answer pair at index {index}. "
            "Expected {question: str, answer: str}"
        )
    return QAPair(question=question, answer=answer)


def validate_pairs(pairs: Sequence[Any]) -> list[QAPair]:
    if isinstance(pairs, (str, bytes)) or not isinstance(pairs, Sequence) or not pairs:
        raise ValidationError(
            "Must provide a non-empty list of questions and answers for evaluation"
        )
    return [_as_pair(item, i) for i, item in enumerate(pairs)]


def _failure_kind(exc: BaseException) -> str:
    if isinstance(exc, ContentBlockedError):
        return "blocked"
    if isinstance(exc, ResponseTruncatedError):
        return "truncated"
    if isinstance(exc, EmptyResponseError):
        return "empty"
    return "service"


def request_evaluation(
    pairs: Sequence[QAPair],
    resume_context: str,
    *,
    llm: LLMClient,
    settings: LLMSettings,
    prompts: PromptFactory,
    retry: RetryPolicy = RetryPolicy(),
    sleep: Callable[[float], None] = time.sleep,
) -> Outcome:
    """Build the batched prompt and call the model; never raises."""
    try:
        prompt = prompts.evaluation_instruction(
            pairs=pairs, resume_context=resume_context
        )
        text = generate_text(
            llm, prompt, settings, messages=_BLANK, retry=retry, sleep=sleep
        )
    except Exception as e:
        log.error("Evaluation request failed: %s", e)
        return Outcome.failure(_failure_kind(e), e)
    return Outcome.success(text)


def fallback_evaluations(count: int, reason: str) -> list[Evaluation]:
    return [
        Evaluation(
            relevance_score=SCORE_MIN,
            correctness_score=SCORE_MIN,
            overall_score=SCORE_MIN,
            feedback=(
                f"A critical error occurred during evaluation: {reason}. "
                f"Unable to provide feedback for question {i}."
            ),
            status=EvaluationStatus.FALLBACK,
        )
        for i in range(1, count + 1)
    ]


def evaluate_all(
    pairs: Sequence[Any],
    resume_context: str = "",
    *,
    llm: LLMClient,
    settings: LLMSettings,
    prompts: Optional[PromptFactory] = None,
    retry: RetryPolicy = RetryPolicy(),
    sleep: Callable[[float], None] = time.sleep,
) -> list[Evaluation]:
    qa = validate_pairs(pairs)
    if not isinstance(resume_context, str) or not resume_context.strip():
        log.warning("No resume context provided for evaluation, using placeholder.")
        resume_context = NO_RESUME_CONTEXT

    outcome = request_evaluation(
        qa,
        resume_context,
        llm=llm,
        settings=settings,
        prompts=prompts or DefaultPromptFactory(),
        retry=retry,
        sleep=sleep,
    )
    if not outcome.ok:
        log.warning(
            "Returning fallback evaluations (%s): %s", outcome.kind, outcome.error
        )
        return fallback_evaluations(len(qa), _reason(outcome.error))

    try:
        return parse_evaluations(outcome.value, len(qa))
    except EvaluationParseError as e:
        log.warning("Returning fallback evaluations (unparsable response).")
        return fallback_evaluations(len(qa), e.message)


def _reason(exc: Optional[BaseException]) -> str:
    message = getattr(exc, "message", None)
    return message or str(exc) or exc.__class__.__name__
