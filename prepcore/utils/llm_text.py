"""Utilities for robustly extracting structure from free-text LLM responses.

All regex work against model output lives here so repair/fallback policy is
in one place:
- numbered lists ("1. text") for generated questions and candidate answers,
- "Question <n>:" blocks with labeled score lines for evaluations.
"""

from __future__ import annotations
import logging
import math
import re
from typing import Optional

from ..errors import EvaluationParseError
from ..models import Evaluation, EvaluationStatus, NumberedItem

log = logging.getLogger(__name__)

SCORE_MIN = 1
SCORE_MAX = 10
DEFAULT_AXIS_SCORE = 5

FEEDBACK_UNPARSED = (
    "Feedback could not be parsed. Please check the raw AI response if needed."
)
FEEDBACK_MISSING = "Evaluation for this question was missing in the AI response."

_NUMBERED_LINE = re.compile(r"^(\d+)\.\s*(.+)")
_STRICT_NUMBERED_LINE = re.compile(r"^\d+\.\s+.+")
_ANSWER_MARKER = re.compile(r"^\d+\.\s*", re.MULTILINE)
_QUESTION_HEADER = re.compile(r"Question\s+\d+:", re.IGNORECASE)


def _score_pattern(label: str) -> re.Pattern:
    return re.compile(rf"{label}:\s*(\d+)(?:\s*/\s*10)?", re.IGNORECASE)


_RELEVANCE = _score_pattern("Relevance")
_CORRECTNESS = _score_pattern("Correctness")
_OVERALL = _score_pattern("Overall")
_FEEDBACK = re.compile(r"Feedback:\s*([\s\S]*)", re.IGNORECASE)


def round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def clamp_score(value) -> int:
    """Clamp into [1, 10]; anything unparsable or NaN becomes 1."""
    try:
        v = float(value)
    except (TypeError, ValueError):
        return SCORE_MIN
    if math.isnan(v):
        return SCORE_MIN
    return int(max(SCORE_MIN, min(SCORE_MAX, round_half_up(v))))


# ---------------------------
# Numbered lists
# ---------------------------
def looks_like_numbered_list(text: str, expected: int) -> bool:
    lines = (text or "").strip().split("\n")
    return len(lines) >= expected and all(
        _STRICT_NUMBERED_LINE.match(line.strip()) for line in lines
    )


def parse_numbered_lines(text: str) -> list[NumberedItem]:
    """Lines shaped like ``N. text``; anything else is skipped."""
    if not text or not isinstance(text, str):
        return []
    items: list[NumberedItem] = []
    for line in (ln.strip() for ln in text.split("\n")):
        if not line:
            continue
        m = _NUMBERED_LINE.match(line)
        if m:
            items.append(NumberedItem(number=int(m.group(1)), text=m.group(2).strip()))
        else:
            log.warning("Skipping line, format mismatch: %r", line[:50])
    return items


def split_numbered_answers(text: str, expected: int) -> Optional[list[NumberedItem]]:
    """
    Split a free-form answer block on line-leading ``N.`` markers.
    Answers may span several lines. Text before the first marker is not an
    answer and is dropped. Returns None when fewer than ``expected`` answers
    can be found.
    """
    if not text or not isinstance(text, str):
        return None
    pieces = [p for p in _ANSWER_MARKER.split(text.strip())[1:] if p]
    if len(pieces) < expected:
        log.warning("Could not reliably parse %d answers from text.", expected)
        return None
    return [NumberedItem(number=i + 1, text=pieces[i].strip()) for i in range(expected)]


# ---------------------------
# Evaluation blocks
# ---------------------------
def _match_int(rx: re.Pattern, block: str) -> Optional[int]:
    m = rx.search(block)
    return int(m.group(1)) if m else None


def parse_evaluation_block(block: str) -> Evaluation:
    relevance = _match_int(_RELEVANCE, block)
    correctness = _match_int(_CORRECTNESS, block)
    overall = _match_int(_OVERALL, block)
    feedback_match = _FEEDBACK.search(block)

    relevance = DEFAULT_AXIS_SCORE if relevance is None else relevance
    correctness = DEFAULT_AXIS_SCORE if correctness is None else correctness
    if overall is None:
        overall = round_half_up((relevance + correctness) / 2)
    feedback = feedback_match.group(1).strip() if feedback_match else ""

    return Evaluation(
        relevance_score=clamp_score(relevance),
        correctness_score=clamp_score(correctness),
        overall_score=clamp_score(overall),
        feedback=feedback or FEEDBACK_UNPARSED,
    )


def split_evaluation_blocks(text: str) -> list[str]:
    """Blocks following each "Question <n>:" header; the preamble is dropped."""
    parts = _QUESTION_HEADER.split(text or "")
    return [b.strip() for b in parts[1:] if b.strip()]


def missing_evaluation() -> Evaluation:
    return Evaluation(
        relevance_score=SCORE_MIN,
        correctness_score=SCORE_MIN,
        overall_score=SCORE_MIN,
        feedback=FEEDBACK_MISSING,
        status=EvaluationStatus.MISSING,
    )


def parse_evaluations(text: str, expected: int) -> list[Evaluation]:
    """
    Parse a batched evaluation response into exactly ``expected`` entries.
    Missing blocks are padded with lowest-score placeholders, extra blocks
    are dropped. Raises EvaluationParseError when no block is found at all.
    """
    blocks = split_evaluation_blocks(text)
    if not blocks:
        log.error(
            "Could not parse any question blocks from evaluation response: %r",
            (text or "")[:300],
        )
        raise EvaluationParseError(
            "Failed to parse evaluation response format. Unexpected AI output."
        )

    evaluations = [parse_evaluation_block(b) for b in blocks]

    if len(evaluations) < expected:
        log.warning(
            "Padding %d evaluation(s) missing from AI response.",
            expected - len(evaluations),
        )
        evaluations.extend(missing_evaluation() for _ in range(expected - len(evaluations)))
    elif len(evaluations) > expected:
        log.warning(
            "AI returned %d evaluations for %d questions, trimming extras.",
            len(evaluations),
            expected,
        )
        evaluations = evaluations[:expected]
    return evaluations
