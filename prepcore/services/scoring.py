"""
Purpose: Reduce a completed session's transcript to session-level scores.

Only assistant messages carrying both a relevance and a correctness score
count. The final score is the mean of the two axis averages; the model's own
"overall" number is never used here.
"""

from __future__ import annotations
import logging
from decimal import ROUND_HALF_UP, Decimal
from numbers import Real
from typing import Sequence

from ..models import FinalScores, Message, Role

log = logging.getLogger(__name__)


def round1(x: float) -> float:
    """Round to one decimal place, halves away from zero."""
    return float(Decimal(repr(x)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def _is_score(value) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def scored_messages(messages: Sequence[Message]) -> list[Message]:
    return [
        m
        for m in messages
        if m.role == Role.ASSISTANT
        and _is_score(m.relevance_score)
        and _is_score(m.correctness_score)
    ]


def calculate_final_scores(messages: Sequence[Message]) -> FinalScores:
    scored = scored_messages(messages)
    if not scored:
        log.warning("No valid scored messages found in transcript.")
        return FinalScores()

    n = len(scored)
    avg_relevance = sum(float(m.relevance_score) for m in scored) / n
    avg_correctness = sum(float(m.correctness_score) for m in scored) / n
    scores = FinalScores(
        final_score=round1((avg_relevance + avg_correctness) / 2),
        average_relevance=round1(avg_relevance),
        average_correctness=round1(avg_correctness),
    )
    log.info(
        "Calculated scores over %d question(s): relevance=%s correctness=%s final=%s",
        n,
        scores.average_relevance,
        scores.average_correctness,
        scores.final_score,
    )
    return scores
