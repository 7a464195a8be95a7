"""Shared prompt helpers used across prompt modules."""

from __future__ import annotations
from typing import Sequence

from ..models import QAPair

NO_RESUME_CONTEXT = "No resume context was available for this evaluation."


def numbered_template(count: int, label: str = "Question") -> str:
    """Skeleton of the strict ``N. text`` list the model must reproduce."""
    if count <= 3:
        lines = [f"{i}. [{label} {i} text]" for i in range(1, count + 1)]
    else:
        lines = [f"1. [{label} 1 text]", f"2. [{label} 2 text]", "..."]
        lines.append(f"{count}. [{label} {count} text]")
    return "\n".join(lines)


def render_qa_pairs(pairs: Sequence[QAPair]) -> str:
    return "\n\n".join(
        f"Question {i}: {qa.question}\nCandidate's Answer: {qa.answer}"
        for i, qa in enumerate(pairs, start=1)
    )


def resume_block(context: str) -> str:
    return (context or "").strip() or NO_RESUME_CONTEXT
