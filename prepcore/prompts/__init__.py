"""Facade over the prompt modules; the services only talk to DefaultPromptFactory."""

from __future__ import annotations
from typing import Sequence

from ..models import QAPair
from . import feedback as _feedback
from . import interview as _interview


class DefaultPromptFactory:
    # QUESTIONS
    def question_generation_instruction(
        self, *, jd_text: str, num_questions: int
    ) -> str:
        return _interview.question_generation_instruction(
            jd_text=jd_text, num_questions=num_questions
        )

    # EVALUATION
    def evaluation_instruction(
        self, *, pairs: Sequence[QAPair], resume_context: str
    ) -> str:
        return _feedback.evaluation_instruction(
            pairs=pairs, resume_context=resume_context
        )
