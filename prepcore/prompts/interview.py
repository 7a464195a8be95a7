"""Question generation prompt (numbered list: technical first, behavioral last)."""

from __future__ import annotations
from textwrap import dedent

from .common import numbered_template


def question_generation_instruction(*, jd_text: str, num_questions: int) -> str:
    technical = num_questions - 1
    return dedent(
        f"""\
        You are a professional technical interviewer. Based on the following job description, generate exactly {num_questions} relevant interview questions.

        Job Description:
        {{jd}}

        Requirements:
        - Generate exactly {num_questions} questions total.
        - The first {technical} question(s) MUST be TECHNICAL and/or ROLE-SPECIFIC, directly related to the skills, tools and responsibilities named in the job description.
        - The LAST question (question {num_questions}) MUST be a BEHAVIORAL question assessing teamwork, problem-solving, handling challenges, or communication skills.
        - Technical questions must be specific and probe understanding (e.g. "Explain how you would...").
        - Keep all questions clear, concise, and suitable for a real interview.
        - Format the output STRICTLY as a numbered list, one question per line, like this:
        {{template}}
        - Do NOT include any introductory or concluding text, just the numbered questions.

        Generate the questions now:"""
    ).format(jd=jd_text.strip(), template=numbered_template(num_questions))
