"""Batched answer evaluation prompt ("Question <n>:" blocks with labeled scores)."""

from __future__ import annotations
from textwrap import dedent
from typing import Sequence

from ..models import QAPair
from .common import render_qa_pairs, resume_block


def evaluation_instruction(*, pairs: Sequence[QAPair], resume_context: str) -> str:
    return dedent(
        """\
        You are an expert interview evaluator for technical roles. Evaluate the candidate's responses to ALL interview questions below with DETAILED SCORING based on relevance, correctness, and overall quality, considering the provided resume context.

        Interview Questions and Answers:
        {qa}

        Relevant Context from Candidate's Resume (use this to gauge experience claims):
        {resume}

        Evaluation Task:
        For EACH question, provide the following on separate lines:
        1. Relevance Score (1-10): How directly and completely does the answer address the question asked? (1=Off-topic, 10=Perfectly relevant)
        2. Correctness Score (1-10): How technically accurate and logically sound is the answer? (1=Incorrect, 10=Flawless)
        3. Overall Score (1-10): Combined assessment of clarity, depth, examples, and fit with the resume context. (1=Poor, 10=Excellent)
        4. Feedback (max 100 words): strengths observed, concrete areas for improvement, and how well the answer uses experience from the resume context.

        Format your response EXACTLY like this template for EACH question:

        Question 1:
        Relevance: [number]/10
        Correctness: [number]/10
        Overall: [number]/10
        Feedback: [Your feedback for Question 1]

        Question 2:
        Relevance: [number]/10
        Correctness: [number]/10
        Overall: [number]/10
        Feedback: [Your feedback for Question 2]

        [...continue this format for all {count} questions...]

        Begin evaluation now:"""
    ).format(
        qa=render_qa_pairs(pairs),
        resume=resume_block(resume_context),
        count=len(pairs),
    )
