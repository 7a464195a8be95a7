"""
Canonical data shapes, shared truth for typing/validation between layers.

Typical contents:
- LLMSettings (model, temperature, top_p, max_tokens).
- Chunk / Document (embedded text segments owned by an uploaded file).
- Message / InterviewSession (ordered transcript plus computed scores).
- Evaluation / RankedChunk / FinalScores (results handed back to callers).

Testing: Trivial; mostly types.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
import uuid


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return uuid.uuid4().hex


class DocumentType(str, Enum):
    RESUME = "resume"
    JD = "jd"


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class EvaluationStatus(str, Enum):
    SCORED = "scored"
    MISSING = "missing"
    FALLBACK = "fallback"


@dataclass
class LLMSettings:
    model: str
    temperature: float = 0.7
    top_p: float = 1.0
    max_tokens: int = 1024


@dataclass(frozen=True)
class Chunk:
    text: str
    embedding: tuple[float, ...]


@dataclass
class Document:
    owner: str
    type: DocumentType
    file_name: str
    storage_ref: str
    session_id: Optional[str] = None
    chunks: list[Chunk] = field(default_factory=list)
    id: str = field(default_factory=_new_id)
    created_at: datetime = field(default_factory=_utcnow)


@dataclass
class Message:
    role: Role
    content: str
    relevance_score: Optional[float] = None
    correctness_score: Optional[float] = None
    overall_score: Optional[float] = None
    timestamp: datetime = field(default_factory=_utcnow)


@dataclass
class InterviewSession:
    owner: str
    name: str
    total_questions: int = 3
    messages: list[Message] = field(default_factory=list)
    is_completed: bool = False
    final_score: Optional[float] = None
    average_relevance: Optional[float] = None
    average_correctness: Optional[float] = None
    id: str = field(default_factory=_new_id)
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    def reset_scores(self) -> None:
        self.is_completed = False
        self.final_score = None
        self.average_relevance = None
        self.average_correctness = None


@dataclass(frozen=True)
class QAPair:
    question: str
    answer: str


@dataclass(frozen=True)
class NumberedItem:
    number: int
    text: str


@dataclass(frozen=True)
class Evaluation:
    relevance_score: int
    correctness_score: int
    overall_score: int
    feedback: str
    status: EvaluationStatus = EvaluationStatus.SCORED


@dataclass(frozen=True)
class RankedChunk:
    index: int
    chunk: Chunk
    similarity: float


@dataclass(frozen=True)
class FinalScores:
    final_score: Optional[float] = None
    average_relevance: Optional[float] = None
    average_correctness: Optional[float] = None


@dataclass
class Generation:
    """Normalized text-generation response."""

    text: str
    finish_reason: Optional[str] = None
    blocked: bool = False
    truncated: bool = False
    meta: dict = field(default_factory=dict)


@dataclass(frozen=True)
class Outcome:
    """Tagged result: either ``value`` (ok) or ``kind``/``error`` (failure)."""

    ok: bool
    value: Any = None
    kind: Optional[str] = None
    error: Optional[BaseException] = None

    @classmethod
    def success(cls, value: Any) -> "Outcome":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, kind: str, error: BaseException) -> "Outcome":
        return cls(ok=False, kind=kind, error=error)


@dataclass(frozen=True)
class UsedChunk:
    index: int
    preview: str
    similarity: str


@dataclass
class SubmissionResult:
    session_id: str
    evaluations: list[Evaluation]
    chunks_used: list[UsedChunk]
    scores: FinalScores
    is_completed: bool = True


@dataclass(frozen=True)
class DocumentStatus:
    has_resume: bool
    has_jd: bool

    @property
    def ready(self) -> bool:
        return self.has_resume and self.has_jd
