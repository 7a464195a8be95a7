"""
Abstractions for pluggable services. Inversion of control: core depends
on interfaces, not concrete services. Enables fakes/mocks and future swaps.

Common protocols:
- LLMClient.generate(prompt, settings) -> Generation
- EmbeddingService.embed(text) -> list[float]
- DocumentStore / SessionStore / BlobStore for persistence collaborators
- PromptFactory builds the question and evaluation prompts

Testing: Use simple fake implementations to test the controller without network calls.
"""

from __future__ import annotations
from typing import Optional, Protocol, Sequence

from .models import (
    Document,
    DocumentType,
    Generation,
    InterviewSession,
    LLMSettings,
    QAPair,
)


class LLMClient(Protocol):
    def generate(self, prompt: str, settings: LLMSettings) -> Generation: ...


class EmbeddingService(Protocol):
    def embed(self, text: str) -> list[float]: ...


class DocumentStore(Protocol):
    def find(
        self, owner: str, session_id: Optional[str], doc_type: DocumentType
    ) -> Optional[Document]: ...

    def get(self, owner: str, document_id: str) -> Optional[Document]: ...

    def list(self, owner: str, session_id: Optional[str]) -> list[Document]: ...

    def save(self, document: Document) -> Document: ...

    def delete(self, owner: str, document_id: str) -> Optional[Document]: ...

    def delete_for_session(self, owner: str, session_id: str) -> list[Document]: ...


class SessionStore(Protocol):
    def get(self, owner: str, session_id: str) -> Optional[InterviewSession]: ...

    def list(self, owner: str) -> list[InterviewSession]: ...

    def save(self, session: InterviewSession) -> InterviewSession: ...

    def delete(self, owner: str, session_id: str) -> Optional[InterviewSession]: ...


class BlobStore(Protocol):
    def put(self, data: bytes, *, folder: str, file_name: str) -> str: ...

    def delete(self, url: str) -> None: ...


class SecurityGuard(Protocol):
    def validate_user_input(self, text: str) -> None: ...

    def clip_job_description(self, text: str) -> str: ...

    def sanitize_for_prompt(self, text: str) -> str: ...


class PromptFactory(Protocol):
    def question_generation_instruction(
        self, *, jd_text: str, num_questions: int
    ) -> str: ...

    def evaluation_instruction(
        self, *, pairs: Sequence[QAPair], resume_context: str
    ) -> str: ...
