"""
Purpose: The single orchestration point for interview-prep sessions. Owns the
document and session lifecycles and drives the RAG evaluation flow so the
host (web layer, CLI, UI) never touches prompts, embeddings or stores.

Key responsibilities:
- Upload: store the raw PDF, extract text, chunk, embed, persist a Document
  (one per owner/session/type; re-upload replaces).
- Generate questions from the session's job description.
- Submit answers: parse them, retrieve the closest resume chunks for the
  combined answers, evaluate all answers in one call, append feedback
  messages and store aggregate scores.
- Session CRUD with cascading document deletion.

Nothing here is global: every collaborator is passed in (or built from
Settings by from_settings).

Testing: Pure unit tests with fakes: scripted LLMClient, deterministic
EmbeddingService, in-memory stores.
"""

from __future__ import annotations
import logging
import time
from datetime import datetime
from typing import Callable, Optional

from .config import Settings
from .errors import (
    EmbeddingServiceError,
    EmptyContentError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from .interfaces import (
    BlobStore,
    DocumentStore,
    EmbeddingService,
    LLMClient,
    PromptFactory,
    SecurityGuard,
    SessionStore,
)
from .models import (
    Chunk,
    Document,
    DocumentStatus,
    DocumentType,
    InterviewSession,
    Message,
    NumberedItem,
    QAPair,
    Role,
    SubmissionResult,
    UsedChunk,
)
from .prompts import DefaultPromptFactory
from .services.answer_critic import evaluate_all
from .services.chunker import chunk_text, extract_pdf_text
from .services.embeddings import EmbeddingClient
from .services.question_generator import generate_questions, validate_question_count
from .services.retriever import find_similar_chunks
from .services.retry import RetryPolicy
from .services.scoring import calculate_final_scores
from .services.security import DefaultSecurity
from .utils.llm_text import parse_numbered_lines, split_numbered_answers

log = logging.getLogger(__name__)

PDF_CONTENT_TYPE = "application/pdf"
STORAGE_ROOT = "interview-prep"
PREVIEW_CHARS = 200


def _doc_type(value) -> DocumentType:
    try:
        return DocumentType(value)
    except ValueError:
        raise ValidationError("Invalid document type. Must be 'resume' or 'jd'.")


class InterviewPrepController:
    def __init__(
        self,
        *,
        settings: Settings,
        llm: LLMClient,
        embeddings: EmbeddingService,
        documents: DocumentStore,
        sessions: SessionStore,
        blobs: BlobStore,
        prompts: Optional[PromptFactory] = None,
        security: Optional[SecurityGuard] = None,
        extract_text: Callable[[bytes], str] = extract_pdf_text,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.settings = settings
        self.llm: LLMClient = llm
        self.documents: DocumentStore = documents
        self.sessions: SessionStore = sessions
        self.blobs: BlobStore = blobs
        self.prompts: PromptFactory = prompts or DefaultPromptFactory()
        self.security: SecurityGuard = security or DefaultSecurity(
            max_jd_chars=settings.jd_max_chars
        )
        self.retry = RetryPolicy(
            max_attempts=settings.max_retries, base_delay=settings.retry_base_delay
        )
        self.embedder = EmbeddingClient(
            embeddings,
            dimension=settings.embedding_dimension,
            retry=self.retry,
            sleep=sleep,
        )
        self._extract_text = extract_text
        self._sleep = sleep

    @classmethod
    def from_settings(
        cls, settings: Optional[Settings] = None
    ) -> "InterviewPrepController":
        """OpenAI-backed controller with in-memory stores, for local runs."""
        from .persistence.blob_store import InMemoryBlobStore
        from .persistence.document_store import InMemoryDocumentStore
        from .persistence.session_store import InMemorySessionStore
        from .services.llm_openai import OpenAIEmbeddingService, OpenAILLMClient

        settings = settings or Settings.from_env()
        return cls(
            settings=settings,
            llm=OpenAILLMClient.from_settings(settings),
            embeddings=OpenAIEmbeddingService.from_settings(settings),
            documents=InMemoryDocumentStore(),
            sessions=InMemorySessionStore(),
            blobs=InMemoryBlobStore(),
        )

    # ---------------------------
    # Sessions
    # ---------------------------
    def create_session(
        self, owner: str, name: Optional[str] = None, num_questions: int = 3
    ) -> InterviewSession:
        validate_question_count(num_questions)
        name = (name or "").strip() or (
            f"Interview Session - {datetime.now():%Y-%m-%d %H:%M}"
        )
        session = self.sessions.save(
            InterviewSession(owner=owner, name=name, total_questions=num_questions)
        )
        log.info("Created session %s (%d questions)", session.id, num_questions)
        return session

    def list_sessions(self, owner: str) -> list[InterviewSession]:
        return self.sessions.list(owner)

    def get_session(self, owner: str, session_id: str) -> InterviewSession:
        session = self.sessions.get(owner, session_id)
        if session is None:
            raise NotFoundError("Session not found or access denied")
        return session

    def delete_session(self, owner: str, session_id: str) -> InterviewSession:
        """Delete the session together with its session-scoped documents."""
        session = self.get_session(owner, session_id)
        for doc in self.documents.delete_for_session(owner, session_id):
            self._remove_blob(doc.storage_ref)
        self.sessions.delete(owner, session_id)
        log.info("Deleted session %s", session_id)
        return session

    # ---------------------------
    # Documents
    # ---------------------------
    def upload_document(
        self,
        owner: str,
        doc_type,
        file_name: str,
        data: bytes,
        content_type: str = PDF_CONTENT_TYPE,
        session_id: Optional[str] = None,
    ) -> Document:
        """
        Store, extract, chunk and embed one PDF. Any failure after the raw
        file is stored removes that file again before the error propagates.
        A document already in the same slot is only replaced once the new
        one is saved.
        """
        doc_type = _doc_type(doc_type)
        if content_type != PDF_CONTENT_TYPE:
            raise ValidationError("Invalid file type. Only PDF files are allowed.")
        if not data:
            raise ValidationError("No file uploaded.")
        if len(data) > self.settings.max_upload_bytes:
            limit_mb = self.settings.max_upload_bytes // (1024 * 1024)
            raise ValidationError(f"File size exceeds {limit_mb}MB limit")
        if session_id is not None:
            self.get_session(owner, session_id)

        folder = f"{STORAGE_ROOT}/{session_id or 'global'}"
        try:
            url = self.blobs.put(data, folder=folder, file_name=file_name)
        except StorageError:
            raise
        except Exception as e:
            log.error("Blob upload failed: %s", e)
            raise StorageError(f"Failed to upload file: {e}") from e

        try:
            chunks = self._process_pdf(data)
        except Exception:
            self._remove_blob(url)
            raise

        existing = self.documents.find(owner, session_id, doc_type)
        doc = self.documents.save(
            Document(
                owner=owner,
                type=doc_type,
                file_name=file_name,
                storage_ref=url,
                session_id=session_id,
                chunks=chunks,
            )
        )
        if existing is not None and existing.id != doc.id:
            log.info("Replaced %s document %s", doc_type.value, existing.id)
            self.documents.delete(owner, existing.id)
            self._remove_blob(existing.storage_ref)
        log.info(
            "Processed %s upload %s: %d chunk(s)", doc_type.value, doc.id, len(chunks)
        )
        return doc

    def _process_pdf(self, data: bytes) -> list[Chunk]:
        text = self._extract_text(data) or ""
        if len(text.strip()) < self.settings.min_text_chars:
            log.warning(
                "Extracted text too short or empty (%d chars)", len(text.strip())
            )
            raise EmptyContentError(
                "Could not extract sufficient text from PDF. Please ensure the PDF "
                "contains selectable text and is not just an image."
            )

        texts = chunk_text(text, self.settings.words_per_chunk)
        vectors = self.embedder.embed_batch(texts)
        if len(vectors) != len(texts) or any(
            len(v) != self.embedder.dimension for v in vectors
        ):
            log.error(
                "Embedding count mismatch: %d embeddings for %d chunks.",
                len(vectors),
                len(texts),
            )
            raise EmbeddingServiceError("Failed to generate embeddings for document.")
        return [Chunk(text=t, embedding=tuple(v)) for t, v in zip(texts, vectors)]

    def list_documents(
        self, owner: str, session_id: Optional[str] = None
    ) -> list[Document]:
        return self.documents.list(owner, session_id)

    def document_status(
        self, owner: str, session_id: Optional[str] = None
    ) -> DocumentStatus:
        return DocumentStatus(
            has_resume=self.documents.find(owner, session_id, DocumentType.RESUME)
            is not None,
            has_jd=self.documents.find(owner, session_id, DocumentType.JD) is not None,
        )

    def delete_document(self, owner: str, document_id: str) -> Document:
        doc = self.documents.delete(owner, document_id)
        if doc is None:
            log.warning("Delete document: %s not found or access denied", document_id)
            raise NotFoundError("Document not found or access denied")
        self._remove_blob(doc.storage_ref)
        return doc

    def _remove_blob(self, url: str) -> None:
        """Best effort: a leftover file must not fail the request."""
        try:
            self.blobs.delete(url)
        except Exception as e:
            log.error("Error deleting stored file %s (continuing): %s", url, e)

    # ---------------------------
    # Questions
    # ---------------------------
    def generate_questions(self, owner: str, session_id: str) -> str:
        """Generate and store the question list; resets any previous result."""
        session = self.get_session(owner, session_id)
        resume = self.documents.find(owner, session_id, DocumentType.RESUME)
        jd = self.documents.find(owner, session_id, DocumentType.JD)
        if resume is None or jd is None:
            log.warning(
                "Missing documents for session %s: resume=%s jd=%s",
                session_id,
                resume is not None,
                jd is not None,
            )
            raise ValidationError(
                "Please ensure both resume and job description are uploaded "
                "for this session"
            )

        jd_text = "\n\n".join(c.text for c in jd.chunks if c.text)
        jd_text = self.security.clip_job_description(
            self.security.sanitize_for_prompt(jd_text)
        )
        if len(jd_text) < self.settings.min_text_chars:
            raise ValidationError(
                "Job description text is too short or could not be extracted properly."
            )

        questions = generate_questions(
            jd_text,
            session.total_questions,
            llm=self.llm,
            settings=self.settings.question_settings(),
            prompts=self.prompts,
            retry=self.retry,
            sleep=self._sleep,
        )

        session.messages = [Message(role=Role.ASSISTANT, content=questions)]
        session.reset_scores()
        self.sessions.save(session)
        log.info("Questions saved for session %s", session_id)
        return questions

    def questions_for(self, session: InterviewSession) -> list[NumberedItem]:
        """Parse the first assistant message, the record of what was asked."""
        first = next((m for m in session.messages if m.role == Role.ASSISTANT), None)
        return parse_numbered_lines(first.content) if first else []

    # ---------------------------
    # Answers & evaluation
    # ---------------------------
    def submit_answers(
        self, owner: str, session_id: str, answers_text: str
    ) -> SubmissionResult:
        self.security.validate_user_input(answers_text)
        session = self.get_session(owner, session_id)
        if session.is_completed:
            raise ValidationError(
                "This session is already completed. Regenerate questions to start over."
            )

        questions = self.questions_for(session)
        if not questions:
            raise ValidationError("No questions found in session")

        answers = split_numbered_answers(answers_text, len(questions))
        if answers is None:
            raise ValidationError(
                f"Please provide exactly {len(questions)} answers in the format: "
                '"1. Your answer\\n2. Your answer\\n..."'
            )

        resume = self.documents.find(owner, session_id, DocumentType.RESUME)
        if resume is None:
            raise ValidationError("Resume not found for this session")

        combined = " ".join(a.text for a in answers)
        query = self.embedder.embed(combined)
        ranked = find_similar_chunks(query, resume.chunks, self.settings.top_k)
        context = "\n\n".join(r.chunk.text for r in ranked)

        pairs = [
            QAPair(
                question=q.text,
                answer=self.security.sanitize_for_prompt(answers[i].text),
            )
            for i, q in enumerate(questions)
        ]
        evaluations = evaluate_all(
            pairs,
            context,
            llm=self.llm,
            settings=self.settings.evaluation_settings(),
            prompts=self.prompts,
            retry=self.retry,
            sleep=self._sleep,
        )

        session.messages.append(Message(role=Role.USER, content=answers_text))
        for i, ev in enumerate(evaluations, start=1):
            session.messages.append(
                Message(
                    role=Role.ASSISTANT,
                    content=f"**Question {i} Feedback:**\n{ev.feedback}",
                    relevance_score=ev.relevance_score,
                    correctness_score=ev.correctness_score,
                    overall_score=ev.overall_score,
                )
            )

        scores = calculate_final_scores(session.messages)
        session.is_completed = True
        session.final_score = scores.final_score
        session.average_relevance = scores.average_relevance
        session.average_correctness = scores.average_correctness
        self.sessions.save(session)
        log.info(
            "Interview %s completed, final score %s", session_id, scores.final_score
        )

        return SubmissionResult(
            session_id=session.id,
            evaluations=evaluations,
            chunks_used=[
                UsedChunk(
                    index=pos,
                    preview=r.chunk.text[:PREVIEW_CHARS] + "...",
                    similarity=f"{r.similarity:.3f}",
                )
                for pos, r in enumerate(ranked, start=1)
            ],
            scores=scores,
        )

