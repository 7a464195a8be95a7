import pytest

from prepcore.errors import EmptyContentError, NotFoundError, ValidationError
from prepcore.models import DocumentType, EvaluationStatus, Role

RESUME = (
    "Jane Doe backend engineer. Built Django REST services on PostgreSQL for "
    "payments, tuned slow queries with composite indexes, ran Redis caching, "
    "led migrations to Kubernetes and mentored three junior developers on the team."
)
JD = (
    "Backend engineer role: design Python APIs with Django, optimize PostgreSQL "
    "queries, operate Redis and Kubernetes, collaborate with product and mentor peers."
)
QUESTIONS = (
    "1. How would you speed up a slow PostgreSQL query behind a Django view?\n"
    "2. How do you choose a Redis caching strategy for an API?\n"
    "3. Tell me about a time you mentored a struggling teammate."
)
ANSWERS = (
    "1. Check EXPLAIN output and add a composite index.\n"
    "2. Cache-aside with TTLs and explicit invalidation.\n"
    "3. I paired with a junior developer daily until they shipped on their own."
)
EVALUATION = """Question 1:
Relevance: 8/10
Correctness: 6/10
Overall: 7/10
Feedback: Good start; mention query plans in more depth.

Question 2:
Relevance: 6/10
Correctness: 8/10
Overall: 7/10
Feedback: Correct pattern, discuss stampedes.

Question 3:
Relevance: 7/10
Correctness: 7/10
Overall: 7/10
Feedback: Clear story; quantify the outcome.
"""

OWNER = "user-1"


def upload(controller, session_id, doc_type, text, owner=OWNER):
    return controller.upload_document(
        owner, doc_type, f"{doc_type}.pdf", text.encode(), session_id=session_id
    )


@pytest.fixture
def ready_session(controller):
    session = controller.create_session(OWNER, "Backend practice", 3)
    upload(controller, session.id, "resume", RESUME)
    upload(controller, session.id, "jd", JD)
    return session


def test_full_interview_flow(controller, llm, embed_service, ready_session):
    llm.responses.extend([QUESTIONS, EVALUATION])

    assert controller.generate_questions(OWNER, ready_session.id) == QUESTIONS
    assert JD in llm.prompts[0]

    result = controller.submit_answers(OWNER, ready_session.id, ANSWERS)

    assert len(result.evaluations) == 3
    assert all(e.status == EvaluationStatus.SCORED for e in result.evaluations)
    assert (
        result.scores.average_relevance,
        result.scores.average_correctness,
        result.scores.final_score,
    ) == (7.0, 7.0, 7.0)

    eval_prompt = llm.prompts[1]
    assert "Question 3: Tell me about a time you mentored a struggling teammate." in eval_prompt
    assert "Candidate's Answer: Cache-aside with TTLs and explicit invalidation." in eval_prompt
    assert RESUME in eval_prompt

    combined = (
        "Check EXPLAIN output and add a composite index. "
        "Cache-aside with TTLs and explicit invalidation. "
        "I paired with a junior developer daily until they shipped on their own."
    )
    assert embed_service.calls[-1] == combined

    (used,) = result.chunks_used
    assert used.index == 1
    assert used.preview == RESUME[:200] + "..."
    assert len(used.similarity.split(".")[1]) == 3

    session = controller.get_session(OWNER, ready_session.id)
    assert session.is_completed
    assert session.final_score == 7.0
    roles = [m.role for m in session.messages]
    assert roles == [Role.ASSISTANT, Role.USER] + [Role.ASSISTANT] * 3
    assert session.messages[1].content == ANSWERS
    assert session.messages[2].content.startswith("**Question 1 Feedback:**\n")
    assert (session.messages[2].relevance_score, session.messages[2].correctness_score) == (8, 6)


def test_submission_survives_evaluation_outage(controller, llm, ready_session):
    llm.responses.extend([QUESTIONS, RuntimeError("connection reset")])
    controller.generate_questions(OWNER, ready_session.id)

    result = controller.submit_answers(OWNER, ready_session.id, ANSWERS)

    assert [e.status for e in result.evaluations] == [EvaluationStatus.FALLBACK] * 3
    assert result.scores.final_score == 1.0


def test_short_document_rejected_before_embedding(controller, embed_service, blobs):
    session = controller.create_session(OWNER)
    text = "Too short to be a real resume."
    assert len(text) == 30

    with pytest.raises(EmptyContentError):
        upload(controller, session.id, "resume", text)
    assert embed_service.calls == []
    assert len(blobs) == 0
    assert controller.list_documents(OWNER, session.id) == []


def test_upload_chunks_and_embeds(controller, settings):
    doc = upload(controller, None, "resume", RESUME)

    assert doc.session_id is None
    assert doc.type == DocumentType.RESUME
    assert doc.storage_ref.startswith("memory://interview-prep/global/")
    (chunk,) = doc.chunks
    assert chunk.text == RESUME
    assert len(chunk.embedding) == settings.embedding_dimension


def test_reupload_replaces_previous_document(controller, blobs):
    session = controller.create_session(OWNER)
    first = upload(controller, session.id, "jd", JD)
    second = upload(controller, session.id, "jd", JD + " Remote friendly.")

    docs = controller.list_documents(OWNER, session.id)
    assert [d.id for d in docs] == [second.id]
    assert first.id != second.id
    assert len(blobs) == 1
    assert blobs.get(first.storage_ref) is None


def test_failed_reupload_keeps_previous_document(controller, blobs):
    session = controller.create_session(OWNER)
    first = upload(controller, session.id, "resume", RESUME)

    with pytest.raises(EmptyContentError):
        upload(controller, session.id, "resume", "Too short to be a real resume.")

    docs = controller.list_documents(OWNER, session.id)
    assert [d.id for d in docs] == [first.id]
    assert len(blobs) == 1
    assert blobs.get(first.storage_ref) == RESUME.encode()


@pytest.mark.parametrize(
    "kwargs, message",
    [
        ({"content_type": "image/png"}, "Only PDF"),
        ({"doc_type": "cover_letter"}, "resume' or 'jd"),
        ({"data": b""}, "No file"),
        ({"data": b"x" * (2 * 1024 * 1024 + 1)}, "2MB"),
    ],
)
def test_upload_validation(controller, kwargs, message):
    args = {
        "owner": OWNER,
        "doc_type": "resume",
        "file_name": "cv.pdf",
        "data": RESUME.encode(),
        "content_type": "application/pdf",
    }
    args.update(kwargs)
    with pytest.raises(ValidationError, match=message):
        controller.upload_document(**args)


def test_upload_to_foreign_session_is_not_found(controller):
    session = controller.create_session("someone-else")
    with pytest.raises(NotFoundError):
        upload(controller, session.id, "resume", RESUME)


def test_document_status(controller):
    session = controller.create_session(OWNER)
    assert not controller.document_status(OWNER, session.id).ready
    upload(controller, session.id, "resume", RESUME)
    status = controller.document_status(OWNER, session.id)
    assert (status.has_resume, status.has_jd, status.ready) == (True, False, False)
    upload(controller, session.id, "jd", JD)
    assert controller.document_status(OWNER, session.id).ready


def test_delete_document(controller, blobs):
    doc = upload(controller, None, "resume", RESUME)
    controller.delete_document(OWNER, doc.id)
    assert controller.list_documents(OWNER) == []
    assert len(blobs) == 0
    with pytest.raises(NotFoundError):
        controller.delete_document(OWNER, doc.id)


def test_delete_session_cascades(controller, blobs, ready_session):
    global_doc = upload(controller, None, "resume", RESUME)

    controller.delete_session(OWNER, ready_session.id)

    with pytest.raises(NotFoundError):
        controller.get_session(OWNER, ready_session.id)
    assert controller.list_documents(OWNER, ready_session.id) == []
    assert [d.id for d in controller.list_documents(OWNER)] == [global_doc.id]
    assert len(blobs) == 1


def test_create_session_validates_question_count(controller):
    with pytest.raises(ValidationError):
        controller.create_session(OWNER, num_questions=11)
    session = controller.create_session(OWNER, "  ", 2)
    assert session.name.startswith("Interview Session - ")
    assert session.total_questions == 2
    assert [s.id for s in controller.list_sessions(OWNER)] == [session.id]
    assert controller.list_sessions("nobody") == []


def test_generate_questions_requires_both_documents(controller, llm):
    session = controller.create_session(OWNER)
    upload(controller, session.id, "resume", RESUME)
    with pytest.raises(ValidationError, match="both resume and job description"):
        controller.generate_questions(OWNER, session.id)
    assert llm.calls == []


def test_regenerating_questions_resets_results(controller, llm, ready_session):
    llm.responses.extend([QUESTIONS, EVALUATION, "1. New Q?\n2. Other Q?\n3. Team Q?"])
    controller.generate_questions(OWNER, ready_session.id)
    controller.submit_answers(OWNER, ready_session.id, ANSWERS)

    controller.generate_questions(OWNER, ready_session.id)

    session = controller.get_session(OWNER, ready_session.id)
    assert len(session.messages) == 1
    assert not session.is_completed
    assert session.final_score is None
    assert [q.text for q in controller.questions_for(session)] == [
        "New Q?",
        "Other Q?",
        "Team Q?",
    ]


def test_submit_requires_numbered_answers_for_every_question(controller, llm, ready_session):
    llm.responses.append(QUESTIONS)
    controller.generate_questions(OWNER, ready_session.id)

    with pytest.raises(ValidationError, match="exactly 3 answers"):
        controller.submit_answers(OWNER, ready_session.id, "1. only one")
    assert len(llm.calls) == 1


def test_submit_before_questions(controller, ready_session):
    with pytest.raises(ValidationError, match="No questions"):
        controller.submit_answers(OWNER, ready_session.id, ANSWERS)


@pytest.mark.parametrize("answers", ["", "   "])
def test_submit_requires_answers(controller, ready_session, answers):
    with pytest.raises(ValidationError):
        controller.submit_answers(OWNER, ready_session.id, answers)


def test_completed_session_rejects_second_submission(controller, llm, ready_session):
    llm.responses.extend([QUESTIONS, EVALUATION])
    controller.generate_questions(OWNER, ready_session.id)
    controller.submit_answers(OWNER, ready_session.id, ANSWERS)

    with pytest.raises(ValidationError, match="already completed"):
        controller.submit_answers(OWNER, ready_session.id, ANSWERS)


def test_intro_line_before_answers_keeps_them_aligned(controller, llm, ready_session):
    llm.responses.extend([QUESTIONS, EVALUATION])
    controller.generate_questions(OWNER, ready_session.id)

    controller.submit_answers(OWNER, ready_session.id, "My answers:\n" + ANSWERS)

    eval_prompt = llm.prompts[1]
    assert "My answers:" not in eval_prompt
    assert (
        "Candidate's Answer: Check EXPLAIN output and add a composite index." in eval_prompt
    )
    assert (
        "Candidate's Answer: I paired with a junior developer daily until they "
        "shipped on their own." in eval_prompt
    )
