import zlib

import pytest

from prepcore.config import Settings
from prepcore.controller import InterviewPrepController
from prepcore.models import Generation
from prepcore.persistence.blob_store import InMemoryBlobStore
from prepcore.persistence.document_store import InMemoryDocumentStore
from prepcore.persistence.session_store import InMemorySessionStore

DIM = 16


class ProviderError(Exception):
    """Stand-in for an SDK exception carrying an HTTP status."""

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code


class FakeLLM:
    """Replays scripted responses: a str, a Generation, or an exception to raise."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def generate(self, prompt, settings):
        self.calls.append((prompt, settings))
        if not self.responses:
            raise AssertionError("FakeLLM ran out of scripted responses")
        item = self.responses.pop(0)
        if isinstance(item, BaseException):
            raise item
        if isinstance(item, str):
            return Generation(text=item, finish_reason="stop")
        return item

    @property
    def prompts(self):
        return [p for p, _ in self.calls]


class FakeEmbeddingService:
    """Bag-of-words hashing; texts listed in ``fail`` raise instead."""

    def __init__(self, dimension=DIM, fail=(), error=None):
        self.dimension = dimension
        self.fail = set(fail)
        self.error = error
        self.calls = []

    def embed(self, text):
        self.calls.append(text)
        if text in self.fail:
            raise self.error or ProviderError("embedding backend exploded")
        vec = [0.0] * self.dimension
        for word in text.lower().split():
            vec[zlib.crc32(word.encode()) % self.dimension] += 1.0
        return vec


def no_sleep(_seconds):
    pass


@pytest.fixture
def settings():
    return Settings(openai_api_key="test-key", embedding_dimension=DIM)


@pytest.fixture
def embed_service():
    return FakeEmbeddingService()


@pytest.fixture
def llm():
    return FakeLLM()


@pytest.fixture
def blobs():
    return InMemoryBlobStore()


@pytest.fixture
def controller(settings, llm, embed_service, blobs):
    return InterviewPrepController(
        settings=settings,
        llm=llm,
        embeddings=embed_service,
        documents=InMemoryDocumentStore(),
        sessions=InMemorySessionStore(),
        blobs=blobs,
        extract_text=lambda data: data.decode("utf-8"),
        sleep=no_sleep,
    )
