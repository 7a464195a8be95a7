"""
Purpose: Vectorize document chunks and answer blocks for retrieval.

embed(text) -> vector
    Single call under the retry policy; any failure surfaces as
    EmbeddingServiceError with the root cause chained.

embed_batch(texts) -> list[vector]
    Sequential, order-preserving, same length as the input (so an empty list
    gives an empty list). Empty items and items that still fail after retries
    get a zero vector of the configured dimension; one bad chunk never sinks
    the batch. Sequential on purpose: the upstream service is rate limited.

Testing: Deterministic embeddings via fakes; count/dimension invariants.
"""

from __future__ import annotations
import logging
import time
from typing import Callable, Sequence

import numpy as np

from ..errors import EmbeddingServiceError, InvalidInputError
from ..interfaces import EmbeddingService
from .retry import RetryPolicy, with_retries

log = logging.getLogger(__name__)


def _is_text(text) -> bool:
    return isinstance(text, str) and bool(text.strip())


def _preview(text, n: int = 50) -> str:
    return text[:n] if isinstance(text, str) else repr(text)[:n]


class EmbeddingClient:
    def __init__(
        self,
        service: EmbeddingService,
        *,
        dimension: int = 768,
        retry: RetryPolicy = RetryPolicy(),
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.service = service
        self.dimension = dimension
        self.retry = retry
        self._sleep = sleep

    def zero_vector(self) -> list[float]:
        return np.zeros(self.dimension).tolist()

    def _call(self, text: str, *, exact_dim: bool) -> list[float]:
        def attempt() -> list[float]:
            vector = self.service.embed(text)
            if not isinstance(vector, (list, tuple)) or len(vector) == 0:
                raise EmbeddingServiceError(
                    "Invalid or empty embedding vector received from API"
                )
            if exact_dim and len(vector) != self.dimension:
                raise EmbeddingServiceError(
                    f"Invalid embedding response (expected dim {self.dimension}, "
                    f"got {len(vector)})"
                )
            return [float(v) for v in vector]

        return with_retries(attempt, self.retry, sleep=self._sleep)

    def embed(self, text: str) -> list[float]:
        if not _is_text(text):
            raise InvalidInputError("Text for embedding must be a non-empty string")
        try:
            return self._call(text, exact_dim=False)
        except Exception as e:
            log.error("Error generating embedding for %r...: %s", _preview(text), e)
            raise EmbeddingServiceError(f"Failed to generate embedding: {e}") from e

    def embed_batch(self, texts: Sequence[str]) -> list[list[float]]:
        if isinstance(texts, (str, bytes)) or not isinstance(texts, Sequence):
            raise InvalidInputError("Input must be a list of texts for embeddings")

        vectors: list[list[float]] = []
        for text in texts:
            if not _is_text(text):
                log.warning("Skipping empty or invalid text chunk for embedding.")
                vectors.append(self.zero_vector())
                continue
            try:
                vectors.append(self._call(text, exact_dim=True))
            except Exception as e:
                log.error(
                    "Failed to embed chunk %r... after retries, using placeholder: %s",
                    _preview(text),
                    e,
                )
                vectors.append(self.zero_vector())
        return vectors
