"""
Purpose: Cosine-similarity ranking of stored chunks against a query vector.

Chunks with a structurally broken embedding are skipped (and logged) instead
of failing the whole lookup. Ties keep input order.
"""

from __future__ import annotations
import logging
import math
from numbers import Real
from typing import Any, Sequence

import numpy as np

from ..errors import DimensionMismatchError, InvalidVectorError, ValidationError
from ..models import Chunk, RankedChunk

log = logging.getLogger(__name__)

DEFAULT_TOP_K = 3


def _is_number(x: Any) -> bool:
    return isinstance(x, Real) and not isinstance(x, bool) and math.isfinite(x)


def _is_vector(v: Any) -> bool:
    return isinstance(v, (list, tuple)) and len(v) > 0


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    if not isinstance(a, (list, tuple)) or not isinstance(b, (list, tuple)):
        raise InvalidVectorError("Invalid vectors: arguments must be sequences.")
    if len(a) == 0 or len(a) != len(b):
        raise DimensionMismatchError(
            "Invalid vectors for similarity calculation: lengths differ or "
            f"vector is empty (A: {len(a)}, B: {len(b)})"
        )
    if not all(_is_number(x) for x in a) or not all(_is_number(x) for x in b):
        raise InvalidVectorError("Invalid vectors: elements must be numbers.")

    va = np.asarray(a, dtype=float)
    vb = np.asarray(b, dtype=float)
    with np.errstate(over="ignore", invalid="ignore"):
        mag_a = np.linalg.norm(va)
        mag_b = np.linalg.norm(vb)
        if mag_a == 0 or mag_b == 0:
            return 0.0
        sim = float(np.dot(va, vb) / (mag_a * mag_b))
    # nan when a magnitude overflows
    if not math.isfinite(sim):
        return 0.0
    return max(-1.0, min(1.0, sim))


def _as_chunk(item: Any) -> Chunk | None:
    if isinstance(item, Chunk):
        return item
    if isinstance(item, dict) and "embedding" in item:
        emb = item.get("embedding")
        if not isinstance(emb, (list, tuple)):
            return None
        return Chunk(text=str(item.get("text") or ""), embedding=tuple(emb))
    return None


def find_similar_chunks(
    query: Sequence[float], chunks: Sequence[Any], top_k: int = DEFAULT_TOP_K
) -> list[RankedChunk]:
    """Top ``top_k`` chunks by cosine similarity, each tagged with its input index."""
    if not _is_vector(query):
        log.warning("Invalid query embedding provided for find_similar_chunks.")
        return []
    if not chunks or isinstance(chunks, (str, bytes)):
        log.warning("No chunks provided or invalid format for find_similar_chunks.")
        return []
    if not isinstance(top_k, int) or isinstance(top_k, bool) or top_k < 1:
        log.warning("Invalid top_k value (%r), defaulting to %d.", top_k, DEFAULT_TOP_K)
        top_k = DEFAULT_TOP_K

    ranked: list[RankedChunk] = []
    for index, item in enumerate(chunks):
        chunk = _as_chunk(item)
        if chunk is None or not _is_vector(list(chunk.embedding)):
            log.warning("Skipping chunk at index %d: missing or invalid embedding.", index)
            continue
        try:
            sim = cosine_similarity(list(query), list(chunk.embedding))
        except ValidationError as e:
            log.warning("Skipping chunk at index %d: %s", index, e)
            continue
        ranked.append(RankedChunk(index=index, chunk=chunk, similarity=sim))

    ranked.sort(key=lambda r: r.similarity, reverse=True)
    return ranked[:top_k]
