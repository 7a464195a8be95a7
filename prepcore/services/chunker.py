"""
Purpose: Turn an uploaded PDF into bounded word windows ready for embedding.

Windows are consecutive, non-overlapping and in document order. A window
whose trimmed text is 50 characters or shorter is dropped (trailing sliver).
"""

from __future__ import annotations
import io
import logging
import re

from pypdf import PdfReader

from ..errors import EmptyContentError, ValidationError

log = logging.getLogger(__name__)

MIN_CHUNK_CHARS = 50
DEFAULT_WORDS_PER_CHUNK = 500

_WS = re.compile(r"\s+")


def extract_pdf_text(data: bytes) -> str:
    """Concatenate the selectable text of every page."""
    try:
        reader = PdfReader(io.BytesIO(data))
        parts = []
        for page in reader.pages:
            txt = page.extract_text() or ""
            if txt.strip():
                parts.append(txt)
    except Exception as e:
        log.error("Error parsing PDF: %s", e)
        raise ValidationError("Failed to extract text from PDF") from e
    return "\n\n".join(parts).strip()


def normalize_whitespace(text: str) -> str:
    return _WS.sub(" ", text or "").strip()


def chunk_text(text: str, words_per_chunk: int = DEFAULT_WORDS_PER_CHUNK) -> list[str]:
    if not isinstance(words_per_chunk, int) or words_per_chunk < 1:
        raise ValidationError("words_per_chunk must be a positive integer")

    words = normalize_whitespace(text).split(" ")
    chunks = []
    for i in range(0, len(words), words_per_chunk):
        chunk = " ".join(words[i : i + words_per_chunk]).strip()
        if len(chunk) > MIN_CHUNK_CHARS:
            chunks.append(chunk)

    if not chunks:
        raise EmptyContentError(
            "Text extracted, but failed to divide into valid chunks."
        )
    return chunks
