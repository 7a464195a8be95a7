"""
Error taxonomy for the interview-prep core.

Every error carries a human-readable message that is safe to show to the
candidate. Provider exceptions are chained as ``__cause__``.

- ValidationError: bad caller input, never retried.
- ServiceError and subclasses: external embedding/generation failures.
- EvaluationParseError: model output with no recoverable structure.
"""

from __future__ import annotations
from typing import Optional


class PrepError(Exception):
    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class ValidationError(PrepError, ValueError):
    pass


class InvalidInputError(ValidationError):
    pass


class EmptyContentError(ValidationError):
    pass


class DimensionMismatchError(ValidationError):
    pass


class InvalidVectorError(ValidationError):
    pass


class NotFoundError(PrepError, LookupError):
    pass


class StorageError(PrepError):
    pass


class EvaluationParseError(PrepError):
    pass


class ServiceError(PrepError, RuntimeError):
    pass


class TransientServiceError(ServiceError):
    pass


class EmbeddingServiceError(ServiceError):
    pass


class GenerationServiceError(ServiceError):
    pass


class EmptyResponseError(GenerationServiceError):
    pass


class ContentBlockedError(GenerationServiceError):
    pass


class ResponseTruncatedError(GenerationServiceError):
    pass


def status_of(exc: BaseException) -> Optional[int]:
    """HTTP-equivalent status of a provider exception, if it exposes one."""
    for attr in ("status_code", "status"):
        value = getattr(exc, attr, None)
        if isinstance(value, int):
            return value
    response = getattr(exc, "response", None)
    value = getattr(response, "status_code", None) or getattr(response, "status", None)
    return value if isinstance(value, int) else None


_BLOCK_CODES = ("content_filter", "content_policy_violation")
_BLOCK_CUES = (
    "safety",
    "blocked",
    "content_filter",
    "content policy",
    "content management policy",
)


def is_content_blocked(exc: BaseException) -> bool:
    """A provider rejection of the prompt itself on safety or policy grounds."""
    if getattr(exc, "code", None) in _BLOCK_CODES:
        return True
    lowered = str(exc).lower()
    return status_of(exc) == 400 and any(cue in lowered for cue in _BLOCK_CUES)


def describe_service_error(exc: BaseException, *, context: str = "") -> str:
    """
    Map a raw provider failure to an actionable message. Failures with no
    known cue keep their own text, prefixed with ``context`` when given.
    """
    if isinstance(exc, PrepError) and not isinstance(exc, TransientServiceError):
        return exc.message or str(exc)

    status = status_of(exc)
    text = str(exc)
    lowered = text.lower()
    if status == 503 or "overloaded" in lowered:
        return "AI service is temporarily overloaded. Please try again in a moment."
    if status == 429 or "rate limit" in lowered:
        return "Rate limit reached. Please wait a minute and try again."
    if status == 404:
        return "AI model not found. Please check API configuration."
    if is_content_blocked(exc):
        return "Content blocked by safety filters. Please review the job description text."
    if status == 400 or "invalid request" in lowered:
        return "Invalid request sent to AI service. Please check the job description content."
    if "quota" in lowered:
        return "API quota exceeded. Please check your API usage limits."
    text = text or exc.__class__.__name__
    return f"{context}: {text}" if context else text
