"""Error kinds shared by the transcription, extraction, and digest calls.

Every remote call fails with one of the ``IntelligenceError`` subclasses so
callers can treat the three APIs uniformly.
"""

from __future__ import annotations

import json

import anthropic
import httpx
import openai


class IntelligenceError(Exception):
    """Base class for failures of a single enrichment call."""

    kind = "intelligence_error"


class NetworkUnavailable(IntelligenceError):
    kind = "network_unavailable"


class UpstreamError(IntelligenceError):
    kind = "upstream_error"

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class MalformedResponse(IntelligenceError):
    kind = "malformed_response"


class RateLimited(IntelligenceError):
    kind = "rate_limited"


class InvalidAudio(IntelligenceError):
    """The note's audio could not be read or decoded."""

    kind = "invalid_audio"


class NoteProcessingError(IntelligenceError):
    """Per-note enrichment failed at ``stage`` ("transcription" or "extraction")."""

    kind = "note_processing_failed"

    def __init__(self, note_id: str, stage: str, cause: IntelligenceError) -> None:
        super().__init__(f"{stage} failed for note {note_id}: {cause}")
        self.note_id = note_id
        self.stage = stage
        self.cause = cause


def translate_error(exc: BaseException) -> IntelligenceError:
    """Map an SDK, transport, or parsing exception onto an IntelligenceError.

    Rate-limit checks come first: both SDKs model 429 as a subclass of their
    status error.
    """
    if isinstance(exc, IntelligenceError):
        return exc

    if isinstance(exc, (anthropic.RateLimitError, openai.RateLimitError)):
        return RateLimited(str(exc))
    if isinstance(exc, (anthropic.APIConnectionError, openai.APIConnectionError)):
        return NetworkUnavailable(str(exc))
    if isinstance(exc, (anthropic.APIStatusError, openai.APIStatusError)):
        if exc.status_code == 429:
            return RateLimited(str(exc))
        return UpstreamError(str(exc), status_code=exc.status_code)

    if isinstance(exc, httpx.HTTPStatusError):
        if exc.response.status_code == 429:
            return RateLimited(str(exc))
        return UpstreamError(str(exc), status_code=exc.response.status_code)
    if isinstance(exc, (httpx.TransportError, ConnectionError, TimeoutError)):
        return NetworkUnavailable(str(exc))

    if isinstance(
        exc, (json.JSONDecodeError, KeyError, TypeError, ValueError, AttributeError)
    ):
        return MalformedResponse(f"{type(exc).__name__}: {exc}")

    return UpstreamError(f"{type(exc).__name__}: {exc}")
