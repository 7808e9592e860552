"""Mapping of enrichment failures onto HTTP errors."""

from __future__ import annotations

from fastapi import HTTPException

from voicebrief.errors import IntelligenceError, NoteProcessingError, RateLimited


def to_http_exception(exc: IntelligenceError) -> HTTPException:
    """Return the HTTPException for an enrichment failure.

    Upstream failures are 503 rather than 500 so clients see a proper JSON
    response they can retry from.
    """
    if isinstance(exc, NoteProcessingError):
        status = 429 if isinstance(exc.cause, RateLimited) else 502
        return HTTPException(
            status_code=status,
            detail={"stage": exc.stage, "kind": exc.cause.kind, "message": str(exc.cause)},
        )
    if isinstance(exc, RateLimited):
        return HTTPException(status_code=429, detail=f"Rate limited: {exc}")
    return HTTPException(status_code=503, detail=f"{exc.kind}: {exc}")
