"""FastAPI dependency injection for shared request context."""

from __future__ import annotations

from fastapi import Header, HTTPException

from cadence_guard.domain.enums import RejectReason
from cadence_guard.domain.record import SubmissionResult


def caller_identity(x_caller_id: str = Header(..., min_length=1)) -> str:
    """Identity of the caller, taken from the X-Caller-Id header."""
    return x_caller_id


def raise_for_rejection(result: SubmissionResult) -> None:
    """Translate a typed rejection into the matching HTTP error."""
    if result.ok:
        return
    if result.reason == RejectReason.UNAUTHORIZED:
        raise HTTPException(status_code=403, detail=result.detail or "unauthorized")
    raise HTTPException(status_code=422, detail=result.detail or "invalid payload")
