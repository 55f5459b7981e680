"""
Models module containing Pydantic schemas.
"""

from .schemas import (
    HelpEventKind,
    HelpRequestPayload,
    EnqueuedResponse,
    AssignedResponse,
    DismissedResponse,
    ClearedResponse,
    IsStudentResponse,
    GroupResponse,
    NextClassResponse,
    HealthResponse,
    ErrorResponse
)

__all__ = [
    "HelpEventKind",
    "HelpRequestPayload",
    "EnqueuedResponse",
    "AssignedResponse",
    "DismissedResponse",
    "ClearedResponse",
    "IsStudentResponse",
    "GroupResponse",
    "NextClassResponse",
    "HealthResponse",
    "ErrorResponse"
]
