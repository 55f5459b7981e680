"""
Pydantic models for request/response validation.

Defines the data contracts for the API. Raw JSON never reaches the
help queue: handlers only pass it validated group ids and handles.
"""

from pydantic import BaseModel, Field
from typing import Optional
from enum import Enum


# Group numbers are small unsigned integers; voice channels are Discord
# snowflakes (unsigned 64-bit).
MAX_GROUP_ID = 65535
MAX_VOICE_CHANNEL = 2**64 - 1


class HelpEventKind(str, Enum):
    """
    Kinds of help events written to the help sheet.

    Values are the status column written for each row.
    """
    REQUESTED = "requested"
    PROVIDED = "provided"
    DISMISSED = "dismissed"
    CLEARED = "cleared"


# ============================================================
# Request Models
# ============================================================

class HelpRequestPayload(BaseModel):
    """
    Body of a help request.

    Attributes:
        group: The group asking for help
        voice_channel: The voice channel where the group is waiting
    """
    group: int = Field(
        ...,
        ge=0,
        le=MAX_GROUP_ID,
        description="Group number asking for help"
    )
    voice_channel: int = Field(
        ...,
        ge=0,
        le=MAX_VOICE_CHANNEL,
        description="Voice channel id where the group is waiting"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "group": 7,
                "voice_channel": 887022804183175188
            }
        }


# ============================================================
# Response Models
# ============================================================

class EnqueuedResponse(BaseModel):
    """Response returned when a help request is accepted."""
    group: int
    voice_channel: int
    position: int = Field(
        ...,
        description="1-based position in the queue at the time of the request"
    )


class AssignedResponse(BaseModel):
    """The group a helper should attend next."""
    group: int
    voice_channel: int

    class Config:
        json_schema_extra = {
            "example": {
                "group": 7,
                "voice_channel": 887022804183175188
            }
        }


class DismissedResponse(BaseModel):
    """
    Result of a dismissal.

    Dismissing a group that was not queued still succeeds, with
    dismissed set to false and no voice channel.
    """
    group: int
    voice_channel: Optional[int] = None
    dismissed: bool


class ClearedResponse(BaseModel):
    cleared: int = Field(..., description="Number of pending requests dropped")


class IsStudentResponse(BaseModel):
    is_student: bool


class GroupResponse(BaseModel):
    group: int


class NextClassResponse(BaseModel):
    """The next scheduled class from the course calendar."""
    summary: str
    start: str
    end: Optional[str] = None


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = "healthy"
    service: str = "help-queue-api"
    version: str
    queue_length: int
    event_log_enabled: bool
    pending_events: int
    timestamp: str


class ErrorResponse(BaseModel):
    """Generic error response."""
    error: str
    detail: Optional[str] = None
    timestamp: str
