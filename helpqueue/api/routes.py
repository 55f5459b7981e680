"""
API Routes - FastAPI endpoints for the help queue.

The Discord bot drives these endpoints:
- POST /enqueue_help: a group asks for help
- GET|POST /next: a helper takes the next group
- GET|POST /dismiss_help: a group withdraws its request
- PATCH /clear_help_queue: drop every pending request
- GET /help_queue: pending groups in service order

Plus roster and calendar lookups the bot uses to decide who may ask
for help and when the next class is.

Handlers validate input, call exactly one help queue operation, record
the matching event on the event log and return. Queue errors propagate
to the exception handlers registered in main.py.
"""

import logging
from fastapi import APIRouter, Body, HTTPException, Query, status

from ..core.config import settings
from ..core.utils import get_timestamp
from ..models.schemas import (
    MAX_GROUP_ID,
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
from ..queue.manager import help_queue
from ..storage.calendar import calendar_client, CalendarUnavailableError
from ..storage.sheets import roster, RosterUnavailableError
from ..workers.worker import event_log

# Configure logging
logger = logging.getLogger(__name__)

# Create the router
router = APIRouter()


# ============================================================
# Help Queue Endpoints
# ============================================================

@router.post(
    "/enqueue_help",
    response_model=EnqueuedResponse,
    summary="Request help",
    description="""
    Put a group at the end of the help queue.

    A group can only be waiting once: a second request while the first
    is still pending is rejected with 409 and the original request keeps
    its place.
    """,
    responses={
        200: {"description": "Group queued"},
        403: {"model": ErrorResponse, "description": "Group not in the roster"},
        409: {"model": ErrorResponse, "description": "Group already queued"},
        503: {"model": ErrorResponse, "description": "Roster unavailable"}
    }
)
async def enqueue_help(payload: HelpRequestPayload) -> EnqueuedResponse:
    if settings.sheets.roster_enforce:
        try:
            known = await roster.has_group(payload.group)
        except RosterUnavailableError as e:
            logger.error(f"Cannot check group {payload.group} against the roster: {e}")
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Roster unavailable. Please retry."
            )
        if not known:
            logger.warning(f"Rejected help request from unknown group {payload.group}")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Group {payload.group} is not in the roster"
            )

    request, position = help_queue.enqueue(payload.group, payload.voice_channel)
    event_log.record(HelpEventKind.REQUESTED, request.group_id)

    return EnqueuedResponse(
        group=request.group_id,
        voice_channel=request.voice_channel,
        position=position
    )


@router.api_route(
    "/next",
    methods=["GET", "POST"],
    response_model=AssignedResponse,
    summary="Take the next group",
    description="""
    Remove the group that has waited longest and hand it to the helper.

    The body is the helper's name as a JSON string. It is only logged;
    every helper gets the same next group.
    """,
    responses={
        200: {"description": "Group assigned"},
        404: {"model": ErrorResponse, "description": "No group in queue"}
    }
)
async def next_group(helper: str = Body(..., min_length=1, max_length=100)) -> AssignedResponse:
    request = help_queue.next(helper)
    event_log.record(HelpEventKind.PROVIDED, request.group_id, helper)
    return AssignedResponse(group=request.group_id, voice_channel=request.voice_channel)


@router.api_route(
    "/dismiss_help",
    methods=["GET", "POST"],
    response_model=DismissedResponse,
    summary="Withdraw a help request",
    description="""
    Remove a group from the queue wherever it is.

    The body is the group number as a JSON integer. Dismissing a group
    that is not waiting succeeds with dismissed set to false.
    """
)
async def dismiss_help(group: int = Body(..., ge=0, le=MAX_GROUP_ID)) -> DismissedResponse:
    request = help_queue.dismiss(group)
    if request is None:
        return DismissedResponse(group=group, dismissed=False)

    event_log.record(HelpEventKind.DISMISSED, group)
    return DismissedResponse(group=group, voice_channel=request.voice_channel, dismissed=True)


@router.patch(
    "/clear_help_queue",
    response_model=ClearedResponse,
    summary="Clear the help queue"
)
async def clear_help_queue() -> ClearedResponse:
    removed = help_queue.clear()
    event_log.record(HelpEventKind.CLEARED)
    return ClearedResponse(cleared=removed)


@router.get(
    "/help_queue",
    response_model=list[int],
    summary="List the help queue",
    description="Pending group numbers, the next one to be served first."
)
async def get_help_queue() -> list[int]:
    return help_queue.group_ids()


# ============================================================
# Roster & Calendar Endpoints
# ============================================================

@router.get(
    "/is_student",
    response_model=IsStudentResponse,
    summary="Check a student registration",
    responses={503: {"model": ErrorResponse, "description": "Roster unavailable"}}
)
async def is_student(
    student_id: int = Query(..., alias="id", ge=0, description="Student id"),
    email: str = Query(..., min_length=3, max_length=254)
) -> IsStudentResponse:
    try:
        registered = await roster.is_student(student_id, email)
    except RosterUnavailableError as e:
        logger.error(f"Roster lookup for student {student_id} failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Roster unavailable. Please retry."
        )
    return IsStudentResponse(is_student=registered)


@router.get(
    "/group",
    response_model=GroupResponse,
    summary="Get a student's group",
    responses={
        404: {"model": ErrorResponse, "description": "Unknown student or no group"},
        503: {"model": ErrorResponse, "description": "Roster unavailable"}
    }
)
async def get_group(
    student_id: int = Query(..., alias="id", ge=0, description="Student id"),
    email: str = Query(..., min_length=3, max_length=254)
) -> GroupResponse:
    try:
        group = await roster.group_of(student_id, email)
    except RosterUnavailableError as e:
        logger.error(f"Roster lookup for student {student_id} failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Roster unavailable. Please retry."
        )

    if group is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Student {student_id} has no group"
        )
    return GroupResponse(group=group)


@router.get(
    "/next_class",
    response_model=NextClassResponse,
    summary="Get the next class",
    responses={
        404: {"model": ErrorResponse, "description": "No upcoming class"},
        503: {"model": ErrorResponse, "description": "Calendar unavailable"}
    }
)
async def next_class() -> NextClassResponse:
    try:
        event = await calendar_client.next_class()
    except CalendarUnavailableError as e:
        logger.error(f"Next class lookup failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Calendar unavailable. Please retry."
        )

    if event is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No upcoming class"
        )
    return NextClassResponse(**event)


# ============================================================
# Utility Endpoints
# ============================================================

@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Queue length and event log backlog."
)
async def health_check() -> HealthResponse:
    return HealthResponse(
        status="healthy",
        version=settings.api_version,
        queue_length=len(help_queue),
        event_log_enabled=event_log.enabled,
        pending_events=event_log.pending,
        timestamp=get_timestamp()
    )
