"""
Session API routes.

Endpoints for session management, message processing and backtracking.
"""

from fastapi import APIRouter, status
import structlog

from okr_coach.api.dependencies import CoachingServiceDep
from okr_coach.api.schemas import (
    BacktrackRequest,
    CheckpointListResponse,
    MessageListResponse,
    MessageRequest,
    MessageResponse,
    OKRSetListResponse,
    SessionCreate,
    SessionListResponse,
    SessionResponse,
    SessionStateResponse,
)
from okr_coach.domain.models.phase import PhaseDecision
from okr_coach.domain.models.session import Session, SessionSummary

log = structlog.get_logger(__name__)

router = APIRouter(prefix="/sessions", tags=["sessions"])


def _session_response(session: Session) -> SessionStateResponse:
    return SessionStateResponse(
        id=session.id,
        user_id=session.user_id,
        status=session.status,
        phase=session.state.phase,
        progress=session.state.progress,
        suggestions=session.state.suggestions,
        created_at=session.created_at,
        updated_at=session.updated_at,
        state=session.state,
    )


# ============ SESSION CRUD ============


@router.post(
    "",
    response_model=SessionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_session(request: SessionCreate, service: CoachingServiceDep):
    """Start a coaching session in the discovery phase.

    The optional context (industry, function, timeframe, team size) is kept
    on the session and used for every later scoring call.
    """
    session = await service.create_session(request.user_id, request.context)
    return _session_response(session)


@router.get("", response_model=SessionListResponse)
async def list_sessions(service: CoachingServiceDep):
    """List active coaching sessions, newest first."""
    sessions = await service.list_sessions()
    return SessionListResponse(
        sessions=[_session_response(s) for s in sessions],
        total=len(sessions),
    )


@router.get("/{session_id}", response_model=SessionStateResponse)
async def get_session(session_id: str, service: CoachingServiceDep):
    """Get session details including the full coaching state."""
    session = await service.get_session(session_id)
    return _session_response(session)


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session(session_id: str, service: CoachingServiceDep):
    """Permanently remove a session and everything stored for it."""
    await service.delete_session(session_id)


@router.get("/{session_id}/summary", response_model=SessionSummary)
async def get_summary(session_id: str, service: CoachingServiceDep):
    """Read-only summary; also available once the session has completed."""
    return await service.get_summary(session_id)


@router.get("/{session_id}/okr-sets", response_model=OKRSetListResponse)
async def get_okr_sets(session_id: str, service: CoachingServiceDep):
    """OKR sets saved when the session completed."""
    okr_sets = await service.get_okr_sets(session_id)
    return OKRSetListResponse(session_id=session_id, okr_sets=okr_sets)


# ============ TURN PROCESSING ============


@router.post("/{session_id}/messages", response_model=MessageResponse)
async def process_message(
    session_id: str,
    request: MessageRequest,
    service: CoachingServiceDep,
):
    """Process one user message and return the coaching reply.

    Runs pattern detection, scoring, checkpoint evaluation and the phase
    state machine, then persists the new state.
    """
    result = await service.process_message(session_id, request.text)

    return MessageResponse(
        session_id=result.session_id,
        response=result.response,
        phase=result.state.phase,
        progress=result.state.progress,
        decision=result.decision,
        detection=result.detection,
        objective_score=result.objective_score,
        key_result_scores=result.key_result_scores,
        reframing=result.reframing,
        completed_checkpoint=result.completed_checkpoint,
        celebration=result.celebration,
    )


@router.get("/{session_id}/messages", response_model=MessageListResponse)
async def get_messages(session_id: str, service: CoachingServiceDep):
    """Stored conversation, oldest first."""
    messages = await service.get_messages(session_id)
    return MessageListResponse(session_id=session_id, messages=messages)


# ============ CHECKPOINTS ============


@router.get("/{session_id}/checkpoints", response_model=CheckpointListResponse)
async def get_checkpoints(session_id: str, service: CoachingServiceDep):
    """Checkpoints of the session's current phase in sequence order."""
    session = await service.get_session(session_id)
    checkpoints = await service.get_checkpoints(session_id)
    return CheckpointListResponse(
        session_id=session_id,
        phase=session.state.phase,
        checkpoints=checkpoints,
    )


@router.post("/{session_id}/backtrack", response_model=PhaseDecision)
async def backtrack(
    session_id: str,
    request: BacktrackRequest,
    service: CoachingServiceDep,
):
    """Revisit an earlier phase. Progress in the target phase starts over."""
    decision = await service.backtrack(session_id, request.phase, request.reason)
    log.info(
        "session_backtracked",
        session_id=session_id,
        to_phase=decision.next_phase.value,
        reason=request.reason.value,
    )
    return decision
