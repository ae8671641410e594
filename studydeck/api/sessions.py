"""
Study session endpoints.

Start, complete and cancel the caller's timed session. Completion returns
the stored session together with the user's level snapshot.
"""

from fastapi import APIRouter

from .deps import StudyAppDep
from .schemas import (
    CancelSessionResponse,
    CompleteSessionResponse,
    ErrorResponse,
    SessionResponse,
    StartSessionRequest,
    UserLevelInfoResponse,
)

router = APIRouter(prefix="/session", tags=["sessions"])


@router.post(
    "/start",
    response_model=SessionResponse,
    responses={404: {"model": ErrorResponse}},
)
async def start_session(request: StartSessionRequest, study: StudyAppDep) -> SessionResponse:
    session = await study.session_service.start_session(request.user_id, request.duration)
    return SessionResponse.from_record(session)


@router.post(
    "/complete/{session_id}",
    response_model=CompleteSessionResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def complete_session(session_id: str, study: StudyAppDep) -> CompleteSessionResponse:
    outcome = await study.session_service.complete_session(session_id)
    return CompleteSessionResponse(
        session=SessionResponse.from_record(outcome.session),
        user_level_info=UserLevelInfoResponse.from_info(outcome.level_info),
    )


@router.post(
    "/cancel/{session_id}",
    response_model=CancelSessionResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def cancel_session(session_id: str, study: StudyAppDep) -> CancelSessionResponse:
    await study.session_service.fail_session(session_id)
    return CancelSessionResponse(message="Session canceled successfully", session_id=session_id)
