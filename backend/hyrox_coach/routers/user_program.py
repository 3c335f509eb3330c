"""User program API router: enrollment, completions and derived views."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from hyrox_coach.database import get_db
from hyrox_coach.exceptions import (
    ConflictError,
    NotFoundError,
    PersistenceError,
    ProgramError,
    ValidationError,
)
from hyrox_coach.models.user_program import UserProgram
from hyrox_coach.schemas.analysis import InsightsResponse, MissedWorkoutSummary
from hyrox_coach.schemas.completion import CompleteWorkoutRequest, CompletionRecord
from hyrox_coach.schemas.program import ScheduledWorkout
from hyrox_coach.schemas.user_program import (
    MakeupRequest,
    QuitResponse,
    StartProgramRequest,
    TodayWorkoutResponse,
    UserProgramResponse,
)
from hyrox_coach.services.program_repository import SqlAlchemyProgramRepository
from hyrox_coach.services.program_service import ProgramOrchestrator

logger = logging.getLogger(__name__)

router = APIRouter()


# ============== Dependencies ==============

async def get_current_user_id(
    x_user_id: Optional[str] = Header(None, description="Opaque caller identity")
) -> str:
    """Caller identity from the X-User-Id header"""
    if not x_user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-User-Id header",
        )
    return x_user_id


def get_orchestrator(db: Session = Depends(get_db)) -> ProgramOrchestrator:
    return ProgramOrchestrator(SqlAlchemyProgramRepository(db))


def to_http_error(error: ProgramError) -> HTTPException:
    """Map engine errors onto HTTP status codes"""
    if isinstance(error, ValidationError):
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": str(error), "errors": error.errors},
        )
    if isinstance(error, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))
    if isinstance(error, ConflictError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(error))
    if isinstance(error, PersistenceError):
        logger.error(f"Persistence failure: {error}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Internal server error",
    )


def _program_response(orchestrator: ProgramOrchestrator, user_program: UserProgram) -> UserProgramResponse:
    completions = orchestrator.ledger.list_completions(user_program.id)
    return UserProgramResponse(
        id=user_program.id,
        program_id=user_program.program_id,
        start_date=user_program.start_date,
        race_date=user_program.race_date,
        fitness_level=user_program.fitness_level,
        days_per_week=user_program.days_per_week,
        weak_stations=user_program.weak_stations or [],
        intensity_modifier=user_program.intensity_modifier,
        program_data=orchestrator.parse_program_data(user_program),
        completed_workouts=[CompletionRecord.model_validate(c) for c in completions],
    )


# ============== Program Lifecycle Endpoints ==============

@router.get("", response_model=Optional[UserProgramResponse])
async def get_current_program(
    user_id: str = Depends(get_current_user_id),
    orchestrator: ProgramOrchestrator = Depends(get_orchestrator),
) -> Optional[UserProgramResponse]:
    """
    Get the user's current program with its completion history.

    Returns null when the user has no program.
    """
    try:
        user_program = orchestrator.get_current_program(user_id)
        if user_program is None:
            return None
        return _program_response(orchestrator, user_program)
    except ProgramError as e:
        raise to_http_error(e)


@router.post("", response_model=UserProgramResponse, status_code=status.HTTP_201_CREATED)
async def start_program(
    request: StartProgramRequest,
    user_id: str = Depends(get_current_user_id),
    orchestrator: ProgramOrchestrator = Depends(get_orchestrator),
) -> UserProgramResponse:
    """
    Start a program from a template ID or a personalization payload.

    Any existing program, and its completion history, is replaced.
    """
    try:
        user_program = orchestrator.start_program(
            user_id,
            program_id=request.program_id,
            personalization=request.personalization,
            start_date=request.start_date,
        )
        return _program_response(orchestrator, user_program)
    except ProgramError as e:
        raise to_http_error(e)


@router.delete("", response_model=QuitResponse)
async def quit_program(
    user_id: str = Depends(get_current_user_id),
    orchestrator: ProgramOrchestrator = Depends(get_orchestrator),
) -> QuitResponse:
    """Quit the current program. Completion history is deleted with it."""
    try:
        orchestrator.quit_program(user_id)
    except ProgramError as e:
        raise to_http_error(e)
    return QuitResponse(success=True)


@router.post("/complete-workout", response_model=CompletionRecord)
async def complete_workout(
    request: CompleteWorkoutRequest,
    user_id: str = Depends(get_current_user_id),
    orchestrator: ProgramOrchestrator = Depends(get_orchestrator),
) -> CompletionRecord:
    """
    Mark a scheduled workout complete.

    Completing the same week and day again overwrites the earlier record.
    Record a `skipped` status to dismiss a missed workout.
    """
    try:
        record = orchestrator.complete_workout(
            user_id,
            request.week,
            request.day_of_week,
            request.completion_fields(),
        )
        return CompletionRecord.model_validate(record)
    except ProgramError as e:
        raise to_http_error(e)


# ============== Derived Views ==============

@router.get("/missed-workouts", response_model=MissedWorkoutSummary)
async def get_missed_workouts(
    user_id: str = Depends(get_current_user_id),
    orchestrator: ProgramOrchestrator = Depends(get_orchestrator),
) -> MissedWorkoutSummary:
    """Past scheduled workouts with no completion, ranked by importance."""
    try:
        return orchestrator.get_missed_workouts(user_id)
    except ProgramError as e:
        raise to_http_error(e)


@router.get("/analysis", response_model=InsightsResponse)
async def get_analysis(
    user_id: str = Depends(get_current_user_id),
    orchestrator: ProgramOrchestrator = Depends(get_orchestrator),
) -> InsightsResponse:
    """Performance analysis, race readiness and program progress."""
    try:
        return orchestrator.get_insights(user_id)
    except ProgramError as e:
        raise to_http_error(e)


@router.get("/today", response_model=TodayWorkoutResponse)
async def get_todays_workout(
    user_id: str = Depends(get_current_user_id),
    orchestrator: ProgramOrchestrator = Depends(get_orchestrator),
) -> TodayWorkoutResponse:
    """Today's workout with the current intensity modifier applied."""
    try:
        return orchestrator.get_todays_workout(user_id)
    except ProgramError as e:
        raise to_http_error(e)


@router.post("/makeup", response_model=ScheduledWorkout)
async def get_makeup_workout(
    request: MakeupRequest,
    user_id: str = Depends(get_current_user_id),
    orchestrator: ProgramOrchestrator = Depends(get_orchestrator),
) -> ScheduledWorkout:
    """Condensed makeup version of a missed workout."""
    try:
        return orchestrator.get_makeup_workout(user_id, request.week, request.day_of_week)
    except ProgramError as e:
        raise to_http_error(e)
