"""Services package for business logic."""

from hyrox_coach.services.completion_ledger import CompletionLedger
from hyrox_coach.services.missed_workout_detector import MissedWorkoutDetector
from hyrox_coach.services.performance_analyzer import PerformanceAnalyzer
from hyrox_coach.services.plan_generator import PlanGenerator
from hyrox_coach.services.program_repository import ProgramRepository, SqlAlchemyProgramRepository
from hyrox_coach.services.program_service import ProgramOrchestrator

__all__ = [
    "CompletionLedger",
    "MissedWorkoutDetector",
    "PerformanceAnalyzer",
    "PlanGenerator",
    "ProgramRepository",
    "SqlAlchemyProgramRepository",
    "ProgramOrchestrator",
]
