"""Pydantic schemas for workout completion records."""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from hyrox_coach.models.completed_workout import CompletionStatus


class CompleteWorkoutRequest(BaseModel):
    """
    Schema for marking a scheduled workout complete.

    Fields are deliberately loose; the completion ledger validates them all
    at once and reports every problem in a single error.
    """

    week: Any = Field(..., description="Program week (1-based)")
    day_of_week: Any = Field(..., description="0=Sunday, 6=Saturday")
    session_id: Optional[str] = Field(None, description="Linked workout session ID")
    actual_duration: Any = Field(None, description="Actual duration in minutes")
    rpe: Any = Field(None, description="Rate of perceived exertion, 1-10")
    completion_status: Any = Field(None, description="full, partial or skipped")
    percent_complete: Any = Field(None, description="0-100")
    performance_data: Optional[Dict[str, Any]] = Field(
        None, description="Free-form performance payload, e.g. {'feeling': 'hard'}"
    )

    def completion_fields(self) -> Dict[str, Any]:
        """Optional completion fields that were actually supplied."""
        return self.model_dump(exclude={"week", "day_of_week"}, exclude_unset=True)


class CompletionRecord(BaseModel):
    """Schema for completion records returned to callers and fed to the analyzer."""

    week: int = Field(..., description="Program week")
    day_of_week: int = Field(..., description="0=Sunday, 6=Saturday")
    session_id: Optional[str] = Field(None, description="Linked workout session ID")
    completed_at: datetime = Field(..., description="Completion timestamp")
    actual_duration: Optional[int] = Field(None, description="Actual duration in minutes")
    rpe: Optional[int] = Field(None, ge=1, le=10, description="Rate of perceived exertion")
    completion_status: CompletionStatus = Field(CompletionStatus.FULL)
    percent_complete: int = Field(100, ge=0, le=100)
    performance_data: Optional[Dict[str, Any]] = None

    class Config:
        from_attributes = True
        json_schema_extra = {
            "example": {
                "week": 3,
                "day_of_week": 6,
                "session_id": None,
                "completed_at": "2026-03-14T10:30:00",
                "actual_duration": 58,
                "rpe": 8,
                "completion_status": "full",
                "percent_complete": 100,
                "performance_data": {"feeling": "hard"}
            }
        }
