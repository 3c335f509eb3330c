"""Program catalog API router: templates, validation and previews."""

import logging
from datetime import datetime
from typing import Any, Dict, List

from fastapi import APIRouter, Body, HTTPException, Query, status

from hyrox_coach.exceptions import ValidationError
from hyrox_coach.schemas.program import (
    PersonalizationValidation,
    ProgramSummary,
    ProgramTemplate,
    ProgramTemplateSummary,
)
from hyrox_coach.services.plan_generator import PlanGenerator
from hyrox_coach.services.program_templates import (
    get_template_by_id,
    list_templates,
    select_template_for_weeks_until_race,
)

logger = logging.getLogger(__name__)

# Initialize services
plan_generator = PlanGenerator()

router = APIRouter()


def _summary(template: ProgramTemplate) -> ProgramTemplateSummary:
    return ProgramTemplateSummary(
        id=template.id,
        name=template.name,
        description=template.description,
        weeks=template.weeks,
        target_level=template.target_level,
        default_days_per_week=template.default_days_per_week,
    )


@router.get("/templates", response_model=List[ProgramTemplateSummary])
async def get_templates() -> List[ProgramTemplateSummary]:
    """List the program templates without their schedules."""
    return [_summary(t) for t in list_templates()]


@router.get("/templates/select", response_model=ProgramTemplateSummary)
async def select_template(
    weeks_until_race: int = Query(..., ge=0, description="Whole weeks until race day"),
) -> ProgramTemplateSummary:
    """Template that fits the time left before the race."""
    return _summary(select_template_for_weeks_until_race(weeks_until_race))


@router.get("/templates/{template_id}", response_model=ProgramTemplate)
async def get_template(template_id: str) -> ProgramTemplate:
    """Get a template with its full week-by-week schedule."""
    template = get_template_by_id(template_id)
    if template is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Program template '{template_id}' not found",
        )
    return template


@router.post("/validate", response_model=PersonalizationValidation)
async def validate_personalization(
    personalization: Dict[str, Any] = Body(...),
) -> PersonalizationValidation:
    """Report every problem with a personalization payload."""
    return plan_generator.validate_personalization(personalization)


@router.post("/preview", response_model=ProgramSummary)
async def preview_program(
    personalization: Dict[str, Any] = Body(...),
) -> ProgramSummary:
    """Generate a personalized program without enrolling and summarize it."""
    try:
        profile = plan_generator.parse_personalization(personalization)
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": str(e), "errors": e.errors},
        )

    program = plan_generator.generate_program(profile, created_at=datetime.utcnow())
    return plan_generator.get_program_summary(program)
