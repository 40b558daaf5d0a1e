"""Lesson plan endpoint."""

from fastapi import APIRouter

from sparkskool.core.lesson_planner import generate_lesson_plan
from sparkskool.web.schemas import LessonRequest, LessonResponse

router = APIRouter(prefix="/api", tags=["lessons"])


@router.post("/generate-lesson", response_model=LessonResponse)
async def generate_lesson(request: LessonRequest) -> LessonResponse:
    plan = generate_lesson_plan(
        topic=request.topic,
        grade_level=request.grade_level,
        duration=request.duration,
        objectives=request.objectives,
        revision_request=request.revision_request,
    )
    return LessonResponse(plan=plan)
