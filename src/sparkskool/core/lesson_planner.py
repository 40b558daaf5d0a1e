"""Lesson plan template.

Produces a structured plain-text lesson plan from a topic, grade level,
duration and objectives. No LLM is involved; the structure is fixed.
"""

from __future__ import annotations

import structlog

logger = structlog.get_logger(__name__)

DEFAULT_TOPIC = "Engaging Lesson"
DEFAULT_GRADE_LEVEL = "9-12"
DEFAULT_DURATION = 60

LESSON_TEMPLATE = """Lesson Plan: {topic}
Grade Level: {grade_level}
Duration: {duration} minutes

Lesson Overview:
{objectives}

Materials Needed:
• Whiteboard and markers
• Student worksheets
• Multimedia presentation
• Hands-on activity materials

Lesson Structure:
Introduction (5-7 minutes)
- Warm-up discussion question
- Share learning objectives
- Quick pre-assessment

Direct Instruction (12-15 minutes)
- Interactive mini-lecture
- Visual demonstrations
- Think-pair-share activities

Guided Practice (20-25 minutes)
- Collaborative group work
- Scaffolded exercises
- Teacher-led feedback session

Independent Practice (10-12 minutes)
- Skill application task
- Differentiated support
- Progress check-ins

Conclusion (5 minutes)
- Key takeaways discussion
- Exit ticket assessment
- Preview of next lesson

Differentiation Strategies:
- Tiered activities for varied levels
- Optional challenge tasks
- Multisensory approaches"""


def generate_lesson_plan(
    topic: str | None = None,
    grade_level: str | None = None,
    duration: int | None = None,
    objectives: list[str] | None = None,
    revision_request: str | None = None,
) -> str:
    """Render a lesson plan.

    Objectives are numbered under "Lesson Overview"; a revision request is
    appended as "Revision Notes".
    """
    plan = LESSON_TEMPLATE.format(
        topic=topic or DEFAULT_TOPIC,
        grade_level=grade_level or DEFAULT_GRADE_LEVEL,
        duration=duration or DEFAULT_DURATION,
        objectives="\n".join(f"{i}. {obj}" for i, obj in enumerate(objectives or [], start=1)),
    )

    if revision_request:
        plan += f"\n\nRevision Notes:\n{revision_request}"

    logger.debug("lesson_plan_generated", topic=topic, objectives=len(objectives or []))
    return plan.strip()
