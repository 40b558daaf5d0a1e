"""Route handlers for the Web API."""

from sparkskool.web.routes.health import router as health_router
from sparkskool.web.routes.grading import router as grading_router
from sparkskool.web.routes.questions import router as questions_router
from sparkskool.web.routes.answer_keys import router as answer_keys_router
from sparkskool.web.routes.slides import router as slides_router
from sparkskool.web.routes.materials import router as materials_router
from sparkskool.web.routes.notes import router as notes_router
from sparkskool.web.routes.chat import router as chat_router
from sparkskool.web.routes.lessons import router as lessons_router
from sparkskool.web.routes.games import router as games_router

__all__ = [
    "health_router",
    "grading_router",
    "questions_router",
    "answer_keys_router",
    "slides_router",
    "materials_router",
    "notes_router",
    "chat_router",
    "lessons_router",
    "games_router",
]
