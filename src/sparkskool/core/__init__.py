"""Core business logic.

Modules:
- questions: Question and GradingResult records
- answer_comparison: Single-answer comparison (similarity + LLM)
- question_extractor: Exam text -> questions, with heuristic fallback
- submission_grader: Answer keys and whole-submission grading
- answer_keys: Answer key repository
- materials: Teaching materials repository
- notes: Sticky notes repository
- chat: Teaching assistant chat and conversation history
- slides: Slide deck generation
- lesson_planner: Lesson plan template
"""

__all__ = [
    "questions",
    "answer_comparison",
    "question_extractor",
    "submission_grader",
    "answer_keys",
    "materials",
    "notes",
    "chat",
    "slides",
    "lesson_planner",
]
