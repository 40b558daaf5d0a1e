"""Question extraction endpoint."""

from fastapi import APIRouter, Depends, HTTPException, status

from sparkskool.core.question_extractor import extract_questions_from_text
from sparkskool.core.submission_grader import (
    GradingConfigError,
    GradingError,
    extract_answer_key,
)
from sparkskool.llm.client import LLMClient
from sparkskool.web.dependencies import get_llm_client
from sparkskool.web.schemas import (
    ExtractQuestionsRequest,
    QuestionListResponse,
    QuestionSchema,
)

router = APIRouter(prefix="/api", tags=["questions"])


@router.post("/extract-questions", response_model=QuestionListResponse)
def extract_questions(
    request: ExtractQuestionsRequest,
    client: LLMClient = Depends(get_llm_client),
) -> QuestionListResponse:
    """Extract questions from exam text.

    The heuristic mode never fails: it falls back to pattern matching.
    The answer-key mode also pulls out each question's answer.
    """
    if request.mode == "answer-key":
        try:
            questions = extract_answer_key(request.text, context=request.context, client=client)
        except GradingConfigError as e:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=str(e),
            )
        except GradingError as e:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=str(e),
            )
    else:
        questions = extract_questions_from_text(request.text, client=client)

    schemas = [QuestionSchema.from_question(q) for q in questions]
    return QuestionListResponse(questions=schemas, count=len(schemas))
