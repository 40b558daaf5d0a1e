"""Grading endpoints.

These handlers call the LLM synchronously, so they are plain functions
and FastAPI runs them in its threadpool.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from sparkskool.core.answer_comparison import compare_answers
from sparkskool.core.answer_keys import get_answer_key
from sparkskool.core.submission_grader import (
    GradingConfigError,
    GradingError,
    grade_student_submission,
    grade_submission_per_question,
    summarize_results,
)
from sparkskool.llm.client import LLMClient, LLMError
from sparkskool.storage.local_store import LocalStore
from sparkskool.web.dependencies import get_llm_client, get_store
from sparkskool.web.schemas import (
    CompareAnswersRequest,
    ComparisonResponse,
    GradeStudentRequest,
    GradeSubmissionRequest,
    GradingResponse,
    GradingResultSchema,
)

router = APIRouter(prefix="/api", tags=["grading"])


def _grading_response(results, questions) -> GradingResponse:
    return GradingResponse(
        results=[GradingResultSchema.from_result(r) for r in results],
        summary=summarize_results(results, questions),
    )


@router.post("/compare-answers", response_model=ComparisonResponse)
def compare(
    request: CompareAnswersRequest,
    client: LLMClient = Depends(get_llm_client),
) -> ComparisonResponse:
    """Score one student answer against the expected answer."""
    try:
        result = compare_answers(
            request.student_answer,
            request.correct_answer,
            request.question_type,
            client=client,
        )
    except LLMError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to compare answers: {e}",
        )
    return ComparisonResponse(**result.to_dict())


@router.post("/grade-submission", response_model=GradingResponse)
def grade_submission(
    request: GradeSubmissionRequest,
    client: LLMClient = Depends(get_llm_client),
) -> GradingResponse:
    """Grade every question over the full text of a submission."""
    questions = [q.to_question() for q in request.questions]
    try:
        results = grade_submission_per_question(
            request.extracted_text,
            questions,
            exam_context=request.exam_context,
            client=client,
        )
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
    return _grading_response(results, questions)


@router.post("/grade-student", response_model=GradingResponse)
def grade_student(
    request: GradeStudentRequest,
    client: LLMClient = Depends(get_llm_client),
    store: LocalStore = Depends(get_store),
) -> GradingResponse:
    """Grade a submission against an inline or stored answer key."""
    if request.answer_key:
        questions = [q.to_question() for q in request.answer_key]
    elif request.answer_key_id:
        answer_key = get_answer_key(request.answer_key_id, store=store)
        if answer_key is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Answer key '{request.answer_key_id}' not found",
            )
        questions = answer_key.questions
    else:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="An answer key or answer_key_id is required",
        )

    try:
        results = grade_student_submission(questions, request.student_text, client=client)
    except GradingError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e),
        )
    return _grading_response(results, questions)
