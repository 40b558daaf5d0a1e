"""Answer key endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status

from sparkskool.core.answer_keys import (
    AnswerKey,
    delete_answer_key,
    get_answer_key,
    list_answer_keys,
    save_answer_key,
)
from sparkskool.core.submission_grader import (
    GradingConfigError,
    GradingError,
    extract_answer_key,
)
from sparkskool.llm.client import LLMClient
from sparkskool.storage.local_store import LocalStore
from sparkskool.web.dependencies import get_llm_client, get_store
from sparkskool.web.schemas import (
    AnswerKeyCreate,
    AnswerKeyListResponse,
    AnswerKeyResponse,
    QuestionSchema,
)

router = APIRouter(prefix="/api/answer-keys", tags=["answer-keys"])


def _to_response(answer_key: AnswerKey) -> AnswerKeyResponse:
    return AnswerKeyResponse(
        id=answer_key.id,
        questions=[QuestionSchema.from_question(q) for q in answer_key.questions],
        exam_context=answer_key.exam_context,
        timestamp=answer_key.timestamp,
        metadata=answer_key.metadata,
    )


@router.get("", response_model=AnswerKeyListResponse)
async def list_keys(store: LocalStore = Depends(get_store)) -> AnswerKeyListResponse:
    """List saved answer keys, oldest first."""
    keys = [_to_response(k) for k in list_answer_keys(store=store)]
    return AnswerKeyListResponse(answer_keys=keys, count=len(keys))


@router.get("/{key_id}", response_model=AnswerKeyResponse)
async def get_key(key_id: str, store: LocalStore = Depends(get_store)) -> AnswerKeyResponse:
    answer_key = get_answer_key(key_id, store=store)
    if answer_key is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Answer key '{key_id}' not found",
        )
    return _to_response(answer_key)


@router.post("", response_model=AnswerKeyResponse, status_code=status.HTTP_201_CREATED)
def create_key(
    request: AnswerKeyCreate,
    store: LocalStore = Depends(get_store),
    client: LLMClient = Depends(get_llm_client),
) -> AnswerKeyResponse:
    """Save an answer key from questions, or extract one from exam text."""
    questions = [q.to_question() for q in request.questions]

    if not questions and request.text:
        try:
            questions = extract_answer_key(request.text, context=request.exam_context, client=client)
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

    if not questions:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No questions provided",
        )

    answer_key = save_answer_key(questions, exam_context=request.exam_context, store=store)
    return _to_response(answer_key)


@router.delete("/{key_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_key(key_id: str, store: LocalStore = Depends(get_store)) -> None:
    if not delete_answer_key(key_id, store=store):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Answer key '{key_id}' not found",
        )
