"""Assistant chat and chat history endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from sparkskool.core.chat import (
    ChatPreferences,
    get_translated_prompts,
    list_conversations,
    save_conversation,
    send_chat_message,
)
from sparkskool.llm.client import LLMClient, LLMError
from sparkskool.storage.local_store import LocalStore
from sparkskool.web.dependencies import get_llm_client, get_store
from sparkskool.web.schemas import (
    ChatHistorySave,
    ChatRequest,
    ChatResponse,
    ConversationListResponse,
    ConversationResponse,
)

router = APIRouter(prefix="/api", tags=["chat"])


@router.post("/chat", response_model=ChatResponse)
def chat(
    request: ChatRequest,
    client: LLMClient = Depends(get_llm_client),
) -> ChatResponse:
    """Send the conversation to the assistant and return its reply."""
    messages = [m.model_dump(exclude_none=True) for m in request.messages]
    try:
        reply = send_chat_message(
            messages,
            tool=request.tool,
            language=request.language,
            preferences=ChatPreferences.from_dict(request.preferences),
            client=client,
        )
    except LLMError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to get a reply: {e}",
        )
    return ChatResponse(reply=reply)


@router.get("/chat/prompts")
async def prompts(
    language: str = Query(default="en"),
    subject: str = Query(default="general"),
) -> dict[str, str]:
    """Quick-start prompts for a subject."""
    return get_translated_prompts(language, subject)


@router.get("/chat-history", response_model=ConversationListResponse)
async def history(store: LocalStore = Depends(get_store)) -> ConversationListResponse:
    """Stored conversations, most recently updated first."""
    conversations = [ConversationResponse(**c.to_dict()) for c in list_conversations(store=store)]
    return ConversationListResponse(conversations=conversations, count=len(conversations))


@router.post("/chat-history", response_model=ConversationResponse)
async def save_history(
    request: ChatHistorySave,
    store: LocalStore = Depends(get_store),
) -> ConversationResponse:
    """Create or update the conversation that starts with the same message."""
    messages = [m.model_dump(exclude_none=True) for m in request.messages]
    conversation = save_conversation(messages, title=request.title, store=store)
    return ConversationResponse(**conversation.to_dict())
