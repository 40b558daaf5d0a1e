"""Teaching assistant chat.

Responsibilities:
- Build the system prompt: language persona (en/ar/he) plus an optional
  tool prompt adjusted to the teacher's preferences
- Send the conversation to the LLM
- Keep a short conversation history (10 most recent) in the JSON store
"""

from __future__ import annotations

import re
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Literal

import structlog

from sparkskool.llm.client import LLMClient, Message
from sparkskool.storage.local_store import LocalStore

logger = structlog.get_logger(__name__)

# =============================================================================
# TYPES
# =============================================================================

Language = Literal["en", "ar", "he"]

TOOLS = (
    "Lesson Planning",
    "Assessment Generator",
    "Student Feedback",
    "Activity Creator",
)

DEFAULT_LANGUAGE = "en"
CHAT_HISTORY_KEY = "chat_history"
MAX_CONVERSATIONS = 10
DEFAULT_TITLE = "New Conversation"

# =============================================================================
# PROMPTS
# =============================================================================

LANGUAGE_INSTRUCTIONS: dict[str, str] = {
    "en": """You are Spark, a teaching assistant for SparkSkool.
Your greeting should be exactly and only: "Hello! I'm Spark. How can I help you today?"
Keep all responses extremely brief (1-2 short sentences max).
Do not explain your capabilities unless specifically asked.
When asked to perform a task, simply say "I'll handle that for you" and get to work.
Reply in English.""",
    "ar": """أنت سبارك، مساعد تعليمي لـ SparkSkool.
تحيتك يجب أن تكون بالضبط وفقط: "مرحباً! أنا سبارك. كيف يمكنني مساعدتك اليوم؟"
اجعل جميع ردودك موجزة للغاية (1-2 جمل قصيرة كحد أقصى).
لا تشرح قدراتك إلا إذا طُلب منك ذلك تحديداً.
عندما يُطلب منك أداء مهمة، قل ببساطة "سأتولى ذلك من أجلك" وابدأ العمل.
الرجاء الرد باللغة العربية.""",
    "he": """אתה ספארק, עוזר הוראה עבור SparkSkool.
הברכה שלך צריכה להיות בדיוק ורק: "שלום! אני ספארק. איך אוכל לעזור לך היום?"
שמור על כל התשובות קצרות ביותר (1-2 משפטים קצרים לכל היותר).
אל תסביר את היכולות שלך אלא אם התבקשת במפורש.
כאשר מבקשים ממך לבצע משימה, פשוט אמור "אטפל בזה עבורך" והתחל לעבוד.
אנא השב בעברית.""",
}

TOOL_INTROS: dict[str, str] = {
    "Lesson Planning": (
        "As a curriculum design expert, I'll help you create an effective lesson plan. "
        "Let's start by discussing the essentials one step at a time. "
        "What grade level or age group will this lesson be for?"
    ),
    "Assessment Generator": (
        "I specialize in creating educational assessments tailored to your specific needs. "
        "To get started, could you tell me which subject this assessment is for? "
        "From there, we'll work through the details to create something perfect for your students."
    ),
    "Student Feedback": (
        "I'm here to help you craft effective, growth-oriented feedback for your students. "
        "This feedback will be encouraging while providing clear guidance for improvement. "
        "To begin, could you tell me what grade level your student is in?"
    ),
    "Activity Creator": (
        "I'll help you design engaging classroom activities that align with your learning objectives. "
        "These activities will be practical, engaging, and adaptable to different learning styles. "
        "To start, what grade level will this activity be for?"
    ),
}

GENERIC_TOOL_PROMPT = (
    "I'm Spark, your AI teaching assistant. I'm here to help with lesson planning, "
    "assessments, student feedback, and classroom activities. What can I help you with today?"
)

TRANSLATED_PROMPTS: dict[str, dict[str, str]] = {
    "en": {
        "lessonPlan": "Create a lesson plan for {subject} class",
        "quiz": "Generate a quiz about {subject}",
        "feedback": "Write feedback for a {subject} student",
        "activity": "Design a {subject} classroom activity",
    },
    "ar": {
        "lessonPlan": "قم بإنشاء خطة درس لمادة {subject}",
        "quiz": "قم بإنشاء اختبار في مادة {subject}",
        "feedback": "اكتب تقييماً لطالب في مادة {subject}",
        "activity": "صمم نشاطاً صفياً لمادة {subject}",
    },
    "he": {
        "lessonPlan": "צור מערך שיעור עבור שיעור {subject}",
        "quiz": "צור מבחן בנושא {subject}",
        "feedback": "כתוב משוב לתלמיד ב{subject}",
        "activity": "תכנן פעילות כיתתית ב{subject}",
    },
}


# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass
class ChatPreferences:
    """Teacher preferences woven into tool prompts."""

    curriculum: str = ""
    age: str = ""
    style: str = ""
    complexity: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> ChatPreferences:
        data = data or {}
        return cls(
            curriculum=data.get("curriculum", ""),
            age=data.get("age", ""),
            style=data.get("style", ""),
            complexity=data.get("complexity", ""),
        )


@dataclass
class Conversation:
    """A stored chat conversation."""

    id: str
    title: str
    messages: list[dict[str, Any]] = field(default_factory=list)
    created_at: str = ""
    updated_at: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "title": self.title,
            "messages": self.messages,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Conversation:
        return cls(
            id=data.get("id", ""),
            title=data.get("title") or DEFAULT_TITLE,
            messages=list(data.get("messages") or []),
            created_at=data.get("created_at", ""),
            updated_at=data.get("updated_at", ""),
        )


# =============================================================================
# PROMPT BUILDING
# =============================================================================


def _language(language: str | None) -> str:
    return language if language in LANGUAGE_INSTRUCTIONS else DEFAULT_LANGUAGE


def get_tool_prompt(tool: str, preferences: ChatPreferences | None = None) -> str:
    """Tool-specific opening prompt, adjusted to the teacher's preferences."""
    if tool not in TOOL_INTROS:
        return GENERIC_TOOL_PROMPT

    prefs = preferences or ChatPreferences()
    base = (
        f"I'm Spark, your AI teaching assistant specialized in "
        f"{prefs.curriculum or 'standard curriculum'}. "
        f"I adjust my communication style to work well with {prefs.age or 'students'} "
        f"using a {prefs.style or 'supportive'} approach. "
    )
    return base + TOOL_INTROS[tool]


def build_system_prompt(
    language: str | None = None,
    tool: str | None = None,
    preferences: ChatPreferences | None = None,
) -> str:
    prompt = LANGUAGE_INSTRUCTIONS[_language(language)]
    if tool:
        prompt += "\n\n" + get_tool_prompt(tool, preferences)
    return prompt


def get_translated_prompts(language: str, subject: str) -> dict[str, str]:
    """Quick-start prompts for a subject in the given language."""
    templates = TRANSLATED_PROMPTS[_language(language)]
    return {name: template.format(subject=subject) for name, template in templates.items()}


# =============================================================================
# CHAT
# =============================================================================


def send_chat_message(
    messages: list[dict[str, Any]],
    tool: str | None = None,
    language: str | None = None,
    preferences: ChatPreferences | None = None,
    client: LLMClient | None = None,
) -> str:
    """Send a conversation to the LLM and return the assistant's reply.

    Args:
        messages: Conversation so far as {"role", "content"[, "language"]} dicts
        tool: Optional tool name (see TOOLS)
        language: Reply language; defaults to the last message's language
        preferences: Teacher preferences for tool prompts
        client: LLM client (created if not provided)

    Raises:
        LLMError: If the LLM call fails
    """
    if language is None and messages:
        language = messages[-1].get("language")

    system_prompt = build_system_prompt(language, tool, preferences)
    chat_messages = [Message(role="system", content=system_prompt)]
    chat_messages.extend(
        Message(role=m.get("role", "user"), content=m.get("content", ""))
        for m in messages
    )

    client = client or LLMClient()
    response = client.chat(chat_messages, temperature=0.7, max_tokens=2048)

    logger.info(
        "chat_reply",
        tool=tool,
        language=_language(language),
        messages=len(messages),
        tokens=response.total_tokens,
    )
    return response.content


# =============================================================================
# HISTORY
# =============================================================================


def _conversation_id(messages: list[dict[str, Any]]) -> str:
    stamp = int(time.time() * 1000)
    if not messages:
        return f"chat-{stamp}"
    prefix = re.sub(r"[^a-z0-9]", "", str(messages[0].get("content", ""))[:20], flags=re.IGNORECASE)
    return f"chat-{prefix}-{stamp}"


def _first_content(messages: list[dict[str, Any]]) -> Any:
    return messages[0].get("content") if messages else None


def save_conversation(
    messages: list[dict[str, Any]],
    title: str | None = None,
    store: LocalStore | None = None,
) -> Conversation:
    """Create or update the conversation identified by its first message.

    An existing conversation gets the new messages and a fresh updated_at.
    A new conversation goes to the front; only the 10 most recent are kept.
    """
    store = store or LocalStore()
    now = datetime.now(timezone.utc).isoformat()
    first = _first_content(messages)
    saved: list[Conversation] = []
    created = False

    def upsert(entries: list[Any]) -> list[Any]:
        nonlocal created
        history = [Conversation.from_dict(c) for c in entries if isinstance(c, dict)]

        for conversation in history:
            if first is not None and _first_content(conversation.messages) == first:
                conversation.messages = list(messages)
                conversation.updated_at = now
                saved.append(conversation)
                return [c.to_dict() for c in history]

        conversation = Conversation(
            id=_conversation_id(messages),
            title=title or DEFAULT_TITLE,
            messages=list(messages),
            created_at=now,
            updated_at=now,
        )
        created = True
        saved.append(conversation)
        history.insert(0, conversation)
        return [c.to_dict() for c in history[:MAX_CONVERSATIONS]]

    store.update_list(CHAT_HISTORY_KEY, upsert)
    conversation = saved[0]

    if created:
        logger.info("conversation_created", id=conversation.id)
    else:
        logger.info("conversation_updated", id=conversation.id)
    return conversation


def list_conversations(store: LocalStore | None = None) -> list[Conversation]:
    """Stored conversations, most recently updated first."""
    store = store or LocalStore()
    history = [
        Conversation.from_dict(c)
        for c in store.get_list(CHAT_HISTORY_KEY)
        if isinstance(c, dict)
    ]
    return sorted(history, key=lambda c: c.updated_at, reverse=True)
