import logging

from groq import AsyncGroq, GroqError

from app.database import get_settings
from app.utils.config import TITLE_MODEL, TITLE_PROMPT

logger = logging.getLogger(__name__)


def fallback_title(first_message: str) -> str:
    words = first_message.split()
    if not words:
        return "New Chat"
    title = " ".join(words[:5])
    return title + "..." if len(words) > 5 else title


async def generate_ai_title(messages, llm: AsyncGroq | None = None) -> str:
    """Short title for a conversation transcript.

    Falls back to the opening words of the first user message when Groq is not
    configured or the call fails.
    """
    first_user = next((m.content for m in messages if m.role == "user"), "")
    api_key = get_settings().GROQ_API
    if llm is None and not api_key:
        return fallback_title(first_user)

    llm = llm or AsyncGroq(api_key=api_key)
    chat_history = "\n".join([f"{msg.role}: {msg.content}" for msg in messages])
    try:
        response = await llm.chat.completions.create(
            messages=[{"role": "user", "content": TITLE_PROMPT.format(chat_history=chat_history)}],
            model=TITLE_MODEL,
        )
    except GroqError as e:
        logger.error("Title generation failed: %s", e)
        return fallback_title(first_user)
    title = (response.choices[0].message.content or "").strip().strip('"')
    return title[:200] or fallback_title(first_user)
