"""Server side of a streamed chat turn.

A turn stores the user's message, forwards the whole conversation to the
selected provider, relays text deltas to the client as ``data:`` events and,
once the provider is finished, stores the assistant reply before telling the
client ``done``. A client that sees ``done`` can therefore refetch the
conversation and find the final message already persisted.
"""
import logging
from typing import AsyncIterator, Callable, List, Optional

import httpx
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.enums import MessageRole
from app.models.models import Conversation, Message
from app.streaming.sse import format_event
from app.streaming.upstream import (
    ChatOptions,
    UpstreamError,
    UpstreamStream,
    create_stream,
    detect_provider,
)
from app.utils.providers import get_provider_api_key

logger = logging.getLogger(__name__)


def build_system_prompt(project_prompt: Optional[str] = None,
                        system_instructions: Optional[str] = None,
                        template_prompt: Optional[str] = None,
                        skill_prompt: Optional[str] = None) -> str:
    prompt = project_prompt or system_instructions or ""
    for extra in (template_prompt, skill_prompt):
        if extra:
            prompt = f"{prompt}\n\n{extra}" if prompt else extra
    return prompt


class ChatRelay:
    def __init__(self, conversation_id: int, params, http_client: httpx.AsyncClient,
                 session_factory: Callable[[], Session]):
        self.conversation_id = conversation_id
        self.params = params
        self.http_client = http_client
        self.session_factory = session_factory
        self.upstream: Optional[UpstreamStream] = None

    async def open(self, db: Session) -> "ChatRelay":
        """Store the user turn and open the upstream stream.

        Raises ``ProviderNotConfigured`` or ``UpstreamError`` before any event
        has been produced.
        """
        params = self.params
        conversation = db.get(Conversation, self.conversation_id)

        db.add(Message(
            conversation_id=self.conversation_id,
            role=MessageRole.USER.value,
            content=params.content,
            attachments=params.attachments or None,
        ))
        db.commit()

        if params.enabled_tools:
            logger.info("Conversation %s requested tools: %s", self.conversation_id, ", ".join(params.enabled_tools))

        history = self._history(db)
        project_prompt = conversation.project.system_prompt if conversation.project else None
        provider, model_id = detect_provider(params.model)
        options = ChatOptions(
            model=model_id,
            messages=history,
            system_prompt=build_system_prompt(
                project_prompt,
                params.system_instructions,
                params.template_system_prompt,
                params.skill_system_prompt,
            ),
            temperature=params.temperature if params.temperature is not None else 0.7,
            max_tokens=params.max_tokens if params.max_tokens is not None else 4096,
            top_p=params.top_p if params.top_p is not None else 1.0,
        )
        api_key = get_provider_api_key(db, provider)
        self.upstream = create_stream(self.http_client, provider, api_key, options)
        await self.upstream.open_stream()
        logger.info("Streaming conversation %s from %s/%s", self.conversation_id, provider.value, model_id)
        return self

    def _history(self, db: Session) -> List[dict]:
        messages = (
            db.query(Message)
            .filter(Message.conversation_id == self.conversation_id)
            .order_by(Message.id)
            .all()
        )
        return [{"role": m.role, "content": m.content} for m in messages]

    async def events(self) -> AsyncIterator[str]:
        full_response = ""
        usage = {}
        chunks = self.upstream.chunks()
        try:
            async for chunk in chunks:
                if chunk.content:
                    full_response += chunk.content
                    yield format_event({"content": chunk.content})
                if chunk.usage:
                    usage.update(chunk.usage)
        except UpstreamError as e:
            logger.error("Chat relay for conversation %s failed mid-stream: %s", self.conversation_id, e)
            yield format_event({"error": str(e)})
            return
        except Exception:
            logger.exception("Chat relay for conversation %s crashed mid-stream", self.conversation_id)
            yield format_event({"error": "Streaming failed unexpectedly"})
            return
        finally:
            # runs on client disconnect too
            await chunks.aclose()
            await self.upstream.aclose()

        try:
            self._store_reply(full_response, usage)
        except SQLAlchemyError:
            logger.exception("Could not store reply for conversation %s", self.conversation_id)
            yield format_event({"error": "Failed to save the assistant message"})
            return
        yield format_event({"done": True, "usage": usage})

    def _store_reply(self, content: str, usage: dict):
        db = self.session_factory()
        try:
            db.add(Message(
                conversation_id=self.conversation_id,
                role=MessageRole.ASSISTANT.value,
                content=content,
                usage=usage or None,
            ))
            db.commit()
        finally:
            db.close()
