"""Consumer of the chat streaming endpoint.

``StreamingChatClient.stream_message`` posts a message and yields the reply as
it grows. The caller sees ``StreamUpdate`` values whose ``text`` only ever
gets longer, then exactly one ``StreamDone``. Failures are terminal: a non-2xx
response or an ``error`` event raises ``StreamError`` and the partial text is
dropped. Whatever the outcome, the conversation's cache entries are
invalidated, and on success this happens before ``StreamDone`` is yielded so a
caller reacting to it reads fresh data from the server.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Dict, List, Optional, Union

import httpx

from app.streaming.cache import QueryCache, conversation_cache_keys
from app.streaming.sse import SSEDecoder, iter_payloads

logger = logging.getLogger(__name__)

# request field names as the HTTP API spells them
OPTION_FIELDS = {
    "model": "model",
    "temperature": "temperature",
    "max_tokens": "maxTokens",
    "top_p": "topP",
    "attachments": "attachments",
    "system_instructions": "systemInstructions",
    "template_system_prompt": "templateSystemPrompt",
    "skill_system_prompt": "skillSystemPrompt",
    "enabled_tools": "enabledTools",
}


class StreamError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


@dataclass
class StreamUpdate:
    delta: str
    text: str


@dataclass
class StreamDone:
    text: str
    usage: Optional[Dict[str, Any]] = None
    skipped_lines: int = 0
    invalidated: List[tuple] = field(default_factory=list)


class StreamingChatClient:
    def __init__(self, http_client: httpx.AsyncClient, cache: Optional[QueryCache] = None):
        self.http_client = http_client
        self.cache = cache

    async def stream_message(self, conversation_id: int, content: str,
                             **options) -> AsyncIterator[Union[StreamUpdate, StreamDone]]:
        body = {"content": content}
        for name, value in options.items():
            if name not in OPTION_FIELDS:
                raise TypeError(f"unknown option {name!r}")
            if value is not None:
                body[OPTION_FIELDS[name]] = value

        done = False
        try:
            async for event in self._stream(conversation_id, body):
                done = isinstance(event, StreamDone)
                yield event
        finally:
            # done already invalidated before it was yielded
            if not done:
                self._invalidate(conversation_id)

    async def _stream(self, conversation_id, body):
        url = f"/api/conversations/{conversation_id}/messages"
        try:
            async with self.http_client.stream("POST", url, json=body) as response:
                if response.status_code >= 400:
                    detail = await self._error_message(response)
                    raise StreamError(detail, response.status_code)

                decoder = SSEDecoder()
                text = ""
                async for payload in iter_payloads(response.aiter_bytes(), decoder):
                    if not isinstance(payload, dict):
                        continue
                    if isinstance(payload.get("error"), str):
                        raise StreamError(payload["error"])
                    delta = payload.get("content")
                    if isinstance(delta, str) and delta:
                        text += delta
                        yield StreamUpdate(delta=delta, text=text)
                    if payload.get("done"):
                        self._invalidate(conversation_id)
                        yield StreamDone(
                            text=text,
                            usage=payload.get("usage"),
                            skipped_lines=decoder.skipped,
                            invalidated=conversation_cache_keys(conversation_id),
                        )
                        return
        except httpx.HTTPError as e:
            raise StreamError(f"Stream read error: {e}") from e

        # body ended without a done event
        raise StreamError("Stream ended before completion")

    async def _error_message(self, response: httpx.Response) -> str:
        await response.aread()
        try:
            data = response.json()
        except ValueError:
            data = None
        if isinstance(data, dict) and data.get("message"):
            return f"Server returned {response.status_code}: {data['message']}"
        return f"Server returned {response.status_code}: {response.reason_phrase}"

    def _invalidate(self, conversation_id: int):
        if self.cache is None:
            return []
        return self.cache.invalidate(*conversation_cache_keys(conversation_id))

    async def send_message(self, conversation_id: int, content: str, **options) -> StreamDone:
        done = None
        async for event in self.stream_message(conversation_id, content, **options):
            if isinstance(event, StreamDone):
                done = event
        return done

    async def get_conversation(self, conversation_id: int) -> Dict[str, Any]:
        key = ("conversations", conversation_id)
        if self.cache is not None and key in self.cache:
            return self.cache.get(key)
        response = await self.http_client.get(f"/api/conversations/{conversation_id}")
        response.raise_for_status()
        conversation = response.json()
        if self.cache is not None:
            self.cache.set(key, conversation)
        return conversation
