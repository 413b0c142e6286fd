"""Streaming adapters for the hosted model providers.

Each adapter opens a single streaming HTTP request and turns the provider's
own event format into ``StreamChunk`` values. Opening and reading are split:
``open_stream`` sends the request and checks the status so a failing provider
is reported before anything has been written to our client, and ``chunks``
reads the body afterwards.
"""
import logging
from dataclasses import dataclass, field
from typing import AsyncIterator, Dict, List, Optional, Tuple

import httpx

from app.database import get_settings
from app.models.enums import MessageRole, Provider
from app.streaming.sse import iter_payloads

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash"
OPENAI_URL = "https://api.openai.com/v1/chat/completions"
OPENROUTER_URL = "https://openrouter.ai/api/v1/chat/completions"
ANTHROPIC_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_VERSION = "2023-06-01"
OPENROUTER_HEADERS = {"HTTP-Referer": "https://falconcore.ai", "X-Title": "Falcon Core AI"}


class UpstreamError(Exception):
    def __init__(self, provider: Provider, status_code: Optional[int], body: str = ""):
        self.provider = provider
        self.status_code = status_code
        self.body = body
        if status_code is None:
            message = f"{provider.value} request failed: {body}"
        else:
            message = f"{provider.value} error ({status_code}): {body[:500]}"
        super().__init__(message)


class ProviderNotConfigured(Exception):
    def __init__(self, provider: Provider):
        self.provider = provider
        super().__init__(f"{provider.value} API key not configured")


@dataclass
class ChatOptions:
    model: str
    messages: List[Dict[str, str]]
    system_prompt: str = ""
    temperature: float = 0.7
    max_tokens: int = 4096
    top_p: float = 1.0


@dataclass
class StreamChunk:
    content: str = ""
    usage: Dict[str, int] = field(default_factory=dict)


def detect_provider(model: Optional[str]) -> Tuple[Provider, str]:
    model = model or ""
    if model.startswith("openrouter/"):
        return Provider.OPENROUTER, model[len("openrouter/"):]
    if model.startswith(("gpt-", "o1-", "o3-")):
        return Provider.OPENAI, model
    if model.startswith("claude-"):
        return Provider.ANTHROPIC, model
    if model.startswith("gemini-"):
        return Provider.GOOGLE, model
    return Provider.GOOGLE, DEFAULT_MODEL


def _usage(prompt=None, completion=None, total=None) -> Dict[str, int]:
    usage = {}
    if prompt is not None:
        usage["promptTokens"] = prompt
    if completion is not None:
        usage["completionTokens"] = completion
    if total is None and prompt is not None and completion is not None:
        total = prompt + completion
    if total is not None:
        usage["totalTokens"] = total
    return usage


class UpstreamStream:
    """One streaming request against one provider."""

    provider: Provider

    def __init__(self, client: httpx.AsyncClient, api_key: str, options: ChatOptions):
        self.client = client
        self.api_key = api_key
        self.options = options
        self.response: Optional[httpx.Response] = None

    def build_request(self) -> httpx.Request:
        raise NotImplementedError

    def parse(self, payload: dict) -> Optional[StreamChunk]:
        raise NotImplementedError

    async def open_stream(self):
        try:
            response = await self.client.send(self.build_request(), stream=True)
        except httpx.HTTPError as e:
            raise UpstreamError(self.provider, None, str(e)) from e
        if response.status_code >= 400:
            body = (await response.aread()).decode("utf-8", errors="replace")
            await response.aclose()
            logger.error("Upstream %s returned %s: %.500s", self.provider.value, response.status_code, body)
            raise UpstreamError(self.provider, response.status_code, body)
        self.response = response
        return self

    async def chunks(self) -> AsyncIterator[StreamChunk]:
        if self.response is None:
            await self.open_stream()
        try:
            async for payload in iter_payloads(self.response.aiter_bytes()):
                if not isinstance(payload, dict):
                    continue
                try:
                    chunk = self.parse(payload)
                except (AttributeError, TypeError, KeyError, IndexError):
                    logger.debug("Skipping unexpected %s event: %.200s", self.provider.value, payload)
                    continue
                if chunk is not None:
                    yield chunk
        except httpx.HTTPError as e:
            raise UpstreamError(self.provider, None, str(e)) from e
        finally:
            await self.aclose()

    async def aclose(self):
        if self.response is not None:
            await self.response.aclose()
            self.response = None


class OpenAICompatibleStream(UpstreamStream):
    provider = Provider.OPENAI
    url = OPENAI_URL
    extra_headers: Dict[str, str] = {}

    def build_request(self):
        messages = []
        if self.options.system_prompt:
            messages.append({"role": MessageRole.SYSTEM.value, "content": self.options.system_prompt})
        messages.extend(
            {"role": MessageRole.normalize(m["role"]).value, "content": m["content"]}
            for m in self.options.messages
        )
        body = {
            "model": self.options.model,
            "messages": messages,
            "stream": True,
            "temperature": self.options.temperature,
            "max_tokens": self.options.max_tokens,
            "top_p": self.options.top_p,
            "stream_options": {"include_usage": True},
        }
        headers = {"Authorization": f"Bearer {self.api_key}", **self.extra_headers}
        return self.client.build_request("POST", self.url, json=body, headers=headers)

    def parse(self, payload):
        choices = payload.get("choices") or []
        delta = ""
        if choices:
            delta = (choices[0].get("delta") or {}).get("content") or ""
        usage = payload.get("usage")
        if usage:
            return StreamChunk(delta, _usage(usage.get("prompt_tokens"), usage.get("completion_tokens"), usage.get("total_tokens")))
        if delta:
            return StreamChunk(delta)
        return None


class OpenRouterStream(OpenAICompatibleStream):
    provider = Provider.OPENROUTER
    url = OPENROUTER_URL
    extra_headers = OPENROUTER_HEADERS


class AnthropicStream(UpstreamStream):
    provider = Provider.ANTHROPIC

    def __init__(self, client, api_key, options):
        super().__init__(client, api_key, options)
        self._prompt_tokens = None

    def build_request(self):
        messages = [
            {"role": "assistant" if MessageRole.normalize(m["role"]) == MessageRole.ASSISTANT else "user",
             "content": m["content"]}
            for m in self.options.messages
            if m["role"] != MessageRole.SYSTEM.value
        ]
        body = {
            "model": self.options.model,
            "messages": messages,
            "max_tokens": self.options.max_tokens,
            "temperature": self.options.temperature,
            "top_p": self.options.top_p,
            "stream": True,
        }
        if self.options.system_prompt:
            body["system"] = self.options.system_prompt
        headers = {"x-api-key": self.api_key, "anthropic-version": ANTHROPIC_VERSION}
        return self.client.build_request("POST", ANTHROPIC_URL, json=body, headers=headers)

    def parse(self, payload):
        kind = payload.get("type")
        if kind == "content_block_delta":
            text = (payload.get("delta") or {}).get("text")
            return StreamChunk(text) if text else None
        if kind == "message_start":
            usage = (payload.get("message") or {}).get("usage") or {}
            self._prompt_tokens = usage.get("input_tokens")
            return None
        if kind == "message_delta" and payload.get("usage"):
            completion = payload["usage"].get("output_tokens")
            return StreamChunk("", _usage(self._prompt_tokens, completion))
        return None


class GeminiStream(UpstreamStream):
    provider = Provider.GOOGLE

    def build_request(self):
        contents = [
            {"role": "model" if MessageRole.normalize(m["role"]) == MessageRole.ASSISTANT else "user",
             "parts": [{"text": m["content"]}]}
            for m in self.options.messages
            if m["role"] != MessageRole.SYSTEM.value
        ]
        body = {
            "contents": contents,
            "generationConfig": {
                "temperature": self.options.temperature,
                "maxOutputTokens": self.options.max_tokens,
                "topP": self.options.top_p,
            },
        }
        if self.options.system_prompt:
            body["systemInstruction"] = {"parts": [{"text": self.options.system_prompt}]}
        base_url = get_settings().GEMINI_BASE_URL.rstrip("/")
        url = f"{base_url}/models/{self.options.model}:streamGenerateContent"
        return self.client.build_request(
            "POST", url, json=body, params={"alt": "sse"}, headers={"x-goog-api-key": self.api_key}
        )

    def parse(self, payload):
        text = ""
        for candidate in (payload.get("candidates") or [])[:1]:
            for part in (candidate.get("content") or {}).get("parts") or []:
                text += part.get("text") or ""
        meta = payload.get("usageMetadata")
        usage = {}
        if meta:
            usage = _usage(meta.get("promptTokenCount"), meta.get("candidatesTokenCount"), meta.get("totalTokenCount"))
        if text or usage:
            return StreamChunk(text, usage)
        return None


STREAMS = {
    Provider.OPENAI: OpenAICompatibleStream,
    Provider.OPENROUTER: OpenRouterStream,
    Provider.ANTHROPIC: AnthropicStream,
    Provider.GOOGLE: GeminiStream,
}


def create_stream(client: httpx.AsyncClient, provider: Provider, api_key: Optional[str], options: ChatOptions) -> UpstreamStream:
    stream_cls = STREAMS.get(provider)
    if stream_cls is None or not api_key:
        raise ProviderNotConfigured(provider)
    return stream_cls(client, api_key, options)


def build_timeout() -> httpx.Timeout:
    # generation can take minutes, so only connecting is bounded
    return httpx.Timeout(connect=10.0, read=None, write=30.0, pool=30.0)
