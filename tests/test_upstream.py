import json

import httpx
import pytest

from app.models.enums import Provider
from app.streaming.upstream import (
    ChatOptions,
    ProviderNotConfigured,
    UpstreamError,
    create_stream,
    detect_provider,
)


@pytest.mark.parametrize("model,expected", [
    ("openrouter/meta-llama/llama-3-70b", (Provider.OPENROUTER, "meta-llama/llama-3-70b")),
    ("gpt-4o", (Provider.OPENAI, "gpt-4o")),
    ("o1-mini", (Provider.OPENAI, "o1-mini")),
    ("claude-3.5-haiku-20241022", (Provider.ANTHROPIC, "claude-3.5-haiku-20241022")),
    ("gemini-2.5-pro", (Provider.GOOGLE, "gemini-2.5-pro")),
    (None, (Provider.GOOGLE, "gemini-2.5-flash")),
    ("mystery-model", (Provider.GOOGLE, "gemini-2.5-flash")),
])
def test_detect_provider(model, expected):
    assert detect_provider(model) == expected


def options(**kwargs):
    defaults = dict(
        model="test-model",
        messages=[{"role": "user", "content": "Hello"}, {"role": "assistant", "content": "Hi"},
                  {"role": "user", "content": "More"}],
        system_prompt="Be brief.",
    )
    defaults.update(kwargs)
    return ChatOptions(**defaults)


async def read_all(stream):
    await stream.open_stream()
    return [chunk async for chunk in stream.chunks()]


def test_missing_key_is_not_configured(http_client):
    with pytest.raises(ProviderNotConfigured):
        create_stream(http_client, Provider.OPENAI, None, options())


def test_ollama_has_no_stream_adapter(http_client):
    with pytest.raises(ProviderNotConfigured):
        create_stream(http_client, Provider.OLLAMA, "key", options())


async def test_openai_stream(upstream, http_client, sse):
    upstream.handler = lambda request: httpx.Response(200, content=sse(
        {"choices": [{"delta": {"content": "Hi"}}]},
        {"choices": [{"delta": {"content": " there"}}]},
        {"choices": [], "usage": {"prompt_tokens": 3, "completion_tokens": 2, "total_tokens": 5}},
    ) + b"data: [DONE]\n\n")

    chunks = await read_all(create_stream(http_client, Provider.OPENAI, "sk-test", options()))

    assert "".join(c.content for c in chunks) == "Hi there"
    assert chunks[-1].usage == {"promptTokens": 3, "completionTokens": 2, "totalTokens": 5}
    request = upstream.requests[0]
    assert request.url == "https://api.openai.com/v1/chat/completions"
    assert request.headers["authorization"] == "Bearer sk-test"
    body = json.loads(request.content)
    assert body["stream"] is True
    assert body["messages"][0] == {"role": "system", "content": "Be brief."}
    assert [m["role"] for m in body["messages"][1:]] == ["user", "assistant", "user"]


async def test_openrouter_sends_attribution_headers(upstream, http_client, sse):
    upstream.handler = lambda request: httpx.Response(200, content=sse(
        {"choices": [{"delta": {"content": "ok"}}]},
    ))

    chunks = await read_all(create_stream(http_client, Provider.OPENROUTER, "or-key", options()))

    assert [c.content for c in chunks] == ["ok"]
    request = upstream.requests[0]
    assert request.url.host == "openrouter.ai"
    assert request.headers["x-title"] == "Falcon Core AI"


async def test_anthropic_stream(upstream, http_client, sse):
    upstream.handler = lambda request: httpx.Response(200, content=sse(
        {"type": "message_start", "message": {"usage": {"input_tokens": 10}}},
        {"type": "content_block_delta", "delta": {"text": "Hi"}},
        {"type": "ping"},
        {"type": "content_block_delta", "delta": {"text": " there"}},
        {"type": "message_delta", "usage": {"output_tokens": 4}},
    ))

    chunks = await read_all(create_stream(http_client, Provider.ANTHROPIC, "ak", options()))

    assert "".join(c.content for c in chunks) == "Hi there"
    assert chunks[-1].usage == {"promptTokens": 10, "completionTokens": 4, "totalTokens": 14}
    request = upstream.requests[0]
    assert request.headers["x-api-key"] == "ak"
    body = json.loads(request.content)
    assert body["system"] == "Be brief."
    assert all(m["role"] in ("user", "assistant") for m in body["messages"])


async def test_gemini_stream(upstream, http_client, sse):
    upstream.handler = lambda request: httpx.Response(200, content=sse(
        {"candidates": [{"content": {"parts": [{"text": "Hi"}]}}]},
        {"candidates": [{"content": {"parts": [{"text": " there"}]}}],
         "usageMetadata": {"promptTokenCount": 2, "candidatesTokenCount": 3, "totalTokenCount": 5}},
    ))

    chunks = await read_all(create_stream(http_client, Provider.GOOGLE, "gk", options(model="gemini-2.5-flash")))

    assert "".join(c.content for c in chunks) == "Hi there"
    assert chunks[-1].usage == {"promptTokens": 2, "completionTokens": 3, "totalTokens": 5}
    request = upstream.requests[0]
    assert request.url.path.endswith("/models/gemini-2.5-flash:streamGenerateContent")
    assert request.url.params["alt"] == "sse"
    body = json.loads(request.content)
    assert [c["role"] for c in body["contents"]] == ["user", "model", "user"]
    assert body["systemInstruction"] == {"parts": [{"text": "Be brief."}]}


async def test_error_status_raises_before_any_chunk(upstream, http_client):
    upstream.handler = lambda request: httpx.Response(401, text='{"error": "invalid key"}')
    stream = create_stream(http_client, Provider.OPENAI, "bad", options())

    with pytest.raises(UpstreamError) as excinfo:
        await stream.open_stream()

    assert excinfo.value.status_code == 401
    assert "invalid key" in str(excinfo.value)


async def test_transport_failure_is_upstream_error(upstream, http_client):
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    upstream.handler = refuse
    stream = create_stream(http_client, Provider.ANTHROPIC, "ak", options())

    with pytest.raises(UpstreamError) as excinfo:
        await stream.open_stream()

    assert excinfo.value.status_code is None


@pytest.mark.parametrize("provider,good,odd", [
    (Provider.OPENAI, {"choices": [{"delta": {"content": "ok"}}]}, {"choices": [1]}),
    (Provider.OPENAI, {"choices": [{"delta": {"content": "ok"}}]}, {"usage": "x"}),
    (Provider.ANTHROPIC, {"type": "content_block_delta", "delta": {"text": "ok"}}, {"type": "content_block_delta", "delta": "x"}),
    (Provider.GOOGLE, {"candidates": [{"content": {"parts": [{"text": "ok"}]}}]}, {"candidates": ["oops"]}),
])
async def test_wrongly_shaped_events_are_skipped(upstream, http_client, sse, provider, good, odd):
    upstream.handler = lambda request: httpx.Response(200, content=sse(good, odd, good))

    chunks = await read_all(create_stream(http_client, provider, "key", options()))

    assert [c.content for c in chunks] == ["ok", "ok"]
