import asyncio
import json

import httpx
import pytest
from backend.tourbot.llm_client import (
    GeneratorAuthError,
    GeneratorNotConfigured,
    GeneratorRateLimited,
    GeneratorUnavailable,
    OpenAICompatibleGenerator,
)
from backend.tourbot.settings import Settings


def _config(**overrides):
    values = {"LLM_API_KEY": "test-key", "APP_PUBLIC_URL": "http://frontend.test"}
    values.update(overrides)
    return Settings(_env_file=None, **values)


def _run(generator, system="system", user="user"):
    async def scenario():
        try:
            return await generator.generate(system, user)
        finally:
            await generator.aclose()

    return asyncio.run(scenario())


def _completion(content):
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def test_generate_posts_chat_completion():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["headers"] = request.headers
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=_completion("  Chào bạn!  "))

    generator = OpenAICompatibleGenerator(_config(), transport=httpx.MockTransport(handler))
    assert _run(generator, "be nice", "hello") == "Chào bạn!"

    assert seen["url"] == "https://openrouter.ai/api/v1/chat/completions"
    assert seen["headers"]["Authorization"] == "Bearer test-key"
    assert seen["headers"]["HTTP-Referer"] == "http://frontend.test"
    assert seen["headers"]["X-Title"]
    body = seen["body"]
    assert body["model"] == "google/gemma-2-9b-it"
    assert body["messages"] == [
        {"role": "system", "content": "be nice"},
        {"role": "user", "content": "hello"},
    ]


def test_non_openrouter_provider_skips_extra_headers():
    seen = {}

    def handler(request):
        seen["headers"] = request.headers
        return httpx.Response(200, json=_completion("ok"))

    config = _config(LLM_PROVIDER="openai", LLM_BASE_URL="https://api.example.test/v1/")
    generator = OpenAICompatibleGenerator(config, transport=httpx.MockTransport(handler))
    assert _run(generator) == "ok"
    assert "HTTP-Referer" not in seen["headers"]


def test_missing_key_fails_before_any_request():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json=_completion("never"))

    generator = OpenAICompatibleGenerator(
        _config(LLM_API_KEY=None), transport=httpx.MockTransport(handler)
    )
    assert not generator.configured
    with pytest.raises(GeneratorNotConfigured):
        _run(generator)
    assert calls == []


@pytest.mark.parametrize(
    "status, error",
    [
        (401, GeneratorAuthError),
        (403, GeneratorAuthError),
        (429, GeneratorRateLimited),
        (500, GeneratorUnavailable),
        (404, GeneratorUnavailable),
    ],
)
def test_http_errors_are_classified(status, error):
    def handler(request):
        return httpx.Response(status, text="upstream said no")

    generator = OpenAICompatibleGenerator(_config(), transport=httpx.MockTransport(handler))
    with pytest.raises(error) as excinfo:
        _run(generator)
    assert excinfo.value.status == status
    assert excinfo.value.detail == "upstream said no"


def test_transport_failure_is_unavailable():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    generator = OpenAICompatibleGenerator(_config(), transport=httpx.MockTransport(handler))
    with pytest.raises(GeneratorUnavailable):
        _run(generator)


def test_invalid_json_is_unavailable():
    def handler(request):
        return httpx.Response(200, text="<html>oops</html>")

    generator = OpenAICompatibleGenerator(_config(), transport=httpx.MockTransport(handler))
    with pytest.raises(GeneratorUnavailable):
        _run(generator)


@pytest.mark.parametrize("payload", [{"choices": []}, _completion(None), {}])
def test_missing_content_is_empty_reply(payload):
    def handler(request):
        return httpx.Response(200, json=payload)

    generator = OpenAICompatibleGenerator(_config(), transport=httpx.MockTransport(handler))
    assert _run(generator) == ""
