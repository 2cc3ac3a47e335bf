import io
import json

import httpx
import pytest

from mentor.adapters.llm_client import (
    BedrockClaudeGenerator,
    NullTextGenerator,
    OpenAIChatGenerator,
    ProviderError,
    ProviderUnavailable,
    build_text_generator,
)
from mentor.core.config import Settings

pytestmark = pytest.mark.anyio("asyncio")


def _settings(**overrides):
    settings = Settings()
    settings.llm_backend = "openai"
    settings.aws_access_key_id = None
    settings.aws_secret_access_key = None
    for key, value in overrides.items():
        setattr(settings, key, value)
    return settings


def _generator(handler):
    return OpenAIChatGenerator(
        "sk-test", "gpt-4o-mini", api_url="https://llm.test/v1/chat", transport=httpx.MockTransport(handler)
    )


def test_missing_credential_selects_null_provider():
    generator = build_text_generator("", "gpt-4o-mini", _settings())

    assert isinstance(generator, NullTextGenerator)
    assert generator.name == "null"


def test_credential_selects_openai_provider():
    generator = build_text_generator("sk-live", "gpt-4o-mini", _settings(llm_api_url="https://llm.test/v1/chat"))

    assert isinstance(generator, OpenAIChatGenerator)
    assert generator.model == "gpt-4o-mini"
    assert generator.api_url == "https://llm.test/v1/chat"


def test_bedrock_backend_needs_aws_keys():
    assert isinstance(build_text_generator("sk-live", "m", _settings(llm_backend="bedrock")), NullTextGenerator)

    generator = build_text_generator(
        "", "m", _settings(llm_backend="bedrock", aws_access_key_id="AKIA", aws_secret_access_key="secret")
    )
    assert isinstance(generator, BedrockClaudeGenerator)


async def test_null_provider_raises_unavailable():
    with pytest.raises(ProviderUnavailable):
        await NullTextGenerator().complete("system", "prompt")


async def test_openai_returns_message_content():
    generator = _generator(lambda request: httpx.Response(200, json={"choices": [{"message": {"content": "hello"}}]}))

    assert await generator.complete("system", "prompt") == "hello"


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(401, json={"error": "bad key"}),
        httpx.Response(200, json={"choices": []}),
        httpx.Response(200, json={"choices": [{"message": {"content": "   "}}]}),
        httpx.Response(200, text="not json"),
    ],
)
async def test_openai_bad_answers_raise_provider_error(response):
    generator = _generator(lambda request: response)

    with pytest.raises(ProviderError):
        await generator.complete("system", "prompt")


async def test_openai_transport_failure_raises_provider_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(ProviderError):
        await _generator(handler).complete("system", "prompt")


class FakeBedrock:
    def __init__(self, payload):
        self.payload = payload
        self.calls = []

    def invoke_model(self, **kwargs):
        self.calls.append(kwargs)
        return {"body": io.BytesIO(json.dumps(self.payload).encode("utf-8"))}


async def test_bedrock_joins_text_blocks():
    client = FakeBedrock({"content": [{"type": "text", "text": '{"a": '}, {"type": "text", "text": "1}"}]})
    generator = BedrockClaudeGenerator(_settings(bedrock_model_id="anthropic.test"), client=client)

    text = await generator.complete("be brief", "prompt", max_tokens=100, temperature=0.2)

    assert text == '{"a": 1}'
    body = json.loads(client.calls[0]["body"])
    assert client.calls[0]["modelId"] == "anthropic.test"
    assert body["system"] == "be brief"
    assert body["max_tokens"] == 100


async def test_bedrock_empty_content_raises():
    generator = BedrockClaudeGenerator(_settings(), client=FakeBedrock({"content": []}))

    with pytest.raises(ProviderError):
        await generator.complete("system", "prompt")
