"""Wire-level tests for chat providers using httpx.MockTransport."""
import json

import httpx
import pytest
from pydantic import SecretStr

from article_digest.errors import (
    BackendError,
    ConfigurationError,
    EmptyResponseError,
    NetworkError,
)
from article_digest.generation.providers import OpenRouterProvider, YandexGPTProvider
from article_digest.generation.types import GenerationConfig, Message

MESSAGES = [Message.system("system text"), Message.user("user text")]


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it served."""

    def __init__(self, handler):
        self.requests = []

        def record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(record)


def yandex_reply(text):
    return {"result": {"alternatives": [{"message": {"role": "assistant", "text": text}}]}}


def openrouter_reply(content):
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def make_yandex(transport, api_key="yc-key", folder_id="b1gfolder"):
    return YandexGPTProvider(
        api_key=SecretStr(api_key) if api_key else None,
        folder_id=folder_id,
        transport=transport,
    )


def make_openrouter(transport, api_key="or-key"):
    return OpenRouterProvider(
        api_key=SecretStr(api_key) if api_key else None,
        app_url="https://digest.example",
        transport=transport,
    )


class TestYandexGPTProvider:
    @pytest.mark.asyncio
    async def test_successful_completion(self):
        transport = RecordingTransport(lambda r: httpx.Response(200, json=yandex_reply("Hello")))
        provider = make_yandex(transport)

        result = await provider.complete(
            MESSAGES, GenerationConfig(temperature=0.3, max_output_tokens=500)
        )

        assert result.content == "Hello"
        assert result.backend == "yandex"
        assert result.model == "yandexgpt/latest"

        request = transport.requests[0]
        assert request.method == "POST"
        assert str(request.url) == "https://llm.api.cloud.yandex.net/foundationModels/v1/completion"
        assert request.headers["Authorization"] == "Api-Key yc-key"
        assert request.headers["x-folder-id"] == "b1gfolder"

        payload = json.loads(request.content)
        assert payload["modelUri"] == "gpt://b1gfolder/yandexgpt/latest"
        assert payload["completionOptions"] == {
            "stream": False,
            "temperature": 0.3,
            "maxTokens": 500,
        }
        assert payload["messages"] == [
            {"role": "system", "text": "system text"},
            {"role": "user", "text": "user text"},
        ]

    @pytest.mark.asyncio
    async def test_config_model_overrides_default(self):
        transport = RecordingTransport(lambda r: httpx.Response(200, json=yandex_reply("ok")))
        provider = make_yandex(transport)

        result = await provider.complete(MESSAGES, GenerationConfig(model="yandexgpt-lite/latest"))

        payload = json.loads(transport.requests[0].content)
        assert payload["modelUri"] == "gpt://b1gfolder/yandexgpt-lite/latest"
        assert result.model == "yandexgpt-lite/latest"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("api_key,folder_id", [(None, "folder"), ("key", None), ("", "folder")])
    async def test_missing_credentials_fail_without_request(self, api_key, folder_id):
        transport = RecordingTransport(lambda r: httpx.Response(200, json=yandex_reply("x")))
        provider = make_yandex(transport, api_key=api_key, folder_id=folder_id)

        with pytest.raises(ConfigurationError):
            await provider.complete(MESSAGES, GenerationConfig())

        assert transport.requests == []

    @pytest.mark.asyncio
    async def test_non_2xx_raises_backend_error(self):
        transport = RecordingTransport(
            lambda r: httpx.Response(429, json={"message": "Quota exceeded"})
        )
        provider = make_yandex(transport)

        with pytest.raises(BackendError) as exc_info:
            await provider.complete(MESSAGES, GenerationConfig())

        assert exc_info.value.status_code == 429
        assert exc_info.value.backend_message == "Quota exceeded"
        assert exc_info.value.backend == "yandex"

    @pytest.mark.asyncio
    async def test_non_2xx_without_json_body(self):
        transport = RecordingTransport(lambda r: httpx.Response(502, text="<html>Bad gateway</html>"))
        provider = make_yandex(transport)

        with pytest.raises(BackendError) as exc_info:
            await provider.complete(MESSAGES, GenerationConfig())

        assert exc_info.value.status_code == 502
        assert exc_info.value.backend_message

    @pytest.mark.asyncio
    async def test_malformed_success_body_raises_backend_error(self):
        transport = RecordingTransport(lambda r: httpx.Response(200, text="not json"))
        provider = make_yandex(transport)

        with pytest.raises(BackendError):
            await provider.complete(MESSAGES, GenerationConfig())

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [{}, {"result": {"alternatives": []}}, yandex_reply(""), yandex_reply(None)],
    )
    async def test_missing_text_raises_empty_response(self, body):
        transport = RecordingTransport(lambda r: httpx.Response(200, json=body))
        provider = make_yandex(transport)

        with pytest.raises(EmptyResponseError):
            await provider.complete(MESSAGES, GenerationConfig())

    @pytest.mark.asyncio
    async def test_connect_error_raises_network_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        provider = make_yandex(RecordingTransport(handler))

        with pytest.raises(NetworkError) as exc_info:
            await provider.complete(MESSAGES, GenerationConfig())

        assert exc_info.value.timeout is False

    @pytest.mark.asyncio
    async def test_timeout_raises_network_error_with_flag(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        provider = make_yandex(RecordingTransport(handler))

        with pytest.raises(NetworkError) as exc_info:
            await provider.complete(MESSAGES, GenerationConfig())

        assert exc_info.value.timeout is True


class TestOpenRouterProvider:
    @pytest.mark.asyncio
    async def test_successful_completion(self):
        transport = RecordingTransport(lambda r: httpx.Response(200, json=openrouter_reply("Hi")))
        provider = make_openrouter(transport)

        result = await provider.complete(
            MESSAGES, GenerationConfig(backend="openrouter", max_output_tokens=123)
        )

        assert result.content == "Hi"
        assert result.backend == "openrouter"
        assert result.model == "deepseek/deepseek-chat"

        request = transport.requests[0]
        assert str(request.url) == "https://openrouter.ai/api/v1/chat/completions"
        assert request.headers["Authorization"] == "Bearer or-key"
        assert request.headers["HTTP-Referer"] == "https://digest.example"

        payload = json.loads(request.content)
        assert payload == {
            "model": "deepseek/deepseek-chat",
            "messages": [
                {"role": "system", "content": "system text"},
                {"role": "user", "content": "user text"},
            ],
            "temperature": 0.6,
            "max_tokens": 123,
        }

    @pytest.mark.asyncio
    async def test_missing_api_key_fails_without_request(self):
        transport = RecordingTransport(lambda r: httpx.Response(200, json=openrouter_reply("x")))
        provider = make_openrouter(transport, api_key=None)

        with pytest.raises(ConfigurationError):
            await provider.complete(MESSAGES, GenerationConfig())

        assert transport.requests == []

    @pytest.mark.asyncio
    async def test_error_message_is_read_from_error_object(self):
        transport = RecordingTransport(
            lambda r: httpx.Response(402, json={"error": {"message": "Insufficient credits"}})
        )
        provider = make_openrouter(transport)

        with pytest.raises(BackendError) as exc_info:
            await provider.complete(MESSAGES, GenerationConfig())

        assert exc_info.value.status_code == 402
        assert exc_info.value.backend_message == "Insufficient credits"
        assert "openrouter API error: 402" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_empty_choices_raise_empty_response(self):
        transport = RecordingTransport(lambda r: httpx.Response(200, json={"choices": []}))
        provider = make_openrouter(transport)

        with pytest.raises(EmptyResponseError):
            await provider.complete(MESSAGES, GenerationConfig())
