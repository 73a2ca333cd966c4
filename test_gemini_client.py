import pytest

import httpx
from google.genai import errors as genai_errors

import gemini_client
from compliance_states import QuickCheckResult
from error_handler import ConfigurationError, ExternalApiError
from gemini_client import GeminiClient


class FakeResponse:
    def __init__(self, text):
        self.text = text


class FakeModels:
    def __init__(self, outcome):
        self.outcome = outcome
        self.calls = []

    async def generate_content(self, model, contents, config):
        self.calls.append({"model": model, "contents": contents, "config": config})
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return FakeResponse(self.outcome)


class FakeAio:
    def __init__(self, outcome):
        self.models = FakeModels(outcome)
        self.closed = False

    async def aclose(self):
        self.closed = True


class FakeGenaiClient:
    outcome = '{"safe": true, "concerns": [], "confidence": 100}'
    instances = []

    def __init__(self, api_key):
        self.api_key = api_key
        self.aio = FakeAio(FakeGenaiClient.outcome)
        FakeGenaiClient.instances.append(self)


@pytest.fixture
def fake_genai(monkeypatch):
    FakeGenaiClient.instances = []
    monkeypatch.setattr(gemini_client.genai, "Client", FakeGenaiClient)
    return FakeGenaiClient


class TestLifecycle:
    def test_sdk_async_client_supports_aclose(self):
        from google.genai.client import AsyncClient

        assert callable(getattr(AsyncClient, "aclose", None))

    def test_missing_key_is_configuration_error(self):
        client = GeminiClient(api_key="")
        with pytest.raises(ConfigurationError):
            client.check_credentials()
        with pytest.raises(ConfigurationError):
            client.open()

    @pytest.mark.asyncio
    async def test_context_manager_opens_and_closes(self, fake_genai):
        async with GeminiClient(api_key="test-key", model="gemini-test") as client:
            assert client.is_open
            assert fake_genai.instances[0].api_key == "test-key"
        assert not client.is_open
        assert fake_genai.instances[0].aio.closed

    @pytest.mark.asyncio
    async def test_generate_requires_open_client(self, fake_genai):
        client = GeminiClient(api_key="test-key")
        with pytest.raises(ConfigurationError):
            await client.generate_structured("prompt", QuickCheckResult)
        assert fake_genai.instances == []


class TestGenerateStructured:
    @pytest.mark.asyncio
    async def test_validates_json_against_schema(self, fake_genai):
        client = GeminiClient(api_key="test-key", model="gemini-test", temperature=0.1).open()
        result = await client.generate_structured("prompt", QuickCheckResult, system_instruction="be strict")

        assert result == QuickCheckResult(safe=True, concerns=[], confidence=100)
        call = fake_genai.instances[0].aio.models.calls[0]
        assert call["model"] == "gemini-test"
        assert call["config"].response_mime_type == "application/json"
        assert call["config"].temperature == 0.1
        await client.aclose()

    @pytest.mark.asyncio
    async def test_server_error_becomes_retryable(self, fake_genai, monkeypatch):
        monkeypatch.setattr(
            FakeGenaiClient,
            "outcome",
            genai_errors.ServerError(503, {"error": {"message": "overloaded", "status": "UNAVAILABLE"}}),
        )
        client = GeminiClient(api_key="test-key").open()
        with pytest.raises(ExternalApiError) as exc_info:
            await client.generate_structured("prompt", QuickCheckResult)
        assert exc_info.value.retryable is True
        assert exc_info.value.status_code == 503
        assert str(exc_info.value).startswith("Failed to communicate with Gemini")

    @pytest.mark.asyncio
    async def test_client_error_is_not_retryable(self, fake_genai, monkeypatch):
        monkeypatch.setattr(
            FakeGenaiClient,
            "outcome",
            genai_errors.ClientError(400, {"error": {"message": "bad request", "status": "INVALID_ARGUMENT"}}),
        )
        client = GeminiClient(api_key="test-key").open()
        with pytest.raises(ExternalApiError) as exc_info:
            await client.generate_structured("prompt", QuickCheckResult)
        assert exc_info.value.retryable is False

    @pytest.mark.asyncio
    async def test_timeout_becomes_retryable(self, fake_genai, monkeypatch):
        monkeypatch.setattr(FakeGenaiClient, "outcome", httpx.ReadTimeout("read timed out"))
        client = GeminiClient(api_key="test-key").open()
        with pytest.raises(ExternalApiError) as exc_info:
            await client.generate_structured("prompt", QuickCheckResult)
        assert exc_info.value.retryable is True
