import pytest

import httpx
from google.genai import errors as genai_errors

from error_handler import (
    ConfigurationError,
    ErrorCode,
    ExternalApiError,
    GenerationFailedError,
    RequestValidationError,
    handle_compliance_error,
    handle_external_api_error,
    handle_generation_error,
    handle_validation_error,
    is_retryable_error,
    retry_with_backoff,
)


class SleepRecorder:
    def __init__(self):
        self.delays = []

    async def __call__(self, seconds):
        self.delays.append(seconds)


def flaky(failures, error_factory, value="ok"):
    calls = {"count": 0}

    async def fn():
        calls["count"] += 1
        if calls["count"] <= failures:
            raise error_factory()
        return value

    return fn, calls


class TestRetryWithBackoff:
    @pytest.mark.asyncio
    async def test_delays_double_and_last_error_is_raised(self):
        sleep = SleepRecorder()
        fn, calls = flaky(10, lambda: ExternalApiError("Gemini", "overloaded", status_code=503, retryable=True))

        with pytest.raises(ExternalApiError) as exc_info:
            await retry_with_backoff(fn, max_retries=3, initial_delay=1.0, sleep=sleep)

        assert calls["count"] == 3
        assert sleep.delays == [1.0, 2.0]
        assert exc_info.value.status_code == 503

    @pytest.mark.asyncio
    async def test_recovers_after_transient_failure(self):
        sleep = SleepRecorder()
        fn, calls = flaky(1, lambda: httpx.ConnectTimeout("timed out"))

        assert await retry_with_backoff(fn, max_retries=2, initial_delay=0.5, sleep=sleep) == "ok"
        assert calls["count"] == 2
        assert sleep.delays == [0.5]

    @pytest.mark.asyncio
    async def test_non_retryable_fails_immediately(self):
        sleep = SleepRecorder()
        fn, calls = flaky(5, lambda: ValueError("bad schema"))

        with pytest.raises(ValueError):
            await retry_with_backoff(fn, max_retries=3, sleep=sleep)

        assert calls["count"] == 1
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_zero_budget_still_attempts_once(self):
        sleep = SleepRecorder()
        fn, calls = flaky(0, lambda: ValueError("unused"))

        assert await retry_with_backoff(fn, max_retries=0, sleep=sleep) == "ok"
        assert calls["count"] == 1


class TestClassification:
    def test_external_api_error_uses_flag(self):
        assert is_retryable_error(ExternalApiError("Gemini", "x", retryable=True))
        assert not is_retryable_error(ExternalApiError("Gemini", "x", status_code=400))

    @pytest.mark.parametrize("code,expected", [(408, True), (429, True), (500, True), (503, True), (400, False), (404, False)])
    def test_genai_status_codes(self, code, expected):
        error = genai_errors.APIError(code, {"error": {"message": "boom", "status": "X"}})
        assert is_retryable_error(error) is expected

    def test_transport_errors(self):
        assert is_retryable_error(httpx.ReadTimeout("slow"))
        assert is_retryable_error(httpx.ConnectError("refused"))
        assert is_retryable_error(TimeoutError())
        assert is_retryable_error(ConnectionResetError())

    def test_other_errors(self):
        assert not is_retryable_error(ValueError("nope"))
        assert not is_retryable_error(ConfigurationError("missing key"))


class TestErrorKinds:
    def test_validation_error_lists_everything(self):
        error = handle_validation_error(["Ad copy is required", "Locale is required"], "compliance check request")
        assert isinstance(error, RequestValidationError)
        assert error.errors == ["Ad copy is required", "Locale is required"]
        assert str(error) == (
            "Validation failed for compliance check request: Ad copy is required, Locale is required"
        )
        assert error.code == ErrorCode.VALIDATION_ERROR
        assert error.status == "BAD_REQUEST"

    def test_generation_error_names_stage(self):
        error = handle_generation_error(RuntimeError("quota"), "AI compliance analysis for google in en-US")
        assert isinstance(error, GenerationFailedError)
        assert str(error) == "Ad generation failed at AI compliance analysis for google in en-US: quota"
        assert error.status == "INTERNAL_SERVER_ERROR"

    def test_external_api_error(self):
        error = handle_external_api_error(httpx.ReadTimeout("slow"), "Gemini")
        assert str(error) == "Failed to communicate with Gemini: slow"
        assert error.retryable is True
        assert ExternalApiError("Gemini", "x", status_code=429).is_rate_limit

    def test_compliance_error(self):
        error = handle_compliance_error(ValueError("bad"), "meta")
        assert str(error) == "Compliance check failed for meta: bad"
        assert error.code == ErrorCode.COMPLIANCE_VIOLATION
