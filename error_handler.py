"""
Centralized error handling for the compliance engine.

Error kinds, retry classification, and the shared retry-with-backoff helper
used around every external call.
"""
from __future__ import annotations

import asyncio
import logging
import socket
from enum import Enum
from typing import Awaitable, Callable, List, Optional, TypeVar

import httpx
from google.genai import errors as genai_errors
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

RETRYABLE_STATUS_CODES = {408, 429}


class ErrorCode(str, Enum):
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    EXTERNAL_API_ERROR = "EXTERNAL_API_ERROR"
    COMPLIANCE_VIOLATION = "COMPLIANCE_VIOLATION"
    GENERATION_FAILED = "GENERATION_FAILED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# HTTP-style status names surfaced to API callers
STATUS_BY_CODE = {
    ErrorCode.VALIDATION_ERROR: "BAD_REQUEST",
    ErrorCode.NOT_FOUND: "NOT_FOUND",
    ErrorCode.UNAUTHORIZED: "UNAUTHORIZED",
    ErrorCode.FORBIDDEN: "FORBIDDEN",
    ErrorCode.RATE_LIMIT_EXCEEDED: "TOO_MANY_REQUESTS",
    ErrorCode.EXTERNAL_API_ERROR: "INTERNAL_SERVER_ERROR",
    ErrorCode.COMPLIANCE_VIOLATION: "BAD_REQUEST",
    ErrorCode.GENERATION_FAILED: "INTERNAL_SERVER_ERROR",
    ErrorCode.INTERNAL_ERROR: "INTERNAL_SERVER_ERROR",
}


class RizzAdsError(Exception):
    code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str, details: Optional[str] = None):
        self.message = message
        self.details = details
        super().__init__(message)

    @property
    def status(self) -> str:
        return STATUS_BY_CODE.get(self.code, "INTERNAL_SERVER_ERROR")

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}\n{self.details}"
        return self.message


class RequestValidationError(RizzAdsError):
    """Carries every violated constraint, not only the first one found."""

    code = ErrorCode.VALIDATION_ERROR

    def __init__(self, errors: List[str], context: Optional[str] = None):
        self.errors = list(errors)
        self.context = context
        joined = ", ".join(self.errors)
        if context:
            message = f"Validation failed for {context}: {joined}"
        else:
            message = f"Validation failed: {joined}"
        super().__init__(message)


class ExternalApiError(RizzAdsError):
    code = ErrorCode.EXTERNAL_API_ERROR

    def __init__(
        self,
        api_name: str,
        message: str,
        status_code: Optional[int] = None,
        retryable: bool = False,
    ):
        self.api_name = api_name
        self.status_code = status_code
        self.retryable = retryable
        super().__init__(f"Failed to communicate with {api_name}: {message}")

    @property
    def is_rate_limit(self) -> bool:
        return self.status_code == 429


class GenerationFailedError(RizzAdsError):
    code = ErrorCode.GENERATION_FAILED

    def __init__(self, stage: str, message: Optional[str] = None):
        self.stage = stage
        if message:
            text = f"Ad generation failed at {stage}: {message}"
        else:
            text = f"Ad generation failed at {stage}"
        super().__init__(text)


class ComplianceViolationError(RizzAdsError):
    code = ErrorCode.COMPLIANCE_VIOLATION


class ConfigurationError(RizzAdsError):
    code = ErrorCode.UNAUTHORIZED


def log_error(error: BaseException, context: str) -> None:
    logger.error(f"Error in {context}: {error}", exc_info=error)


def handle_validation_error(errors: List[str], context: Optional[str] = None) -> RequestValidationError:
    return RequestValidationError(errors, context)


def handle_external_api_error(error: BaseException, api_name: str) -> ExternalApiError:
    logger.error(f"External API Error ({api_name}): {error}")
    return ExternalApiError(api_name, str(error) or type(error).__name__, retryable=is_retryable_error(error))


def handle_generation_error(error: BaseException, stage: str) -> GenerationFailedError:
    logger.error(f"Generation Error ({stage}): {error}")
    return GenerationFailedError(stage, str(error) or type(error).__name__)


def handle_compliance_error(error: BaseException, context: Optional[str] = None) -> ComplianceViolationError:
    logger.error(f"Compliance Check Error: {error}")
    if context:
        return ComplianceViolationError(f"Compliance check failed for {context}: {error}")
    return ComplianceViolationError(f"Compliance check failed: {error}")


def is_retryable_error(error: BaseException) -> bool:
    """Transient transport failures are retryable; everything else fails on first occurrence."""
    if isinstance(error, ExternalApiError):
        return error.retryable
    if isinstance(error, genai_errors.APIError):
        code = error.code or 0
        return code in RETRYABLE_STATUS_CODES or code >= 500
    if isinstance(error, (httpx.TimeoutException, httpx.NetworkError)):
        return True
    if isinstance(error, (TimeoutError, asyncio.TimeoutError)):
        return True
    if isinstance(error, (ConnectionError, socket.gaierror)):
        return True
    return False


async def retry_with_backoff(
    fn: Callable[[], Awaitable[T]],
    max_retries: int = 3,
    initial_delay: float = 1.0,
    *,
    is_retryable: Callable[[BaseException], bool] = is_retryable_error,
    wait=None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """
    Await fn() up to max_retries times.

    Between attempts waits initial_delay * 2**attempt seconds (attempt counted
    from 0). A non-retryable error, or the last failure, is re-raised as is.
    """
    retrying = AsyncRetrying(
        stop=stop_after_attempt(max(1, max_retries)),
        wait=wait or wait_exponential(multiplier=initial_delay, exp_base=2, min=0),
        retry=retry_if_exception(is_retryable),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        sleep=sleep,
        reraise=True,
    )
    return await retrying(fn)
