"""
Gemini structured-generation client.

Owned by whoever constructs it and passed into the compliance service, so the
API key check, connection setup and teardown are explicit.
"""
from __future__ import annotations

import logging
from typing import Optional, Protocol, Type, TypeVar

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types
from pydantic import BaseModel

from error_handler import RETRYABLE_STATUS_CODES, ConfigurationError, ExternalApiError
from settings import settings

logger = logging.getLogger(__name__)

API_NAME = "Gemini"

M = TypeVar("M", bound=BaseModel)


class StructuredGenerator(Protocol):
    async def generate_structured(
        self,
        prompt: str,
        schema: Type[M],
        system_instruction: Optional[str] = None,
    ) -> M:
        ...


class GeminiClient:
    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.GOOGLE_API_KEY
        self.model = model or settings.MODEL_ID
        self.temperature = settings.AI_TEMPERATURE if temperature is None else temperature
        self._client: Optional[genai.Client] = None

    @property
    def is_open(self) -> bool:
        return self._client is not None

    def check_credentials(self) -> None:
        if not self.api_key:
            raise ConfigurationError("GOOGLE_API_KEY is not configured; AI compliance analysis is unavailable")

    def open(self) -> "GeminiClient":
        if self._client is None:
            self.check_credentials()
            self._client = genai.Client(api_key=self.api_key)
            logger.info(f"Initialized Gemini client for model {self.model}")
        return self

    async def aclose(self) -> None:
        client, self._client = self._client, None
        if client is not None:
            await client.aio.aclose()
            logger.info("Closed Gemini client")

    async def __aenter__(self) -> "GeminiClient":
        return self.open()

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def generate_structured(
        self,
        prompt: str,
        schema: Type[M],
        system_instruction: Optional[str] = None,
    ) -> M:
        """
        Ask the model for JSON matching schema and validate it.

        Transport failures become ExternalApiError (flagged retryable when
        transient); a response that does not fit the schema raises pydantic's
        ValidationError.
        """
        client = self._client
        if client is None:
            raise ConfigurationError("Gemini client is not open; call open() or use 'async with'")
        config = types.GenerateContentConfig(
            system_instruction=system_instruction,
            temperature=self.temperature,
            response_mime_type="application/json",
            response_schema=schema,
        )
        try:
            response = await client.aio.models.generate_content(
                model=self.model,
                contents=prompt,
                config=config,
            )
        except genai_errors.APIError as e:
            code = e.code or 0
            retryable = code in RETRYABLE_STATUS_CODES or code >= 500
            raise ExternalApiError(API_NAME, e.message or str(e), status_code=e.code, retryable=retryable) from e
        except (httpx.TimeoutException, httpx.NetworkError) as e:
            raise ExternalApiError(API_NAME, str(e) or type(e).__name__, retryable=True) from e

        return schema.model_validate_json(response.text or "")
