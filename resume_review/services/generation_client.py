"""Generation API clients (Gemini REST via httpx, or OpenAI SDK) with rate-limit backoff."""

import asyncio
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Optional

import httpx
from openai import APIConnectionError, APIStatusError, AsyncOpenAI, RateLimitError

from config import (
    GEMINI_API_BASE,
    GEMINI_API_KEY,
    GEMINI_MODEL,
    GENERATION_MAX_OUTPUT_TOKENS,
    GENERATION_TEMPERATURE,
    GENERATION_TOP_K,
    GENERATION_TOP_P,
    HTTP_TIMEOUT_SECONDS,
    LLM_PROVIDER,
    MODEL_NAME,
    OPENAI_API_KEY,
    RATE_LIMIT_BASE_DELAY_SECONDS,
    RATE_LIMIT_MAX_RETRIES,
)
from errors import NetworkError, ParseError, RateLimitExhausted
from utils.logger import get_logger

logger = get_logger(__name__)

RATE_LIMIT_STATUS = 429

SleepFunc = Callable[[float], Awaitable[Any]]


class _Throttled(Exception):
    """A single attempt was rejected with a rate-limit signal."""


class GenerationClient(ABC):
    """
    Abstract text generation provider.
    generate() owns the retry policy: on throttling wait base_delay, doubling each
    retry, for at most max_retries retries; everything else fails immediately.
    """

    def __init__(
        self,
        max_retries: int = RATE_LIMIT_MAX_RETRIES,
        base_delay: float = RATE_LIMIT_BASE_DELAY_SECONDS,
        sleep: Optional[SleepFunc] = None,
    ) -> None:
        self._max_retries = max_retries
        self._base_delay = base_delay
        self._sleep = sleep or asyncio.sleep

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name used in logs."""
        ...

    @abstractmethod
    async def _generate_once(self, prompt: str) -> str:
        """Issue one request. Raise _Throttled on a rate-limit response."""
        ...

    async def generate(self, prompt: str) -> str:
        """Return the generated text for prompt, retrying on throttling."""
        delay = self._base_delay
        retries = 0
        while True:
            try:
                return await self._generate_once(prompt)
            except _Throttled as e:
                if retries >= self._max_retries:
                    logger.error(
                        "%s rate limit persisted after %s retries", self.name, retries
                    )
                    raise RateLimitExhausted(
                        f"{self.name} API rate limit exceeded after {retries} retries",
                        attempts=retries + 1,
                    ) from e
                retries += 1
                logger.warning(
                    "%s rate limit hit, retrying in %ss (retry %s/%s)",
                    self.name,
                    delay,
                    retries,
                    self._max_retries,
                )
                await self._sleep(delay)
                delay *= 2


class GeminiGenerationClient(GenerationClient):
    """Google Gemini generateContent REST endpoint."""

    def __init__(
        self,
        api_key: str = GEMINI_API_KEY,
        model: str = GEMINI_MODEL,
        base_url: str = GEMINI_API_BASE,
        timeout: Optional[float] = HTTP_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self._api_key = api_key
        self._model = model
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    @property
    def name(self) -> str:
        return "Gemini"

    @property
    def url(self) -> str:
        return f"{self._base_url}/models/{self._model}:generateContent"

    def build_payload(self, prompt: str) -> dict:
        return {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": GENERATION_TEMPERATURE,
                "topK": GENERATION_TOP_K,
                "topP": GENERATION_TOP_P,
                "maxOutputTokens": GENERATION_MAX_OUTPUT_TOKENS,
            },
        }

    async def _generate_once(self, prompt: str) -> str:
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(
                    self.url,
                    params={"key": self._api_key},
                    json=self.build_payload(prompt),
                )
        except httpx.RequestError as e:
            logger.error("Gemini request failed: %s", e)
            raise NetworkError(f"Gemini request failed: {e}") from e

        if response.status_code == RATE_LIMIT_STATUS:
            raise _Throttled()
        if response.is_error:
            logger.error("Gemini HTTP error: %s %s", response.status_code, response.text[:500])
            raise NetworkError(
                f"Gemini API error: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise ParseError("Invalid response from Gemini API") from e
        if not text:
            raise ParseError("Invalid response from Gemini API")
        return text


class OpenAIGenerationClient(GenerationClient):
    """OpenAI chat completions. The SDK's own retries are disabled; generate() retries."""

    def __init__(
        self,
        api_key: str = OPENAI_API_KEY,
        model: str = MODEL_NAME,
        client: Optional[AsyncOpenAI] = None,
        timeout: Optional[float] = HTTP_TIMEOUT_SECONDS,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self._api_key = api_key
        self._model = model
        self._client = client
        self._timeout = timeout

    @property
    def name(self) -> str:
        return "OpenAI"

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI(api_key=self._api_key, max_retries=0, timeout=self._timeout)
        return self._client

    async def _generate_once(self, prompt: str) -> str:
        try:
            response = await self._get_client().chat.completions.create(
                model=self._model,
                messages=[{"role": "user", "content": prompt}],
                temperature=GENERATION_TEMPERATURE,
                top_p=GENERATION_TOP_P,
                max_tokens=GENERATION_MAX_OUTPUT_TOKENS,
            )
        except RateLimitError as e:
            raise _Throttled() from e
        except APIStatusError as e:
            logger.error("OpenAI HTTP error: %s", e.status_code)
            raise NetworkError(f"OpenAI API error: {e.status_code}", status_code=e.status_code) from e
        except APIConnectionError as e:
            logger.error("OpenAI request failed: %s", e)
            raise NetworkError(f"OpenAI request failed: {e}") from e

        choice = response.choices[0] if response.choices else None
        if not choice or not choice.message or not choice.message.content:
            raise ParseError("Invalid response from OpenAI API")
        return choice.message.content


def get_generation_client(provider: Optional[str] = None, **kwargs: Any) -> GenerationClient:
    """
    Return the configured generation client (dependency injection).
    provider: override config; None uses LLM_PROVIDER.
    """
    p = (provider or LLM_PROVIDER).strip().lower()
    if p == "openai":
        if not OPENAI_API_KEY and "api_key" not in kwargs:
            logger.warning("OPENAI_API_KEY not set; falling back to Gemini")
            return GeminiGenerationClient(**kwargs)
        return OpenAIGenerationClient(**kwargs)
    return GeminiGenerationClient(**kwargs)
