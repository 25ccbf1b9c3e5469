"""Tests for the generation clients and their rate-limit backoff."""

import asyncio
import json
from types import SimpleNamespace

import httpx
import pytest
from openai import APIStatusError, RateLimitError

from errors import NetworkError, ParseError, RateLimitExhausted
from services.generation_client import (
    GeminiGenerationClient,
    OpenAIGenerationClient,
    get_generation_client,
)

GEMINI_BASE = "https://gemini.test/v1beta"


def _gemini_reply(text: str) -> httpx.Response:
    return httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": text}]}}]})


def _gemini_client(handler, sleep, **kwargs) -> GeminiGenerationClient:
    return GeminiGenerationClient(
        api_key="test-key",
        model="test-model",
        base_url=GEMINI_BASE,
        transport=httpx.MockTransport(handler),
        sleep=sleep,
        **kwargs,
    )


def test_gemini_request_contract(recording_sleep):
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return _gemini_reply("hello")

    client = _gemini_client(handler, recording_sleep)
    assert asyncio.run(client.generate("Analyze this")) == "hello"

    request = seen[0]
    assert request.method == "POST"
    assert request.url.path == "/v1beta/models/test-model:generateContent"
    assert request.url.params["key"] == "test-key"
    body = json.loads(request.content)
    assert body["contents"] == [{"parts": [{"text": "Analyze this"}]}]
    assert body["generationConfig"] == {
        "temperature": 0.7,
        "topK": 40,
        "topP": 0.95,
        "maxOutputTokens": 2048,
    }
    assert recording_sleep.delays == []


def test_throttle_then_success_waits_base_delay_once(recording_sleep):
    responses = iter([httpx.Response(429), _gemini_reply("ok")])
    calls = []

    def handler(request):
        calls.append(request)
        return next(responses)

    client = _gemini_client(handler, recording_sleep, base_delay=5.0, max_retries=3)
    assert asyncio.run(client.generate("p")) == "ok"
    assert len(calls) == 2
    assert recording_sleep.delays == [5.0]


def test_persistent_throttling_stops_at_retry_ceiling(recording_sleep):
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(429)

    client = _gemini_client(handler, recording_sleep, base_delay=5.0, max_retries=3)
    with pytest.raises(RateLimitExhausted) as excinfo:
        asyncio.run(client.generate("p"))
    assert len(calls) == 4
    assert excinfo.value.attempts == 4
    assert recording_sleep.delays == [5.0, 10.0, 20.0]


def test_non_throttling_error_fails_without_retry(recording_sleep):
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(500)

    client = _gemini_client(handler, recording_sleep)
    with pytest.raises(NetworkError) as excinfo:
        asyncio.run(client.generate("p"))
    assert excinfo.value.status_code == 500
    assert len(calls) == 1
    assert recording_sleep.delays == []


def test_transport_failure_is_network_error(recording_sleep):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = _gemini_client(handler, recording_sleep)
    with pytest.raises(NetworkError):
        asyncio.run(client.generate("p"))
    assert recording_sleep.delays == []


@pytest.mark.parametrize(
    "payload",
    [{}, {"candidates": []}, {"candidates": [{"content": {"parts": [{"text": ""}]}}]}],
)
def test_missing_candidate_text_is_parse_error(recording_sleep, payload):
    client = _gemini_client(lambda request: httpx.Response(200, json=payload), recording_sleep)
    with pytest.raises(ParseError):
        asyncio.run(client.generate("p"))


def _openai_error(cls, status: int):
    response = httpx.Response(
        status, request=httpx.Request("POST", "https://api.openai.test/v1/chat/completions")
    )
    return cls("error", response=response, body=None)


class FakeCompletions:
    def __init__(self, outcomes):
        self._outcomes = list(outcomes)
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        outcome = self._outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        message = SimpleNamespace(content=outcome)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def _openai_client(outcomes, sleep, **kwargs):
    completions = FakeCompletions(outcomes)
    fake = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    client = OpenAIGenerationClient(api_key="k", model="gpt-test", client=fake, sleep=sleep, **kwargs)
    return client, completions


def test_openai_rate_limit_is_retried(recording_sleep):
    client, completions = _openai_client(
        [_openai_error(RateLimitError, 429), "done"], recording_sleep, base_delay=2.0
    )
    assert asyncio.run(client.generate("p")) == "done"
    assert recording_sleep.delays == [2.0]
    assert completions.calls[0]["model"] == "gpt-test"
    assert completions.calls[0]["messages"] == [{"role": "user", "content": "p"}]
    assert completions.calls[0]["temperature"] == 0.7


def test_openai_status_error_is_not_retried(recording_sleep):
    client, completions = _openai_client([_openai_error(APIStatusError, 401)], recording_sleep)
    with pytest.raises(NetworkError):
        asyncio.run(client.generate("p"))
    assert len(completions.calls) == 1
    assert recording_sleep.delays == []


def test_openai_exhausted_retries(recording_sleep):
    errors = [_openai_error(RateLimitError, 429) for _ in range(3)]
    client, completions = _openai_client(errors, recording_sleep, max_retries=2, base_delay=1.0)
    with pytest.raises(RateLimitExhausted):
        asyncio.run(client.generate("p"))
    assert len(completions.calls) == 3
    assert recording_sleep.delays == [1.0, 2.0]


def test_get_generation_client_selects_provider():
    assert isinstance(get_generation_client("gemini"), GeminiGenerationClient)
    assert isinstance(get_generation_client("OpenAI", api_key="k"), OpenAIGenerationClient)
