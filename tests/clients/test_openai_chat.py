from types import SimpleNamespace

import httpx
import pytest
from openai import APIConnectionError, AuthenticationError, RateLimitError

from app.clients.openai_chat import OpenAIChatClient
from app.services.enrichment.errors import ProviderQuotaExceeded, UnknownProviderError

OPENAI_URL = "https://api.openai.com/v1/chat/completions"


class FakeCompletions:
    def __init__(self, outcome):
        self.outcome = outcome
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return self.outcome


def _client(outcome):
    completions = FakeCompletions(outcome)
    fake = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    return OpenAIChatClient("sk-test", model="gpt-4o-mini", client=fake), completions


def _response(content, total_tokens=321):
    message = SimpleNamespace(content=content)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)], usage=SimpleNamespace(total_tokens=total_tokens))


def _http_response(status: int) -> httpx.Response:
    return httpx.Response(status, request=httpx.Request("POST", OPENAI_URL))


def test_complete_sends_system_and_user_messages():
    client, completions = _client(_response('  {"summary": "ok"}  '))

    completion = client.complete(system_prompt="system", user_prompt="user", temperature=0.1)

    assert completion.text == '{"summary": "ok"}'
    assert completion.total_tokens == 321
    call = completions.calls[0]
    assert call["model"] == "gpt-4o-mini"
    assert call["temperature"] == 0.1
    assert [message["role"] for message in call["messages"]] == ["system", "user"]


def test_rate_limit_maps_to_quota_error():
    error = RateLimitError("You exceeded your current quota", response=_http_response(429), body=None)
    client, _ = _client(error)

    with pytest.raises(ProviderQuotaExceeded) as excinfo:
        client.complete(system_prompt="s", user_prompt="u", temperature=0.1)
    assert excinfo.value.provider == "openai"
    assert excinfo.value.code == "429_PROVIDER_QUOTA"


def test_auth_failure_maps_to_unknown_provider_error():
    error = AuthenticationError("Incorrect API key provided", response=_http_response(401), body=None)
    client, _ = _client(error)

    with pytest.raises(UnknownProviderError):
        client.complete(system_prompt="s", user_prompt="u", temperature=0.1)


def test_connection_failure_maps_to_unknown_provider_error():
    client, _ = _client(APIConnectionError(request=httpx.Request("POST", OPENAI_URL)))

    with pytest.raises(UnknownProviderError):
        client.complete(system_prompt="s", user_prompt="u", temperature=0.1)


@pytest.mark.parametrize("content", ["", "   ", None])
def test_empty_response_is_an_error(content):
    client, _ = _client(_response(content))

    with pytest.raises(UnknownProviderError) as excinfo:
        client.complete(system_prompt="s", user_prompt="u", temperature=0.1)
    assert str(excinfo.value) == "Empty response from AI"


def test_missing_api_key_is_rejected():
    with pytest.raises(ValueError):
        OpenAIChatClient("")
