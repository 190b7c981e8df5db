# ============================================================================
# FILE: tests/unit/test_llm_client.py
# ============================================================================
"""
Unit tests for the OpenAI completion collaborator
"""

from types import SimpleNamespace

import httpx
import openai
import pytest

from domain.errors import (
    CollaboratorUnavailableError,
    MalformedResponseError,
    MissingCredentialError,
    RateLimitedError,
)
from extraction.llm_client import CompletionOptions, OpenAICompletion

_REQUEST = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")


def _status_error(cls, status):
    return cls(f"HTTP {status}", response=httpx.Response(status, request=_REQUEST), body=None)


def _response(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


class FakeChat:
    """Stands in for `OpenAI().chat.completions`."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def _completion(*outcomes):
    chat = FakeChat(*outcomes)
    client = SimpleNamespace(chat=SimpleNamespace(completions=chat))
    return OpenAICompletion(client=client, model="gpt-4o-mini"), chat


def test_complete_sends_json_mode_request():
    completion, chat = _completion(_response('{"offers": []}'))

    raw = completion.complete("system", "user", CompletionOptions(temperature=0.05, max_output_tokens=3000))

    assert raw == '{"offers": []}'
    call = chat.calls[0]
    assert call["model"] == "gpt-4o-mini"
    assert call["temperature"] == 0.05
    assert call["max_tokens"] == 3000
    assert call["response_format"] == {"type": "json_object"}
    assert call["messages"] == [
        {"role": "system", "content": "system"},
        {"role": "user", "content": "user"},
    ]


def test_plain_mode_omits_response_format():
    completion, chat = _completion(_response("{}"))

    completion.complete("s", "u", CompletionOptions(structured_output=False))
    assert "response_format" not in chat.calls[0]


def test_json_mode_rejection_retries_without_it():
    completion, chat = _completion(_status_error(openai.BadRequestError, 400), _response('{"fournisseur": "EDF"}'))

    assert completion.complete("s", "u", CompletionOptions()) == '{"fournisseur": "EDF"}'
    assert len(chat.calls) == 2
    assert "response_format" not in chat.calls[1]


def test_rate_limit_is_mapped():
    completion, _ = _completion(_status_error(openai.RateLimitError, 429))

    with pytest.raises(RateLimitedError):
        completion.complete("s", "u", CompletionOptions())


def test_rate_limit_is_a_collaborator_failure():
    assert issubclass(RateLimitedError, CollaboratorUnavailableError)


@pytest.mark.parametrize(
    "error",
    [
        openai.APIConnectionError(request=_REQUEST),
        _status_error(openai.InternalServerError, 502),
    ],
)
def test_transport_errors_are_mapped(error):
    completion, _ = _completion(error)

    with pytest.raises(CollaboratorUnavailableError):
        completion.complete("s", "u", CompletionOptions())


@pytest.mark.parametrize("response", [_response(None), _response(""), SimpleNamespace(choices=[])])
def test_empty_output_is_malformed(response):
    completion, _ = _completion(response)

    with pytest.raises(MalformedResponseError):
        completion.complete("s", "u", CompletionOptions())


def test_missing_api_key(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)

    with pytest.raises(MissingCredentialError):
        OpenAICompletion().ensure_configured()


def test_api_key_from_environment(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    OpenAICompletion().ensure_configured()


def test_injected_client_counts_as_configured(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    completion, _ = _completion()
    completion.ensure_configured()
