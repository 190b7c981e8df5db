"""
OpenAI completion collaborator.

This module initializes environment variables (via dotenv) and wraps the
OpenAI chat completions API behind the small `complete(system, user, options)`
contract used by the extraction pipeline. SDK errors are mapped onto the
pipeline's error taxonomy so the caller never depends on openai exceptions.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional, Protocol

import openai
from dotenv import load_dotenv
from openai import OpenAI

from config import DEFAULT_MODEL, DEFAULT_TEMPERATURE, MAX_OUTPUT_TOKENS
from domain.errors import (
    CollaboratorUnavailableError,
    MalformedResponseError,
    MissingCredentialError,
    RateLimitedError,
)

load_dotenv()

logger = logging.getLogger(__name__)

_client: OpenAI | None = None


def get_client() -> OpenAI:
    """Return a singleton OpenAI client instance."""
    global _client
    if _client is None:
        _client = OpenAI()
    return _client


@dataclass(frozen=True)
class CompletionOptions:
    temperature: float = DEFAULT_TEMPERATURE
    max_output_tokens: int = MAX_OUTPUT_TOKENS
    structured_output: bool = True


class CompletionClient(Protocol):
    def ensure_configured(self) -> None: ...

    def complete(self, system_prompt: str, user_prompt: str, options: CompletionOptions) -> str: ...


class OpenAICompletion:
    """Chat-completion backed implementation of CompletionClient."""

    def __init__(self, client: Optional[OpenAI] = None, model: str = DEFAULT_MODEL):
        self._client = client
        self.model = model

    def ensure_configured(self) -> None:
        if self._client is None and not os.getenv("OPENAI_API_KEY"):
            raise MissingCredentialError("OPENAI_API_KEY is not configured")

    @property
    def client(self) -> OpenAI:
        if self._client is None:
            self._client = get_client()
        return self._client

    def _create(self, messages: list, options: CompletionOptions, json_mode: bool):
        kwargs = dict(
            model=self.model,
            messages=messages,
            temperature=options.temperature,
            max_tokens=options.max_output_tokens,
        )
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}
        return self.client.chat.completions.create(**kwargs)

    def complete(self, system_prompt: str, user_prompt: str, options: CompletionOptions) -> str:
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ]

        try:
            try:
                response = self._create(messages, options, json_mode=options.structured_output)
            except openai.BadRequestError:
                if not options.structured_output:
                    raise
                # some models reject response_format
                logger.warning("Model %s rejected JSON mode, retrying without it", self.model)
                response = self._create(messages, options, json_mode=False)
        except openai.RateLimitError as e:
            raise RateLimitedError(f"OpenAI rate limit: {e}") from e
        except (openai.APIConnectionError, openai.APIStatusError) as e:
            raise CollaboratorUnavailableError(f"OpenAI error: {e}") from e

        if not response.choices:
            raise MalformedResponseError("LLM returned no choices")

        raw_output = response.choices[0].message.content
        if not raw_output:
            raise MalformedResponseError("LLM returned empty response")
        return raw_output
