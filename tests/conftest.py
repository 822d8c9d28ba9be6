"""Shared fixtures: a scripted LLM collaborator and sample sources."""

import json
import threading
import time

import pytest

from llm_client import LLMResponse
from sources import SourceFile

EMPTY_REVIEW = '{"issues": []}'

PASSWORD_SOURCE = '"""Settings."""\npassword = "hunter2"\n'
CLEAN_SOURCE = '"""Module constants."""\n\nVALUE = 1\n'


class FakeLLM:
    """
    Scripted LLM collaborator.

    *responses* maps a file path to what the call for that file returns: a
    raw response string, or an exception instance to raise. Files not listed
    get *default*. *delays* maps a path to seconds to sleep before answering.
    """

    def __init__(
        self,
        responses=None,
        default=EMPTY_REVIEW,
        delays=None,
        model="gemini-2.5-flash-lite",
        input_tokens=1000,
        output_tokens=200,
    ):
        self.responses = responses or {}
        self.default = default
        self.delays = delays or {}
        self.model = model
        self.input_tokens = input_tokens
        self.output_tokens = output_tokens
        self.prompts: list[str] = []
        self._lock = threading.Lock()

    def _path_for(self, prompt: str) -> str | None:
        for path in set(self.responses) | set(self.delays):
            if f"`{path}`" in prompt:
                return path
        return None

    def __call__(self, prompt: str) -> LLMResponse:
        with self._lock:
            self.prompts.append(prompt)
        path = self._path_for(prompt)
        if path in self.delays:
            time.sleep(self.delays[path])
        outcome = self.responses.get(path, self.default)
        if isinstance(outcome, Exception):
            raise outcome
        return LLMResponse(
            text=outcome,
            input_tokens=self.input_tokens,
            output_tokens=self.output_tokens,
            model=self.model,
        )


def ai_response(*issues: dict, **extra) -> str:
    """Serialize a well-formed LLM answer."""
    return json.dumps({"issues": list(issues), **extra})


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def password_file():
    return SourceFile("app/settings.py", PASSWORD_SOURCE, "python")


@pytest.fixture
def clean_file():
    return SourceFile("app/constants.py", CLEAN_SOURCE, "python")
