# services/generator.py
import logging
import os
from dataclasses import dataclass
from typing import Any, Callable, Optional

from ai_providers.base import AIProvider
from ai_providers.gemini_provider import (
    DEFAULT_BASE_URL, DEFAULT_MODEL, GeminiProvider, build_payload, parse_output,
)
from ai_providers.local_stub import LocalStub
from services.prompts import build_prompt

log = logging.getLogger(__name__)

MALFORMED_OUTPUT = "LLM returned invalid JSON structure"


class InputInvalid(Exception):
    """Request is missing the text the task needs."""


@dataclass(frozen=True)
class Task:
    """
    One AI tool: which prompt to build, which request field feeds it,
    what to say on each failure, and how to check/shape the parsed output.

    `shape` receives the parsed value and returns the response body; it
    raises MalformedOutput when the value is not what the tool promised.
    """
    kind: str
    field: str
    label: str
    missing_input: str
    no_content: str
    failed: str
    malformed: str = MALFORMED_OUTPUT
    shape: Optional[Callable[[Any], Any]] = None


_provider = None


def get_provider() -> AIProvider:
    global _provider
    if _provider is not None:
        return _provider
    api_key = os.getenv("GEMINI_API_KEY")
    if api_key:
        _provider = GeminiProvider(
            api_key=api_key,
            model=os.getenv("GEMINI_MODEL", DEFAULT_MODEL),
            base_url=os.getenv("GEMINI_BASE_URL", DEFAULT_BASE_URL),
            timeout=float(os.getenv("GEMINI_TIMEOUT", "60")),
        )
    else:
        log.warning("GEMINI_API_KEY not set, falling back to LocalStub")
        _provider = LocalStub()
    return _provider


def read_input(task: Task, body) -> str:
    """Pull the task's text field out of a JSON body; empty or missing is InputInvalid."""
    value = body.get(task.field) if isinstance(body, dict) else None
    if not isinstance(value, str) or not value.strip():
        raise InputInvalid(task.missing_input)
    return value


def run(task: Task, text: str, provider: Optional[AIProvider] = None):
    prov = provider or get_provider()
    prompt = build_prompt(task.kind, text)
    envelope = prov.complete(build_payload(prompt.system, prompt.user, prompt.schema))
    value = parse_output(envelope, prompt.structured)
    return task.shape(value) if task.shape else value
