# ai_providers/gemini_provider.py
import json
import logging
import time
from typing import Callable, Optional

import requests

from .base import AIProvider, MalformedOutput, NoContent, UpstreamCallFailed

log = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash-preview-09-2025"
DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
MAX_RETRIES = 3


def build_payload(system: str, user: str, schema: Optional[dict] = None) -> dict:
    payload = {
        "contents": [{"parts": [{"text": user}]}],
        "systemInstruction": {"parts": [{"text": system}]},
    }
    if schema is not None:
        payload["generationConfig"] = {
            "responseMimeType": "application/json",
            "responseSchema": schema,
        }
    return payload


def extract_text(envelope) -> str:
    """candidates[0].content.parts[0].text, or NoContent."""
    try:
        text = envelope["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        raise NoContent("no content returned") from None
    if not text:
        raise NoContent("no content returned")
    if not isinstance(text, str):
        raise MalformedOutput(f"generated text is {type(text).__name__}, not a string")
    return text


def parse_output(envelope, structured: bool):
    text = extract_text(envelope)
    if not structured:
        return text
    try:
        return json.loads(text)
    except ValueError as e:
        raise MalformedOutput(f"malformed structured output: {e}") from e


class GeminiProvider(AIProvider):
    name = "gemini"

    def __init__(self, api_key: str, model: str = DEFAULT_MODEL,
                 base_url: str = DEFAULT_BASE_URL, timeout: float = 60,
                 session=None,
                 sleep: Callable[[float], None] = time.sleep):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        # plain requests.post per call unless a client is injected
        self.http = session or requests
        self._sleep = sleep

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent?key={self.api_key}"

    def complete(self, payload: dict) -> dict:
        # attempt i waits 2**i seconds before attempt i+1 (1s, 2s)
        for i in range(MAX_RETRIES):
            last = i == MAX_RETRIES - 1
            try:
                resp = self.http.post(
                    self.endpoint,
                    headers={"Content-Type": "application/json"},
                    data=json.dumps(payload),
                    timeout=self.timeout,
                )
            except requests.RequestException as e:
                if last:
                    raise UpstreamCallFailed(f"upstream call failed: {e}") from e
                log.warning("Upstream transport error (attempt %d/%d): %s", i + 1, MAX_RETRIES, e)
                self._sleep(2 ** i)
                continue

            if 200 <= resp.status_code < 300:
                try:
                    return resp.json()
                except ValueError as e:
                    raise UpstreamCallFailed("upstream returned a non-JSON body") from e

            if resp.status_code == 429 and not last:
                log.warning("Upstream rate limited (attempt %d/%d), backing off %ds",
                            i + 1, MAX_RETRIES, 2 ** i)
                self._sleep(2 ** i)
                continue

            raise UpstreamCallFailed(f"upstream call failed with status {resp.status_code}")

        raise UpstreamCallFailed("no successful response after retries")
