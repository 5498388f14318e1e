from abc import ABC, abstractmethod


class ProviderError(Exception):
    """Base for everything that can go wrong between us and the model."""


class UpstreamCallFailed(ProviderError):
    """Transport error, non-retryable status, or retries exhausted."""


class NoContent(ProviderError):
    """The provider answered but the envelope carries no generated text."""


class MalformedOutput(ProviderError):
    """Generated text is not the JSON shape that was asked for."""


class AIProvider(ABC):
    name = "base"

    @abstractmethod
    def complete(self, payload: dict) -> dict:
        """
        Send one generateContent payload and return the raw response envelope:
        {candidates: [{content: {parts: [{text: ...}]}}]}
        """
