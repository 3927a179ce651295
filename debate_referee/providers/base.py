"""Abstract base for all judge providers."""

from abc import ABC, abstractmethod

from debate_referee.models import JudgeResponse


class ProviderError(Exception):
    """Raised when a provider call fails."""

    def __init__(self, provider_name: str, message: str) -> None:
        self.provider_name = provider_name
        super().__init__(f"[{provider_name}] {message}")


class JudgeProvider(ABC):
    """A text-generation service that can be asked to score a debate."""

    @abstractmethod
    def name(self) -> str:
        """Return the short provider name (e.g. 'openai', 'claude')."""
        ...

    @abstractmethod
    def model_string(self) -> str:
        """Return the actual model identifier string."""
        ...

    @abstractmethod
    async def generate(self, prompt: str, *, max_tokens: int, temperature: float) -> JudgeResponse:
        """Generate text for the given prompt.

        Args:
            prompt: The full prompt text to send.
            max_tokens: Upper bound on output length.
            temperature: Sampling temperature.

        Returns:
            JudgeResponse dataclass with content and metadata.

        Raises:
            ProviderError: On API failure, timeout, or empty response.
        """
        ...
