"""Provider-agnostic entry point for prompting the configured model."""

from __future__ import annotations

import os

from sales_analyzer.services.llm_providers import (
    GeminiProvider,
    LLMError,
    LLMProvider,
)

_PROVIDERS: dict[str, type[LLMProvider]] = {
    "gemini": GeminiProvider,
}


class LLMService:
    def __init__(self, provider: LLMProvider | None = None) -> None:
        """
        Args:
            provider: Backend to use; defaults to the one named by ``LLM_PROVIDER``.
        """
        self.provider = provider or LLMService._provider_from_env()

    @staticmethod
    def _provider_from_env() -> LLMProvider:
        """Instantiate the provider named by ``LLM_PROVIDER`` (default ``gemini``).

        Raises:
            LLMError: For an unknown provider name or a provider missing its credentials.
        """
        provider_name = os.environ.get("LLM_PROVIDER", "gemini").lower()
        provider_cls = _PROVIDERS.get(provider_name)
        if provider_cls is None:
            raise LLMError(f"Unknown LLM provider: {provider_name}.")
        return provider_cls()

    def build_prompt(self, system_instructions: str, user_content: str) -> str:
        return f"System instruction:\n{system_instructions}\n\nUser content:\n{user_content}"

    def generate_llm_response(
        self,
        system_instructions: str,
        user_content: str,
        temperature: float | None = 0.7,
        max_tokens: int | None = None,
        seed: int | None = None,
    ) -> str:
        """Wrap instructions and content into one prompt and return the reply.

        Args:
            system_instructions: Role and rules for the model.
            user_content: The material to answer about.
            temperature: Sampling temperature; lower is more deterministic.
            max_tokens: Response cap, or None for the provider default.
            seed: Sampling seed where supported.
        """
        prompt = self.build_prompt(system_instructions, user_content)
        return self.send_raw_prompt(prompt, temperature, max_tokens, seed)

    def send_raw_prompt(
        self,
        prompt: str,
        temperature: float | None = None,
        max_tokens: int | None = None,
        seed: int | None = None,
    ) -> str:
        """Send an already formatted prompt to the provider."""
        config = self.provider.generate_llm_config(temperature, max_tokens, seed)
        return self.provider.send_prompt(prompt, config)

    def transcribe(self, prompt: str, audio: bytes, mime_type: str) -> str:
        """Send an audio payload with an instruction prompt."""
        config = self.provider.generate_llm_config(None, None, None)
        return self.provider.send_audio(prompt, audio, mime_type, config)
