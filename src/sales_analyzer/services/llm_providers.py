"""LLM provider implementations.

A provider turns a prompt (optionally with an inline audio recording) into
model text. Only Gemini is wired up; the provider is picked by ``LLM_PROVIDER``
in :mod:`sales_analyzer.services.llm_service`.
"""

from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from typing import Any

from dotenv import load_dotenv

# GEMINI_API_KEY and LLM_MODEL may live in a local .env file
load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_GEMINI_MODEL = "gemini-2.0-flash-exp"


class LLMError(RuntimeError):
    """The model could not be reached, rejected the request, or is not configured."""


def describe_llm_error(exc: BaseException) -> str:
    """Translate a vendor failure into text fit to show the user.

    Unrecognised errors pass through unchanged.
    """
    text = str(exc)
    if "API key not valid" in text or "API_KEY_INVALID" in text:
        return "AI service configuration error. Please check the API key configuration."
    if "QUOTA_EXCEEDED" in text:
        return "AI service quota exceeded. Please try again later."
    if "PERMISSION_DENIED" in text:
        return "AI service permission denied. Please check the API configuration."
    return text


class LLMProvider(ABC):
    """Base class for model backends."""

    def generate_llm_config(
        self,
        temperature: float | None,
        max_tokens: int | None,
        seed: int | None,
    ) -> dict:
        """Build a request config holding only the options that were given.

        Args:
            temperature: Sampling temperature.
            max_tokens: Cap on the response length.
            seed: Sampling seed, where the backend honours one.
        """
        options = {"temperature": temperature, "max_tokens": max_tokens, "seed": seed}
        return {name: value for name, value in options.items() if value is not None}

    @abstractmethod
    def send_prompt(self, prompt: str, config: dict) -> str:
        """Return the model's text reply to ``prompt``."""

    @abstractmethod
    def send_audio(self, prompt: str, audio: bytes, mime_type: str, config: dict) -> str:
        """Return the model's text reply to ``prompt`` about an attached recording.

        Args:
            prompt: Instruction sent before the audio part.
            audio: Raw recording bytes.
            mime_type: MIME type of ``audio``, e.g. ``audio/mpeg``.
            config: Request config from :meth:`generate_llm_config`.
        """


class GeminiProvider(LLMProvider):
    """Google Gemini through the ``google-genai`` SDK."""

    def __init__(self) -> None:
        from google import genai

        self.api_key = os.environ.get("GEMINI_API_KEY")
        if not self.api_key:
            raise LLMError("Missing GEMINI_API_KEY environment variable")

        self.model = os.environ.get("LLM_MODEL", DEFAULT_GEMINI_MODEL)
        self.client = genai.Client(api_key=self.api_key)

    def generate_llm_config(
        self,
        temperature: float | None,
        max_tokens: int | None,
        seed: int | None,
    ) -> dict:
        config = super().generate_llm_config(temperature, max_tokens, seed)
        # Gemini calls the response cap max_output_tokens
        if "max_tokens" in config:
            config["max_output_tokens"] = config.pop("max_tokens")
        return config

    def _generate(self, contents: Any, config: dict) -> str:
        try:
            response = self.client.models.generate_content(
                model=self.model, contents=contents, config=config
            )
        except Exception as exc:
            raise LLMError(f"Gemini API call failed: {exc}") from exc
        return (response.text or "").strip()

    def send_prompt(self, prompt: str, config: dict) -> str:
        return self._generate(prompt, config)

    def send_audio(self, prompt: str, audio: bytes, mime_type: str, config: dict) -> str:
        from google.genai import types

        logger.info("Sending %d bytes of %s audio to Gemini", len(audio), mime_type)
        part = types.Part.from_bytes(data=audio, mime_type=mime_type)
        return self._generate([prompt, part], config)
