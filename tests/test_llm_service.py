from __future__ import annotations

import pytest

from sales_analyzer.services.llm_providers import GeminiProvider, LLMError, LLMProvider
from sales_analyzer.services.llm_service import LLMService


class RecordingProvider(LLMProvider):
    """Echoes a canned reply and remembers the last request."""

    def __init__(self, reply: str = "Mock LLM response") -> None:
        self.reply = reply
        self.last_prompt: str | None = None
        self.last_config: dict | None = None
        self.last_audio: tuple[bytes, str] | None = None

    def send_prompt(self, prompt: str, config: dict) -> str:
        self.last_prompt, self.last_config = prompt, config
        return self.reply

    def send_audio(self, prompt: str, audio: bytes, mime_type: str, config: dict) -> str:
        self.last_prompt, self.last_config = prompt, config
        self.last_audio = (audio, mime_type)
        return self.reply


def _patch_genai(monkeypatch: pytest.MonkeyPatch, models: object | None = None) -> None:
    import google.genai as genai_module

    class _Client:
        def __init__(self, api_key: str) -> None:
            self.models = models

    monkeypatch.setattr(genai_module, "Client", _Client, raising=True)


class TestProviderSelection:
    def test_explicit_provider_wins(self) -> None:
        provider = RecordingProvider()

        assert LLMService(provider=provider).provider is provider

    def test_gemini_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GEMINI_API_KEY", "test-key")
        monkeypatch.setenv("LLM_PROVIDER", "Gemini")
        _patch_genai(monkeypatch)

        assert isinstance(LLMService().provider, GeminiProvider)

    def test_unknown_provider(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LLM_PROVIDER", "unknown_provider")

        with pytest.raises(LLMError, match="Unknown LLM provider: unknown_provider"):
            LLMService()

    def test_gemini_without_key(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("LLM_PROVIDER", raising=False)
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)

        with pytest.raises(LLMError, match="GEMINI_API_KEY"):
            LLMService()


class TestPrompting:
    def test_build_prompt_layout(self) -> None:
        service = LLMService(provider=RecordingProvider())

        prompt = service.build_prompt("You are a sales coach.", "How did the call go?")

        assert prompt == (
            "System instruction:\nYou are a sales coach.\n\nUser content:\nHow did the call go?"
        )

    def test_generate_uses_default_temperature(self) -> None:
        provider = RecordingProvider("The rep handled objections well")
        service = LLMService(provider=provider)

        reply = service.generate_llm_response("Answer concisely.", "How were objections handled?")

        assert reply == "The rep handled objections well"
        assert provider.last_prompt.startswith("System instruction:\nAnswer concisely.")
        assert provider.last_config == {"temperature": 0.7}

    def test_generate_forwards_sampling_options(self) -> None:
        provider = RecordingProvider()
        service = LLMService(provider=provider)

        service.generate_llm_response(
            "Explain in detail.", "Score the closing.", temperature=0.3, max_tokens=500, seed=42
        )

        assert provider.last_config == {"temperature": 0.3, "max_tokens": 500, "seed": 42}

    def test_raw_prompt_is_sent_unchanged(self) -> None:
        provider = RecordingProvider()

        LLMService(provider=provider).send_raw_prompt("Rate this call 1-10")

        assert provider.last_prompt == "Rate this call 1-10"
        assert provider.last_config == {}

    def test_transcribe_attaches_audio(self) -> None:
        provider = RecordingProvider("Rep: Hi there")

        transcript = LLMService(provider=provider).transcribe(
            "Transcribe this", b"RIFF", "audio/wav"
        )

        assert transcript == "Rep: Hi there"
        assert provider.last_prompt == "Transcribe this"
        assert provider.last_audio == (b"RIFF", "audio/wav")
        assert provider.last_config == {}


def test_gemini_round_trip(monkeypatch: pytest.MonkeyPatch) -> None:
    """A full request through the Gemini provider with the SDK client stubbed."""
    monkeypatch.setenv("GEMINI_API_KEY", "test-key")
    monkeypatch.setenv("LLM_MODEL", "gemini-test")
    requests: list[dict] = []

    class _Response:
        text = "Coaching notes\n"

    class _Models:
        def generate_content(self, *, model: str, contents: str, config: dict) -> _Response:
            requests.append({"model": model, "contents": contents, "config": config})
            return _Response()

    _patch_genai(monkeypatch, _Models())

    reply = LLMService().generate_llm_response(
        "You are a test assistant.", "Summarize the call.", temperature=0.5, max_tokens=100
    )

    assert reply == "Coaching notes"
    assert requests[0]["model"] == "gemini-test"
    assert "User content:\nSummarize the call." in requests[0]["contents"]
    assert requests[0]["config"] == {"temperature": 0.5, "max_output_tokens": 100}
