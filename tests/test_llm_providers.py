from __future__ import annotations

import pytest

from sales_analyzer.services.llm_providers import (
    DEFAULT_GEMINI_MODEL,
    GeminiProvider,
    LLMError,
    LLMProvider,
)


class EchoProvider(LLMProvider):
    def send_prompt(self, prompt: str, config: dict) -> str:
        return f"echo: {prompt}"

    def send_audio(self, prompt: str, audio: bytes, mime_type: str, config: dict) -> str:
        return f"{len(audio)} bytes"


class _Response:
    def __init__(self, text: str | None) -> None:
        self.text = text


class _RecordingModels:
    """Stands in for ``client.models``; replies with ``text`` or raises ``error``."""

    def __init__(self, text: str | None = "ok", error: Exception | None = None) -> None:
        self.text = text
        self.error = error
        self.calls: list[dict] = []

    def generate_content(self, *, model: str, contents, config: dict) -> _Response:
        self.calls.append({"model": model, "contents": contents, "config": config})
        if self.error is not None:
            raise self.error
        return _Response(self.text)


@pytest.fixture
def gemini_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    monkeypatch.setenv("GEMINI_API_KEY", "test-key")
    monkeypatch.delenv("LLM_MODEL", raising=False)
    return monkeypatch


def _gemini(monkeypatch: pytest.MonkeyPatch, models: _RecordingModels | None = None):
    import google.genai as genai_module

    class _Client:
        def __init__(self, api_key: str) -> None:
            self.api_key = api_key
            self.models = models

    monkeypatch.setattr(genai_module, "Client", _Client, raising=True)
    return GeminiProvider()


class TestBaseConfig:
    @pytest.mark.parametrize(
        ("options", "expected"),
        [
            ((0.5, 100, 42), {"temperature": 0.5, "max_tokens": 100, "seed": 42}),
            ((0.7, None, None), {"temperature": 0.7}),
            ((None, None, None), {}),
            ((0.0, None, 0), {"temperature": 0.0, "seed": 0}),
        ],
    )
    def test_only_given_options_are_kept(self, options: tuple, expected: dict) -> None:
        assert EchoProvider().generate_llm_config(*options) == expected

    def test_audio_support_is_required(self) -> None:
        class _TextOnly(LLMProvider):
            def send_prompt(self, prompt: str, config: dict) -> str:
                return ""

        with pytest.raises(TypeError):
            _TextOnly()


class TestGeminiSetup:
    def test_reads_key_and_model(self, gemini_env: pytest.MonkeyPatch) -> None:
        gemini_env.setenv("LLM_MODEL", "gemini-1.5-flash")

        provider = _gemini(gemini_env)

        assert provider.api_key == "test-key"
        assert provider.model == "gemini-1.5-flash"
        assert provider.client.api_key == "test-key"

    def test_default_model(self, gemini_env: pytest.MonkeyPatch) -> None:
        assert _gemini(gemini_env).model == DEFAULT_GEMINI_MODEL == "gemini-2.0-flash-exp"

    def test_missing_key(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)

        with pytest.raises(LLMError, match="Missing GEMINI_API_KEY environment variable"):
            GeminiProvider()

    def test_max_tokens_renamed(self, gemini_env: pytest.MonkeyPatch) -> None:
        config = _gemini(gemini_env).generate_llm_config(0.8, 200, 123)

        assert config == {"temperature": 0.8, "max_output_tokens": 200, "seed": 123}


class TestGeminiRequests:
    def test_prompt_reply_is_stripped(self, gemini_env: pytest.MonkeyPatch) -> None:
        gemini_env.setenv("LLM_MODEL", "gemini-test-model")
        models = _RecordingModels("  Solid discovery call  ")

        reply = _gemini(gemini_env, models).send_prompt("Rate the call", {"temperature": 0.7})

        assert reply == "Solid discovery call"
        assert models.calls == [
            {"model": "gemini-test-model", "contents": "Rate the call", "config": {"temperature": 0.7}}
        ]

    def test_missing_text_becomes_empty(self, gemini_env: pytest.MonkeyPatch) -> None:
        provider = _gemini(gemini_env, _RecordingModels(text=None))

        assert provider.send_prompt("Rate the call", {}) == ""

    def test_sdk_errors_are_wrapped(self, gemini_env: pytest.MonkeyPatch) -> None:
        provider = _gemini(gemini_env, _RecordingModels(error=RuntimeError("429 QUOTA_EXCEEDED")))

        with pytest.raises(LLMError, match="Gemini API call failed.*QUOTA_EXCEEDED"):
            provider.send_prompt("Rate the call", {})

    def test_audio_sent_as_inline_part(self, gemini_env: pytest.MonkeyPatch) -> None:
        models = _RecordingModels("Rep: hello\n")

        transcript = _gemini(gemini_env, models).send_audio(
            "Transcribe", b"\x00\x01", "audio/wav", {}
        )

        assert transcript == "Rep: hello"
        instruction, part = models.calls[0]["contents"]
        assert instruction == "Transcribe"
        assert part.inline_data.data == b"\x00\x01"
        assert part.inline_data.mime_type == "audio/wav"

    def test_audio_errors_are_wrapped(self, gemini_env: pytest.MonkeyPatch) -> None:
        provider = _gemini(gemini_env, _RecordingModels(error=RuntimeError("PERMISSION_DENIED")))

        with pytest.raises(LLMError, match="PERMISSION_DENIED"):
            provider.send_audio("Transcribe", b"\x00", "audio/mpeg", {})
