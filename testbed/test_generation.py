import json

import pytest

from src.austen.generation import (
    GENERATION_ERROR_MESSAGE,
    SYSTEM_INSTRUCTION,
    GeminiTextClient,
    MermaidContentGenerator,
    extract_response_text,
)


class StubModelClient:
    def __init__(self, text="graph TD\n  A[Paul] -->|Friends| B[Stilgar]"):
        self.text = text
        self.calls = []

    def generate_text(self, system_instruction, user_prompt):
        self.calls.append((system_instruction, user_prompt))
        return self.text


class ErrorModelClient:
    def generate_text(self, system_instruction, user_prompt):
        _ = system_instruction
        _ = user_prompt
        raise RuntimeError("quota exceeded")


class FakeResponse:
    def __init__(self, payload):
        self._raw = json.dumps(payload).encode("utf-8")

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return False

    def read(self):
        return self._raw


def test_generate_returns_model_text_verbatim():
    raw = "```mermaid\ngraph TD\n  A --> B\n```\nNote: not valid on purpose"
    client = StubModelClient(text=raw)
    result = MermaidContentGenerator(client).generate("Dune")

    assert result == {"mermaidContent": raw}
    assert client.calls == [(SYSTEM_INSTRUCTION, "Dune")]


def test_generate_converts_any_failure_to_error_payload(caplog):
    with caplog.at_level("ERROR", logger="austen"):
        result = MermaidContentGenerator(ErrorModelClient()).generate("Dune")

    assert result == {"error": GENERATION_ERROR_MESSAGE}
    assert "mermaidContent" not in result
    assert "quota exceeded" in caplog.text


def test_system_instruction_carries_example_graph():
    assert "Mermaid js syntax" in SYSTEM_INSTRUCTION
    assert "graph TD" in SYSTEM_INSTRUCTION
    assert "A[Dorothy Gale] -->|Pet| B[Toto]" in SYSTEM_INSTRUCTION


def test_gemini_client_without_key_fails_on_first_use():
    client = GeminiTextClient(api_key=None)
    assert client.is_enabled() is False
    with pytest.raises(RuntimeError, match="not configured"):
        client.generate_text(SYSTEM_INSTRUCTION, "Dune")


def test_gemini_client_sends_single_turn_request(monkeypatch):
    calls = []

    def fake_urlopen(request, timeout=None):
        calls.append((request, timeout))
        return FakeResponse(
            {"candidates": [{"content": {"parts": [{"text": "graph TD\n"}, {"text": "  A --> B"}]}}]}
        )

    monkeypatch.setattr("urllib.request.urlopen", fake_urlopen)
    client = GeminiTextClient(api_key="secret", model="gemini-1.5-flash", base_url="http://gemini.local/v1beta")
    text = client.generate_text("be terse", "Dune")

    assert text == "graph TD\n  A --> B"
    request, timeout = calls[0]
    assert request.full_url == "http://gemini.local/v1beta/models/gemini-1.5-flash:generateContent"
    assert request.get_header("X-goog-api-key") == "secret"
    assert timeout is None
    body = json.loads(request.data.decode("utf-8"))
    assert body["system_instruction"] == {"parts": [{"text": "be terse"}]}
    assert body["contents"] == [{"role": "user", "parts": [{"text": "Dune"}]}]


def test_extract_response_text_without_candidates_raises():
    with pytest.raises(RuntimeError, match="no candidates"):
        extract_response_text({"promptFeedback": {"blockReason": "SAFETY"}})
