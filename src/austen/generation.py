import json
import logging
import urllib.error
import urllib.request
from typing import Any, Dict, Optional, Protocol

from .types import MermaidContent

logger = logging.getLogger("austen")

DEFAULT_MODEL = "gemini-1.5-flash"
GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
GENERATION_ERROR_MESSAGE = "Failed to generate Mermaid content"

SYSTEM_INSTRUCTION = """
You're a bookworm and an assistant. You'll provide the name of a book,
and you will create a graph for its characters using Mermaid js syntax.
You can find the following as a sample for the book "The Wonderful Wizard of Oz".
Please refrain from including any explanations or descriptions at the beginning or end and
avoid adding notes or anything else and simply provide the syntax.
Do not include syntax highlighting for the syntax.

graph TD
  A[Dorothy Gale] -->|Pet| B[Toto]
  A -->|Family| C[Uncle Henry and Aunt Em]
  A -->|Friends| D[Scarecrow]
  A -->|Friends| E[Tin Woodman]
  A -->|Friends| F[Cowardly Lion]
  A -->|Enemy| G[The Wicked Witch of The West]
  A -->|Enemy| H[The Wizard of OZ]
  A -->|Helps Dorothy| I[Glinda]
  D -->|Friends| E
  E -->|Friends| F
  B -->|In Kansas| C
"""


class TextModelClient(Protocol):
    def generate_text(self, system_instruction: str, user_prompt: str) -> str:
        ...


class GeminiTextClient:
    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = DEFAULT_MODEL,
        base_url: str = GEMINI_BASE_URL,
        timeout_seconds: Optional[float] = None,
    ) -> None:
        self.api_key = api_key or ""
        self.model = model or DEFAULT_MODEL
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds

    def is_enabled(self) -> bool:
        return bool(self.api_key)

    def build_payload(self, system_instruction: str, user_prompt: str) -> Dict[str, Any]:
        return {
            "system_instruction": {"parts": [{"text": system_instruction}]},
            "contents": [{"role": "user", "parts": [{"text": user_prompt}]}],
        }

    def generate_text(self, system_instruction: str, user_prompt: str) -> str:
        if not self.is_enabled():
            raise RuntimeError("Gemini API key is not configured.")

        body = json.dumps(self.build_payload(system_instruction, user_prompt)).encode("utf-8")
        request = urllib.request.Request(
            url=f"{self.base_url}/models/{self.model}:generateContent",
            data=body,
            method="POST",
            headers={
                "Content-Type": "application/json",
                "x-goog-api-key": self.api_key,
            },
        )

        try:
            with urllib.request.urlopen(request, timeout=self.timeout_seconds) as response:
                raw = response.read().decode("utf-8")
        except urllib.error.HTTPError as exc:
            details = exc.read().decode("utf-8", errors="replace")
            raise RuntimeError(f"Gemini API error: {details}") from exc
        except urllib.error.URLError as exc:
            raise RuntimeError(f"Network error: {exc}") from exc

        return extract_response_text(json.loads(raw))


def extract_response_text(parsed: Dict[str, Any]) -> str:
    candidates = parsed.get("candidates") or []
    if not candidates:
        feedback = parsed.get("promptFeedback") or {}
        raise RuntimeError(f"Gemini returned no candidates: {feedback}")
    parts = (candidates[0].get("content") or {}).get("parts") or []
    return "".join(str(part.get("text", "")) for part in parts)


class MermaidContentGenerator:
    """Turns a book title into character-graph Mermaid text.

    The model output is returned verbatim; a failure of any kind becomes the
    generic error payload and the cause is only logged.
    """

    def __init__(
        self,
        model_client: TextModelClient,
        system_instruction: str = SYSTEM_INSTRUCTION,
    ) -> None:
        self.model_client = model_client
        self.system_instruction = system_instruction

    def generate(self, book_title: str) -> MermaidContent:
        try:
            mermaid_content = self.model_client.generate_text(self.system_instruction, book_title)
        except Exception:
            logger.exception("generation.failed book_title=%r", book_title)
            return {"error": GENERATION_ERROR_MESSAGE}
        logger.info("generation.completed book_title=%r chars=%s", book_title, len(mermaid_content))
        return {"mermaidContent": mermaid_content}
