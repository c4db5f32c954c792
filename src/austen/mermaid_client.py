import json
import logging
import urllib.error
import urllib.request
from typing import Optional

from .types import MermaidContent

logger = logging.getLogger("austen")

GET_MERMAID_CONTENT_API_URL = "/api/v1/getMermaidContent"


class MermaidContentError(RuntimeError):
    pass


class MermaidContentClient:
    """Posts a book title to the local generation route and returns the diagram text."""

    def __init__(self, base_url: str, timeout_seconds: Optional[float] = None) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds

    def get_mermaid_content(self, book_title: str) -> str:
        body = json.dumps({"bookTitle": book_title}).encode("utf-8")
        request = urllib.request.Request(
            url=f"{self.base_url}{GET_MERMAID_CONTENT_API_URL}",
            data=body,
            method="POST",
            headers={"Content-Type": "application/json"},
        )

        try:
            with urllib.request.urlopen(request, timeout=self.timeout_seconds) as response:
                raw = response.read().decode("utf-8")
        except urllib.error.HTTPError as exc:
            details = exc.read().decode("utf-8", errors="replace")
            logger.error("mermaid_client.http_error status=%s body=%s", exc.code, details)
            raise MermaidContentError(f"Mermaid content API error: {details}") from exc
        except urllib.error.URLError as exc:
            logger.error("mermaid_client.network_error error=%s", exc)
            raise MermaidContentError(f"Network error: {exc}") from exc

        try:
            payload: MermaidContent = json.loads(raw)
        except ValueError as exc:
            logger.error("mermaid_client.bad_payload body=%s", raw[:200])
            raise MermaidContentError("Mermaid content API returned a non-JSON response.") from exc

        if "mermaidContent" not in payload:
            message = str(payload.get("error", "")) or "Response did not include mermaidContent."
            logger.error("mermaid_client.error_payload book_title=%r error=%s", book_title, message)
            raise MermaidContentError(message)
        return str(payload["mermaidContent"])
