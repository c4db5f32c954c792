import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from typing import List, Optional

from .types import Book, OpenLibraryResponse

logger = logging.getLogger("austen")

OPENLIBRARY_BASE_URL = "https://openlibrary.org"


class BookSearchError(RuntimeError):
    pass


class OpenLibraryClient:
    def __init__(
        self,
        base_url: str = OPENLIBRARY_BASE_URL,
        timeout_seconds: Optional[float] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds

    def search_url(self, query: str) -> str:
        return f"{self.base_url}/search.json?{urllib.parse.urlencode({'title': query})}"

    def search_books(self, query: str) -> List[Book]:
        url = self.search_url(query)
        request = urllib.request.Request(
            url=url,
            method="GET",
            headers={"Accept": "application/json"},
        )
        logger.info("openlib.search query=%r", query)

        try:
            with urllib.request.urlopen(request, timeout=self.timeout_seconds) as response:
                raw = response.read().decode("utf-8")
        except urllib.error.HTTPError as exc:
            details = exc.read().decode("utf-8", errors="replace")
            raise BookSearchError(f"OpenLibrary API error ({exc.code}): {details}") from exc
        except urllib.error.URLError as exc:
            raise BookSearchError(f"Network error: {exc}") from exc

        try:
            parsed: OpenLibraryResponse = json.loads(raw)
        except ValueError as exc:
            raise BookSearchError("OpenLibrary returned a non-JSON response.") from exc

        docs = parsed.get("docs") or []
        books = [Book.from_doc(doc) for doc in docs]
        logger.info("openlib.results query=%r count=%s", query, len(books))
        return books
