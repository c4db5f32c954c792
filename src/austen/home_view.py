import asyncio
import logging
import uuid
from enum import Enum
from typing import Callable, List, Optional, Protocol

from .render import new_graph_element_id, render_graph_markup
from .search_stream import DEFAULT_DEBOUNCE_SECONDS, DEFAULT_MIN_LENGTH, SearchStream, validate_query
from .types import Book, BookGraph, SafeMarkup

logger = logging.getLogger("austen")

Renderer = Callable[[str, str], SafeMarkup]

VALIDATION_MESSAGES = {
    "required": "A book title is required to begin your journey",
    "minlength": "Book titles must be at least 4 characters to unlock their secrets",
}
NO_RESULTS_MESSAGE = "No books found in this realm..."
SEARCHING_MESSAGE = "Searching the literary cosmos..."
GENERATING_MESSAGE = "Weaving the threads of literary connections..."
EMPTY_GRAPH_MESSAGE = "Your literary map awaits. Start by searching for a book above!"


class BookSearch(Protocol):
    def search_books(self, query: str) -> List[Book]:
        ...


class MermaidSource(Protocol):
    def get_mermaid_content(self, book_title: str) -> str:
        ...


class ViewState(str, Enum):
    IDLE = "idle"
    SEARCHING = "searching"
    IDLE_WITH_RESULTS = "idle-with-results"
    GENERATING = "generating"
    DISPLAYING = "displaying"


class HomeView:
    def __init__(
        self,
        book_search: BookSearch,
        mermaid_client: MermaidSource,
        renderer: Renderer = render_graph_markup,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        min_length: int = DEFAULT_MIN_LENGTH,
    ) -> None:
        self.book_search = book_search
        self.mermaid_client = mermaid_client
        self.renderer = renderer
        self.min_length = min_length

        self.search_text = ""
        self.loading = False
        self.filtered_options: List[Book] = []
        self.book_graph = BookGraph.empty()
        self.state = ViewState.IDLE

        self.search_stream = SearchStream(
            search=book_search.search_books,
            on_results=self._set_results,
            on_loading=self._set_loading,
            debounce_seconds=debounce_seconds,
            min_length=min_length,
        )

    def _set_loading(self, loading: bool) -> None:
        self.loading = loading
        if loading:
            self.state = ViewState.SEARCHING

    def _set_results(self, books: List[Book]) -> None:
        self.filtered_options = [Book(title=book.title, author_name=list(book.author_name)) for book in books]
        if self.state == ViewState.SEARCHING and not self.loading:
            self.state = ViewState.IDLE_WITH_RESULTS

    async def input_changed(self, value: Optional[str]) -> None:
        self.search_text = value or ""
        self.search_stream.push(self.search_text)

    async def settle(self) -> None:
        await self.search_stream.idle()

    def validation_errors(self) -> List[str]:
        return validate_query(self.search_text, self.min_length)

    def error_message(self) -> str:
        errors = self.validation_errors()
        return VALIDATION_MESSAGES[errors[0]] if errors else ""

    async def option_selected(self, book_title: str) -> BookGraph:
        # A failure below leaves the state at GENERATING and the old graph in place.
        self.search_text = book_title
        self.state = ViewState.GENERATING
        logger.info("home_view.generate book_title=%r", book_title)
        content = await asyncio.to_thread(self.mermaid_client.get_mermaid_content, book_title)
        svg_graph = self.renderer(new_graph_element_id(), content)
        self.book_graph = BookGraph(id=str(uuid.uuid4()), book_name=book_title, svg_graph=svg_graph)
        self.state = ViewState.DISPLAYING
        return self.book_graph

    def clear_search(self) -> None:
        self.search_stream.reset()
        self.search_text = ""
        self.filtered_options = []
        self.book_graph = BookGraph.empty()
        self.state = ViewState.IDLE

    def suggestion_message(self) -> str:
        if self.loading:
            return SEARCHING_MESSAGE
        if not self.filtered_options:
            return NO_RESULTS_MESSAGE
        return ""

    def graph_placeholder_message(self) -> str:
        if self.book_graph.is_displayed():
            return ""
        if self.loading or self.state == ViewState.GENERATING:
            return GENERATING_MESSAGE
        return EMPTY_GRAPH_MESSAGE

    def close(self) -> None:
        self.search_stream.close()
