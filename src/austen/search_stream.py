import asyncio
import logging
from typing import Callable, List, Optional, Set

from .types import Book

logger = logging.getLogger("austen")

DEFAULT_DEBOUNCE_SECONDS = 0.4
DEFAULT_MIN_LENGTH = 4

SearchFn = Callable[[str], List[Book]]


def validate_query(value: Optional[str], min_length: int = DEFAULT_MIN_LENGTH) -> List[str]:
    text = value or ""
    if not text:
        return ["required"]
    if len(text) < min_length:
        return ["minlength"]
    return []


class SearchStream:
    """Debounced, validated book search where only the latest query wins.

    Every pushed value restarts the debounce timer. When it fires, a valid
    value starts a search in a worker thread tagged with a generation number;
    results from a search that has since been superseded are dropped.
    """

    def __init__(
        self,
        search: SearchFn,
        on_results: Callable[[List[Book]], None],
        on_loading: Callable[[bool], None],
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        min_length: int = DEFAULT_MIN_LENGTH,
    ) -> None:
        self._search = search
        self._on_results = on_results
        self._on_loading = on_loading
        self.debounce_seconds = debounce_seconds
        self.min_length = min_length
        self._generation = 0
        self._timer: Optional[asyncio.Task] = None
        self._search_tasks: Set[asyncio.Task] = set()

    @property
    def generation(self) -> int:
        return self._generation

    def push(self, value: str) -> None:
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = asyncio.ensure_future(self._debounce(value))

    async def _debounce(self, value: str) -> None:
        await asyncio.sleep(self.debounce_seconds)
        self._dispatch(value)

    def _dispatch(self, value: str) -> None:
        self._generation += 1
        if validate_query(value, self.min_length):
            self._on_loading(False)
            self._on_results([])
            return

        generation = self._generation
        self._on_loading(True)
        self._on_results([])
        task = asyncio.ensure_future(self._run_search(value, generation))
        self._search_tasks.add(task)
        task.add_done_callback(self._search_tasks.discard)

    async def _run_search(self, value: str, generation: int) -> None:
        try:
            books = await asyncio.to_thread(self._search, value)
        except Exception:
            logger.exception("search.failed query=%r", value)
            books = []

        if generation != self._generation:
            logger.info("search.stale query=%r generation=%s", value, generation)
            return
        self._on_loading(False)
        self._on_results(books)

    def reset(self) -> None:
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._generation += 1
        self._on_loading(False)

    async def idle(self) -> None:
        while True:
            pending = [task for task in self._search_tasks if not task.done()]
            if self._timer is not None and not self._timer.done():
                pending.append(self._timer)
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    def close(self) -> None:
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        for task in list(self._search_tasks):
            task.cancel()
        self._timer = None
        self._generation += 1
