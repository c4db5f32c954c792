import asyncio
import threading
import time

from src.austen.search_stream import SearchStream, validate_query
from src.austen.types import Book

DEBOUNCE = 0.02


class RecordingSearch:
    def __init__(self, delays=None, fail_on=None):
        self.queries = []
        self.delays = delays or {}
        self.fail_on = fail_on
        self._lock = threading.Lock()

    def __call__(self, query):
        with self._lock:
            self.queries.append(query)
        time.sleep(self.delays.get(query, 0))
        if query == self.fail_on:
            raise RuntimeError("search backend down")
        return [Book(title=query, author_name=["Author of " + query])]


class Sink:
    def __init__(self):
        self.results = None
        self.loading = False
        self.loading_history = []

    def on_results(self, books):
        self.results = books

    def on_loading(self, loading):
        self.loading = loading
        self.loading_history.append(loading)


def _stream(search, sink):
    return SearchStream(search, sink.on_results, sink.on_loading, debounce_seconds=DEBOUNCE)


def test_validate_query():
    assert validate_query("") == ["required"]
    assert validate_query(None) == ["required"]
    assert validate_query("Emm") == ["minlength"]
    assert validate_query("Emma") == []


def test_short_query_issues_no_request():
    search = RecordingSearch()
    sink = Sink()

    async def scenario():
        stream = _stream(search, sink)
        stream.push("Dun")
        await stream.idle()

    asyncio.run(scenario())
    assert search.queries == []
    assert sink.results == []
    assert sink.loading is False


def test_rapid_edits_collapse_to_one_request():
    search = RecordingSearch()
    sink = Sink()

    async def scenario():
        stream = _stream(search, sink)
        for value in ("D", "Du", "Dun", "Dune"):
            stream.push(value)
            await asyncio.sleep(DEBOUNCE / 4)
        await stream.idle()

    asyncio.run(scenario())
    assert search.queries == ["Dune"]
    assert sink.results == [Book(title="Dune", author_name=["Author of Dune"])]
    assert sink.loading_history == [True, False]


def test_stale_results_are_discarded():
    search = RecordingSearch(delays={"Dune": 0.2})
    sink = Sink()

    async def scenario():
        stream = _stream(search, sink)
        stream.push("Dune")
        await asyncio.sleep(DEBOUNCE * 3)
        stream.push("Emma")
        await stream.idle()

    asyncio.run(scenario())
    assert search.queries == ["Dune", "Emma"]
    assert sink.results == [Book(title="Emma", author_name=["Author of Emma"])]
    assert sink.loading is False


def test_failed_search_collapses_to_empty_results():
    search = RecordingSearch(fail_on="Dune")
    sink = Sink()

    async def scenario():
        stream = _stream(search, sink)
        stream.push("Dune")
        await stream.idle()

    asyncio.run(scenario())
    assert sink.results == []
    assert sink.loading is False


def test_reset_invalidates_in_flight_search():
    search = RecordingSearch(delays={"Dune": 0.1})
    sink = Sink()

    async def scenario():
        stream = _stream(search, sink)
        stream.push("Dune")
        await asyncio.sleep(DEBOUNCE * 3)
        sink.results = ["sentinel"]
        stream.reset()
        await stream.idle()

    asyncio.run(scenario())
    assert sink.results == ["sentinel"]
    assert sink.loading is False


def test_close_cancels_pending_debounce():
    search = RecordingSearch()
    sink = Sink()

    async def scenario():
        stream = _stream(search, sink)
        stream.push("Dune")
        stream.close()
        await asyncio.sleep(DEBOUNCE * 2)

    asyncio.run(scenario())
    assert search.queries == []
