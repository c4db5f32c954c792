from pathlib import Path
import asyncio
import logging
import sys

import streamlit as st
import streamlit.components.v1 as components

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.append(str(ROOT_DIR))

from src.austen.config import Settings, load_settings  # noqa: E402
from src.austen.home_view import HomeView  # noqa: E402
from src.austen.mermaid_client import MermaidContentClient  # noqa: E402
from src.austen.openlib import OpenLibraryClient  # noqa: E402

INPUT_KEY = "book_title_input"


@st.cache_resource
def get_settings() -> Settings:
    settings = load_settings()
    logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))
    return settings


def build_home_view(settings: Settings) -> HomeView:
    return HomeView(
        book_search=OpenLibraryClient(
            base_url=settings.openlibrary_base_url,
            timeout_seconds=settings.request_timeout_seconds,
        ),
        mermaid_client=MermaidContentClient(
            base_url=settings.api_base_url,
            timeout_seconds=settings.request_timeout_seconds,
        ),
        debounce_seconds=settings.search_debounce_ms / 1000,
        min_length=settings.search_min_length,
    )


def ensure_state() -> None:
    if "home_view" not in st.session_state:
        st.session_state.home_view = build_home_view(get_settings())
    if INPUT_KEY not in st.session_state:
        st.session_state[INPUT_KEY] = ""


def get_view() -> HomeView:
    return st.session_state.home_view


async def apply_input(view: HomeView, value: str) -> None:
    await view.input_changed(value)
    await view.settle()


def on_input_change() -> None:
    asyncio.run(apply_input(get_view(), st.session_state[INPUT_KEY]))


def on_option_selected(book_title: str) -> None:
    asyncio.run(get_view().option_selected(book_title))


def on_clear() -> None:
    get_view().clear_search()
    st.session_state[INPUT_KEY] = ""


def render_suggestions(view: HomeView) -> None:
    if view.validation_errors():
        return
    message = view.suggestion_message()
    if message:
        st.caption(message)
    for index, book in enumerate(view.filtered_options):
        authors = ", ".join(book.author_name)
        label = f"{book.title} · {authors}" if authors else book.title
        st.button(
            label,
            key=f"book_option_{index}",
            on_click=on_option_selected,
            args=(book.title,),
            use_container_width=True,
        )


def render_graph(view: HomeView) -> None:
    graph = view.book_graph
    if graph.is_displayed():
        with st.container(border=True):
            st.subheader(graph.book_name)
            components.html(str(graph.svg_graph), height=640, scrolling=True)
        return
    st.info(view.graph_placeholder_message())


st.set_page_config(page_title="Austen", layout="wide")
st.title("Austen")
st.caption("Discover Story Relationships")
ensure_state()
home_view = get_view()

input_col, clear_col = st.columns([6, 1])
with input_col:
    st.text_input(
        "Type a book title...",
        key=INPUT_KEY,
        on_change=on_input_change,
    )
with clear_col:
    if home_view.search_text:
        st.button("Clear", on_click=on_clear, use_container_width=True)

if home_view.search_text and home_view.error_message():
    st.error(home_view.error_message())

render_suggestions(home_view)
render_graph(home_view)
