from importlib import import_module
from typing import Any

__all__ = [
    "Book",
    "BookGraph",
    "HomeView",
    "MermaidContentClient",
    "MermaidContentGenerator",
    "OpenLibraryClient",
    "create_app",
]


def __getattr__(name: str) -> Any:
    if name in {"Book", "BookGraph"}:
        module = import_module(".types", __name__)
        return getattr(module, name)
    if name == "HomeView":
        module = import_module(".home_view", __name__)
        return getattr(module, name)
    if name == "MermaidContentClient":
        module = import_module(".mermaid_client", __name__)
        return getattr(module, name)
    if name == "MermaidContentGenerator":
        module = import_module(".generation", __name__)
        return getattr(module, name)
    if name == "OpenLibraryClient":
        module = import_module(".openlib", __name__)
        return getattr(module, name)
    if name == "create_app":
        module = import_module(".server", __name__)
        return getattr(module, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
