from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, TypedDict


class SafeMarkup(str):
    """Markup that has already been sanitized and may be inserted as-is."""


class OpenLibraryDoc(TypedDict, total=False):
    title: str
    author_name: List[str]


class OpenLibraryResponse(TypedDict, total=False):
    docs: List[OpenLibraryDoc]


class MermaidContent(TypedDict, total=False):
    mermaidContent: str
    error: str


@dataclass
class Book:
    title: str
    author_name: List[str] = field(default_factory=list)

    @classmethod
    def from_doc(cls, doc: Mapping[str, Any]) -> "Book":
        authors = doc.get("author_name") or []
        return cls(
            title=str(doc.get("title", "") or ""),
            author_name=[str(name) for name in authors],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"title": self.title, "author_name": list(self.author_name)}


@dataclass
class BookGraph:
    id: str
    book_name: str
    svg_graph: SafeMarkup

    @classmethod
    def empty(cls) -> "BookGraph":
        return cls(id="", book_name="", svg_graph=SafeMarkup(""))

    def is_displayed(self) -> bool:
        return bool(self.book_name and self.svg_graph)
