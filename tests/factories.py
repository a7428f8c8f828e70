"""Synthetic documents and loaders for tests."""

from pathlib import Path

from docsite.content import SourceDocument
from docsite.meta import Document


class MemoryLoader:
    """Content loader serving synthetic documents without touching disk."""

    def __init__(self, documents: list[SourceDocument]) -> None:
        self.documents = documents
        self.calls: list[Path] = []

    def list_documents(self, root_dir: Path) -> list[SourceDocument]:
        self.calls.append(root_dir)
        return list(self.documents)


def make_document(path: str, title: str | None = None, excluded: bool = False, **meta: object) -> Document:
    data: dict = {"meta": {"title": title or path, **meta}, "matter": {}}
    if excluded:
        data["navExclude"] = True
    return Document(path=path, data=data)


def make_source(path: str, title: str = "", content: str = "<p>Body</p>", **kwargs: object) -> SourceDocument:
    return SourceDocument(
        path=path,
        source=Path("docs") / (path.strip("/") or "index"),
        content=content,
        meta={"title": title or path},
        **kwargs,
    )
