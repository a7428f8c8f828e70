from __future__ import annotations

import fnmatch
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Protocol

import markdown
import yaml

from .config import SiteConfig
from .errors import InvalidDocumentError, LoadError
from .fanout import run_bounded
from .utils import parse_bool, parse_datetime

CONTENT_SUFFIXES = (".md", ".mdx")
MARKDOWN_EXTENSIONS = ["fenced_code", "tables", "toc", "codehilite"]
MARKDOWN_EXTENSION_CONFIGS = {
    "toc": {"toc_depth": "2-4"},
    "codehilite": {"guess_lang": False, "css_class": "highlight"},
}
INFO_KEYS = {
    "author": ("author", "authors"),
    "published": ("published", "date"),
    "modified": ("modified", "updated"),
}


@dataclass
class SourceDocument:
    """One content file as loaded, before metadata normalization."""

    path: str
    source: Path
    content: str = ""
    gh_url: str = ""
    info: dict = field(default_factory=dict)
    meta: dict = field(default_factory=dict)
    matter: dict = field(default_factory=dict)
    nav_exclude: bool = False
    nav_sort_self: int | None = None


class ContentLoader(Protocol):
    def list_documents(self, root_dir: Path) -> list[SourceDocument]: ...


def canonical_path(relative: str) -> str:
    """Map a content file path relative to the input root to its site path."""
    posix = PurePosixPath(relative.replace("\\", "/"))
    parts = list(posix.parent.parts) if str(posix.parent) != "." else []
    if posix.stem != "index":
        parts.append(posix.stem)
    if not parts:
        return "/"
    return "/" + "/".join(parts) + "/"


def validate_document(doc: SourceDocument) -> SourceDocument:
    if not doc.path or not doc.path.startswith("/") or not doc.path.endswith("/"):
        raise InvalidDocumentError(doc.source, doc.path)
    return doc


def parse_front_matter(text: str, source: Path) -> tuple[dict, str]:
    clean_text = text.lstrip("\ufeff")
    lines = clean_text.splitlines()
    if not lines or lines[0].strip() != "---":
        return {}, clean_text

    end = None
    for i in range(1, len(lines)):
        if lines[i].strip() in {"---", "..."}:
            end = i
            break
    if end is None:
        return {}, clean_text

    try:
        matter = yaml.safe_load("\n".join(lines[1:end]))
    except yaml.YAMLError as exc:
        raise LoadError(source, f"invalid front matter: {exc}") from exc
    if matter is None:
        matter = {}
    if not isinstance(matter, dict):
        raise LoadError(source, "front matter must be a mapping")
    body = "\n".join(lines[end + 1 :])
    return matter, body


def extract_title(matter: dict, body: str) -> tuple[str, str]:
    if matter.get("title"):
        return str(matter["title"]), body
    lines = body.splitlines()
    for i, line in enumerate(lines):
        stripped = line.strip()
        if stripped.startswith("# "):
            title = stripped[2:].strip() or "Untitled"
            new_body = "\n".join(lines[i + 1 :]).lstrip()
            return title, new_body
        if stripped:
            break
    return "Untitled", body


class MarkdownLoader:
    """Load Markdown content files with YAML front matter."""

    def __init__(self, config: SiteConfig, markdown_extensions: list[str] | None = None) -> None:
        self.config = config
        self.markdown_extensions = markdown_extensions or list(MARKDOWN_EXTENSIONS)

    def discover(self, root: Path) -> list[Path]:
        files = []
        for path in root.rglob("*"):
            if not path.is_file() or path.suffix.lower() not in CONTENT_SUFFIXES:
                continue
            rel = path.relative_to(root).as_posix()
            if any(fnmatch.fnmatchcase(rel, pattern) for pattern in self.config.ignore):
                continue
            files.append(path)
        return sorted(files, key=lambda p: p.relative_to(root).as_posix())

    def gh_url(self, source: Path) -> str:
        if not self.config.gh_blob:
            return ""
        try:
            rel = source.resolve().relative_to(self.config.git_root.resolve())
        except ValueError:
            rel = Path(source.name)
        return self.config.gh_blob.rstrip("/") + "/" + rel.as_posix()

    def render(self, text: str) -> str:
        md = markdown.Markdown(
            extensions=self.markdown_extensions,
            extension_configs={
                key: value for key, value in MARKDOWN_EXTENSION_CONFIGS.items() if key in self.markdown_extensions
            },
        )
        return md.convert(text)

    def load(self, source: Path, root: Path) -> SourceDocument:
        try:
            raw_text = source.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise LoadError(source, str(exc)) from exc
        matter, body = parse_front_matter(raw_text, source)
        title, body = extract_title(matter, body)

        info = {}
        for key, aliases in INFO_KEYS.items():
            for alias in aliases:
                if matter.get(alias) is not None:
                    info[key] = matter[alias]
                    break
        if not isinstance(info.get("author", ""), (str, dict, list)):
            raise LoadError(source, "author must be a mapping, list or string")
        for key in ("published", "modified"):
            if key in info:
                info[key] = parse_datetime(info[key])

        meta = {"title": title}
        description = matter.get("description")
        if description:
            meta["description"] = str(description)
            meta["descriptionHtml"] = markdown.markdown(str(description))
        if matter.get("tags"):
            tags = matter["tags"]
            meta["tags"] = [str(tag) for tag in tags] if isinstance(tags, list) else [str(tags)]

        sort_value = matter.get("nav_sort_self", matter.get("navSortSelf"))
        if sort_value is not None:
            try:
                sort_value = int(sort_value)
            except (TypeError, ValueError) as exc:
                raise LoadError(source, f"nav_sort_self must be an integer, got {sort_value!r}") from exc
        doc = SourceDocument(
            path=canonical_path(source.relative_to(root).as_posix()),
            source=source,
            content=self.render(body),
            gh_url=self.gh_url(source),
            info=info,
            meta=meta,
            matter=matter,
            nav_exclude=parse_bool(matter.get("nav_exclude", matter.get("navExclude"))),
            nav_sort_self=sort_value,
        )
        return validate_document(doc)

    def list_documents(self, root_dir: Path) -> list[SourceDocument]:
        files = self.discover(root_dir)
        tasks = [lambda path=path: self.load(path, root_dir) for path in files]
        return run_bounded(tasks, self.config.concurrency)
