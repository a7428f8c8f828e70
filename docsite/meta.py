from __future__ import annotations

from dataclasses import dataclass

from bs4 import BeautifulSoup, Comment

from .content import SourceDocument

MAX_LISTED_AUTHORS = 3
ALLOWED_TAGS = {
    "a",
    "abbr",
    "b",
    "br",
    "code",
    "del",
    "em",
    "i",
    "ins",
    "kbd",
    "p",
    "q",
    "s",
    "strong",
    "sub",
    "sup",
}
ALLOWED_ATTRIBUTES = {
    "a": {"href", "title"},
    "abbr": {"title"},
    "q": {"cite"},
}
DROPPED_TAGS = {"script", "style", "template", "iframe", "object"}
SAFE_PROTOCOLS = ("http:", "https:", "mailto:")


@dataclass(frozen=True)
class Document:
    """A loaded document with display-ready metadata."""

    path: str
    data: dict
    content: str = ""
    gh_url: str = ""

    @property
    def excluded(self) -> bool:
        return bool(self.data.get("navExclude"))

    @property
    def meta(self) -> dict:
        return self.data.get("meta") or {}


def normalize_authors(author: object) -> list[dict]:
    if not author:
        return []
    if isinstance(author, (str, dict)):
        author = [author]
    elif not isinstance(author, list):
        return []
    authors = []
    for item in author:
        if isinstance(item, str):
            authors.append({"name": item})
        elif isinstance(item, dict) and item.get("name"):
            authors.append(dict(item))
    return authors


def format_list(names: list[str]) -> str:
    if not names:
        return ""
    if len(names) == 1:
        return names[0]
    if len(names) == 2:
        return f"{names[0]} and {names[1]}"
    return ", ".join(names[:-1]) + f", and {names[-1]}"


def abbreviate_authors(names: list[str]) -> list[str]:
    if len(names) > MAX_LISTED_AUTHORS:
        return [*names[:2], "others"]
    return names


def _is_safe_url(value: str) -> bool:
    value = value.strip().lower()
    if ":" not in value.split("/", 1)[0]:
        return True
    return value.startswith(SAFE_PROTOCOLS)


def sanitize_description(html_text: str) -> str:
    soup = BeautifulSoup(html_text, "html.parser")
    for comment in soup.find_all(string=lambda text: isinstance(text, Comment)):
        comment.extract()
    for tag in soup.find_all(sorted(DROPPED_TAGS)):
        tag.decompose()
    for tag in soup.find_all(True):
        if tag.name not in ALLOWED_TAGS:
            tag.unwrap()
            continue
        allowed = ALLOWED_ATTRIBUTES.get(tag.name, set())
        for attr in list(tag.attrs):
            if attr not in allowed:
                del tag[attr]
        if tag.name == "a" and tag.get("href") and not _is_safe_url(tag["href"]):
            del tag["href"]
    return str(soup).strip()


def normalize_meta(doc: SourceDocument) -> dict:
    info = dict(doc.info)
    authors = normalize_authors(info.pop("author", None))
    names = [author["name"] for author in authors]
    if authors and authors[0].get("twitter"):
        info["authorTwitter"] = authors[0]["twitter"]

    abbreviated = abbreviate_authors(names)
    meta = {**info, "authors": authors}
    if abbreviated:
        meta["author"] = format_list(abbreviated)
    meta.update(doc.meta)

    if meta.get("descriptionHtml"):
        meta["descriptionHtml"] = sanitize_description(meta["descriptionHtml"])
    return meta


def normalize_document(doc: SourceDocument) -> Document:
    data = {"meta": normalize_meta(doc), "matter": doc.matter}
    if doc.nav_exclude:
        data["navExclude"] = True
    if doc.nav_sort_self is not None:
        data["navSortSelf"] = doc.nav_sort_self
    return Document(
        path=doc.path,
        data=data,
        content=doc.content,
        gh_url=doc.gh_url,
    )
