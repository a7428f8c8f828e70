"""Page rendering pipeline.

Takes the layout fragment for one document and turns it into a complete
HTML page: document shell, meta tags, lazily loaded stylesheets and a final
minification pass.
"""

from __future__ import annotations

import datetime as dt
import re
from urllib.parse import urljoin, urlsplit, urlunsplit

import csscompressor
import rjsmin
from bs4 import BeautifulSoup, Comment, Doctype, NavigableString, Tag

from .config import SiteConfig
from .layout import render_layout
from .meta import Document
from .navigation import NavNode
from .utils import iso_date, parse_datetime

GENERATOR = "docsite"
TITLE_SEPARATOR = " | "
PRESERVE_WHITESPACE = {"pre", "code", "textarea", "script", "style"}
BLOCK_TAGS = {
    "address", "article", "aside", "blockquote", "body", "details", "div", "dl", "dd", "dt",
    "fieldset", "figcaption", "figure", "footer", "form", "h1", "h2", "h3", "h4", "h5", "h6",
    "head", "header", "hr", "html", "li", "link", "main", "meta", "nav", "noscript", "ol", "p",
    "pre", "script", "section", "style", "summary", "table", "tbody", "td", "tfoot", "th",
    "thead", "title", "tr", "ul",
}
URL_ATTRIBUTES = {"a": "href", "img": "src", "link": "href", "script": "src", "source": "src"}
KEEP_ABSOLUTE_RELS = {"canonical", "alternate"}
WHITESPACE_RE = re.compile(r"\s+")


def page_title(document: Document, config: SiteConfig) -> str:
    title = document.meta.get("title") or ""
    if not config.title:
        return title
    if document.path == "/" or not title or title == config.title:
        return config.title
    return f"{title}{TITLE_SEPARATOR}{config.title}"


def page_image(document: Document, config: SiteConfig, canonical: str) -> tuple[str, int, int]:
    if document.path == "/":
        width, height = config.og_image
        return urljoin(config.site_url, "og.png"), width, height
    width, height = config.page_image
    override = config.og_image_overrides.get(document.path)
    if override:
        return urljoin(config.site_url, override), width, height
    return urljoin(canonical, "index.png"), width, height


def _append(parent: Tag, soup: BeautifulSoup, tag_name: str, /, **attrs: str) -> Tag:
    tag = soup.new_tag(tag_name, attrs=attrs)
    parent.append(tag)
    return tag


def add_document_head(soup: BeautifulSoup, document: Document, config: SiteConfig) -> None:
    head = soup.head
    _append(head, soup, "meta", charset="utf-8")
    _append(head, soup, "meta", name="viewport", content="width=device-width, initial-scale=1")
    for href in config.css:
        _append(head, soup, "link", rel="stylesheet", href=href)
    _append(
        head,
        soup,
        "link",
        rel="alternate",
        href=urljoin(config.site_url, "rss.xml"),
        type="application/rss+xml",
        title=config.site_host,
    )
    _append(head, soup, "link", rel="icon", href=urljoin(config.site_url, "favicon.ico"), sizes="any")
    _append(head, soup, "link", rel="icon", href=urljoin(config.site_url, "icon.svg"), type="image/svg+xml")
    _append(head, soup, "meta", name="generator", content=GENERATOR)
    for src in config.js:
        script = _append(head, soup, "script", src=src)
        script["defer"] = ""


def add_meta_tags(soup: BeautifulSoup, document: Document, config: SiteConfig, canonical: str) -> None:
    head = soup.head
    meta = document.meta
    title = page_title(document, config)
    description = meta.get("description") or ""
    author = meta.get("author") or config.author
    tags = [*config.tags, *[tag for tag in meta.get("tags") or [] if tag not in config.tags]]
    published = parse_datetime(meta.get("published"))
    modified = parse_datetime(meta.get("modified"))

    title_tag = _append(head, soup, "title")
    title_tag.string = title
    _append(head, soup, "link", rel="canonical", href=canonical)
    if description:
        _append(head, soup, "meta", name="description", content=description)
    if tags:
        _append(head, soup, "meta", name="keywords", content=", ".join(tags))
    if author:
        _append(head, soup, "meta", name="author", content=author)
        year = (published or dt.datetime.now()).year
        _append(head, soup, "meta", name="copyright", content=f"© {year} {author}")
    if config.color:
        _append(head, soup, "meta", name="theme-color", content=config.color)

    image, width, height = page_image(document, config, canonical)
    _append(head, soup, "meta", property="og:type", content="article")
    if config.title:
        _append(head, soup, "meta", property="og:site_name", content=config.title)
    _append(head, soup, "meta", property="og:url", content=canonical)
    _append(head, soup, "meta", property="og:title", content=title)
    if description:
        _append(head, soup, "meta", property="og:description", content=description)
    _append(head, soup, "meta", property="og:image", content=image)
    _append(head, soup, "meta", property="og:image:width", content=str(width))
    _append(head, soup, "meta", property="og:image:height", content=str(height))
    if published:
        _append(head, soup, "meta", property="article:published_time", content=iso_date(published))
    if modified:
        _append(head, soup, "meta", property="article:modified_time", content=iso_date(modified))
    for name in [item["name"] for item in meta.get("authors") or []]:
        _append(head, soup, "meta", property="article:author", content=name)
    for tag in tags:
        _append(head, soup, "meta", property="article:tag", content=tag)

    _append(head, soup, "meta", name="twitter:card", content="summary_large_image")
    _append(head, soup, "meta", name="twitter:image", content=image)
    if config.twitter_handle:
        _append(head, soup, "meta", name="twitter:site", content=config.twitter_handle)
    if meta.get("authorTwitter"):
        handle = "@" + str(meta["authorTwitter"]).lstrip("@")
        _append(head, soup, "meta", name="twitter:creator", content=handle)


def add_lazy_css(soup: BeautifulSoup, hrefs: list[str]) -> None:
    if not hrefs:
        return
    head = soup.head
    for href in hrefs:
        _append(
            head,
            soup,
            "link",
            rel="preload",
            href=href,
            **{"as": "style", "onload": "this.onload=null;this.rel='stylesheet'"},
        )
    noscript = _append(head, soup, "noscript")
    for href in hrefs:
        noscript.append(soup.new_tag("link", attrs={"rel": "stylesheet", "href": href}))


def relative_url(url: str, base: str) -> str:
    target = urlsplit(url)
    origin = urlsplit(base)
    if (target.scheme, target.netloc) != (origin.scheme, origin.netloc) or not target.netloc:
        return url
    return urlunsplit(("", "", target.path or "/", target.query, target.fragment))


def _at_block_boundary(node: NavigableString, direction: str) -> bool:
    sibling = getattr(node, direction)
    while isinstance(sibling, NavigableString) and not isinstance(sibling, Doctype) and not sibling.strip():
        sibling = getattr(sibling, direction)
    if sibling is None or isinstance(sibling, Doctype):
        return True
    return isinstance(sibling, Tag) and sibling.name in BLOCK_TAGS


def _preserves_whitespace(node: NavigableString) -> bool:
    return any(parent.name in PRESERVE_WHITESPACE for parent in node.parents)


def minify(soup: BeautifulSoup, canonical: str) -> None:
    for comment in soup.find_all(string=lambda text: isinstance(text, Comment)):
        comment.extract()

    for text in soup.find_all(string=True):
        if type(text) is not NavigableString or _preserves_whitespace(text):
            continue
        if text.strip():
            text.replace_with(WHITESPACE_RE.sub(" ", str(text)))
        elif _at_block_boundary(text, "previous_sibling") and _at_block_boundary(text, "next_sibling"):
            text.extract()
        else:
            text.replace_with(" ")

    for style in soup.find_all("style"):
        if style.string:
            style.string = csscompressor.compress(style.string)
    for script in soup.find_all("script"):
        if script.string and script.get("type", "text/javascript") in {"text/javascript", "module"}:
            script.string = rjsmin.jsmin(script.string)

    for tag_name, attr in URL_ATTRIBUTES.items():
        for tag in soup.find_all(tag_name):
            if not tag.get(attr):
                continue
            rel = tag.get("rel") or []
            if isinstance(rel, str):
                rel = rel.split()
            if tag_name == "link" and KEEP_ABSOLUTE_RELS.intersection(rel):
                continue
            tag[attr] = relative_url(tag[attr], canonical)


def render(document: Document, nav_tree: NavNode, config: SiteConfig, template: str | None = None) -> str:
    canonical = urljoin(config.site_url, document.path)
    fragment = render_layout(document, nav_tree, config, template)

    soup = BeautifulSoup(
        f'<!DOCTYPE html><html lang="{config.lang}"><head></head><body></body></html>',
        "html.parser",
    )
    soup.body.append(BeautifulSoup(fragment, "html.parser"))
    add_document_head(soup, document, config)
    add_meta_tags(soup, document, config, canonical)
    add_lazy_css(soup, config.lazy_css)
    minify(soup, canonical)
    return soup.decode(formatter="html5")
