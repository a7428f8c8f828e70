from __future__ import annotations

import datetime as dt
import html
from pathlib import Path

from .config import SiteConfig
from .meta import Document
from .navigation import NavNode, sorted_children
from .utils import parse_datetime

LAYOUT_TEMPLATE = """<div class="page">
<header class="site-header"><a class="site-title" href="/">{{site_title}}</a></header>
<nav class="site-nav" aria-label="Site">{{navigation}}</nav>
<main class="content">
<article>
<h1>{{title}}</h1>
{{byline}}
{{content}}
</article>
<footer class="page-footer">{{edit_link}}</footer>
</main>
</div>"""


def render_template(template: str, **context: str) -> str:
    output = template
    late_keys = {"content", "navigation"}
    for key, value in context.items():
        if key in late_keys:
            continue
        output = output.replace(f"{{{{{key}}}}}", value)
    for key in late_keys:
        if key in context:
            output = output.replace(f"{{{{{key}}}}}", context[key])
    return output


def read_template(path: Path | None) -> str:
    if path is None:
        return LAYOUT_TEMPLATE
    return path.read_text(encoding="utf-8")


def format_date(value: dt.datetime) -> str:
    return f"{value:%B} {value.day}, {value.year}"


def build_nav_list(node: NavNode, current: str) -> str:
    children = sorted_children(node)
    if not children:
        return ""
    items = []
    for item in children:
        title = html.escape(item.title if item.data else item.name.rstrip("/").rsplit("/", 1)[-1])
        if not item.data:
            label = f'<span class="nav-group">{title}</span>'
        elif item.name == current:
            label = f'<a href="{item.name}" aria-current="page">{title}</a>'
        else:
            label = f'<a href="{item.name}">{title}</a>'
        items.append(f"<li>{label}{build_nav_list(item, current)}</li>")
    return f'<ol class="nav-list">{"".join(items)}</ol>'


def build_navigation(nav_tree: NavNode, current: str) -> str:
    home = html.escape(nav_tree.title if nav_tree.data else "Home")
    current_attr = ' aria-current="page"' if current == "/" else ""
    return f'<a class="nav-home" href="/"{current_attr}>{home}</a>{build_nav_list(nav_tree, current)}'


def author_link(author: dict) -> str:
    name = html.escape(author["name"])
    url = author.get("url")
    if not url and author.get("github"):
        url = f"https://github.com/{author['github']}"
    if url:
        return f'<a href="{html.escape(url, quote=True)}" rel="author">{name}</a>'
    return name


def build_byline(meta: dict) -> str:
    parts = []
    authors = meta.get("authors") or []
    if authors:
        parts.append(f'<span class="authors">By {", ".join(author_link(a) for a in authors)}</span>')
    published = parse_datetime(meta.get("published"))
    if published:
        parts.append(f'<time datetime="{published.isoformat()}">{format_date(published)}</time>')
    modified = parse_datetime(meta.get("modified"))
    if modified and modified != published:
        parts.append(
            f'<span class="modified">Updated <time datetime="{modified.isoformat()}">{format_date(modified)}</time></span>'
        )
    if not parts:
        return ""
    return f'<p class="byline">{" ".join(parts)}</p>'


def build_edit_link(gh_url: str) -> str:
    if not gh_url:
        return ""
    return f'<a class="edit-link" href="{html.escape(gh_url, quote=True)}">Edit this page on GitHub</a>'


def render_layout(document: Document, nav_tree: NavNode, config: SiteConfig, template: str | None = None) -> str:
    meta = document.meta
    return render_template(
        template or LAYOUT_TEMPLATE,
        site_title=html.escape(config.title),
        title=html.escape(meta.get("title") or ""),
        byline=build_byline(meta),
        edit_link=build_edit_link(document.gh_url),
        navigation=build_navigation(nav_tree, document.path),
        content=document.content,
    )
