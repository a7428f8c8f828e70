from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Iterable
from urllib.parse import urljoin
from xml.sax.saxutils import quoteattr, escape

from .config import SiteConfig
from .meta import Document
from .utils import iso_date, parse_datetime

SITEMAP_NS = "http://www.sitemaps.org/schemas/sitemap/0.9"
XHTML_NS = "http://www.w3.org/1999/xhtml"


@dataclass(frozen=True)
class SitemapEntry:
    url: str
    modified: dt.datetime | None = None
    lang: str | None = None


def serialize(entries: Iterable[SitemapEntry]) -> str:
    items = []
    for entry in entries:
        lines = ["<url>", f"<loc>{escape(entry.url)}</loc>"]
        if entry.modified:
            lines.append(f"<lastmod>{iso_date(entry.modified)}</lastmod>")
        if entry.lang:
            lines.append(
                f'<xhtml:link rel="alternate" hreflang={quoteattr(entry.lang)} href={quoteattr(entry.url)}/>'
            )
        lines.append("</url>")
        items.append("\n".join(lines))
    return "\n".join(
        [
            '<?xml version="1.0" encoding="UTF-8"?>',
            f'<urlset xmlns="{SITEMAP_NS}" xmlns:xhtml="{XHTML_NS}">',
            *items,
            "</urlset>",
        ]
    ) + "\n"


def entries_for(documents: Iterable[Document], config: SiteConfig) -> list[SitemapEntry]:
    return [
        SitemapEntry(
            url=urljoin(config.site_url, doc.path),
            modified=parse_datetime(doc.meta.get("modified")),
            lang=config.lang,
        )
        for doc in documents
    ]
