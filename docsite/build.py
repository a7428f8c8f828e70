from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path

from .config import SiteConfig
from .content import ContentLoader, MarkdownLoader, validate_document
from .errors import ConfigError, OutputError, RenderError
from .fanout import run_bounded
from .layout import read_template
from .meta import Document, normalize_document
from .navigation import NavNode, build_nav_tree
from .render import render
from .sitemap import entries_for, serialize
from .utils import json_default, write_text

SITEMAP_NAME = "sitemap.xml"


@dataclass
class BuildResult:
    documents: list[Document]
    nav_tree: NavNode
    sitemap_path: Path
    written: list[Path] = field(default_factory=list)


def output_dir_for(document: Document, config: SiteConfig) -> Path:
    if document.path == "/":
        return config.output_dir
    return config.output_dir.joinpath(*document.path.strip("/").split("/"))


def _write(path: Path, text: str) -> None:
    try:
        write_text(path, text)
    except OSError as exc:
        raise OutputError(path, exc.strerror or str(exc)) from exc


def write_document(document: Document, nav_tree: NavNode, config: SiteConfig, template: str | None = None) -> Path:
    target_dir = output_dir_for(document, config)
    try:
        data = json.dumps(document.data, default=json_default, ensure_ascii=False)
        html = render(document, nav_tree, config, template)
    except (TypeError, ValueError) as exc:
        raise RenderError(document.path, str(exc)) from exc
    _write(target_dir / "index.json", data)
    html_path = target_dir / "index.html"
    _write(html_path, html)
    print(f"  generate: `{document.path}`")
    return html_path


def build_site(config: SiteConfig, loader: ContentLoader | None = None) -> BuildResult:
    loader = loader or MarkdownLoader(config)
    sources = [validate_document(doc) for doc in loader.list_documents(config.input_dir)]
    documents = [normalize_document(doc) for doc in sources]

    # Built only after every load has finished; nothing else touches it.
    nav_tree = build_nav_tree(documents)

    sitemap_path = config.output_dir / SITEMAP_NAME
    _write(sitemap_path, serialize(entries_for(documents, config)))
    print(f"✔ `/{SITEMAP_NAME}`")

    try:
        template = read_template(config.template)
    except OSError as exc:
        raise ConfigError(f"Cannot read template {config.template}: {exc.strerror or exc}") from exc
    tasks = [lambda doc=doc: write_document(doc, nav_tree, config, template) for doc in documents]
    written = run_bounded(tasks, config.concurrency)
    print("✔ Generate")
    return BuildResult(documents=documents, nav_tree=nav_tree, sitemap_path=sitemap_path, written=written)
