"""Tests for layout and the page rendering pipeline."""

import datetime as dt

import pytest
from bs4 import BeautifulSoup

from docsite.config import SiteConfig
from docsite.layout import build_byline, build_navigation, render_layout, render_template
from docsite.meta import Document
from docsite.navigation import build_nav_tree
from docsite.render import page_title, relative_url, render

from tests.factories import make_document


@pytest.fixture
def documents() -> list[Document]:
    return [
        make_document("/", title="Example"),
        make_document("/guide/intro/", title="Intro"),
        make_document("/guide/advanced/", title="Advanced"),
        make_document("/hidden/", title="Hidden", excluded=True),
    ]


def page_document(**meta: object) -> Document:
    content = (
        "<p>Some <em>text</em>\n   here.</p>\n"
        "<!-- internal note -->\n"
        "<pre><code>line one\n    line two</code></pre>\n"
        "<style>a { color : red ; }</style>\n"
        "<script>var  x = 1;   // comment\n</script>\n"
        '<p><a href="https://example.org/guide/advanced/">next</a></p>'
    )
    data = {
        "meta": {
            "title": "Intro",
            "description": "Getting started",
            "authors": [{"name": "Ada", "github": "ada"}, {"name": "Grace"}],
            "author": "Ada and Grace",
            "authorTwitter": "ada_tw",
            "published": dt.datetime(2023, 2, 1),
            "modified": dt.datetime(2024, 3, 4),
            "tags": ["intro", "docs"],
            **meta,
        },
        "matter": {},
    }
    return Document(
        path="/guide/intro/",
        data=data,
        content=content,
        gh_url="https://github.com/example/site/blob/main/docs/guide/intro.md",
    )


class TestLayout:
    """Tests for layout helpers."""

    def test_render_template_fills_content_last(self) -> None:
        output = render_template("{{title}}|{{content}}", title="T", content="{{title}}")

        assert output == "T|{{title}}"

    def test_navigation_marks_current_page(self, documents: list[Document]) -> None:
        tree = build_nav_tree(documents)

        nav = BeautifulSoup(build_navigation(tree, "/guide/intro/"), "html.parser")

        current = nav.find_all(attrs={"aria-current": "page"})
        assert [link["href"] for link in current] == ["/guide/intro/"]
        assert nav.find("span", class_="nav-group").get_text() == "guide"
        assert nav.find("a", href="/hidden/") is None

    def test_navigation_sorted_for_display(self, documents: list[Document]) -> None:
        tree = build_nav_tree(documents)

        nav = BeautifulSoup(build_navigation(tree, "/"), "html.parser")

        titles = [link.get_text() for link in nav.find_all("a")]
        assert titles == ["Example", "Advanced", "Intro"]

    def test_byline(self) -> None:
        meta = page_document().meta

        byline = BeautifulSoup(build_byline(meta), "html.parser")

        assert byline.find("a", rel="author")["href"] == "https://github.com/ada"
        assert "Grace" in byline.get_text()
        assert "February 1, 2023" in byline.get_text()
        assert "Updated March 4, 2024" in byline.get_text()

    def test_empty_byline(self) -> None:
        assert build_byline({}) == ""

    def test_render_layout_includes_edit_link(self, site_config: SiteConfig, documents: list[Document]) -> None:
        fragment = render_layout(page_document(), build_nav_tree(documents), site_config)

        soup = BeautifulSoup(fragment, "html.parser")
        assert soup.find("a", class_="edit-link")["href"].endswith("docs/guide/intro.md")
        assert soup.h1.get_text() == "Intro"


class TestRender:
    """Tests for render()."""

    @pytest.fixture
    def page(self, site_config: SiteConfig, documents: list[Document]) -> BeautifulSoup:
        site_config.lazy_css = ["https://cdn.example.net/style.css"]
        html = render(page_document(), build_nav_tree(documents), site_config)
        assert html.startswith("<!DOCTYPE html>")
        return BeautifulSoup(html, "html.parser")

    def meta_content(self, page: BeautifulSoup, key: str) -> list[str]:
        tags = page.find_all("meta", attrs={"name": key}) + page.find_all("meta", attrs={"property": key})
        return [tag["content"] for tag in tags]

    def test_document_shell(self, page: BeautifulSoup) -> None:
        assert page.html["lang"] == "en"
        assert page.find("meta", charset="utf-8") is not None
        assert self.meta_content(page, "generator") == ["docsite"]
        assert page.find("link", rel="stylesheet", href="/index.css") is not None
        assert page.find("script", src="/index.js") is not None
        assert page.find("link", rel="alternate")["href"] == "https://example.org/rss.xml"
        assert page.find("link", rel="alternate")["title"] == "example.org"

    def test_title_and_canonical(self, page: BeautifulSoup) -> None:
        assert page.title.get_text() == "Intro | Example"
        assert page.find("link", rel="canonical")["href"] == "https://example.org/guide/intro/"

    def test_meta_tags(self, page: BeautifulSoup) -> None:
        assert self.meta_content(page, "description") == ["Getting started"]
        assert self.meta_content(page, "keywords") == ["docs, example, intro"]
        assert self.meta_content(page, "author") == ["Ada and Grace"]
        assert self.meta_content(page, "copyright") == ["© 2023 Ada and Grace"]
        assert self.meta_content(page, "theme-color") == ["#fcc72b"]
        assert self.meta_content(page, "og:type") == ["article"]
        assert self.meta_content(page, "og:title") == ["Intro | Example"]
        assert self.meta_content(page, "og:image") == ["https://example.org/guide/intro/index.png"]
        assert self.meta_content(page, "og:image:width") == ["2400"]
        assert self.meta_content(page, "article:published_time") == ["2023-02-01T00:00:00Z"]
        assert self.meta_content(page, "article:modified_time") == ["2024-03-04T00:00:00Z"]
        assert self.meta_content(page, "article:author") == ["Ada", "Grace"]
        assert self.meta_content(page, "twitter:site") == ["@example"]
        assert self.meta_content(page, "twitter:creator") == ["@ada_tw"]

    def test_lazy_css(self, page: BeautifulSoup) -> None:
        preload = page.find("link", rel="preload")
        assert preload["href"] == "https://cdn.example.net/style.css"
        assert preload["as"] == "style"
        assert "this.rel='stylesheet'" in preload["onload"]
        fallback = page.find("noscript").find("link")
        assert fallback["href"] == "https://cdn.example.net/style.css"

    def test_minified(self, site_config: SiteConfig, documents: list[Document]) -> None:
        html = render(page_document(), build_nav_tree(documents), site_config)

        assert "internal note" not in html
        assert "<pre><code>line one\n    line two</code></pre>" in html
        assert "<p>Some <em>text</em> here.</p>" in html
        assert "a{color:red}" in html
        assert "var x=1;" in html
        assert "</h1><p" in html
        body = html.split("<html", 1)[1].replace("line one\n    line two", "")
        assert "\n" not in body
        assert "  " not in body

    def test_same_origin_urls_made_relative(self, page: BeautifulSoup) -> None:
        assert page.find("a", string="next")["href"] == "/guide/advanced/"
        assert page.find("link", rel="icon", sizes="any")["href"] == "/favicon.ico"
        assert page.find("a", class_="edit-link")["href"].startswith("https://github.com/")

    def test_root_page(self, site_config: SiteConfig, documents: list[Document]) -> None:
        page = BeautifulSoup(render(documents[0], build_nav_tree(documents), site_config), "html.parser")

        assert page.title.get_text() == "Example"
        og_image = page.find("meta", property="og:image")["content"]
        assert og_image == "https://example.org/og.png"
        assert page.find("meta", property="og:image:width")["content"] == "3062"

    def test_image_override(self, site_config: SiteConfig, documents: list[Document]) -> None:
        site_config.og_image_overrides = {"/guide/intro/": "og-v2.png"}

        page = BeautifulSoup(render(page_document(), build_nav_tree(documents), site_config), "html.parser")

        assert page.find("meta", property="og:image")["content"] == "https://example.org/og-v2.png"


class TestHelpers:
    """Tests for render helpers."""

    def test_page_title_without_site_title(self, site_config: SiteConfig) -> None:
        site_config.title = ""

        assert page_title(make_document("/a/", title="A"), site_config) == "A"

    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("https://example.org/a/b/?q=1#top", "/a/b/?q=1#top"),
            ("https://example.org", "/"),
            ("https://other.org/a/", "https://other.org/a/"),
            ("/already/relative/", "/already/relative/"),
            ("http://example.org/a/", "http://example.org/a/"),
        ],
    )
    def test_relative_url(self, url: str, expected: str) -> None:
        assert relative_url(url, "https://example.org/guide/intro/") == expected
