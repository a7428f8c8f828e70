"""Shared test fixtures."""

from pathlib import Path

import pytest

from docsite.config import SiteConfig


@pytest.fixture
def site_config(tmp_path: Path) -> SiteConfig:
    """Site config with input and output directories under tmp_path."""
    input_dir = tmp_path / "docs"
    input_dir.mkdir()
    return SiteConfig(
        input_dir=input_dir,
        output_dir=tmp_path / "public",
        site_url="https://example.org/",
        git_root=tmp_path,
        gh_blob="https://github.com/example/site/blob/main/",
        title="Example",
        author="Example authors",
        tags=["docs", "example"],
        color="#fcc72b",
        twitter="https://twitter.com/example",
        concurrency=2,
    )
