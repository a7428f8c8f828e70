from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path

from .build import build_site
from .config import SiteConfig, load_config
from .errors import DocsiteError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Build the documentation website.")
    parser.add_argument("--config", default="site.toml", help="Path to site config file (TOML/YAML/JSON).")
    parser.add_argument("--input", help="Directory containing content files (default: docs).")
    parser.add_argument("--output", help="Output directory for the site (default: public).")
    parser.add_argument("--site-url", help="Canonical site origin used for sitemap and meta tags.")
    parser.add_argument(
        "--concurrency",
        type=int,
        help="Maximum number of documents loaded or rendered at once (default: 6).",
    )
    return parser


def resolve_config(args: argparse.Namespace) -> SiteConfig:
    config_path = Path(args.config).resolve()
    data = load_config(config_path)
    # Paths given on the command line are relative to the working directory,
    # paths in the config file to the file's own directory.
    if args.input:
        data["input"] = str(Path(args.input).resolve())
    if args.output:
        data["output"] = str(Path(args.output).resolve())
    if args.site_url:
        data["site_url"] = args.site_url
    if args.concurrency is not None:
        data["concurrency"] = args.concurrency
    return SiteConfig.from_mapping(data, config_path.parent)


def run(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    start = time.perf_counter()
    try:
        config = resolve_config(args)
        result = build_site(config)
    except DocsiteError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    elapsed = time.perf_counter() - start
    print(f"Build completed in {elapsed:.2f}s.")
    print(f"{len(result.documents)} pages generated in: {config.output_dir}")
    return 0


def main() -> None:
    sys.exit(run())
