from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path

import yaml

try:
    import tomllib as toml
except ImportError:
    import tomli as toml

from .errors import ConfigError
from .utils import parse_int

DEFAULT_CONCURRENCY = 6
DEFAULT_IGNORE = ("_component/*",)


def load_config(path: Path) -> dict:
    if not path.exists():
        return {}
    suffix = path.suffix.lower()
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc
    if suffix == ".toml":
        try:
            data = toml.loads(text)
        except toml.TOMLDecodeError as exc:
            raise ConfigError(f"Invalid TOML in config file {path}: {exc}") from exc
    elif suffix in {".yml", ".yaml"}:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in config file {path}: {exc}") from exc
        if data is None:
            return {}
    else:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Invalid JSON in config file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Config must be a mapping: {path}")
    return data


def _as_list(value: object) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    return [str(item) for item in value]


def _as_size(value: object, default: tuple[int, int]) -> tuple[int, int]:
    if not value:
        return default
    if isinstance(value, dict):
        return (
            parse_int(value.get("width"), default[0]),
            parse_int(value.get("height"), default[1]),
        )
    width, height = value
    return parse_int(width, default[0]), parse_int(height, default[1])


def _resolve(base_dir: Path, value: object, default: str) -> Path:
    path = Path(str(value or default))
    if not path.is_absolute():
        path = base_dir / path
    return path


@dataclass
class SiteConfig:
    input_dir: Path
    output_dir: Path
    site_url: str
    git_root: Path
    gh_blob: str = ""
    title: str = ""
    author: str = ""
    tags: list[str] = field(default_factory=list)
    color: str = ""
    twitter: str = ""
    lang: str = "en"
    concurrency: int = DEFAULT_CONCURRENCY
    ignore: list[str] = field(default_factory=lambda: list(DEFAULT_IGNORE))
    css: list[str] = field(default_factory=lambda: ["/index.css"])
    js: list[str] = field(default_factory=lambda: ["/index.js"])
    lazy_css: list[str] = field(default_factory=list)
    og_image: tuple[int, int] = (3062, 1490)
    page_image: tuple[int, int] = (2400, 1256)
    og_image_overrides: dict[str, str] = field(default_factory=dict)
    template: Path | None = None

    def __post_init__(self) -> None:
        if not self.site_url.endswith("/"):
            self.site_url += "/"
        self.concurrency = max(1, self.concurrency)

    @property
    def site_host(self) -> str:
        return self.site_url.split("://", 1)[-1].split("/", 1)[0]

    @property
    def twitter_handle(self) -> str:
        if not self.twitter:
            return ""
        handle = self.twitter.rstrip("/").rsplit("/", 1)[-1]
        return "@" + handle.lstrip("@")

    @classmethod
    def from_mapping(cls, data: dict, base_dir: Path) -> SiteConfig:
        site_url = str(data.get("site_url") or "").strip()
        if not site_url:
            raise ConfigError("Missing required config value: site_url")
        input_dir = _resolve(base_dir, data.get("input"), "docs")
        defaults = cls(input_dir=input_dir, output_dir=input_dir, site_url=site_url, git_root=base_dir)
        return cls(
            input_dir=input_dir,
            output_dir=_resolve(base_dir, data.get("output"), "public"),
            site_url=site_url,
            git_root=_resolve(base_dir, data.get("git_root"), "."),
            gh_blob=str(data.get("gh_blob") or ""),
            title=str(data.get("title") or ""),
            author=str(data.get("author") or ""),
            tags=_as_list(data.get("tags")),
            color=str(data.get("color") or ""),
            twitter=str(data.get("twitter") or ""),
            lang=str(data.get("lang") or "en"),
            concurrency=parse_int(data.get("concurrency"), DEFAULT_CONCURRENCY),
            ignore=_as_list(data["ignore"]) if "ignore" in data else defaults.ignore,
            css=_as_list(data["css"]) if "css" in data else defaults.css,
            js=_as_list(data["js"]) if "js" in data else defaults.js,
            lazy_css=_as_list(data.get("lazy_css")),
            og_image=_as_size(data.get("og_image"), defaults.og_image),
            page_image=_as_size(data.get("page_image"), defaults.page_image),
            og_image_overrides={str(k): str(v) for k, v in (data.get("og_image_overrides") or {}).items()},
            template=_resolve(base_dir, data["template"], "") if data.get("template") else None,
        )
