from __future__ import annotations

from pathlib import Path


class DocsiteError(Exception):
    """Base class for fatal build errors."""


class ConfigError(DocsiteError):
    pass


class LoadError(DocsiteError):
    def __init__(self, source: Path, reason: str) -> None:
        super().__init__(f"Could not load {source}: {reason}")
        self.source = source
        self.reason = reason


class InvalidDocumentError(DocsiteError):
    def __init__(self, source: Path, path: str) -> None:
        super().__init__(f"Invalid document path {path!r} for {source}")
        self.source = source
        self.path = path


class OutputError(DocsiteError):
    def __init__(self, target: Path, reason: str) -> None:
        super().__init__(f"Could not write {target}: {reason}")
        self.target = target
        self.reason = reason


class RenderError(DocsiteError):
    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Could not render {path}: {reason}")
        self.path = path
        self.reason = reason
