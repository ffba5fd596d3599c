"""Errors raised while building the override repository."""

from __future__ import annotations

from pathlib import Path


class OverrideError(Exception):
    """Base class for override repository failures."""


class CheckoutError(OverrideError):
    """The override repository could not be cloned or updated."""


class FilesystemError(OverrideError):
    """A directory listing or file read inside the checkout failed."""


class ParseError(OverrideError):
    """An override file is not valid YAML/JSON or has the wrong shape."""

    def __init__(self, path: Path, message: str):
        super().__init__(f"{path}: {message}")
        self.path = path


__all__ = ["OverrideError", "CheckoutError", "FilesystemError", "ParseError"]
