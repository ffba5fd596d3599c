"""Local checkout of the override repository."""

from .git import ensure_checkout

__all__ = ["ensure_checkout"]
