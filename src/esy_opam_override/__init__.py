"""Opam package metadata overrides for esy manifests.

The override repository is loaded once per process with ``init`` and
matching records are merged into manifests with ``apply_override``.
"""

from importlib.metadata import PackageNotFoundError, version

from .config import OverrideConfig, load_config
from .overrides import OverrideRepository, apply_override, init

try:
    __version__ = version("esy-opam-override")
except PackageNotFoundError:  # pragma: no cover - running from a source tree
    __version__ = "0.0.0"

__all__ = ["OverrideConfig", "OverrideRepository", "__version__", "apply_override", "init", "load_config"]
