"""Process-wide index of the opam override repository."""

from __future__ import annotations

import json
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import yaml
from pydantic import ValidationError

from ..checkout import ensure_checkout
from ..config import OverrideConfig
from ..errors import FilesystemError, ParseError
from .models import PackageOverride, VersionedOverride, normalize_override
from .spec import OverrideSpec, parse_override_spec

logger = logging.getLogger(__name__)

PACKAGES_DIRNAME = "packages"
YAML_FILENAME = "package.yaml"
JSON_FILENAME = "package.json"


@dataclass(frozen=True)
class OverrideRepository:
    """Overrides keyed by opam package name.

    Each package maps to an ordered sequence of ``(version_range, override)``
    pairs; when several ranges match a version they are applied in that
    order, so later entries win.
    """

    checkout_path: Path
    overrides: Mapping[str, Sequence[VersionedOverride]]

    def get(self, package_name: str) -> Sequence[VersionedOverride]:
        return self.overrides.get(package_name, ())

    def package_names(self) -> List[str]:
        return sorted(self.overrides)

    def __contains__(self, package_name: object) -> bool:
        return package_name in self.overrides

    def __len__(self) -> int:
        return len(self.overrides)


_lock = threading.Lock()
_initializing: Optional[Future] = None


def init(config: OverrideConfig) -> OverrideRepository:
    """Return the override repository, building it on the first call.

    Callers arriving while the build runs wait for that same build. A failed
    build is not retried: every caller gets its exception until ``reset()``.
    """
    global _initializing
    future = _initializing
    if future is not None and future.done():
        return future.result()

    with _lock:
        if _initializing is None:
            _initializing = Future()
            owner = True
        else:
            owner = False
        future = _initializing

    if owner:
        try:
            future.set_result(build_repository(config))
        except BaseException as exc:
            future.set_exception(exc)
            if not isinstance(exc, Exception):
                raise
    return future.result()


def reset() -> None:
    """Forget the memoized repository so the next ``init`` builds again."""
    global _initializing
    with _lock:
        _initializing = None


def build_repository(config: OverrideConfig) -> OverrideRepository:
    checkout_path = clone_overrides_repo(config)
    packages_path = checkout_path / PACKAGES_DIRNAME
    try:
        specs = sorted(entry.name for entry in packages_path.iterdir())
    except OSError as exc:
        raise FilesystemError(f"Unable to list {packages_path}: {exc}") from exc

    with ThreadPoolExecutor(max_workers=config.max_workers) as pool:
        loaded = list(pool.map(lambda spec: _load_entry(packages_path, spec), specs))

    index: Dict[str, Dict[str, PackageOverride]] = {}
    for item in loaded:
        if item is None:
            continue
        spec, override = item
        package_overrides = index.setdefault(spec.package_name, {})
        if spec.version_range in package_overrides:
            logger.warning(
                "Duplicate override for %s %r, keeping the last one",
                spec.package_name,
                spec.version_range,
            )
        package_overrides[spec.version_range] = override

    overrides = MappingProxyType(
        {
            name: tuple(VersionedOverride(version_range, override) for version_range, override in ranges.items())
            for name, ranges in index.items()
        }
    )
    logger.info(
        "Loaded %d override records for %d packages from %s",
        sum(len(ranges) for ranges in overrides.values()),
        len(overrides),
        checkout_path,
    )
    return OverrideRepository(checkout_path=checkout_path, overrides=overrides)


def clone_overrides_repo(config: OverrideConfig) -> Path:
    if config.checkout_path is not None:
        return Path(config.checkout_path)
    return ensure_checkout(
        config.repository_url,
        config.default_checkout_path,
        branch=config.branch,
        on_clone=lambda: logger.info("Fetching OPAM repository overrides..."),
        on_update=lambda: logger.info("Updating OPAM repository overrides..."),
        force_update=False,
        offline=config.offline,
        prefer_offline=config.prefer_offline,
    )


def _load_entry(packages_path: Path, spec: str) -> Optional[Tuple[OverrideSpec, PackageOverride]]:
    override = read_override(packages_path / spec)
    if override is None:
        return None
    logger.debug("Loaded override %s", spec)
    return parse_override_spec(spec), override


def read_override(root: Path) -> Optional[PackageOverride]:
    """Read ``package.yaml`` (or else ``package.json``) under ``root``.

    Returns ``None`` when the directory holds neither file.
    """
    yaml_path = root / YAML_FILENAME
    json_path = root / JSON_FILENAME
    if yaml_path.exists():
        path = yaml_path
        raw = _parse(path, yaml.safe_load, yaml.YAMLError)
    elif json_path.exists():
        path = json_path
        raw = _parse(path, json.loads, json.JSONDecodeError)
    else:
        return None
    if raw is not None and not isinstance(raw, dict):
        raise ParseError(path, f"expected a mapping, got {type(raw).__name__}")
    try:
        return normalize_override(raw)
    except ValidationError as exc:
        raise ParseError(path, str(exc)) from exc


def _parse(path: Path, loader, error_type) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise FilesystemError(f"Unable to read {path}: {exc}") from exc
    try:
        return loader(text)
    except error_type as exc:
        raise ParseError(path, str(exc)) from exc
