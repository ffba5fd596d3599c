"""Merge matching overrides into a manifest."""

from __future__ import annotations

import logging
from typing import List, Optional

import nodesemver

from ..manifest.models import Manifest
from .models import PackageOverride
from .repository import OverrideRepository

logger = logging.getLogger(__name__)

OPAM_SCOPE = "opam"


def strip_scope(name: str, scope: str = OPAM_SCOPE) -> str:
    """``@opam/foo`` -> ``foo``; names outside the scope are returned as is."""
    prefix = f"@{scope}/"
    if name.startswith(prefix):
        return name[len(prefix):]
    return name


def strip_version_prerelease(version: str) -> str:
    return version.split("-", 1)[0]


def satisfies(version: str, version_range: str) -> bool:
    """npm-style range test; unparseable input never matches."""
    try:
        return bool(nodesemver.satisfies(version, version_range))
    except ValueError:
        logger.debug("Cannot test %r against range %r", version, version_range)
        return False


def apply_override(
    repository: OverrideRepository,
    manifest: Manifest,
    scope: str = OPAM_SCOPE,
) -> Optional[Manifest]:
    """Return a new manifest with every matching override merged in.

    ``None`` means no override applies and the manifest needs no change.
    The input manifest and the repository are never modified.
    """
    package_overrides = repository.get(strip_scope(manifest.name, scope))
    if not package_overrides:
        return None

    version = strip_version_prerelease(manifest.version)
    result: Optional[Manifest] = None
    for version_range, override in package_overrides:
        if satisfies(version, version_range):
            if result is None:
                result = manifest.model_copy(deep=True)
            result = _merge(result, override)
    return result


def _commands(commands: Optional[List[List[str]]]) -> Optional[List[List[str]]]:
    if not commands:
        return None
    return [list(command) for command in commands]


def _merge(manifest: Manifest, override: PackageOverride) -> Manifest:
    esy = manifest.esy
    opam = manifest.opam
    return manifest.model_copy(
        update={
            "esy": esy.model_copy(
                update={
                    "build": _commands(override.build) or esy.build,
                    "install": _commands(override.install) or esy.install,
                    "exported_env": {**esy.exported_env, **override.exported_env},
                }
            ),
            "opam": opam.model_copy(
                update={
                    "url": override.opam.url or opam.url,
                    "checksum": override.opam.checksum or opam.checksum,
                    "files": [*opam.files, *override.opam.files],
                    "patches": [*opam.patches, *override.opam.patches],
                }
            ),
            "dependencies": {**manifest.dependencies, **(override.dependencies or {})},
            "peer_dependencies": {**manifest.peer_dependencies, **(override.peer_dependencies or {})},
        }
    )
