"""Override repository loading and application."""

from .applier import apply_override, satisfies, strip_scope, strip_version_prerelease
from .models import OpamOverride, PackageOverride, VersionedOverride, normalize_override
from .repository import OverrideRepository, build_repository, init, read_override, reset
from .spec import MATCH_ALL_VERSIONS, OverrideSpec, parse_override_spec

__all__ = [
    "MATCH_ALL_VERSIONS",
    "OpamOverride",
    "OverrideRepository",
    "OverrideSpec",
    "PackageOverride",
    "VersionedOverride",
    "apply_override",
    "build_repository",
    "init",
    "normalize_override",
    "parse_override_spec",
    "read_override",
    "reset",
    "satisfies",
    "strip_scope",
    "strip_version_prerelease",
]
