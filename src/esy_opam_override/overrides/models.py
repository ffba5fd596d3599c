"""Typed override records loaded from the override repository."""

from __future__ import annotations

from typing import Any, Dict, List, NamedTuple, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..manifest.models import Command, ExportedEnvVar, OpamFile


class OpamOverride(BaseModel):
    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    url: Optional[str] = None
    checksum: Optional[str] = None
    files: List[OpamFile] = Field(default_factory=list)
    patches: List[OpamFile] = Field(default_factory=list)


class PackageOverride(BaseModel):
    """One ``package.yaml``/``package.json`` record.

    ``None`` for ``build``, ``install``, ``dependencies`` or
    ``peer_dependencies`` leaves the manifest's value alone.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, coerce_numbers_to_str=True)

    build: Optional[List[Command]] = None
    install: Optional[List[Command]] = None
    dependencies: Optional[Dict[str, str]] = None
    peer_dependencies: Optional[Dict[str, str]] = Field(None, alias="peerDependencies")
    exported_env: Dict[str, ExportedEnvVar] = Field(default_factory=dict, alias="exportedEnv")
    opam: OpamOverride = Field(default_factory=OpamOverride)


class VersionedOverride(NamedTuple):
    version_range: str
    override: PackageOverride


def normalize_override(raw: Optional[Dict[str, Any]]) -> PackageOverride:
    """Default the optional sections of a parsed override and type it.

    ``exportedEnv``, ``opam``, ``opam.files`` and ``opam.patches`` may be
    missing or null in the source file; they come out empty.
    """
    data = dict(raw or {})
    data["exportedEnv"] = data.get("exportedEnv") or {}
    opam = dict(data.get("opam") or {})
    opam["files"] = opam.get("files") or []
    opam["patches"] = opam.get("patches") or []
    data["opam"] = opam
    return PackageOverride.model_validate(data)
