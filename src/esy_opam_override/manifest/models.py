"""Pydantic models for the parts of an esy manifest touched by overrides."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

Command = List[str]


class OpamFile(BaseModel):
    """A file (or patch) shipped alongside an opam package."""

    model_config = ConfigDict(frozen=True)

    name: str
    content: str


class ExportedEnvVar(BaseModel):
    """Value and optional scope marker (usually ``global``) of an exported variable."""

    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    val: str
    scope: Optional[str] = None


class EsyMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    build: Optional[List[Command]] = None
    install: Optional[List[Command]] = None
    exported_env: Dict[str, ExportedEnvVar] = Field(default_factory=dict, alias="exportedEnv")


class OpamMetadata(BaseModel):
    model_config = ConfigDict(extra="allow")

    url: Optional[str] = None
    checksum: Optional[str] = None
    files: List[OpamFile] = Field(default_factory=list)
    patches: List[OpamFile] = Field(default_factory=list)


class Manifest(BaseModel):
    """An opam package converted into esy's manifest shape.

    Only the fields the applier reads or writes are typed; anything else the
    caller put in the manifest is kept as extra data.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    name: str
    version: str
    esy: EsyMetadata = Field(default_factory=EsyMetadata)
    opam: OpamMetadata = Field(default_factory=OpamMetadata)
    dependencies: Dict[str, str] = Field(default_factory=dict)
    peer_dependencies: Dict[str, str] = Field(default_factory=dict, alias="peerDependencies")


def load_manifest(path: Path) -> Manifest:
    with path.open("r", encoding="utf-8") as handle:
        return Manifest.model_validate(json.load(handle))


def dump_manifest(manifest: Manifest) -> Dict[str, Any]:
    return manifest.model_dump(mode="json", by_alias=True, exclude_none=True)
