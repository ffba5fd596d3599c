"""Manifest model consumed and produced by the override applier."""

from .models import (
    EsyMetadata,
    ExportedEnvVar,
    Manifest,
    OpamFile,
    OpamMetadata,
    dump_manifest,
    load_manifest,
)

__all__ = [
    "EsyMetadata",
    "ExportedEnvVar",
    "Manifest",
    "OpamFile",
    "OpamMetadata",
    "dump_manifest",
    "load_manifest",
]
