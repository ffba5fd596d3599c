"""Decoding of override directory names."""

from __future__ import annotations

from typing import NamedTuple

MATCH_ALL_VERSIONS = "x.x.x"


class OverrideSpec(NamedTuple):
    package_name: str
    version_range: str


def parse_override_spec(spec: str) -> OverrideSpec:
    """Split ``<name>[.<range>]`` on the first dot; ``_`` in the range stands for a space."""
    package_name, sep, encoded_range = spec.partition(".")
    if not sep:
        return OverrideSpec(package_name, MATCH_ALL_VERSIONS)
    return OverrideSpec(package_name, encoded_range.replace("_", " "))
