"""Load override repository settings from YAML, the environment and flags."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field

DEFAULT_REPOSITORY_URL = "https://github.com/esy-ocaml/esy-opam-override"
DEFAULT_CACHE_FOLDER = Path.home() / ".esy" / "cache"
DEFAULT_BRANCH = "4"

ENV_VARS = {
    "repository_url": "ESY__OPAM_OVERRIDE_REPOSITORY",
    "checkout_path": "ESY__OPAM_OVERRIDE_REPOSITORY_CHECKOUT",
    "cache_folder": "ESY__CACHE_FOLDER",
    "esy_metadata_version": "ESY__METADATA_VERSION",
    "offline": "ESY__OFFLINE",
    "prefer_offline": "ESY__PREFER_OFFLINE",
}


class OverrideConfig(BaseModel):
    repository_url: str = Field(DEFAULT_REPOSITORY_URL, description="Git remote of the override repository")
    checkout_path: Optional[Path] = Field(
        None, description="Use this local checkout as is instead of cloning"
    )
    cache_folder: Path = DEFAULT_CACHE_FOLDER
    esy_metadata_version: Optional[Union[int, str]] = Field(
        None, description="Branch of the override repository to track"
    )
    offline: bool = False
    prefer_offline: bool = False
    scope: str = "opam"
    max_workers: int = Field(8, ge=1)

    @property
    def branch(self) -> str:
        return str(self.esy_metadata_version or DEFAULT_BRANCH)

    @property
    def default_checkout_path(self) -> Path:
        return self.cache_folder / "esy-opam-override"


def load_yaml(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        return yaml.safe_load(handle) or {}


def _env_values() -> Dict[str, Any]:
    values: Dict[str, Any] = {}
    for field, var in ENV_VARS.items():
        raw = os.getenv(var)
        if raw:
            values[field] = raw
    return values


def load_config(path: Path | None = None, **overrides: Any) -> OverrideConfig:
    """Build the config: YAML file, then environment, then explicit keyword values.

    Keyword values set to ``None`` are ignored so CLI flags left at their
    defaults do not mask the file or the environment.
    """
    load_dotenv()
    data: Dict[str, Any] = {}
    if path is not None:
        data.update(load_yaml(path).get("override") or {})
    data.update(_env_values())
    data.update({key: value for key, value in overrides.items() if value is not None})
    return OverrideConfig(**data)
