"""Configuration loading."""

from .loader import DEFAULT_BRANCH, OverrideConfig, load_config, load_yaml

__all__ = ["DEFAULT_BRANCH", "OverrideConfig", "load_config", "load_yaml"]
