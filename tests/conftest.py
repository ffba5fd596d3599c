import json
import sys
from pathlib import Path

import pytest
import yaml

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from esy_opam_override.config import OverrideConfig  # noqa: E402
from esy_opam_override.overrides import reset  # noqa: E402


def write_override(checkout: Path, spec: str, data, fmt: str = "yaml") -> Path:
    entry = checkout / "packages" / spec
    entry.mkdir(parents=True, exist_ok=True)
    if fmt == "yaml":
        path = entry / "package.yaml"
        path.write_text(data if isinstance(data, str) else yaml.safe_dump(data), encoding="utf-8")
    else:
        path = entry / "package.json"
        path.write_text(data if isinstance(data, str) else json.dumps(data), encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def fresh_repository():
    reset()
    yield
    reset()


@pytest.fixture()
def checkout(tmp_path):
    root = tmp_path / "esy-opam-override"
    (root / "packages").mkdir(parents=True)
    write_override(
        root,
        "ocamlfind",
        {
            "build": [["./configure", "-bindir", "#{self.bin}"], ["make", "all"]],
            "exportedEnv": {"OCAMLFIND_CONF": {"val": "#{self.lib}/findlib.conf", "scope": "global"}},
        },
    )
    write_override(
        root,
        "conf-gmp.>=1.0.0_<2.0.0",
        {"opam": {"files": [{"name": "test.c", "content": "int main() {}"}]}},
        fmt="json",
    )
    (root / "packages" / "empty-entry").mkdir()
    return root


@pytest.fixture()
def config(checkout, tmp_path):
    return OverrideConfig(checkout_path=checkout, cache_folder=tmp_path / "cache")


@pytest.fixture()
def make_override():
    return write_override
