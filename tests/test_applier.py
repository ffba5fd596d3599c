from pathlib import Path
from types import MappingProxyType

import pytest

from esy_opam_override.manifest import Manifest
from esy_opam_override.overrides import (
    OverrideRepository,
    VersionedOverride,
    apply_override,
    normalize_override,
    satisfies,
    strip_scope,
    strip_version_prerelease,
)


def make_repository(**packages) -> OverrideRepository:
    overrides = {
        name: tuple(VersionedOverride(version_range, normalize_override(raw)) for version_range, raw in entries)
        for name, entries in packages.items()
    }
    return OverrideRepository(checkout_path=Path("/overrides"), overrides=MappingProxyType(overrides))


def make_manifest(**fields) -> Manifest:
    data = {"name": "@opam/foo", "version": "1.5.0"}
    data.update(fields)
    return Manifest.model_validate(data)


def test_strip_helpers():
    assert strip_scope("@opam/foo") == "foo"
    assert strip_scope("foo") == "foo"
    assert strip_scope("@esy-ocaml/foo", scope="esy-ocaml") == "foo"
    assert strip_version_prerelease("2.0.0-rc1") == "2.0.0"
    assert strip_version_prerelease("2.0.0") == "2.0.0"


def test_satisfies_is_total():
    assert satisfies("1.5.0", "x.x.x")
    assert satisfies("1.5.0", ">=1.0.0 <2.0.0")
    assert not satisfies("2.5.0", ">=1.0.0 <2.0.0")
    assert not satisfies("not-a-version", ">=1.0.0")


def test_files_are_appended_in_order():
    manifest = make_manifest(version="1.2.3-dev", opam={"files": [{"name": "a", "content": "x"}]})
    repository = make_repository(foo=[(">=1.0.0", {"opam": {"files": [{"name": "b", "content": "y"}]}})])

    result = apply_override(repository, manifest)

    assert [(f.name, f.content) for f in result.opam.files] == [("a", "x"), ("b", "y")]
    assert [(f.name, f.content) for f in manifest.opam.files] == [("a", "x")]


def test_prerelease_is_stripped_before_matching():
    manifest = make_manifest(version="2.0.0-rc1")
    repository = make_repository(foo=[("2.0.0", {"build": [["make"]]})])
    assert apply_override(repository, manifest).esy.build == [["make"]]


def test_unknown_package_is_no_override():
    manifest = make_manifest(name="@opam/bar")
    before = manifest.model_dump()
    assert apply_override(make_repository(foo=[("x.x.x", {})]), manifest) is None
    assert manifest.model_dump() == before


def test_no_matching_range_is_no_override():
    manifest = make_manifest(version="0.9.0")
    repository = make_repository(foo=[(">=1.0.0", {"build": [["make"]]})])
    assert apply_override(repository, manifest) is None


def test_later_range_wins_on_conflicts():
    manifest = make_manifest(esy={"exportedEnv": {"KEEP": {"val": "orig"}, "A": {"val": "orig"}}})
    repository = make_repository(
        foo=[
            ("x.x.x", {"exportedEnv": {"A": {"val": "all"}, "B": {"val": "all"}}}),
            (">=1.0.0", {"exportedEnv": {"A": {"val": "ranged", "scope": "global"}}}),
        ]
    )

    result = apply_override(repository, manifest)

    env = {name: (var.val, var.scope) for name, var in result.esy.exported_env.items()}
    assert env == {
        "KEEP": ("orig", None),
        "A": ("ranged", "global"),
        "B": ("all", None),
    }


def test_field_merge_policy():
    manifest = make_manifest(
        esy={"build": [["dune", "build"]], "install": [["dune", "install"]]},
        opam={
            "url": "https://example.org/foo-1.5.0.tgz",
            "checksum": "md5=old",
            "patches": [{"name": "fix.patch", "content": "--- a"}],
        },
        dependencies={"@opam/dune": "*", "ocaml": ">= 4.2.0"},
        peerDependencies={"ocaml": ">= 4.2.0"},
    )
    repository = make_repository(
        foo=[
            (
                "x.x.x",
                {
                    "build": [],
                    "install": [["make", "install"]],
                    "dependencies": {"@opam/dune": ">= 1.0.0", "@esy-ocaml/substs": "*"},
                    "peerDependencies": {"ocaml": ">= 4.6.0"},
                    "opam": {
                        "checksum": "sha256=new",
                        "url": "",
                        "patches": [{"name": "fix.patch", "content": "--- b"}],
                    },
                },
            )
        ]
    )

    result = apply_override(repository, manifest)

    assert result.esy.build == [["dune", "build"]]
    assert result.esy.install == [["make", "install"]]
    assert result.opam.url == "https://example.org/foo-1.5.0.tgz"
    assert result.opam.checksum == "sha256=new"
    assert [p.content for p in result.opam.patches] == ["--- a", "--- b"]
    assert result.dependencies == {"@opam/dune": ">= 1.0.0", "ocaml": ">= 4.2.0", "@esy-ocaml/substs": "*"}
    assert result.peer_dependencies == {"ocaml": ">= 4.6.0"}


def test_input_manifest_and_repository_untouched():
    manifest = make_manifest(
        esy={"exportedEnv": {"A": {"val": "orig"}}},
        opam={"files": [{"name": "a", "content": "x"}]},
        dependencies={"ocaml": "*"},
    )
    raw = {"install": [["make", "install"]], "opam": {"files": [{"name": "b", "content": "y"}]}}
    repository = make_repository(foo=[("x.x.x", raw), (">=1.0.0", raw)])
    before = manifest.model_dump()
    override_before = repository.get("foo")[0].override.model_dump()

    result = apply_override(repository, manifest)
    result.opam.files.append(result.opam.files[0])
    result.esy.install[0].append("--prefix")
    result.dependencies["extra"] = "*"

    assert manifest.model_dump() == before
    assert repository.get("foo")[0].override.model_dump() == override_before
    assert result.esy is not manifest.esy
    assert result.opam.files is not manifest.opam.files


def test_applying_twice_gives_same_result():
    manifest = make_manifest(opam={"files": [{"name": "a", "content": "x"}]})
    repository = make_repository(
        foo=[
            ("x.x.x", {"opam": {"files": [{"name": "b", "content": "y"}]}}),
            (">=1.0.0", {"exportedEnv": {"A": {"val": "1"}}}),
        ]
    )
    first = apply_override(repository, manifest)
    second = apply_override(repository, manifest)
    assert first == second
    assert first is not second
    assert len(first.opam.files) == 2


def test_extra_manifest_fields_survive():
    manifest = make_manifest(description="A package", license="MIT")
    repository = make_repository(foo=[("x.x.x", {"build": [["make"]]})])
    result = apply_override(repository, manifest)
    assert result.model_extra["description"] == "A package"
    assert result.model_extra["license"] == "MIT"


@pytest.mark.parametrize("version", ["1.0.0", "1.9.9", "1.5.0-beta"])
def test_bounded_range_matches(version):
    repository = make_repository(foo=[(">=1.0.0 <2.0.0", {"build": [["make"]]})])
    assert apply_override(repository, make_manifest(version=version)) is not None
