"""Unit tests for depbump.models.requirement module.

Test Coverage:
- Requirement and Source construction and defaults
- Copy helpers returning the same object when nothing changes
- Dict round trips used by the JSON input and output
- String representations
"""

from __future__ import annotations

import pytest

from depbump.models.requirement import (
    Requirement,
    Source,
    SourceType,
    requirements_from_dicts,
)


@pytest.mark.unit
class TestSource:
    """Tests for Source descriptors."""

    def test_is_git(self) -> None:
        assert Source(SourceType.GIT, url="https://github.com/a/b").is_git
        assert not Source(SourceType.REGISTRY).is_git

    def test_with_ref_returns_copy(self) -> None:
        source = Source(SourceType.GIT, url="https://github.com/a/b", ref="v1.0.0")

        bumped = source.with_ref("v2.0.0")

        assert bumped.ref == "v2.0.0"
        assert bumped.url == source.url
        assert source.ref == "v1.0.0"

    def test_from_dict_none(self) -> None:
        assert Source.from_dict(None) is None
        assert Source.from_dict({}) is None

    def test_from_dict(self) -> None:
        source = Source.from_dict(
            {"type": "git", "url": "https://github.com/a/b", "branch": "main", "ref": None}
        )

        assert source == Source(SourceType.GIT, url="https://github.com/a/b", branch="main")

    def test_to_dict(self) -> None:
        source = Source(SourceType.PATH, url="../lib")

        assert source.to_dict() == {"type": "path", "url": "../lib", "branch": None, "ref": None}

    def test_str(self) -> None:
        source = Source(SourceType.GIT, url="https://github.com/a/b", ref="v1")

        assert str(source) == "git:https://github.com/a/b#v1"
        assert str(Source(SourceType.REGISTRY)) == "registry:<no url>"


@pytest.mark.unit
class TestRequirement:
    """Tests for Requirement records."""

    def test_defaults(self) -> None:
        req = Requirement(requirement="^1.0.0", file="package.json")

        assert req.groups == ()
        assert req.source is None

    def test_is_frozen(self) -> None:
        req = Requirement(requirement="^1.0.0", file="package.json")

        with pytest.raises(AttributeError):
            req.requirement = "^2.0.0"  # type: ignore[misc]

    def test_with_requirement(self) -> None:
        req = Requirement(requirement="^1.0.0", file="package.json", groups=("dependencies",))

        updated = req.with_requirement("^2.0.0")

        assert updated.requirement == "^2.0.0"
        assert updated.groups == ("dependencies",)
        assert req.requirement == "^1.0.0"

    def test_with_requirement_unchanged_returns_self(self) -> None:
        req = Requirement(requirement="^1.0.0", file="package.json")

        assert req.with_requirement("^1.0.0") is req

    def test_with_source_unchanged_returns_self(self) -> None:
        source = Source(SourceType.REGISTRY)
        req = Requirement(requirement="1.0", file="Cargo.toml", source=source)

        assert req.with_source(Source(SourceType.REGISTRY)) is req
        assert req.with_source(None).source is None

    def test_dict_round_trip(self) -> None:
        req = Requirement(
            requirement=None,
            file="mix.exs",
            groups=("prod",),
            source=Source(SourceType.GIT, url="https://github.com/a/b", ref="v1.0.0"),
        )

        assert Requirement.from_dict(req.to_dict()) == req

    def test_from_dict_missing_file_raises(self) -> None:
        with pytest.raises(KeyError):
            Requirement.from_dict({"requirement": "1.0"})

    def test_requirements_from_dicts_preserves_order(self) -> None:
        reqs = requirements_from_dicts(
            [
                {"file": "a/package.json", "requirement": "^1.0.0"},
                {"file": "b/package.json", "requirement": "~1.0.0"},
            ]
        )

        assert [r.file for r in reqs] == ["a/package.json", "b/package.json"]
        assert isinstance(reqs, tuple)

    def test_str(self) -> None:
        assert str(Requirement(requirement="~> 1.0", file="mix.exs")) == "mix.exs: ~> 1.0"
        assert str(Requirement(requirement=None, file="mix.exs")) == "mix.exs: <none>"
