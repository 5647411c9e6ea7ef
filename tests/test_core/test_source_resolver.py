"""Unit tests for depbump.core.source_resolver module."""

from __future__ import annotations

import pytest

from depbump.core.source_resolver import (
    GitResolution,
    SourceDecision,
    SourceOutcome,
    SourceTransitionResolver,
)
from depbump.exceptions import MultipleIncompatibleSources
from depbump.models import Requirement, Source, SourceType

URL = "https://github.com/org/lib"


def git_requirement(ref=None, branch=None, file="Cargo.toml") -> Requirement:
    return Requirement(
        None, file, source=Source(SourceType.GIT, url=URL, ref=ref, branch=branch)
    )


@pytest.mark.unit
class TestSourceUnification:
    """Tests for picking the dependency's single source."""

    def test_no_sources(self) -> None:
        resolver = SourceTransitionResolver([Requirement("1.0", "Cargo.toml")])

        assert resolver.source is None

    def test_same_source_declared_twice(self) -> None:
        resolver = SourceTransitionResolver(
            [git_requirement(ref="v1.0.0"), git_requirement(ref="v1.0.0", file="b/Cargo.toml")]
        )

        assert resolver.source.url == URL

    def test_conflicting_sources_raise(self) -> None:
        reqs = [
            git_requirement(ref="v1.0.0"),
            Requirement(
                None, "b/Cargo.toml", source=Source(SourceType.GIT, url="https://github.com/other/lib")
            ),
        ]

        with pytest.raises(MultipleIncompatibleSources) as exc_info:
            SourceTransitionResolver(reqs)

        assert len(exc_info.value.sources) == 2

    def test_git_and_registry_conflict(self) -> None:
        reqs = [
            git_requirement(ref="v1.0.0"),
            Requirement("1.0", "b/Cargo.toml", source=Source(SourceType.REGISTRY)),
        ]

        with pytest.raises(MultipleIncompatibleSources):
            SourceTransitionResolver(reqs)


@pytest.mark.unit
class TestResolve:
    """Tests for the three possible outcomes."""

    def test_no_lookup_means_no_change(self) -> None:
        decision = SourceTransitionResolver([git_requirement(ref="v1.0.0")]).resolve()

        assert decision.outcome is SourceOutcome.NO_CHANGE
        assert not decision.changed

    def test_registry_dependency_never_changes(self) -> None:
        resolution = GitResolution(tag_for_latest_version="v2.0.0", registry_release_available=True)
        decision = SourceTransitionResolver(
            [Requirement("1.0", "Cargo.toml", source=Source(SourceType.REGISTRY))], resolution
        ).resolve()

        assert decision.outcome is SourceOutcome.NO_CHANGE

    def test_version_shaped_ref_is_bumped(self) -> None:
        resolution = GitResolution(tag_for_latest_version="v2.0.0")

        decision = SourceTransitionResolver([git_requirement(ref="v1.0.0")], resolution).resolve()

        assert decision.outcome is SourceOutcome.REF_BUMPED
        assert decision.source.ref == "v2.0.0"
        assert decision.source.url == URL
        assert decision.changed

    def test_ref_matching_current_tag_is_bumped(self) -> None:
        resolution = GitResolution(tag_for_latest_version="release-2", current_tag="release-1")

        decision = SourceTransitionResolver([git_requirement(ref="release-1")], resolution).resolve()

        assert decision.outcome is SourceOutcome.REF_BUMPED
        assert decision.source.ref == "release-2"

    def test_same_tag_is_no_change(self) -> None:
        resolution = GitResolution(tag_for_latest_version="v1.0.0")

        decision = SourceTransitionResolver([git_requirement(ref="v1.0.0")], resolution).resolve()

        assert decision.outcome is SourceOutcome.NO_CHANGE

    def test_branch_switches_to_registry(self) -> None:
        resolution = GitResolution(registry_release_available=True)

        decision = SourceTransitionResolver([git_requirement(ref="master")], resolution).resolve()

        assert decision == SourceDecision(SourceOutcome.SOURCE_SWITCHED_TO_REGISTRY, None)

    def test_tag_wins_over_registry(self) -> None:
        resolution = GitResolution(tag_for_latest_version="v2.0.0", registry_release_available=True)

        decision = SourceTransitionResolver([git_requirement(ref="v1.0.0")], resolution).resolve()

        assert decision.outcome is SourceOutcome.REF_BUMPED

    def test_branch_without_registry_release_is_no_change(self) -> None:
        resolution = GitResolution(tag_for_latest_version="v2.0.0")

        decision = SourceTransitionResolver(
            [git_requirement(branch="main")], resolution
        ).resolve()

        assert decision.outcome is SourceOutcome.NO_CHANGE
        assert decision.source.branch == "main"
