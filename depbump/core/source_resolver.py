"""Decide what happens to a git-sourced dependency during an update.

The resolver never talks to git itself. The caller looks up the tag for
the target version (and whether a registry release exists) and passes
that in as a :class:`GitResolution`; the resolver only decides between
keeping the source, moving its ref, or switching to the registry.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from depbump.exceptions import MultipleIncompatibleSources
from depbump.models import Requirement, Source
from depbump.models.version import Version
from depbump.utils.logger import get_logger

logger = get_logger("source_resolver")


class SourceOutcome(str, Enum):
    NO_CHANGE = "no_change"
    REF_BUMPED = "ref_bumped"
    SOURCE_SWITCHED_TO_REGISTRY = "source_switched_to_registry"


@dataclass(frozen=True)
class GitResolution:
    """What a git-ref lookup found for the target version.

    Attributes:
        tag_for_latest_version: Tag pointing at the target version, if any.
        current_tag: Tag the dependency currently resolves to, if known.
        registry_release_available: Whether the target version is
            published to the registry.
    """

    tag_for_latest_version: Optional[str] = None
    current_tag: Optional[str] = None
    registry_release_available: bool = False


@dataclass(frozen=True)
class SourceDecision:
    outcome: SourceOutcome
    source: Optional[Source]

    @property
    def changed(self) -> bool:
        return self.outcome is not SourceOutcome.NO_CHANGE


class SourceTransitionResolver:
    """Resolve the source a dependency should have after updating.

    Args:
        requirements: All requirements of the dependency.
        resolution: Result of the caller's git lookup, or ``None`` when no
            lookup was made.

    Raises:
        MultipleIncompatibleSources: Requirements name different sources.
    """

    def __init__(
        self,
        requirements: Sequence[Requirement],
        resolution: Optional[GitResolution] = None,
    ) -> None:
        self.requirements = requirements
        self.resolution = resolution
        self.source = self._unify_sources()

    def _unify_sources(self) -> Optional[Source]:
        sources: List[Source] = []
        seen: List[Tuple[object, Optional[str]]] = []
        for req in self.requirements:
            if req.source is None:
                continue
            key = (req.source.type, req.source.url)
            if key not in seen:
                seen.append(key)
                sources.append(req.source)

        if len(sources) > 1:
            raise MultipleIncompatibleSources(sources)
        return sources[0] if sources else None

    def resolve(self) -> SourceDecision:
        source = self.source
        resolution = self.resolution

        if source is None or not source.is_git or resolution is None:
            return SourceDecision(SourceOutcome.NO_CHANGE, source)

        new_tag = resolution.tag_for_latest_version
        if self._pinned_to_tag(source) and new_tag and new_tag != source.ref:
            logger.debug("Moving git ref %s -> %s", source.ref, new_tag)
            return SourceDecision(SourceOutcome.REF_BUMPED, source.with_ref(new_tag))

        if resolution.registry_release_available:
            logger.debug("Switching %s to the registry", source)
            return SourceDecision(SourceOutcome.SOURCE_SWITCHED_TO_REGISTRY, None)

        return SourceDecision(SourceOutcome.NO_CHANGE, source)

    def _pinned_to_tag(self, source: Source) -> bool:
        """True when the ref is the current tag or looks like a version."""
        ref = source.ref
        if not ref:
            return False
        if self.resolution is not None and ref == self.resolution.current_tag:
            return True
        return Version.correct(ref)
