"""
Core update engine for depbump.

- :mod:`depbump.core.grammar` parses requirement strings per ecosystem.
- :mod:`depbump.core.updaters` rewrites them towards a target version.
- :mod:`depbump.core.source_resolver` decides git ref / registry moves.
- :mod:`depbump.core.manifest` writes results back into manifest text.
"""

from __future__ import annotations

from depbump.core.engine import update_requirements
from depbump.core.grammar import grammar_for
from depbump.core.manifest import is_supported_manifest, update_manifest_content
from depbump.core.source_resolver import (
    GitResolution,
    SourceDecision,
    SourceOutcome,
    SourceTransitionResolver,
)
from depbump.core.updaters import UPDATERS, RequirementUpdater, updater_for

__all__ = [
    "GitResolution",
    "RequirementUpdater",
    "SourceDecision",
    "SourceOutcome",
    "SourceTransitionResolver",
    "UPDATERS",
    "grammar_for",
    "is_supported_manifest",
    "update_manifest_content",
    "update_requirements",
    "updater_for",
]
