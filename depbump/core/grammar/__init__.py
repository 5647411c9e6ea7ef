"""Requirement grammars, one per package manager.

Example:
    >>> from depbump.core.grammar import grammar_for
    >>> grammar_for("npm_and_yarn").satisfied_by("^1.2.3", "1.9.0")
    True
"""

from __future__ import annotations

from typing import Dict, Union

from depbump.core.grammar.base import Bound, Grammar, Partial, bump, parse_partial
from depbump.core.grammar.composer import BRANCH_PREFIX, ComposerGrammar
from depbump.core.grammar.maven import MavenGrammar
from depbump.core.grammar.parser import (
    Alias,
    Comparator,
    Constraint,
    Expression,
    Group,
    HyphenRange,
    replace_span,
)
from depbump.core.grammar.pep440 import PipGrammar
from depbump.core.grammar.pessimistic import HexGrammar, TerraformGrammar
from depbump.core.grammar.semver import CargoGrammar, DepGrammar, NpmGrammar
from depbump.exceptions import UnsupportedPackageManager
from depbump.models.ecosystem import PackageManager

GRAMMARS: Dict[PackageManager, Grammar] = {
    grammar.package_manager: grammar
    for grammar in (
        NpmGrammar(),
        ComposerGrammar(),
        CargoGrammar(),
        DepGrammar(),
        TerraformGrammar(),
        PipGrammar(),
        HexGrammar(),
        MavenGrammar(),
    )
}


def grammar_for(package_manager: Union[str, PackageManager]) -> Grammar:
    """Return the grammar for ``package_manager``.

    Raises:
        UnsupportedPackageManager: No grammar is registered for it.
    """
    manager = PackageManager.parse(package_manager)
    try:
        return GRAMMARS[manager]
    except KeyError as exc:
        raise UnsupportedPackageManager(package_manager) from exc


__all__ = [
    "Alias",
    "BRANCH_PREFIX",
    "Bound",
    "CargoGrammar",
    "Comparator",
    "ComposerGrammar",
    "Constraint",
    "DepGrammar",
    "Expression",
    "Grammar",
    "GRAMMARS",
    "Group",
    "HexGrammar",
    "HyphenRange",
    "MavenGrammar",
    "NpmGrammar",
    "Partial",
    "PipGrammar",
    "TerraformGrammar",
    "bump",
    "grammar_for",
    "parse_partial",
    "replace_span",
]
