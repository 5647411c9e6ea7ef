"""SemVer-family grammars: npm/yarn, Cargo and Go dep."""

from __future__ import annotations

from typing import List

from depbump.core.grammar.base import (
    Bound,
    Grammar,
    Partial,
    bump,
    caret_bounds,
    comparison_bounds,
    exact_bounds,
    tilde_bounds,
    upper,
    wildcard_bounds,
)
from depbump.models.ecosystem import PackageManager


def _x_range_or_exact(partial: Partial) -> List[Bound]:
    """Bare ``1.2`` is ``1.2.x``; only a full version is an exact pin."""
    if partial.wildcard or partial.precision < 3:
        return wildcard_bounds(partial)
    return exact_bounds(partial)


def _caret_or_wildcard(partial: Partial) -> List[Bound]:
    if partial.wildcard:
        return wildcard_bounds(partial)
    return caret_bounds(partial)


def _partial_lte(partial: Partial) -> List[Bound]:
    """``<=1.2`` includes every ``1.2.x``."""
    if not partial.numbers:
        return []
    if partial.wildcard or partial.precision < 3:
        return [upper(bump(partial.numbers, partial.precision - 1))]
    return [Bound("<=", partial.floor())]


def _partial_gt(partial: Partial) -> List[Bound]:
    """``>1.2`` excludes every ``1.2.x``."""
    if not partial.numbers:
        return [Bound("<", partial.floor())]
    if partial.wildcard or partial.precision < 3:
        return [Bound(">=", bump(partial.numbers, partial.precision - 1))]
    return [Bound(">", partial.floor())]


_COMPARISONS = {
    ">=": comparison_bounds(">="),
    "<": comparison_bounds("<"),
    "<=": _partial_lte,
    ">": _partial_gt,
}


class NpmGrammar(Grammar):
    """node-semver ranges as used in ``package.json``."""

    package_manager = PackageManager.NPM_AND_YARN
    operators = ("^", "~>", "~", ">=", "<=", ">", "<", "=")
    whitespace_and = True
    hyphen_ranges = True
    expansions = {
        "": _x_range_or_exact,
        "=": _x_range_or_exact,
        "^": caret_bounds,
        "~": tilde_bounds,
        "~>": tilde_bounds,
        **_COMPARISONS,
    }


class CargoGrammar(Grammar):
    """Cargo requirements; a bare version means caret."""

    package_manager = PackageManager.CARGO
    operators = ("^", "~", ">=", "<=", ">", "<", "=")
    expansions = {
        "": _caret_or_wildcard,
        "^": _caret_or_wildcard,
        "~": tilde_bounds,
        "=": _x_range_or_exact,
        **_COMPARISONS,
    }


class DepGrammar(CargoGrammar):
    """Go dep constraints: Cargo-like, plus ``!=`` and ``||``."""

    package_manager = PackageManager.DEP
    operators = ("^", "~", ">=", "<=", "!=", ">", "<", "=")
    expansions = {
        **CargoGrammar.expansions,
        "!=": comparison_bounds("!="),
    }
