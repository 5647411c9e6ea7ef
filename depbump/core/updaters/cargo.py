"""Cargo and Go dep requirement updaters (``Cargo.toml``, ``Gopkg.toml``).

A bare version in these manifests is a caret requirement, so updating
it follows caret rules.
"""

from __future__ import annotations

from typing import List, Optional

from depbump.core.grammar import (
    CargoGrammar,
    Comparator,
    Constraint,
    DepGrammar,
    Expression,
    replace_span,
)
from depbump.core.updaters.base import RequirementUpdater, is_upper_range, precision_preserving
from depbump.models import PackageManager

_CARET_OPERATORS = ("", "^")
_OR_SEPARATOR = " || "


class CargoRequirementUpdater(RequirementUpdater):
    package_manager = PackageManager.CARGO
    grammar = CargoGrammar()
    bumps_satisfied_requirements = True
    caret_operators = _CARET_OPERATORS

    def bump(self, text: str, expression: Expression, satisfied: bool) -> str:
        if len(expression.groups) > 1:
            separator = expression.or_separator or _OR_SEPARATOR
            return f"{text}{separator}^{self.target}"

        if self.widening:
            return self.widen(text, expression)
        return self.bump_version(text, expression, satisfied)

    def widen(self, text: str, expression: Expression) -> str:
        if any(is_upper_range(c) or _is_lower_range(c) for c in expression.constraints):
            return self.join_range_constraints(text, expression)
        return self._update_comparator(text, expression.constraints[0])

    def bump_version(self, text: str, expression: Expression, satisfied: bool) -> str:
        constraints = expression.constraints

        exact = _first(constraints, lambda c: c.operator == "=")
        if exact is not None:
            return self._update_comparator(text, exact)

        pinned = _first(
            constraints,
            lambda c: "*" in c.version or c.operator in _CARET_OPERATORS + ("~",),
        )
        if pinned is not None:
            return self._update_comparator(text, pinned)

        if satisfied:
            return text
        return self.join_range_constraints(text, expression)

    def _update_comparator(self, text: str, comparator: Constraint) -> str:
        if not isinstance(comparator, Comparator):
            return text
        if comparator.operator in _CARET_OPERATORS:
            new_token = self.caret_token(comparator.version)
        else:
            new_token = precision_preserving(comparator.version, self.target)
        return replace_span(text, comparator.version_span, new_token)


class DepRequirementUpdater(CargoRequirementUpdater):
    """Go dep constraints: Cargo rules plus ``!=`` exclusions."""

    package_manager = PackageManager.DEP
    grammar = DepGrammar()


def _is_lower_range(constraint: Constraint) -> bool:
    return isinstance(constraint, Comparator) and constraint.operator in (">", ">=", "!=")


def _first(constraints, predicate) -> Optional[Comparator]:
    matches: List[Comparator] = [
        c for c in constraints if isinstance(c, Comparator) and predicate(c)
    ]
    return matches[0] if matches else None
