"""pip and Pipenv requirement updater (``requirements.txt``, ``Pipfile``).

Pins (``==``) and compatible releases (``~=``) move to the target at
their own precision; a trailing ``.*`` survives. Upper bounds move just
past the target and ``!=`` exclusions of it are dropped.
"""

from __future__ import annotations

from typing import Any, List, Tuple

from depbump.core.grammar import Comparator, Expression, PipGrammar, replace_span
from depbump.core.updaters.base import RequirementUpdater, at_same_precision, precision_preserving
from depbump.models import PackageManager, UpdateStrategy

_PIN_OPERATORS = ("", "==", "===")


class PipRequirementUpdater(RequirementUpdater):
    package_manager = PackageManager.PIP
    grammar = PipGrammar()
    bumps_satisfied_requirements = True

    def segments(self, version: Any) -> Tuple[int, ...]:
        return tuple(version.release)

    def bump(self, text: str, expression: Expression, satisfied: bool) -> str:
        if len(expression.groups) > 1:
            separator = expression.or_separator or " || "
            return f"{text}{separator}=={self.target}"

        comparators: List[Comparator] = [
            c for c in expression.constraints if isinstance(c, Comparator)
        ]
        pin = next((c for c in comparators if c.operator in _PIN_OPERATORS), None)
        if pin is not None:
            token = precision_preserving(pin.version, self.target, wildcards=("*",))
            if "*" not in pin.version:
                token = self.target
            return replace_span(text, pin.version_span, token)

        compatible = next((c for c in comparators if c.operator == "~="), None)
        if compatible is not None:
            text = replace_span(
                text,
                compatible.version_span,
                at_same_precision(self.target, compatible.version),
            )
            expression = self.grammar.parse(text)

        if satisfied and self.update_strategy == UpdateStrategy.BUMP_VERSIONS:
            return self.raise_lower_bounds(text, expression)

        separator = ", " if ", " in text else ","
        return self.join_range_constraints(text, expression, separator)

    def raise_lower_bounds(self, text: str, expression: Expression) -> str:
        for comparator in reversed(list(expression.comparators())):
            if comparator.operator == ">=":
                text = replace_span(text, comparator.version_span, self.target)
        return text

    def initial_requirement(self) -> str:
        if self.widening:
            return f">={self.target}"
        return f"=={self.target}"
