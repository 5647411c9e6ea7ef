"""Hex requirement updater (``mix.exs``).

Only the last ``or`` alternative is updated. When there are several,
the updated copy is appended as a new alternative so that earlier
major versions stay allowed.
"""

from __future__ import annotations

from typing import List

from depbump.core.grammar import Comparator, Expression, Group, HexGrammar, replace_span
from depbump.core.updaters.base import RequirementUpdater, at_same_precision
from depbump.models import PackageManager

_EXACT_OPERATORS = ("", "==")


class HexRequirementUpdater(RequirementUpdater):
    package_manager = PackageManager.HEX
    grammar = HexGrammar()

    def bump(self, text: str, expression: Expression, satisfied: bool) -> str:
        last = expression.groups[-1]
        updated = self.update_group(text, expression, last)

        if len(expression.groups) == 1:
            return updated
        return f"{text} or {updated}"

    def update_group(self, text: str, expression: Expression, group: Group) -> str:
        comparators: List[Comparator] = [
            c for c in group.constraints if isinstance(c, Comparator)
        ]
        raw = expression.text(group)
        offset = group.span[0]

        exact = next((c for c in comparators if c.operator in _EXACT_OPERATORS), None)
        twiddle = next((c for c in comparators if c.operator == "~>"), None)

        chosen = exact or twiddle
        if chosen is not None and len(group.constraints) == 1:
            start, end = chosen.version_span
            new_token = at_same_precision(self.target, chosen.version)
            return replace_span(raw, (start - offset, end - offset), new_token)

        return self.join_range_constraints(text, expression, " and ")

    def initial_requirement(self) -> str:
        return f"~> {self.target}"

