"""npm and Yarn requirement updater (``package.json``)."""

from __future__ import annotations

import re

from depbump.core.grammar import Comparator, Expression, NpmGrammar, replace_span
from depbump.core.updaters.base import (
    RequirementUpdater,
    is_upper_range,
    precision_preserving,
)
from depbump.exceptions import UnknownOperator
from depbump.models import PackageManager

# Dist-tags, URLs and ``file:`` specs are not versions.
_NON_VERSION = re.compile(r"^([A-Za-uw-z]|v[^\d])")

_OR_SEPARATOR = " || "


class NpmRequirementUpdater(RequirementUpdater):
    """Update ``package.json`` requirements.

    Applications have their requirement replaced with an updated copy of
    its first constraint; libraries keep their ranges and widen them.
    """

    package_manager = PackageManager.NPM_AND_YARN
    grammar = NpmGrammar()
    bumps_satisfied_requirements = True
    non_version_pattern = _NON_VERSION

    def bump(self, text: str, expression: Expression, satisfied: bool) -> str:
        if self.widening:
            return self.widen(text, expression)

        if any(is_upper_range(c) for c in expression.constraints):
            if satisfied:
                return text
            return self.update_range_requirement(text, expression, self.or_separator(expression))

        first = expression.constraints[0]
        if not isinstance(first, Comparator):
            return text
        return self.update_version_string(expression.text(first), first)

    def widen(self, text: str, expression: Expression) -> str:
        constraints = expression.constraints
        separator = self.or_separator(expression)

        if any(is_upper_range(c) for c in constraints):
            return self.update_range_requirement(text, expression, separator)

        if len(constraints) == 1 and isinstance(constraints[0], Comparator):
            return self.update_version_string(text, constraints[0])

        return f"{text}{separator}^{self.target}"

    def update_version_string(self, text: str, comparator: Comparator) -> str:
        """Rewrite ``comparator``'s version inside ``text``.

        ``text`` must start where the comparator does.
        """
        if comparator.operator in (">", ">=") and not self.grammar.constraint_satisfied_by(
            comparator, self.latest_resolvable_version
        ):
            # Lower bounds above the target are never lowered.
            raise UnknownOperator(comparator.operator, requirement=text)

        start, end = comparator.version_span
        offset = comparator.span[0]
        old_token = comparator.version

        if comparator.operator == "^":
            new_token = self.caret_token(old_token)
        else:
            new_token = precision_preserving(old_token, self.target)

        updated = replace_span(text, (start - offset, end - offset), new_token)
        if comparator.operator == ">":
            # A strict lower bound at the target would exclude it.
            updated = ">=" + updated[1:]
        return updated

    def or_separator(self, expression: Expression) -> str:
        return expression.or_separator or _OR_SEPARATOR
