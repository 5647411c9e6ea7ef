"""Composer requirement updater (``composer.json``).

Branch alternatives (``dev-main``) are carried over verbatim: only the
numeric alternatives are updated, and the branch alternatives are put
back after them with the requirement's own OR separator. Libraries keep
what they already allowed and gain a new alternative; applications have
their requirement rewritten.
"""

from __future__ import annotations

import re
from typing import List, Optional

from depbump.core.grammar import (
    Alias,
    BRANCH_PREFIX,
    Comparator,
    ComposerGrammar,
    Expression,
    replace_span,
)
from depbump.core.updaters.base import (
    RequirementUpdater,
    first_nonzero_index,
    is_upper_range,
    precision_preserving,
)
from depbump.exceptions import InvalidVersion, RequirementParseError
from depbump.models import PackageManager
from depbump.utils.logger import get_logger

logger = get_logger("updaters.composer")

_RANGE_SHORTHAND = re.compile(r"[~*^]")
_STABILITY_FLAG = re.compile(r"@[A-Za-z]+$")

_OR_SEPARATOR = " || "


class ComposerRequirementUpdater(RequirementUpdater):
    package_manager = PackageManager.COMPOSER
    grammar = ComposerGrammar()
    bumps_satisfied_requirements = True

    def updated_requirement_string(self, text: str) -> str:
        try:
            expression = self.grammar.parse(text)
        except RequirementParseError as exc:
            logger.debug("Leaving %r unchanged: %s", text, exc)
            return text

        branches = [
            g for g in expression.groups if expression.text(g).startswith(BRANCH_PREFIX)
        ]
        numeric = [g for g in expression.groups if g not in branches]
        if not numeric:
            return text

        if any(isinstance(c, Alias) for c in expression.constraints):
            return self.updated_alias(text, expression)

        try:
            satisfied = self.grammar.expression_satisfied_by(
                expression, self.latest_resolvable_version
            )
        except InvalidVersion as exc:
            logger.debug("Leaving %r unchanged: %s", text, exc)
            return text

        if satisfied and not self.force_bump:
            return text

        separator = expression.or_separator or _OR_SEPARATOR
        branch_texts = [expression.text(g) for g in branches]
        if branches:
            numeric_text = separator.join(expression.text(g) for g in numeric)
            expression = self.grammar.parse(numeric_text)
        else:
            numeric_text = text

        updated = self.bump(numeric_text, expression, satisfied)
        return separator.join([updated] + branch_texts)

    def updated_alias(self, text: str, expression: Expression) -> str:
        """Point an inline alias at the target, when it names a real version."""
        alias = next(c for c in expression.constraints if isinstance(c, Alias))
        real = alias.target
        if real.operator or not self.grammar.is_version(real.version):
            return text
        return replace_span(text, real.version_span, self.target)

    def bump(self, text: str, expression: Expression, satisfied: bool) -> str:
        separator = expression.or_separator or _OR_SEPARATOR
        if self.widening:
            return self.library_update(text, expression, separator)
        return self.app_update(text, expression, separator)

    # ------------------------------------------------------------------
    # Libraries
    # ------------------------------------------------------------------

    def library_update(self, text: str, expression: Expression, separator: str) -> str:
        comparators = [c for c in expression.constraints if isinstance(c, Comparator)]
        carets = [c for c in comparators if c.operator == "^"]
        tildes = [c for c in comparators if c.operator == "~"]
        wildcards = [c for c in comparators if "*" in c.version]
        ranges = [c for c in expression.constraints if is_upper_range(c)]

        if carets:
            return f"{text}{separator}^{self._caret_version(carets)}"
        if tildes:
            return f"{text}{separator}~{self._tilde_version(tildes)}"
        if wildcards:
            return f"{text}{separator}{self._wildcard_version(wildcards)}"
        if ranges:
            return self.update_range_requirement(text, expression, separator)
        return self.update_version_string(text, expression)

    def _precision(self, comparator: Comparator) -> int:
        return len(self.grammar.clean_operand(comparator.version).split("."))

    def _caret_version(self, carets: List[Comparator]) -> str:
        target = self.target_segments()
        first_nonzero = first_nonzero_index(target)
        precision = max(min(self._precision(c) for c in carets), first_nonzero + 1)
        parts = [
            segment if index <= first_nonzero else 0
            for index, segment in enumerate(target[:precision])
        ]
        return ".".join(str(p) for p in parts)

    def _tilde_version(self, tildes: List[Comparator]) -> str:
        precision = min(self._precision(c) for c in tildes)
        parts = list(self.target_segments()[:precision])
        parts[-1] = 0
        return ".".join(str(p) for p in parts)

    def _wildcard_version(self, wildcards: List[Comparator]) -> str:
        explicit = min(
            sum(1 for part in c.version.split(".") if part != "*") for c in wildcards
        )
        stars = min(c.version.split(".").count("*") for c in wildcards)
        parts = [str(s) for s in self.target_segments()[:explicit]] + ["*"] * stars
        return ".".join(parts)

    # ------------------------------------------------------------------
    # Applications
    # ------------------------------------------------------------------

    def app_update(self, text: str, expression: Expression, separator: str) -> str:
        if len(expression.constraints) > 1:
            return f"^{self.target}"
        if is_upper_range(expression.constraints[0]):
            return self.update_range_requirement(text, expression, separator)
        return self.update_version_string(text, expression)

    def update_version_string(self, text: str, expression: Expression) -> str:
        """Replace the first version, at its precision when it is a range."""
        comparator: Optional[Comparator] = next(expression.comparators(), None)
        if comparator is None:
            return text

        token = comparator.version
        flag_match = _STABILITY_FLAG.search(token)
        flag = flag_match.group(0) if flag_match else ""
        bare = token[: len(token) - len(flag)]

        if _RANGE_SHORTHAND.search(text):
            new_token = precision_preserving(bare, self.target, wildcards=("*",))
        else:
            new_token = self.target

        return replace_span(text, comparator.version_span, new_token + flag)
