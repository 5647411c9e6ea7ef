"""Composer version constraints.

See https://getcomposer.org/doc/articles/versions.md for the syntax:
``,`` or whitespace for AND, ``|``/``||`` for OR, ``~`` allowing the last
given segment to grow, inline aliases (``dev-main as 1.0.x-dev``) and
``@stability`` flags.
"""

from __future__ import annotations

import re

from depbump.core.grammar.base import (
    Grammar,
    caret_bounds,
    comparison_bounds,
    exact_bounds,
    pessimistic_bounds,
)
from depbump.core.grammar.parser import TokenKind
from depbump.models.ecosystem import PackageManager

_STABILITY_FLAG = re.compile(r"@[A-Za-z]+$")

#: Prefix marking a branch rather than a version.
BRANCH_PREFIX = "dev-"


class ComposerGrammar(Grammar):
    package_manager = PackageManager.COMPOSER
    operators = ("^", "~", ">=", "<=", "<>", "!=", "==", ">", "<", "=")
    single_pipe_or = True
    whitespace_and = True
    hyphen_ranges = True
    keywords = {"as": TokenKind.AS}
    expansions = {
        "": exact_bounds,
        "=": exact_bounds,
        "==": exact_bounds,
        "^": caret_bounds,
        "~": pessimistic_bounds,
        ">=": comparison_bounds(">="),
        "<=": comparison_bounds("<="),
        ">": comparison_bounds(">"),
        "<": comparison_bounds("<"),
        "!=": comparison_bounds("!="),
        "<>": comparison_bounds("!="),
    }

    def clean_operand(self, text: str) -> str:
        return _STABILITY_FLAG.sub("", text)

    def is_version(self, text) -> bool:
        return super().is_version(self.clean_operand(str(text)))
