"""Maven version requirements.

A bare version (``1.2.3``) is a soft requirement; bracketed forms are
ranges: ``[1.0]`` is an exact pin, ``[1.0,2.0)`` a half-open interval and
``[1.0,2.0),[3.0,)`` a union of intervals. Each interval becomes one
group of the parsed expression so updaters can treat Maven like any other
grammar.
"""

from __future__ import annotations

import re
from typing import List

from depbump.core.grammar.base import Grammar, comparison_bounds, exact_bounds
from depbump.core.grammar.parser import Comparator, Expression, Group
from depbump.exceptions import RequirementParseError
from depbump.models.ecosystem import PackageManager

_INTERVAL = re.compile(r"(?P<open>[\[(])(?P<body>[^\])]*)(?P<close>[\])])")
_SEPARATOR = re.compile(r"\s*,?\s*")


class MavenGrammar(Grammar):
    package_manager = PackageManager.MAVEN
    expansions = {
        "": exact_bounds,
        "=": exact_bounds,
        **{op: comparison_bounds(op) for op in (">=", "<=", ">", "<")},
    }

    def is_range(self, requirement: str) -> bool:
        return requirement.strip().startswith(("[", "("))

    def parse(self, requirement: str) -> Expression:
        text = requirement.strip()
        if not self.is_range(text):
            if not text or any(c in text for c in " ,[]()"):
                raise RequirementParseError("Invalid Maven version", requirement=text)
            span = (0, len(text))
            comparator = Comparator("", text, span, span)
            return Expression(text, (Group((comparator,), span),))

        groups: List[Group] = []
        pos = 0
        while pos < len(text):
            match = _INTERVAL.match(text, pos)
            if not match:
                raise RequirementParseError(
                    "Invalid Maven version range", requirement=text, position=pos
                )
            groups.append(self._interval(match))
            pos = _SEPARATOR.match(text, match.end()).end()
        return Expression(text, tuple(groups))

    def _interval(self, match: "re.Match[str]") -> Group:
        body_start = match.start("body")
        body = match.group("body")
        span = (match.start(), match.end())

        if "," not in body:
            if match.group("open") != "[" or match.group("close") != "]":
                raise RequirementParseError("Invalid Maven exact range", requirement=match.group(0))
            version = body.strip()
            start = body_start + body.index(version) if version else body_start
            comparator = Comparator("=", version, span, (start, start + len(version)))
            return Group((comparator,), span)

        lower_text, upper_text = body.split(",", 1)
        comparators = []
        lower = lower_text.strip()
        if lower:
            start = body_start + lower_text.index(lower)
            operator = ">=" if match.group("open") == "[" else ">"
            comparators.append(Comparator(operator, lower, span, (start, start + len(lower))))

        upper = upper_text.strip()
        if upper:
            offset = body_start + len(lower_text) + 1
            start = offset + upper_text.index(upper)
            operator = "<=" if match.group("close") == "]" else "<"
            comparators.append(Comparator(operator, upper, span, (start, start + len(upper))))

        return Group(tuple(comparators), span)
