"""Shared machinery for ecosystem requirement grammars.

A :class:`Grammar` knows how to tokenize one ecosystem's requirement
syntax (via :class:`~depbump.core.grammar.parser.Parser`) and how to
expand each parsed constraint into plain comparison :class:`Bound`
objects, which is all that is needed to answer "does this version
satisfy this requirement?".

The expansion helpers here cover the range shorthands that most
ecosystems share (caret, tilde, pessimistic ``~>``, x-ranges and hyphen
ranges); subclasses map their operators onto them.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from depbump.core.grammar.parser import (
    Alias,
    Constraint,
    Expression,
    Group,
    HyphenRange,
    Parser,
    TokenKind,
)
from depbump.exceptions import InvalidVersion, RequirementParseError
from depbump.models.ecosystem import PackageManager
from depbump.models.version import WILDCARD_SEGMENTS, Version

_PARTIAL_RE = re.compile(
    r"^[vV]?(?P<release>(?:\d+|[xX*])(?:\.(?:\d+|[xX*]))*)"
    r"(?P<suffix>(?:[-+]|\.(?=[A-Za-z]))[0-9A-Za-z\-.+]*)?$"
)


@dataclass(frozen=True)
class Partial:
    """A possibly incomplete version such as ``1.2``, ``1.x`` or ``2.*``.

    Attributes:
        numbers: Explicit numeric segments before any wildcard.
        wildcard: Whether a ``x``/``X``/``*`` segment was present.
        suffix: Prerelease/build text after the release, including its
            leading separator.
    """

    numbers: Tuple[int, ...]
    wildcard: bool
    suffix: str = ""

    @property
    def precision(self) -> int:
        return len(self.numbers)

    def floor(self) -> Version:
        """Smallest version matched, e.g. ``1.2.0`` for ``1.2.x``."""
        numbers = self.numbers or (0,)
        suffix = "" if self.wildcard else self.suffix
        return Version(".".join(str(n) for n in numbers) + suffix)


def parse_partial(text: str) -> Optional[Partial]:
    """Parse ``text`` as a partial version, or return ``None``."""
    match = _PARTIAL_RE.match(text.strip())
    if not match:
        return None

    numbers: List[int] = []
    wildcard = False
    for part in match.group("release").split("."):
        if part in WILDCARD_SEGMENTS:
            wildcard = True
            break
        numbers.append(int(part))

    return Partial(tuple(numbers), wildcard, match.group("suffix") or "")


def bump(numbers: Sequence[int], index: int) -> Version:
    """Increment ``numbers[index]`` and drop everything after it.

    Missing segments up to ``index`` count as zero, so
    ``bump((1,), 1)`` is ``1.1``.
    """
    padded = list(numbers) + [0] * max(0, index + 1 - len(numbers))
    head = padded[:index] + [padded[index] + 1]
    return Version.from_segments(tuple(head))


@dataclass(frozen=True)
class Bound:
    """A single comparison against a version.

    ``release_only`` bounds compare the candidate's release, so an upper
    bound of ``< 2.0.0`` generated from ``^1.2`` also excludes
    ``2.0.0-beta``.
    """

    operator: str
    version: Version
    release_only: bool = False

    def satisfied_by(self, version: Version) -> bool:
        candidate = version.release if self.release_only else version
        op = self.operator
        if op == "<":
            return candidate < self.version
        if op == "<=":
            return candidate <= self.version
        if op == ">":
            return candidate > self.version
        if op == ">=":
            return candidate >= self.version
        if op == "!=":
            return candidate != self.version
        return candidate == self.version


def upper(version: Version) -> Bound:
    return Bound("<", version, release_only=True)


# ---------------------------------------------------------------------------
# Shared expansions
# ---------------------------------------------------------------------------


def exact_bounds(partial: Partial) -> List[Bound]:
    if partial.wildcard:
        return wildcard_bounds(partial)
    return [Bound("=", partial.floor())]


def wildcard_bounds(partial: Partial) -> List[Bound]:
    """``1.2.x`` allows ``>=1.2.0 <1.3.0``; ``*`` allows everything."""
    if not partial.numbers:
        return []
    return [
        Bound(">=", partial.floor()),
        upper(bump(partial.numbers, partial.precision - 1)),
    ]


def caret_bounds(partial: Partial) -> List[Bound]:
    """Allow changes that do not modify the left-most non-zero segment.

    When every explicit segment is zero the last explicit one is the
    anchor, so ``^0.0.3`` allows only ``0.0.3`` patches and ``^0.0``
    allows ``<0.1.0``.
    """
    if not partial.numbers:
        return []
    anchor = next(
        (i for i, n in enumerate(partial.numbers) if n != 0),
        partial.precision - 1,
    )
    return [Bound(">=", partial.floor()), upper(bump(partial.numbers, anchor))]


def tilde_bounds(partial: Partial) -> List[Bound]:
    """node-semver/Cargo tilde: patch-level changes when a minor is given."""
    if not partial.numbers:
        return []
    anchor = 1 if partial.precision >= 2 else 0
    return [Bound(">=", partial.floor()), upper(bump(partial.numbers, anchor))]


def pessimistic_bounds(partial: Partial) -> List[Bound]:
    """``~>``/Composer tilde: the last explicit segment may grow.

    ``~> 1.2`` allows ``<2.0``; ``~> 1.2.3`` allows ``<1.3.0``.
    """
    if not partial.numbers:
        return []
    anchor = max(partial.precision - 2, 0)
    return [Bound(">=", partial.floor()), upper(bump(partial.numbers, anchor))]


def hyphen_bounds(lower: Partial, upper_partial: Partial) -> List[Bound]:
    """Inclusive range; a partial upper end allows its whole x-range."""
    bounds: List[Bound] = []
    if lower.numbers:
        bounds.append(Bound(">=", lower.floor()))
    if not upper_partial.numbers:
        return bounds
    if upper_partial.wildcard or upper_partial.precision < 3:
        bounds.append(upper(bump(upper_partial.numbers, upper_partial.precision - 1)))
    else:
        bounds.append(Bound("<=", upper_partial.floor()))
    return bounds


def comparison_bounds(operator: str) -> Callable[[Partial], List[Bound]]:
    """Plain ``<``/``>=``-style comparison against the partial's floor."""

    def expand(partial: Partial) -> List[Bound]:
        if not partial.numbers:
            return []
        return [Bound(operator, partial.floor())]

    return expand


# ---------------------------------------------------------------------------
# Grammar
# ---------------------------------------------------------------------------


class Grammar:
    """Base class for an ecosystem's requirement grammar.

    Subclasses set the lexical knobs and fill :attr:`expansions`, a map
    from operator (``""`` for a bare version) to a function turning the
    operand into bounds.
    """

    package_manager: PackageManager
    operators: Tuple[str, ...] = ()
    single_pipe_or: bool = False
    whitespace_and: bool = False
    hyphen_ranges: bool = False
    keywords: Mapping[str, TokenKind] = {}
    expansions: Dict[str, Callable[[Partial], List[Bound]]] = {}

    # ------------------------------------------------------------------
    # Versions
    # ------------------------------------------------------------------

    def version(self, text: Any) -> Any:
        """Parse a version in this ecosystem's version scheme."""
        try:
            return Version(text)
        except InvalidVersion as exc:
            raise InvalidVersion(text, package_manager=self.package_manager.value) from exc

    def is_version(self, text: Any) -> bool:
        return Version.correct(text)

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------

    def parse(self, requirement: str) -> Expression:
        """Parse ``requirement`` into an :class:`Expression`.

        Raises:
            RequirementParseError: The string does not fit this grammar.
        """
        return Parser(self, requirement.strip()).parse()

    def clean_operand(self, text: str) -> str:
        """Hook for stripping ecosystem decorations from an operand."""
        return text

    # ------------------------------------------------------------------
    # Satisfaction
    # ------------------------------------------------------------------

    def bounds(self, constraint: Constraint) -> Optional[List[Bound]]:
        """Expand a constraint into bounds; ``None`` means it matches nothing."""
        if isinstance(constraint, Alias):
            return self.bounds(constraint.target)

        if isinstance(constraint, HyphenRange):
            lower = parse_partial(self.clean_operand(constraint.lower.version))
            upper_partial = parse_partial(self.clean_operand(constraint.upper.version))
            if lower is None or upper_partial is None:
                return None
            return hyphen_bounds(lower, upper_partial)

        expand = self.expansions.get(constraint.operator)
        if expand is None:
            raise RequirementParseError(
                f"Unsupported operator {constraint.operator!r}",
                requirement=constraint.version,
            )
        partial = parse_partial(self.clean_operand(constraint.version))
        if partial is None:
            return None
        return expand(partial)

    def constraint_satisfied_by(self, constraint: Constraint, version: Any) -> bool:
        bounds = self.bounds(constraint)
        if bounds is None:
            return False
        return all(bound.satisfied_by(version) for bound in bounds)

    def group_satisfied_by(self, group: Group, version: Any) -> bool:
        return all(self.constraint_satisfied_by(c, version) for c in group.constraints)

    def expression_satisfied_by(self, expression: Expression, version: Any) -> bool:
        return any(self.group_satisfied_by(g, version) for g in expression.groups)

    def satisfied_by(self, requirement: str, version: Any) -> bool:
        """Return True when ``version`` meets ``requirement``.

        Raises:
            RequirementParseError: ``requirement`` cannot be parsed.
        """
        if not isinstance(version, Version):
            version = self.version(version)
        return self.expression_satisfied_by(self.parse(requirement), version)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.package_manager.value!r})"
