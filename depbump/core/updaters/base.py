"""Shared requirement-update policy.

Every ecosystem updater follows the same outline for each requirement
of a dependency:

1. no target version -> the whole list is returned untouched;
2. no requirement string, or one without a digit (branch names, ``*``,
   dist-tags) -> unchanged;
3. a requirement the target already satisfies -> unchanged (unless the
   caller explicitly asked to bump satisfied requirements);
4. otherwise an ecosystem-specific :meth:`RequirementUpdater.bump`
   rewrites the string, keeping operator class and precision.

Output lists always have the same length and order as the input, since
file updaters pair old and new requirements by index.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from typing import Any, ClassVar, List, Optional, Pattern, Sequence, Tuple, Union

from depbump.core.grammar import (
    Comparator,
    Constraint,
    Expression,
    Grammar,
    HyphenRange,
    replace_span,
)
from depbump.exceptions import InvalidVersion, RequirementParseError, UnknownOperator
from depbump.models import (
    PackageManager,
    Requirement,
    Source,
    SourceType,
    UpdateStrategy,
)
from depbump.models.version import WILDCARD_SEGMENTS
from depbump.utils.logger import get_logger

logger = get_logger("updaters")

_DIGIT = re.compile(r"\d")
_PRERELEASE_DASH = re.compile(r"\d-")

# Comparators that pin a version and can simply be moved to the target.
_PINNING_OPERATORS = ("", "=", "==", "~", "~>", "~=")


class _Unchanged:
    """Sentinel: the dependency's source is not being changed."""

    def __repr__(self) -> str:
        return "UNCHANGED"


UNCHANGED: Any = _Unchanged()

SourceUpdate = Union[Optional[Source], _Unchanged]


# ---------------------------------------------------------------------------
# Free helpers shared by several ecosystems
# ---------------------------------------------------------------------------


def update_greatest_version(
    old_segments: Sequence[int],
    target_segments: Sequence[int],
) -> Tuple[int, ...]:
    """Move an upper bound just past ``target_segments``.

    The bump happens at the last non-zero segment of the old bound (the
    last segment when all are zero); earlier segments are copied from the
    target, later ones are zeroed, and the old bound's precision is kept::

        >>> update_greatest_version((1, 5, 0), (1, 7, 0))
        (1, 8, 0)
        >>> update_greatest_version((2, 0, 0), (2, 3, 1))
        (3, 0, 0)
    """
    if not old_segments:
        return tuple(old_segments)

    nonzero = [i for i, segment in enumerate(old_segments) if segment != 0]
    index = nonzero[-1] if nonzero else len(old_segments) - 1
    target = list(target_segments) + [0] * max(0, len(old_segments) - len(target_segments))

    return tuple(
        target[i] if i < index else target[i] + 1 if i == index else 0
        for i in range(len(old_segments))
    )


def at_same_precision(new_version: str, old_version: str) -> str:
    """Render ``new_version`` with as many segments as ``old_version``.

    Numeric segments are matched one for one; if the old version carried
    prerelease segments, the same number of the new version's are kept.

        >>> at_same_precision("2.3.1", "1.0")
        '2.3'
    """
    old_parts = old_version.split(".")
    release_precision = sum(1 for part in old_parts if part.isdigit())
    prerelease_precision = len(old_parts) - release_precision

    new_parts = new_version.split(".")
    new_release = new_parts[:release_precision]

    index = 0
    while index < len(new_parts) and new_parts[index].isdigit():
        index += 1
    new_prerelease = new_parts[index:][: max(prerelease_precision, 1)]

    return ".".join(new_release + new_prerelease)


def precision_preserving(
    old_token: str,
    new_version: str,
    wildcards: Sequence[str] = tuple(WILDCARD_SEGMENTS),
) -> str:
    """Replace ``old_token`` with ``new_version`` at the old token's precision.

    Wildcard segments (``x``, ``*``) stay where they were, and a ``v``
    prefix survives. Prereleases on either side use the full new version.

        >>> precision_preserving("1.2", "1.5.3")
        '1.5'
        >>> precision_preserving("1.x", "2.4.0")
        '2.x'
    """
    prefix = ""
    if old_token[:1] in ("v", "V") and old_token[1:2].isdigit():
        prefix, old_token = old_token[0], old_token[1:]

    new_version = new_version.split("+", 1)[0]
    if _PRERELEASE_DASH.search(old_token) or _PRERELEASE_DASH.search(new_version):
        return prefix + new_version

    old_parts = old_token.split(".")
    new_parts = new_version.split(".")[: len(old_parts)]
    merged = [
        old if old in wildcards else new
        for old, new in zip(old_parts, new_parts)
    ]
    return prefix + ".".join(merged)


def first_nonzero_index(segments: Sequence[int]) -> int:
    """Index of the first non-zero segment, or the last index if all are zero."""
    for index, segment in enumerate(segments):
        if segment != 0:
            return index
    return max(len(segments) - 1, 0)


def is_upper_range(constraint: Constraint) -> bool:
    """True for ``<``/``<=`` comparators and hyphen ranges."""
    if isinstance(constraint, HyphenRange):
        return True
    return isinstance(constraint, Comparator) and constraint.operator in ("<", "<=")


# ---------------------------------------------------------------------------
# Updater base class
# ---------------------------------------------------------------------------


class RequirementUpdater(ABC):
    """Compute updated requirements for one dependency.

    Args:
        requirements: The dependency's requirements, in manifest order.
        latest_version: Newest known release, if any.
        latest_resolvable_version: Newest release that can be installed
            alongside everything else. ``None`` disables updating.
        update_strategy: How to rewrite requirement strings.
        updated_source: New source for git-sourced requirements, or
            :data:`UNCHANGED`. ``None`` means the dependency moves from git
            to the registry.

    Subclasses provide :attr:`grammar` and :meth:`bump`.
    """

    package_manager: ClassVar[PackageManager]
    grammar: ClassVar[Grammar]

    #: Whether ``BUMP_VERSIONS`` rewrites requirements that are already met.
    bumps_satisfied_requirements: ClassVar[bool] = False

    #: Requirement strings matching this pattern are never touched.
    non_version_pattern: ClassVar[Optional[Pattern[str]]] = None

    #: Operators whose bump keeps caret semantics inside a range.
    caret_operators: ClassVar[Tuple[str, ...]] = ("^",)

    def __init__(
        self,
        requirements: Sequence[Requirement],
        *,
        latest_version: Optional[str] = None,
        latest_resolvable_version: Optional[str] = None,
        update_strategy: UpdateStrategy = UpdateStrategy.BUMP_VERSIONS_IF_NECESSARY,
        updated_source: SourceUpdate = UNCHANGED,
    ) -> None:
        self.requirements = requirements
        self.update_strategy = update_strategy
        self.updated_source = updated_source
        self.latest_version = self._parse_version(latest_version)
        self.latest_resolvable_version = self._parse_version(latest_resolvable_version)

    def _parse_version(self, value: Optional[str]) -> Any:
        if value is None:
            return None
        try:
            return self.grammar.version(value)
        except InvalidVersion:
            logger.debug("Ignoring malformed target version %r", value)
            return None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def updated_requirements(self) -> Sequence[Requirement]:
        """Return the updated requirements, same length and order as the input."""
        if self.latest_resolvable_version is None:
            return self.requirements

        return [self.updated_requirement(req) for req in self.requirements]

    def updated_requirement(self, req: Requirement) -> Requirement:
        original_source = req.source
        req = self._apply_source(req)

        if req.source is not None and req.source.type == SourceType.PATH:
            return req

        if req.requirement is None:
            if self._switched_to_registry(original_source):
                return req.with_requirement(self.initial_requirement())
            return req

        text = req.requirement.strip()
        if not _DIGIT.search(text):
            return req
        if self.non_version_pattern is not None and self.non_version_pattern.match(text):
            return req

        new_text = self.updated_requirement_string(text)
        if new_text == text:
            return req

        logger.debug("%s: %r -> %r", req.file, req.requirement, new_text)
        self._check_satisfied(new_text)
        return req.with_requirement(new_text)

    # ------------------------------------------------------------------
    # Template methods
    # ------------------------------------------------------------------

    def updated_requirement_string(self, text: str) -> str:
        """Return the updated form of one requirement string."""
        try:
            expression = self.grammar.parse(text)
            satisfied = self.grammar.expression_satisfied_by(
                expression, self.latest_resolvable_version
            )
        except (RequirementParseError, InvalidVersion) as exc:
            logger.debug("Leaving %r unchanged: %s", text, exc)
            return text

        if satisfied and not self.force_bump:
            return text

        return self.bump(text, expression, satisfied)

    @abstractmethod
    def bump(self, text: str, expression: Expression, satisfied: bool) -> str:
        """Rewrite ``text`` so that the target version is allowed."""

    def initial_requirement(self) -> str:
        """Requirement given to a dependency that just left its git source."""
        return f"^{self.target}"

    # ------------------------------------------------------------------
    # Helpers for subclasses
    # ------------------------------------------------------------------

    @property
    def target(self) -> str:
        """The latest resolvable version as text."""
        return str(self.latest_resolvable_version)

    @property
    def force_bump(self) -> bool:
        return (
            self.bumps_satisfied_requirements
            and self.update_strategy == UpdateStrategy.BUMP_VERSIONS
        )

    @property
    def widening(self) -> bool:
        return self.update_strategy == UpdateStrategy.WIDEN_RANGES

    def segments(self, version: Any) -> Tuple[int, ...]:
        return tuple(version.segments)

    def target_segments(self) -> Tuple[int, ...]:
        return self.segments(self.latest_resolvable_version)

    def caret_token(self, old_token: str) -> str:
        """Version text for a caret requirement that admits the target.

        Precision is the old token's, widened when needed so that the
        first non-zero segment of the target is explicit.
        """
        target = self.target_segments()
        needed = first_nonzero_index(target) + 1
        if len(old_token.split(".")) >= needed:
            return precision_preserving(old_token, self.target)
        if _PRERELEASE_DASH.search(self.target):
            return self.target
        return ".".join(str(s) for s in target[:needed])

    def update_range_requirement(
        self,
        text: str,
        expression: Expression,
        or_separator: str,
    ) -> str:
        """Move the upper bound of the single range constraint.

        With more than one range (or no parseable upper bound) a new
        ``^target`` alternative is appended instead. That fallback widens
        rather than computing a minimal bound.
        """
        ranges = [c for c in expression.constraints if is_upper_range(c)]

        if len(ranges) == 1:
            comparators = (
                [ranges[0].lower, ranges[0].upper]
                if isinstance(ranges[0], HyphenRange)
                else [ranges[0]]
            )
            candidates = []
            for comparator in comparators:
                operand = self.grammar.clean_operand(comparator.version)
                if self.grammar.is_version(operand):
                    candidates.append((self.grammar.version(operand), comparator))

            if candidates:
                upper_bound, comparator = max(candidates, key=lambda item: item[0])
                new_upper = update_greatest_version(
                    self.segments(upper_bound), self.target_segments()
                )
                rendered = ".".join(str(s) for s in new_upper)
                return replace_span(text, comparator.version_span, rendered)

        return f"{text}{or_separator}^{self.target}"

    def update_range_constraints(self, text: str, expression: Expression) -> List[str]:
        """Fix each unsatisfied comparator of the last group independently.

        ``<``/``<=`` bounds move past the target, caret, tilde and exact
        comparators are re-pinned to it, and ``!=`` exclusions of the target
        are dropped. Lower bounds above the target and hyphen ranges are an
        error.

        Raises:
            UnknownOperator: An unsatisfied comparator cannot be relaxed.
        """
        group = expression.groups[-1]
        updated: List[str] = []
        for constraint in group.constraints:
            raw = expression.text(constraint)
            if self.grammar.constraint_satisfied_by(constraint, self.latest_resolvable_version):
                updated.append(raw)
                continue

            operator = constraint.operator if isinstance(constraint, Comparator) else "-"
            if operator in ("<", "<="):
                old = self.grammar.version(self.grammar.clean_operand(constraint.version))
                new_upper = update_greatest_version(self.segments(old), self.target_segments())
                rendered = ".".join(str(s) for s in new_upper)
                updated.append(self._repin(raw, constraint, rendered))
            elif operator == "!=":
                continue
            elif operator in self.caret_operators:
                updated.append(self._repin(raw, constraint, self.caret_token(constraint.version)))
            elif operator in _PINNING_OPERATORS:
                new_token = precision_preserving(constraint.version, self.target)
                updated.append(self._repin(raw, constraint, new_token))
            else:
                raise UnknownOperator(operator, requirement=text)
        return updated

    def _repin(self, raw: str, comparator: Comparator, new_token: str) -> str:
        start = comparator.version_span[0] - comparator.span[0]
        end = comparator.version_span[1] - comparator.span[0]
        return raw[:start] + new_token + raw[end:]

    def join_range_constraints(
        self,
        text: str,
        expression: Expression,
        separator: str = ", ",
    ) -> str:
        """Join :meth:`update_range_constraints`; an empty result starts afresh."""
        parts = self.update_range_constraints(text, expression)
        if not parts:
            return self.initial_requirement()
        return separator.join(parts)

    def _check_satisfied(self, new_text: str) -> None:
        try:
            ok = self.grammar.satisfied_by(new_text, self.latest_resolvable_version)
        except (RequirementParseError, InvalidVersion):
            ok = False
        if not ok:
            logger.warning(
                "Updated requirement %r does not allow %s", new_text, self.target
            )

    # ------------------------------------------------------------------
    # Sources
    # ------------------------------------------------------------------

    def _apply_source(self, req: Requirement) -> Requirement:
        if self.updated_source is UNCHANGED:
            return req
        if req.source is None or not req.source.is_git:
            return req
        return req.with_source(self.updated_source)

    def _switched_to_registry(self, original_source: Optional[Source]) -> bool:
        return (
            self.updated_source is None
            and original_source is not None
            and original_source.is_git
        )

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"requirements={len(self.requirements)}, "
            f"latest_resolvable_version={self.latest_resolvable_version!s}, "
            f"update_strategy={self.update_strategy.value})"
        )
