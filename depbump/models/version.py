"""
Version value model for depbump.

:class:`Version` is the ordered, comparable representation shared by the
non-PEP 440 ecosystems (npm, Composer, Cargo, Go dep, Terraform, Hex and
Maven). It accepts dotted numeric releases of any length with an optional
``v`` prefix, a ``-prerelease`` suffix, ``+build`` metadata and Gem-style
dotted prereleases such as ``1.0.0.beta1``.

Ordering follows the usual conventions:

* release segments are compared numerically, padding with zeros so that
  ``1.2`` == ``1.2.0``;
* a prerelease sorts before its release;
* prerelease identifiers compare numerically when both are numeric,
  numeric identifiers sort before alphanumeric ones, and a shorter list
  of identifiers sorts first when one is a prefix of the other;
* build metadata is ignored.
"""

from __future__ import annotations

import re
from functools import total_ordering
from typing import Any, Optional, Tuple, Union

from depbump.exceptions import InvalidVersion

#: Unanchored version pattern, reused by the grammar lexer.
VERSION_PATTERN = (
    r"[vV]?[0-9]+(?:\.[0-9A-Za-z]+)*"
    r"(?:-[0-9A-Za-z][0-9A-Za-z\-.]*)?"
    r"(?:\+[0-9A-Za-z\-.]+)?"
)

_VERSION_RE = re.compile(rf"^{VERSION_PATTERN}$")

#: Release segments that mark an x-range rather than a version.
WILDCARD_SEGMENTS = frozenset({"x", "X", "*"})

VersionLike = Union[str, "Version"]


def _well_formed(text: str) -> bool:
    if not _VERSION_RE.match(text):
        return False
    main = text.partition("+")[0].partition("-")[0]
    return not any(part in WILDCARD_SEGMENTS for part in main.split("."))


def _compare_identifiers(left: Tuple[str, ...], right: Tuple[str, ...]) -> int:
    """Compare two prerelease identifier tuples."""
    for a, b in zip(left, right):
        if a == b:
            continue
        a_num, b_num = a.isdigit(), b.isdigit()
        if a_num and b_num:
            return -1 if int(a) < int(b) else 1
        if a_num != b_num:
            return -1 if a_num else 1
        return -1 if a < b else 1

    if len(left) == len(right):
        return 0
    return -1 if len(left) < len(right) else 1


@total_ordering
class Version:
    """A parsed, comparable version string.

    Args:
        version: Version text or an existing :class:`Version`.

    Raises:
        InvalidVersion: ``version`` is not a well-formed version string.

    Example:
        >>> Version("1.2.3") < Version("1.10")
        True
        >>> Version("v2.0.0-rc.1").segments
        (2, 0, 0)
    """

    __slots__ = ("_text", "_release", "_prerelease", "_build")

    def __init__(self, version: VersionLike) -> None:
        if isinstance(version, Version):
            text = version._text
        elif isinstance(version, str):
            text = version.strip()
        else:
            raise InvalidVersion(version)

        if not _well_formed(text):
            raise InvalidVersion(version)

        if text[0] in "vV":
            text = text[1:]

        body, _, build = text.partition("+")
        main, dash, pre = body.partition("-")
        parts = main.split(".")

        release = []
        for part in parts:
            if not part.isdigit():
                break
            release.append(int(part))

        prerelease = tuple(parts[len(release):])
        if dash:
            prerelease += tuple(pre.split("."))

        self._text = text
        self._release: Tuple[int, ...] = tuple(release)
        self._prerelease: Tuple[str, ...] = prerelease
        self._build: Optional[str] = build or None

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------

    @classmethod
    def correct(cls, version: Any) -> bool:
        """Return True when ``version`` parses as a :class:`Version`."""
        if isinstance(version, Version):
            return True
        if not isinstance(version, str):
            return False
        return _well_formed(version.strip())

    @classmethod
    def from_segments(cls, segments: Tuple[int, ...]) -> "Version":
        """Build a release version from numeric segments."""
        return cls(".".join(str(s) for s in segments))

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def segments(self) -> Tuple[int, ...]:
        """Numeric release components, e.g. ``(1, 2, 3)`` for ``1.2.3-rc1``."""
        return self._release

    @property
    def prerelease(self) -> Tuple[str, ...]:
        """Prerelease identifiers, empty for a final release."""
        return self._prerelease

    @property
    def build(self) -> Optional[str]:
        """Build metadata after ``+``, if any."""
        return self._build

    def is_prerelease(self) -> bool:
        return bool(self._prerelease)

    @property
    def release(self) -> "Version":
        """This version without prerelease or build parts."""
        if not self._prerelease and self._build is None:
            return self
        return Version.from_segments(self._release)

    # ------------------------------------------------------------------
    # Comparison
    # ------------------------------------------------------------------

    def _compare(self, other: "Version") -> int:
        width = max(len(self._release), len(other._release))
        mine = self._release + (0,) * (width - len(self._release))
        theirs = other._release + (0,) * (width - len(other._release))
        if mine != theirs:
            return -1 if mine < theirs else 1

        if not self._prerelease and not other._prerelease:
            return 0
        if not self._prerelease:
            return 1
        if not other._prerelease:
            return -1
        return _compare_identifiers(self._prerelease, other._prerelease)

    @staticmethod
    def _coerce(other: Any) -> Optional["Version"]:
        if isinstance(other, Version):
            return other
        if isinstance(other, str) and Version.correct(other):
            return Version(other)
        return None

    def __eq__(self, other: object) -> bool:
        coerced = self._coerce(other)
        if coerced is None:
            return NotImplemented
        return self._compare(coerced) == 0

    def __lt__(self, other: Any) -> bool:
        coerced = self._coerce(other)
        if coerced is None:
            return NotImplemented
        return self._compare(coerced) < 0

    def __hash__(self) -> int:
        release = list(self._release)
        while release and release[-1] == 0:
            release.pop()
        return hash((tuple(release), self._prerelease))

    def __str__(self) -> str:
        return self._text

    def __repr__(self) -> str:
        return f"Version({self._text!r})"
