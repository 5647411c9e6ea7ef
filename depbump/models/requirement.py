"""
Requirement data model for depbump.

A :class:`Requirement` is one declared constraint for a dependency: the
raw requirement string together with the file it came from, the
dependency groups it belongs to and, optionally, where the dependency is
fetched from. A dependency usually carries a list of these (one per file
or declaration), and updaters map that list 1:1 and in order.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple


class SourceType(str, Enum):
    """Where a dependency is fetched from."""

    GIT = "git"
    REGISTRY = "registry"
    PATH = "path"
    PRIVATE_REGISTRY = "private_registry"


@dataclass(frozen=True)
class Source:
    """Structured source descriptor.

    Attributes:
        type: Kind of source.
        url: Repository or registry URL.
        branch: Git branch the dependency tracks, if any.
        ref: Git ref (tag or commit) the dependency is pinned to, if any.
    """

    type: SourceType
    url: Optional[str] = None
    branch: Optional[str] = None
    ref: Optional[str] = None

    @property
    def is_git(self) -> bool:
        return self.type == SourceType.GIT

    def with_ref(self, ref: Optional[str]) -> "Source":
        """Return a copy pinned to ``ref``."""
        return replace(self, ref=ref)

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {
            "type": self.type.value,
            "url": self.url,
            "branch": self.branch,
            "ref": self.ref,
        }

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> Optional["Source"]:
        if not data:
            return None
        return cls(
            type=SourceType(data["type"]),
            url=data.get("url"),
            branch=data.get("branch"),
            ref=data.get("ref"),
        )

    def __str__(self) -> str:
        location = self.url or "<no url>"
        if self.ref:
            location += f"#{self.ref}"
        return f"{self.type.value}:{location}"


@dataclass(frozen=True)
class Requirement:
    """A single declared version constraint.

    Attributes:
        requirement: Raw requirement text in the ecosystem's grammar, or
            ``None`` when the declaration has no explicit constraint.
        file: Path of the manifest the declaration lives in.
        groups: Dependency categories (``dependencies``, ``devDependencies``,
            ...). Informational only.
        source: Where the dependency is fetched from, if declared.
    """

    requirement: Optional[str]
    file: str
    groups: Tuple[str, ...] = field(default_factory=tuple)
    source: Optional[Source] = None

    def with_requirement(self, requirement: Optional[str]) -> "Requirement":
        """Return a copy carrying a new requirement string."""
        if requirement == self.requirement:
            return self
        return replace(self, requirement=requirement)

    def with_source(self, source: Optional[Source]) -> "Requirement":
        """Return a copy carrying a new source."""
        if source == self.source:
            return self
        return replace(self, source=source)

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable representation."""
        return {
            "file": self.file,
            "requirement": self.requirement,
            "groups": list(self.groups),
            "source": self.source.to_dict() if self.source else None,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Requirement":
        """Build a requirement from its :meth:`to_dict` form."""
        return cls(
            requirement=data.get("requirement"),
            file=data["file"],
            groups=tuple(data.get("groups") or ()),
            source=Source.from_dict(data.get("source")),
        )

    def __str__(self) -> str:
        text = self.requirement if self.requirement is not None else "<none>"
        return f"{self.file}: {text}"


def requirements_from_dicts(items: Iterable[Mapping[str, Any]]) -> Tuple[Requirement, ...]:
    """Convert a list of plain mappings into :class:`Requirement` records."""
    return tuple(Requirement.from_dict(item) for item in items)
