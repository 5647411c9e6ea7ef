"""
Dependency data model for depbump.

A :class:`Dependency` groups every :class:`~depbump.models.Requirement`
declared for one package. Manifests are usually described one file at a
time, so the same dependency can show up several times;
:class:`DependencySet` folds those records together by name.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from packaging.version import InvalidVersion as PackagingInvalidVersion
from packaging.version import Version as PackagingVersion

from depbump.exceptions import InvalidVersion
from depbump.models.ecosystem import PackageManager
from depbump.models.requirement import Requirement, requirements_from_dicts
from depbump.models.version import Version


def _parse_version(package_manager: PackageManager, version: Optional[str]) -> Any:
    """Parse ``version`` in the ecosystem's scheme, or return None."""
    if version is None:
        return None
    try:
        if package_manager == PackageManager.PIP:
            return PackagingVersion(version)
        return Version(version)
    except (InvalidVersion, PackagingInvalidVersion):
        return None


@dataclass(frozen=True)
class Dependency:
    """One package and all of its declared requirements.

    Attributes:
        name: Name the package is declared under.
        package_manager: Ecosystem the requirements belong to.
        requirements: Declarations across manifests, in encounter order.
        version: Currently resolved version, if known.
    """

    name: str
    package_manager: PackageManager
    requirements: Tuple[Requirement, ...] = field(default_factory=tuple)
    version: Optional[str] = None

    @property
    def files(self) -> Tuple[str, ...]:
        """Manifests declaring this dependency, without repeats."""
        return tuple(dict.fromkeys(req.file for req in self.requirements))

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable representation."""
        return {
            "name": self.name,
            "package_manager": self.package_manager.value,
            "version": self.version,
            "requirements": [req.to_dict() for req in self.requirements],
        }

    @classmethod
    def from_dict(
        cls,
        data: Mapping[str, Any],
        package_manager: Optional[PackageManager] = None,
    ) -> "Dependency":
        """Build a dependency from its :meth:`to_dict` form.

        ``package_manager`` is used when ``data`` does not name one.
        """
        manager = data.get("package_manager") or package_manager
        if manager is None:
            raise ValueError(f"No package manager given for {data.get('name')!r}")
        return cls(
            name=data["name"],
            package_manager=PackageManager.parse(manager),
            requirements=requirements_from_dicts(data.get("requirements") or ()),
            version=data.get("version"),
        )


class DependencySet:
    """Dependencies keyed by name, merging repeated declarations.

    Adding a dependency whose name is already present combines the two:
    requirements are concatenated without duplicates, and the version is
    the existing one when it already had requirements, otherwise the
    lower of the two.

    Example::

        >>> deps = DependencySet()
        >>> deps.add(Dependency("serde", PackageManager.CARGO,
        ...                     (Requirement("1.0", "Cargo.toml"),), "1.0.3"))
        >>> deps.add(Dependency("serde", PackageManager.CARGO,
        ...                     (Requirement("1.0", "crates/a/Cargo.toml"),), "1.0.3"))
        >>> deps.get("serde").files
        ('Cargo.toml', 'crates/a/Cargo.toml')
    """

    def __init__(self, dependencies: Iterable[Dependency] = ()) -> None:
        self._dependencies: List[Dependency] = []
        for dependency in dependencies:
            self.add(dependency)

    @property
    def dependencies(self) -> Tuple[Dependency, ...]:
        return tuple(self._dependencies)

    def add(self, dependency: Dependency) -> None:
        """Add ``dependency``, combining it with an existing one of the same name.

        Raises:
            TypeError: ``dependency`` is not a :class:`Dependency`.
            ValueError: The name is already present for another ecosystem.
        """
        if not isinstance(dependency, Dependency):
            raise TypeError(f"Expected a Dependency, got {type(dependency).__name__}")

        for index, existing in enumerate(self._dependencies):
            if existing.name != dependency.name:
                continue
            if existing == dependency:
                return
            self._dependencies[index] = _combine(existing, dependency)
            return

        self._dependencies.append(dependency)

    def update(self, other: "DependencySet") -> None:
        """Add every dependency of ``other``."""
        for dependency in other:
            self.add(dependency)

    def get(self, name: str) -> Optional[Dependency]:
        return next((d for d in self._dependencies if d.name == name), None)

    def __iter__(self) -> Iterator[Dependency]:
        return iter(self._dependencies)

    def __len__(self) -> int:
        return len(self._dependencies)

    def __contains__(self, name: object) -> bool:
        return any(d.name == name for d in self._dependencies)

    def __repr__(self) -> str:
        names = ", ".join(d.name for d in self._dependencies)
        return f"DependencySet([{names}])"


def _combine(old: Dependency, new: Dependency) -> Dependency:
    if old.package_manager != new.package_manager:
        raise ValueError(
            f"{old.name!r} is declared for both {old.package_manager.value} "
            f"and {new.package_manager.value}"
        )

    requirements = tuple(dict.fromkeys(old.requirements + new.requirements))
    return Dependency(
        name=old.name,
        package_manager=old.package_manager,
        requirements=requirements,
        version=_combined_version(old, new),
    )


def _combined_version(old: Dependency, new: Dependency) -> Optional[str]:
    if old.requirements:
        return old.version or new.version

    old_parsed = _parse_version(old.package_manager, old.version)
    new_parsed = _parse_version(new.package_manager, new.version)
    if new_parsed is None:
        return old.version
    if old_parsed is None:
        return new.version
    return old.version if new_parsed > old_parsed else new.version
