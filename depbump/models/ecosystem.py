"""Package manager and update strategy enumerations."""

from __future__ import annotations

from enum import Enum
from typing import List

from depbump.exceptions import UnsupportedPackageManager


class PackageManager(str, Enum):
    """Ecosystems whose requirement grammar depbump understands."""

    NPM_AND_YARN = "npm_and_yarn"
    COMPOSER = "composer"
    CARGO = "cargo"
    DEP = "dep"
    TERRAFORM = "terraform"
    PIP = "pip"
    HEX = "hex"
    MAVEN = "maven"

    @classmethod
    def parse(cls, value: "str | PackageManager") -> "PackageManager":
        """Look up a package manager by value, accepting a few common aliases.

        Raises:
            UnsupportedPackageManager: ``value`` names no known ecosystem.
        """
        if isinstance(value, PackageManager):
            return value
        key = str(value).strip().lower()
        key = _ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError as exc:
            raise UnsupportedPackageManager(value) from exc

    @classmethod
    def names(cls) -> List[str]:
        """Every accepted spelling: enum values followed by aliases."""
        return [pm.value for pm in cls] + sorted(_ALIASES)


_ALIASES = {
    "npm": "npm_and_yarn",
    "yarn": "npm_and_yarn",
    "pipenv": "pip",
    "go_dep": "dep",
    "elixir": "hex",
    "rust": "cargo",
}


class UpdateStrategy(str, Enum):
    """How aggressively requirement strings are rewritten.

    ``BUMP_VERSIONS`` rewrites the version in every requirement to the
    target, even when the requirement already allows it.
    ``BUMP_VERSIONS_IF_NECESSARY`` does the same but only for requirements
    the target does not satisfy. ``WIDEN_RANGES`` leaves lower bounds in
    place and only widens requirements that exclude the target.
    """

    BUMP_VERSIONS = "bump_versions"
    BUMP_VERSIONS_IF_NECESSARY = "bump_versions_if_necessary"
    WIDEN_RANGES = "widen_ranges"

    @classmethod
    def default_for(cls, is_library: bool) -> "UpdateStrategy":
        """Libraries widen to stay compatible; applications pin forward."""
        return cls.WIDEN_RANGES if is_library else cls.BUMP_VERSIONS_IF_NECESSARY
