"""
Unified data model exports for depbump.

Example:
    >>> from depbump.models import Requirement, Source, Version, DependencySet
"""

from __future__ import annotations

from depbump.models.dependency import Dependency, DependencySet
from depbump.models.ecosystem import PackageManager, UpdateStrategy
from depbump.models.requirement import (
    Requirement,
    Source,
    SourceType,
    requirements_from_dicts,
)
from depbump.models.target import UpdateTarget
from depbump.models.version import Version

__all__ = [
    "Dependency",
    "DependencySet",
    "PackageManager",
    "UpdateStrategy",
    "Requirement",
    "Source",
    "SourceType",
    "requirements_from_dicts",
    "UpdateTarget",
    "Version",
]
