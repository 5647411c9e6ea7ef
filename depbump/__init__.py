"""
depbump: requirement-string update engine for many package managers.

Given the requirements a dependency is declared with (``^1.2.3``,
``~> 2.0``, ``<=1.5.0 || ^2.0.0``, a git ref, ...) and the latest
resolvable version of that dependency, depbump computes new requirement
strings that keep each ecosystem's operator class and precision.

Supported package managers:
    • npm / yarn
    • Composer
    • Cargo
    • Go dep
    • Terraform
    • pip / Pipenv
    • Hex
    • Maven
"""

from __future__ import annotations

from depbump.__version__ import __version__
from depbump.core.engine import update_requirements
from depbump.models import (
    PackageManager,
    Requirement,
    Source,
    SourceType,
    UpdateStrategy,
    UpdateTarget,
)

# ---------------------------------------------------------------------------
# Package Metadata
# ---------------------------------------------------------------------------

__author__ = "depbump Contributors"
__license__ = "Apache-2.0"
__description__ = "Operator- and precision-preserving dependency requirement updates."

__all__ = [
    "__version__",
    "update_requirements",
    "PackageManager",
    "Requirement",
    "Source",
    "SourceType",
    "UpdateStrategy",
    "UpdateTarget",
]
