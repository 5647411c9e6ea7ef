"""Requirement updaters, one per package manager."""

from __future__ import annotations

from typing import Dict, Mapping, Optional, Type, Union

from depbump.core.updaters.base import (
    UNCHANGED,
    RequirementUpdater,
    at_same_precision,
    precision_preserving,
    update_greatest_version,
)
from depbump.core.updaters.cargo import CargoRequirementUpdater, DepRequirementUpdater
from depbump.core.updaters.composer import ComposerRequirementUpdater
from depbump.core.updaters.hex import HexRequirementUpdater
from depbump.core.updaters.maven import MavenRequirementUpdater
from depbump.core.updaters.npm import NpmRequirementUpdater
from depbump.core.updaters.pip import PipRequirementUpdater
from depbump.core.updaters.terraform import TerraformRequirementUpdater
from depbump.exceptions import UnsupportedPackageManager
from depbump.models import PackageManager

UPDATERS: Dict[PackageManager, Type[RequirementUpdater]] = {
    updater.package_manager: updater
    for updater in (
        NpmRequirementUpdater,
        ComposerRequirementUpdater,
        CargoRequirementUpdater,
        DepRequirementUpdater,
        TerraformRequirementUpdater,
        PipRequirementUpdater,
        HexRequirementUpdater,
        MavenRequirementUpdater,
    )
}


def updater_for(
    package_manager: Union[str, PackageManager],
    updaters: Optional[Mapping[PackageManager, Type[RequirementUpdater]]] = None,
) -> Type[RequirementUpdater]:
    """Return the updater class registered for ``package_manager``.

    Raises:
        UnsupportedPackageManager: Nothing is registered for it.
    """
    manager = PackageManager.parse(package_manager)
    registry = UPDATERS if updaters is None else updaters
    try:
        return registry[manager]
    except KeyError as exc:
        raise UnsupportedPackageManager(package_manager) from exc


__all__ = [
    "CargoRequirementUpdater",
    "ComposerRequirementUpdater",
    "DepRequirementUpdater",
    "HexRequirementUpdater",
    "MavenRequirementUpdater",
    "NpmRequirementUpdater",
    "PipRequirementUpdater",
    "RequirementUpdater",
    "TerraformRequirementUpdater",
    "UNCHANGED",
    "UPDATERS",
    "at_same_precision",
    "precision_preserving",
    "update_greatest_version",
    "updater_for",
]
