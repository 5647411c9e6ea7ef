"""Entry point tying sources, strategies and updaters together."""

from __future__ import annotations

from typing import Mapping, Optional, Sequence, Type, Union

from depbump.core.source_resolver import GitResolution, SourceTransitionResolver
from depbump.core.updaters import UNCHANGED, RequirementUpdater, updater_for
from depbump.models import PackageManager, Requirement, UpdateStrategy, UpdateTarget
from depbump.utils.logger import get_logger

logger = get_logger("engine")


def update_requirements(
    package_manager: Union[str, PackageManager],
    requirements: Sequence[Requirement],
    target: UpdateTarget,
    *,
    is_library: bool = False,
    update_strategy: Optional[Union[str, UpdateStrategy]] = None,
    git_resolution: Optional[GitResolution] = None,
    updaters: Optional[Mapping[PackageManager, Type[RequirementUpdater]]] = None,
) -> Sequence[Requirement]:
    """Compute the updated requirements of one dependency.

    Args:
        package_manager: Ecosystem whose grammar the requirements use.
        requirements: The dependency's requirements, in manifest order.
        target: Versions to update towards.
        is_library: Selects the default strategy when ``update_strategy``
            is not given.
        update_strategy: Explicit strategy overriding ``is_library``.
        git_resolution: Git lookup result for git-sourced dependencies.
        updaters: Replacement for the default updater registry.

    Returns:
        A list with one entry per input requirement, in the same order.
        When ``target`` has no resolvable version the input is returned
        as is.

    Raises:
        UnsupportedPackageManager: No updater handles ``package_manager``.
        MultipleIncompatibleSources: Requirements disagree on their source.
        UnknownOperator: A requirement cannot be relaxed to the target.

    Example:
        >>> reqs = [Requirement("^1.2.3", "package.json")]
        >>> update_requirements("npm", reqs, UpdateTarget("2.0.0", "2.0.0"))[0].requirement
        '^2.0.0'
    """
    if not target.updatable:
        return requirements

    updater_class = updater_for(package_manager, updaters)

    if update_strategy is None:
        strategy = UpdateStrategy.default_for(is_library)
    else:
        strategy = UpdateStrategy(update_strategy)

    decision = SourceTransitionResolver(requirements, git_resolution).resolve()
    updated_source = decision.source if decision.changed else UNCHANGED

    logger.debug(
        "Updating %d %s requirement(s) to %s (%s, source: %s)",
        len(requirements),
        updater_class.package_manager.value,
        target.latest_resolvable_version,
        strategy.value,
        decision.outcome.value,
    )

    updater = updater_class(
        requirements,
        latest_version=target.latest_version,
        latest_resolvable_version=target.latest_resolvable_version,
        update_strategy=strategy,
        updated_source=updated_source,
    )
    return updater.updated_requirements()
