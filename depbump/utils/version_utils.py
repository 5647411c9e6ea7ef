"""
Version comparison helpers for CLI reporting.

Classifies how far a requirement moved, e.g. ``^1.2.3`` -> ``^2.0.0`` is
a ``major`` update. Parsing is delegated to the caller's grammar so the
same helper serves PEP 440 and semver-like ecosystems.
"""

from __future__ import annotations

from typing import Any, Callable, Optional, Tuple

from depbump.exceptions import InvalidVersion
from depbump.models.version import Version

VersionParser = Callable[[str], Any]


def get_update_type(
    current_version: Optional[str],
    target_version: Optional[str],
    *,
    parse: VersionParser = Version,
) -> str:
    """Classify the change between two versions.

    Returns:
        ``"new"`` when there is no current version, ``"same"``,
        ``"downgrade"``, ``"major"``, ``"minor"``, ``"patch"``, ``"update"``
        (only prerelease/build parts differ) or ``"unknown"`` when either
        side does not parse.

    Examples:
        >>> get_update_type("1.0.0", "2.0.0")
        'major'
        >>> get_update_type(None, "1.0.0")
        'new'
    """
    if target_version is None:
        return "unknown"
    if current_version is None:
        return "new"

    try:
        current = parse(current_version)
        target = parse(target_version)
    except (InvalidVersion, ValueError):
        return "unknown"

    if target == current:
        return "same"
    if target < current:
        return "downgrade"

    current_parts = _major_minor_patch(current)
    target_parts = _major_minor_patch(target)
    for label, old, new in zip(("major", "minor", "patch"), current_parts, target_parts):
        if old != new:
            return label
    return "update"


def _major_minor_patch(version: Any) -> Tuple[int, int, int]:
    segments = getattr(version, "segments", None)
    if segments is None:
        segments = version.release
    padded = tuple(segments) + (0, 0, 0)
    return padded[0], padded[1], padded[2]
