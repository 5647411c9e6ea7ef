"""Update target model."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class UpdateTarget:
    """The versions an update is computed against.

    Attributes:
        latest_version: Newest known release of the dependency.
        latest_resolvable_version: Newest release installable without
            breaking other dependencies. May be lower than
            ``latest_version``. ``None`` means no update is possible.
    """

    latest_version: Optional[str] = None
    latest_resolvable_version: Optional[str] = None

    @property
    def updatable(self) -> bool:
        return self.latest_resolvable_version is not None
