"""Terraform module and provider requirement updater (``*.tf``).

Registry modules carry a ``version`` constraint that is updated here.
Git-sourced modules have no constraint; their ``ref`` is moved by
:class:`~depbump.core.source_resolver.SourceTransitionResolver` instead.
"""

from __future__ import annotations

from depbump.core.grammar import Comparator, Expression, TerraformGrammar, replace_span
from depbump.core.updaters.base import RequirementUpdater, at_same_precision
from depbump.models import PackageManager, Requirement, SourceType


class TerraformRequirementUpdater(RequirementUpdater):
    package_manager = PackageManager.TERRAFORM
    grammar = TerraformGrammar()

    def updated_requirement(self, req: Requirement) -> Requirement:
        moved = self._apply_source(req)
        if moved.source is not None and moved.source.type not in (
            SourceType.REGISTRY,
            SourceType.PRIVATE_REGISTRY,
        ):
            return moved
        return super().updated_requirement(req)

    def bump(self, text: str, expression: Expression, satisfied: bool) -> str:
        constraints = expression.constraints
        first = constraints[0]

        if len(constraints) == 1 and isinstance(first, Comparator):
            if first.operator in ("", "="):
                return replace_span(text, first.version_span, self.target)
            if first.operator == "~>":
                return self.update_twiddle(text, first)

        return self.join_range_constraints(text, expression)

    def update_twiddle(self, text: str, comparator: Comparator) -> str:
        new_token = at_same_precision(self.target, comparator.version)
        return replace_span(text, comparator.version_span, new_token)

    def initial_requirement(self) -> str:
        return self.target
