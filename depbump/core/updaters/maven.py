"""Maven requirement updater (``pom.xml``).

Soft requirements (a bare version) are replaced outright. Ranges are
left alone unless they exclude the target, and even then only an exact
``[x]`` pin is rewritten.
"""

from __future__ import annotations

from depbump.core.grammar import Comparator, Expression, MavenGrammar, replace_span
from depbump.core.updaters.base import RequirementUpdater
from depbump.models import PackageManager
from depbump.utils.logger import get_logger

logger = get_logger("updaters.maven")


class MavenRequirementUpdater(RequirementUpdater):
    package_manager = PackageManager.MAVEN
    grammar = MavenGrammar()

    def bump(self, text: str, expression: Expression, satisfied: bool) -> str:
        if not self.grammar.is_range(text):
            return self.target

        constraints = expression.constraints
        if len(constraints) == 1:
            only = constraints[0]
            if isinstance(only, Comparator) and only.operator == "=":
                return replace_span(text, only.version_span, self.target)

        logger.debug("Not rewriting Maven range %r", text)
        return text

    def initial_requirement(self) -> str:
        return self.target
