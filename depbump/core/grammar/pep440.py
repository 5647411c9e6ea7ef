"""PEP 440 requirements for pip, Pipenv and ``setup.py``.

Splitting uses the shared parser (``,`` for AND, ``||`` for OR) so
updaters get source spans; satisfaction is delegated to
:mod:`packaging.specifiers`.
"""

from __future__ import annotations

from typing import Any

from packaging.specifiers import InvalidSpecifier, Specifier
from packaging.version import InvalidVersion as PackagingInvalidVersion
from packaging.version import Version as PackagingVersion

from depbump.core.grammar.base import Grammar
from depbump.core.grammar.parser import Constraint, HyphenRange
from depbump.exceptions import InvalidVersion, RequirementParseError
from depbump.models.ecosystem import PackageManager


class PipGrammar(Grammar):
    package_manager = PackageManager.PIP
    operators = ("~=", "===", "==", "!=", ">=", "<=", ">", "<")

    def version(self, text: Any) -> PackagingVersion:
        if isinstance(text, PackagingVersion):
            return text
        try:
            return PackagingVersion(str(text).strip())
        except PackagingInvalidVersion as exc:
            raise InvalidVersion(text, package_manager=self.package_manager.value) from exc

    def is_version(self, text: Any) -> bool:
        try:
            self.version(text)
        except InvalidVersion:
            return False
        return True

    def specifier(self, constraint: Constraint) -> Specifier:
        """Build a :class:`~packaging.specifiers.Specifier` for one constraint.

        A bare version is read as ``==``.
        """
        if isinstance(constraint, HyphenRange):
            raise RequirementParseError("Hyphen ranges are not valid PEP 440")
        operator = constraint.operator or "=="
        try:
            return Specifier(f"{operator}{constraint.version}", prereleases=True)
        except InvalidSpecifier as exc:
            raise RequirementParseError(
                f"Invalid specifier: {exc}",
                requirement=f"{operator}{constraint.version}",
            ) from exc

    def constraint_satisfied_by(self, constraint: Constraint, version: Any) -> bool:
        if constraint.operator == "" and constraint.version == "*":
            return True
        return self.specifier(constraint).contains(self.version(version))

    def satisfied_by(self, requirement: str, version: Any) -> bool:
        return self.expression_satisfied_by(self.parse(requirement), self.version(version))
