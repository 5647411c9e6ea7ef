"""Grammars built around the pessimistic ``~>`` operator: Terraform and Hex."""

from __future__ import annotations

from depbump.core.grammar.base import (
    Grammar,
    comparison_bounds,
    exact_bounds,
    pessimistic_bounds,
)
from depbump.core.grammar.parser import TokenKind
from depbump.models.ecosystem import PackageManager

_COMPARISONS = {
    op: comparison_bounds(op) for op in (">=", "<=", ">", "<", "!=")
}


class TerraformGrammar(Grammar):
    """Terraform module version constraints (``, ``-separated)."""

    package_manager = PackageManager.TERRAFORM
    operators = ("~>", ">=", "<=", "!=", ">", "<", "=")
    expansions = {
        "": exact_bounds,
        "=": exact_bounds,
        "~>": pessimistic_bounds,
        **_COMPARISONS,
    }


class HexGrammar(Grammar):
    """Elixir/Hex requirements joined with ``and`` / ``or``."""

    package_manager = PackageManager.HEX
    operators = ("~>", "==", "!=", ">=", "<=", ">", "<")
    keywords = {"and": TokenKind.AND, "or": TokenKind.OR}
    expansions = {
        "": exact_bounds,
        "==": exact_bounds,
        "~>": pessimistic_bounds,
        **_COMPARISONS,
    }
