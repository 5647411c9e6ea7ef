"""Check command implementation for depbump.

Reports whether each requirement of a dependency already allows the
target version, and what it would be updated to if not. The exit status
makes it usable as a CI gate.

Typical usage::

    $ depbump check -p cargo -r "0.4" -r ">= 0.3, < 0.5" -t 0.5.1
    $ depbump check -i serde.json --format json
"""

from __future__ import annotations

import json
import re
import sys
from typing import Any, Dict, List, Sequence

import click

from depbump.commands.inputs import UpdateRequest, build_request, input_options
from depbump.context import DepBumpContext, pass_context
from depbump.core import grammar_for, update_requirements
from depbump.core.grammar import Grammar
from depbump.exceptions import DepBumpError, InvalidVersion, RequirementParseError
from depbump.models import Requirement
from depbump.utils import (
    get_logger,
    print_error,
    print_success,
    print_table,
    print_warning,
)

logger = get_logger("commands.check")

_DIGIT = re.compile(r"\d")

STATUS_OK = "ok"
STATUS_OUTDATED = "outdated"
STATUS_UNCONSTRAINED = "unconstrained"
STATUS_UNPARSEABLE = "unparseable"


@click.command()
@input_options
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json"], case_sensitive=False),
    default="table",
    help="Output format.",
)
@pass_context
def check(ctx: DepBumpContext, output_format: str, **inputs: Any) -> None:
    """Check whether requirements already allow the target version.

    Exits:
        0 if every requirement allows the target, 1 if any needs an
        update or an error occurred.
    """
    try:
        request = build_request(ctx, **inputs)
        results = _check_requirements(request)
    except DepBumpError as exc:
        print_error(str(exc))
        logger.debug("Check failed: %r", exc)
        sys.exit(1)

    outdated = sum(1 for r in results if r["status"] == STATUS_OUTDATED)

    if output_format == "json":
        print(json.dumps(results, indent=2))
    else:
        _display_table(results)
        if outdated:
            print_warning(f"{outdated} requirement(s) need an update")
        else:
            print_success("All requirements allow the target version")

    sys.exit(1 if outdated else 0)


def _check_requirements(request: UpdateRequest) -> List[Dict[str, Any]]:
    if request.target.latest_resolvable_version is None:
        raise DepBumpError("A target version is required (--target)")

    grammar = grammar_for(request.package_manager)
    proposed = update_requirements(
        request.package_manager,
        request.requirements,
        request.target,
        update_strategy=request.update_strategy,
        git_resolution=request.git_resolution,
    )

    return [
        {
            "file": req.file,
            "requirement": req.requirement,
            "status": requirement_status(grammar, req, request.target.latest_resolvable_version),
            "proposed": new.requirement,
        }
        for req, new in zip(request.requirements, proposed)
    ]


def requirement_status(grammar: Grammar, req: Requirement, version: str) -> str:
    """Classify one requirement against ``version``."""
    text = req.requirement
    if text is None or not _DIGIT.search(text):
        return STATUS_UNCONSTRAINED
    try:
        satisfied = grammar.satisfied_by(text, version)
    except (RequirementParseError, InvalidVersion) as exc:
        logger.debug("Cannot evaluate %r: %s", text, exc)
        return STATUS_UNPARSEABLE
    return STATUS_OK if satisfied else STATUS_OUTDATED


def _display_table(results: Sequence[Dict[str, Any]]) -> None:
    styles = {
        STATUS_OK: "green",
        STATUS_OUTDATED: "yellow",
        STATUS_UNPARSEABLE: "red",
    }
    rows = [
        {
            "File": r["file"],
            "Requirement": r["requirement"] or "-",
            "Status": r["status"],
            "Proposed": r["proposed"] or "-",
        }
        for r in results
    ]
    print_table(
        rows,
        headers=["File", "Requirement", "Status", "Proposed"],
        title="Requirement check",
        column_styles={"File": {"style": "cyan", "no_wrap": True}},
        row_styler=lambda row: styles.get(row["Status"]),
    )
