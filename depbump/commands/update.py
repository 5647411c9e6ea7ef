"""Update command implementation for depbump.

Computes updated requirement strings for one dependency and, optionally,
writes them back into a manifest.

Typical usage::

    # Show what ^1.2.3 becomes when 2.0.0 is the latest resolvable version
    $ depbump update -p npm_and_yarn -r "^1.2.3" -t 2.0.0

    # Library mode keeps existing ranges and widens them
    $ depbump update -p composer -r "^1.0" -t 2.1.0 --library

    # Read requirements from JSON and rewrite the manifest in place
    $ depbump update -i lodash.json --manifest package.json --backup -y
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import click

from depbump.commands.inputs import UpdateRequest, build_request, input_options
from depbump.context import DepBumpContext, pass_context
from depbump.core import grammar_for, update_manifest_content, update_requirements
from depbump.exceptions import DepBumpError, RequirementParseError
from depbump.models import Requirement
from depbump.utils import (
    colorize_update_type,
    confirm,
    get_logger,
    get_update_type,
    print_error,
    print_info,
    print_success,
    print_table,
    print_warning,
    safe_read_file,
    safe_write_file,
)

logger = get_logger("commands.update")


@click.command()
@input_options
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json"], case_sensitive=False),
    default="table",
    help="Output format.",
)
@click.option(
    "--manifest",
    "-m",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Manifest file to rewrite with the updated requirements.",
)
@click.option("--dry-run", is_flag=True, help="Show the result without writing the manifest.")
@click.option("--backup", is_flag=True, help="Keep a timestamped backup of the manifest.")
@click.option("--yes", "-y", is_flag=True, help="Skip the confirmation prompt.")
@pass_context
def update(
    ctx: DepBumpContext,
    output_format: str,
    manifest: Optional[Path],
    dry_run: bool,
    backup: bool,
    yes: bool,
    **inputs: Any,
) -> None:
    """Compute updated requirements for a dependency.

    Each requirement keeps its operator and precision; requirements that
    already allow the target stay as they are.

    Exits:
        0 on success, 1 on error.
    """
    try:
        request = build_request(ctx, **inputs)
        updated = update_requirements(
            request.package_manager,
            request.requirements,
            request.target,
            update_strategy=request.update_strategy,
            git_resolution=request.git_resolution,
        )

        if output_format == "json":
            print(json.dumps(list(_json_rows(request.requirements, updated)), indent=2))
        else:
            _display_results(_result_rows(request, updated))

        if manifest is not None:
            _rewrite_manifest(manifest, request, updated, dry_run=dry_run, backup=backup, yes=yes)

    except DepBumpError as exc:
        print_error(str(exc))
        logger.debug("Update failed: %r", exc)
        sys.exit(1)


# ---------------------------------------------------------------------------
# Reporting
# ---------------------------------------------------------------------------


def _result_rows(request: UpdateRequest, updated: Sequence[Requirement]) -> List[Dict[str, Any]]:
    grammar = grammar_for(request.package_manager)
    rows = []
    for old, new in zip(request.requirements, updated):
        change = _change_type(grammar, old, new)
        rows.append(
            {
                "File": old.file,
                "Current": old.requirement or "-",
                "Updated": new.requirement or "-",
                "Change": colorize_update_type(change) if change else "",
                "Source": str(new.source) if new.source else "registry",
            }
        )
    return rows


def _json_rows(previous: Sequence[Requirement], updated: Sequence[Requirement]):
    for old, new in zip(previous, updated):
        entry = new.to_dict()
        entry["previous_requirement"] = old.requirement
        entry["changed"] = old != new
        yield entry


def _change_type(grammar, old: Requirement, new: Requirement) -> str:
    """Classify how far a requirement moved, or ``""`` if it did not."""
    if old == new:
        return ""
    if old.requirement == new.requirement:
        return "source"
    return get_update_type(
        highest_version(grammar, old.requirement),
        highest_version(grammar, new.requirement),
        parse=grammar.version,
    )


def highest_version(grammar, requirement: Optional[str]) -> Optional[str]:
    """Return the highest concrete version mentioned in ``requirement``."""
    if not requirement:
        return None
    try:
        expression = grammar.parse(requirement)
    except RequirementParseError:
        return None

    versions = []
    for comparator in expression.comparators():
        operand = grammar.clean_operand(comparator.version)
        if grammar.is_version(operand):
            versions.append((grammar.version(operand), operand))
    if not versions:
        return None
    return max(versions, key=lambda item: item[0])[1]


def _display_results(rows: List[Dict[str, Any]]) -> None:
    print_table(
        rows,
        headers=["File", "Current", "Updated", "Change", "Source"],
        title="Requirement updates",
        column_styles={
            "File": {"style": "cyan", "no_wrap": True},
            "Updated": {"style": "bold green"},
        },
        row_styler=lambda row: None if row["Current"] != row["Updated"] else "dim",
    )


# ---------------------------------------------------------------------------
# Manifest rewrite
# ---------------------------------------------------------------------------


def _rewrite_manifest(
    manifest: Path,
    request: UpdateRequest,
    updated: Sequence[Requirement],
    *,
    dry_run: bool,
    backup: bool,
    yes: bool,
) -> None:
    if not request.dependency:
        raise click.UsageError("--dependency is required with --manifest.")

    content = safe_read_file(manifest)
    new_content = update_manifest_content(
        str(manifest),
        content,
        request.dependency,
        request.requirements,
        updated,
    )

    if new_content == content:
        print_info(f"{manifest} is already up to date")
        return

    if dry_run:
        print_warning(f"Dry run: {manifest} not modified")
        return

    if not yes and not confirm(f"Write changes to {manifest}?", default=True):
        print_info("Cancelled")
        return

    backup_path = safe_write_file(manifest, new_content, create_backup_file=backup)
    print_success(f"Updated {manifest}")
    if backup_path is not None:
        print_info(f"Backup saved to {backup_path}")
