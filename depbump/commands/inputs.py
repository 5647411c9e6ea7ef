"""Shared input handling for the ``update`` and ``check`` commands.

Requirements come either from repeated ``--requirement`` options or from
a JSON document given with ``--input``. The document is either a list of
requirement objects or an object of this shape::

    {
      "dependency": "lodash",
      "package_manager": "npm_and_yarn",
      "latest_version": "2.1.0",
      "latest_resolvable_version": "2.0.0",
      "git": {
        "tag_for_latest_version": "v2.0.0",
        "current_tag": "v1.0.0",
        "registry_release_available": false
      },
      "requirements": [
        {"file": "package.json", "requirement": "^1.0.0",
         "groups": ["dependencies"], "source": null}
      ]
    }

Instead of ``dependency``/``requirements`` a document may carry a
``dependencies`` list of ``{"name", "version", "requirements"}`` objects.
``--input`` can be repeated, for instance once per manifest; declarations
of the same dependency are combined with :class:`DependencySet` and
``--dependency`` picks one when several are described.

Command-line options win over values from the document, which win over
the configuration file.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Sequence, Tuple

import click

from depbump.constants import MANIFEST_FILE_PATTERNS
from depbump.context import DepBumpContext
from depbump.core.source_resolver import GitResolution
from depbump.exceptions import DepBumpError, FileOperationError
from depbump.models import (
    Dependency,
    DependencySet,
    PackageManager,
    Requirement,
    UpdateStrategy,
    UpdateTarget,
    requirements_from_dicts,
)
from depbump.utils import get_logger, safe_read_file

logger = get_logger("commands.inputs")


@dataclass(frozen=True)
class UpdateRequest:
    """Everything needed to update one dependency."""

    package_manager: PackageManager
    requirements: Tuple[Requirement, ...]
    target: UpdateTarget
    update_strategy: UpdateStrategy
    dependency: Optional[str] = None
    git_resolution: Optional[GitResolution] = None


def input_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Attach the requirement/target options shared by both commands."""
    options = [
        click.option(
            "--input",
            "-i",
            "input_files",
            multiple=True,
            type=click.Path(exists=True, dir_okay=False, path_type=Path),
            help="JSON file describing dependencies and their requirements (can be repeated).",
        ),
        click.option(
            "--requirement",
            "-r",
            "requirements",
            multiple=True,
            help="Requirement string (can be repeated).",
        ),
        click.option(
            "--file",
            "-f",
            "file_name",
            help="Manifest the --requirement values belong to.",
        ),
        click.option(
            "--package-manager",
            "-p",
            type=click.Choice(PackageManager.names(), case_sensitive=False),
            help="Ecosystem of the requirements (default from config).",
        ),
        click.option(
            "--target",
            "-t",
            "latest_resolvable_version",
            help="Latest resolvable version to update towards.",
        ),
        click.option(
            "--latest",
            "latest_version",
            help="Newest known version, if different from --target.",
        ),
        click.option(
            "--library/--application",
            default=None,
            help="Treat the dependency as a library (widen ranges) or an application (pin).",
        ),
        click.option(
            "--strategy",
            type=click.Choice([s.value for s in UpdateStrategy], case_sensitive=False),
            help="Explicit update strategy, overriding --library/--application.",
        ),
        click.option(
            "--dependency",
            "-d",
            help="Dependency name (needed to rewrite a manifest).",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def build_request(
    ctx: DepBumpContext,
    *,
    input_files: Sequence[Path],
    requirements: Sequence[str],
    file_name: Optional[str],
    package_manager: Optional[str],
    latest_resolvable_version: Optional[str],
    latest_version: Optional[str],
    library: Optional[bool],
    strategy: Optional[str],
    dependency: Optional[str],
) -> UpdateRequest:
    """Merge CLI options, the JSON document and configuration into a request.

    Raises:
        click.UsageError: No requirements were given.
        DepBumpError: The JSON document is malformed.
    """
    documents = [(path, _load_document(path)) for path in input_files]
    document = _merge_documents(doc for _, doc in documents)

    explicit_manager = package_manager or document.get("package_manager")
    manager = PackageManager.parse(explicit_manager or ctx.config.package_manager)

    reqs: Tuple[Requirement, ...] = ()
    if requirements:
        file_name = file_name or default_manifest_name(manager)
        reqs = tuple(Requirement(requirement=r, file=file_name) for r in requirements)
        dependency = dependency or document.get("dependency")
    elif documents:
        dependencies = _collect_dependencies(documents, manager, dependency)
        selected = _select_dependency(dependencies, dependency)
        if selected is not None:
            reqs = selected.requirements
            dependency = selected.name or None
            if not explicit_manager:
                manager = selected.package_manager

    if not reqs:
        raise click.UsageError("Provide --requirement values or an --input file.")

    target = UpdateTarget(
        latest_version=latest_version or document.get("latest_version") or latest_resolvable_version,
        latest_resolvable_version=latest_resolvable_version
        or document.get("latest_resolvable_version"),
    )

    if strategy:
        update_strategy = UpdateStrategy(strategy.lower())
    elif library is not None:
        update_strategy = UpdateStrategy.default_for(library)
    else:
        update_strategy = ctx.config.effective_strategy

    git = document.get("git")
    git_resolution = (
        GitResolution(
            tag_for_latest_version=git.get("tag_for_latest_version"),
            current_tag=git.get("current_tag"),
            registry_release_available=bool(git.get("registry_release_available", False)),
        )
        if isinstance(git, Mapping)
        else None
    )

    request = UpdateRequest(
        package_manager=manager,
        requirements=reqs,
        target=target,
        update_strategy=update_strategy,
        dependency=dependency,
        git_resolution=git_resolution,
    )
    logger.debug("Built request: %s", request)
    return request


def default_manifest_name(package_manager: PackageManager) -> str:
    """Manifest name used for requirements given on the command line."""
    pattern = MANIFEST_FILE_PATTERNS[package_manager.value][0]
    if pattern.startswith("*."):
        return "main" + pattern[1:]
    return pattern.replace("*", "")


def _load_document(path: Path) -> Mapping[str, Any]:
    try:
        data = json.loads(safe_read_file(path))
    except json.JSONDecodeError as exc:
        raise FileOperationError(
            f"Invalid JSON: {exc}",
            file_path=str(path),
            operation="read",
            original_error=exc,
        ) from exc

    if isinstance(data, list):
        return {"requirements": data}
    if not isinstance(data, dict):
        raise DepBumpError(f"Expected a JSON object or list in {path}")
    return data


def _merge_documents(documents: Iterable[Mapping[str, Any]]) -> Dict[str, Any]:
    """Combine top-level fields; earlier documents win."""
    merged: Dict[str, Any] = {}
    for document in documents:
        for key, value in document.items():
            if value is not None:
                merged.setdefault(key, value)
    return merged


def _collect_dependencies(
    documents: Sequence[Tuple[Path, Mapping[str, Any]]],
    package_manager: PackageManager,
    default_name: Optional[str],
) -> DependencySet:
    """Read every document's dependencies, merging repeats across files.

    A document lists either ``dependencies`` (objects with ``name``,
    ``version`` and ``requirements``) or the ``requirements`` of the one
    dependency it names.
    """
    dependencies = DependencySet()
    for path, document in documents:
        try:
            if "dependencies" in document:
                found = [
                    Dependency.from_dict(entry, package_manager)
                    for entry in document["dependencies"]
                ]
            elif document.get("requirements"):
                found = [
                    Dependency(
                        name=document.get("dependency") or default_name or "",
                        package_manager=package_manager,
                        requirements=requirements_from_dicts(document["requirements"]),
                        version=document.get("version"),
                    )
                ]
            else:
                found = []
            for entry in found:
                dependencies.add(entry)
        except (KeyError, TypeError, ValueError) as exc:
            raise DepBumpError(f"Invalid requirement entry in {path}: {exc}") from exc

    logger.debug("Collected %s from %d document(s)", dependencies, len(documents))
    return dependencies


def _select_dependency(
    dependencies: DependencySet, name: Optional[str]
) -> Optional[Dependency]:
    if name:
        selected = dependencies.get(name)
        if selected is None:
            raise DepBumpError(f"Dependency {name!r} is not described by the input")
        return selected

    if len(dependencies) > 1:
        names = ", ".join(d.name for d in dependencies)
        raise click.UsageError(
            f"Input describes several dependencies ({names}); pick one with --dependency."
        )
    return next(iter(dependencies), None)
