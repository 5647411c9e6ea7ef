"""Write updated requirements back into manifest text.

The engine works on requirement records only; this module is the glue
that puts its output back into a manifest without reformatting it. Each
supported format gets a small rewriter that locates the dependency's
declaration(s) and swaps the old requirement (and git ref) for the new
one, leaving every other byte of the file alone.

Supported manifests:

- ``package.json`` / ``composer.json``
- ``Cargo.toml`` / ``Gopkg.toml`` / ``Pipfile``
- ``requirements*.txt``
- Terraform ``*.tf``
- ``mix.exs``
- ``pom.xml`` (dependency names are ``groupId:artifactId``)

Typical usage::

    from depbump.core.manifest import update_manifest_content

    content = update_manifest_content(
        "package.json", content, "lodash", previous, updated
    )
"""

from __future__ import annotations

import re
from fnmatch import fnmatch
from pathlib import PurePosixPath
from typing import Callable, List, Optional, Sequence, Tuple

from depbump.exceptions import FileUpdateError
from depbump.models import Requirement
from depbump.utils.logger import get_logger

logger = get_logger("manifest")

Rewriter = Callable[[str, str, Requirement, Requirement], str]
Substitution = Tuple[str, str]


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def update_manifest_content(
    file_name: str,
    content: str,
    dependency_name: str,
    previous: Sequence[Requirement],
    updated: Sequence[Requirement],
) -> str:
    """Return ``content`` with one dependency's declarations updated.

    ``previous`` and ``updated`` are paired by index, exactly as returned
    by :func:`~depbump.core.engine.update_requirements`. Pairs belonging to
    other files, and pairs that did not change, are skipped.

    Args:
        file_name: Manifest name or path; selects the rewriter.
        content: Current manifest text.
        dependency_name: Name the dependency is declared under.
        previous: Requirements before updating.
        updated: Requirements after updating.

    Returns:
        The rewritten manifest text.

    Raises:
        FileUpdateError: The manifest type is unsupported, the lists have
            different lengths, or a changed declaration cannot be found.

    Example::

        >>> old = Requirement("^1.0.0", "package.json")
        >>> update_manifest_content(
        ...     "package.json", '{"dependencies": {"a": "^1.0.0"}}', "a",
        ...     [old], [old.with_requirement("^2.0.0")],
        ... )
        '{"dependencies": {"a": "^2.0.0"}}'
    """
    if len(previous) != len(updated):
        raise FileUpdateError(
            "Previous and updated requirement lists differ in length",
            file_name=file_name,
            dependency_name=dependency_name,
        )

    rewriter = _rewriter_for(file_name, dependency_name)
    # Rewriters replace every matching declaration, so a change shared by
    # several groups of one file is applied once.
    applied = set()

    for old, new in zip(previous, updated):
        if old == new or not _same_file(old.file, file_name):
            continue
        change = (old.requirement, old.source, new.requirement, new.source)
        if change in applied:
            continue
        rewritten = rewriter(content, dependency_name, old, new)
        if rewritten == content:
            raise FileUpdateError(
                f"Declaration {old.requirement!r} not found",
                file_name=file_name,
                dependency_name=dependency_name,
            )
        logger.debug(
            "Rewrote %s in %s: %s -> %s",
            dependency_name,
            file_name,
            old.requirement,
            new.requirement,
        )
        content = rewritten
        applied.add(change)

    return content


def is_supported_manifest(file_name: str) -> bool:
    """Return True when :func:`update_manifest_content` can rewrite ``file_name``."""
    return _lookup(file_name) is not None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _same_file(requirement_file: str, file_name: str) -> bool:
    left = PurePosixPath(requirement_file.replace("\\", "/")).as_posix()
    right = PurePosixPath(file_name.replace("\\", "/")).as_posix()
    return left == right or left.endswith("/" + right) or right.endswith("/" + left)


def _substitutions(old: Requirement, new: Requirement) -> List[Substitution]:
    """Text swaps turning the old declaration into the new one."""
    swaps: List[Substitution] = []
    if old.requirement and new.requirement and old.requirement != new.requirement:
        swaps.append((old.requirement, new.requirement))

    old_ref = old.source.ref if old.source else None
    new_ref = new.source.ref if new.source else None
    if old_ref and new_ref and old_ref != new_ref:
        swaps.append((old_ref, new_ref))
    return swaps


def _switched_to_registry(old: Requirement, new: Requirement) -> bool:
    return (
        old.source is not None
        and old.source.is_git
        and new.source is None
        and new.requirement is not None
    )


def _swap_quoted(text: str, swaps: Sequence[Substitution]) -> str:
    """Replace ``"old"``/``'old'`` string literals, keeping the quote style."""
    for old, new in swaps:
        pattern = re.compile(r"([\"'])%s\1" % re.escape(old))
        text = pattern.sub(lambda m, new=new: f"{m.group(1)}{new}{m.group(1)}", text)
    return text


def _loose(requirement: str) -> str:
    """Regex matching ``requirement`` with any whitespace between characters."""
    return r"\s*".join(re.escape(ch) for ch in requirement if not ch.isspace())


# ---------------------------------------------------------------------------
# JSON manifests (package.json, composer.json)
# ---------------------------------------------------------------------------


def _rewrite_json(content: str, name: str, old: Requirement, new: Requirement) -> str:
    pattern = re.compile(r'(?P<key>"%s"\s*:\s*)"(?P<value>[^"]*)"' % re.escape(name))
    swaps = _substitutions(old, new)
    switched = _switched_to_registry(old, new)

    def replace(match: "re.Match[str]") -> str:
        value = match.group("value")
        if switched:
            if old.source is not None and old.source.url and old.source.url not in value:
                return match.group(0)
            value = new.requirement
        elif old.requirement is not None and value == old.requirement:
            value = new.requirement or value
        else:
            for before, after in swaps:
                value = value.replace(before, after)
        return f'{match.group("key")}"{value}"'

    return pattern.sub(replace, content)


# ---------------------------------------------------------------------------
# TOML manifests (Cargo.toml, Gopkg.toml, Pipfile)
# ---------------------------------------------------------------------------

_TOML_HEADER = re.compile(r"^[ \t]*\[", re.M)


def _toml_sections(content: str) -> List[Tuple[int, int]]:
    starts = [m.start() for m in _TOML_HEADER.finditer(content)]
    if not starts or starts[0] != 0:
        starts.insert(0, 0)
    return list(zip(starts, starts[1:] + [len(content)]))


def _rewrite_toml(content: str, name: str, old: Requirement, new: Requirement) -> str:
    escaped = re.escape(name)
    table = re.compile(r"^[ \t]*\[[^\]\n]*\.[\"']?%s[\"']?\][ \t]*$" % escaped, re.M)
    named = re.compile(r"^[ \t]*name[ \t]*=[ \t]*[\"']%s[\"']" % escaped, re.M)
    inline = re.compile(r"^(?P<key>[ \t]*[\"']?%s[\"']?[ \t]*=[ \t]*)(?P<value>.+)$" % escaped, re.M)

    swaps = _substitutions(old, new)
    switched = _switched_to_registry(old, new)

    def rewrite_inline(match: "re.Match[str]") -> str:
        if switched:
            return f'{match.group("key")}"{new.requirement}"'
        return match.group("key") + _swap_quoted(match.group("value"), swaps)

    pieces = []
    for start, end in _toml_sections(content):
        section = content[start:end]
        header_end = section.find("\n") + 1 if "\n" in section else len(section)
        header = section[:header_end]

        if table.match(header) or (header.lstrip().startswith("[[") and named.search(section)):
            section = header + _swap_quoted(section[header_end:], swaps)
        else:
            section = inline.sub(rewrite_inline, section)
        pieces.append(section)

    return "".join(pieces)


# ---------------------------------------------------------------------------
# requirements.txt
# ---------------------------------------------------------------------------


def _rewrite_requirements_txt(
    content: str, name: str, old: Requirement, new: Requirement
) -> str:
    if not old.requirement or not new.requirement:
        return content

    name_pattern = r"[-_.]+".join(re.escape(part) for part in re.split(r"[-_.]+", name))
    pattern = re.compile(
        r"^(?P<prefix>[ \t]*%s(?:\[[^\]]*\])?[ \t]*)%s(?=[ \t]*(?:;|#|\\|$))"
        % (name_pattern, _loose(old.requirement)),
        re.M | re.I,
    )
    return pattern.sub(lambda m: m.group("prefix") + new.requirement, content)


# ---------------------------------------------------------------------------
# Terraform
# ---------------------------------------------------------------------------

_TF_BLOCK = re.compile(
    r'^[ \t]*(?P<kind>module|provider)[ \t]+"(?P<label>[^"]*)"[ \t]*\{.*?^[ \t]*\}',
    re.M | re.S,
)


def _rewrite_terraform(content: str, name: str, old: Requirement, new: Requirement) -> str:
    source_line = re.compile(r'source\s*=\s*"[^"]*%s' % re.escape(name))
    swaps = _substitutions(old, new)
    old_ref = old.source.ref if old.source else None
    new_ref = new.source.ref if new.source else None

    def replace(match: "re.Match[str]") -> str:
        block = match.group(0)
        if match.group("kind") == "provider":
            if match.group("label") != name:
                return block
        elif not source_line.search(block):
            return block

        if old_ref and new_ref and old_ref != new_ref:
            block = re.sub(
                r"([?&]ref=)%s(?=[\"&])" % re.escape(old_ref),
                lambda m: m.group(1) + new_ref,
                block,
            )
        return _swap_quoted(block, [s for s in swaps if s[0] != old_ref])

    return _TF_BLOCK.sub(replace, content)


# ---------------------------------------------------------------------------
# mix.exs
# ---------------------------------------------------------------------------

_MIX_GIT_OPTIONS = re.compile(r",\s*(?:git|github|tag|ref|branch):\s*\"[^\"]*\"")


def _rewrite_mix(content: str, name: str, old: Requirement, new: Requirement) -> str:
    pattern = re.compile(r"\{\s*:%s\s*,.*?\}" % re.escape(name), re.S)
    swaps = _substitutions(old, new)
    switched = _switched_to_registry(old, new)

    def replace(match: "re.Match[str]") -> str:
        declaration = match.group(0)
        if switched:
            declaration = _MIX_GIT_OPTIONS.sub("", declaration)
            head = re.match(r"\{\s*:%s" % re.escape(name), declaration).group(0)
            return f'{head}, "{new.requirement}"{declaration[len(head):]}'
        return _swap_quoted(declaration, swaps)

    return pattern.sub(replace, content)


# ---------------------------------------------------------------------------
# pom.xml
# ---------------------------------------------------------------------------

_POM_DEPENDENCY = re.compile(r"<(?P<tag>dependency|plugin)>.*?</(?P=tag)>", re.S)


def _rewrite_pom(content: str, name: str, old: Requirement, new: Requirement) -> str:
    group_id, _, artifact_id = name.rpartition(":")
    if not old.requirement or not new.requirement:
        return content

    version = re.compile(r"(<version>\s*)%s(\s*</version>)" % re.escape(old.requirement))

    def replace(match: "re.Match[str]") -> str:
        block = match.group(0)
        if not re.search(r"<artifactId>\s*%s\s*</artifactId>" % re.escape(artifact_id), block):
            return block
        if group_id and not re.search(r"<groupId>\s*%s\s*</groupId>" % re.escape(group_id), block):
            return block
        return version.sub(lambda m: m.group(1) + new.requirement + m.group(2), block)

    return _POM_DEPENDENCY.sub(replace, content)


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------

_REWRITERS: Sequence[Tuple[str, Rewriter]] = (
    ("package.json", _rewrite_json),
    ("composer.json", _rewrite_json),
    ("Cargo.toml", _rewrite_toml),
    ("Gopkg.toml", _rewrite_toml),
    ("Pipfile", _rewrite_toml),
    ("requirements*.txt", _rewrite_requirements_txt),
    ("*.tf", _rewrite_terraform),
    ("mix.exs", _rewrite_mix),
    ("pom.xml", _rewrite_pom),
)


def _lookup(file_name: str) -> Optional[Rewriter]:
    base = PurePosixPath(file_name.replace("\\", "/")).name
    for pattern, rewriter in _REWRITERS:
        if fnmatch(base, pattern):
            return rewriter
    return None


def _rewriter_for(file_name: str, dependency_name: str) -> Rewriter:
    rewriter = _lookup(file_name)
    if rewriter is None:
        raise FileUpdateError(
            f"Unsupported manifest: {file_name}",
            file_name=file_name,
            dependency_name=dependency_name,
        )
    return rewriter
