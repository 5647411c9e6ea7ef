"""
Custom exception hierarchy for depbump.

This module defines structured exception types used across depbump.
All exceptions inherit from :class:`DepBumpError` and support optional
structured metadata via the ``details`` attribute to improve diagnostics
and logging.

Only fatal conditions are modelled here. Requirements that simply cannot
be updated (branch names, already-satisfied ranges, unparseable alias
targets) are returned unchanged and never raise.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping, MutableMapping, Optional


class DepBumpError(Exception):
    """Base exception for all depbump errors.

    Args:
        message: Human-readable error message.
        details: Optional structured metadata describing the error.
    """

    __slots__ = ("message", "details")

    def __init__(
        self,
        message: str,
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.message: str = message
        # Internally normalize to a mutable dict
        self.details: MutableMapping[str, Any] = dict(details) if details else {}
        super().__init__(message)

    def __str__(self) -> str:
        if not self.details:
            return self.message
        formatted = ", ".join(f"{k}={v}" for k, v in self.details.items())
        return f"{self.message} ({formatted})"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, details={dict(self.details)!r})"
        )


def _add_if(details: MutableMapping[str, Any], key: str, value: Any) -> None:
    """Add a key to ``details`` only if ``value`` is not ``None``."""
    if value is not None:
        details[key] = value


class InvalidVersion(DepBumpError, ValueError):
    """Raised when a version string cannot be parsed.

    Args:
        version: The offending version string.
        package_manager: Ecosystem whose rules rejected it.
    """

    __slots__ = ("version", "package_manager")

    def __init__(
        self,
        version: Any,
        *,
        package_manager: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "package_manager", package_manager)

        super().__init__(f"Malformed version string: {version!r}", details)

        self.version = version
        self.package_manager = package_manager


class UnknownOperator(DepBumpError):
    """Raised when an unsatisfied constraint uses an operator with no bump rule.

    Args:
        operator: The operator that could not be handled.
        requirement: Full requirement string being updated.
    """

    __slots__ = ("operator", "requirement")

    def __init__(
        self,
        operator: str,
        *,
        requirement: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "requirement", requirement)

        super().__init__(f"Unexpected operation for unsatisfied req: {operator}", details)

        self.operator = operator
        self.requirement = requirement


class MultipleIncompatibleSources(DepBumpError):
    """Raised when a dependency's requirements disagree about their source.

    Args:
        sources: The conflicting source descriptors.
    """

    __slots__ = ("sources",)

    def __init__(self, sources: Iterable[Any]) -> None:
        self.sources = list(sources)
        super().__init__(
            "Requirements declare incompatible sources",
            {"sources": ", ".join(str(s) for s in self.sources)},
        )


class UnsupportedPackageManager(DepBumpError):
    """Raised when no requirement updater is registered for a package manager."""

    __slots__ = ("package_manager",)

    def __init__(self, package_manager: Any) -> None:
        super().__init__(f"Unsupported package manager: {package_manager}")
        self.package_manager = package_manager


class ConfigError(DepBumpError):
    """Raised when a configuration file is missing, unreadable or invalid.

    Args:
        message: Error description.
        config_path: Path to the configuration file.
        option: Name of the offending option, if any.
    """

    __slots__ = ("config_path", "option")

    def __init__(
        self,
        message: str,
        *,
        config_path: Optional[str] = None,
        option: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "path", config_path)
        _add_if(details, "option", option)

        super().__init__(message, details)

        self.config_path = config_path
        self.option = option


class FileOperationError(DepBumpError):
    """Raised when file system operations fail.

    Args:
        message: Error description.
        file_path: Path to the file involved.
        operation: Operation being performed (read/write/delete).
        original_error: Original exception that triggered this error.
    """

    __slots__ = ("file_path", "operation", "original_error")

    def __init__(
        self,
        message: str,
        *,
        file_path: Optional[str] = None,
        operation: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "path", file_path)
        _add_if(details, "operation", operation)
        _add_if(
            details,
            "original_error",
            str(original_error) if original_error else None,
        )

        super().__init__(message, details)

        self.file_path = file_path
        self.operation = operation
        self.original_error = original_error


class FileUpdateError(DepBumpError):
    """Raised when updated requirements cannot be written back into a manifest.

    Args:
        message: Error description.
        file_name: Manifest being rewritten.
        dependency_name: Dependency whose declaration was not found.
    """

    __slots__ = ("file_name", "dependency_name")

    def __init__(
        self,
        message: str,
        *,
        file_name: Optional[str] = None,
        dependency_name: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "file", file_name)
        _add_if(details, "dependency", dependency_name)

        super().__init__(message, details)

        self.file_name = file_name
        self.dependency_name = dependency_name


class RequirementParseError(DepBumpError):
    """Raised when a requirement string does not fit its ecosystem's grammar.

    Updaters treat this as "not updatable" and leave the requirement
    unchanged; it only escapes from the grammar layer itself.

    Args:
        message: Error description.
        requirement: The requirement string being parsed.
        position: Character offset where parsing failed.
    """

    __slots__ = ("requirement", "position")

    def __init__(
        self,
        message: str,
        *,
        requirement: Optional[str] = None,
        position: Optional[int] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "requirement", requirement)
        _add_if(details, "position", position)

        super().__init__(message, details)

        self.requirement = requirement
        self.position = position
