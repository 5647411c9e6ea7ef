"""
Filesystem helpers for reading and rewriting manifests.

Writes are atomic (temporary file + replace) and can leave a timestamped
backup next to the manifest. Every failure surfaces as
:class:`~depbump.exceptions.FileOperationError`.
"""

from __future__ import annotations

import os
import shutil
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from depbump.constants import MAX_FILE_SIZE
from depbump.exceptions import FileOperationError
from depbump.utils.logger import get_logger

logger = get_logger("filesystem")

PathLike = Union[str, Path]


def _existing_file(path: Path) -> Path:
    if not path.exists():
        raise FileOperationError(
            f"File not found: {path}",
            file_path=str(path),
            operation="read",
        )
    if not path.is_file():
        raise FileOperationError(
            f"Not a file: {path}",
            file_path=str(path),
            operation="read",
        )
    return path.resolve()


def _atomic_write(target: Path, content: str) -> None:
    target.parent.mkdir(parents=True, exist_ok=True)
    temp_path: Optional[Path] = None

    try:
        with tempfile.NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            newline="",
            dir=str(target.parent),
            delete=False,
            prefix=f".{target.name}.",
            suffix=".tmp",
        ) as tmp:
            temp_path = Path(tmp.name)
            tmp.write(content)
            tmp.flush()
            os.fsync(tmp.fileno())

        temp_path.replace(target)

    except OSError as exc:
        if temp_path is not None and temp_path.exists():
            try:
                temp_path.unlink()
            except OSError as cleanup_exc:
                logger.warning("Failed to remove temporary file %s: %s", temp_path, cleanup_exc)

        raise FileOperationError(
            f"Atomic write failed: {exc}",
            file_path=str(target),
            operation="write",
            original_error=exc,
        ) from exc


def create_backup(file_path: PathLike) -> Path:
    """Copy ``file_path`` to ``<name>.<timestamp>.backup`` beside it."""
    path = _existing_file(Path(file_path))
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
    backup_path = path.with_name(f"{path.name}.{timestamp}.backup")

    try:
        shutil.copy2(path, backup_path)
    except OSError as exc:
        raise FileOperationError(
            f"Failed to create backup: {exc}",
            file_path=str(path),
            operation="backup",
            original_error=exc,
        ) from exc

    logger.debug("Created backup %s", backup_path)
    return backup_path


def restore_backup(backup_path: PathLike, target_path: PathLike) -> None:
    """Copy a backup over ``target_path``."""
    backup = Path(backup_path)
    if not backup.is_file():
        raise FileOperationError(
            f"Backup file not found: {backup}",
            file_path=str(backup),
            operation="restore",
        )

    try:
        shutil.copy2(backup, target_path)
    except OSError as exc:
        raise FileOperationError(
            f"Failed to restore backup: {exc}",
            file_path=str(target_path),
            operation="restore",
            original_error=exc,
        ) from exc


def safe_read_file(
    file_path: PathLike,
    *,
    max_size: Optional[int] = MAX_FILE_SIZE,
    encoding: str = "utf-8",
) -> str:
    """Read a text file, refusing files larger than ``max_size`` bytes.

    Line endings are returned untouched so a rewritten manifest keeps them.
    """
    path = _existing_file(Path(file_path))
    size = path.stat().st_size

    if max_size is not None and size > max_size:
        raise FileOperationError(
            f"File too large: {size} bytes (max {max_size})",
            file_path=str(path),
            operation="read",
        )

    try:
        with open(path, "r", encoding=encoding, newline="") as fh:
            return fh.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise FileOperationError(
            f"Failed to read file: {exc}",
            file_path=str(path),
            operation="read",
            original_error=exc,
        ) from exc


def safe_write_file(
    file_path: PathLike,
    content: str,
    *,
    create_backup_file: bool = False,
) -> Optional[Path]:
    """Atomically replace a file's content.

    Args:
        file_path: Destination path.
        content: New text content.
        create_backup_file: Keep a timestamped copy of the old file.

    Returns:
        Path of the backup, if one was made.
    """
    path = Path(file_path)
    backup: Optional[Path] = None

    if create_backup_file and path.is_file():
        backup = create_backup(path)

    try:
        _atomic_write(path, content)
    except FileOperationError:
        if backup is not None:
            restore_backup(backup, path)
        raise

    return backup
