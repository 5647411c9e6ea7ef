from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from depbump.exceptions import FileOperationError
from depbump.utils.filesystem import (
    create_backup,
    restore_backup,
    safe_read_file,
    safe_write_file,
)


@pytest.mark.unit
class TestSafeReadFile:
    """Tests for safe_read_file."""

    def test_reads_content(self, tmp_path: Path) -> None:
        manifest = tmp_path / "package.json"
        manifest.write_text('{"name": "demo"}\n', encoding="utf-8")

        assert safe_read_file(manifest) == '{"name": "demo"}\n'

    def test_preserves_crlf(self, tmp_path: Path) -> None:
        manifest = tmp_path / "requirements.txt"
        manifest.write_bytes(b"requests==2.0.0\r\nflask==1.0\r\n")

        assert safe_read_file(manifest) == "requests==2.0.0\r\nflask==1.0\r\n"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileOperationError) as exc_info:
            safe_read_file(tmp_path / "missing.txt")

        assert exc_info.value.operation == "read"

    def test_directory_is_rejected(self, tmp_path: Path) -> None:
        with pytest.raises(FileOperationError, match="Not a file"):
            safe_read_file(tmp_path)

    def test_size_limit(self, tmp_path: Path) -> None:
        manifest = tmp_path / "Cargo.toml"
        manifest.write_text("x" * 100, encoding="utf-8")

        with pytest.raises(FileOperationError, match="too large"):
            safe_read_file(manifest, max_size=10)

    def test_size_limit_disabled(self, tmp_path: Path) -> None:
        manifest = tmp_path / "Cargo.toml"
        manifest.write_text("x" * 100, encoding="utf-8")

        assert len(safe_read_file(manifest, max_size=None)) == 100

    def test_decode_error(self, tmp_path: Path) -> None:
        manifest = tmp_path / "mix.exs"
        manifest.write_bytes(b"\xff\xfe\xfa")

        with pytest.raises(FileOperationError, match="Failed to read"):
            safe_read_file(manifest)


@pytest.mark.unit
class TestSafeWriteFile:
    """Tests for safe_write_file."""

    def test_replaces_content(self, tmp_path: Path) -> None:
        manifest = tmp_path / "package.json"
        manifest.write_text("old", encoding="utf-8")

        backup = safe_write_file(manifest, "new")

        assert backup is None
        assert manifest.read_text(encoding="utf-8") == "new"
        assert [p.name for p in tmp_path.iterdir()] == ["package.json"]

    def test_creates_parent_directories(self, tmp_path: Path) -> None:
        manifest = tmp_path / "infra" / "main.tf"

        safe_write_file(manifest, 'module "x" {}\n')

        assert manifest.read_text(encoding="utf-8") == 'module "x" {}\n'

    def test_backup(self, tmp_path: Path) -> None:
        manifest = tmp_path / "composer.json"
        manifest.write_text("old", encoding="utf-8")

        backup = safe_write_file(manifest, "new", create_backup_file=True)

        assert backup is not None
        assert backup.name.startswith("composer.json.")
        assert backup.name.endswith(".backup")
        assert backup.read_text(encoding="utf-8") == "old"
        assert manifest.read_text(encoding="utf-8") == "new"

    def test_no_backup_for_new_file(self, tmp_path: Path) -> None:
        assert safe_write_file(tmp_path / "pom.xml", "<project/>", create_backup_file=True) is None

    def test_failed_write_restores_backup(self, tmp_path: Path) -> None:
        manifest = tmp_path / "Gopkg.toml"
        manifest.write_text("old", encoding="utf-8")

        with patch("depbump.utils.filesystem.os.fsync", side_effect=OSError("disk full")):
            with pytest.raises(FileOperationError) as exc_info:
                safe_write_file(manifest, "new", create_backup_file=True)

        assert exc_info.value.operation == "write"
        assert manifest.read_text(encoding="utf-8") == "old"
        assert not list(tmp_path.glob("*.tmp"))


@pytest.mark.unit
class TestBackups:
    """Tests for create_backup / restore_backup."""

    def test_round_trip(self, tmp_path: Path) -> None:
        manifest = tmp_path / "mix.exs"
        manifest.write_text("original", encoding="utf-8")

        backup = create_backup(manifest)
        manifest.write_text("changed", encoding="utf-8")
        restore_backup(backup, manifest)

        assert manifest.read_text(encoding="utf-8") == "original"

    def test_backup_of_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileOperationError):
            create_backup(tmp_path / "missing")

    def test_restore_missing_backup(self, tmp_path: Path) -> None:
        with pytest.raises(FileOperationError) as exc_info:
            restore_backup(tmp_path / "missing.backup", tmp_path / "mix.exs")

        assert exc_info.value.operation == "restore"
