from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from depbump.config import (
    DepBumpConfig,
    discover_config_file,
    load_config,
    _parse_section,
    _pyproject_has_section,
    _read_toml,
)
from depbump.exceptions import ConfigError
from depbump.models import PackageManager, UpdateStrategy


@pytest.mark.unit
class TestDepBumpConfig:
    """Tests for DepBumpConfig dataclass."""

    def test_default_initialization(self) -> None:
        """Test DepBumpConfig initializes with correct defaults."""
        config = DepBumpConfig()

        assert config.package_manager is PackageManager.NPM_AND_YARN
        assert config.library is False
        assert config.update_strategy is None
        assert config.source_path is None

    def test_effective_strategy_follows_library_flag(self) -> None:
        assert DepBumpConfig().effective_strategy is UpdateStrategy.BUMP_VERSIONS_IF_NECESSARY
        assert DepBumpConfig(library=True).effective_strategy is UpdateStrategy.WIDEN_RANGES

    def test_explicit_strategy_wins(self) -> None:
        config = DepBumpConfig(library=True, update_strategy=UpdateStrategy.BUMP_VERSIONS)

        assert config.effective_strategy is UpdateStrategy.BUMP_VERSIONS

    def test_to_log_dict(self) -> None:
        """Test to_log_dict returns settings without metadata."""
        config = DepBumpConfig(
            package_manager=PackageManager.CARGO,
            library=True,
            update_strategy=UpdateStrategy.WIDEN_RANGES,
            source_path=Path("/test/depbump.toml"),
        )

        assert config.to_log_dict() == {
            "package_manager": "cargo",
            "library": True,
            "update_strategy": "widen_ranges",
        }


@pytest.mark.unit
class TestDiscoverConfigFile:
    """Tests for discover_config_file function."""

    def test_explicit_path_priority(self, tmp_path: Path) -> None:
        """Test explicit path is used even when a discoverable file exists."""
        config_file = tmp_path / "custom.toml"
        config_file.write_text("[depbump]\n", encoding="utf-8")
        (tmp_path / "depbump.toml").write_text("[depbump]\n", encoding="utf-8")

        with patch("depbump.config.Path.cwd", return_value=tmp_path):
            result = discover_config_file(config_file)

        assert result == config_file.resolve()

    def test_explicit_path_not_found_raises_error(self, tmp_path: Path) -> None:
        missing = tmp_path / "missing.toml"

        with pytest.raises(ConfigError) as exc_info:
            discover_config_file(missing)

        assert exc_info.value.config_path == str(missing)

    def test_finds_dedicated_file(self, tmp_path: Path) -> None:
        (tmp_path / "depbump.toml").write_text("[depbump]\n", encoding="utf-8")
        (tmp_path / "pyproject.toml").write_text("[tool.depbump]\n", encoding="utf-8")

        with patch("depbump.config.Path.cwd", return_value=tmp_path):
            result = discover_config_file()

        assert result == tmp_path / "depbump.toml"

    def test_finds_pyproject_section(self, tmp_path: Path) -> None:
        (tmp_path / "pyproject.toml").write_text(
            "[tool.depbump]\nlibrary = true\n", encoding="utf-8"
        )

        with patch("depbump.config.Path.cwd", return_value=tmp_path):
            result = discover_config_file()

        assert result == tmp_path / "pyproject.toml"

    def test_ignores_pyproject_without_section(self, tmp_path: Path) -> None:
        (tmp_path / "pyproject.toml").write_text(
            "[tool.black]\nline-length = 100\n", encoding="utf-8"
        )

        with patch("depbump.config.Path.cwd", return_value=tmp_path):
            assert discover_config_file() is None

    def test_nothing_found(self, tmp_path: Path) -> None:
        with patch("depbump.config.Path.cwd", return_value=tmp_path):
            assert discover_config_file() is None


@pytest.mark.unit
class TestPyprojectHasSection:
    """Tests for _pyproject_has_section helper."""

    def test_invalid_toml_does_not_count(self, tmp_path: Path) -> None:
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text("[tool.depbump\n", encoding="utf-8")

        assert _pyproject_has_section(pyproject) is False

    def test_section_present(self, tmp_path: Path) -> None:
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text("[tool.depbump]\n", encoding="utf-8")

        assert _pyproject_has_section(pyproject) is True


@pytest.mark.unit
class TestReadToml:
    """Tests for _read_toml helper."""

    def test_invalid_toml_raises_config_error(self, tmp_path: Path) -> None:
        path = tmp_path / "depbump.toml"
        path.write_text("library = \n", encoding="utf-8")

        with pytest.raises(ConfigError) as exc_info:
            _read_toml(path)

        assert "Invalid TOML" in str(exc_info.value)

    def test_reads_nested_tables(self, tmp_path: Path) -> None:
        path = tmp_path / "depbump.toml"
        path.write_text('[depbump]\npackage_manager = "hex"\n', encoding="utf-8")

        assert _read_toml(path) == {"depbump": {"package_manager": "hex"}}


@pytest.mark.unit
class TestParseSection:
    """Tests for _parse_section validation."""

    def test_all_options(self) -> None:
        config = _parse_section(
            {"package_manager": "yarn", "library": True, "update_strategy": "bump_versions"},
            config_path="depbump.toml",
        )

        assert config.package_manager is PackageManager.NPM_AND_YARN
        assert config.library is True
        assert config.update_strategy is UpdateStrategy.BUMP_VERSIONS

    def test_unknown_key(self) -> None:
        with pytest.raises(ConfigError) as exc_info:
            _parse_section({"check_conflicts": True}, config_path="depbump.toml")

        assert "check_conflicts" in str(exc_info.value)

    @pytest.mark.parametrize(
        "section,option",
        [
            ({"library": "yes"}, "library"),
            ({"package_manager": 3}, "package_manager"),
            ({"update_strategy": False}, "update_strategy"),
        ],
    )
    def test_wrong_types(self, section, option: str) -> None:
        with pytest.raises(ConfigError) as exc_info:
            _parse_section(section, config_path="depbump.toml")

        assert exc_info.value.option == option

    def test_unknown_package_manager(self) -> None:
        with pytest.raises(ConfigError) as exc_info:
            _parse_section({"package_manager": "bundler"}, config_path="depbump.toml")

        assert exc_info.value.option == "package_manager"

    def test_unknown_strategy(self) -> None:
        with pytest.raises(ConfigError) as exc_info:
            _parse_section({"update_strategy": "lockfile_only"}, config_path="depbump.toml")

        assert exc_info.value.option == "update_strategy"
        assert "widen_ranges" in str(exc_info.value)


@pytest.mark.unit
class TestLoadConfig:
    """Tests for load_config function."""

    def test_defaults_without_file(self, tmp_path: Path) -> None:
        with patch("depbump.config.Path.cwd", return_value=tmp_path):
            config = load_config()

        assert config == DepBumpConfig()

    def test_loads_dedicated_file(self, tmp_path: Path) -> None:
        path = tmp_path / "depbump.toml"
        path.write_text(
            '[depbump]\npackage_manager = "composer"\nlibrary = true\n', encoding="utf-8"
        )

        config = load_config(path)

        assert config.package_manager is PackageManager.COMPOSER
        assert config.effective_strategy is UpdateStrategy.WIDEN_RANGES
        assert config.source_path == path.resolve()

    def test_loads_pyproject_section(self, tmp_path: Path) -> None:
        (tmp_path / "pyproject.toml").write_text(
            '[project]\nname = "x"\n\n[tool.depbump]\npackage_manager = "pip"\n',
            encoding="utf-8",
        )

        with patch("depbump.config.Path.cwd", return_value=tmp_path):
            config = load_config()

        assert config.package_manager is PackageManager.PIP
        assert config.source_path == tmp_path / "pyproject.toml"

    def test_empty_section_uses_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "depbump.toml"
        path.write_text("# nothing configured\n", encoding="utf-8")

        config = load_config(path)

        assert config.package_manager is PackageManager.NPM_AND_YARN
        assert config.source_path == path.resolve()

    def test_invalid_value_propagates(self, tmp_path: Path) -> None:
        path = tmp_path / "depbump.toml"
        path.write_text('[depbump]\nupdate_strategy = "nope"\n', encoding="utf-8")

        with pytest.raises(ConfigError):
            load_config(path)
