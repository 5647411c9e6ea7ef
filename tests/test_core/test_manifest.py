"""Unit tests for depbump.core.manifest module.

Test Coverage:
- Rewriting each supported manifest format in place
- Git ref swaps and git-to-registry switches
- Skipping unchanged pairs and pairs for other files
- Errors for unsupported files, mismatched lists and missing declarations
"""

from __future__ import annotations

import pytest

from depbump.core.manifest import is_supported_manifest, update_manifest_content
from depbump.exceptions import FileUpdateError
from depbump.models import Requirement, Source, SourceType

PACKAGE_JSON = """{
  "name": "demo",
  "dependencies": {
    "lodash": "^1.0.0",
    "lodash-es": "^1.0.0",
    "left-pad": "git+https://github.com/org/left-pad.git#master"
  }
}
"""

CARGO_TOML = """[package]
name = "demo"
version = "0.1.0"

[dependencies]
serde = "1.0"
rand = { version = "0.4", features = ["std"] }
regex = { git = "https://github.com/rust-lang/regex", tag = "v1.0.0" }

[dev-dependencies.tokio]
version = "0.4"
"""

REQUIREMENTS_TXT = """requests==2.28.0
requests-oauthlib==2.28.0
Django>=3.2,<4.0  # web framework
flask[async] == 2.0.1 ; python_version >= '3.8'
"""

MAIN_TF = """module "consul" {
  source  = "hashicorp/consul/aws"
  version = "~> 0.1.0"
}

module "vpc" {
  source = "git::https://github.com/org/vpc.git?ref=v1.0.0"
}
"""

MIX_EXS = """defp deps do
  [
    {:plug, "~> 1.3"},
    {:plug_cowboy, "~> 1.3"},
    {:jason, git: "https://github.com/michalmuskala/jason", tag: "v1.0.0"}
  ]
end
"""

POM_XML = """<project>
  <dependencies>
    <dependency>
      <groupId>org.apache.commons</groupId>
      <artifactId>commons-lang3</artifactId>
      <version>3.9</version>
    </dependency>
    <dependency>
      <groupId>com.example</groupId>
      <artifactId>commons-lang3</artifactId>
      <version>3.9</version>
    </dependency>
  </dependencies>
</project>
"""


def pair(requirement, new_requirement, file, source=None, new_source=None):
    old = Requirement(requirement, file, source=source)
    new = Requirement(new_requirement, file, source=new_source if new_source else source)
    return [old], [new]


@pytest.mark.unit
class TestJson:
    """Tests for package.json / composer.json rewriting."""

    def test_updates_only_the_named_dependency(self) -> None:
        previous, updated = pair("^1.0.0", "^2.0.0", "package.json")

        result = update_manifest_content("package.json", PACKAGE_JSON, "lodash", previous, updated)

        assert '"lodash": "^2.0.0"' in result
        assert '"lodash-es": "^1.0.0"' in result

    def test_git_to_registry_switch(self) -> None:
        git = Source(SourceType.GIT, url="https://github.com/org/left-pad", branch="master")
        old = Requirement(None, "package.json", source=git)
        new = Requirement("^1.3.0", "package.json")

        result = update_manifest_content("package.json", PACKAGE_JSON, "left-pad", [old], [new])

        assert '"left-pad": "^1.3.0"' in result

    def test_ref_swap(self) -> None:
        content = '{"dependencies": {"x": "github:org/x#v1.0.0"}}'
        git = Source(SourceType.GIT, url="https://github.com/org/x", ref="v1.0.0")
        previous, updated = pair(None, None, "package.json", git, git.with_ref("v1.2.0"))

        result = update_manifest_content("package.json", content, "x", previous, updated)

        assert result == '{"dependencies": {"x": "github:org/x#v1.2.0"}}'

    def test_composer(self) -> None:
        content = '{\n  "require": {\n    "monolog/monolog": "^1.0 || dev-main"\n  }\n}\n'
        previous, updated = pair("^1.0 || dev-main", "^2.1 || dev-main", "composer.json")

        result = update_manifest_content(
            "composer.json", content, "monolog/monolog", previous, updated
        )

        assert '"monolog/monolog": "^2.1 || dev-main"' in result

    def test_same_requirement_in_several_groups(self) -> None:
        content = (
            '{\n  "dependencies": {"lodash": "^1.0.0"},\n'
            '  "devDependencies": {"lodash": "^1.0.0"}\n}\n'
        )
        previous = [
            Requirement("^1.0.0", "package.json", groups=("dependencies",)),
            Requirement("^1.0.0", "package.json", groups=("devDependencies",)),
        ]
        updated = [req.with_requirement("^2.0.0") for req in previous]

        result = update_manifest_content("package.json", content, "lodash", previous, updated)

        assert result.count('"lodash": "^2.0.0"') == 2
        assert "^1.0.0" not in result


@pytest.mark.unit
class TestToml:
    """Tests for Cargo.toml / Gopkg.toml / Pipfile rewriting."""

    def test_plain_inline(self) -> None:
        previous, updated = pair("1.0", "2.3", "Cargo.toml")

        result = update_manifest_content("Cargo.toml", CARGO_TOML, "serde", previous, updated)

        assert 'serde = "2.3"' in result
        assert 'version = "0.1.0"' in result

    def test_inline_table(self) -> None:
        previous, updated = pair("0.4", "0.5", "Cargo.toml")

        result = update_manifest_content("Cargo.toml", CARGO_TOML, "rand", previous, updated)

        assert 'rand = { version = "0.5", features = ["std"] }' in result
        assert '[dev-dependencies.tokio]\nversion = "0.4"' in result

    def test_dotted_table(self) -> None:
        previous, updated = pair("0.4", "1.2", "Cargo.toml")

        result = update_manifest_content("Cargo.toml", CARGO_TOML, "tokio", previous, updated)

        assert '[dev-dependencies.tokio]\nversion = "1.2"' in result
        assert 'rand = { version = "0.4"' in result

    def test_same_requirement_in_several_tables(self) -> None:
        content = '[dependencies]\nserde = "1.0"\n\n[dev-dependencies]\nserde = "1.0"\n'
        previous = [
            Requirement("1.0", "Cargo.toml", groups=("dependencies",)),
            Requirement("1.0", "Cargo.toml", groups=("dev-dependencies",)),
        ]
        updated = [req.with_requirement("2.3") for req in previous]

        result = update_manifest_content("Cargo.toml", content, "serde", previous, updated)

        assert result == '[dependencies]\nserde = "2.3"\n\n[dev-dependencies]\nserde = "2.3"\n'

    def test_git_tag_swap(self) -> None:
        git = Source(SourceType.GIT, url="https://github.com/rust-lang/regex", ref="v1.0.0")
        previous, updated = pair(None, None, "Cargo.toml", git, git.with_ref("v1.1.0"))

        result = update_manifest_content("Cargo.toml", CARGO_TOML, "regex", previous, updated)

        assert 'tag = "v1.1.0"' in result

    def test_git_to_registry_switch(self) -> None:
        git = Source(SourceType.GIT, url="https://github.com/rust-lang/regex", ref="v1.0.0")
        old = Requirement(None, "Cargo.toml", source=git)
        new = Requirement("^1.5.0", "Cargo.toml")

        result = update_manifest_content("Cargo.toml", CARGO_TOML, "regex", [old], [new])

        assert 'regex = "^1.5.0"\n' in result

    def test_gopkg_constraint_block(self) -> None:
        content = (
            '[[constraint]]\n  name = "github.com/pkg/errors"\n  version = "0.8.0"\n\n'
            '[[constraint]]\n  name = "github.com/other/pkg"\n  version = "0.8.0"\n'
        )
        previous, updated = pair("0.8.0", "0.9.1", "Gopkg.toml")

        result = update_manifest_content(
            "Gopkg.toml", content, "github.com/pkg/errors", previous, updated
        )

        assert result.count('version = "0.9.1"') == 1
        assert result.count('version = "0.8.0"') == 1


@pytest.mark.unit
class TestRequirementsTxt:
    """Tests for requirements.txt rewriting."""

    def test_pin(self) -> None:
        previous, updated = pair("==2.28.0", "==2.31.0", "requirements.txt")

        result = update_manifest_content(
            "requirements.txt", REQUIREMENTS_TXT, "requests", previous, updated
        )

        assert result.startswith("requests==2.31.0\n")
        assert "requests-oauthlib==2.28.0" in result

    def test_keeps_trailing_comment(self) -> None:
        previous, updated = pair(">=3.2,<4.0", ">=3.2,<5.0", "requirements.txt")

        result = update_manifest_content(
            "requirements.txt", REQUIREMENTS_TXT, "django", previous, updated
        )

        assert "Django>=3.2,<5.0  # web framework" in result

    def test_extras_markers_and_spacing(self) -> None:
        previous, updated = pair("==2.0.1", "==2.1.0", "requirements.txt")

        result = update_manifest_content(
            "requirements.txt", REQUIREMENTS_TXT, "flask", previous, updated
        )

        assert "flask[async] ==2.1.0 ; python_version >= '3.8'" in result


@pytest.mark.unit
class TestOtherFormats:
    """Tests for Terraform, mix.exs and pom.xml rewriting."""

    def test_terraform_registry_module(self) -> None:
        previous, updated = pair("~> 0.1.0", "~> 0.3.8", "main.tf")

        result = update_manifest_content(
            "main.tf", MAIN_TF, "hashicorp/consul/aws", previous, updated
        )

        assert 'version = "~> 0.3.8"' in result

    def test_terraform_git_ref(self) -> None:
        git = Source(SourceType.GIT, url="https://github.com/org/vpc.git", ref="v1.0.0")
        previous, updated = pair(None, None, "main.tf", git, git.with_ref("v2.0.0"))

        result = update_manifest_content("main.tf", MAIN_TF, "github.com/org/vpc", previous, updated)

        assert "?ref=v2.0.0" in result
        assert 'version = "~> 0.1.0"' in result

    def test_mix_requirement(self) -> None:
        previous, updated = pair("~> 1.3", "~> 1.5", "mix.exs")

        result = update_manifest_content("mix.exs", MIX_EXS, "plug", previous, updated)

        assert '{:plug, "~> 1.5"}' in result
        assert '{:plug_cowboy, "~> 1.3"}' in result

    def test_mix_git_to_registry(self) -> None:
        git = Source(SourceType.GIT, url="https://github.com/michalmuskala/jason", ref="v1.0.0")
        old = Requirement(None, "mix.exs", source=git)
        new = Requirement("~> 1.2.0", "mix.exs")

        result = update_manifest_content("mix.exs", MIX_EXS, "jason", [old], [new])

        assert '{:jason, "~> 1.2.0"}' in result

    def test_mix_tag_swap(self) -> None:
        git = Source(SourceType.GIT, url="https://github.com/michalmuskala/jason", ref="v1.0.0")
        previous, updated = pair(None, None, "mix.exs", git, git.with_ref("v1.1.0"))

        result = update_manifest_content("mix.exs", MIX_EXS, "jason", previous, updated)

        assert 'tag: "v1.1.0"' in result

    def test_pom_matches_group_and_artifact(self) -> None:
        previous, updated = pair("3.9", "3.12.0", "pom.xml")

        result = update_manifest_content(
            "pom.xml", POM_XML, "org.apache.commons:commons-lang3", previous, updated
        )

        assert result.count("<version>3.12.0</version>") == 1
        assert result.count("<version>3.9</version>") == 1


@pytest.mark.unit
class TestUpdateManifestContent:
    """Tests for the shared pairing logic."""

    def test_unchanged_pairs_are_skipped(self) -> None:
        req = Requirement("^1.0.0", "package.json")

        assert update_manifest_content("package.json", PACKAGE_JSON, "lodash", [req], [req]) == PACKAGE_JSON

    def test_pairs_for_other_files_are_skipped(self) -> None:
        previous, updated = pair("^1.0.0", "^2.0.0", "packages/a/package.json")

        result = update_manifest_content(
            "packages/b/package.json", PACKAGE_JSON, "lodash", previous, updated
        )

        assert result == PACKAGE_JSON

    def test_path_suffix_matches(self) -> None:
        previous, updated = pair("^1.0.0", "^2.0.0", "package.json")

        result = update_manifest_content(
            "/repo/package.json", PACKAGE_JSON, "lodash", previous, updated
        )

        assert '"lodash": "^2.0.0"' in result

    def test_length_mismatch(self) -> None:
        with pytest.raises(FileUpdateError):
            update_manifest_content(
                "package.json", PACKAGE_JSON, "lodash", [Requirement("^1.0.0", "package.json")], []
            )

    def test_unsupported_manifest(self) -> None:
        with pytest.raises(FileUpdateError) as exc_info:
            update_manifest_content("Gemfile", "", "rails", [], [])

        assert exc_info.value.file_name == "Gemfile"

    def test_missing_declaration(self) -> None:
        previous, updated = pair("^1.0.0", "^2.0.0", "package.json")

        with pytest.raises(FileUpdateError) as exc_info:
            update_manifest_content("package.json", PACKAGE_JSON, "react", previous, updated)

        assert exc_info.value.dependency_name == "react"

    @pytest.mark.parametrize(
        "file_name,expected",
        [
            ("package.json", True),
            ("sub/dir/composer.json", True),
            ("requirements-dev.txt", True),
            ("Pipfile", True),
            ("infra/main.tf", True),
            ("pom.xml", True),
            ("Gemfile", False),
            ("setup.py", False),
        ],
    )
    def test_is_supported_manifest(self, file_name: str, expected: bool) -> None:
        assert is_supported_manifest(file_name) is expected
