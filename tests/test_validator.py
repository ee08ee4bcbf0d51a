"""
Tests for the project structure validator.
"""

import pytest

from env_doctor.core.config import ValidatorConfig
from env_doctor.validator.checks import check_config_files, parse_config_text
from env_doctor.validator.models import CheckOutcome, IssueKind, ValidationResult
from env_doctor.validator.runner import ProjectValidator, load_manifest, render_validation


@pytest.fixture
def project(tmp_path):
    """A small module tree that passes every check."""
    (tmp_path / "mod" / "src").mkdir(parents=True)
    (tmp_path / "mod" / "templates").mkdir()
    (tmp_path / "mod" / "mod.module").write_text("<?php\n")
    (tmp_path / "mod" / "src" / "Thing.php").write_text("<?php\nclass Thing {}\n")
    (tmp_path / "mod" / "mod.info.yml").write_text("name: Mod\ntype: module\ncore_version_requirement: ^11\n")
    (tmp_path / "mod" / "composer.json").write_text('{"name": "acme/mod", "require": {}}')
    return tmp_path


def make_config(**overrides):
    values = dict(
        syntax_files=["mod/mod.module", "mod/src/Thing.php"],
        config_files={"mod/mod.info.yml": "YAML", "mod/composer.json": "JSON"},
        required_dirs=["mod", "mod/src", "mod/templates"],
        important_files=["mod/mod.module", "mod/mod.info.yml"],
        lint_command=["true"],
    )
    values.update(overrides)
    return ValidatorConfig(**values)


class TestValidationResult:
    """Test the immutable error tally."""

    def test_add_returns_new_result(self):
        empty = ValidationResult()
        failed = CheckOutcome(kind=IssueKind.SYNTAX, target="a.php", passed=False, label="FAIL")
        result = empty.add(failed)

        assert empty.total_errors == 0
        assert result.count(IssueKind.SYNTAX) == 1
        assert result.total_errors == 1
        assert result.exit_code == 1
        assert result.failures == [failed]

    def test_passing_outcomes_do_not_count(self):
        ok = CheckOutcome(kind=IssueKind.STRUCTURE, target="src", passed=True, label="EXISTS")
        result = ValidationResult().add(ok)
        assert result.total_errors == 0
        assert result.exit_code == 0
        assert len(result.outcomes) == 1


class TestConfigParsing:
    """Test config file parse checks."""

    def test_valid_json(self):
        parse_config_text('{"a": 1}', "JSON")

    def test_invalid_json(self):
        with pytest.raises(ValueError, match="line 1"):
            parse_config_text('{"a": }', "json")

    def test_yaml_needs_mapping(self):
        parse_config_text("name: x\n", "YAML")
        with pytest.raises(ValueError, match="structure"):
            parse_config_text("just a string\n", "YAML")

    def test_broken_yaml(self):
        with pytest.raises(ValueError, match="Invalid YAML"):
            parse_config_text("name: [unclosed\n", "YAML")

    def test_unsupported_type(self):
        with pytest.raises(ValueError):
            parse_config_text("", "TOML")

    def test_missing_file(self, tmp_path):
        outcomes = check_config_files(tmp_path, {"nope.json": "JSON"})
        assert outcomes[0].label == "FILE NOT FOUND"
        assert not outcomes[0].passed


class TestProjectValidator:
    """Test full validation runs."""

    def test_clean_project(self, project):
        result = ProjectValidator(root=project, config=make_config()).run()

        assert result.total_errors == 0
        assert result.exit_code == 0
        assert len(result.outcomes) == 2 + 2 + 3 + 2

    def test_missing_directory(self, project):
        config = make_config(required_dirs=["mod", "mod/css"])
        result = ProjectValidator(root=project, config=config).run()

        assert result.count(IssueKind.STRUCTURE) == 1
        assert result.exit_code == 1

    def test_broken_json(self, project):
        (project / "mod" / "composer.json").write_text("{broken")
        result = ProjectValidator(root=project, config=make_config()).run()

        assert result.count(IssueKind.CONFIG) == 1
        assert result.total_errors == 1

    def test_undecodable_config_is_a_config_error(self, project):
        (project / "mod" / "composer.json").write_bytes(b'{"name": "caf\xe9"}')
        config = make_config(required_dirs=["mod", "mod/css"])
        result = ProjectValidator(root=project, config=config).run()

        assert result.count(IssueKind.CONFIG) == 1
        assert result.count(IssueKind.STRUCTURE) == 1
        assert result.exit_code == 1
        assert "Malformed UTF-8" in result.failures[0].message

    def test_linter_failure(self, project):
        result = ProjectValidator(root=project, config=make_config(lint_command=["false"])).run()

        assert result.count(IssueKind.SYNTAX) == 2
        assert result.failures[0].evidence["rc"] != 0

    def test_missing_source_and_unreadable_file(self, project):
        config = make_config(
            syntax_files=["mod/gone.php"],
            important_files=["mod/gone.php"],
        )
        result = ProjectValidator(root=project, config=config).run()

        assert result.count(IssueKind.SYNTAX) == 1
        assert result.count(IssueKind.PERMISSION) == 1
        assert result.total_errors == 2

    def test_missing_linter_is_a_syntax_error(self, project):
        config = make_config(lint_command=["no-such-linter-binary"])
        result = ProjectValidator(root=project, config=config).run()

        assert result.count(IssueKind.SYNTAX) == 2
        assert "command not found" in result.failures[0].message

    def test_render(self, project):
        config = make_config(required_dirs=["mod", "mod/css"])
        text = render_validation(ProjectValidator(root=project, config=config).run())

        assert "Checking directory: mod/css ... ✗ MISSING" in text
        assert "Structure Errors: 1" in text
        assert "1 ERRORS FOUND" in text


class TestManifest:
    """Test YAML manifest loading."""

    def test_load_manifest(self, tmp_path):
        manifest = tmp_path / "manifest.yml"
        manifest.write_text(
            "syntax_files: [a.php]\n"
            "config_files: {b.json: JSON}\n"
            "required_dirs: [src]\n"
            "important_files: []\n"
            "lint_command: [php, -l]\n"
        )
        config = load_manifest(manifest)

        assert config.syntax_files == ["a.php"]
        assert config.config_files == {"b.json": "JSON"}
        assert config.important_files == []

    def test_manifest_must_be_mapping(self, tmp_path):
        manifest = tmp_path / "manifest.yml"
        manifest.write_text("- a\n- b\n")
        with pytest.raises(ValueError):
            load_manifest(manifest)

    def test_malformed_manifest(self, tmp_path):
        manifest = tmp_path / "manifest.yml"
        manifest.write_text("syntax_files: [a.php\nrequired_dirs: {\n")
        with pytest.raises(ValueError, match="Invalid manifest"):
            load_manifest(manifest)
