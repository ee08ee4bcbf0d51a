"""
Tests for the setup check and the env-doctor CLI.
"""

import json

import pytest

from env_doctor import __version__
from env_doctor.cli.doctor import create_parser, main
from env_doctor.core.commands import RC_NOT_FOUND
from env_doctor.core.config import AppConfig, ReadinessConfig, RuntimeConfig, reload_config
from env_doctor.readiness import checker as checker_module
from env_doctor.readiness.checker import ReadinessChecker, render_readiness
from env_doctor.runtime.models import RuntimeFacts


@pytest.fixture
def composer(monkeypatch):
    """Replace the composer call with a canned answer."""
    def _install(rc=0, stdout="Composer version 2.7.1 2024-02-09 15:26:28"):
        monkeypatch.setattr(checker_module, "run_cmd", lambda cmd, timeout_s=10: (rc, stdout, ""))
    return _install


class TestReadiness:
    """Test the setup check."""

    def test_ready(self, healthy_facts, composer):
        composer()
        report = ReadinessChecker(config=ReadinessConfig(), runtime=RuntimeConfig()).evaluate(healthy_facts)

        assert report.ready
        assert report.exit_code == 0
        assert report.composer_available
        text = render_readiness(report)
        assert "Environment is ready for Drupal 11.1.x testing!" in text
        assert "Memory Limit: 512M" in text
        assert "Max Execution Time: 120s" in text

    def test_old_php_and_missing_extensions(self, composer):
        composer(rc=RC_NOT_FOUND, stdout="")
        facts = RuntimeFacts(version="8.2.10", extensions=["gd", "curl"])
        report = ReadinessChecker().evaluate(facts)

        assert not report.ready
        assert report.exit_code == 1
        assert not report.version_ok
        assert report.missing_extensions[:2] == ["mbstring", "openssl"]
        text = render_readiness(report)
        assert "  - extension=mbstring" in text
        assert "Composer not found or not working" in text
        assert "Required: 8.3.0+" in text

    def test_no_php(self, composer):
        composer()
        report = ReadinessChecker().evaluate(RuntimeFacts())
        assert not report.version_ok
        assert "PHP Version: not detected" in render_readiness(report)


class TestConfig:
    """Test configuration loading."""

    def test_env_override(self, monkeypatch, reset_config):
        monkeypatch.setenv("ENV_DOCTOR_SCORER_OVERALL_MODE", "MERGED")
        monkeypatch.setenv("ENV_DOCTOR_RUNTIME_PHP_BINARY", "/usr/bin/php8.3")
        config = reload_config()

        assert config.scorer.overall_mode == "merged"
        assert config.runtime.php_binary == "/usr/bin/php8.3"

    def test_invalid_overall_mode(self, monkeypatch, reset_config):
        monkeypatch.setenv("ENV_DOCTOR_SCORER_OVERALL_MODE", "weighted")
        with pytest.raises(ValueError):
            reload_config()

    def test_invalid_log_level(self):
        with pytest.raises(ValueError):
            AppConfig(log_level="chatty")

    def test_defaults(self, reset_config):
        config = reload_config()
        assert len(config.scorer.required_extensions) == 12
        assert len(config.readiness.required_extensions) == 10
        assert sum(config.scorer.database_drivers.values()) == 100


class TestCLI:
    """Test the command line entry point."""

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 0
        assert "usage: env-doctor" in capsys.readouterr().out

    def test_version(self, capsys, reset_config):
        assert main(["version"]) == 0
        assert __version__ in capsys.readouterr().out

    def test_parser_commands(self):
        args = create_parser().parse_args(["validate", "--root", "/srv/site", "--manifest", "m.yml"])
        assert args.command == "validate"
        assert args.root == "/srv/site"
        assert args.manifest == "m.yml"

    def test_validate_exit_codes(self, tmp_path, capsys, reset_config):
        (tmp_path / "src").mkdir()
        manifest = tmp_path / "manifest.yml"
        manifest.write_text(
            "syntax_files: []\nconfig_files: {}\nrequired_dirs: [src]\nimportant_files: []\n"
        )
        assert main(["validate", "--root", str(tmp_path), "--manifest", str(manifest)]) == 0
        assert "ALL TESTS PASSED" in capsys.readouterr().out

        manifest.write_text(
            "syntax_files: []\nconfig_files: {}\nrequired_dirs: [src, css]\nimportant_files: []\n"
        )
        assert main(["validate", "--root", str(tmp_path), "--manifest", str(manifest)]) == 1
        assert "1 ERRORS FOUND" in capsys.readouterr().out

    def test_validate_missing_manifest(self, tmp_path, capsys, reset_config):
        assert main(["validate", "--manifest", str(tmp_path / "absent.yml")]) == 1
        assert "absent.yml" in capsys.readouterr().err

    def test_validate_malformed_manifest(self, tmp_path, capsys, reset_config):
        manifest = tmp_path / "manifest.yml"
        manifest.write_text("required_dirs: [src\n")

        assert main(["validate", "--manifest", str(manifest)]) == 1
        assert "Invalid manifest" in capsys.readouterr().err

    def test_compat_with_unusable_temp_dir(self, tmp_path, monkeypatch, capsys, os_release, reset_config):
        plain = tmp_path / "plain-file"
        plain.write_text("not a directory")
        monkeypatch.setenv("ENV_DOCTOR_RUNTIME_PHP_BINARY", "no-such-php-binary")
        monkeypatch.setenv("ENV_DOCTOR_SCORER_OS_RELEASE_PATH", os_release())
        monkeypatch.setenv("ENV_DOCTOR_SCORER_TEMP_DIR", str(plain))

        assert main(["compat", "--json"]) == 0
        data = json.loads(capsys.readouterr().out)

        scores = {entry["category"]: entry["score"] for entry in data["categories"]}
        assert scores["filesystem"] == 0
        assert scores["os"] == 100

    def test_compat_json_without_php(self, tmp_path, monkeypatch, capsys, os_release, reset_config):
        monkeypatch.setenv("ENV_DOCTOR_RUNTIME_PHP_BINARY", "no-such-php-binary")
        monkeypatch.setenv("ENV_DOCTOR_SCORER_OS_RELEASE_PATH", os_release("Ubuntu", "22.04"))
        monkeypatch.setenv("ENV_DOCTOR_SCORER_TEMP_DIR", str(tmp_path))
        monkeypatch.delenv("SERVER_SOFTWARE", raising=False)

        assert main(["compat", "--json"]) == 0
        data = json.loads(capsys.readouterr().out)

        scores = {entry["category"]: entry["score"] for entry in data["categories"]}
        assert scores["os"] == 80
        assert scores["runtime"] == 0
        assert scores["web_server"] == 50
        assert scores["filesystem"] == 100
        assert data["verdict"] == "POOR"
        assert len(data["missing_extensions"]) == 12

    def test_compat_text(self, tmp_path, monkeypatch, capsys, os_release, reset_config):
        monkeypatch.setenv("ENV_DOCTOR_RUNTIME_PHP_BINARY", "no-such-php-binary")
        monkeypatch.setenv("ENV_DOCTOR_SCORER_OS_RELEASE_PATH", os_release())
        monkeypatch.setenv("ENV_DOCTOR_SCORER_TEMP_DIR", str(tmp_path))

        assert main(["compat"]) == 0
        out = capsys.readouterr().out
        assert "=== Ubuntu 24.04 Compatibility Test ===" in out
        assert "=== COMPATIBILITY SUMMARY ===" in out
        assert "=== RECOMMENDATIONS ===" in out
