"""
Shared fixtures.
"""

import pytest

from env_doctor.core import config as config_module
from env_doctor.core.config import ScorerConfig
from env_doctor.runtime.models import RuntimeFacts

ALL_EXTENSIONS = [
    "Core", "gd", "curl", "mbstring", "openssl", "pdo", "pdo_mysql",
    "pdo_sqlite", "xml", "zip", "fileinfo", "json", "intl",
]


@pytest.fixture
def os_release(tmp_path):
    """Write an os-release file and return its path."""
    def _write(name="Ubuntu", version="24.04"):
        lines = [
            f'PRETTY_NAME="{name} {version} LTS"',
            f'NAME="{name}"',
            f'VERSION_ID="{version}"',
            f"ID={name.lower()}",
        ]
        path = tmp_path / "os-release"
        path.write_text("\n".join(lines) + "\n")
        return str(path)
    return _write


@pytest.fixture
def scorer_config(tmp_path, os_release):
    scratch = tmp_path / "scratch"
    scratch.mkdir()
    return ScorerConfig(os_release_path=os_release(), temp_dir=str(scratch))


@pytest.fixture
def healthy_facts():
    return RuntimeFacts(
        version="8.3.2",
        sapi="cli",
        extensions=list(ALL_EXTENSIONS),
        ini={"memory_limit": "512M", "max_execution_time": "120"},
    )


@pytest.fixture
def reset_config():
    """Drop the cached global config before and after a test."""
    config_module._config = None
    yield
    config_module._config = None
