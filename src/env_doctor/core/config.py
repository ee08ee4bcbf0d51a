"""
Configuration management for env-doctor.

Uses Pydantic Settings for environment variable validation and type safety.
Every section can be overridden with ENV_DOCTOR_* environment variables or a
local .env file; list and mapping fields take JSON values.
"""

from typing import Dict, List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


def _default_required_extensions() -> Dict[str, str]:
    return {
        "gd": "Image processing",
        "curl": "HTTP requests",
        "mbstring": "Multibyte strings",
        "openssl": "SSL/TLS support",
        "pdo": "Database abstraction",
        "pdo_mysql": "MySQL support",
        "pdo_sqlite": "SQLite support",
        "xml": "XML processing",
        "zip": "Archive handling",
        "fileinfo": "File type detection",
        "json": "JSON processing",
        "intl": "Internationalization",
    }


def _default_setup_extensions() -> Dict[str, str]:
    return {
        "gd": "GD (Image processing)",
        "curl": "cURL (HTTP requests)",
        "mbstring": "Multibyte String",
        "openssl": "OpenSSL",
        "pdo": "PDO (Database)",
        "pdo_mysql": "PDO MySQL",
        "pdo_sqlite": "PDO SQLite",
        "xml": "XML",
        "zip": "ZIP",
        "fileinfo": "File Info",
    }


class ScorerConfig(BaseSettings):
    """Compatibility scoring configuration."""

    os_release_path: str = Field(
        default="/etc/os-release",
        description="Path to the os-release descriptor file"
    )
    os_family: str = Field(
        default="Ubuntu",
        description="Distribution family the deployment targets"
    )
    os_version_excellent: str = Field(
        default="24.04",
        description="Release at or above which the OS scores 100"
    )
    os_version_good: str = Field(
        default="22.04",
        description="Release at or above which the OS scores 80"
    )
    php_version_recommended: str = Field(
        default="8.3.0",
        description="PHP version that scores 100"
    )
    php_version_supported: str = Field(
        default="8.2.0",
        description="PHP version that scores 80"
    )
    php_version_minimum: str = Field(
        default="8.1.0",
        description="PHP version that scores 60"
    )
    required_extensions: Dict[str, str] = Field(
        default_factory=_default_required_extensions,
        description="Required PHP extensions (name -> description), in report order"
    )
    database_drivers: Dict[str, float] = Field(
        default_factory=lambda: {"pdo_mysql": 50, "pdo_sqlite": 30, "pdo_pgsql": 20},
        description="Database driver extensions and the points each one is worth"
    )
    memory_minimum_bytes: int = Field(
        default=512 * 1024 * 1024,
        ge=0,
        description="Minimum PHP memory_limit in bytes"
    )
    execution_time_minimum: int = Field(
        default=120,
        ge=0,
        description="Minimum PHP max_execution_time in seconds (0 means unlimited)"
    )
    hint_thresholds: Dict[str, float] = Field(
        default_factory=lambda: {
            "os": 80,
            "runtime": 80,
            "filesystem": 100,
            "performance": 80,
        },
        description="Category score below which a remediation hint is emitted"
    )
    overall_mode: str = Field(
        default="split",
        description="Overall aggregation: 'split' (7 terms) or 'merged' (6 categories)"
    )
    extension_package_template: str = Field(
        default="php8.3-{name}",
        description="apt package name pattern used in extension install hints"
    )
    temp_dir: Optional[str] = Field(
        default=None,
        description="Directory for the file system probe (system temp dir if unset)"
    )

    @field_validator("overall_mode")
    @classmethod
    def validate_overall_mode(cls, v: str) -> str:
        """Validate the overall aggregation mode."""
        v = v.lower()
        if v not in ("split", "merged"):
            raise ValueError("Overall mode must be 'split' or 'merged'")
        return v

    class Config:
        env_prefix = "ENV_DOCTOR_SCORER_"


class RuntimeConfig(BaseSettings):
    """PHP runtime inspection configuration."""

    php_binary: str = Field(
        default="php",
        description="PHP CLI binary used to query the runtime"
    )
    composer_binary: str = Field(
        default="composer",
        description="Composer binary used by the setup check"
    )
    timeout: int = Field(
        default=10,
        ge=1,
        description="Timeout for each runtime query in seconds"
    )

    class Config:
        env_prefix = "ENV_DOCTOR_RUNTIME_"


class ValidatorConfig(BaseSettings):
    """Project structure validator configuration."""

    syntax_files: List[str] = Field(
        default_factory=lambda: [
            "umd/unilevelmlm.module",
            "umd/src/UmpClass.php",
            "umd/unilevelmlm.install",
        ],
        description="PHP sources passed to the syntax linter"
    )
    config_files: Dict[str, str] = Field(
        default_factory=lambda: {
            "umd/unilevelmlm.info.yml": "YAML",
            "umd/unilevelmlm.libraries.yml": "YAML",
            "umd/unilevelmlm.routing.yml": "YAML",
            "umd/drupal-cms/composer.json": "JSON",
        },
        description="Config files to parse (path -> JSON or YAML)"
    )
    required_dirs: List[str] = Field(
        default_factory=lambda: [
            "umd",
            "umd/css",
            "umd/js",
            "umd/templates",
            "umd/src",
            "umd/config",
            "umd/drupal-cms",
        ],
        description="Directories that must exist"
    )
    important_files: List[str] = Field(
        default_factory=lambda: [
            "umd/unilevelmlm.module",
            "umd/unilevelmlm.info.yml",
            "umd/drupal-cms/composer.json",
        ],
        description="Files that must exist and be readable"
    )
    lint_command: List[str] = Field(
        default_factory=lambda: ["php", "-l"],
        description="Syntax linter command; the file path is appended"
    )
    lint_timeout: int = Field(
        default=30,
        ge=1,
        description="Timeout for each linter run in seconds"
    )

    class Config:
        env_prefix = "ENV_DOCTOR_VALIDATOR_"


class ReadinessConfig(BaseSettings):
    """Setup check configuration."""

    required_extensions: Dict[str, str] = Field(
        default_factory=_default_setup_extensions,
        description="Extensions the CMS test suite needs (name -> description)"
    )
    php_version_required: str = Field(
        default="8.3.0",
        description="Minimum PHP version for the CMS release"
    )
    cms_release: str = Field(
        default="Drupal 11.1.x",
        description="CMS release named in the report"
    )

    class Config:
        env_prefix = "ENV_DOCTOR_SETUP_"


class AppConfig(BaseSettings):
    """Main application configuration."""

    log_level: str = Field(
        default="WARNING",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )

    # Nested configurations
    scorer: ScorerConfig = Field(default_factory=ScorerConfig)
    runtime: RuntimeConfig = Field(default_factory=RuntimeConfig)
    validator: ValidatorConfig = Field(default_factory=ValidatorConfig)
    readiness: ReadinessConfig = Field(default_factory=ReadinessConfig)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v = v.upper()
        if v not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v

    class Config:
        env_prefix = "ENV_DOCTOR_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


# Global config instance
_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """
    Get the global configuration instance.

    Lazily loads configuration on first access.

    Returns:
        AppConfig: The global configuration instance
    """
    global _config
    if _config is None:
        _config = AppConfig(
            scorer=ScorerConfig(),
            runtime=RuntimeConfig(),
            validator=ValidatorConfig(),
            readiness=ReadinessConfig(),
        )
    return _config


def reload_config() -> AppConfig:
    """
    Reload configuration from environment variables.

    Useful for testing or when environment changes.

    Returns:
        AppConfig: The reloaded configuration instance
    """
    global _config
    _config = None
    return get_config()
