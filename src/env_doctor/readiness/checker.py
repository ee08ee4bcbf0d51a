"""
Setup readiness check.

Answers "can the CMS test suite run here": PHP version, the base extension
set, Composer availability and the PHP limits that usually need tuning.
"""

import logging
from typing import Dict, List, Optional, TextIO

from pydantic import BaseModel, Field

from ..compat.probes import evaluate_extensions
from ..compat.versions import compare_versions
from ..core.commands import run_cmd
from ..core.config import ReadinessConfig, RuntimeConfig
from ..core.console import Colors, colorize
from ..runtime.inspector import PhpInspector
from ..runtime.models import RuntimeFacts

logger = logging.getLogger(__name__)

INI_LABELS = [
    ("memory_limit", "Memory Limit", ""),
    ("max_execution_time", "Max Execution Time", "s"),
    ("upload_max_filesize", "Upload Max Filesize", ""),
    ("post_max_size", "Post Max Size", ""),
]


class ReadinessReport(BaseModel):
    """Outcome of the setup check."""

    facts: RuntimeFacts
    required_version: str
    cms_release: str
    version_ok: bool
    extensions: Dict[str, str] = Field(default_factory=dict)
    missing_extensions: List[str] = Field(default_factory=list)
    composer_available: bool = False
    composer_output: List[str] = Field(default_factory=list)

    @property
    def ready(self) -> bool:
        return self.version_ok and not self.missing_extensions

    @property
    def exit_code(self) -> int:
        return 0 if self.ready else 1


class ReadinessChecker:
    """Runs the setup check against a PHP runtime."""

    def __init__(
        self,
        config: Optional[ReadinessConfig] = None,
        runtime: Optional[RuntimeConfig] = None,
        inspector: Optional[PhpInspector] = None,
    ):
        self.config = config or ReadinessConfig()
        self.runtime = runtime or RuntimeConfig()
        self.inspector = inspector or PhpInspector(
            php_binary=self.runtime.php_binary,
            timeout=self.runtime.timeout,
        )

    def check_composer(self) -> tuple[bool, List[str]]:
        rc, stdout, stderr = run_cmd(
            [self.runtime.composer_binary, "--version"],
            timeout_s=self.runtime.timeout,
        )
        output = [line for line in (stdout or stderr).splitlines() if line.strip()]
        if rc != 0:
            logger.info(f"Composer not usable (rc={rc})")
        return rc == 0, output

    def evaluate(self, facts: RuntimeFacts) -> ReadinessReport:
        """Build the report from already collected runtime facts."""
        _, missing = evaluate_extensions(self.config.required_extensions, facts.has_extension)
        version_ok = bool(facts.version) and compare_versions(
            facts.version, self.config.php_version_required, ">="
        )
        composer_available, composer_output = self.check_composer()

        return ReadinessReport(
            facts=facts,
            required_version=self.config.php_version_required,
            cms_release=self.config.cms_release,
            version_ok=version_ok,
            extensions=dict(self.config.required_extensions),
            missing_extensions=missing,
            composer_available=composer_available,
            composer_output=composer_output,
        )

    def run(self) -> ReadinessReport:
        report = self.evaluate(self.inspector.collect())
        logger.info(
            f"Setup check: ready={report.ready} "
            f"({len(report.missing_extensions)} missing extension(s))"
        )
        return report


def render_readiness(report: ReadinessReport, stream: Optional[TextIO] = None) -> str:
    def ok(text: str) -> str:
        return colorize(f"✓ {text}", Colors.GREEN, stream)

    def bad(text: str) -> str:
        return colorize(f"✗ {text}", Colors.RED, stream)

    facts = report.facts

    lines: List[str] = [
        colorize("=== PHP Environment Test ===", Colors.BOLD, stream),
        f"PHP Version: {facts.version or 'not detected'}",
        f"PHP SAPI: {facts.sapi or 'unknown'}",
        "",
        colorize("=== Extension Check ===", Colors.BOLD, stream),
    ]
    for ext, description in report.extensions.items():
        if ext in report.missing_extensions:
            lines.append(bad(f"{ext} ({description}) - MISSING"))
        else:
            lines.append(ok(f"{ext} ({description})"))

    lines += ["", colorize("=== Version Compatibility ===", Colors.BOLD, stream)]
    if report.version_ok:
        lines.append(ok(f"PHP version is compatible with {report.cms_release}"))
    else:
        lines.append(bad(
            f"PHP version is too old. {report.cms_release} requires PHP {report.required_version}+"
        ))
        lines.append(f"  Current: {facts.version or 'not detected'}")
        lines.append(f"  Required: {report.required_version}+")

    lines += ["", colorize("=== Composer Check ===", Colors.BOLD, stream)]
    if report.composer_available:
        lines.append(ok("Composer is available"))
        lines.extend(f"  {line}" for line in report.composer_output)
    else:
        lines.append(bad("Composer not found or not working"))

    lines += ["", colorize("=== PHP Configuration ===", Colors.BOLD, stream)]
    for key, label, unit in INI_LABELS:
        value = facts.ini_value(key)
        lines.append(f"{label}: {value}{unit}" if value is not None else f"{label}: unknown")

    lines += ["", colorize("=== Summary ===", Colors.BOLD, stream)]
    if report.ready:
        lines.append(ok(f"Environment is ready for {report.cms_release} testing!"))
        lines += [
            "",
            "Next steps:",
            "1. composer install",
            "2. vendor/bin/phpunit",
        ]
    else:
        lines.append(bad("Environment needs fixes:"))
        if report.missing_extensions:
            lines += ["", "Missing extensions (enable in php.ini):"]
            lines.extend(f"  - extension={ext}" for ext in report.missing_extensions)
        if not report.version_ok:
            lines += [
                "",
                "PHP upgrade needed:",
                f"  - Install PHP {report.required_version}+ from your distribution or php.net",
            ]
        lines += [
            "",
            "Alternative: Try with platform overrides:",
            "  composer install --ignore-platform-reqs",
        ]

    return "\n".join(lines)
