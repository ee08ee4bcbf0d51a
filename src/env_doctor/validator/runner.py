"""
Project validator runner.
"""

import logging
from functools import reduce
from pathlib import Path
from typing import List, Optional, TextIO, Union

import yaml

from ..core.config import ValidatorConfig
from ..core.console import Colors, colorize
from .checks import (
    check_accessibility,
    check_config_files,
    check_directories,
    check_syntax,
)
from .models import ISSUE_TITLES, CheckOutcome, IssueKind, ValidationResult

logger = logging.getLogger(__name__)

SECTIONS = [
    (IssueKind.SYNTAX, "PHP Syntax Checks", "Checking"),
    (IssueKind.CONFIG, "Configuration File Validation", "Validating"),
    (IssueKind.STRUCTURE, "Directory Structure Check", "Checking directory"),
    (IssueKind.PERMISSION, "File Accessibility Check", "Checking accessibility"),
]


def load_manifest(path: Union[str, Path]) -> ValidatorConfig:
    """
    Load validator settings from a YAML manifest.

    The manifest uses the ValidatorConfig field names, e.g.:

        syntax_files: [mymodule.module]
        config_files: {mymodule.info.yml: YAML}
        required_dirs: [src, templates]

    Raises:
        ValueError: if the manifest is not valid YAML or not a mapping
    """
    with open(path, encoding="utf-8") as handle:
        try:
            data = yaml.safe_load(handle) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid manifest {path}: {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"Manifest {path} must be a YAML mapping")
    return ValidatorConfig(**data)


class ProjectValidator:
    """
    Validates a project tree against a ValidatorConfig.
    """

    def __init__(self, root: Union[str, Path] = ".", config: Optional[ValidatorConfig] = None):
        """
        Initialize validator.

        Args:
            root: Project root the configured paths are relative to
            config: Validator configuration
        """
        self.root = Path(root)
        self.config = config or ValidatorConfig()

    def collect_outcomes(self) -> List[CheckOutcome]:
        """Run every check in section order."""
        cfg = self.config
        outcomes: List[CheckOutcome] = []
        outcomes.extend(check_syntax(self.root, cfg.syntax_files, cfg.lint_command, cfg.lint_timeout))
        outcomes.extend(check_config_files(self.root, cfg.config_files))
        outcomes.extend(check_directories(self.root, cfg.required_dirs))
        outcomes.extend(check_accessibility(self.root, cfg.important_files))
        return outcomes

    def run(self) -> ValidationResult:
        """
        Validate the project.

        Returns:
            ValidationResult folded over every check outcome
        """
        logger.info(f"Validating project at {self.root.resolve()}")
        result = reduce(
            lambda acc, outcome: acc.add(outcome),
            self.collect_outcomes(),
            ValidationResult(),
        )
        logger.info(f"Validation finished with {result.total_errors} error(s)")
        return result


def render_validation(result: ValidationResult, stream: Optional[TextIO] = None) -> str:
    """Render validation outcomes as numbered sections and a summary."""
    lines: List[str] = [
        colorize("=== Project Test Runner ===", Colors.BOLD, stream),
        "Starting test execution...",
        "",
    ]

    for number, (kind, title, verb) in enumerate(SECTIONS, start=1):
        heading = f"{number}. {title}:"
        lines.append(colorize(heading, Colors.BOLD, stream))
        lines.append("-" * len(heading))
        for outcome in result.outcomes:
            if outcome.kind != kind:
                continue
            if outcome.passed:
                mark = colorize(f"✓ {outcome.label}", Colors.GREEN, stream)
            else:
                mark = colorize(f"✗ {outcome.label}", Colors.RED, stream)
            lines.append(f"{verb}: {outcome.target} ... {mark}")
            if outcome.message:
                lines.append("  Error: " + "\n  ".join(outcome.message.splitlines()))
        lines.append("")

    lines.append(colorize("=== TEST SUMMARY ===", Colors.BOLD, stream))
    for kind in IssueKind:
        lines.append(f"{ISSUE_TITLES[kind]}: {result.count(kind)}")
    lines.append("")

    if result.total_errors == 0:
        lines.append(colorize(
            "✓ ALL TESTS PASSED! The project structure and basic syntax are valid.",
            Colors.GREEN,
            stream,
        ))
    else:
        lines.append(colorize(
            f"✗ {result.total_errors} ERRORS FOUND. Please review the issues above.",
            Colors.RED,
            stream,
        ))
    return "\n".join(lines)
