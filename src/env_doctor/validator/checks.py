"""
Individual validator checks.

Each function returns one CheckOutcome per target and never raises for a
problem with the target itself; that problem is the outcome.
"""

import json
import logging
import os
from pathlib import Path
from typing import Dict, List

import yaml

from ..core.commands import get_evidence, run_cmd
from .models import CheckOutcome, IssueKind

logger = logging.getLogger(__name__)


def check_syntax(
    root: Path,
    files: List[str],
    lint_command: List[str],
    timeout_s: int = 30,
) -> List[CheckOutcome]:
    """
    Run the external syntax linter on each source file.

    A non-zero linter exit is a failure and carries the linter output.
    """
    outcomes: List[CheckOutcome] = []
    for file in files:
        path = root / file
        if not path.is_file():
            outcomes.append(CheckOutcome(
                kind=IssueKind.SYNTAX, target=file, passed=False, label="FILE NOT FOUND",
            ))
            continue

        cmd = [*lint_command, str(path)]
        rc, stdout, stderr = run_cmd(cmd, timeout_s=timeout_s)
        if rc == 0:
            outcomes.append(CheckOutcome(kind=IssueKind.SYNTAX, target=file, passed=True, label="PASS"))
        else:
            logger.debug(f"Linter rejected {file} (rc={rc})")
            outcomes.append(CheckOutcome(
                kind=IssueKind.SYNTAX,
                target=file,
                passed=False,
                label="FAIL",
                message="\n".join(part for part in (stdout, stderr) if part) or f"linter exited with {rc}",
                evidence=get_evidence(cmd, rc, stdout, stderr),
            ))
    return outcomes


def parse_config_text(content: str, file_type: str) -> None:
    """
    Parse config text, raising ValueError when it is not well formed.

    YAML must have a mapping at the top level; no schema is applied.
    """
    file_type = file_type.upper()
    if file_type == "JSON":
        try:
            json.loads(content)
        except json.JSONDecodeError as e:
            raise ValueError(f"{e.msg} at line {e.lineno} column {e.colno}") from e
    elif file_type == "YAML":
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML: {e}") from e
        if not isinstance(data, dict):
            raise ValueError("Invalid YAML structure")
    else:
        raise ValueError(f"Unsupported config type: {file_type}")


def check_config_files(root: Path, files: Dict[str, str]) -> List[CheckOutcome]:
    outcomes: List[CheckOutcome] = []
    for file, file_type in files.items():
        path = root / file
        try:
            content = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            outcomes.append(CheckOutcome(
                kind=IssueKind.CONFIG, target=file, passed=False, label="FILE NOT FOUND",
            ))
            continue
        except OSError as e:
            outcomes.append(CheckOutcome(
                kind=IssueKind.CONFIG, target=file, passed=False, label="FAIL", message=str(e),
            ))
            continue
        except UnicodeDecodeError as e:
            outcomes.append(CheckOutcome(
                kind=IssueKind.CONFIG, target=f"{file} ({file_type.upper()})",
                passed=False, label="FAIL", message=f"Malformed UTF-8 characters: {e.reason} at byte {e.start}",
            ))
            continue

        try:
            parse_config_text(content, file_type)
        except ValueError as e:
            outcomes.append(CheckOutcome(
                kind=IssueKind.CONFIG, target=f"{file} ({file_type.upper()})",
                passed=False, label="FAIL", message=str(e),
            ))
        else:
            outcomes.append(CheckOutcome(
                kind=IssueKind.CONFIG, target=f"{file} ({file_type.upper()})",
                passed=True, label="PASS",
            ))
    return outcomes


def check_directories(root: Path, dirs: List[str]) -> List[CheckOutcome]:
    outcomes: List[CheckOutcome] = []
    for d in dirs:
        exists = (root / d).is_dir()
        outcomes.append(CheckOutcome(
            kind=IssueKind.STRUCTURE,
            target=d,
            passed=exists,
            label="EXISTS" if exists else "MISSING",
        ))
    return outcomes


def check_accessibility(root: Path, files: List[str]) -> List[CheckOutcome]:
    outcomes: List[CheckOutcome] = []
    for file in files:
        path = root / file
        readable = path.exists() and os.access(path, os.R_OK)
        outcomes.append(CheckOutcome(
            kind=IssueKind.PERMISSION,
            target=file,
            passed=readable,
            label="READABLE" if readable else "NOT ACCESSIBLE",
        ))
    return outcomes
