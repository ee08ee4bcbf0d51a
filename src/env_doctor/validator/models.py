"""
Validator data models.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class IssueKind(str, Enum):
    """Error tallies kept by the validator."""

    SYNTAX = "syntax"
    CONFIG = "config"
    STRUCTURE = "structure"
    PERMISSION = "permission"


ISSUE_TITLES: Dict[IssueKind, str] = {
    IssueKind.SYNTAX: "Syntax Errors",
    IssueKind.CONFIG: "Configuration Errors",
    IssueKind.STRUCTURE: "Structure Errors",
    IssueKind.PERMISSION: "Permission Errors",
}


class CheckOutcome(BaseModel):
    """Result of validating one file or directory."""

    kind: IssueKind
    target: str
    passed: bool
    label: str
    message: Optional[str] = None
    evidence: Optional[Dict[str, Any]] = None


class ValidationResult(BaseModel):
    """
    Immutable error tally.

    Built by folding CheckOutcomes with add(); every call returns a new
    result and leaves the receiver untouched.
    """

    counts: Dict[IssueKind, int] = Field(
        default_factory=lambda: {kind: 0 for kind in IssueKind}
    )
    outcomes: List[CheckOutcome] = Field(default_factory=list)

    def add(self, outcome: CheckOutcome) -> "ValidationResult":
        counts = dict(self.counts)
        if not outcome.passed:
            counts[outcome.kind] = counts.get(outcome.kind, 0) + 1
        return ValidationResult(counts=counts, outcomes=[*self.outcomes, outcome])

    def count(self, kind: IssueKind) -> int:
        return self.counts.get(kind, 0)

    @property
    def total_errors(self) -> int:
        return sum(self.counts.values())

    @property
    def failures(self) -> List[CheckOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.passed]

    @property
    def exit_code(self) -> int:
        return 0 if self.total_errors == 0 else 1

    class Config:
        frozen = True
