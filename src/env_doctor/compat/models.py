"""
Compatibility scoring data models.
"""

from datetime import datetime
from enum import Enum
from typing import Dict, List

from pydantic import BaseModel, Field


class Category(str, Enum):
    """Report categories, in report order."""

    OS = "os"
    RUNTIME = "runtime"
    WEB_SERVER = "web_server"
    DATABASE = "database"
    FILESYSTEM = "filesystem"
    PERFORMANCE = "performance"


CATEGORY_TITLES: Dict[Category, str] = {
    Category.OS: "OS Compatibility",
    Category.RUNTIME: "PHP Environment",
    Category.WEB_SERVER: "Web Server",
    Category.DATABASE: "Database Support",
    Category.FILESYSTEM: "File System",
    Category.PERFORMANCE: "Performance",
}


class CheckStatus(str, Enum):
    """Outcome marker for a single report line."""

    PASS = "pass"
    WARN = "warn"
    FAIL = "fail"
    INFO = "info"


class Verdict(str, Enum):
    """Overall verdict bands, best first."""

    EXCELLENT = "EXCELLENT"
    GOOD = "GOOD"
    FAIR = "FAIR"
    POOR = "POOR"


VERDICT_MESSAGES: Dict[Verdict, str] = {
    Verdict.EXCELLENT: "Ready for production deployment!",
    Verdict.GOOD: "Minor optimizations recommended",
    Verdict.FAIR: "Some issues need attention",
    Verdict.POOR: "Significant issues need resolution",
}


class OverallMode(str, Enum):
    """How category results are combined into the overall score."""

    # Mean-rule categories contribute each member score as its own term
    SPLIT = "split"
    # Every category contributes its category score once
    MERGED = "merged"


class Detail(BaseModel):
    """One human-readable line produced by a probe."""

    status: CheckStatus
    message: str


class Check(BaseModel):
    """
    A single atomic probe result.

    For point-allocation categories the weight is the number of points the
    check is worth at a score of 100.
    """

    name: str
    category: Category
    weight: float = 1.0
    score: float = Field(..., ge=0, le=100)
    details: List[Detail] = Field(default_factory=list)
    missing: List[str] = Field(default_factory=list)

    @property
    def passed(self) -> bool:
        return self.score >= 100

    class Config:
        json_schema_extra = {
            "example": {
                "name": "extensions",
                "category": "runtime",
                "weight": 1.0,
                "score": 91.67,
                "details": [{"status": "fail", "message": "intl (Internationalization) - MISSING"}],
                "missing": ["intl"],
            }
        }


class CategoryScore(BaseModel):
    """Aggregated score for one category."""

    category: Category
    score: float = Field(..., ge=0, le=100)
    rule: str
    checks: List[str] = Field(default_factory=list)

    @property
    def title(self) -> str:
        return CATEGORY_TITLES[self.category]


class CompatibilityReport(BaseModel):
    """
    Calculated compatibility report with breakdown.
    """

    timestamp: datetime = Field(default_factory=datetime.now)
    checks: List[Check] = Field(default_factory=list)
    categories: List[CategoryScore] = Field(default_factory=list)
    overall_mode: OverallMode = OverallMode.SPLIT
    overall_score: float = Field(..., ge=0, le=100)
    verdict: Verdict
    recommendations: List[str] = Field(default_factory=list)
    missing_extensions: List[str] = Field(default_factory=list)

    @property
    def verdict_message(self) -> str:
        return VERDICT_MESSAGES[self.verdict]

    def category_score(self, category: Category) -> float:
        for entry in self.categories:
            if entry.category == category:
                return entry.score
        raise KeyError(category.value)

    def checks_for(self, category: Category) -> List[Check]:
        return [check for check in self.checks if check.category == category]

    class Config:
        json_schema_extra = {
            "example": {
                "timestamp": "2025-01-15T10:30:00",
                "overall_mode": "split",
                "overall_score": 84.52,
                "verdict": "GOOD",
                "recommendations": ["Check file system permissions and disk space"],
                "missing_extensions": [],
            }
        }
