"""
Compatibility score calculation logic.
"""

import logging
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from .models import (
    Category,
    CategoryScore,
    Check,
    CompatibilityReport,
    OverallMode,
    Verdict,
)

logger = logging.getLogger(__name__)


def single_score(checks: Sequence[Check]) -> float:
    """Single-check category: the check's score is the category score."""
    return checks[0].score if checks else 0.0


def mean_score(checks: Sequence[Check]) -> float:
    """Simple average of the member scores."""
    if not checks:
        return 0.0
    return sum(check.score for check in checks) / len(checks)


def points_score(checks: Sequence[Check]) -> float:
    """
    Additive point allocation: each check adds its weight at a score of 100.

    The weights of a category are expected to sum to 100; the result is
    capped there in case they don't.
    """
    return min(100.0, sum(check.weight * check.score / 100.0 for check in checks))


# Category -> (rule name, aggregation function)
CATEGORY_RULES: Dict[Category, Tuple[str, Callable[[Sequence[Check]], float]]] = {
    Category.OS: ("single", single_score),
    Category.RUNTIME: ("mean", mean_score),
    Category.WEB_SERVER: ("single", single_score),
    Category.DATABASE: ("points", points_score),
    Category.FILESYSTEM: ("points", points_score),
    Category.PERFORMANCE: ("points", points_score),
}

# Verdict bands, best first
VERDICT_BANDS: List[Tuple[float, Verdict]] = [
    (90.0, Verdict.EXCELLENT),
    (75.0, Verdict.GOOD),
    (60.0, Verdict.FAIR),
]

DEFAULT_HINT_THRESHOLDS: Dict[str, float] = {
    "os": 80,
    "runtime": 80,
    "filesystem": 100,
    "performance": 80,
}


def score_to_verdict(score: float) -> Verdict:
    """Map an unrounded overall score to its verdict band."""
    for minimum, verdict in VERDICT_BANDS:
        if score >= minimum:
            return verdict
    return Verdict.POOR


class CompatibilityCalculator:
    """
    Turns probe checks into a CompatibilityReport.

    Each category is combined by its own rule from CATEGORY_RULES rather
    than a uniform weighted average:
    - runtime: mean of runtime version and extension set
    - database, filesystem, performance: additive points
    - os, web server: the single check's score
    """

    def __init__(
        self,
        overall_mode: OverallMode = OverallMode.SPLIT,
        hint_thresholds: Optional[Dict[str, float]] = None,
        os_target: str = "Ubuntu 24.04 LTS",
        php_target: str = "8.3",
        extension_package_template: str = "php8.3-{name}",
    ):
        """
        Initialize calculator.

        Args:
            overall_mode: How categories are combined into the overall score
            hint_thresholds: Category value -> score below which a hint is emitted
            os_target: OS release named in the OS hint
            php_target: PHP version named in the runtime hint
            extension_package_template: apt package pattern for extension hints
        """
        self.overall_mode = OverallMode(overall_mode)
        self.hint_thresholds = dict(
            DEFAULT_HINT_THRESHOLDS if hint_thresholds is None else hint_thresholds
        )
        self.os_target = os_target
        self.php_target = php_target
        self.extension_package_template = extension_package_template

    def compute_report(self, checks: Sequence[Check]) -> CompatibilityReport:
        """
        Compute the full report from probe checks.

        Args:
            checks: Checks from every probe, in report order

        Returns:
            Computed compatibility report
        """
        categories = self.compute_categories(checks)
        overall_score = self.compute_overall(checks, categories)
        verdict = score_to_verdict(overall_score)
        missing_extensions = [name for check in checks for name in check.missing]
        recommendations = self._generate_recommendations(categories, missing_extensions)

        report = CompatibilityReport(
            checks=list(checks),
            categories=categories,
            overall_mode=self.overall_mode,
            overall_score=overall_score,
            verdict=verdict,
            recommendations=recommendations,
            missing_extensions=missing_extensions,
        )

        logger.info(
            f"Compatibility calculated: {overall_score:.1f}% ({verdict.value}, "
            f"{len(recommendations)} recommendation(s))"
        )
        return report

    def compute_categories(self, checks: Sequence[Check]) -> List[CategoryScore]:
        """Aggregate every category in report order by its rule."""
        scores: List[CategoryScore] = []
        for category, (rule, aggregate) in CATEGORY_RULES.items():
            members = [check for check in checks if check.category == category]
            scores.append(CategoryScore(
                category=category,
                score=aggregate(members),
                rule=rule,
                checks=[check.name for check in members],
            ))
        return scores

    def overall_terms(
        self,
        checks: Sequence[Check],
        categories: Sequence[CategoryScore],
    ) -> List[float]:
        """
        Terms averaged into the overall score.

        In split mode a mean-rule category contributes each member score on
        its own, so runtime version and extension set are two of the seven
        terms. In merged mode every category contributes once.
        """
        terms: List[float] = []
        for entry in categories:
            rule, _ = CATEGORY_RULES[entry.category]
            members = [check for check in checks if check.category == entry.category]
            if self.overall_mode == OverallMode.SPLIT and rule == "mean" and members:
                terms.extend(check.score for check in members)
            else:
                terms.append(entry.score)
        return terms

    def compute_overall(
        self,
        checks: Sequence[Check],
        categories: Sequence[CategoryScore],
    ) -> float:
        terms = self.overall_terms(checks, categories)
        if not terms:
            return 0.0
        # Clamp float noise from the division back into [0, 100]
        return max(0.0, min(100.0, sum(terms) / len(terms)))

    def _generate_recommendations(
        self,
        categories: Sequence[CategoryScore],
        missing_extensions: Sequence[str],
    ) -> List[str]:
        """
        Generate actionable recommendations, in category order.

        Args:
            categories: Category scores
            missing_extensions: Required extensions that are not loaded

        Returns:
            List of recommendation strings
        """
        recommendations = []

        for entry in categories:
            threshold = self.hint_thresholds.get(entry.category.value)
            below = threshold is not None and entry.score < threshold

            if entry.category == Category.OS and below:
                recommendations.append(
                    f"Consider upgrading to {self.os_target} for best compatibility"
                )

            elif entry.category == Category.RUNTIME:
                if below:
                    recommendations.append(
                        f"Upgrade to PHP {self.php_target}+ for optimal Drupal 11.1.x support"
                    )
                for ext in missing_extensions:
                    package = self.extension_package_template.format(name=ext)
                    recommendations.append(
                        f"Install missing PHP extension '{ext}': sudo apt install {package}"
                    )

            elif entry.category == Category.FILESYSTEM and below:
                recommendations.append("Check file system permissions and disk space")

            elif entry.category == Category.PERFORMANCE and below:
                recommendations.append("Optimize PHP configuration for better performance")

        return recommendations
