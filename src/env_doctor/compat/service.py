"""
Compatibility check service.
"""

import logging
from typing import Mapping, Optional

from ..core.config import AppConfig, get_config
from ..runtime.inspector import PhpInspector
from ..runtime.models import RuntimeFacts
from .calculator import CompatibilityCalculator
from .models import CompatibilityReport, OverallMode
from .probes import run_probes
from .versions import version_segments

logger = logging.getLogger(__name__)


def build_calculator(config: AppConfig) -> CompatibilityCalculator:
    """Create a calculator from the scorer configuration."""
    scorer = config.scorer
    php_target = ".".join(str(s) for s in version_segments(scorer.php_version_recommended)[:2])
    return CompatibilityCalculator(
        overall_mode=OverallMode(scorer.overall_mode),
        hint_thresholds=scorer.hint_thresholds,
        os_target=f"{scorer.os_family} {scorer.os_version_excellent} LTS",
        php_target=php_target,
        extension_package_template=scorer.extension_package_template,
    )


class CompatibilityService:
    """
    Runs the compatibility check sequence once.

    1. Collect PHP runtime facts
    2. Run every probe
    3. Calculate the report
    """

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        inspector: Optional[PhpInspector] = None,
        calculator: Optional[CompatibilityCalculator] = None,
        environ: Optional[Mapping[str, str]] = None,
    ):
        """
        Initialize compatibility service.

        Args:
            config: Application configuration (global config if None)
            inspector: PHP runtime inspector
            calculator: Score calculator
            environ: Environment for the web server probe (os.environ if None)
        """
        self.config = config or get_config()
        self.inspector = inspector or PhpInspector(
            php_binary=self.config.runtime.php_binary,
            timeout=self.config.runtime.timeout,
        )
        self.calculator = calculator or build_calculator(self.config)
        self.environ = environ

    @property
    def title(self) -> str:
        scorer = self.config.scorer
        return f"{scorer.os_family} {scorer.os_version_excellent} Compatibility Test"

    def evaluate(self, facts: RuntimeFacts) -> CompatibilityReport:
        """
        Probe the host with already collected runtime facts and score it.

        Args:
            facts: PHP runtime facts

        Returns:
            Computed compatibility report
        """
        checks = run_probes(facts, self.config.scorer, environ=self.environ)
        return self.calculator.compute_report(checks)

    def run_once(self) -> CompatibilityReport:
        """
        Run one full compatibility check.

        Returns:
            Computed compatibility report
        """
        logger.debug("Collecting PHP runtime facts...")
        facts = self.inspector.collect()

        logger.debug("Running probes...")
        report = self.evaluate(facts)

        logger.info(
            f"Compatibility: {report.overall_score:.1f}% ({report.verdict.value})"
        )
        for entry in report.categories:
            logger.debug(f"  {entry.category.value}: {entry.score:.1f} ({entry.rule})")
        return report
