"""
Environment probes.

Each probe turns one aspect of the host into scored Check objects. Probes
never raise: a failure becomes a 0-score check with a FAIL detail line so
the remaining probes still run.
"""

import functools
import logging
import os
import re
import tempfile
import uuid
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union

try:
    import fcntl
except ImportError:  # Windows has no advisory locks
    fcntl = None

from ..core.config import ScorerConfig
from ..runtime.models import RuntimeFacts
from .memory import format_bytes, is_unlimited, return_bytes
from .models import Category, Check, CheckStatus, Detail
from .versions import compare_versions, tiered_score

logger = logging.getLogger(__name__)

DRIVER_LABELS: Dict[str, str] = {
    "pdo_mysql": "MySQL/MariaDB",
    "pdo_sqlite": "SQLite",
    "pdo_pgsql": "PostgreSQL",
}

_OS_RELEASE_LINE = re.compile(r'^\s*([A-Z0-9_]+)\s*=\s*"?([^"\n]*)"?\s*$')

FS_PAYLOAD = "test"
FS_MODIFIED = "modified"

FS_CHECKS: List[Tuple[str, float]] = [
    ("fs_create", 25),
    ("fs_read", 25),
    ("fs_lock", 25),
    ("fs_delete", 25),
]
PERFORMANCE_CHECKS: List[Tuple[str, float]] = [
    ("memory_limit", 50),
    ("max_execution_time", 50),
]


def _error_check(name: str, category: Category, weight: float, error: Exception) -> Check:
    return Check(
        name=name,
        category=category,
        weight=weight,
        score=0,
        details=[Detail(status=CheckStatus.FAIL, message=f"{name} check error: {error}")],
    )


def guarded(name: str, category: Category, weight: float = 1.0):
    """
    Turn any exception raised by a single-check probe into a 0-score check.
    """
    def decorator(func: Callable[..., Check]) -> Callable[..., Check]:
        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> Check:
            try:
                return func(*args, **kwargs)
            except Exception as e:
                logger.warning(f"Probe '{name}' failed: {e}", exc_info=True)
                return _error_check(name, category, weight, e)
        return wrapper
    return decorator


def guarded_group(
    category: Category,
    members: Union[Sequence[Tuple[str, float]], Callable[..., Sequence[Tuple[str, float]]]],
):
    """
    Error boundary for probes returning several checks.

    On failure every member (name, weight) becomes a 0-score check. members
    may be a callable taking the probe's arguments when the set depends on
    configuration.
    """
    def decorator(func: Callable[..., List[Check]]) -> Callable[..., List[Check]]:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> List[Check]:
            try:
                return func(*args, **kwargs)
            except Exception as e:
                logger.warning(f"Probe '{func.__name__}' failed: {e}", exc_info=True)
                expected = members(*args, **kwargs) if callable(members) else members
                return [_error_check(name, category, weight, e) for name, weight in expected]
        return wrapper
    return decorator


# -----------------------------
# Operating system
# -----------------------------
def parse_os_release(path: str) -> Optional[Dict[str, str]]:
    """
    Parse an os-release file into a dict.

    Lines look like NAME="Ubuntu" or ID=ubuntu. Returns None when the file
    does not exist or cannot be read.
    """
    try:
        content = Path(path).read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        logger.debug(f"Cannot read {path}: {e}")
        return None

    fields: Dict[str, str] = {}
    for line in content.splitlines():
        if not line.strip() or line.lstrip().startswith("#"):
            continue
        match = _OS_RELEASE_LINE.match(line)
        if match:
            fields[match.group(1)] = match.group(2)
    return fields


def score_os(
    name: Optional[str],
    version: Optional[str],
    family: str = "Ubuntu",
    excellent: str = "24.04",
    good: str = "22.04",
) -> Tuple[float, Detail]:
    """
    Score a distribution name/version pair.

    Returns:
        (score, detail line)
    """
    if not name:
        return 0.0, Detail(status=CheckStatus.FAIL, message="Cannot determine OS version")

    version = version or ""
    if name == family and version and compare_versions(version, excellent, ">="):
        return 100.0, Detail(
            status=CheckStatus.PASS,
            message=f"{family} {excellent}+ detected - EXCELLENT compatibility",
        )
    if name == family and version and compare_versions(version, good, ">="):
        return 80.0, Detail(
            status=CheckStatus.WARN,
            message=f"{family} {good}+ detected - Good compatibility (consider upgrading)",
        )
    if family in name:
        return 60.0, Detail(
            status=CheckStatus.WARN,
            message=f"Older {family} detected - May need manual PHP installation",
        )
    return 40.0, Detail(
        status=CheckStatus.WARN,
        message=f"Non-{family} system detected - Compatibility may vary",
    )


@guarded("os", Category.OS)
def probe_os(config: ScorerConfig) -> Check:
    fields = parse_os_release(config.os_release_path)
    details: List[Detail] = []
    name = version = None
    if fields is not None:
        name = fields.get("NAME")
        version = fields.get("VERSION_ID")
        details.append(Detail(
            status=CheckStatus.INFO,
            message=f"OS: {name or 'Unknown'} {version or 'Unknown'}",
        ))

    score, verdict_line = score_os(
        name,
        version,
        family=config.os_family,
        excellent=config.os_version_excellent,
        good=config.os_version_good,
    )
    details.append(verdict_line)
    return Check(name="os", category=Category.OS, score=score, details=details)


# -----------------------------
# PHP runtime
# -----------------------------
def score_runtime_version(version: Optional[str], config: ScorerConfig) -> float:
    return tiered_score(
        version,
        [
            (config.php_version_recommended, 100),
            (config.php_version_supported, 80),
            (config.php_version_minimum, 60),
        ],
    )


@guarded("runtime_version", Category.RUNTIME)
def probe_runtime_version(facts: RuntimeFacts, config: ScorerConfig) -> Check:
    details = [Detail(
        status=CheckStatus.INFO,
        message=f"PHP Version: {facts.version or 'not detected'}",
    )]
    score = score_runtime_version(facts.version, config)

    if facts.version is None:
        reason = facts.errors[0] if facts.errors else "no output"
        details.append(Detail(
            status=CheckStatus.FAIL,
            message=f"PHP runtime not detected ({reason})",
        ))
    elif score >= 100:
        details.append(Detail(
            status=CheckStatus.PASS,
            message=f"PHP {config.php_version_recommended}+ detected - Perfect for Drupal",
        ))
    elif score >= 80:
        details.append(Detail(
            status=CheckStatus.WARN,
            message=f"PHP {config.php_version_supported}+ detected - Compatible with workarounds",
        ))
    elif score >= 60:
        details.append(Detail(
            status=CheckStatus.WARN,
            message=f"PHP {config.php_version_minimum}+ detected - Minimum requirement, upgrade recommended",
        ))
    else:
        details.append(Detail(status=CheckStatus.FAIL, message="PHP version too old for Drupal"))

    return Check(name="runtime_version", category=Category.RUNTIME, score=score, details=details)


def evaluate_extensions(
    required: Mapping[str, str],
    is_present: Callable[[str], bool],
) -> Tuple[float, List[str]]:
    """
    Evaluate a required feature set.

    Args:
        required: name -> human description, in report order
        is_present: presence query for a name

    Returns:
        (score, missing names in input order); an empty set scores 100
    """
    if not required:
        return 100.0, []

    missing = [name for name in required if not is_present(name)]
    present = len(required) - len(missing)
    return 100.0 * present / len(required), missing


@guarded("extensions", Category.RUNTIME)
def probe_extensions(facts: RuntimeFacts, config: ScorerConfig) -> Check:
    score, missing = evaluate_extensions(config.required_extensions, facts.has_extension)
    details = []
    for ext, description in config.required_extensions.items():
        if ext in missing:
            details.append(Detail(status=CheckStatus.FAIL, message=f"{ext} ({description}) - MISSING"))
        else:
            details.append(Detail(status=CheckStatus.PASS, message=f"{ext} ({description})"))
    return Check(
        name="extensions",
        category=Category.RUNTIME,
        score=score,
        details=details,
        missing=missing,
    )


# -----------------------------
# Web server
# -----------------------------
def score_web_server(server_software: str) -> Tuple[float, Detail]:
    if "Apache" in server_software:
        return 100.0, Detail(status=CheckStatus.PASS, message="Apache detected - Excellent for Drupal")
    if "nginx" in server_software:
        return 90.0, Detail(status=CheckStatus.PASS, message="Nginx detected - Good for Drupal")
    if server_software == "CLI":
        return 50.0, Detail(status=CheckStatus.INFO, message="Running in CLI mode - Web server check skipped")
    return 30.0, Detail(status=CheckStatus.WARN, message="Unknown web server - May need configuration")


@guarded("web_server", Category.WEB_SERVER)
def probe_web_server(environ: Optional[Mapping[str, str]] = None) -> Check:
    env = os.environ if environ is None else environ
    server_software = env.get("SERVER_SOFTWARE") or "CLI"
    score, detail = score_web_server(server_software)
    return Check(
        name="web_server",
        category=Category.WEB_SERVER,
        score=score,
        details=[Detail(status=CheckStatus.INFO, message=f"Environment: {server_software}"), detail],
    )


# -----------------------------
# Database drivers
# -----------------------------
@guarded_group(Category.DATABASE, lambda facts, config: list(config.database_drivers.items()))
def probe_database(facts: RuntimeFacts, config: ScorerConfig) -> List[Check]:
    """One check per known driver, weighted by the points it is worth."""
    presence = {driver: facts.has_extension(driver) for driver in config.database_drivers}
    available = [DRIVER_LABELS.get(d, d) for d, present in presence.items() if present]
    if available:
        summary = Detail(status=CheckStatus.INFO, message=f"Available drivers: {', '.join(available)}")
    else:
        summary = Detail(status=CheckStatus.FAIL, message="No database drivers found")

    checks: List[Check] = []
    drivers = list(config.database_drivers.items())
    for index, (driver, points) in enumerate(drivers):
        details = []
        if presence[driver]:
            details.append(Detail(
                status=CheckStatus.PASS,
                message=f"{DRIVER_LABELS.get(driver, driver)} support available",
            ))
        # Driver summary goes under the last driver line
        if index == len(drivers) - 1:
            details.append(summary)
        checks.append(Check(
            name=driver,
            category=Category.DATABASE,
            weight=points,
            score=100 if presence[driver] else 0,
            details=details,
        ))
    return checks


# -----------------------------
# File system
# -----------------------------
def _fs_check(name: str, label: str, ok: bool, error: Optional[str] = None) -> Check:
    if ok:
        detail = Detail(status=CheckStatus.PASS, message=f"File {label}: Working")
    else:
        detail = Detail(status=CheckStatus.FAIL, message=f"File {label}: Failed{f' ({error})' if error else ''}")
    return Check(
        name=name,
        category=Category.FILESYSTEM,
        weight=25,
        score=100 if ok else 0,
        details=[detail],
    )


def _locked_write(handle, text: str):
    """Write under an exclusive advisory lock where the platform has one."""
    if fcntl is None:
        handle.write(text)
        handle.flush()
        return
    fcntl.flock(handle.fileno(), fcntl.LOCK_EX)
    try:
        handle.write(text)
        handle.flush()
    finally:
        fcntl.flock(handle.fileno(), fcntl.LOCK_UN)


def _remove_scratch(path: Path):
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning(f"Could not remove scratch file {path}: {e}")


@guarded_group(Category.FILESYSTEM, FS_CHECKS)
def probe_filesystem(temp_dir: Optional[str] = None) -> List[Check]:
    """
    Exercise create, read, locked write and delete on a scratch file.

    Every step is attempted even when an earlier one failed.
    """
    directory = temp_dir or tempfile.gettempdir()
    test_file = Path(directory) / f"drupal_test_{uuid.uuid4().hex}"
    checks: List[Check] = []

    try:
        try:
            test_file.write_text(FS_PAYLOAD, encoding="utf-8")
            checks.append(_fs_check("fs_create", "creation", True))
        except OSError as e:
            logger.warning(f"File system create probe failed in {directory}: {e}")
            checks.append(_fs_check("fs_create", "creation", False, str(e)))

        try:
            content = test_file.read_text(encoding="utf-8")
            checks.append(_fs_check(
                "fs_read", "reading", content == FS_PAYLOAD,
                None if content == FS_PAYLOAD else "content mismatch",
            ))
        except OSError as e:
            logger.warning(f"File system read probe failed: {e}")
            checks.append(_fs_check("fs_read", "reading", False, str(e)))

        try:
            with open(test_file, "w", encoding="utf-8") as handle:
                _locked_write(handle, FS_MODIFIED)
            checks.append(_fs_check("fs_lock", "locking", True))
        except OSError as e:
            logger.warning(f"File system lock probe failed: {e}")
            checks.append(_fs_check("fs_lock", "locking", False, str(e)))

        try:
            test_file.unlink()
            checks.append(_fs_check("fs_delete", "deletion", True))
        except OSError as e:
            logger.warning(f"File system delete probe failed: {e}")
            checks.append(_fs_check("fs_delete", "deletion", False, str(e)))
    finally:
        _remove_scratch(test_file)

    return checks


# -----------------------------
# Performance
# -----------------------------
@guarded_group(Category.PERFORMANCE, PERFORMANCE_CHECKS)
def probe_performance(
    memory_limit: Optional[str],
    max_execution_time: Optional[str],
    config: ScorerConfig,
) -> List[Check]:
    """Memory limit and execution time checks, 50 points each."""
    checks: List[Check] = []

    details = [Detail(status=CheckStatus.INFO, message=f"Memory Limit: {memory_limit or 'unknown'}")]
    if memory_limit is None:
        memory_ok = False
        details.append(Detail(status=CheckStatus.FAIL, message="Memory limit could not be determined"))
    elif is_unlimited(memory_limit):
        memory_ok = True
        details.append(Detail(status=CheckStatus.PASS, message="Memory limit unlimited"))
    else:
        memory_ok = return_bytes(memory_limit) >= config.memory_minimum_bytes
        if memory_ok:
            details.append(Detail(status=CheckStatus.PASS, message="Memory limit adequate for Drupal"))
        else:
            details.append(Detail(
                status=CheckStatus.WARN,
                message=f"Memory limit may be too low for Drupal "
                        f"(minimum {format_bytes(config.memory_minimum_bytes)})",
            ))
    checks.append(Check(
        name="memory_limit",
        category=Category.PERFORMANCE,
        weight=50,
        score=100 if memory_ok else 0,
        details=details,
    ))

    details = [Detail(status=CheckStatus.INFO, message=f"Max Execution Time: {max_execution_time or 'unknown'}s")]
    seconds = _int_or_none(max_execution_time)
    time_ok = seconds is not None and (seconds == 0 or seconds >= config.execution_time_minimum)
    if time_ok:
        details.append(Detail(status=CheckStatus.PASS, message="Execution time adequate"))
    elif seconds is None:
        details.append(Detail(status=CheckStatus.FAIL, message="Execution time could not be determined"))
    else:
        details.append(Detail(status=CheckStatus.WARN, message="Execution time may be too short"))
    checks.append(Check(
        name="max_execution_time",
        category=Category.PERFORMANCE,
        weight=50,
        score=100 if time_ok else 0,
        details=details,
    ))

    return checks


def _int_or_none(v: Optional[str]) -> Optional[int]:
    if v is None:
        return None
    try:
        return int(v.strip())
    except ValueError:
        return None


# -----------------------------
# All probes
# -----------------------------
def run_probes(
    facts: RuntimeFacts,
    config: ScorerConfig,
    environ: Optional[Mapping[str, str]] = None,
) -> List[Check]:
    """
    Run every probe in report order.

    Args:
        facts: PHP runtime facts
        config: Scorer configuration
        environ: Environment used for the web server context (os.environ if None)

    Returns:
        All checks, ordered by category
    """
    checks: List[Check] = [probe_os(config)]
    checks.append(probe_runtime_version(facts, config))
    checks.append(probe_extensions(facts, config))
    checks.append(probe_web_server(environ))
    checks.extend(probe_database(facts, config))
    checks.extend(probe_filesystem(config.temp_dir))
    checks.extend(probe_performance(
        facts.ini_value("memory_limit"),
        facts.ini_value("max_execution_time"),
        config,
    ))

    logger.debug(f"Ran {len(checks)} check(s)")
    return checks
