"""
PHP runtime inspection through the PHP CLI binary.
"""

import logging
from typing import Dict, List, Optional

from ..core.commands import run_cmd
from .models import RuntimeFacts

logger = logging.getLogger(__name__)

# Settings read from the runtime for the performance and setup checks
INI_KEYS = [
    "memory_limit",
    "max_execution_time",
    "upload_max_filesize",
    "post_max_size",
]


class PhpInspector:
    """
    Collects RuntimeFacts by running small PHP snippets.

    Each query is independent: a failing query is recorded in
    RuntimeFacts.errors and the remaining queries still run.
    """

    def __init__(self, php_binary: str = "php", timeout: int = 10):
        """
        Initialize the inspector.

        Args:
            php_binary: PHP CLI binary (name on PATH or absolute path)
            timeout: Timeout for each query in seconds
        """
        self.php_binary = php_binary
        self.timeout = timeout

    def _php(self, *args: str) -> tuple[int, str, str]:
        return run_cmd([self.php_binary, *args], timeout_s=self.timeout)

    def query_version(self, errors: List[str]) -> Optional[str]:
        rc, stdout, stderr = self._php("-r", "echo PHP_VERSION;")
        if rc != 0 or not stdout:
            errors.append(f"version query failed: {stderr or stdout or f'rc={rc}'}")
            return None
        return stdout.splitlines()[0].strip()

    def query_sapi(self, errors: List[str]) -> Optional[str]:
        rc, stdout, stderr = self._php("-r", "echo php_sapi_name();")
        if rc != 0 or not stdout:
            errors.append(f"sapi query failed: {stderr or stdout or f'rc={rc}'}")
            return None
        return stdout.strip()

    def query_extensions(self, errors: List[str]) -> List[str]:
        """
        List loaded extensions via `php -m`.

        Output looks like:
            [PHP Modules]
            Core
            curl
            ...

            [Zend Modules]
            Zend OPcache
        """
        rc, stdout, stderr = self._php("-m")
        if rc != 0:
            errors.append(f"extension query failed: {stderr or stdout or f'rc={rc}'}")
            return []

        extensions: List[str] = []
        for line in stdout.splitlines():
            s = line.strip()
            if not s or s.startswith("["):
                continue
            if s not in extensions:
                extensions.append(s)
        return extensions

    def query_ini(self, errors: List[str], keys: Optional[List[str]] = None) -> Dict[str, str]:
        keys = keys or INI_KEYS
        # One "key=value" line per setting
        script = "".join(
            f'echo "{key}=", ini_get("{key}"), PHP_EOL;' for key in keys
        )
        rc, stdout, stderr = self._php("-r", script)
        if rc != 0:
            errors.append(f"ini query failed: {stderr or stdout or f'rc={rc}'}")
            return {}

        ini: Dict[str, str] = {}
        for line in stdout.splitlines():
            if "=" not in line:
                continue
            key, value = line.split("=", 1)
            key = key.strip()
            if key in keys:
                ini[key] = value.strip()
        return ini

    def collect(self) -> RuntimeFacts:
        """
        Query the runtime.

        Returns:
            RuntimeFacts with whatever could be determined
        """
        errors: List[str] = []

        version = self.query_version(errors)
        if version is None:
            # No point running the remaining snippets against a broken binary
            logger.warning(f"PHP runtime not usable via '{self.php_binary}': {errors[-1]}")
            return RuntimeFacts(binary=self.php_binary, errors=errors)

        facts = RuntimeFacts(
            binary=self.php_binary,
            version=version,
            sapi=self.query_sapi(errors),
            extensions=self.query_extensions(errors),
            ini=self.query_ini(errors),
            errors=errors,
        )

        for error in errors:
            logger.warning(f"PHP runtime query problem: {error}")

        logger.debug(
            f"PHP {facts.version} ({facts.sapi}): "
            f"{len(facts.extensions)} extension(s), ini={facts.ini}"
        )
        return facts
