"""
External command helpers.
"""

import logging
import subprocess
from typing import Any, Dict, List, Tuple

logger = logging.getLogger(__name__)

# Conventional shell exit codes for a missing or timed-out command
RC_NOT_FOUND = 127
RC_TIMEOUT = 124


def run_cmd(cmd: List[str], timeout_s: int = 10) -> Tuple[int, str, str]:
    """
    Run a command and return (rc, stdout, stderr).

    Output is captured so callers can surface it as diagnostic text. A
    missing binary or a timeout is reported through the return code instead
    of an exception, so a probe built on this never aborts the check run.
    """
    try:
        p = subprocess.run(
            cmd,
            text=True,
            capture_output=True,
            timeout=timeout_s,
        )
    except FileNotFoundError:
        logger.debug(f"Command not found: {cmd[0]}")
        return RC_NOT_FOUND, "", f"{cmd[0]}: command not found"
    except subprocess.TimeoutExpired:
        logger.warning(f"Command timed out after {timeout_s}s: {' '.join(cmd)}")
        return RC_TIMEOUT, "", f"timed out after {timeout_s}s"

    # Normalise None -> "" and strip whitespace
    return p.returncode, (p.stdout or "").strip(), (p.stderr or "").strip()


def get_evidence(cmd: List[str], rc: int, stdout: str, stderr: str) -> Dict[str, Any]:
    return {
        "cmd": " ".join(cmd),
        "rc": rc,
        "stdout": stdout,
        "stderr": stderr,
    }
