"""
Terminal output helpers.
"""

import sys
from typing import Optional, TextIO


class Colors:
    """ANSI color codes for terminal output."""

    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    RED = "\033[91m"
    BLUE = "\033[94m"
    RESET = "\033[0m"
    BOLD = "\033[1m"


def colorize(text: str, color: str, stream: Optional[TextIO] = None) -> str:
    """Colorize text if the stream (stdout by default) is a TTY."""
    stream = stream or sys.stdout
    if hasattr(stream, "isatty") and stream.isatty():
        return f"{color}{text}{Colors.RESET}"
    return text
