"""
Project structure and syntax validation.

Lints PHP sources, parse-checks config files and verifies the expected
directory layout. The cumulative error count decides the exit status.
"""

__all__ = ["models", "checks", "runner"]
