"""
PHP runtime inspection.

Queries the PHP CLI for its version, loaded extensions and ini settings.
"""

__all__ = ["models", "inspector"]
