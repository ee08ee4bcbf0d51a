"""
Environment compatibility scoring module.

Probes the host, scores each probe 0-100 and rolls the scores up into
category scores, an overall percentage and a verdict.
"""

__all__ = ["models", "versions", "memory", "probes", "calculator", "formatter", "service"]
