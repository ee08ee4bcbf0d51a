"""
Shared configuration and command helpers.
"""

__all__ = ["config", "commands", "console"]
