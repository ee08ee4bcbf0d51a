"""
Quick PHP setup check for the CMS test suite.
"""

__all__ = ["checker"]
