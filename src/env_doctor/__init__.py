"""
env-doctor - Host diagnostics for Drupal deployments

This package probes a host that will run a PHP-based CMS and reports how
ready it is: OS release, PHP runtime and extensions, web server context,
database drivers, file system behavior and PHP limits are scored and rolled
up into an overall compatibility verdict.

Main modules:
- compat: compatibility probes, scoring model and report formatting
- runtime: PHP runtime inspection through the php binary
- validator: project structure and syntax validation
- readiness: quick PHP setup check for the CMS test suite
- core: configuration and command helpers
"""

__version__ = "0.3.0"
__author__ = "env-doctor maintainers"

__all__ = ["__version__", "__author__"]
