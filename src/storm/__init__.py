"""
Storm - application kernel for the Storm content-management framework.

Subpackages:
- storm.core: errors, logging, settings, container, events, ORM primitives
- storm.foundation: Application kernel, service providers, provider cache
- storm.cli: ``storm`` command-line interface
"""

__version__ = "1.2.0"
