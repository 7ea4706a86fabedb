"""
domorest utilities.

- logging: console / JSON log formatting for applications and the CLI
"""

from .logging import JSONFormatter, SmartFormatter, setup_logging

__all__ = [
    "JSONFormatter",
    "SmartFormatter",
    "setup_logging",
]
