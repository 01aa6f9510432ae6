"""
CLI Commands Package.

Each command is implemented in its own module for maintainability.
"""

from . import classes
from . import dump
from . import which

__all__ = [
    "classes",
    "dump",
    "which",
]
