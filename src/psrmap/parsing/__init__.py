"""
Parsing module for psrmap.

Turns PHP source text into the list of classes it declares.

Key Components:
- PhpFileCleaner: forward-scanning normaliser removing strings, comments
  and heredocs
- find_classes / extract_classes: namespace-aware declaration extraction
"""

from .cleaner import PhpFileCleaner
from .extractor import extract_classes, find_classes

__all__ = ["PhpFileCleaner", "extract_classes", "find_classes"]
