"""
Global Configuration and Safe Defaults.

This module centralizes the defaults shared by the scanner, the rule
aggregator and the CLI: which files count as PHP sources, which
directories are never descended into, and the well-known names of the
manifest files and runtime support class.
"""

import re
from pathlib import Path
from typing import Set, Tuple

# --- Source Files ---

# Extensions scanned for class declarations (without the leading dot)
DEFAULT_EXTENSIONS: Tuple[str, ...] = ("php", "inc")

# Declaration keywords recognised by the cleaner and the extractor
DECLARATION_TYPES: Tuple[str, ...] = ("class", "interface", "trait", "enum")

# --- Traversal ---

# Version control metadata directories, never scanned
IGNORE_DIRECTORIES: Set[str] = {
    ".git",
    ".svn",
    ".hg",
    ".bzr",
    "_darcs",
    "CVS",
    ".arch-params",
    ".monotone",
}

# --- Reporting ---

# Ambiguous candidates living in these directories are not reported
DUPLICATES_FILTER = re.compile(r"/(test|fixture|example|stub)s?/", re.IGNORECASE)

# --- Manifests ---

ROOT_MANIFEST_FILE = "composer.json"
DEFAULT_VENDOR_DIR = "vendor"
INSTALLED_MANIFEST_PATH = Path("composer") / "installed.json"

# Runtime support class injected into every generated class map
RUNTIME_CLASS_NAME = "Composer\\InstalledVersions"
RUNTIME_CLASS_PATH = Path("composer") / "InstalledVersions.php"


def is_ignored_directory(dir_name: str) -> bool:
    """Check if a directory should be skipped during traversal."""
    return dir_name in IGNORE_DIRECTORIES or dir_name.startswith(".")


def has_source_extension(path: str, extensions: Tuple[str, ...] = DEFAULT_EXTENSIONS) -> bool:
    """Check if the file extension is one of the scanned source extensions."""
    _, dot, ext = path.rpartition(".")
    return bool(dot) and "/" not in ext and ext in extensions
