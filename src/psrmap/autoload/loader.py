"""
Class Loader.

Resolves a class name to a file the way the generated runtime loader does:
the class map first, then PSR-4 prefixes and fallbacks, then PSR-0
prefixes and fallbacks, then the legacy include paths and the root
target-dir loader. Used by ``psrmap which`` and for checking generated
rules without running PHP.
"""

import logging
import os
from typing import Dict, List, Optional, Set

from ..core.types import AutoloadResult, TargetDirLoader

logger = logging.getLogger(__name__)

PHP_EXTENSION = ".php"


class ClassLoader:
    """
    In-memory PSR-0/PSR-4/class map lookup.

    Prefixes are checked in registration order, so rules should be added
    most specific first (the order :class:`AutoloadRules` already uses).
    """

    def __init__(self):
        self.class_map: Dict[str, str] = {}
        self.classmap_authoritative = False
        self.prefix_dirs_psr4: Dict[str, List[str]] = {}
        self.fallback_dirs_psr4: List[str] = []
        self.prefixes_psr0: Dict[str, List[str]] = {}
        self.fallback_dirs_psr0: List[str] = []
        self.include_paths: List[str] = []
        self.target_dir_loader: Optional[TargetDirLoader] = None
        self._missing: Set[str] = set()

    @classmethod
    def from_result(cls, result: AutoloadResult) -> "ClassLoader":
        loader = cls()
        for prefix, paths in result.rules.psr_0.items():
            loader.add(prefix, paths)
        for prefix, paths in result.rules.psr_4.items():
            loader.add_psr4(prefix, paths)
        loader.add_class_map(result.class_map)
        loader.include_paths = list(result.include_paths)
        loader.target_dir_loader = result.target_dir_loader
        loader.classmap_authoritative = result.classmap_authoritative
        return loader

    # =========================================================================
    # Registration
    # =========================================================================

    def add_class_map(self, class_map: Dict[str, str]) -> None:
        self.class_map.update(class_map)

    def add(self, prefix: str, paths: List[str]) -> None:
        """Register PSR-0 directories for a prefix (empty prefix = fallback)."""
        paths = [p.rstrip("/") for p in paths]
        if not prefix:
            self.fallback_dirs_psr0.extend(paths)
        else:
            self.prefixes_psr0.setdefault(prefix, []).extend(paths)

    def add_psr4(self, prefix: str, paths: List[str]) -> None:
        """
        Register PSR-4 directories for a prefix (empty prefix = fallback).

        Raises:
            ValueError: If a non-empty prefix does not end with ``\\``.
        """
        paths = [p.rstrip("/") for p in paths]
        if not prefix:
            self.fallback_dirs_psr4.extend(paths)
            return
        if not prefix.endswith("\\"):
            raise ValueError("A non-empty PSR-4 prefix must end with a namespace separator.")
        self.prefix_dirs_psr4.setdefault(prefix, []).extend(paths)

    # =========================================================================
    # Lookup
    # =========================================================================

    def find_file(self, class_name: str) -> Optional[str]:
        """Return the file defining a class, or ``None`` if none is found."""
        class_name = class_name.lstrip("\\")
        if class_name in self.class_map:
            return self.class_map[class_name]
        if self.classmap_authoritative or class_name in self._missing:
            return None

        found = self._find_file_with_extension(class_name, PHP_EXTENSION)
        if found is None:
            found = self._find_with_target_dir(class_name)
        if found is None:
            # remember misses for repeated lookups
            logger.debug(f"No file found for class {class_name}")
            self._missing.add(class_name)
        return found

    def _find_file_with_extension(self, class_name: str, ext: str) -> Optional[str]:
        logical_psr4 = class_name.replace("\\", "/") + ext

        # PSR-4 lookup, longest namespace first
        sub_path = class_name
        while "\\" in sub_path:
            last = sub_path.rfind("\\")
            sub_path = sub_path[:last]
            dirs = self.prefix_dirs_psr4.get(sub_path + "\\")
            if dirs:
                path_end = "/" + logical_psr4[last + 1:]
                for directory in dirs:
                    candidate = directory + path_end
                    if os.path.isfile(candidate):
                        return candidate

        for directory in self.fallback_dirs_psr4:
            candidate = f"{directory}/{logical_psr4}"
            if os.path.isfile(candidate):
                return candidate

        # PSR-0 lookup: underscores in the short class name are directories
        pos = class_name.rfind("\\")
        if pos != -1:
            logical_psr0 = logical_psr4[: pos + 1] + logical_psr4[pos + 1:].replace("_", "/")
        else:
            logical_psr0 = class_name.replace("_", "/") + ext

        for prefix, dirs in self.prefixes_psr0.items():
            if class_name.startswith(prefix):
                for directory in dirs:
                    candidate = f"{directory}/{logical_psr0}"
                    if os.path.isfile(candidate):
                        return candidate

        for directory in self.fallback_dirs_psr0:
            candidate = f"{directory}/{logical_psr0}"
            if os.path.isfile(candidate):
                return candidate

        for directory in self.include_paths:
            candidate = f"{directory}/{logical_psr0}"
            if os.path.isfile(candidate):
                return candidate

        return None

    def _find_with_target_dir(self, class_name: str) -> Optional[str]:
        target = self.target_dir_loader
        if target is None:
            return None
        for prefix in target.prefixes:
            if not class_name.startswith(prefix):
                continue
            relative = "/".join(class_name.split("\\")[target.levels:])
            candidate = f"{target.base_path}/{relative}{PHP_EXTENSION}"
            return candidate if os.path.isfile(candidate) else None
        return None
