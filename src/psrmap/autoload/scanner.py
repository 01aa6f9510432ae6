"""
Directory Scanner.

Walks files, directories and glob patterns looking for PHP class
declarations, feeding what it finds into a shared :class:`ClassMap`.

A set of already-scanned real paths can be shared between scanners (and
between successive rules of one generation pass) so that a file claimed by
one rule is not re-scanned, and re-reported, by a broader rule later.
"""

import glob
import logging
import os
from pathlib import Path
from typing import Iterator, Optional, Pattern, Set, Tuple, Union

from ..config import DEFAULT_EXTENSIONS, has_source_extension, is_ignored_directory
from ..core.errors import ScanError
from ..core.types import AutoloadType, PSR_TYPES
from ..parsing.extractor import find_classes
from .classmap import ClassMap
from .psr_filter import filter_by_namespace

logger = logging.getLogger(__name__)

GLOB_CHARS = ("*", "?", "[")


def normalize_path(path: Union[str, Path]) -> str:
    """Make a path absolute and ``/``-separated without resolving symlinks."""
    return os.path.normpath(os.path.abspath(path)).replace("\\", "/")


def _walk_sources(directory: Path, extensions: Tuple[str, ...]) -> Iterator[Path]:
    """Yield source files below a directory, following symlinks, in sorted order."""
    visited: Set[str] = set()

    for dirpath, dirnames, filenames in directory.walk(follow_symlinks=True):
        real = os.path.realpath(dirpath)
        if real in visited:
            # symlink loop or a tree reachable twice
            dirnames.clear()
            continue
        visited.add(real)

        dirnames[:] = sorted(d for d in dirnames if not is_ignored_directory(d))

        for name in sorted(filenames):
            if name.startswith(".") or not has_source_extension(name, extensions):
                continue
            candidate = dirpath / name
            if candidate.is_file():
                yield candidate


class ClassMapGenerator:
    """
    Scans paths for classes and accumulates them into a class map.

    Args:
        extensions: File extensions to consider, without the leading dot.
        scanned_files: Shared set of real paths already claimed. ``None``
            disables memoisation entirely.
    """

    def __init__(
        self,
        extensions: Tuple[str, ...] = DEFAULT_EXTENSIONS,
        scanned_files: Optional[Set[str]] = None,
    ):
        self.extensions = tuple(extensions)
        self.scanned_files = scanned_files
        self._class_map = ClassMap()

    @property
    def class_map(self) -> ClassMap:
        return self._class_map

    def _expand(self, path: str) -> Iterator[Path]:
        candidate = Path(path)
        if candidate.is_file():
            yield candidate
        elif candidate.is_dir():
            yield from _walk_sources(candidate, self.extensions)
        elif any(char in path for char in GLOB_CHARS):
            for match in sorted(glob.glob(path, recursive=True)):
                match_path = Path(match)
                if match_path.is_dir():
                    yield from _walk_sources(match_path, self.extensions)
                elif match_path.is_file():
                    yield match_path
        else:
            raise ScanError(path)

    def scan_paths(
        self,
        path: Union[str, Path],
        excluded: Optional[Pattern] = None,
        autoload_type: str = AutoloadType.CLASSMAP,
        namespace: Optional[str] = None,
    ) -> None:
        """
        Scan a file, directory or glob and record the classes found.

        Args:
            path: What to scan.
            excluded: Compiled regex; matching files are skipped.
            autoload_type: ``classmap``, ``psr-0`` or ``psr-4``.
            namespace: Base namespace of a PSR rule.

        Raises:
            ValueError: Unknown autoload type, or a PSR scan without a
                namespace.
            ScanError: The path is neither a file, a directory nor a glob.
        """
        if autoload_type not in (AutoloadType.CLASSMAP, *PSR_TYPES):
            raise ValueError(f'Unknown autoload type "{autoload_type}"')
        if autoload_type != AutoloadType.CLASSMAP and namespace is None:
            raise ValueError(f"A namespace is required to scan with {autoload_type} rules")

        path = str(path)
        base_path = normalize_path(path)

        for file in self._expand(path):
            if not has_source_extension(file.name, self.extensions):
                continue

            file_path = normalize_path(file)
            real_path = os.path.realpath(file_path).replace("\\", "/")

            if self.scanned_files is not None and real_path in self.scanned_files:
                continue

            # the real path catches symlinked files, the raw path symlinked directories
            if excluded is not None and (excluded.search(real_path) or excluded.search(file_path)):
                logger.debug(f"Excluded from class map: {file_path}")
                continue

            classes = find_classes(file_path)

            if autoload_type != AutoloadType.CLASSMAP:
                result = filter_by_namespace(classes, file_path, namespace, autoload_type, base_path)
                for violation in result.violations:
                    self._class_map.add_psr_violation(violation)
                classes = result.valid
                # an invalid file may still be claimed by a later rule
                if classes and self.scanned_files is not None:
                    self.scanned_files.add(real_path)
            elif self.scanned_files is not None:
                self.scanned_files.add(real_path)

            for class_name in classes:
                self._class_map.add(class_name, file_path)


def create_map(path: Union[str, Path], excluded: Optional[Pattern] = None) -> dict:
    """Scan one path and return its sorted class map."""
    generator = ClassMapGenerator()
    generator.scan_paths(path, excluded)
    return generator.class_map.get_map()
