"""
Class Map Accumulator.

Collects ``class name -> file path`` pairs across repeated scans. The first
path recorded for a class is authoritative; later differing paths are kept
as ambiguity records for reporting. Which path is "first" is decided by the
order in which the caller scans, never by sorting paths.
"""

import logging
from typing import Dict, List, Optional, Pattern

from ..config import DUPLICATES_FILTER
from ..core.types import AmbiguousClass, PsrViolation

logger = logging.getLogger(__name__)


class ClassMap:
    """Ordered class map with ambiguity and PSR violation tracking."""

    def __init__(self):
        self._map: Dict[str, str] = {}
        self._ambiguous: Dict[str, List[str]] = {}
        self._psr_violations: List[PsrViolation] = []

    def add_class(self, class_name: str, path: str) -> None:
        """Set the path of a class unconditionally."""
        self._map[class_name] = path

    def add(self, class_name: str, path: str) -> bool:
        """
        Record a class found during a scan.

        Returns:
            True if the class was added, False if it was already mapped.
            A different path for an already-mapped class is recorded as
            an ambiguity.
        """
        existing = self._map.get(class_name)
        if existing is None:
            self._map[class_name] = path
            return True
        if existing != path:
            self.add_ambiguous_class(class_name, path)
        return False

    def add_ambiguous_class(self, class_name: str, path: str) -> None:
        self._ambiguous.setdefault(class_name, []).append(path)

    def add_synthetic_class(self, class_name: str, path: str) -> None:
        """Inject a well-known class that overrides anything scanned."""
        previous = self._map.get(class_name)
        if previous is not None and previous != path:
            logger.debug(f"Synthetic class {class_name} replaces scanned {previous}")
        self._map[class_name] = path

    def add_psr_violation(self, violation: PsrViolation) -> None:
        self._psr_violations.append(violation)

    def has_class(self, class_name: str) -> bool:
        return class_name in self._map

    def get_class_path(self, class_name: str) -> str:
        """
        Return the authoritative path of a class.

        Raises:
            KeyError: If the class is not mapped.
        """
        try:
            return self._map[class_name]
        except KeyError:
            raise KeyError(f"Class {class_name} is not present in the map") from None

    def get_map(self) -> Dict[str, str]:
        """Return a copy of the map sorted by class name."""
        return dict(sorted(self._map.items()))

    def sort(self) -> None:
        self._map = dict(sorted(self._map.items()))

    def ambiguous_classes(
        self, duplicates_filter: Optional[Pattern] = DUPLICATES_FILTER
    ) -> List[AmbiguousClass]:
        """
        List classes found in more than one file.

        Args:
            duplicates_filter: Candidate paths matching this regex are left
                out of the report. ``None`` reports every candidate.
        """
        records: List[AmbiguousClass] = []
        for class_name, paths in self._ambiguous.items():
            if duplicates_filter is not None:
                paths = [p for p in paths if not duplicates_filter.search(p.replace("\\", "/"))]
            if paths:
                records.append(
                    AmbiguousClass(
                        class_name=class_name,
                        winning_path=self._map[class_name],
                        other_paths=list(paths),
                    )
                )
        return records

    @property
    def psr_violations(self) -> List[PsrViolation]:
        return list(self._psr_violations)

    def __len__(self) -> int:
        return len(self._map)

    def __contains__(self, class_name: object) -> bool:
        return class_name in self._map

