"""
Autoload Generator.

Drives one generation pass end to end:

1. Validate every package and pair it with its install path.
2. Aggregate the autoload rules of the whole package graph.
3. Scan classmap rules, then (optionally) the PSR directories, into one
   shared class map with a shared set of already-scanned files.
4. Inject the runtime support class and sort the result.

Nothing is written to disk; the caller receives an :class:`AutoloadResult`.
"""

import logging
import os
import re
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

from ..config import (
    DEFAULT_EXTENSIONS,
    DEFAULT_VENDOR_DIR,
    RUNTIME_CLASS_NAME,
    RUNTIME_CLASS_PATH,
    has_source_extension,
)
from ..core.errors import ScanError
from ..core.types import (
    AutoloadResult,
    AutoloadRules,
    AutoloadType,
    Package,
    PackageMapEntry,
    TargetDirLoader,
)
from .rules import AutoloadRuleAggregator
from .scanner import GLOB_CHARS, ClassMapGenerator, normalize_path

logger = logging.getLogger(__name__)


@dataclass
class GeneratorConfig:
    """
    Options for one generation pass.

    Attributes:
        dev_mode: Include the root's autoload-dev rules and keep dev packages.
        scan_psr_packages: Scan PSR-0/PSR-4 directories into the class map.
        classmap_authoritative: The class map is the only lookup; implies
            ``scan_psr_packages``.
        extensions: Source file extensions to scan.
        vendor_dir: Vendor directory, relative to the project root or absolute.
        dev_package_names: Names of dev-only packages. ``None`` falls back to
            a requirement reachability walk when not in dev mode.
        register_runtime_class: Map the runtime support class into the vendor dir.
    """

    dev_mode: bool = False
    scan_psr_packages: bool = True
    classmap_authoritative: bool = False
    extensions: Tuple[str, ...] = DEFAULT_EXTENSIONS
    vendor_dir: str = DEFAULT_VENDOR_DIR
    dev_package_names: Optional[List[str]] = None
    register_runtime_class: bool = False

    @classmethod
    def from_manifest(cls, manifest: Dict[str, Any], **overrides: Any) -> "GeneratorConfig":
        """Build a config from the ``config`` block of a root manifest."""
        settings = manifest.get("config") or {}
        values: Dict[str, Any] = {
            "vendor_dir": settings.get("vendor-dir", DEFAULT_VENDOR_DIR),
            "scan_psr_packages": bool(settings.get("optimize-autoloader", True)),
            "classmap_authoritative": bool(settings.get("classmap-authoritative", False)),
        }
        values.update(overrides)
        return cls(**values)

    @property
    def filtered_dev_packages(self) -> Union[bool, List[str]]:
        if self.dev_mode:
            return False
        return self.dev_package_names or True


@dataclass
class GenerationStats:
    """Counters collected during a pass, for the summary log line."""

    packages: int = 0
    classes: int = 0
    paths_scanned: int = 0
    duration_ms: float = 0.0
    skipped_paths: List[str] = field(default_factory=list)


class AutoloadGenerator:
    """Computes class maps and merged autoload rules for a package graph."""

    def __init__(self, config: Optional[GeneratorConfig] = None):
        self.config = config or GeneratorConfig()
        self.aggregator = AutoloadRuleAggregator(dev_mode=self.config.dev_mode)
        self.stats = GenerationStats()

    def build_package_map(
        self, root: Package, packages: List[PackageMapEntry], base_path: str
    ) -> List[PackageMapEntry]:
        """
        Validate every package and put the root first.

        Raises:
            ConfigurationError: If any package declares unusable rules.
        """
        self.aggregator.validate_package(root)
        package_map = [PackageMapEntry(root, normalize_path(base_path))]

        for entry in packages:
            self.aggregator.validate_package(entry.package)
            install_path = entry.install_path
            if install_path is not None:
                install_path = normalize_path(os.path.join(base_path, install_path))
            package_map.append(PackageMapEntry(entry.package, install_path))

        return package_map

    def generate(self, root: Package, packages: List[PackageMapEntry], base_path: str) -> AutoloadResult:
        """
        Run a full generation pass.

        Args:
            root: The root package.
            packages: Installed packages with their install paths.
            base_path: Project root directory; the root package's install path.

        Raises:
            ConfigurationError: A package declares unusable rules.
            ScanError: An explicitly listed classmap file is missing.
            SourceReadError: A source file cannot be read.
        """
        start = time.perf_counter()
        base_path = normalize_path(base_path)
        self.stats = GenerationStats()

        package_map = self.build_package_map(root, packages, base_path)
        self.stats.packages = len(package_map)

        rules = self.aggregator.parse_autoloads(
            package_map, root, self.config.filtered_dev_packages
        )

        generator = ClassMapGenerator(self.config.extensions, scanned_files=set())
        self._scan_classmap_rules(generator, rules)
        if self.config.scan_psr_packages or self.config.classmap_authoritative:
            self._scan_psr_rules(generator, rules, base_path)

        class_map = generator.class_map
        ambiguous = class_map.ambiguous_classes()
        for record in ambiguous:
            logger.warning(record.message)
        violations = class_map.psr_violations
        for violation in violations:
            logger.warning(violation.message)
        duplicates = self.aggregator.find_duplicate_files(rules.files)
        for duplicate in duplicates:
            logger.warning(duplicate.message)

        if self.config.register_runtime_class:
            vendor_path = normalize_path(os.path.join(base_path, self.config.vendor_dir))
            class_map.add_synthetic_class(
                RUNTIME_CLASS_NAME, f"{vendor_path}/{RUNTIME_CLASS_PATH.as_posix()}"
            )
        class_map.sort()

        self.stats.classes = len(class_map)
        self.stats.duration_ms = (time.perf_counter() - start) * 1000
        logger.info(
            f"Generated autoload rules for {self.stats.packages} packages: "
            f"{self.stats.classes} classes from {self.stats.paths_scanned} paths "
            f"in {self.stats.duration_ms:.1f}ms"
        )

        return AutoloadResult(
            rules=rules,
            class_map=class_map.get_map(),
            psr_violations=violations,
            ambiguous_classes=ambiguous,
            duplicate_files=duplicates,
            include_paths=self.collect_include_paths(package_map, root),
            target_dir_loader=self.target_dir_loader(root, base_path),
            classmap_authoritative=self.config.classmap_authoritative,
        )

    # =========================================================================
    # Scanning
    # =========================================================================

    def _scan_classmap_rules(self, generator: ClassMapGenerator, rules: AutoloadRules) -> None:
        for path in rules.classmap:
            if not os.path.exists(path) and not any(char in path for char in GLOB_CHARS):
                if has_source_extension(path, self.config.extensions):
                    raise ScanError(path)
                # optional directories may legitimately be absent
                logger.debug(f"Skipping missing classmap directory {path}")
                self.stats.skipped_paths.append(path)
                continue

            excluded = self.aggregator.build_exclusion_regex(path, rules.exclude_from_classmap)
            generator.scan_paths(path, excluded)
            self.stats.paths_scanned += 1

    def _scan_psr_rules(self, generator: ClassMapGenerator, rules: AutoloadRules, base_path: str) -> None:
        # more specific namespaces claim their files first
        groups: Dict[str, List[Tuple[AutoloadType, List[str]]]] = {}
        for autoload_type, mapping in ((AutoloadType.PSR_4, rules.psr_4), (AutoloadType.PSR_0, rules.psr_0)):
            for namespace, paths in mapping.items():
                groups.setdefault(namespace, []).append((autoload_type, paths))

        vendor_path = os.path.realpath(os.path.join(base_path, self.config.vendor_dir)).replace("\\", "/")

        for namespace in sorted(groups, reverse=True):
            for autoload_type, paths in groups[namespace]:
                for directory in paths:
                    directory = normalize_path(os.path.join(base_path, directory))
                    if not os.path.isdir(directory):
                        self.stats.skipped_paths.append(directory)
                        continue
                    patterns = rules.exclude_from_classmap
                    # a base dir enclosing the vendor dir must not read installed packages
                    real_directory = os.path.realpath(directory).replace("\\", "/")
                    if vendor_path.startswith(real_directory.rstrip("/") + "/"):
                        patterns = [*patterns, re.escape(vendor_path) + "/"]
                    excluded = self.aggregator.build_exclusion_regex(directory, patterns)
                    generator.scan_paths(directory, excluded, autoload_type, namespace)
                    self.stats.paths_scanned += 1

    # =========================================================================
    # Legacy loaders
    # =========================================================================

    @staticmethod
    def collect_include_paths(package_map: List[PackageMapEntry], root: Package) -> List[str]:
        """Resolve every package's ``include-path`` entries against its install path."""
        include_paths: List[str] = []
        for entry in package_map:
            package, install_path = entry.package, entry.install_path
            if install_path is None:
                continue
            if package.target_dir and package is not root:
                suffix = "/" + package.target_dir
                if install_path.endswith(suffix):
                    install_path = install_path[: -len(suffix)]
            for include_path in package.include_paths:
                include_path = include_path.strip("/")
                include_paths.append(f"{install_path}/{include_path}" if install_path else include_path)
        return include_paths

    @staticmethod
    def target_dir_loader(root: Package, base_path: str) -> Optional[TargetDirLoader]:
        """Describe the fallback loader needed when the root has a target-dir."""
        if not root.target_dir or not root.autoload.psr_0:
            return None
        levels = len(os.path.normpath(root.target_dir.replace("\\", "/")).split("/"))
        return TargetDirLoader(
            prefixes=list(root.autoload.psr_0),
            levels=levels,
            base_path=base_path,
        )


def generate(root: Package, packages: List[PackageMapEntry], base_path: str, **options: Any) -> AutoloadResult:
    """Convenience wrapper running a pass with a fresh generator."""
    return AutoloadGenerator(GeneratorConfig(**options)).generate(root, packages, base_path)
