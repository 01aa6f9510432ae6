"""
Autoload Rule Aggregation.

Merges the autoload declarations of every package into one set of rules,
resolving precedence between packages:

- psr-0, psr-4 and classmap rules are collected root first, then
  dependents before their dependencies, so the root package can override
  anything a dependency declares.
- files and exclude-from-classmap rules are collected dependencies first
  and root last, which is the order files must be included in.

Each addressing style has its own handler; the iteration over the package
map (skipping uninstalled packages, merging the root's dev rules, target-dir
rewriting) is shared.
"""

import hashlib
import logging
import os
import re
from collections import defaultdict
from typing import Callable, Dict, Iterator, List, Optional, Pattern, Tuple, Union

from ..core.errors import ConfigurationError
from ..core.package_sorter import reachable_packages, sort_packages
from ..core.types import (
    AutoloadRules,
    AutoloadType,
    DuplicateFileWarning,
    Package,
    PackageMapEntry,
    PSR_TYPES,
)

logger = logging.getLogger(__name__)

# Rule types whose entries are paths that may need target-dir rewriting
PATH_TYPES = (AutoloadType.CLASSMAP, AutoloadType.FILES, AutoloadType.EXCLUDE_FROM_CLASSMAP)

# Leading "./" and "../" segments of an escaped exclude pattern
UPDIR_PREFIX = re.compile(r"^((?:(?:\\\.){1,2}/)+)")

# Literal prefix of an escaped regex, up to the first unescaped metacharacter
LITERAL_PREFIX = re.compile(r"^((?:[^.+*?\[\]^$(){}=!<>|:\\#\-]|\\.)*).*", re.DOTALL)

RuleAccumulator = Union[Dict[str, List[str]], Dict[str, str], List[str]]
RuleHandler = Callable[[RuleAccumulator, Package, str, Optional[str], str], None]


def get_file_identifier(package: Package, path: str) -> str:
    """Stable identifier of a ``files`` entry, independent of file contents."""
    return hashlib.md5(f"{package.name}:{path}".encode("utf-8")).hexdigest()


def _is_readable(install_path: str, path: str) -> bool:
    return os.access(f"{install_path}/{path}", os.R_OK)


def _strip_target_dir(install_path: str, target_dir: str) -> str:
    suffix = "/" + target_dir
    if install_path.endswith(suffix):
        return install_path[: -len(suffix)]
    logger.debug(f"Install path {install_path} does not end with target-dir {target_dir}")
    return install_path


def _target_dir_pattern(target_dir: str) -> str:
    parts = re.split(r"[\\/]", target_dir)
    return r"[\\/]".join(re.escape(part) for part in parts)


class AutoloadRuleAggregator:
    """
    Computes merged autoload rules for a package graph.

    Args:
        dev_mode: Merge the root package's ``autoload-dev`` into its
            ``autoload`` rules.
    """

    def __init__(self, dev_mode: bool = False):
        self.dev_mode = dev_mode
        self._handlers: Dict[AutoloadType, RuleHandler] = {
            AutoloadType.PSR_0: self._add_namespaced,
            AutoloadType.PSR_4: self._add_namespaced,
            AutoloadType.CLASSMAP: self._add_path,
            AutoloadType.FILES: self._add_file,
            AutoloadType.EXCLUDE_FROM_CLASSMAP: self._add_exclude,
        }

    # =========================================================================
    # Validation
    # =========================================================================

    @staticmethod
    def validate_package(package: Package) -> None:
        """
        Reject autoload rules that cannot work.

        Raises:
            ConfigurationError: psr-4 combined with target-dir, or a psr-4
                namespace that does not end with a namespace separator.
        """
        psr_4 = package.autoload.psr_4
        if psr_4 and package.target_dir is not None:
            raise ConfigurationError(
                package.pretty_name,
                "PSR-4 autoloading is incompatible with the target-dir property, "
                f"remove the target-dir in package '{package.pretty_name}'.",
            )
        for namespace in psr_4:
            if namespace and not namespace.endswith("\\"):
                raise ConfigurationError(
                    package.pretty_name,
                    f"psr-4 namespaces must end with a namespace separator, "
                    f"'{namespace}' does not, use '{namespace}\\'.",
                )

    # =========================================================================
    # Aggregation
    # =========================================================================

    def parse_autoloads(
        self,
        package_map: List[PackageMapEntry],
        root: Package,
        filtered_dev_packages: Union[bool, List[str]] = False,
    ) -> AutoloadRules:
        """
        Merge the autoload rules of every package in the map.

        Args:
            package_map: Packages with install paths, root package first.
            root: The root package.
            filtered_dev_packages: A list of dev package names to leave out,
                ``True`` to keep only packages reachable from the root's
                non-dev requirements, or ``False`` to keep everything.
        """
        if not package_map:
            return AutoloadRules()

        root_entry, dependencies = package_map[0], list(package_map[1:])

        if isinstance(filtered_dev_packages, list):
            excluded = {name.lower() for name in filtered_dev_packages}
            dependencies = [e for e in dependencies if e.package.name not in excluded]
        elif filtered_dev_packages:
            required = reachable_packages(root, [e.package for e in dependencies])
            dependencies = [
                e for e in dependencies if any(name in required for name in e.package.names)
            ]

        by_package = {id(e.package): e for e in dependencies}
        ordered = sort_packages([e.package for e in dependencies])
        sorted_map = [by_package[id(p)] for p in ordered] + [root_entry]
        reverse_sorted_map = list(reversed(sorted_map))

        psr_0 = self.parse_autoloads_type(reverse_sorted_map, AutoloadType.PSR_0, root)
        psr_4 = self.parse_autoloads_type(reverse_sorted_map, AutoloadType.PSR_4, root)
        classmap = self.parse_autoloads_type(reverse_sorted_map, AutoloadType.CLASSMAP, root)
        files = self.parse_autoloads_type(sorted_map, AutoloadType.FILES, root)
        exclude = self.parse_autoloads_type(sorted_map, AutoloadType.EXCLUDE_FROM_CLASSMAP, root)

        return AutoloadRules(
            psr_0=dict(sorted(psr_0.items(), reverse=True)),
            psr_4=dict(sorted(psr_4.items(), reverse=True)),
            classmap=classmap,
            files=files,
            exclude_from_classmap=exclude,
        )

    def parse_autoloads_type(
        self, package_map: List[PackageMapEntry], autoload_type: AutoloadType, root: Package
    ) -> RuleAccumulator:
        """Collect one addressing style across the package map, in map order."""
        accumulator: RuleAccumulator = (
            {} if autoload_type in (*PSR_TYPES, AutoloadType.FILES) else []
        )
        handler = self._handlers[autoload_type]
        for package, install_path, namespace, path in self._iter_rules(package_map, autoload_type, root):
            handler(accumulator, package, install_path, namespace, path)
        return accumulator

    def _iter_rules(
        self, package_map: List[PackageMapEntry], autoload_type: AutoloadType, root: Package
    ) -> Iterator[Tuple[Package, str, Optional[str], str]]:
        """Yield ``(package, install_path, namespace, path)`` for every declared entry."""
        for entry in package_map:
            package, install_path = entry.package, entry.install_path
            # packages that are not installed cannot autoload anything
            if install_path is None:
                continue

            is_root = package is root
            rules = package.autoload
            if self.dev_mode and is_root:
                rules = rules.merged_with(package.dev_autoload)

            declared = rules.get(autoload_type)
            if not declared:
                continue

            if package.target_dir and not is_root:
                install_path = _strip_target_dir(install_path, package.target_dir)

            if isinstance(declared, dict):
                items = [(namespace.lstrip("\\"), paths) for namespace, paths in declared.items()]
            else:
                items = [(None, declared)]

            for namespace, paths in items:
                for path in paths:
                    if (
                        autoload_type in PATH_TYPES
                        and package.target_dir
                        and not _is_readable(install_path, path)
                    ):
                        path = self._rewrite_target_dir(package, path, is_root)
                    yield package, install_path, namespace, path

    @staticmethod
    def _rewrite_target_dir(package: Package, path: str, is_root: bool) -> str:
        if is_root:
            # the root is not installed into its target-dir, drop it
            pattern = "^" + _target_dir_pattern(package.target_dir)
            return re.sub(pattern, "", path.lstrip("\\/")).lstrip("\\/")
        return f"{package.target_dir}/{path}"

    @staticmethod
    def _relative_path(install_path: str, path: str) -> str:
        if not install_path:
            return path or "."
        return f"{install_path}/{path}"

    # =========================================================================
    # Per-type handlers
    # =========================================================================

    def _add_namespaced(self, accumulator, package, install_path, namespace, path) -> None:
        accumulator.setdefault(namespace, []).append(self._relative_path(install_path, path))

    def _add_path(self, accumulator, package, install_path, namespace, path) -> None:
        accumulator.append(self._relative_path(install_path, path))

    def _add_file(self, accumulator, package, install_path, namespace, path) -> None:
        accumulator[get_file_identifier(package, path)] = self._relative_path(install_path, path)

    def _add_exclude(self, accumulator, package, install_path, namespace, path) -> None:
        pattern = self.exclude_pattern(install_path, path)
        if pattern is None:
            logger.debug(f"Dropping exclude-from-classmap '{path}' of {package.pretty_name}, base does not exist")
            return
        accumulator.append(pattern)

    @staticmethod
    def exclude_pattern(install_path: str, path: str) -> Optional[str]:
        """
        Turn an exclude-from-classmap entry into a regex source.

        ``**`` matches across directories, ``*`` within one segment. Leading
        ``./`` and ``../`` segments move the base directory. The result is
        anchored at the base's real path and must end at a segment boundary.

        Returns:
            The regex source, or ``None`` if the base directory does not exist.
        """
        path = path.replace("\\", "/").strip("/")
        path = re.sub("/+", "/", re.escape(path))
        path = path.replace(r"\*\*", ".+?").replace(r"\*", "[^/]+?")

        updir = ""
        match = UPDIR_PREFIX.match(path)
        if match:
            updir = match.group(1).replace("\\.", ".")
            path = path[match.end():]

        if not install_path:
            install_path = os.getcwd().replace("\\", "/")

        base = f"{install_path}/{updir}"
        if not os.path.exists(base):
            return None
        resolved = os.path.realpath(base).replace("\\", "/")
        return f"{re.escape(resolved)}/{path}($|/)"

    # =========================================================================
    # Helpers used while scanning
    # =========================================================================

    @staticmethod
    def build_exclusion_regex(directory: str, excluded: List[str]) -> Optional[Pattern]:
        """
        Compile the exclude patterns relevant to one scanned directory.

        Patterns whose literal prefix neither contains nor is contained in
        the directory's real path cannot match anything below it and are
        left out.
        """
        if not excluded:
            return None

        relevant = list(excluded)
        if os.path.exists(directory):
            dir_match = re.escape(os.path.realpath(directory).replace("\\", "/"))
            relevant = []
            for pattern in excluded:
                prefix = LITERAL_PREFIX.sub(r"\1", pattern, count=1)
                if pattern and (prefix.startswith(dir_match) or dir_match.startswith(prefix)):
                    relevant.append(pattern)

        if not relevant:
            return None
        return re.compile("(" + "|".join(relevant) + ")")

    @staticmethod
    def find_duplicate_files(files: Dict[str, str]) -> List[DuplicateFileWarning]:
        """Report file paths registered under more than one identifier."""
        by_path: Dict[str, List[str]] = defaultdict(list)
        for identifier, path in files.items():
            normalized = os.path.realpath(path) if os.path.exists(path) else os.path.normpath(path)
            by_path[normalized.replace("\\", "/")].append(identifier)

        return [
            DuplicateFileWarning(
                path=path,
                identifiers=identifiers,
                aliases=[files[identifier] for identifier in identifiers],
            )
            for path, identifiers in by_path.items()
            if len(identifiers) > 1
        ]
