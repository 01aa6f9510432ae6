"""
Core type definitions for psrmap.

Package metadata arrives from manifests, so it is modelled with pydantic to
validate and normalise the loosely-typed JSON (strings where lists are
expected, empty JSON arrays standing in for empty objects). Everything the
engine produces is a plain dataclass.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import StrEnum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class AutoloadType(StrEnum):
    """The addressing styles a package can declare under ``autoload``."""

    PSR_0 = "psr-0"
    PSR_4 = "psr-4"
    CLASSMAP = "classmap"
    FILES = "files"
    EXCLUDE_FROM_CLASSMAP = "exclude-from-classmap"


PSR_TYPES = (AutoloadType.PSR_0, AutoloadType.PSR_4)


def _as_list(value: Any) -> Any:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    return value


def _as_mapping(value: Any) -> Any:
    # PHP serialises an empty object as an empty array
    if value is None or value == []:
        return {}
    return value


class AutoloadRuleSet(BaseModel):
    """
    The ``autoload`` (or ``autoload-dev``) block of a package manifest.

    PSR-0/PSR-4 map a namespace prefix to an ordered list of base
    directories; a single string is accepted and wrapped in a list.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    psr_0: Dict[str, List[str]] = Field(default_factory=dict, alias="psr-0")
    psr_4: Dict[str, List[str]] = Field(default_factory=dict, alias="psr-4")
    classmap: List[str] = Field(default_factory=list)
    files: List[str] = Field(default_factory=list)
    exclude_from_classmap: List[str] = Field(default_factory=list, alias="exclude-from-classmap")

    @field_validator("psr_0", "psr_4", mode="before")
    @classmethod
    def _normalize_namespaces(cls, value: Any) -> Any:
        value = _as_mapping(value)
        if isinstance(value, dict):
            return {namespace: _as_list(paths) for namespace, paths in value.items()}
        return value

    @field_validator("classmap", "files", "exclude_from_classmap", mode="before")
    @classmethod
    def _normalize_paths(cls, value: Any) -> Any:
        return _as_list(value)

    def get(self, autoload_type: AutoloadType) -> Union[Dict[str, List[str]], List[str]]:
        """Return the raw rules declared for one addressing style."""
        return getattr(self, autoload_type.value.replace("-", "_"))

    def merged_with(self, other: "AutoloadRuleSet") -> "AutoloadRuleSet":
        """
        Recursively merge another rule set into a copy of this one.

        Namespace keys present in both sets get their directory lists
        concatenated; path lists are appended.
        """
        psr_0 = {ns: list(paths) for ns, paths in self.psr_0.items()}
        for ns, paths in other.psr_0.items():
            psr_0.setdefault(ns, []).extend(paths)
        psr_4 = {ns: list(paths) for ns, paths in self.psr_4.items()}
        for ns, paths in other.psr_4.items():
            psr_4.setdefault(ns, []).extend(paths)

        return AutoloadRuleSet(
            psr_0=psr_0,
            psr_4=psr_4,
            classmap=self.classmap + other.classmap,
            files=self.files + other.files,
            exclude_from_classmap=self.exclude_from_classmap + other.exclude_from_classmap,
        )


class Package(BaseModel):
    """
    A resolved package as seen by the autoload engine.

    ``name`` is the lowercase compare key; the spelling from the manifest is
    kept in ``pretty_name``. Link maps (require, provide, replace) are keyed
    by lowercase target name.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str
    pretty_name: str = ""
    version: str = "dev-main"
    type: str = "library"
    target_dir: Optional[str] = Field(default=None, alias="target-dir")
    autoload: AutoloadRuleSet = Field(default_factory=AutoloadRuleSet)
    dev_autoload: AutoloadRuleSet = Field(default_factory=AutoloadRuleSet, alias="autoload-dev")
    requires: Dict[str, str] = Field(default_factory=dict, alias="require")
    dev_requires: Dict[str, str] = Field(default_factory=dict, alias="require-dev")
    provides: Dict[str, str] = Field(default_factory=dict, alias="provide")
    replaces: Dict[str, str] = Field(default_factory=dict, alias="replace")
    include_paths: List[str] = Field(default_factory=list, alias="include-path")

    @model_validator(mode="before")
    @classmethod
    def _split_names(cls, data: Any) -> Any:
        if isinstance(data, dict) and isinstance(data.get("name"), str):
            data = dict(data)
            data.setdefault("pretty_name", data["name"])
            data["name"] = data["name"].lower()
        return data

    @field_validator("autoload", "dev_autoload", mode="before")
    @classmethod
    def _normalize_autoload(cls, value: Any) -> Any:
        return _as_mapping(value)

    @field_validator("requires", "dev_requires", "provides", "replaces", mode="before")
    @classmethod
    def _normalize_links(cls, value: Any) -> Any:
        value = _as_mapping(value)
        if isinstance(value, dict):
            return {str(target).lower(): constraint for target, constraint in value.items()}
        return value

    @field_validator("target_dir", mode="before")
    @classmethod
    def _empty_target_dir(cls, value: Any) -> Any:
        return value or None

    @property
    def names(self) -> List[str]:
        """All names this package answers to (own name, provides, replaces)."""
        return [self.name, *self.provides.keys(), *self.replaces.keys()]

    @property
    def is_metapackage(self) -> bool:
        return self.type == "metapackage"

    def __repr__(self) -> str:
        return f"Package({self.pretty_name!r}, {self.version!r})"


# =============================================================================
# Engine inputs & outputs
# =============================================================================


@dataclass(frozen=True)
class PackageMapEntry:
    """
    A package paired with its install path.

    ``install_path`` is ``None`` for packages that are not installed
    (metapackages, failed installs); those cannot autoload anything.
    """

    package: Package
    install_path: Optional[str]


@dataclass
class PsrViolation:
    """A class whose file location does not match its PSR rule."""

    path: str
    class_name: str
    message: str


@dataclass
class AmbiguousClass:
    """
    A class name found in more than one file.

    Attributes:
        class_name: The fully-qualified class name.
        winning_path: The path kept in the class map (first scanned).
        other_paths: Every other path the class was found in, in scan order.
    """

    class_name: str
    winning_path: str
    other_paths: List[str] = field(default_factory=list)

    @property
    def message(self) -> str:
        others = '", "'.join(self.other_paths)
        if len(self.other_paths) > 1:
            return (
                f'Ambiguous class resolution, "{self.class_name}" was found '
                f'{len(self.other_paths) + 1}x: in "{self.winning_path}" and "{others}", '
                "the first will be used."
            )
        return (
            f'Ambiguous class resolution, "{self.class_name}" was found in both '
            f'"{self.winning_path}" and "{others}", the first will be used.'
        )


@dataclass
class DuplicateFileWarning:
    """The same file registered under several ``files`` identifiers."""

    path: str
    identifiers: List[str]
    aliases: List[str] = field(default_factory=list)

    @property
    def message(self) -> str:
        return (
            f'File "{self.path}" is registered {len(self.identifiers)} times '
            f"(identifiers: {', '.join(self.identifiers)}; as: {', '.join(self.aliases)}), "
            "it will only be included once."
        )


@dataclass
class AutoloadRules:
    """
    Merged, precedence-resolved rules for the whole package graph.

    PSR maps are ordered most-specific prefix first; ``files`` maps a
    stable identifier to an absolute path, in inclusion order.
    """

    psr_0: Dict[str, List[str]] = field(default_factory=dict)
    psr_4: Dict[str, List[str]] = field(default_factory=dict)
    classmap: List[str] = field(default_factory=list)
    files: Dict[str, str] = field(default_factory=dict)
    exclude_from_classmap: List[str] = field(default_factory=list)


@dataclass
class TargetDirLoader:
    """Fallback PSR-0 lookup for a root package that declares a target-dir."""

    prefixes: List[str]
    levels: int
    base_path: str


@dataclass
class AutoloadResult:
    """Everything one generation pass produces."""

    rules: AutoloadRules
    class_map: Dict[str, str]
    psr_violations: List[PsrViolation] = field(default_factory=list)
    ambiguous_classes: List[AmbiguousClass] = field(default_factory=list)
    duplicate_files: List[DuplicateFileWarning] = field(default_factory=list)
    include_paths: List[str] = field(default_factory=list)
    target_dir_loader: Optional[TargetDirLoader] = None
    classmap_authoritative: bool = False

    @property
    def has_warnings(self) -> bool:
        return bool(self.psr_violations or self.ambiguous_classes or self.duplicate_files)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-serialisable dictionary."""
        return asdict(self)
