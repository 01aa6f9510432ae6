"""
Manifest loading.

Reads the root ``composer.json`` and the installed-packages repository
(``vendor/composer/installed.json``) into :class:`Package` models.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError

from ..config import DEFAULT_VENDOR_DIR, INSTALLED_MANIFEST_PATH, ROOT_MANIFEST_FILE
from .errors import ManifestError
from .types import Package, PackageMapEntry

logger = logging.getLogger(__name__)

ROOT_PACKAGE_NAME = "__root__"


def _read_json(path: Path) -> Any:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise ManifestError(str(path), f"invalid JSON at line {e.lineno}: {e.msg}") from e
    except OSError as e:
        raise ManifestError(str(path), e.strerror or str(e)) from e


def _to_package(path: Path, data: Any) -> Package:
    if not isinstance(data, dict):
        raise ManifestError(str(path), "package entries must be JSON objects")
    try:
        return Package.model_validate(data)
    except ValidationError as e:
        raise ManifestError(str(path), str(e)) from e


@dataclass
class RootManifest:
    """The project's own manifest."""

    path: Path
    data: Dict[str, Any]
    package: Package

    @property
    def base_path(self) -> Path:
        return self.path.parent

    @property
    def vendor_dir(self) -> Path:
        config = self.data.get("config") or {}
        return self.base_path / config.get("vendor-dir", DEFAULT_VENDOR_DIR)

    @classmethod
    def load(cls, path: Union[str, Path]) -> "RootManifest":
        """
        Load a root manifest.

        Args:
            path: The manifest file, or the directory containing it.

        Raises:
            ManifestError: If the file is missing or malformed.
        """
        path = Path(path)
        if path.is_dir():
            path = path / ROOT_MANIFEST_FILE
        path = path.resolve()

        data = _read_json(path)
        if not isinstance(data, dict):
            raise ManifestError(str(path), "the root manifest must be a JSON object")

        package_data = dict(data)
        package_data.setdefault("name", ROOT_PACKAGE_NAME)
        return cls(path=path, data=data, package=_to_package(path, package_data))


@dataclass
class InstalledRepository:
    """
    Packages installed into the vendor directory.

    Attributes:
        packages: Installed packages with absolute install paths (``None``
            for metapackages).
        dev: Whether dev requirements were installed.
        dev_package_names: Packages only required for development, when the
            repository records them.
    """

    packages: List[PackageMapEntry] = field(default_factory=list)
    dev: bool = True
    dev_package_names: Optional[List[str]] = None

    @classmethod
    def load(cls, vendor_dir: Union[str, Path]) -> "InstalledRepository":
        """
        Load ``installed.json`` from a vendor directory.

        A missing file yields an empty repository (nothing installed yet).

        Raises:
            ManifestError: If the file exists but is malformed.
        """
        vendor_dir = Path(vendor_dir).resolve()
        path = vendor_dir / INSTALLED_MANIFEST_PATH
        if not path.exists():
            logger.debug(f"No installed repository at {path}")
            return cls()

        data = _read_json(path)
        dev = True
        dev_package_names: Optional[List[str]] = None
        if isinstance(data, dict):
            raw_packages = data.get("packages", [])
            dev = bool(data.get("dev", True))
            if "dev-package-names" in data:
                dev_package_names = [str(name).lower() for name in data["dev-package-names"]]
        elif isinstance(data, list):
            # format used before install paths were recorded
            raw_packages = data
        else:
            raise ManifestError(str(path), "expected a list of packages or a repository object")

        entries = []
        for raw in raw_packages:
            package = _to_package(path, raw)
            entries.append(PackageMapEntry(package, cls._install_path(vendor_dir, package, raw)))

        return cls(packages=entries, dev=dev, dev_package_names=dev_package_names)

    @staticmethod
    def _install_path(vendor_dir: Path, package: Package, raw: Dict[str, Any]) -> Optional[str]:
        if package.is_metapackage:
            return None
        install_path = raw.get("install-path")
        if install_path:
            # recorded relative to vendor/composer, target-dir included
            return (vendor_dir / INSTALLED_MANIFEST_PATH.parent / install_path).resolve().as_posix()

        resolved = vendor_dir / package.name
        if package.target_dir:
            resolved = resolved / package.target_dir
        return resolved.as_posix()
