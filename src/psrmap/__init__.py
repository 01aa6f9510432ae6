"""
psrmap - PHP autoload map generator.

psrmap computes what Composer's autoloader needs to know about a project:
which file declares each class, and the merged PSR-0, PSR-4, classmap and
files rules of every installed package.

Key Components:
- parsing: PHP source cleaning and class declaration extraction
- autoload: rule aggregation, directory scanning, class map generation
- core: package model, manifests, dependency ordering, errors

Usage:
    from psrmap import AutoloadGenerator, GeneratorConfig
    from psrmap.core.manifest import InstalledRepository, RootManifest

    manifest = RootManifest.load("composer.json")
    repository = InstalledRepository.load(manifest.vendor_dir)
    result = AutoloadGenerator(GeneratorConfig()).generate(
        manifest.package, repository.packages, str(manifest.base_path)
    )
    print(result.class_map)
"""

__version__ = "0.1.0"

from .autoload.generator import AutoloadGenerator, GeneratorConfig
from .autoload.loader import ClassLoader
from .core.errors import (
    AutoloadError,
    ConfigurationError,
    ManifestError,
    ScanError,
    SourceReadError,
)
from .core.types import AutoloadResult, AutoloadType, Package, PackageMapEntry

__all__ = [
    "__version__",
    "AutoloadGenerator",
    "GeneratorConfig",
    "ClassLoader",
    "AutoloadError",
    "ConfigurationError",
    "ManifestError",
    "ScanError",
    "SourceReadError",
    "AutoloadResult",
    "AutoloadType",
    "Package",
    "PackageMapEntry",
]
