"""
CLI Utilities - Shared helper functions for command line operations.

This module provides formatted printing, logging setup and the project
loading shared by the commands that run a generation pass.
"""

import logging
from pathlib import Path
from typing import Optional, Tuple

import click

from ..autoload.generator import AutoloadGenerator, GeneratorConfig
from ..core.manifest import InstalledRepository, RootManifest
from ..core.types import AutoloadResult

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


class _null_context:
    """Helper for non-capture mode."""

    def __enter__(self):
        pass

    def __exit__(self, *args):
        pass


def configure_logging(verbose: bool) -> None:
    """
    Configure root logging for a CLI run.

    Warnings are always shown; ``--verbose`` adds the debug trace of
    skipped and excluded files.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
        force=True,
    )


def echo_success(message: str) -> None:
    """
    Print a success message with a green checkmark.

    Args:
        message (str): The message to display.
    """
    click.echo(click.style(f"✅ {message}", fg="green"))


def echo_error(message: str) -> None:
    """
    Print an error message with a red cross.

    Args:
        message (str): The error message to display.
    """
    click.echo(click.style(f"❌ {message}", fg="red"), err=True)


def load_project(
    directory: str,
    dev: Optional[bool] = None,
    scan_psr: bool = True,
    authoritative: bool = False,
) -> Tuple[RootManifest, InstalledRepository, GeneratorConfig]:
    """
    Load the manifests of a project and derive the generator config.

    Args:
        directory: Project root containing ``composer.json``.
        dev: Force dev mode on or off; ``None`` follows what was installed.
        scan_psr: Scan PSR directories into the class map.
        authoritative: Build an authoritative class map.
    """
    manifest = RootManifest.load(Path(directory))
    repository = InstalledRepository.load(manifest.vendor_dir)

    overrides = {
        "dev_mode": repository.dev if dev is None else dev,
        "dev_package_names": repository.dev_package_names,
        "register_runtime_class": True,
    }
    if not scan_psr:
        overrides["scan_psr_packages"] = False
    if authoritative:
        overrides["classmap_authoritative"] = True

    config = GeneratorConfig.from_manifest(manifest.data, **overrides)
    return manifest, repository, config


def run_generation(
    directory: str,
    dev: Optional[bool] = None,
    scan_psr: bool = True,
    authoritative: bool = False,
) -> Tuple[RootManifest, AutoloadResult]:
    """Load a project and run one generation pass over it."""
    manifest, repository, config = load_project(directory, dev, scan_psr, authoritative)
    generator = AutoloadGenerator(config)
    result = generator.generate(manifest.package, repository.packages, str(manifest.base_path))
    return manifest, result
