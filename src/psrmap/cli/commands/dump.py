"""
Dump Command - Generate the class map and merged autoload rules.

Runs one generation pass over a project and reports the outcome: a summary,
every warning, and optionally the full class map. Nothing is written to
the vendor directory.
"""

import logging
import sys
from typing import Dict, List, Optional

import click
from pydantic import BaseModel, Field
from rich.console import Console
from rich.table import Table

from ...core.errors import AutoloadError
from ...core.types import AutoloadResult
from ..renderers import JsonRenderer
from ..utils import _null_context, echo_error, echo_success, run_generation

logger = logging.getLogger(__name__)


# --- API Models ---
class ApiAmbiguousClass(BaseModel):
    class_name: str
    winning_path: str
    other_paths: List[str]


class ApiPsrViolation(BaseModel):
    class_name: str
    path: str
    message: str


class ApiDuplicateFile(BaseModel):
    path: str
    identifiers: List[str]
    aliases: List[str] = Field(default_factory=list)


class DumpResponse(BaseModel):
    """
    Structured response for the dump command.
    """

    package: str
    class_count: int
    class_map: Dict[str, str]
    psr_0: Dict[str, List[str]] = Field(default_factory=dict)
    psr_4: Dict[str, List[str]] = Field(default_factory=dict)
    classmap: List[str] = Field(default_factory=list)
    files: Dict[str, str] = Field(default_factory=dict)
    include_paths: List[str] = Field(default_factory=list)
    classmap_authoritative: bool = False
    ambiguous_classes: List[ApiAmbiguousClass] = Field(default_factory=list)
    psr_violations: List[ApiPsrViolation] = Field(default_factory=list)
    duplicate_files: List[ApiDuplicateFile] = Field(default_factory=list)
    exit_code: int = 0

    @classmethod
    def from_result(cls, package: str, result: AutoloadResult, exit_code: int = 0) -> "DumpResponse":
        return cls(
            package=package,
            class_count=len(result.class_map),
            class_map=result.class_map,
            psr_0=result.rules.psr_0,
            psr_4=result.rules.psr_4,
            classmap=result.rules.classmap,
            files=result.rules.files,
            include_paths=result.include_paths,
            classmap_authoritative=result.classmap_authoritative,
            ambiguous_classes=[
                ApiAmbiguousClass(
                    class_name=a.class_name, winning_path=a.winning_path, other_paths=a.other_paths
                )
                for a in result.ambiguous_classes
            ],
            psr_violations=[
                ApiPsrViolation(class_name=v.class_name, path=v.path, message=v.message)
                for v in result.psr_violations
            ],
            duplicate_files=[
                ApiDuplicateFile(path=d.path, identifiers=d.identifiers, aliases=d.aliases)
                for d in result.duplicate_files
            ],
            exit_code=exit_code,
        )


def strict_exit_code(result: AutoloadResult, strict_psr: bool, strict_ambiguous: bool) -> int:
    """Exit code 1 when a warning category the user made fatal was reported."""
    if strict_psr and result.psr_violations:
        return 1
    if strict_ambiguous and result.ambiguous_classes:
        return 1
    return 0


@click.command()
@click.argument("directory", default=".", type=click.Path(exists=True, file_okay=False))
@click.option("--dev/--no-dev", default=None, help="Include autoload-dev rules (default: as installed)")
@click.option("--no-scan-psr", is_flag=True, help="Do not scan PSR-0/PSR-4 directories")
@click.option("-a", "--authoritative", is_flag=True, help="Build an authoritative class map")
@click.option("--strict-psr", is_flag=True, help="Exit with 1 if PSR violations were found")
@click.option("--strict-ambiguous", is_flag=True, help="Exit with 1 if ambiguous classes were found")
@click.option("--show-classes", is_flag=True, help="Print the full class map")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def dump(
    directory: str,
    dev: Optional[bool],
    no_scan_psr: bool,
    authoritative: bool,
    strict_psr: bool,
    strict_ambiguous: bool,
    show_classes: bool,
    as_json: bool,
):
    """
    Generate the class map of a project.

    Reads composer.json and vendor/composer/installed.json from DIRECTORY.
    """
    renderer = JsonRenderer("dump")
    context_manager = renderer.capture() if as_json else _null_context()

    error_to_report = None
    response_data = None
    result = None

    with context_manager:
        try:
            manifest, result = run_generation(
                directory, dev=dev, scan_psr=not no_scan_psr, authoritative=authoritative
            )
            exit_code = strict_exit_code(result, strict_psr, strict_ambiguous)
            response_data = DumpResponse.from_result(manifest.package.pretty_name, result, exit_code)
        except Exception as e:
            logger.debug("dump failed", exc_info=True)
            error_to_report = e

    if as_json:
        if error_to_report:
            renderer.render_error(error_to_report)
            sys.exit(1)
        renderer.render_success(response_data)
        sys.exit(response_data.exit_code)

    if error_to_report:
        if not isinstance(error_to_report, AutoloadError):
            raise error_to_report
        echo_error(str(error_to_report))
        sys.exit(1)

    _render_text(response_data, show_classes)
    sys.exit(response_data.exit_code)


def _render_text(response: DumpResponse, show_classes: bool) -> None:
    # warnings already went to stderr through logging
    console = Console(soft_wrap=True)

    if show_classes and response.class_map:
        table = Table(title="Class map")
        table.add_column("Class", style="cyan")
        table.add_column("File", style="dim", overflow="fold")
        for class_name, path in response.class_map.items():
            table.add_row(class_name, path)
        console.print(table)

    label = "authoritative class map" if response.classmap_authoritative else "autoload rules"
    echo_success(f"Generated {label} for {response.package} containing {response.class_count} classes")
    if response.psr_4 or response.psr_0:
        console.print(
            f"   PSR-4 prefixes: {len(response.psr_4)}, PSR-0 prefixes: {len(response.psr_0)}, "
            f"files: {len(response.files)}"
        )
