"""
Classes Command - List the classes declared in PHP files.
"""

import sys
from typing import Dict, List

import click
from pydantic import BaseModel, Field
from rich.console import Console

from ...core.errors import SourceReadError
from ...parsing.extractor import find_classes
from ..renderers import JsonRenderer
from ..utils import echo_error


class ClassesResponse(BaseModel):
    files: Dict[str, List[str]] = Field(default_factory=dict)
    errors: Dict[str, str] = Field(default_factory=dict)


@click.command()
@click.argument("files", nargs=-1, required=True, type=click.Path(dir_okay=False))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def classes(files: tuple, as_json: bool):
    """Print the classes, interfaces, traits and enums declared in FILES."""
    response = ClassesResponse()
    for path in files:
        try:
            response.files[path] = find_classes(path)
        except SourceReadError as e:
            response.errors[path] = str(e)

    if as_json:
        JsonRenderer("classes").render_success(response)
    else:
        console = Console(soft_wrap=True, highlight=False)
        for path, found in response.files.items():
            if len(files) > 1:
                console.print(f"[bold]{path}[/bold]")
            for class_name in found:
                console.print(class_name, markup=False)
        for message in response.errors.values():
            echo_error(message)

    if response.errors:
        sys.exit(1)
