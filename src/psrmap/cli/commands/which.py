"""
Which Command - Resolve a class name to the file that defines it.

Runs a generation pass and looks the class up the way the runtime loader
would: class map, then PSR-4, then PSR-0, then include paths.
"""

import sys
from typing import Optional

import click
from pydantic import BaseModel

from ...autoload.loader import ClassLoader
from ...core.errors import AutoloadError
from ..renderers import JsonRenderer
from ..utils import echo_error, run_generation


class WhichResponse(BaseModel):
    class_name: str
    path: Optional[str] = None
    found: bool = False


@click.command()
@click.argument("class_name")
@click.argument("directory", default=".", type=click.Path(exists=True, file_okay=False))
@click.option("--dev/--no-dev", default=None, help="Include autoload-dev rules (default: as installed)")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def which(class_name: str, directory: str, dev: Optional[bool], as_json: bool):
    """Show which file CLASS_NAME would be loaded from in DIRECTORY."""
    renderer = JsonRenderer("which")
    try:
        with renderer.capture():
            _, result = run_generation(directory, dev=dev)
    except AutoloadError as e:
        if as_json:
            renderer.render_error(e)
        else:
            echo_error(str(e))
        sys.exit(1)

    path = ClassLoader.from_result(result).find_file(class_name)
    response = WhichResponse(class_name=class_name.lstrip("\\"), path=path, found=path is not None)

    if as_json:
        renderer.render_success(response)
    elif path:
        click.echo(path)
    else:
        echo_error(f"Class {response.class_name} could not be resolved")

    if not response.found:
        sys.exit(1)
