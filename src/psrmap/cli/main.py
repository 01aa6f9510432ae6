"""
psrmap CLI - Main entry point.

This module registers all CLI commands. Each command is implemented
in its own module under cli/commands/.
"""

import click

from .commands import classes, dump, which
from .utils import configure_logging


@click.group()
@click.version_option(package_name="psrmap")
@click.option("-v", "--verbose", is_flag=True, help="Show debug logging")
def main(verbose: bool):
    """psrmap: PHP autoload map generator.

    Computes the class map and merged PSR-0/PSR-4/classmap/files rules of
    a Composer project without running PHP.

    \b
    Quick Start:
      psrmap dump ./my-project
      psrmap which "App\\Http\\Kernel"
      psrmap classes src/Kernel.php
    """
    configure_logging(verbose)


# Register commands
main.add_command(dump.dump)
main.add_command(classes.classes)
main.add_command(which.which)

if __name__ == "__main__":
    main()
