"""
JSON output renderer.

Every command that supports ``--json`` wraps its response model in the same
envelope, so scripts can rely on one shape:

    {"meta": {...}, "status": "success" | "error", "data": {...}, "error": {...}}

Anything printed while the command runs is captured so that it cannot
corrupt the JSON document on stdout.
"""

import contextlib
import io
import json
from datetime import datetime, timezone
from importlib import metadata
from typing import Any, Dict, Iterator, Optional

import click
from pydantic import BaseModel

from ..core.errors import AutoloadError


def _version() -> str:
    try:
        return metadata.version("psrmap")
    except metadata.PackageNotFoundError:
        return "unknown"


class JsonRenderer:
    """Renders a command's response model (or failure) as a JSON envelope."""

    def __init__(self, command: str):
        self.command = command
        self.captured = io.StringIO()

    @contextlib.contextmanager
    def capture(self) -> Iterator[io.StringIO]:
        with contextlib.redirect_stdout(self.captured):
            yield self.captured

    def _meta(self) -> Dict[str, Any]:
        return {
            "command": self.command,
            "version": _version(),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    def render_success(self, data: BaseModel) -> None:
        self._emit({"meta": self._meta(), "status": "success", "data": data.model_dump(), "error": None})

    def render_error(self, error: Exception) -> None:
        payload: Dict[str, Optional[str]] = {
            "type": type(error).__name__,
            "message": str(error),
            "path": getattr(error, "path", None) if isinstance(error, AutoloadError) else None,
        }
        self._emit({"meta": self._meta(), "status": "error", "data": None, "error": payload})

    @staticmethod
    def _emit(envelope: Dict[str, Any]) -> None:
        click.echo(json.dumps(envelope, indent=2, default=str))
