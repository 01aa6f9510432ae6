"""
PSR namespace filtering.

Checks that the classes found in a file live where their PSR-0 or PSR-4 rule
says they should, so a PSR rule never maps a class to a file the runtime
loader could not find by convention.
"""

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from ..core.types import AutoloadType, PsrViolation


@dataclass
class FilterResult:
    """Outcome of filtering one file's classes against one PSR rule."""

    valid: List[str] = field(default_factory=list)
    rejected: List[str] = field(default_factory=list)
    violations: List[PsrViolation] = field(default_factory=list)


def expected_subpath(class_name: str, base_namespace: str, autoload_type: str) -> str:
    """
    Compute the path (relative to the rule's base directory, without
    extension) a class must live at under the given convention.
    """
    if autoload_type == AutoloadType.PSR_0:
        namespace, sep, short_name = class_name.rpartition("\\")
        if sep:
            return namespace.replace("\\", "/") + "/" + short_name.replace("_", "/")
        return class_name.replace("_", "/")

    if autoload_type == AutoloadType.PSR_4:
        sub_namespace = class_name[len(base_namespace):] if base_namespace else class_name
        return sub_namespace.replace("\\", "/")

    raise ValueError(f'autoload_type must be "psr-0" or "psr-4", got "{autoload_type}"')


def shorten_path(path: str, cwd: Optional[str] = None) -> str:
    """Replace the working directory prefix with ``.`` for reporting."""
    if cwd is None:
        cwd = Path.cwd().resolve().as_posix()
    return re.sub("^" + re.escape(cwd), ".", path, count=1)


def filter_by_namespace(
    classes: List[str],
    file_path: str,
    base_namespace: str,
    autoload_type: str,
    base_path: str,
) -> FilterResult:
    """
    Keep the classes whose location complies with the PSR rule.

    Classes outside ``base_namespace`` are dropped silently. When nothing
    in the file complies, every rejected class produces a violation; when
    at least one class complies, the rest are dropped silently.

    Args:
        classes: Class names declared in the file.
        file_path: Absolute, ``/``-separated path of the file.
        base_namespace: Namespace prefix of the rule (may be empty).
        autoload_type: ``psr-0`` or ``psr-4``.
        base_path: Absolute, ``/``-separated base directory of the rule.

    Raises:
        ValueError: For any autoload type other than psr-0 or psr-4.
    """
    if autoload_type not in (AutoloadType.PSR_0, AutoloadType.PSR_4):
        raise ValueError(f'autoload_type must be "psr-0" or "psr-4", got "{autoload_type}"')

    real_subpath = file_path[len(base_path) + 1:]
    stem, dot, _ = real_subpath.rpartition(".")
    if dot:
        real_subpath = stem

    result = FilterResult()
    for class_name in classes:
        if base_namespace and not class_name.startswith(base_namespace):
            continue

        if expected_subpath(class_name, base_namespace, autoload_type) == real_subpath:
            result.valid.append(class_name)
        else:
            result.rejected.append(class_name)

    if not result.valid:
        short_path = shorten_path(file_path)
        short_base = shorten_path(base_path)
        for class_name in result.rejected:
            result.violations.append(
                PsrViolation(
                    path=file_path,
                    class_name=class_name,
                    message=(
                        f"Class {class_name} located in {short_path} does not comply with "
                        f"{autoload_type} autoloading standard "
                        f"(rule: {base_namespace} => {short_base}). Skipping."
                    ),
                )
            )

    return result
