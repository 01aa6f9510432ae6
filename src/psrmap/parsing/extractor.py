"""
Class Declaration Extractor.

Finds the fully-qualified names of every class, interface, trait and enum
declared in a PHP file. Source text is first normalised by
:class:`~psrmap.parsing.cleaner.PhpFileCleaner`, then scanned in order for
``namespace`` statements and type declarations.
"""

import logging
import re
from pathlib import Path
from typing import List, Union

from ..config import DECLARATION_TYPES
from ..core.errors import (
    ClassFileCorruptError,
    ClassFileMissingError,
    ClassFileUnreadableError,
)
from .cleaner import PhpFileCleaner

logger = logging.getLogger(__name__)

_TYPES = "|".join(DECLARATION_TYPES)

# Cheap pre-check; the hit count is an upper bound on declarations
KEYWORD_PROBE = re.compile(rf"\b(?:{_TYPES})\s", re.IGNORECASE)

DECLARATION_PATTERN = re.compile(
    rf"""
    (?:
         \b(?<![\$:>])(?P<type>{_TYPES}) \s+
            (?P<name>[a-zA-Z_\x7f-\U0010ffff:][a-zA-Z0-9_\x7f-\U0010ffff:\-]*)
       | \b(?<![\$:>])(?P<ns>namespace)
            (?P<nsname>\s+[a-zA-Z_\x7f-\U0010ffff][a-zA-Z0-9_\x7f-\U0010ffff]*
                (?:\s*\\\s*[a-zA-Z_\x7f-\U0010ffff][a-zA-Z0-9_\x7f-\U0010ffff]*)*
            )? \s* [{{;]
    )
    """,
    re.IGNORECASE | re.VERBOSE,
)

# Anonymous classes: "new class extends Foo"
ANONYMOUS_MARKERS = frozenset({"extends", "implements"})


def find_classes(path: Union[str, Path]) -> List[str]:
    """
    Extract the classes declared in a file.

    Args:
        path: The PHP file to inspect.

    Returns:
        Fully-qualified class names in declaration order.

    Raises:
        ClassFileMissingError: The file does not exist.
        ClassFileUnreadableError: The file exists but cannot be read.
        ClassFileCorruptError: The file is binary or otherwise not PHP text.
    """
    path_str = str(path)
    try:
        raw = Path(path).read_bytes()
    except FileNotFoundError:
        raise ClassFileMissingError(path_str) from None
    except OSError as e:
        raise ClassFileUnreadableError(path_str) from e

    if b"\x00" in raw:
        raise ClassFileCorruptError(path_str)

    try:
        contents = raw.decode("utf-8")
    except UnicodeDecodeError:
        # Legacy single-byte encodings still hold ASCII declarations
        logger.debug(f"{path_str} is not valid UTF-8, decoding as latin-1")
        contents = raw.decode("latin-1")

    return extract_classes(contents)


def extract_classes(contents: str) -> List[str]:
    """Extract declared class names from raw PHP source text."""
    if not contents.strip():
        return []

    expected = len(KEYWORD_PROBE.findall(contents))
    if not expected:
        return []

    cleaned = PhpFileCleaner(contents, expected).clean()

    classes: List[str] = []
    namespace = ""

    for match in DECLARATION_PATTERN.finditer(cleaned):
        if match.group("ns"):
            nsname = match.group("nsname") or ""
            namespace = re.sub(r"\s", "", nsname) + "\\"
            continue

        name = match.group("name")
        if name in ANONYMOUS_MARKERS:
            continue

        if name.startswith(":"):
            # XHP element class
            name = "xhp" + name.replace("-", "_").replace(":", "__")[1:]
        elif match.group("type").lower() == "enum":
            # Backed enums: "enum Foo: int" or "enum Foo:int"
            colon = name.rfind(":")
            if colon != -1:
                name = name[:colon]

        classes.append((namespace + name).lstrip("\\"))

    return classes
