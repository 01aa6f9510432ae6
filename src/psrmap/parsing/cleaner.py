"""
PHP Source Cleaner.

Neutralises everything in a PHP file that could fool the declaration regex:
string literals, heredocs/nowdocs, comments and inline HTML. The cleaner is a
single forward scan over the text. Long runs of uninteresting characters are
consumed with one anchored regex step, so very large generated files with
megabyte-long literals stay linear.

Output keeps the ``<?`` / ``?>`` markers, replaces every literal with
``null`` and drops comments and text outside PHP blocks.
"""

import re
from functools import lru_cache
from typing import Dict, List, Pattern, Tuple

from ..config import DECLARATION_TYPES

IDENT_START = r"a-zA-Z_\x80-\U0010ffff"
IDENT_CHAR = r"a-zA-Z0-9_\x80-\U0010ffff"

HEREDOC_OPENER = re.compile(
    rf"<<<[ \t]*(['\"]?)([{IDENT_START}][{IDENT_CHAR}]*)\1(?:\r\n|\n|\r)"
)


@lru_cache(maxsize=8)
def _compile_type_config(types: Tuple[str, ...]) -> Tuple[Dict[str, Tuple[str, Pattern]], Pattern]:
    """
    Build the early-exit patterns, keyed by the first letter of each keyword,
    and the pattern for runs of characters that need no inspection.
    """
    config: Dict[str, Tuple[str, Pattern]] = {}
    for type_name in types:
        pattern = re.compile(
            rf".\b(?<![\$:>]){re.escape(type_name)}\s+"
            r"[a-zA-Z_\x7f-\U0010ffff:][a-zA-Z0-9_\x7f-\U0010ffff:\-]*",
            re.IGNORECASE | re.DOTALL,
        )
        config[type_name[0]] = (type_name, pattern)

    first_chars = "".join(re.escape(char) for char in config)
    rest = re.compile(rf"[^?\"'</#{first_chars}]+")
    return config, rest


class PhpFileCleaner:
    """
    Forward-scanning state machine over PHP source text.

    Args:
        contents: Raw file contents.
        max_matches: Number of declaration keywords the caller expects. When
            it is exactly one, scanning stops at the first declaration found.
        types: Declaration keywords eligible for the early exit.
    """

    def __init__(self, contents: str, max_matches: int, types: Tuple[str, ...] = DECLARATION_TYPES):
        self.contents = contents
        self.length = len(contents)
        self.max_matches = max_matches
        self.index = 0
        self._type_config, self._rest_pattern = _compile_type_config(tuple(types))

    def clean(self) -> str:
        parts: List[str] = []

        while self.index < self.length:
            self._skip_to_php()
            parts.append("<?")

            while self.index < self.length:
                char = self.contents[self.index]

                if char == "?" and self._peek(">"):
                    parts.append("?>")
                    self.index += 2
                    break

                if char == '"' or char == "'":
                    self._skip_string(char)
                    parts.append("null")
                    continue

                if char == "<" and self._peek("<"):
                    match = HEREDOC_OPENER.match(self.contents, self.index)
                    if match:
                        self.index = match.end()
                        self._skip_heredoc(match.group(2))
                        parts.append("null")
                        continue

                if char == "/":
                    if self._peek("/"):
                        self._skip_to_newline()
                        continue
                    if self._peek("*"):
                        self._skip_comment()
                        continue

                # PHP 8 attributes start with #[ and are code
                if char == "#" and not self._peek("["):
                    self._skip_to_newline()
                    continue

                if self.max_matches == 1 and char in self._type_config:
                    type_name, pattern = self._type_config[char]
                    if self.contents.startswith(type_name, self.index):
                        match = pattern.match(self.contents, self.index - 1)
                        if match:
                            parts.append(match.group(0)[1:])
                            return "".join(parts)

                self.index += 1
                match = self._rest_pattern.match(self.contents, self.index)
                if match:
                    parts.append(char + match.group(0))
                    self.index = match.end()
                else:
                    parts.append(char)

        return "".join(parts)

    # =========================================================================
    # Skippers
    # =========================================================================

    def _skip_to_php(self) -> None:
        start = self.contents.find("<?", self.index)
        self.index = self.length if start == -1 else start + 2

    def _skip_string(self, delimiter: str) -> None:
        self.index += 1
        while self.index < self.length:
            char = self.contents[self.index]
            if char == "\\" and (self._peek("\\") or self._peek(delimiter)):
                self.index += 2
                continue
            self.index += 1
            if char == delimiter:
                break

    def _skip_comment(self) -> None:
        end = self.contents.find("*/", self.index + 2)
        self.index = self.length if end == -1 else end + 2

    def _skip_to_newline(self) -> None:
        while self.index < self.length and self.contents[self.index] not in "\r\n":
            self.index += 1

    def _skip_heredoc(self, delimiter: str) -> None:
        """Advance past the closing delimiter line of a heredoc or nowdoc."""
        closing = re.compile(rf"{re.escape(delimiter)}(?![{IDENT_CHAR}])")

        while self.index < self.length:
            char = self.contents[self.index]
            if char in " \t":
                self.index += 1
                continue

            match = closing.match(self.contents, self.index)
            if match:
                self.index = match.end()
                return

            # not the closing line, move on to the next one
            self._skip_to_newline()
            while self.index < self.length and self.contents[self.index] in "\r\n":
                self.index += 1

    def _peek(self, char: str) -> bool:
        return self.index + 1 < self.length and self.contents[self.index + 1] == char
