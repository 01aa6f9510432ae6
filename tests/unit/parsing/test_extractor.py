"""Unit tests for class declaration extraction."""

from pathlib import Path
from unittest.mock import patch

import pytest

from psrmap.core.errors import (
    ClassFileCorruptError,
    ClassFileMissingError,
    ClassFileUnreadableError,
    SourceReadError,
)
from psrmap.parsing.extractor import extract_classes, find_classes


class TestExtractClasses:
    def test_namespaced_declarations(self):
        source = """<?php
namespace Foo\\Bar;

class Baz {}
interface Qux {}
trait Quux {}
enum Corge {}
"""
        assert extract_classes(source) == [
            "Foo\\Bar\\Baz",
            "Foo\\Bar\\Qux",
            "Foo\\Bar\\Quux",
            "Foo\\Bar\\Corge",
        ]

    def test_global_namespace(self):
        assert extract_classes("<?php\nclass Plain {}") == ["Plain"]

    def test_multiple_namespace_blocks(self):
        source = """<?php
namespace A {
    class One {}
}
namespace {
    class Two {}
}
namespace B\\C {
    class Three {}
}
"""
        assert extract_classes(source) == ["A\\One", "Two", "B\\C\\Three"]

    def test_namespace_with_spaces_around_separators(self):
        assert extract_classes("<?php namespace Foo \\ Bar; class Baz {}") == ["Foo\\Bar\\Baz"]

    def test_anonymous_class_ignored(self):
        source = """<?php
class Real {}
$x = new class extends Real {};
$y = new class implements Countable {};
"""
        assert extract_classes(source) == ["Real"]

    def test_class_constant_and_property_access_ignored(self):
        source = "<?php\n$a = Foo::class;\n$b = $obj->class;\n$c = $class;\nclass Real {}"
        assert extract_classes(source) == ["Real"]

    @pytest.mark.parametrize(
        "declaration",
        ["enum Suit: string {}", "enum Suit:string {}", "enum Suit {}"],
    )
    def test_backed_enum_type_stripped(self, declaration):
        assert extract_classes(f"<?php\n{declaration}") == ["Suit"]

    def test_xhp_class_name(self):
        assert extract_classes("<?php\nclass :foo:bar-baz {}") == ["xhp_foo__bar_baz"]

    def test_keywords_case_insensitive(self):
        assert extract_classes("<?php\nCLASS Shout {}\nInterface Mixed {}") == ["Shout", "Mixed"]

    def test_declarations_in_strings_and_comments_ignored(self):
        source = """<?php
// class InComment {}
$s = "class InString {}";
$h = <<<TXT
class InHeredoc {}
TXT;
class Real {}
"""
        assert extract_classes(source) == ["Real"]

    def test_empty_and_keywordless_sources(self):
        assert extract_classes("") == []
        assert extract_classes("   \n") == []
        assert extract_classes("<?php\n$a = 1;\n") == []

    def test_non_ascii_class_name(self):
        assert extract_classes("<?php\nclass Café {}") == ["Café"]


class TestFindClasses:
    def test_reads_file(self, tmp_path):
        php = tmp_path / "Foo.php"
        php.write_text("<?php\nnamespace App;\nfinal class Foo {}\n")
        assert find_classes(php) == ["App\\Foo"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(ClassFileMissingError) as exc_info:
            find_classes(tmp_path / "missing.php")
        assert "does not exist" in str(exc_info.value)
        assert exc_info.value.path.endswith("missing.php")

    def test_unreadable_file(self, tmp_path):
        php = tmp_path / "Locked.php"
        php.write_text("<?php class Locked {}")
        with patch.object(Path, "read_bytes", side_effect=PermissionError("denied")):
            with pytest.raises(ClassFileUnreadableError):
                find_classes(php)

    def test_binary_file(self, tmp_path):
        php = tmp_path / "Binary.php"
        php.write_bytes(b"<?php class A {}\x00\x01\x02")
        with pytest.raises(ClassFileCorruptError):
            find_classes(php)

    def test_errors_share_base_class(self, tmp_path):
        with pytest.raises(SourceReadError):
            find_classes(tmp_path / "gone.php")

    def test_latin1_fallback(self, tmp_path):
        php = tmp_path / "Cafe.php"
        php.write_bytes(b"<?php class Caf\xe9 {}")
        assert find_classes(php) == ["Caf\xe9"]
