"""Unit tests for the ClassMap accumulator."""

import re

import pytest

from psrmap.autoload.classmap import ClassMap
from psrmap.core.types import PsrViolation


class TestClassMap:
    @pytest.fixture
    def class_map(self):
        return ClassMap()

    def test_first_path_wins(self, class_map):
        assert class_map.add("Foo", "/a/Foo.php") is True
        assert class_map.add("Foo", "/b/Foo.php") is False
        assert class_map.get_class_path("Foo") == "/a/Foo.php"

    def test_ambiguity_recorded(self, class_map):
        class_map.add("Foo", "/a/Foo.php")
        class_map.add("Foo", "/b/Foo.php")

        records = class_map.ambiguous_classes()
        assert len(records) == 1
        assert records[0].class_name == "Foo"
        assert records[0].winning_path == "/a/Foo.php"
        assert records[0].other_paths == ["/b/Foo.php"]
        assert records[0].message == (
            'Ambiguous class resolution, "Foo" was found in both "/a/Foo.php" and "/b/Foo.php", '
            "the first will be used."
        )

    def test_same_path_is_not_ambiguous(self, class_map):
        class_map.add("Foo", "/a/Foo.php")
        class_map.add("Foo", "/a/Foo.php")
        assert class_map.ambiguous_classes() == []

    def test_several_candidates_message(self, class_map):
        for path in ("/a/Foo.php", "/b/Foo.php", "/c/Foo.php"):
            class_map.add("Foo", path)

        message = class_map.ambiguous_classes()[0].message
        assert 'was found 3x: in "/a/Foo.php" and "/b/Foo.php", "/c/Foo.php"' in message

    def test_candidates_in_test_directories_filtered(self, class_map):
        class_map.add("Foo", "/a/Foo.php")
        class_map.add("Foo", "/pkg/tests/Foo.php")
        class_map.add("Foo", "/pkg/Fixtures/Foo.php")

        assert class_map.ambiguous_classes() == []
        unfiltered = class_map.ambiguous_classes(duplicates_filter=None)
        assert unfiltered[0].other_paths == ["/pkg/tests/Foo.php", "/pkg/Fixtures/Foo.php"]

    def test_custom_duplicates_filter(self, class_map):
        class_map.add("Foo", "/a/Foo.php")
        class_map.add("Foo", "/generated/Foo.php")
        assert class_map.ambiguous_classes(re.compile("/generated/")) == []

    def test_add_class_overrides(self, class_map):
        class_map.add("Foo", "/a/Foo.php")
        class_map.add_class("Foo", "/b/Foo.php")
        assert class_map.get_class_path("Foo") == "/b/Foo.php"
        assert class_map.ambiguous_classes() == []

    def test_synthetic_class_overrides_scanned(self, class_map):
        class_map.add("Composer\\InstalledVersions", "/pkg/InstalledVersions.php")
        class_map.add_synthetic_class("Composer\\InstalledVersions", "/vendor/composer/InstalledVersions.php")
        assert class_map.get_class_path("Composer\\InstalledVersions") == "/vendor/composer/InstalledVersions.php"

    def test_missing_class(self, class_map):
        assert class_map.has_class("Nope") is False
        assert "Nope" not in class_map
        with pytest.raises(KeyError):
            class_map.get_class_path("Nope")

    def test_sorted_map(self, class_map):
        class_map.add("Zed", "/z.php")
        class_map.add("Alpha", "/a.php")
        assert list(class_map.get_map()) == ["Alpha", "Zed"]
        assert list(class_map) == ["Zed", "Alpha"]

        class_map.sort()
        assert list(class_map) == ["Alpha", "Zed"]
        assert len(class_map) == 2

    def test_psr_violations_are_copied(self, class_map):
        violation = PsrViolation(path="/a/Foo.php", class_name="Foo", message="bad")
        class_map.add_psr_violation(violation)

        violations = class_map.psr_violations
        violations.clear()
        assert class_map.psr_violations == [violation]
