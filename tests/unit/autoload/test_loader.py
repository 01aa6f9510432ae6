"""Unit tests for the in-memory class loader."""

from pathlib import Path

import pytest

from psrmap.autoload.generator import generate
from psrmap.autoload.loader import ClassLoader
from psrmap.core.types import Package, TargetDirLoader


def touch(path: Path) -> str:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("<?php\n")
    return path.as_posix()


@pytest.fixture
def base(tmp_path):
    return tmp_path.resolve()


@pytest.fixture
def loader():
    return ClassLoader()


class TestPsr4Lookup:
    def test_prefix(self, base, loader):
        expected = touch(base / "src" / "Http" / "Kernel.php")
        loader.add_psr4("App\\", [f"{base.as_posix()}/src/"])

        assert loader.find_file("App\\Http\\Kernel") == expected
        assert loader.find_file("\\App\\Http\\Kernel") == expected

    def test_longest_prefix_first(self, base, loader):
        expected = touch(base / "http" / "Kernel.php")
        touch(base / "src" / "Http" / "Kernel.php")
        loader.add_psr4("App\\Http\\", [f"{base.as_posix()}/http"])
        loader.add_psr4("App\\", [f"{base.as_posix()}/src"])

        assert loader.find_file("App\\Http\\Kernel") == expected

    def test_falls_through_directories(self, base, loader):
        expected = touch(base / "second" / "Kernel.php")
        loader.add_psr4("App\\", [f"{base.as_posix()}/first", f"{base.as_posix()}/second"])

        assert loader.find_file("App\\Kernel") == expected

    def test_fallback_directory(self, base, loader):
        expected = touch(base / "lib" / "Vendor" / "Thing.php")
        loader.add_psr4("", [f"{base.as_posix()}/lib"])

        assert loader.find_file("Vendor\\Thing") == expected

    def test_prefix_must_end_with_separator(self, loader):
        with pytest.raises(ValueError):
            loader.add_psr4("App", ["/src"])


class TestPsr0Lookup:
    def test_underscores_map_to_directories(self, base, loader):
        expected = touch(base / "lib" / "Legacy" / "Thing" / "Widget.php")
        loader.add("Legacy_", [f"{base.as_posix()}/lib/"])

        assert loader.find_file("Legacy_Thing_Widget") == expected

    def test_namespaced_class(self, base, loader):
        expected = touch(base / "lib" / "My_Ns" / "Foo" / "Bar.php")
        loader.add("My_Ns\\", [f"{base.as_posix()}/lib"])

        assert loader.find_file("My_Ns\\Foo_Bar") == expected

    def test_fallback_and_include_paths(self, base, loader):
        expected = touch(base / "inc" / "Old" / "Thing.php")
        loader.add("", [f"{base.as_posix()}/nothing"])
        loader.include_paths = [f"{base.as_posix()}/inc"]

        assert loader.find_file("Old_Thing") == expected


class TestClassMapLookup:
    def test_class_map_wins(self, base, loader):
        touch(base / "src" / "Kernel.php")
        loader.add_class_map({"App\\Kernel": "/mapped/Kernel.php"})
        loader.add_psr4("App\\", [f"{base.as_posix()}/src"])

        assert loader.find_file("App\\Kernel") == "/mapped/Kernel.php"

    def test_authoritative_skips_prefixes(self, base, loader):
        touch(base / "src" / "Kernel.php")
        loader.add_psr4("App\\", [f"{base.as_posix()}/src"])
        loader.classmap_authoritative = True

        assert loader.find_file("App\\Kernel") is None

    def test_misses_are_remembered(self, base, loader):
        loader.add_psr4("App\\", [f"{base.as_posix()}/src"])
        assert loader.find_file("App\\Late") is None

        touch(base / "src" / "Late.php")
        assert loader.find_file("App\\Late") is None


class TestTargetDirLookup:
    def test_strips_target_dir_levels(self, base, loader):
        expected = touch(base / "Str.php")
        loader.target_dir_loader = TargetDirLoader(
            prefixes=["Acme\\Util\\"], levels=2, base_path=base.as_posix()
        )

        assert loader.find_file("Acme\\Util\\Str") == expected
        assert loader.find_file("Other\\Str") is None


class TestFromResult:
    def test_resolves_generated_rules(self, base):
        kernel = touch(base / "src" / "Http" / "Kernel.php")
        (base / "src" / "Http" / "Kernel.php").write_text("<?php\nnamespace App\\Http;\nclass Kernel {}\n")
        root = Package.model_validate({"name": "acme/app", "autoload": {"psr-4": {"App\\": "src/"}}})

        result = generate(root, [], base.as_posix(), scan_psr_packages=False)
        loader = ClassLoader.from_result(result)

        assert result.class_map == {}
        assert loader.prefix_dirs_psr4 == {"App\\": [f"{base.as_posix()}/src"]}
        assert loader.find_file("App\\Http\\Kernel") == kernel
