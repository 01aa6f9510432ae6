"""Unit tests for PSR namespace filtering."""

import pytest

from psrmap.autoload.psr_filter import expected_subpath, filter_by_namespace, shorten_path


class TestExpectedSubpath:
    def test_psr4_strips_base_namespace(self):
        assert expected_subpath("Acme\\Http\\Kernel", "Acme\\", "psr-4") == "Http/Kernel"

    def test_psr4_empty_namespace(self):
        assert expected_subpath("Acme\\Kernel", "", "psr-4") == "Acme/Kernel"

    def test_psr0_keeps_full_namespace(self):
        assert expected_subpath("Acme\\Http\\Kernel", "Acme\\", "psr-0") == "Acme/Http/Kernel"

    def test_psr0_underscores_only_in_short_name(self):
        assert expected_subpath("My_Ns\\Foo_Bar", "My_Ns\\", "psr-0") == "My_Ns/Foo/Bar"
        assert expected_subpath("Vendor_Pkg_Thing", "Vendor_", "psr-0") == "Vendor/Pkg/Thing"

    def test_rejects_other_types(self):
        with pytest.raises(ValueError):
            expected_subpath("Foo", "", "classmap")


class TestShortenPath:
    def test_replaces_working_directory(self):
        assert shorten_path("/work/project/src/Foo.php", cwd="/work/project") == "./src/Foo.php"

    def test_leaves_other_paths(self):
        assert shorten_path("/elsewhere/Foo.php", cwd="/work/project") == "/elsewhere/Foo.php"


class TestFilterByNamespace:
    @pytest.fixture
    def base(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        return tmp_path.resolve().as_posix()

    def test_psr4_compliant_class(self, base):
        result = filter_by_namespace(
            ["Acme\\Foo\\Bar"], f"{base}/src/Foo/Bar.php", "Acme\\", "psr-4", f"{base}/src"
        )
        assert result.valid == ["Acme\\Foo\\Bar"]
        assert result.violations == []

    def test_psr0_compliant_class(self, base):
        result = filter_by_namespace(
            ["Acme\\Foo\\Bar"], f"{base}/src/Acme/Foo/Bar.php", "Acme\\", "psr-0", f"{base}/src"
        )
        assert result.valid == ["Acme\\Foo\\Bar"]

    def test_psr0_underscore_class(self, base):
        result = filter_by_namespace(
            ["Vendor_Pkg_Thing"], f"{base}/lib/Vendor/Pkg/Thing.php", "Vendor_", "psr-0", f"{base}/lib"
        )
        assert result.valid == ["Vendor_Pkg_Thing"]

    def test_other_extension_is_stripped(self, base):
        result = filter_by_namespace(
            ["Acme\\Legacy"], f"{base}/src/Legacy.inc", "Acme\\", "psr-4", f"{base}/src"
        )
        assert result.valid == ["Acme\\Legacy"]

    def test_class_outside_namespace_dropped_silently(self, base):
        result = filter_by_namespace(
            ["Other\\Thing"], f"{base}/src/Thing.php", "Acme\\", "psr-4", f"{base}/src"
        )
        assert result.valid == []
        assert result.rejected == []
        assert result.violations == []

    def test_violation_reported_when_nothing_complies(self, base):
        result = filter_by_namespace(
            ["Acme\\Foo\\Baz"], f"{base}/src/Foo/Bar.php", "Acme\\", "psr-4", f"{base}/src"
        )
        assert result.valid == []
        assert len(result.violations) == 1
        violation = result.violations[0]
        assert violation.class_name == "Acme\\Foo\\Baz"
        assert violation.path == f"{base}/src/Foo/Bar.php"
        assert violation.message == (
            "Class Acme\\Foo\\Baz located in ./src/Foo/Bar.php does not comply with "
            "psr-4 autoloading standard (rule: Acme\\ => ./src). Skipping."
        )

    def test_noncompliant_siblings_dropped_silently(self, base):
        result = filter_by_namespace(
            ["Acme\\Foo\\Bar", "Acme\\Foo\\Helper"],
            f"{base}/src/Foo/Bar.php",
            "Acme\\",
            "psr-4",
            f"{base}/src",
        )
        assert result.valid == ["Acme\\Foo\\Bar"]
        assert result.rejected == ["Acme\\Foo\\Helper"]
        assert result.violations == []

    def test_rejects_classmap_type(self, base):
        with pytest.raises(ValueError):
            filter_by_namespace(["Foo"], f"{base}/Foo.php", "", "classmap", base)
