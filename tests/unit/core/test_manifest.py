"""Unit tests for manifest loading."""

import json

import pytest

from psrmap.core.errors import ManifestError
from psrmap.core.manifest import InstalledRepository, RootManifest


def write_json(path, data):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data))
    return path


class TestRootManifest:
    def test_load_from_directory(self, tmp_path):
        write_json(tmp_path / "composer.json", {"name": "Acme/App", "autoload": {"psr-4": {"Acme\\": "src"}}})

        manifest = RootManifest.load(tmp_path)

        assert manifest.package.name == "acme/app"
        assert manifest.package.pretty_name == "Acme/App"
        assert manifest.package.autoload.psr_4 == {"Acme\\": ["src"]}
        assert manifest.base_path == tmp_path.resolve()
        assert manifest.vendor_dir == tmp_path.resolve() / "vendor"

    def test_unnamed_root(self, tmp_path):
        path = write_json(tmp_path / "composer.json", {})
        assert RootManifest.load(path).package.name == "__root__"

    def test_custom_vendor_dir(self, tmp_path):
        write_json(tmp_path / "composer.json", {"config": {"vendor-dir": "deps"}})
        assert RootManifest.load(tmp_path).vendor_dir == tmp_path.resolve() / "deps"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ManifestError) as exc_info:
            RootManifest.load(tmp_path)
        assert exc_info.value.path.endswith("composer.json")

    def test_invalid_json(self, tmp_path):
        (tmp_path / "composer.json").write_text("{not json")
        with pytest.raises(ManifestError) as exc_info:
            RootManifest.load(tmp_path)
        assert "invalid JSON at line 1" in str(exc_info.value)

    def test_not_an_object(self, tmp_path):
        write_json(tmp_path / "composer.json", ["a", "b"])
        with pytest.raises(ManifestError):
            RootManifest.load(tmp_path)


class TestInstalledRepository:
    @pytest.fixture
    def vendor(self, tmp_path):
        return tmp_path.resolve() / "vendor"

    def test_repository_object(self, vendor):
        write_json(
            vendor / "composer" / "installed.json",
            {
                "packages": [
                    {"name": "Acme/Lib", "install-path": "../acme/lib", "autoload": {"classmap": ["lib/"]}},
                    {"name": "acme/meta", "type": "metapackage"},
                ],
                "dev": False,
                "dev-package-names": ["Dev/Tool"],
            },
        )

        repository = InstalledRepository.load(vendor)

        assert [e.package.name for e in repository.packages] == ["acme/lib", "acme/meta"]
        assert repository.packages[0].install_path == (vendor / "acme" / "lib").as_posix()
        assert repository.packages[1].install_path is None
        assert repository.dev is False
        assert repository.dev_package_names == ["dev/tool"]

    def test_legacy_list_format(self, vendor):
        write_json(
            vendor / "composer" / "installed.json",
            [
                {"name": "acme/lib"},
                {"name": "legacy/pkg", "target-dir": "Legacy/Pkg"},
            ],
        )

        repository = InstalledRepository.load(vendor)

        assert repository.packages[0].install_path == (vendor / "acme" / "lib").as_posix()
        assert repository.packages[1].install_path == (vendor / "legacy" / "pkg" / "Legacy" / "Pkg").as_posix()
        assert repository.dev is True
        assert repository.dev_package_names is None

    def test_missing_repository_is_empty(self, vendor):
        repository = InstalledRepository.load(vendor)
        assert repository.packages == []
        assert repository.dev is True

    def test_invalid_package_entry(self, vendor):
        write_json(vendor / "composer" / "installed.json", {"packages": [{"version": "1.0.0"}]})
        with pytest.raises(ManifestError) as exc_info:
            InstalledRepository.load(vendor)
        assert "installed.json" in str(exc_info.value)

    def test_unexpected_document(self, vendor):
        write_json(vendor / "composer" / "installed.json", 42)
        with pytest.raises(ManifestError):
            InstalledRepository.load(vendor)
