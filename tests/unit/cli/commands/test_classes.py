"""
Unit tests for the 'classes' command.
"""

import json

import pytest
from click.testing import CliRunner

from psrmap.cli.main import main


class TestClassesCommand:
    @pytest.fixture
    def runner(self):
        return CliRunner()

    @pytest.fixture
    def php_file(self, tmp_path):
        path = tmp_path / "Kernel.php"
        path.write_text("<?php\nnamespace Acme;\nclass Kernel {}\ninterface Runs {}\n")
        return path

    def test_lists_classes(self, runner, php_file):
        result = runner.invoke(main, ["classes", str(php_file)])

        assert result.exit_code == 0
        assert result.output.splitlines() == ["Acme\\Kernel", "Acme\\Runs"]

    def test_several_files_get_headers(self, runner, php_file, tmp_path):
        other = tmp_path / "Other.php"
        other.write_text("<?php\nclass Other {}\n")

        result = runner.invoke(main, ["classes", str(php_file), str(other)])

        assert result.exit_code == 0
        assert str(other) in result.output
        assert "Other" in result.output

    def test_json(self, runner, php_file):
        result = runner.invoke(main, ["classes", str(php_file), "--json"])

        data = json.loads(result.stdout)["data"]
        assert data["files"] == {str(php_file): ["Acme\\Kernel", "Acme\\Runs"]}
        assert data["errors"] == {}

    def test_missing_file(self, runner, tmp_path):
        result = runner.invoke(main, ["classes", str(tmp_path / "Missing.php")])

        assert result.exit_code == 1
        assert "does not exist" in result.output
