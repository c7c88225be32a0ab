"""End-to-end tests for the command-line interface."""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from license_attribution import cli
from license_attribution.attribution import AttributionRecord
from license_attribution.blob import decode_records, encode_records
from license_attribution.cli import app
from license_attribution.licenses import License

runner = CliRunner()

CONFIG = """
[project]
name = "widget"
group = "com.example"
version = "1.0"
subprojects = ["com.example:widget-core:1.0"]

[[license]]
license = "APACHE_2"
description = "Widgets for everyone"
authors = ["Example Corp"]
"""


def _entry(coordinate: str, *files: Path) -> dict:
    group, name, version = coordinate.split(":")
    return {
        "group": group,
        "name": name,
        "version": version,
        "files": [str(path) for path in files],
    }


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    """Write a project licensing.toml."""
    path = tmp_path / "licensing.toml"
    path.write_text(CONFIG)
    return path


@pytest.fixture
def graph_path(tmp_path: Path, make_jar) -> Path:
    """Write a dependency graph with known, embedded, missing and own modules."""
    blob = encode_records(
        [AttributionRecord(name="Foo", license=License.MIT, copyrights=[2018])]
    )
    bar_jar = make_jar("libs/bar-1.0.jar", blob=blob)
    unknown_jar = make_jar("libs/lib-1.0.jar")

    path = tmp_path / "dependencies.json"
    path.write_text(
        json.dumps(
            {
                "configurations": {
                    "runtimeClasspath": [
                        _entry("net.java.dev.jna:jna:5.13.0"),
                        _entry("foo:bar:1.0", bar_jar),
                        _entry("com.unknown:lib:1.0", unknown_jar),
                        _entry("com.example:widget-core:1.0"),
                    ]
                }
            }
        )
    )
    return path


def _gen(config_path: Path, graph_path: Path, *extra: str):
    return runner.invoke(
        app, ["gen", "--config", str(config_path), "--graph", str(graph_path), *extra]
    )


def _text(result) -> str:
    # Rich wraps long lines at the console width
    return " ".join(result.output.split())


class TestGen:
    """Test the gen command."""

    def test_generates_license_files(self, tmp_path, config_path, graph_path) -> None:
        """Test a full scan and write."""
        result = _gen(config_path, graph_path)

        assert result.exit_code == 0, result.output
        assert "Found 4 dependencies" in _text(result)
        assert "Generated license data" in _text(result)

        for directory in (tmp_path, tmp_path / "build" / "licensing"):
            assert (directory / "LICENSE").exists()
            assert (directory / "LICENSE.blob").exists()
            assert (directory / "LICENSE.Apachev2").exists()
            assert (directory / "LICENSE.MIT").exists()

        document = (tmp_path / "LICENSE").read_text(encoding="utf-8")
        assert document.startswith(" - widget - Widgets for everyone\n")
        assert "     - JNA - Simplified native library access for Java." in document
        assert "     - Foo\n" in document

        (primary,) = decode_records((tmp_path / "LICENSE.blob").read_bytes())
        assert [extra.name for extra in primary.extras] == ["Foo", "JNA"]

    def test_scan_summary(self, config_path, graph_path) -> None:
        """Test the preloaded, embedded and missing sections."""
        result = _gen(config_path, graph_path)

        assert "Preloaded license data:" in _text(result)
        assert "[APACHE_2] net.java.dev.jna:jna:5.13.0" in _text(result)
        assert "Embedded license data:" in _text(result)
        assert "[MIT] foo:bar:1.0" in _text(result)
        assert "Missing license data:" in _text(result)
        assert "com.unknown:lib:1.0" in _text(result)
        assert "widget-core" not in _text(result)

    def test_second_run_up_to_date(self, config_path, graph_path) -> None:
        """Test that an unchanged project does not rewrite files."""
        _gen(config_path, graph_path)

        result = _gen(config_path, graph_path)

        assert result.exit_code == 0
        assert "License files are up to date" in _text(result)
        assert "Generated license data" not in _text(result)

    def test_up_to_date_skips_write(self, mocker, config_path, graph_path) -> None:
        """Test that files are compared before anything is written."""
        _gen(config_path, graph_path)
        write = mocker.spy(cli.LicenseWriter, "write")

        result = _gen(config_path, graph_path)

        assert result.exit_code == 0, result.output
        write.assert_not_called()

    def test_changed_output_is_rewritten(self, mocker, tmp_path, config_path, graph_path) -> None:
        """Test that a stale file triggers a write."""
        _gen(config_path, graph_path)
        (tmp_path / "LICENSE").write_text("stale\n")
        write = mocker.spy(cli.LicenseWriter, "write")

        result = _gen(config_path, graph_path)

        assert result.exit_code == 0, result.output
        assert write.call_count == 1
        assert "Generated license data" in _text(result)
        assert (tmp_path / "LICENSE").read_text(encoding="utf-8").startswith(" - widget")

    def test_markdown_report(self, tmp_path, config_path, graph_path) -> None:
        """Test writing the optional Markdown report."""
        report = tmp_path / "licenses.md"

        result = _gen(config_path, graph_path, "--report", str(report))

        assert result.exit_code == 0, result.output
        assert "Generated:" in _text(result)
        content = report.read_text(encoding="utf-8")
        assert "## Scan Summary" in content
        assert "`com.unknown:lib:1.0`" in content

    def test_custom_build_dir(self, tmp_path, config_path, graph_path) -> None:
        """Test overriding the build directory."""
        out = tmp_path / "out"

        result = _gen(config_path, graph_path, "--build-dir", str(out))

        assert result.exit_code == 0, result.output
        assert (out / "licensing" / "LICENSE").exists()

    def test_user_rules(self, tmp_path, config_path, graph_path) -> None:
        """Test that a rule file fills a missing dependency."""
        rules = tmp_path / "rules.toml"
        rules.write_text(
            '[[rule]]\ncoordinate = "com.unknown"\nname = "Unknown Lib"\nlicense = "ISC"\n'
        )

        result = _gen(config_path, graph_path, "--rules", str(rules))

        assert result.exit_code == 0, result.output
        assert "Missing license data" not in _text(result)
        assert (tmp_path / "LICENSE.ISC").exists()

    def test_missing_author(self, tmp_path, graph_path) -> None:
        """Test that a license without an author is rejected."""
        config = tmp_path / "licensing.toml"
        config.write_text('[project]\nname = "widget"\n\n[[license]]\nlicense = "MIT"\n')

        result = _gen(config, graph_path)

        assert result.exit_code == 1
        assert "An author must be specified" in _text(result)
        assert not (tmp_path / "LICENSE").exists()

    def test_missing_config(self, tmp_path, graph_path) -> None:
        """Test that a missing configuration file is an error."""
        result = _gen(tmp_path / "nope.toml", graph_path)

        assert result.exit_code == 1
        assert "Configuration file not found" in _text(result)

    def test_unknown_configuration(self, config_path, graph_path) -> None:
        """Test that a missing configuration name is reported."""
        result = _gen(config_path, graph_path, "--configuration", "testClasspath")

        assert result.exit_code == 1
        assert "testClasspath" in _text(result)

    def test_unsupported_graph(self, tmp_path, config_path) -> None:
        """Test that an unknown graph format is reported."""
        graph = tmp_path / "pom.xml"
        graph.write_text("<project/>")

        result = _gen(config_path, graph)

        assert result.exit_code == 1
        assert "No scanner available" in _text(result)

    def test_write_failure(self, mocker, config_path, graph_path) -> None:
        """Test that an unwritable output directory is reported."""
        mocker.patch(
            "license_attribution.cli.LicenseWriter.write",
            side_effect=OSError("Read-only file system"),
        )

        result = _gen(config_path, graph_path)

        assert result.exit_code == 1
        assert "Error writing license files" in _text(result)
        assert "Read-only file system" in _text(result)

    def test_verbose_names_scanner(self, mocker, config_path, graph_path) -> None:
        """Test that verbose mode enables debug logging."""
        setup = mocker.spy(cli, "_setup_logging")

        result = _gen(config_path, graph_path, "--verbose")

        assert result.exit_code == 0, result.output
        setup.assert_called_once_with(True)
        assert "Using scanner: dependency graph (JSON)" in _text(result)
        cli._setup_logging(False)

    def test_no_license_declared(self, tmp_path, graph_path) -> None:
        """Test that nothing is written without a declared license."""
        config = tmp_path / "licensing.toml"
        config.write_text('[project]\nname = "widget"\n')

        result = _gen(config, graph_path)

        assert result.exit_code == 0
        assert not (tmp_path / "LICENSE").exists()


class TestLookup:
    """Test the lookup command."""

    def test_versioned_rule(self) -> None:
        """Test that an old JNA release resolves to LGPL."""
        result = runner.invoke(app, ["lookup", "net.java.dev.jna:jna:3.5.2"])

        assert result.exit_code == 0
        assert "LGPLv2_1" in _text(result)
        assert " - JNA" in _text(result)

    def test_newer_version(self) -> None:
        """Test the license change at 4.0."""
        result = runner.invoke(app, ["lookup", "net.java.dev.jna:jna:5.13.0"])

        assert result.exit_code == 0
        assert "APACHE_2" in _text(result)

    def test_no_rule(self) -> None:
        """Test an unknown dependency."""
        result = runner.invoke(app, ["lookup", "com.unknown:lib:1.0"])

        assert result.exit_code == 1
        assert "No license rule" in _text(result)

    def test_invalid_coordinate(self) -> None:
        """Test a malformed coordinate."""
        result = runner.invoke(app, ["lookup", "a:b:c:d:e"])

        assert result.exit_code == 1
        assert "Error" in _text(result)


class TestMetadata:
    """Test the metadata command."""

    def test_standard_license(self, config_path) -> None:
        """Test the published fields of a catalog license."""
        result = runner.invoke(app, ["metadata", "--config", str(config_path)])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data == {
            "name": License.APACHE_2.preferred_name,
            "url": License.APACHE_2.preferred_url,
        }

    def test_custom_license(self, tmp_path) -> None:
        """Test that custom license notes are published as comments."""
        config = tmp_path / "licensing.toml"
        config.write_text(
            '[project]\nname = "widget"\n\n[[license]]\nlicense = "CUSTOM"\n'
            'notes = ["Internal use only"]\n'
        )

        result = runner.invoke(app, ["metadata", "--config", str(config)])

        assert result.exit_code == 0
        assert json.loads(result.output)["comments"] == "Internal use only"

    def test_no_license(self, tmp_path) -> None:
        """Test a configuration without licenses."""
        config = tmp_path / "licensing.toml"
        config.write_text('[project]\nname = "widget"\n')

        result = runner.invoke(app, ["metadata", "--config", str(config)])

        assert result.exit_code == 1
        assert "No license declared" in _text(result)


class TestClean:
    """Test the clean command."""

    def test_clean(self, tmp_path, config_path, graph_path) -> None:
        """Test that generated files are removed."""
        _gen(config_path, graph_path)

        result = runner.invoke(app, ["clean", "--config", str(config_path)])

        assert result.exit_code == 0
        assert "Removed 8 file(s)" in _text(result)
        assert not (tmp_path / "LICENSE").exists()
        assert config_path.exists()

    def test_nothing_to_clean(self, config_path) -> None:
        """Test a project without generated files."""
        result = runner.invoke(app, ["clean", "--config", str(config_path)])

        assert result.exit_code == 0
        assert "Nothing to clean" in _text(result)
