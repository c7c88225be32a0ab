"""Tests for project licensing configuration."""

import logging
from pathlib import Path

import pytest

from license_attribution.config import (
    Licensing,
    LicensingConfigError,
    ProjectConfig,
    load_config,
)
from license_attribution.licenses import License
from license_attribution.models import PublishMetadata


class TestLicensing:
    """Test declaring project licenses."""

    def test_license_defaults_to_project_name(self) -> None:
        """Test that a declared license takes the project name."""
        licensing = Licensing("widget")

        record = licensing.license(License.MIT, lambda r: r.add_author("Acme"))

        assert record.name == "widget"
        assert record.authors == ["Acme"]
        assert licensing.primary is record

    def test_explicit_name(self) -> None:
        """Test overriding the name a license applies to."""
        licensing = Licensing("widget")
        licensing.license(License.MIT)
        second = licensing.license(License.CC0, name="widget-docs")

        assert second.name == "widget-docs"
        assert licensing.primary.name == "widget"

    def test_no_primary(self) -> None:
        """Test that nothing declared means no primary."""
        assert Licensing("widget").primary is None

    def test_validate_requires_author(self) -> None:
        """Test that an attribution needs an author."""
        licensing = Licensing("widget")
        licensing.license(License.MIT)

        with pytest.raises(LicensingConfigError, match="An author must be specified"):
            licensing.validate()

    def test_validate_requires_name(self) -> None:
        """Test that an attribution needs a name."""
        licensing = Licensing("")
        licensing.license(License.MIT, lambda r: r.add_author("Acme"))

        with pytest.raises(LicensingConfigError, match="name of the project"):
            licensing.validate()

    def test_validate_passes(self) -> None:
        """Test a complete declaration."""
        licensing = Licensing("widget")
        licensing.license(License.MIT, lambda r: r.add_author("Acme"))

        licensing.validate()


class TestPublishMetadata:
    """Test license fields for package metadata."""

    def test_standard_license(self) -> None:
        """Test that notes are not published for catalog licenses."""
        licensing = Licensing("widget")
        licensing.license(License.APACHE_2, lambda r: r.add_note("ignored"))

        assert licensing.publish_metadata() == PublishMetadata(
            name=License.APACHE_2.preferred_name,
            url=License.APACHE_2.preferred_url,
            comments=None,
        )

    def test_custom_license_notes_become_comments(self) -> None:
        """Test that custom license notes are published."""
        licensing = Licensing("widget")
        licensing.license(
            License.CUSTOM, lambda r: (r.add_note("Line one"), r.add_note("Line two"))
        )

        assert licensing.publish_metadata().comments == "Line one\nLine two"

    def test_only_primary_published(self) -> None:
        """Test that secondary licenses are ignored."""
        licensing = Licensing("widget")
        licensing.license(License.MIT)
        licensing.license(License.GPLv3)

        assert licensing.publish_metadata().name == License.MIT.preferred_name

    def test_nothing_declared(self) -> None:
        """Test that no license publishes nothing."""
        assert Licensing("widget").publish_metadata() is None


class TestProjectConfig:
    """Test derived project settings."""

    def test_defaults(self, tmp_path: Path) -> None:
        """Test the default build directory and licensing."""
        config = ProjectConfig(name="widget", root_dir=tmp_path)

        assert config.build_dir == tmp_path / "build"
        assert config.licensing.project_name == "widget"
        assert config.output_dirs == [tmp_path / "build" / "licensing", tmp_path]

    def test_project_coordinates(self) -> None:
        """Test that the project's own coordinate is included."""
        config = ProjectConfig(
            name="widget",
            group="com.example",
            version="1.0",
            subprojects=["com.example:widget-core:1.0"],
        )

        assert config.project_coordinates == {
            "com.example:widget:1.0",
            "com.example:widget-core:1.0",
        }

    def test_project_coordinates_without_group(self) -> None:
        """Test that an incomplete coordinate is not added."""
        assert ProjectConfig(name="widget").project_coordinates == set()


class TestLoadConfig:
    """Test reading configuration files."""

    def test_licensing_toml(self, tmp_path: Path) -> None:
        """Test a complete licensing.toml."""
        path = tmp_path / "licensing.toml"
        path.write_text(
            """
[project]
name = "widget"
group = "com.example"
version = "1.2.0"
build_dir = "out"
subprojects = ["com.example:widget-core:1.2.0"]

[[license]]
license = "APACHE_2"
description = "Widgets for everyone"
authors = ["Example Corp"]

    [[license.extra]]
    name = "Bundled Parser"
    license = "MIT"
    authors = ["Jane Doe"]
"""
        )

        config = load_config(path)

        assert config.name == "widget"
        assert config.build_dir == tmp_path / "out"
        assert config.root_dir == tmp_path / "."
        assert "com.example:widget-core:1.2.0" in config.project_coordinates
        primary = config.licensing.primary
        assert primary.name == "widget"
        assert primary.license is License.APACHE_2
        assert primary.extras[0].name == "Bundled Parser"

    def test_pyproject_table(self, tmp_path: Path) -> None:
        """Test the tool table with name and version from [project]."""
        path = tmp_path / "pyproject.toml"
        path.write_text(
            """
[project]
name = "widget"
version = "2.0"

[[tool.license-attribution.license]]
license = "MIT"
authors = ["Acme"]
"""
        )

        config = load_config(path)

        assert config.name == "widget"
        assert config.version == "2.0"
        assert config.licensing.primary.license is License.MIT

    def test_pyproject_without_table(self, tmp_path: Path) -> None:
        """Test that a pyproject.toml needs the tool table."""
        path = tmp_path / "pyproject.toml"
        path.write_text('[project]\nname = "widget"\n')

        with pytest.raises(LicensingConfigError, match="tool.license-attribution"):
            load_config(path)

    def test_name_defaults_to_directory(self, tmp_path: Path) -> None:
        """Test the project name fallback."""
        project_dir = tmp_path / "gizmo"
        project_dir.mkdir()
        path = project_dir / "licensing.toml"
        path.write_text('[[license]]\nlicense = "MIT"\n')

        assert load_config(path).licensing.primary.name == "gizmo"

    def test_unknown_license_warns(self, tmp_path: Path, caplog) -> None:
        """Test that an unrecognized license is logged and kept as UNKNOWN."""
        path = tmp_path / "licensing.toml"
        path.write_text('[project]\nname = "w"\n\n[[license]]\nlicense = "Made Up"\n')

        with caplog.at_level(logging.WARNING, logger="license_attribution"):
            config = load_config(path)

        assert config.licensing.primary.license is License.UNKNOWN
        assert "Made Up" in caplog.text

    def test_missing_file(self, tmp_path: Path) -> None:
        """Test that a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "licensing.toml")

    def test_invalid_toml(self, tmp_path: Path) -> None:
        """Test that syntax errors become LicensingConfigError."""
        path = tmp_path / "licensing.toml"
        path.write_text("[project\n")

        with pytest.raises(LicensingConfigError, match="Invalid TOML"):
            load_config(path)

    @pytest.mark.parametrize(
        "content,match",
        [
            ('project = "x"\n', "'project'"),
            ('[project]\nsubprojects = "a:b:1"\n', "subprojects"),
            ('license = "MIT"\n', "array of tables"),
            ('[[license]]\nlicense = "MIT"\nurls = "https://x"\n', "License #1"),
        ],
    )
    def test_malformed(self, tmp_path: Path, content, match) -> None:
        """Test wrong types in the configuration."""
        path = tmp_path / "licensing.toml"
        path.write_text(content)

        with pytest.raises(LicensingConfigError, match=match):
            load_config(path)

    def test_config_error_is_value_error(self) -> None:
        """Test that callers can catch configuration errors as ValueError."""
        assert issubclass(LicensingConfigError, ValueError)
