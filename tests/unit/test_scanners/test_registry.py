"""Tests for scanner selection."""

from pathlib import Path

import pytest

from license_attribution.scanners import (
    GradleReportScanner,
    JsonGraphScanner,
    get_scanner,
)


class TestGetScanner:
    """Test get_scanner."""

    def test_json(self, tmp_path: Path) -> None:
        """Test that JSON graphs get the JSON scanner."""
        scanner = get_scanner(tmp_path / "graph.json", ("runtimeClasspath",))

        assert isinstance(scanner, JsonGraphScanner)
        assert scanner.configurations == ("runtimeClasspath",)

    def test_gradle_report(self, tmp_path: Path) -> None:
        """Test that reports get the Gradle scanner with the artifact root."""
        scanner = get_scanner(tmp_path / "deps.txt", artifact_root=tmp_path)

        assert isinstance(scanner, GradleReportScanner)
        assert scanner.artifact_root == tmp_path

    def test_unsupported(self, tmp_path: Path) -> None:
        """Test that unknown files are rejected."""
        with pytest.raises(ValueError, match="No scanner available for 'pom.xml'"):
            get_scanner(tmp_path / "pom.xml")
