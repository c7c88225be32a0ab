"""Dependency graph scanners.

This module provides scanners that read the resolved dependency graph
exported by a build tool.
"""

from pathlib import Path
from typing import Optional

from license_attribution.scanners.base import BaseScanner
from license_attribution.scanners.gradle import GradleReportScanner
from license_attribution.scanners.json_graph import JsonGraphScanner

__all__ = [
    "BaseScanner",
    "GradleReportScanner",
    "JsonGraphScanner",
    "get_scanner",
]

# Registry of available scanners in priority order
_SCANNERS: list[type[BaseScanner]] = [
    JsonGraphScanner,
    GradleReportScanner,
]


def get_scanner(
    path: Path,
    configurations: tuple[str, ...] = (),
    artifact_root: Optional[Path] = None,
) -> BaseScanner:
    """Get the appropriate scanner for a dependency graph file.

    Args:
        path: Path to the exported graph.
        configurations: Configuration names to union; empty means all.
        artifact_root: Module cache directory, used by report scanners that
            carry no file locations.

    Returns:
        Scanner instance configured for the given file.

    Raises:
        ValueError: If no scanner can handle the given file.
    """
    for scanner_cls in _SCANNERS:
        if scanner_cls.can_handle(path):
            if scanner_cls is GradleReportScanner:
                return GradleReportScanner(path, configurations, artifact_root)
            return scanner_cls(path, configurations)

    raise ValueError(
        f"No scanner available for '{path.name}'. "
        f"Supported files: *.json dependency graphs, gradle dependencies reports (*.txt, *.log)"
    )
