"""Core data models for license_attribution.

This module defines the dependency nodes consumed by the scan, the scan
result, and the license metadata handed to publishing steps.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class DependencyNode:
    """A resolved dependency and the archives backing it.

    Produced by a scanner from the build tool's resolved dependency graph.
    Identity is the ``group:name:version`` coordinate; the backing files do
    not take part in equality or hashing, so the same module resolved in two
    configurations collapses to one node.

    Attributes:
        group: Group (organization) id, e.g. "net.java.dev.jna".
        name: Artifact name, e.g. "jna".
        version: Resolved version string, e.g. "5.8.0".
        files: Backing archive files (jars) for this module.
    """

    group: str
    name: str
    version: str
    files: tuple[Path, ...] = field(default=(), compare=False)

    @property
    def coordinate(self) -> str:
        """Return the full ``group:name:version`` coordinate."""
        return f"{self.group}:{self.name}:{self.version}"

    def __str__(self) -> str:
        return self.coordinate


@dataclass
class ScanResult:
    """Outcome of scanning a dependency set.

    Each list holds one report line per dependency, sorted.

    Attributes:
        known: Dependencies resolved from the rule table.
        embedded: Dependencies resolved from a ``LICENSE.blob`` in their archive.
        missing: Dependencies with no license information.
    """

    known: list[str] = field(default_factory=list)
    embedded: list[str] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        """Return the number of dependencies reported."""
        return len(self.known) + len(self.embedded) + len(self.missing)


@dataclass(frozen=True)
class PublishMetadata:
    """License fields for package metadata (e.g. a POM or manifest).

    Attributes:
        name: Preferred display name of the primary license.
        url: Preferred URL of the primary license.
        comments: License notes, only set for custom licenses.
    """

    name: str
    url: str
    comments: Optional[str] = None
