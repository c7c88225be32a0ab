"""Base interface for dependency graph scanners.

Scanners read the resolved dependency graph a build tool produced and turn
it into ``DependencyNode`` objects. Resolving configurations is the build
tool's job; scanners only read its output.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from license_attribution.models import DependencyNode


class BaseScanner(ABC):
    """Abstract base class for dependency graph scanners.

    Attributes:
        source_path: Path to the file being scanned.
        configurations: Names of the configurations (classpaths) to include.
            Empty means every configuration in the source.
    """

    def __init__(
        self,
        source_path: Optional[Path] = None,
        configurations: tuple[str, ...] = (),
    ) -> None:
        """Initialize the scanner.

        Args:
            source_path: Path to the dependency graph file.
            configurations: Configuration names to union, e.g. ("runtimeClasspath",).
        """
        self.source_path = source_path
        self.configurations = tuple(configurations)

    @abstractmethod
    def scan(self) -> list[DependencyNode]:
        """Scan the source and return the flattened dependency set.

        Returns:
            Unique nodes (by coordinate) across the selected configurations.

        Raises:
            FileNotFoundError: If the source file does not exist.
            ValueError: If the source format is invalid.
        """
        ...

    @classmethod
    @abstractmethod
    def can_handle(cls, path: Path) -> bool:
        """Check if this scanner can handle the given file.

        Args:
            path: Path to check.

        Returns:
            True if this scanner can process the file, False otherwise.
        """
        ...

    @property
    @abstractmethod
    def source_name(self) -> str:
        """Return a human-readable name for this scanner's source type."""
        ...

    def _check_source(self) -> Path:
        if self.source_path is None:
            raise ValueError("source_path must be set before calling scan()")
        if not self.source_path.exists():
            raise FileNotFoundError(
                f"Dependency graph not found: {self.source_path}"
            )
        return self.source_path
