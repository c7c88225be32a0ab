"""Base interface for output reporters.

Reporters turn a project's attribution records into a document: the plain
text ``LICENSE`` file, or a Markdown summary of a scan.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from license_attribution.attribution import AttributionRecord
from license_attribution.models import ScanResult


class BaseReporter(ABC):
    """Abstract base class for output reporters.

    Output always uses ``\\n`` line endings and UTF-8, so the same records
    produce byte-identical files on every platform.
    """

    @abstractmethod
    def render(
        self,
        licenses: list[AttributionRecord],
        scan: Optional[ScanResult] = None,
    ) -> str:
        """Render attribution records to formatted output.

        Args:
            licenses: Project licenses, primary first.
            scan: Optional scan result to include.

        Returns:
            Rendered output as a string.
        """
        ...

    def write(
        self,
        licenses: list[AttributionRecord],
        output_path: Path,
        scan: Optional[ScanResult] = None,
    ) -> None:
        """Render and write output to a file.

        Args:
            licenses: Project licenses, primary first.
            output_path: Path to write the output file.
            scan: Optional scan result to include.
        """
        content = self.render(licenses, scan)
        output_path.write_bytes(content.encode("utf-8"))

    @property
    @abstractmethod
    def format_name(self) -> str:
        """Return the output format name, like "text" or "markdown"."""
        ...

    @property
    @abstractmethod
    def default_extension(self) -> str:
        """Return the default file extension for this format."""
        ...
