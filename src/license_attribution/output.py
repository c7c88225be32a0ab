"""Writing the generated license files.

For every output directory the writer produces:

* ``LICENSE``: the rendered attribution document;
* ``LICENSE.blob``: the same records in the binary format, read back by
  projects that depend on this one;
* one text file per distinct license referenced anywhere in the records,
  e.g. ``LICENSE.Apachev2``.

A file is only rewritten when its bytes change, so repeated runs leave
timestamps (and incremental build caches) alone.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from license_attribution.attribution import AttributionRecord, flatten
from license_attribution.blob import encode_records
from license_attribution.engine import LICENSE_BLOB
from license_attribution.licenses import License
from license_attribution.reporters.text import TextReporter

logger = logging.getLogger(__name__)

LICENSE_FILE = "LICENSE"


@dataclass
class WriteResult:
    """Outcome of writing license files.

    Attributes:
        files: Every file that belongs to the output, written or not.
        did_work: True if at least one file was created or changed.
    """

    files: list[Path] = field(default_factory=list)
    did_work: bool = False


def file_is_same(path: Path, data: bytes) -> bool:
    """Return True if ``path`` exists and holds exactly ``data``."""
    try:
        if path.stat().st_size != len(data):
            return False
        return path.read_bytes() == data
    except OSError:
        return False


def license_text_files(licenses: Iterable[AttributionRecord]) -> dict[str, bytes]:
    """Collect the license texts needed by the records and their extras.

    Licenses without bundled text (unknown, custom, commercial) are skipped.

    Returns:
        Mapping of file name to text bytes, in first-referenced order.
    """
    texts: dict[str, bytes] = {}
    for record in flatten(licenses):
        license = record.license
        if license.text_file and license.text_file not in texts:
            texts[license.text_file] = license.license_text()
    return texts


def all_possible_files() -> list[str]:
    """Return the name of every file this tool can generate."""
    names = [LICENSE_FILE, LICENSE_BLOB]
    names.extend(member.text_file for member in License if member.text_file)
    return names


class LicenseWriter:
    """Writes license files into one or more output directories.

    Attributes:
        output_dirs: Directories that receive a full set of files.
        reporter: Renders the ``LICENSE`` document.
    """

    def __init__(self, output_dirs: Iterable[Path]) -> None:
        self.output_dirs = list(dict.fromkeys(output_dirs))
        self.reporter = TextReporter()

    def _contents(self, licenses: list[AttributionRecord]) -> dict[str, bytes]:
        # Rendering sorts the records, so the blob sees the canonical order
        document = self.reporter.render(licenses).encode("utf-8")
        contents = {LICENSE_FILE: document, LICENSE_BLOB: encode_records(licenses)}
        contents.update(license_text_files(licenses))
        return contents

    def expected_files(self, licenses: list[AttributionRecord]) -> list[Path]:
        """Return the files :meth:`write` produces for these licenses.

        This is the list to hand to an archive-building step.
        """
        if not licenses:
            return []
        names = [LICENSE_FILE, LICENSE_BLOB, *license_text_files(licenses)]
        return [directory / name for directory in self.output_dirs for name in names]

    def is_up_to_date(self, licenses: list[AttributionRecord]) -> bool:
        """Return True if every output file already has the expected bytes."""
        if not licenses:
            return True
        contents = self._contents(licenses)
        return all(
            file_is_same(directory / name, data)
            for directory in self.output_dirs
            for name, data in contents.items()
        )

    def write(self, licenses: list[AttributionRecord]) -> WriteResult:
        """Write all license files, skipping those that are unchanged.

        Args:
            licenses: Project licenses, primary first. Sorted in place.

        Returns:
            The files belonging to the output and whether anything changed.

        Raises:
            OSError: If a directory or file cannot be written.
            BlobFormatError: If the records cannot be encoded.
        """
        result = WriteResult()
        if not licenses:
            logger.warning(
                "No license information defined in the project. Unable to build license data"
            )
            return result

        contents = self._contents(licenses)
        for directory in self.output_dirs:
            directory.mkdir(parents=True, exist_ok=True)
            for name, data in contents.items():
                path = directory / name
                result.files.append(path)
                if file_is_same(path, data):
                    logger.debug("Unchanged: %s", path)
                    continue
                path.write_bytes(data)
                logger.debug("Wrote %s (%d bytes)", path, len(data))
                result.did_work = True

        return result

    def clean(self) -> list[Path]:
        """Remove every file this tool could have generated.

        Returns:
            The files that were deleted.
        """
        removed: list[Path] = []
        for directory in self.output_dirs:
            for name in all_possible_files():
                path = directory / name
                if path.is_file():
                    path.unlink()
                    removed.append(path)
                    logger.debug("Removed %s", path)
        return removed
