"""Scan engine: classify dependencies and collect their attributions.

Every dependency ends up in one of three buckets:

* known: the rule table has an attribution for it;
* embedded: its archive carries a ``LICENSE.blob`` written by this tool;
* missing: neither source has license information.

Attributions found for known and embedded dependencies are merged into the
``extras`` of the project's primary license record.
"""

import logging
import zipfile
from collections.abc import Iterable, Sequence
from datetime import datetime
from pathlib import Path
from typing import Optional

from license_attribution.attribution import AttributionRecord
from license_attribution.blob import decode_records
from license_attribution.models import DependencyNode, ScanResult
from license_attribution.rules import VersionedRuleTable

logger = logging.getLogger(__name__)

LICENSE_BLOB = "LICENSE.blob"


def _contains(records: Iterable[AttributionRecord], record: AttributionRecord) -> bool:
    return any(existing is record or existing == record for existing in records)


def archive_year(files: Iterable[Path]) -> Optional[int]:
    """Return the year of the oldest first zip entry among the archives.

    The first entry of a jar is normally its manifest, whose timestamp is the
    build date of the artifact.

    Args:
        files: Archive files backing a dependency.

    Returns:
        The oldest year found, or None if no archive could be read.
    """
    oldest: Optional[tuple[int, ...]] = None

    for path in files:
        try:
            with zipfile.ZipFile(path) as archive:
                entries = archive.infolist()
        except (OSError, zipfile.BadZipFile) as e:
            logger.debug("Cannot read timestamp of %s: %s", path, e)
            continue

        if not entries:
            continue
        stamp = entries[0].date_time
        if oldest is None or stamp < oldest:
            oldest = stamp

    return oldest[0] if oldest is not None else None


def read_embedded(path: Path) -> Optional[list[AttributionRecord]]:
    """Read the attribution records embedded in an archive.

    Args:
        path: Archive (jar) to inspect.

    Returns:
        The decoded records, or None if the archive has no ``LICENSE.blob``.

    Raises:
        OSError: If the archive cannot be read.
        zipfile.BadZipFile: If the file is not a zip archive.
        BlobFormatError: If the blob is malformed.
    """
    with zipfile.ZipFile(path) as archive:
        try:
            data = archive.read(LICENSE_BLOB)
        except KeyError:
            return None
    return decode_records(data)


class ScanEngine:
    """Classify dependencies as known, embedded or missing.

    Attributes:
        table: Rule table consulted first.
        project_coordinates: ``group:name:version`` of the scanning project
            and its sub-projects; never reported as missing.
    """

    def __init__(
        self,
        table: VersionedRuleTable,
        project_coordinates: Iterable[str] = (),
    ) -> None:
        self.table = table
        self.project_coordinates = frozenset(project_coordinates)

    def scan(
        self,
        dependencies: Iterable[DependencyNode],
        licenses: Sequence[AttributionRecord],
    ) -> ScanResult:
        """Scan dependencies and merge their attributions into the primary license.

        Only one layer is attributed per dependency: when the rule table or an
        embedded blob covers a module, the attribution is taken as is.

        Args:
            dependencies: Resolved dependency nodes; duplicates are ignored.
            licenses: The project's declared licenses. The first one is the
                primary license and receives every attribution in ``extras``.

        Returns:
            Sorted report lines per bucket. Empty when no license is declared.
        """
        result = ScanResult()
        if not licenses:
            logger.warning("No project license declared, skipping dependency scan")
            return result

        primary = licenses[0]
        nodes = sorted(set(dependencies), key=lambda node: node.coordinate)
        logger.debug("Scanning %d dependencies", len(nodes))

        # Rule records as stored in the table, before any copyright backfill
        seen: list[AttributionRecord] = []
        unresolved: list[DependencyNode] = []
        for node in nodes:
            record = self._resolve(node)
            if record is None:
                unresolved.append(node)
                continue

            if not _contains(seen, record) and not _contains(primary.extras, record):
                seen.append(record.copy())
                if not record.copyrights:
                    record.add_copyright(archive_year(node.files) or datetime.now().year)
                primary.extras.append(record)
                result.known.append(f"[{record.license}] {node.coordinate}")
            else:
                logger.debug("%s: attribution already merged", node)

        still_missing: list[DependencyNode] = []
        for node in unresolved:
            records = self._read_blob(node)
            if not records:
                still_missing.append(node)
                continue

            for record in records:
                if not _contains(primary.extras, record):
                    primary.extras.append(record)
            result.embedded.append(f"[{records[0].license}] {node.coordinate}")

        for node in still_missing:
            if node.coordinate in self.project_coordinates:
                logger.debug("Not reporting project module %s as missing", node.coordinate)
                continue
            result.missing.append(node.coordinate)

        result.known.sort()
        result.embedded.sort()
        result.missing.sort()
        return result

    def _resolve(self, node: DependencyNode) -> Optional[AttributionRecord]:
        try:
            return self.table.resolve(node.coordinate)
        except ValueError as e:
            logger.warning("Error getting license information for %s: %s", node, e)
            return None

    def _read_blob(self, node: DependencyNode) -> Optional[list[AttributionRecord]]:
        for path in node.files:
            if not path.is_file():
                logger.debug("%s: artifact %s is not a readable file", node, path)
                continue
            try:
                records = read_embedded(path)
            except Exception as e:
                logger.warning("%s [ERROR %s]: %s", node, path, e)
                continue
            if records is not None:
                logger.debug("%s: %d embedded record(s) in %s", node, len(records), path)
                return records
        return None
