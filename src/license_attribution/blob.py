"""Binary encoding of attribution records (the ``LICENSE.blob`` format).

A published archive carries its attribution data in this format so that
projects depending on it can recover the license information without a
rule-table entry. The layout is stable across releases:

* integers are big-endian signed 32-bit values;
* a string is its UTF-8 byte length followed by the bytes;
* a record is: name, license member name, description, the copyright
  year count and years, then count-prefixed urls, notes and authors, then
  the count of extras followed by each extra record (depth first);
* a document is the record count followed by the records.
"""

import logging
import struct
from collections.abc import Iterable

from license_attribution.attribution import AttributionRecord
from license_attribution.licenses import License

logger = logging.getLogger(__name__)

_INT = struct.Struct(">i")


class BlobFormatError(ValueError):
    """Raised when attribution data cannot be encoded or decoded."""


class _Writer:
    def __init__(self) -> None:
        self._parts: list[bytes] = []

    def write_int(self, value: int) -> None:
        try:
            self._parts.append(_INT.pack(value))
        except struct.error as e:
            raise BlobFormatError(f"Integer out of range: {value}") from e

    def write_str(self, value: str) -> None:
        data = value.encode("utf-8")
        self.write_int(len(data))
        self._parts.append(data)

    def write_strings(self, values: list[str]) -> None:
        self.write_int(len(values))
        for value in values:
            self.write_str(value)

    def getvalue(self) -> bytes:
        return b"".join(self._parts)


class _Reader:
    def __init__(self, data: bytes) -> None:
        self._data = memoryview(data)
        self._offset = 0

    def _take(self, size: int) -> memoryview:
        end = self._offset + size
        if end > len(self._data):
            raise BlobFormatError(
                f"Truncated license blob: needed {size} bytes at offset {self._offset}"
            )
        chunk = self._data[self._offset:end]
        self._offset = end
        return chunk

    def read_int(self) -> int:
        return _INT.unpack(self._take(_INT.size))[0]

    def read_count(self) -> int:
        value = self.read_int()
        if value < 0:
            raise BlobFormatError(f"Negative count {value} in license blob")
        return value

    def read_str(self) -> str:
        raw = self._take(self.read_count())
        try:
            return bytes(raw).decode("utf-8")
        except UnicodeDecodeError as e:
            raise BlobFormatError(f"Invalid UTF-8 in license blob: {e}") from e

    def read_strings(self) -> list[str]:
        return [self.read_str() for _ in range(self.read_count())]

    @property
    def remaining(self) -> int:
        return len(self._data) - self._offset


def _write_fields(writer: _Writer, record: AttributionRecord) -> None:
    writer.write_str(record.name)
    writer.write_str(record.license.name)
    writer.write_str(record.description)
    writer.write_int(len(record.copyrights))
    for year in record.copyrights:
        writer.write_int(year)
    writer.write_strings(record.urls)
    writer.write_strings(record.notes)
    writer.write_strings(record.authors)
    writer.write_int(len(record.extras))


def _write_record(writer: _Writer, record: AttributionRecord) -> None:
    # Depth first with an explicit stack; ``path`` holds the records between
    # the root and the current one.
    path: set[int] = set()
    pending: list[tuple[AttributionRecord, bool]] = [(record, False)]

    while pending:
        node, leaving = pending.pop()
        if leaving:
            path.discard(id(node))
            continue
        if id(node) in path:
            raise BlobFormatError(f"Cyclic extras detected at '{node.name}'")

        path.add(id(node))
        _write_fields(writer, node)
        pending.append((node, True))
        pending.extend((extra, False) for extra in reversed(node.extras))


def _read_fields(reader: _Reader) -> tuple[AttributionRecord, int]:
    name = reader.read_str()
    license_name = reader.read_str()
    license = License.__members__.get(license_name)
    if license is None:
        logger.debug("Unknown license '%s' in blob for '%s'", license_name, name)
        license = License.UNKNOWN

    record = AttributionRecord(name=name, license=license, description=reader.read_str())
    record.copyrights = [reader.read_int() for _ in range(reader.read_count())]
    record.urls = reader.read_strings()
    record.notes = reader.read_strings()
    record.authors = reader.read_strings()
    return record, reader.read_count()


def _read_record(reader: _Reader) -> AttributionRecord:
    root, count = _read_fields(reader)
    # Each frame is a record and the number of its extras still to read
    frames = [(root, count)]

    while frames:
        record, remaining = frames[-1]
        if not remaining:
            frames.pop()
            continue

        frames[-1] = (record, remaining - 1)
        extra, extra_count = _read_fields(reader)
        record.extras.append(extra)
        frames.append((extra, extra_count))

    return root


def encode_record(record: AttributionRecord) -> bytes:
    """Serialize a single record and its extras."""
    writer = _Writer()
    _write_record(writer, record)
    return writer.getvalue()


def decode_record(data: bytes) -> AttributionRecord:
    """Deserialize a single record produced by :func:`encode_record`.

    Raises:
        BlobFormatError: If the data is truncated, malformed, or has
            trailing bytes.
    """
    reader = _Reader(data)
    record = _read_record(reader)
    if reader.remaining:
        raise BlobFormatError(f"{reader.remaining} trailing bytes after license record")
    return record


def encode_records(records: Iterable[AttributionRecord]) -> bytes:
    """Serialize a list of records into the ``LICENSE.blob`` document format.

    Args:
        records: Records to serialize, in order.

    Returns:
        The encoded document.

    Raises:
        BlobFormatError: If a record's extras form a cycle or a year does
            not fit in 32 bits.
    """
    records = list(records)
    writer = _Writer()
    writer.write_int(len(records))
    for record in records:
        _write_record(writer, record)
    return writer.getvalue()


def decode_records(data: bytes) -> list[AttributionRecord]:
    """Deserialize a ``LICENSE.blob`` document.

    Args:
        data: Bytes produced by :func:`encode_records`.

    Returns:
        The decoded records, in order.

    Raises:
        BlobFormatError: If the data is truncated, malformed, or has
            trailing bytes.
    """
    reader = _Reader(data)
    records = [_read_record(reader) for _ in range(reader.read_count())]
    if reader.remaining:
        raise BlobFormatError(f"{reader.remaining} trailing bytes after license records")
    return records
