"""Attribution records: the license metadata unit for one entity.

An ``AttributionRecord`` describes who holds the copyright on a project or
dependency and which license governs it. Records nest: ``extras`` holds the
attribution of bundled sub-components, and the primary project record
collects every scanned dependency there.
"""

import copy
from collections import deque
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any, Optional

from license_attribution.licenses import License


@dataclass(eq=False)
class AttributionRecord:
    """License attribution for a project, dependency or bundled component.

    Equality is structural over every field, including the nested
    ``extras`` tree. Records are mutable (the scan backfills copyrights and
    accumulates extras) and therefore unhashable.

    Attributes:
        name: Name of the attributed entity.
        license: Catalog license governing the entity.
        description: Optional one-line description.
        copyrights: Copyright years; empty means "unset".
        urls: Project URLs.
        notes: Free text; for ``License.CUSTOM`` the notes are the license.
        authors: Authors or copyright holders.
        extras: Attributions of bundled sub-components.
    """

    name: str
    license: License = License.UNKNOWN
    description: str = ""
    copyrights: list[int] = field(default_factory=list)
    urls: list[str] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)
    authors: list[str] = field(default_factory=list)
    extras: list["AttributionRecord"] = field(default_factory=list)

    @property
    def copyright(self) -> int:
        """Return the earliest copyright year, or 0 when unset."""
        return min(self.copyrights) if self.copyrights else 0

    def add_copyright(self, year: int) -> None:
        self.copyrights.append(int(year))

    def add_url(self, url: str) -> None:
        self.urls.append(url)

    def add_note(self, note: str) -> None:
        self.notes.append(note)

    def add_author(self, author: str) -> None:
        self.authors.append(author)

    def add_extra(
        self,
        name: str,
        license: License,
        configure: Optional[Callable[["AttributionRecord"], None]] = None,
    ) -> "AttributionRecord":
        """Declare license information for a bundled sub-component.

        Args:
            name: Name of the bundled component.
            license: License of the bundled component.
            configure: Optional callback that fills in the new record.

        Returns:
            The new extra record (already appended to ``extras``).
        """
        extra = AttributionRecord(name=name, license=license)
        if configure is not None:
            configure(extra)
        self.extras.append(extra)
        return extra

    def copy(self) -> "AttributionRecord":
        """Return a deep copy of this record and its extras."""
        return copy.deepcopy(self)

    def serialize(self) -> bytes:
        """Encode this record with the ``LICENSE.blob`` record layout."""
        from license_attribution.blob import encode_record

        return encode_record(self)

    @classmethod
    def deserialize(cls, data: bytes) -> "AttributionRecord":
        """Decode a record produced by :meth:`serialize`."""
        from license_attribution.blob import decode_record

        return decode_record(data)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AttributionRecord):
            return NotImplemented

        # Pairs already under comparison are assumed equal, so a cycle
        # cannot recurse forever.
        seen: set[tuple[int, int]] = set()
        pending = deque([(self, other)])

        while pending:
            left, right = pending.popleft()
            if left is right:
                continue

            key = (id(left), id(right))
            if key in seen:
                continue
            seen.add(key)

            if (
                left.name != right.name
                or left.license is not right.license
                or left.description != right.description
                or left.copyrights != right.copyrights
                or left.urls != right.urls
                or left.notes != right.notes
                or left.authors != right.authors
                or len(left.extras) != len(right.extras)
            ):
                return False

            pending.extend(zip(left.extras, right.extras))

        return True

    def __repr__(self) -> str:
        return (
            f"AttributionRecord(name={self.name!r}, license={self.license.name}, "
            f"extras={len(self.extras)})"
        )

    def sort_key(self) -> tuple:
        """Return a total ordering key: name (case-insensitive) first.

        After the name, every field of the record and of its extras takes
        part, so two records only tie when they are equal.
        """
        return (self.name.casefold(), _tree_key(self))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AttributionRecord":
        """Build a record (and its extras) from a mapping.

        This is the shape used by TOML rule files and project configuration::

            name = "Netty"
            license = "APACHE_2"
            description = "..."
            copyright = [2004, 2005]
            urls = ["https://netty.io"]
            authors = ["The Netty Project"]
            notes = []
            extra = [{ name = "...", license = "MIT" }]

        Args:
            data: Mapping with at least ``name``.

        Returns:
            The new record.

        Raises:
            ValueError: If ``name`` is missing or a field has the wrong type.
        """
        if "name" not in data:
            raise ValueError("License entry is missing required field 'name'")

        record = cls(
            name=str(data["name"]),
            license=License.parse(data.get("license")),
            description=str(data.get("description", "")),
        )

        copyrights = data.get("copyright", [])
        if isinstance(copyrights, int):
            copyrights = [copyrights]
        for year in _as_list(copyrights, "copyright"):
            record.add_copyright(year)
        for url in _as_list(data.get("urls", []), "urls"):
            record.add_url(str(url))
        for note in _as_list(data.get("notes", []), "notes"):
            record.add_note(str(note))
        for author in _as_list(data.get("authors", []), "authors"):
            record.add_author(str(author))
        for extra in _as_list(data.get("extra", []), "extra"):
            if not isinstance(extra, dict):
                raise ValueError(f"Extra license entry for '{record.name}' must be a table")
            record.extras.append(cls.from_dict(extra))

        return record

    def to_dict(self) -> dict[str, Any]:
        """Return the mapping form accepted by :meth:`from_dict`."""
        return {
            "name": self.name,
            "license": self.license.name,
            "description": self.description,
            "copyright": list(self.copyrights),
            "urls": list(self.urls),
            "notes": list(self.notes),
            "authors": list(self.authors),
            "extra": [extra.to_dict() for extra in self.extras],
        }


def _fields_key(record: AttributionRecord) -> tuple:
    return (
        record.name,
        record.license.name,
        record.description,
        tuple(record.copyrights),
        tuple(record.urls),
        tuple(record.notes),
        tuple(record.authors),
        len(record.extras),
    )


def _tree_key(record: AttributionRecord) -> tuple:
    # Depth-first field tuples of the whole extras tree. The extras count in
    # each entry keeps the flattened form unambiguous. A record already on
    # the current path (a cycle) contributes an empty entry.
    key: list[tuple] = []
    path: set[int] = set()
    pending: list[tuple[AttributionRecord, bool]] = [(record, False)]

    while pending:
        node, leaving = pending.pop()
        if leaving:
            path.discard(id(node))
            continue
        if id(node) in path:
            key.append(())
            continue

        path.add(id(node))
        key.append(_fields_key(node))
        pending.append((node, True))
        pending.extend((extra, False) for extra in reversed(node.extras))

    return tuple(key)


def _as_list(value: Any, field_name: str) -> list:
    if not isinstance(value, list):
        raise ValueError(f"Field '{field_name}' must be a list")
    return value


def flatten(records: Iterable[AttributionRecord]) -> list[AttributionRecord]:
    """Flatten records and all nested extras, breadth first.

    Each record object appears once, in first-seen order, even if the
    extras graph contains a cycle.

    Args:
        records: Top-level records.

    Returns:
        Every reachable record.
    """
    flattened: list[AttributionRecord] = []
    visited: set[int] = set()
    pending = deque(records)

    while pending:
        record = pending.popleft()
        if id(record) in visited:
            continue
        visited.add(id(record))
        flattened.append(record)
        pending.extend(record.extras)

    return flattened
