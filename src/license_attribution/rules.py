"""Versioned rule table mapping dependency coordinates to attributions.

A rule binds a coordinate scope to an attribution record, optionally
starting at a version::

    "io.netty"                      every artifact of the group, any version
    "org.slf4j:slf4j-api"           one artifact, any version
    "net.java.dev.jna:jna:4.0"      one artifact, from version 4.0 on
    "org.jetbrains.kotlin:1.4.0"    every artifact of the group, from 1.4.0 on

Looking up ``group:name:version`` returns the rule introduced at the highest
version not exceeding the queried one, so a library that moved from LGPL
(1.0) to Apache (4.0) resolves to LGPL for 3.x and Apache for 4.x and later.
When the exact module has no rules, the lookup falls back to the group.
"""

import logging
import re
import tomllib
from collections.abc import Iterable
from functools import lru_cache
from importlib.resources import files
from pathlib import Path
from typing import Any, Optional

from packaging.version import InvalidVersion, Version

from license_attribution.attribution import AttributionRecord

logger = logging.getLogger(__name__)

ZERO_VERSION = Version("0")

# Number of progressively coarser module ids tried after the exact one
MAX_FALLBACKS = 2

_NUMERIC_PREFIX = re.compile(r"^\d+(?:\.\d+)*")

_NOTATION_EXAMPLES = (
    "Example notations: 'com.example:library:1.0', "
    "'org.mockito:mockito-core:1.9.5:javadoc'"
)


def parse_version(text: str) -> Version:
    """Parse a dependency version for comparison.

    PEP 440 versions are used as-is (``2.0.0-RC1`` normalizes to
    ``2.0.0rc1``). Maven-style qualifiers PEP 440 rejects, such as
    ``1.0.0.Final`` or ``3.2-jre``, compare by their numeric prefix.

    Args:
        text: Version string.

    Returns:
        The parsed version, or ``0`` if it has no numeric prefix.
    """
    text = text.strip()
    try:
        return Version(text)
    except InvalidVersion:
        pass

    match = _NUMERIC_PREFIX.match(text)
    if match:
        return Version(match.group(0))
    return ZERO_VERSION


def _looks_like_version(text: str) -> bool:
    if not text or not text[0].isdigit():
        return False
    try:
        Version(text)
    except InvalidVersion:
        return _NUMERIC_PREFIX.match(text) is not None
    return True


def parse_coordinate(coordinate: str, fallback: int = 0) -> tuple[str, Version]:
    """Split a coordinate into a module id and a version.

    Args:
        coordinate: ``group[:name[:version[:classifier]]]`` or ``group:version``.
        fallback: Number of trailing segments to drop before parsing.

    Returns:
        Tuple of (module id, version). The version is ``0`` when the
        coordinate carries none.

    Raises:
        ValueError: If the coordinate is empty or has more than four segments.
    """
    parts = coordinate.strip().split(":")
    if len(parts) > 4:
        raise ValueError(
            f"Supplied module notation '{coordinate}' is invalid. {_NOTATION_EXAMPLES}"
        )
    if not parts[0]:
        raise ValueError(
            f"Supplied module notation is invalid (it is empty). {_NOTATION_EXAMPLES}"
        )

    size = max(len(parts) - fallback, 0)
    if size == 0:
        raise ValueError(
            f"Supplied module notation '{coordinate}' has no group. {_NOTATION_EXAMPLES}"
        )

    group = parts[0]
    if size == 1:
        return group, ZERO_VERSION

    if size == 2:
        name = parts[1]
        if _looks_like_version(name):
            return group, parse_version(name)
        return f"{group}:{name}", ZERO_VERSION

    name, version = parts[1], parts[2]
    if _looks_like_version(version):
        return f"{group}:{name}", parse_version(version)
    return f"{group}:{name}", ZERO_VERSION


class VersionedRuleTable:
    """Lookup table from coordinates to attribution records.

    Populated once from rule files and read-only afterwards. Records
    returned by :meth:`resolve` are copies, so callers may mutate them.
    """

    def __init__(self, rules: Iterable[tuple[str, AttributionRecord]] = ()) -> None:
        """Initialize the table.

        Args:
            rules: ``(coordinate, record)`` pairs, registered in order.
        """
        self._rules: dict[str, list[tuple[Version, AttributionRecord]]] = {}
        for coordinate, record in rules:
            self.add(coordinate, record)

    def __len__(self) -> int:
        return sum(len(entries) for entries in self._rules.values())

    def __contains__(self, module_id: object) -> bool:
        return module_id in self._rules

    def add(self, coordinate: str, record: AttributionRecord) -> None:
        """Register a rule.

        Rules for a module are kept newest threshold first. Equal thresholds
        keep registration order.

        Args:
            coordinate: Rule scope, optionally with a starting version.
            record: Attribution applying from that version on.

        Raises:
            ValueError: If the coordinate is not a valid notation.
        """
        module_id, threshold = parse_coordinate(coordinate)
        entries = self._rules.setdefault(module_id, [])
        entries.append((threshold, record))
        entries.sort(key=lambda entry: entry[0], reverse=True)

    def extend(self, other: "VersionedRuleTable") -> None:
        """Register every rule of another table after this table's rules."""
        for module_id, entries in other._rules.items():
            mine = self._rules.setdefault(module_id, [])
            mine.extend(entries)
            mine.sort(key=lambda entry: entry[0], reverse=True)

    def resolve(self, coordinate: str) -> Optional[AttributionRecord]:
        """Find the attribution that applies to a dependency.

        Args:
            coordinate: ``group:name:version`` of the dependency.

        Returns:
            A copy of the matching record, or None when no rule applies.

        Raises:
            ValueError: If the coordinate is not a valid notation.
        """
        module_id, version = parse_coordinate(coordinate)
        entries = self._rules.get(module_id)

        # The queried version is kept while the module id gets coarser
        tried = [module_id]
        for fallback in range(1, coordinate.count(":") + 1):
            if entries is not None or len(tried) > MAX_FALLBACKS:
                break
            coarser_id, _ = parse_coordinate(coordinate, fallback)
            if coarser_id in tried:
                continue
            tried.append(coarser_id)
            module_id = coarser_id
            entries = self._rules.get(module_id)

        if entries is None:
            logger.debug("No rules for %s", coordinate)
            return None

        for threshold, record in entries:
            if version >= threshold:
                logger.debug(
                    "Using rule %s@%s for %s", module_id, threshold, coordinate
                )
                return record.copy()

        logger.debug("No rule for %s applies at version %s", module_id, version)
        return None

    @classmethod
    def from_toml(cls, text: str, source: str = "<rules>") -> "VersionedRuleTable":
        """Build a table from TOML rule definitions.

        Each ``[[rule]]`` table has a ``coordinate`` plus the record fields
        understood by :meth:`AttributionRecord.from_dict`.

        Args:
            text: TOML document.
            source: Name used in error messages.

        Returns:
            The populated table.

        Raises:
            ValueError: If the TOML is invalid or a rule is malformed.
        """
        try:
            data = tomllib.loads(text)
        except tomllib.TOMLDecodeError as e:
            raise ValueError(f"Invalid TOML in {source}: {e}") from e

        table = cls()
        for index, rule in enumerate(data.get("rule", []), start=1):
            table.add(*_parse_rule(rule, index, source))
        return table

    @classmethod
    def load(cls, path: Path) -> "VersionedRuleTable":
        """Build a table from a TOML rule file.

        Raises:
            FileNotFoundError: If the file does not exist.
            ValueError: If the file is malformed.
        """
        if not path.exists():
            raise FileNotFoundError(f"Rule file not found: {path}")
        return cls.from_toml(path.read_text(encoding="utf-8"), source=str(path))


def _parse_rule(rule: Any, index: int, source: str) -> tuple[str, AttributionRecord]:
    if not isinstance(rule, dict):
        raise ValueError(f"Rule #{index} in {source} must be a table")

    coordinate = rule.get("coordinate")
    if not coordinate:
        raise ValueError(f"Rule #{index} in {source} is missing 'coordinate'")

    fields = {key: value for key, value in rule.items() if key != "coordinate"}
    try:
        record = AttributionRecord.from_dict(fields)
    except ValueError as e:
        raise ValueError(f"Rule '{coordinate}' in {source}: {e}") from e

    return str(coordinate), record


@lru_cache(maxsize=1)
def builtin_table() -> VersionedRuleTable:
    """Return the table of curated rules shipped with the package.

    Loaded once per process. Callers must not register rules on it; build a
    new table and :meth:`~VersionedRuleTable.extend` it instead.
    """
    text = files("license_attribution.data").joinpath("rules.toml").read_text(
        encoding="utf-8"
    )
    table = VersionedRuleTable.from_toml(text, source="built-in rules")
    logger.debug("Loaded %d built-in license rules", len(table))
    return table


def build_table(extra_rule_files: Iterable[Path] = ()) -> VersionedRuleTable:
    """Combine the built-in rules with user rule files.

    Args:
        extra_rule_files: TOML rule files registered after the built-in rules.

    Returns:
        A new table; the cached built-in table is left untouched.
    """
    table = VersionedRuleTable()
    table.extend(builtin_table())
    for path in extra_rule_files:
        table.extend(VersionedRuleTable.load(path))
    return table
