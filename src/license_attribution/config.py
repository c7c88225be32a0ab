"""Project licensing configuration.

A project declares its own license(s) either in a ``licensing.toml`` file or
in the ``[tool.license-attribution]`` table of its ``pyproject.toml``::

    [project]
    name = "widget"
    group = "com.example"
    version = "1.2.0"
    subprojects = ["com.example:widget-core:1.2.0"]

    [[license]]
    license = "APACHE_2"
    description = "Widgets for everyone"
    authors = ["Example Corp"]
    urls = ["https://example.com/widget"]

        [[license.extra]]
        name = "Bundled Parser"
        license = "MIT"
        authors = ["Jane Doe"]

The first declared license is the primary license: dependency attributions
found by a scan are attached to it.
"""

import logging
import tomllib
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from license_attribution.attribution import AttributionRecord
from license_attribution.licenses import License
from license_attribution.models import PublishMetadata

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "licensing.toml"
TOOL_TABLE = "license-attribution"

# Relative to the build directory
BUILD_OUTPUT_DIR = "licensing"


class LicensingConfigError(ValueError):
    """Raised when the licensing configuration is missing or invalid."""


class Licensing:
    """The licenses a project declares for itself.

    Attributes:
        project_name: Default name for declared licenses.
        licenses: Declared licenses, primary first.
    """

    def __init__(self, project_name: str) -> None:
        self.project_name = project_name
        self.licenses: list[AttributionRecord] = []

    def license(
        self,
        license: License,
        configure: Optional[Callable[[AttributionRecord], None]] = None,
        name: Optional[str] = None,
    ) -> AttributionRecord:
        """Declare a license for this project.

        Args:
            license: Catalog license.
            configure: Optional callback that fills in the record (authors,
                urls, notes, extras).
            name: Name the license applies to; defaults to the project name.

        Returns:
            The declared record.
        """
        record = AttributionRecord(
            name=self.project_name if name is None else name,
            license=license,
        )
        if configure is not None:
            configure(record)
        self.licenses.append(record)
        return record

    @property
    def primary(self) -> Optional[AttributionRecord]:
        """Return the primary (first declared) license, if any."""
        return self.licenses[0] if self.licenses else None

    def validate(self) -> None:
        """Check that every declared license can be attributed.

        Raises:
            LicensingConfigError: If a license has no name or no author.
        """
        for record in self.licenses:
            if not record.name:
                raise LicensingConfigError(
                    "The name of the project this license applies to must be set "
                    f"for the '{record.license.preferred_name}' license"
                )
            if not record.authors:
                raise LicensingConfigError(
                    f"An author must be specified for the "
                    f"'{record.license.preferred_name}' license"
                )

    def publish_metadata(self) -> Optional[PublishMetadata]:
        """Return license fields for package metadata.

        Only the primary license is published. Its notes are included as
        comments only for a custom license, where the notes are the license.

        Returns:
            The metadata, or None when no license is declared.
        """
        primary = self.primary
        if primary is None:
            return None

        comments = None
        if primary.license is License.CUSTOM:
            comments = "\n".join(primary.notes)

        return PublishMetadata(
            name=primary.license.preferred_name,
            url=primary.license.preferred_url,
            comments=comments,
        )


@dataclass
class ProjectConfig:
    """Everything the CLI needs to know about the scanning project.

    Attributes:
        name: Project (artifact) name.
        group: Group id of the project.
        version: Project version.
        subprojects: Coordinates of the project's own modules.
        root_dir: Project root; receives a copy of the license files.
        build_dir: Build directory; license files go to ``<build_dir>/licensing``.
        licensing: Declared licenses.
    """

    name: str
    group: str = ""
    version: str = ""
    subprojects: list[str] = field(default_factory=list)
    root_dir: Path = field(default_factory=Path.cwd)
    build_dir: Optional[Path] = None
    licensing: Optional[Licensing] = None

    def __post_init__(self) -> None:
        if self.build_dir is None:
            self.build_dir = self.root_dir / "build"
        if self.licensing is None:
            self.licensing = Licensing(self.name)

    @property
    def project_coordinates(self) -> set[str]:
        """Return coordinates that belong to this project, not a dependency."""
        coordinates = set(self.subprojects)
        if self.group and self.version:
            coordinates.add(f"{self.group}:{self.name}:{self.version}")
        return coordinates

    @property
    def output_dirs(self) -> list[Path]:
        """Return the directories that receive the generated license files."""
        build_output = self.build_dir / BUILD_OUTPUT_DIR
        if build_output == self.root_dir:
            return [self.root_dir]
        return [build_output, self.root_dir]


def load_config(path: Path) -> ProjectConfig:
    """Load a project configuration file.

    Args:
        path: ``licensing.toml``, or a ``pyproject.toml`` with a
            ``[tool.license-attribution]`` table.

    Returns:
        The parsed configuration. Relative directories resolve against the
        directory containing the file.

    Raises:
        FileNotFoundError: If the file does not exist.
        LicensingConfigError: If the file is malformed.
    """
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise LicensingConfigError(f"Invalid TOML in {path}: {e}") from e

    fallback_project: dict[str, Any] = {}
    if path.name == "pyproject.toml":
        fallback_project = data.get("project", {})
        data = data.get("tool", {}).get(TOOL_TABLE)
        if data is None:
            raise LicensingConfigError(f"No [tool.{TOOL_TABLE}] table in {path}")

    project = data.get("project", {})
    if not isinstance(project, dict):
        raise LicensingConfigError(f"'project' in {path} must be a table")

    name = project.get("name") or fallback_project.get("name") or path.parent.resolve().name
    base_dir = path.parent

    root_dir = _resolve_dir(base_dir, project.get("root_dir", "."))
    build_dir = project.get("build_dir")

    subprojects = project.get("subprojects", [])
    if not isinstance(subprojects, list):
        raise LicensingConfigError(f"'subprojects' in {path} must be a list")

    config = ProjectConfig(
        name=str(name),
        group=str(project.get("group", "")),
        version=str(project.get("version") or fallback_project.get("version", "")),
        subprojects=[str(coordinate) for coordinate in subprojects],
        root_dir=root_dir,
        build_dir=_resolve_dir(base_dir, build_dir) if build_dir else None,
    )

    declared = data.get("license", [])
    if not isinstance(declared, list):
        raise LicensingConfigError(f"'license' in {path} must be an array of tables")

    for index, entry in enumerate(declared, start=1):
        if not isinstance(entry, dict):
            raise LicensingConfigError(f"License #{index} in {path} must be a table")

        entry = dict(entry)
        entry.setdefault("name", config.name)
        if entry.get("license") and License.parse(entry["license"]) is License.UNKNOWN:
            logger.warning(
                "Unrecognized license '%s' for '%s', using %s",
                entry["license"],
                entry["name"],
                License.UNKNOWN.preferred_name,
            )

        try:
            record = AttributionRecord.from_dict(entry)
        except ValueError as e:
            raise LicensingConfigError(f"License #{index} in {path}: {e}") from e
        config.licensing.licenses.append(record)

    logger.debug("Loaded %d declared license(s) from %s", len(declared), path)
    return config


def _resolve_dir(base_dir: Path, value: Any) -> Path:
    if not isinstance(value, str):
        raise LicensingConfigError(f"Directory setting must be a string, got {value!r}")
    directory = Path(value)
    if not directory.is_absolute():
        directory = base_dir / directory
    return directory
