"""Scanner for ``gradle dependencies`` text reports.

Parses the dependency tree Gradle prints for each configuration::

    runtimeClasspath - Runtime classpath of source set 'main'.
    +--- org.slf4j:slf4j-api:2.0.7
    +--- com.google.guava:guava:31.0-jre -> 32.1.2-jre
    |    \\--- com.google.guava:failureaccess:1.0.1
    +--- project :core
    \\--- io.netty:netty-buffer:4.1.100.Final (*)

The report carries no file locations. When an artifact root (Gradle's
``modules-2/files-2.1`` cache directory) is given, the jars of each module
are looked up there.
"""

import logging
import re
from pathlib import Path
from typing import Optional

from license_attribution.models import DependencyNode
from license_attribution.scanners.base import BaseScanner

logger = logging.getLogger(__name__)


class GradleReportScanner(BaseScanner):
    """Scanner for the text output of ``gradle dependencies``.

    Handles conflict resolution arrows (``a -> b``), omitted subtrees
    (``(*)``), and skips dependency constraints ``(c)``, unresolved
    declarations ``(n)`` and project dependencies.
    """

    CONFIGURATION_PATTERN = re.compile(r"^([A-Za-z][\w-]*)(?: - .*)?$")
    TREE_PATTERN = re.compile(r"^[|\s]*[+\\]--- (.+)$")
    MARKER_PATTERN = re.compile(r"\s+\(([*cn])\)$")

    # Source and javadoc jars never carry the embedded license data
    SKIPPED_CLASSIFIERS = ("-sources.jar", "-javadoc.jar")

    def __init__(
        self,
        source_path: Optional[Path] = None,
        configurations: tuple[str, ...] = (),
        artifact_root: Optional[Path] = None,
    ) -> None:
        """Initialize the scanner.

        Args:
            source_path: Path to the saved ``gradle dependencies`` output.
            configurations: Configuration names to union; empty means all.
            artifact_root: Gradle module cache used to locate jars.
        """
        super().__init__(source_path, configurations)
        self.artifact_root = artifact_root

    @classmethod
    def can_handle(cls, path: Path) -> bool:
        """Handle ``*.txt`` and ``*.log`` report files."""
        return path.suffix.lower() in (".txt", ".log")

    @property
    def source_name(self) -> str:
        return "gradle dependencies report"

    def scan(self) -> list[DependencyNode]:
        """Parse the report and return unique dependency nodes.

        Returns:
            Nodes in first-seen order.

        Raises:
            FileNotFoundError: If the report file does not exist.
            ValueError: If a requested configuration is not in the report.
        """
        path = self._check_source()

        seen_configurations: set[str] = set()
        current: Optional[str] = None
        nodes: dict[str, DependencyNode] = {}

        with open(path, encoding="utf-8") as f:
            for line_num, line in enumerate(f, start=1):
                line = line.rstrip()
                if not line:
                    continue

                header = self.CONFIGURATION_PATTERN.match(line)
                if header:
                    current = header.group(1)
                    seen_configurations.add(current)
                    continue

                tree = self.TREE_PATTERN.match(line)
                if not tree or current is None:
                    continue
                if self.configurations and current not in self.configurations:
                    continue

                node = self._parse_dependency(tree.group(1), line_num)
                if node is not None and node.coordinate not in nodes:
                    nodes[node.coordinate] = node

        missing = [name for name in self.configurations if name not in seen_configurations]
        if missing:
            raise ValueError(
                f"Configuration(s) not found in {path}: {', '.join(missing)}"
            )

        return list(nodes.values())

    def _parse_dependency(self, text: str, line_num: int) -> Optional[DependencyNode]:
        marker = self.MARKER_PATTERN.search(text)
        if marker:
            if marker.group(1) in ("c", "n"):
                return None
            text = text[: marker.start()]

        text = text.strip()
        if text.startswith("project "):
            return None

        requested, _, selected = text.partition(" -> ")
        parts = requested.split(":")
        if len(parts) < 2:
            logger.debug("Could not parse line %d: %s", line_num, text)
            return None

        group, name = parts[0], parts[1]
        version = parts[2] if len(parts) > 2 else ""

        if selected:
            selected_parts = selected.split(":")
            if len(selected_parts) >= 3:
                group, name, version = selected_parts[:3]
            else:
                version = selected

        if not version or version.startswith("{"):
            logger.debug("No resolved version on line %d: %s", line_num, text)
            return None

        return DependencyNode(
            group=group,
            name=name,
            version=version,
            files=self._find_files(group, name, version),
        )

    def _find_files(self, group: str, name: str, version: str) -> tuple[Path, ...]:
        if self.artifact_root is None:
            return ()

        module_dir = self.artifact_root / group / name / version
        jars = [
            jar
            for jar in sorted(module_dir.glob("*/*.jar"))
            if not jar.name.endswith(self.SKIPPED_CLASSIFIERS)
        ]
        if not jars:
            logger.debug("No cached jars for %s:%s:%s", group, name, version)
        return tuple(jars)
