"""Scanner for JSON dependency graph exports.

The build tool exports its resolved configurations as::

    {
      "configurations": {
        "runtimeClasspath": [
          {
            "group": "io.netty",
            "name": "netty-buffer",
            "version": "4.1.100.Final",
            "files": ["libs/netty-buffer-4.1.100.Final.jar"],
            "children": [ ... ]
          }
        ]
      }
    }

Relative file paths are resolved against the directory of the JSON file.
"""

import json
import logging
from collections import deque
from pathlib import Path
from typing import Any

from license_attribution.models import DependencyNode
from license_attribution.scanners.base import BaseScanner

logger = logging.getLogger(__name__)


class JsonGraphScanner(BaseScanner):
    """Scanner for JSON dependency graph exports.

    Unions the selected configurations and flattens every nested
    ``children`` list. A module reached through several paths becomes a
    single node whose files are the union of all its occurrences.
    """

    @classmethod
    def can_handle(cls, path: Path) -> bool:
        """Handle any ``*.json`` file."""
        return path.suffix.lower() == ".json"

    @property
    def source_name(self) -> str:
        return "dependency graph (JSON)"

    def scan(self) -> list[DependencyNode]:
        """Read the graph and return unique dependency nodes.

        Returns:
            Nodes in first-seen order.

        Raises:
            FileNotFoundError: If the graph file does not exist.
            ValueError: If the JSON is invalid, a node lacks a required
                field, or a requested configuration is absent.
        """
        path = self._check_source()

        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {path}: {e}") from e

        if not isinstance(data, dict) or not isinstance(data.get("configurations"), dict):
            raise ValueError(f"Missing 'configurations' object in {path}")

        configurations: dict[str, Any] = data["configurations"]
        selected = self.configurations or tuple(configurations)
        for name in selected:
            if name not in configurations:
                raise ValueError(
                    f"Configuration '{name}' not found in {path}. "
                    f"Available: {', '.join(sorted(configurations)) or 'none'}"
                )

        base_dir = path.parent
        order: list[str] = []
        found: dict[str, tuple[str, str, str, list[Path]]] = {}

        pending: deque = deque()
        for name in selected:
            roots = configurations[name]
            if not isinstance(roots, list):
                raise ValueError(f"Configuration '{name}' in {path} must be a list")
            logger.debug("Reading %d root dependencies of '%s'", len(roots), name)
            pending.extend(roots)

        while pending:
            entry = pending.popleft()
            group, artifact, version = self._parse_entry(entry, path)
            coordinate = f"{group}:{artifact}:{version}"

            if coordinate not in found:
                order.append(coordinate)
                found[coordinate] = (group, artifact, version, [])

            known_files = found[coordinate][3]
            for file_name in entry.get("files", []):
                file_path = Path(file_name)
                if not file_path.is_absolute():
                    file_path = base_dir / file_path
                if file_path not in known_files:
                    known_files.append(file_path)

            children = entry.get("children", [])
            if not isinstance(children, list):
                raise ValueError(f"'children' of {coordinate} in {path} must be a list")
            pending.extend(children)

        return [
            DependencyNode(group=g, name=n, version=v, files=tuple(files))
            for g, n, v, files in (found[coordinate] for coordinate in order)
        ]

    @staticmethod
    def _parse_entry(entry: Any, path: Path) -> tuple[str, str, str]:
        if not isinstance(entry, dict):
            raise ValueError(f"Dependency entry in {path} must be an object")

        for key in ("group", "name", "version"):
            if not entry.get(key):
                raise ValueError(
                    f"Dependency entry missing required field '{key}' in {path}"
                )
        return str(entry["group"]), str(entry["name"]), str(entry["version"])
