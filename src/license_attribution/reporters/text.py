"""Plain text reporter producing the canonical ``LICENSE`` document.

Layout of one record (nested extras are indented four more spaces)::

     - Netty - An event-driven asynchronous network application framework
       [The Apache Software License, Version 2.0]
       https://netty.io
       Copyright 2004-2008
         The Netty Project

       Extra license information
         - JZlib
           [BSD 3-Clause License]
           Copyright 2011

Records of a custom license print their notes in place of the license name.
"""

import logging
from datetime import datetime
from typing import Optional

from license_attribution.attribution import AttributionRecord
from license_attribution.licenses import License
from license_attribution.models import ScanResult
from license_attribution.reporters.base import BaseReporter

logger = logging.getLogger(__name__)


def format_years(years: list[int]) -> str:
    """Format copyright years compactly.

    Args:
        years: Copyright years in any order; duplicates are ignored.

    Returns:
        ``"2001-2004"`` for an unbroken run, ``"2001,2003"`` otherwise, a
        single year as is, and the current year when ``years`` is empty.
    """
    unique = sorted(set(years))
    if not unique:
        return str(datetime.now().year)
    if len(unique) == 1:
        return str(unique[0])
    if unique[-1] - unique[0] == len(unique) - 1:
        return f"{unique[0]}-{unique[-1]}"
    return ",".join(str(year) for year in unique)


def fix_space(text: str, prefix: str) -> str:
    """Indent every line of a (possibly multi-line) note with ``prefix``."""
    lines = text.strip().replace("\r\n", "\n").split("\n")
    return "\n".join(prefix + line for line in lines)


class TextReporter(BaseReporter):
    """Reporter that builds the plain text ``LICENSE`` document.

    The first record is the primary project license and always comes first.
    Remaining records are deduplicated and sorted by name, ignoring case.
    """

    HEADER = " - "
    SPACER = "   "
    AUTHOR_SPACER = "     "
    INDENT = "    "

    def sort_and_clean(self, licenses: list[AttributionRecord]) -> list[AttributionRecord]:
        """Pin the primary license first, then dedupe and sort the rest.

        The list is reordered in place, so later steps (the blob, the
        license text files) see the same canonical order.

        Args:
            licenses: Project licenses, primary first.

        Returns:
            The same list object, cleaned.
        """
        if not licenses:
            return licenses

        primary = licenses[0]
        rest: list[AttributionRecord] = []
        for record in licenses[1:]:
            if record is primary or record == primary:
                continue
            if any(record == kept for kept in rest):
                continue
            rest.append(record)

        rest.sort(key=AttributionRecord.sort_key)
        licenses[:] = [primary, *rest]
        return licenses

    def render(
        self,
        licenses: list[AttributionRecord],
        scan: Optional[ScanResult] = None,
    ) -> str:
        """Render the ``LICENSE`` document.

        Args:
            licenses: Project licenses, primary first. Sorted in place.
            scan: Ignored; the document only lists attributions.

        Returns:
            The document, ending with a newline, or ``""`` for no licenses.
        """
        self.sort_and_clean(licenses)

        blocks = []
        for record in licenses:
            lines: list[str] = []
            self._render_record(lines, record)
            blocks.append("\n".join(lines))

        if not blocks:
            return ""
        return "\n\n".join(blocks) + "\n"

    def _render_record(self, lines: list[str], record: AttributionRecord) -> None:
        # Explicit stack of (action, record, depth); ``path`` holds the
        # records between the root and the one being rendered.
        path: set[int] = set()
        pending: list[tuple[str, Optional[AttributionRecord], int]] = [("enter", record, 0)]

        while pending:
            action, node, depth = pending.pop()
            if action == "gap":
                lines.append("")
                continue
            if action == "leave":
                path.discard(id(node))
                continue
            if id(node) in path:
                logger.warning("Skipping cyclic extra license '%s'", node.name)
                continue
            path.add(id(node))

            prefix = self.INDENT * depth
            body = prefix + self.SPACER
            is_custom = node.license is License.CUSTOM

            header = f"{prefix}{self.HEADER}{node.name}"
            if node.description:
                header += f" - {node.description}"
            lines.append(header)

            if is_custom:
                lines.extend(fix_space(note, body) for note in node.notes)
            else:
                lines.append(f"{body}[{node.license.preferred_name}]")

            lines.extend(body + url for url in node.urls)
            lines.append(f"{body}Copyright {format_years(node.copyrights)}")
            lines.extend(prefix + self.AUTHOR_SPACER + author for author in node.authors)

            if not is_custom:
                lines.extend(body + note for note in node.notes)

            pending.append(("leave", node, depth))
            if node.extras:
                lines.append("")
                lines.append(f"{body}Extra license information")
                children: list[tuple[str, Optional[AttributionRecord], int]] = []
                for index, extra in enumerate(node.extras):
                    if index:
                        children.append(("gap", None, depth))
                    children.append(("enter", extra, depth + 1))
                pending.extend(reversed(children))

    @property
    def format_name(self) -> str:
        return "text"

    @property
    def default_extension(self) -> str:
        """``LICENSE`` has no extension."""
        return ""
