"""Markdown reporter for license scan summaries.

This module provides a reporter that renders the project's attributions and
the known/embedded/missing scan buckets to Markdown using Jinja2 templates.
"""

from datetime import datetime
from importlib.resources import files
from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader, Template

from license_attribution.attribution import AttributionRecord, flatten
from license_attribution.models import ScanResult
from license_attribution.reporters.base import BaseReporter
from license_attribution.reporters.text import format_years


class MarkdownReporter(BaseReporter):
    """Reporter that generates a Markdown license summary.

    The template receives:

    * ``primary``: the primary project license (or None);
    * ``attributions``: every other record, extras flattened, sorted by name;
    * ``scan``: the ``ScanResult`` (or None);
    * ``generated_at``: the render time.

    The ``years`` filter formats copyright years like the ``LICENSE`` file.
    Values are HTML-escaped, since Markdown viewers render inline HTML.

    Attributes:
        template: The Jinja2 template to use for rendering.
    """

    def __init__(self, template_path: Optional[Path] = None) -> None:
        """Initialize the Markdown reporter.

        Args:
            template_path: Optional path to a custom Jinja2 template.
                If not provided, uses the default bundled template.
        """
        if template_path:
            env = self._environment(FileSystemLoader(template_path.parent))
            self.template = env.get_template(template_path.name)
        else:
            self.template = self._load_default_template()

    @staticmethod
    def _environment(loader: Optional[FileSystemLoader] = None) -> Environment:
        env = Environment(
            loader=loader,
            autoescape=True,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        env.filters["years"] = format_years
        return env

    def _load_default_template(self) -> Template:
        template_content = (
            files("license_attribution.templates")
            .joinpath("report.md.j2")
            .read_text(encoding="utf-8")
        )
        return self._environment().from_string(template_content)

    def render(
        self,
        licenses: list[AttributionRecord],
        scan: Optional[ScanResult] = None,
    ) -> str:
        """Render the attributions and scan result to Markdown.

        Args:
            licenses: Project licenses, primary first.
            scan: Optional scan result to summarize.

        Returns:
            Rendered Markdown document as a string.
        """
        primary = licenses[0] if licenses else None
        attributions = [record for record in flatten(licenses) if record is not primary]
        attributions.sort(key=AttributionRecord.sort_key)

        return self.template.render(
            primary=primary,
            attributions=attributions,
            scan=scan,
            generated_at=datetime.now(),
        )

    @property
    def format_name(self) -> str:
        return "markdown"

    @property
    def default_extension(self) -> str:
        return ".md"
