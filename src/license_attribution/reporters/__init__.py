"""Output reporters for attribution documents.

This module provides the plain text ``LICENSE`` reporter and the Markdown
scan summary reporter.
"""

from license_attribution.reporters.base import BaseReporter
from license_attribution.reporters.markdown import MarkdownReporter
from license_attribution.reporters.text import TextReporter

__all__ = ["BaseReporter", "MarkdownReporter", "TextReporter"]
