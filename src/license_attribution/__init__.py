"""License Attribution - dependency license attribution for build outputs.

This package resolves the license of every dependency of a project, merges
the attributions into the project's own license record, and writes the
``LICENSE`` document, the ``LICENSE.blob`` companion and the license texts.
"""

__version__ = "0.1.0"
__author__ = "forkrul"

from license_attribution.attribution import AttributionRecord
from license_attribution.licenses import License
from license_attribution.models import DependencyNode, PublishMetadata, ScanResult

__all__ = [
    "__version__",
    "AttributionRecord",
    "DependencyNode",
    "License",
    "PublishMetadata",
    "ScanResult",
]
