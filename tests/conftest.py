"""Pytest configuration and fixtures."""

import zipfile
from collections.abc import Callable
from pathlib import Path
from typing import Optional

import pytest

from license_attribution.attribution import AttributionRecord
from license_attribution.licenses import License

FIXTURES_DIR = Path(__file__).parent / "fixtures"

JarFactory = Callable[..., Path]


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the directory holding static test fixtures."""
    return FIXTURES_DIR


@pytest.fixture
def make_jar(tmp_path: Path) -> JarFactory:
    """Return a factory that builds jar (zip) files in tmp_path.

    The manifest is always the first entry and carries ``year`` as its
    timestamp. ``blob`` bytes, when given, are stored as ``LICENSE.blob``.
    """

    def _make(
        name: str = "lib.jar",
        year: int = 2015,
        blob: Optional[bytes] = None,
    ) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(path, "w") as archive:
            manifest = zipfile.ZipInfo("META-INF/MANIFEST.MF", date_time=(year, 6, 1, 12, 0, 0))
            archive.writestr(manifest, "Manifest-Version: 1.0\n")
            archive.writestr("com/example/Library.class", b"\xca\xfe\xba\xbe")
            if blob is not None:
                archive.writestr("LICENSE.blob", blob)
        return path

    return _make


@pytest.fixture
def primary() -> AttributionRecord:
    """Return a primary project license record."""
    return AttributionRecord(
        name="Widget",
        license=License.APACHE_2,
        description="Widgets for everyone",
        copyrights=[2020],
        urls=["https://example.com/widget"],
        authors=["Acme"],
    )
