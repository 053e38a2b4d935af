"""markstats: Netscape bookmark export parsing, statistics and narrative reports."""

from importlib import metadata
from pathlib import Path

_VERSION_FILE = Path(__file__).resolve().parents[1] / "VERSION"


def _read_version(version_file: Path = _VERSION_FILE) -> str:
    """Source checkouts carry a VERSION file; installed wheels only have metadata."""
    if version_file.is_file():
        return version_file.read_text(encoding="utf-8").strip()
    try:
        return metadata.version("markstats")
    except metadata.PackageNotFoundError:
        return "0+unknown"


__version__ = _read_version()
