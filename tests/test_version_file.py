from pathlib import Path

import markstats
from markstats import __version__


def test_checkout_version_comes_from_version_file():
    version_file = (Path(__file__).resolve().parents[1] / "VERSION").read_text(encoding="utf-8").strip()
    assert version_file
    assert __version__ == version_file


def test_version_matches_pyproject():
    pyproject = (Path(__file__).resolve().parents[1] / "pyproject.toml").read_text(encoding="utf-8")
    assert f'version = "{__version__}"' in pyproject


def test_installed_version_falls_back_to_package_metadata(tmp_path: Path, monkeypatch):
    monkeypatch.setattr(markstats.metadata, "version", lambda name: "9.9.9" if name == "markstats" else "")
    assert markstats._read_version(tmp_path / "VERSION") == "9.9.9"


def test_version_without_file_or_metadata(tmp_path: Path, monkeypatch):
    def _missing(name):
        raise markstats.metadata.PackageNotFoundError(name)

    monkeypatch.setattr(markstats.metadata, "version", _missing)
    assert markstats._read_version(tmp_path / "VERSION") == "0+unknown"
