import sys
from pathlib import Path

import pytest

# Allow `import markstats` without installing the package.
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture(autouse=True)
def _block_expensive_openai_calls(monkeypatch):
    """Tests must never trigger real OpenAI requests."""

    def _blocked(*_args, **_kwargs):
        raise AssertionError("OpenAI API call attempted during tests")

    import markstats.narrative as narrative

    monkeypatch.setattr(narrative, "OpenAI", _blocked)


@pytest.fixture
def sample_html_path() -> Path:
    return FIXTURES / "sample_bookmarks.html"


@pytest.fixture
def sample_html(sample_html_path: Path) -> str:
    return sample_html_path.read_text(encoding="utf-8")
