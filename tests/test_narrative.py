import pytest

from markstats.model import BookmarkNode, BookmarkStats, NamedCount
from markstats.narrative import (
    NarrativeError,
    NarrativeInput,
    _extract_output_text,
    build_prompt,
    generate_narrative,
)


def _stats() -> BookmarkStats:
    return BookmarkStats(
        total_links=3,
        total_folders=1,
        top_domains=(NamedCount("github.com", 2), NamedCount("arxiv.org", 1)),
        bookmarks_by_year=(NamedCount("2024", 3),),
        most_recent=(
            BookmarkNode.link("n1", "Attention Is All You Need", "https://arxiv.org/abs/1706.03762", add_date=2),
            BookmarkNode.link("n2", "psf/requests", "https://github.com/psf/requests", add_date=1),
        ),
    )


class _Resp:
    def __init__(self, output_text=None, payload=None):
        self.output_text = output_text
        self._payload = payload or {}

    def model_dump(self):
        return self._payload


class _Responses:
    def __init__(self, results):
        self.calls = []
        self._results = list(results)

    def create(self, **kwargs):
        self.calls.append(kwargs)
        r = self._results.pop(0)
        if isinstance(r, Exception):
            raise r
        return r


class _Client:
    def __init__(self, *results):
        self.responses = _Responses(results)


def _generate(client, **kw):
    return generate_narrative(
        NarrativeInput.from_stats(_stats()),
        model="test-model",
        timeout_s=5,
        max_output_tokens=100,
        client=client,
        **kw,
    )


def test_input_only_carries_summary_fields():
    summary = NarrativeInput.from_stats(_stats())
    assert summary.total_links == 3
    assert [(d.name, d.value) for d in summary.top_domains] == [("github.com", 2), ("arxiv.org", 1)]
    assert summary.recent_titles == ["Attention Is All You Need", "psf/requests"]
    assert set(summary.model_dump()) == {"total_links", "top_domains", "recent_titles"}


def test_build_prompt_lists_domains_and_titles():
    prompt = build_prompt(NarrativeInput.from_stats(_stats()), language="German")
    assert "Total bookmarks: 3" in prompt
    assert "github.com (2 times), arxiv.org (1 times)" in prompt
    assert "Attention Is All You Need, psf/requests" in prompt
    assert "**Interests**" in prompt
    assert "Write the report in German." in prompt


def test_build_prompt_with_no_data():
    prompt = build_prompt(NarrativeInput(total_links=0))
    assert "Frequent domains: none" in prompt


def test_generate_narrative_returns_output_text():
    client = _Client(_Resp(output_text="## Profile\nLoves Python."))
    result = _generate(client, reasoning_effort="LOW")
    assert result.text == "## Profile\nLoves Python."
    assert result.model == "test-model"
    call = client.responses.calls[0]
    assert call["model"] == "test-model"
    assert call["max_output_tokens"] == 100
    assert call["reasoning"] == {"effort": "low"}
    assert call["input"][0]["role"] == "system"
    assert "Total bookmarks: 3" in call["input"][1]["content"]


def test_generate_narrative_retries_without_max_output_tokens():
    client = _Client(RuntimeError("unsupported parameter"), _Resp(output_text="ok"))
    assert _generate(client).text == "ok"
    assert "max_output_tokens" not in client.responses.calls[1]


def test_generate_narrative_falls_back_to_raw_output_list():
    payload = {"output": [{"type": "message", "content": [{"type": "output_text", "text": "from list"}]}]}
    client = _Client(_Resp(output_text="", payload=payload))
    assert _generate(client).text == "from list"


def test_generate_narrative_raises_on_empty_output():
    with pytest.raises(NarrativeError):
        _generate(_Client(_Resp(output_text="   ")))


def test_generate_narrative_raises_when_retry_fails():
    with pytest.raises(NarrativeError):
        _generate(_Client(RuntimeError("boom"), RuntimeError("still down")))


def test_generate_narrative_never_builds_real_client_in_tests():
    with pytest.raises(AssertionError):
        generate_narrative(NarrativeInput(total_links=1), model="m", timeout_s=1, max_output_tokens=1)


def test_extract_output_text_handles_value_dicts():
    payload = {
        "output": [
            {"type": "reasoning", "content": None},
            {"type": "message", "content": [{"type": "text", "text": {"value": "a"}}, {"type": "output_text", "text": "b"}]},
        ]
    }
    assert _extract_output_text(payload) == "a\nb"
