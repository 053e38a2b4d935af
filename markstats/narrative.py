from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from openai import OpenAI
from pydantic import BaseModel, Field

from .log import get_logger
from .model import BookmarkStats

log = get_logger(__name__)

SYSTEM_PROMPT = "You are an expert digital psychologist and data analyst."

USER_PROMPT_TEMPLATE = """Based on the following browser bookmark data, write a user profile analysis report.
Use Markdown. Keep the tone professional and insightful.

Data overview:
- Total bookmarks: {total_links}
- Frequent domains: {domains}
- Titles of recently saved items: {titles}

Analyse the following aspects:
1. **Interests**: which topics does the user care about most?
2. **Likely profession**: based on tools and professional sites, infer the user's likely profession or skill set.
3. **Personality traits**: for example whether they hoard reference material, or follow particular kinds of content (news, technology, entertainment).
4. **Action item**: give the user one suggestion for organising their digital life.

Keep the answer concise and focused. Write the report in {language}.
"""


class NarrativeError(RuntimeError):
    """Raised when the model call fails or returns no usable text."""


class DomainCount(BaseModel):
    name: str
    value: int = Field(..., ge=0)


class NarrativeInput(BaseModel):
    """The read-only slice of the statistics the narrative step may see."""

    total_links: int = Field(..., ge=0)
    top_domains: List[DomainCount] = Field(default_factory=list)
    recent_titles: List[str] = Field(default_factory=list)

    @classmethod
    def from_stats(cls, stats: BookmarkStats) -> "NarrativeInput":
        return cls(
            total_links=stats.total_links,
            top_domains=[DomainCount(name=d.name, value=d.value) for d in stats.top_domains],
            recent_titles=[n.title for n in stats.most_recent],
        )


@dataclass
class NarrativeResult:
    text: str
    model: str
    ms: int


def build_prompt(summary: NarrativeInput, language: str = "English") -> str:
    domains = ", ".join(f"{d.name} ({d.value} times)" for d in summary.top_domains) or "none"
    titles = ", ".join(summary.recent_titles) or "none"
    return USER_PROMPT_TEMPLATE.format(
        total_links=summary.total_links,
        domains=domains,
        titles=titles,
        language=language or "English",
    )


def generate_narrative(
    summary: NarrativeInput,
    *,
    model: str,
    timeout_s: int,
    max_output_tokens: int,
    reasoning_effort: str = "",
    language: str = "English",
    client: Optional[Any] = None,
) -> NarrativeResult:
    t0 = time.time()
    if client is None:
        client = OpenAI(timeout=timeout_s)
    request_input = [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": build_prompt(summary, language)},
    ]
    request_extra = _request_extras(reasoning_effort=reasoning_effort)
    log.info(
        "OpenAI narrative request start: model=%s timeout_s=%d max_output_tokens=%d links=%d",
        model,
        timeout_s,
        max_output_tokens,
        summary.total_links,
    )
    try:
        resp = client.responses.create(
            model=model,
            input=request_input,
            max_output_tokens=max_output_tokens,
            **request_extra,
        )
    except Exception as e:
        log.warning("OpenAI create() failed (narrative): %s. Retrying without max_output_tokens.", e)
        try:
            resp = client.responses.create(model=model, input=request_input)
        except Exception as e2:
            raise NarrativeError(f"OpenAI narrative request failed: {e2}") from e2

    text = _response_text(resp)
    if not text:
        raise NarrativeError("OpenAI returned no narrative text")
    ms = int((time.time() - t0) * 1000)
    log.info("OpenAI narrative request done: chars=%d elapsed_ms=%d", len(text), ms)
    return NarrativeResult(text=text, model=model, ms=ms)


def _request_extras(*, reasoning_effort: str) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    eff = (reasoning_effort or "").strip().lower()
    if eff in {"low", "medium", "high"}:
        out["reasoning"] = {"effort": eff}
    return out


def _response_text(resp: Any) -> str:
    direct = getattr(resp, "output_text", None)
    if isinstance(direct, str) and direct.strip():
        return direct.strip()
    dump = getattr(resp, "model_dump", None)
    payload = dump() if callable(dump) else resp
    if not isinstance(payload, dict):
        return ""
    return _extract_output_text(payload)


def _extract_output_text(payload: Dict[str, Any]) -> str:
    """Join the text parts of message items in a raw Responses payload."""
    direct = payload.get("output_text")
    if isinstance(direct, str) and direct.strip():
        return direct.strip()
    parts = [
        part
        for item in payload.get("output") or []
        if isinstance(item, dict) and isinstance(item.get("content"), list)
        for part in item["content"]
        if isinstance(part, dict) and part.get("type") in ("output_text", "text")
    ]
    texts = [_part_text(part.get("text")) for part in parts]
    return "\n".join(t for t in texts if t).strip()


def _part_text(text: Any) -> str:
    # Older SDK dumps wrap the string as {"value": ...}.
    if isinstance(text, dict):
        text = text.get("value")
    return text if isinstance(text, str) else ""
