from __future__ import annotations

from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterable, List, Sequence, Tuple

from .domain import UNKNOWN_DOMAIN, extract_domain
from .model import BookmarkNode, BookmarkStats, NamedCount

DomainFn = Callable[[str], str]

TOP_DOMAINS_LIMIT = 10
MOST_RECENT_LIMIT = 20

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def aggregate(
    flat_links: Sequence[BookmarkNode],
    domain_of: DomainFn = extract_domain,
    *,
    total_folders: int = 0,
    top_domains_limit: int = TOP_DOMAINS_LIMIT,
    most_recent_limit: int = MOST_RECENT_LIMIT,
) -> BookmarkStats:
    """Derive ranked and grouped summaries from the flat link list.

    Ties in ``top_domains`` keep first-seen order and ties in ``most_recent``
    keep flat-list order (both sorts are stable). Years are UTC calendar years.
    The input sequence is never mutated.
    """
    if top_domains_limit < 0 or most_recent_limit < 0:
        raise ValueError("Stats limits must be non-negative")
    links = list(flat_links)
    return BookmarkStats(
        total_links=len(links),
        total_folders=total_folders,
        top_domains=top_domains(links, domain_of, limit=top_domains_limit),
        bookmarks_by_year=bookmarks_by_year(links),
        most_recent=most_recent(links, limit=most_recent_limit),
    )


def top_domains(
    links: Iterable[BookmarkNode],
    domain_of: DomainFn = extract_domain,
    *,
    limit: int = TOP_DOMAINS_LIMIT,
) -> Tuple[NamedCount, ...]:
    counts: Counter[str] = Counter()
    for b in links:
        d = domain_of(b.url or "")
        if d == UNKNOWN_DOMAIN:
            continue
        counts[d] += 1
    # Counter preserves insertion order, so the stable sort keeps first-seen ties.
    ranked = sorted(counts.items(), key=lambda kv: kv[1], reverse=True)
    return tuple(NamedCount(name=d, value=n) for d, n in ranked[:limit])


def bookmarks_by_year(links: Iterable[BookmarkNode]) -> Tuple[NamedCount, ...]:
    counts: Counter[int] = Counter(year_of(b.add_date or 0) for b in links)
    return tuple(NamedCount(name=f"{y:04d}", value=n) for y, n in sorted(counts.items()))


def most_recent(links: Iterable[BookmarkNode], *, limit: int = MOST_RECENT_LIMIT) -> Tuple[BookmarkNode, ...]:
    ordered: List[BookmarkNode] = sorted(links, key=lambda b: b.add_date or 0, reverse=True)
    return tuple(ordered[:limit])


def year_of(epoch_ms: int) -> int:
    return (_EPOCH + timedelta(milliseconds=epoch_ms)).year
