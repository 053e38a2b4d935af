from __future__ import annotations

import itertools
import re
import time
from enum import Enum
from pathlib import Path
from typing import Iterator, List, Optional, Set, Tuple

from bs4 import BeautifulSoup, Tag  # type: ignore

from .domain import extract_domain
from .log import get_logger
from .model import ROOT_ID, ROOT_TITLE, BookmarkNode, ParseResult, TreeBuild
from .stats import DomainFn, aggregate

log = get_logger(__name__)
_WS_RE = re.compile(r"\s+")
_INT_RE = re.compile(r"[+-]?[0-9]+")

# Seconds-since-epoch bounds that still map to a four-digit calendar year.
_MIN_EPOCH_S = -62135596800  # 0001-01-01T00:00:00Z
_MAX_EPOCH_S = 253402300799  # 9999-12-31T23:59:59Z


class ItemKind(Enum):
    FOLDER = "folder-item"
    LINK = "link-item"
    BARE_LIST = "bare-list"
    OTHER = "other"


class _Accumulator:
    """Per-build state threaded through the traversal."""

    def __init__(self, now_ms: int) -> None:
        self.now_ms = now_ms
        self.flat_links: List[BookmarkNode] = []
        self.total_links = 0
        self.total_folders = 0
        self._ids = itertools.count(1)

    def next_id(self) -> str:
        return f"n{next(self._ids)}"


def parse_bookmarks_file(
    path: Path,
    *,
    domain_of: DomainFn = extract_domain,
    top_domains_limit: int = 10,
    most_recent_limit: int = 20,
) -> ParseResult:
    text = path.read_text(encoding="utf-8", errors="replace")
    return parse_bookmarks_html(
        text,
        domain_of=domain_of,
        top_domains_limit=top_domains_limit,
        most_recent_limit=most_recent_limit,
    )


def parse_bookmarks_html(
    text: str,
    *,
    domain_of: DomainFn = extract_domain,
    top_domains_limit: int = 10,
    most_recent_limit: int = 20,
    now_ms: Optional[int] = None,
) -> ParseResult:
    """Parse a Netscape bookmark export into a folder tree plus statistics.

    Markup errors raised by the HTML parser propagate unchanged. A document
    without any <DL> is not an error: it yields an empty root and zero stats.
    """
    soup = BeautifulSoup(text, "lxml")
    built = build_tree(soup, now_ms=now_ms)
    stats = aggregate(
        built.flat_links,
        domain_of,
        total_folders=built.total_folders,
        top_domains_limit=top_domains_limit,
        most_recent_limit=most_recent_limit,
    )
    log.info(
        "Parsed %d links in %d folders (%d domains ranked, %d years).",
        stats.total_links,
        stats.total_folders,
        len(stats.top_domains),
        len(stats.bookmarks_by_year),
    )
    return ParseResult(root=built.root, stats=stats)


def build_tree(document: Tag, *, now_ms: Optional[int] = None) -> TreeBuild:
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    acc = _Accumulator(now_ms)
    root = BookmarkNode.folder(ROOT_ID, ROOT_TITLE, add_date=now_ms)

    top = document.find("dl")
    if top is None:
        log.debug("No <DL> container found; returning an empty tree.")
        return TreeBuild(root=root)

    # Explicit work stack of (remaining children, parent) frames keeps the
    # walk depth-first and pre-order without using the call stack.
    stack: List[Tuple[Iterator[Tag], BookmarkNode]] = [(_element_children(top), root)]
    claimed: Set[int] = set()
    while stack:
        children, parent = stack[-1]
        child = next(children, None)
        if child is None:
            stack.pop()
            continue

        kind = classify_item(child)
        if kind is ItemKind.FOLDER:
            folder = _folder_node(child, parent, acc)
            sub = _folder_list(child)
            if sub is not None:
                if sub.parent is not child:
                    claimed.add(id(sub))
                stack.append((_element_children(sub), folder))
        elif kind is ItemKind.LINK:
            _link_node(child, parent, acc)
            sub = child.find("dl", recursive=False)
            if sub is not None:
                # Some parsers leave the following list inside the link item.
                stack.append((_element_children(sub), parent))
        elif kind is ItemKind.BARE_LIST:
            if id(child) in claimed:
                continue
            # Transparent flattening: no node, same parent.
            stack.append((_element_children(child), parent))

    return TreeBuild(
        root=root,
        flat_links=acc.flat_links,
        total_links=acc.total_links,
        total_folders=acc.total_folders,
    )


def classify_item(el: Tag) -> ItemKind:
    name = (el.name or "").lower()
    if name == "dl":
        return ItemKind.BARE_LIST
    if name != "dt":
        return ItemKind.OTHER
    if el.find("h3", recursive=False) is not None:
        return ItemKind.FOLDER
    if el.find("a", recursive=False) is not None:
        return ItemKind.LINK
    return ItemKind.OTHER


def _element_children(el: Tag) -> Iterator[Tag]:
    return (c for c in el.children if isinstance(c, Tag))


def _folder_list(dt: Tag) -> Optional[Tag]:
    sub = dt.find("dl", recursive=False)
    if sub is not None:
        return sub
    # The HTML parser may close the <DT> before the folder's <DL>.
    for sib in dt.next_siblings:
        if not isinstance(sib, Tag):
            continue
        name = (sib.name or "").lower()
        if name == "p":
            continue
        return sib if name == "dl" else None
    return None


def _folder_node(dt: Tag, parent: BookmarkNode, acc: _Accumulator) -> BookmarkNode:
    h3 = dt.find("h3", recursive=False)
    acc.total_folders += 1
    node = BookmarkNode.folder(
        acc.next_id(),
        _clean_text(h3),
        add_date=parse_epoch_ms(h3.get("add_date"), default=0),
        last_modified=parse_epoch_ms(h3.get("last_modified"), default=0),
        parent_id=parent.id,
    )
    parent.append(node)
    return node


def _link_node(dt: Tag, parent: BookmarkNode, acc: _Accumulator) -> BookmarkNode:
    a = dt.find("a", recursive=False)
    href = a.get("href")
    url = str(href) if isinstance(href, str) else ""
    if not url:
        log.debug("Link without href under folder %s", parent.id)
    acc.total_links += 1
    node = BookmarkNode.link(
        acc.next_id(),
        _clean_text(a),
        url,
        add_date=parse_epoch_ms(a.get("add_date"), default=acc.now_ms),
        parent_id=parent.id,
    )
    parent.append(node)
    acc.flat_links.append(node)
    return node


def _clean_text(el: Tag) -> str:
    return _WS_RE.sub(" ", el.get_text()).strip()


def parse_epoch_ms(v, *, default: int) -> int:
    """Convert a seconds-since-epoch attribute to milliseconds.

    Only optionally signed ASCII digit strings are accepted; missing,
    non-numeric or out-of-range values map to ``default``.
    """
    if v is None:
        return default
    text = str(v).strip()
    if not _INT_RE.fullmatch(text):
        log.debug("Ignoring non-numeric date attribute %r", v)
        return default
    seconds = int(text)
    if seconds < _MIN_EPOCH_S or seconds > _MAX_EPOCH_S:
        log.debug("Ignoring out-of-range date attribute %r", v)
        return default
    return seconds * 1000
