from __future__ import annotations

from collections import deque
from datetime import datetime, timedelta, timezone
from typing import Deque, Dict, Optional, Tuple

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from .model import BookmarkNode, BookmarkStats

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def overview(stats: BookmarkStats) -> Dict[str, str]:
    """Headline figures shown above the dashboard charts."""
    return {
        "Total links": str(stats.total_links),
        "Folders": str(stats.total_folders),
        "Earliest year": stats.bookmarks_by_year[0].name if stats.bookmarks_by_year else "N/A",
        "Top domain": stats.top_domains[0].name if stats.top_domains else "N/A",
    }


def render_stats(stats: BookmarkStats, console: Console) -> None:
    cards = Table(show_header=False, box=None)
    for label, value in overview(stats).items():
        cards.add_row(f"[bold]{label}[/bold]", escape(value))
    console.print(cards)

    domains = Table(title=f"Top {len(stats.top_domains)} domains")
    domains.add_column("#", justify="right")
    domains.add_column("Domain")
    domains.add_column("Links", justify="right")
    for i, d in enumerate(stats.top_domains, start=1):
        domains.add_row(str(i), escape(d.name), str(d.value))
    console.print(domains)

    years = Table(title="Bookmarks by year")
    years.add_column("Year")
    years.add_column("Links", justify="right")
    for y in stats.bookmarks_by_year:
        years.add_row(y.name, str(y.value))
    console.print(years)

    recent = Table(title="Most recent")
    recent.add_column("Added (UTC)")
    recent.add_column("Title")
    recent.add_column("URL", overflow="fold")
    for n in stats.most_recent:
        recent.add_row(_fmt_date(n.add_date), escape(n.title), escape(n.url or ""))
    console.print(recent)


def render_tree(root: BookmarkNode, console: Console, *, max_depth: Optional[int] = None) -> None:
    top = Tree(f"[bold]{escape(root.title)}[/bold]")
    pending: Deque[Tuple[BookmarkNode, Tree, int]] = deque([(root, top, 0)])
    while pending:
        node, branch, depth = pending.popleft()
        if max_depth is not None and depth >= max_depth:
            continue
        for child in node.children or []:
            if child.is_folder:
                sub = branch.add(f"[bold]{escape(child.title)}[/bold] ({len(child.children or [])})")
                pending.append((child, sub, depth + 1))
            else:
                url = escape(child.url or "")
                branch.add(f"{escape(child.title)} [dim]{url}[/dim]")
    console.print(top)


def _fmt_date(epoch_ms: Optional[int]) -> str:
    if epoch_ms is None:
        return ""
    return (_EPOCH + timedelta(milliseconds=epoch_ms)).strftime("%Y-%m-%d")
