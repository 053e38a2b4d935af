from rich.console import Console

from markstats.model import BookmarkNode, BookmarkStats, NamedCount
from markstats.parse_netscape import parse_bookmarks_html
from markstats.report import overview, render_stats, render_tree


def _console() -> Console:
    return Console(record=True, width=160, no_color=True)


def test_overview_for_empty_stats():
    assert overview(BookmarkStats()) == {
        "Total links": "0",
        "Folders": "0",
        "Earliest year": "N/A",
        "Top domain": "N/A",
    }


def test_overview_uses_presorted_stats():
    stats = BookmarkStats(
        total_links=4,
        total_folders=2,
        top_domains=(NamedCount("a.com", 3), NamedCount("b.com", 1)),
        bookmarks_by_year=(NamedCount("2015", 1), NamedCount("2020", 3)),
    )
    cards = overview(stats)
    assert cards["Earliest year"] == "2015"
    assert cards["Top domain"] == "a.com"


def test_render_stats_prints_tables(sample_html: str):
    stats = parse_bookmarks_html(sample_html, now_ms=0).stats
    console = _console()
    render_stats(stats, console)
    text = console.export_text()
    assert "github.com" in text
    assert "Hacker News" in text
    assert "2023" in text


def test_render_tree_escapes_markup_and_limits_depth():
    root = BookmarkNode.folder("root", "Root")
    outer = BookmarkNode.folder("n1", "[Work]")
    inner = BookmarkNode.folder("n2", "Inner")
    root.append(outer)
    outer.append(inner)
    inner.append(BookmarkNode.link("n3", "Deep link", "https://deep.example/", add_date=0))

    console = _console()
    render_tree(root, console, max_depth=2)
    text = console.export_text()
    assert "[Work]" in text
    assert "Inner" in text
    assert "Deep link" not in text

    console = _console()
    render_tree(root, console)
    assert "Deep link" in console.export_text()
