from __future__ import annotations

import argparse
import json
import os
import time
from pathlib import Path
from typing import List, Optional

from rich.console import Console

from . import __version__
from .config import Settings, load_settings
from .domain import domain_extractor
from .log import LogConfig, get_logger, setup_logging
from .model import ParseResult
from .narrative import NarrativeError, NarrativeInput, generate_narrative
from .parse_netscape import parse_bookmarks_file
from .report import render_stats, render_tree

log = get_logger(__name__)

HTML_SUFFIXES = {".html", ".htm"}


def main(argv: List[str] | None = None) -> int:
    p = argparse.ArgumentParser(
        prog="markstats",
        description="Bookmark export statistics (Netscape bookmark HTML -> tree, stats, narrative).",
    )
    p.add_argument("-V", "--version", action="version", version=f"markstats {__version__}")
    p.add_argument("--config", default=None, help="YAML config file (optional). Env vars override defaults.")
    sub = p.add_subparsers(dest="cmd", required=True)

    st = sub.add_parser("stats", help="Print link/folder counts, top domains, yearly totals and most recent links.")
    _add_common(st)
    st.add_argument("--json", default=None, help="Also write the stats as dashboard JSON to this path.")
    st.add_argument("--tree-json", default=None, help="Write the full bookmark tree as JSON to this path.")

    tr = sub.add_parser("tree", help="Print the folder/link tree.")
    _add_common(tr)
    tr.add_argument("--max-depth", type=int, default=None, help="Only show folders down to this depth.")

    na = sub.add_parser("narrate", help="Generate an AI profile report from the bookmark statistics.")
    _add_common(na)
    na.add_argument("--out", default=None, help="Write the Markdown report here instead of stdout.")

    args = p.parse_args(argv)
    cfg = load_settings(args.config)
    if args.log_level:
        cfg.log_level = args.log_level
    if args.no_color:
        cfg.no_color = True
    setup_logging(LogConfig(level=cfg.log_level, no_color=cfg.no_color))

    if args.cmd == "stats":
        return _cmd_stats(args, cfg)
    if args.cmd == "tree":
        return _cmd_tree(args, cfg)
    if args.cmd == "narrate":
        return _cmd_narrate(args, cfg)
    return 2


def _add_common(sp: argparse.ArgumentParser) -> None:
    sp.add_argument("--html", required=True, help="Bookmarks HTML export (Netscape format).")
    sp.add_argument("--log-level", default=None, help="DEBUG/INFO/WARN/ERROR (overrides env/config).")
    sp.add_argument("--no-color", action="store_true", help="Disable colored output.")


def _cmd_stats(args, cfg: Settings) -> int:
    t0 = time.time()
    result = _load(Path(args.html), cfg)
    if result is None:
        return 2

    render_stats(result.stats, _console(cfg))
    if args.json:
        _write_json(Path(args.json), result.stats.to_dict())
    if args.tree_json:
        _write_json(Path(args.tree_json), result.root.to_dict())
    log.info("Done in %d ms.", int((time.time() - t0) * 1000))
    return 0


def _cmd_tree(args, cfg: Settings) -> int:
    result = _load(Path(args.html), cfg)
    if result is None:
        return 2
    render_tree(result.root, _console(cfg), max_depth=args.max_depth)
    return 0


def _cmd_narrate(args, cfg: Settings) -> int:
    result = _load(Path(args.html), cfg)
    if result is None:
        return 2
    if not (os.getenv("OPENAI_API_KEY") or os.getenv("OPENAI_KEY")):
        log.error("OPENAI_API_KEY not set; cannot generate the narrative report.")
        return 2

    try:
        narrative = generate_narrative(
            NarrativeInput.from_stats(result.stats),
            model=cfg.openai_model,
            timeout_s=cfg.openai_timeout_s,
            max_output_tokens=cfg.openai_max_output_tokens,
            reasoning_effort=cfg.openai_reasoning_effort,
            language=cfg.narrative_language,
        )
    except NarrativeError as e:
        log.error("Narrative generation failed: %s", e)
        return 2

    if args.out:
        out = Path(args.out)
        out.write_text(narrative.text + "\n", encoding="utf-8")
        log.info("Wrote narrative report: %s", out)
    else:
        _console(cfg).print(narrative.text, markup=False)
    return 0


def _load(html_path: Path, cfg: Settings) -> Optional[ParseResult]:
    if not html_path.exists():
        log.error("Input file not found: %s", html_path)
        return None
    if html_path.suffix.lower() not in HTML_SUFFIXES:
        log.error("Expected a bookmarks HTML export (.html), got: %s", html_path)
        return None
    try:
        domain_of = domain_extractor(cfg.domain_mode)
    except ValueError as e:
        log.error("Invalid configuration: %s", e)
        return None
    if cfg.top_domains_limit < 0 or cfg.most_recent_limit < 0:
        log.error("Invalid configuration: stats limits must be non-negative.")
        return None

    result = parse_bookmarks_file(
        html_path,
        domain_of=domain_of,
        top_domains_limit=cfg.top_domains_limit,
        most_recent_limit=cfg.most_recent_limit,
    )
    if result.stats.is_empty:
        log.error("No usable bookmark data found in %s. Is this a browser bookmarks export?", html_path)
        return None
    return result


def _write_json(path: Path, payload) -> None:
    path.write_text(json.dumps(payload, ensure_ascii=False, indent=2) + "\n", encoding="utf-8")
    log.info("Wrote %s", path)


def _console(cfg: Settings) -> Console:
    return Console(no_color=cfg.no_color)
