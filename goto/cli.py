from __future__ import annotations

import argparse
import json
import platform
import sys
from typing import List

import yaml

from . import __version__
from . import actions
from .actions import BookmarkChanges
from .config import Settings, load_settings
from .errors import AmbiguousMatch, NotFound, ParseError, StoreIOError
from .fetch import fetch_title
from .index import BookmarkIndex
from .log import LogConfig, get_logger, setup_logging
from .matching import parse_keywords
from .migrate import migrate_legacy
from .model import Bookmark
from .search import build_query
from .select import SelectOptions
from .store import BookmarkStore
from .tag import parse_tags
from .ui import Terminal, open_url

log = get_logger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_IO = 2
EXIT_SEARCHED = 3


def build_parser(cfg: Settings) -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="goto",
        description="Web bookmarks utility: add, find and open bookmarks by keyword.",
    )
    p.add_argument("-V", "--version", action="version", version=f"goto {__version__}")
    p.add_argument("--config", default=None, help="YAML config file (optional). Env vars override defaults.")
    p.add_argument(
        "-v",
        "--verbosity",
        type=int,
        choices=range(0, 6),
        default=None,
        metavar="0-5",
        help="Verbosity, from 0 (least output) to 5 (most). Overrides the configured log level.",
    )
    p.add_argument("--no-color", action="store_true", help="Disable colored output.")
    p.add_argument("-D", "--debug", action="store_true", help="Print debug information about this build and exit.")
    sub = p.add_subparsers(dest="cmd")

    add = sub.add_parser("add", help="Add a bookmark with URL and optionally some tags.")
    add.add_argument("url", help="URL to bookmark; https:// is assumed when no scheme is given.")
    add.add_argument("tags", nargs="*", help="Tags for the bookmark.")
    add.add_argument("-t", "--title", default=None, help="Title (fetched from the page when omitted).")
    add.add_argument("--no-fetch", action="store_true", help="Do not fetch the page title.")
    add.add_argument("--no-input", action="store_true", help="Never prompt, even on a terminal.")

    opn = sub.add_parser(
        "open",
        help="Open the bookmark matching the keywords, or search online when none matches.",
    )
    opn.add_argument("-s", "--score", dest="min_score", type=float, default=None, help=f"Minimum score (default {cfg.min_score}).")
    opn.add_argument("--first", action="store_true", help="Open the best match instead of asking when several match.")
    opn.add_argument("keywords", nargs="+", help="Keywords matched against tags, title and URL.")

    sel = sub.add_parser("select", help="Select from a list of bookmarks matching the keywords.")
    sel.add_argument("-s", "--score", dest="min_score", type=float, default=None, help=f"Minimum score (default {cfg.min_score}).")
    sel.add_argument("-n", "--limit", type=int, default=None, help=f"Maximum number of results (default {cfg.limit}).")
    out = sel.add_mutually_exclusive_group()
    out.add_argument("--json", action="store_true", help="Print results as JSON instead of prompting.")
    out.add_argument("--print", dest="print_only", action="store_true", help="Print results instead of prompting.")
    sel.add_argument("keywords", nargs="*", help="Keywords; list everything when omitted.")

    edt = sub.add_parser("edit", help="Edit a bookmark identified by its URL.")
    edt.add_argument("url")
    edt.add_argument("-t", "--title", default=None, help="Replace the title (empty string clears it).")
    edt.add_argument("--tags", default=None, help="Replace all tags (space or comma separated).")
    edt.add_argument("--add-tag", action="append", default=[], help="Add a tag (repeatable).")
    edt.add_argument("--remove-tag", action="append", default=[], help="Remove a tag (repeatable).")
    edt.add_argument("--url", dest="new_url", default=None, help="Move the bookmark to a new URL.")

    rm = sub.add_parser("rm", help="Delete a bookmark identified by its URL.")
    rm.add_argument("url")

    sub.add_parser("tags", help="List all tags with their usage counts.")

    if cfg.enable_migrate:
        sub.add_parser(
            "migrate",
            help="Migrate all existing bookmarks from JSON to YAML. This action is not reversible.",
        )
    return p


def main(argv: List[str] | None = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    pre = argparse.ArgumentParser(add_help=False)
    pre.add_argument("--config", default=None)
    known, _ = pre.parse_known_args(argv)
    try:
        cfg = load_settings(known.config)
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
        log.error("Cannot read config file: %s", e)
        return EXIT_ERROR

    p = build_parser(cfg)
    args = p.parse_args(argv)
    if args.cmd is None and not args.debug:
        # A bare invocation lists everything.
        args = p.parse_args(argv + ["select"])

    if args.no_color:
        cfg.no_color = True
    if args.debug:
        cfg.debug = True
    setup_logging(LogConfig(level=cfg.log_level, no_color=cfg.no_color, verbosity=args.verbosity))

    if cfg.debug:
        print(debug_info(cfg))
        return EXIT_OK

    store = BookmarkStore(cfg.data_dir, ext=cfg.file_ext)
    term = Terminal(no_color=cfg.no_color)
    handlers = {
        "add": _cmd_add,
        "open": _cmd_open,
        "select": _cmd_select,
        "edit": _cmd_edit,
        "rm": _cmd_rm,
        "tags": _cmd_tags,
        "migrate": _cmd_migrate,
    }
    try:
        return handlers[args.cmd](args, cfg, store, term)
    except StoreIOError as e:
        log.error("Bookmark store failure: %s", e)
        return EXIT_IO
    except ParseError as e:
        log.error("Unreadable bookmark: %s", e)
        return EXIT_ERROR
    except NotFound as e:
        term.message(str(e))
        return EXIT_ERROR


def debug_info(cfg: Settings) -> str:
    lines = [
        f"goto {__version__}",
        f"python {platform.python_version()} ({platform.python_implementation()})",
        f"platform {platform.platform()}",
    ]
    for k, v in cfg.as_dict().items():
        lines.append(f"{k}: {v}")
    return "\n".join(lines)


def _interactive() -> bool:
    return sys.stdin.isatty()


def _cmd_add(args, cfg: Settings, store: BookmarkStore, term: Terminal) -> int:
    tags = parse_tags(args.tags)
    title = args.title
    fetch = cfg.fetch_title and not args.no_fetch and not title
    try:
        url = Bookmark(url=args.url).url
    except ValueError as e:
        log.error("Invalid URL %r: %s", args.url, e)
        return EXIT_ERROR

    if _interactive() and not args.no_input:
        if fetch:
            title = fetch_title(
                url,
                timeout_s=cfg.fetch_timeout_s,
                user_agent=cfg.fetch_user_agent,
                max_bytes=cfg.fetch_max_bytes,
            )
        tags = term.read_tags(tags)
        title = term.read_title(title)
        fetch = False

    saved = actions.add(store, url, tags, title, settings=cfg, fetch=fetch)
    print(saved)
    return EXIT_OK


def _cmd_open(args, cfg: Settings, store: BookmarkStore, term: Terminal) -> int:
    min_score = cfg.min_score if args.min_score is None else args.min_score
    if args.first:
        cfg.open_first = True
    decision = actions.open_keywords(BookmarkIndex(store), args.keywords, SelectOptions(min_score=min_score), cfg)
    try:
        bookmark = decision.single()
    except AmbiguousMatch as e:
        if not _interactive():
            term.show_results(e.candidates)
            log.error("%s; refine the keywords or run with --first.", e)
            return EXIT_ERROR
        bookmark = term.choose_bookmark(e.candidates)
        if bookmark is None:
            return EXIT_OK
    except NotFound:
        words = parse_keywords(args.keywords) or args.keywords
        query = build_query(words, cfg.search_engine)
        term.message("No bookmark found for keyword(s), searching online instead")
        _launch(query)
        return EXIT_SEARCHED
    return EXIT_OK if _launch(bookmark.url) else EXIT_ERROR


def _cmd_select(args, cfg: Settings, store: BookmarkStore, term: Terminal) -> int:
    options = SelectOptions(
        min_score=cfg.min_score if args.min_score is None else args.min_score,
        limit=cfg.limit if args.limit is None else args.limit,
    )
    decision = actions.select_keywords(BookmarkIndex(store), args.keywords, options, cfg)
    results = decision.results
    show_score = bool(parse_keywords(args.keywords))

    if args.json:
        rows = [
            {"id": r.bookmark.id, "url": r.bookmark.url, "title": r.bookmark.title, "tags": r.bookmark.tags, "score": round(r.score, 4)}
            for r in results
        ]
        print(json.dumps(rows, ensure_ascii=False))
        return EXIT_OK
    if not results:
        term.message("No bookmarks found")
        return EXIT_OK
    if args.print_only or not _interactive():
        term.show_results(results, show_score=show_score)
        return EXIT_OK

    bookmark = term.choose_bookmark(results, show_score=show_score)
    if bookmark is None:
        return EXIT_OK
    return _bookmark_action(bookmark, cfg, store, term)


def _bookmark_action(bookmark: Bookmark, cfg: Settings, store: BookmarkStore, term: Terminal) -> int:
    action = term.choose_action(bookmark)
    if action is None:
        return EXIT_OK
    if action == "open":
        return EXIT_OK if _launch(bookmark.url) else EXIT_ERROR
    if action == "edit title":
        default = bookmark.title
        if not default and cfg.fetch_title:
            default = fetch_title(
                bookmark.url,
                timeout_s=cfg.fetch_timeout_s,
                user_agent=cfg.fetch_user_agent,
                max_bytes=cfg.fetch_max_bytes,
            )
        title = term.read_title(default)
        updated = actions.edit(store, bookmark, BookmarkChanges(title=title or ""))
    elif action == "edit tags":
        updated = actions.edit(store, bookmark, BookmarkChanges(tags=term.read_tags(bookmark.tags)))
    elif action == "edit URL":
        new_url = term.read_url(bookmark.url)
        try:
            updated = actions.edit(store, bookmark, BookmarkChanges(url=new_url))
        except ValueError as e:
            log.error("Invalid URL %r: %s", new_url, e)
            return EXIT_ERROR
    elif action == "delete":
        actions.delete(store, bookmark)
        term.message(f"Deleted bookmark {bookmark.url}")
        return EXIT_OK
    else:
        return EXIT_OK
    print(updated)
    return EXIT_OK


def _cmd_edit(args, cfg: Settings, store: BookmarkStore, term: Terminal) -> int:
    try:
        bookmark = store.find(args.url)
    except ValueError as e:
        log.error("Invalid URL %r: %s", args.url, e)
        return EXIT_ERROR
    changes = BookmarkChanges(
        title=args.title,
        tags=None if args.tags is None else parse_tags(args.tags),
        add_tags=args.add_tag,
        remove_tags=args.remove_tag,
        url=args.new_url,
    )
    if changes.is_empty():
        if _interactive():
            return _bookmark_action(bookmark, cfg, store, term)
        log.error("Nothing to change; pass --title, --tags, --add-tag, --remove-tag or --url.")
        return EXIT_ERROR
    try:
        updated = actions.edit(store, bookmark, changes)
    except ValueError as e:
        log.error("Invalid URL %r: %s", args.new_url, e)
        return EXIT_ERROR
    print(updated)
    return EXIT_OK


def _cmd_rm(args, cfg: Settings, store: BookmarkStore, term: Terminal) -> int:
    try:
        actions.delete(store, args.url)
    except ValueError as e:
        log.error("Invalid URL %r: %s", args.url, e)
        return EXIT_ERROR
    term.message(f"Deleted bookmark {Bookmark(url=args.url).url}")
    return EXIT_OK


def _cmd_tags(args, cfg: Settings, store: BookmarkStore, term: Terminal) -> int:
    for tag, count in actions.all_tags(BookmarkIndex(store)):
        print(f"{tag}\t{count}")
    return EXIT_OK


def _cmd_migrate(args, cfg: Settings, store: BookmarkStore, term: Terminal) -> int:
    stats = migrate_legacy(store)
    term.message(f"Migrated {stats.migrated} bookmarks from JSON to YAML")
    if stats.failed:
        log.warning("%d legacy bookmarks could not be migrated and were left in place.", stats.failed)
        return EXIT_ERROR
    return EXIT_OK


def _launch(url: str) -> bool:
    print(url)
    return open_url(url)
