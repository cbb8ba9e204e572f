from __future__ import annotations

import webbrowser
from typing import List, Optional, Sequence

from rich.console import Console
from rich.markup import escape
from rich.prompt import Prompt
from rich.table import Table

from .log import get_logger
from .model import Bookmark, MatchResult
from .tag import parse_tags

log = get_logger(__name__)

ACTIONS = ["open", "edit title", "edit tags", "edit URL", "delete", "exit"]
CANCEL = "q"


def open_url(url: str) -> bool:
    try:
        ok = webbrowser.open(url)
    except webbrowser.Error as e:
        log.warning("Unable to open %s: %s", url, e)
        return False
    if not ok:
        log.warning("System did not acknowledge opening the browser for %s", url)
    return ok


class Terminal:
    """Interactive list presenter and input prompts.

    Prompts and messages go to stderr so stdout stays clean for URLs and JSON.
    """

    def __init__(self, *, no_color: bool = False, out: Optional[Console] = None, err: Optional[Console] = None):
        self.out = out or Console(no_color=no_color, highlight=False)
        self.err = err or Console(stderr=True, no_color=no_color, highlight=False)

    def message(self, text: str) -> None:
        self.err.print(escape(text))

    def results_table(self, results: Sequence[MatchResult], *, show_score: bool = True) -> Table:
        table = Table(show_header=True, header_style="bold", box=None, pad_edge=False)
        table.add_column("#", justify="right", style="dim")
        if show_score:
            table.add_column("score", justify="right")
        table.add_column("title")
        table.add_column("url", style="cyan", overflow="fold")
        table.add_column("tags", style="green")
        for i, r in enumerate(results, start=1):
            b = r.bookmark
            row = [str(i)]
            if show_score:
                row.append(f"{r.score:.2f}")
            row += [escape(b.title or ""), escape(b.url), escape(" ".join(b.tags))]
            table.add_row(*row)
        return table

    def show_results(self, results: Sequence[MatchResult], *, show_score: bool = True) -> None:
        self.out.print(self.results_table(results, show_score=show_score))

    def choose_bookmark(self, results: Sequence[MatchResult], *, show_score: bool = True) -> Optional[Bookmark]:
        if not results:
            return None
        self.err.print(self.results_table(results, show_score=show_score))
        choices = [str(i) for i in range(1, len(results) + 1)] + [CANCEL]
        picked = self._ask("Select bookmark", choices=choices, default="1")
        if picked is None or picked == CANCEL:
            return None
        return results[int(picked) - 1].bookmark

    def choose_action(self, bookmark: Bookmark) -> Optional[str]:
        self.err.print(f"[bold]{escape(bookmark.label())}[/bold]")
        for i, action in enumerate(ACTIONS, start=1):
            self.err.print(f"  {i}. {action}")
        choices = [str(i) for i in range(1, len(ACTIONS) + 1)]
        picked = self._ask("Select action", choices=choices, default="1")
        if picked is None:
            return None
        action = ACTIONS[int(picked) - 1]
        return None if action == "exit" else action

    def read_title(self, default: Optional[str]) -> Optional[str]:
        value = self._ask("Title", default=default or "")
        if value is None:
            return default
        return value.strip() or None

    def read_tags(self, default: Sequence[str]) -> List[str]:
        value = self._ask("Tags", default=" ".join(default))
        if value is None:
            return list(default)
        return parse_tags(value)

    def read_url(self, default: str) -> str:
        value = self._ask("URL", default=default)
        if value is None or not value.strip():
            return default
        return value.strip()

    def _ask(self, prompt: str, *, default: str, choices: Optional[List[str]] = None) -> Optional[str]:
        try:
            return Prompt.ask(
                prompt,
                console=self.err,
                default=default,
                show_default=bool(default),
                choices=choices,
                show_choices=False,
            )
        except (EOFError, KeyboardInterrupt):
            self.err.print()
            return None
