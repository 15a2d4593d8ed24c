"""Grep command - free-text regex search over every zettel."""

from __future__ import annotations

import re
from typing import Iterator

from rich.console import Console

from ..config import ZetConfig
from ..corpus import Corpus


def search(corpus: Corpus, pattern: re.Pattern[str]) -> Iterator[tuple[str, str]]:
    """Yield ``(identifier, stripped_line)`` for every matching line, sorted by identifier."""
    for identifier in sorted(corpus.list_identifiers()):
        content = corpus.read(identifier)
        if not pattern.search(content):
            continue
        for line in content.split("\n"):
            if pattern.search(line):
                yield identifier, _displayable(line.strip())


def _displayable(line: str) -> str:
    # undecodable bytes are kept as surrogates by the corpus; show them as U+FFFD
    return line.encode("utf-8", "surrogateescape").decode("utf-8", "replace")


def truncate(line: str, limit: int) -> str:
    if limit < 4 or len(line) <= limit:
        return line
    return line[: limit - 3] + "..."


def run_grep(config: ZetConfig, term: str, width: int | None = None) -> int:
    """Print ``<id>: <line>`` for each line matching ``term``, cut to terminal width."""
    console = Console(stderr=True)
    try:
        pattern = re.compile(term)
    except re.error as e:
        console.print(f"Unable to compile regex term: {e}", style="red", markup=False)
        return 1

    width = width or Console().width
    for identifier, line in search(Corpus(config), pattern):
        prefix = f"{identifier}: "
        print(prefix + truncate(line, width - len(prefix)))
    return 0
