"""Check command - report identifier and link inconsistencies in the corpus."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from typing import Literal

from rich.console import Console

from ..config import ZetConfig
from ..corpus import Corpus
from ..ids import strip_leaf
from ..models import Zettel


@dataclass
class CheckResult:
    """A single consistency finding."""

    level: Literal["error", "warning"]
    rule: str
    identifier: str
    message: str

    def __str__(self) -> str:
        return f"{self.level.upper()}: [{self.rule}] {self.identifier} - {self.message}"


class CorpusChecks:
    """Consistency checks over one snapshot of the corpus."""

    def __init__(self, corpus: Corpus):
        self.corpus = corpus
        self.identifiers = set(corpus.list_identifiers())
        self.zettels: dict[str, Zettel] = {}
        self.unreadable: list[CheckResult] = []

        for identifier in sorted(self.identifiers):
            try:
                self.zettels[identifier] = corpus.load(identifier)
            except Exception as e:
                self.unreadable.append(
                    CheckResult("error", "unreadable-header", identifier, f"Cannot parse header: {e}")
                )

        # branches that resolve to at least one numbered zettel
        self.branches = set()
        for identifier in self.identifiers:
            base, _, numeric = strip_leaf(identifier)
            if numeric and base:
                self.branches.add(base)

    def run_all(self) -> list[CheckResult]:
        results = list(self.unreadable)
        results.extend(self.check_headers())
        results.extend(self.check_broken_links())
        return results

    def check_headers(self) -> list[CheckResult]:
        """The header's ``zettel:`` field must name the file it lives in."""
        results = []
        for identifier, zettel in self.zettels.items():
            recorded = zettel.header_id
            if recorded is None:
                results.append(
                    CheckResult("warning", "missing-header", identifier, "No 'zettel:' field in header")
                )
            elif recorded != identifier:
                results.append(
                    CheckResult(
                        "error",
                        "header-mismatch",
                        identifier,
                        f"Header records {recorded!r} but the file is {identifier}.md",
                    )
                )
        return results

    def check_broken_links(self) -> list[CheckResult]:
        """Every link must name an existing zettel or a populated branch."""
        results = []
        for identifier, zettel in self.zettels.items():
            for link in zettel.links:
                if link in self.identifiers or link in self.branches:
                    continue
                results.append(
                    CheckResult("error", "broken-link", identifier, f"Link [[{link}]] has no target")
                )
        return results


def run_check(config: ZetConfig, output_json: bool = False, fail_on: str = "error") -> int:
    """Check the corpus for consistency problems.

    Returns:
        Exit code (0 = clean, 1 = findings at or above ``fail_on``)
    """
    console = Console(stderr=True)
    corpus = Corpus(config)

    console.print(f"Checking zettels in {corpus.directory}...", style="dim", markup=False)
    results = CorpusChecks(corpus).run_all()

    if output_json:
        print(json.dumps([asdict(r) for r in results], indent=2))
    elif not results:
        console.print("No problems found.", style="green")
    else:
        for result in results:
            style = "red" if result.level == "error" else "yellow"
            console.print(str(result), style=style, markup=False)

    failing = {"error"} if fail_on == "error" else {"error", "warning"}
    return 1 if any(r.level in failing for r in results) else 0
