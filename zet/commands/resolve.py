"""Resolve, open, next and previous commands."""

from __future__ import annotations

from ..collaborators import open_in_editor
from ..config import ZetConfig
from ..corpus import Corpus, Navigator
from ..errors import InvalidIdentifierShape
from ..ids import id_from_path, validate_identifier


def _looks_like_path(value: str) -> bool:
    return "/" in value or "\\" in value or value.endswith(".md")


def _identifier_argument(value: str, from_path: bool, command: str) -> str:
    if from_path:
        return validate_identifier(id_from_path(value))
    if _looks_like_path(value):
        raise InvalidIdentifierShape(
            f"{value!r} looks like a file path. Did you mean 'zet {command} --path'?",
            {"operation": command, "identifier": value},
        )
    return validate_identifier(value)


def run_resolve(config: ZetConfig, identifier: str) -> int:
    """Print the path of the unit an identifier, branch or prefix resolves to."""
    corpus = Corpus(config)
    resolved = Navigator(corpus).resolve(validate_identifier(identifier))
    print(corpus.path_for(resolved))
    return 0


def run_step(config: ZetConfig, direction: str, value: str, from_path: bool = False) -> int:
    """Print the next or previous zettel.

    With ``from_path`` the argument is a unit path and a path is printed;
    otherwise identifiers go in and out.
    """
    corpus = Corpus(config)
    navigator = Navigator(corpus)
    identifier = _identifier_argument(value, from_path, direction)

    if direction == "next":
        target = navigator.next(identifier)
    else:
        target = navigator.previous(identifier)

    print(corpus.path_for(target) if from_path else target)
    return 0


def run_open(config: ZetConfig, identifier: str) -> int:
    """Open the unit an identifier, branch or prefix resolves to."""
    corpus = Corpus(config)
    resolved = Navigator(corpus).resolve(validate_identifier(identifier))
    open_in_editor(config, corpus.path_for(resolved), insert_mode=False)
    return 0
