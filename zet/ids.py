"""Identifier algebra: pure functions over zettel identifier strings.

An identifier is a run of segments alternating between digits and
non-digits, e.g. ``tmp.12a3``. A trailing digit run names a sequence
position (a unit with content); a trailing non-digit run names a branch.
"""

from __future__ import annotations

import re
from functools import cmp_to_key
from typing import Iterable

from .errors import ConsistencyViolation, InvalidIdentifierShape

ALPHABET = "abcdefghijklmnopqrstuvwxyz"

# Sentinel ceiling for sequence numbers. Reaching it means the corpus was not
# produced by this tool.
SEQUENCE_UPPER_LIMIT = 999999

IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z0-9.\-_]+$")

# Prefixes that would be mistaken for subcommands on the command line.
RESERVED_PREFIXES = frozenset(
    {
        "branch",
        "check",
        "create",
        "link",
        "grep",
        "log",
        "next",
        "previous",
        "version",
        "--version",
        "-v",
        "rename",
        "resolve",
        "open",
        "help",
        "path",
        "--help",
        "-h",
    }
)


def strip_leaf(identifier: str) -> tuple[str, str, bool]:
    """Split an identifier into its parent and trailing segment.

    E.g: ``tmp.12.321aa32c69`` -> ``("tmp.12.321aa32c", "69", True)``

    The class of the last character decides which class is stripped; the
    trailing run of that class is the leaf and everything before it is the
    base. Non-digits (letters, dots, hyphens) all count as one class.

    Returns ``(base, leaf, leaf_is_numeric)``.
    """
    if not identifier:
        raise InvalidIdentifierShape(
            "Cannot strip leaf of an empty identifier",
            {"operation": "strip_leaf", "identifier": identifier},
        )

    numeric = identifier[-1].isdigit()
    i = len(identifier) - 1
    while i > 0 and identifier[i - 1].isdigit() == numeric:
        i -= 1
    return identifier[:i], identifier[i:], numeric


def is_sequence(identifier: str) -> bool:
    """True if the identifier ends in a sequence number."""
    return bool(identifier) and identifier[-1].isdigit()


def compare_alpha(a: str, b: str) -> int:
    """Order two alphabetic runs.

    A shorter run is always smaller than a longer one; runs of equal length
    compare character by character. Returns -1, 1, or 0 only when ``a == b``.
    """
    if len(a) != len(b):
        return -1 if len(a) < len(b) else 1
    if a == b:
        return 0
    return -1 if a < b else 1


def increment_alpha(run: str) -> str:
    """Return the successor of a lowercase branch run.

    The last character is the least significant place, but overflow appends
    instead of carrying: ``"z" -> "za"`` and ``"az" -> "aza"``. Branches can
    therefore grow without bound and no existing run is ever reused.
    """
    if not run:
        raise InvalidIdentifierShape(
            "Cannot increment an empty branch run",
            {"operation": "increment_alpha", "run": run},
        )

    last = run[-1]
    if last == "z":
        return run + "a"
    position = ALPHABET.find(last)
    if position == -1:
        raise InvalidIdentifierShape(
            f"Invalid branch run: {run!r}",
            {"operation": "increment_alpha", "run": run},
        )
    return run[:-1] + ALPHABET[position + 1]


def next_branch_letter(siblings: Iterable[str]) -> str:
    """Return the branch run to use for the next branch of a parent.

    ``siblings`` holds existing branch identifiers (or bare branch runs) of the
    same parent. With no siblings the first branch is ``"a"``.
    """
    leaves = []
    for sibling in siblings:
        _, leaf, numeric = strip_leaf(sibling)
        if numeric:
            raise InvalidIdentifierShape(
                f"Branch {sibling!r} ends in a number",
                {"operation": "next_branch_letter", "identifier": sibling},
            )
        leaves.append(leaf)

    if not leaves:
        return "a"

    highest = max(leaves, key=cmp_to_key(compare_alpha))
    return increment_alpha(highest)


def parse_sequence(leaf: str, identifier: str = "") -> int:
    """Convert a numeric leaf to an int, guarding the sentinel ceiling."""
    number = int(leaf)
    if number >= SEQUENCE_UPPER_LIMIT:
        raise ConsistencyViolation(
            f"Unexpectedly high sequence number in {identifier or leaf!r}",
            {"operation": "parse_sequence", "identifier": identifier, "leaf": leaf},
        )
    return number


def validate_identifier(identifier: str) -> str:
    """Return the identifier if it only uses link-safe characters."""
    if not IDENTIFIER_PATTERN.match(identifier):
        raise InvalidIdentifierShape(
            f"Invalid identifier: {identifier!r}",
            {"operation": "validate_identifier", "identifier": identifier},
        )
    return identifier


def id_from_path(path: str) -> str:
    """Strip directories and the ``.md`` suffix from a unit path."""
    name = path.replace("\\", "/").rsplit("/", 1)[-1]
    if not name.endswith(".md"):
        raise InvalidIdentifierShape(
            f"Given file did not have expected extension: {name!r}",
            {"operation": "id_from_path", "path": path},
        )
    return name[: -len(".md")]


def next_sequence_id(prefix: str, identifiers: Iterable[str]) -> str:
    """Compute the next free sequence identifier under ``prefix``.

    The separator style is re-derived from the given listing on every call:
    a prefix is dot-separated (``tmp.4``) unless an existing direct child is
    concatenated (``tmp4``). A prefix ending in a digit is always
    dot-separated, since concatenation would change the number.
    """
    if not prefix:
        raise InvalidIdentifierShape(
            "Prefix must not be empty", {"operation": "create", "prefix": prefix}
        )
    if prefix in RESERVED_PREFIXES:
        raise InvalidIdentifierShape(
            f"Prefix {prefix!r} is reserved", {"operation": "create", "prefix": prefix}
        )
    validate_identifier(prefix)

    numeric_prefix = prefix[-1].isdigit()
    dot_separated = True
    highest = 0
    for identifier in identifiers:
        if not identifier.startswith(prefix):
            continue
        suffix = identifier[len(prefix):]
        if not suffix:
            continue
        if suffix[0] == ".":
            suffix = suffix[1:]
        elif numeric_prefix:
            # tmp.12 is a sibling of tmp.1, not a child
            continue
        elif suffix[0].isdigit():
            dot_separated = False
        if not suffix.isdigit():
            continue
        highest = max(highest, parse_sequence(suffix, identifier))

    separator = "." if dot_separated else ""
    return f"{prefix}{separator}{highest + 1}"
