"""Text-level utilities for zettel content: link tokens and the header block."""

from __future__ import annotations

import re

from ..ids import strip_leaf

# Match [[identifier]] where the identifier is restricted to link-safe characters
LINK_PATTERN = re.compile(r"\[\[([A-Za-z0-9.\-_]+)\]\]")

HEADER_DELIMITER = "---"
HEADER_ID_FIELD = "zettel"


def format_link(identifier: str) -> str:
    return f"[[{identifier}]]"


def extract_links(content: str) -> list[str]:
    """Extract linked identifiers from content, in line order.

    Only the first link on each line is returned. Lines carrying several
    links are a known limitation of the format, not something to fix here.
    """
    links = []
    for line in content.split("\n"):
        match = LINK_PATTERN.search(line)
        if match:
            links.append(match.group(1))
    return links


def filter_direct_branches(links: list[str], parent_id: str) -> list[str]:
    """Keep only links naming a branch directly under ``parent_id``.

    Branches are always alphabetically suffixed; links to numbered units in
    a branch are grandchildren and are dropped.
    """
    branches = []
    for link in links:
        base, _, numeric = strip_leaf(link)
        if numeric:
            continue
        if base == parent_id:
            branches.append(link)
    return branches


def rewrite_exact_links(content: str, old_id: str, new_id: str) -> tuple[str, int]:
    """Replace every ``[[old_id]]`` token with ``[[new_id]]``.

    Returns the new content and the number of replaced tokens.
    """
    token = format_link(old_id)
    count = content.count(token)
    if not count:
        return content, 0
    return content.replace(token, format_link(new_id)), count


def rewrite_branch_links(content: str, old_id: str, new_id: str) -> tuple[str, int]:
    """Re-root branch links of ``old_id`` onto ``new_id``.

    ``[[tmp.3a]]`` becomes ``[[proj.7a]]`` when renaming ``tmp.3`` to
    ``proj.7``. Links to numbered units are left alone; those are handled by
    exact rewrites as each unit is renamed.
    """
    count = 0

    def _replace(match: re.Match[str]) -> str:
        nonlocal count
        base, leaf, numeric = strip_leaf(match.group(1))
        if numeric or base != old_id:
            return match.group(0)
        count += 1
        return format_link(new_id + leaf)

    rewritten = LINK_PATTERN.sub(_replace, content)
    return rewritten, count


def _find_header(lines: list[str]) -> int | None:
    """Return the index of the closing header delimiter, if the block exists."""
    if not lines or lines[0].rstrip("\r\n") != HEADER_DELIMITER:
        return None
    for index in range(1, len(lines)):
        if lines[index].rstrip("\r\n") == HEADER_DELIMITER:
            return index
    return None


def set_header_id(content: str, identifier: str) -> str:
    """Record ``identifier`` in the header block of ``content``.

    Updates the ``zettel:`` line in place, adds it to an existing block that
    lacks one, or prepends a new block. Other header lines and the body are
    left byte-for-byte intact.
    """
    field_line = f"{HEADER_ID_FIELD}: {identifier}"
    lines = content.splitlines(keepends=True)
    end = _find_header(lines)

    if end is None:
        return f"{HEADER_DELIMITER}\n{field_line}\n{HEADER_DELIMITER}\n" + content

    for index in range(1, end):
        line = lines[index]
        key = line.split(":", 1)[0].strip()
        if ":" in line and key == HEADER_ID_FIELD:
            ending = line[len(line.rstrip("\r\n")):]
            lines[index] = field_line + (ending or "\n")
            return "".join(lines)

    ending = lines[0][len(HEADER_DELIMITER):] or "\n"
    lines.insert(1, field_line + ending)
    return "".join(lines)


def render_new_zettel(identifier: str, timestamp: str) -> str:
    """Content of a freshly created unit: header, then room for the body."""
    return (
        f"{HEADER_DELIMITER}\n"
        f"{HEADER_ID_FIELD}: {identifier}\n"
        f"date: {timestamp}\n"
        f"{HEADER_DELIMITER}\n\n\n\n"
    )
