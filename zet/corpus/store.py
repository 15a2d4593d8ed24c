"""Corpus index and unit persistence over a flat directory of ``<id>.md`` files."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

import frontmatter

from ..config import ZetConfig
from ..errors import AlreadyExists, NotFound
from ..models import Zettel
from .parser import extract_links, render_new_zettel

logger = logging.getLogger(__name__)

UNIT_SUFFIX = ".md"
TIMESTAMP_FORMAT = "%a %Y-%m-%d %H:%M:%S %Z"
# bodies are opaque bytes; undecodable ones survive a read/write cycle unchanged
ENCODING_ERRORS = "surrogateescape"


def timestamp() -> str:
    """Local creation timestamp, e.g. ``Mon 2025-01-06 09:30:00 CET``."""
    return datetime.now().astimezone().strftime(TIMESTAMP_FORMAT)


class Corpus:
    """The backing store: one markdown file per zettel in a single directory.

    Listings are not cached; every query reflects the directory as it is now.
    Subdirectories and files without the unit suffix are ignored.
    """

    def __init__(self, config: ZetConfig):
        self.config = config
        self.directory = config.zettel_dir

    def path_for(self, identifier: str) -> Path:
        return self.directory / f"{identifier}{UNIT_SUFFIX}"

    def exists(self, identifier: str) -> bool:
        return self.path_for(identifier).is_file()

    def list_identifiers(self) -> list[str]:
        """All stored identifiers, in no particular order."""
        identifiers = []
        for entry in self.directory.iterdir():
            if not entry.is_file() or not entry.name.endswith(UNIT_SUFFIX):
                continue
            identifiers.append(entry.name[: -len(UNIT_SUFFIX)])
        return identifiers

    def identifiers_with_prefix(self, prefix: str) -> list[str]:
        return [i for i in self.list_identifiers() if i.startswith(prefix)]

    def read(self, identifier: str) -> str:
        path = self.path_for(identifier)
        if not path.is_file():
            raise NotFound(
                f"Zettel {identifier!r} does not exist",
                {"operation": "read", "identifier": identifier, "path": str(path)},
            )
        return path.read_text(encoding="utf-8", errors=ENCODING_ERRORS)

    def write(self, identifier: str, content: str) -> None:
        self.path_for(identifier).write_text(content, encoding="utf-8", errors=ENCODING_ERRORS)

    def load(self, identifier: str) -> Zettel:
        """Read a unit and parse its header block."""
        path = self.path_for(identifier)
        post = frontmatter.loads(self.read(identifier))
        return Zettel(
            path=path,
            identifier=identifier,
            header=post.metadata,
            body=post.content,
            links=extract_links(post.content),
        )

    def create(self, identifier: str) -> Path:
        """Create a unit with a fresh header. Never overwrites."""
        path = self.path_for(identifier)
        if path.exists():
            raise AlreadyExists(
                f"Attempted to create existing file: {path}",
                {"operation": "create", "identifier": identifier, "path": str(path)},
            )
        path.write_text(render_new_zettel(identifier, timestamp()), encoding="utf-8")
        logger.debug("created %s", path)
        return path

    def append(self, identifier: str, text: str) -> None:
        path = self.path_for(identifier)
        if not path.is_file():
            raise NotFound(
                f"Zettel {identifier!r} does not exist",
                {"operation": "append", "identifier": identifier, "path": str(path)},
            )
        with path.open("a", encoding="utf-8", errors=ENCODING_ERRORS) as f:
            f.write(text)

    def move(self, old_id: str, new_id: str) -> Path:
        """Move a unit to a new identifier. Never overwrites."""
        source = self.path_for(old_id)
        target = self.path_for(new_id)
        if target.exists():
            raise AlreadyExists(
                f"Zettel {new_id!r} already exists",
                {"operation": "move", "from": old_id, "to": new_id, "path": str(target)},
            )
        if not source.is_file():
            raise NotFound(
                f"Zettel {old_id!r} does not exist",
                {"operation": "move", "from": old_id, "to": new_id, "path": str(source)},
            )
        source.rename(target)
        logger.debug("moved %s -> %s", source, target)
        return target
