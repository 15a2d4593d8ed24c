"""Data models for zettels."""

from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class Zettel:
    """A stored unit: identifier, parsed header, and body."""

    path: Path
    identifier: str  # filename without extension
    header: dict  # parsed YAML header block
    body: str  # raw markdown after the header
    links: list[str] = field(default_factory=list)  # one [[target]] per line

    @property
    def header_id(self) -> str | None:
        """The identifier recorded in the header, if any."""
        value = self.header.get("zettel")
        return None if value is None else str(value)
