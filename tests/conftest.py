"""Pytest configuration and fixtures."""

from pathlib import Path

import pytest

from zet.config import ZetConfig
from zet.corpus import Corpus, Navigator


def write_zettel(directory: Path, identifier: str, body: str = "") -> Path:
    """Write a unit with a standard header and the given body."""
    path = directory / f"{identifier}.md"
    path.write_text(
        "\n".join(
            [
                "---",
                f"zettel: {identifier}",
                "date: Mon 2025-01-06 09:30:00 UTC",
                "---",
                "",
                body,
                "",
            ]
        ),
        encoding="utf-8",
    )
    return path


@pytest.fixture
def zettel_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "zettel"
    directory.mkdir()
    return directory


@pytest.fixture
def config(zettel_dir: Path) -> ZetConfig:
    return ZetConfig(zettel_dir=zettel_dir, editor="true")


@pytest.fixture
def corpus(config: ZetConfig) -> Corpus:
    return Corpus(config)


@pytest.fixture
def navigator(corpus: Corpus) -> Navigator:
    return Navigator(corpus)


@pytest.fixture
def make_zettel(zettel_dir: Path):
    """Factory writing units into the fixture corpus."""

    def _make(identifier: str, body: str = "") -> Path:
        return write_zettel(zettel_dir, identifier, body)

    return _make
