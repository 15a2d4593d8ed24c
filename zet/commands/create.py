"""Create, branch and link commands - the append-only ways a corpus grows."""

from __future__ import annotations

from pathlib import Path

from rich.console import Console

from ..audit_log import FileChanges, log_operation
from ..collaborators import open_in_editor, put_on_clipboard
from ..config import ZetConfig
from ..corpus import Corpus, Navigator, extract_links, filter_direct_branches, format_link
from ..errors import NotFound
from ..ids import id_from_path, next_branch_letter, next_sequence_id, validate_identifier


def create_zettel(corpus: Corpus, prefix: str) -> tuple[str, Path]:
    """Create the next zettel in sequence under ``prefix``."""
    zettel_id = next_sequence_id(prefix, corpus.list_identifiers())
    return zettel_id, corpus.create(zettel_id)


def create_branch(corpus: Corpus, parent_id: str) -> tuple[str, str, Path]:
    """Open a new branch off ``parent_id``.

    The next branch letter is derived from the branch links already present
    in the parent, so a branch only counts once it has been linked.

    Returns ``(branch_id, first_zettel_id, first_zettel_path)``.
    """
    if parent_id.endswith(".md"):
        parent_id = id_from_path(parent_id)
    validate_identifier(parent_id)

    content = corpus.read(parent_id)
    branches = filter_direct_branches(extract_links(content), parent_id)
    branch_id = parent_id + next_branch_letter(branches)
    first_id = branch_id + "1"  # branches start on sequence no. 1
    return branch_id, first_id, corpus.create(first_id)


def link_and_append(corpus: Corpus, src_id: str, dst_id: str) -> None:
    """Append a link to ``dst_id`` at the end of ``src_id``.

    The destination must be an existing zettel or a branch with at least one
    numbered zettel.
    """
    validate_identifier(src_id)
    validate_identifier(dst_id)
    if not corpus.exists(src_id):
        raise NotFound(
            f"Source zet does not exist: {str(corpus.path_for(src_id))!r}",
            {"operation": "link", "from": src_id, "to": dst_id},
        )
    if not corpus.exists(dst_id):
        try:
            Navigator(corpus).first_in_branch(dst_id)
        except NotFound as e:
            raise NotFound(
                f"Destination zet or branch does not exist: {dst_id!r}",
                {"operation": "link", "from": src_id, "to": dst_id},
            ) from e

    corpus.append(src_id, f"\n{format_link(dst_id)}\n")


def run_create(config: ZetConfig, prefix: str | None = None, edit: bool = True) -> int:
    """Create a zettel and open it in the editor."""
    corpus = Corpus(config)
    zettel_id, path = create_zettel(corpus, prefix or config.default_prefix)
    log_operation(config.state_dir, "create", FileChanges(created=[zettel_id]))

    if edit:
        open_in_editor(config, path, insert_mode=True)
    else:
        print(path)
    return 0


def run_branch(config: ZetConfig, parent_id: str, link: bool = False) -> int:
    """Create a branch off a parent zettel.

    Without ``link`` the new branch link is printed for pasting. With
    ``link`` it is appended to the parent and the path of the branch's first
    zettel is printed.
    """
    corpus = Corpus(config)
    if parent_id.endswith(".md"):
        parent_id = id_from_path(parent_id)
    branch_id, first_id, path = create_branch(corpus, parent_id)

    changes = FileChanges(created=[first_id])
    if link:
        link_and_append(corpus, parent_id, branch_id)
        changes.rewritten.append(parent_id)
        print(path)
    else:
        print(format_link(branch_id))

    log_operation(config.state_dir, "branch", changes, {"branch": branch_id})
    return 0


def run_link(config: ZetConfig, src_id: str, dst_id: str) -> int:
    """Append a link from one zettel to another."""
    corpus = Corpus(config)
    link_and_append(corpus, src_id, dst_id)
    log_operation(
        config.state_dir,
        "link",
        FileChanges(rewritten=[src_id]),
        {"from": src_id, "to": dst_id},
    )
    return 0


def run_link_path(config: ZetConfig, path: str) -> int:
    """Put a link to the zettel at ``path`` on the clipboard."""
    console = Console(stderr=True)
    link = format_link(id_from_path(path))
    put_on_clipboard(link + "\n")
    console.print(f"Copied {link}", style="green", markup=False)
    return 0
