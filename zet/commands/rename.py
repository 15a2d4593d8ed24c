"""Rename command implementation - move a zettel subtree and fix every reference."""

from __future__ import annotations

import logging

from rich.console import Console

from ..audit_log import FileChanges, log_operation
from ..config import ZetConfig
from ..corpus import Corpus, rewrite_branch_links, rewrite_exact_links, set_header_id
from ..errors import AlreadyExists, InvalidIdentifierShape, NotFound, PartialRename, ZetError
from ..ids import strip_leaf, validate_identifier
from ..planning import FileOperation, RenamePlan, RenameResult

logger = logging.getLogger(__name__)


def is_descendant(identifier: str, ancestor: str) -> bool:
    """True if ``identifier`` lies below ``ancestor`` in the identifier tree.

    The prefix must end on a segment boundary: ``tmp.3a1`` descends from
    ``tmp.3`` but its sibling ``tmp.30`` does not.
    """
    if identifier == ancestor or not identifier.startswith(ancestor):
        return False
    return identifier[len(ancestor)].isdigit() != ancestor[-1].isdigit()


# -----------------------------------------------------------------------------
# compute (no side effects) / execute (performs writes)
# -----------------------------------------------------------------------------


def compute_rename_plan(corpus: Corpus, from_id: str, to_id: str) -> RenamePlan:
    """
    Compute the ordered file operations for renaming ``from_id`` to ``to_id``.

    Only the root rename is validated here. Collisions further down the
    subtree surface while executing.
    """
    # both ends must be sequence positions so descendant suffixes keep their parent
    for role, identifier in (("source", from_id), ("target", to_id)):
        validate_identifier(identifier)
        _, _, numeric = strip_leaf(identifier)
        if not numeric:
            raise InvalidIdentifierShape(
                f"Rename {role} {identifier!r} must end in a sequence number",
                {"operation": "rename", "from": from_id, "to": to_id},
            )
    if not corpus.exists(from_id):
        raise NotFound(
            f"Zettel {from_id!r} does not exist",
            {"operation": "rename", "from": from_id, "to": to_id},
        )
    if corpus.exists(to_id):
        raise AlreadyExists(
            f"Zettel {to_id!r} already exists",
            {"operation": "rename", "from": from_id, "to": to_id},
        )

    descendants = sorted(i for i in corpus.identifiers_with_prefix(from_id) if is_descendant(i, from_id))
    renames = [(from_id, to_id)] + [(d, to_id + d[len(from_id):]) for d in descendants]

    operations: list[FileOperation] = []
    for old_id, new_id in renames:
        operations.extend(
            [
                FileOperation("move", old_id, new_id, target=old_id),
                FileOperation("set-header", old_id, new_id, target=new_id),
                FileOperation("rewrite-links", old_id, new_id, target=new_id, scope="corpus"),
                FileOperation("rewrite-branch-links", old_id, new_id, target=new_id),
            ]
        )
    for old_id, new_id in renames:
        operations.append(
            FileOperation("rewrite-branch-links", old_id, new_id, target=new_id, scope="corpus")
        )

    return RenamePlan(
        zettel_dir=corpus.directory,
        from_id=from_id,
        to_id=to_id,
        renames=renames,
        operations=operations,
    )


def _rewrite_unit(corpus: Corpus, identifier: str, operation: FileOperation, changes: FileChanges) -> None:
    content = corpus.read(identifier)
    if operation.kind == "rewrite-links":
        updated, count = rewrite_exact_links(content, operation.old_id, operation.new_id)
    else:
        updated, count = rewrite_branch_links(content, operation.old_id, operation.new_id)
    if count:
        corpus.write(identifier, updated)
        changes.links_rewritten += count
        if identifier not in changes.rewritten:
            changes.rewritten.append(identifier)


def _apply(corpus: Corpus, operation: FileOperation, changes: FileChanges) -> None:
    logger.debug("applying: %s", operation.describe())
    if operation.kind == "move":
        corpus.move(operation.old_id, operation.new_id)
        changes.moved.append(f"{operation.old_id} -> {operation.new_id}")
        return

    if operation.kind == "set-header":
        content = corpus.read(operation.target)
        corpus.write(operation.target, set_header_id(content, operation.new_id))
        return

    if operation.scope == "unit":
        _rewrite_unit(corpus, operation.target, operation, changes)
        return

    for identifier in corpus.list_identifiers():
        # the moved unit's own header and links are handled by unit-scoped steps
        if operation.kind == "rewrite-links" and identifier == operation.new_id:
            continue
        _rewrite_unit(corpus, identifier, operation, changes)


def execute_rename_plan(corpus: Corpus, plan: RenamePlan) -> RenameResult:
    """
    Apply a rename plan operation by operation.

    Raises:
        ZetError: if the very first move fails (nothing was changed)
        PartialRename: if anything fails after the first move; the completed
            renames are listed and nothing is rolled back
    """
    result = RenameResult()
    for operation in plan.operations:
        try:
            _apply(corpus, operation, result.changes)
        except (ZetError, OSError, ValueError) as e:
            if not result.completed:
                raise
            raise PartialRename(
                f"Rename of {plan.from_id!r} failed at '{operation.describe()}': {e}",
                completed=result.completed,
                details={"operation": "rename", "from": plan.from_id, "to": plan.to_id},
            ) from e
        if operation.kind == "move":
            result.completed.append((operation.old_id, operation.new_id))
    return result


def run_rename(config: ZetConfig, from_id: str, to_id: str, dry_run: bool = False) -> int:
    """Rename a zettel and its subtree.

    Args:
        config: zet configuration
        from_id: Existing identifier
        to_id: New identifier, must end in a sequence number
        dry_run: If True, show the planned operations without writing

    Returns:
        Exit code
    """
    console = Console(stderr=True)
    corpus = Corpus(config)

    # Phase 1: Compute - pure, no side effects
    plan = compute_rename_plan(corpus, from_id, to_id)

    if dry_run:
        console.print("\n[bold]DRY RUN[/bold] - No changes will be made\n")
        console.print(plan.summary(), markup=False, highlight=False)
        return 0

    # Phase 2: Execute - performs writes
    try:
        result = execute_rename_plan(corpus, plan)
    except PartialRename as e:
        log_operation(
            config.state_dir,
            operation="rename",
            changes=FileChanges(moved=[f"{old} -> {new}" for old, new in e.completed]),
            metadata={"from": from_id, "to": to_id, "partial": True, "error": e.message},
        )
        console.print("Rename stopped partway. Already renamed:", style="red")
        for old, new in e.completed:
            console.print(f"  {old} -> {new}", markup=False)
        raise

    log_operation(
        config.state_dir,
        operation="rename",
        changes=result.changes,
        metadata={"from": from_id, "to": to_id},
    )
    console.print(
        f"Renamed {len(result.completed)} zettel(s), rewrote {result.changes.links_rewritten} link(s)",
        style="green",
    )
    print(to_id)
    return 0
