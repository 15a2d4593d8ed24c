"""
Plan/result separation for corpus-mutating commands.

A plan is computed without side effects and lists, in order, the file
operations a command would perform. Executing the plan performs them. The
operation list is explicit so a later version can persist it before applying
anything; today nothing is persisted and a failed rename is not rolled back.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from .audit_log import FileChanges

OperationKind = Literal["move", "set-header", "rewrite-links", "rewrite-branch-links"]


@dataclass(frozen=True)
class FileOperation:
    """One planned file operation.

    ``scope`` is ``"unit"`` when only ``target`` is touched and ``"corpus"``
    when every unit is scanned.
    """
    kind: OperationKind
    old_id: str
    new_id: str
    target: str
    scope: Literal["unit", "corpus"] = "unit"

    def describe(self) -> str:
        if self.kind == "move":
            return f"move {self.old_id}.md -> {self.new_id}.md"
        if self.kind == "set-header":
            return f"set header of {self.target}.md to zettel: {self.new_id}"
        where = "all zettels" if self.scope == "corpus" else f"{self.target}.md"
        if self.kind == "rewrite-links":
            return f"rewrite [[{self.old_id}]] -> [[{self.new_id}]] in {where}"
        return f"rewrite branch links [[{self.old_id}*]] -> [[{self.new_id}*]] in {where}"


@dataclass
class BasePlan(ABC):
    """Base class for operation plans."""
    zettel_dir: Path

    @abstractmethod
    def summary(self) -> str:
        """Human-readable summary of what would be done."""
        ...


@dataclass
class BaseResult:
    """Base class for operation results."""
    changes: FileChanges = field(default_factory=FileChanges)


@dataclass
class RenamePlan(BasePlan):
    """Plan for renaming a zettel, its descendants, and every reference to them."""
    from_id: str = ""
    to_id: str = ""
    renames: list[tuple[str, str]] = field(default_factory=list)  # root first
    operations: list[FileOperation] = field(default_factory=list)

    def summary(self) -> str:
        lines = [
            f"Rename Plan: {self.from_id} -> {self.to_id}",
            f"  Directory: {self.zettel_dir}",
            f"  Zettels to rename: {len(self.renames)}",
        ]
        for index, operation in enumerate(self.operations, start=1):
            lines.append(f"  {index:>3}. {operation.describe()}")
        return "\n".join(lines)


@dataclass
class RenameResult(BaseResult):
    """Result of rename execution."""
    completed: list[tuple[str, str]] = field(default_factory=list)
