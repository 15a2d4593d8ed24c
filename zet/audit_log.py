"""
Audit trail of corpus mutations.

Every completed create, branch, link or rename is appended to
``<zettel_dir>/.zet/audit.log`` as one JSON object per line. The log records
what happened after the fact; it is not a journal that could replay or undo
an interrupted rename.
"""

import json
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any


@dataclass
class FileChanges:
    """Summary of the files touched by an operation."""
    created: list[str] = field(default_factory=list)
    moved: list[str] = field(default_factory=list)  # "old -> new"
    rewritten: list[str] = field(default_factory=list)
    links_rewritten: int = 0


@dataclass
class AuditEntry:
    """A single audit log entry."""
    timestamp: str
    operation: str
    changes: FileChanges
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp,
            "operation": self.operation,
            "changes": asdict(self.changes),
            "metadata": self.metadata,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AuditEntry":
        return cls(
            timestamp=data["timestamp"],
            operation=data["operation"],
            changes=FileChanges(**data.get("changes", {})),
            metadata=data.get("metadata", {}),
        )


def get_audit_log_path(state_dir: Path) -> Path:
    return state_dir / "audit.log"


def log_operation(
    state_dir: Path,
    operation: str,
    changes: FileChanges | None = None,
    metadata: dict[str, Any] | None = None,
) -> AuditEntry:
    """
    Append an operation to the audit log.

    Args:
        state_dir: zet state directory (``ZetConfig.state_dir``)
        operation: Name of the operation (e.g., "create", "rename")
        changes: Files created, moved and rewritten
        metadata: Additional context (identifiers, partial failure info)

    Returns:
        The created audit entry
    """
    entry = AuditEntry(
        timestamp=datetime.now(timezone.utc).isoformat(),
        operation=operation,
        changes=changes or FileChanges(),
        metadata=metadata or {},
    )

    log_path = get_audit_log_path(state_dir)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    with log_path.open("a", encoding="utf-8") as f:
        f.write(json.dumps(entry.to_dict()) + "\n")

    return entry


def read_audit_log(state_dir: Path, last_n: int | None = None) -> list[AuditEntry]:
    """Read entries from the audit log, oldest first."""
    log_path = get_audit_log_path(state_dir)
    if not log_path.exists():
        return []

    entries = []
    with log_path.open("r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if line:
                try:
                    entries.append(AuditEntry.from_dict(json.loads(line)))
                except json.JSONDecodeError:
                    continue  # Skip malformed lines

    if last_n is not None:
        return entries[-last_n:]
    return entries


def format_audit_entry(entry: AuditEntry) -> str:
    """Format an audit entry for human-readable display."""
    lines = [f"[{entry.timestamp}] {entry.operation}"]

    changes = entry.changes
    if changes.created:
        lines.append(f"  Created: {', '.join(changes.created)}")
    if changes.moved:
        lines.append(f"  Moved: {', '.join(changes.moved)}")
    if changes.rewritten:
        lines.append(f"  Rewritten: {len(changes.rewritten)} files, {changes.links_rewritten} links")

    for key, value in entry.metadata.items():
        lines.append(f"  {key}: {value}")

    return "\n".join(lines)
