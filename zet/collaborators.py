"""External process wrappers: text editor and system clipboard.

The core only hands these a path or a formatted string.
"""

from __future__ import annotations

import platform
import subprocess
from pathlib import Path

from .config import ZetConfig
from .errors import CollaboratorFailed

# Line the cursor lands on: just below the header of a fresh zettel
EDITOR_START_LINE = 6


def editor_command(editor: str, path: Path, insert_mode: bool = False) -> list[str]:
    if editor in ("vim", "nvim") and insert_mode:
        return [editor, f"+{EDITOR_START_LINE}", "-c", "startinsert", str(path)]
    return [editor, f"+{EDITOR_START_LINE}", str(path)]


def open_in_editor(config: ZetConfig, path: Path, insert_mode: bool = False) -> None:
    """Run the configured editor on ``path`` and wait for it to exit."""
    if not config.editor:
        raise CollaboratorFailed(
            "No editor configured (set EDITOR or 'editor' in the config file)",
            {"operation": "edit", "path": str(path)},
        )
    command = editor_command(config.editor, path, insert_mode)
    try:
        subprocess.run(command, check=True)
    except (OSError, subprocess.CalledProcessError) as e:
        raise CollaboratorFailed(
            f"Unable to run editor ({config.editor}) command: {e}",
            {"operation": "edit", "path": str(path), "command": command},
        ) from e


def clipboard_command(system: str | None = None) -> list[str]:
    system = system or platform.system()
    if system == "Linux":
        return ["xclip", "-selection", "clipboard"]
    if system == "Darwin":
        return ["pbcopy"]
    raise CollaboratorFailed(
        "Adding stuff to clipboard is not implemented on your platform",
        {"operation": "clipboard", "platform": system},
    )


def put_on_clipboard(text: str) -> None:
    command = clipboard_command()
    try:
        subprocess.run(command, input=text, text=True, check=True)
    except (OSError, subprocess.CalledProcessError) as e:
        raise CollaboratorFailed(
            f"Unable to add link to clipboard: {e}",
            {"operation": "clipboard", "command": command},
        ) from e
