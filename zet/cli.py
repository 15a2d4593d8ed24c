"""CLI entrypoint for zet."""

import logging
import sys
from pathlib import Path

import click

from . import __version__
from .config import load_config
from .errors import ZetError


class ZetGroup(click.Group):
    """Command group where an unknown first word is a prefix to create under.

    ``zet`` alone creates under the default prefix and ``zet proj`` is
    shorthand for ``zet create proj``.
    """

    def resolve_command(self, ctx: click.Context, args: list[str]):
        name = args[0] if args else None
        if name and not name.startswith("-") and self.get_command(ctx, name) is None:
            return "create", self.get_command(ctx, "create"), args
        return super().resolve_command(ctx, args)

    def invoke(self, ctx: click.Context):
        try:
            return super().invoke(ctx)
        except ZetError as e:
            raise click.ClickException(e.message) from e


@click.group(cls=ZetGroup, invoke_without_command=True)
@click.version_option(__version__, prog_name="zet")
@click.option(
    "--dir",
    "-d",
    "zettel_dir",
    type=click.Path(file_okay=False, dir_okay=True, path_type=Path),
    default=None,
    help="Zettel directory (defaults to ~/zettel2, or ./zettel with ZET_DEBUG=1)",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="TOML config file (defaults to ~/.config/zet/config.toml if present)",
)
@click.option("--verbose", is_flag=True, help="Log planned file operations")
@click.pass_context
def cli(ctx: click.Context, zettel_dir: Path | None, config_path: Path | None, verbose: bool) -> None:
    """zet - Zettelkasten with hierarchical, branchable identifiers.

    Run without a command to create a zettel under the default prefix, or
    with an unknown word to create under that prefix.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_config(config_path)
    except (OSError, ValueError) as e:
        raise click.ClickException(f"Unable to load config: {e}") from e
    if zettel_dir is not None:
        config = config.with_dir(zettel_dir)

    try:
        config.zettel_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise click.ClickException(f"Unable to ensure zettel dir '{config.zettel_dir}': {e}") from e

    ctx.ensure_object(dict)
    ctx.obj["config"] = config

    if ctx.invoked_subcommand is None:
        from .commands.create import run_create

        sys.exit(run_create(config))


@cli.command()
@click.argument("prefix", required=False)
@click.option("--no-edit", is_flag=True, help="Print the new path instead of opening the editor")
@click.pass_context
def create(ctx: click.Context, prefix: str | None, no_edit: bool) -> None:
    """Create the next zettel under PREFIX.

    Examples:

        zet create tmp

        zet proj --no-edit
    """
    from .commands.create import run_create

    sys.exit(run_create(ctx.obj["config"], prefix, edit=not no_edit))


@cli.command()
@click.argument("parent")
@click.option("--link", "-l", is_flag=True, help="Append the branch link to PARENT and print the new path")
@click.pass_context
def branch(ctx: click.Context, parent: str, link: bool) -> None:
    """Start a new branch off PARENT (an id or a .md path)."""
    from .commands.create import run_branch

    sys.exit(run_branch(ctx.obj["config"], parent, link=link))


@cli.command()
@click.argument("source")
@click.argument("target")
@click.pass_context
def link(ctx: click.Context, source: str, target: str) -> None:
    """Append a link to TARGET at the end of SOURCE.

    `zet link path FILE` copies a link to FILE's zettel to the clipboard instead.
    """
    from .commands.create import run_link, run_link_path

    if source == "path":
        sys.exit(run_link_path(ctx.obj["config"], target))
    sys.exit(run_link(ctx.obj["config"], source, target))


@cli.command()
@click.argument("identifier")
@click.pass_context
def resolve(ctx: click.Context, identifier: str) -> None:
    """Print the path IDENTIFIER (id, branch or prefix) resolves to."""
    from .commands.resolve import run_resolve

    sys.exit(run_resolve(ctx.obj["config"], identifier))


@cli.command("next")
@click.argument("value")
@click.option("--path", "-p", "from_path", is_flag=True, help="VALUE is a file path; print a path")
@click.pass_context
def next_(ctx: click.Context, value: str, from_path: bool) -> None:
    """Print the zettel after VALUE in its sequence."""
    from .commands.resolve import run_step

    sys.exit(run_step(ctx.obj["config"], "next", value, from_path=from_path))


@cli.command()
@click.argument("value")
@click.option("--path", "-p", "from_path", is_flag=True, help="VALUE is a file path; print a path")
@click.pass_context
def previous(ctx: click.Context, value: str, from_path: bool) -> None:
    """Print the zettel before VALUE, or its parent at the start of a branch."""
    from .commands.resolve import run_step

    sys.exit(run_step(ctx.obj["config"], "previous", value, from_path=from_path))


@cli.command("open")
@click.argument("identifier")
@click.pass_context
def open_(ctx: click.Context, identifier: str) -> None:
    """Open IDENTIFIER (id, branch or prefix) in the editor."""
    from .commands.resolve import run_open

    sys.exit(run_open(ctx.obj["config"], identifier))


@cli.command()
@click.argument("term")
@click.pass_context
def grep(ctx: click.Context, term: str) -> None:
    """Search all zettels for lines matching the regex TERM."""
    from .commands.grep import run_grep

    sys.exit(run_grep(ctx.obj["config"], term))


@cli.command()
@click.argument("source")
@click.argument("target")
@click.option("--dry-run", is_flag=True, help="Show planned file operations without writing")
@click.pass_context
def rename(ctx: click.Context, source: str, target: str, dry_run: bool) -> None:
    """Rename SOURCE to TARGET, with its descendants and every link to them.

    The rename is not atomic. If it fails partway, the zettels already
    renamed are listed and left in place.
    """
    from .commands.rename import run_rename

    sys.exit(run_rename(ctx.obj["config"], source, target, dry_run=dry_run))


@cli.command()
@click.option("--json", "output_json", is_flag=True, help="Output results as JSON")
@click.option(
    "--fail-on",
    type=click.Choice(["error", "warning"]),
    default="error",
    help="Exit with error if this level or higher found",
)
@click.pass_context
def check(ctx: click.Context, output_json: bool, fail_on: str) -> None:
    """Check headers and links for consistency."""
    from .commands.check import run_check

    sys.exit(run_check(ctx.obj["config"], output_json=output_json, fail_on=fail_on))


@cli.command("log")
@click.option("--last", "-n", "last_n", type=int, default=20, help="Number of entries to show")
@click.pass_context
def log_(ctx: click.Context, last_n: int) -> None:
    """Show recent entries of the audit log."""
    from .audit_log import format_audit_entry, read_audit_log

    entries = read_audit_log(ctx.obj["config"].state_dir, last_n=last_n)
    if not entries:
        from rich.console import Console

        Console(stderr=True).print("No audit log entries.", style="dim")
        return
    for entry in entries:
        print(format_audit_entry(entry))


@cli.command()
def version() -> None:
    """Print the version."""
    print(f"zet {__version__}")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
