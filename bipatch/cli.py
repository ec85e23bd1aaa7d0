from __future__ import annotations

import os
import sys
from pathlib import Path

import click

from bipatch.cmd_base import USAGE_STATUS, Base
from bipatch.command import Command

CONTEXT_SETTINGS = {
    "help_option_names": ["-h", "--help"],
    "max_content_width": 120,
}


def run_cmd(cmd_name: str, *args: str) -> None:
    argv: list[str] = ["bipatch", cmd_name, *args]

    try:
        cmd: Base = Command.execute(
            Path.cwd(),
            os.environ.copy(),
            argv,
            sys.stdin,
            sys.stdout,
            sys.stderr,
        )
    except Command.Unknown as e:
        click.echo(f"error: {e}", err=True)
        sys.exit(USAGE_STATUS)

    sys.exit(cmd.status)


@click.group(context_settings=CONTEXT_SETTINGS, invoke_without_command=True)
@click.pass_context
def cli(ctx: click.Context) -> None:
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@cli.command(name="diff")
@click.argument("older", type=click.Path(dir_okay=False, path_type=Path))
@click.argument("newer", type=click.Path(dir_okay=False, path_type=Path))
@click.argument("patch", type=click.Path(dir_okay=False, path_type=Path))
def diff_cmd(older: Path, newer: Path, patch: Path) -> None:
    """Write a compressed patch that turns OLDER into NEWER."""
    run_cmd("diff", str(older), str(newer), str(patch))


@cli.command(name="patch")
@click.argument("patch", type=click.Path(dir_okay=False, path_type=Path))
@click.argument("older", type=click.Path(dir_okay=False, path_type=Path))
@click.argument("output", type=click.Path(dir_okay=False, path_type=Path))
def patch_cmd(patch: Path, older: Path, output: Path) -> None:
    """Apply PATCH to OLDER, writing the result to OUTPUT."""
    run_cmd("patch", str(patch), str(older), str(output))


@cli.command()
@click.argument("older", type=click.Path(dir_okay=False, path_type=Path))
@click.argument("newer", type=click.Path(dir_okay=False, path_type=Path))
def cycle(older: Path, newer: Path) -> None:
    """Diff OLDER against NEWER, apply the patch and verify the result."""
    run_cmd("cycle", str(older), str(newer))


@cli.command()
@click.argument("patch", type=click.Path(dir_okay=False, path_type=Path))
def info(patch: Path) -> None:
    """Summarize the records of PATCH."""
    run_cmd("info", str(patch))


if __name__ == "__main__":
    cli()
