"""mcprobe CLI entrypoint."""

from __future__ import annotations

import click

from mcprobe import __version__


@click.group()
@click.version_option(version=__version__, prog_name="mcprobe")
def main() -> None:
    """mcprobe: interactive probe for MCP tool servers."""


# Register subcommands
from mcprobe.cli_commands import register_commands  # noqa: E402

register_commands(main)

if __name__ == "__main__":
    main()
