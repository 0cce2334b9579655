"""ccclog command line entry point."""

from __future__ import annotations

import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from ccclog import __version__
from ccclog.cli.commands.generate import GenerateOptions, run_generate


def _setup_logging(verbose: bool, console: Console) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _split_types(
    _ctx: click.Context, _param: click.Parameter, value: str | None
) -> list[str] | None:
    if value is None:
        return None
    return [t.strip() for t in value.split(",") if t.strip()]


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.argument("path", required=False, default=".", type=click.Path(file_okay=False))
@click.argument("revision_spec", required=False)
@click.option(
    "--reverse", "-r", is_flag=True, help="List commits oldest first within each section."
)
@click.option(
    "--root-indent-level",
    "-i",
    type=click.IntRange(1, 6),
    default=None,
    help="Heading level of release headings.  [default: 2]",
)
@click.option(
    "--ignore-summary",
    default=None,
    metavar="REGEX",
    help="Drop commits whose description matches.",
)
@click.option(
    "--ignore-types",
    default=None,
    callback=_split_types,
    metavar="TYPES",
    help="Comma separated commit types to drop, e.g. chore,ci.",
)
@click.option("--tag-prefix", default=None, help="Only use tags with this prefix, e.g. v or web-.")
@click.option("--enable-email-link", is_flag=True, help="Link author names to their email address.")
@click.option("--include-merges", is_flag=True, help="Include merge commits.")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging.")
@click.version_option(version=__version__, prog_name="ccclog")
def cli(
    path: str,
    revision_spec: str | None,
    reverse: bool,
    root_indent_level: int | None,
    ignore_summary: str | None,
    ignore_types: list[str] | None,
    tag_prefix: str | None,
    enable_email_link: bool,
    include_merges: bool,
    verbose: bool,
) -> None:
    """Generate a changelog from the conventional commits of the git repository at PATH.

    REVISION_SPEC is an optional two-dot range (e.g. v1.0.0..v1.1.0). By
    default the range between the two newest release tags is used.
    """
    console = Console()
    err_console = Console(stderr=True)
    _setup_logging(verbose, err_console)

    options = GenerateOptions(
        reverse=reverse,
        root_indent_level=root_indent_level,
        ignore_summary=ignore_summary,
        ignore_types=ignore_types,
        tag_prefix=tag_prefix,
        enable_email_link=enable_email_link,
        include_merges=include_merges,
    )
    run_generate(path, revision_spec, options, console, err_console)


if __name__ == "__main__":
    cli()
