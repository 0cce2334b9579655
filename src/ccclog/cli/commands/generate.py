"""Implementation of the changelog generation command.

Loads configuration, applies command line overrides, and prints the
changelog of the selected range to stdout.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import ValidationError
from rich.markup import escape

from ccclog.config import load_config
from ccclog.config.models import CcclogConfig
from ccclog.core.changelog import generate_changelog
from ccclog.exceptions import CcclogError
from ccclog.vcs import GitRepository

if TYPE_CHECKING:
    from rich.console import Console

# Exit status for invalid input, as in sysexits.h
EXIT_USAGE = 64


@dataclass(frozen=True)
class GenerateOptions:
    """Command line values. None means "use the configured value"."""

    reverse: bool = False
    root_indent_level: int | None = None
    ignore_summary: str | None = None
    ignore_types: list[str] | None = None
    tag_prefix: str | None = None
    enable_email_link: bool = False
    include_merges: bool = False


def apply_options(config: CcclogConfig, options: GenerateOptions) -> CcclogConfig:
    """Merge command line options over the loaded configuration.

    Raises:
        pydantic.ValidationError: If an override is invalid
    """
    data = config.model_dump()
    changelog = data["changelog"]
    git = data["git"]

    changelog["reverse"] = options.reverse or changelog["reverse"]
    changelog["enable_email_link"] = options.enable_email_link or changelog["enable_email_link"]
    if options.root_indent_level is not None:
        changelog["root_indent_level"] = options.root_indent_level
    if options.ignore_summary is not None:
        changelog["ignore_summary"] = options.ignore_summary
    if options.ignore_types is not None:
        changelog["ignore_types"] = options.ignore_types

    git["include_merges"] = options.include_merges or git["include_merges"]
    if options.tag_prefix is not None:
        git["tag_prefix"] = options.tag_prefix

    return CcclogConfig.model_validate(data)


def run_generate(
    path: str | None,
    revision_spec: str | None,
    options: GenerateOptions,
    console: Console,
    err_console: Console,
) -> None:
    """Run the generate command.

    Args:
        path: Optional path to the repository
        revision_spec: Optional two-dot revision range
        options: Command line overrides
        console: Console for standard output
        err_console: Console for error output
    """
    project_path = Path(path) if path else Path.cwd()

    # Open the repository
    try:
        repo = GitRepository(project_path)
    except CcclogError as e:
        err_console.print(f"[red]Error:[/] {escape(str(e))}")
        raise SystemExit(EXIT_USAGE) from e

    # Load configuration
    try:
        config = apply_options(load_config(repo.path), options)
    except ValidationError as e:
        err_console.print(f"[red]Invalid option:[/] {escape(str(e))}")
        raise SystemExit(EXIT_USAGE) from e
    except CcclogError as e:
        err_console.print(f"[red]Error loading config:[/] {escape(str(e))}")
        raise SystemExit(EXIT_USAGE) from e

    # Generate changelog
    try:
        markdown = generate_changelog(repo, config, revision_spec=revision_spec)
    except CcclogError as e:
        err_console.print(f"[red]Error:[/] {escape(str(e))}")
        raise SystemExit(EXIT_USAGE) from e

    console.print(markdown, markup=False, highlight=False, emoji=False, soft_wrap=True, end="")
