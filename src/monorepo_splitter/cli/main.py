"""Main CLI interface for the monorepo splitter."""

import logging
from pathlib import Path
from typing import Dict, Optional, Tuple

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.pretty import Pretty

from monorepo_splitter.core.config import SplitConfig
from monorepo_splitter.core.errors import SplitterError
from monorepo_splitter.core.object_cache import ObjectCache
from monorepo_splitter.core.splitter import Splitter

console = Console()


def setup_logging(verbose: bool) -> None:
    """Route library logging through rich."""
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    root_logger.addHandler(
        RichHandler(console=console, rich_tracebacks=True, show_path=verbose)
    )


def parse_repo_options(values: Tuple[str, ...]) -> Dict[str, str]:
    """Parse ``SUBFOLDER=URL`` pairs."""
    repositories = {}
    for value in values:
        subfolder, sep, url = value.partition("=")
        if not sep or not subfolder or not url:
            raise click.BadParameter(
                f"expected SUBFOLDER=URL, got {value!r}", param_hint="--repo"
            )
        repositories[subfolder] = url
    return repositories


def report_error(error: SplitterError) -> None:
    console.print(f"[red]Error: {error}[/red]")
    if error.details is not None:
        console.print(Pretty(error.details, max_length=50))


@click.group()
@click.version_option(package_name="monorepo-splitter")
def main():
    """Monorepo splitter - publish subfolders as standalone repositories."""


@main.command()
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="JSON file with monorepo_url, repositories and cache_dir",
)
@click.option("--monorepo", "monorepo_url", help="URL of the monorepo to split")
@click.option(
    "--repo",
    "repos",
    multiple=True,
    metavar="SUBFOLDER=URL",
    help="Subfolder and its target remote (repeatable)",
)
@click.option(
    "--cache-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory for the scratch repository and object cache",
)
@click.option("--push", is_flag=True, help="Push split branches to their remotes")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
def split(
    config_path: Optional[Path],
    monorepo_url: Optional[str],
    repos: Tuple[str, ...],
    cache_dir: Optional[Path],
    push: bool,
    verbose: bool,
):
    """Split the monorepo history into one branch set per subfolder."""
    setup_logging(verbose)

    repositories = parse_repo_options(repos)
    try:
        if config_path is not None:
            config = SplitConfig.from_file(
                config_path,
                monorepo_url=monorepo_url,
                repositories=repositories,
                cache_dir=cache_dir,
            )
        else:
            config = SplitConfig.build(
                monorepo_url=monorepo_url,
                repositories=repositories,
                cache_dir=cache_dir,
            )
        result = Splitter(config, console=console, push=push).split()
    except SplitterError as e:
        report_error(e)
        raise click.Abort() from e

    console.print(
        f"[green]Created {len(result.branches)} branches, "
        f"{result.objects_written} commits written[/green]"
    )


@main.command("clear-cache")
@click.option(
    "--cache-dir",
    required=True,
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory holding the object cache",
)
def clear_cache(cache_dir: Path):
    """Delete the persisted object cache."""
    cache = ObjectCache.in_directory(cache_dir)
    if not cache.path.exists():
        console.print("[yellow]No cache found[/yellow]")
        return
    cache.path.unlink()
    console.print(f"[green]Removed {cache.path}[/green]")


if __name__ == "__main__":
    main()
