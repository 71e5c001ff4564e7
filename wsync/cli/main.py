"""Main CLI entry point for the wsync command.

This module provides the Typer application that serves as the entry point
for the wsync command-line tool. Global options (repository directory,
verbosity, colors, log directory) go before the subcommand.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import typer

from wsync import __version__
from wsync.w_client.errors import (
    APIAccessError,
    APIUnreachableError,
    InvalidCredentialsError,
)
from wsync.cli.batch_command import BatchCommand
from wsync.cli.errors import CLIError, InitError
from wsync.cli.init_command import InitCommand
from wsync.cli.list_command import ListCommand
from wsync.cli.models import ExitCode, RepoSettings
from wsync.cli.output import OutputHandler
from wsync.cli.prompts import RichPrompts
from wsync.cli.status_command import StatusCommand

app = typer.Typer(
    name="wsync",
    help="""Keep W pages in sync with local Markdown files.

QUICK START:
  wsync init https://w.example.com   # Initialize the current (empty) folder
  wsync add welcome                  # Track a page as welcome.md
  wsync sync                         # Push local edits, pull remote changes
  wsync status                       # Show tracked and edited files""",
    add_completion=False,
    rich_markup_mode=None,
    no_args_is_help=True,
)

logger = logging.getLogger(__name__)


def _configure_logging(verbosity: int, logdir: Optional[str] = None) -> None:
    """Configure logging based on verbosity level.

    Configures only the 'wsync' namespace logger to avoid affecting
    third-party libraries. The root logger is left unchanged.

    Args:
        verbosity: Verbosity level (0=WARNING, 1=INFO, 2=DEBUG)
        logdir: Optional directory for log files (creates timestamped log file)
    """
    if verbosity == 0:
        level = logging.WARNING
    elif verbosity == 1:
        level = logging.INFO
    else:  # verbosity >= 2
        level = logging.DEBUG

    app_logger = logging.getLogger("wsync")
    app_logger.setLevel(level)

    log_format = "%(asctime)s [%(levelname)8s] %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"
    formatter = logging.Formatter(log_format, datefmt=date_format)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    app_logger.addHandler(console_handler)

    if logdir:
        log_path = Path(logdir)
        log_path.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = log_path / f"wsync_{timestamp}.log"

        file_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        file_formatter = logging.Formatter(file_format, datefmt=date_format)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(file_formatter)
        app_logger.addHandler(file_handler)

        logger.info(f"Logging to file: {log_file}")


def _batch(ctx: typer.Context, force: bool = False, interactive: bool = False) -> BatchCommand:
    output: OutputHandler = ctx.obj["output"]
    settings = RepoSettings(repo_path=ctx.obj["repo_path"], force=force, interactive=interactive)
    return BatchCommand(settings, output_handler=output, decisions=RichPrompts(output.console))


@app.callback()
def main_callback(
    ctx: typer.Context,
    directory: Path = typer.Option(
        Path("."),
        "--dir",
        "-d",
        help="Repository directory (defaults to the current directory)",
        metavar="PATH",
    ),
    verbosity: int = typer.Option(
        0,
        "--verbosity",
        "-v",
        help="Verbosity level: 0=summary, 1=info, 2=debug",
    ),
    no_color: bool = typer.Option(
        False,
        "--no-color",
        help="Disable colored output",
    ),
    logdir: Optional[str] = typer.Option(
        None,
        "--logdir",
        help="Directory for log files (creates timestamped log file)",
    ),
) -> None:
    """Keep W pages in sync with local Markdown files."""
    _configure_logging(verbosity, logdir)
    ctx.obj = {
        "repo_path": directory,
        "output": OutputHandler(verbosity=verbosity, no_color=no_color),
    }


@app.command()
def init(
    ctx: typer.Context,
    url: Optional[str] = typer.Argument(None, help="URL where W is installed"),
) -> None:
    """Initialize an empty folder as a wsync repository."""
    output: OutputHandler = ctx.obj["output"]
    settings = RepoSettings(repo_path=ctx.obj["repo_path"])

    try:
        InitCommand(settings, decisions=RichPrompts(output.console)).run(url)

        output.success("Repository initialized")
        output.info(f"  Database: {settings.database_path}")
        output.info("")
        output.info("Next steps:")
        output.info("  1. Run 'wsync list' or 'wsync add <id>' to track pages")
        output.info("  2. Run 'wsync sync' to keep them up to date")

        raise typer.Exit(ExitCode.SUCCESS)

    except InitError as e:
        logger.error(f"Initialization failed: {e}")
        output.error(f"Initialization failed: {e}")
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    except InvalidCredentialsError as e:
        logger.error(f"Authentication failed: {e}")
        output.error(f"Authentication failed: {e}")
        raise typer.Exit(ExitCode.AUTH_ERROR)

    except (APIUnreachableError, APIAccessError) as e:
        logger.error(f"Could not contact W: {e}")
        output.error(f"Could not contact W: {e}")
        if isinstance(e, APIAccessError):
            output.info("An upgrade of W could help")
        raise typer.Exit(ExitCode.NETWORK_ERROR)

    except CLIError as e:
        logger.error(f"Initialization failed: {e}")
        output.error(f"Initialization failed: {e}")
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    except typer.Exit:
        raise

    except Exception as e:
        logger.exception("Unexpected error during initialization")
        output.error(f"Unexpected error: {e}")
        raise typer.Exit(ExitCode.GENERAL_ERROR)


@app.command()
def add(
    ctx: typer.Context,
    ids: List[str] = typer.Argument(..., help="Ids of the pages to track"),
) -> None:
    """Track pages and create their local files."""
    raise typer.Exit(_batch(ctx).run_add(ids))


@app.command()
def remove(
    ctx: typer.Context,
    ids: List[str] = typer.Argument(..., help="Ids of the pages to untrack"),
) -> None:
    """Untrack pages; files without local edits are deleted."""
    raise typer.Exit(_batch(ctx).run_remove(ids))


@app.command()
def push(
    ctx: typer.Context,
    ids: Optional[List[str]] = typer.Argument(None, help="Page ids (defaults to all tracked pages)"),
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Overwrite W's copy even if it changed since last sync",
    ),
) -> None:
    """Send local edits to W."""
    raise typer.Exit(_batch(ctx, force=force).run_push(ids or []))


@app.command()
def pull(
    ctx: typer.Context,
    ids: Optional[List[str]] = typer.Argument(None, help="Page ids (defaults to all tracked pages)"),
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Overwrite local edits",
    ),
) -> None:
    """Fetch remote changes from W."""
    raise typer.Exit(_batch(ctx, force=force).run_pull(ids or []))


@app.command()
def sync(
    ctx: typer.Context,
    ids: Optional[List[str]] = typer.Argument(None, help="Page ids (defaults to all tracked pages)"),
    interactive: bool = typer.Option(
        False,
        "--interactive",
        "-i",
        help="Ask which version to keep when a page is in conflict",
    ),
) -> None:
    """Push local edits then pull remote changes."""
    raise typer.Exit(_batch(ctx, interactive=interactive).run_sync(ids or []))


@app.command()
def status(ctx: typer.Context) -> None:
    """Show tracked, locally edited and untracked page files."""
    settings = RepoSettings(repo_path=ctx.obj["repo_path"])
    raise typer.Exit(StatusCommand(settings, output_handler=ctx.obj["output"]).run())


@app.command("list")
def list_pages(ctx: typer.Context) -> None:
    """Choose the tracked pages among all pages of W."""
    output: OutputHandler = ctx.obj["output"]
    settings = RepoSettings(repo_path=ctx.obj["repo_path"])
    command = ListCommand(settings, output_handler=output, decisions=RichPrompts(output.console))
    raise typer.Exit(command.run())


@app.command()
def version() -> None:
    """Show version and exit."""
    typer.echo(f"wsync version {__version__}")


def main() -> None:
    """Main entry point for the CLI application.

    This function is called when the module is executed directly or
    when the console script is invoked.
    """
    app()


# Allow running as: python -m wsync.cli.main
if __name__ == "__main__":
    main()
