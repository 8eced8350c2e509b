"""CLI interface for datasync."""

import logging
from pathlib import Path
from typing import Any, Callable, Optional

import click

from .cli_progress import SyncProgressDisplay
from .config import (
    SyncSettings,
    default_config_path,
    load_config_file,
    merge_settings,
    save_config_file,
)
from .exceptions import ConfigError, RemoteResolutionError
from .output import OutputFormatter
from .remote import RemoteResolver, ResolvedPaths
from .sync import SyncDirection, SyncEngine, SyncRequest, SyncSummary

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_CONSOLE_HANDLER_NAME = "datasync-console"
_FILE_HANDLER_NAME = "datasync-file"


def configure_logging(verbose: bool) -> None:
    """Attach the console log handler to the datasync logger.

    Decisions are logged at INFO so a log file always receives them; the
    console only shows warnings unless verbose output is requested.

    Args:
        verbose: Show debug output on the console
    """
    package_logger = logging.getLogger("datasync")
    package_logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    for handler in list(package_logger.handlers):
        if handler.get_name() in (_CONSOLE_HANDLER_NAME, _FILE_HANDLER_NAME):
            package_logger.removeHandler(handler)
            handler.close()

    console_handler = logging.StreamHandler()
    console_handler.set_name(_CONSOLE_HANDLER_NAME)
    console_handler.setLevel(logging.DEBUG if verbose else logging.WARNING)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%H:%M:%S"))
    package_logger.addHandler(console_handler)


def add_log_file(path: Path) -> None:
    """Append every log event of the run to a file.

    Args:
        path: Log file (created if missing, never truncated)

    Raises:
        ConfigError: If the file cannot be opened
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, mode="a", encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot open log file {path}: {e}") from e
    file_handler.set_name(_FILE_HANDLER_NAME)
    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logging.getLogger("datasync").addHandler(file_handler)


def sync_options(func: Callable) -> Callable:
    """Options shared by the push, pull and sync commands."""
    options = [
        click.option(
            "--dry-run", is_flag=True, help="Show what would be synced without syncing"
        ),
        click.option(
            "--clean-remote",
            is_flag=True,
            help="Erase the remote data folder before pushing",
        ),
        click.option(
            "--clean-local",
            is_flag=True,
            help="Erase the local data folder before pulling",
        ),
        click.option(
            "--folder", "-f", "folder_name", help="Data folder name (default: data)"
        ),
        click.option(
            "--exclude",
            "-e",
            "exclusions",
            multiple=True,
            help="Glob pattern to exclude (repeatable, replaces configured list)",
        ),
        click.option(
            "--max-retries",
            type=click.IntRange(min=1),
            default=None,
            help="Attempts per file before giving up (default: 3)",
        ),
        click.option(
            "--log-file",
            type=click.Path(dir_okay=False, path_type=Path),
            default=None,
            help="Append log events to this file",
        ),
        click.option("--no-progress", is_flag=True, help="Disable progress bars"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group()
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.option("--json", is_flag=True, help="Output the summary in JSON format")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose/debug logging output",
)
@click.option(
    "--repo",
    "-C",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("."),
    help="Path inside the git working copy (default: current directory)",
)
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file (default: .datasync.json in the repository root)",
)
@click.version_option()
@click.pass_context
def main(
    ctx: Any,
    quiet: bool,
    json: bool,
    verbose: bool,
    repo: Path,
    config_path: Optional[Path],
) -> None:
    """datasync - Mirror a data folder between a git repository and its origin."""
    ctx.ensure_object(dict)
    ctx.obj["out"] = OutputFormatter(json_output=json, quiet=quiet)
    ctx.obj["verbose"] = verbose
    ctx.obj["repo"] = repo
    ctx.obj["config_path"] = config_path

    configure_logging(verbose)


def _load_settings(
    ctx: Any, resolver: RemoteResolver, cli_overrides: dict[str, Any]
) -> tuple[SyncSettings, Path]:
    """Merge defaults, config file and command line for the current repo."""
    repository = resolver.find_repository_root(ctx.obj["repo"])
    config_path = ctx.obj["config_path"] or default_config_path(repository)
    file_overrides = load_config_file(config_path)
    return merge_settings(file_overrides, cli_overrides), repository


def _run_sync(
    ctx: Any,
    direction: Optional[SyncDirection],
    dry_run: bool,
    clean_remote: bool,
    clean_local: bool,
    folder_name: Optional[str],
    exclusions: tuple[str, ...],
    max_retries: Optional[int],
    log_file: Optional[Path],
    no_progress: bool,
) -> None:
    out: OutputFormatter = ctx.obj["out"]
    resolver = RemoteResolver()

    # Flags can only switch features on; absent flags keep file/default values
    cli_overrides = {
        "direction": direction,
        "dry_run": dry_run or None,
        "clean_remote": clean_remote or None,
        "clean_local": clean_local or None,
        "folder_name": folder_name,
        "exclusions": list(exclusions) if exclusions else None,
        "max_retries": max_retries,
        "log_file": log_file,
    }

    try:
        settings, repository = _load_settings(ctx, resolver, cli_overrides)
        paths = resolver.resolve(repository, settings.folder_name)
        if settings.log_file is not None:
            add_log_file(settings.log_file)
    except (ConfigError, RemoteResolutionError) as e:
        out.error(str(e))
        ctx.exit(1)
        return  # Unreachable, but helps type checker

    request = SyncRequest.from_settings(settings, paths.local_data, paths.remote_data)
    logger.info(f"Repository {paths.repository}, origin {paths.origin_url}")

    show_progress = not (
        no_progress or request.dry_run or out.quiet or out.json_output
    )

    try:
        summary: SyncSummary
        if show_progress:
            with SyncProgressDisplay(console=out.console) as display:
                engine = SyncEngine(output=out, progress_callback=display.callback)
                summary = engine.run(request)
        else:
            summary = SyncEngine(output=out).run(request)
    except KeyboardInterrupt:
        out.warning("\nSync cancelled by user")
        ctx.exit(130)  # Standard exit code for SIGINT
        return

    if not summary.success:
        ctx.exit(1)


@main.command()
@sync_options
@click.pass_context
def push(ctx: Any, **options: Any) -> None:
    """Copy the local data folder to the remote location.

    Examples:
        datasync push                       # Mirror ./data to the origin
        datasync push --dry-run             # Preview what would be copied
        datasync push --clean-remote        # Erase the remote folder first
        datasync push -e "*.tmp" -e "*.log" # Skip temporary files
    """
    _run_sync(ctx, SyncDirection.PUSH, **options)


@main.command()
@sync_options
@click.pass_context
def pull(ctx: Any, **options: Any) -> None:
    """Copy the remote data folder into the local working copy.

    Examples:
        datasync pull                       # Fetch new and changed files
        datasync pull --clean-local         # Erase the local folder first
        datasync pull -f models             # Sync ./models instead of ./data
    """
    _run_sync(ctx, SyncDirection.PULL, **options)


@main.command()
@click.option(
    "--direction",
    "-d",
    type=click.Choice([d.value for d in SyncDirection], case_sensitive=False),
    default=None,
    help="Override the configured direction",
)
@sync_options
@click.pass_context
def sync(ctx: Any, direction: Optional[str], **options: Any) -> None:
    """Sync in the direction set in the config file (default: push)."""
    parsed = SyncDirection.from_string(direction) if direction else None
    _run_sync(ctx, parsed, **options)


@main.command("show-config")
@click.option("--folder", "-f", "folder_name", help="Data folder name")
@click.pass_context
def show_config(ctx: Any, folder_name: Optional[str]) -> None:
    """Show merged settings and the resolved local and remote folders."""
    out: OutputFormatter = ctx.obj["out"]
    resolver = RemoteResolver()

    try:
        settings, repository = _load_settings(
            ctx, resolver, {"folder_name": folder_name}
        )
    except (ConfigError, RemoteResolutionError) as e:
        out.error(str(e))
        ctx.exit(1)
        return

    rows = [(key, str(value)) for key, value in settings.to_dict().items()]
    rows.insert(0, ("repository", str(repository)))

    paths: Optional[ResolvedPaths] = None
    try:
        paths = resolver.resolve(repository, settings.folder_name)
    except RemoteResolutionError as e:
        out.error(str(e))

    if paths is not None:
        rows.extend(
            [
                ("origin", paths.origin_url),
                ("local", str(paths.local_data)),
                ("remote", str(paths.remote_data)),
            ]
        )

    out.output_table("datasync settings", rows)
    if paths is None:
        ctx.exit(1)


@main.command()
@click.option("--force", is_flag=True, help="Overwrite an existing config file")
@click.pass_context
def init(ctx: Any, force: bool) -> None:
    """Write a default config file into the repository root."""
    out: OutputFormatter = ctx.obj["out"]
    resolver = RemoteResolver()

    try:
        repository = resolver.find_repository_root(ctx.obj["repo"])
        config_path = ctx.obj["config_path"] or default_config_path(repository)
        if config_path.exists() and not force:
            out.error(f"Config file already exists: {config_path}")
            out.info("Use --force to overwrite it")
            ctx.exit(1)
            return
        save_config_file(SyncSettings(), config_path)
    except (ConfigError, RemoteResolutionError) as e:
        out.error(str(e))
        ctx.exit(1)
        return

    out.success(f"Wrote {config_path}")


if __name__ == "__main__":
    main()
