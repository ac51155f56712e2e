"""Main CLI entry point for the gm-vault command.

This module provides the Typer application for inspecting and maintaining a
GM Vault outside the tabletop: validating and migrating vault JSON files,
printing the GM or player tree, fetching page content into the cache, and
clearing the cache.
"""

import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, List, Optional

import typer

from src.cli.errors import VaultFileError
from src.cli.models import ExitCode, VaultSettings
from src.cli.output import OutputHandler
from src.cli.settings import SettingsLoader
from src.content_cache.cache_service import CacheService
from src.notion_client.api_wrapper import NotionProxyClient
from src.notion_client.auth import ProxySettings
from src.notion_client.content_fetcher import ContentFetcher
from src.notion_client.errors import (
    InvalidTokenError,
    ProxyAccessError,
    ProxyUnreachableError,
)
from src.storage.key_value_store import FileStore
from src.vault.config_parser import ConfigParser
from src.vault.errors import VaultError
from src.vault.models import Page
from src.vault.tree_view import build_player_view

app = typer.Typer(
    name="gm-vault",
    help="""Inspect and maintain GM Vault configurations and the page cache.

QUICK START:
  gm-vault validate vault.json             # Report every structural problem
  gm-vault migrate vault.json -o new.json  # Upgrade a legacy vault file
  gm-vault show vault.json --players       # Print what players can see
  gm-vault fetch <notion_url>              # Fetch page blocks into the cache
  gm-vault cache-clear                     # Drop cached blocks and page info""",
    add_completion=False,
    rich_markup_mode=None,
    no_args_is_help=True,
)

logger = logging.getLogger(__name__)


LOG_LEVELS = (logging.WARNING, logging.INFO, logging.DEBUG)
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _configure_logging(verbosity: int, logdir: Optional[str] = None) -> None:
    """Attach stderr (and optionally file) handlers to the 'src' logger.

    Only the project's own namespace is touched; requests/urllib3 keep
    their defaults.

    Args:
        verbosity: 0 for warnings, 1 for info, 2 or more for debug
        logdir: Directory for a gm-vault_<timestamp>.log file, if wanted
    """
    level = LOG_LEVELS[min(max(verbosity, 0), len(LOG_LEVELS) - 1)]

    app_logger = logging.getLogger("src")
    app_logger.setLevel(level)

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    handlers[0].setFormatter(
        logging.Formatter("%(asctime)s [%(levelname)8s] %(message)s", datefmt=DATE_FORMAT)
    )

    log_file = None
    if logdir:
        Path(logdir).mkdir(parents=True, exist_ok=True)
        log_file = Path(logdir) / f"gm-vault_{datetime.now():%Y%m%d_%H%M%S}.log"
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(name)s %(levelname)s: %(message)s", datefmt=DATE_FORMAT)
        )
        handlers.append(file_handler)

    for handler in handlers:
        handler.setLevel(level)
        app_logger.addHandler(handler)

    if log_file:
        logger.info(f"Writing log to {log_file}")


def _load_vault_file(file_path: str) -> Any:
    """Read and decode a vault JSON file.

    Raises:
        VaultFileError: If the file cannot be read or is not JSON
    """
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            return json.load(f)
    except FileNotFoundError:
        raise VaultFileError(file_path, "file not found")
    except json.JSONDecodeError as e:
        raise VaultFileError(file_path, f"invalid JSON ({e})")
    except OSError as e:
        raise VaultFileError(file_path, str(e))


def _build_cache(settings: VaultSettings) -> CacheService:
    return CacheService(
        FileStore(settings.cache_dir),
        html_cache_size=settings.html_cache_size,
        max_age_days=settings.cache_max_age_days,
        max_entries=settings.cache_max_entries,
    )


class _State:
    """Global options shared by all commands."""

    def __init__(self, verbosity: int, no_color: bool, settings_path: str):
        self.output = OutputHandler(verbosity=verbosity, no_color=no_color)
        self.settings_path = settings_path

    def settings(self) -> VaultSettings:
        return SettingsLoader.load(self.settings_path)


@app.callback()
def main_callback(
    ctx: typer.Context,
    verbosity: int = typer.Option(
        0,
        "--verbosity",
        "-v",
        help="Verbosity level: 0=summary, 1=info, 2=debug",
    ),
    logdir: Optional[str] = typer.Option(
        None,
        "--logdir",
        help="Directory for log files (creates timestamped log file)",
    ),
    no_color: bool = typer.Option(
        False,
        "--no-color",
        help="Disable colored output",
    ),
    settings_path: str = typer.Option(
        SettingsLoader.DEFAULT_SETTINGS_PATH,
        "--settings",
        help="Path to the settings YAML file",
        metavar="FILE",
    ),
) -> None:
    """Inspect and maintain GM Vault configurations and the page cache."""
    _configure_logging(verbosity, logdir)
    ctx.obj = _State(verbosity, no_color, settings_path)


@app.command()
def validate(
    ctx: typer.Context,
    file: str = typer.Argument(..., help="Vault JSON file to check"),
) -> None:
    """Report every structural problem in a vault JSON file."""
    output: OutputHandler = ctx.obj.output

    try:
        data = _load_vault_file(file)
    except VaultFileError as e:
        output.error(str(e))
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    result = ConfigParser().validate(data)
    output.print_validation(result.errors)
    if not result.valid:
        raise typer.Exit(ExitCode.INVALID_CONFIG)


@app.command()
def migrate(
    ctx: typer.Context,
    file: str = typer.Argument(..., help="Vault JSON file to migrate"),
    output_file: Optional[str] = typer.Option(
        None,
        "--output",
        "-o",
        help="Write the migrated vault here instead of stdout",
        metavar="FILE",
    ),
) -> None:
    """Upgrade a legacy vault JSON file to the current shape."""
    output: OutputHandler = ctx.obj.output

    try:
        data = _load_vault_file(file)
    except VaultFileError as e:
        output.error(str(e))
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    migrated = ConfigParser().migrate(data)
    text = json.dumps(migrated, indent=2, ensure_ascii=False)

    if output_file is None:
        # Plain stdout: the console would wrap long lines inside the JSON
        typer.echo(text)
        return

    try:
        Path(output_file).write_text(text + "\n", encoding="utf-8")
    except OSError as e:
        output.error(f"Cannot write {output_file}: {e}")
        raise typer.Exit(ExitCode.GENERAL_ERROR)
    output.success(f"Migrated vault written to {output_file}")


@app.command()
def show(
    ctx: typer.Context,
    file: str = typer.Argument(..., help="Vault JSON file to display"),
    players: bool = typer.Option(
        False,
        "--players",
        help="Show only what players can see",
    ),
) -> None:
    """Print the vault tree as the GM or as players see it."""
    output: OutputHandler = ctx.obj.output

    try:
        data = _load_vault_file(file)
    except VaultFileError as e:
        output.error(str(e))
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    result = ConfigParser().load(data)
    for error in result.errors:
        output.warning(error)
    output.debug(f"{sum(1 for _ in result.config.iter_pages())} page(s) loaded from {file}")

    config = build_player_view(result.config) if players else result.config
    output.print_tree(config, title="Player view" if players else "GM view")


@app.command()
def fetch(
    ctx: typer.Context,
    url: str = typer.Argument(..., help="Notion page URL"),
    force: bool = typer.Option(
        False,
        "--force",
        help="Re-download even if the cached copy is fresh",
    ),
) -> None:
    """Fetch a Notion page's blocks into the cache."""
    state: _State = ctx.obj
    output = state.output

    try:
        settings = state.settings()
        output.info(f"Cache directory: {settings.cache_dir}")
        fetcher = ContentFetcher(
            NotionProxyClient(ProxySettings.from_env()),
            _build_cache(settings),
        )
        page = Page(name=url, url=url)
        with output.spinner("Fetching page..."):
            blocks = fetcher.get_blocks(page, force_refresh=force)
    except InvalidTokenError as e:
        output.error(f"Authentication failed: {e}")
        raise typer.Exit(ExitCode.AUTH_ERROR)
    except (ProxyUnreachableError, ProxyAccessError) as e:
        output.error(f"Network error: {e}")
        raise typer.Exit(ExitCode.NETWORK_ERROR)
    except VaultError as e:
        output.error(str(e))
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    output.success(f"{len(blocks)} block(s) available for {page.notion_page_id}")


@app.command("cache-clear")
def cache_clear(ctx: typer.Context) -> None:
    """Delete cached blocks and page info."""
    state: _State = ctx.obj
    output = state.output

    try:
        deleted = _build_cache(state.settings()).clear_persisted_cache()
    except VaultError as e:
        output.error(str(e))
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    output.success(f"Cleared {deleted} cache entries")


def main() -> None:
    """Main entry point for the console script."""
    app()


# Allow running as: python -m src.cli.main
if __name__ == "__main__":
    main()
