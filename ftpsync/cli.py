"""CLI interface for ftpsync."""

import logging
from pathlib import Path
from typing import Any, Optional

import click

from . import __version__
from .config import CONFIG_FILE_NAME, load_config_data, write_config
from .exceptions import ConfigValidationError
from .output import OutputFormatter
from .syncer import Syncer
from .utils import DEFAULT_FTP_PORT

logger = logging.getLogger(__name__)


@click.group()
@click.option(
    "--config",
    "-c",
    "config_file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help=f"Config file (default: ./{CONFIG_FILE_NAME}); its directory is synced",
)
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose/debug logging output",
)
@click.version_option(version=__version__, prog_name="ftpsync")
@click.pass_context
def main(ctx: Any, config_file: Optional[Path], quiet: bool, verbose: bool) -> None:
    """ftpsync - Mirror a local directory and an FTP directory."""
    ctx.ensure_object(dict)
    ctx.obj["config_file"] = config_file or Path.cwd() / CONFIG_FILE_NAME
    ctx.obj["out"] = OutputFormatter(quiet=quiet)

    # Configure logging based on verbose flag
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )
        logging.getLogger("ftpsync").setLevel(logging.DEBUG)
    else:
        logging.basicConfig(level=logging.WARNING)


@main.command()
@click.pass_context
def init(ctx: Any) -> None:
    """Initialize the config file.

    Asks for the FTP credentials and the remote location, then writes
    them to sync.json.
    """
    out: OutputFormatter = ctx.obj["out"]
    config_file: Path = ctx.obj["config_file"]

    if config_file.exists():
        out.warning("Config file already exists!")
        ctx.exit(0)

    out.print("")
    out.warning("Before you start!")
    out.info("> You can find the FTP settings in your hosting control panel.")
    out.info("> The remote path is relative to the FTP login directory.")
    out.info("> You can exit this program anytime by pressing CTRL+C.")
    out.print("")

    data = {
        "ftp": {
            "host": click.prompt("FTP host"),
            "port": click.prompt("FTP port", type=int, default=DEFAULT_FTP_PORT),
            "user": click.prompt("FTP user"),
            "pass": click.prompt("FTP pass", hide_input=True),
        },
        "sync": {
            "url": click.prompt("Remote URL (e.g. https://www.example.com)"),
            "path": click.prompt("Remote path (e.g. theme-name)"),
        },
    }

    path = write_config(data, config_file)
    out.success(f"Configuration saved to {path}")


def _run_syncer(ctx: Any, watch: bool, dry_run: bool = False) -> None:
    out: OutputFormatter = ctx.obj["out"]
    config_file: Path = ctx.obj["config_file"]

    try:
        data = load_config_data(config_file)
    except ConfigValidationError as e:
        out.error_pair(type(e).__name__, str(e))
        ctx.exit(1)

    syncer = Syncer(
        data,
        local_root=config_file.absolute().parent,
        output=out,
        config_file=config_file,
    )
    ctx.exit(syncer.run(watch=watch, dry_run=dry_run))


@main.command()
@click.option(
    "--dry-run",
    is_flag=True,
    help="Show what would be transferred without changing anything",
)
@click.pass_context
def sync(ctx: Any, dry_run: bool) -> None:
    """Synchronize files between local & remote.

    Files missing on one side are copied there; when a file differs in
    size on both sides the newer one wins. Nothing is ever deleted.

    Examples:
        ftpsync sync
        ftpsync sync --dry-run
        ftpsync -c ~/sites/shop/sync.json sync
    """
    _run_syncer(ctx, watch=False, dry_run=dry_run)


@main.command()
@click.pass_context
def watch(ctx: Any) -> None:
    """Synchronize, then upload local changes automatically.

    Uploaded .css, .html and .js files trigger a browser-sync reload.
    """
    _run_syncer(ctx, watch=True)


if __name__ == "__main__":
    main()
