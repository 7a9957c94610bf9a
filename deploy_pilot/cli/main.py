# deploy_pilot/cli/main.py
"""Main CLI entry point for deploy-pilot"""

import os
import sys
import logging
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler

from ..__version__ import get_version
from ..constants import APP_NAME, LOG_FORMAT, ENV_LOG_LEVEL, ENV_HOST, ENV_USER
from ..api.pipeline import Pipeline
from ..models import HostCredentials
from ..utils.logging_utils import SecretMaskingFilter

# Import all commands
from .commands import (
    init,
    build,
    deploy,
    rollback,
    snapshots,
    status,
)
from .utils.output import print_stage

console = Console()


def setup_logging(verbose: bool = False, debug: bool = False,
                  masking_filter: Optional[SecretMaskingFilter] = None) -> None:
    """Setup logging configuration

    Args:
        verbose: Enable verbose output (INFO level)
        debug: Enable debug output (DEBUG level)
        masking_filter: Filter hiding credential values in every record
    """
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = os.environ.get(ENV_LOG_LEVEL, "WARNING").upper()

    handler = RichHandler(
        console=console,
        show_time=debug,
        show_path=debug,
        rich_tracebacks=True,
        tracebacks_suppress=[click]
    )
    if masking_filter is not None:
        handler.addFilter(masking_filter)

    # Configure rich handler
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[handler]
    )

    # Adjust third-party loggers
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("aiofiles").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


class Context:
    """CLI context object

    Credentials are read from the environment once; the project root is
    filled in by ``require_project``.
    """

    def __init__(self, config_path: Optional[Path] = None,
                 host: Optional[str] = None, user: Optional[str] = None):
        self.config_path = config_path
        self.project_root: Optional[Path] = None
        self.verbose: bool = False
        self.debug: bool = False
        env = dict(os.environ)
        if host:
            env[ENV_HOST] = host
        if user:
            env[ENV_USER] = user
        self.credentials = HostCredentials.from_env(env)

    def pipeline(self, local: bool = False) -> Pipeline:
        """Create a pipeline that prints each stage as it finishes"""
        return Pipeline(
            project_root=self.project_root,
            config_path=self.config_path,
            credentials=self.credentials,
            local=local,
            reporter=print_stage,
        )


@click.group(name=APP_NAME)
@click.version_option(version=get_version(), prog_name=APP_NAME)
@click.option('-v', '--verbose', is_flag=True, help='Enable verbose output')
@click.option('-d', '--debug', is_flag=True, help='Enable debug output')
@click.option('-q', '--quiet', is_flag=True, help='Suppress all output except errors')
@click.option('-c', '--config', 'config_path', type=click.Path(dir_okay=False, path_type=Path),
              help='Configuration file (default: .deploy-pilot.yaml in the project)')
@click.option('--host', help=f'Target host (overrides ${ENV_HOST})')
@click.option('--user', help=f'Remote user (overrides ${ENV_USER})')
@click.pass_context
def cli(ctx, verbose, debug, quiet, config_path, host, user):
    """Deploy Pilot - build, ship and verify a web service on one host

    Builds a release artifact, uploads it over ssh, snapshots the current
    deployment, swaps in the new release and reloads the process, then
    checks the public URL and rolls back when the service is unhealthy.

    Host credentials are read from DEPLOY_HOST, DEPLOY_USER and
    DEPLOY_SSH_KEY and never printed.
    """
    ctx.obj = Context(config_path=config_path, host=host, user=user)
    ctx.obj.verbose = verbose
    ctx.obj.debug = debug

    # Setup logging
    if quiet:
        logging.disable(logging.CRITICAL)
    else:
        masking = SecretMaskingFilter(
            ctx.obj.credentials.secrets if ctx.obj.credentials else ()
        )
        setup_logging(verbose=verbose, debug=debug, masking_filter=masking)


# Register commands
cli.add_command(init.init)
cli.add_command(build.build)
cli.add_command(deploy.deploy)
cli.add_command(rollback.rollback)
cli.add_command(snapshots.snapshots)
cli.add_command(status.status)


def main():
    """Main entry point for the CLI application

    This function handles:
    - Keyboard interrupts
    - Unexpected exceptions with proper error display
    """
    try:
        cli(prog_name=APP_NAME)

    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        sys.exit(130)

    except Exception as e:
        console.print(f"[red]Unexpected error: {e}[/red]")
        if '--debug' in sys.argv or '-d' in sys.argv:
            console.print_exception()
        sys.exit(1)


if __name__ == "__main__":
    main()
