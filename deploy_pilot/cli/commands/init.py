"""Initialize command for creating the project configuration"""

from pathlib import Path

import click

from ..utils.output import console, print_error
from ...api.exceptions import ConfigError
from ...constants import EMOJI_SUCCESS, PROJECT_CONFIG_FILE
from ...services.config_service import ConfigService


@click.command()
@click.argument('path', required=False, default='.')
@click.option(
    '--name', '-n',
    help='Project name (defaults to the directory name)'
)
@click.option(
    '--force', '-f',
    is_flag=True,
    help='Overwrite an existing configuration file'
)
@click.pass_context
def init(ctx, path, name, force):
    """Write a commented default configuration file

    Examples:
        deploy-pilot init
        deploy-pilot init ./my-service --name my-service
    """
    project_path = Path(path).resolve()
    project_path.mkdir(parents=True, exist_ok=True)

    service = ConfigService(project_path, project_path / PROJECT_CONFIG_FILE)
    try:
        config_file = service.init_config(project_name=name, force=force)
    except ConfigError as e:
        print_error(str(e))
        console.print("Use --force to overwrite it")
        ctx.exit(1)

    console.print(f"{EMOJI_SUCCESS} Created {config_file}")
    console.print("\nNext steps:")
    console.print("  1. Review build commands and the remote app_dir")
    console.print("  2. Export DEPLOY_HOST, DEPLOY_USER and DEPLOY_SSH_KEY")
    console.print("  3. Run 'deploy-pilot deploy'")
