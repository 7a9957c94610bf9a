"""Build command implementation"""

import click

from ..decorators import require_project
from ..utils.output import format_artifact, print_error
from ...api.exceptions import DeployPilotError


@click.command()
@click.option('--no-commands', is_flag=True,
              help='Skip the build commands and only pack the existing output')
@click.pass_context
@require_project
def build(ctx, no_commands):
    """Build the application and pack a release artifact

    Examples:
        deploy-pilot build
        deploy-pilot build --no-commands
    """
    try:
        artifact = ctx.obj.pipeline().build(run_commands=not no_commands)
    except DeployPilotError as e:
        print_error("Build failed", e)
        ctx.exit(1)

    format_artifact(artifact)
