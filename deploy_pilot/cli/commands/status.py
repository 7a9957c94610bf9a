"""Status command implementation"""

import click

from ..decorators import require_project
from ..utils.output import format_status, print_error
from ...api.exceptions import DeployPilotError


@click.command()
@click.option('--local', is_flag=True, help='Inspect a deployment on this machine')
@click.pass_context
@require_project
def status(ctx, local):
    """Show supervisor state and probe the service once

    Examples:
        deploy-pilot status
    """
    try:
        info = ctx.obj.pipeline(local=local).status()
    except DeployPilotError as e:
        print_error("Could not read status", e)
        ctx.exit(1)

    format_status(info)
    if not info["healthy"]:
        ctx.exit(1)
