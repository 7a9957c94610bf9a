"""Rollback command implementation"""

import click

from ..decorators import require_project
from ..utils.output import format_pipeline_result, print_error
from ...api.exceptions import DeployPilotError


@click.command()
@click.option('--local', is_flag=True,
              help='Roll back a deployment on this machine')
@click.option('--yes', '-y', is_flag=True, help='Skip confirmation prompt')
@click.pass_context
@require_project
def rollback(ctx, local, yes):
    """Restore the newest snapshot and reload the process

    Examples:
        deploy-pilot rollback
        deploy-pilot rollback --yes
    """
    if not yes and not click.confirm("Restore the newest snapshot over the live deployment?"):
        ctx.exit(0)

    try:
        result = ctx.obj.pipeline(local=local).rollback()
    except DeployPilotError as e:
        print_error("Rollback failed", e)
        ctx.exit(1)

    format_pipeline_result(result, title="Rollback Result")
    ctx.exit(result.exit_code)
