"""Snapshot management commands"""

import click

from ..decorators import require_project
from ..utils.output import console, format_snapshot_list, print_error
from ...api.exceptions import DeployPilotError


@click.group()
def snapshots():
    """Inspect and prune deployment snapshots"""
    pass


@snapshots.command('list')
@click.option('--local', is_flag=True, help='Read snapshots on this machine')
@click.pass_context
@require_project
def list_snapshots(ctx, local):
    """List snapshots, oldest first

    Examples:
        deploy-pilot snapshots list
    """
    try:
        items = ctx.obj.pipeline(local=local).snapshots()
    except DeployPilotError as e:
        print_error("Could not list snapshots", e)
        ctx.exit(1)

    format_snapshot_list(items)


@snapshots.command('prune')
@click.option('--keep', type=click.IntRange(min=1), required=True,
              help='Number of newest snapshots to keep')
@click.option('--local', is_flag=True, help='Prune snapshots on this machine')
@click.pass_context
@require_project
def prune_snapshots(ctx, keep, local):
    """Delete all but the newest N snapshots

    Examples:
        deploy-pilot snapshots prune --keep 3
    """
    try:
        removed = ctx.obj.pipeline(local=local).prune_snapshots(keep)
    except DeployPilotError as e:
        print_error("Could not prune snapshots", e)
        ctx.exit(1)

    if removed:
        format_snapshot_list(removed, title="Removed snapshots")
    else:
        console.print("[dim]Nothing to prune[/dim]")
