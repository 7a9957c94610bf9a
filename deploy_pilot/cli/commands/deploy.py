"""Deploy command implementation"""

from pathlib import Path

import click

from ..decorators import require_project
from ..utils.output import format_pipeline_result, print_error
from ...api.exceptions import DeployPilotError


@click.command()
@click.option('--skip-build', is_flag=True,
              help='Deploy a previously built artifact (requires --artifact)')
@click.option('--artifact', type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help='Artifact archive to deploy')
@click.option('--local', is_flag=True,
              help='Deploy onto this machine instead of over ssh')
@click.pass_context
@require_project
def deploy(ctx, skip_build, artifact, local):
    """Build, upload, release, reload and verify

    Exits non-zero unless every stage succeeded. When the health check
    fails the last snapshot is restored before exiting.

    Examples:

        # Full pipeline
        deploy-pilot deploy

        # Redeploy an existing artifact
        deploy-pilot deploy --skip-build --artifact artifacts/release-20250101T000000Z-abc.tar.gz

        # Deploy into a directory on this machine
        deploy-pilot deploy --local
    """
    if skip_build and not artifact:
        print_error("--skip-build requires --artifact")
        ctx.exit(2)
    if artifact and not skip_build:
        skip_build = True

    try:
        result = ctx.obj.pipeline(local=local).deploy(artifact if skip_build else None)
    except DeployPilotError as e:
        print_error("Deployment failed", e)
        ctx.exit(1)

    format_pipeline_result(result)
    ctx.exit(result.exit_code)
