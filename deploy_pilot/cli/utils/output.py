# deploy_pilot/cli/utils/output.py
"""Output formatting utilities"""

from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich import box

from ...constants import MSG_STAGE_PASSED, MSG_STAGE_FAILED, MSG_STAGE_SKIPPED
from ...models import Artifact, OperationStatus, PipelineResult, Snapshot, StageResult
from ...utils.file_utils import format_size

console = Console()


def print_stage(stage: StageResult) -> None:
    """Print the pass/fail line of a finished stage"""
    values = {"stage": stage.stage.value, "message": stage.message}
    if stage.status == OperationStatus.SUCCESS:
        console.print(f"[green]{MSG_STAGE_PASSED.format(**values)}[/green]")
    elif stage.status == OperationStatus.SKIPPED:
        console.print(f"[yellow]{MSG_STAGE_SKIPPED.format(**values)}[/yellow]")
    else:
        console.print(f"[red]{MSG_STAGE_FAILED.format(**values)}[/red]")


def format_artifact(artifact: Artifact) -> None:
    """Format and display a built artifact"""
    lines = [
        f"[green]✓[/green] Artifact built successfully!",
        f"",
        f"[bold]Archive:[/bold] {artifact.path}",
        f"[bold]Commit:[/bold] {artifact.commit}",
        f"[bold]Size:[/bold] {format_size(artifact.size)}",
        f"[bold]Checksum:[/bold] {artifact.checksum[:16]}",
        f"[bold]Members:[/bold] {', '.join(artifact.members)}",
    ]
    console.print(Panel("\n".join(lines), title="Build Result", border_style="green"))


def format_pipeline_result(result: PipelineResult, title: str = "Deploy Result") -> None:
    """Format and display a pipeline result"""
    if result.is_success:
        lines = [f"[green]✓[/green] {result.message}"]
        if result.artifact:
            lines.append(f"[bold]Artifact:[/bold] {result.artifact.filename}")
        if result.reload_outcome:
            lines.append(f"[bold]Process:[/bold] {result.reload_outcome.value}")
        if result.health:
            codes = ", ".join(p.display_code for p in result.health.probes)
            lines.append(f"[bold]Health:[/bold] {codes}")
        if result.duration is not None:
            lines.append(f"[bold]Duration:[/bold] {result.duration:.1f}s")
        console.print(Panel("\n".join(lines), title=title, border_style="green"))
        return

    lines = [f"[red]✗ Failed:[/red] {result.message}"]
    if result.health and not result.health.healthy:
        codes = ", ".join(p.display_code for p in result.health.probes)
        lines.append(f"[bold]Health probes:[/bold] {codes}")
    if result.rollback:
        lines.append(f"[bold]Rollback:[/bold] {result.rollback.status.value}")
        if result.rollback.snapshot:
            lines.append(f"  [yellow]• restored {result.rollback.snapshot.name}[/yellow]")
        if result.rollback.error:
            lines.append(f"  [red]• {result.rollback.error}[/red]")
    console.print(Panel("\n".join(lines), title=title, border_style="red"))


def format_snapshot_list(snapshots: List[Snapshot], title: str = "Snapshots") -> None:
    """Format and display snapshots, newest last"""
    if not snapshots:
        console.print(f"[yellow]No {title.lower()} found[/yellow]")
        return

    table = Table(title=title, box=box.SIMPLE)
    table.add_column("Name", style="cyan")
    table.add_column("Created", style="dim")

    for snapshot in snapshots:
        table.add_row(snapshot.name, snapshot.created_at.strftime("%Y-%m-%d %H:%M:%S"))

    console.print(table)


def format_status(status: Dict[str, Any]) -> None:
    """Format and display deployment status"""
    known = "[green]registered[/green]" if status["known"] else "[yellow]not registered[/yellow]"
    healthy = "[green]healthy[/green]" if status["healthy"] else "[red]unhealthy[/red]"
    lines = [
        f"[bold]Process:[/bold] {status['process']} ({known})",
        f"[bold]Health:[/bold] {status['status_code']} ({healthy})",
        f"[bold]Latest snapshot:[/bold] {status['latest_snapshot'] or 'none'}",
    ]
    console.print(Panel("\n".join(lines), title="Deployment Status", border_style="blue"))


def print_error(message: str, error: Optional[Exception] = None) -> None:
    """Print error message"""
    if error:
        console.print(f"[red]Error:[/red] {message}: {str(error)}")
    else:
        console.print(f"[red]Error:[/red] {message}")


def print_warning(message: str) -> None:
    """Print warning message"""
    console.print(f"[yellow]Warning:[/yellow] {message}")


def print_success(message: str) -> None:
    """Print success message"""
    console.print(f"[green]Success:[/green] {message}")
