"""Command-line interface using Typer."""

from datetime import UTC, datetime
from typing import Optional
from uuid import UUID
from zoneinfo import ZoneInfo

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from pipeline_dashboard import __version__
from pipeline_dashboard.logging import setup_logging

# Setup logging
setup_logging()

app = typer.Typer(
    name="pipeline-dashboard",
    help="Content Pipeline Dashboard - automation control CLI",
    add_completion=False,
)

console = Console()

STATUS_STYLES = {
    "completed": "green",
    "active": "blue",
    "failed": "red",
    "pending": "dim",
}


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"Content Pipeline Dashboard v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Content Pipeline Dashboard - watch and drive the daily video pipeline."""
    pass


def _styled(status: str, text: str | None = None) -> str:
    style = STATUS_STYLES.get(status, "white")
    return f"[{style}]{text or status}[/{style}]"


@app.command("trigger-daily")
def trigger_daily() -> None:
    """Create today's jobs now (runs even while automation is paused)."""
    from pipeline_dashboard.db.session import get_session_context
    from pipeline_dashboard.services.dispatcher import AlreadyRunning, AutomationDispatcher

    with get_session_context() as session:
        try:
            result = AutomationDispatcher(session).trigger_daily(source="cli")
        except AlreadyRunning as e:
            console.print(f"[bold yellow]{e}[/bold yellow]")
            for job_id in e.job_ids:
                console.print(f"  [dim]{job_id}[/dim]")
            raise typer.Exit(code=1)

    console.print(
        Panel(
            f"[bold]Run date:[/bold] {result.run_date}\n"
            f"[bold]Created:[/bold] {len(result.created)}\n"
            f"[bold]Skipped:[/bold] {len(result.skipped)}",
            title="Daily Automation",
            border_style="green",
        )
    )
    for job_id in result.created:
        console.print(f"  [green]+[/green] {job_id}")
    for key in result.skipped:
        console.print(f"  [dim]= {key}[/dim]")


@app.command("check-uploads")
def check_uploads() -> None:
    """Publish every job whose upload slot has arrived."""
    from pipeline_dashboard.db.session import get_session_context
    from pipeline_dashboard.services.dispatcher import AutomationDispatcher

    with get_session_context() as session:
        result = AutomationDispatcher(session).check_scheduled_uploads()

    table = Table(title="Upload Check")
    table.add_column("Outcome", style="cyan")
    table.add_column("Jobs", justify="right")
    table.add_row(_styled("completed", "Published"), str(len(result.published)))
    table.add_row(_styled("pending", "Still pending"), str(len(result.still_pending)))
    table.add_row(_styled("failed", "Failed"), str(len(result.failed)))
    console.print(table)

    if result.failed:
        raise typer.Exit(code=1)


@app.command()
def snapshot() -> None:
    """Show active jobs, the upload queue and the stage overview."""
    from pipeline_dashboard.db.session import get_session_context
    from pipeline_dashboard.domain.snapshot import stage_overview
    from pipeline_dashboard.domain.status import present
    from pipeline_dashboard.services.jobs import load_snapshot

    with get_session_context() as session:
        snap = load_snapshot(session)

    if not snap.active and not snap.scheduled:
        console.print("[dim]Pipeline is idle[/dim]")
        return

    active = Table(title="Active Jobs")
    active.add_column("ID", style="dim", no_wrap=True)
    active.add_column("Type")
    active.add_column("Title", style="cyan")
    active.add_column("Stage")
    active.add_column("Progress", justify="right")
    for job in snap.active:
        presentation = present(job.stage, job.progress)
        active.add_row(
            str(job.id)[:8] + "...",
            str(job.video_type),
            job.title[:40],
            _styled(presentation.status.value, presentation.badge_label),
            f"{job.progress}%",
        )
    console.print(active)

    if snap.scheduled:
        scheduled = Table(title="Upload Queue")
        scheduled.add_column("ID", style="dim", no_wrap=True)
        scheduled.add_column("Type")
        scheduled.add_column("Title", style="cyan")
        scheduled.add_column("Scheduled (UTC)")
        for job in snap.scheduled:
            scheduled.add_row(
                str(job.id)[:8] + "...",
                str(job.video_type),
                job.title[:40],
                job.scheduled_time.strftime("%Y-%m-%d %H:%M") if job.scheduled_time else "-",
            )
        console.print(scheduled)

    entries = stage_overview(snap)
    overview = Table(title="Stage Overview")
    for entry in entries:
        overview.add_column(entry.label, justify="center")
    overview.add_row(*[_styled(entry.status.value) for entry in entries])
    console.print(overview)


@app.command()
def watch(
    url: str = typer.Option("http://localhost:8000", "--url", "-u", help="Dashboard API base URL"),
    detail: bool = typer.Option(False, "--detail", "-d", help="Use the detail polling interval"),
    count: Optional[int] = typer.Option(None, "--count", "-n", help="Stop after N polls"),
) -> None:
    """Poll the running API and print the pipeline as it changes."""
    from pipeline_dashboard.services.polling import PollingConfig, PollState, SnapshotPoller
    from pipeline_dashboard.utils.async_utils import run_async

    config = PollingConfig.detail() if detail else PollingConfig.summary()

    def on_update(state: PollState) -> None:
        if state.snapshot is None:
            console.print(f"[bold red]No snapshot yet: {state.error}[/bold red]")
            return
        active = state.snapshot["active"]
        line = ", ".join(
            f"{job['title'][:20]} ({job['presentation']['badge_label']} {job['progress']}%)"
            for job in active
        )
        prefix = "[yellow]stale[/yellow] " if state.is_stale else ""
        console.print(f"{prefix}{len(active)} active: {line or '-'}")

    async def _watch() -> None:
        async with SnapshotPoller(url) as poller:
            await poller.run(config, on_update=on_update, max_polls=count)

    try:
        run_async(_watch())
    except KeyboardInterrupt:
        console.print("[dim]Stopped[/dim]")


@app.command("next-slot")
def next_slot_command(
    channel_id: str = typer.Argument(..., help="Channel ID (UUID)"),
    video_type: str = typer.Option("long_form", "--type", "-t", help="long_form or short"),
) -> None:
    """Show when a video would be published if scheduled now."""
    from pipeline_dashboard.db.session import get_session_context
    from pipeline_dashboard.domain.enums import VideoType
    from pipeline_dashboard.domain.timeline import next_slot
    from pipeline_dashboard.services.channels import ChannelNotFoundError, get_channel, to_domain

    try:
        channel_uuid = UUID(channel_id)
        kind = VideoType(video_type)
    except ValueError:
        console.print(f"[bold red]Invalid channel ID or video type: {channel_id} / {video_type}[/bold red]")
        raise typer.Exit(code=1)

    with get_session_context() as session:
        try:
            channel = to_domain(get_channel(session, channel_uuid))
        except ChannelNotFoundError:
            console.print(f"[bold red]Channel not found: {channel_id}[/bold red]")
            raise typer.Exit(code=1)

    slot = next_slot(channel, kind, datetime.now(UTC))
    local = slot.astimezone(ZoneInfo(channel.timezone))
    console.print(
        f"[bold]{channel.name}[/bold] {kind.value}: "
        f"[cyan]{local.strftime('%Y-%m-%d %H:%M')} {channel.timezone}[/cyan] "
        f"[dim]({slot.strftime('%Y-%m-%d %H:%M')} UTC)[/dim]"
    )


@app.command("clear-stuck")
def clear_stuck(
    timeout: Optional[int] = typer.Option(
        None, "--timeout", "-t", help="Minutes without progress (default from settings)"
    ),
) -> None:
    """Fail jobs that stopped reporting progress."""
    from pipeline_dashboard.db.session import get_session_context
    from pipeline_dashboard.services.dispatcher import AutomationDispatcher

    with get_session_context() as session:
        cleared = AutomationDispatcher(session).clear_stuck_jobs(timeout_minutes=timeout)

    if not cleared:
        console.print("[green]No stuck jobs[/green]")
        return

    console.print(f"[bold yellow]Cleared {len(cleared)} stuck jobs[/bold yellow]")
    for job_id in cleared:
        console.print(f"  [red]x[/red] {job_id}")


@app.command()
def pause() -> None:
    """Pause scheduled automation."""
    from pipeline_dashboard.db.session import get_session_context
    from pipeline_dashboard.services.dispatcher import AutomationDispatcher

    with get_session_context() as session:
        AutomationDispatcher(session).pause()
    console.print("[bold yellow]Automation paused[/bold yellow]")


@app.command()
def resume() -> None:
    """Resume scheduled automation."""
    from pipeline_dashboard.db.session import get_session_context
    from pipeline_dashboard.services.dispatcher import AutomationDispatcher

    with get_session_context() as session:
        AutomationDispatcher(session).resume()
    console.print("[bold green]Automation resumed[/bold green]")


@app.command()
def health() -> None:
    """Check the health of all services."""
    import httpx

    from pipeline_dashboard.config import settings

    url = f"http://{settings.api_host}:{settings.api_port}/health/ready"

    try:
        response = httpx.get(url, timeout=10)
        data = response.json()

        table = Table(title="Service Health")
        table.add_column("Component", style="cyan")
        table.add_column("Status")

        table.add_row("Database", "✓" if data.get("database") else "✗")
        table.add_row("Redis", "✓" if data.get("redis") else "✗")

        for component, healthy in (data.get("components") or {}).items():
            table.add_row(component, "✓" if healthy else "✗")

        console.print(table)

        if not data.get("ready"):
            console.print("[bold yellow]Some services unhealthy[/bold yellow]")
            raise typer.Exit(code=1)
        console.print("[bold green]All services healthy![/bold green]")

    except httpx.RequestError as e:
        console.print(f"[bold red]Cannot connect to API: {e}[/bold red]")
        console.print("[dim]Is the API server running?[/dim]")
        raise typer.Exit(code=1)


@app.command()
def worker(
    beat: bool = typer.Option(False, "--beat", "-B", help="Also run the beat scheduler"),
) -> None:
    """Start a Celery worker (for development)."""
    console.print("[bold blue]Starting Celery worker...[/bold blue]")

    import subprocess
    import sys

    command = [sys.executable, "-m", "celery", "-A", "pipeline_dashboard.worker", "worker", "--loglevel=info"]
    if beat:
        command.append("--beat")
    subprocess.run(command, check=True)


if __name__ == "__main__":
    app()
