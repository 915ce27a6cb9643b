"""Rich Formatting Utilities for Beautiful CLI Output"""

import json
from typing import Any

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

console = Console()

STATUS_STYLES = {
    "pending": "yellow",
    "processing": "cyan",
    "completed": "green",
    "failed": "red",
    "retrying": "magenta",
}


def print_success(message: str):
    """Print success message with green styling"""
    console.print(f"[green]✓ {message}[/green]")


def print_error(message: str):
    """Print error message with red styling"""
    console.print(f"[red]✗ {message}[/red]")


def print_info(message: str):
    """Print info message with blue styling"""
    console.print(f"[blue]ℹ {message}[/blue]")


def _styled_status(status: str) -> str:
    style = STATUS_STYLES.get(status, "white")
    return f"[{style}]{status}[/{style}]"


def create_jobs_table(jobs: list[dict[str, Any]]) -> Table:
    """Create a formatted table for a job list"""
    table = Table(title="Jobs", box=box.ROUNDED)

    table.add_column("ID", justify="left", style="cyan", no_wrap=True)
    table.add_column("Type", justify="left", style="magenta")
    table.add_column("Priority", justify="center")
    table.add_column("Status", justify="center")
    table.add_column("Attempts", justify="center")
    table.add_column("Error", justify="left", style="red")

    for job in jobs:
        table.add_row(
            job.get("id", "")[:8],  # Short ID
            job.get("type", ""),
            job.get("priority", ""),
            _styled_status(job.get("status", "")),
            f"{job.get('attempts', 0)}/{job.get('max_attempts', 0)}",
            job.get("error") or "-",
        )

    return table


def create_stats_panel(stats: dict[str, Any]) -> Panel:
    """Create formatted panel for queue statistics"""
    running = "[green]running[/green]" if stats.get("running") else "[red]stopped[/red]"
    content = f"""
📊 [bold blue]Queue Statistics[/bold blue]

• Dispatcher: {running}
• In flight: [cyan]{stats.get("in_flight_count", 0)}[/cyan]
• Total: [blue]{stats.get("total", 0)}[/blue]
• Pending: [yellow]{stats.get("pending", 0)}[/yellow]
• Processing: [cyan]{stats.get("processing", 0)}[/cyan]
• Retrying: [magenta]{stats.get("retrying", 0)}[/magenta]
• Completed: [green]{stats.get("completed", 0)}[/green]
• Failed: [red]{stats.get("failed", 0)}[/red]
"""

    return Panel(content, title="Job Queue", border_style="green")


def display_job(job: dict[str, Any]):
    """Display a single job with payload and outcome"""
    lines = [
        f"• ID: [cyan]{job.get('id')}[/cyan]",
        f"• Type: [magenta]{job.get('type')}[/magenta]",
        f"• Priority: {job.get('priority')}",
        f"• Status: {_styled_status(job.get('status', ''))}",
        f"• Attempts: {job.get('attempts', 0)}/{job.get('max_attempts', 0)}",
        f"• Created: [dim]{job.get('created_at')}[/dim]",
    ]
    if job.get("error"):
        lines.append(f"• Error: [red]{job['error']}[/red] ({job.get('error_code')})")

    console.print(Panel("\n".join(lines), title="Job", border_style="blue"))
    console.print(
        Panel(json.dumps(job.get("data"), indent=2, default=str), title="Data")
    )
    if job.get("result") is not None:
        console.print(
            Panel(
                json.dumps(job["result"], indent=2, default=str),
                title="Result",
                border_style="green",
            )
        )
