"""Vocab Jobs CLI - Main Entry Point"""

import json
from typing import Any, Optional

import typer
from rich.panel import Panel

from .client.base import VocabJobsError
from .client.endpoints import VocabJobsClient, default_api_url
from .utils.formatting import (
    console,
    create_jobs_table,
    create_stats_panel,
    display_job,
    print_error,
    print_info,
    print_success,
)

# Create main Typer app
app = typer.Typer(
    name="vocab-jobs",
    help="⚙️ Vocab Jobs - background job queue admin CLI",
    rich_markup_mode="rich",
)

ApiUrlOption = typer.Option(
    None, "--api-url", help="Admin API base URL (default: $VOCAB_JOBS_API_URL)"
)


@app.command()
def status(api_url: Optional[str] = ApiUrlOption):
    """📊 Check API connectivity and dispatcher state"""
    base_url = api_url or default_api_url()
    print_info(f"Checking connection to: {base_url}")

    try:
        with VocabJobsClient(base_url) as client:
            health = client.health_check()
    except VocabJobsError as e:
        print_error(f"Failed to connect: {e}")
        console.print(Panel(
            f"🚫 [red]Connection Failed[/red]\n\n"
            f"Make sure the Vocab Jobs API is running at:\n"
            f"[blue]{base_url}[/blue]",
            title="Connection Error",
            border_style="red"
        ))
        raise typer.Exit(1)

    worker = health.get("worker") or {}
    console.print(Panel(
        f"🚀 [green]Connected Successfully![/green]\n\n"
        f"• Version: [cyan]{health.get('version', 'unknown')}[/cyan]\n"
        f"• Environment: [yellow]{health.get('environment', 'unknown')}[/yellow]\n"
        f"• Dispatcher running: [cyan]{worker.get('running', False)}[/cyan]\n"
        f"• Queue depth: [cyan]{worker.get('queue_depth', 0)}[/cyan]",
        title="System Status",
        border_style="green"
    ))


@app.command()
def stats(api_url: Optional[str] = ApiUrlOption):
    """📈 Show queue statistics"""
    try:
        with VocabJobsClient(api_url) as client:
            data = client.get_stats()
    except VocabJobsError as e:
        print_error(str(e))
        raise typer.Exit(1)

    console.print(create_stats_panel(data))


@app.command("list")
def list_jobs(
    status: Optional[str] = typer.Option(None, "--status", "-s", help="Filter by status"),
    job_type: Optional[str] = typer.Option(None, "--type", "-t", help="Filter by job type"),
    api_url: Optional[str] = ApiUrlOption,
):
    """📋 List jobs"""
    try:
        with VocabJobsClient(api_url) as client:
            data = client.list_jobs(status=status, job_type=job_type)
    except VocabJobsError as e:
        print_error(str(e))
        raise typer.Exit(1)

    jobs = data.get("jobs", [])
    if not jobs:
        print_info("No jobs found")
        return
    console.print(create_jobs_table(jobs))


@app.command()
def show(job_id: str, api_url: Optional[str] = ApiUrlOption):
    """🔍 Show one job"""
    try:
        with VocabJobsClient(api_url) as client:
            job = client.get_job(job_id)
    except VocabJobsError as e:
        print_error(str(e))
        raise typer.Exit(1)

    display_job(job)


@app.command()
def enqueue(
    job_type: str = typer.Argument(..., help="Job type"),
    data: Optional[str] = typer.Option(None, "--data", "-d", help="JSON payload"),
    priority: str = typer.Option("normal", "--priority", "-p", help="critical|high|normal|low"),
    max_attempts: Optional[int] = typer.Option(None, "--max-attempts", help="Attempt ceiling"),
    api_url: Optional[str] = ApiUrlOption,
):
    """➕ Submit a job"""
    payload: Any = None
    if data is not None:
        try:
            payload = json.loads(data)
        except json.JSONDecodeError as e:
            print_error(f"Invalid JSON for --data: {e}")
            raise typer.Exit(2)

    try:
        with VocabJobsClient(api_url) as client:
            result = client.enqueue_job(
                job_type, payload, priority=priority, max_attempts=max_attempts
            )
    except VocabJobsError as e:
        print_error(str(e))
        raise typer.Exit(1)

    print_success(f"Job enqueued: {result.get('job_id')}")


@app.command("clear-completed")
def clear_completed(api_url: Optional[str] = ApiUrlOption):
    """🧹 Remove completed jobs"""
    try:
        with VocabJobsClient(api_url) as client:
            result = client.clear_completed()
    except VocabJobsError as e:
        print_error(str(e))
        raise typer.Exit(1)

    print_success(f"Removed {result.get('removed', 0)} completed jobs")


if __name__ == "__main__":
    app()
