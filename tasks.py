"""Invoke tasks for Member Import application management."""

import sys
from pathlib import Path

from invoke import task
from invoke.context import Context

# Must match memberimport/cli/server.py
LOG_FILE = Path("data/memberimport.log")


@task
def start(ctx: Context, host: str = "0.0.0.0", port: int = 8000, reload: bool = False) -> None:
    """Start the Member Import FastAPI server in the foreground.

    Args:
        ctx: Invoke context
        host: Host to bind to (default: 0.0.0.0)
        port: Port to bind to (default: 8000)
        reload: Enable auto-reload for development
    """
    cmd = f"uv run memberimport-server start --host {host} --port {port} --foreground"
    if reload:
        cmd += " --reload"

    try:
        ctx.run(cmd, pty=True)
    except KeyboardInterrupt:
        print("\nServer stopped")
        sys.exit(0)


@task(name="start-background")
def start_background(ctx: Context, host: str = "0.0.0.0", port: int = 8000) -> None:
    """Start the Member Import server in the background."""
    ctx.run(f"uv run memberimport-server start --host {host} --port {port}")


@task
def stop(ctx: Context) -> None:
    """Stop the background server."""
    ctx.run("uv run memberimport-server stop", warn=True)


@task
def restart(ctx: Context, host: str = "0.0.0.0", port: int = 8000) -> None:
    """Restart the background server."""
    stop(ctx)
    start_background(ctx, host=host, port=port)


@task
def status(ctx: Context) -> None:
    """Check the status of the server."""
    ctx.run("uv run memberimport-server status")


@task
def logs(ctx: Context, follow: bool = False, lines: int = 50) -> None:
    """View the server logs.

    Args:
        ctx: Invoke context
        follow: Follow log output (like tail -f)
        lines: Number of lines to show (default: 50)
    """
    if not LOG_FILE.exists():
        print(f"No log file at {LOG_FILE}")
        return
    if follow:
        ctx.run(f"tail -f {LOG_FILE}", pty=True)
    else:
        ctx.run(f"tail -n {lines} {LOG_FILE}")


@task(name="import")
def import_file(ctx: Context, path: str, mapping: str = "", dry_run: bool = False) -> None:
    """Import members from a spreadsheet.

    Args:
        ctx: Invoke context
        path: CSV, XLSX or XLS file
        mapping: Comma separated COLUMN=FIELD pairs
        dry_run: Validate without creating members
    """
    cmd = f"uv run memberimport-run '{path}'"
    for pair in filter(None, (p.strip() for p in mapping.split(","))):
        cmd += f" --map '{pair}'"
    if dry_run:
        cmd += " --dry-run"
    ctx.run(cmd, pty=True)


@task
def test(ctx: Context, verbose: bool = False, coverage: bool = False) -> None:
    """Run the test suite.

    Args:
        ctx: Invoke context
        verbose: Enable verbose output
        coverage: Run with coverage report
    """
    cmd = "uv run pytest"
    if verbose:
        cmd += " -v"
    if coverage:
        cmd += " --cov=memberimport --cov-report=term-missing"
    ctx.run(cmd, pty=True)


@task
def clean(ctx: Context) -> None:
    """Clean up caches and build artifacts."""
    for pattern in ["__pycache__", "*.pyc", "*.pyo", ".pytest_cache"]:
        ctx.run(f"find . -name '{pattern}' -exec rm -rf {{}} + 2>/dev/null || true", warn=True)

    for path in ["build", "dist", "*.egg-info", ".eggs"]:
        ctx.run(f"rm -rf {path} 2>/dev/null || true", warn=True)
