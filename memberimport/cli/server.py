"""Member Import server control script.

Usage:
    memberimport-server start [--host HOST] [--port PORT] [--reload] [--foreground]
    memberimport-server stop
    memberimport-server status
"""

import argparse
import os
import signal
import subprocess
import sys
import time
from pathlib import Path

import httpx

from memberimport.config import settings

DATA_DIR = Path("data")
PID_FILE = DATA_DIR / "memberimport.pid"
LOG_FILE = DATA_DIR / "memberimport.log"


def get_pid() -> int | None:
    """Get the PID of the running server, if any."""
    if not PID_FILE.exists():
        return None

    try:
        pid = int(PID_FILE.read_text().strip())
        # Signal 0 only checks the process exists
        os.kill(pid, 0)
        return pid
    except (ValueError, ProcessLookupError, PermissionError):
        PID_FILE.unlink(missing_ok=True)
        return None


def start_server(host: str, port: int, reload: bool = False, foreground: bool = False) -> bool:
    """Start uvicorn serving memberimport.main:app.

    Returns:
        True if the server started.
    """
    pid = get_pid()
    if pid:
        print(f"Server is already running (PID: {pid})")
        return False

    DATA_DIR.mkdir(parents=True, exist_ok=True)
    cmd = [
        sys.executable, "-m", "uvicorn",
        "memberimport.main:app",
        "--host", host,
        "--port", str(port),
    ]
    if reload:
        cmd.append("--reload")

    print(f"Starting Member Import server on http://{host}:{port}")

    if foreground:
        try:
            subprocess.run(cmd)
        except KeyboardInterrupt:
            print("\nServer stopped")
        return True

    with open(LOG_FILE, "w") as log:
        process = subprocess.Popen(
            cmd,
            stdout=log,
            stderr=subprocess.STDOUT,
            start_new_session=True,
        )

    time.sleep(1)
    if process.poll() is not None:
        print(f"Failed to start server. See {LOG_FILE}")
        return False

    PID_FILE.write_text(str(process.pid))
    print(f"Server started with PID: {process.pid}")
    return True


def stop_server() -> bool:
    """Stop the background server.

    Returns:
        True if the server was stopped.
    """
    pid = get_pid()
    if not pid:
        print("Server is not running")
        return False

    print(f"Stopping server (PID: {pid})...")
    try:
        os.kill(pid, signal.SIGTERM)
        for _ in range(10):
            time.sleep(0.5)
            try:
                os.kill(pid, 0)
            except ProcessLookupError:
                break
        else:
            print("Server didn't stop gracefully, forcing...")
            os.kill(pid, signal.SIGKILL)
    except ProcessLookupError:
        print("Server was not running")
    except PermissionError:
        print(f"Permission denied to stop process {pid}")
        return False

    PID_FILE.unlink(missing_ok=True)
    print("Server stopped")
    return True


def server_status(port: int) -> None:
    """Print whether the server is running and its health."""
    pid = get_pid()
    if not pid:
        print("Member Import server is not running")
        return

    print(f"Member Import server is running (PID: {pid})")
    try:
        response = httpx.get(f"http://localhost:{port}/health", timeout=2)
        data = response.json()
        print(f"  Status: {data.get('status', 'unknown')}")
        print(f"  Version: {data.get('version', 'unknown')}")
    except (httpx.HTTPError, ValueError):
        print("  (Could not fetch health status)")


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Member Import server control script")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    start_parser = subparsers.add_parser("start", help="Start the server")
    start_parser.add_argument("--host", default=settings.host, help="Host to bind to")
    start_parser.add_argument("--port", "-p", type=int, default=settings.port, help="Port to bind to")
    start_parser.add_argument("--reload", "-r", action="store_true", help="Enable auto-reload")
    start_parser.add_argument("--foreground", "-f", action="store_true", help="Run in foreground")

    subparsers.add_parser("stop", help="Stop the server")

    status_parser = subparsers.add_parser("status", help="Check server status")
    status_parser.add_argument("--port", "-p", type=int, default=settings.port)

    args = parser.parse_args()

    if args.command == "start":
        return 0 if start_server(args.host, args.port, args.reload, args.foreground) else 1
    if args.command == "stop":
        return 0 if stop_server() else 1
    if args.command == "status":
        server_status(args.port)
        return 0

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
