"""CLI commands for rustmcp.

``serve`` runs the server; ``tools``, ``doctor`` and ``call`` inspect and
exercise it without a client.
"""

import asyncio
import errno
import json
import socket
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from rustmcp import __logo__, __version__
from rustmcp.cli.logging_utils import configure_logging, ensure_rotating_log_file
from rustmcp.config.loader import load_config
from rustmcp.config.schema import Config

app = typer.Typer(
    name="rustmcp",
    help=f"{__logo__} rustmcp - Rust code analysis server",
    no_args_is_help=True,
)

console = Console()
# Stdout belongs to the protocol while serving over stdio.
err_console = Console(stderr=True)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"{__logo__} rustmcp v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(None, "--version", callback=_version_callback, is_eager=True),
):
    """rustmcp - Rust code analysis server."""


def _load(config_path: Path | None, binary: str | None = None, timeout: float | None = None) -> Config:
    try:
        config = load_config(config_path)
    except ValueError as e:
        err_console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    if binary:
        config.bridge.binary_path = binary
    if timeout is not None:
        config.bridge.timeout_seconds = timeout
    return config


def _port_in_use(host: str, port: int) -> bool:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        try:
            s.bind((host, port))
            return False
        except OSError as e:
            if e.errno == errno.EADDRINUSE:
                return True
            raise


@app.command()
def serve(
    stdio: bool = typer.Option(False, "--stdio", "-s", help="Serve newline-delimited JSON on stdin/stdout"),
    no_websocket: bool = typer.Option(False, "--no-websocket", "-n", help="Disable the WebSocket server"),
    host: str = typer.Option(None, "--host", help="WebSocket bind host"),
    port: int = typer.Option(None, "--port", "-p", help="WebSocket port"),
    binary: str = typer.Option(None, "--binary", "-b", help="Path to the analyzer binary (overrides RUST_BINARY_PATH)"),
    timeout: float = typer.Option(None, "--timeout", help="Analyzer deadline in seconds"),
    config_path: Path = typer.Option(None, "--config", "-c", help="Config file (default ~/.rustmcp/config.json)"),
    log_level: str = typer.Option(None, "--log-level", "-l", help="Log level (DEBUG, INFO, WARNING, ...)"),
):
    """Start the server (WebSocket by default, stdio with --stdio)."""
    from rustmcp.server import serve as run_server

    config = _load(config_path, binary, timeout)
    if stdio:
        config.stdio.enabled = True
    if no_websocket:
        config.websocket.enabled = False
    if host:
        config.websocket.host = host
    if port is not None:
        config.websocket.port = port
    if log_level:
        config.logging.level = log_level

    configure_logging(config.logging.level)
    if config.logging.file_enabled:
        ensure_rotating_log_file("serve", level=config.logging.level, log_dir=config.logging.log_path)

    if not config.stdio.enabled and not config.websocket.enabled:
        err_console.print("[red]Nothing to serve:[/red] enable --stdio or drop --no-websocket.")
        raise typer.Exit(1)

    if config.websocket.enabled and _port_in_use(config.websocket.host, config.websocket.port):
        err_console.print(
            f"[red]Port {config.websocket.port} is already in use.[/red] "
            f"Use [cyan]--port[/cyan] to pick another one (current: {config.websocket.host}:{config.websocket.port})."
        )
        raise typer.Exit(1)

    if config.websocket.enabled:
        err_console.print(
            f"[green]✓[/green] WebSocket: ws://{config.websocket.host}:{config.websocket.port}{config.websocket.path}"
        )
    if config.stdio.enabled:
        err_console.print("[green]✓[/green] stdio: newline-delimited JSON on stdin/stdout")

    try:
        asyncio.run(run_server(config))
    except KeyboardInterrupt:
        err_console.print("\nShutting down...")


@app.command()
def tools(
    config_path: Path = typer.Option(None, "--config", "-c", help="Config file"),
):
    """List registered tools and resources."""
    from rustmcp.server import build_dispatcher

    dispatcher = build_dispatcher(_load(config_path))

    table = Table(title="Tools")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Required params")
    table.add_column("Description")
    for definition in dispatcher.tools.get_definitions():
        required = ", ".join(definition["inputSchema"].get("required", [])) or "-"
        table.add_row(definition["name"], required, definition["description"])
    console.print(table)

    resources = Table(title="Resources")
    resources.add_column("Name", style="cyan", no_wrap=True)
    resources.add_column("URI")
    for summary in dispatcher.resources.get_summaries():
        resources.add_row(summary["name"], summary["uri"])
    console.print(resources)


@app.command()
def doctor(
    binary: str = typer.Option(None, "--binary", "-b", help="Path to the analyzer binary"),
    config_path: Path = typer.Option(None, "--config", "-c", help="Config file"),
):
    """Check that the analyzer binary can be used."""
    from rustmcp.server import build_bridge

    report = build_bridge(_load(config_path, binary)).requirements_report()

    table = Table(title="Analyzer")
    table.add_column("Check", style="cyan")
    table.add_column("Status")
    for name, passed in report["checks"].items():
        table.add_row(name, "[green]ok[/green]" if passed else "[red]missing[/red]")
    console.print(f"Binary: {report['binaryPath'] or '(not configured)'}")
    console.print(table)
    for suggestion in report["suggestions"]:
        console.print(f"[yellow]•[/yellow] {suggestion}")

    if not report["checks"]["binaryExecutable"]:
        console.print("[yellow]Analysis requests will return degraded results until this is fixed.[/yellow]")
        raise typer.Exit(1)
    console.print("[green]✓[/green] Analyzer is ready")


@app.command()
def call(
    method: str = typer.Argument(..., help="RPC method, e.g. initialize, tools/list, tools/call"),
    params: str = typer.Option(None, "--params", "-P", help="JSON params object"),
    url: str = typer.Option(None, "--url", "-u", help="Send to a running server, e.g. ws://127.0.0.1:3000/"),
    binary: str = typer.Option(None, "--binary", "-b", help="Analyzer binary for in-process calls"),
    config_path: Path = typer.Option(None, "--config", "-c", help="Config file"),
):
    """Send one RPC request and print the reply."""
    parsed_params = None
    if params:
        try:
            parsed_params = json.loads(params)
        except json.JSONDecodeError as e:
            err_console.print(f"[red]--params is not valid JSON:[/red] {e}")
            raise typer.Exit(2)

    if url:
        from websockets.exceptions import WebSocketException

        from rustmcp.client import RpcSocketClient

        try:
            reply = asyncio.run(RpcSocketClient(url).request(method, parsed_params))
        except (OSError, asyncio.TimeoutError, WebSocketException) as e:
            err_console.print(f"[red]Request to {url} failed:[/red] {e}")
            raise typer.Exit(1)
    else:
        from rustmcp.server import build_dispatcher

        dispatcher = build_dispatcher(_load(config_path, binary))
        frame = {"version": "2.0", "id": 1, "method": method}
        if parsed_params is not None:
            frame["params"] = parsed_params
        reply = asyncio.run(dispatcher.dispatch(json.dumps(frame)))

    typer.echo(json.dumps(reply, indent=2, ensure_ascii=False))
    if isinstance(reply, dict) and "error" in reply:
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
