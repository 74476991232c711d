"""This module defines the 'serve' command, which runs the HTTP API."""

import click
import uvicorn


@click.command("serve")
@click.option("--host", default="127.0.0.1", help="Host to bind the server to.")
@click.option("--port", default=3001, type=int, help="Port to bind the server to.")
@click.option("--reload", is_flag=True, help="Enable auto-reload for development.")
def serve_command(host: str, port: int, reload: bool) -> None:
    """Start the Licita Brasil API server.

    Args:
        host: Host to bind to.
        port: Port to bind to.
        reload: Enable auto-reload.
    """
    click.echo(f"Starting server at http://{host}:{port}")
    uvicorn.run("licita_brasil.web.main:app", host=host, port=port, reload=reload, log_level="info")
