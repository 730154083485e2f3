# Copyright (c) 2025 Trae AI. All rights reserved.

import typer
from rich.console import Console
from studio_site.cli.main import app as cli_app
from studio_site.core.errors import ConfigError
from studio_site.server.app import Server

app = typer.Typer(help="Studio Site - media catalog and contact relay backend.")

# Add CLI commands
app.registered_commands.extend(cli_app.registered_commands)

@app.command("server")
def run_server(config_path: str = "config.yaml"):
    """
    Run the API and media server.
    """
    try:
        server = Server(config_path)
    except ConfigError as e:
        Console().print(f"[red]Refusing to start:[/red] {e}")
        raise typer.Exit(1)
    server.run()

if __name__ == "__main__":
    app()
