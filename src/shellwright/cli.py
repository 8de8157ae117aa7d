"""CLI entry point for shellwright."""

from __future__ import annotations

import logging

import typer

from shellwright import __version__
from shellwright.config import ShellwrightConfig

app = typer.Typer(
    name="shellwright",
    help="MCP tool server for shell commands, files, and interactive processes.",
    no_args_is_help=True,
)


def setup_logging(verbose: bool = False) -> None:
    # basicConfig logs to stderr, leaving stdout to the stdio transport
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


@app.command()
def serve(
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug logging."
    ),
    config_file: str | None = typer.Option(
        None, "--config", "-c", help="Config file path (default: ~/.shellwright.json)."
    ),
    max_sessions: int | None = typer.Option(
        None,
        "--max-sessions",
        min=1,
        help="Override the concurrent interactive session cap.",
    ),
) -> None:
    """Serve the tools over MCP stdio."""
    setup_logging(verbose)

    try:
        config = ShellwrightConfig.load(config_file)
    except (OSError, ValueError) as e:
        typer.echo(f"Error: could not load config: {e}", err=True)
        raise typer.Exit(1)
    if max_sessions is not None:
        config.sessions.max_sessions = max_sessions

    from shellwright.server import create_server

    logging.getLogger(__name__).info(
        "shellwright v%s (max_sessions=%d, cwd=%s)",
        __version__,
        config.sessions.max_sessions,
        config.default_cwd,
    )
    create_server(config).run(transport="stdio")


@app.command()
def version() -> None:
    """Print the version."""
    typer.echo(f"shellwright v{__version__}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
