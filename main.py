"""
bins - upload files or text to paste bins from the command line.

This is the main entry point for the Typer application.
"""

import typer

from cli.commands import upload_command


def create_app() -> typer.Typer:
    """Create and configure the Typer application."""
    app = typer.Typer(
        name="bins",
        help="Upload files or text to paste bins.",
        add_completion=False,
        pretty_exceptions_enable=False,
    )

    # Single command: `bins [INPUTS]...`
    app.command()(upload_command)

    return app


# Create the application instance
app = create_app()


def run() -> None:
    """Console script entry point."""
    app()


if __name__ == "__main__":
    run()
