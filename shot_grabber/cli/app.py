import typer

from shot_grabber.cli.capture import capture_app
from shot_grabber.cli.config import config_app

app = typer.Typer(
    name="shot_grabber",
    help="Grab full page screenshots and console logs for a list of urls.",
)
app.add_typer(config_app, name="config")
app.add_typer(capture_app, name="capture")


def version_callback(value: bool) -> None:
    """Print the installed shot-grabber version and stop."""
    if value:
        from shot_grabber.__about__ import __version__

        typer.echo(f"{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    return


if __name__ == "__main__":
    app()
