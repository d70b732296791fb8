from rich.console import Console
import typer

from shot_grabber.config import get_config

config_app = typer.Typer()


@config_app.callback()
def config():
    "configuration cli"


@config_app.command()
def show():
    Console().print(get_config())
