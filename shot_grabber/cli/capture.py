from pathlib import Path
from typing import Optional

import typer
from rich.markup import escape

from shot_grabber.auth import load_authentication
from shot_grabber.config import get_config
from shot_grabber.console import RunLogger, console
from shot_grabber.coordinator import Coordinator
from shot_grabber.errors import ShotGrabberError
from shot_grabber.models import RunConfig
from shot_grabber.urls import run_directory_name

capture_app = typer.Typer()


@capture_app.callback(invoke_without_command=True)
def capture(
    urls: Optional[Path] = typer.Option(
        None,
        help="The file containing the list of URLs to load, one per line.",
    ),
    directory: Optional[str] = typer.Option(
        None,
        help="The directory name to save the screenshots in. Defaults to a timestamp.",
    ),
    output: Optional[Path] = typer.Option(
        None,
        help="The root directory for all runs.",
    ),
    auth: Optional[Path] = typer.Option(
        None,
        help="The file containing authentication info if desired.",
    ),
    max_tabs: Optional[int] = typer.Option(
        None,
        min=1,
        help="The maximum number of tabs open at the same time per browser.",
    ),
    max_browsers: Optional[int] = typer.Option(
        None,
        min=1,
        help="The maximum number of browser instances to open.",
    ),
    viewport_width: Optional[int] = typer.Option(
        None,
        min=1,
        help="Resize the viewport to the specified width in pixels.",
    ),
    viewport_height: Optional[int] = typer.Option(
        None,
        min=1,
        help="Resize the viewport to the specified height in pixels.",
    ),
    not_headless: bool = typer.Option(False, help="Don't use headless mode."),
    skip_page_console_log: bool = typer.Option(
        False,
        help="Skip the capture of console messages found in page.",
    ),
    skip_page_error_log: bool = typer.Option(
        False,
        help="Skip the capture of console errors found in page.",
    ),
    skip_screenshot: bool = typer.Option(False, help="Skip taking screenshots."),
    do_not_include_host: bool = typer.Option(
        False,
        help=(
            "Don't include the host in the directory name. Useful for comparing "
            "environments that serve the same paths."
        ),
    ),
    settle_delay: Optional[float] = typer.Option(
        None,
        min=0,
        help="Seconds to wait after navigation before taking the screenshot.",
    ),
    verbose: bool = typer.Option(
        False,
        help="show the log messages",
    ),
):
    """
    Grab full page screenshots and console messages for a list of urls.
    """
    settings = get_config()
    run_directory = (output or settings.report_root) / (directory or run_directory_name())
    run_directory.mkdir(parents=True, exist_ok=True)
    log_file = run_directory / "log.txt"
    logger = RunLogger(log_file, verbose)

    try:
        authentication = load_authentication(auth) if auth else None
        config = RunConfig(
            report_directory=run_directory,
            log_file=log_file,
            batch_size=max_tabs or settings.max_tabs,
            worker_count=max_browsers or settings.max_browsers,
            headless=settings.headless and not not_headless,
            viewport_width=viewport_width,
            viewport_height=viewport_height,
            capture_console_log=not skip_page_console_log,
            capture_error_log=not skip_page_error_log,
            capture_screenshot=not skip_screenshot,
            include_host=not do_not_include_host,
            verbose=verbose,
            settle_delay=settings.settle_delay if settle_delay is None else settle_delay,
            navigation_timeout=settings.navigation_timeout,
            authentication=authentication,
        )
        coordinator = Coordinator(config, logger)
        report = coordinator.run(coordinator.load(urls or settings.urls_file))
    except ShotGrabberError as e:
        console.print(f"[red]{escape(str(e))}[/red]", highlight=False)
        raise typer.Exit(1)

    console.print(f"Report saved to {escape(str(run_directory))}", highlight=False)
    if report.total_failures:
        console.print(
            f"[yellow]{report.total_failures} of {report.total_pages} pages failed[/yellow]"
        )
