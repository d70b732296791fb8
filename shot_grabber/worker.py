"""Capture worker: one browser, one chunk of urls, sequential batches."""
import asyncio
import signal
import sys
from pathlib import Path
from typing import Awaitable, Callable, Optional

from rich.text import Text

from shot_grabber.auth import AuthenticationGate
from shot_grabber.browser import is_navigation_timeout, launch_browser
from shot_grabber.chunks import partition
from shot_grabber.console import RunLogger
from shot_grabber.errors import ProtocolError
from shot_grabber.models import ErrorInfo, PageResult, RunConfig, WorkerReport
from shot_grabber.protocol import (
    DoneMessage,
    ErrorMessage,
    StartMessage,
    encode,
    parse_message,
)
from shot_grabber.urls import url_to_directory_name

Launcher = Callable[[bool], Awaitable]


def append_line(path: Path, line: str) -> None:
    with open(path, "a", encoding="utf-8") as handle:
        handle.write(f"{line}\n")


def worker_logger(config: RunConfig) -> RunLogger:
    return RunLogger(config.log_file, config.verbose).child(
        f"Browser #{config.worker_index}: "
    )


class CaptureWorker:
    """Captures every url of its chunk with a single browser.

    Urls are split into batches of ``config.batch_size``. All pages of a
    batch are captured concurrently and the next batch only starts once each
    of them has settled, so at most ``batch_size`` pages are open at once.
    """

    def __init__(
        self,
        config: RunConfig,
        urls: list[str],
        launcher: Launcher = launch_browser,
        logger: Optional[RunLogger] = None,
    ):
        self.config = config
        self.urls = list(urls)
        self.batches = partition(self.urls, config.batch_size)
        self.launcher = launcher
        self.logger = logger or worker_logger(config)
        self.browser = None
        self.pages = 0
        self.page_errors: list[PageResult] = []

    async def run(self) -> WorkerReport:
        self.logger.log("Starting", verbose=True)
        self.browser = await self.launcher(self.config.headless)
        try:
            if self.config.authentication is not None:
                gate = AuthenticationGate(self.config.authentication, self.logger)
                await gate.authenticate(self.browser)

            for number, batch in enumerate(self.batches, start=1):
                await self.process_batch(number, batch)
        finally:
            self.logger.log("Ending", verbose=True)
            await self.browser.close()

        return WorkerReport(
            worker_index=self.config.worker_index,
            pages=self.pages,
            page_errors=self.page_errors,
        )

    async def process_batch(self, number: int, batch: list[str]) -> list[PageResult]:
        self.logger.log(f"Starting batch #{number}", verbose=True)
        results = await asyncio.gather(*[self.capture(url) for url in batch])
        for result in results:
            self.pages += 1
            if not result.succeeded:
                self.page_errors.append(result)
        return results

    def page_directory(self, url: str) -> Path:
        name = url_to_directory_name(url, include_host=self.config.include_host)
        return Path(self.config.report_directory) / name

    async def capture(self, url: str) -> PageResult:
        """Capture one url, turning any failure into a failed PageResult."""
        try:
            result = await self._capture(url)
        except Exception as e:
            self.logger.log(Text.assemble(("✖", "red"), f" {url}"))
            self.logger.log(e, verbose=True)
            return PageResult(url=url, succeeded=False, error=ErrorInfo.from_exception(e))

        self.logger.log(Text.assemble(("✔", "green"), f" {url}"))
        return result

    async def _capture(self, url: str) -> PageResult:
        page = await self.browser.newPage()
        try:
            timed_out = await self._load(page, url)
        except Exception:
            await self._close_after_failure(page, url)
            raise
        await page.close()
        return PageResult(url=url, succeeded=True, navigation_timed_out=timed_out)

    async def _load(self, page, url: str) -> bool:
        config = self.config
        directory = self.page_directory(url)
        directory.mkdir(parents=True, exist_ok=True)
        console_path = directory / "console.txt"
        error_path = directory / "error.txt"

        if config.capture_console_log:
            console_path.unlink(missing_ok=True)
            page.on("console", lambda message: append_line(console_path, message.text))

        if config.capture_error_log:
            error_path.unlink(missing_ok=True)

            def on_response(response):
                if not response.ok:
                    append_line(error_path, f"response: {response.status} {response.url}")

            def on_request_failed(request):
                reason = (request.failure() or {}).get("errorText", "")
                append_line(error_path, f"requestfailed: {reason} {request.url}")

            page.on("pageerror", lambda error: append_line(error_path, f"pageerror: {error}"))
            page.on("response", on_response)
            page.on("requestfailed", on_request_failed)

        if config.viewport_width or config.viewport_height:
            await self._apply_viewport(page, url)

        timed_out = False
        try:
            await page.goto(
                url, {"waitUntil": "networkidle0", "timeout": config.navigation_timeout}
            )
        except Exception as e:
            if not is_navigation_timeout(e):
                raise
            timed_out = True
            self.logger.log(f"Navigation timeout for {url}, capturing anyway", verbose=True)
            if config.capture_error_log:
                append_line(error_path, f"goto: {e}")

        # give late content a chance to render
        await asyncio.sleep(config.settle_delay)

        if config.capture_screenshot:
            await page.screenshot(
                {"path": str(directory / "screenshot.png"), "fullPage": True}
            )
        return timed_out

    async def _apply_viewport(self, page, url: str) -> None:
        try:
            viewport = dict(page.viewport or {})
            if self.config.viewport_width:
                viewport["width"] = self.config.viewport_width
            if self.config.viewport_height:
                viewport["height"] = self.config.viewport_height
            await page.setViewport(viewport)
        except Exception as e:
            self.logger.log(f"There was an error setting the viewport size for {url}", verbose=True)
            self.logger.log(e, verbose=True)

    async def _close_after_failure(self, page, url: str) -> None:
        try:
            await page.close()
        except Exception as e:
            self.logger.log(f"Could not close the page for {url}: {e}", verbose=True)


def exit_on_sigterm(signum, frame):
    raise SystemExit(128 + signum)


def worker_main(conn, launcher: Launcher = launch_browser) -> None:
    """Entry point of a worker process.

    Waits for one ``start`` message on ``conn``, captures the urls it carries
    and answers with exactly one ``done`` or ``error`` message.
    """
    signal.signal(signal.SIGTERM, exit_on_sigterm)
    worker_index = -1
    try:
        message = parse_message(conn.recv())
        if not isinstance(message, StartMessage):
            raise ProtocolError(f"Expected a start message, got {message.type!r}")
        worker_index = message.config.worker_index
        worker = CaptureWorker(message.config, message.urls, launcher)
        report = asyncio.run(worker.run())
    except Exception as e:
        conn.send(encode(ErrorMessage(worker_index=worker_index, reason=str(e) or repr(e))))
        conn.close()
        sys.exit(1)

    conn.send(encode(DoneMessage(report=report)))
    conn.close()
