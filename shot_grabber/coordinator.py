"""Run coordinator: fans a url list out over worker processes and merges their reports."""
import multiprocessing
import time
from dataclasses import dataclass
from multiprocessing.connection import wait
from pathlib import Path
from typing import Optional

from shot_grabber.browser import launch_browser
from shot_grabber.chunks import partition, process_chunk_size
from shot_grabber.console import RunLogger
from shot_grabber.errors import NoValidUrlsError, ProtocolError, WorkerFailedError
from shot_grabber.models import RunConfig, RunReport, WorkerReport
from shot_grabber.protocol import DoneMessage, ErrorMessage, StartMessage, encode, parse_message
from shot_grabber.urls import load_urls
from shot_grabber.worker import Launcher, worker_main

JOIN_TIMEOUT_S = 5


@dataclass
class WorkerHandle:
    index: int
    process: multiprocessing.Process
    conn: object
    urls: list

    def receive(self) -> WorkerReport:
        """Read the worker's single terminal message."""
        if not self.conn.poll():
            raise WorkerFailedError(
                self.index, f"exited unexpectedly with code {self.process.exitcode}"
            )
        try:
            raw = self.conn.recv()
        except EOFError:
            self.process.join(JOIN_TIMEOUT_S)
            raise WorkerFailedError(
                self.index, f"exited unexpectedly with code {self.process.exitcode}"
            )

        message = parse_message(raw)
        if isinstance(message, ErrorMessage):
            raise WorkerFailedError(self.index, message.reason)
        if not isinstance(message, DoneMessage):
            raise ProtocolError(f"Browser #{self.index} sent a {message.type!r} message")
        return message.report


class Coordinator:
    """Owns a whole run.

    The url list is split into one chunk per worker process, each chunk at
    least one full batch long. Each process gets its own browser and reports
    back once. The first worker error aborts the run and stops every other
    worker.
    """

    def __init__(
        self,
        config: RunConfig,
        logger: Optional[RunLogger] = None,
        launcher: Launcher = launch_browser,
        start_method: str = "spawn",
    ):
        self.config = config
        self.logger = logger or RunLogger(config.log_file, config.verbose)
        self.launcher = launcher
        self.context = multiprocessing.get_context(start_method)
        self.handles: list[WorkerHandle] = []

    def load(self, path: Path) -> list[str]:
        return load_urls(path, self.logger)

    def plan(self, urls: list[str]) -> list[list[str]]:
        size = process_chunk_size(len(urls), self.config.worker_count, self.config.batch_size)
        return partition(urls, size)

    def run(self, urls: list[str]) -> RunReport:
        if not urls:
            raise NoValidUrlsError("No valid urls found.")

        start = time.monotonic()
        chunks = self.plan(urls)
        self.logger.log(
            f"Processing {len(urls)} urls with {len(chunks)} browsers "
            f"and {self.config.batch_size} tabs per browser"
        )

        try:
            self.spawn(chunks)
            reports = self.collect()
        except KeyboardInterrupt:
            self.logger.log("Interrupted, stopping all browsers")
            self.terminate_all()
            raise
        except Exception as e:
            self.logger.log(f"Aborting run: {e}")
            self.terminate_all()
            raise

        self.join_all()
        report = RunReport.from_worker_reports(reports, time.monotonic() - start)
        self.log_summary(report)
        return report

    def spawn(self, chunks: list[list[str]]) -> None:
        for index, chunk in enumerate(chunks):
            parent_conn, child_conn = self.context.Pipe()
            process = self.context.Process(
                target=worker_main,
                args=(child_conn, self.launcher),
                name=f"shot-grabber-browser-{index}",
                daemon=True,
            )
            process.start()
            child_conn.close()
            self.handles.append(WorkerHandle(index, process, parent_conn, chunk))
            parent_conn.send(
                encode(StartMessage(config=self.config.for_worker(index), urls=chunk))
            )
        for handle in self.handles:
            self.logger.log(
                f"Browser #{handle.index}: assigned {len(handle.urls)} urls "
                f"({handle.urls[0]} .. {handle.urls[-1]})",
                verbose=True,
            )

    def collect(self) -> list[WorkerReport]:
        pending = {handle.index: handle for handle in self.handles}
        reports = []
        while pending:
            waitables = {}
            for handle in pending.values():
                waitables[handle.conn] = handle
                waitables[handle.process.sentinel] = handle

            for ready in wait(list(waitables)):
                handle = waitables[ready]
                if handle.index not in pending:
                    continue
                report = handle.receive()
                del pending[handle.index]
                reports.append(report)
                self.logger.log(
                    f"Browser #{handle.index}: done, "
                    f"{len(report.page_errors)} of {report.pages} pages failed",
                    verbose=True,
                )
        return reports

    def terminate_all(self) -> None:
        for handle in self.handles:
            if handle.process.is_alive():
                handle.process.terminate()
        for handle in self.handles:
            handle.process.join(JOIN_TIMEOUT_S)
            if handle.process.is_alive():
                self.logger.log(f"Browser #{handle.index}: did not stop, killing it", verbose=True)
                handle.process.kill()
        self.join_all()

    def join_all(self) -> None:
        for handle in self.handles:
            handle.process.join(JOIN_TIMEOUT_S)
            handle.conn.close()

    def log_summary(self, report: RunReport) -> None:
        for result in report.page_errors:
            self.logger.log(f"Failed: {result.url} ({result.error})", verbose=True)
        self.logger.log(f"Total pages: {report.total_pages}")
        self.logger.log(f"Total failures: {report.total_failures}")
        self.logger.log(f"Elapsed time: {report.elapsed_seconds:.2f}s")
        self.logger.log(f"Throughput: {report.throughput:.2f} urls/minute")
