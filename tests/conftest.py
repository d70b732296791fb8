import io

import pytest
from rich.console import Console

from shot_grabber.console import RunLogger
from shot_grabber.models import RunConfig


@pytest.fixture()
def terminal() -> Console:
    """A console that writes to memory instead of the terminal."""
    return Console(file=io.StringIO(), width=200)


@pytest.fixture()
def logger(tmp_path, terminal) -> RunLogger:
    return RunLogger(tmp_path / "log.txt", verbose=True, terminal=terminal)


@pytest.fixture()
def make_config(tmp_path):
    def _make_config(**overrides) -> RunConfig:
        values = {
            "report_directory": tmp_path / "report",
            "log_file": tmp_path / "log.txt",
            "batch_size": 2,
            "worker_count": 2,
            "settle_delay": 0,
        }
        values.update(overrides)
        return RunConfig(**values)

    return _make_config
