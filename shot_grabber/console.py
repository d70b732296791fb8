from pathlib import Path
from typing import Optional, Union

from rich.console import Console
from rich.text import Text

console = Console()


class RunLogger:
    """Writes progress lines to the terminal and appends them to the run's log file.

    Every message goes to the log file. Messages logged with ``verbose=True``
    only reach the terminal when verbose mode is on. Plain strings are never
    parsed as rich markup; pass a ``Text`` to add colour.
    """

    def __init__(
        self,
        log_file: Optional[Path] = None,
        verbose: bool = False,
        prefix: str = "",
        terminal: Optional[Console] = None,
    ):
        self.log_file = Path(log_file) if log_file else None
        self.verbose = verbose
        self.prefix = prefix
        self.terminal = terminal or console

    def child(self, prefix: str) -> "RunLogger":
        return RunLogger(
            log_file=self.log_file,
            verbose=self.verbose,
            prefix=prefix,
            terminal=self.terminal,
        )

    def log(self, message: Union[str, Text, Exception], verbose: bool = False) -> None:
        text = Text(self.prefix)
        text.append(message if isinstance(message, Text) else str(message))

        if self.log_file:
            self.log_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.log_file, "a", encoding="utf-8") as handle:
                Console(file=handle, no_color=True, width=240, soft_wrap=True).print(text)

        if verbose and not self.verbose:
            return
        self.terminal.log(text)
