from rich.console import Console
from rich.markup import escape
from typing import Optional

LEVEL_STYLES = {
    "error": "red",
    "warning": "yellow",
    "debug": "blue",
}

class Logger:
    def __init__(self, name: str = "mailquery", verbose: bool = False, console: Optional[Console] = None):
        # stderr keeps parsed output on stdout clean for the CLI
        self.console = console or Console(stderr=True)
        self.name = name
        self.verbose = verbose

    def log(self, message: str, level: str = "info") -> None:
        """Log a message if verbosity level allows it"""
        if level == "debug" and not self.verbose:
            return

        style = LEVEL_STYLES.get(level)
        message = escape(message)
        if level == "debug":
            self.console.print(f"[{style}]DEBUG \\[{self.name}]: {message}[/{style}]", highlight=False)
        elif style:
            self.console.print(f"[{style}]{message}[/{style}]", highlight=False)
        else:
            self.console.print(message, highlight=False)

    def debug(self, message: str) -> None:
        self.log(message, "debug")

    def warning(self, message: str) -> None:
        self.log(message, "warning")

    def error(self, message: str) -> None:
        self.log(message, "error")

# Global logger instance
logger = Logger()

def set_verbose(verbose: bool) -> None:
    logger.verbose = verbose
