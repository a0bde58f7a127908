"""Console logging for CLI runs."""

import logging

from rich.console import Console
from rich.logging import RichHandler


def configure_logging(verbose: bool = False) -> logging.Logger:
    """Attach a stderr RichHandler to the package logger (once)."""
    logger = logging.getLogger("branchpilot")
    if not logger.handlers:
        handler = RichHandler(console=Console(stderr=True), show_path=False, rich_tracebacks=True)
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    return logger
