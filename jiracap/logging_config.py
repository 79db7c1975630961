"""Logging configuration for the command line.

Log level comes from --verbose or the JIRACAP_LOG_LEVEL environment variable
(default WARNING). Records are rendered on stderr by rich.
"""

import logging
import os

from rich.console import Console
from rich.logging import RichHandler


def configure_logging(verbose: bool = False) -> None:
    """Install a RichHandler on the jiracap logger."""
    level_name = "DEBUG" if verbose else os.environ.get("JIRACAP_LOG_LEVEL", "WARNING")
    level = getattr(logging, level_name.upper(), logging.WARNING)

    logger = logging.getLogger("jiracap")
    logger.setLevel(level)
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=verbose,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    logger.addHandler(handler)
