from __future__ import annotations

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler


def configure_logging(verbose: bool = False, logger_name: Optional[str] = None) -> logging.Logger:
    """
    Configure process-wide logging with a Rich handler and return a scoped logger.

    Records go to stderr so generated code written to stdout stays clean.
    """
    level = logging.DEBUG if verbose else logging.INFO
    handler = RichHandler(console=Console(stderr=True), show_time=True, show_path=False)
    logging.basicConfig(level=level, handlers=[handler], format="%(message)s", force=True)
    logger = logging.getLogger(logger_name or "agent_canvas")
    logger.debug("Logging configured with level %s", logging.getLevelName(level))
    return logger
