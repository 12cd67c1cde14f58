"""Central logging setup for the project."""
from __future__ import annotations
import logging
import sys
from typing import TextIO

def setup_logging(level: int | str = logging.WARNING, stream: TextIO | None = None) -> None:
    """
    Configure root logger with sane defaults.

    Log records go to stderr unless another stream is given, since stdout
    carries the streamed reply.

    Args:
        level: Logging level, as a number or a name such as "INFO".
        stream: Destination stream.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    fmt = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"
    handler.setFormatter(logging.Formatter(fmt))
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)
