from __future__ import annotations

import logging
import sys


def setup_logging(level: str | int = logging.INFO) -> None:
    """
    Configure a single stderr handler on the root logger.

    Call this ONCE, before the server starts. Running under plain uvicorn
    leaves logging to uvicorn's own configuration instead.
    """
    root = logging.getLogger()
    root.setLevel(level.upper() if isinstance(level, str) else level)

    # Remove any pre-existing handlers to avoid duplicates.
    for h in list(root.handlers):
        root.removeHandler(h)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    root.addHandler(handler)

    # Route warnings.warn(...) into logging as 'py.warnings'
    logging.captureWarnings(True)
