from __future__ import annotations
import logging
import sys

FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

def configure_logging(level: str | int = logging.INFO) -> None:
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logging.basicConfig(
        level=level,
        format=FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )
