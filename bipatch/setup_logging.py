import logging
import os
import sys
from pathlib import Path

LOG_LEVEL = logging.WARNING
LOG_FORMAT = "%(asctime)s  %(levelname)-8s  %(name)s:%(lineno)d  →  %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    level: int | str = LOG_LEVEL,
    log_file: str | Path | None = None,
) -> None:
    """
    Configures logging. When run under pytest, it "cooperatively" adds
    a file handler instead of trying to reconfigure the root logger.
    """
    if isinstance(level, str):
        level = level.upper()

    root = logging.getLogger()
    root.setLevel(level)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        # one handler per file, even when commands run repeatedly in-process
        if not any(
            isinstance(h, logging.FileHandler)
            and h.baseFilename == os.path.abspath(log_path)
            for h in root.handlers
        ):
            file_handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
            file_handler.setLevel(level)
            file_handler.setFormatter(
                logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
            )
            root.addHandler(file_handler)

    # standalone runs get a console handler; stdout carries command output
    if not root.handlers:
        logging.basicConfig(
            level=level,
            format=LOG_FORMAT,
            datefmt=DATE_FORMAT,
            handlers=[logging.StreamHandler(sys.stderr)],
        )
