import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s:%(lineno)d] %(message)s"


def setup_logger(
    name: str = "lasercool",
    level: int = logging.INFO,
    log_dir: Optional[Union[str, Path]] = None,
) -> logging.Logger:
    """
    Configure a logger for a simulation run.

    Module loggers inside the package are children of ``lasercool``, so
    calling this once with the default name routes every system's messages
    to the configured handlers.

    Parameters
    ----------
    name : str
        Logger name.
    level : int
        Logging level for the logger and its handlers.
    log_dir : str or Path, optional
        If given, also write a timestamped log file into this directory.

    Returns
    -------
    logging.Logger
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False

    # Avoid duplicate handlers on reload
    if logger.handlers:
        return logger

    formatter = logging.Formatter(LOG_FORMAT)

    ch = logging.StreamHandler(sys.stdout)
    ch.setLevel(level)
    ch.setFormatter(formatter)
    logger.addHandler(ch)

    if log_dir is not None:
        Path(log_dir).mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        logfile = Path(log_dir) / f"{name}_{timestamp}.log"

        fh = logging.FileHandler(logfile)
        fh.setLevel(level)
        fh.setFormatter(formatter)
        logger.addHandler(fh)
        logger.info(f"Logging to: {logfile}")

    return logger
