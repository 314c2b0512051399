import logging
from pathlib import Path
from typing import Optional
from rich.logging import RichHandler

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'

def setup_logging(
    log_path: Optional[Path],
    debug: bool = False,
    quiet: bool = False,
    console: bool = False,
) -> logging.Logger:
    """
    Setup logging configuration for comwatch.

    Daemon mode appends timestamped lines to log_path. Console mode (debug
    or dry-run) renders to the terminal through rich and never touches the
    log file. Quiet mode suppresses logging entirely and wins over both.

    Args:
        log_path: Log file used in daemon mode (parent directory is created)
        debug: If True, enable DEBUG level logging
        quiet: If True, disable all logging
        console: If True, log to the terminal instead of log_path
    """
    level = logging.DEBUG if debug else logging.INFO

    if quiet:
        logging.basicConfig(level=level, handlers=[logging.NullHandler()], force=True)
        logging.disable(logging.CRITICAL)
        return logging.getLogger(__name__)

    logging.disable(logging.NOTSET)

    if console or log_path is None:
        handler: logging.Handler = RichHandler(show_path=False, rich_tracebacks=True)
        logging.basicConfig(
            level=level,
            format='%(message)s',
            datefmt='[%Y-%m-%d %H:%M:%S]',
            handlers=[handler],
            force=True  # Override any existing configuration
        )
        target = "console"
    else:
        log_file = Path(log_path)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logging.basicConfig(
            level=level,
            format=LOG_FORMAT,
            handlers=[logging.FileHandler(log_file)],
            force=True
        )
        target = str(log_file)

    logger = logging.getLogger(__name__)
    logger.info(f"Logging initialized: {target} (debug={'ON' if debug else 'OFF'})")

    return logger
