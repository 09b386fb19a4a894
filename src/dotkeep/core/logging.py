"""Logging configuration for dotkeep.

dotkeep writes to two places. Per-file progress ("Copied: .vimrc", dry-run
notices, summaries) is printed by each manager on its own rich ``Console``
to stdout and is the command's actual output. Log records are diagnostics:
they go to stderr through a ``RichHandler`` and, when ``--log-file`` is
given, to a plain-text file.

Without ``--debug`` only warnings and errors reach stderr, for example a
failed copy during a bulk install or a legacy config that could not be
parsed. With ``--debug`` every decision the core makes (skipped blacklisted
paths, backups taken and deleted, comparison failures) is shown as well.

Example:
    ```python
    from dotkeep.core.logging import setup_logging

    setup_logging(debug=True, log_file="~/.local/state/dotkeep.log")
    ```
"""

import logging
import sys
from pathlib import Path
from types import TracebackType
from typing import Optional, Type

from rich.console import Console
from rich.logging import RichHandler

DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# stdout belongs to command output
log_console = Console(stderr=True)


def _stderr_handler(debug: bool) -> RichHandler:
    handler = RichHandler(
        console=log_console,
        show_path=debug,
        enable_link_path=debug,
        markup=False,
        rich_tracebacks=True,
        tracebacks_show_locals=debug,
    )
    handler.setLevel(logging.DEBUG if debug else logging.WARNING)
    return handler


def _file_handler(log_file: str, log_format: str) -> logging.FileHandler:
    log_path = Path(log_file).expanduser()
    log_path.parent.mkdir(parents=True, exist_ok=True)

    handler = logging.FileHandler(log_path, encoding="utf-8")
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(log_format))
    return handler


def setup_logging(
    debug: bool = False,
    log_file: Optional[str] = None,
    log_format: str = DEFAULT_LOG_FORMAT,
) -> None:
    """Configure the root logger for a dotkeep invocation.

    Args:
        debug: Show debug records on stderr instead of warnings only.
        log_file: Optional file that receives every record at debug level.
            ``~`` is expanded and missing parent directories are created.
        log_format: Format string for records written to the log file.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG if debug or log_file else logging.INFO)
    root_logger.handlers.clear()
    root_logger.addHandler(_stderr_handler(debug))
    if log_file:
        root_logger.addHandler(_file_handler(log_file, log_format))

    logger = logging.getLogger(__name__)
    logger.debug("Logging initialized (debug=%s, log_file=%s)", debug, log_file)

    def handle_exception(
        exc_type: Type[BaseException],
        exc_value: BaseException,
        exc_traceback: Optional[TracebackType],
    ) -> None:
        """Log uncaught exceptions instead of printing a bare traceback."""
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_traceback)
            return

        logger.critical(
            "Uncaught exception",
            exc_info=(exc_type, exc_value, exc_traceback),
        )

    sys.excepthook = handle_exception
