"""Logging for conversion passes, rendered with rich when an import host asks for it."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from rich.console import Console
from rich.logging import RichHandler
from rich.text import Text

if TYPE_CHECKING:
    from logging import Logger, LogRecord

    from .errors import ConversionReport

PACKAGE_LOGGER = "fbxaxis"


class PassFormatter(logging.Formatter):
    """Prefix messages with the pass that emitted them, e.g. ``[curves]`` for ``fbxaxis.threeD.curves``."""

    def format(self, record: LogRecord) -> str:
        pass_name = record.name.rsplit(".", 1)[-1]
        return f"[{pass_name}] {record.getMessage()}"


class ConversionLogHandler(RichHandler):
    """Rich handler with fixed-width bracketed level names, so mesh and curve diagnostics line up.

    Args:
        console (Console | None, optional): Console to render to. Defaults to a new stderr console.
        **kwargs: Additional keyword arguments for the RichHandler.

    """

    def __init__(self, console: Console | None = None, **kwargs: Any) -> None:
        kwargs = {"rich_tracebacks": True, "show_path": False, "log_time_format": "[%X]"} | kwargs
        super().__init__(console=console or Console(stderr=True), **kwargs)
        self.setFormatter(PassFormatter())

    def get_level_text(self, record: LogRecord) -> Text:
        """Format the level as e.g. ``[warning ]``."""
        level_name = record.levelname.lower()
        return Text.styled(f"[{level_name:<8}]", f"logging.level.{level_name}")


def setup_logging(
    level: str | None = None, console: Console | None = None, replace_handlers: bool = True
) -> Logger:
    """Route the package logger through a :class:`ConversionLogHandler`.

    Import hosts call this once; the passes themselves never configure handlers.

    Args:
        level (str | None, optional): The logging level. If None, the current level is kept. Defaults to None.
        console (Console | None, optional): Console to render to. Defaults to a new stderr console.
        replace_handlers (bool, optional): Whether to replace the existing handlers or add to them. Defaults to True.

    Returns:
        Logger: The `fbxaxis` package logger.

    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    if level is not None:
        logger.setLevel(level.upper())
    handler = ConversionLogHandler(console)
    if replace_handlers:
        logger.handlers = [handler]
    else:
        logger.addHandler(handler)
    return logger


def get_logger(name: str, level: str = "NOTSET") -> Logger:
    """Get a named logger.

    Args:
        name (str): The name of the logger, usually ``__name__``.
        level (str, optional): The logging level. Defaults to "NOTSET", deferring to the package logger.

    Returns:
        Logger: The logger instance.

    """
    logger = logging.getLogger(name)
    logger.setLevel(level.upper())
    return logger


def log_report(logger: Logger, subject: str, report: ConversionReport) -> None:
    """Summarize the diagnostics of a finished pass: a warning when there are any, debug otherwise."""
    if report.ok:
        logger.debug(f"{subject}: converted without diagnostics")
        return
    kinds = sorted({d.kind.value for d in report.diagnostics})
    subjects = ", ".join(sorted({d.subject for d in report.diagnostics}))
    logger.warning(f"{subject}: {len(report.diagnostics)} diagnostics ({', '.join(kinds)}), affected: {subjects}")
