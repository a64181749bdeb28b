"""Notifier implementations: plain logging and a rich console."""

from __future__ import annotations

import logging

from rich.console import Console

from .base import Notifier, Severity

logger = logging.getLogger(__name__)

_LOG_LEVELS = {
    "INFO": logging.INFO,
    "SUCCESS": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}

_STYLES = {
    "INFO": "cyan",
    "SUCCESS": "green",
    "WARNING": "yellow",
    "ERROR": "red",
}


class LoggingNotifier(Notifier):
    def notify(self, message: str, severity: Severity = "INFO") -> None:
        logger.log(_LOG_LEVELS.get(severity, logging.INFO), message)


class ConsoleNotifier(Notifier):
    def __init__(self, console: Console | None = None):
        self.console = console or Console()

    def notify(self, message: str, severity: Severity = "INFO") -> None:
        self.console.print(message, style=_STYLES.get(severity, "white"), markup=False)
