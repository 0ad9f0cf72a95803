"""
Module: gui.logging_utils

Purpose:
    Route records from the pdfomator loggers into a queue that the main
    window drains on a timer and shows in its status bar. Records are
    reduced to StatusMessage items on the emitting thread so the GUI never
    touches a LogRecord.

Key Functions:
    - StatusQueueHandler: logging.Handler that queues StatusMessage items
    - status_text(): Text shown in the status bar for a message
    - status_timeout_ms(): How long a message stays visible
    - attach_queue_handler() / detach_queue_handler(): Install and remove

Dependencies:
    - logging, queue (std)

Used By:
    - gui.app: MainWindow status bar
"""
from __future__ import annotations

import logging
from queue import Queue
from typing import NamedTuple

PACKAGE_LOGGER = "pdfomator"

INFO_TIMEOUT_MS = 4000
WARNING_TIMEOUT_MS = 8000


class StatusMessage(NamedTuple):
    text: str
    level: int


class StatusQueueHandler(logging.Handler):
    """Queue one StatusMessage per record at or above the handler level."""

    def __init__(self, log_queue: Queue, level: int = logging.INFO):
        super().__init__(level)
        self.log_queue = log_queue
        self.setFormatter(logging.Formatter("%(message)s"))

    def emit(self, record: logging.LogRecord) -> None:
        try:
            # Only the first line fits the status bar
            lines = self.format(record).splitlines()
            self.log_queue.put(StatusMessage(lines[0] if lines else "", record.levelno))
        except Exception:
            self.handleError(record)


def status_text(message: StatusMessage) -> str:
    if message.level >= logging.ERROR:
        return f"Error: {message.text}"
    if message.level >= logging.WARNING:
        return f"Warning: {message.text}"
    return message.text


def status_timeout_ms(message: StatusMessage) -> int:
    return WARNING_TIMEOUT_MS if message.level >= logging.WARNING else INFO_TIMEOUT_MS


def attach_queue_handler(
    log_queue: Queue,
    level: int = logging.INFO,
    logger_name: str = PACKAGE_LOGGER,
) -> StatusQueueHandler:
    """
    Install a StatusQueueHandler on the package logger.

    Lowers the logger's level when it would otherwise drop records the
    handler should see. Returns the handler for detach_queue_handler().
    """
    logger = logging.getLogger(logger_name)
    handler = StatusQueueHandler(log_queue, level)
    logger.addHandler(handler)
    if logger.getEffectiveLevel() > level:
        logger.setLevel(level)
    return handler


def detach_queue_handler(handler: StatusQueueHandler, logger_name: str = PACKAGE_LOGGER) -> None:
    logging.getLogger(logger_name).removeHandler(handler)
