"""Tests for routing package log records to the status bar queue."""

import logging
from queue import Queue

import pytest

from pdfomator.gui.logging_utils import (
    INFO_TIMEOUT_MS,
    WARNING_TIMEOUT_MS,
    StatusMessage,
    attach_queue_handler,
    detach_queue_handler,
    status_text,
    status_timeout_ms,
)


@pytest.fixture
def routed():
    log_queue = Queue()
    handler = attach_queue_handler(log_queue)
    yield log_queue
    detach_queue_handler(handler)


def drain(log_queue):
    items = []
    while not log_queue.empty():
        items.append(log_queue.get_nowait())
    return items


def test_child_logger_records_are_queued_with_level(routed):
    logging.getLogger("pdfomator.output.renderer").warning("Skipping cell %d", 3)
    assert drain(routed) == [StatusMessage("Skipping cell 3", logging.WARNING)]


def test_debug_records_are_filtered(routed):
    logging.getLogger("pdfomator.interaction.gestures").debug("pointer moved")
    assert drain(routed) == []


def test_only_first_line_is_kept(routed):
    logging.getLogger("pdfomator").info("Export failed\nTraceback follows")
    assert drain(routed)[0].text == "Export failed"


def test_other_loggers_are_not_routed(routed):
    logging.getLogger("PIL.Image").warning("unrelated")
    assert drain(routed) == []


def test_detached_handler_stops_queueing():
    log_queue = Queue()
    handler = attach_queue_handler(log_queue)
    detach_queue_handler(handler)
    logging.getLogger("pdfomator").warning("after detach")
    assert drain(log_queue) == []


@pytest.mark.parametrize(
    "level,text,timeout",
    [
        (logging.INFO, "Exported 2 cells", INFO_TIMEOUT_MS),
        (logging.WARNING, "Warning: Exported 2 cells", WARNING_TIMEOUT_MS),
        (logging.ERROR, "Error: Exported 2 cells", WARNING_TIMEOUT_MS),
    ],
)
def test_status_presentation_follows_level(level, text, timeout):
    message = StatusMessage("Exported 2 cells", level)
    assert status_text(message) == text
    assert status_timeout_ms(message) == timeout
