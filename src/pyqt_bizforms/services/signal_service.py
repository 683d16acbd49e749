"""Signal blocking helpers for programmatic widget updates."""

import logging
from contextlib import contextmanager

from PyQt6.QtCore import QObject

logger = logging.getLogger(__name__)


class SignalService:
    """
    Context managers that guarantee signals are unblocked again.

    Examples:
        with SignalService.block_signals(combo):
            combo.set_value("paid")

        with SignalService.block_signals(quantity, total):
            ...
    """

    @staticmethod
    @contextmanager
    def block_signals(*objects: QObject):
        """Block signals on every non-None object for the duration of the block."""
        previous = []
        for obj in objects:
            if obj is not None:
                previous.append((obj, obj.blockSignals(True)))
        try:
            yield
        finally:
            for obj, was_blocked in previous:
                obj.blockSignals(was_blocked)

