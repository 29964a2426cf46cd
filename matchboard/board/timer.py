"""Fixed-period background ticker."""

from __future__ import annotations

import logging
import threading
from typing import Callable

logger = logging.getLogger(__name__)


class RepeatingTimer:
    """Calls ``callback`` once on start and then every ``interval`` seconds."""

    def __init__(self, interval: float, callback: Callable[[], None]) -> None:
        self.interval = interval
        self.callback = callback
        self._stopped = threading.Event()
        self._thread: threading.Thread | None = None

    def start(self) -> None:
        """Run the first tick now and schedule the rest."""
        self._tick()
        self._thread = threading.Thread(
            target=self._run, name="board-countdown", daemon=True
        )
        self._thread.start()

    def cancel(self) -> None:
        """Stop ticking. Safe to call more than once."""
        self._stopped.set()

    @property
    def running(self) -> bool:
        return self._thread is not None and not self._stopped.is_set()

    def _run(self) -> None:
        while not self._stopped.wait(self.interval):
            self._tick()

    def _tick(self) -> None:
        try:
            self.callback()
        except Exception:
            logger.exception("Countdown tick failed")
