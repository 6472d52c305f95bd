from __future__ import annotations

import logging
import subprocess
import threading
from typing import Callable, Optional

log = logging.getLogger(__name__)

TimerFactory = Callable[[float, Callable[[], None]], threading.Timer]


class DeferredPrint:
    """
    One-shot print action scheduled after a settling delay.

    ``arm()`` schedules at most once per instance; ``cancel()`` drops a pending
    action so a view torn down before the delay elapses never prints.
    """

    def __init__(
        self,
        action: Callable[[], None],
        delay_ms: int = 500,
        timer_factory: TimerFactory = threading.Timer,
    ) -> None:
        self.action = action
        self.delay_ms = delay_ms
        self._timer_factory = timer_factory
        self._timer: Optional[threading.Timer] = None
        self._armed = False
        self._lock = threading.Lock()

    @property
    def pending(self) -> bool:
        return self._timer is not None

    def arm(self) -> bool:
        with self._lock:
            if self._armed:
                return False
            self._armed = True
            timer = self._timer_factory(self.delay_ms / 1000, self._fire)
            timer.daemon = True
            self._timer = timer
        timer.start()
        log.debug("print scheduled in %dms", self.delay_ms)
        return True

    def cancel(self) -> bool:
        with self._lock:
            timer, self._timer = self._timer, None
        if timer is None:
            return False
        timer.cancel()
        log.debug("pending print cancelled")
        return True

    def _fire(self) -> None:
        with self._lock:
            if self._timer is None:
                return
            self._timer = None
        try:
            self.action()
        except Exception:
            log.exception("print action failed")


def send_to_printer(text: str, command: tuple[str, ...] = ("lp",)) -> None:
    subprocess.run(list(command), input=text, text=True, check=True)
