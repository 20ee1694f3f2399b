# securevote/poller.py
import logging
import threading
from typing import Any, Callable, Optional

from securevote import config

logger = logging.getLogger(__name__)


class ElectionPoller:
    """
    Fetch once immediately, then once per interval until stopped.

    No backoff and no jitter. A tick that raises is reported through
    `on_error` (or logged) and polling carries on.
    """

    def __init__(
        self,
        fetch: Callable[[], Any],
        on_update: Callable[[Any], None],
        interval: float = None,
        on_error: Optional[Callable[[Exception], None]] = None,
    ):
        self.fetch = fetch
        self.on_update = on_update
        self.interval = config.POLL_INTERVAL_SECONDS if interval is None else interval
        self.on_error = on_error
        self._stop = threading.Event()
        self._thread = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def poll_once(self):
        try:
            data = self.fetch()
        except Exception as e:
            if self.on_error is not None:
                self.on_error(e)
            else:
                logger.error(f"Polling failed: {e}")
            return
        self.on_update(data)

    def _run(self):
        self.poll_once()
        while not self._stop.wait(self.interval):
            self.poll_once()

    def start(self):
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="election-poller", daemon=True)
        self._thread.start()

    def stop(self, timeout: float = None):
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def toggle(self) -> bool:
        """Flip polling on or off; returns whether polling is now active."""
        if self.running:
            self.stop()
            return False
        self.start()
        return True

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, *exc):
        self.stop()
