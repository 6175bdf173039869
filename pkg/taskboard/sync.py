"""
Fire-and-forget dispatch of outbound board mutations.

Each call runs once on its own daemon thread. Failures are logged, never
retried and never raised to the caller. There is no per-task ordering:
two requests for the same task race on the network.
"""
import logging
import threading
from typing import Any, Callable, List, Optional

logger = logging.getLogger(__name__)


class SyncDispatcher:
    """Runs remote calls in the background (or inline, for tests)."""

    def __init__(self, background: bool = True):
        self.background = background
        self._threads: List[threading.Thread] = []
        self._lock = threading.Lock()

    def submit(self, description: str, fn: Callable[..., Any], *args: Any) -> None:
        """Run fn(*args) without reporting its outcome to the caller."""
        logger.debug(f"Dispatching {description}")
        if not self.background:
            self._run(description, fn, args)
            return

        t = threading.Thread(
            target=self._run,
            args=(description, fn, args),
            name=f"taskboard-sync:{description}",
            daemon=True,
        )
        with self._lock:
            self._threads = [th for th in self._threads if th.is_alive()]
            self._threads.append(t)
        t.start()

    @staticmethod
    def _run(description: str, fn: Callable[..., Any], args: tuple) -> None:
        try:
            fn(*args)
        except Exception as e:
            logger.warning(f"{description} failed: {e}")

    @property
    def pending(self) -> int:
        with self._lock:
            return sum(1 for t in self._threads if t.is_alive())

    def flush(self, timeout: Optional[float] = None) -> None:
        """Wait for in-flight calls (each join bounded by timeout)."""
        with self._lock:
            threads = list(self._threads)
        for t in threads:
            t.join(timeout)
        with self._lock:
            self._threads = [th for th in self._threads if th.is_alive()]
