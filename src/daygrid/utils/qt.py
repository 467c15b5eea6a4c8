from __future__ import annotations

import logging
from typing import Any, Callable, Optional, Set

from PyQt6.QtCore import QObject, QRunnable, QThreadPool, pyqtSignal

logger = logging.getLogger(__name__)


class TaskSignals(QObject):
    completed = pyqtSignal(object)
    failed = pyqtSignal(Exception)
    finished = pyqtSignal()


class _Job(QRunnable):
    def __init__(self, label: str, fn: Callable[[], Any], signals: TaskSignals) -> None:
        super().__init__()
        self.label = label
        self.fn = fn
        self.signals = signals

    def run(self) -> None:  # noqa: D401
        try:
            result = self.fn()
        except Exception as exc:  # noqa: BLE001
            logger.warning("Background job %s failed: %s", self.label, exc)
            self.signals.failed.emit(exc)
        else:
            self.signals.completed.emit(result)
        finally:
            self.signals.finished.emit()


class TaskRunner:
    """Runs remote calls off the GUI thread; callbacks come back on the GUI thread.

    Each runner owns its pool. With the default single thread, jobs run one at a
    time in submission order, so store mutations and the undo that follows them
    reach the store in the order the user issued them.

    Signal objects are held until their job finishes so a callback is never lost
    to garbage collection while the job is in flight.
    """

    def __init__(self, *, max_threads: int = 1) -> None:
        self.pool = QThreadPool()
        self.pool.setMaxThreadCount(max_threads)
        self._in_flight: Set[TaskSignals] = set()

    @property
    def busy(self) -> bool:
        return bool(self._in_flight)

    def wait(self, msecs: int = -1) -> bool:
        return self.pool.waitForDone(msecs)

    def submit(
        self,
        fn: Callable[..., Any],
        *args: Any,
        on_success: Optional[Callable[[Any], None]] = None,
        on_error: Optional[Callable[[Exception], None]] = None,
        **kwargs: Any,
    ) -> TaskSignals:
        signals = TaskSignals()
        if on_success:
            signals.completed.connect(on_success)
        if on_error:
            signals.failed.connect(on_error)
        self._in_flight.add(signals)
        signals.finished.connect(lambda: self._in_flight.discard(signals))
        label = getattr(fn, "__qualname__", repr(fn))
        self.pool.start(_Job(label, lambda: fn(*args, **kwargs), signals))
        return signals
