from __future__ import annotations

import time
from typing import Callable

try:
    from PyQt6 import QtCore
    _PYQT_IMPORT_ERROR: ModuleNotFoundError | None = None
except ModuleNotFoundError as e:  # pragma: no cover - import guard path
    QtCore = None  # type: ignore[assignment]
    _PYQT_IMPORT_ERROR = e


if QtCore is not None:
    class _QtTimerHandle:
        def __init__(self, timer: QtCore.QTimer) -> None:
            self._timer = timer
            self._live = True
            timer.timeout.connect(self._finish)

        def _finish(self) -> None:
            self._live = False
            self._timer.deleteLater()

        def cancel(self) -> None:
            if not self._live:
                return
            self._live = False
            self._timer.stop()
            self._timer.deleteLater()

    class QtScheduler:
        """
        Overlay timers on the Qt event loop, so expiry callbacks run on the
        GUI thread. Needs a running QCoreApplication/QApplication.
        Timers are children of an owner object; Qt frees them, not the GC.
        """

        def __init__(self, parent: QtCore.QObject | None = None) -> None:
            self._owner = parent if parent is not None else QtCore.QObject()

        def now(self) -> float:
            return time.monotonic()

        def call_later(self, delay_sec: float, callback: Callable[[], None]) -> _QtTimerHandle:
            timer = QtCore.QTimer(self._owner)
            timer.setSingleShot(True)
            timer.timeout.connect(callback)
            handle = _QtTimerHandle(timer)
            timer.start(max(0, int(round(float(delay_sec) * 1000.0))))
            return handle
else:
    class QtScheduler:  # type: ignore[no-redef]
        def __init__(self, parent: object | None = None) -> None:
            del parent
            raise ModuleNotFoundError(
                "PyQt6 is required for QtScheduler. Install with: python -m pip install PyQt6"
            ) from _PYQT_IMPORT_ERROR
