"""Frame-rate monitoring and limiting for the reveal loop."""

from typing import Callable
import logging

logger = logging.getLogger(__name__)


class FPSMonitor:
    """Rolling frames-per-second estimate, resampled once per window.

    Feed it one ``record_frame`` call per rendered frame. The estimate keeps
    its previous value until a full window has elapsed.
    """

    def __init__(self, initial_fps: float = 60.0, window_ms: float = 1000.0) -> None:
        self._initial_fps = float(initial_fps)
        self._window_ms = window_ms
        self._fps = self._initial_fps
        self._frame_count = 0
        self._window_start: float | None = None
        self._callbacks: list[Callable[[float], None]] = []

    @property
    def fps(self) -> float:
        """Most recent estimate."""
        return self._fps

    def reset(self, now_ms: float | None = None) -> None:
        """Start a new sampling window and forget the previous estimate."""
        self._fps = self._initial_fps
        self._frame_count = 0
        self._window_start = now_ms

    def record_frame(self, now_ms: float) -> float:
        """Count one frame and resample if the window is over.

        Returns:
            The current estimate
        """
        if self._window_start is None:
            self._window_start = now_ms
            return self._fps

        self._frame_count += 1
        elapsed = now_ms - self._window_start
        if elapsed >= self._window_ms:
            self._fps = round(self._frame_count * 1000.0 / elapsed)
            self._frame_count = 0
            self._window_start = now_ms

            for callback in list(self._callbacks):
                try:
                    callback(self._fps)
                except Exception as e:
                    logger.error(f"Error in FPS callback: {e}")

        return self._fps

    def on_update(self, callback: Callable[[float], None]) -> Callable[[], None]:
        """
        Register a callback for each new estimate.

        Returns:
            Unsubscribe function
        """
        self._callbacks.append(callback)

        def unsubscribe() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return unsubscribe


class FrameRateLimiter:
    """Gate that admits at most ``target_fps`` frames per second."""

    def __init__(self, target_fps: float) -> None:
        self._interval_ms = 1000.0 / target_fps
        self._last_frame: float | None = None

    @property
    def interval_ms(self) -> float:
        return self._interval_ms

    def should_render(self, now_ms: float) -> bool:
        if self._last_frame is None or now_ms - self._last_frame >= self._interval_ms:
            self._last_frame = now_ms
            return True
        return False

    def set_target_fps(self, fps: float) -> None:
        self._interval_ms = 1000.0 / fps

    def reset(self) -> None:
        self._last_frame = None
