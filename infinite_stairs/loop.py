"""
Frame Loop
===========
Host-owned ticker: measures elapsed time, then calls step(dt) and render(now).
"""

from typing import Callable, Optional
import time


TARGET_FPS = 60


class FrameTicker:
    """
    Single-threaded frame loop.

    `before_frame` runs first each frame (input draining, resize polling),
    then `step` receives the elapsed milliseconds since the previous frame and
    `render` the current clock reading in milliseconds. `stop()` ends `run()`
    after the current frame.
    """

    def __init__(
        self,
        step: Callable[[float], None],
        render: Callable[[float], None],
        before_frame: Optional[Callable[[], None]] = None,
        after_frame: Optional[Callable[[], None]] = None,
        target_fps: int = TARGET_FPS,
        clock: Callable[[], float] = time.perf_counter,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.step = step
        self.render = render
        self.before_frame = before_frame
        self.after_frame = after_frame
        self.frame_time = 1.0 / target_fps
        self.clock = clock
        self.sleep = sleep
        self.running = False
        self.stopped = False
        self.frames = 0
        self._last: Optional[float] = None

    def stop(self) -> None:
        self.stopped = True
        self.running = False

    def tick(self) -> float:
        """Run one frame and return the elapsed milliseconds it was given."""
        now = self.clock()
        dt_ms = 0.0 if self._last is None else (now - self._last) * 1000.0
        self._last = now

        if self.before_frame is not None:
            self.before_frame()
        if self.stopped:
            return dt_ms

        self.step(dt_ms)
        self.render(now * 1000.0)
        if self.after_frame is not None:
            self.after_frame()
        self.frames += 1
        return dt_ms

    def run(self) -> None:
        """Tick until stopped, sleeping out the rest of each frame."""
        self.stopped = False
        self.running = True
        self._last = None
        while not self.stopped:
            start = self.clock()
            self.tick()
            if self.stopped:
                break

            elapsed = self.clock() - start
            sleep_time = self.frame_time - elapsed
            if sleep_time > 0.001:
                self.sleep(sleep_time * 0.9)
