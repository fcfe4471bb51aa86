from __future__ import annotations

from infinite_stairs.loop import FrameTicker


class _FakeClock:
    def __init__(self, start: float = 1.0, tick: float = 0.001) -> None:
        self.now = start
        self.tick = tick

    def __call__(self) -> float:
        value = self.now
        self.now += self.tick
        return value


def test_tick_steps_before_rendering() -> None:
    calls: list[tuple[str, float]] = []
    clock = _FakeClock(start=2.0, tick=0.016)
    ticker = FrameTicker(
        step=lambda dt: calls.append(("step", dt)),
        render=lambda now: calls.append(("render", now)),
        clock=clock,
    )

    assert ticker.tick() == 0.0
    dt = ticker.tick()

    assert [name for name, _ in calls] == ["step", "render", "step", "render"]
    assert calls[1] == ("render", 2000.0)
    assert dt == calls[2][1]
    assert abs(dt - 16.0) < 1e-6
    assert ticker.frames == 2


def test_hooks_wrap_each_frame() -> None:
    calls: list[str] = []
    ticker = FrameTicker(
        step=lambda dt: calls.append("step"),
        render=lambda now: calls.append("render"),
        before_frame=lambda: calls.append("before"),
        after_frame=lambda: calls.append("after"),
        clock=_FakeClock(),
    )
    ticker.tick()
    assert calls == ["before", "step", "render", "after"]


def test_stop_in_before_frame_skips_the_frame() -> None:
    calls: list[str] = []
    ticker = FrameTicker(
        step=lambda dt: calls.append("step"),
        render=lambda now: calls.append("render"),
        clock=_FakeClock(),
    )
    ticker.before_frame = ticker.stop

    ticker.tick()

    assert calls == []
    assert ticker.frames == 0


def test_run_until_stopped() -> None:
    sleeps: list[float] = []
    ticker = FrameTicker(
        step=lambda dt: None,
        render=lambda now: None,
        target_fps=50,
        clock=_FakeClock(tick=0.001),
        sleep=sleeps.append,
    )

    def before() -> None:
        if ticker.frames == 3:
            ticker.stop()

    ticker.before_frame = before
    ticker.run()

    assert ticker.frames == 3
    assert not ticker.running
    assert len(sleeps) == 3
    # 20ms frame budget, 2ms spent per frame on the fake clock
    assert all(abs(s - 0.018 * 0.9) < 1e-9 for s in sleeps)


def test_run_can_be_restarted_after_stop() -> None:
    ticker = FrameTicker(step=lambda dt: None, render=lambda now: None,
                         clock=_FakeClock(), sleep=lambda s: None)
    ticker.stop()

    def before() -> None:
        if ticker.frames == 1:
            ticker.stop()

    ticker.before_frame = before
    ticker.run()
    assert ticker.frames == 1
