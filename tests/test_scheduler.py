import pytest

from scheduler import ManualDriver, RealtimeDriver


def test_manual_driver_runs_in_request_order():
    d = ManualDriver()
    seen = []
    d.request(lambda: seen.append(1))
    d.request(lambda: seen.append(2))
    assert d.pending == 2
    assert d.run() == 2
    assert seen == [1, 2]
    assert not d.step()


def test_cancel_drops_pending_tick():
    d = ManualDriver()
    seen = []
    token = d.request(lambda: seen.append("x"))
    d.cancel(token)
    d.cancel(token)  # twice is fine
    assert d.pending == 0
    assert d.run() == 0
    assert seen == []


def test_run_limit():
    d = ManualDriver()

    def again():
        d.request(again)

    d.request(again)
    assert d.run(max_ticks=5) == 5
    assert d.pending == 1


class FakeClock:
    def __init__(self):
        self.now = 0.0
        self.slept = []

    def __call__(self):
        return self.now

    def sleep(self, dt):
        self.slept.append(dt)
        self.now += dt


def test_realtime_driver_paces_ticks():
    clock = FakeClock()
    d = RealtimeDriver(refresh_hz=50.0, clock=clock, sleep=clock.sleep)

    def tick():
        clock.now += 0.005  # fast pipeline
        d.request(tick)

    d.request(tick)
    d.run(max_ticks=3)
    assert len(clock.slept) == 2
    assert all(s == pytest.approx(0.015) for s in clock.slept)


def test_realtime_driver_does_not_sleep_after_slow_tick():
    clock = FakeClock()
    d = RealtimeDriver(refresh_hz=50.0, clock=clock, sleep=clock.sleep)

    def tick():
        clock.now += 0.05  # slower than the refresh period
        d.request(tick)

    d.request(tick)
    d.run(max_ticks=4)
    assert clock.slept == []


def test_realtime_driver_rejects_bad_rate():
    with pytest.raises(ValueError):
        RealtimeDriver(refresh_hz=0)
