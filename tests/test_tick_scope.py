import numpy as np
import pytest

from tick_scope import TickScope


def test_release_on_normal_exit():
    with TickScope() as scope:
        buf = scope.hold(np.zeros((4, 4), np.uint8))
        assert buf.shape == (4, 4)
        assert scope.live == 1
    assert scope.live == 0
    assert scope.peak == 1


def test_release_on_exception():
    with pytest.raises(RuntimeError, match="boom"):
        with TickScope() as scope:
            scope.hold(object())
            scope.hold(object())
            raise RuntimeError("boom")
    assert scope.live == 0
    assert scope.peak == 2


def test_hold_after_release_fails():
    scope = TickScope()
    scope.release()
    with pytest.raises(RuntimeError):
        scope.hold(1)
