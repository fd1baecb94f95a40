import numpy as np
import pytest

from roi import frame_to_hsv, is_valid_frame, lower_third, roi_offset, roi_to_frame


@pytest.mark.parametrize("height,expected", [(720, 480), (480, 320), (240, 160), (10, 6), (1, 0), (3, 2)])
def test_roi_offset_is_floor_two_thirds(height, expected):
    assert roi_offset(height, 2.0 / 3.0) == expected


def test_lower_third_is_a_view():
    hsv = np.zeros((90, 40, 3), dtype=np.uint8)
    roi, y0 = lower_third(hsv)
    assert y0 == 60
    assert roi.shape == (30, 40, 3)
    assert np.shares_memory(roi, hsv)


def test_roi_to_frame_adds_offset():
    assert roi_to_frame(12.5, 3.0, 160) == (12.5, 163.0)


def test_rgba_and_bgr_agree(vision):
    rgb = np.zeros((2, 2, 3), dtype=np.uint8)
    rgb[0, 0] = (255, 0, 0)
    rgb[1, 1] = (0, 140, 255)
    rgba = np.concatenate([rgb, np.full((2, 2, 1), 7, np.uint8)], axis=2)
    bgr = rgb[:, :, ::-1].copy()

    a = frame_to_hsv(vision, rgba, "RGBA")
    b = frame_to_hsv(vision, bgr, "BGR")
    assert a.shape == (2, 2, 3)
    np.testing.assert_array_equal(a, b)
    assert tuple(a[0, 0]) == (0, 255, 255)
    assert a.max() <= 255 and a[:, :, 0].max() < 180


def test_unknown_order(vision):
    with pytest.raises(ValueError):
        frame_to_hsv(vision, np.zeros((2, 2, 3), np.uint8), "YUV")


def test_is_valid_frame():
    assert is_valid_frame(np.zeros((4, 4, 4), np.uint8))
    assert is_valid_frame(np.zeros((4, 4, 3), np.uint8))
    assert not is_valid_frame(None)
    assert not is_valid_frame([[1, 2, 3]])
    assert not is_valid_frame(np.zeros((0, 4, 4), np.uint8))
    assert not is_valid_frame(np.zeros((4, 0, 4), np.uint8))
    assert not is_valid_frame(np.zeros((4, 4, 1), np.uint8))
    assert not is_valid_frame(np.zeros((4, 4, 4), np.uint16))
