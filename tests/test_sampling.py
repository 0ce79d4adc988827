import numpy as np
import pytest
from PIL import Image

from asciiit.bitmap import Bitmap
from asciiit.sampling import apply_contrast, brightness, downscale, grid_size, quantize, render_frame
from asciiit.viewport import ViewportState
from tests.conftest import solid


def test_grid_size_from_density():
    assert grid_size((100, 100), 1, 2.0, 200, 10) == (20, 10)
    assert grid_size((100, 100), 10, 2.0, 200, 10) == (200, 100)
    assert grid_size((300, 200), 1, 2.0, 200, 10) == (20, 7)


def test_grid_size_from_target_width_keeps_aspect():
    assert grid_size((300, 200), 5, 2.0, 200, 10, target_width=160) == (160, 53)


def test_grid_size_explicit_height_wins():
    assert grid_size((300, 200), 5, 2.0, 200, 10, target_width=160, target_height=12) == (160, 12)


def test_grid_size_never_zero():
    assert grid_size((1000, 1), 1, 2.0, 200, 10) == (20, 1)


def test_grid_size_cell_aspect_changes_rows_only():
    assert grid_size((100, 100), 10, 1.0, 200, 10) == (200, 200)


def test_brightness_is_floored_channel_average():
    pixels = np.array([[[10, 20, 31, 255], [255, 255, 255, 0], [0, 0, 0, 255]]], dtype=np.uint8)
    np.testing.assert_allclose(brightness(pixels), [[20 / 255, 1.0, 0.0]])


def test_brightness_ignores_alpha():
    pixels = np.array([[[200, 200, 200, 0]]], dtype=np.uint8)
    assert brightness(pixels)[0, 0] == pytest.approx(200 / 255)


def test_contrast_one_is_identity():
    values = np.linspace(0, 1, 11)
    np.testing.assert_allclose(apply_contrast(values, 1.0), values)


def test_contrast_is_gamma():
    np.testing.assert_allclose(apply_contrast(np.array([0.25, 0.0, 1.0]), 2.0), [0.5, 0.0, 1.0])


def test_quantize_endpoints_and_floor():
    np.testing.assert_array_equal(quantize(np.array([0.0, 1.0, 0.5, 0.999]), 10), [0, 9, 4, 8])


def test_render_frame_without_viewport_is_the_bitmap():
    bitmap = solid(7, 3, (1, 2, 3))
    assert render_frame(bitmap, None) is bitmap.image


def test_render_frame_places_zoomed_image():
    bitmap = solid(100, 100, (255, 0, 0))
    frame = render_frame(bitmap, ViewportState(container_width=100, container_height=100, zoom=0.5))
    assert frame.size == (100, 100)
    assert frame.getpixel((50, 50)) == (255, 0, 0, 255)
    assert frame.getpixel((5, 5)) == (0, 0, 0, 0)
    assert frame.getpixel((95, 95)) == (0, 0, 0, 0)


def test_render_frame_crops_to_container():
    # Left half black, right half white; zoom 2 shows only the middle of the image
    image = Image.new("RGB", (100, 100), (0, 0, 0))
    image.paste((255, 255, 255), (50, 0, 100, 100))
    frame = render_frame(Bitmap.from_image(image), ViewportState(container_width=100, container_height=100, zoom=2.0))
    assert frame.getpixel((10, 50))[:3] == (0, 0, 0)
    assert frame.getpixel((90, 50))[:3] == (255, 255, 255)
    assert frame.getpixel((10, 50))[3] == 255


def test_render_frame_panned_off_screen_is_transparent():
    bitmap = solid(50, 50, (255, 255, 255))
    frame = render_frame(bitmap, ViewportState(container_width=50, container_height=50, pan_x=500))
    assert np.asarray(frame)[..., 3].max() == 0


def test_render_frame_scale_multiplies_resolution():
    bitmap = solid(40, 20, (9, 9, 9))
    frame = render_frame(bitmap, ViewportState(container_width=40, container_height=40), scale=2)
    assert frame.size == (80, 80)
    assert frame.getpixel((40, 40)) == (9, 9, 9, 255)
    assert frame.getpixel((40, 5)) == (0, 0, 0, 0)


def test_downscale_one_pixel_per_cell():
    frame = Image.new("RGBA", (64, 48), (10, 20, 30, 255))
    pixels = downscale(frame, 8, 3)
    assert pixels.shape == (3, 8, 4)
    assert pixels.dtype == np.uint8
    np.testing.assert_array_equal(pixels[0, 0], [10, 20, 30, 255])


def test_grid_size_rounds_half_rows_up():
    assert grid_size((100, 50), 5, 2.0, 200, 10, target_width=10) == (10, 3)
    assert grid_size((100, 30), 5, 2.0, 200, 10, target_width=10) == (10, 2)


def test_downscale_zeroes_colour_of_transparent_pixels():
    frame = Image.new("RGBA", (4, 2), (255, 255, 255, 0))
    np.testing.assert_array_equal(downscale(frame, 4, 2), np.zeros((2, 4, 4), dtype=np.uint8))
    np.testing.assert_array_equal(downscale(frame, 2, 1), np.zeros((1, 2, 4), dtype=np.uint8))
