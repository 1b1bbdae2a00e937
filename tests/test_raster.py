import numpy as np
import pytest
from PIL import Image

from conftest import gradient_image
from icocodec.imaging import center_on_square, decode_png, encode_png, resize_image
from icocodec.raster import RasterImage


def test_new_fills_every_pixel():
    image = RasterImage.new(3, 2, (1, 2, 3, 4))
    assert image.size == (3, 2)
    assert image.pixels.shape == (2, 3, 4)
    assert image.pixel(2, 1) == (1, 2, 3, 4)


@pytest.mark.parametrize("shape", [(4, 4), (4, 4, 3), (0, 4, 4)])
def test_rejects_bad_shapes(shape):
    with pytest.raises(ValueError):
        RasterImage(np.zeros(shape, dtype=np.uint8))


def test_pil_conversion_keeps_orientation_and_channels():
    pil = Image.new("RGB", (5, 3), (0, 0, 0))
    pil.putpixel((4, 0), (10, 20, 30))
    image = RasterImage.from_pil(pil)

    assert image.size == (5, 3)
    assert image.pixel(4, 0) == (10, 20, 30, 255)
    assert image.to_pil().getpixel((4, 0)) == (10, 20, 30, 255)


def test_from_pil_buffer_is_writable():
    image = RasterImage.from_pil(Image.new("RGBA", (2, 2)))
    image.pixels[0, 0] = (9, 9, 9, 9)
    assert image.pixel(0, 0) == (9, 9, 9, 9)


def test_png_round_trip_keeps_alpha():
    image = gradient_image(8)
    image.pixels[3, 5, 3] = 17
    assert decode_png(encode_png(image)) == image


def test_resize_to_same_size_copies():
    image = gradient_image(8)
    copy = resize_image(image, 8, 8)
    assert copy == image
    assert copy.pixels is not image.pixels


def test_resize_changes_dimensions():
    assert resize_image(gradient_image(64), 16, 16).size == (16, 16)


def test_center_on_square_pads_tall_images():
    tall = RasterImage.new(2, 6, (255, 255, 255, 255))
    square = center_on_square(tall)

    assert square.size == (6, 6)
    assert square.pixel(0, 0) == (0, 0, 0, 0)
    assert square.pixel(2, 0) == (255, 255, 255, 255)
    assert square.pixel(3, 5) == (255, 255, 255, 255)
    assert square.pixel(4, 3) == (0, 0, 0, 0)


def test_center_on_square_leaves_squares_alone():
    image = gradient_image(4)
    assert center_on_square(image) is image
