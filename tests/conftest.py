import struct

import numpy as np
import pytest

from icocodec import debug_log
from icocodec.raster import RasterImage


def gradient_image(width, height=None):
    """Opaque RGBA gradient, different at every pixel of small images."""
    height = width if height is None else height
    ys, xs = np.mgrid[0:height, 0:width]
    arr = np.zeros((height, width, 4), dtype=np.uint8)
    arr[..., 0] = (xs * 255 // max(width - 1, 1)).astype(np.uint8)
    arr[..., 1] = (ys * 255 // max(height - 1, 1)).astype(np.uint8)
    arr[..., 2] = ((xs + ys) % 256).astype(np.uint8)
    arr[..., 3] = 255
    return RasterImage(arr)


def bitmap_fragment(image):
    """Legacy ICO payload: BITMAPINFOHEADER, bottom-up BGRA rows, AND mask."""
    width, height = image.size
    header = struct.pack('<IiiHHIIiiII',
        40,              # biSize
        width,           # biWidth
        height * 2,      # biHeight (XOR + AND masks)
        1,               # biPlanes
        32,              # biBitCount
        0,               # biCompression (BI_RGB)
        0,               # biSizeImage
        0, 0,            # biXPelsPerMeter, biYPelsPerMeter
        0, 0             # biClrUsed, biClrImportant
    )
    bgra = image.pixels[::-1, :, [2, 1, 0, 3]]
    and_mask = b'\x00' * (((width + 31) // 32) * 4 * height)
    return header + bgra.tobytes() + and_mask


def build_ico(entries, image_type=1):
    """
    Assemble an ICO by hand.

    entries: (width, height, bpp, payload) tuples; payloads are laid out in order.
    """
    data = struct.pack('<HHH', 0, image_type, len(entries))
    offset = 6 + 16 * len(entries)
    for width, height, bpp, payload in entries:
        data += struct.pack('<BBBBHHII', width % 256, height % 256, 0, 0, 1, bpp, len(payload), offset)
        offset += len(payload)
    for *_, payload in entries:
        data += payload
    return data


def read_records(data):
    count = struct.unpack_from('<H', data, 4)[0]
    return [struct.unpack_from('<BBBBHHII', data, 6 + 16 * i) for i in range(count)]


@pytest.fixture(autouse=True)
def reset_debug_log():
    yield
    debug_log.set_debug(False)
    debug_log.set_log_sink(None)
