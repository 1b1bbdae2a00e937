import io
import struct

import pytest

from conftest import build_ico, gradient_image, read_records
from iconfile import encode_icon, load_icon, load_icon_bytes, load_icon_candidates, save_icon
from icocodec.errors import NoDecodableImageError
from icocodec.icon_encoder import CANONICAL_SIZES, ImageSize
from icocodec.imaging import encode_png
from icocodec.raster import RasterImage


@pytest.mark.parametrize("size", [16, 48, 256])
def test_single_resolution_round_trip(size):
    data = encode_icon(gradient_image(300), size)
    assert len(read_records(data)) == 1

    image = load_icon_bytes(data)
    assert image.size == (size, size)


def test_round_trip_at_source_size_is_lossless():
    source = gradient_image(32)
    assert load_icon_bytes(encode_icon(source, ImageSize.ICON_32)) == source


def test_multi_resolution_round_trip():
    data = encode_icon(gradient_image(256), ImageSize.ALL)
    records = read_records(data)

    assert len(records) == 6
    offsets = [r[7] for r in records]
    assert offsets == sorted(set(offsets))
    assert records[-1][7] + records[-1][6] == len(data)

    result = load_icon_candidates(io.BytesIO(data))
    assert sorted(c.width for c in result.candidates) == list(CANONICAL_SIZES)
    assert result.best.image.size == (256, 256)


def test_save_writes_to_stream():
    out = io.BytesIO()
    save_icon(gradient_image(64), ImageSize.ICON_64, True, out)
    assert [r[0] for r in read_records(out.getvalue())] == [16, 32, 48, 64]


def test_non_square_source_is_centred():
    wide = RasterImage.new(40, 20, (255, 0, 0, 255))
    out = io.BytesIO()
    save_icon(wide, 40, False, out)
    # 40 is not a standard size, so this falls back to 32
    image = load_icon(io.BytesIO(out.getvalue()))

    assert image.size == (32, 32)
    assert image.pixel(16, 0)[3] == 0
    assert image.pixel(16, 16) == (255, 0, 0, 255)


def test_malformed_entry_is_dropped_silently():
    good = encode_png(gradient_image(16))
    data = struct.pack('<HHH', 0, 1, 2)
    data += struct.pack('<BBBBHHII', 32, 32, 0, 0, 1, 32, len(good), 0)
    data += struct.pack('<BBBBHHII', 16, 16, 0, 0, 1, 32, len(good), 38)
    data += good

    result = load_icon_candidates(io.BytesIO(data))
    assert len(result.directory.entries) == 1
    assert result.failures == []
    assert load_icon(io.BytesIO(data)).size == (16, 16)


def test_undecodable_icon_fails_to_load():
    data = build_ico([(16, 16, 32, b'not an image at all' * 4)])
    with pytest.raises(NoDecodableImageError):
        load_icon(io.BytesIO(data))


def test_load_leaves_stream_position_alone():
    data = encode_icon(gradient_image(16), 16)
    stream = io.BytesIO(data)
    stream.seek(3)
    load_icon(stream)
    assert stream.tell() == 3
