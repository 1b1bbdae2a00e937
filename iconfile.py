# iconfile.py
# Load and save Windows .ico files.
# Deps: Pillow, numpy (PySide6 optional, for QImage conversion)

import io
from typing import BinaryIO, Callable, Optional

from icocodec.debug_log import _dbg
from icocodec.icon_encoder import IconEncoder, ImageSize, SizeRequest
from icocodec.icon_loader import IconLoader, LoadResult
from icocodec.imaging import center_on_square
from icocodec.raster import RasterImage


# -----------------------
# Loading
# -----------------------
def load_icon(
    stream: BinaryIO,
    is_cancelled: Optional[Callable[[], bool]] = None,
    status_callback: Optional[Callable[[str], None]] = None,
) -> RasterImage:
    """Decode ``stream`` and return its largest, deepest image."""
    loader = IconLoader(status_callback=status_callback, is_cancelled=is_cancelled)
    return loader.load(stream)


def load_icon_candidates(
    stream: BinaryIO,
    is_cancelled: Optional[Callable[[], bool]] = None,
    status_callback: Optional[Callable[[str], None]] = None,
) -> LoadResult:
    loader = IconLoader(status_callback=status_callback, is_cancelled=is_cancelled)
    return loader.decode_all(stream)


def load_icon_bytes(data: bytes) -> RasterImage:
    return load_icon(io.BytesIO(data))


# -----------------------
# Saving
# -----------------------
def save_icon(
    image: RasterImage,
    size_request: SizeRequest,
    stack: bool,
    output: BinaryIO,
    max_concurrency: int = 1,
    is_cancelled: Optional[Callable[[], bool]] = None,
    status_callback: Optional[Callable[[str], None]] = None,
) -> None:
    """
    Write ``image`` to ``output`` as an ICO.

    Non-square sources are centred on a transparent square first so they are
    not stretched. ``stack`` adds every standard size up to ``size_request``.
    """
    if not image.is_square():
        _dbg("ico save", f"centering {image.width}x{image.height} source on a square canvas")
        image = center_on_square(image)
    encoder = IconEncoder(
        max_concurrency=max_concurrency,
        status_callback=status_callback,
        is_cancelled=is_cancelled,
    )
    encoder.save(image, size_request, stack, output)


def encode_icon(image: RasterImage, size_request: SizeRequest = ImageSize.ICON_256, stack: bool = False) -> bytes:
    buffer = io.BytesIO()
    save_icon(image, size_request, stack, buffer)
    return buffer.getvalue()
