"""
Icon encoding for the ICO codec.
Resolves the requested sizes, resizes and PNG-compresses the source, and writes the ICO.
"""

import io
from concurrent.futures import ThreadPoolExecutor
from enum import Enum
from typing import BinaryIO, Callable, List, Optional, Sequence, Tuple, Union

from .debug_log import _dbg
from .directory import write_directory
from .errors import OperationCancelled, UnsupportedSizeError
from .imaging import encode_png, resize_image
from .raster import RasterImage

CANONICAL_SIZES: Tuple[int, ...] = (16, 32, 48, 64, 128, 256)
DEFAULT_SIZE = 32


class ImageSize(Enum):
    AUTO = "auto"
    ICON_16 = 16
    ICON_32 = 32
    ICON_48 = 48
    ICON_64 = 64
    ICON_128 = 128
    ICON_256 = 256
    ALL = "all"


SizeRequest = Union[ImageSize, int, str, None]


def parse_image_size(value: SizeRequest, strict: bool = False) -> ImageSize:
    """
    Map a loose size request onto an ImageSize.

    Accepts enum members, pixel counts, and strings such as ``"48"``,
    ``"48x48"``, ``"Icon_48x48"``, ``"auto"`` or ``"all"``. Anything else
    becomes ``AUTO`` unless ``strict`` is set.

    Raises:
        UnsupportedSizeError: ``strict`` is set and the request is unknown
    """
    if isinstance(value, ImageSize):
        return value
    if value is None:
        return ImageSize.AUTO
    if isinstance(value, int) and not isinstance(value, bool):
        for member in ImageSize:
            if member.value == value:
                return member
    elif isinstance(value, str):
        key = value.strip().lower()
        if key.startswith("icon_"):
            key = key[len("icon_"):]
        if key in ("auto", "all"):
            return ImageSize(key)
        edge = key.split("x", 1)[0]
        if edge.isdigit():
            for member in ImageSize:
                if member.value == int(edge):
                    return member

    if strict:
        raise UnsupportedSizeError(f"unsupported icon size: {value!r}")
    _dbg("ico size", f"unsupported icon size {value!r}, falling back to {DEFAULT_SIZE}x{DEFAULT_SIZE}")
    return ImageSize.AUTO


def size_pixels(size: ImageSize) -> int:
    """Edge length for a single-size selector; AUTO and ALL map to 32."""
    if isinstance(size.value, int):
        return size.value
    return DEFAULT_SIZE


def resolve_sizes(size: SizeRequest, stack: bool = False, strict: bool = False) -> Tuple[int, ...]:
    """
    Work out the SizeSet for one save.

    ``ALL`` always yields every canonical size. With ``stack`` the canonical
    sizes up to the nominal size are used, smallest first. Otherwise a single
    size is returned.
    """
    selector = parse_image_size(size, strict=strict)
    if selector is ImageSize.ALL:
        return CANONICAL_SIZES
    cap = size_pixels(selector)
    if stack:
        return tuple(s for s in CANONICAL_SIZES if s <= cap)
    return (cap,)


class IconEncoder:
    """Writes a square RasterImage as a single- or multi-resolution ICO."""

    def __init__(
        self,
        resize: Callable[[RasterImage, int, int], RasterImage] = resize_image,
        png_encode: Callable[[RasterImage], bytes] = encode_png,
        max_concurrency: int = 1,
        status_callback: Optional[Callable[[str], None]] = None,
        is_cancelled: Optional[Callable[[], bool]] = None,
    ):
        """
        Initialize the encoder.

        Args:
            resize: maps (image, width, height) to a resized image
            png_encode: maps an image to PNG bytes
            max_concurrency: worker threads for per-size resize and compression
            status_callback: Optional callback for status updates
            is_cancelled: Callable checked before each size
        """
        self.resize = resize
        self.png_encode = png_encode
        self.max_concurrency = max(1, int(max_concurrency))
        self.status_callback = status_callback
        self.is_cancelled = is_cancelled

    def _set_status(self, text: str):
        if self.status_callback:
            self.status_callback(text)

    def _render(self, image: RasterImage, size: int) -> bytes:
        if self.is_cancelled and self.is_cancelled():
            raise OperationCancelled("icon save cancelled")
        self._set_status(f"Encoding {size}x{size}")
        return self.png_encode(self.resize(image, size, size))

    def render_blocks(self, image: RasterImage, sizes: Sequence[int]) -> List[Tuple[int, bytes]]:
        """Resize and compress ``image`` once per size, in the given order."""
        if not image.is_square():
            raise ValueError(f"icon source must be square, got {image.width}x{image.height}")
        if not sizes:
            raise ValueError("at least one icon size is required")

        if self.max_concurrency > 1 and len(sizes) > 1:
            with ThreadPoolExecutor(max_workers=min(self.max_concurrency, len(sizes))) as pool:
                blobs = list(pool.map(lambda s: self._render(image, s), sizes))
        else:
            blobs = [self._render(image, s) for s in sizes]
        return list(zip(sizes, blobs))

    def write(self, image: RasterImage, sizes: Sequence[int], output: BinaryIO) -> int:
        """
        Encode ``image`` at every size in ``sizes`` and write one ICO to ``output``.

        All PNG blocks are produced before the header, since each record's
        offset depends on the lengths of the blocks before it.

        Returns:
            Number of bytes written
        """
        blocks = self.render_blocks(image, sizes)
        total = write_directory(output, blocks)
        _dbg("ico save", [{"size": s, "bytes": len(data)} for s, data in blocks])
        return total

    def write_multi(self, image: RasterImage, sizes: Sequence[int], output: BinaryIO) -> int:
        return self.write(image, sizes, output)

    def write_single(self, image: RasterImage, size: SizeRequest, output: BinaryIO) -> int:
        """Write a one-entry ICO; unknown selectors fall back to 32x32."""
        return self.write(image, (size_pixels(parse_image_size(size)),), output)

    def save(self, image: RasterImage, size: SizeRequest, stack: bool, output: BinaryIO) -> int:
        selector = parse_image_size(size)
        if selector is ImageSize.ALL or stack:
            return self.write_multi(image, resolve_sizes(selector, stack), output)
        return self.write_single(image, selector, output)

    def encode(self, image: RasterImage, size: SizeRequest = ImageSize.ICON_256, stack: bool = False) -> bytes:
        buffer = io.BytesIO()
        self.save(image, size, stack, buffer)
        return buffer.getvalue()
