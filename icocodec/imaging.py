"""
Pillow-backed collaborators for the ICO codec: resizing, PNG encode/decode,
native ICO decoding of single-entry blobs, and square canvas padding.
"""

import io

from PIL import Image

from .raster import RasterImage

PNG_SIGNATURE = b'\x89PNG\r\n\x1a\n'


def resize_image(image: RasterImage, width: int, height: int) -> RasterImage:
    """Resample ``image`` to exactly ``width`` x ``height``."""
    if image.size == (width, height):
        return RasterImage(image.pixels.copy())
    resized = image.to_pil().resize((width, height), Image.Resampling.LANCZOS)
    return RasterImage.from_pil(resized)


def encode_png(image: RasterImage) -> bytes:
    buffer = io.BytesIO()
    image.to_pil().save(buffer, format="PNG")
    return buffer.getvalue()


def decode_png(data: bytes) -> RasterImage:
    with Image.open(io.BytesIO(data), formats=["PNG"]) as img:
        img.load()
        return RasterImage.from_pil(img)


def decode_native_icon(data: bytes) -> RasterImage:
    """
    Decode a well-formed single-entry ICO blob.

    Pillow's ICO reader handles the DIB fragment itself: the doubled height,
    the AND mask, and the alpha byte of 32-bit entries. When the bitmap
    header disagrees with the directory record the bitmap wins.
    """
    with Image.open(io.BytesIO(data), formats=["ICO"]) as img:
        img.load()
        return RasterImage.from_pil(img)


def center_on_square(image: RasterImage) -> RasterImage:
    """Copy ``image`` onto a transparent max(w, h) square, centred."""
    if image.is_square():
        return image
    side = max(image.width, image.height)
    canvas = RasterImage.new(side, side)
    x = (side - image.width) // 2
    y = (side - image.height) // 2
    canvas.pixels[y:y + image.height, x:x + image.width] = image.pixels
    return canvas
