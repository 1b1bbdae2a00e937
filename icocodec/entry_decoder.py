"""
Per-entry image decoding for ICO files.
Dispatches each payload to the PNG or the legacy bitmap path by sniffing its first bytes.
"""

import os
import struct
from dataclasses import dataclass
from typing import BinaryIO, Callable, Optional

from .debug_log import _dbg
from .directory import HEADER_SIZE, RECORD_SIZE, IconDirectoryEntry, pack_header
from .errors import EntryDecodeError, TruncatedStreamError
from .imaging import PNG_SIGNATURE, decode_native_icon, decode_png
from .raster import RasterImage

SINGLE_ENTRY_OFFSET = HEADER_SIZE + RECORD_SIZE  # 22
BITMAPINFOHEADER_SIZE = 40
DIB_BIT_COUNT_OFFSET = 14


@dataclass
class DecodedIcon:
    """One successfully decoded directory entry."""
    width: int
    height: int
    bits_per_pixel: int
    image: RasterImage
    index: int = 0

    @property
    def area(self) -> int:
        return self.width * self.height


def is_png_payload(payload: bytes) -> bool:
    return payload[:len(PNG_SIGNATURE)] == PNG_SIGNATURE


def dib_bit_count(payload: bytes) -> Optional[int]:
    """biBitCount of a payload that starts with a BITMAPINFOHEADER, else None."""
    if len(payload) < DIB_BIT_COUNT_OFFSET + 2:
        return None
    header_size, = struct.unpack_from('<I', payload, 0)
    if header_size < BITMAPINFOHEADER_SIZE:
        return None
    bpp, = struct.unpack_from('<H', payload, DIB_BIT_COUNT_OFFSET)
    return bpp


def _stream_length(stream: BinaryIO) -> int:
    position = stream.tell()
    try:
        return stream.seek(0, os.SEEK_END)
    finally:
        stream.seek(position)


def read_payload(stream: BinaryIO, entry: IconDirectoryEntry, index: int = 0) -> bytes:
    """
    Read exactly ``entry.byte_length`` bytes at ``entry.offset``.

    The declared range is checked against the stream length before any buffer
    is allocated, so a crafted record cannot force a huge read.

    Raises:
        TruncatedStreamError: the range runs past the end of the stream
    """
    length = _stream_length(stream)
    if entry.end > length:
        raise TruncatedStreamError(
            index,
            f"payload {entry.offset}+{entry.byte_length} runs past end of stream ({length} bytes)",
        )
    position = stream.tell()
    try:
        stream.seek(entry.offset)
        payload = stream.read(entry.byte_length)
    finally:
        stream.seek(position)
    if len(payload) != entry.byte_length:
        raise TruncatedStreamError(index, f"short read: {len(payload)} of {entry.byte_length} bytes")
    return payload


class PngEntryDecoder:
    """Decodes PNG-compressed entries."""

    def __init__(self, png_decode: Callable[[bytes], RasterImage] = decode_png):
        self.png_decode = png_decode

    def decode(self, payload: bytes, entry: IconDirectoryEntry) -> RasterImage:
        return self.png_decode(payload)


class BitmapEntryDecoder:
    """
    Decodes legacy entries that hold a raw DIB fragment.

    The fragment is not decodable on its own, so it is wrapped back into a
    one-entry ICO (header plus a record rebuilt from ``entry``) and passed to
    the native icon decoder.
    """

    def __init__(self, native_icon_decode: Callable[[bytes], RasterImage] = decode_native_icon):
        self.native_icon_decode = native_icon_decode

    @staticmethod
    def wrap(payload: bytes, entry: IconDirectoryEntry) -> bytes:
        bpp = dib_bit_count(payload)
        if bpp is None:
            bpp = entry.bits_per_pixel
        elif bpp != entry.bits_per_pixel:
            _dbg("ico entry", f"directory says {entry.bits_per_pixel} bpp, bitmap header says {bpp}")
        record = IconDirectoryEntry(
            width=entry.width,
            height=entry.height,
            color_count=entry.color_count,
            reserved=entry.reserved,
            color_planes=entry.color_planes,
            bits_per_pixel=bpp,
            byte_length=len(payload),
            offset=SINGLE_ENTRY_OFFSET,
        ).to_record()
        return pack_header(1) + record + payload

    def decode(self, payload: bytes, entry: IconDirectoryEntry) -> RasterImage:
        return self.native_icon_decode(self.wrap(payload, entry))


class IconEntryDecoder:
    """Turns one directory entry into a DecodedIcon."""

    def __init__(
        self,
        png_decoder: Optional[PngEntryDecoder] = None,
        bitmap_decoder: Optional[BitmapEntryDecoder] = None,
    ):
        self.png_decoder = png_decoder or PngEntryDecoder()
        self.bitmap_decoder = bitmap_decoder or BitmapEntryDecoder()

    def decode(self, stream: BinaryIO, entry: IconDirectoryEntry, index: int = 0) -> DecodedIcon:
        """
        Decode one entry of ``stream``.

        Args:
            stream: seekable stream holding the whole ICO
            entry: directory record to decode
            index: position of the record, used in error messages

        Returns:
            DecodedIcon sized from the decoded pixels

        Raises:
            TruncatedStreamError: payload range is outside the stream
            EntryDecodeError: payload could not be decoded
        """
        payload = read_payload(stream, entry, index)
        return self.decode_payload(payload, entry, index)

    def decode_payload(self, payload: bytes, entry: IconDirectoryEntry, index: int = 0) -> DecodedIcon:
        if is_png_payload(payload):
            kind, decoder = "png", self.png_decoder
        else:
            kind, decoder = "bitmap", self.bitmap_decoder
        try:
            image = decoder.decode(payload, entry)
        except EntryDecodeError:
            raise
        except Exception as e:
            raise EntryDecodeError(index, f"{kind} payload could not be decoded: {e}") from e

        if image.size != (entry.width, entry.height):
            _dbg("ico entry", f"entry {index}: directory says {entry.width}x{entry.height}, "
                              f"{kind} data is {image.width}x{image.height}")
        return DecodedIcon(
            width=image.width,
            height=image.height,
            bits_per_pixel=entry.bits_per_pixel,
            image=image,
            index=index,
        )
