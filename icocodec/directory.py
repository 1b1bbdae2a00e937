"""
ICO directory reading and writing.
Handles the 6-byte header and the 16-byte records that locate each embedded image.
"""

import struct
from dataclasses import dataclass, field
from typing import BinaryIO, List, Sequence, Tuple

from .debug_log import _dbg
from .errors import FormatError

HEADER_FORMAT = '<HHH'     # reserved, image type, count
RECORD_FORMAT = '<BBBBHHII'  # width, height, colours, reserved, planes, bpp, size, offset
HEADER_SIZE = struct.calcsize(HEADER_FORMAT)
RECORD_SIZE = struct.calcsize(RECORD_FORMAT)

ICON_TYPE = 1


@dataclass(frozen=True)
class IconDirectoryEntry:
    """One record from the ICO directory table."""
    width: int
    height: int
    color_count: int
    reserved: int
    color_planes: int
    bits_per_pixel: int
    byte_length: int
    offset: int

    @property
    def end(self) -> int:
        return self.offset + self.byte_length

    def to_record(self) -> bytes:
        return pack_record(
            self.width, self.height, self.byte_length, self.offset,
            color_count=self.color_count,
            reserved=self.reserved,
            color_planes=self.color_planes,
            bits_per_pixel=self.bits_per_pixel,
        )


@dataclass
class IcoDirectory:
    reserved: int
    image_type: int
    declared_count: int
    entries: List[IconDirectoryEntry] = field(default_factory=list)


def _dimension_byte(value: int) -> int:
    # 256 does not fit a byte; the format stores it as 0
    if not 1 <= value <= 256:
        raise ValueError(f"icon dimension must be within 1..256, got {value}")
    return 0 if value == 256 else value


def pack_header(count: int, image_type: int = ICON_TYPE) -> bytes:
    return struct.pack(HEADER_FORMAT, 0, image_type, count)


def pack_record(
    width: int,
    height: int,
    byte_length: int,
    offset: int,
    color_count: int = 0,
    reserved: int = 0,
    color_planes: int = 0,
    bits_per_pixel: int = 32,
) -> bytes:
    return struct.pack(
        RECORD_FORMAT,
        _dimension_byte(width),
        _dimension_byte(height),
        color_count,
        reserved,
        color_planes,
        bits_per_pixel,
        byte_length,
        offset,
    )


def parse_directory(stream: BinaryIO) -> IcoDirectory:
    """
    Read the ICO header and directory records from the start of ``stream``.

    Records with a zero offset or zero length are dropped. A record cut off by
    the end of the stream ends the table. The stream position is restored
    before returning.

    Raises:
        FormatError: fewer than 6 header bytes are available
    """
    start = stream.tell()
    try:
        stream.seek(0)
        header = stream.read(HEADER_SIZE)
        if len(header) < HEADER_SIZE:
            raise FormatError(f"stream too short for an ICO header ({len(header)} of {HEADER_SIZE} bytes)")

        reserved, image_type, count = struct.unpack(HEADER_FORMAT, header)
        if image_type != ICON_TYPE:
            _dbg("ico directory", f"unexpected image type {image_type}, reading it as an icon anyway")

        directory = IcoDirectory(reserved=reserved, image_type=image_type, declared_count=count)
        for index in range(count):
            record = stream.read(RECORD_SIZE)
            if len(record) < RECORD_SIZE:
                _dbg("ico directory", f"record {index} truncated, {count - index} of {count} records missing")
                break
            width, height, colors, res, planes, bpp, length, offset = struct.unpack(RECORD_FORMAT, record)
            if length == 0 or offset == 0:
                _dbg("ico directory", f"record {index} dropped (offset={offset}, length={length})")
                continue
            directory.entries.append(IconDirectoryEntry(
                width=width or 256,
                height=height or 256,
                color_count=colors,
                reserved=res,
                color_planes=planes,
                bits_per_pixel=bpp,
                byte_length=length,
                offset=offset,
            ))
        return directory
    finally:
        stream.seek(start)


def write_directory(stream: BinaryIO, blocks: Sequence[Tuple[int, bytes]]) -> int:
    """
    Write a complete ICO: header, one record per block, then the blocks.

    Args:
        stream: writable binary stream
        blocks: ``(size, image_bytes)`` pairs in directory order

    Returns:
        Number of bytes written
    """
    offset = HEADER_SIZE + RECORD_SIZE * len(blocks)
    records = []
    for size, data in blocks:
        records.append(pack_record(size, size, len(data), offset))
        offset += len(data)

    stream.write(pack_header(len(blocks)))
    for record in records:
        stream.write(record)
    for _, data in blocks:
        stream.write(data)
    return offset
