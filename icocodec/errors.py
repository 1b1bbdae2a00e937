"""
Error types for the ICO codec.
Load failures share IconLoadError so callers can catch one type.
"""

from typing import List, Optional


class IconCodecError(Exception):
    """Base class for every error raised by the codec."""


class IconLoadError(IconCodecError):
    """A load failed as a whole."""


class FormatError(IconLoadError):
    """The ICO header is structurally invalid."""


class NoDecodableImageError(IconLoadError):
    """Every directory entry failed to decode."""

    def __init__(self, message: str, failures: Optional[List["EntryDecodeError"]] = None):
        super().__init__(message)
        self.failures = list(failures or [])


class EntryDecodeError(IconCodecError):
    """One directory entry could not be decoded."""

    def __init__(self, index: int, message: str):
        super().__init__(f"entry {index}: {message}")
        self.index = index


class TruncatedStreamError(EntryDecodeError):
    """An entry's declared payload runs past the end of the stream."""


class UnsupportedSizeError(IconCodecError, ValueError):
    """Encode was requested with a size selector that is not recognised."""


class OperationCancelled(IconCodecError):
    """The caller's cancellation check fired between entries or sizes."""
