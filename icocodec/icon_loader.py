"""
Icon loading for the ICO codec.
Parses the directory, decodes every entry it can, and picks the canonical image.
"""

from dataclasses import dataclass, field
from typing import BinaryIO, Callable, List, Optional, Sequence

from .debug_log import _dbg
from .directory import IcoDirectory, parse_directory
from .entry_decoder import DecodedIcon, IconEntryDecoder
from .errors import EntryDecodeError, NoDecodableImageError, OperationCancelled
from .raster import RasterImage


class BestEntrySelector:
    """Largest area wins; equal areas are split by the reported bit depth."""

    @staticmethod
    def sort_key(candidate: DecodedIcon):
        # Python ints do not overflow, so 256x256 and larger pairs are safe
        return candidate.width * candidate.height, candidate.bits_per_pixel

    def order(self, candidates: Sequence[DecodedIcon]) -> List[DecodedIcon]:
        return sorted(candidates, key=self.sort_key, reverse=True)

    def select(self, candidates: Sequence[DecodedIcon]) -> DecodedIcon:
        if not candidates:
            raise NoDecodableImageError("icon contains no decodable image")
        return self.order(candidates)[0]


@dataclass
class LoadResult:
    directory: IcoDirectory
    candidates: List[DecodedIcon] = field(default_factory=list)
    failures: List[EntryDecodeError] = field(default_factory=list)
    best: Optional[DecodedIcon] = None


class IconLoader:
    """Decodes an ICO stream into its best image."""

    def __init__(
        self,
        entry_decoder: Optional[IconEntryDecoder] = None,
        selector: Optional[BestEntrySelector] = None,
        status_callback: Optional[Callable[[str], None]] = None,
        is_cancelled: Optional[Callable[[], bool]] = None,
    ):
        """
        Initialize the loader.

        Args:
            entry_decoder: per-entry decoder, defaults to the Pillow-backed one
            selector: best-entry policy
            status_callback: Optional callback for status updates
            is_cancelled: Callable checked between entries
        """
        self.entry_decoder = entry_decoder or IconEntryDecoder()
        self.selector = selector or BestEntrySelector()
        self.status_callback = status_callback
        self.is_cancelled = is_cancelled

    def _set_status(self, text: str):
        if self.status_callback:
            self.status_callback(text)

    def _check_cancelled(self):
        if self.is_cancelled and self.is_cancelled():
            raise OperationCancelled("icon load cancelled")

    def decode_all(self, stream: BinaryIO) -> LoadResult:
        """
        Decode every directory entry, recording failures instead of raising.

        Raises:
            FormatError: the header could not be read
            OperationCancelled: the cancellation check fired
        """
        directory = parse_directory(stream)
        result = LoadResult(directory=directory)
        total = len(directory.entries)
        _dbg("ico load", {
            "image_type": directory.image_type,
            "declared": directory.declared_count,
            "valid": total,
        })

        for index, entry in enumerate(directory.entries):
            self._check_cancelled()
            self._set_status(f"Decoding entry {index + 1}/{total} ({entry.width}x{entry.height})")
            try:
                result.candidates.append(self.entry_decoder.decode(stream, entry, index))
            except EntryDecodeError as e:
                _dbg("ico load entry failed", str(e))
                result.failures.append(e)

        if result.candidates:
            result.best = self.selector.select(result.candidates)
        return result

    def load(self, stream: BinaryIO) -> RasterImage:
        """
        Load the best image from ``stream``.

        Raises:
            FormatError: the header could not be read
            NoDecodableImageError: no entry decoded
        """
        result = self.decode_all(stream)
        if result.best is None:
            if result.failures:
                reasons = "; ".join(str(f) for f in result.failures)
                raise NoDecodableImageError(
                    f"none of {len(result.failures)} icon entries could be decoded: {reasons}",
                    result.failures,
                ) from result.failures[-1]
            raise NoDecodableImageError("icon directory has no valid entries")

        best = result.best
        self._set_status(f"Selected {best.width}x{best.height} @ {best.bits_per_pixel} bpp")
        # only the chosen buffer outlives the call
        result.candidates.clear()
        return best.image
