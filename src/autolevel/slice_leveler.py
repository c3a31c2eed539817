#!/usr/bin/env python3
"""
AutoLevel - Slice Leveler
Per-slice linear contrast stretch ("autolevel") for raster slices.

Based on the AutoLevel_Slice ImageJ plugin:
- First pass finds the minimum and maximum sample actually present
- Second pass remaps every sample so min -> black level and max -> white level
- RGB slices are split into R, G and B and each channel is stretched on its own
- Each slice is leveled using only its own statistics

Buffers are mutated in place. The caller keeps ownership of the storage.
"""

import logging
from dataclasses import dataclass

import numpy as np

from .encodings import Encoding
from .errors import DegenerateRange, SampleBufferError
from .numba_utils import remap_float, remap_integer, scan_float, scan_integer

# Configure logging
logger = logging.getLogger(__name__)

DEGENERATE_POLICIES = ("warn", "ignore", "raise")

RGB_CHANNELS = ("R", "G", "B")
ALPHA_MASK = np.uint32(0xFF000000)


@dataclass(frozen=True)
class SliceRange:
    """Observed value range of one slice or one RGB channel."""

    minimum: float
    maximum: float
    gradient: float | None
    channel: str | None = None

    @property
    def degenerate(self) -> bool:
        return self.gradient is None


class SliceLeveler:
    """
    Linear per-slice contrast stretch over GRAY8, GRAY16, GRAY32 and RGB.

    The leveler holds no state between calls; one instance can be shared by
    threads as long as each buffer is handed to exactly one of them.
    """

    def __init__(self, on_degenerate: str = "warn"):
        """
        Initialize Slice Leveler.

        Args:
            on_degenerate: What to do with a flat slice or channel, whose
                gradient is undefined: 'warn' | 'ignore' | 'raise'. 'warn' and
                'ignore' leave the samples untouched.
        """
        if on_degenerate not in DEGENERATE_POLICIES:
            raise ValueError(
                f"Invalid on_degenerate. Must be one of: {list(DEGENERATE_POLICIES)}"
            )
        self.on_degenerate = on_degenerate

    def process(
        self, buffer, encoding, width: int | None = None, height: int | None = None
    ) -> None:
        """
        Level one slice in place.

        Args:
            buffer: Numpy array or writable buffer object holding the samples
            encoding: Encoding member, name, or ImageJ type code
            width: Optional slice width, checked against the buffer length
            height: Optional slice height, checked against the buffer length

        Raises:
            UnsupportedEncoding: If the encoding is not one of the four kinds
            SampleBufferError: If the buffer cannot be leveled in place
            DegenerateRange: If the slice is flat and on_degenerate='raise'
        """
        self.level(buffer, encoding, width, height)

    def level(
        self, buffer, encoding, width: int | None = None, height: int | None = None
    ) -> tuple[SliceRange, ...]:
        """
        Level one slice in place and report the range found per channel.

        Returns:
            One SliceRange for gray slices, three (R, G, B) for RGB slices,
            and an empty tuple for an empty buffer.
        """
        encoding = Encoding.coerce(encoding)
        array = self._as_array(buffer)

        if encoding is Encoding.RGB:
            return self._level_rgb(array, width, height)

        samples = self._unsigned_samples(array, encoding)
        self._check_dimensions(samples.size, width, height)
        if samples.size == 0:
            return ()

        copied = False
        if samples.flags.c_contiguous:
            flat = samples.reshape(-1)
        elif samples.flags.f_contiguous:
            flat = samples.ravel(order="F")
        else:
            # strided views are leveled on a copy and written back
            flat = np.ascontiguousarray(samples).reshape(-1)
            copied = True

        if not encoding.is_integer:
            ranges = (self._level_float(flat),)
        else:
            ranges = (self._level_integer(flat, encoding.white_level),)

        if copied:
            samples[...] = flat.reshape(samples.shape)
        return ranges

    # ------------------------------------------------------------------
    # Per-encoding procedures
    # ------------------------------------------------------------------

    def _level_integer(
        self, pixels: np.ndarray, white: int, channel: str | None = None
    ) -> SliceRange:
        """GRAY8 / GRAY16 and one RGB channel: stretch to [0, white]."""
        lowest, highest = scan_integer(pixels, white)
        lowest, highest = int(lowest), int(highest)

        if highest == lowest:
            self._handle_degenerate(lowest, channel)
            return SliceRange(lowest, highest, None, channel)

        gradient = float(white) / float(highest - lowest)
        remap_integer(pixels, lowest, gradient)
        return SliceRange(lowest, highest, gradient, channel)

    def _level_float(self, pixels: np.ndarray) -> SliceRange:
        """GRAY32: stretch to the unit interval without rounding."""
        lowest, highest = scan_float(pixels)
        lowest, highest = float(lowest), float(highest)

        if highest == lowest:
            self._handle_degenerate(lowest)
            return SliceRange(lowest, highest, None)

        gradient = 1.0 / (highest - lowest)
        remap_float(pixels, lowest, gradient)
        return SliceRange(lowest, highest, gradient)

    def _level_rgb(self, array: np.ndarray, width, height) -> tuple[SliceRange, ...]:
        """
        Split into R, G, B byte channels, level each, then write them back.

        Nothing is written back unless all three channels were leveled, so a
        failure in one channel leaves the slice as it was.
        """
        if array.dtype == np.uint8:
            if array.ndim == 1 and width is not None and height is not None:
                # interleaved R,G,B,R,G,B... bytes
                if array.size != 3 * width * height:
                    raise SampleBufferError(
                        f"Buffer holds {array.size} bytes, expected 3x{width}x{height}"
                    )
                if not array.flags.c_contiguous:
                    raise SampleBufferError("Interleaved RGB buffers must be contiguous")
                array = array.reshape(-1, 3)
            if array.ndim < 2 or array.shape[-1] not in (3, 4):
                raise SampleBufferError(
                    "RGB byte buffers must be channel-last with 3 or 4 channels, "
                    f"got shape {array.shape}"
                )
            self._check_dimensions(array.size // array.shape[-1], width, height)
            channels = [
                np.ascontiguousarray(array[..., c]).reshape(-1) for c in range(3)
            ]
        elif array.dtype in (np.dtype(np.int32), np.dtype(np.uint32)):
            packed = array.view(np.uint32)
            self._check_dimensions(packed.size, width, height)
            channels = [
                ((packed >> shift) & 0xFF).astype(np.uint8).reshape(-1)
                for shift in (16, 8, 0)
            ]
        else:
            raise SampleBufferError(
                f"RGB buffers must be uint8 channels or packed int32, got {array.dtype}"
            )

        if channels[0].size == 0:
            return ()

        ranges = tuple(
            self._level_integer(samples, 255, name)
            for samples, name in zip(channels, RGB_CHANNELS)
        )

        if array.dtype == np.uint8:
            pixel_shape = array.shape[:-1]
            for c, samples in enumerate(channels):
                array[..., c] = samples.reshape(pixel_shape)
        else:
            red, green, blue = (
                samples.reshape(packed.shape).astype(np.uint32) for samples in channels
            )
            packed[...] = (packed & ALPHA_MASK) | (red << 16) | (green << 8) | blue

        return ranges

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _handle_degenerate(self, value, channel: str | None = None) -> None:
        if self.on_degenerate == "raise":
            raise DegenerateRange(value, channel)
        if self.on_degenerate == "warn":
            where = f" channel {channel}" if channel else ""
            logger.warning(
                f"Flat slice{where} (every sample = {value}), left unchanged"
            )

    @staticmethod
    def _as_array(buffer) -> np.ndarray:
        """View the caller's buffer as a writable numpy array without copying."""
        if isinstance(buffer, np.ndarray):
            array = buffer
        else:
            try:
                view = memoryview(buffer)
            except TypeError as e:
                raise SampleBufferError(
                    f"{type(buffer).__name__} does not expose a sample buffer"
                ) from e
            array = np.asarray(view)

        if not array.flags.writeable:
            raise SampleBufferError("Sample buffer is read-only")
        return array

    @staticmethod
    def _unsigned_samples(array: np.ndarray, encoding: Encoding) -> np.ndarray:
        """Unsigned view of a gray buffer that writes through to it."""
        if array.dtype not in encoding.storage_dtypes:
            raise SampleBufferError(
                f"{encoding.name} buffers must be one of "
                f"{[str(d) for d in encoding.storage_dtypes]}, got {array.dtype}"
            )

        # signed storage is reinterpreted, never sign-extended
        if array.dtype == np.int8:
            array = array.view(np.uint8)
        elif array.dtype == np.int16:
            array = array.view(np.uint16)

        return array

    @staticmethod
    def _check_dimensions(pixel_count: int, width, height) -> None:
        if width is None and height is None:
            return
        if width is None or height is None:
            raise SampleBufferError("width and height must be given together")
        if width < 0 or height < 0 or width * height != pixel_count:
            raise SampleBufferError(
                f"Buffer holds {pixel_count} pixels, expected {width}x{height}"
            )
