"""
Pixel encodings understood by the slice leveler.

The four encodings mirror the ImageJ image types GRAY8, GRAY16, GRAY32 and
COLOR_RGB. Each one fixes the black and white levels a slice is stretched to
and the numpy storage types a buffer may use.
"""

from enum import Enum

import numpy as np

from .errors import UnsupportedEncoding

# ImagePlus.getType() codes
IMAGEJ_TYPE_CODES = {
    0: "GRAY8",
    1: "GRAY16",
    2: "GRAY32",
    # 3 is COLOR_256 (indexed color), which has no leveling procedure
    4: "RGB",
}

PIL_MODES = {
    "L": "GRAY8",
    "I;16": "GRAY16",
    "I;16L": "GRAY16",
    "I;16B": "GRAY16",
    "F": "GRAY32",
    "RGB": "RGB",
    "RGBA": "RGB",
}


class Encoding(Enum):
    """Sample representation of one slice."""

    GRAY8 = "gray8"
    GRAY16 = "gray16"
    GRAY32 = "gray32"
    RGB = "rgb"

    @property
    def black_level(self):
        return 0.0 if self is Encoding.GRAY32 else 0

    @property
    def white_level(self):
        """Largest value of one channel: 255, 65535, or 1.0 for float."""
        if self is Encoding.GRAY16:
            return 65535
        if self is Encoding.GRAY32:
            return 1.0
        return 255

    @property
    def is_integer(self) -> bool:
        return self is not Encoding.GRAY32

    @property
    def storage_dtypes(self) -> tuple[np.dtype, ...]:
        """Numpy dtypes a buffer of this encoding may be stored in."""
        if self is Encoding.GRAY8:
            return (np.dtype(np.uint8), np.dtype(np.int8))
        if self is Encoding.GRAY16:
            return (np.dtype(np.uint16), np.dtype(np.int16))
        if self is Encoding.GRAY32:
            return (np.dtype(np.float32), np.dtype(np.float64))
        # channel-last bytes, or packed 0xAARRGGBB ints
        return (np.dtype(np.uint8), np.dtype(np.int32), np.dtype(np.uint32))

    @classmethod
    def coerce(cls, value) -> "Encoding":
        """
        Resolve an encoding from a member, a name or an ImageJ type code.

        Raises:
            UnsupportedEncoding: If the value names none of the four encodings
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            raise UnsupportedEncoding(value)
        if isinstance(value, (int, np.integer)):
            name = IMAGEJ_TYPE_CODES.get(int(value))
            if name is None:
                raise UnsupportedEncoding(value)
            return cls[name]
        if isinstance(value, str):
            key = value.strip().upper()
            if key == "COLOR_RGB":
                key = "RGB"
            if key in cls.__members__:
                return cls[key]
        raise UnsupportedEncoding(value)


def encoding_for_mode(mode: str) -> Encoding:
    """Map a Pillow image mode to the encoding its pixels are leveled as."""
    name = PIL_MODES.get(mode)
    if name is None:
        raise UnsupportedEncoding(mode)
    return Encoding[name]
