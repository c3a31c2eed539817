"""
AutoLevel - per-slice linear contrast stretch for multi-frame raster images

Based on the AutoLevel_Slice ImageJ plugin. Every slice is stretched using
only its own minimum and maximum, for 8-bit, 16-bit, 32-bit float and RGB
slices.
"""

__version__ = "0.1.0"

from .encodings import Encoding as Encoding
from .encodings import encoding_for_mode as encoding_for_mode
from .errors import AutoLevelError as AutoLevelError
from .errors import DegenerateRange as DegenerateRange
from .errors import SampleBufferError as SampleBufferError
from .errors import UnsupportedEncoding as UnsupportedEncoding
from .slice_leveler import SliceLeveler as SliceLeveler
from .slice_leveler import SliceRange as SliceRange
from .stack import StackLevelingResult as StackLevelingResult
from .stack import level_stack as level_stack


def level_slice(buffer, encoding, width=None, height=None):
    """
    Level one slice in place with the default leveler.

    Flat slices are left unchanged and logged as a warning.
    """
    SliceLeveler().process(buffer, encoding, width, height)


__all__ = [
    # Core
    "SliceLeveler",
    "SliceRange",
    "Encoding",
    "encoding_for_mode",
    "level_slice",
    # Stack driver
    "level_stack",
    "StackLevelingResult",
    # Errors
    "AutoLevelError",
    "UnsupportedEncoding",
    "DegenerateRange",
    "SampleBufferError",
]
