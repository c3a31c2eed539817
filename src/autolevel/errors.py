"""
Exceptions raised by the autolevel package.
"""


class AutoLevelError(Exception):
    """Base class for all leveling errors."""


class UnsupportedEncoding(AutoLevelError, ValueError):
    """The encoding tag is not one of GRAY8, GRAY16, GRAY32 or RGB."""

    def __init__(self, encoding):
        super().__init__(f"Unsupported encoding: {encoding!r}")
        self.encoding = encoding


class SampleBufferError(AutoLevelError, ValueError):
    """The sample buffer cannot be leveled in place for its encoding."""


class DegenerateRange(AutoLevelError):
    """All samples of a slice (or of one RGB channel) share a single value."""

    def __init__(self, value, channel: str | None = None):
        where = f" in channel {channel}" if channel else ""
        super().__init__(f"Flat slice{where}: every sample equals {value}")
        self.value = value
        self.channel = channel
