import logging
from dataclasses import dataclass
from pathlib import Path

import numpy as np
import psutil
from PIL import Image, ImageSequence

from .encodings import Encoding, encoding_for_mode

logger = logging.getLogger(__name__)

BYTES_PER_PIXEL = {"L": 1, "I;16": 2, "I;16L": 2, "I;16B": 2, "F": 4, "RGB": 3, "RGBA": 4}


@dataclass
class LoadedStack:
    """Decoded frames of one image file, slice axis first."""

    data: np.ndarray
    encoding: Encoding
    mode: str

    @property
    def slice_count(self) -> int:
        return self.data.shape[0]


def _available_ram_mb() -> float:
    return psutil.virtual_memory().available / 2**20


def load_stack(file_path) -> LoadedStack:
    """
    Decode every frame of a (multi-page) image into an (N, H, W[, C]) array.
    """
    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"Image not found: {file_path}")

    with Image.open(path) as img:
        mode = img.mode
        encoding = encoding_for_mode(mode)
        width, height = img.size
        n_frames = getattr(img, "n_frames", 1)

        estimated_size_mb = (
            width * height * BYTES_PER_PIXEL[mode] * n_frames / (1024 * 1024)
        )
        available_ram_mb = _available_ram_mb()

        # only warns; the stack is still decoded into RAM
        threshold_mb = available_ram_mb * 0.5

        logger.info(
            f"Image Size: {width}x{height}x{n_frames} {mode} (~{estimated_size_mb:.2f} MB)"
        )
        if estimated_size_mb > threshold_mb:
            logger.warning(
                f"Stack needs ~{estimated_size_mb:.2f} MB, more than half of the "
                f"available {available_ram_mb:.2f} MB"
            )

        frames = []
        for number, frame in enumerate(ImageSequence.Iterator(img), start=1):
            if frame.mode != mode or frame.size != (width, height):
                raise ValueError(
                    f"Frame {number} is {frame.mode} {frame.size}, "
                    f"expected {mode} {(width, height)}"
                )
            pixels = np.array(frame)
            # big-endian 16-bit frames are converted to native byte order
            frames.append(pixels.astype(pixels.dtype.newbyteorder("="), copy=False))

    return LoadedStack(np.stack(frames), encoding, mode)


def save_stack(file_path, data: np.ndarray, encoding) -> None:
    """Encode frames back to an image file, one page per slice."""
    encoding = Encoding.coerce(encoding)
    if data.ndim < 3 or data.shape[0] == 0:
        raise ValueError(f"Expected an (N, H, W[, C]) stack, got shape {data.shape}")

    images = [Image.fromarray(np.ascontiguousarray(frame)) for frame in data]
    first, rest = images[0], images[1:]

    logger.info(f"Saving {len(images)} {encoding.name} slice(s) to {file_path}")
    if rest:
        first.save(file_path, save_all=True, append_images=rest)
    else:
        first.save(file_path)
