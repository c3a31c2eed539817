"""
Numba-compiled two-pass kernels for per-slice leveling.

Every kernel takes a flat, contiguous sample array and works on it in place.
They release the GIL so different slices can be leveled on separate threads.
"""
import math

from numba import njit


@njit(cache=True, nogil=True)
def scan_integer(pixels, white):
    """Observed (min, max) of unsigned integer samples in [0, white]."""
    lowest = white
    highest = 0
    for pixel_pos in range(pixels.size):
        value = int(pixels[pixel_pos])
        if value < lowest:
            lowest = value
        if value > highest:
            highest = value
    return lowest, highest


@njit(cache=True, nogil=True)
def remap_integer(pixels, lowest, gradient):
    """Stretch samples so `lowest` lands on 0, rounding half up like Math.round."""
    for pixel_pos in range(pixels.size):
        scaled = (float(pixels[pixel_pos]) - lowest) * gradient
        pixels[pixel_pos] = math.floor(scaled + 0.5)


@njit(cache=True, nogil=True)
def scan_float(pixels):
    """
    Observed (min, max) of float samples, seeded with the unit interval.

    NaN and infinite samples are skipped, so they keep their value after the
    remap instead of collapsing the gradient.
    """
    lowest = 1.0
    highest = 0.0
    for pixel_pos in range(pixels.size):
        value = pixels[pixel_pos]
        if not math.isfinite(value):
            continue
        if value < lowest:
            lowest = value
        if value > highest:
            highest = value
    return lowest, highest


@njit(cache=True, nogil=True)
def remap_float(pixels, lowest, gradient):
    for pixel_pos in range(pixels.size):
        pixels[pixel_pos] = (pixels[pixel_pos] - lowest) * gradient
