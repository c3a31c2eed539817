"""
Basic usage examples for AutoLevel.

Demonstrates leveling a single slice, a stack, and an image file.
"""

import numpy as np
from PIL import Image

from autolevel import Encoding, SliceLeveler, level_slice, level_stack
from autolevel.io_utils import load_stack, save_stack


def example_single_slice():
    """Level one 8-bit slice in place."""
    print("=== Single Slice ===")

    pixels = np.array([[50, 80], [120, 200]], dtype=np.uint8)
    print(f"Before: {pixels.ravel().tolist()}")

    level_slice(pixels, Encoding.GRAY8, width=2, height=2)
    print(f"After:  {pixels.ravel().tolist()}")


def example_slice_statistics():
    """Inspect the range each RGB channel was stretched from."""
    print("\n=== RGB Channel Ranges ===")

    image = np.random.randint(60, 180, (64, 64, 3), dtype=np.uint8)
    ranges = SliceLeveler().level(image, Encoding.RGB)

    for r in ranges:
        print(f"  {r.channel}: {r.minimum}-{r.maximum}, gradient {r.gradient:.3f}")


def example_stack():
    """Level a 16-bit stack, each slice with its own range."""
    print("\n=== 16-bit Stack ===")

    stack = np.stack(
        [np.random.randint(low, low + 2000, (32, 32)).astype(np.uint16)
         for low in (1000, 8000, 30000)]
    )
    result = level_stack(stack, Encoding.GRAY16, workers=3)

    for number, ranges in result.ranges.items():
        print(f"  Slice {number}: {ranges[0].minimum}-{ranges[0].maximum}")
    print(f"Output range: {stack.min()}-{stack.max()}")


def example_file(path="example_stack.tif"):
    """Write a small TIFF stack, level it, and save it back."""
    print("\n=== TIFF File ===")

    frames = [Image.fromarray(np.random.randint(40, 90, (48, 48), dtype=np.uint8))
              for _ in range(4)]
    frames[0].save(path, save_all=True, append_images=frames[1:])

    stack = load_stack(path)
    level_stack(stack.data, stack.encoding)
    save_stack("example_stack_autolevel.tif", stack.data, stack.encoding)
    print("Saved: example_stack_autolevel.tif")


if __name__ == "__main__":
    example_single_slice()
    example_slice_statistics()
    example_stack()
    example_file()
