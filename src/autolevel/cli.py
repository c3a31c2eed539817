"""
Command line interface for AutoLevel.

Levels every slice of a (multi-page) image independently and writes the
result to a new file.
"""

import argparse
import logging
import sys
from pathlib import Path

from . import __version__
from .errors import AutoLevelError
from .io_utils import load_stack, save_stack
from .slice_leveler import DEGENERATE_POLICIES, SliceLeveler
from .stack import level_stack

ABOUT = (
    "AutoLevel Slice\n"
    "Stretches each slice on its own so its darkest sample becomes black and "
    "its brightest becomes white (0-255 for 8-bit, 0-65535 for 16-bit, "
    "0.0-1.0 for 32-bit, per channel for RGB)."
)


def _default_output(input_path: Path) -> Path:
    suffix = input_path.suffix if input_path.suffix else ".tif"
    return input_path.with_name(f"{input_path.stem}_autolevel{suffix}")


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="AutoLevel - per-slice linear contrast stretch",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Level every slice of a stack
  autolevel stack.tif

  # Use four threads and stop on flat slices
  autolevel stack.tif --workers 4 --on-degenerate raise -o leveled.tif
        """,
    )

    parser.add_argument("input", nargs="?", help="Input image file")

    parser.add_argument(
        "-o", "--output", help="Output file path (default: <input>_autolevel)"
    )

    parser.add_argument(
        "-w",
        "--workers",
        type=int,
        default=1,
        help="Number of slices leveled in parallel (default: 1)",
    )

    parser.add_argument(
        "--on-degenerate",
        choices=DEGENERATE_POLICIES,
        default="warn",
        help="Handling of flat slices: warn and skip, skip silently, or fail (default: warn)",
    )

    parser.add_argument(
        "--about", action="store_true", help="Describe the filter and exit"
    )

    parser.add_argument(
        "--version", action="version", version=f"AutoLevel {__version__}"
    )

    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if args.about:
        print(ABOUT)
        return 0

    if not args.input:
        parser.error("Input image file is required")

    if args.workers < 1:
        parser.error("--workers must be at least 1")

    input_path = Path(args.input)
    if not input_path.exists():
        print(f"Error: Input file '{input_path}' not found", file=sys.stderr)
        return 1

    output_path = Path(args.output) if args.output else _default_output(input_path)

    try:
        stack = load_stack(input_path)
        if args.verbose:
            print(
                f"Loaded {stack.slice_count} {stack.encoding.name} slice(s), "
                f"shape {stack.data.shape}"
            )

        result = level_stack(
            stack.data,
            stack.encoding,
            workers=args.workers,
            leveler=SliceLeveler(on_degenerate=args.on_degenerate),
        )

        if result.failures:
            for number, error in sorted(result.failures.items()):
                print(f"Error: slice {number}: {error}", file=sys.stderr)
            return 1

        save_stack(output_path, stack.data, stack.encoding)

    except (AutoLevelError, OSError, ValueError) as e:
        print(f"Error processing image: {e}", file=sys.stderr)
        if args.verbose:
            import traceback

            traceback.print_exc()
        return 1

    if args.verbose and result.degenerate_slices:
        print(f"Flat slices left unchanged: {result.degenerate_slices}")

    print(f"Successfully leveled '{input_path}' -> '{output_path}'")
    return 0


if __name__ == "__main__":
    sys.exit(main())
