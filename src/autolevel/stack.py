"""
Stack driver: levels every slice of a multi-frame image independently.

Slices are numbered from 1, as ImageJ numbers stack slices. Each slice is one
SliceLeveler call; a failure is recorded for that slice and the rest of the
stack is still leveled.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

import numpy as np

from .encodings import Encoding
from .errors import AutoLevelError
from .slice_leveler import SliceLeveler, SliceRange

logger = logging.getLogger(__name__)


@dataclass
class StackLevelingResult:
    """Outcome of leveling a stack, keyed by 1-based slice number."""

    encoding: Encoding
    slice_count: int
    ranges: dict[int, tuple[SliceRange, ...]] = field(default_factory=dict)
    failures: dict[int, AutoLevelError] = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return not self.failures

    @property
    def degenerate_slices(self) -> list[int]:
        """Slices with at least one flat channel, left unchanged."""
        return sorted(
            number
            for number, ranges in self.ranges.items()
            if any(r.degenerate for r in ranges)
        )

    def __repr__(self):
        return (
            f"StackLevelingResult({self.encoding.name}, slices={self.slice_count}, "
            f"failed={sorted(self.failures)})"
        )


def iter_slices(stack):
    """Yield (slice_number, buffer) pairs, numbering from 1."""
    for index in range(len(stack)):
        yield index + 1, stack[index]


def level_stack(
    stack,
    encoding,
    workers: int = 1,
    leveler: SliceLeveler | None = None,
) -> StackLevelingResult:
    """
    Level each slice of a stack in place using only that slice's own range.

    Args:
        stack: Numpy array whose first axis is the slice axis, or a sequence
            of per-slice buffers
        encoding: Encoding shared by every slice
        workers: Number of threads; slices are independent, so the result
            does not depend on this value
        leveler: SliceLeveler to use (default: one with on_degenerate='warn')

    Returns:
        StackLevelingResult with per-slice ranges and failures

    Raises:
        UnsupportedEncoding: Before any slice is touched
    """
    encoding = Encoding.coerce(encoding)
    if workers < 1:
        raise ValueError("workers must be at least 1")
    if isinstance(stack, np.ndarray) and stack.ndim == 0:
        raise ValueError("Stack must have a slice axis")

    leveler = leveler or SliceLeveler()
    result = StackLevelingResult(encoding=encoding, slice_count=len(stack))

    logger.info(
        f"Leveling {result.slice_count} slice(s) - Encoding: {encoding.name}, "
        f"Workers: {workers}"
    )

    def level_one(numbered):
        number, buffer = numbered
        try:
            return number, leveler.level(buffer, encoding), None
        except AutoLevelError as e:
            return number, None, e

    slices = iter_slices(stack)
    if workers == 1:
        _collect(result, map(level_one, slices))
    else:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            _collect(result, executor.map(level_one, slices))

    if result.failures:
        logger.warning(
            f"Leveling finished with {len(result.failures)} failed slice(s): "
            f"{sorted(result.failures)}"
        )
    else:
        logger.info("Stack leveling completed successfully")
    return result


def _collect(result: StackLevelingResult, outcomes) -> None:
    for number, ranges, error in outcomes:
        if error is not None:
            logger.error(f"Slice {number}/{result.slice_count} failed: {error}")
            result.failures[number] = error
        else:
            logger.debug(f"Slice {number}/{result.slice_count} leveled: {ranges}")
            result.ranges[number] = ranges
