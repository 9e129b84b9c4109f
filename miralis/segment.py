"""Memory segments and PMP address encodings."""

from __future__ import annotations

from dataclasses import dataclass

USIZE_MAX = (1 << 64) - 1
"""Largest 64-bit address."""


def build_napot(start: int, size: int) -> int | None:
    """Build a NAPOT pmpaddr value for the region ``[start, start + size)``.

    The size must be a power of two of at least 8 and the start must be
    aligned on it; otherwise ``None`` is returned. A region starting at 0 with
    size ``USIZE_MAX`` covers the whole address space.
    """
    if start == 0 and size == USIZE_MAX:
        return USIZE_MAX
    if size < 8:
        return None
    if size & (size - 1):
        return None
    if start & (size - 1):
        return None
    return (start >> 2) | ((size - 1) >> 3)


def build_tor(until: int) -> int:
    """Build a TOR pmpaddr value whose range ends at ``until``."""
    return until >> 2


@dataclass(frozen=True)
class Segment:
    """A segment of memory, clamped so that its end fits in 64 bits."""

    start: int = 0
    size: int = 0

    def __post_init__(self) -> None:
        if self.start < 0 or self.size < 0:
            raise ValueError("segment start and size must not be negative")
        if self.start > USIZE_MAX:
            raise ValueError(f"segment start out of range: {self.start:#x}")
        end = min(self.start + self.size, USIZE_MAX)
        object.__setattr__(self, "size", end - self.start)

    def end(self) -> int:
        """Return the end address of the segment (exclusive)."""
        end = self.start + self.size
        if end > USIZE_MAX:
            raise ValueError("Invalid segment size")
        return end

    def overlap(self, other: Segment) -> bool:
        """Whether the two segments overlap."""
        return other.end() > self.start and other.start < self.end()

    def contain(self, other: Segment) -> bool:
        """Whether ``other`` lies entirely within this segment."""
        return other.start >= self.start and other.end() <= self.end()