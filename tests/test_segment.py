import pytest

from miralis.segment import USIZE_MAX, Segment, build_napot, build_tor


@pytest.mark.parametrize("size", [0, 1, 2, 4, 7])
def test_napot_size_too_small(size):
    assert build_napot(0x1000, size) is None


@pytest.mark.parametrize(
    "start,size", [(0x1001, 8), (0x1002, 8), (0x1004, 8), (0x1008, 16)]
)
def test_napot_unaligned(start, size):
    assert build_napot(start, size) is None


@pytest.mark.parametrize(
    "size,expected", [(8, 0x400), (16, 0x401), (32, 0x403)]
)
def test_napot_valid(size, expected):
    assert build_napot(0x1000, size) == expected


def test_napot_not_power_of_two():
    assert build_napot(0x1000, 24) is None


def test_napot_whole_memory():
    assert build_napot(0, USIZE_MAX) == USIZE_MAX


def test_build_tor():
    assert build_tor(0x1000) == 0x400
    assert build_tor(0) == 0


@pytest.mark.parametrize(
    "start,size,expected",
    [
        (10, 5, False),
        (10, 10, False),
        (10, 15, True),
        (10, 20, True),
        (10, 30, True),
        (20, 10, True),
        (20, 20, True),
        (25, 2, True),
        (25, 5, True),
        (25, 10, True),
        (30, 10, False),
        (35, 10, False),
    ],
)
def test_segment_overlap(start, size, expected):
    segment = Segment(20, 10)
    assert segment.overlap(Segment(start, size)) is expected


def test_overflow_segment_is_clamped():
    segment = Segment(USIZE_MAX - 10, 100)
    assert segment.size == 10
    assert segment.end() == USIZE_MAX


def test_segment_end():
    assert Segment(20, 10).end() == 30


def test_segment_contain():
    segment = Segment(20, 10)
    assert segment.contain(Segment(20, 10))
    assert segment.contain(Segment(22, 5))
    assert not segment.contain(Segment(15, 10))
    assert not segment.contain(Segment(25, 10))


def test_segment_equality():
    assert Segment(1, 2) == Segment(1, 2)
    assert Segment() == Segment(0, 0)


def test_negative_segment_rejected():
    with pytest.raises(ValueError):
        Segment(-1, 4)