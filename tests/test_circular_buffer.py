import pytest

from agrodispenser.circular_buffer import CircularBuffer


def test_empty_buffer_average_is_zero():
    buf = CircularBuffer(4)
    assert buf.average() == 0
    assert len(buf) == 0


def test_push_keeps_insertion_order():
    buf = CircularBuffer(4)
    for value in (1, 2, 3):
        buf.push(value)
    assert list(buf) == [1, 2, 3]
    assert len(buf) == 3


def test_overflow_drops_oldest():
    buf = CircularBuffer(3)
    for value in (1, 2, 3, 4, 5):
        buf.push(value)
    assert list(buf) == [3, 4, 5]
    assert buf.get(0) == 3
    assert buf.get(2) == 5


def test_average_after_wraparound_forgets_old_values():
    buf = CircularBuffer(3)
    buf.push(100)
    for _ in range(3):
        buf.push(7)
    assert buf.average() == 7


def test_average_of_equal_values():
    buf = CircularBuffer(8)
    for _ in range(5):
        buf.push(10)
    assert buf.average() == 10


def test_average_truncates_toward_zero():
    buf = CircularBuffer(2)
    buf.push(-3)
    buf.push(-4)
    assert buf.average() == -3


def test_get_out_of_range_returns_zero():
    buf = CircularBuffer(3)
    buf.push(9)
    assert buf.get(1) == 0
    assert buf.get(-1) == 0


def test_clear_resets_everything():
    buf = CircularBuffer(3)
    buf.push(5)
    buf.push(6)
    buf.clear()
    assert len(buf) == 0
    assert list(buf) == []
    assert buf.average() == 0


def test_invalid_capacity():
    with pytest.raises(ValueError):
        CircularBuffer(0)


@pytest.mark.parametrize("value", [32768, -32769])
def test_out_of_range_sample_rejected(value):
    buf = CircularBuffer(2)
    with pytest.raises(ValueError):
        buf.push(value)


def test_extreme_samples_accepted():
    buf = CircularBuffer(2)
    buf.push(-32768)
    buf.push(32767)
    assert list(buf) == [-32768, 32767]