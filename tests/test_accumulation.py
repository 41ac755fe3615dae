import itertools

import hypothesis.strategies as st
import numpy as np
import pytest
from hypothesis import given

from fault_hazard.accumulation import (
    BuildError,
    IncompleteBuildError,
    ReuseError,
    SingleUseBuilder,
    WriteOnceArray,
)


def test_error_hierarchy():
    assert issubclass(ReuseError, BuildError)
    assert issubclass(IncompleteBuildError, BuildError)
    assert issubclass(BuildError, RuntimeError)


def test_write_once_array():
    array = WriteOnceArray((2, 3))
    assert array.shape == (2, 3)
    assert array.size == 6
    assert array.count == 0
    for i, cell in enumerate(itertools.product(range(2), range(3))):
        array[cell] = i
    assert array.count == 6
    values = array.finish()
    assert array.finished
    assert np.array_equal(values, np.arange(6).reshape(2, 3))
    assert not values.flags.writeable


@given(st.permutations(list(itertools.product(range(2), range(3), range(4)))))
def test_fill_order_does_not_matter(cells: list[tuple[int, int, int]]):
    array = WriteOnceArray((2, 3, 4))
    for i, j, k in cells:
        array[i, j, k] = 100 * i + 10 * j + k
    expected = np.fromfunction(lambda i, j, k: 100 * i + 10 * j + k, (2, 3, 4))
    assert np.array_equal(array.finish(), expected)


def test_one_dimensional_index():
    array = WriteOnceArray((2,))
    array[1] = 2.0
    array[0] = 1.0
    assert np.array_equal(array.finish(), [1.0, 2.0])


def test_finish_twice():
    array = WriteOnceArray((1,))
    array[0] = 1.0
    array.finish()
    with pytest.raises(ReuseError, match="already been finished"):
        array.finish()


def test_write_after_finish():
    array = WriteOnceArray((1,))
    array[0] = 1.0
    array.finish()
    with pytest.raises(ReuseError, match="finished array"):
        array[0] = 2.0


def test_incomplete():
    array = WriteOnceArray((2, 3))
    for cell in list(itertools.product(range(2), range(3)))[:-1]:
        array[cell] = 1.0
    with pytest.raises(IncompleteBuildError, match="Only 5 of 6 entries have been added"):
        array.finish()
    # A failed finish leaves the array writable.
    assert not array.finished
    array[1, 2] = 1.0
    assert np.all(array.finish() == 1.0)


def test_duplicate_write():
    array = WriteOnceArray((2, 2))
    array[0, 1] = 1.0
    with pytest.raises(ReuseError, match=r"Cell \(0, 1\) has already been written"):
        array[0, 1] = 2.0
    assert array.count == 1


@pytest.mark.parametrize("index", [(2, 0), (0, 2), (-1, 0), (0,), (0, 0, 0)])
def test_out_of_bounds(index: tuple[int, ...]):
    array = WriteOnceArray((2, 2))
    with pytest.raises(IndexError):
        array[index] = 1.0
    assert array.count == 0


@pytest.mark.parametrize("shape", [(), (0,), (2, 0)])
def test_invalid_shape(shape: tuple[int, ...]):
    with pytest.raises(ValueError, match="must be positive"):
        WriteOnceArray(shape)


def test_fill_and_dtype():
    array = WriteOnceArray((1,), fill=np.nan, dtype=np.float32)
    array[0] = 0.5
    values = array.finish()
    assert values.dtype == np.float32
    assert values[0] == 0.5


class Builder(SingleUseBuilder):
    def build(self) -> str:
        self._mark_built()
        return "built"


def test_single_use_builder():
    builder = Builder()
    builder._check_unused()
    assert builder.build() == "built"
    with pytest.raises(ReuseError, match="This Builder instance has already been used"):
        builder.build()
    with pytest.raises(ReuseError):
        builder._check_unused()
    # Each instance is tracked separately.
    assert Builder().build() == "built"
