"""Write-once accumulation containers.

Every builder in the hazard pipeline follows the same two-phase contract:
a mutable, pre-sized buffer is filled by coordinate (in any order, so
independent units of work can fill disjoint cells), then `finish()` checks
that every cell was written exactly once and hands back an immutable
value. A finished buffer cannot be written to or finished again.

Violations of the contract are programmer errors. They raise subclasses
of `BuildError` and are never caught inside the package.
"""

from collections.abc import Sequence

import numpy as np
import numpy.typing as npt


class BuildError(RuntimeError):
    """Base class for misuse of a write-once container or builder."""


class ReuseError(BuildError):
    """Raised when a container is reused: finished twice, or a cell or field written twice."""


class IncompleteBuildError(BuildError):
    """Raised when a container is finished before it has been fully populated."""


class WriteOnceArray:
    """A pre-sized array whose every cell must be written exactly once.

    Parameters
    ----------
    shape : Sequence[int]
        Shape of the array. Every dimension must be positive.
    fill : float, optional
        Value of unwritten cells. Default is 0.
    dtype : npt.DTypeLike, optional
        Data type of the array. Default is float64.

    Examples
    --------
    >>> array = WriteOnceArray((2,))
    >>> array[0] = 1.0
    >>> array[1] = 2.0
    >>> array.finish()
    array([1., 2.])
    """

    def __init__(
        self,
        shape: Sequence[int],
        fill: float = 0.0,
        dtype: npt.DTypeLike = np.float64,
    ):
        shape = tuple(int(dimension) for dimension in shape)
        if not shape or any(dimension < 1 for dimension in shape):
            raise ValueError(f"Array dimensions must be positive, got {shape}")
        self._values: np.ndarray | None = np.full(shape, fill, dtype=dtype)
        self._written: np.ndarray | None = np.zeros(shape, dtype=bool)
        self._shape = shape
        self._count = 0

    @property
    def shape(self) -> tuple[int, ...]:  # numpydoc ignore=RT01
        """tuple[int, ...]: The shape of the array."""
        return self._shape

    @property
    def size(self) -> int:  # numpydoc ignore=RT01
        """int: The number of cells that must be written."""
        return int(np.prod(self._shape))

    @property
    def count(self) -> int:  # numpydoc ignore=RT01
        """int: The number of cells written so far."""
        return self._count

    @property
    def finished(self) -> bool:  # numpydoc ignore=RT01
        """bool: True if `finish()` has succeeded."""
        return self._values is None

    def _cell(self, index: int | Sequence[int]) -> tuple[int, ...]:
        """Normalise and bounds check a cell coordinate."""
        cell = (index,) if np.isscalar(index) else tuple(index)
        if len(cell) != len(self._shape):
            raise IndexError(
                f"Expected a {len(self._shape)}-dimensional index, got {index}"
            )
        if any(not 0 <= i < dimension for i, dimension in zip(cell, self._shape)):
            raise IndexError(f"Index {index} out of bounds for shape {self._shape}")
        return tuple(int(i) for i in cell)

    def __setitem__(self, index: int | Sequence[int], value: float) -> None:
        if self.finished:
            raise ReuseError("Cannot write to a finished array")
        cell = self._cell(index)
        if self._written[cell]:
            raise ReuseError(f"Cell {cell} has already been written")
        self._values[cell] = value
        self._written[cell] = True
        self._count += 1

    def finish(self) -> np.ndarray:
        """Seal the array and return its values.

        Returns
        -------
        np.ndarray
            The read-only array of values. The container keeps no
            reference to it.

        Raises
        ------
        ReuseError
            If the array has already been finished.
        IncompleteBuildError
            If any cell has not been written.
        """
        if self.finished:
            raise ReuseError("This array has already been finished")
        if self._count != self.size:
            raise IncompleteBuildError(
                f"Only {self._count} of {self.size} entries have been added"
            )
        values = self._values
        values.flags.writeable = False
        self._values = None
        self._written = None
        return values


class SingleUseBuilder:
    """Mixin for builders that may only produce one value."""

    _built: bool = False

    def _check_unused(self) -> None:
        """Raise `ReuseError` if the builder has already been used."""
        if self._built:
            raise ReuseError(
                f"This {type(self).__name__} instance has already been used"
            )

    def _mark_built(self) -> None:
        """Record that the builder has been used.

        Raises
        ------
        ReuseError
            If the builder has already been used.
        """
        self._check_unused()
        self._built = True
