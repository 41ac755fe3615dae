"""Incremental magnitude-frequency distributions.

An MFD is a discrete set of (magnitude, annual rate) bins, plus a flag
saying whether ruptures of these magnitudes float over the fault surface
or fill it entirely.
"""

import dataclasses
from collections.abc import Iterator
from typing import Self

import numpy as np
import numpy.typing as npt


def magnitude_to_moment(magnitude: npt.ArrayLike) -> np.ndarray:
    """Convert moment magnitude to seismic moment.

    Parameters
    ----------
    magnitude : array like
        The moment magnitude(s).

    Returns
    -------
    np.ndarray
        Seismic moment (Nm).
    """
    return 10 ** ((np.asarray(magnitude) + 6.03333) * 3 / 2)


@dataclasses.dataclass(frozen=True, eq=False)
class IncrementalMfd:
    """A discrete magnitude-frequency distribution.

    Attributes
    ----------
    magnitudes : np.ndarray
        Bin magnitudes, in increasing order.
    rates : np.ndarray
        Annual rate of each magnitude bin.
    floats : bool
        If True, ruptures float over the fault surface. Otherwise every
        magnitude is a single rupture that fills the whole surface.
    """

    magnitudes: np.ndarray
    rates: np.ndarray
    floats: bool = False

    def __post_init__(self) -> None:
        """Validate and freeze the bin arrays."""
        magnitudes = np.array(self.magnitudes, dtype=np.float64, ndmin=1)
        rates = np.array(self.rates, dtype=np.float64, ndmin=1)
        if magnitudes.ndim != 1 or magnitudes.shape != rates.shape:
            raise ValueError(
                "Magnitudes and rates must be one-dimensional and the same length"
                f" (got {magnitudes.shape} and {rates.shape})."
            )
        if len(magnitudes) == 0:
            raise ValueError("MFD must contain at least one magnitude bin.")
        if not (np.all(np.isfinite(magnitudes)) and np.all(np.isfinite(rates))):
            raise ValueError("MFD magnitudes and rates must be finite.")
        if np.any(rates < 0):
            raise ValueError("MFD rates must be non-negative.")
        if np.any(np.diff(magnitudes) <= 0):
            raise ValueError("MFD magnitudes must be strictly increasing.")
        magnitudes.flags.writeable = False
        rates.flags.writeable = False
        object.__setattr__(self, "magnitudes", magnitudes)
        object.__setattr__(self, "rates", rates)

    def __len__(self) -> int:
        return len(self.magnitudes)

    def __iter__(self) -> Iterator[tuple[float, float]]:
        """Iterate over (magnitude, rate) pairs in magnitude order."""
        for magnitude, rate in zip(self.magnitudes, self.rates):
            yield float(magnitude), float(rate)

    @property
    def total_rate(self) -> float:  # numpydoc ignore=RT01
        """float: The summed annual rate of all bins."""
        return float(self.rates.sum())

    @property
    def moment_rate(self) -> float:  # numpydoc ignore=RT01
        """float: The annual moment release rate (Nm/yr)."""
        return float(np.sum(magnitude_to_moment(self.magnitudes) * self.rates))

    def scale_to_moment_rate(self, moment_rate: float) -> Self:
        """Rescale the rates so the distribution releases a given moment rate.

        Parameters
        ----------
        moment_rate : float
            Target annual moment rate (Nm/yr).

        Returns
        -------
        IncrementalMfd
            A new MFD with the same magnitudes and shape.
        """
        current = self.moment_rate
        if current == 0:
            raise ValueError("Cannot scale an MFD with zero moment rate.")
        return type(self)(self.magnitudes, self.rates * moment_rate / current, self.floats)


def single(magnitude: float, rate: float, floats: bool = False) -> IncrementalMfd:
    """Create a single-magnitude (characteristic) distribution.

    Parameters
    ----------
    magnitude : float
        The characteristic magnitude.
    rate : float
        The annual rate of the event.
    floats : bool, optional
        Whether the event floats over the fault surface. Default is False.

    Returns
    -------
    IncrementalMfd
        A one-bin distribution.
    """
    return IncrementalMfd(np.array([magnitude]), np.array([rate]), floats)


def gutenberg_richter(
    a_value: float,
    b_value: float,
    min_magnitude: float,
    max_magnitude: float,
    bin_width: float = 0.1,
    floats: bool = True,
) -> IncrementalMfd:
    r"""Create a discretised Gutenberg-Richter distribution.

    Bins are centred on `min_magnitude`, `min_magnitude + bin_width`, ...
    up to `max_magnitude`. Each bin's rate is the cumulative rate
    difference across the bin edges:

    rate(m) = 10^(a - b (m - \Delta m / 2)) - 10^(a - b (m + \Delta m / 2))

    Parameters
    ----------
    a_value : float
        Log10 of the annual rate of events above magnitude zero.
    b_value : float
        The Gutenberg-Richter b-value.
    min_magnitude : float
        Centre of the lowest magnitude bin.
    max_magnitude : float
        Centre of the highest magnitude bin.
    bin_width : float, optional
        Magnitude bin width. Default is 0.1.
    floats : bool, optional
        Whether the ruptures float. Default is True.

    Returns
    -------
    IncrementalMfd
        The discretised distribution.
    """
    if bin_width <= 0:
        raise ValueError("Bin width must be positive.")
    if max_magnitude < min_magnitude:
        raise ValueError("Maximum magnitude must not be less than minimum magnitude.")
    num_bins = int(np.rint((max_magnitude - min_magnitude) / bin_width)) + 1
    magnitudes = min_magnitude + np.arange(num_bins) * bin_width
    rates = 10 ** (a_value - b_value * (magnitudes - bin_width / 2)) - 10 ** (
        a_value - b_value * (magnitudes + bin_width / 2)
    )
    return IncrementalMfd(magnitudes, rates, floats)
