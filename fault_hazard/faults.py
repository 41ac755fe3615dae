"""Validation of fault geometry parameters.

Every function in this module returns its (possibly normalised) input when
the value lies inside the accepted range and raises `ValueError`
otherwise. Fault sources run these checks on construction, so a bad
geometry never reaches the rupture floating code.
"""

from typing import NamedTuple

import numpy as np
import numpy.typing as npt


class Range(NamedTuple):
    """A numeric interval with configurable bound inclusivity."""

    lower: float
    upper: float
    lower_closed: bool = True
    upper_closed: bool = True

    def __contains__(self, value: float) -> bool:
        above = value >= self.lower if self.lower_closed else value > self.lower
        below = value <= self.upper if self.upper_closed else value < self.upper
        return bool(above and below)

    def __str__(self) -> str:
        left = "[" if self.lower_closed else "("
        right = "]" if self.upper_closed else ")"
        return f"{left}{self.lower}, {self.upper}{right}"


DIP_RANGE = Range(0.0, 90.0, lower_closed=False)
WIDTH_RANGE = Range(0.0, 60.0, lower_closed=False)
DEPTH_RANGE = Range(0.0, 700.0)
RAKE_RANGE = Range(-180.0, 180.0)
SPACING_RANGE = Range(0.1, 20.0)


def validate(value: float, valid_range: Range, label: str) -> float:
    """Check that a value lies within a range.

    Parameters
    ----------
    value : float
        The value to check.
    valid_range : Range
        The accepted range.
    label : str
        Name of the parameter, used in the error message.

    Returns
    -------
    float
        The value, as a float.

    Raises
    ------
    ValueError
        If the value is not finite or lies outside `valid_range`.
    """
    value = float(value)
    if not np.isfinite(value) or value not in valid_range:
        raise ValueError(f"{label} {value} is outside the valid range {valid_range}")
    return value


def validate_dip(dip: float) -> float:
    """Validate a fault dip (degrees)."""
    return validate(dip, DIP_RANGE, "Dip")


def validate_width(width: float) -> float:
    """Validate a fault down-dip width (km)."""
    return validate(width, WIDTH_RANGE, "Width")


def validate_depth(depth: float) -> float:
    """Validate a depth (km)."""
    return validate(depth, DEPTH_RANGE, "Depth")


def validate_rake(rake: float) -> float:
    """Validate a rake angle (degrees)."""
    return validate(rake, RAKE_RANGE, "Rake")


def validate_spacing(spacing: float) -> float:
    """Validate a surface grid spacing (km)."""
    return validate(spacing, SPACING_RANGE, "Grid spacing")


def validate_trace(trace: npt.ArrayLike) -> np.ndarray:
    """Validate a fault trace.

    Parameters
    ----------
    trace : array like
        The fault trace as (lat, lon) rows, ordered along strike.

    Returns
    -------
    np.ndarray
        A read-only float array of shape (n, 2).

    Raises
    ------
    ValueError
        If the trace has fewer than two points, the wrong shape, non-finite
        values, out of range coordinates or repeated consecutive points.
    """
    trace = np.array(trace, dtype=np.float64)
    if trace.ndim != 2 or trace.shape[1] != 2:
        raise ValueError(
            f"Trace must have shape (n, 2) of (lat, lon) points, got {trace.shape}"
        )
    if len(trace) < 2:
        raise ValueError("Trace must contain at least two points")
    if not np.all(np.isfinite(trace)):
        raise ValueError("Trace contains non-finite coordinates")
    if np.any(np.abs(trace[:, 0]) > 90) or np.any(np.abs(trace[:, 1]) > 180):
        raise ValueError("Trace coordinates are outside the valid lat, lon range")
    if np.any(np.all(np.diff(trace, axis=0) == 0, axis=1)):
        raise ValueError("Trace contains repeated consecutive points")
    trace.flags.writeable = False
    return trace


def validate_name(name: str) -> str:
    """Validate a source or source set name."""
    if not isinstance(name, str) or not name.strip():
        raise ValueError(f"Name must be a non-empty string, got {name!r}")
    return name.strip()
