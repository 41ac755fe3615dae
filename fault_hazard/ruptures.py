"""Ruptures and the rupture floating algorithm.

Floating converts one magnitude-frequency distribution, evaluated against
one fault surface, into a list of discrete ruptures. A magnitude that does
not float produces a single rupture covering the whole surface. A
magnitude that floats is scaled to a rupture length and width, and that
rectangle is tiled over the surface; each tile position receives an equal
share of the magnitude bin's rate, so the floated ruptures conserve the
rate of the bin they came from.
"""

import dataclasses
import warnings
from enum import StrEnum, auto

import numpy as np

from fault_hazard.magnitude_scaling import ScalingKind, ScalingRelationship
from fault_hazard.mfd import IncrementalMfd
from fault_hazard.surface import GriddedSurface

NEGLIGIBLE_RATE = 1e-14
"""Magnitude bins with an annual rate below this produce no ruptures."""


class UnsupportedScalingError(ValueError):
    """Raised when a scaling relationship is neither length nor area based."""


class FloatStyle(StrEnum):
    """How floating ruptures are placed on a fault surface."""

    DEFAULT = auto()
    """Tile along strike and down-dip."""

    CENTERED = auto()
    """Tile along strike only, centred down-dip."""

    FULL_DOWN_DIP = auto()
    """Tile along strike with ruptures spanning the full width."""


@dataclasses.dataclass(frozen=True)
class RuptureFloating:
    """Parameters of the rupture floating model.

    Attributes
    ----------
    style : FloatStyle
        The tiling policy.
    offset : float
        Distance between subsequent floating rupture positions (km). The
        offset is snapped to the surface grid, with a minimum of one grid
        cell.
    aspect_ratio : float
        Rupture length to width ratio.
    """

    style: FloatStyle = FloatStyle.DEFAULT
    offset: float = 1.0
    aspect_ratio: float = 1.0

    def __post_init__(self) -> None:
        """Validate the floating parameters."""
        if not (np.isfinite(self.offset) and self.offset > 0):
            raise ValueError(f"Floating offset must be positive, got {self.offset}")
        if not (np.isfinite(self.aspect_ratio) and self.aspect_ratio > 0):
            raise ValueError(
                f"Rupture aspect ratio must be positive, got {self.aspect_ratio}"
            )


@dataclasses.dataclass(frozen=True)
class Rupture:
    """A single earthquake scenario.

    Attributes
    ----------
    magnitude : float
        Moment magnitude.
    rake : float
        Rake (degrees).
    rate : float
        Annual rate of occurrence.
    surface : GriddedSurface
        The ruptured surface: the whole fault surface, or a subset of it.
    """

    magnitude: float
    rake: float
    rate: float
    surface: GriddedSurface


def rupture_length(
    scaling: ScalingRelationship,
    magnitude: float,
    max_width: float,
    aspect_ratio: float,
) -> float:
    """Compute the length of a floating rupture.

    Parameters
    ----------
    scaling : ScalingRelationship
        The magnitude scaling relationship.
    magnitude : float
        Rupture magnitude.
    max_width : float
        Width of the fault surface (km).
    aspect_ratio : float
        Rupture length to width ratio.

    Returns
    -------
    float
        Rupture length (km). For area relations, the width is derived from
        the aspect ratio and clipped to `max_width` before dividing the
        area by it.

    Raises
    ------
    UnsupportedScalingError
        If the scaling relationship is not length or area based.
    """
    kind = scaling.kind
    if kind == ScalingKind.LENGTH:
        return scaling.median_scale(magnitude)
    if kind == ScalingKind.AREA:
        area = scaling.median_scale(magnitude)
        width = np.sqrt(area / aspect_ratio)
        return float(area / min(width, max_width))
    raise UnsupportedScalingError(
        f"Unsupported magnitude scaling relationship: {type(scaling).__name__}"
        f" (kind {kind!r})"
    )


def rupture_width(
    length: float, max_width: float, floating: RuptureFloating
) -> float:
    """Compute the width of a floating rupture.

    Parameters
    ----------
    length : float
        Rupture length (km).
    max_width : float
        Width of the fault surface (km).
    floating : RuptureFloating
        The floating model.

    Returns
    -------
    float
        Rupture width (km). Full down-dip ruptures get twice the surface
        width; the surface tiling clips it back to the full surface.
    """
    width = min(length / floating.aspect_ratio, max_width)
    if floating.style == FloatStyle.FULL_DOWN_DIP:
        width = 2 * max_width
    return width


def float_ruptures(
    mfd: IncrementalMfd,
    surface: GriddedSurface,
    rake: float,
    scaling: ScalingRelationship,
    floating: RuptureFloating,
) -> list[Rupture]:
    """Generate the ruptures for a magnitude-frequency distribution.

    Parameters
    ----------
    mfd : IncrementalMfd
        The magnitude-frequency distribution.
    surface : GriddedSurface
        The fault surface.
    rake : float
        Rake of the ruptures (degrees).
    scaling : ScalingRelationship
        Scaling relationship used to size floating ruptures.
    floating : RuptureFloating
        The floating model.

    Returns
    -------
    list[Rupture]
        Ruptures in magnitude bin order. Floating ruptures from one bin
        are ordered by tile index.

    Warns
    -----
    UserWarning
        If a floating rupture is longer than the surface and is clipped.
    """
    ruptures = []
    for magnitude, rate in mfd:
        if rate < NEGLIGIBLE_RATE:
            continue

        if not mfd.floats:
            ruptures.append(Rupture(magnitude, rake, rate, surface))
            continue

        max_width = surface.width
        length = rupture_length(scaling, magnitude, max_width, floating.aspect_ratio)
        width = rupture_width(length, max_width, floating)
        if length > surface.length:
            warnings.warn(
                f"Floating M{magnitude:.2f} rupture length {length:.1f} km exceeds"
                f" the surface length {surface.length:.1f} km and will be clipped."
            )

        if floating.style == FloatStyle.CENTERED:
            num_ruptures = surface.num_subset_surfaces_along_length(
                length, floating.offset
            )
            subsets = (
                surface.nth_subset_surface_centered_down_dip(
                    length, width, floating.offset, n
                )
                for n in range(num_ruptures)
            )
        else:
            num_ruptures = surface.num_subset_surfaces(length, width, floating.offset)
            subsets = (
                surface.nth_subset_surface(length, width, floating.offset, n)
                for n in range(num_ruptures)
            )

        rupture_rate = rate / num_ruptures
        ruptures.extend(
            Rupture(magnitude, rake, rupture_rate, subset) for subset in subsets
        )
    return ruptures
