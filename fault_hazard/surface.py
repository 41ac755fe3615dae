"""Gridded fault surfaces and rupture subset tiling.

A `GriddedSurface` is a regular grid of (lat, lon, depth) nodes hanging
down-dip from a fault trace. Rows run along strike and columns run
down-dip:

                     strike >
     (0, 0) ┌─────┬─────┬─────┬─────┐ (0, num_cols - 1)
            │     │     │     │     │
        dip ├─────┼─────┼─────┼─────┤
         v  │     │     │     │     │
            └─────┴─────┴─────┴─────┘ (num_rows - 1, num_cols - 1)

Floating ruptures are rectangular sub-grids of the surface. The surface
exposes two tiling policies for placing them:

- the default policy steps the sub-grid along strike and down-dip by a
  fixed offset, and
- the centred policy steps along strike only, with the sub-grid centred
  down-dip.

Distances (km) between a surface and a site are computed in an azimuthal
equidistant projection centred on the site.
"""

import dataclasses
from typing import NamedTuple, Self

import numpy as np
import numpy.typing as npt
import pyproj
import shapely

from fault_hazard import faults

_KM_TO_M = 1000
_GEOD = pyproj.Geod(ellps="sphere")


class Distances(NamedTuple):
    """Site to surface distances (km)."""

    r_jb: float
    """Joyner-Boore distance: closest distance to the surface projection."""

    r_rup: float
    """Closest distance to the rupture surface."""

    r_x: float
    """Horizontal distance from the top edge, positive on the hanging wall."""


def _grid_count(dimension: float, spacing: float) -> int:
    """Number of grid nodes needed to span `dimension` at (at most) `spacing`."""
    # Round first so that 100.00000001 / 1.0 spans 101 nodes rather than 102.
    return int(np.ceil(np.round(dimension / spacing, 6))) + 1


def _resample_trace(trace: np.ndarray, num_points: int) -> tuple[np.ndarray, float]:
    """Evenly resample a trace along its length.

    Parameters
    ----------
    trace : np.ndarray
        The trace as (lat, lon) rows.
    num_points : int
        The number of points to return, including both trace end points.

    Returns
    -------
    np.ndarray
        The resampled trace as (lat, lon) rows.
    float
        The trace length (km).
    """
    azimuths, _, segment_lengths = _GEOD.inv(
        trace[:-1, 1], trace[:-1, 0], trace[1:, 1], trace[1:, 0]
    )
    azimuths = np.atleast_1d(azimuths)
    cumulative = np.concatenate(([0.0], np.cumsum(segment_lengths)))
    targets = np.linspace(0, cumulative[-1], num_points)
    segments = np.clip(
        np.searchsorted(cumulative, targets, side="right") - 1,
        0,
        len(azimuths) - 1,
    )
    lons, lats, _ = _GEOD.fwd(
        trace[segments, 1],
        trace[segments, 0],
        azimuths[segments],
        targets - cumulative[segments],
    )
    return np.column_stack((lats, lons)), cumulative[-1] / _KM_TO_M


def trace_length(trace: np.ndarray) -> float:
    """Return the length of a (lat, lon) trace (km)."""
    return _GEOD.line_length(trace[:, 1], trace[:, 0]) / _KM_TO_M


@dataclasses.dataclass(frozen=True, eq=False)
class GriddedSurface:
    """A regularly gridded fault surface.

    Attributes
    ----------
    points : np.ndarray
        The surface nodes, shape (num_rows, num_cols, 3) in (lat, lon,
        depth) format with depth in km.
    strike : float
        Average strike of the surface (degrees).
    dip : float
        Dip of the surface (degrees).
    strike_spacing : float
        Distance between nodes along strike (km).
    dip_spacing : float
        Distance between nodes down-dip (km).
    """

    points: np.ndarray
    strike: float
    dip: float
    strike_spacing: float
    dip_spacing: float

    def __post_init__(self) -> None:
        """Freeze the node array."""
        points = np.array(self.points, dtype=np.float64)
        if points.ndim != 3 or points.shape[-1] != 3:
            raise ValueError(
                f"Surface points must have shape (rows, cols, 3), got {points.shape}"
            )
        points.flags.writeable = False
        object.__setattr__(self, "points", points)

    @classmethod
    def from_trace(
        cls,
        trace: npt.ArrayLike,
        depth: float,
        dip: float,
        width: float,
        spacing: float,
    ) -> Self:
        """Grid a surface hanging down-dip from a fault trace.

        The grid spacing along strike and down-dip is adjusted to exactly
        fill the fault, leaving both just less than or equal to `spacing`.

        Parameters
        ----------
        trace : array like
            The fault trace as (lat, lon) rows, ordered along strike.
            The fault dips to the right of the strike direction.
        depth : float
            Depth of the top of the surface (km).
        dip : float
            The dip of the surface (degrees).
        width : float
            Down-dip width of the surface (km).
        spacing : float
            Target grid spacing (km).

        Returns
        -------
        GriddedSurface
            The gridded surface.
        """
        trace = faults.validate_trace(trace)
        depth = faults.validate_depth(depth)
        dip = faults.validate_dip(dip)
        width = faults.validate_width(width)
        spacing = faults.validate_spacing(spacing)

        length = trace_length(trace)
        num_cols = _grid_count(length, spacing)
        num_rows = _grid_count(width, spacing)
        upper_edge, length = _resample_trace(trace, num_cols)
        dip_spacing = width / (num_rows - 1)

        strike, _, _ = _GEOD.inv(trace[0, 1], trace[0, 0], trace[-1, 1], trace[-1, 0])
        strike = strike % 360
        dip_dir = (strike + 90) % 360

        down_dip = np.arange(num_rows) * dip_spacing
        horizontal = down_dip * np.cos(np.radians(dip)) * _KM_TO_M
        row_lons, row_lats, _ = _GEOD.fwd(
            np.tile(upper_edge[:, 1], num_rows),
            np.tile(upper_edge[:, 0], num_rows),
            np.full(num_rows * num_cols, dip_dir),
            np.repeat(horizontal, num_cols),
        )
        depths = np.repeat(depth + down_dip * np.sin(np.radians(dip)), num_cols)
        points = np.column_stack((row_lats, row_lons, depths)).reshape(
            (num_rows, num_cols, 3)
        )
        return cls(
            points=points,
            strike=strike,
            dip=dip,
            strike_spacing=length / (num_cols - 1),
            dip_spacing=dip_spacing,
        )

    @property
    def num_rows(self) -> int:  # numpydoc ignore=RT01
        """int: Number of nodes down-dip."""
        return self.points.shape[0]

    @property
    def num_cols(self) -> int:  # numpydoc ignore=RT01
        """int: Number of nodes along strike."""
        return self.points.shape[1]

    @property
    def length(self) -> float:  # numpydoc ignore=RT01
        """float: Along strike length of the surface (km)."""
        return (self.num_cols - 1) * self.strike_spacing

    @property
    def width(self) -> float:  # numpydoc ignore=RT01
        """float: Down-dip width of the surface (km)."""
        return (self.num_rows - 1) * self.dip_spacing

    @property
    def dip_dir(self) -> float:  # numpydoc ignore=RT01
        """float: The dip direction of the surface (degrees)."""
        return (self.strike + 90) % 360

    @property
    def depth(self) -> float:  # numpydoc ignore=RT01
        """float: Depth to the top of the surface (km)."""
        return float(self.points[0, 0, 2])

    @property
    def bottom(self) -> float:  # numpydoc ignore=RT01
        """float: Depth to the bottom of the surface (km)."""
        return float(self.points[-1, 0, 2])

    def subset(self, row: int, col: int, num_rows: int, num_cols: int) -> Self:
        """Extract a rectangular sub-grid of this surface.

        Parameters
        ----------
        row : int
            Index of the first row.
        col : int
            Index of the first column.
        num_rows : int
            Number of rows in the subset.
        num_cols : int
            Number of columns in the subset.

        Returns
        -------
        GriddedSurface
            The subset surface, sharing the spacing, strike and dip of this
            surface.

        Raises
        ------
        IndexError
            If the subset does not lie inside this surface.
        """
        if (
            row < 0
            or col < 0
            or num_rows < 1
            or num_cols < 1
            or row + num_rows > self.num_rows
            or col + num_cols > self.num_cols
        ):
            raise IndexError(
                f"Subset ({row}, {col}, {num_rows}, {num_cols}) lies outside a"
                f" {self.num_rows} x {self.num_cols} surface"
            )
        return type(self)(
            points=self.points[row : row + num_rows, col : col + num_cols],
            strike=self.strike,
            dip=self.dip,
            strike_spacing=self.strike_spacing,
            dip_spacing=self.dip_spacing,
        )

    def _subset_shape(self, length: float, width: float) -> tuple[int, int]:
        """Rows and columns of a `length` x `width` subset, clipped to the surface."""
        if not (length > 0 and width > 0):
            raise ValueError(
                f"Subset dimensions must be positive, got {length} x {width}"
            )
        num_rows = min(int(np.rint(width / self.dip_spacing)) + 1, self.num_rows)
        num_cols = min(int(np.rint(length / self.strike_spacing)) + 1, self.num_cols)
        return num_rows, num_cols

    def _offset_shape(self, offset: float) -> tuple[int, int]:
        """Offset in grid cells down-dip and along strike, at least one cell."""
        if not offset > 0:
            raise ValueError(f"Subset offset must be positive, got {offset}")
        return (
            max(1, int(np.rint(offset / self.dip_spacing))),
            max(1, int(np.rint(offset / self.strike_spacing))),
        )

    def num_subset_surfaces_along_length(self, length: float, offset: float) -> int:
        """Number of subset positions along strike.

        Parameters
        ----------
        length : float
            Subset length (km).
        offset : float
            Distance between subsequent subsets (km).

        Returns
        -------
        int
            The number of positions, at least one.
        """
        # Width does not affect the along strike count.
        _, num_cols = self._subset_shape(length, self.dip_spacing)
        _, col_offset = self._offset_shape(offset)
        return (self.num_cols - num_cols) // col_offset + 1

    def num_subset_surfaces(self, length: float, width: float, offset: float) -> int:
        """Number of subset positions along strike and down-dip.

        Parameters
        ----------
        length : float
            Subset length (km).
        width : float
            Subset width (km). Widths larger than the surface are clipped.
        offset : float
            Distance between subsequent subsets (km).

        Returns
        -------
        int
            The number of positions, at least one.
        """
        num_rows, _ = self._subset_shape(length, width)
        row_offset, _ = self._offset_shape(offset)
        down_dip = (self.num_rows - num_rows) // row_offset + 1
        return self.num_subset_surfaces_along_length(length, offset) * down_dip

    def nth_subset_surface(
        self, length: float, width: float, offset: float, n: int
    ) -> Self:
        """Return the n-th subset surface under the default tiling policy.

        Subsets are ordered along strike first, then down-dip.

        Parameters
        ----------
        length : float
            Subset length (km).
        width : float
            Subset width (km).
        offset : float
            Distance between subsequent subsets (km).
        n : int
            Index of the subset, in [0, `num_subset_surfaces`).

        Returns
        -------
        GriddedSurface
            The subset surface.
        """
        count = self.num_subset_surfaces(length, width, offset)
        if not 0 <= n < count:
            raise IndexError(f"Subset index {n} out of range for {count} subsets")
        num_rows, num_cols = self._subset_shape(length, width)
        row_offset, col_offset = self._offset_shape(offset)
        along = self.num_subset_surfaces_along_length(length, offset)
        return self.subset(
            (n // along) * row_offset, (n % along) * col_offset, num_rows, num_cols
        )

    def nth_subset_surface_centered_down_dip(
        self, length: float, width: float, offset: float, n: int
    ) -> Self:
        """Return the n-th subset surface under the centred tiling policy.

        Parameters
        ----------
        length : float
            Subset length (km).
        width : float
            Subset width (km).
        offset : float
            Distance between subsequent subsets along strike (km).
        n : int
            Index of the subset, in [0, `num_subset_surfaces_along_length`).

        Returns
        -------
        GriddedSurface
            The subset surface, vertically centred on this surface.
        """
        along = self.num_subset_surfaces_along_length(length, offset)
        if not 0 <= n < along:
            raise IndexError(f"Subset index {n} out of range for {along} subsets")
        num_rows, num_cols = self._subset_shape(length, width)
        _, col_offset = self._offset_shape(offset)
        return self.subset(
            (self.num_rows - num_rows) // 2, n * col_offset, num_rows, num_cols
        )

    def _footprint(self, x: np.ndarray, y: np.ndarray) -> shapely.Geometry:
        """The surface projection as a shapely geometry in projected coordinates."""
        if self.num_rows > 1 and self.num_cols > 1 and not np.isclose(self.dip, 90):
            ring = np.vstack(
                (np.column_stack((x[0], y[0])), np.column_stack((x[-1], y[-1]))[::-1])
            )
            return shapely.make_valid(shapely.Polygon(ring))
        if self.num_cols > 1:
            return shapely.LineString(np.column_stack((x[0], y[0])))
        if self.num_rows > 1:
            return shapely.LineString(np.column_stack((x[:, 0], y[:, 0])))
        return shapely.Point(x[0, 0], y[0, 0])

    def distances(self, lat: float, lon: float) -> Distances:
        """Compute the distances between this surface and a site.

        Parameters
        ----------
        lat : float
            Site latitude.
        lon : float
            Site longitude.

        Returns
        -------
        Distances
            The rJB, rRup and rX distances (km).
        """
        projection = pyproj.Proj(proj="aeqd", lat_0=lat, lon_0=lon, ellps="sphere")
        x, y = projection(self.points[..., 1], self.points[..., 0])
        x = np.asarray(x) / _KM_TO_M
        y = np.asarray(y) / _KM_TO_M
        z = self.points[..., 2]

        r_rup = float(np.sqrt(x**2 + y**2 + z**2).min())
        r_jb = float(shapely.distance(self._footprint(x, y), shapely.Point(0.0, 0.0)))

        # Perpendicular distance from the line through the top edge, measured
        # towards the dip direction.
        dip_direction = np.radians(self.dip_dir)
        normal = np.array([np.sin(dip_direction), np.cos(dip_direction)])
        r_x = float(-np.array([x[0, 0], y[0, 0]]) @ normal)
        return Distances(r_jb=r_jb, r_rup=r_rup, r_x=r_x)
