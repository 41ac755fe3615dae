"""Sites and the per-rupture inputs that ground-motion models consume."""

import dataclasses
from collections.abc import Iterable, Sequence
from typing import Self, overload

import numpy as np

from fault_hazard import faults
from fault_hazard.ruptures import Rupture
from fault_hazard.sources import FaultSource

VS30_RANGE = faults.Range(150.0, 3000.0)


@dataclasses.dataclass(frozen=True)
class Site:
    """A location at which hazard is computed.

    Attributes
    ----------
    name : str
        Name of the site.
    lat : float
        Site latitude.
    lon : float
        Site longitude.
    vs30 : float
        Average shear-wave velocity of the top 30 m (m/s).
    vs_inferred : bool
        Whether vs30 was inferred rather than measured.
    z1p0 : float
        Depth to the 1.0 km/s shear-wave velocity horizon (km), or NaN if unknown.
    z2p5 : float
        Depth to the 2.5 km/s shear-wave velocity horizon (km), or NaN if unknown.
    """

    name: str
    lat: float
    lon: float
    vs30: float = 760.0
    vs_inferred: bool = True
    z1p0: float = np.nan
    z2p5: float = np.nan

    def __post_init__(self) -> None:
        """Validate the site."""
        faults.validate_name(self.name)
        if not (np.isfinite(self.lat) and -90 <= self.lat <= 90):
            raise ValueError(f"Site latitude {self.lat} is outside [-90, 90]")
        if not (np.isfinite(self.lon) and -180 <= self.lon <= 180):
            raise ValueError(f"Site longitude {self.lon} is outside [-180, 180]")
        faults.validate(self.vs30, VS30_RANGE, "Vs30")


@dataclasses.dataclass(frozen=True)
class HazardInput:
    """Rupture and site parameters for one ground-motion evaluation.

    Distances and depths are in km, angles in degrees.
    """

    rate: float
    magnitude: float
    r_jb: float
    r_rup: float
    r_x: float
    dip: float
    width: float
    z_top: float
    z_hyp: float
    rake: float
    vs30: float
    vs_inferred: bool
    z1p0: float
    z2p5: float

    @classmethod
    def from_rupture(cls, rupture: Rupture, site: Site) -> Self:
        """Evaluate the site-rupture parameters of a rupture.

        Parameters
        ----------
        rupture : Rupture
            The rupture.
        site : Site
            The site.

        Returns
        -------
        HazardInput
            The input, with the hypocentre taken to be at the mid-depth of
            the rupture surface.
        """
        surface = rupture.surface
        distances = surface.distances(site.lat, site.lon)
        return cls(
            rate=rupture.rate,
            magnitude=rupture.magnitude,
            r_jb=distances.r_jb,
            r_rup=distances.r_rup,
            r_x=distances.r_x,
            dip=surface.dip,
            width=surface.width,
            z_top=surface.depth,
            z_hyp=(surface.depth + surface.bottom) / 2,
            rake=rupture.rake,
            vs30=site.vs30,
            vs_inferred=site.vs_inferred,
            z1p0=site.z1p0,
            z2p5=site.z2p5,
        )

    def __str__(self) -> str:
        return (
            f"M={self.magnitude:.2f} rate={self.rate:.3e} rJB={self.r_jb:.2f}"
            f" rRup={self.r_rup:.2f} rX={self.r_x:.2f}"
        )


class HazardInputs(Sequence[HazardInput]):
    """The ordered, fixed inputs for every rupture of a source.

    The position of an input defines its index in every ground-motion and
    curve array computed from it.

    Parameters
    ----------
    source : FaultSource
        The source the inputs were derived from.
    inputs : Iterable[HazardInput]
        The inputs, one per rupture.
    """

    def __init__(self, source: FaultSource, inputs: Iterable[HazardInput]):
        self.source = source
        self._inputs = tuple(inputs)

    @classmethod
    def from_source(cls, source: FaultSource, site: Site) -> Self:
        """Build the inputs for every rupture of a source, in rupture order.

        Parameters
        ----------
        source : FaultSource
            The source.
        site : Site
            The site.

        Returns
        -------
        HazardInputs
            One input per rupture.
        """
        return cls(
            source, (HazardInput.from_rupture(rupture, site) for rupture in source)
        )

    @overload
    def __getitem__(self, index: int) -> HazardInput: ...

    @overload
    def __getitem__(self, index: slice) -> tuple[HazardInput, ...]: ...

    def __getitem__(self, index):
        return self._inputs[index]

    def __len__(self) -> int:
        return len(self._inputs)

    @property
    def rates(self) -> np.ndarray:  # numpydoc ignore=RT01
        """np.ndarray: The annual rate of each input."""
        rates = np.array([hazard_input.rate for hazard_input in self._inputs])
        rates.flags.writeable = False
        return rates
