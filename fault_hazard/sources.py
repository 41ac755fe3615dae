"""Fault sources, source sets and hazard models.

A `FaultSource` wraps a fault geometry and a list of magnitude-frequency
distributions that characterise how the fault might rupture (as a single
surface-filling event, or as smaller floating events). Ruptures are
generated once, on construction, and never recomputed.

Classes
-------
SourceType:
    The category a source set belongs to.

FaultSource:
    A fault and the ruptures it produces.

SourceSet:
    A weighted group of sources sharing a category and ground-motion models.

HazardModel:
    A named collection of source sets.
"""

import dataclasses
import itertools
from collections.abc import Iterator, Sequence
from enum import StrEnum, auto
from typing import TYPE_CHECKING

import numpy as np

from fault_hazard import faults
from fault_hazard.magnitude_scaling import ScalingRelationship
from fault_hazard.mfd import IncrementalMfd
from fault_hazard.ruptures import Rupture, RuptureFloating, float_ruptures
from fault_hazard.surface import GriddedSurface

if TYPE_CHECKING:
    from fault_hazard.gmm import GroundMotionModel


class NoRupturesError(ValueError):
    """Raised when a source produces no ruptures."""


class SourceType(StrEnum):
    """Source set categories."""

    FAULT = auto()
    INTERFACE = auto()
    SLAB = auto()


@dataclasses.dataclass(frozen=True, eq=False)
class FaultSource:
    """A fault source and its ruptures.

    Attributes
    ----------
    name : str
        Name of the source.
    trace : np.ndarray
        The fault trace as (lat, lon) rows, ordered along strike. The
        fault dips to the right of the strike direction.
    depth : float
        Depth to the top of the fault (km).
    dip : float
        Fault dip (degrees).
    width : float
        Down-dip width of the fault (km).
    rake : float
        Rake of the ruptures (degrees).
    mfds : tuple[IncrementalMfd, ...]
        The magnitude-frequency distributions of the source.
    spacing : float
        Surface grid spacing (km).
    scaling : ScalingRelationship
        Scaling relationship used to size floating ruptures.
    floating : RuptureFloating
        The floating model.
    surface : GriddedSurface
        The gridded fault surface (derived).
    rupture_lists : tuple[tuple[Rupture, ...], ...]
        The ruptures generated for each MFD, in MFD order (derived).
    """

    name: str
    trace: np.ndarray
    depth: float
    dip: float
    width: float
    rake: float
    mfds: Sequence[IncrementalMfd]
    scaling: ScalingRelationship
    spacing: float = 1.0
    floating: RuptureFloating = dataclasses.field(default_factory=RuptureFloating)
    surface: GriddedSurface = dataclasses.field(init=False, repr=False)
    rupture_lists: tuple[tuple[Rupture, ...], ...] = dataclasses.field(
        init=False, repr=False
    )

    def __post_init__(self) -> None:
        """Validate the geometry, build the surface and float the ruptures.

        Raises
        ------
        ValueError
            If any geometry parameter is outside its valid range, or no
            MFDs are given.
        NoRupturesError
            If any MFD produces no ruptures.
        """
        object.__setattr__(self, "name", faults.validate_name(self.name))
        object.__setattr__(self, "trace", faults.validate_trace(self.trace))
        object.__setattr__(self, "depth", faults.validate_depth(self.depth))
        object.__setattr__(self, "dip", faults.validate_dip(self.dip))
        object.__setattr__(self, "width", faults.validate_width(self.width))
        object.__setattr__(self, "rake", faults.validate_rake(self.rake))
        object.__setattr__(self, "spacing", faults.validate_spacing(self.spacing))
        object.__setattr__(self, "mfds", tuple(self.mfds))
        if not self.mfds:
            raise ValueError(f"Source {self.name} has no MFDs")

        surface = GriddedSurface.from_trace(
            self.trace, self.depth, self.dip, self.width, self.spacing
        )
        object.__setattr__(self, "surface", surface)

        rupture_lists = []
        for i, mfd in enumerate(self.mfds):
            ruptures = float_ruptures(
                mfd, surface, self.rake, self.scaling, self.floating
            )
            if not ruptures:
                raise NoRupturesError(
                    f"MFD {i} of source {self.name} produces no ruptures"
                )
            rupture_lists.append(tuple(ruptures))
        object.__setattr__(self, "rupture_lists", tuple(rupture_lists))

    def __iter__(self) -> Iterator[Rupture]:
        """Iterate over all ruptures, in MFD order."""
        return itertools.chain.from_iterable(self.rupture_lists)

    def __len__(self) -> int:
        return sum(len(ruptures) for ruptures in self.rupture_lists)

    def __str__(self) -> str:
        return (
            f"FaultSource {{name={self.name}, dip={self.dip}, width={self.width},"
            f" rake={self.rake}, mfds={len(self.mfds)}, top={self.depth}}}"
        )

    @property
    def total_rate(self) -> float:  # numpydoc ignore=RT01
        """float: Summed annual rate of all ruptures."""
        return float(sum(rupture.rate for rupture in self))


@dataclasses.dataclass(frozen=True, eq=False)
class SourceSet:
    """A weighted group of sources evaluated with the same ground-motion models.

    Attributes
    ----------
    name : str
        Name of the source set.
    type : SourceType
        The category of the source set.
    sources : tuple[FaultSource, ...]
        The sources in the set.
    gmms : tuple[GroundMotionModel, ...]
        The ground-motion models used for the set. Their logic-tree
        weights must sum to one.
    weight : float
        Weight applied to the hazard of the whole set.
    """

    name: str
    type: SourceType
    sources: Sequence[FaultSource]
    gmms: Sequence["GroundMotionModel"]
    weight: float = 1.0

    def __post_init__(self) -> None:
        """Validate the source set."""
        object.__setattr__(self, "name", faults.validate_name(self.name))
        object.__setattr__(self, "sources", tuple(self.sources))
        object.__setattr__(self, "gmms", tuple(dict.fromkeys(self.gmms)))
        if not self.sources:
            raise ValueError(f"Source set {self.name} has no sources")
        if not self.gmms:
            raise ValueError(f"Source set {self.name} has no ground-motion models")
        if not 0 < self.weight <= 1:
            raise ValueError(
                f"Source set weight must be in (0, 1], got {self.weight}"
            )
        gmm_weight = sum(gmm.weight for gmm in self.gmms)
        if not np.isclose(gmm_weight, 1.0, atol=1e-6):
            raise ValueError(
                f"Ground-motion model weights of {self.name} sum to {gmm_weight}, not 1"
            )

    def __iter__(self) -> Iterator[FaultSource]:
        return iter(self.sources)

    def __len__(self) -> int:
        return len(self.sources)

    def __str__(self) -> str:
        return (
            f"SourceSet {{name={self.name}, type={self.type}, size={len(self)},"
            f" weight={self.weight}}}"
        )


@dataclasses.dataclass(frozen=True, eq=False)
class HazardModel:
    """A named collection of source sets.

    Attributes
    ----------
    name : str
        Name of the model.
    source_sets : tuple[SourceSet, ...]
        The source sets of the model.
    """

    name: str
    source_sets: Sequence[SourceSet]

    def __post_init__(self) -> None:
        """Validate the model."""
        object.__setattr__(self, "name", faults.validate_name(self.name))
        object.__setattr__(self, "source_sets", tuple(self.source_sets))
        if not self.source_sets:
            raise ValueError(f"Hazard model {self.name} has no source sets")

    def __iter__(self) -> Iterator[SourceSet]:
        return iter(self.source_sets)

    def __len__(self) -> int:
        return len(self.source_sets)
