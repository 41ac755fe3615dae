"""Hazard curves and their aggregation.

Curves are built in three stages:

1. `compute_hazard_curves` turns the ground motions of one source into a
   curve per (IMT, GMM), summing the rate-weighted exceedance
   probabilities of every rupture (`HazardCurves`).
2. `HazardCurveSetBuilder` collects the `HazardCurves` of every source in
   a source set and rolls them up into one total curve per IMT, weighting
   each GMM by its logic-tree weight and the set by its own weight
   (`HazardCurveSet`).
3. `fault_hazard.result.HazardResultBuilder` sums the source set totals.

Every curve in a calculation shares the same x-axis for a given IMT (the
configured intensity levels), so curves are added pointwise.
"""

import dataclasses
from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Self

import numpy as np
import numpy.typing as npt
import pandas as pd

from fault_hazard.accumulation import IncompleteBuildError, SingleUseBuilder
from fault_hazard.config import CalcConfig
from fault_hazard.gmm import GroundMotionModel, Imt
from fault_hazard.ground_motions import HazardGroundMotions
from fault_hazard.sources import SourceSet


@dataclasses.dataclass(frozen=True, eq=False)
class HazardCurve:
    """An exceedance curve over a fixed set of intensity levels.

    Attributes
    ----------
    x : np.ndarray
        Intensity measure levels.
    y : np.ndarray
        Annual rate of exceeding each level.
    """

    x: np.ndarray
    y: np.ndarray

    def __post_init__(self) -> None:
        """Validate and freeze the curve arrays."""
        x = np.asarray(self.x, dtype=np.float64)
        y = np.array(self.y, dtype=np.float64)
        if x.ndim != 1 or x.shape != y.shape:
            raise ValueError(
                f"Curve x and y must be one-dimensional and the same length"
                f" (got {x.shape} and {y.shape})"
            )
        if x.flags.writeable:
            x = x.copy()
            x.flags.writeable = False
        y.flags.writeable = False
        object.__setattr__(self, "x", x)
        object.__setattr__(self, "y", y)

    @classmethod
    def zeros(cls, x: npt.ArrayLike) -> Self:
        """Create a curve of zeros over the given levels.

        Parameters
        ----------
        x : array like
            The intensity measure levels.

        Returns
        -------
        HazardCurve
            The zero curve.
        """
        x = np.asarray(x, dtype=np.float64)
        return cls(x, np.zeros_like(x))

    def _check_x(self, other: "HazardCurve") -> None:
        if not (self.x is other.x or np.array_equal(self.x, other.x)):
            raise ValueError("Curves do not share the same intensity levels")

    def __add__(self, other: "HazardCurve") -> "HazardCurve":
        if not isinstance(other, HazardCurve):
            return NotImplemented
        self._check_x(other)
        return HazardCurve(self.x, self.y + other.y)

    def __mul__(self, scale: float) -> "HazardCurve":
        return HazardCurve(self.x, self.y * scale)

    __rmul__ = __mul__

    def __len__(self) -> int:
        return len(self.x)

    def __iter__(self) -> Iterator[tuple[float, float]]:
        """Iterate over (x, y) points."""
        for x, y in zip(self.x, self.y):
            yield float(x), float(y)

    def isclose(self, other: "HazardCurve", rtol: float = 1e-9) -> bool:
        """Check if two curves are equal within a relative tolerance.

        Parameters
        ----------
        other : HazardCurve
            The curve to compare against.
        rtol : float, optional
            Relative tolerance. Default is 1e-9.

        Returns
        -------
        bool
            True if the curves share levels and have close values.
        """
        return np.array_equal(self.x, other.x) and np.allclose(
            self.y, other.y, rtol=rtol, atol=0
        )

    def to_series(self) -> pd.Series:
        """Return the curve as a series indexed by intensity level.

        Returns
        -------
        pd.Series
            The exceedance rates, indexed by level.
        """
        return pd.Series(data=self.y, index=pd.Index(self.x, name="iml"), name="rate")


def _frozen_curve_map(
    curves: Mapping[Imt, Mapping[GroundMotionModel, HazardCurve]],
) -> Mapping[Imt, Mapping[GroundMotionModel, HazardCurve]]:
    return MappingProxyType(
        {imt: MappingProxyType(dict(gmm_curves)) for imt, gmm_curves in curves.items()}
    )


@dataclasses.dataclass(frozen=True, eq=False)
class HazardCurves:
    """Hazard curves of a single source, one per (IMT, GMM).

    Curves are scaled by rupture rates but not by GMM weights. Created by
    `HazardCurvesBuilder`.

    Attributes
    ----------
    ground_motions : HazardGroundMotions
        The ground motions the curves were computed from.
    curves : Mapping[Imt, Mapping[GroundMotionModel, HazardCurve]]
        Read-only mapping of IMT to GMM to curve.
    """

    ground_motions: HazardGroundMotions
    curves: Mapping[Imt, Mapping[GroundMotionModel, HazardCurve]]


class HazardCurvesBuilder(SingleUseBuilder):
    """Collects the curves of one source.

    Parameters
    ----------
    ground_motions : HazardGroundMotions
        The ground motions of the source. A curve slot is allocated for
        every IMT they contain.
    """

    def __init__(self, ground_motions: HazardGroundMotions):
        self.ground_motions = ground_motions
        self._curves: dict[Imt, dict[GroundMotionModel, HazardCurve]] = {
            imt: {} for imt in ground_motions.imts
        }

    def add_curve(self, imt: Imt, gmm: GroundMotionModel, curve: HazardCurve) -> Self:
        """Set the curve of an (IMT, GMM) pair.

        Parameters
        ----------
        imt : Imt
            The intensity measure type.
        gmm : GroundMotionModel
            The ground-motion model.
        curve : HazardCurve
            The curve.

        Returns
        -------
        HazardCurvesBuilder
            This builder.

        Raises
        ------
        KeyError
            If the IMT or GMM is not in the ground motions.
        """
        self._check_unused()
        if gmm not in self.ground_motions.gmms:
            raise KeyError(gmm)
        self._curves[imt][gmm] = curve
        return self

    def build(self) -> HazardCurves:
        """Return the source curves.

        Returns
        -------
        HazardCurves
            The immutable curves.

        Raises
        ------
        ReuseError
            If the builder has already been used.
        """
        # Slots are not checked for completeness: a GMM without a curve
        # simply contributes nothing to the source set total.
        self._mark_built()
        return HazardCurves(self.ground_motions, _frozen_curve_map(self._curves))


def compute_hazard_curves(
    ground_motions: HazardGroundMotions, config: CalcConfig
) -> HazardCurves:
    """Compute the hazard curves of a source.

    For each (IMT, GMM) the curve is the sum, over every input, of the
    input rate times the GMM's exceedance probabilities for that input.

    Parameters
    ----------
    ground_motions : HazardGroundMotions
        The ground motions of the source.
    config : CalcConfig
        The calculation configuration, providing intensity levels and the
        exceedance model.

    Returns
    -------
    HazardCurves
        The curve of every (IMT, GMM) pair.
    """
    rates = ground_motions.inputs.rates
    builder = HazardCurvesBuilder(ground_motions)
    for imt in ground_motions.imts:
        log_imls = config.log_imls(imt)
        for gmm in ground_motions.gmms:
            probabilities = gmm.exceedance_curve(
                ground_motions.mean(imt, gmm),
                ground_motions.sigma(imt, gmm),
                log_imls,
                config.exceedance_model,
                config.truncation_level,
            )
            builder.add_curve(imt, gmm, HazardCurve(config.imls[imt], rates @ probabilities))
    return builder.build()


@dataclasses.dataclass(frozen=True, eq=False)
class HazardCurveSet:
    """The curves of every source in a source set, and their total.

    Created by `HazardCurveSetBuilder`.

    Attributes
    ----------
    source_set : SourceSet
        The source set.
    hazard_curves : tuple[HazardCurves, ...]
        The curves of each source.
    total_curves : Mapping[Imt, HazardCurve]
        Read-only mapping of IMT to the GMM and source set weighted total.
    """

    source_set: SourceSet
    hazard_curves: tuple[HazardCurves, ...]
    total_curves: Mapping[Imt, HazardCurve]


class HazardCurveSetBuilder(SingleUseBuilder):
    """Rolls source curves up into source set totals.

    Parameters
    ----------
    source_set : SourceSet
        The source set the curves belong to.
    config : CalcConfig
        The configuration, providing the intensity levels of each IMT.
    """

    def __init__(self, source_set: SourceSet, config: CalcConfig):
        self.source_set = source_set
        self.config = config
        self._hazard_curves: list[HazardCurves] = []
        self._totals = {imt: np.zeros_like(levels) for imt, levels in config.imls.items()}

    def add_curves(self, hazard_curves: HazardCurves) -> Self:
        """Add the curves of one source to the set.

        Each (IMT, GMM) curve is scaled by the GMM weight and added to the
        running IMT total.

        Parameters
        ----------
        hazard_curves : HazardCurves
            The curves of a source in this set.

        Returns
        -------
        HazardCurveSetBuilder
            This builder.

        Raises
        ------
        ValueError
            If a curve belongs to a GMM outside the source set, or does not
            use the configured intensity levels. Nothing is added in
            either case.
        """
        self._check_unused()
        for imt, gmm_curves in hazard_curves.curves.items():
            for gmm, curve in gmm_curves.items():
                if gmm not in self.source_set.gmms:
                    raise ValueError(
                        f"GMM {gmm} is not a ground-motion model of source set"
                        f" {self.source_set.name}"
                    )
                if not np.array_equal(curve.x, self.config.imls[imt]):
                    raise ValueError(
                        f"Curve for {imt} does not use the configured intensity levels"
                    )
        for imt, gmm_curves in hazard_curves.curves.items():
            total = self._totals[imt]
            for gmm, curve in gmm_curves.items():
                total += curve.y * gmm.weight
        self._hazard_curves.append(hazard_curves)
        return self

    def build(self) -> HazardCurveSet:
        """Return the source set curves.

        Returns
        -------
        HazardCurveSet
            The immutable curve set, with totals scaled by the source set weight.

        Raises
        ------
        ReuseError
            If the builder has already been used.
        IncompleteBuildError
            If no curves have been added.
        """
        self._check_unused()
        if not self._hazard_curves:
            raise IncompleteBuildError(
                f"No curves have been added for source set {self.source_set.name}"
            )
        self._mark_built()
        total_curves = {
            imt: HazardCurve(self.config.imls[imt], total * self.source_set.weight)
            for imt, total in self._totals.items()
        }
        self._totals = None
        return HazardCurveSet(
            self.source_set, tuple(self._hazard_curves), MappingProxyType(total_curves)
        )
