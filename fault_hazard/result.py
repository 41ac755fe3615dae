"""The result of a hazard calculation.

`HazardResultBuilder` accumulates the curve set of every source set in a
model. The finished `HazardResult` exposes the total curve of each IMT
(the sum of every source set total) and the curve sets grouped by source
type, through read-only views only.
"""

import dataclasses
from collections import defaultdict
from collections.abc import Mapping
from types import MappingProxyType
from typing import Self

import numpy as np

from fault_hazard.accumulation import IncompleteBuildError, ReuseError, SingleUseBuilder
from fault_hazard.config import CalcConfig
from fault_hazard.curves import HazardCurve, HazardCurveSet
from fault_hazard.gmm import Imt
from fault_hazard.site import Site
from fault_hazard.sources import HazardModel, SourceType


@dataclasses.dataclass(frozen=True, eq=False)
class HazardResult:
    """The result of a hazard calculation at one site.

    Created by `HazardResultBuilder`.

    Attributes
    ----------
    model : HazardModel
        The hazard model used.
    site : Site
        The site the hazard was computed at.
    config : CalcConfig
        The configuration used.
    """

    model: HazardModel
    site: Site
    config: CalcConfig
    _curve_sets: Mapping[SourceType, tuple[HazardCurveSet, ...]] = dataclasses.field(
        repr=False
    )
    _total_curves: Mapping[Imt, HazardCurve] = dataclasses.field(repr=False)

    def curves(self) -> Mapping[Imt, HazardCurve]:
        """Return the total hazard curve of each IMT.

        Returns
        -------
        Mapping[Imt, HazardCurve]
            A read-only mapping of IMT to total curve.
        """
        return self._total_curves

    def curve_sets(self) -> Mapping[SourceType, tuple[HazardCurveSet, ...]]:
        """Return the curve sets, grouped by source type.

        Returns
        -------
        Mapping[SourceType, tuple[HazardCurveSet, ...]]
            A read-only mapping of source type to the curve sets of that type,
            in the order they were added.
        """
        return self._curve_sets

    def __str__(self) -> str:
        lines = ["HazardResult:"]
        for source_type, curve_sets in self._curve_sets.items():
            lines.append(f"{source_type} source sets:")
            lines.extend(
                f"  {curve_set.source_set} used: {len(curve_set.hazard_curves)}"
                for curve_set in curve_sets
            )
        return "\n".join(lines)


class HazardResultBuilder(SingleUseBuilder):
    """Accumulates source set curves into a hazard result.

    Parameters
    ----------
    config : CalcConfig
        The configuration, providing the intensity levels of each IMT.
    """

    def __init__(self, config: CalcConfig):
        self.config = config
        self._site: Site | None = None
        self._model: HazardModel | None = None
        self._curve_sets: defaultdict[SourceType, list[HazardCurveSet]] = defaultdict(
            list
        )
        self._totals = {imt: np.zeros_like(levels) for imt, levels in config.imls.items()}

    def site(self, site: Site) -> Self:
        """Set the site of the result.

        Parameters
        ----------
        site : Site
            The site.

        Returns
        -------
        HazardResultBuilder
            This builder.

        Raises
        ------
        ReuseError
            If the site has already been set.
        """
        if self._site is not None:
            raise ReuseError(f"{type(self).__name__} site already set")
        self._site = site
        return self

    def model(self, model: HazardModel) -> Self:
        """Set the model of the result.

        Parameters
        ----------
        model : HazardModel
            The hazard model.

        Returns
        -------
        HazardResultBuilder
            This builder.

        Raises
        ------
        ReuseError
            If the model has already been set.
        """
        if self._model is not None:
            raise ReuseError(f"{type(self).__name__} model already set")
        self._model = model
        return self

    def add_curve_set(self, curve_set: HazardCurveSet) -> Self:
        """Add a source set's curves to the result.

        Parameters
        ----------
        curve_set : HazardCurveSet
            The curve set. Its total curves are added to the result totals.

        Returns
        -------
        HazardResultBuilder
            This builder.
        """
        self._check_unused()
        for imt, curve in curve_set.total_curves.items():
            if not np.array_equal(curve.x, self.config.imls[imt]):
                raise ValueError(
                    f"Curve for {imt} does not use the configured intensity levels"
                )
            self._totals[imt] += curve.y
        self._curve_sets[curve_set.source_set.type].append(curve_set)
        return self

    def build(self) -> HazardResult:
        """Return the hazard result.

        Returns
        -------
        HazardResult
            The immutable result.

        Raises
        ------
        ReuseError
            If the builder has already been used.
        IncompleteBuildError
            If the site or model has not been set.
        """
        self._check_unused()
        if self._site is None:
            raise IncompleteBuildError(f"{type(self).__name__} site not set")
        if self._model is None:
            raise IncompleteBuildError(f"{type(self).__name__} model not set")
        self._mark_built()
        total_curves = MappingProxyType(
            {
                imt: HazardCurve(self.config.imls[imt], total)
                for imt, total in self._totals.items()
            }
        )
        curve_sets = MappingProxyType(
            {
                source_type: tuple(curve_sets)
                for source_type, curve_sets in self._curve_sets.items()
            }
        )
        self._totals = None
        return HazardResult(
            model=self._model,
            site=self._site,
            config=self.config,
            _curve_sets=curve_sets,
            _total_curves=total_curves,
        )
