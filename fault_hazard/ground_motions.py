"""Ground-motion moments for every rupture of a source.

`HazardGroundMotions` stores the mean and sigma computed by each
ground-motion model, for each intensity measure type and each hazard
input. Values live in dense (IMT, GMM, input) arrays; position i of every
series always corresponds to the i-th input.
"""

import dataclasses
import itertools
from collections.abc import Iterable
from typing import Self

import numpy as np
import pandas as pd

from fault_hazard.accumulation import SingleUseBuilder, WriteOnceArray
from fault_hazard.gmm import GroundMotionModel, Imt, ScalarGroundMotion
from fault_hazard.site import HazardInputs


@dataclasses.dataclass(frozen=True, eq=False)
class HazardGroundMotions:
    """Ground-motion moments of a source, indexed by IMT, GMM and input.

    Instances are created by `HazardGroundMotionsBuilder`.

    Attributes
    ----------
    inputs : HazardInputs
        The inputs the moments were computed for.
    imts : tuple[Imt, ...]
        The intensity measure types, in array order.
    gmms : tuple[GroundMotionModel, ...]
        The ground-motion models, in array order.
    means : np.ndarray
        Read-only array of means, shape (len(imts), len(gmms), len(inputs)).
    sigmas : np.ndarray
        Read-only array of sigmas, with the same shape as `means`.
    """

    inputs: HazardInputs
    imts: tuple[Imt, ...]
    gmms: tuple[GroundMotionModel, ...]
    means: np.ndarray = dataclasses.field(repr=False)
    sigmas: np.ndarray = dataclasses.field(repr=False)

    def _position(self, imt: Imt, gmm: GroundMotionModel) -> tuple[int, int]:
        return self.imts.index(imt), self.gmms.index(gmm)

    def mean(self, imt: Imt, gmm: GroundMotionModel) -> np.ndarray:
        """Return the means of every input for an IMT and GMM.

        Parameters
        ----------
        imt : Imt
            The intensity measure type.
        gmm : GroundMotionModel
            The ground-motion model.

        Returns
        -------
        np.ndarray
            A read-only view with one mean per input.
        """
        return self.means[self._position(imt, gmm)]

    def sigma(self, imt: Imt, gmm: GroundMotionModel) -> np.ndarray:
        """Return the sigmas of every input for an IMT and GMM.

        Parameters
        ----------
        imt : Imt
            The intensity measure type.
        gmm : GroundMotionModel
            The ground-motion model.

        Returns
        -------
        np.ndarray
            A read-only view with one sigma per input.
        """
        return self.sigmas[self._position(imt, gmm)]

    def to_dataframe(self) -> pd.DataFrame:
        """Return the moments as a long-form dataframe.

        Returns
        -------
        pd.DataFrame
            A dataframe with columns 'imt', 'gmm', 'input', 'mean' and
            'sigma', one row per (IMT, GMM, input) triple.
        """
        index = pd.MultiIndex.from_product(
            [
                [str(imt) for imt in self.imts],
                [gmm.name for gmm in self.gmms],
                range(len(self.inputs)),
            ],
            names=["imt", "gmm", "input"],
        )
        return pd.DataFrame(
            {"mean": self.means.ravel(), "sigma": self.sigmas.ravel()}, index=index
        ).reset_index()

    def __str__(self) -> str:
        lines = [f"HazardGroundMotions [{self.inputs.source.name}]:"]
        for i, hazard_input in enumerate(self.inputs):
            row = [str(hazard_input)]
            for j, imt in enumerate(self.imts):
                moments = " ".join(
                    f"{gmm.name} μ={self.means[j, k, i]:.3f} σ={self.sigmas[j, k, i]:.3f}"
                    for k, gmm in enumerate(self.gmms)
                )
                row.append(f"{imt} [{moments}]")
            lines.append(" ".join(row))
        return "\n".join(lines)


class HazardGroundMotionsBuilder(SingleUseBuilder):
    """Collects the ground-motion moments of every (IMT, GMM, input) triple.

    Moments may be added in any order, but each triple must be added
    exactly once before `build()` is called.

    Parameters
    ----------
    inputs : HazardInputs
        The inputs to collect moments for.
    gmms : Iterable[GroundMotionModel]
        The ground-motion models. Duplicates are ignored.
    imts : Iterable[Imt]
        The intensity measure types. Duplicates are ignored.

    Raises
    ------
    ValueError
        If `inputs`, `gmms` or `imts` is empty.
    """

    def __init__(
        self,
        inputs: HazardInputs,
        gmms: Iterable[GroundMotionModel],
        imts: Iterable[Imt],
    ):
        self.inputs = inputs
        self.gmms = tuple(dict.fromkeys(gmms))
        self.imts = tuple(dict.fromkeys(imts))
        if not len(inputs):
            raise ValueError("Ground motions require at least one hazard input")
        if not self.gmms:
            raise ValueError("Ground motions require at least one GMM")
        if not self.imts:
            raise ValueError("Ground motions require at least one IMT")
        self._imt_index = {imt: i for i, imt in enumerate(self.imts)}
        self._gmm_index = {gmm: i for i, gmm in enumerate(self.gmms)}
        shape = (len(self.imts), len(self.gmms), len(inputs))
        self._means = WriteOnceArray(shape)
        self._sigmas = WriteOnceArray(shape)

    @property
    def size(self) -> int:  # numpydoc ignore=RT01
        """int: The number of (IMT, GMM, input) triples to add."""
        return self._means.size

    @property
    def count(self) -> int:  # numpydoc ignore=RT01
        """int: The number of triples added so far."""
        return self._means.count

    def add(
        self,
        gmm: GroundMotionModel,
        imt: Imt,
        ground_motion: ScalarGroundMotion,
        index: int,
    ) -> Self:
        """Add the moments for one (IMT, GMM, input) triple.

        Parameters
        ----------
        gmm : GroundMotionModel
            The ground-motion model.
        imt : Imt
            The intensity measure type.
        ground_motion : ScalarGroundMotion
            The mean and sigma.
        index : int
            Index of the input.

        Returns
        -------
        HazardGroundMotionsBuilder
            This builder.

        Raises
        ------
        KeyError
            If the GMM or IMT is not one of the builder's.
        ReuseError
            If the triple has already been added, or the builder has been used.
        """
        cell = (self._imt_index[imt], self._gmm_index[gmm], index)
        self._means[cell] = ground_motion.mean
        self._sigmas[cell] = ground_motion.sigma
        return self

    def build(self) -> HazardGroundMotions:
        """Return the completed ground motions.

        Returns
        -------
        HazardGroundMotions
            The immutable ground motions.

        Raises
        ------
        ReuseError
            If the builder has already been used.
        IncompleteBuildError
            If any (IMT, GMM, input) triple has not been added.
        """
        self._check_unused()
        # The builder is only consumed by a complete build.
        means = self._means.finish()
        sigmas = self._sigmas.finish()
        self._mark_built()
        return HazardGroundMotions(
            inputs=self.inputs,
            imts=self.imts,
            gmms=self.gmms,
            means=means,
            sigmas=sigmas,
        )


def evaluate_ground_motions(
    inputs: HazardInputs,
    gmms: Iterable[GroundMotionModel],
    imts: Iterable[Imt],
) -> HazardGroundMotions:
    """Evaluate every GMM for every input and IMT.

    Parameters
    ----------
    inputs : HazardInputs
        The hazard inputs.
    gmms : Iterable[GroundMotionModel]
        The ground-motion models.
    imts : Iterable[Imt]
        The intensity measure types.

    Returns
    -------
    HazardGroundMotions
        The ground motions of every (IMT, GMM, input) triple.
    """
    builder = HazardGroundMotionsBuilder(inputs, gmms, imts)
    for (index, hazard_input), gmm, imt in itertools.product(
        enumerate(inputs), builder.gmms, builder.imts
    ):
        builder.add(gmm, imt, gmm.evaluate(hazard_input, imt), index)
    return builder.build()
