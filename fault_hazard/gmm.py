"""Ground-motion model interface and exceedance probability models.

Ground-motion models (GMMs) are supplied by the caller. A GMM evaluates a
`HazardInput` for an intensity measure type (IMT) and returns the mean and
standard deviation of the natural log of the ground motion, converts
those moments to exceedance probabilities, and carries a fixed logic-tree
weight.
"""

import abc
import dataclasses
from enum import StrEnum
from typing import TYPE_CHECKING, NamedTuple, Protocol

import numpy as np
import numpy.typing as npt
import scipy as sp

if TYPE_CHECKING:
    from fault_hazard.site import HazardInput


class Imt(StrEnum):
    """Intensity measure types."""

    PGA = "PGA"
    PGV = "PGV"
    SA0P1 = "SA0P1"
    SA0P2 = "SA0P2"
    SA0P3 = "SA0P3"
    SA0P5 = "SA0P5"
    SA0P75 = "SA0P75"
    SA1P0 = "SA1P0"
    SA2P0 = "SA2P0"
    SA3P0 = "SA3P0"
    SA5P0 = "SA5P0"

    @property
    def period(self) -> float | None:  # numpydoc ignore=RT01
        """float or None: Spectral period (s), zero for PGA and None for PGV."""
        if self == Imt.PGA:
            return 0.0
        if self == Imt.PGV:
            return None
        return float(self.value.removeprefix("SA").replace("P", "."))


class ExceedanceModel(StrEnum):
    """Probability distributions used to compute exceedance from ground-motion moments."""

    NONE = "none"
    """Untruncated normal distribution."""

    TRUNCATION_UPPER_ONLY = "truncation_upper_only"
    """Normal distribution truncated above mean + n sigma."""

    TRUNCATION_LOWER_UPPER = "truncation_lower_upper"
    """Normal distribution truncated outside mean ± n sigma."""


class ScalarGroundMotion(NamedTuple):
    """The moments of a log-normal ground motion."""

    mean: float
    """Mean of the natural log of the ground motion."""

    sigma: float
    """Standard deviation of the natural log of the ground motion."""


def exceedance_probabilities(
    means: npt.ArrayLike,
    sigmas: npt.ArrayLike,
    log_imls: npt.ArrayLike,
    exceedance_model: ExceedanceModel = ExceedanceModel.NONE,
    truncation_level: float = 3.0,
) -> np.ndarray:
    """Compute the probability of exceeding intensity levels.

    Parameters
    ----------
    means : array like
        Mean(s) of the natural log of the ground motion.
    sigmas : array like
        Standard deviation(s) of the natural log of the ground motion,
        broadcastable against `means`.
    log_imls : array like
        Natural log of the intensity measure levels.
    exceedance_model : ExceedanceModel, optional
        The distribution to use. Default is an untruncated normal.
    truncation_level : float, optional
        Truncation level in units of sigma. Ignored by
        `ExceedanceModel.NONE`. Default is 3.

    Returns
    -------
    np.ndarray
        Exceedance probabilities with shape `means.shape + (len(log_imls),)`.
        A zero sigma gives a step function at the mean.
    """
    means = np.asarray(means, dtype=np.float64)[..., np.newaxis]
    sigmas = np.asarray(sigmas, dtype=np.float64)[..., np.newaxis]
    log_imls = np.asarray(log_imls, dtype=np.float64)
    if np.any(sigmas < 0):
        raise ValueError("Ground motion sigma must be non-negative")

    with np.errstate(divide="ignore", invalid="ignore"):
        z = (log_imls - means) / sigmas
    z = np.where(sigmas == 0, np.where(log_imls >= means, np.inf, -np.inf), z)

    probabilities = sp.stats.norm.sf(z)
    match exceedance_model:
        case ExceedanceModel.NONE:
            return probabilities
        case ExceedanceModel.TRUNCATION_UPPER_ONLY:
            upper = sp.stats.norm.sf(truncation_level)
            return np.clip(
                (probabilities - upper) / sp.stats.norm.cdf(truncation_level), 0, 1
            )
        case ExceedanceModel.TRUNCATION_LOWER_UPPER:
            upper = sp.stats.norm.sf(truncation_level)
            mass = sp.stats.norm.cdf(truncation_level) - upper
            return np.clip((probabilities - upper) / mass, 0, 1)
    raise ValueError(f"Unknown exceedance model {exceedance_model!r}")


class GroundMotionModel(Protocol):
    """The interface of a ground-motion model."""

    name: str
    weight: float

    def evaluate(self, hazard_input: "HazardInput", imt: Imt) -> ScalarGroundMotion:
        """Compute the ground-motion moments for an input and IMT."""
        ...

    def exceedance_curve(
        self,
        means: np.ndarray,
        sigmas: np.ndarray,
        log_imls: np.ndarray,
        exceedance_model: ExceedanceModel,
        truncation_level: float,
    ) -> np.ndarray:
        """Compute exceedance probabilities, shape (len(means), len(log_imls))."""
        ...


@dataclasses.dataclass(frozen=True)
class LogNormalGmm(abc.ABC):
    """Base class for ground-motion models with log-normal ground motions.

    Subclasses implement `evaluate`; exceedance follows from the
    configured exceedance model.

    Attributes
    ----------
    name : str
        Name of the model.
    weight : float
        Logic-tree weight of the model.
    """

    name: str
    weight: float = 1.0

    def __post_init__(self) -> None:
        """Validate the weight."""
        if not 0 < self.weight <= 1:
            raise ValueError(f"GMM weight must be in (0, 1], got {self.weight}")

    @abc.abstractmethod
    def evaluate(self, hazard_input: "HazardInput", imt: Imt) -> ScalarGroundMotion:
        """Compute the ground-motion moments for an input and IMT.

        Parameters
        ----------
        hazard_input : HazardInput
            The rupture and site parameters.
        imt : Imt
            The intensity measure type.

        Returns
        -------
        ScalarGroundMotion
            Mean and sigma of the natural log of the ground motion.
        """

    def exceedance_curve(
        self,
        means: np.ndarray,
        sigmas: np.ndarray,
        log_imls: np.ndarray,
        exceedance_model: ExceedanceModel = ExceedanceModel.NONE,
        truncation_level: float = 3.0,
    ) -> np.ndarray:
        """Compute exceedance probabilities for a series of ground motions.

        See `exceedance_probabilities`.
        """
        return exceedance_probabilities(
            means, sigmas, log_imls, exceedance_model, truncation_level
        )

    def __str__(self) -> str:
        return self.name
