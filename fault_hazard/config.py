"""Hazard calculation configuration.

The configuration fixes the intensity measure levels (the x-axis of every
hazard curve) for each IMT, and the distribution used to turn
ground-motion moments into exceedance probabilities. It is read-only for
the lifetime of a calculation.

Examples
--------
A configuration file looks like:

    {
        "imls": {"PGA": [0.01, 0.1, 1.0], "SA1P0": [0.01, 0.1, 1.0]},
        "exceedance_model": "truncation_upper_only",
        "truncation_level": 3.0
    }
"""

import dataclasses
import json
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Any, Self

import numpy as np
import numpy.typing as npt

from fault_hazard.gmm import ExceedanceModel, Imt

DEFAULT_IMLS = (
    0.0025, 0.0045, 0.0075, 0.0113, 0.0169, 0.0253, 0.0380, 0.0570, 0.0854, 0.128,
    0.192, 0.288, 0.432, 0.649, 0.973, 1.46, 2.19, 3.28, 4.92, 7.38,
)  # fmt: skip
"""Default intensity measure levels (g)."""


@dataclasses.dataclass(frozen=True, eq=False)
class CalcConfig:
    """Configuration of a hazard calculation.

    Attributes
    ----------
    imls : Mapping[Imt, np.ndarray]
        Strictly increasing, positive intensity measure levels for each IMT.
    exceedance_model : ExceedanceModel
        Distribution used to compute exceedance probabilities.
    truncation_level : float
        Truncation level of the distribution, in units of sigma.
    """

    imls: Mapping[Imt, npt.ArrayLike] = dataclasses.field(
        default_factory=lambda: {Imt.PGA: DEFAULT_IMLS}
    )
    exceedance_model: ExceedanceModel = ExceedanceModel.TRUNCATION_UPPER_ONLY
    truncation_level: float = 3.0

    def __post_init__(self) -> None:
        """Validate the configuration and freeze the intensity levels."""
        if not self.imls:
            raise ValueError("Configuration must define levels for at least one IMT")
        imls = {}
        for imt, levels in self.imls.items():
            levels = np.array(levels, dtype=np.float64)
            if levels.ndim != 1 or len(levels) == 0:
                raise ValueError(f"Levels for {imt} must be a non-empty sequence")
            if np.any(levels <= 0) or np.any(np.diff(levels) <= 0):
                raise ValueError(
                    f"Levels for {imt} must be positive and strictly increasing"
                )
            levels.flags.writeable = False
            imls[Imt(imt)] = levels
        object.__setattr__(self, "imls", MappingProxyType(imls))
        object.__setattr__(
            self, "exceedance_model", ExceedanceModel(self.exceedance_model)
        )
        if not self.truncation_level > 0:
            raise ValueError(
                f"Truncation level must be positive, got {self.truncation_level}"
            )

    @property
    def imts(self) -> tuple[Imt, ...]:  # numpydoc ignore=RT01
        """tuple[Imt, ...]: The configured intensity measure types."""
        return tuple(self.imls)

    def log_imls(self, imt: Imt) -> np.ndarray:
        """Return the natural log of the intensity levels of an IMT.

        Parameters
        ----------
        imt : Imt
            The intensity measure type.

        Returns
        -------
        np.ndarray
            The log intensity levels.
        """
        return np.log(self.imls[imt])

    @classmethod
    def from_dict(cls, config: Mapping[str, Any]) -> Self:
        """Create a configuration from a JSON-like dictionary.

        Parameters
        ----------
        config : Mapping[str, Any]
            The configuration. Keys other than 'imls', 'exceedance_model'
            and 'truncation_level' are rejected.

        Returns
        -------
        CalcConfig
            The configuration.
        """
        unknown = set(config) - {field.name for field in dataclasses.fields(cls)}
        if unknown:
            raise ValueError(f"Unknown configuration keys: {sorted(unknown)}")
        return cls(**config)


def read_config(config_ffp: Path) -> CalcConfig:
    """Read a calculation configuration from a JSON file.

    Parameters
    ----------
    config_ffp : Path
        Path to the configuration file.

    Returns
    -------
    CalcConfig
        The configuration.
    """
    with open(config_ffp, "r", encoding="utf-8") as config_file:
        return CalcConfig.from_dict(json.load(config_file))
