import dataclasses

import numpy as np
import pyproj
import pytest

from fault_hazard import gmm, mfd
from fault_hazard.config import DEFAULT_IMLS, CalcConfig
from fault_hazard.gmm import Imt
from fault_hazard.magnitude_scaling import MagnitudeScaling, ScalingRelation
from fault_hazard.ruptures import RuptureFloating
from fault_hazard.site import Site
from fault_hazard.sources import FaultSource

GEOD = pyproj.Geod(ellps="sphere")


def straight_trace(
    length: float, lat: float = -43.0, lon: float = 172.0, strike: float = 90.0
) -> np.ndarray:
    """A two point (lat, lon) trace of the given length (km) and strike."""
    end_lon, end_lat, _ = GEOD.fwd(lon, lat, strike, length * 1000)
    return np.array([[lat, lon], [end_lat, end_lon]])


@dataclasses.dataclass(frozen=True)
class AttenuationGmm(gmm.LogNormalGmm):
    """A toy model: ln(Y) = c0 + c1 (M - 6) - ln(rRup + 10) - 0.2 T."""

    c0: float = -1.0
    c1: float = 1.0
    sigma: float = 0.6

    def evaluate(self, hazard_input, imt: Imt) -> gmm.ScalarGroundMotion:
        period = imt.period or 0.0
        mean = (
            self.c0
            + self.c1 * (hazard_input.magnitude - 6)
            - np.log(hazard_input.r_rup + 10)
            - 0.2 * period
        )
        return gmm.ScalarGroundMotion(mean, self.sigma)


@dataclasses.dataclass(frozen=True)
class ConstantGmm(gmm.LogNormalGmm):
    """A model predicting the same ground motion for every input."""

    mean: float = float(np.log(0.1))
    sigma: float = 0.5

    def evaluate(self, hazard_input, imt: Imt) -> gmm.ScalarGroundMotion:
        return gmm.ScalarGroundMotion(self.mean, self.sigma)


@pytest.fixture
def attenuation_gmm() -> type[AttenuationGmm]:
    return AttenuationGmm


@pytest.fixture
def constant_gmm() -> type[ConstantGmm]:
    return ConstantGmm


@pytest.fixture
def gmms() -> tuple[AttenuationGmm, AttenuationGmm]:
    return (
        AttenuationGmm("attenuation_a", weight=0.6),
        AttenuationGmm("attenuation_b", weight=0.4, c0=-0.5, sigma=0.7),
    )


@pytest.fixture
def fault_source() -> FaultSource:
    return FaultSource(
        name="Test Fault",
        trace=straight_trace(30),
        depth=0.0,
        dip=60.0,
        width=10.0,
        rake=90.0,
        mfds=[
            mfd.single(6.8, 0.01),
            mfd.gutenberg_richter(4.0, 1.0, 6.0, 6.4, bin_width=0.1),
        ],
        scaling=MagnitudeScaling(ScalingRelation.WC1994_LENGTH, rake=90.0),
        spacing=2.0,
        floating=RuptureFloating(offset=5.0),
    )


@pytest.fixture
def site() -> Site:
    lon, lat, _ = GEOD.fwd(172.2, -43.0, 180, 3000)
    return Site("Test Site", lat=lat, lon=lon, vs30=400.0)


@pytest.fixture
def config() -> CalcConfig:
    return CalcConfig(imls={Imt.PGA: DEFAULT_IMLS, Imt.SA1P0: DEFAULT_IMLS})
