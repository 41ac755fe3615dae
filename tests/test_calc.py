import dataclasses
from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pytest

from fault_hazard import calc, gmm, mfd
from fault_hazard.config import CalcConfig
from fault_hazard.gmm import ExceedanceModel, Imt
from fault_hazard.magnitude_scaling import MagnitudeScaling, ScalingRelation
from fault_hazard.ruptures import FloatStyle, RuptureFloating
from fault_hazard.site import Site
from fault_hazard.sources import FaultSource, HazardModel, SourceSet, SourceType


@pytest.fixture
def model(fault_source: FaultSource, gmms: tuple, constant_gmm: type) -> HazardModel:
    interface = FaultSource(
        name="Interface",
        trace=fault_source.trace,
        depth=15.0,
        dip=15.0,
        width=40.0,
        rake=90.0,
        mfds=[mfd.gutenberg_richter(4.5, 1.0, 6.0, 6.4, bin_width=0.2)],
        scaling=MagnitudeScaling(ScalingRelation.CONTRERAS_INTERFACE2017),
        spacing=5.0,
        floating=RuptureFloating(FloatStyle.CENTERED, offset=10.0, aspect_ratio=2.0),
    )
    return HazardModel(
        "Model",
        [
            SourceSet("Crustal", SourceType.FAULT, [fault_source], gmms, weight=0.8),
            SourceSet(
                "Interface",
                SourceType.INTERFACE,
                [interface],
                [constant_gmm("constant", mean=np.log(0.05), sigma=0.6)],
            ),
        ],
    )


def test_source_set_curves(model: HazardModel, site: Site, config: CalcConfig):
    crustal = model.source_sets[0]
    curve_set = calc.source_set_curves(crustal, site, config)
    assert curve_set.source_set is crustal
    assert len(curve_set.hazard_curves) == 1
    assert set(curve_set.total_curves) == set(config.imts)


def test_hazard_curve(model: HazardModel, site: Site, config: CalcConfig):
    result = calc.hazard_curve(model, site, config)
    assert result.model is model
    assert result.site is site
    curve_sets = [
        curve_set
        for curve_sets in result.curve_sets().values()
        for curve_set in curve_sets
    ]
    assert len(curve_sets) == 2
    for imt, total in result.curves().items():
        expected = sum(curve_set.total_curves[imt].y for curve_set in curve_sets)
        assert np.allclose(total.y, expected)
        assert np.all(np.diff(total.y) <= 0)
        assert np.all(total.y >= 0)
    # Hazard at the lowest level is bounded by the weighted rate of all ruptures.
    total_rate = sum(
        source_set.weight * source.total_rate
        for source_set in model
        for source in source_set
    )
    assert result.curves()[Imt.PGA].y[0] <= total_rate * (1 + 1e-9)
    assert result.curves()[Imt.PGA].y[0] > 0


def test_parallel_matches_serial(model: HazardModel, site: Site, config: CalcConfig):
    serial = calc.hazard_curve(model, site, config)
    with ThreadPoolExecutor(max_workers=2) as executor:
        parallel = calc.hazard_curve(model, site, config, executor=executor)
    for imt in config.imts:
        assert parallel.curves()[imt].isclose(serial.curves()[imt])
    assert list(parallel.curve_sets()) == list(serial.curve_sets())


def test_truncation_reduces_hazard(model: HazardModel, site: Site):
    levels = {Imt.PGA: [0.01, 0.1, 1.0, 3.0]}
    untruncated = calc.hazard_curve(
        model, site, CalcConfig(levels, exceedance_model=ExceedanceModel.NONE)
    )
    truncated = calc.hazard_curve(
        model,
        site,
        CalcConfig(levels, exceedance_model=ExceedanceModel.TRUNCATION_UPPER_ONLY),
    )
    assert np.all(
        truncated.curves()[Imt.PGA].y <= untruncated.curves()[Imt.PGA].y * (1 + 1e-12)
    )


@dataclasses.dataclass(frozen=True)
class FailingGmm(gmm.LogNormalGmm):
    def evaluate(self, hazard_input, imt: Imt) -> gmm.ScalarGroundMotion:
        raise RuntimeError(f"{self.name} cannot evaluate {imt}")


@pytest.mark.parametrize("parallel", [False, True])
def test_failing_source_set_propagates(
    model: HazardModel, site: Site, config: CalcConfig, parallel: bool
):
    failing = SourceSet(
        "Failing",
        SourceType.SLAB,
        model.source_sets[0].sources,
        [FailingGmm("failing")],
    )
    failing_model = HazardModel("Failing", [*model.source_sets, failing])
    with pytest.raises(RuntimeError, match="failing cannot evaluate PGA"):
        if parallel:
            with ThreadPoolExecutor(max_workers=2) as executor:
                calc.hazard_curve(failing_model, site, config, executor=executor)
        else:
            calc.hazard_curve(failing_model, site, config)
