import numpy as np
import pytest

from fault_hazard.site import HazardInput, HazardInputs, Site
from fault_hazard.sources import FaultSource


def test_site_defaults():
    site = Site("WEL", lat=-41.3, lon=174.8)
    assert site.vs30 == 760.0
    assert site.vs_inferred
    assert np.isnan(site.z1p0)
    assert np.isnan(site.z2p5)


@pytest.mark.parametrize(
    "kwargs, message",
    [
        (dict(name=""), "non-empty"),
        (dict(lat=-91.0), "latitude"),
        (dict(lat=np.nan), "latitude"),
        (dict(lon=181.0), "longitude"),
        (dict(vs30=100.0), "Vs30"),
        (dict(vs30=3500.0), "Vs30"),
    ],
)
def test_invalid_site(kwargs: dict, message: str):
    parameters = dict(name="WEL", lat=-41.3, lon=174.8) | kwargs
    with pytest.raises(ValueError, match=message):
        Site(**parameters)


def test_hazard_input_from_rupture(fault_source: FaultSource, site: Site):
    rupture = fault_source.rupture_lists[0][0]
    hazard_input = HazardInput.from_rupture(rupture, site)
    distances = rupture.surface.distances(site.lat, site.lon)
    assert hazard_input.rate == rupture.rate
    assert hazard_input.magnitude == rupture.magnitude
    assert hazard_input.rake == rupture.rake
    assert (hazard_input.r_jb, hazard_input.r_rup, hazard_input.r_x) == distances
    assert hazard_input.dip == pytest.approx(60.0)
    assert hazard_input.width == pytest.approx(10.0)
    assert hazard_input.z_top == pytest.approx(0.0)
    assert hazard_input.z_hyp == pytest.approx(10.0 * np.sin(np.radians(60)) / 2)
    assert hazard_input.vs30 == site.vs30
    assert hazard_input.vs_inferred == site.vs_inferred
    # The site sits over the hanging wall of the fault.
    assert hazard_input.r_x > 0
    assert hazard_input.r_jb == pytest.approx(0.0, abs=1e-6)
    assert "M=6.80" in str(hazard_input)


def test_hazard_inputs(fault_source: FaultSource, site: Site):
    inputs = HazardInputs.from_source(fault_source, site)
    assert inputs.source is fault_source
    assert len(inputs) == len(fault_source)
    assert [hazard_input.magnitude for hazard_input in inputs] == [
        rupture.magnitude for rupture in fault_source
    ]
    assert np.array_equal(inputs.rates, [rupture.rate for rupture in fault_source])
    assert not inputs.rates.flags.writeable
    assert inputs[0] is inputs[0]
    assert inputs[-1] is list(inputs)[-1]
    assert len(inputs[1:3]) == 2
