import dataclasses

import hypothesis.strategies as st
import numpy as np
import pytest
import scipy as sp
from hypothesis import given

from fault_hazard import gmm
from fault_hazard.gmm import ExceedanceModel, Imt

LOG_IMLS = np.log([0.01, 0.1, 0.5, 1.0])


@pytest.mark.parametrize(
    "imt, period",
    [
        (Imt.PGA, 0.0),
        (Imt.PGV, None),
        (Imt.SA0P1, 0.1),
        (Imt.SA0P75, 0.75),
        (Imt.SA1P0, 1.0),
        (Imt.SA5P0, 5.0),
    ],
)
def test_imt_period(imt: Imt, period: float | None):
    assert imt.period == period


def test_imt_from_string():
    assert Imt("SA1P0") is Imt.SA1P0
    assert str(Imt.PGA) == "PGA"


def test_untruncated_exceedance():
    probabilities = gmm.exceedance_probabilities(np.log(0.1), 0.5, LOG_IMLS)
    assert probabilities.shape == (4,)
    assert np.allclose(
        probabilities, sp.stats.norm.sf((LOG_IMLS - np.log(0.1)) / 0.5)
    )
    assert probabilities[1] == pytest.approx(0.5)


def test_exceedance_shape():
    means = np.log([[0.1, 0.2, 0.3], [0.4, 0.5, 0.6]])
    probabilities = gmm.exceedance_probabilities(means, 0.6, LOG_IMLS)
    assert probabilities.shape == (2, 3, 4)


def test_zero_sigma_is_step_function():
    probabilities = gmm.exceedance_probabilities(
        [np.log(0.1), np.log(0.1)], [0.0, 0.5], LOG_IMLS
    )
    # The level equal to the median is not exceeded.
    assert np.array_equal(probabilities[0], [1.0, 0.0, 0.0, 0.0])
    assert probabilities[1, 1] == pytest.approx(0.5)


def test_negative_sigma():
    with pytest.raises(ValueError, match="non-negative"):
        gmm.exceedance_probabilities(0.0, -0.1, LOG_IMLS)


def test_upper_truncation():
    sigma = 0.5
    log_imls = np.log(0.1) + sigma * np.array([-10.0, 0.0, 3.0, 3.5])
    probabilities = gmm.exceedance_probabilities(
        np.log(0.1), sigma, log_imls, ExceedanceModel.TRUNCATION_UPPER_ONLY, 3.0
    )
    assert probabilities[0] == pytest.approx(1.0)
    assert probabilities[1] == pytest.approx(
        (0.5 - sp.stats.norm.sf(3.0)) / sp.stats.norm.cdf(3.0)
    )
    assert probabilities[2] == pytest.approx(0.0, abs=1e-12)
    assert probabilities[3] == 0.0


def test_two_sided_truncation():
    sigma = 0.5
    log_imls = np.log(0.1) + sigma * np.array([-3.5, -3.0, 0.0, 3.0, 3.5])
    probabilities = gmm.exceedance_probabilities(
        np.log(0.1), sigma, log_imls, ExceedanceModel.TRUNCATION_LOWER_UPPER, 3.0
    )
    assert probabilities[0] == 1.0
    assert probabilities[1] == pytest.approx(1.0)
    assert probabilities[2] == pytest.approx(0.5)
    assert probabilities[3] == pytest.approx(0.0, abs=1e-12)
    assert probabilities[4] == 0.0


@given(
    mean=st.floats(-5.0, 1.0),
    sigma=st.floats(0.0, 1.5),
    exceedance_model=st.sampled_from(list(ExceedanceModel)),
    truncation_level=st.floats(0.5, 5.0),
)
def test_exceedance_is_decreasing_probability(
    mean: float,
    sigma: float,
    exceedance_model: ExceedanceModel,
    truncation_level: float,
):
    log_imls = np.log(np.geomspace(1e-4, 10.0, 30))
    probabilities = gmm.exceedance_probabilities(
        mean, sigma, log_imls, exceedance_model, truncation_level
    )
    assert np.all((probabilities >= 0) & (probabilities <= 1))
    assert np.all(np.diff(probabilities) <= 1e-12)


@dataclasses.dataclass(frozen=True)
class Fixed(gmm.LogNormalGmm):
    def evaluate(self, hazard_input, imt: Imt) -> gmm.ScalarGroundMotion:
        return gmm.ScalarGroundMotion(np.log(0.1), 0.5)


def test_log_normal_gmm():
    model = Fixed("fixed", weight=0.25)
    assert str(model) == "fixed"
    assert model.evaluate(None, Imt.PGA) == (np.log(0.1), 0.5)
    curve = model.exceedance_curve(
        np.array([np.log(0.1)]), np.array([0.5]), LOG_IMLS
    )
    assert curve.shape == (1, 4)
    assert np.allclose(
        curve[0], gmm.exceedance_probabilities(np.log(0.1), 0.5, LOG_IMLS)
    )


@pytest.mark.parametrize("weight", [0.0, -0.1, 1.1])
def test_invalid_gmm_weight(weight: float):
    with pytest.raises(ValueError, match="GMM weight"):
        Fixed("fixed", weight=weight)


def test_log_normal_gmm_is_abstract():
    with pytest.raises(TypeError):
        gmm.LogNormalGmm("abstract")


def test_gmms_are_hashable():
    assert len({Fixed("a", 0.5), Fixed("a", 0.5), Fixed("b", 0.5)}) == 2
