import numpy as np
import pytest

from fault_hazard import faults


@pytest.mark.parametrize(
    "value, valid_range, expected",
    [
        (0.0, faults.Range(0.0, 1.0), True),
        (1.0, faults.Range(0.0, 1.0), True),
        (0.0, faults.Range(0.0, 1.0, lower_closed=False), False),
        (1.0, faults.Range(0.0, 1.0, upper_closed=False), False),
        (0.5, faults.Range(0.0, 1.0, False, False), True),
        (-0.1, faults.Range(0.0, 1.0), False),
        (1.1, faults.Range(0.0, 1.0), False),
    ],
)
def test_range_contains(value: float, valid_range: faults.Range, expected: bool):
    assert (value in valid_range) == expected


def test_range_str():
    assert str(faults.Range(0.0, 90.0, lower_closed=False)) == "(0.0, 90.0]"
    assert str(faults.Range(-180.0, 180.0)) == "[-180.0, 180.0]"


@pytest.mark.parametrize(
    "validator, value",
    [
        (faults.validate_dip, 90.0),
        (faults.validate_dip, 0.5),
        (faults.validate_width, 60.0),
        (faults.validate_depth, 0.0),
        (faults.validate_depth, 700.0),
        (faults.validate_rake, -180.0),
        (faults.validate_rake, 180.0),
        (faults.validate_spacing, 0.1),
        (faults.validate_spacing, 20.0),
    ],
)
def test_valid_parameters(validator, value: float):
    assert validator(value) == value


@pytest.mark.parametrize(
    "validator, value, label",
    [
        (faults.validate_dip, 0.0, "Dip"),
        (faults.validate_dip, 91.0, "Dip"),
        (faults.validate_width, 0.0, "Width"),
        (faults.validate_width, 61.0, "Width"),
        (faults.validate_depth, -1.0, "Depth"),
        (faults.validate_depth, 701.0, "Depth"),
        (faults.validate_rake, 181.0, "Rake"),
        (faults.validate_spacing, 0.0, "Grid spacing"),
        (faults.validate_spacing, 25.0, "Grid spacing"),
        (faults.validate_dip, np.nan, "Dip"),
        (faults.validate_depth, np.inf, "Depth"),
    ],
)
def test_invalid_parameters(validator, value: float, label: str):
    with pytest.raises(ValueError, match=f"{label} .* is outside the valid range"):
        validator(value)


def test_validate_trace():
    trace = faults.validate_trace([[-43.0, 172.0], [-43.1, 172.5], [-43.2, 173.0]])
    assert trace.shape == (3, 2)
    assert trace.dtype == np.float64
    assert not trace.flags.writeable


@pytest.mark.parametrize(
    "trace, message",
    [
        ([[-43.0, 172.0]], "at least two points"),
        ([-43.0, 172.0], "shape"),
        ([[-43.0, 172.0, 0.0], [-43.1, 172.5, 0.0]], "shape"),
        ([[-43.0, 172.0], [np.nan, 172.5]], "non-finite"),
        ([[-95.0, 172.0], [-43.1, 172.5]], "outside"),
        ([[-43.0, 172.0], [-43.1, 190.0]], "outside"),
        ([[-43.0, 172.0], [-43.0, 172.0], [-43.1, 172.5]], "repeated"),
    ],
)
def test_invalid_trace(trace: list, message: str):
    with pytest.raises(ValueError, match=message):
        faults.validate_trace(trace)


def test_validate_name():
    assert faults.validate_name("  Alpine Fault ") == "Alpine Fault"
    with pytest.raises(ValueError, match="non-empty string"):
        faults.validate_name("   ")
    with pytest.raises(ValueError, match="non-empty string"):
        faults.validate_name(None)
