import math

import pytest

from flightrisk.utils.numeric import clamp_score, coerce_finite, read_number, read_value


@pytest.mark.parametrize("value,expected", [
    (12, 12.0),
    ("12.5", 12.5),
    (0, 0.0),
    (-3.5, -3.5),
])
def test_coerce_finite_numbers(value, expected):
    assert coerce_finite(value) == expected


@pytest.mark.parametrize("value", [None, "", "  ", "abc", float("nan"), float("inf"), -math.inf, {}, [], True])
def test_coerce_finite_rejects(value):
    assert coerce_finite(value) is None


def test_zero_is_not_missing():
    assert coerce_finite(0) is not None


@pytest.mark.parametrize("value,expected", [
    (42.4, 42),
    (30.5, 31),
    (-5, 0),
    (150, 100),
    (99.6, 100),
    (float("nan"), 0),
])
def test_clamp_score(value, expected):
    assert clamp_score(value) == expected
    assert isinstance(clamp_score(value), int)


def test_read_value_paths():
    obs = {"weather": [{"id": 741, "description": "fog"}], "main": {"pressure": 1002}, "rain": {"1h": 0.4}}
    assert read_value(obs, "weather[0].id") == 741
    assert read_value(obs, "weather[0].description") == "fog"
    assert read_number(obs, "main.pressure") == 1002.0
    assert read_number(obs, "rain.1h") == 0.4


def test_read_value_tolerates_wrong_shapes():
    assert read_value({"weather": []}, "weather[0].id") is None
    assert read_value({"weather": "rain"}, "weather[0].id") is None
    assert read_value({"main": 5}, "main.temp") is None
    assert read_value(None, "wind.speed") is None
    assert read_value("garbage", "wind.speed") is None
    assert read_number({"wind": {"speed": "n/a"}}, "wind.speed") is None
