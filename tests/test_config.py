from __future__ import annotations

import dataclasses

import pytest

from wrmf import ConfigurationError, WRMFConfig


def test_defaults() -> None:
    config = WRMFConfig()
    assert config.num_factors == 10
    assert config.c_pos == 1.0
    assert config.regularization == 0.015
    assert config.num_iter == 15
    assert config.init_mean == 0.0
    assert config.init_stdev == 0.1


def test_str() -> None:
    assert str(WRMFConfig()) == (
        "WRMF num_factors=10 regularization=0.015 c_pos=1 num_iter=15 init_mean=0 init_stdev=0.1"
    )


def test_frozen() -> None:
    config = WRMFConfig()
    with pytest.raises(dataclasses.FrozenInstanceError):
        config.regularization = 1.0  # type: ignore[misc]


def test_values_are_normalised() -> None:
    config = WRMFConfig(num_factors=4, c_pos=2, regularization=1, num_iter=3)
    assert isinstance(config.c_pos, float)
    assert isinstance(config.regularization, float)
    assert isinstance(config.num_factors, int)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"num_factors": 0},
        {"num_factors": -3},
        {"num_factors": 2.5},
        {"num_factors": True},
        {"regularization": -0.1},
        {"c_pos": -1.0},
        {"num_iter": 0},
        {"init_stdev": -1.0},
        {"regularization": float("nan")},
        {"regularization": float("inf")},
        {"c_pos": float("nan")},
        {"c_pos": float("inf")},
        {"init_mean": float("-inf")},
        {"init_stdev": float("nan")},
        {"c_pos": "2"},
    ],
)
def test_invalid_values_rejected(kwargs) -> None:
    with pytest.raises(ConfigurationError):
        WRMFConfig(**kwargs)


def test_configuration_error_is_value_error() -> None:
    with pytest.raises(ValueError, match="num_factors must be positive"):
        WRMFConfig(num_factors=0)


def test_zero_regularization_warns() -> None:
    with pytest.warns(UserWarning, match="singular"):
        config = WRMFConfig(regularization=0.0)
    assert config.regularization == 0.0


def test_replace_validates() -> None:
    config = WRMFConfig(num_factors=4)
    other = config.replace(c_pos=5.0)
    assert other.c_pos == 5.0 and other.num_factors == 4
    assert config.c_pos == 1.0
    with pytest.raises(ConfigurationError):
        config.replace(num_factors=-1)


def test_non_finite_message_names_the_field() -> None:
    with pytest.raises(ConfigurationError, match="regularization must be a finite number"):
        WRMFConfig(regularization=float("inf"))
