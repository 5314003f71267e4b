"""
Tests for the PET engine
"""

import warnings

import numpy as np
import pytest

from flux_budyko.exceptions import (
    PETDomainError,
    ThornthwaiteAccuracyWarning,
    UnknownPETMethodError,
)
from flux_budyko.pet import (
    PET_METHODS,
    calculate_pet,
    extraterrestrial_radiation,
    hargreaves,
    penman_monteith,
    priestley_taylor,
    relative_humidity_from_vpd,
    required_inputs,
    saturation_vapor_pressure,
    thornthwaite,
    vapor_pressure_slope,
)


def _slope(tavg):
    es = 0.6108 * np.exp(17.27 * tavg / (tavg + 237.3))
    return 4098 * es / (tavg + 237.3) ** 2


# ============================================================================
# Helpers
# ============================================================================

def test_saturation_vapor_pressure():
    # FAO-56 Annex 2: es(20 degC) = 2.338 kPa
    assert saturation_vapor_pressure(20.0) == pytest.approx(2.338, abs=1e-3)
    assert vapor_pressure_slope(20.0) == pytest.approx(0.1447, abs=1e-4)


def test_extraterrestrial_radiation():
    Ra = extraterrestrial_radiation(0.0, 80)
    assert 35 < Ra < 40, f"Equatorial Ra at equinox should be ~37.8 (got {Ra:.2f})"

    # Polar night
    assert extraterrestrial_radiation(80.0, 355) == pytest.approx(0.0, abs=1e-9)

    Ra_arr = extraterrestrial_radiation(45.0, np.arange(1, 366))
    assert Ra_arr.shape == (365,)
    assert np.all(Ra_arr >= 0)


# ============================================================================
# Priestley-Taylor
# ============================================================================

def test_priestley_taylor_value():
    tavg, net_rad = 20.0, 150.0
    delta = _slope(tavg)
    expected = 1.26 * delta / (delta + 0.066) * net_rad * 0.0864 / 2.45

    assert priestley_taylor(net_rad, tavg, 101.3) == pytest.approx(expected, rel=1e-12)
    assert priestley_taylor(net_rad, tavg, 101.3) == pytest.approx(4.578, abs=1e-2)


def test_priestley_taylor_zero_radiation():
    for tavg in (-10.0, 0.0, 15.0, 35.0):
        assert priestley_taylor(0.0, tavg, 100.0) == 0.0
        assert priestley_taylor(0.0, tavg, 100.0, ground_heat_flux=0) == 0.0


def test_priestley_taylor_ground_heat_flux():
    full = priestley_taylor(200.0, 20.0, 100.0)
    reduced = priestley_taylor(200.0, 20.0, 100.0, ground_heat_flux=50.0)
    assert reduced == pytest.approx(full * 150.0 / 200.0)
    assert priestley_taylor(50.0, 20.0, 100.0, ground_heat_flux=50.0) == 0.0


def test_priestley_taylor_negative_radiation_kept():
    assert priestley_taylor(-40.0, 5.0, 100.0) < 0


# ============================================================================
# Penman-Monteith
# ============================================================================

def test_penman_monteith_saturated_air():
    # rh = 100 %: the aerodynamic term vanishes
    tavg, net_rad, u = 18.0, 120.0, 2.5
    delta = _slope(tavg)
    expected = 0.408 * delta * net_rad * 0.0864 / (delta + 0.066 * (1 + 0.34 * u))

    pet = penman_monteith(net_rad, tavg, rh=100.0, wind_speed=u, pressure=100.0)
    assert pet == pytest.approx(expected, rel=1e-12)


def test_penman_monteith_drier_air_raises_pet():
    humid = penman_monteith(120.0, 18.0, rh=90.0, wind_speed=2.0, pressure=100.0)
    dry = penman_monteith(120.0, 18.0, rh=30.0, wind_speed=2.0, pressure=100.0)
    assert dry > humid > 0


# ============================================================================
# Hargreaves
# ============================================================================

def test_hargreaves_value():
    pet = hargreaves(tmin=10.0, tmax=26.0, tavg=18.0, extraterrestrial_rad=35.0)
    assert pet == pytest.approx(0.0023 * 35.8 * 4.0 * 35.0)


def test_hargreaves_domain_error():
    with pytest.raises(PETDomainError):
        hargreaves(tmin=20.0, tmax=10.0, tavg=15.0, extraterrestrial_rad=30.0)

    tmin = np.array([5.0, 12.0, 3.0])
    tmax = np.array([15.0, 8.0, 9.0])
    with pytest.raises(PETDomainError) as excinfo:
        hargreaves(tmin, tmax, (tmin + tmax) / 2, 30.0)
    np.testing.assert_array_equal(excinfo.value.mask, [False, True, False])


def test_hargreaves_equal_temperatures():
    assert hargreaves(tmin=12.0, tmax=12.0, tavg=12.0, extraterrestrial_rad=30.0) == 0.0


def test_hargreaves_cold_multiplier_preserved():
    pet = hargreaves(tmin=-30.0, tmax=-20.0, tavg=-25.0, extraterrestrial_rad=10.0)
    assert pet < 0, "Negative temperature multiplier must not be clamped"

    assert hargreaves(tmin=0.0, tmax=10.0, tavg=-17.8, extraterrestrial_rad=10.0) == pytest.approx(0.0)
    assert hargreaves(tmin=0.0, tmax=10.0, tavg=-17.0, extraterrestrial_rad=10.0) >= 0


def test_hargreaves_nan_propagates():
    pet = hargreaves(np.array([np.nan, 5.0]), np.array([10.0, np.nan]), 8.0, 30.0)
    assert np.all(np.isnan(pet))


# ============================================================================
# Thornthwaite
# ============================================================================

def test_thornthwaite_below_freezing():
    with pytest.warns(ThornthwaiteAccuracyWarning):
        for latitude in (-60.0, 0.0, 45.0, 80.0):
            for doy in (1, 100, 200, 365):
                assert thornthwaite(0.0, latitude, doy) == 0.0
                assert thornthwaite(-12.5, latitude, doy) == 0.0


def test_thornthwaite_value():
    tavg = 10.0
    I = (tavg / 5) ** 1.514
    a = 0.016 * I + 0.5
    expected = 16 * (10 * tavg / I) ** a / 30

    with pytest.warns(ThornthwaiteAccuracyWarning):
        pet = thornthwaite(tavg, latitude=45.0, day_of_year=180)
    assert pet == pytest.approx(expected)
    assert pet == pytest.approx(3.71, abs=0.05)


def test_thornthwaite_ignores_latitude():
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", ThornthwaiteAccuracyWarning)
        north = thornthwaite(15.0, 60.0, 172)
        south = thornthwaite(15.0, -60.0, 172)
        winter = thornthwaite(15.0, 60.0, 355)
    assert north == south == winter


def test_thornthwaite_array():
    tavg = np.array([-5.0, 0.0, np.nan, 20.0])
    with pytest.warns(ThornthwaiteAccuracyWarning):
        pet = thornthwaite(tavg, 45.0, np.array([10, 11, 12, 13]))
    assert pet[0] == 0.0 and pet[1] == 0.0
    assert np.isnan(pet[2])
    assert pet[3] > 0


# ============================================================================
# Dispatch
# ============================================================================

METHOD_INPUTS = {
    "priestley_taylor": dict(net_rad=140.0, tavg=16.0, pressure=99.0),
    "penman_monteith": dict(net_rad=140.0, tavg=16.0, rh=55.0, wind_speed=2.0, pressure=99.0),
    "hargreaves": dict(tmin=8.0, tmax=24.0, tavg=16.0, extraterrestrial_rad=33.0),
    "thornthwaite": dict(tavg=16.0, latitude=45.0, day_of_year=150),
}


@pytest.mark.filterwarnings("ignore::flux_budyko.exceptions.ThornthwaiteAccuracyWarning")
@pytest.mark.parametrize("method", sorted(METHOD_INPUTS))
def test_calculate_pet_dispatch_deterministic(method):
    inputs = METHOD_INPUTS[method]
    first = calculate_pet(method, **inputs)
    second = calculate_pet(method, **inputs)
    assert first == second
    assert first == PET_METHODS[method](**inputs)
    assert set(required_inputs(method)) <= set(inputs)


@pytest.mark.filterwarnings("ignore::flux_budyko.exceptions.ThornthwaiteAccuracyWarning")
@pytest.mark.parametrize("method", sorted(METHOD_INPUTS))
def test_calculate_pet_nan_input(method):
    inputs = dict(METHOD_INPUTS[method], tavg=np.nan)
    assert np.isnan(calculate_pet(method, **inputs))


def test_unknown_method():
    with pytest.raises(UnknownPETMethodError) as excinfo:
        calculate_pet("blaney_criddle", tavg=10.0)

    message = str(excinfo.value)
    for name in ("priestley_taylor", "penman_monteith", "hargreaves", "thornthwaite"):
        assert name in message
    assert isinstance(excinfo.value, ValueError)

    with pytest.raises(UnknownPETMethodError):
        required_inputs("blaney_criddle")


def test_default_method_is_priestley_taylor():
    assert calculate_pet(net_rad=100.0, tavg=10.0, pressure=100.0) == \
        priestley_taylor(100.0, 10.0, 100.0)


def test_array_inputs():
    n = 365
    net_rad = np.linspace(-20, 250, n)
    tavg = np.full(n, 15.0)
    pet = calculate_pet("priestley_taylor", net_rad=net_rad, tavg=tavg, pressure=100.0)
    assert pet.shape == (n,)
    assert np.all(np.diff(pet) > 0)


def test_relative_humidity_from_vpd():
    es = saturation_vapor_pressure(20.0)
    assert relative_humidity_from_vpd(0.0, 20.0) == pytest.approx(100.0)
    assert relative_humidity_from_vpd(es / 2, 20.0) == pytest.approx(50.0)
    # Deficit larger than es is bounded at 0 %
    assert relative_humidity_from_vpd(es * 2, 20.0) == 0.0

    rh = relative_humidity_from_vpd(np.array([0.8, np.nan]), np.array([20.0, 20.0]))
    assert rh[0] == pytest.approx(100 * (es - 0.8) / es)
    assert np.isnan(rh[1])
