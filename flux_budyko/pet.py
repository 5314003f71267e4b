"""
Potential evapotranspiration (PET) from daily flux-tower meteorology.

Four empirical formulas share one dispatch entry point, ``calculate_pet``.
All functions accept scalars or array-likes, never mutate their inputs, and
let NaN inputs propagate to NaN outputs.
"""

import warnings

import numpy as np

from .config import (
    LATENT_HEAT_VAPORIZATION,
    PRIESTLEY_TAYLOR_ALPHA,
    PSYCHROMETRIC_CONSTANT,
    W_M2_TO_MJ_M2_DAY,
)
from .exceptions import PETDomainError, ThornthwaiteAccuracyWarning, UnknownPETMethodError


def _to_output(value):
    value = np.asarray(value, dtype=float)
    if value.ndim == 0:
        return float(value)
    return value


def saturation_vapor_pressure(temp):
    """
    Saturation vapor pressure (kPa) at air temperature ``temp`` (°C).

    Tetens form used by FAO-56: ``es = 0.6108 * exp(17.27 T / (T + 237.3))``.
    """
    temp = np.asarray(temp, dtype=float)
    return _to_output(0.6108 * np.exp(17.27 * temp / (temp + 237.3)))


def vapor_pressure_slope(temp):
    """Slope of the saturation vapor pressure curve (kPa °C-1)."""
    temp = np.asarray(temp, dtype=float)
    es = 0.6108 * np.exp(17.27 * temp / (temp + 237.3))
    return _to_output(4098 * es / (temp + 237.3) ** 2)


def relative_humidity_from_vpd(vpd, tavg):
    """
    Relative humidity (%) from vapor pressure deficit and air temperature.

    Actual vapor pressure is ``ea = es - vpd``; the result is ``100 * ea / es``
    bounded to [0, 100].

    Parameters
    ----------
    vpd : float or array-like
        Vapor pressure deficit (kPa)
    tavg : float or array-like
        Mean air temperature (°C)

    Returns
    -------
    rh : float or np.ndarray
        Relative humidity (%)
    """
    vpd = np.asarray(vpd, dtype=float)
    es = np.asarray(saturation_vapor_pressure(tavg))
    ea = es - vpd
    return _to_output(np.clip(100 * ea / es, 0.0, 100.0))


def priestley_taylor(net_rad, tavg, pressure, ground_heat_flux=0):
    """
    Calculate PET using the Priestley-Taylor method.

    Parameters
    ----------
    net_rad : float or array-like
        Net radiation (W m-2)
    tavg : float or array-like
        Mean daily air temperature (°C)
    pressure : float or array-like
        Atmospheric pressure (kPa). Accepted for interface symmetry; the
        psychrometric constant is held at 0.066 kPa °C-1.
    ground_heat_flux : float or array-like, default=0
        Ground heat flux (W m-2)

    Returns
    -------
    PET : float or np.ndarray
        Potential evapotranspiration (mm day-1). Negative net radiation gives
        negative PET; the sign is preserved.

    Examples
    --------
    >>> pet = priestley_taylor(net_rad=150.0, tavg=20.0, pressure=101.3)
    >>> print(f"PET = {pet:.2f} mm/day")
    """
    net_rad = np.asarray(net_rad, dtype=float)
    tavg = np.asarray(tavg, dtype=float)
    ground_heat_flux = np.asarray(ground_heat_flux, dtype=float)

    delta = np.asarray(vapor_pressure_slope(tavg))

    # W m-2 -> MJ m-2 day-1
    Rn_MJ = (net_rad - ground_heat_flux) * W_M2_TO_MJ_M2_DAY

    pet = (PRIESTLEY_TAYLOR_ALPHA * (delta / (delta + PSYCHROMETRIC_CONSTANT)) * Rn_MJ
           / LATENT_HEAT_VAPORIZATION)
    return _to_output(pet)


def penman_monteith(net_rad, tavg, rh, wind_speed, pressure):
    """
    Calculate PET using the FAO-56 Penman-Monteith form.

    Parameters
    ----------
    net_rad : float or array-like
        Net radiation (W m-2)
    tavg : float or array-like
        Mean daily air temperature (°C)
    rh : float or array-like
        Relative humidity (%)
    wind_speed : float or array-like
        Wind speed (m s-1)
    pressure : float or array-like
        Atmospheric pressure (kPa), accepted for interface symmetry.

    Returns
    -------
    PET : float or np.ndarray
        Potential evapotranspiration (mm day-1)

    References
    ----------
    Allen et al. (1998). Crop evapotranspiration - Guidelines for computing
    crop water requirements. FAO Irrigation and Drainage Paper 56.
    """
    net_rad = np.asarray(net_rad, dtype=float)
    tavg = np.asarray(tavg, dtype=float)
    rh = np.asarray(rh, dtype=float)
    wind_speed = np.asarray(wind_speed, dtype=float)

    es = np.asarray(saturation_vapor_pressure(tavg))
    ea = es * (rh / 100)
    delta = 4098 * es / (tavg + 237.3) ** 2

    Rn_MJ = net_rad * W_M2_TO_MJ_M2_DAY
    gamma = PSYCHROMETRIC_CONSTANT

    numerator = 0.408 * delta * Rn_MJ + gamma * (900 / (tavg + 273)) * wind_speed * (es - ea)
    denominator = delta + gamma * (1 + 0.34 * wind_speed)

    return _to_output(numerator / denominator)


def hargreaves(tmin, tmax, tavg, extraterrestrial_rad):
    """
    Calculate PET using the Hargreaves temperature method.

    Parameters
    ----------
    tmin, tmax, tavg : float or array-like
        Minimum, maximum and mean daily air temperature (°C)
    extraterrestrial_rad : float or array-like
        Extraterrestrial radiation (MJ m-2 day-1), see
        ``extraterrestrial_radiation``.

    Returns
    -------
    PET : float or np.ndarray
        Potential evapotranspiration (mm day-1). For ``tavg < -17.8`` the
        temperature term is negative and so is the result.

    Raises
    ------
    PETDomainError
        If any record has ``tmax < tmin``. ``err.mask`` flags those records.
    """
    tmin = np.asarray(tmin, dtype=float)
    tmax = np.asarray(tmax, dtype=float)
    tavg = np.asarray(tavg, dtype=float)
    extraterrestrial_rad = np.asarray(extraterrestrial_rad, dtype=float)

    temp_range = tmax - tmin
    # NaN comparisons are False, so missing values propagate instead of raising
    invalid = temp_range < 0
    if np.any(invalid):
        raise PETDomainError(
            f"Hargreaves requires tmax >= tmin ({int(np.sum(invalid))} record(s) violate it)",
            mask=invalid,
        )

    pet = 0.0023 * (tavg + 17.8) * np.sqrt(temp_range) * extraterrestrial_rad
    return _to_output(pet)


def thornthwaite(tavg, latitude, day_of_year):
    """
    Calculate PET using a single-value Thornthwaite approximation.

    The heat index is computed from the day's own temperature and the
    day-length correction factor is fixed at 1.0, so the result does not
    depend on ``latitude`` or ``day_of_year``. A
    ``ThornthwaiteAccuracyWarning`` is emitted on every call.

    Parameters
    ----------
    tavg : float or array-like
        Mean daily air temperature (°C)
    latitude : float or array-like
        Latitude (degrees)
    day_of_year : int or array-like
        Day of year (1-366)

    Returns
    -------
    PET : float or np.ndarray
        Potential evapotranspiration (mm day-1); exactly 0 where tavg <= 0.
    """
    warnings.warn(
        "Thornthwaite PET uses a placeholder day-length factor of 1.0 and is "
        "not latitude/day-of-year accurate",
        ThornthwaiteAccuracyWarning,
        stacklevel=2,
    )
    tavg = np.asarray(tavg, dtype=float)

    with np.errstate(invalid="ignore", divide="ignore"):
        heat_index = (tavg / 5) ** 1.514
        a = 0.016 * heat_index + 0.5
        pet_unadj = 16 * (10 * tavg / heat_index) ** a

    daylight_factor = 1.0
    pet = pet_unadj * daylight_factor / 30  # monthly -> mm day-1

    pet = np.where(tavg <= 0, 0.0, pet)
    return _to_output(pet)


def extraterrestrial_radiation(latitude, doy):
    """
    Calculate extraterrestrial radiation.

    Parameters
    ----------
    latitude : float or array-like
        Latitude (degrees)
    doy : int or array-like
        Day of year

    Returns
    -------
    Ra : float or np.ndarray
        Extraterrestrial radiation (MJ m-2 day-1)
    """
    doy = np.asarray(doy, dtype=float)

    # Solar constant
    Gsc = 0.0820  # MJ m-2 min-1

    lat_rad = np.deg2rad(latitude)

    # Solar declination
    delta = 0.409 * np.sin(2 * np.pi * doy / 365 - 1.39)

    # Sunset hour angle, clipped for polar day/night
    omega_s = np.arccos(np.clip(-np.tan(lat_rad) * np.tan(delta), -1.0, 1.0))

    # Inverse relative distance Earth-Sun
    dr = 1 + 0.033 * np.cos(2 * np.pi * doy / 365)

    Ra = (24 * 60 / np.pi) * Gsc * dr * (
        omega_s * np.sin(lat_rad) * np.sin(delta) +
        np.cos(lat_rad) * np.cos(delta) * np.sin(omega_s)
    )
    return _to_output(Ra)


PET_METHODS = {
    "priestley_taylor": priestley_taylor,
    "penman_monteith": penman_monteith,
    "hargreaves": hargreaves,
    "thornthwaite": thornthwaite,
}

# Inputs each method needs from a daily record (optional ones excluded)
PET_INPUTS = {
    "priestley_taylor": ("net_rad", "tavg", "pressure"),
    "penman_monteith": ("net_rad", "tavg", "rh", "wind_speed", "pressure"),
    "hargreaves": ("tmin", "tmax", "tavg", "extraterrestrial_rad"),
    "thornthwaite": ("tavg", "latitude", "day_of_year"),
}


def required_inputs(method):
    """Return the input names ``calculate_pet`` needs for ``method``."""
    if method not in PET_INPUTS:
        raise UnknownPETMethodError(method, PET_METHODS)
    return PET_INPUTS[method]


def calculate_pet(method="priestley_taylor", **inputs):
    """
    Calculate PET with the named method.

    Parameters
    ----------
    method : {"priestley_taylor", "penman_monteith", "hargreaves", "thornthwaite"}
        PET formula to apply.
    **inputs
        Keyword arguments forwarded to the selected formula.

    Returns
    -------
    PET : float or np.ndarray
        Potential evapotranspiration (mm day-1)

    Raises
    ------
    UnknownPETMethodError
        If ``method`` is not one of the four registered names.

    Examples
    --------
    >>> calculate_pet("priestley_taylor", net_rad=120.0, tavg=15.0, pressure=100.0)
    >>> calculate_pet("hargreaves", tmin=10, tmax=24, tavg=17, extraterrestrial_rad=35)
    """
    try:
        func = PET_METHODS[method]
    except (KeyError, TypeError):
        raise UnknownPETMethodError(method, PET_METHODS) from None
    return func(**inputs)
