"""
Daily-to-annual water-balance aggregation for a single flux site.

Each site's daily records are restricted to its validity window, converted
to daily ET and PET, and summed per calendar year. Sums skip missing values
field by field, so a year with no PET still reports its precipitation and
ET totals.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple, Union

import numpy as np
import pandas as pd

from .config import DEFAULT_PET_METHOD, HPA_TO_KPA, LE_TO_MM_DAY_DIVISOR
from .exceptions import InvalidWindowError, PETDomainError
from .pet import (
    calculate_pet,
    extraterrestrial_radiation,
    relative_humidity_from_vpd,
    required_inputs,
)

logger = logging.getLogger(__name__)

ANNUAL_COLUMNS = ["site", "year", "precip", "et", "pet",
                  "n_days", "n_precip", "n_et", "n_pet"]
SUM_FIELDS = ["precip", "et", "pet"]


@dataclass(frozen=True)
class ValidityWindow:
    """Inclusive [start_year, end_year] range of reliable data for a site."""

    start_year: float
    end_year: float

    @property
    def is_valid(self) -> bool:
        try:
            start, end = float(self.start_year), float(self.end_year)
        except (TypeError, ValueError):
            return False
        return bool(np.isfinite(start) and np.isfinite(end) and start <= end)

    def contains(self, years) -> np.ndarray:
        """Boolean mask of ``years`` falling inside the window."""
        years = np.asarray(years)
        return (years >= int(self.start_year)) & (years <= int(self.end_year))


def validate_window(site: str, window: Union[ValidityWindow, Tuple]) -> ValidityWindow:
    """Coerce ``window`` to a ValidityWindow, raising InvalidWindowError if unusable."""
    if window is None:
        raise InvalidWindowError(site, None, None)
    if not isinstance(window, ValidityWindow):
        window = ValidityWindow(*window)
    if not window.is_valid:
        raise InvalidWindowError(site, window.start_year, window.end_year)
    return window


def daily_et(latent_heat) -> pd.Series:
    """Convert latent heat flux (W m-2) to evapotranspiration (mm day-1)."""
    return pd.Series(latent_heat, dtype=float) / LE_TO_MM_DAY_DIVISOR


def _relative_humidity(daily: pd.DataFrame, site: str) -> np.ndarray:
    """Measured RH where present, otherwise derived from VPD and air temperature."""
    n = len(daily)
    rh = daily["rh"].to_numpy(dtype=float) if "rh" in daily.columns else np.full(n, np.nan)
    if "vpd" in daily.columns and "tavg" in daily.columns:
        derived = relative_humidity_from_vpd(
            daily["vpd"].to_numpy(dtype=float) * HPA_TO_KPA,
            daily["tavg"].to_numpy(dtype=float),
        )
        rh = np.where(np.isnan(rh), derived, rh)
    elif "rh" not in daily.columns:
        logger.warning("Site %s: neither 'rh' nor 'vpd' available, humidity is missing", site)
    return rh


def _pet_inputs(daily: pd.DataFrame, method: str, latitude: Optional[float],
                use_ground_heat_flux: bool, site: str) -> dict:
    dates = pd.to_datetime(daily["date"])
    inputs = {}
    for name in required_inputs(method):
        if name == "day_of_year":
            inputs[name] = dates.dt.dayofyear.to_numpy()
        elif name == "latitude":
            inputs[name] = np.nan if latitude is None else latitude
        elif name == "extraterrestrial_rad" and name not in daily.columns:
            if latitude is None:
                logger.warning("Site %s: no latitude for extraterrestrial radiation, "
                               "Hargreaves PET will be missing", site)
                inputs[name] = np.full(len(daily), np.nan)
            else:
                inputs[name] = np.asarray(
                    extraterrestrial_radiation(latitude, dates.dt.dayofyear.to_numpy()))
        elif name == "rh":
            inputs[name] = _relative_humidity(daily, site)
        elif name in daily.columns:
            inputs[name] = daily[name].to_numpy(dtype=float)
        else:
            logger.warning("Site %s: column '%s' missing, %s PET will be missing",
                           site, name, method)
            inputs[name] = np.full(len(daily), np.nan)

    if (method == "priestley_taylor" and use_ground_heat_flux
            and "ground_heat_flux" in daily.columns):
        inputs["ground_heat_flux"] = daily["ground_heat_flux"].fillna(0).to_numpy(dtype=float)
    return inputs


def daily_pet(daily: pd.DataFrame, method: str = DEFAULT_PET_METHOD,
              latitude: Optional[float] = None, use_ground_heat_flux: bool = False,
              site: str = "") -> pd.Series:
    """
    Compute PET (mm day-1) for every record of a daily frame.

    Records rejected by the PET formula (e.g. Hargreaves with tmax < tmin)
    get a missing PET and are logged one by one; the rest of the series is
    still computed. Relative humidity for Penman-Monteith falls back to a
    value derived from ``vpd`` (hPa) where ``rh`` is missing.

    Parameters
    ----------
    daily : pd.DataFrame
        Canonical daily records with a ``date`` column.
    method : str
        PET method name, see ``flux_budyko.pet.PET_METHODS``.
    latitude : float, optional
        Site latitude, used by Hargreaves (extraterrestrial radiation) and
        Thornthwaite.
    use_ground_heat_flux : bool, default=False
        Subtract ``ground_heat_flux`` from net radiation in Priestley-Taylor.

    Returns
    -------
    pd.Series
        Daily PET aligned with ``daily.index``.
    """
    if daily.empty:
        return pd.Series(dtype=float, index=daily.index)

    inputs = _pet_inputs(daily, method, latitude, use_ground_heat_flux, site)
    try:
        pet = calculate_pet(method, **inputs)
    except PETDomainError as err:
        bad = err.mask
        if bad is None or bad.size != len(daily):
            raise
        for date in pd.to_datetime(daily["date"])[bad]:
            logger.warning("Site %s: PET set to missing on %s (%s)",
                           site, date.date(), err)
        for name in ("tmin", "tmax"):
            if name in inputs:
                inputs[name] = np.where(bad, np.nan, inputs[name])
        pet = calculate_pet(method, **inputs)

    pet = pd.Series(np.array(np.broadcast_to(pet, (len(daily),))), index=daily.index, dtype=float)
    if pet.isna().all():
        logger.warning("Site %s: no record has complete %s inputs, PET is missing on all %d days",
                       site, method, len(pet))
    return pet


def empty_annual_frame() -> pd.DataFrame:
    """Annual aggregate table with no rows."""
    frame = pd.DataFrame({col: pd.Series(dtype=float) for col in ANNUAL_COLUMNS})
    frame["site"] = frame["site"].astype(object)
    frame["year"] = frame["year"].astype(int)
    return frame


def aggregate_site_annual(site: str, daily: pd.DataFrame,
                          window: Union[ValidityWindow, Tuple],
                          pet_method: str = DEFAULT_PET_METHOD,
                          latitude: Optional[float] = None,
                          use_ground_heat_flux: bool = False,
                          clip_negative: bool = True) -> pd.DataFrame:
    """
    Reduce a site's daily records to annual precipitation, ET and PET sums.

    Parameters
    ----------
    site : str
        Site identifier, copied into the ``site`` column.
    daily : pd.DataFrame
        Canonical daily records (``date``, ``precip``, ``latent_heat`` and the
        meteorological inputs of ``pet_method``). Not modified.
    window : ValidityWindow or (start_year, end_year)
        Inclusive year range; records outside it are ignored.
    pet_method : str, default="priestley_taylor"
        PET formula applied to each record.
    latitude : float, optional
        Site latitude for latitude-dependent PET methods.
    use_ground_heat_flux : bool, default=False
        Pass ground heat flux to Priestley-Taylor when available.
    clip_negative : bool, default=True
        Clip daily ET and PET at zero before summing.

    Returns
    -------
    pd.DataFrame
        One row per calendar year with at least one record in the window.
        Columns: site, year, precip, et, pet (sums, mm yr-1), n_days and
        n_precip/n_et/n_pet (contributing-day counts).

    Raises
    ------
    InvalidWindowError
        If the window is non-finite or reversed.
    """
    window = validate_window(site, window)

    if daily.empty:
        logger.info("Site %s: no daily records", site)
        return empty_annual_frame()

    years = pd.to_datetime(daily["date"]).dt.year
    in_window = window.contains(years.to_numpy())
    records = daily.loc[in_window]
    if records.empty:
        logger.info("Site %s: no records inside window [%d, %d]",
                    site, int(window.start_year), int(window.end_year))
        return empty_annual_frame()

    precip = records["precip"] if "precip" in records.columns else np.nan
    latent_heat = records["latent_heat"] if "latent_heat" in records.columns else np.nan

    frame = pd.DataFrame({
        "year": years.loc[records.index].astype(int),
        "precip": pd.Series(precip, index=records.index, dtype=float),
        "et": daily_et(pd.Series(latent_heat, index=records.index)),
        "pet": daily_pet(records, pet_method, latitude, use_ground_heat_flux, site),
    }, index=records.index)

    if clip_negative:
        frame[["et", "pet"]] = frame[["et", "pet"]].clip(lower=0)

    grouped = frame.groupby("year", sort=True)
    sums = grouped[SUM_FIELDS].sum(min_count=0)
    counts = grouped[SUM_FIELDS].count().add_prefix("n_")

    annual = sums.join(counts)
    annual["n_days"] = grouped.size()
    annual = annual.reset_index()
    annual.insert(0, "site", site)

    return annual[ANNUAL_COLUMNS]
