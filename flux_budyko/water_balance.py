"""
Water-balance indices and Budyko-space diagnostics.

Aridity index (PET/P) and evaporation ratio (ET/P) are computed for every
site-year and for each site's whole period. Ratios are only defined for
positive precipitation; elsewhere they are ``pd.NA`` in nullable ``Float64``
columns and ``ratio_defined`` is False, so zero-precipitation rows stay in
the table and consumers decide whether to drop them.

References
----------
Budyko, M. I. (1974). Climate and Life. Academic Press.
"""

from typing import Optional, Sequence

import numpy as np
import pandas as pd

from .config import METADATA_COLUMNS, SITE_COLUMN

PERIOD_COLUMNS = ["site", "mean_precip", "mean_et", "mean_pet", "n_years",
                  "aridity_index", "evaporation_ratio", "ratio_defined"]


def _to_float_array(values) -> np.ndarray:
    if hasattr(values, "to_numpy"):
        return values.to_numpy(dtype=float, na_value=np.nan)
    return np.asarray(values, dtype=float)


def safe_ratio(numerator, denominator):
    """
    Divide two aligned series, leaving the ratio undefined where the
    denominator is missing or not strictly positive.

    Parameters
    ----------
    numerator, denominator : array-like or pd.Series
        Same length. The result takes the numerator's index when it has one.

    Returns
    -------
    ratio : pd.Series (Float64)
        ``numerator / denominator``, ``pd.NA`` where undefined.
    defined : pd.Series (bool)
        True where the ratio is defined.

    Examples
    --------
    >>> ratio, defined = safe_ratio([5.0, 1.0], [10.0, 0.0])
    >>> ratio.tolist()
    [0.5, <NA>]
    """
    index = numerator.index if isinstance(numerator, pd.Series) else None
    num = _to_float_array(numerator)
    den = _to_float_array(denominator)
    if num.shape != den.shape:
        raise ValueError("numerator and denominator must have the same length")

    with np.errstate(invalid="ignore"):
        defined = np.isfinite(num) & np.isfinite(den) & (den > 0)
    values = np.full(num.shape, np.nan)
    values[defined] = num[defined] / den[defined]

    ratio = pd.Series(pd.array(values, dtype="Float64"), index=index)
    ratio[~defined] = pd.NA
    return ratio, pd.Series(defined, index=ratio.index, dtype=bool)


def annual_water_balance(annual: pd.DataFrame) -> pd.DataFrame:
    """
    Add aridity index and evaporation ratio to annual aggregates.

    Parameters
    ----------
    annual : pd.DataFrame
        Output of ``aggregate_site_annual`` (one or many sites).

    Returns
    -------
    pd.DataFrame
        Copy of ``annual`` with ``aridity_index``, ``evaporation_ratio``
        (Float64, NA when precip <= 0 or missing) and ``ratio_defined``.
    """
    table = annual.copy()
    table["aridity_index"], table["ratio_defined"] = safe_ratio(table["pet"], table["precip"])
    table["evaporation_ratio"], _ = safe_ratio(table["et"], table["precip"])

    leading = ["site", "year", "precip", "et", "pet",
               "aridity_index", "evaporation_ratio", "ratio_defined"]
    rest = [col for col in table.columns if col not in leading]
    return table[leading + rest]


def period_summary(annual: pd.DataFrame) -> pd.DataFrame:
    """
    Summarize each site over its whole period.

    Means skip missing years. Indices are ratios of the period means, not
    means of the annual ratios, so years with near-zero precipitation do not
    dominate the summary.

    Returns
    -------
    pd.DataFrame
        Columns: site, mean_precip, mean_et, mean_pet, n_years,
        aridity_index, evaporation_ratio, ratio_defined.
    """
    if annual.empty:
        empty = pd.DataFrame({col: pd.Series(dtype=float) for col in PERIOD_COLUMNS})
        empty["site"] = empty["site"].astype(object)
        empty["aridity_index"] = empty["aridity_index"].astype("Float64")
        empty["evaporation_ratio"] = empty["evaporation_ratio"].astype("Float64")
        empty["ratio_defined"] = empty["ratio_defined"].astype(bool)
        return empty

    grouped = annual.groupby("site", sort=False)
    summary = pd.DataFrame({
        "mean_precip": grouped["precip"].mean(),
        "mean_et": grouped["et"].mean(),
        "mean_pet": grouped["pet"].mean(),
        "n_years": grouped["year"].nunique(),
    }).reset_index()

    summary["aridity_index"], summary["ratio_defined"] = safe_ratio(
        summary["mean_pet"], summary["mean_precip"])
    summary["evaporation_ratio"], _ = safe_ratio(summary["mean_et"], summary["mean_precip"])
    return summary[PERIOD_COLUMNS]


def budyko_curve(aridity_index):
    """
    Budyko (1974) evaporation ratio as a function of aridity index.

    ``E/P = sqrt(AI * tanh(1/AI) * (1 - exp(-AI)))``, defined for AI > 0;
    NaN elsewhere.

    Examples
    --------
    >>> round(budyko_curve(1.0), 4)
    0.6102
    """
    ai = _to_float_array(aridity_index)
    with np.errstate(invalid="ignore", divide="ignore", over="ignore"):
        er = np.sqrt(ai * np.tanh(1 / ai) * (1 - np.exp(-ai)))
    er = np.where(ai > 0, er, np.nan)
    if er.ndim == 0:
        return float(er)
    return er


def budyko_deviation(table: pd.DataFrame, aridity_col: str = "aridity_index",
                     ratio_col: str = "evaporation_ratio") -> pd.DataFrame:
    """
    Compare observed evaporation ratios with the Budyko curve.

    Adds ``budyko_er`` (theoretical E/P at the observed aridity) and
    ``budyko_deviation`` (observed minus theoretical). Both are NA wherever
    the observed indices are undefined.
    """
    out = table.copy()
    theoretical = budyko_curve(out[aridity_col])
    out["budyko_er"] = pd.array(np.atleast_1d(theoretical), dtype="Float64")
    out["budyko_deviation"] = out[ratio_col].astype("Float64") - out["budyko_er"]
    return out


def join_site_metadata(summary: pd.DataFrame, roster: pd.DataFrame,
                       columns: Optional[Sequence[str]] = None) -> pd.DataFrame:
    """
    Left-join site metadata (climate class, land cover, storage capacity).

    ``roster`` is either indexed by site name or carries a ``sitename``
    column. Metadata columns absent from the roster are skipped.
    """
    columns = list(METADATA_COLUMNS if columns is None else columns)
    meta = roster if SITE_COLUMN in roster.columns else roster.rename_axis(SITE_COLUMN).reset_index()
    present = [col for col in columns if col in meta.columns]
    meta = meta[[SITE_COLUMN] + present].drop_duplicates(subset=SITE_COLUMN)
    merged = summary.merge(meta, how="left", left_on="site", right_on=SITE_COLUMN)
    return merged.drop(columns=SITE_COLUMN)
