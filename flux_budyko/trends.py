"""Trend estimation for annual Budyko-space trajectories.

年际 Budyko 轨迹趋势：
- OLS 线性趋势
- Theil-Sen 鲁棒趋势
"""

from typing import Tuple

import numpy as np
import pandas as pd
from scipy import stats

TRAJECTORY_COLUMNS = ["site", "n_years", "aridity_slope", "aridity_p",
                      "evaporation_slope", "evaporation_p", "displacement"]


def linear_trend(y: np.ndarray, x: np.ndarray) -> Tuple[float, float]:
    slope, _, _, p, _ = stats.linregress(x, y)
    return slope, p


def theil_sen_trend(y: np.ndarray, x: np.ndarray) -> Tuple[float, float]:
    res = stats.theilslopes(y, x)
    slope = res[0]
    _, p = stats.kendalltau(x, y)
    return slope, p


def _series_trend(y: np.ndarray, x: np.ndarray, method: str,
                  min_years: int) -> Tuple[float, float]:
    mask = np.isfinite(y) & np.isfinite(x)
    if mask.sum() < min_years:
        return np.nan, np.nan
    if method == "theil-sen":
        return theil_sen_trend(y[mask], x[mask])
    return linear_trend(y[mask], x[mask])


def budyko_trajectory(table: pd.DataFrame, method: str = "ols",
                      min_years: int = 3) -> pd.DataFrame:
    """Per-site temporal trend of the annual position in Budyko space.

    Parameters
    ----------
    table : pd.DataFrame
        Output of ``annual_water_balance``. Years with undefined ratios are
        left out of the fit.
    method : {"ols", "theil-sen"}
        Slope estimator.
    min_years : int
        Minimum number of defined years for a fit; fewer gives NaN.

    Returns
    -------
    pd.DataFrame
        One row per site: slopes (per year) and p-values of aridity index and
        evaporation ratio, and ``displacement``, the Euclidean distance between
        the first and last defined annual points.
    """
    if method not in ("ols", "theil-sen"):
        raise ValueError("method must be 'ols' or 'theil-sen'")

    rows = []
    for site, group in table.groupby("site", sort=False):
        group = group.sort_values("year")
        years = group["year"].to_numpy(dtype=float)
        ai = group["aridity_index"].to_numpy(dtype=float, na_value=np.nan)
        er = group["evaporation_ratio"].to_numpy(dtype=float, na_value=np.nan)

        ai_slope, ai_p = _series_trend(ai, years, method, min_years)
        er_slope, er_p = _series_trend(er, years, method, min_years)

        defined = np.isfinite(ai) & np.isfinite(er)
        if defined.sum() >= 2:
            first, last = np.flatnonzero(defined)[[0, -1]]
            displacement = float(np.hypot(ai[last] - ai[first], er[last] - er[first]))
        else:
            displacement = np.nan

        rows.append({
            "site": site,
            "n_years": int(defined.sum()),
            "aridity_slope": ai_slope,
            "aridity_p": ai_p,
            "evaporation_slope": er_slope,
            "evaporation_p": er_p,
            "displacement": displacement,
        })

    return pd.DataFrame(rows, columns=TRAJECTORY_COLUMNS)
