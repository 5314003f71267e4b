"""
IO utilities for FluxDataKit site tables.

Thin adapters between the CSV files on disk and the canonical frames the
aggregation code works on: site roster, daily-file discovery, daily-file
parsing and output tables.
"""

import logging
from pathlib import Path
from typing import Dict, Optional

import numpy as np
import pandas as pd

from .aggregation import ValidityWindow
from .config import (
    ANNUAL_OUTPUT_NAME,
    DAILY_FIELDS,
    DAILY_FILE_MARKER,
    FLUXDATAKIT_COLUMNS,
    PERIOD_OUTPUT_NAME,
    SITE_COLUMN,
    WINDOW_END_COLUMN,
    WINDOW_START_COLUMN,
)
from .exceptions import MissingSiteError

logger = logging.getLogger(__name__)

# FLUXNET missing-value sentinel
MISSING_SENTINEL = -9999


def load_site_roster(path) -> pd.DataFrame:
    """Read the site metadata table, indexed by site name.

    Only the first row of a duplicated site is kept.
    """
    roster = pd.read_csv(path)
    if SITE_COLUMN not in roster.columns:
        raise KeyError(f"Column '{SITE_COLUMN}' not found in {path}")
    duplicated = roster[SITE_COLUMN].duplicated()
    if duplicated.any():
        logger.warning("Roster %s: %d duplicated site row(s) ignored", path, int(duplicated.sum()))
        roster = roster.loc[~duplicated]
    return roster.set_index(SITE_COLUMN)


def roster_windows(roster: pd.DataFrame) -> Dict[str, ValidityWindow]:
    """Map each roster site to its validity window (possibly invalid)."""
    if WINDOW_START_COLUMN not in roster.columns or WINDOW_END_COLUMN not in roster.columns:
        raise KeyError(
            f"Roster needs '{WINDOW_START_COLUMN}' and '{WINDOW_END_COLUMN}' columns"
        )
    start = pd.to_numeric(roster[WINDOW_START_COLUMN], errors="coerce")
    end = pd.to_numeric(roster[WINDOW_END_COLUMN], errors="coerce")
    return {site: ValidityWindow(s, e) for site, s, e in zip(roster.index, start, end)}


def find_daily_file(site: str, data_dir) -> Path:
    """Locate a site's daily CSV, e.g. ``FLX_<site>_FLUXDATAKIT_FULLSET_DD_2001_2020_2-3.csv``.

    Raises
    ------
    MissingSiteError
        If no file name contains both the site id and the daily marker.
    """
    data_dir = Path(data_dir)
    matches = sorted(data_dir.glob(f"*{site}*{DAILY_FILE_MARKER}*.csv"))
    if not matches:
        raise MissingSiteError(site, data_dir)
    if len(matches) > 1:
        logger.warning("Site %s: %d daily files found, using %s",
                       site, len(matches), matches[0].name)
    return matches[0]


def _parse_timestamp(values: pd.Series) -> pd.Series:
    if pd.api.types.is_numeric_dtype(values):
        return pd.to_datetime(values.astype("Int64").astype(str), format="%Y%m%d", errors="coerce")
    return pd.to_datetime(values, errors="coerce")


def read_daily_file(path, columns: Optional[Dict[str, str]] = None) -> pd.DataFrame:
    """
    Read a FluxDataKit daily CSV into canonical DailyRecord columns.

    Parameters
    ----------
    path : str or Path
        Daily (DD) CSV file.
    columns : dict, optional
        Source column -> canonical name mapping; defaults to
        ``FLUXDATAKIT_COLUMNS``.

    Returns
    -------
    pd.DataFrame
        ``date`` plus every canonical daily field; fields absent from the
        file are all-NaN and the -9999 sentinel is read as NaN.
    """
    columns = FLUXDATAKIT_COLUMNS if columns is None else columns
    raw = pd.read_csv(path)

    time_col = next((src for src, dst in columns.items() if dst == "date"), None)
    if time_col is None or time_col not in raw.columns:
        raise ValueError(f"No timestamp column in {path}")

    daily = raw.rename(columns=columns)
    daily["date"] = _parse_timestamp(raw[time_col])

    for field in DAILY_FIELDS:
        if field in daily.columns:
            values = pd.to_numeric(daily[field], errors="coerce")
            daily[field] = values.mask(values == MISSING_SENTINEL)
        else:
            daily[field] = np.nan

    daily = daily.loc[daily["date"].notna(), ["date"] + DAILY_FIELDS]
    return daily.reset_index(drop=True)


def write_outputs(annual: pd.DataFrame, period: pd.DataFrame, output_dir) -> Dict[str, Path]:
    """Write the annual and whole-period water-balance tables as CSV."""
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    paths = {
        "annual": output_dir / ANNUAL_OUTPUT_NAME,
        "period": output_dir / PERIOD_OUTPUT_NAME,
    }
    annual.to_csv(paths["annual"], index=False)
    period.to_csv(paths["period"], index=False)
    return paths
