"""
Missing-data screening for FluxDataKit daily files.

Percentage of missing values per key variable and site, used to decide
which sites and variables are usable before aggregation.
"""

import logging
import re
from pathlib import Path
from typing import Dict, Iterable, Optional, Sequence

import numpy as np
import pandas as pd

from .config import MISSINGNESS_VARIABLES

logger = logging.getLogger(__name__)

_SITE_PATTERN = re.compile(r"FLX_([A-Za-z0-9-]+)_")


def site_from_filename(path) -> str:
    """Site id from a ``FLX_<site>_...`` file name, else the file stem."""
    name = Path(path).name
    match = _SITE_PATTERN.match(name)
    return match.group(1) if match else Path(path).stem


def variable_missingness(data: pd.DataFrame,
                         variables: Optional[Sequence[str]] = None,
                         site: str = "") -> pd.Series:
    """
    Percentage of missing values for each variable.

    Variables absent from ``data`` get NaN (not 100 %) and a warning, so
    an absent column is distinguishable from a fully gapped one.

    Returns
    -------
    pd.Series
        Missingness (%) indexed by variable name.
    """
    variables = list(MISSINGNESS_VARIABLES if variables is None else variables)
    n_rows = len(data)
    result = {}
    for var in variables:
        if var not in data.columns:
            logger.warning("Variable '%s' not found in data for site %s", var, site)
            result[var] = np.nan
        elif n_rows == 0:
            result[var] = np.nan
        else:
            result[var] = data[var].isna().sum() / n_rows * 100
    return pd.Series(result, dtype=float, name=site or None)


def site_missingness_table(files: Iterable, variables: Optional[Sequence[str]] = None,
                           na_values=(-9999,)) -> pd.DataFrame:
    """
    Missingness of each variable for every daily file.

    Unreadable files are logged and left out.

    Returns
    -------
    pd.DataFrame
        One row per site, one column per variable (percent missing).
    """
    variables = list(MISSINGNESS_VARIABLES if variables is None else variables)
    rows = {}
    for path in files:
        site = site_from_filename(path)
        logger.info("Screening site %s (%s)", site, Path(path).name)
        try:
            data = pd.read_csv(path, na_values=list(na_values))
        except (OSError, ValueError) as e:
            logger.warning("Error processing file '%s': %s", Path(path).name, e)
            continue
        rows[site] = variable_missingness(data, variables, site)

    table = pd.DataFrame.from_dict(rows, orient="index", columns=variables)
    table.index.name = "site"
    return table


def summarize_missingness(table: pd.DataFrame) -> Dict[str, pd.Series]:
    """
    Average missingness per variable (across sites) and per site (across
    variables), NaNs ignored, each sorted from most to least missing.
    """
    return {
        "by_variable": table.mean(axis=0, skipna=True).sort_values(ascending=False),
        "by_site": table.mean(axis=1, skipna=True).sort_values(ascending=False),
    }
