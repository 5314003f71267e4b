"""
Batch water-balance pipeline over a site roster.

Each roster site is processed independently: locate its daily file, read
it, aggregate to annual sums within its validity window. A failing site is
logged and recorded in ``PipelineResult.skipped``; it never stops the run.
Sites can be spread over a process pool; results are keyed by site and
returned in roster order.
"""

import logging
from concurrent.futures import ProcessPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import numpy as np
import pandas as pd

from .aggregation import (
    ValidityWindow,
    aggregate_site_annual,
    empty_annual_frame,
    validate_window,
)
from .config import DEFAULT_PET_METHOD, FLUX_DATA_DIR
from .exceptions import InvalidWindowError, MissingSiteError
from .io_utils import find_daily_file, read_daily_file, roster_windows
from .pet import required_inputs
from .water_balance import annual_water_balance, join_site_metadata, period_summary

logger = logging.getLogger(__name__)


@dataclass
class SiteResult:
    site: str
    annual: Optional[pd.DataFrame] = None
    skip_reason: Optional[str] = None


@dataclass
class PipelineResult:
    """Outputs of a pipeline run.

    Attributes
    ----------
    annual : pd.DataFrame
        Annual water-balance table, one row per (site, year).
    period : pd.DataFrame
        Whole-period summary, one row per site with output.
    skipped : list of (site, reason)
        Every roster site that produced no output, with the reason.
    """

    annual: pd.DataFrame
    period: pd.DataFrame
    skipped: List[Tuple[str, str]] = field(default_factory=list)

    @property
    def sites(self) -> List[str]:
        return list(self.period["site"])


def process_site(site: str, window: ValidityWindow, data_dir,
                 pet_method: str = DEFAULT_PET_METHOD,
                 latitude: Optional[float] = None,
                 use_ground_heat_flux: bool = False) -> SiteResult:
    """Aggregate one site, turning per-site failures into a skip reason."""
    try:
        window = validate_window(site, window)
        path = find_daily_file(site, data_dir)
        logger.info("Processing site %s (%s)", site, Path(path).name)
        daily = read_daily_file(path)
        annual = aggregate_site_annual(
            site, daily, window,
            pet_method=pet_method,
            latitude=latitude,
            use_ground_heat_flux=use_ground_heat_flux,
        )
    except InvalidWindowError as e:
        logger.info("Skipping site %s: %s", site, e)
        return SiteResult(site, skip_reason=f"invalid window: {e}")
    except MissingSiteError as e:
        logger.info("Skipping site %s: %s", site, e)
        return SiteResult(site, skip_reason=f"missing daily file: {e}")
    except Exception as e:
        logger.error("Skipping site %s: %s: %s", site, type(e).__name__, e, exc_info=True)
        return SiteResult(site, skip_reason=f"{type(e).__name__}: {e}")

    if annual.empty:
        logger.info("Skipping site %s: no records inside window [%d, %d]",
                    site, int(window.start_year), int(window.end_year))
        return SiteResult(site, skip_reason="no records inside validity window")
    return SiteResult(site, annual=annual)


def _site_latitude(roster: pd.DataFrame, site: str, latitude_col: str) -> Optional[float]:
    if latitude_col not in roster.columns:
        return None
    value = pd.to_numeric(pd.Series([roster.at[site, latitude_col]]), errors="coerce").iloc[0]
    return float(value) if np.isfinite(value) else None


def run_pipeline(roster: pd.DataFrame, data_dir=FLUX_DATA_DIR,
                 pet_method: str = DEFAULT_PET_METHOD,
                 max_workers: int = 1,
                 use_ground_heat_flux: bool = False,
                 join_metadata: bool = True,
                 latitude_col: str = "lat") -> PipelineResult:
    """
    Run the annual and whole-period water balance for every roster site.

    Parameters
    ----------
    roster : pd.DataFrame
        Site metadata indexed by site name (see ``load_site_roster``), with
        validity-window columns and optionally latitude and metadata columns.
    data_dir : str or Path
        Directory holding the daily CSV files.
    pet_method : str, default="priestley_taylor"
        PET formula; an unknown name fails before any site is read.
    max_workers : int, default=1
        Processes used for site aggregation; 1 runs in-process.
    use_ground_heat_flux : bool, default=False
        Subtract ground heat flux in Priestley-Taylor.
    join_metadata : bool, default=True
        Join climate / land-cover / storage columns onto the period table.

    Returns
    -------
    PipelineResult
    """
    required_inputs(pet_method)

    windows = roster_windows(roster)
    sites = list(windows)
    logger.info("Running water balance for %d site(s) with %s PET", len(sites), pet_method)

    jobs = {
        site: dict(
            site=site,
            window=windows[site],
            data_dir=data_dir,
            pet_method=pet_method,
            latitude=_site_latitude(roster, site, latitude_col),
            use_ground_heat_flux=use_ground_heat_flux,
        )
        for site in sites
    }

    results: Dict[str, SiteResult] = {}
    if max_workers > 1 and len(sites) > 1:
        with ProcessPoolExecutor(max_workers=max_workers) as executor:
            future_to_site = {executor.submit(process_site, **kwargs): site
                              for site, kwargs in jobs.items()}
            for future in as_completed(future_to_site):
                site = future_to_site[future]
                try:
                    results[site] = future.result()
                except Exception as e:
                    logger.error("Skipping site %s: worker failed: %s", site, e)
                    results[site] = SiteResult(site, skip_reason=f"worker failed: {e}")
    else:
        for site, kwargs in jobs.items():
            results[site] = process_site(**kwargs)

    frames = [results[site].annual for site in sites if results[site].annual is not None]
    skipped = [(site, results[site].skip_reason) for site in sites
               if results[site].annual is None]

    if frames:
        annual = pd.concat(frames, ignore_index=True)
    else:
        annual = empty_annual_frame()

    annual = annual_water_balance(annual)
    period = period_summary(annual)
    if join_metadata:
        period = join_site_metadata(period, roster)

    logger.info("Water balance complete: %d site(s) with output, %d skipped",
                period.shape[0], len(skipped))
    for site, reason in skipped:
        logger.warning("Skipped site %s: %s", site, reason)

    return PipelineResult(annual=annual, period=period, skipped=skipped)
