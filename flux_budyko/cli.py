"""
Command-line entry point: annual and whole-period Budyko water balance for a
FluxDataKit site roster.

Example
-------
    flux-budyko --site-info data/fdk_sites_full.csv --data-dir data/fdk_csv \
        --output-dir analysis --pet-method priestley_taylor --workers 4
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from .config import (
    DAILY_FILE_MARKER,
    DEFAULT_PET_METHOD,
    FLUX_DATA_DIR,
    MISSINGNESS_OUTPUT_NAME,
    OUTPUT_DIR,
    SITE_INFO_PATH,
)
from .exceptions import UnknownPETMethodError
from .io_utils import load_site_roster, write_outputs
from .logger import setup_logger
from .missingness import site_missingness_table, summarize_missingness
from .pet import PET_METHODS
from .pipeline import run_pipeline


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="flux-budyko",
        description="Annual and whole-period Budyko water balance for flux-tower sites",
    )
    parser.add_argument("--site-info", type=Path, default=SITE_INFO_PATH,
                        help="Site metadata CSV with validity-window columns")
    parser.add_argument("--data-dir", type=Path, default=FLUX_DATA_DIR,
                        help="Directory with daily (DD) FluxDataKit CSV files")
    parser.add_argument("--output-dir", type=Path, default=OUTPUT_DIR,
                        help="Directory for the output tables")
    parser.add_argument("--pet-method", default=DEFAULT_PET_METHOD,
                        help=f"PET method: {', '.join(PET_METHODS)}")
    parser.add_argument("--workers", type=int, default=1,
                        help="Number of processes for site aggregation")
    parser.add_argument("--ground-heat-flux", action="store_true",
                        help="Subtract ground heat flux in Priestley-Taylor")
    parser.add_argument("--missingness", action="store_true",
                        help="Also write the per-site missing-data table")
    parser.add_argument("--log-level", default="INFO",
                        help="DEBUG, INFO, WARNING, ERROR")
    parser.add_argument("--log-file", default=None, help="Optional log file")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logger = setup_logger(log_file=args.log_file, log_level=args.log_level)

    try:
        roster = load_site_roster(args.site_info)
    except (OSError, KeyError, ValueError) as e:
        logger.error("Cannot read site roster %s: %s", args.site_info, e)
        return 1

    try:
        result = run_pipeline(
            roster,
            data_dir=args.data_dir,
            pet_method=args.pet_method,
            max_workers=args.workers,
            use_ground_heat_flux=args.ground_heat_flux,
        )
    except UnknownPETMethodError as e:
        logger.error(str(e))
        return 2

    paths = write_outputs(result.annual, result.period, args.output_dir)
    logger.info("Water balance data saved to:")
    for path in paths.values():
        logger.info("- %s", path)

    if args.missingness:
        files = sorted(Path(args.data_dir).glob(f"*{DAILY_FILE_MARKER}*.csv"))
        table = site_missingness_table(files)
        missing_path = Path(args.output_dir) / MISSINGNESS_OUTPUT_NAME
        table.to_csv(missing_path)
        summary = summarize_missingness(table)
        logger.info("Missingness table saved to %s", missing_path)
        for var, pct in summary["by_variable"].items():
            logger.info("  %-16s %5.1f%% missing", var, pct)

    if result.period.empty:
        logger.error("No site produced output (%d skipped)", len(result.skipped))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
