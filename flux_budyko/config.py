"""Global configuration & default paths.

全局配置：请根据本地 / 集群环境修改为真实路径，或通过环境变量覆盖。
"""

import os
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]

DATA_DIR = Path(os.environ.get("FLUX_BUDYKO_DATA_DIR", PROJECT_ROOT / "data"))
OUTPUT_DIR = Path(os.environ.get("FLUX_BUDYKO_OUTPUT_DIR", PROJECT_ROOT / "analysis"))

# FluxDataKit daily CSVs and the site metadata table (user-provided)
FLUX_DATA_DIR = DATA_DIR / "fdk_csv"
SITE_INFO_PATH = DATA_DIR / "fdk_sites_full.csv"

ANNUAL_OUTPUT_NAME = "annual_water_balance.csv"
PERIOD_OUTPUT_NAME = "site_period_water_balance.csv"
MISSINGNESS_OUTPUT_NAME = "site_missingness.csv"

# Daily-resolution marker in FluxDataKit file names: FLX_<site>_..._DD_<y0>_<y1>_<v>.csv
DAILY_FILE_MARKER = "_DD_"

# Site metadata columns
SITE_COLUMN = "sitename"
WINDOW_START_COLUMN = "year_start_lecorr"
WINDOW_END_COLUMN = "year_end_lecorr"
METADATA_COLUMNS = ["koeppen_code", "igbp_land_use", "whc"]

# FluxDataKit variable -> canonical DailyRecord field
FLUXDATAKIT_COLUMNS = {
    "TIMESTAMP": "date",
    "NETRAD": "net_rad",            # W m-2
    "TA_F_MDS": "tavg",             # degC
    "PA": "pressure",               # kPa
    "RH": "rh",                     # %
    "VPD_F_MDS": "vpd",             # hPa
    "WS_F": "wind_speed",           # m s-1
    "P_F": "precip",                # mm day-1
    "LE_F_MDS": "latent_heat",      # W m-2
    "TMIN_F_MDS": "tmin",           # degC
    "TMAX_F_MDS": "tmax",           # degC
    "G_F_MDS": "ground_heat_flux",  # W m-2
}

DAILY_FIELDS = [
    "net_rad", "tavg", "pressure", "rh", "vpd", "wind_speed", "precip",
    "latent_heat", "tmin", "tmax", "ground_heat_flux",
]

# Variables screened by the missingness report
MISSINGNESS_VARIABLES = [
    "P_F",              # Precipitation rate
    "TA_F_MDS",         # Near-surface air temperature
    "SW_IN_F_MDS",      # Downward shortwave radiation
    "VPD_F_MDS",        # Vapour pressure deficit
    "LE_F_MDS",         # Latent heat flux (raw)
    "LE_CORR",          # Energy-balance-corrected latent heat flux
    "GPP_NT_VUT_REF",   # Gross primary productivity
    "RECO_NT_VUT_REF",  # Ecosystem respiration
    "NETRAD",           # Net radiation
]

# Physical constants
PRIESTLEY_TAYLOR_ALPHA = 1.26
LATENT_HEAT_VAPORIZATION = 2.45   # MJ kg-1
PSYCHROMETRIC_CONSTANT = 0.066    # kPa degC-1
W_M2_TO_MJ_M2_DAY = 0.0864
HPA_TO_KPA = 0.1
LE_TO_MM_DAY_DIVISOR = 28.4       # W m-2 -> mm day-1 (~0.035 mm day-1 per W m-2)

DEFAULT_PET_METHOD = "priestley_taylor"
