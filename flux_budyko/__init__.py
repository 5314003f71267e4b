"""
flux-budyko: 通量塔水量平衡与 Budyko 空间分析工具包
Flux-tower water balance and Budyko-space analysis toolkit

Computes potential evapotranspiration (PET) from daily FluxDataKit
meteorology, reduces each site's daily records to annual precipitation, ET
and PET totals within its validity window, and positions every site-year and
every site's whole period in Budyko space.

主要功能 / Main Features:
--------------------------
1. PET 计算 / PET Calculation
   - Priestley-Taylor, Penman-Monteith, Hargreaves, Thornthwaite

2. 年际聚合 / Annual Aggregation
   - 有效年份窗口过滤 / Validity-window filtering
   - 按变量独立跳过缺失值 / Per-field missing-value skipping

3. 水量平衡指标 / Water-Balance Indices
   - 干旱指数 PET/P, 蒸发比 ET/P / Aridity index, evaporation ratio
   - Budyko 曲线对比与轨迹趋势 / Budyko curve deviation and trajectories

4. 数据质量 / Data Quality
   - 缺测率统计 / Missingness screening

使用示例 / Usage Example:
--------------------------
>>> from flux_budyko import calculate_pet, budyko_curve
>>> calculate_pet("priestley_taylor", net_rad=120.0, tavg=15.0, pressure=100.0)
>>> round(budyko_curve(1.0), 4)
0.6102

>>> from flux_budyko import load_site_roster, run_pipeline
>>> roster = load_site_roster("data/fdk_sites_full.csv")
>>> result = run_pipeline(roster, data_dir="data/fdk_csv")
>>> result.period.head()

包结构 / Package Structure:
---------------------------
flux_budyko/
├── pet.py              # PET 计算 / PET engine
├── aggregation.py      # 年际聚合 / Site annual aggregator
├── water_balance.py    # 水量平衡指标 / Water-balance indices
├── trends.py           # 轨迹趋势 / Budyko trajectory trends
├── missingness.py      # 缺测率 / Missingness statistics
├── pipeline.py         # 批处理流程 / Batch pipeline
├── io_utils.py         # 读写 / File IO
├── config.py           # 配置 / Configuration
└── cli.py              # 命令行 / Command line
"""

__version__ = "0.1.0"

from .pet import (
    calculate_pet,
    priestley_taylor,
    penman_monteith,
    hargreaves,
    thornthwaite,
    saturation_vapor_pressure,
    relative_humidity_from_vpd,
    extraterrestrial_radiation,
    PET_METHODS,
)
from .aggregation import ValidityWindow, aggregate_site_annual, daily_pet
from .water_balance import (
    annual_water_balance,
    period_summary,
    budyko_curve,
    budyko_deviation,
    join_site_metadata,
    safe_ratio,
)
from .trends import budyko_trajectory
from .missingness import variable_missingness, site_missingness_table, summarize_missingness
from .io_utils import load_site_roster, find_daily_file, read_daily_file, write_outputs
from .pipeline import run_pipeline, PipelineResult
from .exceptions import (
    FluxBudykoError,
    UnknownPETMethodError,
    PETDomainError,
    MissingSiteError,
    InvalidWindowError,
    ThornthwaiteAccuracyWarning,
)

__all__ = [
    "calculate_pet",
    "priestley_taylor",
    "penman_monteith",
    "hargreaves",
    "thornthwaite",
    "saturation_vapor_pressure",
    "relative_humidity_from_vpd",
    "extraterrestrial_radiation",
    "PET_METHODS",
    "ValidityWindow",
    "aggregate_site_annual",
    "daily_pet",
    "annual_water_balance",
    "period_summary",
    "budyko_curve",
    "budyko_deviation",
    "join_site_metadata",
    "safe_ratio",
    "budyko_trajectory",
    "variable_missingness",
    "site_missingness_table",
    "summarize_missingness",
    "load_site_roster",
    "find_daily_file",
    "read_daily_file",
    "write_outputs",
    "run_pipeline",
    "PipelineResult",
    "FluxBudykoError",
    "UnknownPETMethodError",
    "PETDomainError",
    "MissingSiteError",
    "InvalidWindowError",
    "ThornthwaiteAccuracyWarning",
]
