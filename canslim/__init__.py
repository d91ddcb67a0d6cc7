# canslim/__init__.py — CANSLIM checklist engine
#
# Score a stock against the CANSLIM checklist: independent pass/fail
# indicators grouped into four sections, plus one composite rating.
# Import anything directly: `from canslim import build_checklist, StockSnapshot`
#
# Module layout:
#   config.py        — CFG, thresholds, composite profiles, section layout
#   utils.py         — _safe(), growth_pct() and other numeric helpers
#   models.py        — StockSnapshot, IndicatorResult, ChecklistReport
#   indicators.py    — EPS/sales growth, SMR, A/D, RSI, RS line, buy point, ...
#   composite.py     — Composite rating (normalize → weight)
#   checklist.py     — build_checklist(): snapshot → report
#   data_yahoo.py    — Yahoo Finance snapshot fetching (parallel)
#   universe.py      — Ticker universe (explicit list or S&P 500)
#   pipeline.py      — Batch orchestration + ranking (run_pipeline)
#   summary.py       — Console summary output
#   export_json.py   — JSON export
#   export_excel.py  — Excel export + formatting

from canslim.checklist import build_checklist
from canslim.composite import compute_composite
from canslim.models import ChecklistReport, Fundamentals, IndicatorResult, MarketSummary, StockSnapshot

__version__ = "1.0"
