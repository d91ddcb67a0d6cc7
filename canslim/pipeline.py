# canslim/pipeline.py — Batch orchestration: universe → snapshots → reports → ranking
import os
from datetime import datetime
import numpy as np
import pandas as pd
from scipy.stats import percentileofscore
from canslim.checklist import build_checklist
from canslim.config import CFG, SECTIONS
from canslim.data_yahoo import fetch_benchmark, fetch_snapshots_parallel
from canslim.export_excel import style_and_export
from canslim.export_json import export_json
from canslim.summary import _print_summary
from canslim.universe import get_universe
from canslim.utils import _coverage

INDICATOR_ORDER = [name for names in SECTIONS.values() for name in names]


def rank_reports(reports: dict) -> pd.DataFrame:
    """
    One row per ticker: composite score, pass/verdict counts and every
    indicator's display value. Ranked by composite (no-verdict last), then
    by number of passed checks.
    """
    rows = []
    for ticker, report in reports.items():
        row = {
            "ticker":          ticker,
            "composite_score": report.composite.raw if report.composite.raw is not None else np.nan,
            "passed_count":    report.passed_count,
            "verdict_count":   report.verdict_count,
            "coverage":        _coverage(report),
        }
        for name in INDICATOR_ORDER:
            row[name] = report[name].value
            row[f"{name}_passed"] = report[name].passed
        rows.append(row)

    df = pd.DataFrame(rows)
    if df.empty:
        return df

    valid = df["composite_score"].dropna()
    df["composite_pctile"] = df["composite_score"].apply(
        lambda x: percentileofscore(valid, x, kind="rank") if not pd.isna(x) else np.nan
    )
    df = df.sort_values(["composite_score", "passed_count"], ascending=[False, False],
                        na_position="last").reset_index(drop=True)
    df["rank"] = df.index + 1
    return df


def run_pipeline(universe="sp500", profile: str = None, export: bool = True):
    """Fetch, score and rank a universe. Returns (ranking frame, reports by ticker)."""
    print("=" * 65)
    print("  CANSLIM CHECKLIST")
    print(f"  {datetime.now().strftime('%Y-%m-%d %H:%M')}")
    print("=" * 65)

    # 1. Universe
    tickers = get_universe(universe)

    # 2. Benchmark + snapshots
    print(f"\n[1/3]  Yahoo Finance ({len(tickers)} tickers, parallel)...")
    benchmark = fetch_benchmark()
    snapshots = fetch_snapshots_parallel(tickers, benchmark)

    # 3. Checklists
    print("\n[2/3]  Checklists...")
    reports = {t: build_checklist(snapshots[t], profile) for t in tickers if t in snapshots}
    n_comp = sum(1 for r in reports.values() if not r.composite.is_sentinel)
    print(f"  📊 composite: {n_comp}/{len(reports)} stocks have full data")

    # 4. Ranking
    print("\n[3/3]  Ranking...")
    df = rank_reports(reports)
    _print_summary(df)

    if export and not df.empty:
        os.makedirs(os.path.dirname(CFG["output_json"]) or ".", exist_ok=True)
        export_json(reports, CFG["output_json"], profile=profile or CFG["composite_profile"])
        style_and_export(df, CFG["output_file"])

    print("\n✅  DONE!")
    return df, reports
