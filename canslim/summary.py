# canslim/summary.py — Console summary output
import pandas as pd
from canslim.config import FRIENDLY_NAMES

def _print_summary(df: pd.DataFrame, top: int = 20):
    if df.empty:
        print("\n  No checklists to rank.")
        return
    print("\n" + "=" * 65)
    print(f"  TOP {min(top, len(df))} STOCKS")
    print("=" * 65)
    show = ["rank", "ticker", "composite", "composite_pctile", "passed_count",
            "verdict_count", "eps_growth", "sales_growth", "relative_strength_rating",
            "smr_rating", "market_trend"]
    table = df[[c for c in show if c in df.columns]].head(top)
    print(table.rename(columns=FRIENDLY_NAMES).to_string(index=False))

    passing = df[df["composite_passed"].eq(True)] if "composite_passed" in df.columns else df.iloc[0:0]
    if not passing.empty:
        print(f"\n  COMPOSITE ≥ 95  ({len(passing)} stocks)")
        print("-" * 45)
        print(passing[["rank", "ticker", "composite", "passed_count"]].to_string(index=False))
