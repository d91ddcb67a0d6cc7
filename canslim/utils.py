# canslim/utils.py — Shared numeric helpers
import numpy as np
import pandas as pd
from canslim.config import CFG

def _safe(val, default=np.nan):
    """Safely convert value to float, returning default for None/NaN/non-numeric."""
    if val is None:
        return default
    try:
        f = float(val)
        return default if not np.isfinite(f) else f
    except Exception:
        return default


def _missing(*vals) -> bool:
    return any(np.isnan(_safe(v)) for v in vals)


def growth_pct(previous: float, current: float) -> float:
    """
    Percentage change previous → current.
    Near-zero previous values saturate at ±CFG["saturation"] instead of
    dividing; equal values are "no change".
    """
    if abs(previous) < CFG["epsilon"]:
        if current == previous:
            return 0.0
        return float(CFG["saturation"]) if current > previous else -float(CFG["saturation"])
    return (current - previous) / previous * 100


def fmt_pct(val: float) -> str:
    return f"{val:.2f}%"


def _column(frame: "pd.DataFrame | None", col: str) -> pd.Series:
    """Numeric column of a snapshot frame, empty when the frame is absent."""
    if frame is None or frame.empty or col not in frame.columns:
        return pd.Series(dtype=float)
    return pd.to_numeric(frame[col], errors="coerce").reset_index(drop=True)


def _coverage(results: dict) -> float:
    return sum(1 for r in results.values() if r.value is not None) / max(len(results), 1)
