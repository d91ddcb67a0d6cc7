# canslim/data_yahoo.py — Yahoo Finance snapshot fetching (parallel)
import time
import numpy as np
import pandas as pd
import yfinance as yf
from concurrent.futures import ThreadPoolExecutor, as_completed
from tqdm import tqdm
from canslim.config import CFG
from canslim.models import StockSnapshot, price_frame
from canslim.utils import _safe

# yfinance statement row labels, first match wins
_EPS_ROWS      = ["Diluted EPS", "Basic EPS"]
_REVENUE_ROWS  = ["Total Revenue", "Operating Revenue"]
_EARNINGS_ROWS = ["Net Income", "Net Income Common Stockholders"]


def _first_row(stmt: pd.DataFrame, labels: list) -> pd.Series:
    for label in labels:
        if label in stmt.index:
            return stmt.loc[label]
    return pd.Series(np.nan, index=stmt.columns)


def _statement_records(stmt: "pd.DataFrame | None") -> "list | None":
    """Income statement (rows = line items, columns = period end) → oldest-first records."""
    if stmt is None or stmt.empty:
        return None
    eps, rev, ni = (_first_row(stmt, rows) for rows in (_EPS_ROWS, _REVENUE_ROWS, _EARNINGS_ROWS))
    records = [
        {"date": col, "eps": _safe(eps[col]), "revenue": _safe(rev[col]),
         "earnings": _safe(ni[col])}
        for col in stmt.columns
    ]
    return sorted(records, key=lambda r: pd.Timestamp(r["date"]))


def _ownership_records(holders: "pd.DataFrame | None") -> "list | None":
    if holders is None or holders.empty:
        return None
    if not {"Date Reported", "Shares"} <= set(holders.columns):
        return None
    return [{"report_date": d, "position": _safe(s)}
            for d, s in zip(holders["Date Reported"], holders["Shares"])]


def _history_records(hist: "pd.DataFrame | None") -> "pd.DataFrame | None":
    if hist is None or hist.empty:
        return None
    frame = hist.reset_index()
    frame.columns = [str(c).lower() for c in frame.columns]
    if "date" not in frame.columns and "datetime" in frame.columns:
        frame = frame.rename(columns={"datetime": "date"})
    return frame


def _fetch_history(t_obj) -> "pd.DataFrame | None":
    return _history_records(t_obj.history(period=CFG["history_period"],
                                          interval=CFG["history_interval"],
                                          auto_adjust=False))


def _fetch_ownership(t_obj) -> "list | None":
    # fund holders first, institutions when Yahoo has no fund breakdown
    return (_ownership_records(t_obj.mutualfund_holders)
            or _ownership_records(t_obj.institutional_holders))


_SUB_FETCHES = {
    "info":      lambda t: t.info or {},
    "quarterly": lambda t: _statement_records(t.quarterly_income_stmt),
    "yearly":    lambda t: _statement_records(t.income_stmt),
    "ownership": _fetch_ownership,
    "history":   _fetch_history,
}


def _fetch_parts(ticker: str) -> dict:
    """Run every sub-fetch in parallel; a failed one is reported and left as None."""
    t_obj = yf.Ticker(ticker)
    parts = {}
    with ThreadPoolExecutor(max_workers=len(_SUB_FETCHES)) as executor:
        futures = {executor.submit(fn, t_obj): key for key, fn in _SUB_FETCHES.items()}
        for future in as_completed(futures):
            key = futures[future]
            try:
                parts[key] = future.result()
            except Exception as e:
                print(f"  ⚠️  {ticker}: {key} unavailable — {e}")
                parts[key] = None
    return parts


def build_snapshot_payload(ticker: str, parts: dict,
                           benchmark: "pd.DataFrame | None" = None) -> dict:
    """Shape raw Yahoo parts into the StockSnapshot.from_dict payload."""
    info = parts.get("info") or {}
    fundamentals = None
    if info or parts.get("quarterly") or parts.get("yearly"):
        fundamentals = {
            "quarterly":          parts.get("quarterly"),
            "yearly":             parts.get("yearly"),
            "shares_outstanding": info.get("sharesOutstanding"),
            "trailing_eps":       info.get("trailingEps"),
            "current_year_eps":   info.get("epsCurrentYear"),
            "return_on_equity":   info.get("returnOnEquity"),
            "gross_margin":       info.get("grossMargins"),
            "revenue_growth":     info.get("revenueGrowth"),
        }
    market_summary = None
    if info:
        market_summary = {
            "current_price":       info.get("currentPrice", info.get("regularMarketPrice")),
            "average_volume":      info.get("averageVolume"),
            "current_volume":      info.get("regularMarketVolume", info.get("volume")),
            "fifty_two_week_high": info.get("fiftyTwoWeekHigh"),
        }
    return {
        "ticker":                 ticker,
        "fundamentals":           fundamentals,
        "ownership":              parts.get("ownership"),
        "price_series":           parts.get("history"),
        "benchmark_price_series": benchmark,
        "market_summary":         market_summary,
    }


def fetch_benchmark(symbol: str = None) -> "pd.DataFrame | None":
    """Reference index history, fetched once per run. None when Yahoo fails twice."""
    symbol = symbol or CFG["benchmark"]
    for attempt in range(2):
        try:
            frame = price_frame(_fetch_history(yf.Ticker(symbol)))
            if frame is not None:
                print(f"  ✅  Benchmark {symbol}: {len(frame)} bars")
                return frame
        except Exception as e:
            if attempt == 0:
                time.sleep(2.0)
            else:
                print(f"  ⚠️  Benchmark {symbol} fetch failed: {e} — RS line/market trend will be empty")
    return None


def fetch_snapshot(ticker: str, benchmark: "pd.DataFrame | None" = None) -> StockSnapshot:
    if not ticker:
        raise ValueError("Ticker symbol is undefined")
    parts = _fetch_parts(ticker)
    return StockSnapshot.from_dict(build_snapshot_payload(ticker, parts, benchmark))


def fetch_snapshots_parallel(tickers: list, benchmark: "pd.DataFrame | None" = None) -> dict:
    results = {}
    with ThreadPoolExecutor(max_workers=CFG["max_workers_yf"]) as executor:
        futures = {executor.submit(fetch_snapshot, t, benchmark): t for t in tickers}
        for future in tqdm(as_completed(futures), total=len(tickers),
                           desc="Yahoo Finance (parallel)"):
            t = futures[future]
            try:
                results[t] = future.result()
            except Exception as e:
                print(f"  ⚠️  {t}: snapshot failed — {e}")
    return results   # always a dict, never None
