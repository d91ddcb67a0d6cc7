# canslim/models.py — Snapshot, indicator result and report types
from collections.abc import Mapping
from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import Optional
import numpy as np
import pandas as pd
from canslim.config import EARNINGS_COLS, NEUTRAL_WEIGHT, OWNERSHIP_COLS, PRICE_COLS

# ════════════════════════════════════════════════════════════
#  INPUT: STOCK SNAPSHOT
# ════════════════════════════════════════════════════════════

def _to_frame(records, cols: list, required: list, date_col: str,
              sort: bool = True) -> "pd.DataFrame | None":
    """
    Normalize a list of records (or a DataFrame) into a frame with `cols`.
    None/empty stays None. Missing required columns is a caller bug.
    """
    if records is None:
        return None
    if isinstance(records, pd.DataFrame):
        frame = records.copy()
    elif isinstance(records, (list, tuple)):
        frame = pd.DataFrame(list(records))
    else:
        raise TypeError(f"Expected a list of records or a DataFrame, got {type(records).__name__}")
    if frame.empty:
        return None

    missing = [c for c in required if c not in frame.columns]
    if missing:
        raise ValueError(f"Series is missing required columns: {missing}")
    for c in cols:
        if c not in frame.columns:
            frame[c] = np.nan

    frame = frame[cols].copy()
    frame[date_col] = pd.to_datetime(frame[date_col], errors="coerce", utc=True).dt.tz_localize(None)
    for c in cols:
        if c != date_col:
            frame[c] = pd.to_numeric(frame[c], errors="coerce")
    if sort:
        frame = frame.sort_values(date_col, kind="stable")
    return frame.reset_index(drop=True)


def earnings_frame(records) -> "pd.DataFrame | None":
    return _to_frame(records, EARNINGS_COLS, ["date"], "date")


def ownership_frame(records) -> "pd.DataFrame | None":
    # left unsorted: ordering ownership records is the indicator's job
    return _to_frame(records, OWNERSHIP_COLS, OWNERSHIP_COLS, "report_date", sort=False)


def price_frame(records) -> "pd.DataFrame | None":
    return _to_frame(records, PRICE_COLS, ["date", "high", "low", "close", "volume"], "date")


def _opt(val) -> Optional[float]:
    if val is None:
        return None
    try:
        f = float(val)
    except (TypeError, ValueError):
        return None
    return f if np.isfinite(f) else None


@dataclass(frozen=True)
class Fundamentals:
    quarterly: Optional[pd.DataFrame] = None     # date, eps, revenue, earnings — oldest first
    yearly: Optional[pd.DataFrame] = None
    shares_outstanding: Optional[float] = None
    trailing_eps: Optional[float] = None
    current_year_eps: Optional[float] = None
    return_on_equity: Optional[float] = None     # fractions: 0.25 = 25%
    gross_margin: Optional[float] = None
    revenue_growth: Optional[float] = None

    @classmethod
    def from_dict(cls, payload: dict) -> "Fundamentals":
        return cls(
            quarterly=earnings_frame(payload.get("quarterly")),
            yearly=earnings_frame(payload.get("yearly")),
            shares_outstanding=_opt(payload.get("shares_outstanding")),
            trailing_eps=_opt(payload.get("trailing_eps")),
            current_year_eps=_opt(payload.get("current_year_eps")),
            return_on_equity=_opt(payload.get("return_on_equity")),
            gross_margin=_opt(payload.get("gross_margin")),
            revenue_growth=_opt(payload.get("revenue_growth")),
        )


@dataclass(frozen=True)
class MarketSummary:
    current_price: Optional[float] = None
    average_volume: Optional[float] = None
    current_volume: Optional[float] = None
    fifty_two_week_high: Optional[float] = None

    @classmethod
    def from_dict(cls, payload: dict) -> "MarketSummary":
        return cls(**{k: _opt(payload.get(k)) for k in
                      ("current_price", "average_volume", "current_volume", "fifty_two_week_high")})


@dataclass(frozen=True)
class StockSnapshot:
    """Everything the checklist needs for one ticker. Absent sections are None."""
    ticker: str
    fundamentals: Optional[Fundamentals] = None
    ownership: Optional[pd.DataFrame] = None
    price_series: Optional[pd.DataFrame] = None
    benchmark_price_series: Optional[pd.DataFrame] = None
    market_summary: Optional[MarketSummary] = None

    def __post_init__(self):
        if not isinstance(self.ticker, str) or not self.ticker.strip():
            raise ValueError("Ticker symbol is undefined")
        if self.fundamentals is not None and not isinstance(self.fundamentals, Fundamentals):
            raise TypeError("fundamentals must be a Fundamentals instance")
        if self.market_summary is not None and not isinstance(self.market_summary, MarketSummary):
            raise TypeError("market_summary must be a MarketSummary instance")
        for name in ("ownership", "price_series", "benchmark_price_series"):
            val = getattr(self, name)
            if val is not None and not isinstance(val, pd.DataFrame):
                raise TypeError(f"{name} must be a DataFrame (use StockSnapshot.from_dict for records)")

    @classmethod
    def from_dict(cls, payload: dict) -> "StockSnapshot":
        """Build from the nested dict/list-of-records shape the data layer returns."""
        fund = payload.get("fundamentals")
        summary = payload.get("market_summary")
        return cls(
            ticker=payload.get("ticker"),
            fundamentals=Fundamentals.from_dict(fund) if fund is not None else None,
            ownership=ownership_frame(payload.get("ownership")),
            price_series=price_frame(payload.get("price_series")),
            benchmark_price_series=price_frame(payload.get("benchmark_price_series")),
            market_summary=MarketSummary.from_dict(summary) if summary is not None else None,
        )


# ════════════════════════════════════════════════════════════
#  OUTPUT: INDICATOR RESULT + REPORT
# ════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class IndicatorResult:
    value: Optional[str] = None
    passed: Optional[bool] = None
    weight: int = NEUTRAL_WEIGHT
    raw: Optional[float] = None     # unrounded number behind `value`

    def __post_init__(self):
        if self.value is None and self.passed is not None:
            raise ValueError("An indicator without a value cannot pass or fail")

    @classmethod
    def no_verdict(cls, weight: int = NEUTRAL_WEIGHT) -> "IndicatorResult":
        return cls(weight=weight)

    @property
    def is_sentinel(self) -> bool:
        return self.value is None

    def with_weight(self, weight: int) -> "IndicatorResult":
        return replace(self, weight=int(weight))

    def to_dict(self) -> dict:
        return {"value": self.value, "passed": self.passed, "weight": self.weight}


class ChecklistReport(Mapping):
    """
    Ordered indicator results for one ticker, grouped into sections.
    Read-only mapping: name → IndicatorResult.
    """

    def __init__(self, ticker: str, sections: dict, results: dict):
        unknown = [n for names in sections.values() for n in names if n not in results]
        if unknown:
            raise ValueError(f"Sections reference missing results: {unknown}")
        self.ticker   = ticker
        self._sections = MappingProxyType({s: tuple(names) for s, names in sections.items()})
        self._results  = MappingProxyType(dict(results))

    @property
    def sections(self) -> Mapping:
        return self._sections

    @property
    def composite(self) -> IndicatorResult:
        return self._results["composite"]

    def __getitem__(self, name: str) -> IndicatorResult:
        return self._results[name]

    def __iter__(self):
        return iter(self._results)

    def __len__(self) -> int:
        return len(self._results)

    def __repr__(self) -> str:
        return f"ChecklistReport({self.ticker!r}, composite={self.composite.value!r})"

    @property
    def verdict_count(self) -> int:
        return sum(1 for r in self._results.values() if not r.is_sentinel)

    @property
    def passed_count(self) -> int:
        return sum(1 for r in self._results.values() if r.passed)

    def to_dict(self) -> dict:
        return {
            "ticker":   self.ticker,
            "sections": {
                section: {name: self._results[name].to_dict() for name in names}
                for section, names in self._sections.items()
            },
        }

    def to_frame(self) -> pd.DataFrame:
        rows = [
            {"section": section, "indicator": name, **self._results[name].to_dict()}
            for section, names in self._sections.items() for name in names
        ]
        return pd.DataFrame(rows, columns=["section", "indicator", "value", "passed", "weight"])
