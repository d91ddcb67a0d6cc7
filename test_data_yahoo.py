"""
Unit tests for the Yahoo Finance data layer and the ticker universe.
yfinance is never hit: yf.Ticker is patched with an in-memory fake.
Run: python -m pytest test_data_yahoo.py -v
"""

import pytest
import numpy as np
import pandas as pd
import sys
import os
import unittest.mock

sys.path.insert(0, os.path.dirname(__file__))

from canslim import StockSnapshot, build_checklist
from canslim.data_yahoo import (
    _ownership_records,
    _statement_records,
    build_snapshot_payload,
    fetch_benchmark,
    fetch_snapshot,
    fetch_snapshots_parallel,
)
from canslim.pipeline import run_pipeline
from canslim.universe import get_universe


# ═══════════════════════════════════════════════════
#  HELPER: fake yfinance Ticker
# ═══════════════════════════════════════════════════

def make_statement(periods, eps, revenue, net_income):
    """yfinance layout: rows are line items, columns are period ends (newest first)."""
    cols = pd.to_datetime(periods)
    return pd.DataFrame(
        [eps, revenue, net_income],
        index=["Diluted EPS", "Total Revenue", "Net Income"],
        columns=cols,
    )


def make_history(n=20, start=100.0):
    idx = pd.date_range("2022-01-01", periods=n, freq="MS", tz="America/New_York", name="Date")
    closes = start + np.arange(n, dtype=float)
    return pd.DataFrame({
        "Open": closes - 0.5, "High": closes + 1, "Low": closes - 1,
        "Close": closes, "Adj Close": closes, "Volume": np.full(n, 1_000_000),
    }, index=idx)


class FakeTicker:
    def __init__(self, symbol, fail=()):
        self.symbol = symbol
        self._fail = set(fail)

    def _maybe_fail(self, part):
        if part in self._fail:
            raise RuntimeError(f"{part} rate limited")

    @property
    def info(self):
        self._maybe_fail("info")
        return {
            "sharesOutstanding": 1_000_000, "trailingEps": 6.5, "returnOnEquity": 0.22,
            "grossMargins": 0.45, "revenueGrowth": 0.18, "currentPrice": 118.0,
            "averageVolume": 900_000, "regularMarketVolume": 1_500_000,
            "fiftyTwoWeekHigh": 120.0,
        }

    @property
    def quarterly_income_stmt(self):
        self._maybe_fail("quarterly")
        return make_statement(
            ["2023-12-31", "2023-09-30", "2023-06-30", "2023-03-31"],
            eps=[2.2, 1.7, 1.3, 1.0],
            revenue=[150.0, 125.0, 110.0, 100.0],
            net_income=[225.0, 170.0, 130.0, 100.0],
        )

    @property
    def income_stmt(self):
        self._maybe_fail("yearly")
        return make_statement(
            ["2023-12-31", "2022-12-31", "2021-12-31", "2020-12-31"],
            eps=[4.0, 3.0, 2.0, 1.0],
            revenue=[500.0, 400.0, 300.0, 200.0],
            net_income=[4e6, 3e6, 2e6, 1e6],
        )

    @property
    def mutualfund_holders(self):
        self._maybe_fail("ownership")
        return pd.DataFrame({
            "Date Reported": pd.to_datetime(["2023-12-31", "2023-09-30"]),
            "Holder": ["Fund A", "Fund A"],
            "Shares": [1_200, 1_000],
        })

    @property
    def institutional_holders(self):
        return None

    def history(self, period=None, interval=None, auto_adjust=True):
        self._maybe_fail("history")
        return make_history()


def patch_ticker(fail=()):
    return unittest.mock.patch("canslim.data_yahoo.yf.Ticker",
                               side_effect=lambda s: FakeTicker(s, fail))


# ═══════════════════════════════════════════════════
#  TEST: statement / holder shaping
# ═══════════════════════════════════════════════════

class TestShaping:
    def test_statement_records_oldest_first(self):
        records = _statement_records(FakeTicker("X").quarterly_income_stmt)
        assert [r["eps"] for r in records] == [1.0, 1.3, 1.7, 2.2]
        assert records[-1]["earnings"] == 225.0

    def test_statement_missing_rows_are_nan(self):
        stmt = make_statement(["2023-12-31"], [1.0], [2.0], [3.0]).drop(index="Total Revenue")
        assert np.isnan(_statement_records(stmt)[0]["revenue"])

    def test_empty_statement(self):
        assert _statement_records(pd.DataFrame()) is None
        assert _statement_records(None) is None

    def test_ownership_records(self):
        records = _ownership_records(FakeTicker("X").mutualfund_holders)
        assert [r["position"] for r in records] == [1_200, 1_000]

    def test_ownership_without_expected_columns(self):
        assert _ownership_records(pd.DataFrame({"Holder": ["A"]})) is None

    def test_payload_without_info(self):
        payload = build_snapshot_payload("X", {"info": {}, "history": None})
        assert payload["fundamentals"] is None
        assert payload["market_summary"] is None
        assert StockSnapshot.from_dict(payload).ticker == "X"


# ═══════════════════════════════════════════════════
#  TEST: snapshot fetching (mocked yfinance)
# ═══════════════════════════════════════════════════

class TestFetchSnapshot:
    def test_full_snapshot(self):
        with patch_ticker():
            snap = fetch_snapshot("ACME")
        assert snap.ticker == "ACME"
        assert snap.fundamentals.trailing_eps == 6.5
        assert snap.fundamentals.quarterly["eps"].tolist() == [1.0, 1.3, 1.7, 2.2]
        assert snap.market_summary.current_price == 118.0
        assert len(snap.price_series) == 20
        assert snap.price_series["date"].dt.tz is None
        assert len(snap.ownership) == 2

    def test_failed_sub_fetch_leaves_section_empty(self):
        with patch_ticker(fail=("history",)):
            snap = fetch_snapshot("ACME")
        assert snap.price_series is None
        assert snap.fundamentals is not None
        report = build_checklist(snap)
        assert report["breakout"].is_sentinel
        assert report["eps_growth"].passed is True

    def test_failed_ownership_fetch(self):
        with patch_ticker(fail=("ownership",)):
            snap = fetch_snapshot("ACME")
        assert snap.ownership is None

    def test_blank_ticker_raises(self):
        with pytest.raises(ValueError):
            fetch_snapshot("")

    def test_parallel_fetch(self):
        with patch_ticker():
            snaps = fetch_snapshots_parallel(["AAA", "BBB"])
        assert set(snaps) == {"AAA", "BBB"}

    def test_benchmark(self):
        with patch_ticker():
            bench = fetch_benchmark("^GSPC")
        assert bench["close"].iloc[-1] == 119.0

    def test_benchmark_failure_is_none(self):
        with patch_ticker(fail=("history",)), unittest.mock.patch("canslim.data_yahoo.time.sleep"):
            assert fetch_benchmark("^GSPC") is None


# ═══════════════════════════════════════════════════
#  TEST: universe + pipeline
# ═══════════════════════════════════════════════════

class TestUniverse:
    def test_list(self):
        assert get_universe(["aapl", "BRK.B", "AAPL"]) == ["AAPL", "BRK-B"]

    def test_comma_string(self):
        assert get_universe("msft, nvda") == ["MSFT", "NVDA"]

    def test_empty_raises(self):
        with pytest.raises(ValueError):
            get_universe(" , ")


class TestPipeline:
    def test_run_pipeline_without_export(self):
        with patch_ticker():
            df, reports = run_pipeline(["AAA", "BBB"], export=False)
        assert set(df["ticker"]) == {"AAA", "BBB"}
        assert set(reports) == {"AAA", "BBB"}
        assert df["rank"].tolist() == [1, 2]
