# canslim/indicators.py — Checklist indicators (earnings, ownership, technicals)
#
# Every compute_* function is pure: it reads one slice of a StockSnapshot and
# returns an IndicatorResult. Short or missing data gives the no-verdict
# sentinel; only a wrongly-typed argument raises.
import numpy as np
import pandas as pd
from canslim.config import CFG, LETTER_SCORES, SMR_SCHEMES
from canslim.models import Fundamentals, IndicatorResult
from canslim.utils import _column, _missing, _safe, fmt_pct, growth_pct

NO_VERDICT = IndicatorResult.no_verdict()


def _check_frame(frame, name: str):
    if frame is not None and not isinstance(frame, pd.DataFrame):
        raise TypeError(f"{name} must be a DataFrame or None, got {type(frame).__name__}")


def _verdict(value: str, passed: bool, raw: float) -> IndicatorResult:
    return IndicatorResult(value=value, passed=bool(passed), raw=float(raw))


def _letter_result(grade: str, passing: tuple) -> IndicatorResult:
    return IndicatorResult(value=grade, passed=grade in passing, raw=float(LETTER_SCORES[grade]))


# ════════════════════════════════════════════════════════════
#  EARNINGS & SALES
# ════════════════════════════════════════════════════════════

def compute_eps_rating(fund: "Fundamentals | None") -> IndicatorResult:
    """Trailing EPS (current-year EPS as fallback) against the EPS rating bar."""
    if fund is None:
        return NO_VERDICT
    if not isinstance(fund, Fundamentals):
        raise TypeError("fund must be a Fundamentals instance")
    eps = fund.trailing_eps if fund.trailing_eps is not None else fund.current_year_eps
    if eps is None or fund.shares_outstanding is None:
        return NO_VERDICT
    return _verdict(f"{eps:.2f} USD", eps >= CFG["thresholds"]["eps_rating"], eps)


def compute_recent_eps_growth(quarterly: "pd.DataFrame | None") -> IndicatorResult:
    """
    Average quarter-over-quarter EPS growth across the last 3 transitions
    (4 most recent quarters). Any null or negative EPS among them → no verdict.
    """
    _check_frame(quarterly, "quarterly")
    eps = _column(quarterly, "eps")
    if len(eps) < 4:
        return NO_VERDICT
    last4 = eps.iloc[-4:].tolist()
    if any(np.isnan(v) or v < 0 for v in last4):
        return NO_VERDICT

    rates = [growth_pct(prev, cur) for prev, cur in zip(last4, last4[1:])]
    avg = float(np.mean(rates))
    return _verdict(fmt_pct(avg), avg >= CFG["thresholds"]["eps_growth"], avg)


def compute_three_quarter_eps_growth(quarterly: "pd.DataFrame | None",
                                     shares_outstanding: "float | None") -> IndicatorResult:
    """Per-share growth over the last 3 quarters of net earnings."""
    _check_frame(quarterly, "quarterly")
    earnings = _column(quarterly, "earnings")
    shares = _safe(shares_outstanding)
    if len(earnings) < 3 or np.isnan(shares) or shares == 0:
        return NO_VERDICT
    last3 = earnings.iloc[-3:]
    if last3.isna().any():
        return NO_VERDICT

    per_share = (last3 / shares).tolist()
    rates = [growth_pct(prev, cur) for prev, cur in zip(per_share, per_share[1:])]
    avg = float(np.mean(rates))
    return _verdict(fmt_pct(avg), avg >= CFG["thresholds"]["three_quarter_eps_growth"], avg)


def compute_accelerating_earnings_growth(quarterly: "pd.DataFrame | None") -> IndicatorResult:
    """
    Yes when every quarter's growth rate strictly exceeds the one before.
    Only the latest gap-free run of quarters is walked; a zero base
    quarter breaks the run.
    """
    _check_frame(quarterly, "quarterly")
    earnings = _column(quarterly, "earnings")
    gaps = np.flatnonzero(earnings.isna().values)
    vals = earnings.iloc[gaps[-1] + 1:].tolist() if len(gaps) else earnings.tolist()
    if len(vals) < 2:
        return NO_VERDICT

    accelerating = True
    prev_growth = None
    for prev, cur in zip(vals, vals[1:]):
        if prev == 0:
            accelerating = False
            break
        growth = growth_pct(prev, cur)
        if prev_growth is not None and growth <= prev_growth:
            accelerating = False
            break
        prev_growth = growth

    return _verdict("Yes" if accelerating else "No", accelerating, 1.0 if accelerating else 0.0)


def compute_annual_eps_growth(yearly: "pd.DataFrame | None") -> IndicatorResult:
    """
    Compound annual EPS growth over the last 4 fiscal years.
    Loss years are dropped before compounding; fewer than 2 left → no verdict.
    """
    _check_frame(yearly, "yearly")
    eps = _column(yearly, "eps")
    if len(eps) < 4:
        return NO_VERDICT
    positive = [v for v in eps.iloc[-4:].tolist() if not np.isnan(v) and v > 0]
    if len(positive) < 2:
        return NO_VERDICT

    initial, final = positive[0], positive[-1]
    years = len(positive) - 1
    cagr = ((final / initial) ** (1 / years) - 1) * 100
    return _verdict(fmt_pct(cagr), cagr >= CFG["thresholds"]["annual_eps_growth"], cagr)


def compute_sales_growth(quarterly: "pd.DataFrame | None") -> IndicatorResult:
    _check_frame(quarterly, "quarterly")
    revenue = _column(quarterly, "revenue")
    if len(revenue) < 2:
        return NO_VERDICT
    previous, recent = revenue.iloc[-2], revenue.iloc[-1]
    if _missing(previous, recent) or previous == 0:
        return NO_VERDICT
    growth = (recent - previous) / previous * 100
    return _verdict(fmt_pct(growth), growth >= CFG["thresholds"]["sales_growth"], growth)


def compute_roe(return_on_equity: "float | None") -> IndicatorResult:
    roe = _safe(return_on_equity)
    if np.isnan(roe):
        return NO_VERDICT
    pct = roe * 100
    return _verdict(fmt_pct(pct), pct >= CFG["thresholds"]["roe"], pct)


def _bucket(value: float, breakpoints: list, floor: str) -> str:
    for bound, letter in breakpoints:
        if value > bound:
            return letter
    return floor


def smr_grades(revenue_growth, gross_margin, return_on_equity, scheme: str = None) -> dict:
    """Letter per SMR component, or {} when any input is missing."""
    buckets = SMR_SCHEMES[scheme or CFG["smr_scheme"]]
    inputs = {"sales_growth": revenue_growth, "gross_margin": gross_margin, "roe": return_on_equity}
    if _missing(*inputs.values()):
        return {}
    return {k: _bucket(float(v), buckets[k], buckets["floor"]) for k, v in inputs.items()}


def compute_smr_rating(revenue_growth, gross_margin, return_on_equity,
                       scheme: str = None) -> IndicatorResult:
    """Sales + Margins + Return on equity: the weakest component letter is the grade."""
    grades = smr_grades(revenue_growth, gross_margin, return_on_equity, scheme)
    if not grades:
        return NO_VERDICT
    return _letter_result(max(grades.values()), ("A", "B"))


# ════════════════════════════════════════════════════════════
#  INSTITUTIONAL SUPPORT & SUPPLY/DEMAND
# ════════════════════════════════════════════════════════════

def compute_fund_ownership_increase(ownership: "pd.DataFrame | None") -> IndicatorResult:
    """% change between the two most recent ownership reports."""
    _check_frame(ownership, "ownership")
    if ownership is None or len(ownership) < 2:
        return NO_VERDICT
    ordered = ownership.sort_values("report_date", kind="stable")
    previous, latest = _column(ordered, "position").iloc[-2:].tolist()
    if _missing(previous, latest) or previous == 0:
        return NO_VERDICT

    increase = latest - previous
    pct = increase / previous * 100
    return _verdict(fmt_pct(pct), increase > 0, pct)


def compute_ad_line(prices: pd.DataFrame) -> pd.Series:
    """
    Cumulative accumulation/distribution line:
        MFM = ((close − low) − (high − close)) / (high − low)
        AD  = Σ MFM × volume
    A bar with high == low (or missing fields) adds no money flow.
    """
    high, low = _column(prices, "high"), _column(prices, "low")
    close, volume = _column(prices, "close"), _column(prices, "volume")
    spread = (high - low).where(lambda s: s != 0)
    mfm = ((close - low) - (high - close)) / spread
    return (mfm * volume).fillna(0.0).cumsum()


def compute_ad_rating(prices: "pd.DataFrame | None") -> IndicatorResult:
    """
    Grade the latest A/D change against the mean absolute change of the
    window: strong inflow A, inflow B, mild outflow C, strong outflow D.
    """
    _check_frame(prices, "prices")
    if prices is None or len(prices) < 2:
        return NO_VERDICT
    adl = compute_ad_line(prices.tail(CFG["ad_window"]))
    changes = adl.diff().dropna()
    change = float(changes.iloc[-1])
    band = float(changes.abs().mean()) * CFG["ad_grade_factor"]

    if change > 0:
        grade = "A" if change >= band else "B"
    else:
        grade = "D" if change < 0 and change <= -band else "C"
    return _letter_result(grade, ("A", "B", "C"))


def compute_volume_rating(prices: "pd.DataFrame | None") -> IndicatorResult:
    _check_frame(prices, "prices")
    volume = _column(prices, "volume").dropna()
    if len(volume) < 2:
        return NO_VERDICT
    recent, average = float(volume.iloc[-1]), float(volume.mean())
    if average <= 0:
        return NO_VERDICT

    if recent >= average * 1.4:
        grade = "A"
    elif recent >= average * 1.2:
        grade = "B"
    elif recent >= average:
        grade = "C"
    else:
        grade = "D"
    return _letter_result(grade, ("A", "B", "C"))


def compute_share_price(current_price: "float | None") -> IndicatorResult:
    price = _safe(current_price)
    if np.isnan(price):
        return NO_VERDICT
    return _verdict(f"${price:.2f}", price >= CFG["thresholds"]["current_share_price"], price)


def compute_average_daily_volume(average_volume: "float | None") -> IndicatorResult:
    avg = _safe(average_volume)
    if np.isnan(avg):
        return NO_VERDICT
    return _verdict(f"{int(round(avg)):,} shares",
                    avg >= CFG["thresholds"]["average_daily_volume"], avg)


# ════════════════════════════════════════════════════════════
#  RELATIVE STRENGTH
# ════════════════════════════════════════════════════════════

def compute_rsi(closes, period: int = None) -> float:
    """
    Wilder RSI: seed with the simple mean gain/loss of the first `period`
    deltas, then smooth avg = (avg × (period − 1) + x) / period.
    No losses at all → 100 (50 when the series is flat).
    """
    period = period or CFG["rsi_period"]
    deltas = np.diff(np.asarray(closes, dtype=float))
    gains = np.where(deltas > 0, deltas, 0.0)
    losses = np.where(deltas < 0, -deltas, 0.0)

    avg_gain = gains[:period].mean()
    avg_loss = losses[:period].mean()
    for gain, loss in zip(gains[period:], losses[period:]):
        avg_gain = (avg_gain * (period - 1) + gain) / period
        avg_loss = (avg_loss * (period - 1) + loss) / period

    if avg_loss == 0:
        return 100.0 if avg_gain > 0 else 50.0
    rs = avg_gain / avg_loss
    return float(100 - 100 / (1 + rs))


def _aligned_closes(prices: pd.DataFrame, benchmark: pd.DataFrame) -> pd.DataFrame:
    """Stock and benchmark closes on their common calendar days, oldest first."""
    def _daily(frame, name):
        out = pd.DataFrame({"day": pd.to_datetime(frame["date"]).dt.normalize(),
                            name: _column(frame, "close").values})
        return out.dropna().drop_duplicates("day", keep="last")

    merged = _daily(prices, "close").merge(_daily(benchmark, "bench"), on="day", how="inner")
    return merged.sort_values("day").reset_index(drop=True)


def compute_benchmark_spread(prices: "pd.DataFrame | None",
                             benchmark: "pd.DataFrame | None") -> "float | None":
    """Total return of the stock minus the benchmark over their common window, in %."""
    if prices is None or benchmark is None or prices.empty or benchmark.empty:
        return None
    both = _aligned_closes(prices, benchmark)
    if len(both) < 2 or both["close"].iloc[0] <= 0 or both["bench"].iloc[0] <= 0:
        return None
    stock_ret = both["close"].iloc[-1] / both["close"].iloc[0] - 1
    bench_ret = both["bench"].iloc[-1] / both["bench"].iloc[0] - 1
    return float((stock_ret - bench_ret) * 100)


def compute_relative_strength_rating(prices: "pd.DataFrame | None",
                                     benchmark: "pd.DataFrame | None" = None,
                                     method: str = None) -> IndicatorResult:
    """
    method "rsi"       — 14-period RSI of closes, needs 15+ bars, passes at 80.
    method "benchmark" — total-return spread over the benchmark, passes above 0.
    """
    _check_frame(prices, "prices")
    _check_frame(benchmark, "benchmark")
    method = method or CFG["relative_strength_method"]

    if method == "rsi":
        closes = _column(prices, "close").dropna()
        if len(closes) < CFG["rsi_period"] + 1:
            return NO_VERDICT
        rsi = compute_rsi(closes.values)
        return _verdict(f"{rsi:.2f}", rsi >= CFG["thresholds"]["relative_strength"], rsi)

    if method == "benchmark":
        spread = compute_benchmark_spread(prices, benchmark)
        if spread is None:
            return NO_VERDICT
        return _verdict(fmt_pct(spread), spread > CFG["thresholds"]["relative_strength_spread"], spread)

    raise ValueError(f"Unknown relative strength method: {method!r}")


def compute_rs_line_new_high(prices: "pd.DataFrame | None",
                             benchmark: "pd.DataFrame | None") -> IndicatorResult:
    """RS line (close / benchmark close × 100) sitting at its high for the window."""
    _check_frame(prices, "prices")
    _check_frame(benchmark, "benchmark")
    if prices is None or benchmark is None or len(prices) < 2 or len(benchmark) < 2:
        return NO_VERDICT
    both = _aligned_closes(prices, benchmark)
    both = both[both["bench"] != 0]
    if len(both) < 2:
        return NO_VERDICT

    rs_line = both["close"] / both["bench"] * 100
    current = float(rs_line.iloc[-1])
    new_high = current >= rs_line.max()
    return _verdict("Yes" if new_high else "No", new_high, current)


def compute_percent_off_high(current_price, fifty_two_week_high) -> IndicatorResult:
    price, high = _safe(current_price), _safe(fifty_two_week_high)
    if np.isnan(price) or np.isnan(high) or high <= 0:
        return NO_VERDICT
    off = (1 - price / high) * 100
    return _verdict(fmt_pct(off), off <= CFG["thresholds"]["percent_off_high"], off)


def compute_market_trend(benchmark: "pd.DataFrame | None") -> IndicatorResult:
    """
    Benchmark close vs its moving average, and the average's direction over
    the last few bars. Above a rising average → Uptrend; below a falling
    one → Downtrend; anything else is Sideways.
    """
    _check_frame(benchmark, "benchmark")
    closes = _column(benchmark, "close").dropna().reset_index(drop=True)
    window, lookback = CFG["trend_ma_window"], CFG["trend_lookback"]
    if len(closes) < window + lookback:
        return NO_VERDICT

    ma = closes.rolling(window).mean()
    ma_now, ma_then = float(ma.iloc[-1]), float(ma.iloc[-1 - lookback])
    last = float(closes.iloc[-1])
    if ma_now <= 0:
        return NO_VERDICT

    if last > ma_now and ma_now > ma_then:
        trend = "Uptrend"
    elif last < ma_now and ma_now < ma_then:
        trend = "Downtrend"
    else:
        trend = "Sideways"
    return _verdict(trend, trend == "Uptrend", (last / ma_now - 1) * 100)


# ════════════════════════════════════════════════════════════
#  TIMING / ENTRY
# ════════════════════════════════════════════════════════════

def compute_breakout(prices: "pd.DataFrame | None") -> IndicatorResult:
    """
    Up close on volume at least 40% above the average of the earlier bars.
    The average comes from the same series, so bar size (daily, monthly)
    never skews the comparison.
    """
    _check_frame(prices, "prices")
    if prices is None or len(prices) < 2:
        return NO_VERDICT
    closes, volume = _column(prices, "close"), _column(prices, "volume")
    previous, recent, recent_vol = closes.iloc[-2], closes.iloc[-1], volume.iloc[-1]
    avg = _safe(volume.iloc[:-1].mean())
    if _missing(previous, recent, recent_vol, avg) or avg <= 0:
        return NO_VERDICT

    price_up = recent > previous
    volume_up = recent_vol >= avg * CFG["thresholds"]["volume_surge"]
    is_breakout = bool(price_up and volume_up)
    return _verdict("Breakout detected" if is_breakout else "No breakout", is_breakout,
                    recent_vol / avg * 100)


def compute_volume_above_average(current_volume, average_volume) -> IndicatorResult:
    cur, avg = _safe(current_volume), _safe(average_volume)
    if np.isnan(cur) or np.isnan(avg) or avg <= 0:
        return NO_VERDICT
    pct = (cur - avg) / avg * 100
    return _verdict(fmt_pct(pct), pct >= CFG["thresholds"]["volume_above_average"], pct)


def compute_ideal_buy_point(prices: pd.DataFrame) -> "float | None":
    """
    Highest intraday high plus a fixed cash margin. Highs at or above twice
    the first bar's high are treated as bad ticks and ignored.
    """
    highs = _column(prices, "high").dropna()
    if highs.empty:
        return None
    usable = highs[(highs > 0) & (highs < 2 * highs.iloc[0])]
    if usable.empty:
        return None
    return float(usable.max()) + CFG["buy_point_margin"]


def compute_within_buy_point(current_price, prices: "pd.DataFrame | None") -> IndicatorResult:
    _check_frame(prices, "prices")
    price = _safe(current_price)
    if np.isnan(price) or price <= 0 or prices is None or len(prices) < CFG["buy_point_min_bars"]:
        return NO_VERDICT
    ideal = compute_ideal_buy_point(prices)
    if ideal is None:
        return NO_VERDICT

    tol = CFG["thresholds"]["buy_point_tolerance"]
    within = ideal * (1 - tol) <= price <= ideal * (1 + tol)
    return _verdict("Yes" if within else "No", within, (price - ideal) / ideal * 100)
