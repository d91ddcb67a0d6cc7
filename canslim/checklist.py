# canslim/checklist.py — Build the full checklist report for one snapshot
from canslim.composite import compute_composite, get_profile
from canslim.config import NEUTRAL_WEIGHT, SECTIONS
from canslim.indicators import (
    compute_accelerating_earnings_growth, compute_ad_rating,
    compute_annual_eps_growth, compute_average_daily_volume, compute_breakout,
    compute_eps_rating, compute_fund_ownership_increase, compute_market_trend,
    compute_percent_off_high, compute_recent_eps_growth,
    compute_relative_strength_rating, compute_roe, compute_rs_line_new_high,
    compute_sales_growth, compute_share_price, compute_smr_rating,
    compute_three_quarter_eps_growth, compute_volume_above_average,
    compute_volume_rating, compute_within_buy_point,
)
from canslim.models import ChecklistReport, Fundamentals, MarketSummary, StockSnapshot


def _evaluate(snap: StockSnapshot) -> dict:
    """Run every indicator. Absent snapshot sections become empty stand-ins."""
    fund    = snap.fundamentals or Fundamentals()
    summary = snap.market_summary or MarketSummary()
    prices, bench = snap.price_series, snap.benchmark_price_series

    return {
        # 1. Earnings & sales quality
        "eps_rating":                   compute_eps_rating(snap.fundamentals),
        "eps_growth":                   compute_recent_eps_growth(fund.quarterly),
        "three_quarter_eps_growth":     compute_three_quarter_eps_growth(fund.quarterly,
                                                                         fund.shares_outstanding),
        "accelerating_earnings_growth": compute_accelerating_earnings_growth(fund.quarterly),
        "annual_eps_growth":            compute_annual_eps_growth(fund.yearly),
        "sales_growth":                 compute_sales_growth(fund.quarterly),
        "roe":                          compute_roe(fund.return_on_equity),
        "smr_rating":                   compute_smr_rating(fund.revenue_growth, fund.gross_margin,
                                                           fund.return_on_equity),
        # 2. Institutional support
        "increase_in_funds_ownership":      compute_fund_ownership_increase(snap.ownership),
        "accumulation_distribution_rating": compute_ad_rating(prices),
        "volume_rating":                    compute_volume_rating(prices),
        "current_share_price":              compute_share_price(summary.current_price),
        "average_daily_volume":             compute_average_daily_volume(summary.average_volume),
        # 3. Technical strength
        "relative_strength_rating": compute_relative_strength_rating(prices, bench),
        "rs_line_new_high":         compute_rs_line_new_high(prices, bench),
        "percent_off_high":         compute_percent_off_high(summary.current_price,
                                                             summary.fifty_two_week_high),
        "market_trend":             compute_market_trend(bench),
        # 4. Timing
        "breakout":             compute_breakout(prices),
        "volume_above_average": compute_volume_above_average(summary.current_volume,
                                                             summary.average_volume),
        "within_buy_point":     compute_within_buy_point(summary.current_price, prices),
    }


def build_checklist(snap: StockSnapshot, profile: "str | dict | None" = None,
                    on_result=None) -> ChecklistReport:
    """
    Evaluate the checklist for one snapshot and fold the profile's bundle
    into the composite rating. `on_result(name, result)` is called for each
    entry in report order, if given.
    """
    if not isinstance(snap, StockSnapshot):
        raise TypeError(f"Expected a StockSnapshot, got {type(snap).__name__}")
    prof = get_profile(profile)
    weights = prof["weights"]

    raw = _evaluate(snap)
    raw["composite"] = compute_composite(raw, prof)

    results = {}
    for names in SECTIONS.values():
        for name in names:
            results[name] = raw[name].with_weight(weights.get(name, NEUTRAL_WEIGHT))
            if on_result is not None:
                on_result(name, results[name])
    return ChecklistReport(snap.ticker, SECTIONS, results)
