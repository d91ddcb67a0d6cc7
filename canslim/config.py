# canslim/config.py — Configuration, thresholds, composite profiles, layout

# ════════════════════════════════════════════════════════════
#  CONFIGURATION
# ════════════════════════════════════════════════════════════
CFG = {
    "thresholds": {
        "eps_rating":             80,       # observed bar on trailing EPS (USD)
        "eps_growth":             25,       # % average q/q growth
        "three_quarter_eps_growth": 25,
        "annual_eps_growth":      25,       # % CAGR
        "sales_growth":           20,
        "roe":                    17,
        "relative_strength":      80,       # RSI
        "relative_strength_spread": 0,      # % total return over benchmark
        "current_share_price":    15,
        "average_daily_volume":   400_000,
        "percent_off_high":       15,       # pass when within 15% of 52w high
        "volume_surge":           1.4,      # breakout: volume >= 140% of average
        "volume_above_average":   40,       # %
        "buy_point_tolerance":    0.05,
        "composite":              95,
    },
    "epsilon":             0.01,     # near-zero denominator guard
    "saturation":          10_000,   # % reported when dividing by ~0
    "rsi_period":          14,
    "ad_window":           100,
    "ad_grade_factor":     1.2,
    "buy_point_min_bars":  10,
    "buy_point_margin":    0.10,     # USD added to the pivot high
    "trend_ma_window":     10,
    "trend_lookback":      3,
    "relative_strength_method": "rsi",   # "rsi" | "benchmark"
    "smr_scheme":          "five",       # "five" (A–E) | "three" (A–C)
    "composite_profile":   "momentum",
    "benchmark":           "^GSPC",
    "history_period":      "10y",
    "history_interval":    "1mo",
    "max_workers_yf":      8,
    "output_json":         "artifacts/canslim_checklist.json",
    "output_file":         "artifacts/canslim_ranking.xlsx",
}

NEUTRAL_WEIGHT = 1     # neutral weight for indicators outside the composite

# ════════════════════════════════════════════════════════════
#  COMPOSITE PROFILES
# ════════════════════════════════════════════════════════════
# Each profile is a fixed bundle: indicator → weight, and indicator → scale.
# Scales: ("growth", ref) → value/ref×100, ("score",) → already 0–100,
#         ("letter",) → grade map, ("boolean",) → 100/0,
#         ("off_high", ref) → 100 − off/ref×100
COMPOSITE_PROFILES = {
    "momentum": {
        "weights": {
            "eps_growth":                   30,
            "sales_growth":                 10,
            "roe":                          10,
            "relative_strength_rating":     30,
            "accelerating_earnings_growth": 10,
            "percent_off_high":             10,
        },
        "scales": {
            "eps_growth":                   ("growth", 25),
            "sales_growth":                 ("growth", 25),
            "roe":                          ("growth", 17),
            "relative_strength_rating":     ("score",),
            "accelerating_earnings_growth": ("boolean",),
            "percent_off_high":             ("off_high", 25),
        },
    },
    "accumulation": {
        "weights": {
            "eps_growth":                        30,
            "sales_growth":                      10,
            "roe":                               10,
            "relative_strength_rating":          30,
            "accumulation_distribution_rating":  10,
            "percent_off_high":                  10,
        },
        "scales": {
            "eps_growth":                        ("growth", 25),
            "sales_growth":                      ("growth", 25),
            "roe":                               ("growth", 17),
            "relative_strength_rating":          ("score",),
            "accumulation_distribution_rating":  ("letter",),
            "percent_off_high":                  ("off_high", 25),
        },
    },
}

for _name, _profile in COMPOSITE_PROFILES.items():
    assert sum(_profile["weights"].values()) == 100, f"Profile '{_name}' weights must sum to 100"
    assert set(_profile["weights"]) == set(_profile["scales"]), f"Profile '{_name}' needs a scale per weight"

# Benchmark-spread RS is not bounded; normalize it like a growth rate instead
RS_BENCHMARK_SCALE = ("growth", 25)

LETTER_SCORES = {"A": 100, "B": 80, "C": 60, "D": 40, "E": 20}

# ════════════════════════════════════════════════════════════
#  SMR BUCKETS  (lower bounds, exclusive, fractions)
# ════════════════════════════════════════════════════════════
SMR_SCHEMES = {
    "five": {
        "sales_growth": [(0.25, "A"), (0.15, "B"), (0.05, "C"), (0.0, "D")],
        "gross_margin": [(0.20, "A"), (0.15, "B"), (0.10, "C"), (0.05, "D")],
        "roe":          [(0.20, "A"), (0.15, "B"), (0.10, "C"), (0.05, "D")],
        "floor":        "E",
    },
    "three": {
        "sales_growth": [(0.25, "A"), (0.10, "B")],
        "gross_margin": [(0.20, "A"), (0.10, "B")],
        "roe":          [(0.17, "A"), (0.10, "B")],
        "floor":        "C",
    },
}

# ════════════════════════════════════════════════════════════
#  CHECKLIST LAYOUT  ("rocks")
# ════════════════════════════════════════════════════════════
SECTIONS = {
    "earnings_quality": [
        "composite", "eps_rating", "eps_growth", "three_quarter_eps_growth",
        "accelerating_earnings_growth", "annual_eps_growth", "sales_growth",
        "roe", "smr_rating",
    ],
    "institutional_support": [
        "increase_in_funds_ownership", "accumulation_distribution_rating",
        "volume_rating", "current_share_price", "average_daily_volume",
    ],
    "technical_strength": [
        "relative_strength_rating", "rs_line_new_high", "percent_off_high",
        "market_trend",
    ],
    "timing": [
        "breakout", "volume_above_average", "within_buy_point",
    ],
}

FRIENDLY_NAMES = {
    "composite":                        "Composite Rating",
    "eps_rating":                       "EPS Rating",
    "eps_growth":                       "EPS Growth (recent Q)",
    "three_quarter_eps_growth":         "EPS Growth (3Q)",
    "accelerating_earnings_growth":     "Accelerating Earnings",
    "annual_eps_growth":                "Annual EPS Growth (3Y)",
    "sales_growth":                     "Sales Growth",
    "roe":                              "ROE",
    "smr_rating":                       "SMR Rating",
    "increase_in_funds_ownership":      "Fund Ownership Chg",
    "accumulation_distribution_rating": "Acc/Dis Rating",
    "volume_rating":                    "Volume Rating",
    "current_share_price":              "Share Price",
    "average_daily_volume":             "Avg Daily Volume",
    "relative_strength_rating":         "RS Rating",
    "rs_line_new_high":                 "RS Line New High",
    "percent_off_high":                 "% Off 52W High",
    "market_trend":                     "Market Trend",
    "breakout":                         "Breakout",
    "volume_above_average":             "Volume vs Avg",
    "within_buy_point":                 "Within Buy Point",
}

assert set(FRIENDLY_NAMES) == {n for names in SECTIONS.values() for n in names}, \
    "Every checklist indicator needs a display name"

# ════════════════════════════════════════════════════════════
#  SNAPSHOT FRAME SHAPES
# ════════════════════════════════════════════════════════════
EARNINGS_COLS  = ["date", "eps", "revenue", "earnings"]
OWNERSHIP_COLS = ["report_date", "position"]
PRICE_COLS     = ["date", "open", "high", "low", "close", "volume"]

WIKI_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
    ),
    "Accept-Language": "en-US,en;q=0.9",
}
SP500_WIKI_URL = "https://en.wikipedia.org/wiki/List_of_S%26P_500_companies"
SP500_CSV_URL = ("https://raw.githubusercontent.com/datasets/s-and-p-500-companies/"
                 "main/data/constituents.csv")
