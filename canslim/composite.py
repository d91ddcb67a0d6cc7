# canslim/composite.py — Composite rating: normalize → weight → 0–100 score
import numpy as np
from canslim.config import CFG, COMPOSITE_PROFILES, LETTER_SCORES, RS_BENCHMARK_SCALE
from canslim.models import IndicatorResult
from canslim.utils import fmt_pct


def get_profile(profile: "str | dict | None" = None) -> dict:
    """Resolve a profile name (or pass a profile dict through) to weights + scales."""
    if isinstance(profile, dict):
        return profile
    name = profile or CFG["composite_profile"]
    if name not in COMPOSITE_PROFILES:
        raise ValueError(f"Unknown composite profile: {name!r}")
    prof = COMPOSITE_PROFILES[name]
    if CFG["relative_strength_method"] == "benchmark" and "relative_strength_rating" in prof["scales"]:
        scales = dict(prof["scales"], relative_strength_rating=RS_BENCHMARK_SCALE)
        return {"weights": prof["weights"], "scales": scales}
    return prof


def normalize(result: IndicatorResult, scale: tuple) -> float:
    """
    Map one indicator onto 0–100 using its declared scale, clamped.
      ("growth", ref)   raw% / ref × 100       (e.g. 25% EPS growth → 100)
      ("score",)        raw already 0–100      (RSI)
      ("letter",)       A 100 · B 80 · C 60 · D 40 · E 20
      ("boolean",)      passed → 100, else 0
      ("off_high", ref) 100 − raw% / ref × 100 (at the high → 100)
    """
    kind = scale[0]
    if kind == "growth":
        norm = result.raw / scale[1] * 100
    elif kind == "score":
        norm = result.raw
    elif kind == "letter":
        norm = LETTER_SCORES[result.value]
    elif kind == "boolean":
        norm = 100.0 if result.passed else 0.0
    elif kind == "off_high":
        norm = 100 - result.raw / scale[1] * 100
    else:
        raise ValueError(f"Unknown normalization scale: {kind!r}")
    return float(np.clip(norm, 0, 100))


def compute_composite(results: dict, profile: "str | dict | None" = None) -> IndicatorResult:
    """
    Weighted average of the profile's normalized indicators. Unlike the
    individual indicators, the composite needs every input: one missing or
    no-verdict input makes the whole composite a no-verdict.
    """
    prof = get_profile(profile)
    weights, scales = prof["weights"], prof["scales"]

    inputs = {name: results.get(name) for name in weights}
    if any(r is None or r.is_sentinel for r in inputs.values()):
        return IndicatorResult.no_verdict()
    if any(r.raw is None and scales[n][0] not in ("letter", "boolean") for n, r in inputs.items()):
        return IndicatorResult.no_verdict()

    total_w, score = 0.0, 0.0
    for name, w in weights.items():
        score   += w * normalize(inputs[name], scales[name])
        total_w += w
    rating = score / total_w if total_w > 0 else np.nan
    if np.isnan(rating):
        return IndicatorResult.no_verdict()
    return IndicatorResult(value=fmt_pct(rating),
                           passed=bool(rating >= CFG["thresholds"]["composite"]),
                           raw=float(rating))
