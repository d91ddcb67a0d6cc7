# canslim/export_json.py — JSON export of checklist reports
import json
from datetime import datetime
from canslim.config import CFG


def build_payload(reports: dict, profile: str = None) -> dict:
    records = []
    for ticker, report in reports.items():
        record = report.to_dict()
        record["summary"] = {
            "composite": report.composite.value,
            "passed":    report.passed_count,
            "verdicts":  report.verdict_count,
            "total":     len(report),
        }
        records.append(record)
    return {
        "generated": datetime.now().strftime("%Y-%m-%d %H:%M"),
        "count":     len(records),
        "profile":   profile or CFG["composite_profile"],
        "rs_method": CFG["relative_strength_method"],
        "data":      records,
    }


def export_json(reports: dict, json_path: str = None, profile: str = None) -> dict:
    """Write every report as {"generated", "count", "profile", "data": [...]}."""
    json_path = json_path or CFG["output_json"]
    payload = build_payload(reports, profile)
    with open(json_path, "w", encoding="utf-8") as f:
        json.dump(payload, f, separators=(",", ":"))
    n_comp = sum(1 for r in payload["data"] if r["summary"]["composite"] is not None)
    print(f"✅  JSON → {json_path}  ({payload['count']} stocks, {n_comp} with composite)")
    return payload
