# canslim/export_excel.py — Excel export + pass/fail formatting
import pandas as pd
from openpyxl.styles import PatternFill, Font, Alignment, Border, Side
from openpyxl.utils import get_column_letter
from openpyxl.formatting.rule import ColorScaleRule
from canslim.config import FRIENDLY_NAMES, SECTIONS

LEAD_COLS = ["rank", "ticker", "composite_score", "composite_pctile",
             "passed_count", "verdict_count", "coverage"]
LEAD_NAMES = {
    "rank": "Rank", "ticker": "Ticker", "composite_score": "Composite Score",
    "composite_pctile": "Composite Pctile", "passed_count": "Passed",
    "verdict_count": "With Verdict", "coverage": "Data Coverage %",
}
INDICATOR_COLS = [name for names in SECTIONS.values() for name in names if name != "composite"]

PASS_FILL = PatternFill("solid", fgColor="C6EFCE")
FAIL_FILL = PatternFill("solid", fgColor="FFC7CE")
NONE_FILL = PatternFill("solid", fgColor="EDEDED")


def style_and_export(df: pd.DataFrame, filepath: str):
    out_df = df.reindex(columns=LEAD_COLS + INDICATOR_COLS)
    out_df["coverage"] = (out_df["coverage"] * 100).round(1)
    out_df["composite_score"] = out_df["composite_score"].round(2)
    out_df["composite_pctile"] = out_df["composite_pctile"].round(1)
    out_df = out_df.rename(columns={**LEAD_NAMES, **FRIENDLY_NAMES})

    verdicts = df.reindex(columns=[f"{c}_passed" for c in INDICATOR_COLS])

    with pd.ExcelWriter(filepath, engine="openpyxl") as writer:
        out_df.to_excel(writer, sheet_name="Checklist", index=False)
        out_df.head(50).to_excel(writer, sheet_name="Top 50", index=False)
        wb = writer.book
        for sn in ["Checklist", "Top 50"]:
            _format_sheet(wb[sn], verdicts)

    print(f"✅  Excel → {filepath}")


def _format_sheet(ws, verdicts: pd.DataFrame):
    HEADER_FILL = PatternFill("solid", fgColor="1F4E79")
    BORDER = Border(bottom=Side(style="thin", color="BFBFBF"),
                    right=Side(style="thin",  color="BFBFBF"))

    score_idx = None
    for idx, cell in enumerate(ws[1], 1):
        cell.font      = Font(bold=True, color="FFFFFF", size=10)
        cell.alignment = Alignment(horizontal="center", wrap_text=True)
        cell.border    = BORDER
        cell.fill      = HEADER_FILL
        if cell.value == "Composite Score":
            score_idx = idx

    first_ind = len(LEAD_COLS) + 1
    for ri, row in enumerate(ws.iter_rows(min_row=2), 2):
        for ci, cell in enumerate(row, 1):
            cell.border = BORDER
            cell.alignment = Alignment(horizontal="center")
            if ci < first_ind:
                continue
            verdict = verdicts.iat[ri - 2, ci - first_ind]
            if pd.isna(verdict):
                cell.fill = NONE_FILL
            elif verdict:
                cell.fill = PASS_FILL
            else:
                cell.fill = FAIL_FILL

    for col in ws.columns:
        ml = max((len(str(c.value)) if c.value else 0) for c in col)
        ws.column_dimensions[get_column_letter(col[0].column)].width = min(ml + 2, 24)

    if score_idx:
        cl = get_column_letter(score_idx)
        ws.conditional_formatting.add(
            f"{cl}2:{cl}{ws.max_row}",
            ColorScaleRule(start_type="num",       start_value=0,  start_color="FF4444",
                           mid_type="num",         mid_value=50,   mid_color="FFFF00",
                           end_type="num",         end_value=100,  end_color="00B050"),
        )
    ws.freeze_panes = "C2"
