# report.py
# Plain-text report and tabular views of AnalysisResults.

import datetime as dt
from typing import Dict, List, Optional

import pandas as pd

from .models import AnalysisResults, MatchResult

RULE = "==============================================="


def _format_confidence(value) -> str:
    if isinstance(value, str):
        return value
    return f"{value:.0f}"


def render_report(results: AnalysisResults, generated_at: Optional[dt.datetime] = None) -> str:
    generated_at = generated_at or dt.datetime.now()
    s = results.summary

    lines: List[str] = [
        "ACADEMIC REFERENCE CHECKER REPORT",
        f"Generated on: {generated_at:%Y-%m-%d %H:%M:%S}",
        RULE,
        "",
        "SUMMARY STATISTICS:",
        f"- Total Citations Found: {s.total_citations}",
        f"- Total References Found: {s.total_references}",
        f"- Perfect Matches: {s.full_matches}",
        f"- Probable Spelling Errors: {s.probable_spelling_errors}",
        f"- Partial Matches: {s.partial_matches}",
        f"- Missing References: {s.missing_references}",
        f"- Unused References: {s.unused_references}",
        "",
        RULE,
        "",
        "DETAILED RESULTS:",
        "",
    ]

    lines.append(f"PERFECT MATCHES ({len(results.full_matches)}):")
    for i, m in enumerate(results.full_matches, start=1):
        lines.append(f"{i}. Citation: {m.citation.original}")
        lines.append(f"   Reference: {m.reference.original}")
        lines.append("")
    if not results.full_matches:
        lines.extend(["None.", ""])

    lines.append(f"PROBABLE SPELLING ERRORS ({len(results.probable_spelling_errors)}):")
    for i, m in enumerate(results.probable_spelling_errors, start=1):
        lines.append(f"{i}. Citation: {m.citation.original}")
        lines.append(f"   Likely matches: {m.reference.original}")
        lines.append(f'   Suggestion: Check if "{m.citation.authors}" should be "{m.reference.first_author}"')
        lines.append("")
    if not results.probable_spelling_errors:
        lines.extend(["None.", ""])

    lines.append(f"PARTIAL MATCHES ({len(results.partial_matches)}):")
    for i, m in enumerate(results.partial_matches, start=1):
        lines.append(f"{i}. Citation: {m.citation.original}")
        lines.append(f"   Reference: {m.reference.original}")
        lines.append("")
    if not results.partial_matches:
        lines.extend(["None.", ""])

    lines.append(f"CITATIONS WITHOUT REFERENCES ({len(results.missing)}):")
    for i, u in enumerate(results.missing, start=1):
        lines.append(f"{i}. {u.citation.original}")
    if not results.missing:
        lines.append("None.")
    lines.append("")

    lines.append(f"UNUSED REFERENCES ({len(results.unused)}):")
    for i, u in enumerate(results.unused, start=1):
        lines.append(f"{i}. {u.reference.original}")
    if not results.unused:
        lines.append("None.")
    lines.append("")

    return "\n".join(lines)


def report_filename(day: Optional[dt.date] = None) -> str:
    day = day or dt.date.today()
    return f"reference-check-report-{day.isoformat()}.txt"


# ----------------------------
# Tables (Streamlit + CSV downloads)
# ----------------------------
MATCH_COLUMNS = ["bucket", "citation", "reference", "confidence", "match_type"]


def _match_rows(bucket: str, matches: List[MatchResult]) -> List[Dict[str, str]]:
    return [
        {
            "bucket": bucket,
            "citation": m.citation.original,
            "reference": m.reference.original,
            "confidence": _format_confidence(m.confidence),
            "match_type": m.match_type,
        }
        for m in matches
    ]


def results_to_frames(results: AnalysisResults) -> Dict[str, pd.DataFrame]:
    rows = []
    rows.extend(_match_rows("perfect", results.full_matches))
    rows.extend(_match_rows("spelling", results.probable_spelling_errors))
    rows.extend(_match_rows("partial", results.partial_matches))
    df_matches = pd.DataFrame(rows) if rows else pd.DataFrame(columns=MATCH_COLUMNS)

    missing_rows = [
        {"citation_in_text": u.citation.original, "authors": u.citation.authors, "year": u.citation.year, "type": u.citation.type}
        for u in results.missing
    ]
    df_missing = (
        pd.DataFrame(missing_rows) if missing_rows else pd.DataFrame(columns=["citation_in_text", "authors", "year", "type"])
    )

    unused_rows = [
        {"reference_full": u.reference.original, "first_author": u.reference.first_author, "year": u.reference.year}
        for u in results.unused
    ]
    df_unused = (
        pd.DataFrame(unused_rows) if unused_rows else pd.DataFrame(columns=["reference_full", "first_author", "year"])
    )

    s = results.summary
    df_summary = pd.DataFrame(
        [
            {"metric": "Citations", "count": s.total_citations},
            {"metric": "References", "count": s.total_references},
            {"metric": "Perfect", "count": s.full_matches},
            {"metric": "Spelling", "count": s.probable_spelling_errors},
            {"metric": "Partial", "count": s.partial_matches},
            {"metric": "Missing", "count": s.missing_references},
            {"metric": "Unused", "count": s.unused_references},
        ]
    )

    return {"summary": df_summary, "matches": df_matches, "missing": df_missing, "unused": df_unused}
