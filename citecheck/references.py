# references.py
# Locate the reference list (and footnotes), split it into entries, parse each entry.

import logging
import re
from typing import Dict, List, Optional, Tuple

from .models import Reference
from .textnorm import norm_space, normalize

logger = logging.getLogger(__name__)

# ----------------------------
# Split main text vs references
# ----------------------------
REF_HEADINGS = [
    r"references",
    r"bibliography",
    r"works\s+cited",
    r"reference\s+list",
    r"literature\s+cited",
]
NOTE_HEADINGS = [
    r"footnotes",
    r"endnotes",
]


def _is_heading(line: str, headings: List[str]) -> bool:
    l = norm_space(line).lower()
    return any(re.fullmatch(rf"{h}[.:]?", l) for h in headings)


def find_reference_heading(lines: List[str]) -> Optional[int]:
    # The last heading wins (a table of contents may list "References" too)
    ref_idx = None
    for i, line in enumerate(lines):
        if _is_heading(line, REF_HEADINGS):
            ref_idx = i
    return ref_idx


def find_notes_heading(lines: List[str], start: int = 0) -> Optional[int]:
    for i in range(start, len(lines)):
        if _is_heading(lines[i], NOTE_HEADINGS):
            return i
    return None


def split_main_and_references(full_text: str) -> Tuple[str, str, str]:
    """
    Returns (main_text, references_text, footnotes_text).

    The reference section runs from the heading up to a "Footnotes"/"Endnotes"
    heading, if one follows; the notes section runs to the end of the document.
    """
    lines = full_text.splitlines()

    ref_idx = find_reference_heading(lines)
    if ref_idx is None:
        notes_idx = find_notes_heading(lines)
        if notes_idx is None:
            return full_text, "", ""
        return (
            "\n".join(lines[:notes_idx]),
            "",
            "\n".join(lines[notes_idx + 1 :]),
        )

    notes_idx = find_notes_heading(lines, ref_idx + 1)
    if notes_idx is None:
        notes_idx = find_notes_heading(lines[:ref_idx])

    main = "\n".join(lines[:ref_idx])
    if notes_idx is not None and notes_idx > ref_idx:
        refs = "\n".join(lines[ref_idx + 1 : notes_idx])
        notes = "\n".join(lines[notes_idx + 1 :])
    elif notes_idx is not None:
        # notes placed before the references
        refs = "\n".join(lines[ref_idx + 1 :])
        notes = "\n".join(lines[notes_idx + 1 : ref_idx])
    else:
        refs = "\n".join(lines[ref_idx + 1 :])
        notes = ""
    return main, refs, notes


def main_text_for_search(full_text: str) -> str:
    """Body text with the reference list cut out; footnotes (and anything after them) stay in."""
    lines = full_text.splitlines()
    ref_idx = find_reference_heading(lines)
    if ref_idx is None:
        return full_text

    before = lines[:ref_idx]
    notes_idx = find_notes_heading(lines, ref_idx + 1)
    if notes_idx is None:
        return "\n".join(before)
    return "\n".join(before + lines[notes_idx:])


# ----------------------------
# Reference list segmentation
# ----------------------------
NUMBER_MARKER_RE = re.compile(r"^(?:\d{1,4}\.\s+|\[\s*\d{1,4}\s*\]\s*)")
SURNAME_INITIAL_RE = re.compile(r"^[A-Z][a-zA-Z\-']+,\s+[A-Z]")
OPEN_YEAR_RE = re.compile(r"\(\d{4}")
REF_YEAR_RE = re.compile(r"\((\d{4}[a-z]?)\)")

MIN_ENTRY_CHARS = 30


def _starts_new_entry(line: str, current: str) -> bool:
    if NUMBER_MARKER_RE.match(line):
        return True
    if SURNAME_INITIAL_RE.match(line):
        return True
    if re.match(r"^[A-Z]", line) and OPEN_YEAR_RE.search(line):
        return True
    # new sentence after a finished one
    if current.endswith(".") and re.match(r"^[A-Z]", line) and len(line) > 20:
        return True
    return False


def _is_complete_entry(entry: str) -> bool:
    return len(entry) > MIN_ENTRY_CHARS and bool(OPEN_YEAR_RE.search(entry))


def segment_reference_lines(ref_text: str) -> List[str]:
    # Join wrapped lines into entries. Short or year-less entries (running
    # headers, page numbers) are dropped.
    lines = [ln.strip() for ln in ref_text.split("\n")]
    lines = [ln for ln in lines if ln]

    entries: List[str] = []
    cur = ""

    for ln in lines:
        if _starts_new_entry(ln, cur) and len(cur) > MIN_ENTRY_CHARS:
            if _is_complete_entry(cur):
                entries.append(cur.strip())
            cur = ln
        else:
            cur = cur + " " + ln if cur else ln

    if _is_complete_entry(cur):
        entries.append(cur.strip())
    return entries


# ----------------------------
# Entry parsing
# ----------------------------
def parse_reference_entry(raw: str) -> Optional[Reference]:
    r = NUMBER_MARKER_RE.sub("", raw, count=1)

    m_year = REF_YEAR_RE.search(r)
    if not m_year:
        return None
    year = m_year.group(1)

    before_year = r[: m_year.start()].strip()
    all_authors = re.sub(r"\.$", "", before_year).strip()

    if "," in all_authors:
        first_author = all_authors[: all_authors.index(",")].strip()
    else:
        first_author = (all_authors.split() or [""])[0]

    if len(first_author) < 2:
        return None

    return Reference(
        original=r,
        first_author=first_author,
        all_authors=all_authors,
        year=year,
        normalized=normalize(all_authors + " " + year),
        first_author_normalized=normalize(first_author + " " + year),
    )


def parse_references(ref_text: str) -> List[Reference]:
    if not ref_text.strip():
        return []
    refs = []
    for entry in segment_reference_lines(ref_text):
        parsed = parse_reference_entry(entry)
        if parsed is not None:
            refs.append(parsed)
    return refs


def extract_references(full_text: str) -> List[Reference]:
    _, ref_text, notes_text = split_main_and_references(full_text)

    found: Dict[str, Reference] = {}
    for r in parse_references(ref_text) + parse_references(notes_text):
        if r.normalized not in found:
            found[r.normalized] = r

    logger.debug("parsed %d unique references", len(found))
    return list(found.values())
