# citations.py
# In-text citation extraction (author–year).
# Each pattern family is a recognizer yielding (original, authors, year, type);
# recognizers run in a fixed order and the first one to produce a key keeps it.

import logging
import re
from typing import Callable, Dict, Iterator, List, Tuple

from .models import Citation, NARRATIVE, NARRATIVE_COMPLEX, PARENTHETICAL, PARENTHETICAL_MULTI
from .textnorm import normalize

logger = logging.getLogger(__name__)

RawCitation = Tuple[str, str, str, str]

SURNAME = r"[A-Z][a-zA-Z\-']+"
YEAR = r"\d{4}[a-z]?"

# A parenthesis holding at least one capitalised word followed (somewhere) by a year.
PARENTHETICAL_RE = re.compile(rf"\(([^)]*{SURNAME}[^)]*{YEAR}[^)]*)\)")

# "Smith (2020)", "Smith, Jones & Lee (2020)", "Kofi et al. (2020)"
NARRATIVE_RE = re.compile(
    rf"""
    \b(?P<auth>
        {SURNAME}
        (?:\s*,\s*{SURNAME})*              # , Surname
        (?:\s*,?\s*&\s*{SURNAME})?         # & Surname
        (?:\s+et\s+al\.?)?
    )
    \s+\((?P<year>{YEAR})\)
    """,
    re.VERBOSE,
)

# Same shape, but at least one "&"-joined author is required.
NARRATIVE_COMPLEX_RE = re.compile(
    rf"""
    \b(?P<auth>
        {SURNAME}
        (?:\s*,\s*{SURNAME})*
        (?:\s*,?\s*&\s*{SURNAME})+
    )
    \s+\((?P<year>{YEAR})\)
    """,
    re.VERBOSE,
)

# "(Smith & Jones, 2020)", "(Smith, Jones, & Lee, 2020)"
PARENTHETICAL_MULTI_RE = re.compile(
    rf"\((?P<auth>{SURNAME}(?:\s*,\s*{SURNAME})*\s*,?\s*&\s*{SURNAME})\s*,\s*(?P<year>{YEAR})\)"
)

PAGE_LOCATOR_RE = re.compile(r"^(?:see\s+)?(?:pp?\.|page)\s*\d", re.I)
PART_YEAR_RE = re.compile(rf"({YEAR})(?:\s*[,;)]|$)")


def looks_like_page_locator(content: str) -> bool:
    # "(p. 12)", "(pp. 3-4)", "(see p. 7)"; a surname such as Page or Pagel is not a locator
    return bool(PAGE_LOCATOR_RE.match(content))


def recognize_parenthetical(text: str) -> Iterator[RawCitation]:
    for m in PARENTHETICAL_RE.finditer(text):
        content = m.group(1).strip()

        if looks_like_page_locator(content):
            continue
        if re.fullmatch(r"\d+", content):
            continue
        if len(content) < 8:
            continue

        # "(Smith, 2020; Jones & Lee, 2019a)"
        for part in re.split(r";(?=\s*[A-Z])", content):
            part = part.strip()
            if len(part) < 5:
                continue

            ym = PART_YEAR_RE.search(part)
            if not ym:
                continue
            year = ym.group(1)
            before_year = re.sub(r"[,\s]+$", "", part[: part.index(year)]).strip()

            if len(before_year) > 2 and re.search(r"[A-Za-z]", before_year):
                yield f"({part})", before_year, year, PARENTHETICAL


def recognize_narrative(text: str) -> Iterator[RawCitation]:
    for m in NARRATIVE_RE.finditer(text):
        auth, year = m.group("auth"), m.group("year")
        yield f"{auth} ({year})", auth, year, NARRATIVE


def recognize_narrative_complex(text: str) -> Iterator[RawCitation]:
    for m in NARRATIVE_COMPLEX_RE.finditer(text):
        auth, year = m.group("auth"), m.group("year")
        yield f"{auth} ({year})", auth, year, NARRATIVE_COMPLEX


def recognize_parenthetical_multi(text: str) -> Iterator[RawCitation]:
    for m in PARENTHETICAL_MULTI_RE.finditer(text):
        auth, year = m.group("auth"), m.group("year")
        yield f"({auth}, {year})", auth, year, PARENTHETICAL_MULTI


# Order matters: a key produced by an earlier recognizer is never replaced.
RECOGNIZERS: List[Tuple[str, Callable[[str], Iterator[RawCitation]]]] = [
    (PARENTHETICAL, recognize_parenthetical),
    (NARRATIVE, recognize_narrative),
    (NARRATIVE_COMPLEX, recognize_narrative_complex),
    (PARENTHETICAL_MULTI, recognize_parenthetical_multi),
]


def citation_key(authors: str, year: str) -> str:
    return normalize(authors + " " + year)


def extract_citations(text: str) -> List[Citation]:
    found: Dict[str, Citation] = {}
    for name, recognize in RECOGNIZERS:
        before = len(found)
        for original, authors, year, kind in recognize(text):
            key = citation_key(authors, year)
            if key in found:
                continue
            found[key] = Citation(original=original, authors=authors, year=year, normalized=key, type=kind)
        logger.debug("recognizer %s added %d citations", name, len(found) - before)
    return list(found.values())
