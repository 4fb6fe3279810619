# matcher.py
# Reconcile citations against references with a tiered similarity score.

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .models import (
    Citation,
    FULL,
    MatchResult,
    NO_MATCH,
    PARTIAL,
    Reference,
    SPELLING_ERROR,
    UnmatchedResult,
    UnusedResult,
)
from .textnorm import extract_surname, normalize, similarity, split_author_list, strip_year_suffix

logger = logging.getLogger(__name__)

ACCEPT_THRESHOLD = 70
FULL_SCORE_THRESHOLD = 90
SIMILARITY_THRESHOLD = 0.75
MULTI_AUTHOR_RATIO_THRESHOLD = 0.7


@dataclass
class MatchOutcome:
    full_matches: List[MatchResult] = field(default_factory=list)
    partial_matches: List[MatchResult] = field(default_factory=list)
    probable_spelling_errors: List[MatchResult] = field(default_factory=list)
    unmatched: List[UnmatchedResult] = field(default_factory=list)
    unused: List[UnusedResult] = field(default_factory=list)


# ----------------------------
# Pair scoring
# ----------------------------
def surname_key(name: str) -> str:
    return normalize(extract_surname(name))


def score_single_surname(citation: Citation, reference: Reference) -> Tuple[float, str]:
    cit = surname_key(citation.authors)
    ref = surname_key(reference.first_author)

    if cit and cit == ref:
        return 100, FULL
    if len(cit) > 3 and len(ref) > 3:
        if cit in ref or ref in cit:
            return 90, PARTIAL
        sim = similarity(cit, ref)
        if sim >= SIMILARITY_THRESHOLD:
            return round(sim * 90), SPELLING_ERROR
    return 0, NO_MATCH


def has_multiple_authors(authors: str) -> bool:
    return "," in authors or "&" in authors or "and" in authors


def author_surnames(authors: str) -> List[str]:
    keys = [surname_key(a.strip()) for a in split_author_list(authors)]
    return [k for k in keys if len(k) > 2]


def _best_author_match(cit_surname: str, ref_surnames: List[str]) -> str:
    best_score = 0.0
    best_type = "none"
    for ref_surname in ref_surnames:
        if ref_surname == cit_surname:
            best_score = 100
            best_type = "exact"
        elif best_type != "exact":
            sim = similarity(cit_surname, ref_surname)
            if sim >= SIMILARITY_THRESHOLD and sim * 100 > best_score:
                best_score = sim * 100
                best_type = "fuzzy"
            elif best_type != "fuzzy" and (ref_surname in cit_surname or cit_surname in ref_surname):
                best_score = 85
                best_type = "partial"
    return best_type


def score_multi_author(citation: Citation, reference: Reference) -> Optional[Tuple[float, str]]:
    """
    Score every citation surname against the reference's author list.

    Returns None when the author lists do not agree well enough (ratio < 0.7).
    """
    cit_surnames = author_surnames(citation.authors)
    if not cit_surnames:
        return None
    ref_surnames = author_surnames(reference.all_authors)

    exact = fuzzy = partial = 0
    for s in cit_surnames:
        kind = _best_author_match(s, ref_surnames)
        if kind == "exact":
            exact += 1
        elif kind == "fuzzy":
            fuzzy += 1
        elif kind == "partial":
            partial += 1

    total = len(cit_surnames)
    ratio = (exact + fuzzy * 0.9 + partial * 0.7) / total
    if ratio < MULTI_AUTHOR_RATIO_THRESHOLD:
        return None

    if fuzzy > 0:
        kind = SPELLING_ERROR
    elif exact >= total * 0.8:
        kind = FULL
    else:
        kind = PARTIAL
    return 70 + ratio * 25, kind


def score_pair(citation: Citation, reference: Reference) -> Tuple[float, str]:
    # Different years never match, whatever the authors look like.
    if strip_year_suffix(citation.year) != strip_year_suffix(reference.year):
        return 0, NO_MATCH

    score, kind = score_single_surname(citation, reference)

    if has_multiple_authors(citation.authors):
        multi = score_multi_author(citation, reference)
        # the label follows whichever path produced the winning score
        if multi is not None and multi[0] > score:
            score, kind = multi
    return score, kind


# ----------------------------
# Bucketing
# ----------------------------
def best_reference(citation: Citation, references: List[Reference]) -> Optional[Tuple[int, float, str]]:
    best = None
    best_score = 0
    for idx, ref in enumerate(references):
        score, kind = score_pair(citation, ref)
        if score > best_score:
            best_score = score
            best = (idx, score, kind)
    return best


def match_citations(citations: List[Citation], references: List[Reference]) -> MatchOutcome:
    out = MatchOutcome()
    used = set()

    for c in citations:
        best = best_reference(c, references)
        if best is None or best[1] < ACCEPT_THRESHOLD:
            out.unmatched.append(UnmatchedResult(citation=c))
            continue

        idx, score, kind = best
        m = MatchResult(citation=c, reference=references[idx], confidence=score, match_type=kind)
        if kind == SPELLING_ERROR:
            out.probable_spelling_errors.append(m)
        elif kind == FULL or score >= FULL_SCORE_THRESHOLD:
            out.full_matches.append(m)
        else:
            out.partial_matches.append(m)
        used.add(idx)

    out.unused = [UnusedResult(reference=r) for i, r in enumerate(references) if i not in used]

    logger.info(
        "matched %d citations: %d full, %d partial, %d spelling, %d missing, %d unused references",
        len(citations),
        len(out.full_matches),
        len(out.partial_matches),
        len(out.probable_spelling_errors),
        len(out.unmatched),
        len(out.unused),
    )
    return out
