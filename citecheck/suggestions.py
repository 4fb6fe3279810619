# suggestions.py
# Follow-up passes that look for evidence the matcher missed.
#   Stage 2: hidden citations of unused references (author + year patterns)
#   Stage 3: possible reference text for missing citations (bare year hits)
#   Stage 4: lenient sentence scoring for unused references (year, authors, title words)
# None of them change AnalysisResults; confirming a candidate is a separate step.

import logging
import re
from typing import Iterable, List, Optional, Tuple, Union

from .errors import MalformedPatternError
from .models import (
    AnalysisResults,
    MissingCitationSuggestion,
    SuggestionCandidate,
    UnmatchedResult,
    UnusedRefSuggestion,
    UnusedResult,
)
from .references import main_text_for_search
from .textnorm import extract_first_author, split_author_list, strip_year_suffix

logger = logging.getLogger(__name__)

STAGE_HIDDEN_CITATIONS = 2
STAGE_MISSING_REFERENCES = 3
STAGE_LENIENT = 4
SUGGESTION_STAGES = (STAGE_HIDDEN_CITATIONS, STAGE_MISSING_REFERENCES, STAGE_LENIENT)

NARRATIVE_CONFIDENCE = 0.95
PARENTHETICAL_CONFIDENCE = 0.90
YEAR_MATCH_CONFIDENCE = 0.7

HIDDEN_TOP_K = 3
MISSING_TOP_K = 5
LENIENT_TOP_K = 5

LENIENT_MIN_SCORE = 60

# Spans carrying these are usually affiliations or bibliography fragments.
NOISE_MARKERS = ("doi.org", "University", "Journal of")

CONTEXT_RADIUS = 100

COMMON_WORDS = {
    "the", "and", "for", "with", "from", "this", "that", "they", "have", "been",
    "were", "will", "their", "there", "when", "where", "what", "which", "while",
}

SuggestionList = Union[List[UnusedRefSuggestion], List[MissingCitationSuggestion]]


def compile_variant(pattern: str, flags: int = 0) -> re.Pattern:
    try:
        return re.compile(pattern, flags)
    except re.error as e:
        raise MalformedPatternError(pattern, str(e)) from e


def capitalize_first(s: str) -> str:
    return s[:1].upper() + s[1:]


def year_variants(year: str) -> List[str]:
    return list(dict.fromkeys([year, strip_year_suffix(year)]))


def _rank(candidates: Iterable[SuggestionCandidate], top_k: int) -> List[SuggestionCandidate]:
    # sorted() is stable, so equal confidences keep document order
    return sorted(candidates, key=lambda c: c.confidence, reverse=True)[:top_k]


# ----------------------------
# Stage 2: hidden citations
# ----------------------------
def author_variants(first_author: str) -> List[str]:
    author = extract_first_author(first_author).lower()
    variants = [author, capitalize_first(author)]

    if " " in author:
        parts = author.split(" ")
        variants.append(" ".join(parts))
        surname = parts[-1]
        if len(surname) > 3:
            variants.append(surname)
            variants.append(capitalize_first(surname))
    return variants


def _is_plausible_span(text: str) -> bool:
    if not 5 < len(text) < 200:
        return False
    return not any(marker in text for marker in NOISE_MARKERS)


def hidden_citation_candidates(ref_first_author: str, ref_year: str, main_text: str) -> List[SuggestionCandidate]:
    candidates: List[SuggestionCandidate] = []

    for author in author_variants(ref_first_author):
        if len(author) < 3:
            continue
        escaped = re.escape(author)
        for year in year_variants(ref_year):
            try:
                narrative = compile_variant(
                    rf"\b{escaped}[A-Za-z\-]*(?:\s+et\s+al\.?)?(?:'s)?\s*\({year}[a-z]?\)", re.I
                )
                parenthetical = compile_variant(rf"\([^)]*{escaped}[^)]*{year}[a-z]?[^)]*\)", re.I)
            except MalformedPatternError as e:
                logger.debug("skipping author variant %r: %s", author, e)
                continue

            for m in narrative.finditer(main_text):
                candidates.append(
                    SuggestionCandidate(
                        text=m.group(0), position=m.start(), confidence=NARRATIVE_CONFIDENCE, type="narrative-citation"
                    )
                )
            for m in parenthetical.finditer(main_text):
                candidates.append(
                    SuggestionCandidate(
                        text=m.group(0),
                        position=m.start(),
                        confidence=PARENTHETICAL_CONFIDENCE,
                        type="parenthetical-citation",
                    )
                )

    seen = set()
    unique = []
    for c in candidates:
        key = c.text.strip()
        if key in seen:
            continue
        seen.add(key)
        unique.append(c)

    return _rank([c for c in unique if _is_plausible_span(c.text)], HIDDEN_TOP_K)


def find_hidden_citations(unused: List[UnusedResult], document_text: str) -> List[UnusedRefSuggestion]:
    main_text = main_text_for_search(document_text)
    out = []
    for u in unused:
        ref = u.reference
        found = hidden_citation_candidates(ref.first_author, ref.year, main_text)
        if found:
            out.append(UnusedRefSuggestion(reference=ref, candidates=found))
    return out


# ----------------------------
# Stage 3: missing references
# ----------------------------
def coarse_author_variants(authors: str) -> List[str]:
    first = extract_first_author(authors).lower()
    return [
        first[: max(3, len(first))],
        first.split(" ")[0],
        authors.lower()[:6],
    ]


def _mentions_bibliography(context: str) -> bool:
    low = context.lower()
    return "reference" in low or "bibliography" in low


def year_context_candidates(year: str, document_text: str) -> List[SuggestionCandidate]:
    candidates: List[SuggestionCandidate] = []
    seen = set()
    for y in year_variants(year):
        pattern = compile_variant(rf"\({y}[a-z]?\)", re.I)
        for m in pattern.finditer(document_text):
            start = m.start()
            context = document_text[max(0, start - CONTEXT_RADIUS) : start + CONTEXT_RADIUS]
            if _mentions_bibliography(context) or context in seen:
                continue
            seen.add(context)
            candidates.append(
                SuggestionCandidate(text=context, position=start, confidence=YEAR_MATCH_CONFIDENCE, type="year-match")
            )
    return _rank(candidates, MISSING_TOP_K)


def find_missing_references(missing: List[UnmatchedResult], document_text: str) -> List[MissingCitationSuggestion]:
    out = []
    for item in missing:
        c = item.citation
        # The author variants only decide whether a search is worth running;
        # the hits themselves are bare "(Year)" occurrences.
        if not any(len(v) >= 2 for v in coarse_author_variants(c.authors)):
            continue
        found = year_context_candidates(c.year, document_text)
        if found:
            out.append(MissingCitationSuggestion(citation=c, candidates=found))
    return out


# ----------------------------
# Stage 4: lenient full-text search
# ----------------------------
def reference_surnames(all_authors: str) -> List[str]:
    out = []
    for author in split_author_list(all_authors.lower()):
        cleaned = re.sub(r"\s*et\s+al\.?", "", author, flags=re.I).strip()
        parts = [p for p in cleaned.split() if len(p) > 2 and not re.fullmatch(r"[a-z]\.?", p)]
        if parts:
            out.append(parts[-1])
    return out


def title_words(reference_text: str, limit: int = 8) -> List[str]:
    text = re.sub(r"\([^)]*\)", "", reference_text.lower())
    words = [w for w in text.split() if len(w) > 4 and w not in COMMON_WORDS and not w.isdigit()]
    return words[:limit]


def split_sentences(text: str) -> List[str]:
    return [s for s in re.split(r"[.!?]+", text) if len(s.strip()) > 20]


def score_sentence(sentence: str, year: str, surnames: List[str], words: List[str]) -> Tuple[float, List[str]]:
    low = sentence.lower()
    score = 0.0
    terms: List[str] = []

    if year in low:
        score += 30
        terms.append(f"year:{year}")
    for surname in surnames:
        if surname in low:
            score += 25
            terms.append(f"author:{surname}")

    title_hits = 0
    for w in words:
        if w in low:
            title_hits += 1
            terms.append(f"title:{w}")
    if title_hits:
        score += title_hits / len(words) * 40

    return min(100.0, score), terms


def lenient_candidates(reference_text: str, all_authors: str, year: str, main_text: str) -> List[SuggestionCandidate]:
    surnames = reference_surnames(all_authors)
    words = title_words(reference_text)
    sentences = split_sentences(main_text)

    candidates: List[SuggestionCandidate] = []
    seen = set()
    for i, sentence in enumerate(sentences):
        score, terms = score_sentence(sentence, year, surnames, words)
        if score < LENIENT_MIN_SCORE:
            continue
        key = sentence.strip()
        if key in seen:
            continue
        seen.add(key)
        context = ". ".join(sentences[max(0, i - 1) : i + 2]).strip()
        candidates.append(
            SuggestionCandidate(
                text=context,
                position=i,
                confidence=score / 100,
                type="lenient-text-match",
                matched_terms=terms,
                sentence=key,
            )
        )
    return _rank(candidates, LENIENT_TOP_K)


def find_lenient_matches(unused: List[UnusedResult], document_text: str) -> List[UnusedRefSuggestion]:
    main_text = main_text_for_search(document_text)
    out = []
    for u in unused:
        ref = u.reference
        found = lenient_candidates(ref.original, ref.all_authors, ref.year, main_text)
        if found:
            out.append(UnusedRefSuggestion(reference=ref, candidates=found))
    return out


# ----------------------------
# Dispatch
# ----------------------------
def run_suggestion_stage(stage: int, results: Optional[AnalysisResults], document_text: str) -> SuggestionList:
    if stage not in SUGGESTION_STAGES:
        raise ValueError(f"Unknown suggestion stage: {stage!r}")
    if results is None:
        return []

    if stage == STAGE_HIDDEN_CITATIONS:
        found = find_hidden_citations(results.unused, document_text)
    elif stage == STAGE_MISSING_REFERENCES:
        found = find_missing_references(results.missing, document_text)
    else:
        found = find_lenient_matches(results.unused, document_text)

    logger.info("stage %d produced suggestions for %d entries", stage, len(found))
    return found
