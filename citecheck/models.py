# models.py
# Data models for citations, references, match buckets and suggestions.

from dataclasses import dataclass, field, replace
from typing import List, Optional, Union

# Citation.type values
PARENTHETICAL = "parenthetical"
NARRATIVE = "narrative"
NARRATIVE_COMPLEX = "narrative-complex"
PARENTHETICAL_MULTI = "parenthetical-multi"
CONFIRMED = "confirmed"

# MatchResult.match_type values
FULL = "full"
PARTIAL = "partial"
SPELLING_ERROR = "spelling_error"
NO_MATCH = "none"
USER_CONFIRMED = "user_confirmed"
USER_CONFIRMED_MISSING = "user_confirmed_missing"
USER_CONFIRMED_FOURTH = "user_confirmed_fourth"

USER_CONFIRMED_CONFIDENCE = "User Confirmed"


@dataclass(frozen=True)
class Citation:
    original: str
    authors: str
    year: str
    normalized: str
    type: str


@dataclass(frozen=True)
class Reference:
    original: str
    first_author: str
    all_authors: str
    year: str
    normalized: str
    first_author_normalized: str


@dataclass(frozen=True)
class MatchResult:
    citation: Citation
    reference: Reference
    confidence: Union[float, str]  # 0-100, or USER_CONFIRMED_CONFIDENCE
    match_type: str


@dataclass(frozen=True)
class UnmatchedResult:
    citation: Citation
    suggestions: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class UnusedResult:
    reference: Reference
    possible_matches: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class SuggestionCandidate:
    text: str
    position: int
    confidence: float  # 0..1
    type: str
    matched_terms: Optional[List[str]] = None
    sentence: Optional[str] = None


@dataclass(frozen=True)
class UnusedRefSuggestion:
    reference: Reference
    candidates: List[SuggestionCandidate]


@dataclass(frozen=True)
class MissingCitationSuggestion:
    citation: Citation
    candidates: List[SuggestionCandidate]


@dataclass(frozen=True)
class Summary:
    total_citations: int = 0
    total_references: int = 0
    full_matches: int = 0
    partial_matches: int = 0
    probable_spelling_errors: int = 0
    missing_references: int = 0
    unused_references: int = 0


@dataclass(frozen=True)
class AnalysisResults:
    citations: List[Citation]
    references: List[Reference]
    full_matches: List[MatchResult]
    partial_matches: List[MatchResult]
    probable_spelling_errors: List[MatchResult]
    missing: List[UnmatchedResult]
    unused: List[UnusedResult]
    summary: Summary = field(default_factory=Summary)


def summarize(results: AnalysisResults) -> Summary:
    return Summary(
        total_citations=len(results.citations),
        total_references=len(results.references),
        full_matches=len(results.full_matches),
        partial_matches=len(results.partial_matches),
        probable_spelling_errors=len(results.probable_spelling_errors),
        missing_references=len(results.missing),
        unused_references=len(results.unused),
    )


def with_summary(results: AnalysisResults) -> AnalysisResults:
    return replace(results, summary=summarize(results))
