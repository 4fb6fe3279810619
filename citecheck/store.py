# store.py
# The one place that owns analysis results and pending suggestions.
# Every change goes through apply_confirmation / apply_dismissal, which return a
# new SessionState instead of editing lists in place.

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from typing import Dict, Iterator, List, Optional, Set

from .citations import citation_key
from .errors import AnalysisFailedError, CitationCheckError, StageBusyError
from .models import (
    AnalysisResults,
    CONFIRMED,
    Citation,
    MatchResult,
    Reference,
    USER_CONFIRMED,
    USER_CONFIRMED_CONFIDENCE,
    USER_CONFIRMED_FOURTH,
    USER_CONFIRMED_MISSING,
    with_summary,
)
from .pipeline import analyze, prepare_text
from .suggestions import (
    STAGE_HIDDEN_CITATIONS,
    STAGE_LENIENT,
    STAGE_MISSING_REFERENCES,
    SUGGESTION_STAGES,
    SuggestionList,
    run_suggestion_stage,
)

logger = logging.getLogger(__name__)

STAGE_ANALYSIS = 1

# Stages 2 and 4 both draw on the unused-reference pool.
SIBLING_STAGE = {
    STAGE_HIDDEN_CITATIONS: STAGE_LENIENT,
    STAGE_LENIENT: STAGE_HIDDEN_CITATIONS,
}

CONFIRMED_MATCH_TYPE = {
    STAGE_HIDDEN_CITATIONS: USER_CONFIRMED,
    STAGE_MISSING_REFERENCES: USER_CONFIRMED_MISSING,
    STAGE_LENIENT: USER_CONFIRMED_FOURTH,
}


@dataclass(frozen=True)
class SessionState:
    document_text: str = ""
    results: Optional[AnalysisResults] = None
    suggestions: Dict[int, SuggestionList] = field(default_factory=dict)


# ----------------------------
# Transitions
# ----------------------------
def _pending(state: SessionState, stage: int, index: int) -> List:
    if stage not in SUGGESTION_STAGES:
        raise ValueError(f"Unknown suggestion stage: {stage!r}")
    pending = list(state.suggestions.get(stage) or [])
    if not 0 <= index < len(pending):
        raise IndexError(f"No stage {stage} suggestion at position {index}")
    return pending


def _confirm_reference(results: AnalysisResults, reference: Reference, candidate_text: str, match_type: str) -> AnalysisResults:
    cited_as = Citation(
        original=candidate_text,
        authors=reference.first_author,
        year=reference.year,
        normalized=citation_key(reference.first_author, reference.year),
        type=CONFIRMED,
    )
    match = MatchResult(
        citation=cited_as,
        reference=reference,
        confidence=USER_CONFIRMED_CONFIDENCE,
        match_type=match_type,
    )
    return replace(
        results,
        partial_matches=results.partial_matches + [match],
        unused=[u for u in results.unused if u.reference.normalized != reference.normalized],
    )


def _confirm_citation(results: AnalysisResults, citation: Citation, candidate_text: str) -> AnalysisResults:
    found_as = Reference(
        original=candidate_text,
        first_author=citation.authors,
        all_authors=citation.authors,
        year=citation.year,
        normalized=citation.normalized,
        first_author_normalized=citation.normalized,
    )
    match = MatchResult(
        citation=citation,
        reference=found_as,
        confidence=USER_CONFIRMED_CONFIDENCE,
        match_type=USER_CONFIRMED_MISSING,
    )
    return replace(
        results,
        full_matches=results.full_matches + [match],
        missing=[m for m in results.missing if m.citation.normalized != citation.normalized],
    )


def apply_confirmation(state: SessionState, stage: int, index: int, candidate_text: str) -> SessionState:
    """
    Accept one candidate of a pending suggestion.

    The suggestion leaves its list, the reference (stages 2 and 4) or citation
    (stage 3) leaves unused/missing and joins a match bucket, and any suggestion
    of the sibling stage for the same reference is dropped so it cannot be
    confirmed twice.
    """
    if state.results is None:
        raise ValueError("Nothing to confirm before the document has been analysed.")

    pending = _pending(state, stage, index)
    selected = pending.pop(index)
    suggestions = dict(state.suggestions)
    suggestions[stage] = pending

    if stage == STAGE_MISSING_REFERENCES:
        results = _confirm_citation(state.results, selected.citation, candidate_text)
    else:
        ref = selected.reference
        sibling = SIBLING_STAGE[stage]
        if sibling in suggestions:
            suggestions[sibling] = [s for s in suggestions[sibling] if s.reference.normalized != ref.normalized]
        results = _confirm_reference(state.results, ref, candidate_text, CONFIRMED_MATCH_TYPE[stage])

    return replace(state, results=with_summary(results), suggestions=suggestions)


def apply_dismissal(state: SessionState, stage: int, index: int) -> SessionState:
    pending = _pending(state, stage, index)
    pending.pop(index)
    suggestions = dict(state.suggestions)
    suggestions[stage] = pending
    return replace(state, suggestions=suggestions)


# ----------------------------
# Store
# ----------------------------
class ResultsStore:
    def __init__(self) -> None:
        self.state = SessionState()
        self._running: Set[int] = set()

    @property
    def results(self) -> Optional[AnalysisResults]:
        return self.state.results

    def suggestions(self, stage: int) -> Optional[SuggestionList]:
        return self.state.suggestions.get(stage)

    def is_running(self, stage: int) -> bool:
        return stage in self._running

    @contextmanager
    def _stage_slot(self, stage: int) -> Iterator[None]:
        if stage in self._running:
            raise StageBusyError(stage)
        self._running.add(stage)
        try:
            yield
        finally:
            self._running.discard(stage)

    def analyze(self, document_text: str) -> AnalysisResults:
        with self._stage_slot(STAGE_ANALYSIS):
            try:
                results = analyze(document_text)
            except CitationCheckError:
                raise
            except Exception as e:
                logger.exception("analysis failed")
                raise AnalysisFailedError(f"Error processing document: {e}") from e

            # new results replace everything, including pending suggestions
            self.state = SessionState(document_text=prepare_text(document_text), results=results)
            return results

    def run_stage(self, stage: int) -> SuggestionList:
        with self._stage_slot(stage):
            try:
                found = run_suggestion_stage(stage, self.state.results, self.state.document_text)
            except (CitationCheckError, ValueError):
                raise
            except Exception as e:
                logger.exception("stage %d failed", stage)
                raise AnalysisFailedError(f"Error processing document: {e}") from e

            suggestions = dict(self.state.suggestions)
            suggestions[stage] = found
            self.state = replace(self.state, suggestions=suggestions)
            return found

    def confirm(self, stage: int, index: int, candidate_text: str) -> AnalysisResults:
        self.state = apply_confirmation(self.state, stage, index, candidate_text)
        logger.info("stage %d suggestion %d confirmed", stage, index)
        return self.state.results

    def dismiss(self, stage: int, index: int) -> SuggestionList:
        self.state = apply_dismissal(self.state, stage, index)
        return self.state.suggestions[stage]
