from .errors import (
    AnalysisFailedError,
    CitationCheckError,
    EmptyInputError,
    MalformedPatternError,
    NoEntitiesFoundError,
    StageBusyError,
)
from .models import AnalysisResults, Citation, MatchResult, Reference, SuggestionCandidate
from .pipeline import analyze
from .report import render_report
from .store import ResultsStore, apply_confirmation, apply_dismissal
from .suggestions import run_suggestion_stage

__all__ = [
    "AnalysisFailedError",
    "AnalysisResults",
    "Citation",
    "CitationCheckError",
    "EmptyInputError",
    "MalformedPatternError",
    "MatchResult",
    "NoEntitiesFoundError",
    "Reference",
    "ResultsStore",
    "StageBusyError",
    "SuggestionCandidate",
    "analyze",
    "apply_confirmation",
    "apply_dismissal",
    "render_report",
    "run_suggestion_stage",
]
