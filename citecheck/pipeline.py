# pipeline.py
# Stage 1: extraction + matching over one document.

import logging

from .citations import extract_citations
from .errors import EmptyInputError, NoEntitiesFoundError
from .matcher import match_citations
from .models import AnalysisResults, with_summary
from .references import extract_references
from .textnorm import norm_unicode

logger = logging.getLogger(__name__)


def prepare_text(document_text: str) -> str:
    return norm_unicode(document_text or "").replace("\r\n", "\n").replace("\r", "\n")


def analyze(document_text: str) -> AnalysisResults:
    """
    Extract citations and references from the whole document and reconcile them.

    Raises EmptyInputError for blank input and NoEntitiesFoundError when the
    text holds neither citations nor references.
    """
    if not (document_text or "").strip():
        raise EmptyInputError()

    text = prepare_text(document_text)
    citations = extract_citations(text)
    references = extract_references(text)
    logger.info("extracted %d citations and %d references", len(citations), len(references))

    if not citations and not references:
        raise NoEntitiesFoundError()

    outcome = match_citations(citations, references)
    results = AnalysisResults(
        citations=citations,
        references=references,
        full_matches=outcome.full_matches,
        partial_matches=outcome.partial_matches,
        probable_spelling_errors=outcome.probable_spelling_errors,
        missing=outcome.unmatched,
        unused=outcome.unused,
    )
    return with_summary(results)