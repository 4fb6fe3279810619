# verify.py
# Optional online verification of reference entries (Crossref, OpenAlex, PubMed, Semantic Scholar).
# Each source answers independently; a failing source is reported as "Error"
# and never holds up the others.

import logging
import re
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from functools import partial
from typing import Callable, Dict, List, Optional

import requests
from rapidfuzz import fuzz
from tenacity import retry, stop_after_attempt, wait_exponential

from .config import Settings

logger = logging.getLogger(__name__)

VERIFIED = "Verified"
PARTIALLY_VERIFIED = "Partially Verified"
NOT_FOUND = "Not Found"
ERROR = "Error"

CROSSREF_URL = "https://api.crossref.org/works"
OPENALEX_URL = "https://api.openalex.org/works"
PUBMED_ESEARCH_URL = "https://eutils.ncbi.nlm.nih.gov/entrez/eutils/esearch.fcgi"
PUBMED_ESUMMARY_URL = "https://eutils.ncbi.nlm.nih.gov/entrez/eutils/esummary.fcgi"
SEMANTIC_SCHOLAR_URL = "https://api.semanticscholar.org/graph/v1/paper/search"

SOURCE_NAMES = {
    "crossref": "Crossref",
    "openalex": "OpenAlex",
    "pubmed": "PubMed",
    "semanticscholar": "Semantic Scholar",
}

Lookup = Callable[[str], Optional[dict]]


@dataclass(frozen=True)
class VerificationResult:
    source: str
    status: str
    details: str


def build_biblio_query(ref_raw: str) -> str:
    # Light query string from reference: drop list markers, cut long refs
    r = ref_raw
    r = re.sub(r"^\[\s*\d{1,4}\s*\]\s*", "", r)
    r = re.sub(r"^\d{1,4}\.\s+", "", r)
    r = re.sub(r"\s+", " ", r).strip()
    return r[:280]


# ----------------------------
# Source lookups
# Each returns {"title", "year", "doi", "url"} for the top hit, or None.
# ----------------------------
def _headers(user_agent: str) -> Dict[str, str]:
    return {"User-Agent": user_agent}


@retry(stop=stop_after_attempt(3), wait=wait_exponential(multiplier=1, min=1, max=6), reraise=True)
def crossref_lookup(query: str, timeout: float = 15, user_agent: str = "citation-cross-check/1.0", mailto: str = "") -> Optional[dict]:
    params = {"query.bibliographic": query, "rows": 1}
    if mailto:
        params["mailto"] = mailto
    r = requests.get(CROSSREF_URL, params=params, timeout=timeout, headers=_headers(user_agent))
    r.raise_for_status()
    items = ((r.json() or {}).get("message") or {}).get("items") or []
    if not items:
        return None
    item = items[0]
    return {
        "title": ((item.get("title") or [""])[0] or "").strip(),
        "year": str(((item.get("issued") or {}).get("date-parts") or [[None]])[0][0] or "").strip(),
        "doi": (item.get("DOI") or "").strip(),
        "url": (item.get("URL") or "").strip(),
    }


@retry(stop=stop_after_attempt(3), wait=wait_exponential(multiplier=1, min=1, max=6), reraise=True)
def openalex_lookup(query: str, timeout: float = 15, user_agent: str = "citation-cross-check/1.0", mailto: str = "") -> Optional[dict]:
    params = {"search": query, "per-page": 1}
    if mailto:
        params["mailto"] = mailto
    r = requests.get(OPENALEX_URL, params=params, timeout=timeout, headers=_headers(user_agent))
    r.raise_for_status()
    results = (r.json() or {}).get("results") or []
    if not results:
        return None
    oa = results[0]
    return {
        "title": (oa.get("title") or "").strip(),
        "year": str(oa.get("publication_year") or "").strip(),
        "doi": (oa.get("doi") or "").replace("https://doi.org/", "").strip(),
        "url": (oa.get("id") or "").strip(),
    }


@retry(stop=stop_after_attempt(3), wait=wait_exponential(multiplier=1, min=1, max=6), reraise=True)
def pubmed_lookup(query: str, timeout: float = 15, user_agent: str = "citation-cross-check/1.0", mailto: str = "") -> Optional[dict]:
    params = {"db": "pubmed", "term": query, "retmode": "json", "retmax": 1}
    if mailto:
        params["email"] = mailto
    r = requests.get(PUBMED_ESEARCH_URL, params=params, timeout=timeout, headers=_headers(user_agent))
    r.raise_for_status()
    ids = ((r.json() or {}).get("esearchresult") or {}).get("idlist") or []
    if not ids:
        return None
    uid = str(ids[0])

    r = requests.get(
        PUBMED_ESUMMARY_URL,
        params={"db": "pubmed", "id": uid, "retmode": "json"},
        timeout=timeout,
        headers=_headers(user_agent),
    )
    r.raise_for_status()
    record = ((r.json() or {}).get("result") or {}).get(uid) or {}
    doi = ""
    for aid in record.get("articleids") or []:
        if isinstance(aid, dict) and aid.get("idtype") == "doi":
            doi = (aid.get("value") or "").strip()
    m_year = re.search(r"\b(19|20)\d{2}\b", record.get("pubdate") or "")
    return {
        "title": (record.get("title") or "").strip(),
        "year": m_year.group(0) if m_year else "",
        "doi": doi,
        "url": f"https://pubmed.ncbi.nlm.nih.gov/{uid}/",
    }


@retry(stop=stop_after_attempt(3), wait=wait_exponential(multiplier=1, min=1, max=6), reraise=True)
def semantic_scholar_lookup(
    query: str, timeout: float = 15, user_agent: str = "citation-cross-check/1.0", mailto: str = ""
) -> Optional[dict]:
    params = {"query": query, "limit": 1, "fields": "title,year,externalIds,url"}
    r = requests.get(SEMANTIC_SCHOLAR_URL, params=params, timeout=timeout, headers=_headers(user_agent))
    r.raise_for_status()
    data = (r.json() or {}).get("data") or []
    if not data:
        return None
    paper = data[0]
    return {
        "title": (paper.get("title") or "").strip(),
        "year": str(paper.get("year") or "").strip(),
        "doi": ((paper.get("externalIds") or {}).get("DOI") or "").strip(),
        "url": (paper.get("url") or "").strip(),
    }


LOOKUPS = {
    "crossref": crossref_lookup,
    "openalex": openalex_lookup,
    "pubmed": pubmed_lookup,
    "semanticscholar": semantic_scholar_lookup,
}


def default_lookups(settings: Settings) -> Dict[str, Lookup]:
    return {
        SOURCE_NAMES[key]: partial(
            LOOKUPS[key],
            timeout=settings.verify_timeout_seconds,
            user_agent=settings.user_agent,
            mailto=settings.mailto,
        )
        for key in settings.verify_sources
    }


# ----------------------------
# Classification
# ----------------------------
_LONG_WORD_RE = re.compile(r"\b\w{4,}\b")


def score_match(ref_raw: str, title: str, year: Optional[str]) -> int:
    base = fuzz.token_set_ratio(ref_raw, title or "")
    if year and title and year in ref_raw:
        base = min(100, base + 5)
    return int(base)


def classify_record(source: str, reference_text: str, record: Optional[dict]) -> VerificationResult:
    title = (record or {}).get("title") or ""
    if not title:
        return VerificationResult(source, NOT_FOUND, f"Reference not found in {source}.")

    # Words of 4+ characters shared between the reference and the returned title
    title_words = set(_LONG_WORD_RE.findall(title.lower()))
    shared = [w for w in _LONG_WORD_RE.findall(reference_text.lower()) if w in title_words]
    score = score_match(reference_text, title, record.get("year"))

    if len(shared) >= 2:
        details = f'Match found: "{title}" (score {score})'
        if record.get("doi"):
            details += f" (DOI: {record['doi']})"
        return VerificationResult(source, VERIFIED, details)
    if shared:
        return VerificationResult(source, PARTIALLY_VERIFIED, f'Potential match with low confidence: "{title}" (score {score})')
    return VerificationResult(source, NOT_FOUND, f"Reference not found in {source}.")


def verify_reference(
    reference_text: str,
    settings: Optional[Settings] = None,
    lookups: Optional[Dict[str, Lookup]] = None,
) -> List[VerificationResult]:
    """
    Ask every configured source about one reference.

    Results come back in source order; a source that raises is reported with
    status "Error" instead of failing the whole call.
    """
    settings = settings or Settings()
    lookups = default_lookups(settings) if lookups is None else lookups
    if not lookups:
        return []

    query = build_biblio_query(reference_text)
    settled: Dict[str, VerificationResult] = {}

    with ThreadPoolExecutor(max_workers=max(1, min(settings.verify_workers, len(lookups)))) as ex:
        futures = {ex.submit(fn, query): source for source, fn in lookups.items()}
        for fut in as_completed(futures):
            source = futures[fut]
            try:
                record = fut.result()
            except Exception as e:
                logger.warning("%s lookup failed: %s", source, e)
                settled[source] = VerificationResult(source, ERROR, f"{source} lookup failed: {e}")
                continue
            settled[source] = classify_record(source, reference_text, record)

    return [settled[source] for source in lookups]
