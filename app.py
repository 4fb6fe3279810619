# app.py
# Citation Cross-check (author–year)
# - Takes pasted text or a DOCX/PDF upload
# - Stage 1: extracts in-text citations + reference list and reconciles them
#   (perfect / partial / probable spelling error / missing / unused)
# - Stages 2-4: suggestion passes for unused references and missing citations,
#   each suggestion can be confirmed as a match or dismissed
# - Plain-text report download
# - Optional online verification via Crossref, OpenAlex, PubMed, Semantic Scholar (cached)

import datetime as dt
import logging

import pandas as pd
import streamlit as st
from dotenv import load_dotenv

from citecheck.config import Settings
from citecheck.errors import CitationCheckError, EmptyInputError, NoEntitiesFoundError
from citecheck.report import render_report, report_filename, results_to_frames
from citecheck.store import ResultsStore
from citecheck.suggestions import STAGE_HIDDEN_CITATIONS, STAGE_LENIENT, STAGE_MISSING_REFERENCES
from citecheck.text_extract import extract_upload_text
from citecheck.verify import verify_reference

load_dotenv()
settings = Settings.from_env()
logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))


@st.cache_data(show_spinner=False, ttl=60 * 60 * 12)
def cached_verification(ref_raw: str):
    return verify_reference(ref_raw, settings=settings)


def get_store() -> ResultsStore:
    if "store" not in st.session_state:
        st.session_state["store"] = ResultsStore()
    return st.session_state["store"]


def run_stage(store: ResultsStore, stage: int) -> None:
    try:
        with st.spinner(f"Running stage {stage}..."):
            store.run_stage(stage)
    except CitationCheckError as e:
        st.error(str(e))


def show_frame(df: pd.DataFrame, label: str, file_name: str) -> None:
    st.dataframe(df, width="stretch", hide_index=True)
    st.download_button(
        label,
        df.to_csv(index=False).encode("utf-8"),
        file_name=file_name,
        mime="text/csv",
    )


def show_reference_suggestions(store: ResultsStore, stage: int, title: str) -> None:
    pending = store.suggestions(stage)
    if not pending:
        return
    st.subheader(f"{title} ({len(pending)})")
    for i, s in enumerate(pending):
        with st.container(border=True):
            st.markdown("**Unused reference:**")
            st.caption(s.reference.original)
            for ci, c in enumerate(s.candidates):
                terms = f" | Terms: {', '.join(c.matched_terms)}" if c.matched_terms else ""
                st.write(f"\"{c.text}\"")
                st.caption(f"Conf: {round(c.confidence * 100)}%{terms}")
                if st.button("✓ Match", key=f"s{stage}-m-{i}-{ci}"):
                    store.confirm(stage, i, c.text)
                    st.rerun()
            if st.button("Dismiss", key=f"s{stage}-d-{i}"):
                store.dismiss(stage, i)
                st.rerun()


def show_missing_suggestions(store: ResultsStore) -> None:
    pending = store.suggestions(STAGE_MISSING_REFERENCES)
    if not pending:
        return
    st.subheader(f"Stage 3: Missing reference suggestions ({len(pending)})")
    for i, s in enumerate(pending):
        with st.container(border=True):
            st.markdown(f"**Missing citation:** {s.citation.original}")
            for ci, c in enumerate(s.candidates):
                st.write(f"\"{c.text}\"")
                st.caption(f"Conf: {round(c.confidence * 100)}%")
                if st.button("✓ Match", key=f"s3-m-{i}-{ci}"):
                    store.confirm(STAGE_MISSING_REFERENCES, i, c.text)
                    st.rerun()
            if st.button("Dismiss", key=f"s3-d-{i}"):
                store.dismiss(STAGE_MISSING_REFERENCES, i)
                st.rerun()


# ----------------------------
# Streamlit UI
# ----------------------------
st.set_page_config(page_title="Citation Cross-check", layout="wide")
st.title("Citation Cross-check")
st.caption(
    "Matches in-text citations with the reference list in four stages. "
    "Find missing citations, unused references and likely spelling errors."
)

with st.sidebar:
    st.subheader("Settings")
    show_debug = st.checkbox("Show debug tables", value=False)

    st.divider()
    st.subheader("Online verification (optional)")
    enable_verify = st.checkbox("Verify references online", value=False)
    max_verify = st.slider("Max references to verify", min_value=5, max_value=200, value=settings.max_verify, step=5)
    st.caption("Tip: keep this low for speed and to avoid rate limits.")

store = get_store()

uploaded = st.file_uploader("Upload a manuscript (DOCX, PDF or TXT)", type=["docx", "pdf", "txt"])
pasted = st.text_area(
    "...or paste your document (main text with citations and the reference list)",
    height=260,
)

document_text = pasted
if uploaded is not None:
    with st.spinner("Reading file..."):
        try:
            document_text = extract_upload_text(uploaded.name, uploaded.read())
        except Exception as e:
            st.error(f"Could not read the file: {e}")
            st.stop()

col1, col2, col3, col4 = st.columns(4)
if col1.button("Stage 1: Initial", disabled=store.is_running(1) or not document_text.strip()):
    try:
        with st.spinner("Parsing references and in-text citations..."):
            store.analyze(document_text)
    except (EmptyInputError, NoEntitiesFoundError) as e:
        st.warning(str(e))
    except CitationCheckError as e:
        st.error(str(e))

results = store.results
has_unused = bool(results and results.unused)
has_missing = bool(results and results.missing)

if col2.button("Stage 2: Citations", disabled=not has_unused):
    run_stage(store, STAGE_HIDDEN_CITATIONS)
if col3.button("Stage 3: References", disabled=not has_missing):
    run_stage(store, STAGE_MISSING_REFERENCES)
if col4.button("Stage 4: Lenient", disabled=not has_unused):
    run_stage(store, STAGE_LENIENT)

if results is None:
    st.info("Paste or upload your document above to start the 4-stage analysis.")
    st.stop()

frames = results_to_frames(results)
s = results.summary

st.divider()
st.subheader("Stage 1: Analysis summary")
m = st.columns(7)
m[0].metric("Citations", f"{s.total_citations}")
m[1].metric("References", f"{s.total_references}")
m[2].metric("Perfect", f"{s.full_matches}")
m[3].metric("Spelling", f"{s.probable_spelling_errors}")
m[4].metric("Partial", f"{s.partial_matches}")
m[5].metric("Missing", f"{s.missing_references}")
m[6].metric("Unused", f"{s.unused_references}")

st.download_button(
    "Download report",
    render_report(results).encode("utf-8"),
    file_name=report_filename(dt.date.today()),
    mime="text/plain",
)

st.divider()
st.subheader("Matches")
show_frame(frames["matches"], "Download matches (CSV)", "matches.csv")

if results.probable_spelling_errors:
    st.markdown("### Probable spelling errors")
    for match in results.probable_spelling_errors:
        st.warning(
            f"{match.citation.original}: check if \"{match.citation.authors}\" should be \"{match.reference.first_author}\"."
        )

show_reference_suggestions(store, STAGE_HIDDEN_CITATIONS, "Stage 2: Hidden citation suggestions")
show_missing_suggestions(store)
show_reference_suggestions(store, STAGE_LENIENT, "Stage 4: Lenient matches")

st.divider()
left, right = st.columns(2)

with left:
    st.subheader("Citations without references")
    if len(frames["missing"]) == 0:
        st.success("No missing citations detected.")
    else:
        show_frame(frames["missing"], "Download missing citations (CSV)", "missing_citations.csv")

with right:
    st.subheader("Unused references")
    if len(frames["unused"]) == 0:
        st.success("No uncited references detected.")
    else:
        show_frame(frames["unused"], "Download unused references (CSV)", "uncited_references.csv")

# Online verification
if enable_verify and results.references:
    st.divider()
    st.subheader("Online verification")
    st.caption("This checks whether a reference looks discoverable online. It does not replace manual verification.")

    ver_rows = []
    with st.spinner("Verifying references online..."):
        for r in results.references[:max_verify]:
            for v in cached_verification(r.original):
                ver_rows.append({"reference": r.original, "source": v.source, "status": v.status, "details": v.details})

    df_ver = pd.DataFrame(ver_rows) if ver_rows else pd.DataFrame(columns=["reference", "source", "status", "details"])
    show_frame(df_ver, "Download verification results (CSV)", "reference_verification.csv")

# Debug
if show_debug:
    st.divider()
    st.subheader("Debug")
    st.markdown("#### Parsed citations (first 120)")
    st.dataframe(pd.DataFrame([c.__dict__ for c in results.citations[:120]]), width="stretch", hide_index=True)

    st.markdown("#### Parsed references (first 80)")
    st.dataframe(pd.DataFrame([r.__dict__ for r in results.references[:80]]), width="stretch", hide_index=True)

    st.text_area("Document (start)", store.state.document_text[:6000], height=200)
