"""
AI Resume Analyzer – Streamlit frontend.
No business logic in layout; upload pipeline and history live in services.
"""

from typing import Optional

import streamlit as st

from config import GEMINI_API_KEY, LLM_PROVIDER, OPENAI_API_KEY
from errors import AnalysisError, ResumeReviewError, StorageError
from resume_pipeline.resume_analyzer import run_resume_pipeline
from schemas.history_entry import HistoryEntry
from services.history_store import HistoryStore
from services.report_service import (
    as_dict,
    as_list,
    format_analyzed_at,
    history_table_rows,
    is_specified,
    rating_label,
    star_string,
)
from utils.logger import get_logger

logger = get_logger(__name__)


def _get_store() -> HistoryStore:
    """History is read once per session and mirrored to disk on every change."""
    if "history_store" not in st.session_state:
        store = HistoryStore()
        store.load()
        st.session_state["history_store"] = store
    return st.session_state["history_store"]


def _missing_key_message() -> Optional[str]:
    if LLM_PROVIDER.strip().lower() == "openai":
        if not OPENAI_API_KEY and not GEMINI_API_KEY:
            return "OPENAI_API_KEY is not set. Add it to your .env file."
        return None
    if not GEMINI_API_KEY:
        return "GEMINI_API_KEY is not set. Add it to your .env file."
    return None


def _badges(items) -> str:
    return " ".join(f"`{s}`" for s in as_list(items) if str(s).strip())


def render_analysis(analysis: HistoryEntry) -> None:
    """Render one analysis; used for the live result and for history details."""
    col_a, col_b = st.columns([3, 1])
    with col_a:
        st.markdown("### Resume Analysis Complete")
        st.caption(f"Analysis for **{analysis.file_name}** · File size: {analysis.file_size}")
    with col_b:
        st.metric("Rating", f"{analysis.rating}/10")
        st.markdown(f"{star_string(analysis.rating)}  \n*{rating_label(analysis.rating)}*")

    details = as_dict(analysis.personal_details)
    st.subheader("Personal Details")
    st.markdown(f"**{details.get('name', 'Not specified')}**")
    contact = [details.get("email"), details.get("phone")]
    contact += [details.get(k) for k in ("linkedin", "portfolio", "location") if is_specified(details.get(k))]
    st.caption(" · ".join(str(c) for c in contact if c))

    if is_specified(analysis.summary):
        st.subheader("Professional Summary")
        st.write(analysis.summary)

    col1, col2 = st.columns(2)
    with col1:
        technical = as_list(analysis.technical_skills)
        st.markdown(f"**Technical Skills ({len(technical)})**")
        st.markdown(_badges(technical) or "—")
    with col2:
        soft = as_list(analysis.soft_skills)
        st.markdown(f"**Soft Skills ({len(soft)})**")
        st.markdown(_badges(soft) or "—")

    experience = as_list(analysis.work_experience)
    if experience:
        st.subheader(f"Work Experience ({len(experience)})")
        for job in experience:
            job = as_dict(job)
            st.markdown(f"**{job.get('position', '')}** · {job.get('company', '')}")
            if job.get("duration"):
                st.caption(job["duration"])
            if job.get("description"):
                st.write(job["description"])

    education = as_list(analysis.education)
    if education:
        st.subheader(f"Education ({len(education)})")
        for edu in education:
            edu = as_dict(edu)
            st.markdown(f"**{edu.get('degree', '')}** · {edu.get('institution', '')}")
            meta = [edu.get("duration")]
            if is_specified(edu.get("gpa")):
                meta.append(f"GPA: {edu['gpa']}")
            st.caption(" · ".join(str(m) for m in meta if m))

    projects = as_list(analysis.projects)
    if projects:
        st.subheader(f"Projects ({len(projects)})")
        for project in projects:
            project = as_dict(project)
            st.markdown(f"**{project.get('name', '')}**")
            if project.get("description"):
                st.write(project["description"])
            if project.get("technologies"):
                st.markdown(_badges(project["technologies"]))

    certifications = as_list(analysis.certifications)
    if certifications:
        st.subheader(f"Certifications ({len(certifications)})")
        for cert in certifications:
            st.markdown(f"- {cert}")

    col3, col4 = st.columns(2)
    with col3:
        st.subheader("Areas for Improvement")
        for area in as_list(analysis.improvement_areas):
            st.markdown(f"- {area}")
    with col4:
        st.subheader("Suggested Skills")
        st.markdown(_badges(analysis.suggested_skills) or "—")

    st.caption(f"Analysis completed on {format_analyzed_at(analysis.analyzed_at)}")


@st.dialog("Resume details", width="large")
def _show_details(entry: HistoryEntry) -> None:
    render_analysis(entry)


def _handle_upload(uploaded_file, store: HistoryStore) -> None:
    """Single call site for the pipeline: every error becomes a message, nothing partial is saved."""
    st.session_state["error"] = None
    st.session_state["current_analysis"] = None
    progress = st.progress(0, text="Extracting text from PDF…")
    try:
        file_bytes = uploaded_file.getvalue()
        progress.progress(30, text="Analyzing resume with AI…")
        entry = run_resume_pipeline(
            file_bytes,
            uploaded_file.name,
            content_type=uploaded_file.type,
            entry_id=store.next_id(),
        )
        progress.progress(100, text="Done")
        store.append(entry)
        st.session_state["current_analysis"] = entry
    except AnalysisError as e:
        logger.error("Analysis failed for %s: %s", uploaded_file.name, e)
        st.session_state["error"] = f"Analysis failed: {e}"
    except StorageError as e:
        st.session_state["error"] = f"Analysis finished but was not saved: {e}"
    except ResumeReviewError as e:
        logger.warning("Upload rejected for %s: %s", uploaded_file.name, e)
        st.session_state["error"] = str(e)
    finally:
        progress.empty()


def render_analyze_tab(store: HistoryStore) -> None:
    key_message = _missing_key_message()
    if key_message:
        st.warning(key_message)

    uploaded_file = st.file_uploader(
        "Upload your resume (PDF, max 10MB)",
        type=["pdf"],
        key="resume_upload",
        disabled=bool(key_message),
    )
    # Streamlit reruns the script on every interaction; analyze each upload once.
    if uploaded_file is not None and st.session_state.get("processed_file_id") != uploaded_file.file_id:
        st.session_state["processed_file_id"] = uploaded_file.file_id
        with st.spinner("Processing resume…"):
            _handle_upload(uploaded_file, store)
        if st.session_state.get("current_analysis") is not None:
            st.rerun()  # refresh the history tab count

    if st.session_state.get("error"):
        st.error(st.session_state["error"])

    current: Optional[HistoryEntry] = st.session_state.get("current_analysis")
    if current is not None:
        render_analysis(current)
    elif not st.session_state.get("error"):
        st.info("Upload a PDF resume to get structured feedback, a rating and improvement suggestions.")


def render_history_tab(store: HistoryStore) -> None:
    entries = store.entries
    if not entries:
        st.info("No analyses yet. Upload a resume in the Analyze tab.")
        return

    st.dataframe(history_table_rows(entries), use_container_width=True, hide_index=True)

    labels = {
        e.id: f"{as_dict(e.personal_details).get('name', 'Not specified')} – {e.file_name} "
        f"({format_analyzed_at(e.analyzed_at, with_time=False)})"
        for e in entries
    }
    col1, col2 = st.columns([3, 1])
    with col1:
        selected_id = st.selectbox(
            "Select an analysis",
            options=list(labels.keys()),
            format_func=lambda i: labels[i],
            key="history_select",
        )
        if st.button("View details", key="view_details"):
            _show_details(next(e for e in entries if e.id == selected_id))
    with col2:
        confirm = st.checkbox("Confirm clear", key="confirm_clear")
        if st.button("Clear History", type="secondary", disabled=not confirm, key="clear_history"):
            try:
                store.clear()
            except StorageError as e:
                st.error(str(e))
            else:
                st.session_state["current_analysis"] = None
                st.rerun()


def render_layout() -> None:
    """Streamlit page layout; pipeline and persistence use the services layer."""
    st.set_page_config(page_title="AI Resume Analyzer", layout="wide")
    st.title("AI Resume Analyzer")
    st.markdown("*Upload a resume and get an ATS-style review powered by AI.*")

    if "error" not in st.session_state:
        st.session_state["error"] = None
    if "current_analysis" not in st.session_state:
        st.session_state["current_analysis"] = None

    store = _get_store()
    analyze_tab, history_tab = st.tabs(["Analyze Resume", f"History ({len(store)})"])
    with analyze_tab:
        render_analyze_tab(store)
    with history_tab:
        render_history_tab(store)


if __name__ == "__main__":
    render_layout()
