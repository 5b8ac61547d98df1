"""
Streamlit Demo Application
Web-based demo of the medical chat assistant.
"""

import streamlit as st
import sys
import os

# Project root (parent of demos/)
_PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
sys.path.insert(0, _PROJECT_ROOT)

from medichat import LLMClient, PreconditionError, QueryOrchestrator, ReportTurn, export_report
from medichat.config import REPORT_DISCLAIMER
from medichat.formatting import format_timestamp

# Page config
st.set_page_config(
    page_title="Healthcare Assistant",
    page_icon="👨‍⚕️",
    layout="centered"
)

# Initialize session state (one orchestrator + store per browser session)
if "assistant" not in st.session_state:
    st.session_state.assistant = None

# Sidebar for configuration
with st.sidebar:
    st.title("⚙️ Configuration")
    model = st.text_input("Model (optional)", value="", help="Leave empty for default")

    if st.button("Start New Session") or st.session_state.assistant is None:
        st.session_state.assistant = QueryOrchestrator(
            llm_client=LLMClient(model=model or None),
        )

    assistant = st.session_state.assistant
    if not assistant.llm_client.is_configured:
        st.warning("Set GOOGLE_API_KEY (or GEMINI_API_KEY) in your .env file.")

    st.divider()
    st.subheader("📊 Session")
    st.metric("Reports", len(assistant.store.reports()))

# Main interface
st.title("👨‍⚕️ Virtual Healthcare Assistant")
st.markdown("Describe your symptoms for a brief health analysis.")

assistant = st.session_state.assistant


def _render_turns():
    snapshot = assistant.store.snapshot()
    for turn in snapshot.turns:
        if isinstance(turn, ReportTurn):
            report = turn.report
            with st.chat_message("assistant"):
                st.caption(f"Health Analysis Report · ID: {report.id} · {format_timestamp(report.created_at)}")
                # Markdown keeps **bold**; two trailing spaces keep line breaks
                st.markdown(report.response.replace("\n", "  \n"))
                st.caption(f"⚠️ {REPORT_DISCLAIMER}")
                artifact = export_report(report)
                st.download_button(
                    "Save Report",
                    data=artifact.content,
                    file_name=artifact.filename,
                    mime=artifact.media_type,
                    key=f"download_{report.id}",
                )
        else:
            with st.chat_message("user"):
                st.markdown(turn.text)
    if snapshot.phase.is_error:
        st.error(snapshot.phase.message)


# Chat input
prompt = st.chat_input("Describe your symptoms...", disabled=assistant.store.phase.is_pending)
if prompt:
    try:
        with st.spinner("Analyzing your health information..."):
            assistant.submit(prompt)
    except PreconditionError as e:
        st.error(e.message)

_render_turns()
