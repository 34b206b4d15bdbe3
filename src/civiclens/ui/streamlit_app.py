"""Streamlit UI for CivicLens."""

import atexit
import logging

import pandas as pd
import streamlit as st

from civiclens.core.config import settings
from civiclens.core.constants import AnalyticsConstants, IntakeConstants, MapConstants, SAMPLE_COMPLAINTS
from civiclens.core.errors import StorageError, SubmissionRejected
from civiclens.services.complaint_store import follow_store, sync_analytics, unique_locations
from civiclens.services.intake import create_intake
from civiclens.utils.formatting import format_category_name, format_time, issue_icon
from civiclens.utils.map_data import filter_by_category, markers_from_complaints, markers_to_rows

# Configure logging
logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))
logger = logging.getLogger(__name__)

# Page configuration
st.set_page_config(
    page_title="CivicLens - Civic Issue Detection",
    page_icon="🏙️",
    layout="wide"
)


@st.cache_resource
def get_intake():
    """One intake per server process, reconciled with the remote store on start."""
    intake = create_intake()
    complaints = []
    stop_following = None
    if intake.store.is_remote:
        complaints = sync_analytics(intake.store, intake.analytics)
        stop_following = follow_store(intake.store, intake.analytics)
        atexit.register(stop_following)
    return intake, complaints, stop_following


intake, stored_complaints, stop_following = get_intake()
analytics = intake.analytics
st.session_state.setdefault("markers", markers_from_complaints(stored_complaints))

# Main UI
st.title("🏙️ CivicLens - Civic Issue Detection")
st.write("Describe a civic issue and let AI categorize it, rate its urgency and suggest next steps.")

# Sidebar for sample complaints and location
with st.sidebar:
    st.header("📝 Samples")
    for key in SAMPLE_COMPLAINTS:
        if st.button(key.title(), key=f"sample_{key}", width='stretch'):
            st.session_state["complaint"] = SAMPLE_COMPLAINTS[key]
            st.rerun()

    st.header("📍 Location")
    lat = st.number_input("Latitude", value=None, format="%.6f", min_value=-90.0, max_value=90.0)
    lng = st.number_input("Longitude", value=None, format="%.6f", min_value=-180.0, max_value=180.0)
    location = st.text_input("Location description", value="")

    if settings.demo_mode or not settings.effective_gemini_key:
        st.caption("Demo mode: keyword analysis only")

    if stop_following is not None and st.button("🔄 Reload from database", width='stretch'):
        stop_following()
        get_intake.clear()
        st.rerun()

# Complaint form
with st.form("complaint_form"):
    complaint = st.text_area(
        "Complaint",
        value=st.session_state.get("complaint", ""),
        max_chars=IntakeConstants.MAX_COMPLAINT_LENGTH,
        height=150,
    )
    submitted = st.form_submit_button("🔍 Analyze Complaint", disabled=intake.cooldown.is_active())

if intake.cooldown.is_active():
    st.warning(f"⏳ Next submission allowed in {intake.cooldown.format_remaining()}")

if submitted:
    try:
        with st.spinner("Analyzing complaint..."):
            result = intake.submit(complaint, location, lat, lng)
        st.session_state["last_result"] = result
        st.session_state["markers"].append(result.marker)
        st.rerun()
    except SubmissionRejected as e:
        st.error(e.message)

# Results
result = st.session_state.get("last_result")
if result:
    analysis = result.analysis
    st.header("Analysis Results")
    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric("Category", analysis.category)
    with col2:
        st.metric("Sentiment", analysis.sentiment)
    with col3:
        st.metric("Urgency", analysis.urgency)
    st.progress(analysis.urgency_score / 100.0, text=f"Urgency score {analysis.urgency_score}/100")
    st.write(f"**Summary:** {analysis.summary}")
    st.write("**Recommendations:**")
    for rec in analysis.recommendations:
        st.write(f"- {rec}")
    st.caption(f"Analyzed in {result.duration}s")

# Map
st.header("🗺️ Issue Map")
category_filter = st.radio(
    "Filter",
    ["all"] + [k for k in AnalyticsConstants.CATEGORY_KEYS],
    horizontal=True,
    format_func=lambda k: "All" if k == "all" else format_category_name(k),
)
rows = markers_to_rows(filter_by_category(st.session_state["markers"], category_filter))
if rows:
    st.map(pd.DataFrame(rows), latitude="latitude", longitude="longitude", color="color")
else:
    st.map(pd.DataFrame([{"latitude": MapConstants.DEFAULT_LATITUDE, "longitude": MapConstants.DEFAULT_LONGITUDE}]),
           zoom=MapConstants.DEFAULT_ZOOM)

# Dashboard
st.header("📊 Dashboard")
total = analytics.total_issues()
top = analytics.top_category()
col1, col2, col3, col4 = st.columns(4)
with col1:
    st.metric("Total Issues", total)
    st.caption(f"{total} issues tracked locally" if total else "Submit to start tracking")
with col2:
    st.metric("Top Category", format_category_name(top))
    st.caption(f"{analytics.category_counts[top]} reports" if total else "No data yet")
with col3:
    st.metric("Critical/High", analytics.critical_count())
with col4:
    st.metric("Locations", unique_locations(stored_complaints))

for key, count, pct in analytics.category_bars():
    st.progress(pct / 100.0, text=f"{format_category_name(key)} · {count}")

st.subheader("Recent Issues")
feed = analytics.feed()
if not feed:
    st.info("No issues reported yet. Submit your first complaint above!")
for issue in feed:
    st.write(f"{issue_icon(issue.category)} {issue.summary}...")
    st.caption(f"{issue.urgency} · {format_time(issue.timestamp)}")

if st.button("🗑️ Clear analytics data"):
    try:
        analytics.clear()
    except StorageError as e:
        st.error(f"Could not clear analytics: {e.message}")
    st.rerun()
