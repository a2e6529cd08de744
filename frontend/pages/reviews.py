import requests
import streamlit as st

from api import get_capabilities, get_review_bundle, get_review_form, get_review_queue, save_review
from ui.answers_viewer import render_answers

st.title("📝 Reviews")

try:
    capabilities = get_capabilities()
except requests.RequestException as e:
    st.error(f"Failed to load your review assignments: {e}")
    st.stop()

programs = capabilities.get("reviewer_programs", [])
if not programs:
    st.info("You have no review assignments.")
    st.stop()

program = st.selectbox("Program", programs, format_func=lambda p: p.get("name") or p["id"])
status = st.selectbox("Status", ["", "submitted", "in_review", "accepted", "waitlisted", "rejected"])

queue = get_review_queue(program["id"], status or None)
form = get_review_form(program["id"])

if not queue:
    st.info("Nothing to review.")
    st.stop()

item = st.selectbox(
    "Application",
    queue,
    format_func=lambda q: f"{q.get('applicant_name') or q['application_id']} ({q.get('status') or 'unknown'})",
)

bundle = get_review_bundle(item["application_id"])

left, right = st.columns([2, 1])
with left:
    st.markdown("### Answers")
    render_answers(bundle.get("rendered", []))

with right:
    st.markdown("### Your review")
    review = {"ratings": {}}
    if form.get("show_score"):
        review["score"] = st.number_input("Score", min_value=0.0, max_value=10.0, step=0.5)
    if form.get("show_comments"):
        review["comments"] = st.text_area("Comments")
    if form.get("show_decision"):
        review["decision"] = st.selectbox("Decision", [""] + form.get("decision_options", [])) or None

    col1, col2 = st.columns(2)
    with col1:
        if st.button("Save draft"):
            save_review(item["application_id"], {**review, "status": "draft"})
            st.success("Draft saved")
    with col2:
        if st.button("Submit review", type="primary"):
            save_review(item["application_id"], {**review, "status": "submitted"})
            st.success("Review submitted")
