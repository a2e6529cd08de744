from datetime import date, timedelta

import requests
import streamlit as st

from api import error_detail, get_capabilities, list_programs, quote_campaign, submit_campaign
from config import DURATION_PRESETS

st.title("📣 Feature your organization")
st.caption("Place your organization or programs in the featured carousel.")

try:
    capabilities = get_capabilities()
except requests.RequestException as e:
    st.error(f"Failed to load your organizations: {e}")
    st.stop()

orgs = capabilities.get("admin_orgs", [])
if not orgs:
    st.info("Only organization admins can request featured placements.")
    st.stop()

org = st.selectbox("Organization", orgs, format_func=lambda o: o["name"])

preset = st.radio(
    "Duration",
    list(DURATION_PRESETS),
    format_func=DURATION_PRESETS.get,
    horizontal=True,
)

include_org = st.checkbox("Feature the organization", disabled=preset == "until_deadline")
include_programs = st.checkbox("Feature programs")

program_ids = []
if include_programs:
    programs = [p for p in list_programs() if p.get("organization_id") == org["id"]]
    chosen = st.multiselect("Programs", programs, format_func=lambda p: p.get("name") or p["id"])
    program_ids = [p["id"] for p in chosen]

show_from = st.date_input("Start", value=date.today())
hide_after = None
if preset == "custom":
    hide_after = st.date_input("End", value=date.today() + timedelta(days=7))
notes = st.text_area("Notes (optional)")

request = {
    "organization_id": org["id"],
    "organization_slug": org.get("slug"),
    "organization_name": org["name"],
    "include_org": include_org and preset != "until_deadline",
    "include_programs": include_programs,
    "program_ids": program_ids,
    "duration_preset": preset,
    "show_from": show_from.isoformat(),
    "hide_after": hide_after.isoformat() if hide_after else None,
    "notes": notes or None,
}

# ----------------------
# Live quote
# ----------------------
if request["include_org"] or (include_programs and program_ids):
    try:
        quote = quote_campaign(request)
    except requests.RequestException as e:
        st.warning(error_detail(e))
    else:
        st.metric(f"Total ({quote['duration_label']})", f"${quote['total']}")
        if quote["org_price"]:
            st.caption(f"Organization: ${quote['org_price']}")
        for line in quote["lines"]:
            st.caption(f"Program {line['program_id']}: ${line['price']}")

        if st.button("Submit request", type="primary"):
            try:
                result = submit_campaign(request)
            except requests.RequestException as e:
                st.error(f"Could not submit your request: {error_detail(e)}")
            else:
                if result["failures"]:
                    st.warning(f"{len(result['failures'])} request(s) failed; the rest were submitted.")
                else:
                    st.success("Thanks! We'll be in touch to confirm your placement.")
