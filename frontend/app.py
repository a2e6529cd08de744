import requests
import streamlit as st

from api import get_capabilities, unread_notifications
from config import APP_TITLE

st.set_page_config(
    page_title=APP_TITLE,
    layout="wide",
)

# -------------------------
# Header
# -------------------------
st.title(APP_TITLE)
st.caption("Apply to auditions, scholarships and competitions. Review applicants. Feature your programs.")

st.markdown("---")

# -------------------------
# Session
# -------------------------
with st.sidebar:
    st.header("Session")
    token = st.text_input("Access token", value=st.session_state.get("access_token", ""), type="password")
    if token:
        st.session_state["access_token"] = token

if not st.session_state.get("access_token"):
    st.info("Paste an access token in the sidebar to load your workspace. Public programs are browsable without one.")
    st.stop()

try:
    capabilities = get_capabilities()
    notifications = unread_notifications()
except requests.RequestException as e:
    st.error(f"Could not load your workspace: {e}")
    st.stop()

if notifications.get("has_unread"):
    st.warning(f"🔔 You have {notifications['count']} unread notification(s).")

# -------------------------
# Capabilities
# -------------------------
st.markdown("### Your workspace")

col1, col2, col3 = st.columns(3)

with col1:
    st.markdown("**🏛️ Organizations you manage**")
    for org in capabilities.get("admin_orgs", []):
        st.write(f"- {org['name']}")

with col2:
    st.markdown("**📝 Programs you review**")
    for program in capabilities.get("reviewer_programs", []):
        st.write(f"- {program.get('name') or program['id']}")

with col3:
    st.markdown("**🤝 Coalitions**")
    for coalition in capabilities.get("coalitions", []):
        st.write(f"- {coalition['name']}")

if capabilities.get("is_super_admin"):
    st.success("Superadmin tools are available on the Users page.")
