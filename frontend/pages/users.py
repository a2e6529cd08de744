import requests
import streamlit as st

from api import list_users, update_user_role
from config import ROLE_FILTERS

st.title("👥 Users")

col1, col2 = st.columns([3, 1])
with col1:
    search = st.text_input("Search by name or email")
with col2:
    role = st.selectbox("Role", ROLE_FILTERS, format_func=lambda r: r or "Any role")

try:
    data = list_users(search=search, role=role)
except requests.HTTPError as e:
    if e.response is not None and e.response.status_code == 403:
        st.error("Superadmin access required.")
    else:
        st.error(f"Failed to load users: {e}")
    st.stop()

st.caption(f"{data['total']} user(s)")

for row in data["users"]:
    user = row["user"]
    with st.expander(f"{user.get('full_name') or user.get('email') or user['id']} · {', '.join(row['labels'])}"):
        st.write(user.get("email") or "")
        new_role = st.selectbox("Role", ROLE_FILTERS[1:], key=f"role-{user['id']}")
        wipe = st.checkbox("Remove existing assignments", key=f"wipe-{user['id']}")
        if st.button("Update role", key=f"update-{user['id']}"):
            update_user_role(user["id"], new_role, wipe=wipe)
            st.success("Role updated")
