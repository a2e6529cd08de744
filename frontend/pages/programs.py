import requests
import streamlit as st

from api import error_detail, get_program_window, list_programs, save_application, start_application, submit_application
from ui.answers_viewer import render_answers

st.title("🎭 Programs")
st.caption("Browse open auditions, scholarships and competitions, then apply.")

st.session_state.setdefault("active_application", None)

# ----------------------
# Filters
# ----------------------
col1, col2 = st.columns([3, 1])
with col1:
    search = st.text_input("Search programs")
with col2:
    program_type = st.selectbox("Type", ["", "audition", "scholarship", "application", "competition"])

try:
    programs = list_programs(search=search, program_type=program_type)
except requests.RequestException as e:
    st.error(f"Failed to load programs: {e}")
    st.stop()

if not programs:
    st.info("No programs match your search.")

for program in programs:
    with st.container(border=True):
        st.subheader(program.get("name") or "Untitled program")
        if program.get("description"):
            st.write(program["description"])

        window = get_program_window(program["id"])
        if window["is_open"]:
            st.caption(window["deadline_message"])
        elif window["is_before_open"]:
            st.caption(window["open_message"])
        else:
            st.caption("Applications closed")

        if window["is_open"] and st.button("Apply", key=f"apply-{program['id']}"):
            try:
                st.session_state["active_application"] = start_application(program["id"])
            except requests.HTTPError as e:
                st.error(f"Could not open an application: {e}")

# ----------------------
# Application editor
# ----------------------
view = st.session_state["active_application"]
if view:
    st.markdown("---")
    application = view["application"]
    st.markdown("### Your application")

    answers = dict(view.get("answers") or {})
    for field in view.get("schema", []):
        key = field.get("key") or field.get("id")
        label = field.get("label") or key
        if field.get("required"):
            label += " *"
        field_type = (field.get("type") or "").upper()
        if field_type == "LONG_TEXT":
            answers[key] = st.text_area(label, value=answers.get(key) or "", key=f"ans-{key}")
            if key in view.get("word_counts", {}):
                st.caption(view["word_counts"][key])
        elif field_type == "CHECKBOX":
            answers[key] = st.checkbox(label, value=bool(answers.get(key)), key=f"ans-{key}")
        elif field_type == "SELECT" and field.get("options"):
            options = [str(o) for o in field["options"]]
            current = answers.get(key)
            answers[key] = st.selectbox(
                label, options, index=options.index(current) if current in options else 0, key=f"ans-{key}"
            )
        elif field_type == "SHORT_TEXT":
            answers[key] = st.text_input(label, value=answers.get(key) or "", key=f"ans-{key}")

    col1, col2 = st.columns(2)
    with col1:
        if st.button("Save draft"):
            save_application(application["id"], answers)
            st.success("Draft saved")
    with col2:
        if st.button("Submit", type="primary"):
            try:
                submit_application(application["id"], answers)
                st.success("Application submitted")
            except requests.RequestException as e:
                st.error(error_detail(e))

    with st.expander("Preview answers"):
        render_answers(view.get("rendered", []))
