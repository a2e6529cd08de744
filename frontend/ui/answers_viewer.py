import streamlit as st


def render_answers(rendered: list):
    """Rows of (label, display value) as returned by the API."""
    if not rendered:
        st.info("No answers yet.")
        return

    for label, value in rendered:
        st.markdown(f"**{label}**")
        if value and value != "—":
            st.write(value)
        else:
            st.caption("No answer")
        st.divider()
