import os

import streamlit as st

APP_TITLE = "Omnipply"

DURATION_PRESETS = {
    "7d": "7 days",
    "14d": "14 days",
    "30d": "30 days",
    "until_deadline": "Until deadline",
    "custom": "Custom",
}

ROLE_FILTERS = ["", "superadmin", "admin", "reviewer", "coalition_manager", "applicant"]


def _api_base_url() -> str:
    # env first, then Streamlit secrets
    url = os.getenv("API_BASE_URL")
    if url:
        return url
    try:
        return st.secrets["API_BASE_URL"]
    except (FileNotFoundError, KeyError):
        return "http://localhost:8000/api/v1"


API_BASE_URL = _api_base_url()
