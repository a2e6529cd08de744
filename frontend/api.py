from typing import Any, Dict, List, Optional

import requests
import streamlit as st

from config import API_BASE_URL


def _headers() -> Dict[str, str]:
    token = st.session_state.get("access_token")
    return {"Authorization": f"Bearer {token}"} if token else {}


def error_detail(error: requests.RequestException) -> str:
    """Readable message for a failed API call; the body may not be JSON."""
    response = getattr(error, "response", None)
    if response is None:
        return str(error)
    try:
        detail = response.json().get("detail")
    except (ValueError, AttributeError):
        return response.text or str(error)
    if isinstance(detail, dict):
        return detail.get("message") or str(detail)
    return str(detail or error)


def _get(path: str, params: Optional[Dict[str, Any]] = None, timeout: int = 10):
    response = requests.get(f"{API_BASE_URL}{path}", params=params, headers=_headers(), timeout=timeout)
    response.raise_for_status()
    return response.json()


def _send(method: str, path: str, body: Optional[Dict[str, Any]] = None, timeout: int = 15):
    response = requests.request(method, f"{API_BASE_URL}{path}", json=body, headers=_headers(), timeout=timeout)
    response.raise_for_status()
    return response.json() if response.content else None


def get_capabilities():
    return _get("/capabilities")


def list_programs(search: Optional[str] = None, program_type: Optional[str] = None) -> List[dict]:
    return _get("/programs", params={"search": search or None, "type": program_type or None})


def get_program_window(program_id: str):
    return _get(f"/programs/{program_id}/window")


def start_application(program_id: str):
    return _send("POST", "/applications", {"program_id": program_id})


def save_application(application_id: str, answers: dict):
    return _send("PUT", f"/applications/{application_id}", {"answers": answers})


def submit_application(application_id: str, answers: dict):
    return _send("POST", f"/applications/{application_id}/submit", {"answers": answers})


def get_review_queue(program_id: str, status: Optional[str] = None) -> List[dict]:
    return _get("/reviews/queue", params={"program_id": program_id, "status": status or None})


def get_review_bundle(application_id: str):
    return _get(f"/reviews/{application_id}")


def get_review_form(program_id: str):
    return _get(f"/reviews/forms/{program_id}")


def save_review(application_id: str, review: dict):
    return _send("PUT", f"/reviews/{application_id}", review)


def quote_campaign(request: dict):
    return _send("POST", "/advertise/quote", request)


def submit_campaign(request: dict):
    return _send("POST", "/advertise", request, timeout=30)


def list_users(search: Optional[str] = None, role: Optional[str] = None):
    return _get("/users", params={"search": search or None, "role": role or None}, timeout=30)


def update_user_role(user_id: str, new_role: str, wipe: bool = False, target: str = "all"):
    return _send("PUT", f"/users/{user_id}/role", {"new_role": new_role, "wipe": wipe, "target": target})


def unread_notifications():
    return _get("/notifications/unread")
