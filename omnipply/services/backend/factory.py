from functools import lru_cache

from omnipply.config import get_settings
from omnipply.services.backend.client import BackendClient


@lru_cache(maxsize=1)
def make_backend_client() -> BackendClient:
    """
    Create and return a singleton backend client bound to the anon key.

    Per-user clients are derived from it with ``with_token`` so they share
    the underlying HTTP session.
    """
    return BackendClient.from_settings(get_settings())


@lru_cache(maxsize=1)
def make_service_client() -> BackendClient:
    """Singleton client using the service role key (server-side jobs only)."""
    return BackendClient.from_settings(get_settings(), service_role=True)
