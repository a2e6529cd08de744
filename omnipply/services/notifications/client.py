from omnipply.schemas.notifications import UnreadNotifications
from omnipply.services.backend.client import BackendClient, eq, is_null


class NotificationsService:
    def __init__(self, backend: BackendClient):
        self._backend = backend

    def unread_count(self, user_id: str) -> int:
        return self._backend.count("notifications", filters={"user_id": eq(user_id), "read_at": is_null()})

    def has_unread(self, user_id: str) -> bool:
        return self.unread_count(user_id) > 0

    def unread(self, user_id: str) -> UnreadNotifications:
        count = self.unread_count(user_id)
        return UnreadNotifications(count=count, has_unread=count > 0)
