import logging
from typing import Optional

from app.client.storage import LocalStore

logger = logging.getLogger(__name__)

SESSION_STORAGE_KEY = "currentUser"


class NotLoggedIn(Exception):
    pass


class SessionContext:
    """The signed-in user, passed explicitly to whatever needs identity.

    ``start`` is the only way a session begins and ``end`` the only way it
    is torn down; both keep the durable store in step.
    """

    def __init__(self, store: LocalStore):
        self.store = store
        self.user: Optional[dict] = None
        self.token: Optional[str] = None

    @classmethod
    def restore(cls, store: LocalStore) -> "SessionContext":
        session = cls(store)
        saved = store.get(SESSION_STORAGE_KEY)
        if isinstance(saved, dict) and saved.get("user") and saved.get("access_token"):
            session.user = saved["user"]
            session.token = saved["access_token"]
        return session

    def start(self, user: dict, token: str):
        self.user = user
        self.token = token
        self.store.set(SESSION_STORAGE_KEY, {"user": user, "access_token": token})
        logger.info("Session started for user %s", user.get("id"))

    def end(self):
        self.user = None
        self.token = None
        self.store.remove(SESSION_STORAGE_KEY)

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None and self.token is not None

    def require_user(self) -> dict:
        if not self.is_authenticated:
            raise NotLoggedIn("Please login to continue")
        return self.user

    @property
    def user_id(self) -> Optional[int]:
        return self.user.get("id") if self.user else None

    @property
    def role(self) -> Optional[str]:
        return self.user.get("role") if self.user else None

    @property
    def contact(self) -> str:
        if not self.user:
            return ""
        return self.user.get("phone") or self.user.get("email") or ""

    def auth_headers(self) -> dict:
        self.require_user()
        return {"Authorization": f"Bearer {self.token}"}
