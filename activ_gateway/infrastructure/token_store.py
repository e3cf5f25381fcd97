"""Per-user Plaid access token storage"""

import threading
from abc import ABC, abstractmethod
from typing import Callable, Dict, Optional

from sqlalchemy.orm import Session

from activ_gateway.infrastructure.database.repositories import PlaidItemRepository


class CredentialStore(ABC):
    """Maps a user id to the access token of their linked Plaid item"""

    @abstractmethod
    def get(self, user_id: str) -> Optional[str]:
        ...

    @abstractmethod
    def set(self, user_id: str, access_token: str) -> None:
        ...

    @abstractmethod
    def delete(self, user_id: str) -> None:
        ...


class InMemoryCredentialStore(CredentialStore):
    """Process-local store; tokens are lost on restart"""

    def __init__(self):
        self._tokens: Dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, user_id: str) -> Optional[str]:
        with self._lock:
            return self._tokens.get(user_id)

    def set(self, user_id: str, access_token: str) -> None:
        with self._lock:
            self._tokens[user_id] = access_token

    def delete(self, user_id: str) -> None:
        with self._lock:
            self._tokens.pop(user_id, None)


class SqlCredentialStore(CredentialStore):
    """Store backed by the plaid_item table; one short transaction per call"""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def get(self, user_id: str) -> Optional[str]:
        with self.session_factory() as db:
            return PlaidItemRepository(db).get_access_token(user_id)

    def set(self, user_id: str, access_token: str) -> None:
        with self.session_factory() as db:
            try:
                PlaidItemRepository(db).save_access_token(user_id, access_token)
                db.commit()
            except Exception:
                db.rollback()
                raise

    def delete(self, user_id: str) -> None:
        with self.session_factory() as db:
            try:
                PlaidItemRepository(db).delete(user_id)
                db.commit()
            except Exception:
                db.rollback()
                raise
