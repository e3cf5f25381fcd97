"""Data access layer for linked Plaid items"""

from typing import Optional
from sqlalchemy.orm import Session
from activ_gateway.infrastructure.database.models import PlaidItem


class PlaidItemRepository:
    """Repository for per-user Plaid access tokens"""

    def __init__(self, db: Session):
        self.db = db

    def get_access_token(self, user_id: str) -> Optional[str]:
        item = self.db.get(PlaidItem, user_id)
        return item.access_token if item else None

    def save_access_token(self, user_id: str, access_token: str) -> PlaidItem:
        """Insert or replace the user's token"""
        item = self.db.get(PlaidItem, user_id)
        if item is None:
            item = PlaidItem(user_id=user_id, access_token=access_token)
            self.db.add(item)
        else:
            item.access_token = access_token
        self.db.flush()
        return item

    def delete(self, user_id: str) -> bool:
        """Remove the user's token; False when there was none"""
        item = self.db.get(PlaidItem, user_id)
        if item is None:
            return False
        self.db.delete(item)
        self.db.flush()
        return True
