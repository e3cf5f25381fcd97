"""SQLAlchemy ORM models for linked Plaid items"""

from sqlalchemy import Column, DateTime, Text
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class PlaidItem(Base):
    """Plaid access token held for a user (one linked item per user)"""

    __tablename__ = "plaid_item"

    user_id = Column(Text, primary_key=True)
    access_token = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())
