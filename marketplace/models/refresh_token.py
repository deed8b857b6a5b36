from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from marketplace.database.base import Base, IntegerPrimaryKeyMixin


class RefreshToken(IntegerPrimaryKeyMixin, Base):
    __tablename__ = "refresh_tokens"

    refresh_token: Mapped[str] = mapped_column(String(128), unique=True, nullable=False)
    username: Mapped[str] = mapped_column(String(255), nullable=False)
    valid: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
