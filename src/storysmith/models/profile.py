"""User profile ORM model."""

from datetime import UTC, datetime
from typing import Any

from sqlalchemy import String, func
from sqlalchemy.orm import Mapped, mapped_column

from storysmith.models.base import Base


class Profile(Base):
    __tablename__ = "profiles"

    # Same id as the authenticated user
    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    first_name: Mapped[str | None] = mapped_column(
        String(100), nullable=True
    )
    last_name: Mapped[str | None] = mapped_column(
        String(100), nullable=True
    )
    avatar_url: Mapped[str | None] = mapped_column(
        String(500), nullable=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        default=lambda: datetime.now(UTC),
        server_default=func.now(),
        onupdate=lambda: datetime.now(UTC),
    )

    @property
    def initials(self) -> str:
        first = (self.first_name or "").strip()[:1]
        last = (self.last_name or "").strip()[:1]
        return (first + last).upper()

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "avatar_url": self.avatar_url,
            "initials": self.initials,
            "updated_at": (
                self.updated_at.isoformat() if self.updated_at else None
            ),
        }
