from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.menagerie.models import Base, TimestampMixin

if TYPE_CHECKING:
    from app.menagerie.modules.animals.models import Animal


class Photo(TimestampMixin, Base):
    __tablename__ = "photos"
    __table_args__ = (
        Index("idx_photos_title", "title"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    # Storage key, e.g. "photos/3f1c9a....jpg"
    path: Mapped[str] = mapped_column(String(512), nullable=False)
    title: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # No cascade: deleting a photo leaves its animals in place with photo_id cleared.
    animals: Mapped[list["Animal"]] = relationship(
        "Animal",
        back_populates="photo",
        lazy="selectin",
    )

    @property
    def display_title(self) -> str:
        return self.title or self.path.rsplit("/", 1)[-1]
