from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.menagerie.models import Base, TimestampMixin

if TYPE_CHECKING:
    from app.menagerie.modules.photos.models import Photo


SPECIES = ("dog", "cat", "bird", "horse", "fish", "other")


class Animal(TimestampMixin, Base):
    __tablename__ = "animals"
    __table_args__ = (
        Index("idx_animals_name", "name"),
        Index("idx_animals_species", "species"),
        CheckConstraint(
            "species IN ('dog', 'cat', 'bird', 'horse', 'fish', 'other')",
            name="ck_animals_species",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    species: Mapped[str] = mapped_column(String(32), nullable=False)
    age: Mapped[int | None] = mapped_column(Integer, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    photo_id: Mapped[int | None] = mapped_column(ForeignKey("photos.id", ondelete="SET NULL"), nullable=True)
    photo: Mapped[Optional["Photo"]] = relationship("Photo", back_populates="animals", lazy="joined")
