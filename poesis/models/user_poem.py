"""UserPoem model — bookmark association, tombstoned via is_bookmarked."""

from sqlalchemy import Boolean, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base


class UserPoem(Base):
    __tablename__ = "user_poems"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    poem_id: Mapped[int] = mapped_column(ForeignKey("poems.id"), nullable=False, index=True)
    is_bookmarked: Mapped[bool] = mapped_column(Boolean, default=False)

    __table_args__ = (
        UniqueConstraint("user_id", "poem_id", name="uq_user_poem"),
    )

    user: Mapped["User"] = relationship(back_populates="bookmarks")
    poem: Mapped["Poem"] = relationship(back_populates="bookmarks")
