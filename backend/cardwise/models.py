"""Database models."""

from datetime import datetime
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cardwise.database import Base


class Flashcard(Base):
    """Catalogue card. Read-only to the study engine."""

    __tablename__ = "flashcards"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    question: Mapped[str] = mapped_column(Text, nullable=False)
    # A string, or a list of accepted answers for multiple choice
    answer: Mapped[Any] = mapped_column(JSON, nullable=False)
    card_type: Mapped[str] = mapped_column(String(32), nullable=False, default="basic")
    category: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    topic: Mapped[str | None] = mapped_column(String(200), nullable=True, index=True)
    options: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    deck_id: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    list_entries: Mapped[list["FlashcardListEntry"]] = relationship(
        back_populates="flashcard",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        """String representation of Flashcard."""
        return f"<Flashcard(id={self.id}, category='{self.category}')>"


class FlashcardListEntry(Base):
    """Membership of a card in a named list (e.g. "javascript-interview")."""

    __tablename__ = "flashcard_lists"

    flashcard_id: Mapped[int] = mapped_column(
        ForeignKey("flashcards.id", ondelete="CASCADE"), primary_key=True
    )
    name: Mapped[str] = mapped_column(String(100), primary_key=True, index=True)

    flashcard: Mapped["Flashcard"] = relationship(back_populates="list_entries")


class UserProgress(Base):
    """Scheduling state of one card for one user."""

    __tablename__ = "user_progress"
    __table_args__ = (
        UniqueConstraint("user_id", "flashcard_id", name="uq_user_progress_user_flashcard"),
        Index("ix_user_progress_user_state", "user_id", "state"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    flashcard_id: Mapped[int] = mapped_column(
        ForeignKey("flashcards.id", ondelete="CASCADE"), nullable=False
    )
    # Plain string so an unrecognized value can be detected instead of rejected by the driver
    state: Mapped[str] = mapped_column(String(20), nullable=False, default="new")
    current_step: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    ease_factor: Mapped[float] = mapped_column(Float, nullable=False, default=2.5)
    interval_days: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    next_review_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, index=True
    )
    review_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_correct: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    important: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:
        """String representation of UserProgress."""
        return (
            f"<UserProgress(user_id={self.user_id}, flashcard_id={self.flashcard_id}, "
            f"state='{self.state}')>"
        )


class SessionAttempt(Base):
    """Append-only log of answered cards."""

    __tablename__ = "session_attempts"
    __table_args__ = (
        Index("ix_session_attempts_user_attempted_at", "user_id", "attempted_at"),
        Index("ix_session_attempts_user_flashcard", "user_id", "flashcard_id"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False)
    flashcard_id: Mapped[int] = mapped_column(
        ForeignKey("flashcards.id", ondelete="CASCADE"), nullable=False
    )
    attempted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    is_correct: Mapped[bool] = mapped_column(Boolean, nullable=False)
    session_id: Mapped[str | None] = mapped_column(String(64), nullable=True)

    def __repr__(self) -> str:
        """String representation of SessionAttempt."""
        return f"<SessionAttempt(id={self.id}, flashcard_id={self.flashcard_id})>"


class AIUsage(Base):
    """Metered AI usage counter, one row per user and month."""

    __tablename__ = "ai_usage"
    __table_args__ = (
        UniqueConstraint("user_id", "period_key", name="uq_ai_usage_user_period"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    period_key: Mapped[str] = mapped_column(String(7), nullable=False)
    usage_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # Limit in force at the last reservation, for reporting
    usage_limit: Mapped[int] = mapped_column(Integer, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:
        """String representation of AIUsage."""
        return (
            f"<AIUsage(user_id={self.user_id}, period_key='{self.period_key}', "
            f"usage_count={self.usage_count})>"
        )


class Subscription(Base):
    """Billing state, maintained by the payment integration."""

    __tablename__ = "subscriptions"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False, unique=True, index=True)
    plan: Mapped[str] = mapped_column(String(20), nullable=False, default="free")
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active")
    subscription_ends_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    trial_ends_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:
        """String representation of Subscription."""
        return f"<Subscription(user_id={self.user_id}, plan='{self.plan}')>"
