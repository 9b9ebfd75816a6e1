"""ORM models for profiles, tasks, labels, achievements and the XP ledger."""

from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from questlog.db.base import Base


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class UserProfile(Base):
    """Profile row keyed by the identity provider's subject id."""

    __tablename__ = "user_profiles"
    __table_args__ = (
        CheckConstraint("total_xp >= 0", name="ck_user_profiles_total_xp"),
        CheckConstraint("current_level >= 1", name="ck_user_profiles_level"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    username: Mapped[str] = mapped_column(String(32), unique=True, nullable=False)
    email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    current_level: Mapped[int] = mapped_column(Integer, default=1, server_default="1", nullable=False)
    total_xp: Mapped[int] = mapped_column(Integer, default=0, server_default="0", nullable=False)
    bio: Mapped[str | None] = mapped_column(String(280), nullable=True)
    profile_picture_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    role: Mapped[str] = mapped_column(String(16), default="user", server_default="user", nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    tasks: Mapped[list[Task]] = relationship("Task", back_populates="user")
    labels: Mapped[list[Label]] = relationship("Label", back_populates="user")


# ---------------------------------------------------------------------------
# Tasks & Labels
# ---------------------------------------------------------------------------


class Task(Base):
    """A user's task. Completion is one-way and stamps xp_earned/completed_at once."""

    __tablename__ = "tasks"
    __table_args__ = (
        CheckConstraint("priority IN ('Low', 'Medium', 'High')", name="ck_tasks_priority"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("user_profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    priority: Mapped[str] = mapped_column(String(8), nullable=False, default="Medium")
    due_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    is_complete: Mapped[bool] = mapped_column(Boolean, default=False, server_default="0", nullable=False)
    xp_earned: Mapped[int | None] = mapped_column(Integer, nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    user: Mapped[UserProfile] = relationship("UserProfile", back_populates="tasks")
    task_labels: Mapped[list[TaskLabel]] = relationship(
        "TaskLabel", back_populates="task", cascade="all, delete-orphan", lazy="selectin"
    )


class Label(Base):
    """User-scoped tag, unique per user ignoring case. Tasks reference labels through task_labels."""

    __tablename__ = "labels"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("user_profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(64), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    user: Mapped[UserProfile] = relationship("UserProfile", back_populates="labels")


Index("uq_labels_user_lower_name", Label.user_id, func.lower(Label.name), unique=True)


class TaskLabel(Base):
    __tablename__ = "task_labels"

    task_id: Mapped[int] = mapped_column(Integer, ForeignKey("tasks.id", ondelete="CASCADE"), primary_key=True)
    label_id: Mapped[int] = mapped_column(Integer, ForeignKey("labels.id", ondelete="CASCADE"), primary_key=True)

    task: Mapped[Task] = relationship("Task", back_populates="task_labels")
    label: Mapped[Label] = relationship("Label", lazy="selectin")


# ---------------------------------------------------------------------------
# Achievements
# ---------------------------------------------------------------------------


class Achievement(Base):
    """Static catalog entry, seeded at startup."""

    __tablename__ = "achievements"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    slug: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    xp_bonus: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    trigger_type: Mapped[str] = mapped_column(String(32), nullable=False)
    threshold: Mapped[int] = mapped_column(Integer, nullable=False)
    sort_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)


class UserAchievement(Base):
    """Earned instance. UNIQUE(user_id, achievement_id) makes awards idempotent."""

    __tablename__ = "user_achievements"
    __table_args__ = (UniqueConstraint("user_id", "achievement_id", name="uq_user_achievements_pair"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("user_profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    achievement_id: Mapped[int] = mapped_column(Integer, ForeignKey("achievements.id"), nullable=False)
    earned_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    achievement: Mapped[Achievement] = relationship("Achievement", lazy="selectin")


# ---------------------------------------------------------------------------
# XP Ledger
# ---------------------------------------------------------------------------


class XPLedger(Base):
    """Append-only record of every XP grant, unique per idempotency key."""

    __tablename__ = "xp_ledger"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("user_profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    source: Mapped[str] = mapped_column(String(32), nullable=False)
    source_id: Mapped[str | None] = mapped_column(String(128), nullable=True)
    description: Mapped[str | None] = mapped_column(String(256), nullable=True)
    idempotency_key: Mapped[str] = mapped_column(String(256), unique=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
