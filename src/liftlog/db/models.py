"""
SQLAlchemy ORM models for LiftLog database tables.
"""

from __future__ import annotations

import datetime as dt
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import (
    JSON,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


def _now() -> datetime:
    return datetime.now(UTC)


class User(Base):
    """Local row for a user authenticated by the external auth provider."""

    __tablename__ = "users"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    auth_uid: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)

    def __repr__(self) -> str:
        return f"<User id={self.id} auth_uid={self.auth_uid}>"


class Exercise(Base):
    """An exercise in a user's library."""

    __tablename__ = "exercises"
    __table_args__ = (UniqueConstraint("user_id", "name", name="uq_exercises_user_name"),)
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    name: Mapped[str] = mapped_column(String(120))
    category: Mapped[str] = mapped_column(String(32), default="compound")
    # free string column; liftlog.suggestion.Equipment.coerce reads it
    equipment: Mapped[str] = mapped_column(String(16), default="other")
    default_tracking: Mapped[str] = mapped_column(String(16), default="load_reps")
    aliases: Mapped[list[str]] = mapped_column(JSON, default=list)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)

    def __repr__(self) -> str:
        return f"<Exercise id={self.id} name={self.name} equipment={self.equipment}>"


class WorkoutTemplate(Base):
    """A named, ordered list of exercises with targets."""

    __tablename__ = "workout_templates"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    name: Mapped[str] = mapped_column(String(120))
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)

    items: Mapped[list[TemplateItem]] = relationship(
        "TemplateItem",
        back_populates="template",
        cascade="all, delete-orphan",
        order_by="TemplateItem.order_index",
    )

    def __repr__(self) -> str:
        return f"<WorkoutTemplate id={self.id} name={self.name}>"


class TemplateItem(Base):
    """One exercise slot of a template."""

    __tablename__ = "template_items"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    template_id: Mapped[int] = mapped_column(
        ForeignKey("workout_templates.id", ondelete="CASCADE"), index=True
    )
    exercise_id: Mapped[int] = mapped_column(ForeignKey("exercises.id", ondelete="CASCADE"))
    order_index: Mapped[int] = mapped_column(Integer)
    target_sets: Mapped[int] = mapped_column(Integer)
    # free text: "8", "12 / side"
    target_reps: Mapped[str] = mapped_column(String(32))
    target_rir: Mapped[int | None] = mapped_column(Integer, nullable=True)
    tracking: Mapped[str] = mapped_column(String(16), default="load_reps")

    template: Mapped[WorkoutTemplate] = relationship("WorkoutTemplate", back_populates="items")
    exercise: Mapped[Exercise] = relationship("Exercise", lazy="joined")

    def __repr__(self) -> str:
        return (
            f"<TemplateItem id={self.id} template_id={self.template_id} "
            f"exercise_id={self.exercise_id} order={self.order_index}>"
        )


class WorkoutLog(Base):
    """A completed workout."""

    __tablename__ = "workout_logs"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    date: Mapped[dt.date] = mapped_column(Date, index=True)
    template_id: Mapped[int | None] = mapped_column(
        ForeignKey("workout_templates.id", ondelete="SET NULL"), nullable=True
    )
    template_name_snapshot: Mapped[str | None] = mapped_column(String(120), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)

    items: Mapped[list[ExerciseLog]] = relationship(
        "ExerciseLog",
        back_populates="workout_log",
        cascade="all, delete-orphan",
        order_by="ExerciseLog.id",
    )

    def __repr__(self) -> str:
        return f"<WorkoutLog id={self.id} user_id={self.user_id} date={self.date}>"


class ExerciseLog(Base):
    """The sets performed for one exercise in a workout."""

    __tablename__ = "exercise_logs"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    workout_log_id: Mapped[int] = mapped_column(
        ForeignKey("workout_logs.id", ondelete="CASCADE"), index=True
    )
    exercise_id: Mapped[int | None] = mapped_column(
        ForeignKey("exercises.id", ondelete="SET NULL"), nullable=True, index=True
    )
    exercise_name_snapshot: Mapped[str] = mapped_column(String(120))
    tracking: Mapped[str] = mapped_column(String(16))
    # [{"set_index": 1, "weight": 60.0, "reps": 8}, ...]; weight/reps optional
    sets: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    workout_log: Mapped[WorkoutLog] = relationship("WorkoutLog", back_populates="items")

    def __repr__(self) -> str:
        return (
            f"<ExerciseLog id={self.id} workout_log_id={self.workout_log_id} "
            f"exercise={self.exercise_name_snapshot}>"
        )


class WorkoutDraftRow(Base):
    """In-progress workout, one per user."""

    __tablename__ = "workout_drafts"
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    draft: Mapped[dict[str, Any]] = mapped_column(JSON)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return f"<WorkoutDraftRow user_id={self.user_id}>"
