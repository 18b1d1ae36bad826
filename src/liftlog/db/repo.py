"""
Async SQLAlchemy repository for LiftLog database operations.

Every query is scoped to the owning user; rows of other users behave as
missing.
"""

from __future__ import annotations

import asyncio
import datetime as dt
import logging
from collections.abc import Callable, Sequence
from datetime import UTC, datetime
from functools import wraps
from typing import Any, TypeVar

from sqlalchemy import delete, select, update
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import selectinload

from ..config import SETTINGS
from ..defaults import DEFAULT_EXERCISES, DEFAULT_TEMPLATES
from ..drafts import WorkoutDraft
from ..errors import NotFoundError
from ..progress import ProgressEntry
from ..suggestion import PreviousSet
from .models import (
    Base,
    Exercise,
    ExerciseLog,
    TemplateItem,
    User,
    WorkoutDraftRow,
    WorkoutLog,
    WorkoutTemplate,
)

logger = logging.getLogger(__name__)

_engine: AsyncEngine | None = None
_session: async_sessionmaker[AsyncSession] | None = None

# Type variable for the retry decorator
F = TypeVar("F", bound=Callable[..., Any])

EXERCISE_FIELDS = ("name", "category", "equipment", "default_tracking", "aliases")


def retry_on_connection_error(max_retries: int = 3, delay: float = 0.1):
    """
    Decorator to retry database operations on connection errors.
    Useful for handling transient connection issues.
    """

    def decorator(func: F) -> F:
        @wraps(func)
        async def wrapper(*args, **kwargs):
            for attempt in range(max_retries):
                try:
                    return await func(*args, **kwargs)
                except Exception as e:
                    # Check if it's a connection-related error
                    transient = any(
                        keyword in str(e).lower()
                        for keyword in [
                            "connection",
                            "server closed",
                            "operationalerror",
                            "timeout",
                        ]
                    )
                    if not transient or attempt == max_retries - 1:
                        raise
                    # Exponential backoff
                    wait_time = delay * (2**attempt)
                    logger.warning(
                        "Database connection error on attempt %d/%d, retrying in %.2fs: %s",
                        attempt + 1,
                        max_retries,
                        wait_time,
                        e,
                    )
                    await asyncio.sleep(wait_time)
            raise RuntimeError("Retry mechanism failed unexpectedly")

        return wrapper  # type: ignore

    return decorator


def _prepare_url(url: str) -> tuple[str, dict]:
    """Return sanitized DB URL and connect args.

    Extracts common SSL query parameters and passes them as ``connect_args``.
    ``ssl=false`` becomes ``sslmode=disable``.
    """

    url_obj = make_url(url)
    query = dict(url_obj.query)
    connect_args: dict[str, object] = {}

    sslmode = query.pop("sslmode", None)
    ssl_val = query.pop("ssl", None)
    if ssl_val is not None:
        sslmode = "disable" if str(ssl_val).lower() in {"0", "false", "off", "no"} else "require"
    if sslmode:
        connect_args["sslmode"] = sslmode

    # PgBouncer-friendly settings by driver
    driver = url_obj.drivername or ""
    if driver.startswith("postgresql+psycopg"):
        connect_args.setdefault("prepare_threshold", 0)  # psycopg3
    elif driver.startswith("postgresql+asyncpg"):
        connect_args.setdefault("statement_cache_size", 0)  # asyncpg
        # asyncpg spells it "ssl"
        if "sslmode" in connect_args:
            connect_args["ssl"] = connect_args.pop("sslmode") != "disable"

    url_obj = url_obj.set(query=query)
    return url_obj.render_as_string(hide_password=False), connect_args


async def init_db() -> None:
    """
    Initialize the async database engine and sessionmaker, and create tables if needed.
    """
    global _engine, _session
    if _engine:
        return
    if not SETTINGS.DATABASE_URL:
        logger.error("DATABASE_URL is required for DB initialization.")
        raise RuntimeError("DATABASE_URL is required")
    db_url, connect_args = _prepare_url(SETTINGS.DATABASE_URL)
    engine_kwargs: dict[str, Any] = {"echo": False, "connect_args": connect_args}
    if not make_url(db_url).drivername.startswith("sqlite"):
        engine_kwargs.update(
            pool_pre_ping=True,
            pool_recycle=3600,  # Recycle connections every hour
            pool_timeout=30,
            max_overflow=10,
            pool_size=20,
        )
    _engine = create_async_engine(db_url, **engine_kwargs)
    _session = async_sessionmaker(_engine, expire_on_commit=False)
    async with _engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database ready (%s)", make_url(db_url).drivername)


def get_session() -> async_sessionmaker[AsyncSession]:
    """
    Get the async sessionmaker. Raises if DB is not initialized.
    """
    if not _session:
        raise RuntimeError("DB not initialized; call init_db() first")
    return _session


async def close_db() -> None:
    """Dispose of the database engine and reset session state."""

    global _engine, _session
    if _engine:
        await _engine.dispose()
    _engine = None
    _session = None


async def ping() -> bool:
    """Return True when a trivial query succeeds."""
    if not _engine:
        return False
    try:
        async with _engine.connect() as conn:
            await conn.exec_driver_sql("SELECT 1")
        return True
    except Exception as e:
        logger.warning("Database ping failed: %s", e)
        return False


# ---- users ------------------------------------------------------------------


async def upsert_user(auth_uid: str) -> User:
    """
    Return the user row for an auth provider uid, creating it on first sight.
    """
    sessmaker = get_session()
    async with sessmaker() as s:
        res = await s.execute(select(User).where(User.auth_uid == auth_uid))
        user = res.scalar_one_or_none()
        if user is None:
            user = User(auth_uid=auth_uid)
            s.add(user)
            await s.commit()
            logger.info("Created user %s", user.id)
        return user


# ---- exercises --------------------------------------------------------------


@retry_on_connection_error(max_retries=3, delay=0.1)
async def list_exercises(user_id: int) -> list[Exercise]:
    sessmaker = get_session()
    async with sessmaker() as s:
        res = await s.execute(
            select(Exercise).where(Exercise.user_id == user_id).order_by(Exercise.name)
        )
        return list(res.scalars().all())


async def _owned_exercise(s: AsyncSession, user_id: int, exercise_id: int) -> Exercise:
    res = await s.execute(
        select(Exercise).where(Exercise.id == exercise_id, Exercise.user_id == user_id)
    )
    exercise = res.scalar_one_or_none()
    if exercise is None:
        raise NotFoundError("exercise", exercise_id)
    return exercise


async def get_exercise(user_id: int, exercise_id: int) -> Exercise:
    sessmaker = get_session()
    async with sessmaker() as s:
        return await _owned_exercise(s, user_id, exercise_id)


async def create_exercise(user_id: int, data: dict[str, Any]) -> Exercise:
    sessmaker = get_session()
    async with sessmaker() as s:
        exercise = Exercise(user_id=user_id, **{k: data[k] for k in EXERCISE_FIELDS if k in data})
        s.add(exercise)
        await s.commit()
        return exercise


async def update_exercise(user_id: int, exercise_id: int, data: dict[str, Any]) -> Exercise:
    sessmaker = get_session()
    async with sessmaker() as s:
        exercise = await _owned_exercise(s, user_id, exercise_id)
        for k in EXERCISE_FIELDS:
            if k in data:
                setattr(exercise, k, data[k])
        await s.commit()
        return exercise


async def delete_exercise(user_id: int, exercise_id: int) -> None:
    """Delete an exercise, its template slots, and unlink its logs."""
    sessmaker = get_session()
    async with sessmaker() as s, s.begin():
        exercise = await _owned_exercise(s, user_id, exercise_id)
        await s.execute(delete(TemplateItem).where(TemplateItem.exercise_id == exercise_id))
        await s.execute(
            update(ExerciseLog)
            .where(ExerciseLog.exercise_id == exercise_id)
            .values(exercise_id=None)
        )
        await s.delete(exercise)


# ---- templates --------------------------------------------------------------


def _template_query(user_id: int):
    return (
        select(WorkoutTemplate)
        .where(WorkoutTemplate.user_id == user_id)
        .options(selectinload(WorkoutTemplate.items))
    )


async def _check_exercises_owned(s: AsyncSession, user_id: int, ids: Sequence[int]) -> None:
    wanted = set(ids)
    if not wanted:
        return
    res = await s.execute(
        select(Exercise.id).where(Exercise.user_id == user_id, Exercise.id.in_(wanted))
    )
    missing = wanted - set(res.scalars().all())
    if missing:
        raise NotFoundError("exercise", min(missing))


def _template_items(template_id: int, items: Sequence[dict[str, Any]]) -> list[TemplateItem]:
    return [
        TemplateItem(
            template_id=template_id,
            exercise_id=item["exercise_id"],
            order_index=index,
            target_sets=item["target_sets"],
            target_reps=str(item["target_reps"]),
            target_rir=item.get("target_rir"),
            tracking=item.get("tracking") or "load_reps",
        )
        for index, item in enumerate(items, start=1)
    ]


@retry_on_connection_error(max_retries=3, delay=0.1)
async def list_templates(user_id: int) -> list[WorkoutTemplate]:
    sessmaker = get_session()
    async with sessmaker() as s:
        res = await s.execute(_template_query(user_id).order_by(WorkoutTemplate.name))
        return list(res.scalars().unique().all())


async def get_template(user_id: int, template_id: int) -> WorkoutTemplate:
    sessmaker = get_session()
    async with sessmaker() as s:
        res = await s.execute(_template_query(user_id).where(WorkoutTemplate.id == template_id))
        template = res.scalars().unique().one_or_none()
        if template is None:
            raise NotFoundError("template", template_id)
        return template


async def create_template(
    user_id: int, name: str, description: str | None, items: Sequence[dict[str, Any]]
) -> WorkoutTemplate:
    """Create a template; item order follows ``items`` and is numbered from 1."""
    sessmaker = get_session()
    async with sessmaker() as s, s.begin():
        await _check_exercises_owned(s, user_id, [i["exercise_id"] for i in items])
        template = WorkoutTemplate(user_id=user_id, name=name, description=description)
        s.add(template)
        await s.flush()
        s.add_all(_template_items(template.id, items))
        template_id = template.id
    return await get_template(user_id, template_id)


async def update_template(
    user_id: int,
    template_id: int,
    name: str,
    description: str | None,
    items: Sequence[dict[str, Any]],
) -> WorkoutTemplate:
    """Rename a template and replace all of its items."""
    sessmaker = get_session()
    async with sessmaker() as s, s.begin():
        res = await s.execute(
            select(WorkoutTemplate).where(
                WorkoutTemplate.id == template_id, WorkoutTemplate.user_id == user_id
            )
        )
        template = res.scalar_one_or_none()
        if template is None:
            raise NotFoundError("template", template_id)
        await _check_exercises_owned(s, user_id, [i["exercise_id"] for i in items])
        template.name = name
        template.description = description
        await s.execute(delete(TemplateItem).where(TemplateItem.template_id == template_id))
        s.add_all(_template_items(template_id, items))
    return await get_template(user_id, template_id)


async def delete_template(user_id: int, template_id: int) -> None:
    sessmaker = get_session()
    async with sessmaker() as s, s.begin():
        res = await s.execute(
            select(WorkoutTemplate).where(
                WorkoutTemplate.id == template_id, WorkoutTemplate.user_id == user_id
            )
        )
        template = res.scalar_one_or_none()
        if template is None:
            raise NotFoundError("template", template_id)
        await s.execute(delete(TemplateItem).where(TemplateItem.template_id == template_id))
        await s.execute(
            update(WorkoutLog).where(WorkoutLog.template_id == template_id).values(template_id=None)
        )
        await s.delete(template)


# ---- workout logs -----------------------------------------------------------


def _log_query(user_id: int):
    return (
        select(WorkoutLog)
        .where(WorkoutLog.user_id == user_id)
        .options(selectinload(WorkoutLog.items))
    )


@retry_on_connection_error(max_retries=3, delay=0.1)
async def list_workout_logs(user_id: int) -> list[WorkoutLog]:
    """All workouts of a user, newest first."""
    sessmaker = get_session()
    async with sessmaker() as s:
        res = await s.execute(
            _log_query(user_id).order_by(WorkoutLog.date.desc(), WorkoutLog.created_at.desc())
        )
        return list(res.scalars().unique().all())


async def get_workout_log(user_id: int, log_id: int) -> WorkoutLog:
    sessmaker = get_session()
    async with sessmaker() as s:
        res = await s.execute(_log_query(user_id).where(WorkoutLog.id == log_id))
        log = res.scalars().unique().one_or_none()
        if log is None:
            raise NotFoundError("workout log", log_id)
        return log


async def create_workout_log(
    user_id: int,
    date: dt.date,
    template_id: int | None,
    template_name_snapshot: str | None,
    items: Sequence[dict[str, Any]],
) -> WorkoutLog:
    """
    Store a workout and all of its exercise logs in a single transaction.

    Either everything is written or nothing is.
    """
    sessmaker = get_session()
    async with sessmaker() as s, s.begin():
        await _check_exercises_owned(
            s, user_id, [i["exercise_id"] for i in items if i.get("exercise_id") is not None]
        )
        log = WorkoutLog(
            user_id=user_id,
            date=date,
            template_id=template_id,
            template_name_snapshot=template_name_snapshot,
        )
        s.add(log)
        await s.flush()
        s.add_all(
            ExerciseLog(
                workout_log_id=log.id,
                exercise_id=item.get("exercise_id"),
                exercise_name_snapshot=item["exercise_name_snapshot"],
                tracking=item["tracking"],
                sets=list(item.get("sets") or []),
                notes=item.get("notes"),
            )
            for item in items
        )
        log_id = log.id
    logger.info("Stored workout log %s with %d exercises", log_id, len(items))
    return await get_workout_log(user_id, log_id)


async def update_workout_log(user_id: int, log_id: int, date: dt.date) -> WorkoutLog:
    sessmaker = get_session()
    async with sessmaker() as s:
        res = await s.execute(
            select(WorkoutLog).where(WorkoutLog.id == log_id, WorkoutLog.user_id == user_id)
        )
        log = res.scalar_one_or_none()
        if log is None:
            raise NotFoundError("workout log", log_id)
        log.date = date
        await s.commit()
    return await get_workout_log(user_id, log_id)


async def update_exercise_log(
    user_id: int, log_id: int, exercise_log_id: int, sets: Sequence[dict[str, Any]]
) -> ExerciseLog:
    """
    Replace the sets of one exercise in a logged workout.

    Rows carrying neither weight nor reps are dropped.
    """
    sessmaker = get_session()
    async with sessmaker() as s:
        res = await s.execute(
            select(ExerciseLog)
            .join(WorkoutLog, ExerciseLog.workout_log_id == WorkoutLog.id)
            .where(
                ExerciseLog.id == exercise_log_id,
                ExerciseLog.workout_log_id == log_id,
                WorkoutLog.user_id == user_id,
            )
        )
        item = res.scalar_one_or_none()
        if item is None:
            raise NotFoundError("exercise log", exercise_log_id)
        item.sets = [
            dict(row)
            for row in sets
            if row.get("weight") is not None or row.get("reps") is not None
        ]
        await s.commit()
        return item


async def delete_workout_log(user_id: int, log_id: int) -> None:
    sessmaker = get_session()
    async with sessmaker() as s, s.begin():
        res = await s.execute(_log_query(user_id).where(WorkoutLog.id == log_id))
        log = res.scalars().unique().one_or_none()
        if log is None:
            raise NotFoundError("workout log", log_id)
        await s.delete(log)


# ---- progress ---------------------------------------------------------------


@retry_on_connection_error(max_retries=3, delay=0.1)
async def get_exercise_progress(user_id: int, exercise_id: int) -> list[ProgressEntry]:
    """Every logged entry of an exercise, oldest first."""
    sessmaker = get_session()
    async with sessmaker() as s:
        res = await s.execute(
            select(WorkoutLog.date, ExerciseLog.tracking, ExerciseLog.sets)
            .join(WorkoutLog, ExerciseLog.workout_log_id == WorkoutLog.id)
            .where(WorkoutLog.user_id == user_id, ExerciseLog.exercise_id == exercise_id)
            .order_by(WorkoutLog.date, WorkoutLog.created_at)
        )
        return [
            ProgressEntry(date=d.isoformat(), tracking=tracking, sets=list(sets or []))
            for d, tracking, sets in res.all()
        ]


@retry_on_connection_error(max_retries=3, delay=0.1)
async def get_previous_sets(
    user_id: int, exercise_id: int, before: dt.date | None = None
) -> list[PreviousSet] | None:
    """
    Sets from the most recent workout containing the exercise.

    With ``before``, only workouts dated strictly earlier count. Returns None
    when the exercise has never been logged.
    """
    sessmaker = get_session()
    async with sessmaker() as s:
        stmt = (
            select(ExerciseLog.sets)
            .join(WorkoutLog, ExerciseLog.workout_log_id == WorkoutLog.id)
            .where(WorkoutLog.user_id == user_id, ExerciseLog.exercise_id == exercise_id)
        )
        if before is not None:
            stmt = stmt.where(WorkoutLog.date < before)
        res = await s.execute(
            stmt.order_by(
                WorkoutLog.date.desc(), WorkoutLog.created_at.desc(), ExerciseLog.id.desc()
            ).limit(1)
        )
        row = res.first()
        if row is None:
            return None
        return [PreviousSet.from_mapping(item) for item in (row[0] or [])]


# ---- drafts -----------------------------------------------------------------


async def save_draft(user_id: int, draft: WorkoutDraft) -> None:
    """Insert or replace the user's in-progress workout."""
    sessmaker = get_session()
    async with sessmaker() as s:
        row = await s.get(WorkoutDraftRow, user_id)
        if row is None:
            s.add(WorkoutDraftRow(user_id=user_id, draft=draft.to_json()))
        else:
            row.draft = draft.to_json()
            row.updated_at = datetime.now(UTC)
        await s.commit()


async def load_draft(user_id: int) -> WorkoutDraft | None:
    """Return the saved draft; an unreadable draft is dropped and None returned."""
    sessmaker = get_session()
    async with sessmaker() as s:
        row = await s.get(WorkoutDraftRow, user_id)
        if row is None:
            return None
        try:
            return WorkoutDraft.from_json(row.draft)
        except ValueError as e:
            logger.warning("Discarding unreadable draft for user %s: %s", user_id, e)
            await s.delete(row)
            await s.commit()
            return None


async def clear_draft(user_id: int) -> None:
    sessmaker = get_session()
    async with sessmaker() as s:
        await s.execute(delete(WorkoutDraftRow).where(WorkoutDraftRow.user_id == user_id))
        await s.commit()


# ---- seeding ----------------------------------------------------------------


async def seed_user_data(user_id: int) -> bool:
    """
    Give a new user the starter exercises and Push/Pull templates.

    Skipped when the user already has any exercise. Returns True if seeded.
    """
    sessmaker = get_session()
    async with sessmaker() as s, s.begin():
        res = await s.execute(select(Exercise.id).where(Exercise.user_id == user_id).limit(1))
        if res.first() is not None:
            logger.debug("User %s already has data, skipping seed", user_id)
            return False

        exercises = [Exercise(user_id=user_id, **data) for data in DEFAULT_EXERCISES]
        s.add_all(exercises)
        await s.flush()
        by_name = {e.name: e.id for e in exercises}

        for tpl in DEFAULT_TEMPLATES:
            template = WorkoutTemplate(
                user_id=user_id, name=tpl["name"], description=tpl["description"]
            )
            s.add(template)
            await s.flush()
            s.add_all(
                _template_items(
                    template.id,
                    [
                        {
                            "exercise_id": by_name[name],
                            "target_sets": sets,
                            "target_reps": reps,
                            "target_rir": rir,
                            "tracking": tracking,
                        }
                        for name, sets, reps, rir, tracking in tpl["items"]
                    ],
                ),
            )
    logger.info("Seeded default exercises and templates for user %s", user_id)
    return True
