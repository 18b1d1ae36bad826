import datetime as dt

import pytest

from liftlog.errors import NotFoundError, ValidationError
from liftlog.server.schemas import WorkoutLogOut
from liftlog.services import WorkoutService


async def _push_template(repo):
    user = await repo.upsert_user("lifter")
    await repo.seed_user_data(user.id)
    templates = {t.name: t for t in await repo.list_templates(user.id)}
    return user, templates["Push"]


def _bench_id(template):
    return template.items[0].exercise_id


@pytest.mark.asyncio
async def test_prepare_without_history_has_no_suggestions(db):
    user, push = await _push_template(db)
    draft = await WorkoutService().prepare_session(user.id, push.id, dt.date(2026, 1, 1))

    assert draft.template_name == "Push"
    assert draft.workout_date == "2026-01-01"
    assert len(draft.exercise_inputs) == 6
    bench = draft.exercise_inputs[0]
    assert bench.exercise_name == "Barbell Bench Press"
    assert bench.previous_sets is None
    assert bench.suggested_weight is None
    assert [s.weight for s in bench.sets] == ["", "", ""]
    assert await db.load_draft(user.id) == draft


@pytest.mark.asyncio
async def test_prepare_prefills_suggested_weight(db):
    user, push = await _push_template(db)
    bench_id = _bench_id(push)
    await db.create_workout_log(
        user.id,
        date=dt.date(2026, 1, 1),
        template_id=push.id,
        template_name_snapshot="Push",
        items=[
            {
                "exercise_id": bench_id,
                "exercise_name_snapshot": "Barbell Bench Press",
                "tracking": "load_reps",
                "sets": [{"set_index": i, "weight": 60, "reps": 6} for i in (1, 2, 3)],
            }
        ],
    )

    draft = await WorkoutService().prepare_session(user.id, push.id, dt.date(2026, 1, 8))
    bench = draft.exercise_inputs[0]
    assert bench.suggested_weight == "62.5"
    assert bench.is_increase is True
    assert [s.weight for s in bench.sets] == ["62.5"] * 3
    assert [p.weight for p in bench.previous_sets] == [60, 60, 60]

    knee_raise = next(e for e in draft.exercise_inputs if e.tracking == "reps_only")
    assert knee_raise.suggested_weight is None
    assert knee_raise.is_increase is None


@pytest.mark.asyncio
async def test_finish_session_stores_log_and_clears_draft(db):
    user, push = await _push_template(db)
    service = WorkoutService()
    draft = await service.prepare_session(user.id, push.id, dt.date(2026, 1, 1))

    bench = draft.exercise_inputs[0]
    bench.sets[0].weight = "60"
    bench.sets[0].reps = "8"
    bench.sets[2].weight = "60"
    bench.sets[2].reps = "7"
    await db.save_draft(user.id, draft)

    log = await service.finish_session(user.id)
    assert log.date == dt.date(2026, 1, 1)
    assert log.template_id == push.id
    assert log.template_name_snapshot == "Push"
    assert len(log.items) == 6
    assert log.items[0].sets == [
        {"set_index": 1, "weight": 60.0, "reps": 8},
        {"set_index": 3, "weight": 60.0, "reps": 7},
    ]
    assert log.items[1].sets == []
    assert await db.load_draft(user.id) is None


@pytest.mark.asyncio
async def test_finish_without_draft_raises(db):
    user = await db.upsert_user("nobody")
    with pytest.raises(NotFoundError):
        await WorkoutService().finish_session(user.id)


@pytest.mark.asyncio
async def test_prepare_unknown_template_raises(db):
    user = await db.upsert_user("nobody")
    with pytest.raises(NotFoundError):
        await WorkoutService().prepare_session(user.id, 999)


@pytest.mark.asyncio
async def test_summary_flags_pr_and_next_weight(db):
    user, push = await _push_template(db)
    bench_id = _bench_id(push)
    service = WorkoutService()
    await db.create_workout_log(
        user.id,
        date=dt.date(2026, 1, 1),
        template_id=push.id,
        template_name_snapshot="Push",
        items=[
            {
                "exercise_id": bench_id,
                "exercise_name_snapshot": "Barbell Bench Press",
                "tracking": "load_reps",
                "sets": [{"set_index": i, "weight": 60, "reps": 6} for i in (1, 2, 3)],
            }
        ],
    )

    draft = await service.prepare_session(user.id, push.id, dt.date(2026, 1, 8))
    for s in draft.exercise_inputs[0].sets:
        s.reps = "6"
    log = await service.finish_session(user.id, draft)

    summaries = await service.summarize_workout(user.id, log.id)
    bench = summaries[0]
    assert bench.exercise_name == "Barbell Bench Press"
    assert bench.equipment == "barbell"
    assert bench.total_volume == pytest.approx(3 * 62.5 * 6)
    assert bench.is_pr is True
    assert bench.previous_best == pytest.approx(72.0)
    assert bench.suggested_weight == "65"
    assert [p.date for p in bench.progress] == ["2026-01-01", "2026-01-08"]
    assert bench.progress[-1].is_current_workout is True

    # untouched exercises were logged with no sets
    assert all(s.suggested_weight is None for s in summaries[1:])


@pytest.mark.asyncio
async def test_finish_rejects_bad_date_and_keeps_draft(db):
    user, push = await _push_template(db)
    service = WorkoutService()
    draft = await service.prepare_session(user.id, push.id, dt.date(2026, 1, 1))
    await db.save_draft(user.id, draft.with_workout_date("01/02/2026"))

    with pytest.raises(ValidationError):
        await service.finish_session(user.id)
    assert await db.load_draft(user.id) is not None
    assert await db.list_workout_logs(user.id) == []


@pytest.mark.asyncio
async def test_finish_drops_negative_and_non_finite_numbers(db):
    user, push = await _push_template(db)
    service = WorkoutService()
    draft = await service.prepare_session(user.id, push.id, dt.date(2026, 1, 1))
    bench = draft.exercise_inputs[0]
    bench.sets[0].weight, bench.sets[0].reps = "-5", "8"
    bench.sets[1].weight, bench.sets[1].reps = "inf", "20"
    bench.sets[2].weight, bench.sets[2].reps = "60", "-3"

    log = await service.finish_session(user.id, draft)

    assert log.items[0].sets == [
        {"set_index": 1, "reps": 8},
        {"set_index": 2, "reps": 20},
        {"set_index": 3, "weight": 60.0},
    ]
    # the stored log stays readable through the API schema
    WorkoutLogOut.model_validate(log)
    for stored in await db.list_workout_logs(user.id):
        WorkoutLogOut.model_validate(stored)

    # and the next session still gets a suggestion from the usable set
    nxt = await service.prepare_session(user.id, push.id, dt.date(2026, 1, 8))
    assert nxt.exercise_inputs[0].suggested_weight == "60"
    assert nxt.exercise_inputs[0].is_increase is False


@pytest.mark.asyncio
async def test_backdated_session_ignores_later_workouts(db):
    user, push = await _push_template(db)
    bench_id = _bench_id(push)
    for day, weight in ((1, 60), (15, 80)):
        await db.create_workout_log(
            user.id,
            date=dt.date(2026, 1, day),
            template_id=push.id,
            template_name_snapshot="Push",
            items=[
                {
                    "exercise_id": bench_id,
                    "exercise_name_snapshot": "Barbell Bench Press",
                    "tracking": "load_reps",
                    "sets": [{"set_index": 1, "weight": weight, "reps": 6}],
                }
            ],
        )
    service = WorkoutService()

    backdated = await service.prepare_session(user.id, push.id, dt.date(2026, 1, 8))
    assert backdated.exercise_inputs[0].suggested_weight == "62.5"

    same_day = await service.prepare_session(user.id, push.id, dt.date(2026, 1, 15))
    assert same_day.exercise_inputs[0].suggested_weight == "82.5"


@pytest.mark.asyncio
async def test_update_draft_changes_date_and_inputs(db):
    user, push = await _push_template(db)
    service = WorkoutService()
    draft = await service.prepare_session(user.id, push.id, dt.date(2026, 1, 1))

    moved = await service.update_draft(user.id, workout_date=dt.date(2026, 1, 2))
    assert moved.workout_date == "2026-01-02"
    assert moved.exercise_inputs == draft.exercise_inputs

    trimmed = await service.update_draft(user.id, exercise_inputs=draft.exercise_inputs[:1])
    assert trimmed.workout_date == "2026-01-02"
    assert len(trimmed.exercise_inputs) == 1
    assert await db.load_draft(user.id) == trimmed


@pytest.mark.asyncio
async def test_update_draft_without_draft_raises(db):
    user = await db.upsert_user("nobody")
    with pytest.raises(NotFoundError):
        await WorkoutService().update_draft(user.id, workout_date=dt.date(2026, 1, 2))
