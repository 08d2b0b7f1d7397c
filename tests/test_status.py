"""Tests for the status aggregator and report rendering."""

from datetime import datetime, timedelta

import pytest

from healthlog.llm.schemas import ExerciseRecord, FoodRecord, StatusSummary
from healthlog.status import StatusAggregator, average_duration, render_report

USER = "+15550001111"


def _ex(days_ago, duration=30, type="running", distance="", user=USER, now=datetime(2026, 10, 19, 12, 0)):
    return ExerciseRecord(
        date=now - timedelta(days=days_ago), user_id=user, duration=duration, type=type, distance=distance
    )


def _food(days_ago, items="oatmeal", user=USER, now=datetime(2026, 10, 19, 12, 0)):
    return FoodRecord(date=now - timedelta(days=days_ago), user_id=user, food_items=items)


# --- Averages ---


def test_average_excludes_zero_durations():
    logs = [_ex(1, 20), _ex(2, 0), _ex(3, 40)]
    assert average_duration(logs) == 30


def test_average_rounds_half_up():
    assert average_duration([_ex(1, 20), _ex(2, 25)]) == 23


def test_average_empty():
    assert average_duration([]) == 0


# --- Aggregation ---


@pytest.mark.asyncio
async def test_zero_duration_counted_but_not_averaged(store, now):
    store.exercise_records = [_ex(1, 20), _ex(2, 0), _ex(3, 40)]
    summary = await StatusAggregator(store).summarize(USER, days=7, now=now)
    assert summary.exercise_count == 3
    assert summary.average_duration == 30


@pytest.mark.asyncio
async def test_no_records(store, now):
    summary = await StatusAggregator(store).summarize(USER, now=now)
    assert summary.exercise_count == 0
    assert summary.average_duration == 0
    assert summary.food_log_count == 0


@pytest.mark.asyncio
async def test_window_filter(store, now):
    store.exercise_records = [_ex(1), _ex(6), _ex(8), _ex(30)]
    store.food_records = [_food(0), _food(7), _food(9)]
    summary = await StatusAggregator(store).summarize(USER, days=7, now=now)
    assert summary.exercise_count == 2
    # exactly on the threshold is inside the window
    assert summary.food_log_count == 2
    assert summary.date_threshold == now - timedelta(days=7)


@pytest.mark.asyncio
async def test_records_without_date_dropped(store, now):
    store.exercise_records = [_ex(1), ExerciseRecord(date=None, user_id=USER, duration=99)]
    summary = await StatusAggregator(store).summarize(USER, now=now)
    assert summary.exercise_count == 1


@pytest.mark.asyncio
async def test_other_users_not_counted(store, now):
    store.exercise_records = [_ex(1), _ex(1, user="+15559999999")]
    summary = await StatusAggregator(store).summarize(USER, now=now)
    assert summary.exercise_count == 1


@pytest.mark.asyncio
async def test_failed_exercise_read_keeps_food(store, now):
    store.exercise_records = [_ex(1)]
    store.food_records = [_food(1), _food(2)]
    store.fail_exercise_read = True
    summary = await StatusAggregator(store).summarize(USER, now=now)
    assert summary.exercise_count == 0
    assert summary.food_log_count == 2


@pytest.mark.asyncio
async def test_raising_food_read_keeps_exercise(store, now):
    store.exercise_records = [_ex(1, 25)]
    store.food_records = [_food(1)]
    store.fail_food_read = True
    summary = await StatusAggregator(store).summarize(USER, now=now)
    assert summary.exercise_count == 1
    assert summary.average_duration == 25
    assert summary.food_log_count == 0


# --- Rendering ---


def _summary(exercise_logs=(), food_logs=()):
    exercise_logs = list(exercise_logs)
    food_logs = list(food_logs)
    return StatusSummary(
        exercise_count=len(exercise_logs),
        average_duration=average_duration(exercise_logs),
        food_log_count=len(food_logs),
        date_threshold=datetime(2026, 10, 12, 12, 0),
        exercise_logs=exercise_logs,
        food_logs=food_logs,
    )


def test_render_empty_report():
    report = render_report(_summary())
    assert "*Your Weekly Health Report*" in report
    assert "• Exercise sessions: 0 sessions" in report
    assert "• Average duration: 0 minutes" in report
    assert "• Food logs: 0 entries" in report
    assert "No exercise logs in the past week." in report
    assert "No food logs in the past week." in report


def test_render_exercise_line_with_and_without_distance():
    report = render_report(_summary([_ex(1, 45, "running", "5 miles"), _ex(2, 60, "yoga")]))
    assert "• Oct 18: 45 mins of running (5 miles)" in report
    assert "• Oct 17: 60 mins of yoga" in report
    assert "yoga (" not in report


def test_render_food_line():
    report = render_report(_summary(food_logs=[_food(0, "a protein shake")]))
    assert "• Oct 19: a protein shake" in report
    assert "No exercise logs in the past week." in report


def test_render_limits_to_five_newest_first():
    logs = [_ex(d, 10 + d) for d in (6, 0, 3, 1, 5, 2, 4)]
    report = render_report(_summary(logs))
    lines = [line for line in report.splitlines() if "mins of" in line]
    assert len(lines) == 5
    assert lines[0].startswith("• Oct 19")
    assert lines[-1].startswith("• Oct 15")


def test_render_section_order():
    report = render_report(_summary([_ex(1)], [_food(1)]))
    assert report.index("*Weekly Summary:*") < report.index("*Recent Exercise Logs:*")
    assert report.index("*Recent Exercise Logs:*") < report.index("*Recent Food Logs:*")


def test_render_empty_wording_follows_lookback():
    summary = StatusSummary(date_threshold=datetime(2026, 10, 5, 12, 0), days=14)
    report = render_report(summary)
    assert "No exercise logs in the past 14 days." in report
    assert "No food logs in the past 14 days." in report


@pytest.mark.asyncio
async def test_summary_carries_lookback_days(store, now):
    summary = await StatusAggregator(store).summarize(USER, days=3, now=now)
    assert summary.days == 3
    assert "No food logs in the past 3 days." in render_report(summary)
