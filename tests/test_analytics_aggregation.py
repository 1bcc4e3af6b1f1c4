from datetime import datetime, timezone
from types import SimpleNamespace

from accelerate_vocab.modules.admin.analytics.logics.aggregation import module_performance, summarize_pupil


def _session(module_id, accuracy=None, completed=None, seconds=None):
    return SimpleNamespace(
        module_id=module_id,
        accuracy=accuracy,
        completed_at=completed,
        time_taken_seconds=seconds,
    )


MONDAY = datetime(2024, 3, 4, tzinfo=timezone.utc)
TUESDAY = datetime(2024, 3, 5, tzinfo=timezone.utc)
PUPIL = SimpleNamespace(id=7, name='Sam Taylor', email='sam@example.com')


def test_summary_counts():
    sessions = [
        _session(1, 80, MONDAY, 60),
        _session(1, 100, TUESDAY, 40),
        _session(2, 50, MONDAY, 90),
        _session(3),
    ]

    summary = summarize_pupil(PUPIL, sessions, [1, 2, 2, 4])

    assert summary.unique_modules_allocated == 3
    assert summary.unique_modules_completed == 2
    assert summary.total_modules_completed == 3
    assert summary.modules_started_not_completed == 1
    assert round(summary.average_accuracy, 2) == 76.67


def test_summary_without_sessions():
    summary = summarize_pupil(PUPIL, [], [])

    assert summary.average_accuracy is None
    assert summary.unique_modules_completed == 0
    assert summary.modules_started_not_completed == 0


def test_module_started_and_completed_is_not_in_progress():
    sessions = [_session(1), _session(1, 90, MONDAY, 30)]

    summary = summarize_pupil(PUPIL, sessions, [1])

    assert summary.modules_started_not_completed == 0


def test_module_performance_ordering_and_figures():
    modules = [
        SimpleNamespace(id=1, title='beta'),
        SimpleNamespace(id=2, title='Alpha'),
        SimpleNamespace(id=3, title='Gamma'),
        SimpleNamespace(id=4, title='Delta'),
    ]
    sessions = [
        _session(1, 60, MONDAY, 100),
        _session(1, 90, TUESDAY, 50),
        _session(3, 70, MONDAY, 20),
        _session(3, 75, TUESDAY, 20),
        _session(3, 80, TUESDAY, 20),
        _session(2),
    ]

    rows = module_performance(modules, sessions, assigned_module_ids=[1, 2])

    assert [row.module_id for row in rows] == [1, 2, 3, 4]
    first = rows[0]
    assert first.is_allocated
    assert first.times_completed == 2
    assert first.best_accuracy == 90
    assert first.average_accuracy == 75
    assert first.last_played_at == TUESDAY
    assert first.total_time_taken_seconds == 150

    untouched = rows[1]
    assert untouched.times_completed == 0
    assert untouched.best_accuracy is None
    assert untouched.last_played_at is None
    assert untouched.total_time_taken_seconds == 0


def test_unallocated_modules_tie_break_on_title():
    modules = [SimpleNamespace(id=1, title='zebra'), SimpleNamespace(id=2, title='Apple')]

    rows = module_performance(modules, [], [])

    assert [row.module_title for row in rows] == ['Apple', 'zebra']
