# File: accelerate_vocab/modules/admin/analytics/logics/aggregation.py
# Purpose: Pure aggregation over a pupil's sessions and assignments.
#
# Nothing here touches the database; the service passes plain rows in.
# Sessions are read through ``module_id``, ``completed_at``, ``accuracy`` and
# ``time_taken_seconds`` attributes, so ORM rows and simple records both work.

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional, Sequence

from .....utils.formatting import mean


@dataclass(frozen=True)
class PupilSummary:
    id: int
    name: str
    email: str
    unique_modules_allocated: int
    unique_modules_completed: int
    average_accuracy: Optional[float]
    modules_started_not_completed: int
    total_modules_completed: int


@dataclass(frozen=True)
class ModulePerformance:
    module_id: int
    module_title: str
    is_allocated: bool
    times_completed: int
    best_accuracy: Optional[float]
    average_accuracy: Optional[float]
    last_played_at: Optional[datetime]
    total_time_taken_seconds: int


def summarize_pupil(pupil, sessions: Sequence, assigned_module_ids: Iterable[int]) -> PupilSummary:
    """Headline numbers for one pupil, in a single pass over their sessions.

    ``pupil`` needs ``id``, ``name`` and ``email``.
    """
    started = set()
    completed_modules = set()
    accuracies = []
    completed_count = 0

    for session in sessions:
        started.add(session.module_id)
        if session.completed_at is None:
            continue
        completed_count += 1
        completed_modules.add(session.module_id)
        accuracies.append(session.accuracy)

    return PupilSummary(
        id=pupil.id,
        name=pupil.name,
        email=pupil.email,
        unique_modules_allocated=len(set(assigned_module_ids)),
        unique_modules_completed=len(completed_modules),
        average_accuracy=mean(accuracies),
        modules_started_not_completed=len(started - completed_modules),
        total_modules_completed=completed_count,
    )


def module_performance(modules: Sequence, sessions: Sequence, assigned_module_ids: Iterable[int]) -> List[ModulePerformance]:
    """Per-module drill-down for one pupil.

    Allocated modules come first, then the most completed, then by title.
    """
    allocated = set(assigned_module_ids)
    by_module = {}
    for session in sessions:
        if session.completed_at is not None:
            by_module.setdefault(session.module_id, []).append(session)

    rows = []
    for module in modules:
        completed = by_module.get(module.id, [])
        accuracies = [s.accuracy for s in completed if s.accuracy is not None]
        rows.append(ModulePerformance(
            module_id=module.id,
            module_title=module.title,
            is_allocated=module.id in allocated,
            times_completed=len(completed),
            best_accuracy=max(accuracies) if accuracies else None,
            average_accuracy=mean(accuracies),
            last_played_at=max((s.completed_at for s in completed), default=None),
            total_time_taken_seconds=sum(s.time_taken_seconds or 0 for s in completed),
        ))

    rows.sort(key=lambda row: (not row.is_allocated, -row.times_completed, (row.module_title or '').lower()))
    return rows
