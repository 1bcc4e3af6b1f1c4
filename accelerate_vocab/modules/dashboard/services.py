"""
Dashboard Service - data behind the admin and pupil dashboards.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from flask import current_app

from ...models import GameSession, Module, ModuleAssignment, UserRole, db
from ...utils.formatting import mean, round_half_up

LEVEL_FILTERS = ('all',) + Module.LEVELS


@dataclass
class PupilStats:
    total_attempts: int = 0
    average_accuracy: int = 0
    modules_completed: int = 0


@dataclass
class ModuleCard:
    module: Module
    is_completed: bool


@dataclass
class AdminStats:
    total_pupils: int = 0
    total_modules: int = 0
    total_sessions: int = 0
    average_accuracy: int = 0


def _title_sort_key(module: Module):
    return (module.title_number or 0, (module.title or '').lower())


class DashboardService:
    """Read-only queries for the two dashboards."""

    @staticmethod
    def completed_sessions(profile_id: int) -> List[GameSession]:
        return (
            GameSession.query
            .filter(GameSession.user_id == profile_id, GameSession.completed_at.isnot(None))
            .all()
        )

    @staticmethod
    def pupil_stats(profile_id: int) -> PupilStats:
        """Completed-session count, rounded mean accuracy and distinct modules completed."""

        sessions = DashboardService.completed_sessions(profile_id)
        if not sessions:
            return PupilStats()
        average = mean(s.accuracy or 0 for s in sessions)
        return PupilStats(
            total_attempts=len(sessions),
            average_accuracy=round_half_up(average),
            modules_completed=len({s.module_id for s in sessions}),
        )

    @staticmethod
    def pupil_modules(profile_id: int, level: Optional[str] = None) -> List[ModuleCard]:
        """Assigned, active modules in title-number order, optionally for one level."""

        query = (
            Module.query
            .join(ModuleAssignment, ModuleAssignment.module_id == Module.id)
            .filter(ModuleAssignment.user_id == profile_id, Module.is_active.is_(True))
        )
        if level and level != 'all':
            query = query.filter(Module.level == level)

        completed_ids = {
            module_id for (module_id,) in db.session.query(GameSession.module_id)
            .filter(GameSession.user_id == profile_id, GameSession.completed_at.isnot(None))
        }
        modules = sorted(query.all(), key=_title_sort_key)
        current_app.logger.debug("Loaded %d modules for profile %s", len(modules), profile_id)
        return [ModuleCard(module=m, is_completed=m.id in completed_ids) for m in modules]

    @staticmethod
    def admin_stats() -> AdminStats:
        """Headline numbers for the admin dashboard."""

        completed = GameSession.query.filter(GameSession.completed_at.isnot(None)).all()
        average = mean(s.accuracy or 0 for s in completed)
        return AdminStats(
            total_pupils=UserRole.query.filter_by(role=UserRole.ROLE_PUPIL).count(),
            total_modules=Module.query.count(),
            total_sessions=len(completed),
            average_accuracy=round_half_up(average) if average is not None else 0,
        )
