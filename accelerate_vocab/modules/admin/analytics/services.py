"""
Analytics Service - loads sessions and assignments and hands them to the
pure aggregation functions in ``logics.aggregation``.
"""
from __future__ import annotations

from collections import defaultdict
from typing import List, Tuple

from flask import current_app

from .logics.aggregation import ModulePerformance, PupilSummary, module_performance, summarize_pupil
from ..user_management.services import PupilService
from ....models import GameSession, Module, ModuleAssignment


class AnalyticsService:
    """Read-only reporting for admins."""

    @staticmethod
    def pupil_overview() -> List[PupilSummary]:
        """One summary row per pupil."""

        pupils = PupilService.list_pupils()
        if not pupils:
            return []

        pupil_ids = [pupil.id for pupil in pupils]
        sessions = defaultdict(list)
        for session in GameSession.query.filter(GameSession.user_id.in_(pupil_ids)):
            sessions[session.user_id].append(session)

        current_app.logger.debug(f"Building analytics for {len(pupils)} pupils")
        return [summarize_pupil(pupil, sessions[pupil.id], pupil.module_ids) for pupil in pupils]

    @staticmethod
    def pupil_report(profile_id: int) -> Tuple[PupilSummary, List[ModulePerformance]]:
        """Summary plus per-module performance over active modules."""

        profile = PupilService.get_pupil(profile_id)
        record = next(p for p in PupilService.list_pupils() if p.id == profile.id)

        sessions = GameSession.query.filter_by(user_id=profile.id).all()
        assigned = [
            module_id for (module_id,) in
            ModuleAssignment.query.with_entities(ModuleAssignment.module_id).filter_by(user_id=profile.id)
        ]
        modules = Module.query.filter(Module.is_active.is_(True)).all()

        return summarize_pupil(record, sessions, assigned), module_performance(modules, sessions, assigned)
