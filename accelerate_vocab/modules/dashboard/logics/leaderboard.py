# File: accelerate_vocab/modules/dashboard/logics/leaderboard.py
# Purpose: Progress leaderboard shown on the pupil dashboard.
#          The pupil is ranked against a fixed roster of checkpoint players.

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import List, Optional

SORT_MODULES = 'modules'
SORT_ACCURACY = 'accuracy'
SORT_OPTIONS = (SORT_MODULES, SORT_ACCURACY)

COLLAPSED_SIZE = 6


@dataclass(frozen=True)
class LeaderboardEntry:
    name: str
    modules: int
    accuracy: int
    is_user: bool = False
    rank: Optional[int] = None


FICTIONAL_PLAYERS = (
    LeaderboardEntry('Sophie M', 2, 28),
    LeaderboardEntry('James L', 4, 34),
    LeaderboardEntry('Oliver T', 5, 37),
    LeaderboardEntry('Amy P', 6, 39),
    LeaderboardEntry('Lucas R', 8, 45),
    LeaderboardEntry('Emma K', 10, 52),
    LeaderboardEntry('Noah B', 12, 58),
    LeaderboardEntry('Mia D', 15, 65),
    LeaderboardEntry('Ethan W', 18, 72),
    LeaderboardEntry('Chloe H', 20, 80),
)


@dataclass
class LeaderboardView:
    """What the template needs to draw the table."""

    rows: List[LeaderboardEntry]
    sort_by: str
    expanded: bool
    user_rank: int
    total: int
    # index in ``rows`` before which a "..." gap row is drawn, if any
    gap_before: Optional[int] = None

    @property
    def can_expand(self) -> bool:
        return not self.expanded and self.total > COLLAPSED_SIZE


def rank_players(user: LeaderboardEntry, sort_by: str = SORT_MODULES) -> List[LeaderboardEntry]:
    """Merge the user into the roster and rank everyone, best first.

    Sorting is stable: on a tie the checkpoint player keeps the higher rank.
    """
    if sort_by not in SORT_OPTIONS:
        sort_by = SORT_MODULES

    players = list(FICTIONAL_PLAYERS) + [replace(user, is_user=True)]
    key = (lambda p: p.modules) if sort_by == SORT_MODULES else (lambda p: p.accuracy)
    ordered = sorted(players, key=key, reverse=True)
    return [replace(player, rank=index + 1) for index, player in enumerate(ordered)]


def build_leaderboard(
    name: str,
    modules_completed: int,
    average_accuracy: int,
    sort_by: str = SORT_MODULES,
    expanded: bool = False,
) -> LeaderboardView:
    """Top six plus the user's own row (collapsed), or everyone (expanded)."""

    if sort_by not in SORT_OPTIONS:
        sort_by = SORT_MODULES

    ranked = rank_players(LeaderboardEntry(name, modules_completed, average_accuracy), sort_by)
    user_row = next(player for player in ranked if player.is_user)

    if expanded:
        rows = ranked
        gap_before = None
    else:
        rows = ranked[:COLLAPSED_SIZE]
        gap_before = None
        if user_row.rank > COLLAPSED_SIZE:
            if user_row.rank > COLLAPSED_SIZE + 1:
                gap_before = len(rows)
            rows = rows + [user_row]

    return LeaderboardView(
        rows=rows,
        sort_by=sort_by,
        expanded=expanded,
        user_rank=user_row.rank,
        total=len(ranked),
        gap_before=gap_before,
    )
