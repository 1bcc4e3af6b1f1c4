from accelerate_vocab.modules.dashboard.logics.leaderboard import (
    COLLAPSED_SIZE,
    LeaderboardEntry,
    SORT_ACCURACY,
    SORT_MODULES,
    build_leaderboard,
    rank_players,
)


def test_new_pupil_is_last_with_gap_row():
    view = build_leaderboard('Sam T.', 0, 0)

    assert view.user_rank == 11
    assert view.total == 11
    assert len(view.rows) == COLLAPSED_SIZE + 1
    assert view.rows[-1].is_user
    assert view.gap_before == COLLAPSED_SIZE
    assert view.can_expand


def test_tie_keeps_checkpoint_player_ahead():
    ranked = rank_players(LeaderboardEntry('Sam T.', 12, 50), SORT_MODULES)

    names = [player.name for player in ranked]
    assert names.index('Noah B') < names.index('Sam T.')
    user = next(player for player in ranked if player.is_user)
    assert user.rank == 5


def test_user_in_top_six_has_no_extra_row():
    view = build_leaderboard('Sam T.', 12, 50)

    assert len(view.rows) == COLLAPSED_SIZE
    assert view.gap_before is None
    assert any(row.is_user for row in view.rows)


def test_seventh_place_is_appended_without_gap():
    view = build_leaderboard('Sam T.', 7, 50)

    assert view.user_rank == 7
    assert len(view.rows) == COLLAPSED_SIZE + 1
    assert view.gap_before is None


def test_sort_by_accuracy():
    view = build_leaderboard('Sam T.', 0, 100, sort_by=SORT_ACCURACY)

    assert view.user_rank == 1
    assert view.rows[0].is_user
    assert view.rows[1].name == 'Chloe H'


def test_expanded_shows_everyone():
    view = build_leaderboard('Sam T.', 3, 30, expanded=True)

    assert len(view.rows) == 11
    assert view.gap_before is None
    assert not view.can_expand
    assert [row.rank for row in view.rows] == list(range(1, 12))


def test_unknown_sort_falls_back_to_modules():
    view = build_leaderboard('Sam T.', 0, 100, sort_by='nonsense')

    assert view.sort_by == SORT_MODULES
    assert view.user_rank == 11
