import random

import pytest

from accelerate_vocab.modules.games.logics.state_machine import GameRuleError
from accelerate_vocab.modules.games.logics.synonym_match import FLIP_PROMPT, SynonymMatchGame as Game


def _items(count):
    return [{'id': n, 'word': f'word{n}', 'synonym': f'synonym{n}'} for n in range(1, count + 1)]


def _new(count=7, per_part=5):
    game = Game.new(_items(count), 0.0, pairs_per_part=per_part, rng=random.Random(11))
    game.start(0.0)
    return game


def _play_part(game, now, wrong_first=False):
    """Match every pair on the board; returns the clock and all events."""

    events = []
    for pair_id in list(game.current_ids):
        other = next((pid for pid in game.current_ids if pid != pair_id and pid not in game.matched), None)
        if wrong_first and other is not None:
            events += game.pick_left(pair_id, now)
            events += game.pick_right(other, now)
            now += 10
            events += game.advance(now)
        events += game.pick_left(pair_id, now)
        events += game.pick_right(pair_id, now)
        now += 10
        events += game.advance(now)
    return now, events


def test_parts_are_fixed_size_slices():
    game = _new(count=7, per_part=5)

    assert game.total_parts == 2
    assert game.current_ids == [1, 2, 3, 4, 5]
    assert sorted(game.left) == sorted(game.right) == [1, 2, 3, 4, 5]
    assert game.state == Game.OPEN_IDLE


def test_right_pick_needs_a_selected_word():
    game = _new()

    assert game.pick_right(1, 1.0) == []
    assert game.total_attempts == 0


def test_open_correct_match_shows_feedback_then_settles():
    game = _new()
    game.pick_left(2, 1.0)

    events = game.pick_right(2, 3.0)

    assert events == [{
        'type': 'pair_matched', 'vocab_id': 2, 'attempts': 1, 'time_taken_ms': 3000, 'game_number': 1,
    }]
    assert game.state == Game.OPEN_CORRECT
    view = game.view(3.0)
    assert view['feedback'] == 'correct'
    assert [card['highlight'] for card in view['right'] if card['id'] == 2] == ['correct']

    game.advance(5.4)
    assert game.state == Game.OPEN_CORRECT
    game.advance(5.5)
    assert game.state == Game.OPEN_IDLE
    assert game.matched == [2]
    assert all(card['id'] != 2 for card in game.view(5.5)['left'])


def test_open_wrong_match_reverts_and_keeps_the_word_selected():
    game = _new()
    game.pick_left(1, 1.0)
    game.pick_right(3, 1.0)

    assert game.state == Game.OPEN_INCORRECT
    assert game.view(1.0)['feedback'] == 'incorrect'

    game.advance(3.5)
    assert game.state == Game.OPEN_IDLE
    assert game.selected_left == 1
    assert game.picked_right is None

    events = game.pick_right(1, 4.0)
    assert events[0]['attempts'] == 2
    assert game.total_attempts == 2
    assert game.total_correct == 1


def test_part_complete_screen_and_continue():
    game = _new()

    now, events = _play_part(game, 1.0)

    assert game.state == Game.PART_COMPLETE
    # last pick at 41.0, settled at 43.5, part done at 44.0
    assert [e for e in events if e['type'] == 'part_completed'] == [
        {'type': 'part_completed', 'game_number': 1, 'part_number': 1, 'time_taken_seconds': 44}
    ]
    screen = game.view(now)['transition']
    assert screen['message'] == 'Part Complete!'
    assert screen['sub_message'] == "You've completed Part 1. Keep going!"

    game.continue_(now)
    assert game.state == Game.OPEN_IDLE
    assert game.part_number == 2
    assert game.current_ids == [6, 7]
    assert game.matched == []


def test_continue_is_refused_during_play():
    game = _new()

    with pytest.raises(GameRuleError):
        game.continue_(1.0)


def test_full_module_emits_one_completion():
    game = _new(count=7, per_part=5)
    all_events = []

    now, events = _play_part(game, 1.0)
    all_events += events
    game.continue_(now)
    now, events = _play_part(game, now)
    all_events += events

    assert game.state == Game.GAME_COMPLETE
    assert game.view(now)['transition']['message'] == "That's brilliant, well done!"

    game.continue_(now)
    assert game.state == Game.FLIP_IDLE
    assert (game.game_number, game.part_number) == (2, 1)

    now, events = _play_part(game, now, wrong_first=True)
    all_events += events
    assert game.state == Game.PART_COMPLETE
    game.continue_(now)
    now, events = _play_part(game, now)
    all_events += events

    assert game.state == Game.MODULE_COMPLETE
    assert game.is_complete
    completed = [e for e in all_events if e['type'] == 'completed']
    assert len(completed) == 1
    result = completed[0]
    assert result['score_correct'] == 14
    assert result['score_total'] == 14 + 4
    assert result['accuracy'] == 78
    assert result['game_number'] == 2
    assert result['part_number'] == 2
    assert len([e for e in all_events if e['type'] == 'part_completed']) == 4

    screen = game.view(now + 100)['transition']
    assert screen['message'] == 'Well Done!'
    assert 'You spent' in screen['sub_message']
    # the clock stops at completion
    assert game.view(now + 100)['elapsed_seconds'] == game.view(now)['elapsed_seconds']


def _flip_game():
    game = _new(count=5, per_part=5)
    now, _ = _play_part(game, 1.0)
    assert game.state == Game.GAME_COMPLETE
    game.continue_(now)
    return game, now


def test_flip_cards_start_face_down():
    game, now = _flip_game()

    view = game.view(now)

    assert all(not card['face_up'] and card['text'] == '' for card in view['left'] + view['right'])

    game.pick_left(3, now)
    view = game.view(now)
    flipped = [card for card in view['left'] if card['face_up']]
    assert [card['id'] for card in flipped] == [3]
    assert flipped[0]['text'] == 'word3'
    assert view['prompt'] == FLIP_PROMPT


def test_flip_same_card_twice_turns_it_back():
    game, now = _flip_game()

    game.pick_left(3, now)
    game.pick_left(3, now)

    assert game.selected_left is None


def test_flip_correct_timings():
    game, now = _flip_game()
    start = now + 100
    game.pick_left(4, start)
    game.pick_right(4, start)

    assert game.state == Game.FLIP_CORRECT_REVEAL
    game.advance(start + 0.79)
    assert game.state == Game.FLIP_CORRECT_REVEAL
    game.advance(start + 0.81)
    assert game.state == Game.FLIP_CORRECT_HIGHLIGHT
    game.advance(start + 1.61)
    assert game.state == Game.FLIP_CORRECT_FEEDBACK
    assert game.view(start + 1.61)['feedback'] == 'correct'
    game.advance(start + 2.99)
    assert game.state == Game.FLIP_CORRECT_FEEDBACK
    game.advance(start + 3.01)
    assert game.state == Game.FLIP_IDLE
    assert game.matched == [4]


def test_flip_incorrect_timings():
    game, now = _flip_game()
    start = now + 100
    game.pick_left(1, start)
    game.pick_right(2, start)

    assert game.state == Game.FLIP_INCORRECT_REVEAL
    game.advance(start + 0.51)
    assert game.state == Game.FLIP_INCORRECT_HIGHLIGHT
    game.advance(start + 1.11)
    assert game.state == Game.FLIP_INCORRECT_FEEDBACK
    assert game.view(start + 1.11)['feedback'] == 'incorrect'
    game.advance(start + 2.55)
    assert game.state == Game.FLIP_INCORRECT_FEEDBACK
    game.advance(start + 2.65)
    assert game.state == Game.FLIP_IDLE
    assert game.selected_left is None
    assert game.matched == []


def test_late_poll_fires_the_whole_chain():
    game, now = _flip_game()
    start = now + 100
    game.pick_left(1, start)
    game.pick_right(1, start)

    game.advance(start + 60)

    assert game.state == Game.FLIP_IDLE
    assert game.matched == [1]


def test_overall_progress():
    game = _new(count=7, per_part=5)

    assert game.overall_progress == 25
    game.game_number, game.part_number = 2, 2
    assert game.overall_progress == 100


def test_stored_state_round_trip_keeps_the_board():
    game = _new()
    game.pick_left(2, 1.0)

    data = game.to_dict()
    restored = Game.from_dict(data, texts={item['id']: item for item in _items(7)})

    assert 'word2' not in repr(data)
    assert Game.vocab_ids(data) == [1, 2, 3, 4, 5, 6, 7]
    assert restored.left == game.left
    assert restored.selected_left == 2
    assert restored.view(1.0)['left'][0]['text'].startswith('word')
