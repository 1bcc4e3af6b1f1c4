import random

from accelerate_vocab.modules.games.logics.matching import MatchingGame


ITEMS = [
    {'id': 1, 'word': 'happy', 'definition': 'feeling pleasure'},
    {'id': 2, 'word': 'brave', 'definition': 'ready to face danger'},
]


def _new_game(now=0.0):
    return MatchingGame.new(ITEMS, now, rng=random.Random(3), clear_delay_ms=1000)


def test_deals_a_word_and_definition_card_per_item():
    game = _new_game()

    keys = sorted(card['key'] for card in game.cards)
    assert keys == ['def-1', 'def-2', 'word-1', 'word-2']
    assert game.total_pairs == 2
    assert game.state == MatchingGame.ONBOARDING


def test_cards_are_ignored_until_started():
    game = _new_game()

    assert game.select('word-1', 1.0) == []
    assert game.selected == []


def test_correct_pair_then_clear():
    game = _new_game()
    game.start(10.0)

    game.select('word-1', 11.0)
    events = game.select('def-1', 12.0)

    assert events == [{'type': 'pair_matched', 'vocab_id': 1, 'attempts': 1}]
    assert game.state == MatchingGame.CHECKING
    assert game.next_tick_ms(12.0) == 1000

    # picks are ignored while the result shows
    game.select('word-2', 12.5)
    assert game.selected == ['word-1', 'def-1']

    game.advance(13.0)
    assert game.state == MatchingGame.IDLE
    assert game.selected == []
    assert game.matched == [1]


def test_wrong_pair_is_counted_but_not_matched():
    game = _new_game()
    game.start(0.0)

    game.select('word-1', 1.0)
    events = game.select('def-2', 2.0)

    assert events[0]['type'] == 'pair_missed'
    assert game.last_result == 'incorrect'
    game.advance(3.0)
    assert game.matched == []
    assert game.attempts == 1
    assert game.correct == 0


def test_matched_cards_cannot_be_reselected():
    game = _new_game()
    game.start(0.0)
    game.select('word-1', 1.0)
    game.select('def-1', 1.5)
    game.advance(3.0)

    game.select('word-1', 4.0)

    assert game.selected == []


def test_completion_reports_attempt_based_accuracy():
    game = _new_game()
    game.start(0.0)

    game.select('word-1', 1.0)
    game.select('def-2', 2.0)
    game.advance(3.0)
    game.select('word-1', 4.0)
    game.select('def-1', 5.0)
    game.advance(6.0)
    game.select('def-2', 7.0)
    game.select('word-2', 8.0)
    events = game.advance(20.0)

    assert game.is_complete
    assert events == [{
        'type': 'completed',
        'score_correct': 2,
        'score_total': 3,
        'accuracy': 67,
        'time_taken_seconds': 9,
    }]
    assert game.view(30.0)['accuracy'] == 67
    assert game.view(30.0)['elapsed_seconds'] == 9


def test_stored_state_holds_ids_not_text():
    game = _new_game()
    game.start(0.0)
    game.select('word-2', 1.0)

    data = game.to_dict()
    assert 'happy' not in repr(data)

    restored = MatchingGame.from_dict(data, texts={item['id']: item for item in ITEMS})
    assert MatchingGame.vocab_ids(data) == [1, 2]
    texts = {card['key']: card['text'] for card in restored.view(2.0)['cards']}
    assert texts['word-1'] == 'happy'
    assert texts['def-2'] == 'ready to face danger'
    assert restored.selected == ['word-2']
