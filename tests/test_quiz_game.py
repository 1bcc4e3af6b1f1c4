import pytest

from accelerate_vocab.modules.games.logics.quiz import QuizGame
from accelerate_vocab.modules.games.logics.state_machine import GameRuleError


def _item(item_id, correct='B'):
    return {
        'id': item_id,
        'word': f'word{item_id}',
        'options': [['A', 'one'], ['B', 'two'], ['C', 'three'], ['D', 'four']],
        'correct_option': correct,
    }


ITEMS = [_item(1, 'B'), _item(2, 'C'), {'id': 3, 'word': 'no options', 'options': []}]


def _started(limit=300):
    game = QuizGame.new(ITEMS, 0.0, time_limit_seconds=limit)
    game.start(100.0)
    return game


def test_items_without_options_are_not_questions():
    game = QuizGame.new(ITEMS, 0.0)

    assert game.question_count == 2
    assert game.remaining_seconds(50.0) == 300


def test_answering_before_start_is_refused():
    game = QuizGame.new(ITEMS, 0.0)

    with pytest.raises(GameRuleError):
        game.answer(0, 'A', 1.0)


def test_unknown_option_is_refused():
    game = _started()

    with pytest.raises(GameRuleError):
        game.answer(0, 'E', 101.0)
    with pytest.raises(GameRuleError):
        game.answer(5, 'A', 101.0)


def test_submit_needs_every_answer():
    game = _started()
    game.answer(0, 'b', 101.0)

    assert not game.can_submit
    with pytest.raises(GameRuleError):
        game.submit(102.0)


def test_answers_can_change_until_submitted():
    game = _started()
    game.answer(0, 'A', 101.0)
    game.answer(0, 'B', 102.0)
    game.answer(1, 'A', 103.0)

    events = game.submit(130.0)

    assert game.is_complete
    submitted = events[-1]
    assert submitted['type'] == 'submitted'
    assert submitted['score_correct'] == 1
    assert submitted['score_total'] == 2
    assert submitted['accuracy'] == 50
    assert submitted['time_taken_seconds'] == 30
    assert submitted['timed_out'] is False
    assert submitted['answers'] == [
        {'vocab_id': 1, 'was_correct': True},
        {'vocab_id': 2, 'was_correct': False},
    ]
    assert game.next_tick_ms(131.0) is None


def test_timer_submits_what_was_answered():
    game = _started(limit=60)
    game.answer(1, 'C', 110.0)

    assert game.remaining_seconds(130.0) == 30
    assert game.next_tick_ms(130.0) == 30000

    events = game.advance(160.0)

    assert game.is_complete
    assert events[0]['timed_out'] is True
    assert events[0]['score_correct'] == 1
    assert events[0]['score_total'] == 2
    assert events[0]['answers'] == [{'vocab_id': 2, 'was_correct': True}]
    with pytest.raises(GameRuleError):
        game.answer(0, 'B', 161.0)


def test_view_never_reveals_the_correct_letter():
    game = _started()
    game.answer(0, 'A', 101.0)

    view = game.view(101.0)

    assert view['question']['word'] == 'word1'
    assert view['question']['selected'] == 'A'
    assert view['answered'] == [True, False]
    assert 'correct' not in view['question']


def test_navigation_stays_in_range():
    game = _started()

    game.go_to(1, 101.0)
    assert game.current_index == 1
    with pytest.raises(GameRuleError):
        game.go_to(2, 102.0)


def test_stored_questions_leave_out_the_answer_key():
    game = _started()
    game.answer(0, 'B', 101.0)
    game.answer(1, 'C', 102.0)

    data = game.to_dict()
    assert all('correct' not in question for question in data['questions'])

    texts = {item['id']: item for item in ITEMS}
    restored = QuizGame.from_dict(data, texts=texts)
    assert restored.submit(103.0)[-1]['score_correct'] == 2
