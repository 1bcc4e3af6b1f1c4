import pytest

from accelerate_vocab.models import GameSession, Module, PairAttempt, SessionAnswer
from accelerate_vocab.modules.games.services import GameRunner

from conftest import assign, login, make_items, make_module


@pytest.fixture
def clock(monkeypatch):
    now = {'value': 1000.0}
    monkeypatch.setattr(GameRunner, 'clock', staticmethod(lambda: now['value']))
    return now


@pytest.fixture
def signed_in_pupil(client, pupil):
    login(client, 'pupil@example.com')
    return pupil


def _post(client, path, body=None):
    response = client.post(path, json=body or {})
    return response, response.get_json()


def test_opening_a_game_creates_an_open_session(client, signed_in_pupil, clock):
    module = make_module()
    make_items(module, 2)
    assign(signed_in_pupil, module)

    response = client.get(f'/game/{module.id}')

    assert response.status_code == 200
    assert b'game-config' in response.data
    game_session = GameSession.query.one()
    assert game_session.user_id == signed_in_pupil.id
    assert game_session.completed_at is None
    assert game_session.score_total == 2


def test_module_without_vocabulary_redirects_without_a_session(client, signed_in_pupil, clock):
    module = make_module()
    assign(signed_in_pupil, module)

    response = client.get(f'/game/{module.id}', follow_redirects=True)

    assert b'No vocabulary' in response.data
    assert GameSession.query.count() == 0


def test_quiz_without_questions_redirects(client, signed_in_pupil, clock):
    module = make_module(game_type=Module.GAME_MULTIPLE_CHOICE)
    make_items(module, 2)
    assign(signed_in_pupil, module)

    response = client.get(f'/game/multiple-choice/{module.id}', follow_redirects=True)

    assert b'No questions available' in response.data
    assert GameSession.query.count() == 0


def test_wrong_game_page_redirects_to_the_module_game(client, signed_in_pupil, clock):
    module = make_module()
    make_items(module, 2)
    assign(signed_in_pupil, module)

    response = client.get(f'/game/multiple-choice/{module.id}')

    assert response.status_code == 302
    assert response.headers['Location'].endswith(f'/game/{module.id}')


def test_unassigned_module_is_refused(client, signed_in_pupil, clock):
    module = make_module()
    make_items(module, 2)

    response = client.get(f'/game/{module.id}')

    assert response.status_code == 302
    assert response.headers['Location'].endswith('/dashboard')
    assert GameSession.query.count() == 0


def test_state_without_a_game_is_a_json_404(client, signed_in_pupil, clock):
    module = make_module()

    response = client.get(f'/game/api/matching/{module.id}/state')

    assert response.status_code == 404
    assert response.get_json()['code'] == 'NOT_FOUND'


def test_unknown_game_name_is_a_json_404(client, signed_in_pupil, clock):
    response = client.get('/game/api/chess/1/state')

    assert response.status_code == 404
    assert response.get_json()['success'] is False


def test_matching_game_through_the_api(client, signed_in_pupil, clock):
    module = make_module()
    first, second = make_items(module, 2)
    assign(signed_in_pupil, module)
    client.get(f'/game/{module.id}')
    base = f'/game/api/matching/{module.id}'

    _, payload = _post(client, f'{base}/start')
    assert payload['data']['state'] == 'idle'

    clock['value'] = 1001.0
    _post(client, f'{base}/select', {'key': f'word-{first.id}'})
    _, payload = _post(client, f'{base}/select', {'key': f'def-{second.id}'})
    assert payload['data']['last_result'] == 'incorrect'
    assert payload['data']['next_tick_ms'] == 1000

    clock['value'] = 1003.0
    for item in (first, second):
        _post(client, f'{base}/select', {'key': f'word-{item.id}'})
        _, payload = _post(client, f'{base}/select', {'key': f'def-{item.id}'})
        assert payload['data']['last_result'] == 'correct'
        clock['value'] += 2

    payload = client.get(f'{base}/state').get_json()
    assert payload['data']['state'] == 'complete'
    assert payload['data']['accuracy'] == 67

    game_session = GameSession.query.one()
    assert game_session.completed_at is not None
    assert game_session.score_correct == 2
    assert game_session.score_total == 3
    assert game_session.accuracy == 67
    assert SessionAnswer.query.filter_by(game_session_id=game_session.id, was_correct=True).count() == 2
    assert PairAttempt.query.count() == 0


def test_quiz_answer_before_start_is_a_rule_error(client, signed_in_pupil, clock):
    module = make_module(game_type=Module.GAME_MULTIPLE_CHOICE)
    make_items(module, 2, with_options=True)
    assign(signed_in_pupil, module)
    client.get(f'/game/multiple-choice/{module.id}')

    response, payload = _post(client, f'/game/api/quiz/{module.id}/answer', {'index': 0, 'option': 'A'})

    assert response.status_code == 400
    assert payload['code'] == 'GAME_RULE'


def test_quiz_submission_is_scored_and_saved(client, signed_in_pupil, clock):
    module = make_module(game_type=Module.GAME_MULTIPLE_CHOICE)
    make_items(module, 2, with_options=True)
    assign(signed_in_pupil, module)
    client.get(f'/game/multiple-choice/{module.id}')
    base = f'/game/api/quiz/{module.id}'

    _, payload = _post(client, f'{base}/start')
    assert payload['data']['remaining_seconds'] == 300

    clock['value'] = 1010.0
    _post(client, f'{base}/answer', {'index': 0, 'option': 'A'})
    response, payload = _post(client, f'{base}/submit')
    assert response.status_code == 400

    _post(client, f'{base}/answer', {'index': 1, 'option': 'b'})
    _, payload = _post(client, f'{base}/submit')

    result = payload['data']['result']
    assert payload['data']['state'] == 'submitted'
    assert result['score_correct'] == 1
    assert result['score_total'] == 2
    assert result['accuracy'] == 50
    assert result['timed_out'] is False

    game_session = GameSession.query.one()
    assert game_session.completed_at is not None
    assert game_session.accuracy == 50
    assert game_session.time_taken_seconds == 10
    assert SessionAnswer.query.count() == 2
    assert SessionAnswer.query.filter_by(was_correct=True).count() == 1


def test_quiz_times_out_on_the_next_poll(client, signed_in_pupil, clock):
    module = make_module(game_type=Module.GAME_MULTIPLE_CHOICE)
    make_items(module, 2, with_options=True)
    assign(signed_in_pupil, module)
    client.get(f'/game/multiple-choice/{module.id}')
    base = f'/game/api/quiz/{module.id}'
    _post(client, f'{base}/start')
    _post(client, f'{base}/answer', {'index': 0, 'option': 'A'})

    clock['value'] = 1400.0
    payload = client.get(f'{base}/state').get_json()

    assert payload['data']['result']['timed_out'] is True
    assert payload['data']['result']['score_correct'] == 1
    assert GameSession.query.one().completed_at is not None


def test_synonym_match_records_answers_and_pair_attempts(client, signed_in_pupil, clock):
    module = make_module(game_type=Module.GAME_SYNONYM_MATCH)
    first, second = make_items(module, 2)
    assign(signed_in_pupil, module)

    response = client.get(f'/game/synonym-match/{module.id}')
    assert response.status_code == 200
    game_session = GameSession.query.one()
    assert (game_session.game_number, game_session.part_number) == (1, 1)

    base = f'/game/api/synonym/{module.id}'
    _post(client, f'{base}/start')
    clock['value'] = 1002.0
    _post(client, f'{base}/left', {'id': first.id})
    _, payload = _post(client, f'{base}/right', {'id': second.id})
    assert payload['data']['state'] == 'open_incorrect'

    clock['value'] = 1005.0
    _, payload = _post(client, f'{base}/right', {'id': first.id})
    assert payload['data']['state'] == 'open_correct'

    attempt = PairAttempt.query.one()
    assert attempt.vocab_item_id == first.id
    assert attempt.attempts == 2
    assert attempt.was_correct is True
    assert SessionAnswer.query.filter_by(vocab_item_id=first.id, was_correct=True).count() == 1


def test_synonym_pick_needs_a_numeric_id(client, signed_in_pupil, clock):
    module = make_module(game_type=Module.GAME_SYNONYM_MATCH)
    make_items(module, 2)
    assign(signed_in_pupil, module)
    client.get(f'/game/synonym-match/{module.id}')

    response, payload = _post(client, f'/game/api/synonym/{module.id}/left', {'id': 'abc'})

    assert response.status_code == 400
    assert payload['code'] == 'GAME_RULE'


def test_admin_may_preview_an_unassigned_module(client, admin, clock):
    module = make_module()
    make_items(module, 2)
    login(client, 'admin@example.com')

    response = client.get(f'/game/{module.id}')

    assert response.status_code == 200
    assert GameSession.query.one().user_id == admin.id


def test_quiz_cookie_carries_no_answer_key(client, signed_in_pupil, clock):
    module = make_module(game_type=Module.GAME_MULTIPLE_CHOICE)
    make_items(module, 2, with_options=True)
    assign(signed_in_pupil, module)
    client.get(f'/game/multiple-choice/{module.id}')

    # the session cookie is signed, not encrypted
    with client.session_transaction() as stored:
        questions = stored['quiz_game']['machine']['questions']

    assert len(questions) == 2
    for question in questions:
        assert set(question) == {'id', 'letters'}
