from datetime import datetime, timezone

from accelerate_vocab import db
from accelerate_vocab.models import GameSession

from conftest import assign, login, make_module


def _completed(profile, module, accuracy):
    db.session.add(GameSession(
        user_id=profile.id,
        module_id=module.id,
        score_total=4,
        score_correct=3,
        accuracy=accuracy,
        time_taken_seconds=30,
        completed_at=datetime.now(timezone.utc),
    ))
    db.session.commit()


def test_pupil_without_modules_sees_the_empty_state(client, pupil):
    login(client, 'pupil@example.com')

    html = client.get('/dashboard').get_data(as_text=True)

    assert 'Welcome back, Sam Taylor' in html
    assert 'No modules assigned yet' in html


def test_modules_are_listed_in_title_number_order(client, pupil):
    for title in ('Unit 10: Space', 'Unit 2: Food', 'Unit 1: Animals'):
        assign(pupil, make_module(title=title))
    login(client, 'pupil@example.com')

    html = client.get('/dashboard').get_data(as_text=True)

    positions = [html.index(title) for title in ('Unit 1: Animals', 'Unit 2: Food', 'Unit 10: Space')]
    assert positions == sorted(positions)


def test_inactive_and_unassigned_modules_are_hidden(client, pupil):
    assign(pupil, make_module(title='Unit 1: Animals'))
    assign(pupil, make_module(title='Unit 2: Hidden', is_active=False))
    make_module(title='Unit 3: Not mine')
    login(client, 'pupil@example.com')

    html = client.get('/dashboard').get_data(as_text=True)

    assert 'Unit 1: Animals' in html
    assert 'Unit 2: Hidden' not in html
    assert 'Unit 3: Not mine' not in html


def test_level_filter(client, pupil):
    assign(pupil, make_module(title='Unit 1: Animals', level='Kickstart'))
    assign(pupil, make_module(title='Unit 2: Weather', level='Advanced'))
    login(client, 'pupil@example.com')

    html = client.get('/dashboard?level=Advanced').get_data(as_text=True)

    assert 'Unit 2: Weather' in html
    assert 'Unit 1: Animals' not in html


def test_unknown_level_shows_everything(client, pupil):
    assign(pupil, make_module(title='Unit 1: Animals', level='Kickstart'))
    assign(pupil, make_module(title='Unit 2: Weather', level='Advanced'))
    login(client, 'pupil@example.com')

    html = client.get('/dashboard?level=Expert').get_data(as_text=True)

    assert 'Unit 1: Animals' in html
    assert 'Unit 2: Weather' in html


def test_completed_modules_offer_a_repeat_and_count_in_stats(client, pupil):
    done = make_module(title='Unit 1: Animals')
    fresh = make_module(title='Unit 2: Food')
    assign(pupil, done)
    assign(pupil, fresh)
    _completed(pupil, done, 75)
    _completed(pupil, done, 90)
    login(client, 'pupil@example.com')

    html = client.get('/dashboard').get_data(as_text=True)

    assert html.count('Repeat') == 1
    # two attempts, mean accuracy 82.5 rounds half up
    assert 'Total Attempts</span><span class="stat-value">2</span>' in html
    assert 'Average Accuracy</span><span class="stat-value">83%</span>' in html
    assert 'Modules Completed</span><span class="stat-value">1</span>' in html


def test_leaderboard_includes_the_pupil(client, pupil):
    login(client, 'pupil@example.com')

    html = client.get('/dashboard?sort=accuracy&expanded=1').get_data(as_text=True)

    assert 'Sam T. (You)' in html
    assert 'Show less' in html


def test_admin_dashboard_shows_totals(client, admin, pupil):
    module = make_module()
    _completed(pupil, module, 80)
    login(client, 'admin@example.com')

    html = client.get('/dashboard').get_data(as_text=True)

    assert 'Admin Dashboard' in html
    assert 'Total Pupils</span><span class="stat-value">1</span>' in html
    assert 'Sessions Completed</span><span class="stat-value">1</span>' in html
    assert 'Average Accuracy</span><span class="stat-value">80%</span>' in html
