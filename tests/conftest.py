import os
import sys

import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from accelerate_vocab import create_app, db
from accelerate_vocab.config import Config
from accelerate_vocab.models import Module, ModuleAssignment, Profile, User, UserRole, VocabItem


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_ENGINE_OPTIONS = {
        'connect_args': {'check_same_thread': False}
    }
    WTF_CSRF_ENABLED = False
    SECRET_KEY = 'test-secret'
    LOG_LEVEL = 'WARNING'
    ENABLE_TEST_USER_ROUTE = True
    DEFAULT_ADMIN_EMAIL = None
    DEFAULT_ADMIN_PASSWORD = None


@pytest.fixture
def app(tmp_path):
    class _Config(TestConfig):
        LOG_DIR = str(tmp_path / 'logs')
        UPLOAD_FOLDER = str(tmp_path / 'uploads')

    app = create_app(_Config)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def make_account(email, name, role, password='password'):
    user = User(email=email)
    user.set_password(password)
    db.session.add(user)
    db.session.flush()
    profile = Profile(auth_id=user.user_id, name=name)
    db.session.add(profile)
    db.session.flush()
    db.session.add(UserRole(user_id=profile.id, role=role))
    db.session.commit()
    return profile


def make_module(title='Unit 1: Animals', game_type=Module.GAME_MATCHING, level='Kickstart', is_active=True):
    module = Module(title=title, game_type=game_type, level=level, is_active=is_active)
    db.session.add(module)
    db.session.commit()
    return module


def make_items(module, count, with_options=False):
    items = []
    for number in range(1, count + 1):
        item = VocabItem(module_id=module.id, word=f'word{number}', definition=f'meaning{number}')
        if with_options:
            item.option_a = f'meaning{number}'
            item.option_b = f'wrong{number}b'
            item.option_c = f'wrong{number}c'
            item.option_d = f'wrong{number}d'
            item.correct_option = 'A'
        items.append(item)
    db.session.add_all(items)
    db.session.commit()
    return items


def assign(profile, module):
    db.session.add(ModuleAssignment(user_id=profile.id, module_id=module.id))
    db.session.commit()


def login(client, email, password='password'):
    return client.post('/login', data={'email': email, 'password': password}, follow_redirects=True)


@pytest.fixture
def admin(app):
    return make_account('admin@example.com', 'Ada Admin', UserRole.ROLE_ADMIN)


@pytest.fixture
def pupil(app):
    return make_account('pupil@example.com', 'Sam Taylor', UserRole.ROLE_PUPIL)
