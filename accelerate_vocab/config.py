# File: accelerate_vocab/config.py
# Purpose: Application settings, read from the environment with sensible defaults.

import os

# Project root (the directory holding the accelerate_vocab package)
BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))

# Default SQLite database file, under database/ at the project root
DATABASE_PATH = os.path.join(BASE_DIR, "database", "accelerate_vocab.db")


def _int_env(name, default):
    value = os.environ.get(name)
    if value is None or value == '':
        return default
    return int(value)


class Config:
    """
    Configuration for the Flask application.
    """
    APP_NAME = 'Accelerate Vocab'

    # Secret key protecting the session cookie
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'accelerate-vocab-development-key'

    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or f'sqlite:///{DATABASE_PATH}'
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Optional bootstrap administrator, created on first start when no admin exists
    DEFAULT_ADMIN_EMAIL = os.environ.get('DEFAULT_ADMIN_EMAIL')
    DEFAULT_ADMIN_PASSWORD = os.environ.get('DEFAULT_ADMIN_PASSWORD')

    # Logging
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    LOG_DIR = os.environ.get('LOG_DIR') or os.path.join(BASE_DIR, 'logs')
    LOG_FORMAT = os.environ.get('LOG_FORMAT', 'text')

    # Admin tables
    ITEMS_PER_PAGE = 20

    # Spreadsheet imports are written here before pandas reads them
    UPLOAD_FOLDER = os.path.join(BASE_DIR, 'uploads')
    MAX_CONTENT_LENGTH = 5 * 1024 * 1024

    # Simple matching game
    MATCHING_PAIR_COUNT = _int_env('MATCHING_PAIR_COUNT', 6)
    MATCHING_CLEAR_DELAY_MS = 1000

    # Multiple-choice quiz
    QUIZ_TIME_LIMIT_SECONDS = _int_env('QUIZ_TIME_LIMIT_SECONDS', 300)

    # Synonym match
    SYNONYM_ITEM_LIMIT = _int_env('SYNONYM_ITEM_LIMIT', 15)
    SYNONYM_PAIRS_PER_PART = _int_env('SYNONYM_PAIRS_PER_PART', 5)

    # Leave room for "create test users" to be switched off in production
    ENABLE_TEST_USER_ROUTE = os.environ.get('ENABLE_TEST_USER_ROUTE', '1') not in ('0', 'false', 'False')

    # Make sure the database directory exists at start-up
    db_dir = os.path.dirname(DATABASE_PATH)
    if not os.path.exists(db_dir):
        os.makedirs(db_dir)

    os.makedirs(UPLOAD_FOLDER, exist_ok=True)
