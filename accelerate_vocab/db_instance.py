# File: accelerate_vocab/db_instance.py
# Purpose: The shared Flask-SQLAlchemy handle, plus per-connection SQLite tuning.
#
# Foreign-key enforcement stays at SQLite's default (off): deleting a module
# leaves its assignments, items and sessions behind.

import sqlite3

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import event
from sqlalchemy.engine import Engine

db = SQLAlchemy()

# Applied in order to every new SQLite connection
SQLITE_PRAGMAS = (
    ('journal_mode', 'WAL'),
    ('synchronous', 'NORMAL'),
    ('busy_timeout', '30000'),
)


@event.listens_for(Engine, 'connect')
def _tune_sqlite_connection(dbapi_connection, _connection_record):
    if not isinstance(dbapi_connection, sqlite3.Connection):
        return

    cursor = dbapi_connection.cursor()
    try:
        for name, value in SQLITE_PRAGMAS:
            cursor.execute(f'PRAGMA {name}={value}')
    finally:
        cursor.close()
