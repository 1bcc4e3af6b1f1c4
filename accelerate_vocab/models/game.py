"""Game session results."""

from __future__ import annotations

from ..db_instance import db
from .user import utcnow


class GameSession(db.Model):
    """One play-through of a module by a pupil."""

    __tablename__ = 'game_sessions'
    __table_args__ = {'sqlite_autoincrement': True}

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('profiles.id'), nullable=False)
    module_id = db.Column(db.Integer, db.ForeignKey('modules.id'), nullable=False)
    game_number = db.Column(db.Integer)
    part_number = db.Column(db.Integer)
    score_total = db.Column(db.Integer, default=0)
    score_correct = db.Column(db.Integer, default=0)
    accuracy = db.Column(db.Float)
    started_at = db.Column(db.DateTime(timezone=True), default=utcnow)
    completed_at = db.Column(db.DateTime(timezone=True))
    time_taken_seconds = db.Column(db.Integer)

    module = db.relationship('Module', lazy=True)

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None


class SessionAnswer(db.Model):
    __tablename__ = 'session_answers'

    id = db.Column(db.Integer, primary_key=True)
    game_session_id = db.Column(db.Integer, db.ForeignKey('game_sessions.id'), nullable=False)
    vocab_item_id = db.Column(db.Integer, db.ForeignKey('vocab_items.id'), nullable=False)
    was_correct = db.Column(db.Boolean, nullable=False)
    answered_at = db.Column(db.DateTime(timezone=True), default=utcnow)


class PairAttempt(db.Model):
    __tablename__ = 'pair_attempts'

    id = db.Column(db.Integer, primary_key=True)
    game_session_id = db.Column(db.Integer, db.ForeignKey('game_sessions.id'), nullable=False)
    vocab_item_id = db.Column(db.Integer, db.ForeignKey('vocab_items.id'), nullable=False)
    attempts = db.Column(db.Integer, default=1, nullable=False)
    was_correct = db.Column(db.Boolean, default=True, nullable=False)
    time_taken_ms = db.Column(db.Integer)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow)
