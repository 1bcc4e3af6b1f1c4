"""Learning content: modules, their vocabulary and onboarding slides."""

from __future__ import annotations

import re

from ..db_instance import db
from .user import utcnow


class Module(db.Model):
    """A levelled set of vocabulary items played through one game type."""

    __tablename__ = 'modules'
    # Ids are never reused; rows left behind by a delete must not re-attach.
    __table_args__ = {'sqlite_autoincrement': True}

    GAME_MATCHING = 'matching'
    GAME_MULTIPLE_CHOICE = 'multiple_choice'
    GAME_SYNONYM_MATCH = 'synonym_match'
    GAME_TYPES = (GAME_MATCHING, GAME_MULTIPLE_CHOICE, GAME_SYNONYM_MATCH)
    GAME_TYPE_LABELS = {
        GAME_MATCHING: 'Matching',
        GAME_MULTIPLE_CHOICE: 'Multiple Choice',
        GAME_SYNONYM_MATCH: 'Synonym Match',
    }

    LEVELS = ('Kickstart', 'Intermediate', 'Advanced')

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text)
    subject = db.Column(db.String(120))
    level = db.Column(db.String(50))
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    game_type = db.Column(db.String(30), default=GAME_MATCHING, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow)

    # Deleting a module leaves dependent rows untouched.
    vocab_items = db.relationship(
        'VocabItem', backref='module', lazy=True, passive_deletes='all'
    )
    assignments = db.relationship(
        'ModuleAssignment', backref='module', lazy=True, passive_deletes='all'
    )
    onboarding_slides = db.relationship(
        'OnboardingSlide',
        backref='module',
        lazy=True,
        order_by='OnboardingSlide.slide_number',
        passive_deletes='all',
    )

    _NUMBER_RE = re.compile(r'\d+')

    @property
    def title_number(self) -> int | None:
        """First number found in the title (``"Unit 12: Space"`` -> 12)."""

        match = self._NUMBER_RE.search(self.title or '')
        return int(match.group()) if match else None

    @property
    def game_type_label(self) -> str:
        return self.GAME_TYPE_LABELS.get(self.game_type, self.game_type)


class ModuleAssignment(db.Model):
    """Grants a pupil access to a module."""

    __tablename__ = 'module_assignments'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('profiles.id'), nullable=False)
    module_id = db.Column(db.Integer, db.ForeignKey('modules.id'), nullable=False)
    assigned_at = db.Column(db.DateTime(timezone=True), default=utcnow)

    __table_args__ = (db.UniqueConstraint('user_id', 'module_id', name='_user_module_uc'),)


class VocabItem(db.Model):
    """A word and its definition; multiple-choice modules add four options."""

    __tablename__ = 'vocab_items'
    __table_args__ = {'sqlite_autoincrement': True}

    OPTION_LETTERS = ('A', 'B', 'C', 'D')

    id = db.Column(db.Integer, primary_key=True)
    module_id = db.Column(db.Integer, db.ForeignKey('modules.id'), nullable=False)
    word = db.Column(db.String(255), nullable=False)
    definition = db.Column(db.Text, nullable=False)
    example = db.Column(db.Text)
    category = db.Column(db.String(120))
    option_a = db.Column(db.Text)
    option_b = db.Column(db.Text)
    option_c = db.Column(db.Text)
    option_d = db.Column(db.Text)
    correct_option = db.Column(db.String(1))
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow)

    @property
    def options(self) -> list[tuple[str, str]]:
        """``[(letter, text), ...]`` for the options that are set."""

        values = (self.option_a, self.option_b, self.option_c, self.option_d)
        return [(letter, text) for letter, text in zip(self.OPTION_LETTERS, values) if text]


class OnboardingSlide(db.Model):
    """One of the three intro slides shown before a module's game."""

    __tablename__ = 'module_onboarding_slides'

    id = db.Column(db.Integer, primary_key=True)
    module_id = db.Column(db.Integer, db.ForeignKey('modules.id'), nullable=False)
    slide_number = db.Column(db.Integer, nullable=False)
    icon_name = db.Column(db.String(50), nullable=False)
    image_url = db.Column(db.String(512))
    content = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow)

    __table_args__ = (db.UniqueConstraint('module_id', 'slide_number', name='_module_slide_uc'),)
