"""
Game Services - loading game content, persisting sessions and driving the
per-game state machines.

Layers:
    GameContentService  reads modules and vocabulary for a game
    GameSessionService  writes game_sessions / session_answers / pair_attempts
    GameRunner          keeps each pupil's machine in the Flask session and
                        turns machine events into session writes
"""
from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, List, Optional, Sequence

from flask import current_app, session
from sqlalchemy.exc import SQLAlchemyError

from ...core.error_handlers import AuthorizationError, NotFoundError
from ...core.signals import answer_recorded, session_completed, session_started
from ...models import GameSession, Module, ModuleAssignment, PairAttempt, SessionAnswer, VocabItem, db
from ...models.user import utcnow
from .logics.matching import MatchingGame
from .logics.quiz import QuizGame
from .logics.state_machine import Event
from .logics.synonym_match import SynonymMatchGame

logger = logging.getLogger(__name__)

GAME_CLASSES = {
    Module.GAME_MATCHING: MatchingGame,
    Module.GAME_MULTIPLE_CHOICE: QuizGame,
    Module.GAME_SYNONYM_MATCH: SynonymMatchGame,
}

# One Flask-session key per game type
SESSION_KEYS = {
    Module.GAME_MATCHING: 'matching_game',
    Module.GAME_MULTIPLE_CHOICE: 'quiz_game',
    Module.GAME_SYNONYM_MATCH: 'synonym_game',
}

# Endpoint serving each game type
GAME_ENDPOINTS = {
    Module.GAME_MATCHING: 'games.matching',
    Module.GAME_MULTIPLE_CHOICE: 'games.multiple_choice',
    Module.GAME_SYNONYM_MATCH: 'games.synonym_match',
}


def game_endpoint(game_type: Optional[str]) -> str:
    return GAME_ENDPOINTS.get(game_type, GAME_ENDPOINTS[Module.GAME_MATCHING])


def item_payload(item: VocabItem) -> Dict[str, Any]:
    """Text of one vocabulary item in the shape the game machines read."""

    return {
        'id': item.id,
        'word': item.word,
        'definition': item.definition,
        'synonym': item.definition,
        'options': [[letter, text] for letter, text in item.options],
        'correct_option': item.correct_option,
    }


class GameContentService:
    """Read side: modules and vocabulary for the game pages."""

    @staticmethod
    def get_module(module_id: int) -> Module:
        module = db.session.get(Module, module_id)
        if module is None:
            raise NotFoundError('Module not found', resource='module')
        return module

    @staticmethod
    def check_access(module: Module, auth) -> None:
        """Pupils may only play modules assigned to them; admins may preview any."""

        if auth.is_admin:
            return
        assigned = ModuleAssignment.query.filter_by(user_id=auth.profile_id, module_id=module.id).first()
        if assigned is None:
            raise AuthorizationError('This module is not assigned to you')

    @staticmethod
    def matching_items(module_id: int, limit: int) -> List[Dict[str, Any]]:
        items = (
            VocabItem.query.filter_by(module_id=module_id)
            .order_by(VocabItem.id)
            .limit(limit)
            .all()
        )
        return [item_payload(item) for item in items]

    @staticmethod
    def quiz_items(module_id: int) -> List[Dict[str, Any]]:
        """Every item with a first option; those are the quiz questions."""

        items = (
            VocabItem.query.filter(VocabItem.module_id == module_id, VocabItem.option_a.isnot(None))
            .order_by(VocabItem.id)
            .all()
        )
        return [item_payload(item) for item in items if item.option_a]

    @staticmethod
    def synonym_items(module_id: int, limit: int) -> List[Dict[str, Any]]:
        return GameContentService.matching_items(module_id, limit)

    @staticmethod
    def texts_for(vocab_ids: Sequence[int]) -> Dict[int, Dict[str, Any]]:
        if not vocab_ids:
            return {}
        items = VocabItem.query.filter(VocabItem.id.in_(list(vocab_ids))).all()
        return {item.id: item_payload(item) for item in items}


class GameSessionService:
    """Write side: one game_sessions row per play-through.

    Creating the row is required for a game to start, so failures propagate.
    Answer, attempt and progress writes are best effort: a failure is rolled
    back and logged, and play carries on.
    """

    @staticmethod
    def create_session(
        profile_id: int,
        module: Module,
        score_total: int,
        game_number: Optional[int] = None,
        part_number: Optional[int] = None,
    ) -> GameSession:
        game_session = GameSession(
            user_id=profile_id,
            module_id=module.id,
            score_total=score_total,
            score_correct=0,
            game_number=game_number,
            part_number=part_number,
        )
        try:
            db.session.add(game_session)
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            current_app.logger.error(f"Error creating game session for module {module.id}: {exc}")
            raise

        session_started.send(
            None,
            session_id=game_session.id,
            user_id=profile_id,
            module_id=module.id,
            game_type=module.game_type,
        )
        return game_session

    @staticmethod
    def record_answer(session_id: int, vocab_item_id: int, was_correct: bool) -> bool:
        try:
            db.session.add(SessionAnswer(
                game_session_id=session_id,
                vocab_item_id=vocab_item_id,
                was_correct=was_correct,
            ))
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            current_app.logger.error(f"Error recording answer for session {session_id}: {exc}")
            return False

        answer_recorded.send(None, session_id=session_id, vocab_item_id=vocab_item_id, was_correct=was_correct)
        return True

    @staticmethod
    def record_pair_attempt(session_id: int, vocab_item_id: int, attempts: int, time_taken_ms: int) -> bool:
        try:
            db.session.add(PairAttempt(
                game_session_id=session_id,
                vocab_item_id=vocab_item_id,
                attempts=attempts,
                was_correct=True,
                time_taken_ms=time_taken_ms,
            ))
            db.session.commit()
            return True
        except SQLAlchemyError as exc:
            db.session.rollback()
            current_app.logger.error(f"Error recording pair attempt for session {session_id}: {exc}")
            return False

    @staticmethod
    def update_progress(session_id: int, game_number: int, part_number: int, time_taken_seconds: int) -> bool:
        """Record which game and part a synonym-match session has reached."""

        try:
            game_session = db.session.get(GameSession, session_id)
            if game_session is None or game_session.is_completed:
                return False
            game_session.game_number = game_number
            game_session.part_number = part_number
            game_session.time_taken_seconds = time_taken_seconds
            db.session.commit()
            return True
        except SQLAlchemyError as exc:
            db.session.rollback()
            current_app.logger.error(f"Error updating progress for session {session_id}: {exc}")
            return False

    @staticmethod
    def complete_session(
        session_id: int,
        score_correct: int,
        score_total: int,
        accuracy: Optional[float],
        time_taken_seconds: int,
        game_number: Optional[int] = None,
        part_number: Optional[int] = None,
    ) -> bool:
        """Finalise a session. A session that is already complete is left alone."""

        try:
            game_session = db.session.get(GameSession, session_id)
            if game_session is None:
                logger.warning("Cannot complete missing session %s", session_id)
                return False
            if game_session.is_completed:
                logger.warning("Session %s is already complete", session_id)
                return False

            game_session.score_correct = score_correct
            game_session.score_total = score_total
            game_session.accuracy = accuracy if accuracy is not None else 0
            game_session.time_taken_seconds = time_taken_seconds
            game_session.completed_at = utcnow()
            if game_number is not None:
                game_session.game_number = game_number
            if part_number is not None:
                game_session.part_number = part_number
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            current_app.logger.error(f"Error completing session {session_id}: {exc}")
            return False

        session_completed.send(
            None,
            session_id=session_id,
            user_id=game_session.user_id,
            module_id=game_session.module_id,
            score_correct=score_correct,
            score_total=score_total,
            accuracy=game_session.accuracy,
        )
        return True

    @staticmethod
    def apply_events(session_id: Optional[int], events: List[Event]) -> None:
        """Turn machine events into database writes."""

        if session_id is None:
            return
        for event in events:
            kind = event.get('type')
            if kind == 'pair_matched':
                GameSessionService.record_answer(session_id, event['vocab_id'], True)
                if 'time_taken_ms' in event:
                    GameSessionService.record_pair_attempt(
                        session_id, event['vocab_id'], event['attempts'], event['time_taken_ms']
                    )
            elif kind == 'part_completed':
                GameSessionService.update_progress(
                    session_id, event['game_number'], event['part_number'], event['time_taken_seconds']
                )
            elif kind == 'submitted':
                for answer in event['answers']:
                    GameSessionService.record_answer(session_id, answer['vocab_id'], answer['was_correct'])
                GameSessionService.complete_session(
                    session_id,
                    event['score_correct'],
                    event['score_total'],
                    event['accuracy'],
                    event['time_taken_seconds'],
                )
            elif kind == 'completed':
                GameSessionService.complete_session(
                    session_id,
                    event['score_correct'],
                    event['score_total'],
                    event['accuracy'],
                    event['time_taken_seconds'],
                    game_number=event.get('game_number'),
                    part_number=event.get('part_number'),
                )


class GameRunner:
    """Keeps a pupil's game machine in the Flask session between requests."""

    clock = staticmethod(time.time)

    @staticmethod
    def _items_for(module: Module) -> List[Dict[str, Any]]:
        config = current_app.config
        if module.game_type == Module.GAME_MULTIPLE_CHOICE:
            return GameContentService.quiz_items(module.id)
        if module.game_type == Module.GAME_SYNONYM_MATCH:
            return GameContentService.synonym_items(module.id, config['SYNONYM_ITEM_LIMIT'])
        return GameContentService.matching_items(module.id, config['MATCHING_PAIR_COUNT'])

    @classmethod
    def open_game(cls, module: Module, profile_id: int):
        """Load content, create the session row and store a fresh machine.

        Returns ``None`` when the module has nothing to play; no session row is
        created in that case.
        """
        items = cls._items_for(module)
        if not items:
            return None

        config = current_app.config
        now = cls.clock()
        game_number = part_number = None
        if module.game_type == Module.GAME_MULTIPLE_CHOICE:
            machine = QuizGame.new(items, now, time_limit_seconds=config['QUIZ_TIME_LIMIT_SECONDS'])
        elif module.game_type == Module.GAME_SYNONYM_MATCH:
            machine = SynonymMatchGame.new(items, now, pairs_per_part=config['SYNONYM_PAIRS_PER_PART'])
            game_number, part_number = 1, 1
        else:
            machine = MatchingGame.new(items, now, clear_delay_ms=config['MATCHING_CLEAR_DELAY_MS'])

        game_session = GameSessionService.create_session(
            profile_id, module, score_total=len(items), game_number=game_number, part_number=part_number
        )
        cls._save(module.game_type, module.id, game_session.id, machine)
        current_app.logger.info(
            f"Started {module.game_type} session {game_session.id} on module {module.id} for profile {profile_id}"
        )
        return machine

    @staticmethod
    def _save(game_type: str, module_id: int, session_id: Optional[int], machine) -> None:
        session[SESSION_KEYS[game_type]] = {
            'module_id': module_id,
            'session_id': session_id,
            'machine': machine.to_dict(),
        }

    @classmethod
    def load(cls, game_type: str, module_id: int):
        """Return ``(machine, session_id)`` for the game in progress on ``module_id``."""

        stored = session.get(SESSION_KEYS[game_type])
        if not stored or stored.get('module_id') != module_id:
            raise NotFoundError('No game in progress for this module', resource='game')

        machine_cls = GAME_CLASSES[game_type]
        data = stored['machine']
        texts = GameContentService.texts_for(machine_cls.vocab_ids(data))
        return machine_cls.from_dict(data, texts=texts), stored.get('session_id')

    @classmethod
    def act(cls, game_type: str, module_id: int, action: Callable[[Any, float], List[Event]]) -> Dict[str, Any]:
        """Run ``action(machine, now)``, persist what it produced and return the new view.

        ``GameRuleError`` from the action propagates and the stored state is left
        as it was.
        """
        machine, session_id = cls.load(game_type, module_id)
        now = cls.clock()
        events = action(machine, now)
        events.extend(machine.advance(now))
        cls._save(game_type, module_id, session_id, machine)
        GameSessionService.apply_events(session_id, events)
        return machine.view(now)

    @classmethod
    def tick(cls, game_type: str, module_id: int) -> Dict[str, Any]:
        return cls.act(game_type, module_id, lambda machine, now: machine.advance(now))
