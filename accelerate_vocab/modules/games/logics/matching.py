# File: accelerate_vocab/modules/games/logics/matching.py
# Purpose: Simple matching game. Words and definitions are dealt face up as
#          shuffled cards; the pupil picks two cards at a time.
#
# States: onboarding -> idle <-> checking -> complete

from __future__ import annotations

import random
from typing import Any, Dict, List, Optional, Sequence

from ....utils.formatting import accuracy_percent
from .state_machine import Event, TimedStateMachine, shuffled

WORD = 'word'
DEFINITION = 'definition'


def card_key(kind: str, vocab_id: int) -> str:
    return f"{'word' if kind == WORD else 'def'}-{vocab_id}"


class MatchingGame(TimedStateMachine):
    IDLE = 'idle'
    CHECKING = 'checking'
    COMPLETE = 'complete'

    def __init__(
        self,
        cards: List[Dict[str, Any]],
        matched: Sequence[int] = (),
        selected: Sequence[str] = (),
        attempts: int = 0,
        correct: int = 0,
        clear_delay_ms: int = 1000,
        last_result: Optional[str] = None,
        texts: Optional[Dict[int, Dict[str, Any]]] = None,
        **base,
    ):
        super().__init__(**base)
        self.cards = cards
        self.texts = texts or {}
        self.matched = list(matched)
        self.selected = list(selected)
        self.attempts = attempts
        self.correct = correct
        self.clear_delay_ms = clear_delay_ms
        self.last_result = last_result

    @classmethod
    def new(
        cls,
        items: Sequence[Dict[str, Any]],
        now: float,
        rng: Optional[random.Random] = None,
        clear_delay_ms: int = 1000,
    ) -> 'MatchingGame':
        """Deal a word card and a definition card per item, shuffled together.

        ``items`` are dicts with ``id``, ``word`` and ``definition``.
        """
        cards = []
        for item in items:
            cards.append({'key': card_key(WORD, item['id']), 'vocab_id': item['id'], 'kind': WORD})
            cards.append({'key': card_key(DEFINITION, item['id']), 'vocab_id': item['id'], 'kind': DEFINITION})
        return cls(
            cards=shuffled(cards, rng),
            clear_delay_ms=clear_delay_ms,
            texts={item['id']: dict(item) for item in items},
            entered_at=now,
        )

    # -- queries -------------------------------------------------------------

    @property
    def total_pairs(self) -> int:
        return len(self.cards) // 2

    @property
    def is_complete(self) -> bool:
        return self.state == self.COMPLETE

    @property
    def accuracy(self) -> Optional[int]:
        return accuracy_percent(self.correct, self.attempts)

    def _card(self, key: str) -> Optional[Dict[str, Any]]:
        return next((card for card in self.cards if card['key'] == key), None)

    def _text(self, card: Dict[str, Any]) -> str:
        item = self.texts.get(card['vocab_id'], {})
        return item.get('word' if card['kind'] == WORD else 'definition', '')

    # -- actions -------------------------------------------------------------

    def start(self, now: float) -> List[Event]:
        """Close the onboarding overlay and start the clock."""

        if self.state != self.ONBOARDING:
            return []
        self.started_at = now
        self.enter(self.IDLE, now)
        return [{'type': 'started'}]

    def select(self, key: str, now: float) -> List[Event]:
        """Pick a card. The second pick of a turn is judged immediately."""

        events = self.advance(now)
        if self.state != self.IDLE:
            return events

        card = self._card(key)
        if card is None or card['vocab_id'] in self.matched or key in self.selected:
            return events

        self.selected.append(key)
        if len(self.selected) < 2:
            self.last_result = None
            return events

        first, second = (self._card(k) for k in self.selected)
        self.attempts += 1
        if first['vocab_id'] == second['vocab_id'] and first['kind'] != second['kind']:
            self.correct += 1
            self.matched.append(first['vocab_id'])
            self.last_result = 'correct'
            events.append({'type': 'pair_matched', 'vocab_id': first['vocab_id'], 'attempts': 1})
        else:
            self.last_result = 'incorrect'
            events.append({'type': 'pair_missed', 'vocab_id': first['vocab_id']})

        self.enter(self.CHECKING, now)
        self.schedule('clear_selection', self.clear_delay_ms, now)
        return events

    # -- timed transitions ---------------------------------------------------

    def _on_clear_selection(self, now: float) -> List[Event]:
        self.selected = []
        self.last_result = None
        if len(self.matched) >= self.total_pairs:
            self.finished_at = now
            self.enter(self.COMPLETE, now)
            return [{
                'type': 'completed',
                'score_correct': self.correct,
                'score_total': self.attempts,
                'accuracy': self.accuracy,
                'time_taken_seconds': self.elapsed_seconds(now),
            }]
        self.enter(self.IDLE, now)
        return []

    # -- serialisation -------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        data = self.base_dict()
        data.update({
            'cards': self.cards,
            'matched': self.matched,
            'selected': self.selected,
            'attempts': self.attempts,
            'correct': self.correct,
            'clear_delay_ms': self.clear_delay_ms,
            'last_result': self.last_result,
        })
        return data

    @staticmethod
    def vocab_ids(data: Dict[str, Any]) -> List[int]:
        return sorted({card['vocab_id'] for card in data.get('cards', [])})

    @classmethod
    def from_dict(cls, data: Dict[str, Any], texts: Optional[Dict[int, Dict[str, Any]]] = None) -> 'MatchingGame':
        """Rebuild from ``to_dict`` output. Card text is not serialised; pass it as ``texts``."""

        return cls(
            cards=data['cards'],
            matched=data.get('matched', ()),
            selected=data.get('selected', ()),
            attempts=data.get('attempts', 0),
            correct=data.get('correct', 0),
            clear_delay_ms=data.get('clear_delay_ms', 1000),
            last_result=data.get('last_result'),
            texts=texts,
            **cls.base_kwargs(data),
        )

    def view(self, now: float) -> Dict[str, Any]:
        """Board as the browser draws it."""

        return {
            'state': self.state,
            'cards': [
                {
                    'key': card['key'],
                    'kind': card['kind'],
                    'text': self._text(card),
                    'matched': card['vocab_id'] in self.matched,
                    'selected': card['key'] in self.selected,
                }
                for card in self.cards
            ],
            'last_result': self.last_result,
            'matched_pairs': len(self.matched),
            'total_pairs': self.total_pairs,
            'attempts': self.attempts,
            'correct': self.correct,
            'accuracy': self.accuracy if self.is_complete else None,
            'elapsed_seconds': self.elapsed_seconds(now),
            'next_tick_ms': self.next_tick_ms(now),
        }
