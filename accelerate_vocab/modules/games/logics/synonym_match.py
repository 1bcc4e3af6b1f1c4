# File: accelerate_vocab/modules/games/logics/synonym_match.py
# Purpose: Two-stage synonym match.
#
# The loaded pairs are split into parts of a fixed size. Game 1 (open
# matching) plays every part, then game 2 (card-flip memory) plays every part
# again. Each part is a board of left words and right synonyms, both columns
# shuffled independently.
#
# Game 1 states:
#   open_idle --right pick, correct--> open_correct --2500ms--> (open_idle | part_settling)
#   open_idle --right pick, wrong----> open_incorrect --2500ms--> open_idle
# Game 2 states:
#   flip_idle --right pick, correct--> flip_correct_reveal --800ms--> flip_correct_highlight
#       --800ms--> flip_correct_feedback --1400ms--> (flip_idle | part_settling)
#   flip_idle --right pick, wrong----> flip_incorrect_reveal --500ms--> flip_incorrect_highlight
#       --600ms--> flip_incorrect_feedback --1500ms--> flip_idle
# Between parts:
#   part_settling --500ms--> part_complete | game_complete | module_complete
#   part_complete / game_complete --continue--> next board

from __future__ import annotations

import math
import random
from typing import Any, Dict, List, Optional, Sequence

from ....utils.formatting import accuracy_percent, format_clock
from .state_machine import Event, GameRuleError, TimedStateMachine, shuffled

OPEN_FEEDBACK_MS = 2500
SETTLE_MS = 500
FLIP_CORRECT_REVEAL_MS = 800
FLIP_CORRECT_HIGHLIGHT_MS = 800
FLIP_CORRECT_FEEDBACK_MS = 1400
FLIP_INCORRECT_REVEAL_MS = 500
FLIP_INCORRECT_HIGHLIGHT_MS = 600
FLIP_INCORRECT_FEEDBACK_MS = 1500

FLIP_PROMPT = 'Now choose a card from the right column'


class SynonymMatchGame(TimedStateMachine):
    OPEN_IDLE = 'open_idle'
    OPEN_CORRECT = 'open_correct'
    OPEN_INCORRECT = 'open_incorrect'
    FLIP_IDLE = 'flip_idle'
    FLIP_CORRECT_REVEAL = 'flip_correct_reveal'
    FLIP_CORRECT_HIGHLIGHT = 'flip_correct_highlight'
    FLIP_CORRECT_FEEDBACK = 'flip_correct_feedback'
    FLIP_INCORRECT_REVEAL = 'flip_incorrect_reveal'
    FLIP_INCORRECT_HIGHLIGHT = 'flip_incorrect_highlight'
    FLIP_INCORRECT_FEEDBACK = 'flip_incorrect_feedback'
    PART_SETTLING = 'part_settling'
    PART_COMPLETE = 'part_complete'
    GAME_COMPLETE = 'game_complete'
    MODULE_COMPLETE = 'module_complete'

    IDLE_STATES = (OPEN_IDLE, FLIP_IDLE)
    TRANSITION_SCREENS = (PART_COMPLETE, GAME_COMPLETE, MODULE_COMPLETE)

    def __init__(
        self,
        pair_ids: Sequence[int],
        pairs_per_part: int = 5,
        game_number: int = 1,
        part_number: int = 1,
        left: Sequence[int] = (),
        right: Sequence[int] = (),
        matched: Sequence[int] = (),
        selected_left: Optional[int] = None,
        picked_right: Optional[int] = None,
        part_attempts: Optional[Dict[str, int]] = None,
        total_correct: int = 0,
        total_attempts: int = 0,
        seed: Optional[int] = None,
        texts: Optional[Dict[int, Dict[str, Any]]] = None,
        **base,
    ):
        super().__init__(**base)
        self.pair_ids = list(pair_ids)
        self.pairs_per_part = pairs_per_part
        self.game_number = game_number
        self.part_number = part_number
        self.left = list(left)
        self.right = list(right)
        self.matched = list(matched)
        self.selected_left = selected_left
        self.picked_right = picked_right
        self.part_attempts = dict(part_attempts or {})
        self.total_correct = total_correct
        self.total_attempts = total_attempts
        self.seed = seed
        self.texts = texts or {}

    @classmethod
    def new(
        cls,
        items: Sequence[Dict[str, Any]],
        now: float,
        pairs_per_part: int = 5,
        rng: Optional[random.Random] = None,
    ) -> 'SynonymMatchGame':
        """``items`` are dicts with ``id``, ``word`` and ``synonym``."""

        rng = rng or random.Random()
        game = cls(
            pair_ids=[item['id'] for item in items],
            texts={item['id']: dict(item) for item in items},
            pairs_per_part=pairs_per_part,
            seed=rng.randrange(2 ** 31),
            entered_at=now,
        )
        game._deal()
        return game

    # -- queries -------------------------------------------------------------

    @property
    def total_parts(self) -> int:
        return max(1, math.ceil(len(self.pair_ids) / self.pairs_per_part))

    @property
    def current_ids(self) -> List[int]:
        start = (self.part_number - 1) * self.pairs_per_part
        return self.pair_ids[start:start + self.pairs_per_part]

    @property
    def is_part_complete(self) -> bool:
        ids = set(self.current_ids)
        return bool(ids) and ids.issubset(self.matched)

    @property
    def is_complete(self) -> bool:
        return self.state == self.MODULE_COMPLETE

    @property
    def accuracy(self) -> Optional[int]:
        return accuracy_percent(self.total_correct, self.total_attempts)

    @property
    def overall_progress(self) -> int:
        """Percent through both games, counting the current part."""

        done = (self.game_number - 1) * self.total_parts + self.part_number
        return int(done * 100 / (self.total_parts * 2))

    def _on_board(self, pair_id: int) -> bool:
        return pair_id in self.current_ids

    # -- board ---------------------------------------------------------------

    def _deal(self) -> None:
        ids = list(self.current_ids)
        rng = random.Random(f'{self.seed}:{self.game_number}:{self.part_number}')
        self.left = shuffled(ids, rng)
        self.right = shuffled(ids, rng)
        self.matched = []
        self.selected_left = None
        self.picked_right = None
        self.part_attempts = {}

    def _idle_state(self) -> str:
        return self.OPEN_IDLE if self.game_number == 1 else self.FLIP_IDLE

    # -- actions -------------------------------------------------------------

    def start(self, now: float) -> List[Event]:
        if self.state != self.ONBOARDING:
            return []
        self.started_at = now
        self.enter(self.OPEN_IDLE, now)
        return [{'type': 'started'}]

    def pick_left(self, pair_id: int, now: float) -> List[Event]:
        """Select (game 1) or flip (game 2) a word card."""

        events = self.advance(now)
        if self.state not in self.IDLE_STATES:
            return events
        if not self._on_board(pair_id) or pair_id in self.matched:
            return events

        if self.state == self.FLIP_IDLE and self.selected_left == pair_id:
            self.selected_left = None
        else:
            self.selected_left = pair_id
        self.picked_right = None
        return events

    def pick_right(self, pair_id: int, now: float) -> List[Event]:
        """Offer a synonym for the selected word; judged straight away."""

        events = self.advance(now)
        if self.state not in self.IDLE_STATES or self.selected_left is None:
            return events
        if not self._on_board(pair_id) or pair_id in self.matched:
            return events

        key = str(self.selected_left)
        self.part_attempts[key] = self.part_attempts.get(key, 0) + 1
        self.total_attempts += 1
        self.picked_right = pair_id

        if pair_id == self.selected_left:
            self.total_correct += 1
            events.append({
                'type': 'pair_matched',
                'vocab_id': pair_id,
                'attempts': self.part_attempts[key],
                'time_taken_ms': int(max(0.0, now - self.entered_at) * 1000),
                'game_number': self.game_number,
            })
            if self.state == self.OPEN_IDLE:
                self.enter(self.OPEN_CORRECT, now)
                self.schedule('open_settle', OPEN_FEEDBACK_MS, now)
            else:
                self.enter(self.FLIP_CORRECT_REVEAL, now)
                self.schedule('flip_correct_highlight', FLIP_CORRECT_REVEAL_MS, now)
        else:
            if self.state == self.OPEN_IDLE:
                self.enter(self.OPEN_INCORRECT, now)
                self.schedule('open_revert', OPEN_FEEDBACK_MS, now)
            else:
                self.enter(self.FLIP_INCORRECT_REVEAL, now)
                self.schedule('flip_incorrect_highlight', FLIP_INCORRECT_REVEAL_MS, now)
        return events

    def continue_(self, now: float) -> List[Event]:
        """Leave a part or game transition screen."""

        events = self.advance(now)
        if self.state == self.PART_COMPLETE:
            if self.part_number < self.total_parts:
                self.part_number += 1
            self._deal()
            self.enter(self._idle_state(), now)
        elif self.state == self.GAME_COMPLETE:
            self.game_number = 2
            self.part_number = 1
            self._deal()
            self.enter(self.FLIP_IDLE, now)
        elif self.state != self.MODULE_COMPLETE:
            raise GameRuleError(f'Nothing to continue from while {self.state}')
        return events

    # -- timed transitions: game 1 -------------------------------------------

    def _on_open_settle(self, now: float) -> List[Event]:
        self.matched.append(self.picked_right)
        self.selected_left = None
        self.picked_right = None
        return self._after_match(now)

    def _on_open_revert(self, now: float) -> List[Event]:
        # the word stays selected so the pupil can try another synonym
        self.picked_right = None
        self.enter(self.OPEN_IDLE, now)
        return []

    # -- timed transitions: game 2 -------------------------------------------

    def _on_flip_correct_highlight(self, now: float) -> List[Event]:
        self.enter(self.FLIP_CORRECT_HIGHLIGHT, now)
        self.schedule('flip_correct_feedback', FLIP_CORRECT_HIGHLIGHT_MS, now)
        return []

    def _on_flip_correct_feedback(self, now: float) -> List[Event]:
        self.enter(self.FLIP_CORRECT_FEEDBACK, now)
        self.schedule('flip_remove', FLIP_CORRECT_FEEDBACK_MS, now)
        return []

    def _on_flip_remove(self, now: float) -> List[Event]:
        self.matched.append(self.picked_right)
        self.selected_left = None
        self.picked_right = None
        return self._after_match(now)

    def _on_flip_incorrect_highlight(self, now: float) -> List[Event]:
        self.enter(self.FLIP_INCORRECT_HIGHLIGHT, now)
        self.schedule('flip_incorrect_feedback', FLIP_INCORRECT_HIGHLIGHT_MS, now)
        return []

    def _on_flip_incorrect_feedback(self, now: float) -> List[Event]:
        self.enter(self.FLIP_INCORRECT_FEEDBACK, now)
        self.schedule('flip_back', FLIP_INCORRECT_FEEDBACK_MS, now)
        return []

    def _on_flip_back(self, now: float) -> List[Event]:
        self.selected_left = None
        self.picked_right = None
        self.enter(self.FLIP_IDLE, now)
        return []

    # -- timed transitions: parts ---------------------------------------------

    def _after_match(self, now: float) -> List[Event]:
        if self.is_part_complete:
            self.enter(self.PART_SETTLING, now)
            self.schedule('part_done', SETTLE_MS, now)
        else:
            self.enter(self._idle_state(), now)
        return []

    def _on_part_done(self, now: float) -> List[Event]:
        last_part = self.part_number >= self.total_parts
        events: List[Event] = [{
            'type': 'part_completed',
            'game_number': self.game_number,
            'part_number': self.part_number,
            'time_taken_seconds': self.elapsed_seconds(now),
        }]

        if last_part and self.game_number == 1:
            self.enter(self.GAME_COMPLETE, now)
        elif last_part:
            self.finished_at = now
            self.enter(self.MODULE_COMPLETE, now)
            events.append({
                'type': 'completed',
                'score_correct': self.total_correct,
                'score_total': self.total_attempts,
                'accuracy': self.accuracy,
                'game_number': 2,
                'part_number': self.total_parts,
                'time_taken_seconds': self.elapsed_seconds(now),
            })
        else:
            self.enter(self.PART_COMPLETE, now)
        return events

    # -- presentation --------------------------------------------------------

    def transition_screen(self, now: float) -> Optional[Dict[str, str]]:
        if self.state == self.PART_COMPLETE:
            return {
                'type': 'part-complete',
                'message': 'Part Complete!',
                'sub_message': f"You've completed Part {self.part_number}. Keep going!",
            }
        if self.state == self.GAME_COMPLETE:
            return {
                'type': 'game-complete',
                'message': "That's brilliant, well done!",
                'sub_message': "Now it's time to make it a little harder.",
            }
        if self.state == self.MODULE_COMPLETE:
            return {
                'type': 'module-complete',
                'message': 'Well Done!',
                'sub_message': (
                    'You really did well there. You spent '
                    f'{format_clock(self.elapsed_seconds(now))} developing your vocab.'
                ),
            }
        return None

    def _feedback(self) -> Optional[str]:
        if self.state in (self.OPEN_CORRECT, self.FLIP_CORRECT_FEEDBACK):
            return 'correct'
        if self.state in (self.OPEN_INCORRECT, self.FLIP_INCORRECT_FEEDBACK):
            return 'incorrect'
        return None

    def view(self, now: float) -> Dict[str, Any]:
        on_board = set(self.current_ids)
        flip = self.game_number == 2
        correct_states = (self.FLIP_CORRECT_HIGHLIGHT, self.FLIP_CORRECT_FEEDBACK)
        incorrect_states = (self.FLIP_INCORRECT_HIGHLIGHT, self.FLIP_INCORRECT_FEEDBACK)

        def highlight(pair_id, column):
            picked = self.picked_right if column == 'right' else self.selected_left
            if picked != pair_id or self.picked_right is None:
                return None
            if self.state in correct_states or self.state == self.OPEN_CORRECT:
                return 'correct'
            if self.state in incorrect_states:
                return 'incorrect'
            if self.state == self.OPEN_INCORRECT and column == 'right':
                return 'incorrect'
            return None

        def face_up(pair_id, picked):
            return (not flip) or picked == pair_id

        left = [
            {
                'id': pid,
                'text': self.texts.get(pid, {}).get('word', '') if face_up(pid, self.selected_left) else '',
                'selected': self.selected_left == pid,
                'face_up': face_up(pid, self.selected_left),
                'highlight': highlight(pid, 'left'),
            }
            for pid in self.left
            if pid not in self.matched and pid in on_board
        ]
        right = [
            {
                'id': pid,
                'text': self.texts.get(pid, {}).get('synonym', '') if face_up(pid, self.picked_right) else '',
                'face_up': face_up(pid, self.picked_right),
                'highlight': highlight(pid, 'right'),
            }
            for pid in self.right
            if pid not in self.matched and pid in on_board
        ]

        return {
            'state': self.state,
            'game_number': self.game_number,
            'part_number': self.part_number,
            'total_parts': self.total_parts,
            'left': left,
            'right': right,
            'progress': [pid in self.matched for pid in self.current_ids],
            'feedback': self._feedback(),
            'prompt': FLIP_PROMPT if flip and self.state == self.FLIP_IDLE and self.selected_left is not None else '',
            'transition': self.transition_screen(now),
            'overall_progress': self.overall_progress,
            'elapsed_seconds': self.elapsed_seconds(now),
            'elapsed_clock': format_clock(self.elapsed_seconds(now)),
            'total_correct': self.total_correct,
            'total_attempts': self.total_attempts,
            'next_tick_ms': self.next_tick_ms(now),
        }

    # -- serialisation -------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        data = self.base_dict()
        data.update({
            'pair_ids': self.pair_ids,
            'pairs_per_part': self.pairs_per_part,
            'game_number': self.game_number,
            'part_number': self.part_number,
            'left': self.left,
            'right': self.right,
            'matched': self.matched,
            'selected_left': self.selected_left,
            'picked_right': self.picked_right,
            'part_attempts': self.part_attempts,
            'total_correct': self.total_correct,
            'total_attempts': self.total_attempts,
            'seed': self.seed,
        })
        return data

    @staticmethod
    def vocab_ids(data: Dict[str, Any]) -> List[int]:
        return list(data.get('pair_ids', []))

    @classmethod
    def from_dict(cls, data: Dict[str, Any], texts: Optional[Dict[int, Dict[str, Any]]] = None) -> 'SynonymMatchGame':
        return cls(
            pair_ids=data['pair_ids'],
            pairs_per_part=data.get('pairs_per_part', 5),
            game_number=data.get('game_number', 1),
            part_number=data.get('part_number', 1),
            left=data.get('left', ()),
            right=data.get('right', ()),
            matched=data.get('matched', ()),
            selected_left=data.get('selected_left'),
            picked_right=data.get('picked_right'),
            part_attempts=data.get('part_attempts'),
            total_correct=data.get('total_correct', 0),
            total_attempts=data.get('total_attempts', 0),
            seed=data.get('seed'),
            texts=texts,
            **cls.base_kwargs(data),
        )
