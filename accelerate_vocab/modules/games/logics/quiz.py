# File: accelerate_vocab/modules/games/logics/quiz.py
# Purpose: Timed multiple-choice quiz.
#
# States: onboarding -> active -> submitted
# The countdown starts when onboarding closes. Answers can be changed until the
# quiz is submitted, either by the pupil (only once every question has an
# answer) or by the timer running out (whatever has been answered counts).

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from ....utils.formatting import accuracy_percent
from .state_machine import Event, GameRuleError, TimedStateMachine

LETTERS = ('A', 'B', 'C', 'D')


class QuizGame(TimedStateMachine):
    ACTIVE = 'active'
    SUBMITTED = 'submitted'

    def __init__(
        self,
        questions: List[Dict[str, Any]],
        answers: Optional[Dict[str, str]] = None,
        current_index: int = 0,
        time_limit_seconds: int = 300,
        result: Optional[Dict[str, Any]] = None,
        texts: Optional[Dict[int, Dict[str, Any]]] = None,
        **base,
    ):
        super().__init__(**base)
        self.questions = questions
        self.answers = dict(answers or {})
        self.current_index = current_index
        self.time_limit_seconds = time_limit_seconds
        self.result = result
        self.texts = texts or {}

    @classmethod
    def new(cls, items: Sequence[Dict[str, Any]], now: float, time_limit_seconds: int = 300) -> 'QuizGame':
        """Build from item dicts (``id``, ``word``, ``options``, ``correct_option``).

        Items without any options are not questions.
        The stored questions carry ids and letters only; the answer key is
        read from ``texts`` when the quiz is scored.
        """
        questions = []
        for item in items:
            if not item.get('options'):
                continue
            questions.append({
                'id': item['id'],
                'letters': [letter for letter, _ in item['options']],
            })
        return cls(
            questions=questions,
            time_limit_seconds=time_limit_seconds,
            texts={item['id']: dict(item) for item in items},
            entered_at=now,
        )

    # -- queries -------------------------------------------------------------

    @property
    def question_count(self) -> int:
        return len(self.questions)

    @property
    def all_answered(self) -> bool:
        return all(str(q['id']) in self.answers for q in self.questions)

    @property
    def can_submit(self) -> bool:
        return self.state == self.ACTIVE and self.question_count > 0 and self.all_answered

    @property
    def is_complete(self) -> bool:
        return self.state == self.SUBMITTED

    def remaining_seconds(self, now: float) -> int:
        if self.state == self.ONBOARDING:
            return self.time_limit_seconds
        if self.due_at is None:
            return 0
        return max(0, int(round(self.due_at - now)))

    # -- actions -------------------------------------------------------------

    def start(self, now: float) -> List[Event]:
        if self.state != self.ONBOARDING:
            return []
        self.started_at = now
        self.enter(self.ACTIVE, now)
        self.schedule('time_up', self.time_limit_seconds * 1000, now)
        return [{'type': 'started'}]

    def answer(self, index: int, letter: str, now: float) -> List[Event]:
        events = self.advance(now)
        self.require_state(self.ACTIVE)
        question = self._question(index)
        letter = (letter or '').upper()
        if letter not in question['letters']:
            raise GameRuleError(f'Option {letter!r} is not available')
        self.answers[str(question['id'])] = letter
        self.current_index = index
        return events

    def go_to(self, index: int, now: float) -> List[Event]:
        """Move to another question (next/back)."""

        events = self.advance(now)
        self.require_state(self.ACTIVE)
        self._question(index)
        self.current_index = index
        return events

    def submit(self, now: float) -> List[Event]:
        events = self.advance(now)
        if self.state == self.SUBMITTED:
            return events
        self.require_state(self.ACTIVE)
        if not self.all_answered:
            raise GameRuleError('Answer every question before submitting')
        self.cancel_pending()
        return events + self._finish(now, timed_out=False)

    def _question(self, index: int) -> Dict[str, Any]:
        if not 0 <= index < self.question_count:
            raise GameRuleError(f'No question {index}')
        return self.questions[index]

    def _correct_letter(self, question: Dict[str, Any]) -> str:
        item = self.texts.get(question['id']) or {}
        return (item.get('correct_option') or 'A').upper()

    # -- timed transitions ---------------------------------------------------

    def _on_time_up(self, now: float) -> List[Event]:
        return self._finish(now, timed_out=True)

    def _finish(self, now: float, timed_out: bool) -> List[Event]:
        answers = []
        correct = 0
        for question in self.questions:
            chosen = self.answers.get(str(question['id']))
            if chosen is None:
                continue
            was_correct = chosen == self._correct_letter(question)
            correct += int(was_correct)
            answers.append({'vocab_id': question['id'], 'was_correct': was_correct})

        self.finished_at = now
        self.enter(self.SUBMITTED, now)
        self.result = {
            'score_correct': correct,
            'score_total': self.question_count,
            'accuracy': accuracy_percent(correct, self.question_count),
            'timed_out': timed_out,
        }
        return [{
            'type': 'submitted',
            'answers': answers,
            'score_correct': correct,
            'score_total': self.question_count,
            'accuracy': self.result['accuracy'],
            'time_taken_seconds': self.elapsed_seconds(now),
            'timed_out': timed_out,
        }]

    # -- serialisation -------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        data = self.base_dict()
        data.update({
            'questions': self.questions,
            'answers': self.answers,
            'current_index': self.current_index,
            'time_limit_seconds': self.time_limit_seconds,
            'result': self.result,
        })
        return data

    @staticmethod
    def vocab_ids(data: Dict[str, Any]) -> List[int]:
        return [question['id'] for question in data.get('questions', [])]

    @classmethod
    def from_dict(cls, data: Dict[str, Any], texts: Optional[Dict[int, Dict[str, Any]]] = None) -> 'QuizGame':
        return cls(
            questions=data['questions'],
            answers=data.get('answers'),
            current_index=data.get('current_index', 0),
            time_limit_seconds=data.get('time_limit_seconds', 300),
            result=data.get('result'),
            texts=texts,
            **cls.base_kwargs(data),
        )

    def view(self, now: float) -> Dict[str, Any]:
        """Current question as the browser draws it; the correct letter stays server side."""

        question = self.questions[self.current_index] if self.questions else None
        item = self.texts.get(question['id'], {}) if question else {}
        return {
            'state': self.state,
            'current_index': self.current_index,
            'question_count': self.question_count,
            'question': {
                'id': question['id'],
                'word': item.get('word', ''),
                'options': [
                    [letter, text] for letter, text in item.get('options', [])
                    if letter in question['letters']
                ],
                'selected': self.answers.get(str(question['id'])),
            } if question else None,
            'answered': [str(q['id']) in self.answers for q in self.questions],
            'can_submit': self.can_submit,
            'remaining_seconds': self.remaining_seconds(now),
            'result': self.result,
            'next_tick_ms': self.next_tick_ms(now),
        }
