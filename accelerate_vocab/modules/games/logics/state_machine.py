# File: accelerate_vocab/modules/games/logics/state_machine.py
# Purpose: Base class for the game state machines.
#
# A machine is always in one named state. At most one timed transition is
# pending; ``advance(now)`` fires every transition that has come due, in order,
# passing each handler the time it was due so that chained delays stay on
# schedule however late the browser polls. Handlers return a list of event
# dicts that the game service turns into database writes.

from __future__ import annotations

import random
from typing import Any, Dict, List, Optional

Event = Dict[str, Any]

# Upper bound on transitions fired in one advance() call
MAX_CHAINED_TRANSITIONS = 50


class GameRuleError(ValueError):
    """An action that the current game state does not allow."""


def shuffled(items, rng: Optional[random.Random] = None) -> list:
    result = list(items)
    (rng or random).shuffle(result)
    return result


class TimedStateMachine:
    """Named states plus a single pending timed transition."""

    ONBOARDING = 'onboarding'

    def __init__(
        self,
        state: str = ONBOARDING,
        entered_at: float = 0.0,
        pending: Optional[str] = None,
        due_at: Optional[float] = None,
        started_at: Optional[float] = None,
        finished_at: Optional[float] = None,
    ):
        self.state = state
        self.entered_at = entered_at
        self.pending = pending
        self.due_at = due_at
        self.started_at = started_at
        self.finished_at = finished_at

    # -- state bookkeeping -------------------------------------------------

    def enter(self, state: str, now: float) -> None:
        self.state = state
        self.entered_at = now

    def schedule(self, transition: str, delay_ms: int, now: float) -> None:
        if not hasattr(self, f'_on_{transition}'):
            raise ValueError(f'Unknown transition {transition!r}')
        self.pending = transition
        self.due_at = now + delay_ms / 1000.0

    def cancel_pending(self) -> None:
        self.pending = None
        self.due_at = None

    def advance(self, now: float) -> List[Event]:
        """Fire every transition due at or before ``now``."""

        events: List[Event] = []
        fired = 0
        while self.pending is not None and self.due_at is not None and self.due_at <= now:
            name, due = self.pending, self.due_at
            self.cancel_pending()
            events.extend(getattr(self, f'_on_{name}')(due) or [])
            fired += 1
            if fired >= MAX_CHAINED_TRANSITIONS:
                raise RuntimeError(f'Transition loop in {type(self).__name__} at {name!r}')
        return events

    def next_tick_ms(self, now: float) -> Optional[int]:
        """Milliseconds until the pending transition, ``None`` when idle."""

        if self.pending is None or self.due_at is None:
            return None
        return max(0, int(round((self.due_at - now) * 1000)))

    # -- lifecycle ----------------------------------------------------------

    @property
    def is_started(self) -> bool:
        return self.started_at is not None

    def elapsed_seconds(self, now: float) -> int:
        if self.started_at is None:
            return 0
        end = self.finished_at if self.finished_at is not None else now
        return max(0, int(end - self.started_at))

    def require_state(self, *states: str) -> None:
        if self.state not in states:
            raise GameRuleError(f'Not allowed while {self.state}')

    # -- serialisation ------------------------------------------------------

    def base_dict(self) -> Dict[str, Any]:
        return {
            'state': self.state,
            'entered_at': self.entered_at,
            'pending': self.pending,
            'due_at': self.due_at,
            'started_at': self.started_at,
            'finished_at': self.finished_at,
        }

    @staticmethod
    def base_kwargs(data: Dict[str, Any]) -> Dict[str, Any]:
        return {
            'state': data.get('state', TimedStateMachine.ONBOARDING),
            'entered_at': data.get('entered_at', 0.0),
            'pending': data.get('pending'),
            'due_at': data.get('due_at'),
            'started_at': data.get('started_at'),
            'finished_at': data.get('finished_at'),
        }
