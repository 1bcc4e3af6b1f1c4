"""
Central Signal Registry for Event-Driven Architecture.

Uses blinker namespaces so modules can publish events without importing
their subscribers.

Usage:
    # Publisher (sender)
    from accelerate_vocab.core.signals import session_completed
    session_completed.send(None, session_id=1, user_id=2, accuracy=80)

    # Subscriber (receiver)
    @session_completed.connect
    def on_session_completed(sender, **kwargs):
        ...
"""
import logging

from blinker import Namespace

logger = logging.getLogger('accelerate_vocab.events')

# ============================================
# Game signals
# ============================================
game_signals = Namespace()

# Signal: Fired when a game session row is created
# Payload: session_id, user_id, module_id, game_type
session_started = game_signals.signal('session_started')

# Signal: Fired once when a game session is finalised
# Payload: session_id, user_id, module_id, score_correct, score_total, accuracy
session_completed = game_signals.signal('session_completed')

# Signal: Fired when a per-item answer row is written
# Payload: session_id, vocab_item_id, was_correct
answer_recorded = game_signals.signal('answer_recorded')

# ============================================
# Content Management Signals
# ============================================
content_signals = Namespace()

# Signal: Fired when a module, question or slide set is created or imported
# Payload: content_type ('module', 'vocab_item', 'vocab_import', 'slides'), content_id, title
content_created = content_signals.signal('content_created')

# Signal: Fired when content is deleted
# Payload: content_type, content_id
content_deleted = content_signals.signal('content_deleted')

# Signal: Fired when a pupil's module assignment is toggled
# Payload: user_id, module_id, assigned (bool)
module_assignment_changed = content_signals.signal('module_assignment_changed')


@session_completed.connect
def _log_session_completed(sender, **kwargs):
    logger.info(
        "Session %s completed by profile %s: %s/%s (%s%%)",
        kwargs.get('session_id'),
        kwargs.get('user_id'),
        kwargs.get('score_correct'),
        kwargs.get('score_total'),
        kwargs.get('accuracy'),
    )


@module_assignment_changed.connect
def _log_assignment_changed(sender, **kwargs):
    logger.info(
        "Module %s %s profile %s",
        kwargs.get('module_id'),
        'assigned to' if kwargs.get('assigned') else 'unassigned from',
        kwargs.get('user_id'),
    )


@content_deleted.connect
def _log_content_deleted(sender, **kwargs):
    logger.info("Deleted %s %s", kwargs.get('content_type'), kwargs.get('content_id'))
