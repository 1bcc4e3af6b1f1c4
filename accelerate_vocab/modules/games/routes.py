# File: accelerate_vocab/modules/games/routes.py
# Purpose: Game pages and the JSON endpoints the game screens poll and post to.
#
# Page routes build a fresh game (and its game_sessions row) on every visit.
# API routes act on the machine stored in the Flask session and answer with
# the board as it now stands, including ``next_tick_ms`` for the next poll.

from flask import current_app, flash, jsonify, redirect, render_template, request, url_for
from flask_login import login_required
from sqlalchemy.exc import SQLAlchemyError

from . import games_bp
from .logics.onboarding import load_slides
from .logics.state_machine import GameRuleError
from .services import GameContentService, GameRunner, game_endpoint
from ...core.auth_context import get_auth_context
from ...core.error_handlers import error_response, success_response
from ...models import Module

PAGE_TEMPLATES = {
    Module.GAME_MATCHING: 'games/matching.html',
    Module.GAME_MULTIPLE_CHOICE: 'games/multiple_choice.html',
    Module.GAME_SYNONYM_MATCH: 'games/synonym_match.html',
}

# Short names used in API paths
API_GAMES = {
    'matching': Module.GAME_MATCHING,
    'quiz': Module.GAME_MULTIPLE_CHOICE,
    'synonym': Module.GAME_SYNONYM_MATCH,
}


def _open_page(module_id, game_type):
    """Shared body of the three page routes."""

    auth = get_auth_context()
    module = GameContentService.get_module(module_id)
    if module.game_type != game_type:
        return redirect(url_for(game_endpoint(module.game_type), module_id=module.id))
    GameContentService.check_access(module, auth)

    try:
        machine = GameRunner.open_game(module, auth.profile_id)
    except SQLAlchemyError as exc:
        current_app.logger.error(f"Error loading game for module {module_id}: {exc}")
        flash('Failed to load game. Please try again.', 'danger')
        return redirect(url_for('dashboard.dashboard'))

    if machine is None:
        if game_type == Module.GAME_MULTIPLE_CHOICE:
            flash("No questions available: This module doesn't have any questions yet.", 'warning')
        else:
            flash("No vocabulary: This module doesn't have any vocabulary items yet", 'warning')
        return redirect(url_for('dashboard.dashboard'))

    api_name = next(name for name, value in API_GAMES.items() if value == game_type)
    return render_template(
        PAGE_TEMPLATES[game_type],
        module=module,
        slides=[slide.to_dict() for slide in load_slides(module)],
        initial_state=machine.view(GameRunner.clock()),
        api_base=url_for('games.api_state', game=api_name, module_id=module.id).rsplit('/', 1)[0],
    )


@games_bp.route('/<int:module_id>')
@login_required
def matching(module_id):
    return _open_page(module_id, Module.GAME_MATCHING)


@games_bp.route('/multiple-choice/<int:module_id>')
@login_required
def multiple_choice(module_id):
    return _open_page(module_id, Module.GAME_MULTIPLE_CHOICE)


@games_bp.route('/synonym-match/<int:module_id>')
@login_required
def synonym_match(module_id):
    return _open_page(module_id, Module.GAME_SYNONYM_MATCH)


# ============================================
# JSON API
# ============================================

def _payload():
    return request.get_json(silent=True) or {}


def _int_field(data, name):
    value = data.get(name)
    try:
        return int(value)
    except (TypeError, ValueError):
        raise GameRuleError(f'{name} must be a number')


def _run(game, module_id, action=None):
    game_type = API_GAMES.get(game)
    if game_type is None:
        return error_response('Unknown game', 'NOT_FOUND', 404)
    try:
        if action is None:
            view = GameRunner.tick(game_type, module_id)
        else:
            view = GameRunner.act(game_type, module_id, action)
    except GameRuleError as exc:
        return error_response(str(exc), 'GAME_RULE', 400)
    return jsonify(success_response(view))


@games_bp.route('/api/<game>/<int:module_id>/state')
@login_required
def api_state(game, module_id):
    """Advance any due timed transition and return the board."""
    return _run(game, module_id)


@games_bp.route('/api/<game>/<int:module_id>/start', methods=['POST'])
@login_required
def api_start(game, module_id):
    """Onboarding closed: start play and the clock."""
    return _run(game, module_id, lambda machine, now: machine.start(now))


@games_bp.route('/api/matching/<int:module_id>/select', methods=['POST'])
@login_required
def api_matching_select(module_id):
    key = str(_payload().get('key', ''))
    return _run('matching', module_id, lambda machine, now: machine.select(key, now))


@games_bp.route('/api/quiz/<int:module_id>/answer', methods=['POST'])
@login_required
def api_quiz_answer(module_id):
    data = _payload()

    def action(machine, now):
        return machine.answer(_int_field(data, 'index'), str(data.get('option', '')), now)

    return _run('quiz', module_id, action)


@games_bp.route('/api/quiz/<int:module_id>/navigate', methods=['POST'])
@login_required
def api_quiz_navigate(module_id):
    data = _payload()
    return _run('quiz', module_id, lambda machine, now: machine.go_to(_int_field(data, 'index'), now))


@games_bp.route('/api/quiz/<int:module_id>/submit', methods=['POST'])
@login_required
def api_quiz_submit(module_id):
    return _run('quiz', module_id, lambda machine, now: machine.submit(now))


@games_bp.route('/api/synonym/<int:module_id>/left', methods=['POST'])
@login_required
def api_synonym_left(module_id):
    data = _payload()
    return _run('synonym', module_id, lambda machine, now: machine.pick_left(_int_field(data, 'id'), now))


@games_bp.route('/api/synonym/<int:module_id>/right', methods=['POST'])
@login_required
def api_synonym_right(module_id):
    data = _payload()
    return _run('synonym', module_id, lambda machine, now: machine.pick_right(_int_field(data, 'id'), now))


@games_bp.route('/api/synonym/<int:module_id>/continue', methods=['POST'])
@login_required
def api_synonym_continue(module_id):
    return _run('synonym', module_id, lambda machine, now: machine.continue_(now))

