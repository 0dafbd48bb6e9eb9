from flask import Blueprint, current_app, jsonify

sessions = Blueprint('sessions', __name__)


@sessions.route('/<string:code>', methods=['GET'])
def get_session_state(code):
    """
    Returns a read-only view of a live session: players, settings and the
    current round.
    """
    snapshot = current_app.extensions['dice_duel'].snapshot(code)
    if snapshot is None:
        return jsonify({'error': 'Session not found'}), 404
    return jsonify(snapshot), 200
