from flask import current_app, request
from flask_socketio import emit, join_room, leave_room
from dice_duel import socketio
from dice_duel.errors import SessionError
from dice_duel.services.sessions.engine import CHECK_RESULT, GAME_RESULT, CommandResult
from dice_duel.services.sessions.media import (
    OUTCOME_LOSE,
    OUTCOME_WIN,
    NullMediaProvider,
    fetch_result_media,
)
from typing import List, Optional, Tuple


def _engine():
    return current_app.extensions['dice_duel']


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _room(code: str) -> str:
    return f"session:{code}"


def _code_from(data):
    # Clients send either the bare code or {"code": ...}
    if isinstance(data, dict):
        return data.get('code') or data.get('sessionCode')
    return data


def _run(command, *args) -> Optional[CommandResult]:
    """Run an engine command for the current connection, reporting failures privately."""
    sid = _get_sid()
    try:
        return command(sid, *args)
    except SessionError as exc:
        current_app.logger.info(f"[rejected] sid={sid} command={command.__name__} error={exc.message}")
        emit('error', exc.to_dict())
    except Exception:
        current_app.logger.exception(f"[internal-error] sid={sid} command={command.__name__}")
        emit('error', {'message': 'InternalError', 'detail': 'Something went wrong'})
    return None


def _deliver(result: CommandResult) -> None:
    namespace = request.namespace
    for out in result.events:
        to = _room(out.to) if out.broadcast else out.to
        socketio.emit(out.event, out.payload, to=to, namespace=namespace)


# ---- result media ----

def _media_targets(result: CommandResult) -> List[Tuple[str, str]]:
    targets = []
    for out in result.events:
        if out.event == GAME_RESULT:
            winner = out.payload['winner']
            for sid in out.payload['rolls']:
                targets.append((sid, OUTCOME_WIN if sid == winner else OUTCOME_LOSE))
        elif out.event == CHECK_RESULT and out.payload['complete']:
            roller = out.payload['rollerId']
            roller_won = out.payload['success']
            for sid in out.payload['players']:
                won = roller_won if sid == roller else not roller_won
                targets.append((sid, OUTCOME_WIN if won else OUTCOME_LOSE))
    return targets


def _send_media(app, provider, targets, namespace) -> None:
    for sid, outcome in targets:
        url = fetch_result_media(provider, outcome, logger=app.logger)
        if url:
            socketio.emit('result-media', {'outcome': outcome, 'url': url}, to=sid, namespace=namespace)


def _schedule_media(result: CommandResult) -> None:
    provider = current_app.extensions.get('dice_duel_media')
    if provider is None or isinstance(provider, NullMediaProvider):
        return
    targets = _media_targets(result)
    if not targets:
        return
    app = current_app._get_current_object()
    # Inline in tests for determinism; never gates the result broadcast
    if app.config.get('TESTING'):
        _send_media(app, provider, targets, request.namespace)
    else:
        socketio.start_background_task(_send_media, app, provider, targets, request.namespace)


# ---- handlers ----

def handle_connect(auth=None):
    emit('connected', {'id': _get_sid()})


def handle_disconnect(reason=None):
    sid = _get_sid()
    result = _engine().disconnect(sid)
    current_app.logger.info(f"[disconnect] sid={sid} notified={len(result.events)}")
    _deliver(result)


def handle_create_session(data=None):
    result = _run(_engine().create_session, data)
    if result:
        join_room(_room(result.code))
        _deliver(result)


def handle_join_session(data=None):
    result = _run(_engine().join_session, _code_from(data))
    if result:
        # Join the room first so the joiner also receives player-joined
        join_room(_room(result.code))
        _deliver(result)


def handle_roll_dice(data=None):
    result = _run(_engine().roll_dice, _code_from(data))
    if result:
        _deliver(result)
        _schedule_media(result)


def handle_check_roll(data=None):
    result = _run(_engine().check_roll, _code_from(data))
    if result:
        _deliver(result)
        _schedule_media(result)


def handle_reset_round(data=None):
    result = _run(_engine().reset_round, _code_from(data))
    if result:
        _deliver(result)


def handle_leave_session(data=None):
    result = _run(_engine().leave_session, _code_from(data))
    if result:
        leave_room(_room(result.code))
        _deliver(result)


_HANDLERS = {
    'connect': handle_connect,
    'disconnect': handle_disconnect,
    'create-session': handle_create_session,
    'join-session': handle_join_session,
    'roll-dice': handle_roll_dice,
    'check-roll': handle_check_roll,
    'reset-round': handle_reset_round,
    'leave-session': handle_leave_session,
}


def register_socketio_handlers(namespace: str = '/') -> None:
    """Register Socket.IO event handlers on the given namespace."""
    for event, handler in _HANDLERS.items():
        socketio.on_event(event, handler, namespace=namespace)
